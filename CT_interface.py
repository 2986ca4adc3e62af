import base64
import binascii
from dataclasses import dataclass
from typing import Optional, TypedDict

import requests

from errors import MalformedResponse, NetworkError
from logging_config import get_logger

DEFAULT_LOG_URI = "http://localhost:8888"
DEFAULT_TIMEOUT = 10.0
ROOT_HASH_SIZE = 32

logger = get_logger(__name__)


class STH(TypedDict, total=False):
    tree_size: int
    timestamp: int
    sha256_root_hash: str
    tree_head_signature: str
    cosi_signature: str


@dataclass(frozen=True)
class STHRecord:
    log_uri: str
    root_hash: bytes
    signature_blob: str
    tree_size: Optional[int] = None
    timestamp: Optional[int] = None

    def root_hash_base64(self) -> str:
        return base64.b64encode(self.root_hash).decode("utf-8")


def get_sth_url(log_uri: str) -> str:
    return f"{log_uri.rstrip('/')}/ct/v1/get-sth"


def decode_base64(base64_str):
    return base64.b64decode(base64_str, validate=True)


def parse_sth(log_uri: str, sth: STH) -> STHRecord:
    """
    Turns a get-sth response body into an STHRecord.

    :param log_uri: The log the STH came from
    :param sth: The decoded JSON body
    :return: The record carrying the root hash bytes and the raw cosi signature
    """
    if not isinstance(sth, dict):
        raise MalformedResponse(f"STH from {log_uri} is not a JSON object")
    for key in ("sha256_root_hash", "cosi_signature"):
        if key not in sth:
            raise MalformedResponse(f"STH from {log_uri} has no {key}")

    try:
        root_hash = decode_base64(sth["sha256_root_hash"])
    except (binascii.Error, ValueError, TypeError) as e:
        raise MalformedResponse(f"STH from {log_uri} has a root hash that is not base64: "
                                f"{sth['sha256_root_hash']!r}") from e
    if len(root_hash) != ROOT_HASH_SIZE:
        raise MalformedResponse(f"STH from {log_uri} has a {len(root_hash)} byte root hash, "
                                f"expected {ROOT_HASH_SIZE}")

    signature_blob = sth["cosi_signature"]
    if not isinstance(signature_blob, str):
        raise MalformedResponse(f"STH from {log_uri} has a cosi_signature that is not a string")

    return STHRecord(log_uri=log_uri,
                     root_hash=root_hash,
                     signature_blob=signature_blob,
                     tree_size=sth.get("tree_size"),
                     timestamp=sth.get("timestamp"))


def get_sth(log_uri: str = DEFAULT_LOG_URI, timeout: float = DEFAULT_TIMEOUT) -> STHRecord:
    url = get_sth_url(log_uri)
    logger.debug("requesting STH", url=url, timeout=timeout)
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise NetworkError(f"Couldn't get STH from {log_uri}: {e}") from e

    try:
        sth: STH = response.json()
    except ValueError as e:
        raise MalformedResponse(f"STH from {log_uri} is not valid JSON") from e

    record = parse_sth(log_uri, sth)
    logger.info("STH fetched", log_uri=log_uri, tree_size=record.tree_size,
                root_hash=record.root_hash_base64())
    return record
