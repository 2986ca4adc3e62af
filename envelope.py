import base64
import binascii
import json
from dataclasses import dataclass
from typing import Optional

from errors import MalformedEnvelope
from logging_config import get_logger

SCALAR_SIZE = 32

# TimeStampMessage types
STAMP_REQUEST = 1
STAMP_REPLY = 2

logger = get_logger(__name__)


@dataclass(frozen=True)
class StampReply:
    """
    The collective signature over a tree head: commitment R and response
    sigma of the aggregate EdDSA signature, plus what the witnesses said
    about who took part.
    """
    commitment: int
    response: int
    suite_name: Optional[str] = None
    timestamp: Optional[int] = None
    signers: tuple = ()


def encode_scalar_base64(value: int) -> str:
    return base64.b64encode(value.to_bytes(SCALAR_SIZE, byteorder="little")).decode("utf-8")


def decode_scalar_base64(field, value) -> int:
    try:
        raw = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise MalformedEnvelope(f"Srep.{field} is not valid base64: {value!r}") from e
    if len(raw) != SCALAR_SIZE:
        raise MalformedEnvelope(f"Srep.{field} has {len(raw)} bytes, expected {SCALAR_SIZE}")
    return int.from_bytes(raw, byteorder="little")


def _optional_int(srep, field):
    value = srep.get(field)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedEnvelope(f"Srep.{field} must be an integer, got {value!r}")
    return value


def decode_envelope(blob: str) -> StampReply:
    """
    Decodes the JSON time-stamp message a CT log attaches to its STH and
    returns the stamp reply it carries.

    :param blob: The cosi_signature string as received
    :return: The decoded StampReply
    :raises MalformedEnvelope: if the blob is not JSON or lacks the reply
    """
    if isinstance(blob, bytes):
        try:
            blob = blob.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedEnvelope(f"Signature is not valid UTF-8: {e}") from e
    if not isinstance(blob, str):
        raise MalformedEnvelope(f"Signature must be a JSON string, got {type(blob).__name__}")
    try:
        tsm = json.loads(blob)
    except (ValueError, RecursionError) as e:
        logger.debug("couldn't unmarshal signature", blob=blob[:200])
        raise MalformedEnvelope(f"Signature is not valid JSON: {e}") from e

    if not isinstance(tsm, dict):
        raise MalformedEnvelope("Signature must be a JSON object")
    srep = tsm.get("Srep")
    if not isinstance(srep, dict):
        raise MalformedEnvelope("Signature carries no stamp reply (Srep)")

    for field in ("R", "Sigma"):
        if field not in srep:
            raise MalformedEnvelope(f"Stamp reply has no {field}")

    suite_name = srep.get("SuiteStr")
    if suite_name is not None and not isinstance(suite_name, str):
        raise MalformedEnvelope(f"Srep.SuiteStr must be a string, got {suite_name!r}")

    signers = srep.get("Signers") or []
    if not isinstance(signers, list) or not all(isinstance(s, int) and not isinstance(s, bool) for s in signers):
        raise MalformedEnvelope(f"Srep.Signers must be a list of signer indexes, got {signers!r}")

    return StampReply(commitment=decode_scalar_base64("R", srep["R"]),
                      response=decode_scalar_base64("Sigma", srep["Sigma"]),
                      suite_name=suite_name,
                      timestamp=_optional_int(srep, "Timestamp"),
                      signers=tuple(signers))


def encode_envelope(reply: StampReply, req_no: int = 0) -> str:
    srep = {
        "R": encode_scalar_base64(reply.commitment),
        "Sigma": encode_scalar_base64(reply.response),
    }
    if reply.suite_name is not None:
        srep["SuiteStr"] = reply.suite_name
    if reply.timestamp is not None:
        srep["Timestamp"] = reply.timestamp
    if reply.signers:
        srep["Signers"] = list(reply.signers)
    return json.dumps({"ReqNo": req_no, "Type": STAMP_REPLY, "Srep": srep}, sort_keys=True)
