import os
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from CT_interface import DEFAULT_TIMEOUT, STHRecord, get_sth
from configuration import TrustConfig
from envelope import decode_envelope
from errors import AuditError
from logging_config import get_logger
from signature_verifier import CollectiveSignatureVerifier, default_verifier

COSI_DUMP_FILE = "test_sth_cosi.json"
SHA256_DUMP_FILE = "test_sth_sha256.json"

logger = get_logger(__name__)


class Verdict(str, Enum):
    VERIFIED = "verified"
    REJECTED = "rejected"
    ERRORED = "errored"


@dataclass(frozen=True)
class VerificationOutcome:
    verdict: Verdict
    log_uri: str
    root_hash: Optional[bytes] = None
    error: Optional[AuditError] = None

    @property
    def reason(self) -> Optional[str]:
        return str(self.error) if self.error else None

    @property
    def failed_step(self) -> Optional[str]:
        return self.error.step if self.error else None

    def to_dict(self) -> dict:
        result = {"log_uri": self.log_uri, "verdict": self.verdict.value}
        if self.root_hash is not None:
            result["sha256_root_hash"] = self.root_hash.hex()
        if self.error is not None:
            result["error"] = type(self.error).__name__
            result["step"] = self.error.step
            result["reason"] = str(self.error)
        return result


@dataclass(frozen=True)
class DumpResult:
    record: STHRecord
    cosi_path: str
    sha256_path: str


class Auditor:
    def __init__(self,
                 trust_loader: Callable[[], TrustConfig] = TrustConfig.load,
                 fetch_sth: Callable[..., STHRecord] = get_sth,
                 verifier: CollectiveSignatureVerifier = default_verifier,
                 timeout: float = DEFAULT_TIMEOUT):
        """
        :param trust_loader: Returns the trust anchor; only called in verify mode
        :param fetch_sth: Fetches an STH record for a log URI
        :param verifier: Checks the collective signature
        :param timeout: Seconds to wait for the CT log
        """
        self.trust_loader = trust_loader
        self.fetch_sth = fetch_sth
        self.verifier = verifier
        self.timeout = timeout
        self._trust: Optional[TrustConfig] = None
        self._trust_lock = threading.Lock()

    @classmethod
    def with_trust(cls, trust: TrustConfig, **kwargs) -> "Auditor":
        return cls(trust_loader=lambda: trust, **kwargs)

    def trust(self) -> TrustConfig:
        with self._trust_lock:
            if self._trust is None:
                self._trust = self.trust_loader()
        return self._trust

    def verify(self, log_uri: str) -> VerificationOutcome:
        """
        Checks that the current STH of a log carries a valid collective
        signature over its root hash.

        Any failure ends the pipeline at the failing step and comes back as
        an ERRORED outcome; a signature that does not check out is REJECTED.
        """
        log = logger.bind(log_uri=log_uri)
        record = None
        try:
            trust = self.trust()
            record = self.fetch_sth(log_uri, timeout=self.timeout)
            log.debug("STH received", tree_size=record.tree_size, timestamp=record.timestamp)

            reply = decode_envelope(record.signature_blob)
            log.debug("stamp reply decoded", suite=reply.suite_name, signers=list(reply.signers))

            valid = self.verifier.verify(trust.suite, reply, trust.aggregate_public_key, record.root_hash)
        except AuditError as e:
            log.error("audit aborted", step=e.step, error=str(e))
            return VerificationOutcome(Verdict.ERRORED, log_uri,
                                       root_hash=record.root_hash if record else None,
                                       error=e)

        if valid:
            log.info("cosi signature verified", root_hash=record.root_hash.hex())
            return VerificationOutcome(Verdict.VERIFIED, log_uri, root_hash=record.root_hash)
        log.warning("cosi signature rejected", root_hash=record.root_hash.hex())
        return VerificationOutcome(Verdict.REJECTED, log_uri, root_hash=record.root_hash)

    def dump(self, log_uri: str, output_dir: str = ".") -> DumpResult:
        """Writes the raw cosi signature and the base64 root hash of the current STH to disk."""
        record = self.fetch_sth(log_uri, timeout=self.timeout)
        logger.info("dumping STH", log_uri=log_uri, output_dir=output_dir)

        os.makedirs(output_dir, exist_ok=True)
        cosi_path = os.path.join(output_dir, COSI_DUMP_FILE)
        sha256_path = os.path.join(output_dir, SHA256_DUMP_FILE)
        with open(cosi_path, "w") as file:
            file.write(record.signature_blob)
        with open(sha256_path, "w") as file:
            file.write(record.root_hash_base64())
        return DumpResult(record=record, cosi_path=cosi_path, sha256_path=sha256_path)


class FetchThread(threading.Thread):
    def __init__(self, fun, args):
        super().__init__()
        self.fun = fun
        self.args = args
        self.response = None
        self.exception = None

    def run(self):
        try:
            self.response = self.fun(*self.args)
        except Exception as e:
            self.exception = e


def audit_logs(auditor: Auditor, log_uris: list) -> list:
    """
    Verifies several logs at once, one thread per log.

    The trust anchor is loaded before any thread starts and shared read-only.
    Outcomes come back in the order of log_uris.
    """
    try:
        auditor.trust()
    except AuditError as e:
        logger.error("audit aborted", step=e.step, error=str(e))
        return [VerificationOutcome(Verdict.ERRORED, log_uri, error=e) for log_uri in log_uris]

    threads = []
    for log_uri in log_uris:
        thread = FetchThread(auditor.verify, [log_uri])
        threads.append(thread)
        thread.start()

    for thread in threads:
        thread.join()
    for thread in threads:
        if thread.exception:
            raise thread.exception

    return [thread.response for thread in threads]
