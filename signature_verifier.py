from typing import Protocol

from envelope import StampReply
from logging_config import get_logger
from suites import Suite

logger = get_logger(__name__)


class CollectiveSignatureVerifier(Protocol):
    """
    Checks a collective signature against the aggregate key of the group.

    Returns False for a signature that does not check out; it does not
    raise on well-formed input.
    """

    def verify(self, suite: Suite, reply: StampReply, aggregate_public_key: int, message: bytes) -> bool:
        ...


class ThresholdSignatureVerifier:
    """Verifies aggregate threshold EdDSA signatures with the suite's ggmpc scheme."""

    def verify(self, suite: Suite, reply: StampReply, aggregate_public_key: int, message: bytes) -> bool:
        if reply.suite_name is not None and reply.suite_name.lower() != suite.name.lower():
            logger.warning("signature made with another suite", expected=suite.name, got=reply.suite_name)
            return False
        if reply.response >= suite.order:
            logger.warning("signature response out of range")
            return False

        signature = {"y": aggregate_public_key, "R": reply.commitment, "sigma": reply.response}
        try:
            return bool(suite.mpc.verify(bytes(message), signature))
        except Exception as e:
            # ggmpc raises on points that do not decode
            logger.warning("signature check raised", error=repr(e))
            return False


default_verifier = ThresholdSignatureVerifier()


def verify_signature(suite: Suite, reply: StampReply, aggregate_public_key: int, message: bytes) -> bool:
    return default_verifier.verify(suite, reply, aggregate_public_key, message)
