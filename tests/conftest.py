"""
Pytest fixtures: a 3-of-5 witness group that produces genuine threshold
EdDSA signatures with ggmpc, and helpers to fake a CT log.
"""

import base64
import hashlib
import json

import ggmpc
import pytest
from ggmpc import curves

from CT_interface import STHRecord
from configuration import TrustConfig
from envelope import StampReply, encode_envelope
from suites import get_suite

LOG_URI = "http://ct.example.test"


class WitnessGroup:
    def __init__(self, threshold=3, total_signers=5):
        self.mpc = ggmpc.Eddsa(curves.ed25519)
        self.threshold = threshold
        self.total_signers = total_signers
        indexes = range(1, total_signers + 1)

        # Step 1: every signer deals key shares, step 2: every signer combines the ones it got
        key_shares = {i: self.mpc.key_share(i, threshold, total_signers) for i in indexes}
        self.combined_keys = {i: self.mpc.key_combine(tuple(key_shares[j][i] for j in indexes))
                              for i in indexes}
        self.public_key = self.sign(b"setup")["y"]

    def sign(self, message: bytes, selected_signers=(1, 3, 5)):
        selected_signers = sorted(selected_signers)
        sign_shares = {
            i: self.mpc.sign_share(message, tuple(self.combined_keys[i][j] for j in selected_signers))
            for i in selected_signers
        }
        partial_signatures = [
            self.mpc.sign(message, tuple(sign_shares[j][i] for j in selected_signers))
            for i in selected_signers
        ]
        return self.mpc.sign_combine(tuple(partial_signatures))

    def cosign(self, message: bytes, selected_signers=(1, 3, 5), suite_name="Ed25519") -> str:
        signature = self.sign(message, selected_signers)
        reply = StampReply(commitment=signature["R"],
                           response=signature["sigma"],
                           suite_name=suite_name,
                           timestamp=1736776402,
                           signers=tuple(sorted(selected_signers)))
        return encode_envelope(reply)

    def public_key_base64(self) -> str:
        return get_suite("Ed25519").encode_point_base64(self.public_key)


class FakeLog:
    """Stands in for get_sth and records every call."""

    def __init__(self, record=None, error=None):
        self.record = record
        self.error = error
        self.calls = []

    def __call__(self, log_uri, timeout=None):
        self.calls.append((log_uri, timeout))
        if self.error is not None:
            raise self.error
        return self.record


def make_root_hash(seed: bytes = b"tree") -> bytes:
    return hashlib.sha256(seed).digest()


@pytest.fixture(scope="session")
def witness_group():
    return WitnessGroup()


@pytest.fixture
def root_hash():
    return make_root_hash()


@pytest.fixture
def trust(witness_group):
    return TrustConfig.from_mapping({"suite": "Ed25519",
                                     "aggregate_public_key": witness_group.public_key_base64()})


@pytest.fixture
def config_file(tmp_path, witness_group):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"suite": "Ed25519",
                                "aggregate_public_key": witness_group.public_key_base64()}))
    return path


@pytest.fixture
def signed_record(witness_group, root_hash):
    return STHRecord(log_uri=LOG_URI,
                     root_hash=root_hash,
                     signature_blob=witness_group.cosign(root_hash),
                     tree_size=493376048,
                     timestamp=1736776402)


@pytest.fixture
def sth_body(witness_group, root_hash):
    return {
        "tree_size": 493376048,
        "timestamp": 1736776402,
        "sha256_root_hash": base64.b64encode(root_hash).decode("utf-8"),
        "tree_head_signature": "BAMARzBFAiEA",
        "cosi_signature": witness_group.cosign(root_hash),
    }
