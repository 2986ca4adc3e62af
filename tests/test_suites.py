import base64

import pytest

from errors import InvalidPublicKeyEncoding, UnknownSuite
from suites import ED25519_ORDER, SuiteRegistry, ed25519_suite, get_suite, registry


def test_resolve_is_case_insensitive():
    assert get_suite("Ed25519") is get_suite("ed25519")
    assert get_suite("ED25519").name == "Ed25519"


def test_unknown_suite():
    with pytest.raises(UnknownSuite, match="Unknown suite 'P256'"):
        get_suite("P256")


def test_non_string_suite_name():
    with pytest.raises(UnknownSuite):
        registry.resolve(None)


def test_registry_lists_registered_names():
    suites = SuiteRegistry()
    assert suites.names() == []
    suites.register("Ed25519", ed25519_suite)
    assert suites.names() == ["ed25519"]
    assert suites.resolve("ed25519").point_size == 32


def test_point_round_trip(witness_group):
    suite = get_suite("Ed25519")
    encoded = suite.encode_point_base64(witness_group.public_key)
    assert suite.decode_point_base64(encoded) == witness_group.public_key


@pytest.mark.parametrize("encoded", [
    "not base64!",
    base64.b64encode(b"\x01" * 31).decode(),
    base64.b64encode(b"\x00" * 32).decode(),  # small order point
    "",
])
def test_invalid_points(encoded):
    with pytest.raises(InvalidPublicKeyEncoding):
        get_suite("Ed25519").decode_point_base64(encoded)


def test_ed25519_group_order():
    assert get_suite("Ed25519").order == ED25519_ORDER
