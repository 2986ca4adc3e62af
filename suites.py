import base64
from dataclasses import dataclass
from typing import Any, Callable

import ggmpc
from ggmpc import curves
from nacl.bindings import crypto_core_ed25519_is_valid_point

from errors import InvalidPublicKeyEncoding, UnknownSuite

# Order of the prime-order subgroup of edwards25519
ED25519_ORDER = 2**252 + 27742317777372353535851937790883648493


@dataclass(frozen=True)
class Suite:
    """
    Cryptographic primitives shared by every step of an audit run.

    Points and scalars are handled as integers, the way ggmpc represents
    them; on the wire they are little-endian byte strings of point_size.
    """
    name: str
    mpc: Any
    point_size: int
    order: int
    is_valid_point: Callable[[bytes], bool]

    def decode_point(self, data: bytes) -> int:
        if len(data) != self.point_size:
            raise InvalidPublicKeyEncoding(
                f"Expected a {self.point_size} byte point for suite {self.name}, got {len(data)} bytes")
        if not self.is_valid_point(data):
            raise InvalidPublicKeyEncoding(f"Not a valid {self.name} point: {data.hex()}")
        return int.from_bytes(data, byteorder="little")

    def encode_point(self, point: int) -> bytes:
        return point.to_bytes(self.point_size, byteorder="little")

    def decode_point_base64(self, encoded: str) -> int:
        try:
            data = base64.b64decode(encoded, validate=True)
        except (ValueError, TypeError) as e:
            raise InvalidPublicKeyEncoding(f"Public key is not valid base64: {encoded!r}") from e
        return self.decode_point(data)

    def encode_point_base64(self, point: int) -> str:
        return base64.b64encode(self.encode_point(point)).decode("utf-8")


def ed25519_suite() -> Suite:
    return Suite(name="Ed25519",
                 mpc=ggmpc.Eddsa(curves.ed25519),
                 point_size=32,
                 order=ED25519_ORDER,
                 is_valid_point=crypto_core_ed25519_is_valid_point)


class SuiteRegistry:
    def __init__(self):
        self._factories: dict[str, Callable[[], Suite]] = {}
        self._suites: dict[str, Suite] = {}

    def register(self, name: str, factory: Callable[[], Suite]):
        self._factories[name.lower()] = factory

    def names(self) -> list[str]:
        return sorted(self._factories)

    def resolve(self, name: str) -> Suite:
        """
        Looks up a suite by name, ignoring case.

        :param name: The suite name as written in the trust configuration
        :return: The shared Suite instance
        """
        if not isinstance(name, str):
            raise UnknownSuite(f"Suite name must be a string, got {name!r}")
        key = name.lower()
        if key not in self._factories:
            raise UnknownSuite(f"Unknown suite '{name}', known suites: {', '.join(self.names())}")
        if key not in self._suites:
            self._suites[key] = self._factories[key]()
        return self._suites[key]


registry = SuiteRegistry()
registry.register("Ed25519", ed25519_suite)


def get_suite(name: str) -> Suite:
    return registry.resolve(name)
