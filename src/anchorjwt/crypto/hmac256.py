"""
HMAC-SHA256 (RFC 2104) built on the in-package digest engine.
"""

from __future__ import annotations

from ..core.errors import DigestFinalizedError
from .sha256 import BLOCK_SIZE, DIGEST_SIZE, Sha256, sha256

_IPAD = 0x36
_OPAD = 0x5C


class HmacSha256:
    """Keyed MAC state; single use like the digest it wraps."""

    digest_size = DIGEST_SIZE

    __slots__ = ("_opad", "_inner", "_finalized")

    def __init__(self, key: bytes | bytearray | memoryview) -> None:
        if not isinstance(key, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"HmacSha256 key must be bytes, not {type(key).__name__}"
            )
        key_bytes = bytes(key)
        if len(key_bytes) > BLOCK_SIZE:
            key_bytes = sha256(key_bytes)
        key_block = key_bytes.ljust(BLOCK_SIZE, b"\x00")

        ipad = bytes(b ^ _IPAD for b in key_block)
        self._opad = bytes(b ^ _OPAD for b in key_block)
        self._inner = Sha256(ipad)
        self._finalized = False

    def update(self, data: bytes | bytearray | memoryview) -> None:
        if self._finalized:
            raise DigestFinalizedError(
                "HMAC state already finalized", component_name="hmac256"
            )
        self._inner.update(data)

    def finalize(self) -> bytes:
        if self._finalized:
            raise DigestFinalizedError(
                "HMAC state already finalized", component_name="hmac256"
            )
        self._finalized = True
        inner_hash = self._inner.finalize()
        outer = Sha256(self._opad)
        outer.update(inner_hash)
        return outer.finalize()


def hmac_sha256(
    key: bytes | bytearray | memoryview, data: bytes | bytearray | memoryview
) -> bytes:
    """One-shot HMAC-SHA256 of ``data`` under ``key``."""
    mac = HmacSha256(key)
    mac.update(data)
    return mac.finalize()
