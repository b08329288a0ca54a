"""
Unpadded URL-safe Base64 (RFC 4648 section 5).

Decoding is strict: padding, characters outside the URL-safe alphabet,
impossible lengths and non-canonical trailing bits are all rejected.
"""

from __future__ import annotations

import base64
import binascii
import re

from ..core.errors import DecodeError, DecodeErrorKind

_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
_INVALID_CHAR = re.compile(r"[^A-Za-z0-9\-_]")

# Unused low bits in the last symbol for a final group of 2 or 3 symbols
_TRAILING_MASK = {2: 0x0F, 3: 0x03}


def encode(data: bytes | bytearray | memoryview) -> str:
    """Encode bytes using base64url without padding."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"encode() expects bytes, not {type(data).__name__}")
    return base64.urlsafe_b64encode(bytes(data)).decode("ascii").rstrip("=")


def decode(text: str | bytes | bytearray | memoryview) -> bytes:
    """Decode an unpadded base64url string.

    Raises:
        DecodeError: With ``kind`` describing why the input was rejected.
    """
    if isinstance(text, (bytes, bytearray, memoryview)):
        try:
            text = bytes(text).decode("ascii")
        except UnicodeDecodeError as e:
            raise DecodeError(
                "non-ASCII byte in base64url input",
                kind=DecodeErrorKind.INVALID_CHARACTER,
                position=e.start,
                cause=e,
            ) from e

    bad = _INVALID_CHAR.search(text)
    if bad is not None:
        raise DecodeError(
            f"invalid base64url character {bad.group()!r} at offset {bad.start()}",
            kind=DecodeErrorKind.INVALID_CHARACTER,
            position=bad.start(),
        )

    remainder = len(text) % 4
    if remainder == 1:
        raise DecodeError(
            f"invalid base64url length {len(text)}",
            kind=DecodeErrorKind.INVALID_LENGTH,
        )

    if remainder:
        last = _ALPHABET.index(text[-1])
        if last & _TRAILING_MASK[remainder]:
            raise DecodeError(
                "non-zero trailing bits in final base64url symbol",
                kind=DecodeErrorKind.INVALID_TRAILING_BITS,
                position=len(text) - 1,
            )

    padding = "=" * (-len(text) % 4)
    try:
        return base64.urlsafe_b64decode(text + padding)
    except binascii.Error as e:  # pragma: no cover - guarded by checks above
        raise DecodeError(
            f"malformed base64url input: {e}",
            kind=DecodeErrorKind.INVALID_LENGTH,
            cause=e,
        ) from e
