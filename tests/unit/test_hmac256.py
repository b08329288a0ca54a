from __future__ import annotations

import hashlib
import hmac

import pytest

from anchorjwt.core.errors import DigestFinalizedError
from anchorjwt.crypto.hmac256 import HmacSha256, hmac_sha256


@pytest.mark.critical
@pytest.mark.security
@pytest.mark.parametrize(
    ("key", "message", "expected"),
    [
        # RFC 4231 test case 1: key shorter than the block size
        (
            b"\x0b" * 20,
            b"Hi There",
            "b0344c61d8db38535ca8afceaf0bf12b881dc200c9833da726e9376c2e32cff7",
        ),
        # RFC 4231 test case 2
        (
            b"Jefe",
            b"what do ya want for nothing?",
            "5bdcc146bf60754e6a042426089575c75a003f089d2739839dec58b964ec3843",
        ),
        # RFC 4231 test case 6: key longer than the block size is hashed first
        (
            b"\xaa" * 131,
            b"Test Using Larger Than Block-Size Key - Hash Key First",
            "60e431591ee0b67f0d8a26aacbf5b77f8e0bc6213728c5140546040f0ee37f54",
        ),
    ],
)
def test_rfc4231_vectors(key: bytes, message: bytes, expected: str) -> None:
    assert hmac_sha256(key, message).hex() == expected


def test_empty_key_and_message() -> None:
    expected = hmac.new(b"", b"", hashlib.sha256).digest()
    assert hmac_sha256(b"", b"") == expected


@pytest.mark.parametrize("key_len", [63, 64, 65])
def test_keys_around_block_size(key_len: int) -> None:
    key = bytes(range(key_len))
    expected = hmac.new(key, b"payload", hashlib.sha256).digest()
    assert hmac_sha256(key, b"payload") == expected


def test_updates_accumulate_in_order() -> None:
    mac = HmacSha256(b"k")
    mac.update(b"header.")
    mac.update(b"payload")
    assert mac.finalize() == hmac_sha256(b"k", b"header.payload")

    swapped = HmacSha256(b"k")
    swapped.update(b"payload")
    swapped.update(b"header.")
    assert swapped.finalize() != hmac_sha256(b"k", b"header.payload")


def test_different_messages_give_different_macs() -> None:
    assert hmac_sha256(b"k", b"m1") != hmac_sha256(b"k", b"m2")


def test_state_is_single_use() -> None:
    mac = HmacSha256(b"k")
    mac.finalize()
    with pytest.raises(DigestFinalizedError):
        mac.update(b"x")
    with pytest.raises(DigestFinalizedError):
        mac.finalize()


def test_rejects_str_key() -> None:
    with pytest.raises(TypeError, match="must be bytes"):
        HmacSha256("secret")  # type: ignore[arg-type]


def test_rejects_int_key() -> None:
    with pytest.raises(TypeError, match="must be bytes, not int"):
        HmacSha256(5)  # type: ignore[arg-type]


def test_rejects_int_message() -> None:
    with pytest.raises(TypeError, match="expects bytes"):
        hmac_sha256(b"k", 5)  # type: ignore[arg-type]
