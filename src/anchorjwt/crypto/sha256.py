"""
Incremental SHA-256 (FIPS 180-4).

The MAC layer and any remote verifier depend on exact digest values, so this
is a complete, bit-exact implementation rather than a wrapper.
"""

from __future__ import annotations

import struct

from ..core.errors import DigestFinalizedError

BLOCK_SIZE = 64
DIGEST_SIZE = 32

_MASK = 0xFFFFFFFF

_K: tuple[int, ...] = (
    0x428A2F98, 0x71374491, 0xB5C0FBCF, 0xE9B5DBA5,
    0x3956C25B, 0x59F111F1, 0x923F82A4, 0xAB1C5ED5,
    0xD807AA98, 0x12835B01, 0x243185BE, 0x550C7DC3,
    0x72BE5D74, 0x80DEB1FE, 0x9BDC06A7, 0xC19BF174,
    0xE49B69C1, 0xEFBE4786, 0x0FC19DC6, 0x240CA1CC,
    0x2DE92C6F, 0x4A7484AA, 0x5CB0A9DC, 0x76F988DA,
    0x983E5152, 0xA831C66D, 0xB00327C8, 0xBF597FC7,
    0xC6E00BF3, 0xD5A79147, 0x06CA6351, 0x14292967,
    0x27B70A85, 0x2E1B2138, 0x4D2C6DFC, 0x53380D13,
    0x650A7354, 0x766A0ABB, 0x81C2C92E, 0x92722C85,
    0xA2BFE8A1, 0xA81A664B, 0xC24B8B70, 0xC76C51A3,
    0xD192E819, 0xD6990624, 0xF40E3585, 0x106AA070,
    0x19A4C116, 0x1E376C08, 0x2748774C, 0x34B0BCB5,
    0x391C0CB3, 0x4ED8AA4A, 0x5B9CCA4F, 0x682E6FF3,
    0x748F82EE, 0x78A5636F, 0x84C87814, 0x8CC70208,
    0x90BEFFFA, 0xA4506CEB, 0xBEF9A3F7, 0xC67178F2,
)

_H0: tuple[int, ...] = (
    0x6A09E667, 0xBB67AE85, 0x3C6EF372, 0xA54FF53A,
    0x510E527F, 0x9B05688C, 0x1F83D9AB, 0x5BE0CD19,
)

_WORDS = struct.Struct(">16L")
_DIGEST = struct.Struct(">8L")
_LENGTH = struct.Struct(">Q")


def _rotr(x: int, n: int) -> int:
    return ((x >> n) | (x << (32 - n))) & _MASK


def _compress(state: list[int], block: bytes) -> None:
    w = list(_WORDS.unpack(block))
    for t in range(16, 64):
        x = w[t - 15]
        y = w[t - 2]
        s0 = _rotr(x, 7) ^ _rotr(x, 18) ^ (x >> 3)
        s1 = _rotr(y, 17) ^ _rotr(y, 19) ^ (y >> 10)
        w.append((w[t - 16] + s0 + w[t - 7] + s1) & _MASK)

    a, b, c, d, e, f, g, h = state
    for t in range(64):
        s1 = _rotr(e, 6) ^ _rotr(e, 11) ^ _rotr(e, 25)
        ch = (e & f) ^ (~e & g)
        t1 = (h + s1 + ch + _K[t] + w[t]) & _MASK
        s0 = _rotr(a, 2) ^ _rotr(a, 13) ^ _rotr(a, 22)
        maj = (a & b) ^ (a & c) ^ (b & c)
        t2 = (s0 + maj) & _MASK
        h = g
        g = f
        f = e
        e = (d + t1) & _MASK
        d = c
        c = b
        b = a
        a = (t1 + t2) & _MASK

    for i, v in enumerate((a, b, c, d, e, f, g, h)):
        state[i] = (state[i] + v) & _MASK


class Sha256:
    """Streaming SHA-256 state.

    ``update`` may be called any number of times; ``finalize`` returns the
    32-byte digest and retires the instance. Any later use raises
    ``DigestFinalizedError``.
    """

    block_size = BLOCK_SIZE
    digest_size = DIGEST_SIZE

    __slots__ = ("_state", "_buffer", "_length", "_finalized")

    def __init__(self, data: bytes | bytearray | memoryview | None = None) -> None:
        self._state = list(_H0)
        self._buffer = b""
        self._length = 0
        self._finalized = False
        if data is not None:
            self.update(data)

    def update(self, data: bytes | bytearray | memoryview) -> None:
        self._check_live()
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"Sha256.update() expects bytes, not {type(data).__name__}"
            )
        chunk = bytes(data)
        if not chunk:
            return
        self._length += len(chunk)
        buf = self._buffer + chunk
        full = len(buf) - (len(buf) % BLOCK_SIZE)
        for offset in range(0, full, BLOCK_SIZE):
            _compress(self._state, buf[offset : offset + BLOCK_SIZE])
        self._buffer = buf[full:]

    def finalize(self) -> bytes:
        self._check_live()
        self._finalized = True
        bit_length = (self._length * 8) & 0xFFFFFFFFFFFFFFFF
        tail = self._buffer + b"\x80"
        tail += b"\x00" * ((BLOCK_SIZE - 8 - len(tail)) % BLOCK_SIZE)
        tail += _LENGTH.pack(bit_length)
        for offset in range(0, len(tail), BLOCK_SIZE):
            _compress(self._state, tail[offset : offset + BLOCK_SIZE])
        digest = _DIGEST.pack(*self._state)
        self._buffer = b""
        return digest

    @property
    def finalized(self) -> bool:
        return self._finalized

    def _check_live(self) -> None:
        if self._finalized:
            raise DigestFinalizedError(
                "SHA-256 state already finalized", component_name="sha256"
            )


def sha256(data: bytes | bytearray | memoryview = b"") -> bytes:
    """One-shot SHA-256 of ``data``."""
    return Sha256(data).finalize()
