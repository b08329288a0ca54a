"""
Compact three-part token issuer and verifier.

Tokens look like JWTs (``header.payload.signature``, each segment unpadded
base64url) but only this narrow shape is produced or accepted:

- header: ``{"alg":"HS256","sign_type":"SIGN"}``
- payload: ``{"api_key":"<identifier>","exp":<ms>,"timestamp":<ms>}``
- signature: HMAC-SHA256 over ``b64(header) + "." + b64(payload)``

The payload is fixed when the issuer is built: the trusted clock is sampled
exactly once and ``exp`` is that timestamp doubled. Every token from one
issuer is therefore byte-identical. Verification checks the signature only;
claims are never inspected, see ``decode_claims`` for caller-side checks.
"""

from __future__ import annotations

import hmac
import json
from typing import Any

from ..clock.trusted import TrustedClock, get_default_clock
from ..core.errors import DecodeError, DecodeErrorKind
from ..crypto import base64url
from ..crypto.hmac256 import hmac_sha256

TOKEN_HEADER = '{"alg":"HS256","sign_type":"SIGN"}'


def _secret_bytes(secret: str | bytes) -> bytes:
    if isinstance(secret, str):
        return secret.encode("utf-8")
    if not isinstance(secret, (bytes, bytearray, memoryview)):
        raise TypeError(f"secret must be str or bytes, not {type(secret).__name__}")
    return bytes(secret)


def _build_payload(identifier: str, timestamp_ms: int, exp_ms: int) -> str:
    api_key = json.dumps(identifier, ensure_ascii=False)
    return f'{{"api_key":{api_key},"exp":{exp_ms},"timestamp":{timestamp_ms}}}'


class TokenIssuer:
    """Issues and verifies tokens for one identifier/secret pair.

    Immutable after construction, so one instance can be shared across
    threads for concurrent ``create_jwt``/``verify_jwt`` calls.

    Without ``timestamp_ms`` the constructor reads the trusted clock
    synchronously, which may query NTP servers. Inside a coroutine use
    ``await TokenIssuer.create(...)`` so the event loop is not blocked.
    """

    __slots__ = ("_identifier", "_secret", "_timestamp_ms", "_header", "_payload")

    def __init__(
        self,
        identifier: str,
        secret: str | bytes,
        *,
        clock: TrustedClock | None = None,
        timestamp_ms: int | None = None,
    ) -> None:
        if timestamp_ms is None:
            timestamp_ms = (clock or get_default_clock()).now_ms()
        self._identifier = identifier
        self._secret = _secret_bytes(secret)
        self._timestamp_ms = int(timestamp_ms)
        self._header = TOKEN_HEADER
        self._payload = _build_payload(
            identifier, self._timestamp_ms, self._timestamp_ms * 2
        )

    @classmethod
    async def create(
        cls,
        identifier: str,
        secret: str | bytes,
        *,
        clock: TrustedClock | None = None,
    ) -> TokenIssuer:
        """Build an issuer, sampling the clock without blocking the loop."""
        timestamp_ms = await (clock or get_default_clock()).now_ms_async()
        return cls(identifier, secret, timestamp_ms=timestamp_ms)

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def timestamp_ms(self) -> int:
        return self._timestamp_ms

    @property
    def exp_ms(self) -> int:
        return self._timestamp_ms * 2

    @property
    def header(self) -> str:
        return self._header

    @property
    def payload(self) -> str:
        return self._payload

    def create_jwt(self) -> str:
        encoded_header = base64url.encode(self._header.encode("utf-8"))
        encoded_payload = base64url.encode(self._payload.encode("utf-8"))
        to_sign = f"{encoded_header}.{encoded_payload}"
        signature = base64url.encode(self._sign(to_sign))
        return f"{to_sign}.{signature}"

    def verify_jwt(self, token: str) -> bool:
        """Return True only if ``token`` carries this issuer's signature.

        Malformed and forged tokens both yield False.
        """
        if not isinstance(token, str):
            return False
        token = token.strip()
        # base64url segments are ASCII; anything else cannot carry our MAC
        if not token.isascii():
            return False
        parts = token.split(".")
        if len(parts) != 3:
            return False
        encoded_header, encoded_payload, signature = parts
        expected = base64url.encode(self._sign(f"{encoded_header}.{encoded_payload}"))
        return hmac.compare_digest(
            expected.encode("utf-8"), signature.encode("utf-8")
        )

    def _sign(self, data: str) -> bytes:
        return hmac_sha256(self._secret, data.encode("utf-8"))

    def __repr__(self) -> str:
        return (
            f"TokenIssuer(identifier={self._identifier!r}, "
            f"timestamp_ms={self._timestamp_ms})"
        )


def decode_claims(token: str) -> dict[str, Any]:
    """Decode the payload segment of a token without verifying it.

    Raises:
        DecodeError: If the token is not three segments or the payload is
            not base64url-encoded JSON object text.
    """
    parts = token.strip().split(".")
    if len(parts) != 3:
        raise DecodeError(
            f"expected 3 token segments, got {len(parts)}",
            kind=DecodeErrorKind.INVALID_PAYLOAD,
        )
    raw = base64url.decode(parts[1])
    try:
        claims = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError(
            "token payload is not valid JSON",
            kind=DecodeErrorKind.INVALID_PAYLOAD,
            cause=e,
        ) from e
    if not isinstance(claims, dict):
        raise DecodeError(
            "token payload is not a JSON object",
            kind=DecodeErrorKind.INVALID_PAYLOAD,
        )
    return claims
