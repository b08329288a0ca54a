"""
Public entrypoints for anchorjwt.

Issue and verify compact HMAC-SHA256 tokens whose timestamps come from an
NTP-corrected clock rather than the bare local clock.

Example:
    from anchorjwt import TokenIssuer

    issuer = TokenIssuer("my-api-key", "shared-secret")
    token = issuer.create_jwt()
    assert issuer.verify_jwt(token)
"""

from __future__ import annotations

from ._version import __version__
from .clock.trusted import (
    TrustedClock,
    get_default_clock,
    reset_default_clock,
    time_sync,
    time_sync_async,
)
from .core.errors import AnchorJwtError, DecodeError, DecodeErrorKind
from .core.settings import Settings
from .token.issuer import TokenIssuer, decode_claims

VERSION = __version__

__all__ = [
    "AnchorJwtError",
    "DecodeError",
    "DecodeErrorKind",
    "Settings",
    "TokenIssuer",
    "TrustedClock",
    "VERSION",
    "__version__",
    "decode_claims",
    "get_default_clock",
    "reset_default_clock",
    "time_sync",
    "time_sync_async",
]
