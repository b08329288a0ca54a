"""
Pure cryptographic building blocks: SHA-256, HMAC-SHA256 and base64url.
"""

from . import base64url
from .hmac256 import HmacSha256, hmac_sha256
from .sha256 import Sha256, sha256

__all__ = [
    "HmacSha256",
    "Sha256",
    "base64url",
    "hmac_sha256",
    "sha256",
]
