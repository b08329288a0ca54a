from .issuer import TOKEN_HEADER, TokenIssuer, decode_claims

__all__ = ["TOKEN_HEADER", "TokenIssuer", "decode_claims"]
