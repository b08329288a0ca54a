from __future__ import annotations

from anchorjwt.core.errors import (
    AnchorJwtError,
    ConfigurationError,
    DecodeError,
    DecodeErrorKind,
    DigestFinalizedError,
    ErrorCategory,
    ErrorSeverity,
    NetworkError,
)


def test_base_error_context() -> None:
    error = AnchorJwtError(
        "Test error", category=ErrorCategory.SYSTEM, severity=ErrorSeverity.HIGH
    )
    assert error.message == "Test error"
    assert error.context.category is ErrorCategory.SYSTEM
    assert error.context.severity is ErrorSeverity.HIGH
    assert error.context.error_id
    assert error.context.timestamp is not None


def test_subclass_categories() -> None:
    assert ConfigurationError("x").context.category is ErrorCategory.CONFIG
    assert NetworkError("x").context.category is ErrorCategory.NETWORK
    assert DigestFinalizedError("x").context.severity is ErrorSeverity.HIGH
    decode = DecodeError("x", kind=DecodeErrorKind.INVALID_LENGTH)
    assert decode.context.category is ErrorCategory.VALIDATION
    assert isinstance(decode, AnchorJwtError)


def test_cause_chaining_and_serialization() -> None:
    original = ValueError("Original error")
    error = NetworkError("Wrapped", cause=original, server="a.example")

    assert error.__cause__ is original
    data = error.to_dict()
    assert data["error_type"] == "NetworkError"
    assert data["context"]["category"] == "network"
    assert data["context"]["metadata"] == {"server": "a.example"}
    assert data["cause"] == {"error_type": "ValueError", "message": "Original error"}
    assert data["context"]["timestamp"].endswith("Z")
