"""
Error hierarchy for anchorjwt.

Every error raised by the package derives from ``AnchorJwtError`` and carries
an ``ErrorContext`` with a category and severity so callers and diagnostics
can classify failures without string matching.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    SYSTEM = "system"
    VALIDATION = "validation"
    CONFIG = "config"
    NETWORK = "network"


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class DecodeErrorKind(str, Enum):
    """Reason a base64url segment was rejected."""

    INVALID_CHARACTER = "invalid_character"
    INVALID_LENGTH = "invalid_length"
    INVALID_TRAILING_BITS = "invalid_trailing_bits"
    INVALID_PAYLOAD = "invalid_payload"


@dataclass
class ErrorContext:
    category: ErrorCategory = ErrorCategory.SYSTEM
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    component_name: str | None = None
    error_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_id": self.error_id,
            "category": self.category.value,
            "severity": self.severity.value,
            "component_name": self.component_name,
            "timestamp": self.timestamp.isoformat().replace("+00:00", "Z"),
            "metadata": dict(self.metadata),
        }


class AnchorJwtError(Exception):
    """Base error with structured context and optional cause chaining."""

    default_category = ErrorCategory.SYSTEM
    default_severity = ErrorSeverity.MEDIUM

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        severity: ErrorSeverity | None = None,
        component_name: str | None = None,
        cause: BaseException | None = None,
        **metadata: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = ErrorContext(
            category=category or self.default_category,
            severity=severity or self.default_severity,
            component_name=component_name,
            metadata=metadata,
        )
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "context": self.context.to_dict(),
        }
        if self.__cause__ is not None:
            data["cause"] = {
                "error_type": type(self.__cause__).__name__,
                "message": str(self.__cause__),
            }
        return data


class DecodeError(AnchorJwtError):
    """Raised when base64url input (or a decoded token payload) is malformed."""

    default_category = ErrorCategory.VALIDATION
    default_severity = ErrorSeverity.LOW

    def __init__(
        self,
        message: str,
        *,
        kind: DecodeErrorKind,
        position: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            message,
            component_name="base64url",
            cause=cause,
            kind=kind.value,
            position=position,
        )
        self.kind = kind
        self.position = position


class DigestFinalizedError(AnchorJwtError):
    """Raised when a digest or MAC state is used after ``finalize()``."""

    default_category = ErrorCategory.SYSTEM
    default_severity = ErrorSeverity.HIGH


class ConfigurationError(AnchorJwtError):
    default_category = ErrorCategory.CONFIG
    default_severity = ErrorSeverity.HIGH


class NetworkError(AnchorJwtError):
    """Raised by time sources; the trusted clock always contains it."""

    default_category = ErrorCategory.NETWORK
    default_severity = ErrorSeverity.MEDIUM


__all__ = [
    "AnchorJwtError",
    "ConfigurationError",
    "DecodeError",
    "DecodeErrorKind",
    "DigestFinalizedError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorSeverity",
    "NetworkError",
]
