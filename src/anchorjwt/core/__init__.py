"""
Ambient infrastructure: errors, diagnostics, settings and executors.
"""

from .concurrency import (
    BlockingExecutor,
    ThreadPoolBlockingExecutor,
    get_default_executor,
    shutdown_default_executor,
)
from .errors import (
    AnchorJwtError,
    ConfigurationError,
    DecodeError,
    DecodeErrorKind,
    DigestFinalizedError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    NetworkError,
)
from .settings import ClockSettings, CoreSettings, Settings, TokenSettings, load_settings

__all__ = [
    "AnchorJwtError",
    "BlockingExecutor",
    "ClockSettings",
    "ConfigurationError",
    "CoreSettings",
    "DecodeError",
    "DecodeErrorKind",
    "DigestFinalizedError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorSeverity",
    "NetworkError",
    "Settings",
    "ThreadPoolBlockingExecutor",
    "TokenSettings",
    "get_default_executor",
    "load_settings",
    "shutdown_default_executor",
]
