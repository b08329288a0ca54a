"""
Structured internal diagnostics.

Non-fatal failures inside the package (network time queries, clock reads,
rejected offsets) never propagate to callers. They are reported here as
single-line JSON records on stderr, and only when
``core.internal_logging_enabled`` is set, so a quiet default is preserved.
"""

from __future__ import annotations

import json
import sys
import threading
import time
from typing import Any, Callable

Writer = Callable[[dict[str, Any]], None]

# Cached on first access; tests reset it to None for isolation
_internal_logging_enabled: bool | None = None

_RATE_WINDOW_SECONDS = 60.0
_RATE_MAX_PER_WINDOW = 10

_rate_lock = threading.Lock()
_rate_state: dict[tuple[str, str], tuple[float, int]] = {}


def _default_writer(payload: dict[str, Any]) -> None:
    line = json.dumps(payload, default=str, separators=(",", ":"))
    sys.stderr.write(line + "\n")
    sys.stderr.flush()


_writer: Writer = _default_writer


def is_enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        try:
            from .settings import Settings

            _internal_logging_enabled = bool(
                Settings().core.internal_logging_enabled
            )
        except Exception:
            _internal_logging_enabled = False
    return _internal_logging_enabled


def _allow(component: str, message: str) -> bool:
    now = time.monotonic()
    key = (component, message)
    with _rate_lock:
        start, count = _rate_state.get(key, (now, 0))
        if now - start >= _RATE_WINDOW_SECONDS:
            start, count = now, 0
        if count >= _RATE_MAX_PER_WINDOW:
            _rate_state[key] = (start, count)
            return False
        _rate_state[key] = (start, count + 1)
        return True


def _emit(level: str, component: str, message: str, fields: dict[str, Any]) -> None:
    if not is_enabled():
        return
    if not _allow(component, message):
        return
    payload: dict[str, Any] = {
        "timestamp": time.time(),
        "level": level,
        "component": component,
        "message": message,
    }
    payload.update(fields)
    try:
        _writer(payload)
    except Exception:
        # Diagnostics must never break the caller
        return


def warn(component: str, message: str, **fields: Any) -> None:
    _emit("WARN", component, message, fields)


def debug(component: str, message: str, **fields: Any) -> None:
    _emit("DEBUG", component, message, fields)


def set_writer_for_tests(writer: Writer) -> None:
    global _writer
    _writer = writer


def _reset_for_tests() -> None:
    global _internal_logging_enabled, _writer
    _internal_logging_enabled = None
    _writer = _default_writer
    with _rate_lock:
        _rate_state.clear()
