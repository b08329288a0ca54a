"""
Trusted clock: NTP-corrected Unix milliseconds with cached offset.
"""

from .ntp import NtpTimeSource, TimeSource, fetch_network_time_ms
from .trusted import (
    ClockState,
    TrustedClock,
    get_default_clock,
    reset_default_clock,
    set_default_clock,
    system_time_ms,
    time_sync,
    time_sync_async,
)

__all__ = [
    "ClockState",
    "NtpTimeSource",
    "TimeSource",
    "TrustedClock",
    "fetch_network_time_ms",
    "get_default_clock",
    "reset_default_clock",
    "set_default_clock",
    "system_time_ms",
    "time_sync",
    "time_sync_async",
]
