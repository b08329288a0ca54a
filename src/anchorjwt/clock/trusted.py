"""
Network-time-corrected wall clock.

``TrustedClock`` keeps a cached offset between NTP server time and the local
clock. Reads return ``local + offset``; when the last successful sync is older
than the sync interval (or there has never been one) the read first tries to
resynchronize. Failures never reach the caller: a failed sync keeps the
previous offset and schedules a retry after the retry interval, an implausible
offset is discarded, and an unreadable local clock skips syncing entirely.

Concurrent callers share one ``ClockState``. Each field is read and written
atomically on its own; the sync decision itself is unguarded, so two callers
may both resync and the last writer wins.
"""

from __future__ import annotations

import threading
import time
from typing import Callable

from ..core import diagnostics
from ..core.concurrency import BlockingExecutor, get_default_executor
from ..core.settings import ClockSettings, load_settings
from .ntp import (
    NtpTimeSource,
    TimeSource,
    fetch_network_time_ms,
    fetch_network_time_ms_blocking,
)

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1

WallClock = Callable[[], int]


def system_time_ms() -> int:
    """Local Unix time in milliseconds."""
    return time.time_ns() // 1_000_000


def _best_effort_local_ms() -> int:
    try:
        return int(time.time() * 1000)
    except (OSError, OverflowError, ValueError):
        return 0


class ClockState:
    """Offset and last-sync timestamp, each independently atomic."""

    __slots__ = ("_offset_ms", "_last_sync_ms", "_lock")

    def __init__(self) -> None:
        self._offset_ms = 0
        # 0 means never synced
        self._last_sync_ms = 0
        self._lock = threading.Lock()

    @property
    def offset_ms(self) -> int:
        with self._lock:
            return self._offset_ms

    @offset_ms.setter
    def offset_ms(self, value: int) -> None:
        with self._lock:
            self._offset_ms = value

    @property
    def last_sync_ms(self) -> int:
        with self._lock:
            return self._last_sync_ms

    @last_sync_ms.setter
    def last_sync_ms(self, value: int) -> None:
        with self._lock:
            self._last_sync_ms = value

    def reset(self) -> None:
        with self._lock:
            self._offset_ms = 0
            self._last_sync_ms = 0


class TrustedClock:
    """Millisecond clock anchored to NTP servers.

    Args:
        settings: Sync policy; read from the environment when omitted.
        source: Single-server time query, ``NtpTimeSource`` by default.
        executor: Where blocking queries run. Defaults to the shared
            process-wide thread pool, created on first sync.
        wall_clock: Local millisecond clock, ``system_time_ms`` by default.
    """

    def __init__(
        self,
        settings: ClockSettings | None = None,
        *,
        source: TimeSource | None = None,
        executor: BlockingExecutor | None = None,
        wall_clock: WallClock | None = None,
    ) -> None:
        self._settings = settings if settings is not None else load_settings().clock
        self._source = source or NtpTimeSource(version=self._settings.ntp_version)
        self._executor = executor
        self._wall_clock = wall_clock or system_time_ms
        self._state = ClockState()

    @property
    def settings(self) -> ClockSettings:
        return self._settings

    @property
    def offset_ms(self) -> int:
        return self._state.offset_ms

    @property
    def last_sync_ms(self) -> int:
        return self._state.last_sync_ms

    def reset(self) -> None:
        """Forget the cached offset so the next read resynchronizes."""
        self._state.reset()

    def now_ms(self) -> int:
        """Return trusted Unix milliseconds, syncing first if due."""
        now_local = self._read_local()
        if now_local is None:
            return _best_effort_local_ms() + self._state.offset_ms

        if self._needs_sync(now_local):
            fetched = fetch_network_time_ms_blocking(
                self._source,
                self._settings.servers,
                self._get_executor(),
                timeout=self._settings.server_timeout_seconds,
            )
            synced = self._record(now_local, fetched)
            if synced is not None:
                return synced

        return now_local + self._state.offset_ms

    async def now_ms_async(self) -> int:
        """Async ``now_ms``; network queries never block the event loop."""
        now_local = self._read_local()
        if now_local is None:
            return _best_effort_local_ms() + self._state.offset_ms

        if self._needs_sync(now_local):
            fetched = await fetch_network_time_ms(
                self._source,
                self._settings.servers,
                self._get_executor(),
                timeout=self._settings.server_timeout_seconds,
            )
            synced = self._record(now_local, fetched)
            if synced is not None:
                return synced

        return now_local + self._state.offset_ms

    def _read_local(self) -> int | None:
        try:
            millis = int(self._wall_clock())
        except Exception as e:
            diagnostics.warn(
                "clock", "local clock unreadable", error=type(e).__name__
            )
            return None
        if not _I64_MIN <= millis <= _I64_MAX:
            diagnostics.warn("clock", "local clock out of range", value=millis)
            return None
        return millis

    def _needs_sync(self, now_local: int) -> bool:
        last_sync = self._state.last_sync_ms
        return (
            last_sync == 0
            or abs(now_local - last_sync) > self._settings.sync_interval_ms
        )

    def _record(self, now_local: int, fetched: int | None) -> int | None:
        """Update cached state from a sync attempt.

        Returns the network timestamp when it was accepted, else None.
        """
        if fetched is None:
            backoff = now_local - (
                self._settings.sync_interval_ms - self._settings.retry_interval_ms
            )
            self._state.last_sync_ms = backoff
            diagnostics.warn(
                "clock",
                "time sync failed on all servers",
                servers=len(self._settings.servers),
                retry_in_ms=self._settings.retry_interval_ms,
            )
            return None

        offset = fetched - now_local
        if abs(offset) > self._settings.max_offset_ms:
            diagnostics.warn(
                "clock",
                "implausible time offset discarded",
                offset_ms=offset,
                max_offset_ms=self._settings.max_offset_ms,
            )
            return None

        self._state.offset_ms = offset
        self._state.last_sync_ms = now_local
        diagnostics.debug("clock", "time synchronized", offset_ms=offset)
        return fetched

    def _get_executor(self) -> BlockingExecutor:
        if self._executor is None:
            self._executor = get_default_executor(self._settings.executor_max_workers)
        return self._executor


_default_clock: TrustedClock | None = None
_default_lock = threading.Lock()


def get_default_clock() -> TrustedClock:
    """Return the process-wide clock, creating it on first use."""
    global _default_clock
    clock = _default_clock
    if clock is not None:
        return clock
    with _default_lock:
        if _default_clock is None:
            _default_clock = TrustedClock()
        return _default_clock


def set_default_clock(clock: TrustedClock | None) -> None:
    global _default_clock
    with _default_lock:
        _default_clock = clock


def reset_default_clock() -> None:
    set_default_clock(None)


def time_sync() -> int:
    """Trusted Unix milliseconds from the process-wide clock."""
    return get_default_clock().now_ms()


async def time_sync_async() -> int:
    return await get_default_clock().now_ms_async()
