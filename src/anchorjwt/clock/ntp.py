"""
NTP time queries with ordered multi-server fallback.

A single query is a blocking UDP round trip, so every query is dispatched to a
``BlockingExecutor`` and bounded by a per-server timeout. Servers are tried in
priority order and the first plausible answer wins; the rest are skipped.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
from typing import Iterable, Protocol

import ntplib

from ..core import diagnostics
from ..core.concurrency import BlockingExecutor, call_blocking, run_blocking
from ..core.errors import NetworkError

_I64_MAX = 2**63 - 1


class TimeSource(Protocol):
    """Blocking single-server time query returning Unix milliseconds."""

    def query_ms(self, server: str, timeout: float) -> int: ...


class NtpTimeSource:
    """``ntplib``-backed SNTP client."""

    def __init__(self, *, version: int = 3, port: int | str = "ntp") -> None:
        self._version = version
        self._port = port
        self._client = ntplib.NTPClient()

    @property
    def version(self) -> int:
        return self._version

    def query_ms(self, server: str, timeout: float) -> int:
        """Return the server transmit timestamp in Unix milliseconds.

        Raises:
            NetworkError: If the server cannot be resolved, does not answer
                within ``timeout`` or sends an invalid packet.
        """
        try:
            stats = self._client.request(
                server, version=self._version, port=self._port, timeout=timeout
            )
        except (ntplib.NTPException, OSError) as e:
            raise NetworkError(
                f"NTP query to {server} failed: {e}",
                component_name="ntp",
                cause=e,
                server=server,
            ) from e
        return int(stats.tx_time * 1000)


def _plausible(millis: int) -> bool:
    return 0 < millis < _I64_MAX


async def fetch_network_time_ms(
    source: TimeSource,
    servers: Iterable[str],
    executor: BlockingExecutor,
    *,
    timeout: float,
) -> int | None:
    """Query ``servers`` in order and return the first valid timestamp.

    Returns None when every server failed, timed out or answered with an
    out-of-range value.
    """
    for server in servers:
        try:
            millis = await run_blocking(
                executor, source.query_ms, server, timeout, timeout=timeout
            )
        except asyncio.TimeoutError:
            diagnostics.debug("clock", "ntp server timed out", server=server)
            continue
        except Exception as e:
            diagnostics.debug(
                "clock", "ntp server failed", server=server, error=type(e).__name__
            )
            continue
        if _plausible(millis):
            return millis
        diagnostics.debug("clock", "ntp server returned invalid time", server=server)
    return None


def fetch_network_time_ms_blocking(
    source: TimeSource,
    servers: Iterable[str],
    executor: BlockingExecutor,
    *,
    timeout: float,
) -> int | None:
    """Synchronous counterpart of ``fetch_network_time_ms``."""
    for server in servers:
        try:
            millis = call_blocking(
                executor, source.query_ms, server, timeout, timeout=timeout
            )
        except concurrent.futures.TimeoutError:
            diagnostics.debug("clock", "ntp server timed out", server=server)
            continue
        except Exception as e:
            diagnostics.debug(
                "clock", "ntp server failed", server=server, error=type(e).__name__
            )
            continue
        if _plausible(millis):
            return millis
        diagnostics.debug("clock", "ntp server returned invalid time", server=server)
    return None
