from __future__ import annotations

import socket
from types import SimpleNamespace

import ntplib
import pytest

from anchorjwt.clock.ntp import NtpTimeSource, fetch_network_time_ms
from anchorjwt.core.errors import ErrorCategory, NetworkError

from .fakes import InlineExecutor, ScriptedSource


def test_query_converts_transmit_time_to_millis(monkeypatch) -> None:
    seen: dict[str, object] = {}

    def fake_request(self, host, version=2, port="ntp", timeout=5):
        seen.update(host=host, version=version, port=port, timeout=timeout)
        return SimpleNamespace(tx_time=1_700_000_000.5)

    monkeypatch.setattr(ntplib.NTPClient, "request", fake_request)

    source = NtpTimeSource()
    assert source.query_ms("time.example", 3.0) == 1_700_000_000_500
    assert seen == {"host": "time.example", "version": 3, "port": "ntp", "timeout": 3.0}


@pytest.mark.parametrize(
    "exc",
    [ntplib.NTPException("no response"), socket.gaierror("unknown host")],
)
def test_query_failures_become_network_errors(monkeypatch, exc) -> None:
    def fake_request(self, host, version=2, port="ntp", timeout=5):
        raise exc

    monkeypatch.setattr(ntplib.NTPClient, "request", fake_request)

    with pytest.raises(NetworkError) as info:
        NtpTimeSource(version=4).query_ms("time.example", 1.0)
    assert info.value.__cause__ is exc
    assert info.value.context.category is ErrorCategory.NETWORK
    assert info.value.context.metadata["server"] == "time.example"


async def test_fetch_stops_at_first_success() -> None:
    source = ScriptedSource({"a": NetworkError("down"), "b": 123, "c": 456})

    result = await fetch_network_time_ms(
        source, ["a", "b", "c"], InlineExecutor(), timeout=1.0
    )

    assert result == 123
    assert source.calls == ["a", "b"]


async def test_fetch_returns_none_when_exhausted() -> None:
    source = ScriptedSource({"b": -5})

    result = await fetch_network_time_ms(
        source, ["a", "b"], InlineExecutor(), timeout=1.0
    )

    assert result is None
    assert source.calls == ["a", "b"]
