from __future__ import annotations

import base64
import hashlib
import hmac
import json
import threading

import pytest

from anchorjwt.core.errors import DecodeError, DecodeErrorKind
from anchorjwt.token.issuer import TOKEN_HEADER, TokenIssuer, decode_claims

from .fakes import StubClock

TS = 1_700_000_000_123


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer("user-42", "s3cret", clock=StubClock(TS))


def test_construction_samples_clock_exactly_once() -> None:
    clock = StubClock(TS)
    issuer = TokenIssuer("user-42", "s3cret", clock=clock)
    issuer.create_jwt()
    issuer.create_jwt()
    assert clock.reads == 1


def test_pre_sampled_timestamp_skips_clock() -> None:
    clock = StubClock(1)
    issuer = TokenIssuer("id", "k", clock=clock, timestamp_ms=TS)
    assert clock.reads == 0
    assert issuer.timestamp_ms == TS


def test_header_and_payload_layout(issuer: TokenIssuer) -> None:
    assert issuer.header == TOKEN_HEADER == '{"alg":"HS256","sign_type":"SIGN"}'
    assert issuer.payload == (
        f'{{"api_key":"user-42","exp":{TS * 2},"timestamp":{TS}}}'
    )
    assert issuer.exp_ms == TS * 2


@pytest.mark.critical
@pytest.mark.security
def test_token_wire_format(issuer: TokenIssuer) -> None:
    token = issuer.create_jwt()
    header, payload, signature = token.split(".")

    assert header == _b64(TOKEN_HEADER.encode())
    assert payload == _b64(issuer.payload.encode())
    expected = hmac.new(
        b"s3cret", f"{header}.{payload}".encode("ascii"), hashlib.sha256
    ).digest()
    assert signature == _b64(expected)
    assert "=" not in token


def test_create_jwt_is_deterministic(issuer: TokenIssuer) -> None:
    assert issuer.create_jwt() == issuer.create_jwt()


@pytest.mark.security
def test_round_trip_verifies(issuer: TokenIssuer) -> None:
    assert issuer.verify_jwt(issuer.create_jwt()) is True


def test_surrounding_whitespace_is_ignored(issuer: TokenIssuer) -> None:
    assert issuer.verify_jwt(f"  {issuer.create_jwt()}\n") is True


@pytest.mark.security
@pytest.mark.parametrize(
    "mangle",
    [
        lambda t: ".".join(t.split(".")[:2]),
        lambda t: t + ".extra",
        lambda t: t[:-1] + ("A" if t[-1] != "A" else "B"),
        lambda t: "",
        lambda t: "...",
        lambda t: t[:-1] + "é",
        lambda t: "a.b.\ud800",
        lambda t: "\ud800.b.c",
        lambda t: t.rsplit(".", 1)[0] + ".\udcff",
    ],
    ids=[
        "two-segments",
        "four-segments",
        "altered-signature",
        "empty",
        "dots",
        "non-ascii",
        "surrogate-signature",
        "surrogate-header",
        "surrogate-escaped-byte",
    ],
)
def test_malformed_or_altered_tokens_fail(issuer: TokenIssuer, mangle) -> None:
    assert issuer.verify_jwt(mangle(issuer.create_jwt())) is False


@pytest.mark.security
def test_token_from_other_secret_fails(issuer: TokenIssuer) -> None:
    other = TokenIssuer("user-42", "different", timestamp_ms=TS)
    assert issuer.verify_jwt(other.create_jwt()) is False


@pytest.mark.security
def test_tampered_payload_fails(issuer: TokenIssuer) -> None:
    header, _, signature = issuer.create_jwt().split(".")
    forged = _b64(b'{"api_key":"admin","exp":1,"timestamp":1}')
    assert issuer.verify_jwt(f"{header}.{forged}.{signature}") is False


def test_verification_uses_segments_as_received() -> None:
    verifier = TokenIssuer("ignored", b"k", timestamp_ms=0)
    to_sign = "not-base64!.segments"
    signature = _b64(hmac.new(b"k", to_sign.encode(), hashlib.sha256).digest())
    assert verifier.verify_jwt(f"{to_sign}.{signature}") is True


def test_bytes_and_str_secrets_are_equivalent() -> None:
    a = TokenIssuer("id", "kéy", timestamp_ms=TS)
    b = TokenIssuer("id", "kéy".encode("utf-8"), timestamp_ms=TS)
    assert a.create_jwt() == b.create_jwt()


def test_non_bytes_secret_is_rejected() -> None:
    with pytest.raises(TypeError, match="secret must be str or bytes"):
        TokenIssuer("id", 5, timestamp_ms=TS)  # type: ignore[arg-type]


def test_identifier_is_json_escaped() -> None:
    issuer = TokenIssuer('we"ird\\id', "k", timestamp_ms=TS)
    assert json.loads(issuer.payload)["api_key"] == 'we"ird\\id'


def test_concurrent_use_is_consistent(issuer: TokenIssuer) -> None:
    expected = issuer.create_jwt()
    results: list[bool] = []

    def worker() -> None:
        for _ in range(20):
            results.append(issuer.verify_jwt(issuer.create_jwt()))
            results.append(issuer.create_jwt() == expected)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert len(results) == 160
    assert all(results)


async def test_async_create_samples_async_clock() -> None:
    clock = StubClock(TS)
    issuer = await TokenIssuer.create("user-42", "s3cret", clock=clock)
    assert clock.reads == 1
    assert issuer.timestamp_ms == TS


def test_default_clock_is_used_when_none_given(monkeypatch) -> None:
    from anchorjwt.clock import trusted

    clock = StubClock(TS)
    monkeypatch.setattr(trusted, "_default_clock", clock)
    assert TokenIssuer("id", "k").timestamp_ms == TS


def test_decode_claims(issuer: TokenIssuer) -> None:
    claims = decode_claims(issuer.create_jwt())
    assert claims == {"api_key": "user-42", "exp": TS * 2, "timestamp": TS}


def test_decode_claims_rejects_wrong_segment_count() -> None:
    with pytest.raises(DecodeError) as info:
        decode_claims("a.b")
    assert info.value.kind is DecodeErrorKind.INVALID_PAYLOAD


def test_decode_claims_rejects_bad_base64() -> None:
    with pytest.raises(DecodeError) as info:
        decode_claims("a.b+c.d")
    assert info.value.kind is DecodeErrorKind.INVALID_CHARACTER


@pytest.mark.parametrize("payload", [b"not json", b"[1, 2]", b"\xff\xfe"])
def test_decode_claims_rejects_non_object_payload(payload: bytes) -> None:
    with pytest.raises(DecodeError) as info:
        decode_claims(f"h.{_b64(payload)}.s")
    assert info.value.kind is DecodeErrorKind.INVALID_PAYLOAD
