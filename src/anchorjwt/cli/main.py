"""
Command-line interface for anchorjwt.

    anchorjwt time
    anchorjwt issue --identifier KEY --secret SECRET
    anchorjwt verify TOKEN --secret SECRET
    anchorjwt claims TOKEN

Identifier and secret fall back to ``ANCHORJWT_TOKEN__IDENTIFIER`` and
``ANCHORJWT_TOKEN__SECRET``.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Sequence

from ..clock.trusted import TrustedClock
from ..core.errors import ConfigurationError, DecodeError
from ..core.settings import Settings, load_settings
from ..token.issuer import TokenIssuer, decode_claims

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_USAGE = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="anchorjwt", description="Issue and verify NTP-anchored tokens"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("time", help="Print trusted Unix milliseconds")

    issue = sub.add_parser("issue", help="Print a signed token")
    issue.add_argument("--identifier", help="api_key claim")
    issue.add_argument("--secret", help="Shared HMAC secret")

    verify = sub.add_parser("verify", help="Check a token signature")
    verify.add_argument("token")
    verify.add_argument("--secret", help="Shared HMAC secret")

    claims = sub.add_parser("claims", help="Print decoded token claims")
    claims.add_argument("token")
    return parser


def _resolve_secret(args: argparse.Namespace, settings: Settings) -> str:
    if args.secret:
        return str(args.secret)
    if settings.token.secret is not None:
        return settings.token.secret.get_secret_value()
    raise ConfigurationError("a secret is required (--secret or ANCHORJWT_TOKEN__SECRET)")


async def main(argv: Sequence[str] | None = None) -> int:
    """Run one command and return the process exit code."""
    args = _build_parser().parse_args(argv)
    try:
        settings = load_settings()

        if args.command == "time":
            clock = TrustedClock(settings.clock)
            print(await clock.now_ms_async())
            return EXIT_OK

        if args.command == "claims":
            print(json.dumps(decode_claims(args.token), sort_keys=True))
            return EXIT_OK

        secret = _resolve_secret(args, settings)

        if args.command == "issue":
            identifier = args.identifier or settings.token.identifier
            if not identifier:
                raise ConfigurationError(
                    "an identifier is required "
                    "(--identifier or ANCHORJWT_TOKEN__IDENTIFIER)"
                )
            clock = TrustedClock(settings.clock)
            issuer = await TokenIssuer.create(identifier, secret, clock=clock)
            print(issuer.create_jwt())
            return EXIT_OK

        # Verification never samples the clock
        verifier = TokenIssuer("", secret, timestamp_ms=0)
        ok = verifier.verify_jwt(args.token)
        print("valid" if ok else "invalid")
        return EXIT_OK if ok else EXIT_INVALID
    except DecodeError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_INVALID
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_USAGE


def cli_main(argv: Sequence[str] | None = None) -> int:
    """Console-script entry point."""
    return asyncio.run(main(argv))


if __name__ == "__main__":
    sys.exit(cli_main())
