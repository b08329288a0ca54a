"""
Basic usage example for anchorjwt.

Issues a token stamped with NTP-corrected time, verifies it, and shows the
claims a remote service would see.
"""

import asyncio
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from anchorjwt import TokenIssuer, TrustedClock, decode_claims
from anchorjwt.core.settings import ClockSettings


async def main() -> None:
    """Demonstrate issuing and verifying a token."""

    # Prefer nearby servers and a short timeout
    clock = TrustedClock(
        ClockSettings(
            servers=["time.cloudflare.com", "pool.ntp.org"],
            server_timeout_seconds=2.0,
        )
    )

    issuer = await TokenIssuer.create("demo-api-key", "demo-secret", clock=clock)
    token = issuer.create_jwt()

    print("token:   ", token)
    print("valid:   ", issuer.verify_jwt(token))
    print("claims:  ", decode_claims(token))
    print("offset:  ", clock.offset_ms, "ms")


if __name__ == "__main__":
    asyncio.run(main())
