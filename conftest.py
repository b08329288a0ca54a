"""
Root pytest configuration.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "critical: Tests that must never fail - core functionality",
    )
    config.addinivalue_line(
        "markers",
        "security: Security-critical tests (signatures, secrets)",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests requiring network access",
    )
    config.addinivalue_line(
        "markers",
        "property: Property-based tests (may be slow)",
    )


@pytest.fixture(autouse=True)
def reset_diagnostics_cache() -> Generator[None, None, None]:
    """Reset the diagnostics module cache before each test.

    The diagnostics module caches the ``internal_logging_enabled`` setting at
    first access; resetting keeps tests from inheriting it.
    """
    import anchorjwt.core.diagnostics as diag

    diag._reset_for_tests()
    yield
    diag._reset_for_tests()


@pytest.fixture(autouse=True)
def reset_default_clock() -> Generator[None, None, None]:
    """Drop the process-wide clock so no test sees another's offset."""
    from anchorjwt.clock.trusted import reset_default_clock as _reset

    _reset()
    yield
    _reset()
