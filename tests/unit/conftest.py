from __future__ import annotations

import pytest

from .fakes import InlineExecutor, ManualWallClock


@pytest.fixture
def inline_executor() -> InlineExecutor:
    return InlineExecutor()


@pytest.fixture
def wall() -> ManualWallClock:
    return ManualWallClock(1_700_000_000_000)
