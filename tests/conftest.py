"""
Shared pytest fixtures for the TEMPEX test suite.

Provides a fixed reference instant, a matching frozen clock, event
factories relative to that instant, and temporary file paths used
across unit and integration tests.
"""

from pathlib import Path
from typing import Callable, List

import pytest

from tempex.core.duration import HOUR
from tempex.core.event import Event

# 2024-03-01T12:00:00Z
NOW = 1_709_294_400_000_000_000


@pytest.fixture
def now() -> int:
    """Fixed reference instant in epoch nanoseconds."""
    return NOW


@pytest.fixture
def clock(now: int) -> Callable[[], int]:
    """A clock frozen at the reference instant."""
    return lambda: now


@pytest.fixture
def at_hours(now: int) -> Callable[[str, float], Event]:
    """Factory: event named ``name`` occurring ``hours`` from the reference instant."""

    def _make(name: str, hours: float) -> Event:
        return Event(name, now + int(hours * HOUR))

    return _make


@pytest.fixture
def sequence(now: int) -> Callable[..., List[Event]]:
    """Factory: events with the given names, one second apart, ending before now."""

    def _make(*names: str) -> List[Event]:
        start = now - len(names) * 1_000_000_000
        return [Event(n, start + i * 1_000_000_000) for i, n in enumerate(names)]

    return _make


@pytest.fixture
def tmp_trace_file(tmp_path: Path) -> Path:
    """Path for a temporary trace CSV file."""
    return tmp_path / "trace.csv"


@pytest.fixture
def tmp_expression_file(tmp_path: Path) -> Path:
    """Path for a temporary expression file."""
    return tmp_path / "pattern.expr"


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def traces_dir(fixtures_dir: Path) -> Path:
    """Path to the test trace fixtures directory."""
    return fixtures_dir / "traces"


@pytest.fixture
def expressions_dir(fixtures_dir: Path) -> Path:
    """Path to the test expression fixtures directory."""
    return fixtures_dir / "expressions"
