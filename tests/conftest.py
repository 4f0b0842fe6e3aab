"""Shared test fixtures."""

import pytest

from picklejar import DumpPolicy, PickleJar


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def monotonic(self) -> float:
        return self.now

    def time(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "test.db")


@pytest.fixture
def jar(db_path):
    return PickleJar(db_path, DumpPolicy.auto())


@pytest.fixture
def broken_path(tmp_path):
    """A path whose parent directory does not exist, so every dump fails."""
    return str(tmp_path / "missing" / "test.db")
