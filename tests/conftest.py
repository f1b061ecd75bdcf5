"""
Pytest configuration and shared fixtures.
"""
import random

import matplotlib
import pytest

matplotlib.use("Agg")

from autosweeper import BoardEngine, CellState


class FakeClock:
    """Manually advanced timestamp source."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def open_cells(engine: BoardEngine, coords) -> None:
    """Force cells to the revealed state without flooding, to stage solver positions."""
    for r, c in coords:
        engine.board[r][c].state = CellState.REVEALED


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def empty_engine(clock) -> BoardEngine:
    """A 5x5 board with no mines."""
    return BoardEngine(5, 5, 0, clock=clock)


@pytest.fixture
def corner_mine_engine(clock) -> BoardEngine:
    """A 3x3 board with a single mine at (0, 0)."""
    return BoardEngine.from_layout(3, 3, [(0, 0)], clock=clock)
