"""
Pytest configuration and shared fixtures.
"""

import pytest

from sweeper.board import neighbors
from sweeper.engine import GameState


# ============================================================================
# Board helpers
# ============================================================================

def build_state(mines, difficulty='EASY', lives=3):
    """
    Build a started GameState with mines at exactly the given positions.

    Adjacent counts are computed here so tests control the layout
    instead of relying on the random generator.
    """
    state = GameState(difficulty, lives=lives)
    mines = set(mines)
    assert len(mines) == state.mine_count, "layout must use the preset mine count"

    for r, c in mines:
        state.grid[r][c].is_mine = True
    for r in range(state.rows):
        for c in range(state.cols):
            if (r, c) in mines:
                continue
            state.grid[r][c].adjacent_mine_count = sum(
                1 for nr, nc in neighbors(state.rows, state.cols, r, c)
                if (nr, nc) in mines
            )

    state.first_click_pending = False
    state.started = True
    return state


# Column 4 fully mined, plus the two right-hand corners.
COLUMN_MINES = [(r, 4) for r in range(8)] + [(0, 7), (7, 7)]


class RecordingStatsStore:
    """Stand-in StatsStore that only remembers increments."""

    def __init__(self):
        self.totals = {}

    def increment(self, **deltas):
        for name, delta in deltas.items():
            self.totals[name] = self.totals.get(name, 0) + delta
        return dict(self.totals)


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def column_state():
    """EASY board with a wall of mines down column 4."""
    return build_state(COLUMN_MINES)


@pytest.fixture
def recording_store():
    return RecordingStatsStore()
