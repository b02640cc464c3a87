"""
LifeSweeper Exceptions

Errors raised by the engine when it is driven through its library API
with inputs a constrained UI could never produce.

Author: LifeSweeper Team
"""

from __future__ import annotations


class SweeperError(Exception):
    """Base class for all engine errors."""


class OutOfBounds(SweeperError, IndexError):
    """Raised when a coordinate lies outside the grid."""

    def __init__(self, row: int, col: int, rows: int, cols: int) -> None:
        self.row = row
        self.col = col
        self.rows = rows
        self.cols = cols
        super().__init__(
            f"Coordinates ({row}, {col}) out of bounds. Board is {rows}x{cols}."
        )


class InvalidState(SweeperError):
    """Raised when a game state is malformed or cannot accept an intent."""
