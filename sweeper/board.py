"""
LifeSweeper Board Generation

This module contains the minefield data model and the board generator.
A board is a list of rows, each row a list of Cell objects, indexed
as grid[row][col].

Author: LifeSweeper Team
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from .exceptions import OutOfBounds


# Directions for adjacent cells (8 neighbors)
DIRECTIONS: list[tuple[int, int]] = [
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
]


@dataclass
class Cell:
    """
    A single square of the minefield.

    Attributes:
        is_mine: Whether the cell holds a mine. Fixed at generation.
        adjacent_mine_count: Mines among the 8 neighbors (0-8). Fixed at
                             generation; always 0 for mine cells.
        revealed: Whether the cell has been uncovered. Never goes back to False.
        flagged: Whether the player flagged the cell. Only while unrevealed.
        exploded: True only on a mine that cost the player a life.
    """

    is_mine: bool = False
    adjacent_mine_count: int = 0
    revealed: bool = False
    flagged: bool = False
    exploded: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_mine": self.is_mine,
            "adjacent_mine_count": self.adjacent_mine_count,
            "revealed": self.revealed,
            "flagged": self.flagged,
            "exploded": self.exploded,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Cell":
        return cls(
            is_mine=bool(data["is_mine"]),
            adjacent_mine_count=int(data["adjacent_mine_count"]),
            revealed=bool(data["revealed"]),
            flagged=bool(data["flagged"]),
            exploded=bool(data["exploded"]),
        )


Grid = list[list[Cell]]


@dataclass(frozen=True)
class DifficultySettings:
    """Board dimensions and mine total for one difficulty preset."""

    rows: int
    cols: int
    mine_count: int

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError("Board must have at least one row and one column.")
        if not 0 <= self.mine_count < self.rows * self.cols:
            raise ValueError(
                f"mine_count must be in [0, {self.rows * self.cols - 1}], "
                f"got {self.mine_count}."
            )


DIFFICULTY: dict[str, DifficultySettings] = {
    "EASY": DifficultySettings(rows=8, cols=8, mine_count=10),
    "MEDIUM": DifficultySettings(rows=16, cols=16, mine_count=40),
    "HARD": DifficultySettings(rows=16, cols=30, mine_count=99),
}


def get_difficulty(level: str) -> DifficultySettings:
    """
    Look up a difficulty preset by its token.

    Raises:
        ValueError: If the token is not one of EASY, MEDIUM or HARD.
    """
    try:
        return DIFFICULTY[level]
    except KeyError:
        raise ValueError(
            f"Unknown difficulty '{level}'. Choose one of: {', '.join(DIFFICULTY)}."
        ) from None


def neighbors(rows: int, cols: int, row: int, col: int) -> Iterator[tuple[int, int]]:
    """Yield the in-bounds coordinates around (row, col)."""
    for dr, dc in DIRECTIONS:
        nr, nc = row + dr, col + dc
        if 0 <= nr < rows and 0 <= nc < cols:
            yield nr, nc


class BoardGenerator:
    """
    Builds minefields.

    Mines are placed by rejection sampling: random (row, col) pairs are
    drawn until the requested number of distinct, non-safe cells is mined.
    Mine counts are always small relative to the board, so this terminates
    quickly in practice.
    """

    @staticmethod
    def blank(rows: int, cols: int) -> Grid:
        """Return a mine-free grid of fresh cells."""
        return [[Cell() for _ in range(cols)] for _ in range(rows)]

    @staticmethod
    def generate(
        rows: int,
        cols: int,
        mine_count: int,
        safe_cell: Optional[tuple[int, int]] = None,
        rng: Optional[random.Random] = None
    ) -> Grid:
        """
        Generate a board with mines placed and adjacent counts computed.

        Args:
            rows: Number of rows in the grid.
            cols: Number of columns in the grid.
            mine_count: Number of mines to place.
            safe_cell: Optional (row, col) that must not receive a mine.
            rng: Random source. Defaults to a freshly seeded generator.

        Returns:
            A grid where every cell is unrevealed, unflagged and unexploded.

        Raises:
            ValueError: If mine_count is outside [0, rows*cols - 1].
            OutOfBounds: If safe_cell lies outside the grid.

        Example:
            >>> grid = BoardGenerator.generate(8, 8, 10, (0, 0), random.Random(1))
            >>> grid[0][0].is_mine
            False
        """
        if rows <= 0 or cols <= 0:
            raise ValueError("Board must have at least one row and one column.")
        if not 0 <= mine_count < rows * cols:
            raise ValueError(
                f"Cannot place {mine_count} mines on a {rows}x{cols} board."
            )
        if safe_cell is not None:
            safe_row, safe_col = safe_cell
            if not (0 <= safe_row < rows and 0 <= safe_col < cols):
                raise OutOfBounds(safe_row, safe_col, rows, cols)

        rng = rng or random.Random()
        grid = BoardGenerator.blank(rows, cols)

        mines_placed = 0
        while mines_placed < mine_count:
            row = rng.randrange(rows)
            col = rng.randrange(cols)
            if grid[row][col].is_mine or (row, col) == safe_cell:
                continue
            grid[row][col].is_mine = True
            mines_placed += 1

        for r in range(rows):
            for c in range(cols):
                if grid[r][c].is_mine:
                    continue
                grid[r][c].adjacent_mine_count = sum(
                    1 for nr, nc in neighbors(rows, cols, r, c)
                    if grid[nr][nc].is_mine
                )

        return grid
