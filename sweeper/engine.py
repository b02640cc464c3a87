"""
LifeSweeper Game Engine

This module contains the core game logic for the Minesweeper gameplay:
the per-game state object, the reveal and flag engines that mutate it,
and the controller that starts games and relays finished moves into
the lifetime statistics.

The engines never touch persistence themselves. Every move returns a
MoveOutcome describing what happened, and the GameController forwards
the counters to the StatsStore.

Author: LifeSweeper Team
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterator, Optional

from .board import BoardGenerator, Cell, DifficultySettings, Grid, get_difficulty, neighbors
from .exceptions import InvalidState, OutOfBounds

if TYPE_CHECKING:
    from .stores import StatsStore

logger = logging.getLogger(__name__)

STARTING_LIVES = 3


class GameStatus:
    """Lifecycle states of a game."""
    NOT_STARTED = 'not_started'
    IN_PROGRESS = 'in_progress'
    WON = 'won'
    LOST = 'lost'


class GameState:
    """
    Everything the engine knows about one game.

    A GameState is created for every new game and every difficulty
    change. It is thrown away on reset rather than cleared.

    Mines are not placed at construction. Until the first reveal the
    grid is blank, and the first reveal generates the real board with
    the clicked cell guaranteed safe.

    Attributes:
        difficulty: Preset token (EASY, MEDIUM or HARD).
        grid: The minefield, indexed grid[row][col].
        remaining_flags: Flags the player may still place, in [0, mine_count].
        lives: Hits the player can still absorb. The game is lost at 0.
        started: Whether the player has started playing.
        over: Whether the game was lost.
        won: Whether the game was won.
        first_click_pending: True until the first reveal places the mines.
    """

    def __init__(
        self,
        difficulty: str = 'EASY',
        lives: int = STARTING_LIVES,
        rng: Optional[random.Random] = None
    ) -> None:
        self.difficulty = difficulty
        self.settings: DifficultySettings = get_difficulty(difficulty)
        self.grid: Grid = BoardGenerator.blank(self.rows, self.cols)
        self.remaining_flags = self.mine_count
        self.lives = lives
        self.started = False
        self.over = False
        self.won = False
        self.first_click_pending = True
        self.rng = rng

    def __repr__(self) -> str:
        return f"<GameState {self.difficulty} {self.status} lives={self.lives}>"

    @property
    def rows(self) -> int:
        return self.settings.rows

    @property
    def cols(self) -> int:
        return self.settings.cols

    @property
    def mine_count(self) -> int:
        return self.settings.mine_count

    @property
    def is_terminal(self) -> bool:
        """Whether the game has been won or lost."""
        return self.over or self.won

    @property
    def status(self) -> str:
        if self.won:
            return GameStatus.WON
        if self.over:
            return GameStatus.LOST
        if self.started:
            return GameStatus.IN_PROGRESS
        return GameStatus.NOT_STARTED

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def cell(self, row: int, col: int) -> Cell:
        """
        Return the cell at (row, col).

        Raises:
            OutOfBounds: If the coordinate is outside the grid.
        """
        if not self.in_bounds(row, col):
            raise OutOfBounds(row, col, self.rows, self.cols)
        return self.grid[row][col]

    def iter_cells(self) -> Iterator[Cell]:
        for row in self.grid:
            yield from row

    def place_mines(self, safe_row: int, safe_col: int) -> None:
        """
        Replace the grid with a freshly generated board.

        No prior cell state survives, so the flag budget is restored
        to the full mine count as well.
        """
        self.grid = BoardGenerator.generate(
            self.rows, self.cols, self.mine_count, (safe_row, safe_col), self.rng
        )
        self.remaining_flags = self.mine_count
        self.first_click_pending = False

    def to_dict(self) -> dict[str, Any]:
        """Serialise the state into JSON-compatible primitives."""
        return {
            "difficulty": self.difficulty,
            "grid": [[cell.to_dict() for cell in row] for row in self.grid],
            "remaining_flags": self.remaining_flags,
            "lives": self.lives,
            "started": self.started,
            "over": self.over,
            "won": self.won,
            "first_click_pending": self.first_click_pending,
        }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        rng: Optional[random.Random] = None
    ) -> "GameState":
        """
        Rebuild a state produced by to_dict().

        Raises:
            InvalidState: If the data is malformed or does not match its
                          difficulty preset.
        """
        try:
            state = cls(data["difficulty"], lives=int(data["lives"]), rng=rng)
            grid = [[Cell.from_dict(cell) for cell in row] for row in data["grid"]]
            state.remaining_flags = int(data["remaining_flags"])
            state.started = bool(data["started"])
            state.over = bool(data["over"])
            state.won = bool(data["won"])
            state.first_click_pending = bool(data["first_click_pending"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidState(f"Malformed game state: {e}") from e

        if len(grid) != state.rows or any(len(row) != state.cols for row in grid):
            raise InvalidState(
                f"Stored grid does not match {state.difficulty} dimensions "
                f"{state.rows}x{state.cols}."
            )
        if not 0 <= state.remaining_flags <= state.mine_count:
            raise InvalidState(
                f"Flag budget {state.remaining_flags} outside [0, {state.mine_count}]."
            )
        if state.lives < 0:
            raise InvalidState(f"Negative lives: {state.lives}.")
        for r, row in enumerate(grid):
            for c, cell in enumerate(row):
                if cell.flagged and cell.revealed:
                    raise InvalidState(f"Cell ({r}, {c}) is both flagged and revealed.")
                if cell.exploded and not (cell.is_mine and cell.revealed):
                    raise InvalidState(f"Cell ({r}, {c}) exploded without being a revealed mine.")
        state.grid = grid
        return state


@dataclass
class MoveOutcome:
    """
    What a single reveal or flag intent did.

    The counter fields are deltas for the lifetime statistics.
    """

    changed: bool = False
    cells_revealed: int = 0
    life_lost: bool = False
    bombs_exploded: int = 0
    correct_flags: int = 0
    games_won: int = 0
    transition: Optional[str] = None

    def stat_deltas(self) -> dict[str, int]:
        """Return the non-zero statistic increments."""
        deltas = {
            'bombs_exploded': self.bombs_exploded,
            'correct_flags': self.correct_flags,
            'games_won': self.games_won,
        }
        return {name: value for name, value in deltas.items() if value}


class RevealEngine:
    """Reveal logic: first-click placement, mine hits, flood fill and win check."""

    @staticmethod
    def reveal(state: GameState, row: int, col: int) -> MoveOutcome:
        """
        Reveal a cell.

        Handles all reveal logic including:
        - First-click mine placement
        - Mine hits (one life lost per hit, game over at zero lives)
        - Flood fill for empty cells (0 adjacent mines)
        - Win condition checking

        Revealing a flagged or revealed cell, or any cell once the game
        is over, does nothing.

        Args:
            state: Game to mutate.
            row: Row index of the cell to reveal.
            col: Column index of the cell to reveal.

        Returns:
            The MoveOutcome of this reveal.

        Raises:
            OutOfBounds: If the coordinate is outside the grid.
        """
        cell = state.cell(row, col)
        outcome = MoveOutcome()

        if state.is_terminal or cell.revealed or cell.flagged:
            return outcome

        if state.first_click_pending:
            state.place_mines(row, col)
            cell = state.grid[row][col]
        state.started = True
        outcome.changed = True

        if cell.is_mine:
            cell.revealed = True
            cell.exploded = True
            state.lives = max(state.lives - 1, 0)
            outcome.cells_revealed = 1
            outcome.life_lost = True
            outcome.bombs_exploded = 1
            logger.info("Mine hit at (%d, %d), %d lives left", row, col, state.lives)

            if state.lives == 0:
                state.over = True
                outcome.correct_flags = RevealEngine.reveal_all(state)
                outcome.transition = GameStatus.LOST
                logger.info("Game lost on %s", state.difficulty)
                return outcome
        else:
            outcome.cells_revealed = RevealEngine.flood_reveal(state, row, col)

        if RevealEngine.check_win(state):
            state.won = True
            outcome.correct_flags = RevealEngine.reveal_all(state)
            outcome.games_won = 1
            outcome.transition = GameStatus.WON
            logger.info("Game won on %s", state.difficulty)

        return outcome

    @staticmethod
    def flood_reveal(state: GameState, row: int, col: int) -> int:
        """
        Reveal (row, col) and, through zero cells, its connected region.

        Uses an explicit stack instead of recursion. A cell with zero
        adjacent mines spreads to all 8 neighbors; numbered cells form
        the fringe and stop the spread. Flagged cells are never revealed.

        Returns:
            Number of cells newly revealed.
        """
        revealed = 0
        stack: list[tuple[int, int]] = [(row, col)]

        while stack:
            r, c = stack.pop()
            cell = state.grid[r][c]

            if cell.revealed or cell.flagged:
                continue

            cell.revealed = True
            revealed += 1

            if cell.adjacent_mine_count == 0 and not cell.is_mine:
                for nr, nc in neighbors(state.rows, state.cols, r, c):
                    neighbor = state.grid[nr][nc]
                    if not neighbor.revealed and not neighbor.flagged:
                        stack.append((nr, nc))

        return revealed

    @staticmethod
    def check_win(state: GameState) -> bool:
        """Win condition: every cell is either a mine or revealed."""
        return all(cell.is_mine or cell.revealed for cell in state.iter_cells())

    @staticmethod
    def reveal_all(state: GameState) -> int:
        """
        Uncover the whole board at the end of a game.

        Flags are audited before they are cleared: the return value is
        the number of flags sitting on mines. Flags on safe cells are
        not penalised.

        Returns:
            Count of correctly flagged mines.
        """
        correct_flags = 0
        for cell in state.iter_cells():
            if cell.flagged and cell.is_mine:
                correct_flags += 1
            cell.revealed = True
            cell.flagged = False
        return correct_flags


class FlagEngine:
    """Flag toggling within the flag budget."""

    @staticmethod
    def toggle_flag(state: GameState, row: int, col: int) -> MoveOutcome:
        """
        Toggle a flag on/off for a cell.

        The budget starts at the mine count. Placing a flag with no
        budget left does nothing; the budget is a progress aid and does
        not stop the player from revealing unflagged mines.

        Raises:
            OutOfBounds: If the coordinate is outside the grid.

        Example:
            >>> state = GameState('EASY')
            >>> FlagEngine.toggle_flag(state, 2, 3).changed
            True
            >>> state.remaining_flags
            9
        """
        cell = state.cell(row, col)
        outcome = MoveOutcome()

        if state.is_terminal or cell.revealed:
            return outcome

        if not cell.flagged and state.remaining_flags > 0:
            cell.flagged = True
            state.remaining_flags -= 1
            outcome.changed = True
        elif cell.flagged:
            cell.flagged = False
            state.remaining_flags = min(state.remaining_flags + 1, state.mine_count)
            outcome.changed = True

        return outcome


class GameController:
    """
    Glue between the caller, the engines and the lifetime statistics.

    The controller owns no game itself; the caller keeps the current
    GameState and hands it in with every intent.
    """

    def __init__(
        self,
        stats_store: "StatsStore",
        starting_lives: int = STARTING_LIVES,
        default_difficulty: str = 'EASY',
        rng: Optional[random.Random] = None
    ) -> None:
        self.stats_store = stats_store
        self.starting_lives = starting_lives
        self.default_difficulty = default_difficulty
        self.rng = rng

    def new_game(self, difficulty: str) -> GameState:
        """Create a fresh, not-yet-started game for a difficulty preset."""
        return GameState(difficulty, lives=self.starting_lives, rng=self.rng)

    def start_new_game(
        self,
        state: Optional[GameState],
        difficulty: Optional[str] = None
    ) -> GameState:
        """
        Handle the "start new game" intent.

        A finished previous game counts towards games played. Starting
        over from a game that never ended does not.

        Args:
            state: The game being replaced, if any.
            difficulty: Preset for the new game. Defaults to the previous
                        game's difficulty, or the default difficulty.

        Returns:
            A fresh GameState marked as started.
        """
        if state is not None and state.is_terminal:
            self.stats_store.increment(games_played=1)

        if difficulty is None:
            difficulty = state.difficulty if state is not None else self.default_difficulty

        fresh = self.new_game(difficulty)
        fresh.started = True
        logger.debug("Started new %s game", difficulty)
        return fresh

    def change_difficulty(self, difficulty: str) -> GameState:
        """
        Replace the current game with a fresh one on another preset.

        Raises:
            ValueError: If the preset token is unknown.
        """
        state = self.new_game(difficulty)
        logger.debug("Difficulty changed to %s", difficulty)
        return state

    def reveal(self, state: GameState, row: int, col: int) -> MoveOutcome:
        outcome = RevealEngine.reveal(state, row, col)
        self._record(outcome)
        return outcome

    def flag(self, state: GameState, row: int, col: int) -> MoveOutcome:
        return FlagEngine.toggle_flag(state, row, col)

    def _record(self, outcome: MoveOutcome) -> None:
        deltas = outcome.stat_deltas()
        if deltas:
            self.stats_store.increment(**deltas)
