"""
LifeSweeper API Serializers

This module contains Django REST Framework serializers for the game API.
Serializers handle validation of incoming intents and sanitization of
outgoing game state so that mine positions stay hidden while a game is
running.

Author: LifeSweeper Team
"""

from __future__ import annotations

from typing import Any

from rest_framework import serializers

from .board import DIFFICULTY, Cell
from .engine import GameState

DIFFICULTY_CHOICES = [(level, level.title()) for level in DIFFICULTY]


class GameActionSerializer(serializers.Serializer):
    """
    Serializer for validating game action inputs.

    Fields:
        row: Row index of the target cell (0-indexed).
        col: Column index of the target cell (0-indexed).
        action: The type of action to perform.

    Bounds against the board dimensions are checked by the engine,
    which knows the size of the active grid.
    """

    ACTION_CHOICES = [
        ('reveal', 'Reveal cell'),
        ('flag', 'Toggle flag'),
    ]

    row = serializers.IntegerField(
        min_value=0,
        help_text="Row index of the target cell (0-indexed)."
    )
    col = serializers.IntegerField(
        min_value=0,
        help_text="Column index of the target cell (0-indexed)."
    )
    action = serializers.ChoiceField(
        choices=ACTION_CHOICES,
        help_text="The type of action to perform on the cell."
    )


class DifficultySerializer(serializers.Serializer):
    """Serializer for the difficulty change intent."""

    difficulty = serializers.ChoiceField(
        choices=DIFFICULTY_CHOICES,
        help_text="Difficulty preset: EASY, MEDIUM or HARD."
    )


class StartGameSerializer(serializers.Serializer):
    """
    Serializer for start game request.

    The difficulty is optional; without it the new game keeps the
    difficulty of the current one.
    """

    difficulty = serializers.ChoiceField(
        choices=DIFFICULTY_CHOICES,
        required=False,
        help_text="Difficulty preset for the new game."
    )


class PlayerNameSerializer(serializers.Serializer):
    """Serializer for the name-entry gate."""

    name = serializers.CharField(
        max_length=64,
        allow_blank=False,
        trim_whitespace=True,
        help_text="Display name of the player."
    )


class GameStatsSerializer(serializers.Serializer):
    """Read-only view of the lifetime statistics."""

    games_played = serializers.IntegerField(read_only=True)
    games_won = serializers.IntegerField(read_only=True)
    correct_flags = serializers.IntegerField(read_only=True)
    bombs_exploded = serializers.IntegerField(read_only=True)


def render_cell(cell: Cell, show_mines: bool) -> str | int:
    """
    Describe one cell for the render layer.

    Cell states:
        - "hidden": Unrevealed cell
        - "flagged": Cell with a player-placed flag
        - "exploded": A mine that cost a life
        - "mine": Revealed mine (or any mine once show_mines is set)
        - 0-8: Number of adjacent mines (revealed safe cell)
    """
    if cell.revealed:
        if cell.exploded:
            return "exploded"
        if cell.is_mine:
            return "mine"
        return cell.adjacent_mine_count
    if cell.flagged:
        return "flagged"
    if show_mines and cell.is_mine:
        return "mine"
    return "hidden"


class GameStateSerializer(serializers.Serializer):
    """
    Serializer for outputting game state.

    Provides a sanitized view of the game, hiding unrevealed mines
    until the game has ended.
    """

    difficulty = serializers.CharField(read_only=True)
    rows = serializers.IntegerField(read_only=True)
    cols = serializers.IntegerField(read_only=True)
    mine_count = serializers.IntegerField(read_only=True)
    remaining_flags = serializers.IntegerField(read_only=True)
    lives = serializers.IntegerField(read_only=True)
    status = serializers.CharField(read_only=True)
    started = serializers.BooleanField(read_only=True)
    over = serializers.BooleanField(read_only=True)
    won = serializers.BooleanField(read_only=True)
    cells = serializers.SerializerMethodField(
        help_text="Sanitized board with unrevealed mines hidden."
    )

    def get_cells(self, obj: GameState) -> list[list[Any]]:
        show_mines = obj.is_terminal
        return [
            [render_cell(cell, show_mines) for cell in row]
            for row in obj.grid
        ]
