"""
LifeSweeper Stores

This module contains the two process-wide stores of persisted data:

- StatsStore: lifetime game statistics, written after every change
- ProfileStore: the player's display name

Both are constructed once at process start and handed to whoever needs
them. Each loads its record lazily on first access and falls back to
defaults when the record is missing or unreadable.

Author: LifeSweeper Team
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Callable

from django.db import DatabaseError, transaction

from .models import StoredRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameStats:
    """Lifetime counters. All values are non-negative integers."""

    games_played: int = 0
    games_won: int = 0
    correct_flags: int = 0
    bombs_exploded: int = 0

    # Field names as they appear in the persisted record.
    RECORD_KEYS = {
        'games_played': 'gamesPlayed',
        'games_won': 'gamesWon',
        'correct_flags': 'correctFlags',
        'bombs_exploded': 'bombsExploded',
    }

    def __post_init__(self) -> None:
        for name, value in asdict(self).items():
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}.")
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}.")

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def to_record(self) -> dict[str, int]:
        return {self.RECORD_KEYS[name]: value for name, value in asdict(self).items()}

    @classmethod
    def from_record(cls, data: Any) -> "GameStats":
        """
        Build stats from a persisted record.

        Counters missing from the record default to zero.

        Raises:
            ValueError: If the record is not a dict or holds invalid counters.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Stats record must be an object, got {type(data).__name__}.")
        return cls(**{
            name: data.get(record_key, 0)
            for name, record_key in cls.RECORD_KEYS.items()
        })


class StatsStore:
    """
    Lifetime statistics with load-once, save-on-every-change semantics.

    update() REPLACES the given counters; callers pass already
    incremented values. increment() is the read-add-write shortcut.
    Every mutation re-reads the stored row under a row lock inside a
    transaction, and the thread lock covers the cached copy, so several
    stores or processes writing the same record never lose an update.
    """

    record_key = StoredRecord.Key.GAME_STATS

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._stats = GameStats()
        self._loaded = False

    def load(self) -> GameStats:
        """
        (Re)load the totals from storage.

        A missing record yields all-zero stats. A corrupt record or a
        database failure is logged and also yields all-zero stats.
        """
        with self._lock:
            try:
                self._stats = GameStats.from_record(StoredRecord.read(self.record_key))
            except StoredRecord.DoesNotExist:
                self._stats = GameStats()
            except (DatabaseError, ValueError, TypeError) as e:
                logger.warning("Could not load game stats, using defaults: %s", e)
                self._stats = GameStats()
            self._loaded = True
            return self._stats

    @property
    def stats(self) -> GameStats:
        with self._lock:
            if not self._loaded:
                self.load()
            return self._stats

    def update(self, **partial: int) -> GameStats:
        """
        Replace the given counters in the stored totals.

        Counters not mentioned keep the value currently in the database.

        Args:
            **partial: New values for any of games_played, games_won,
                       correct_flags, bombs_exploded.

        Returns:
            The updated totals.

        Raises:
            ValueError: On an unknown field or an invalid value.
        """
        self._check_fields(partial)
        return self._apply(lambda current: replace(current, **partial))

    def increment(self, **deltas: int) -> GameStats:
        """Add the given deltas to the stored totals and save."""
        self._check_fields(deltas)
        return self._apply(lambda current: replace(current, **{
            name: getattr(current, name) + delta
            for name, delta in deltas.items()
        }))

    def reset(self) -> GameStats:
        """Zero every counter and save."""
        new_stats = self._apply(lambda current: GameStats())
        logger.info("Game stats reset")
        return new_stats

    def _apply(self, change: Callable[[GameStats], GameStats]) -> GameStats:
        """
        Read the stored totals, apply change and write the result back.

        The row stays locked until the transaction commits. Writers
        in other processes, such as a second worker or the sweeper_stats
        command, wait for it. If the database is unavailable the
        change is applied to the cached totals only.
        """
        with self._lock:
            try:
                with transaction.atomic():
                    record, _created = (
                        StoredRecord.objects
                        .select_for_update()
                        .get_or_create(key=self.record_key, defaults={'value': {}})
                    )
                    new_stats = change(self._parse(record.value))
                    record.value = new_stats.to_record()
                    record.save(update_fields=['value', 'updated_at'])
            except DatabaseError:
                logger.exception("Could not save game stats")
                new_stats = change(self.stats)

            self._stats = new_stats
            self._loaded = True
            return new_stats

    @staticmethod
    def _parse(value: Any) -> GameStats:
        try:
            return GameStats.from_record(value)
        except (ValueError, TypeError) as e:
            logger.warning("Overwriting unreadable game stats record: %s", e)
            return GameStats()

    @staticmethod
    def _check_fields(values: dict[str, Any]) -> None:
        unknown = set(values) - set(GameStats.field_names())
        if unknown:
            raise ValueError(f"Unknown stats fields: {', '.join(sorted(unknown))}.")


class ProfileStore:
    """The player's display name, persisted across sessions."""

    record_key = StoredRecord.Key.PLAYER_NAME

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._name = ''
        self._loaded = False

    def load(self) -> str:
        """(Re)load the name from storage. Unreadable values become ''."""
        with self._lock:
            try:
                value = StoredRecord.read(self.record_key)
            except StoredRecord.DoesNotExist:
                value = ''
            except DatabaseError as e:
                logger.warning("Could not load player name: %s", e)
                value = ''
            if not isinstance(value, str):
                logger.warning("Ignoring malformed player name record: %r", value)
                value = ''
            self._name = value
            self._loaded = True
            return self._name

    @property
    def name(self) -> str:
        with self._lock:
            if not self._loaded:
                self.load()
            return self._name

    @property
    def has_name(self) -> bool:
        """Whether the name-entry gate has been passed."""
        return bool(self.name)

    def set_name(self, name: str) -> str:
        """
        Store a new player name, overwriting any previous one.

        Raises:
            ValueError: If the name is empty after stripping whitespace.
        """
        name = (name or '').strip()
        if not name:
            raise ValueError("Player name must not be empty.")

        with self._lock:
            self._name = name
            self._loaded = True
            try:
                StoredRecord.write(self.record_key, name)
            except DatabaseError:
                logger.exception("Could not save player name")
            logger.info("Player name set to %r", name)
            return name
