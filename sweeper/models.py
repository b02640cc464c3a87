"""
LifeSweeper Models

This module contains the database model backing the persisted records
of the game. Each record is a schema-free JSON blob stored under a
well-known key:

- playerName: the player's display name (a string)
- gameStats: lifetime counters {games_played, games_won, correct_flags,
  bombs_exploded}

Author: LifeSweeper Team
"""

from __future__ import annotations

from typing import Any

from django.db import models
from django.utils.translation import gettext_lazy as _


class StoredRecord(models.Model):
    """
    A single named JSON blob.

    Attributes:
        key: Record name, unique across the table.
        value: The JSON payload. Its shape is owned by whichever store
               reads and writes the key.
        updated_at: Timestamp of the last write.
    """

    class Key(models.TextChoices):
        """Record names written by the stores."""
        PLAYER_NAME = 'playerName', _('Player name')
        GAME_STATS = 'gameStats', _('Game statistics')

    key = models.CharField(
        max_length=64,
        unique=True,
        help_text=_("Name of the persisted record.")
    )

    value = models.JSONField(
        default=dict,
        blank=True,
        help_text=_("JSON payload of the record.")
    )

    updated_at = models.DateTimeField(
        auto_now=True,
        help_text=_("Timestamp when the record was last written.")
    )

    class Meta:
        verbose_name = _("Stored record")
        verbose_name_plural = _("Stored records")
        ordering = ['key']

    def __str__(self) -> str:
        """Return string representation of the record."""
        return self.key

    @classmethod
    def read(cls, key: str) -> Any:
        """
        Return the payload stored under key.

        Raises:
            StoredRecord.DoesNotExist: If nothing was written under key yet.
        """
        return cls.objects.get(key=key).value

    @classmethod
    def write(cls, key: str, value: Any) -> "StoredRecord":
        """Create or overwrite the record stored under key."""
        record, _created = cls.objects.update_or_create(
            key=key,
            defaults={'value': value},
        )
        return record
