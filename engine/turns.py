"""Turn order and direction handling."""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from .cards import Card, SpecialCard, SpecialValue


class Direction(Enum):
    CLOCKWISE = "clockwise"
    COUNTER_CLOCKWISE = "counter-clockwise"

    def flipped(self) -> "Direction":
        if self is Direction.CLOCKWISE:
            return Direction.COUNTER_CLOCKWISE
        return Direction.CLOCKWISE

    @property
    def step(self) -> int:
        return 1 if self is Direction.CLOCKWISE else -1

    def __str__(self) -> str:
        return self.value


def next_player_index(player_count: int, current_index: int, direction: Direction, skip_next: bool) -> int:
    """Return the seat index of the next acting player."""
    if player_count <= 0:
        raise ValueError("Cannot sequence turns without players.")
    if not 0 <= current_index < player_count:
        raise ValueError(f"Current index {current_index} out of range for {player_count} players.")
    offset = 2 if skip_next else 1
    return (current_index + direction.step * offset) % player_count


def next_player(players: Sequence[str], current_index: int, direction: Direction, skip_next: bool) -> str:
    return players[next_player_index(len(players), current_index, direction, skip_next)]


def reverse_acts_as_skip(card: Card, player_count: int) -> bool:
    """With exactly two players a reverse gives the turn straight back to its player.

    Stepping once after flipping direction would land on the opponent, so the
    caller has to fold this into the skip flag.
    """
    return isinstance(card, SpecialCard) and card.value is SpecialValue.REVERSE and player_count == 2
