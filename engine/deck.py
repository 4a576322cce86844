"""Deck creation utilities for UNO."""

from __future__ import annotations

from random import Random
from typing import Dict, List, Optional, Sequence, Tuple

from .cards import Card, Color, NumberCard, SpecialCard, SpecialValue, WildCard, WildValue

DECK_SIZE = 108
HAND_SIZE = 7
WILDS_PER_VALUE = 4


def build_deck() -> List[Card]:
    """Return the ordered 108-card deck."""
    deck: List[Card] = []
    for color in Color:
        deck.append(NumberCard(color, 0))
        for value in range(1, 10):
            deck.append(NumberCard(color, value))
            deck.append(NumberCard(color, value))
        for special in SpecialValue:
            deck.append(SpecialCard(color, special))
            deck.append(SpecialCard(color, special))
    for _ in range(WILDS_PER_VALUE):
        deck.append(WildCard(WildValue.WILD))
        deck.append(WildCard(WildValue.WILD_DRAW_FOUR))
    return deck


def shuffled_deck(seed: Optional[object] = None, *, rng: Optional[Random] = None) -> List[Card]:
    """Return a full deck ordered deterministically by ``seed`` (or ``rng``)."""
    cards = build_deck()
    if rng is None:
        rng = Random(seed)
    rng.shuffle(cards)
    return cards


def deal(
    players: Sequence[str],
    deck: Sequence[Card],
    *,
    hand_size: int = HAND_SIZE,
) -> Tuple[Dict[str, List[Card]], List[Card]]:
    """Deal ``hand_size`` cards to each player round-robin.

    Returns the hands keyed by player id and the undealt remainder, whose last
    element is the top of the draw pile.
    """
    if not players:
        raise ValueError("Cannot deal to an empty table.")
    cards = list(deck)
    needed = hand_size * len(players)
    if len(cards) < needed:
        raise ValueError(f"Deck holds {len(cards)} cards, {needed} required to deal.")

    hands: Dict[str, List[Card]] = {player: [] for player in players}
    for round_index in range(hand_size):
        for seat, player in enumerate(players):
            hands[player].append(cards[round_index * len(players) + seat])
    remainder = cards[needed:]
    remainder.reverse()
    return hands, remainder
