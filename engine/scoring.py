"""Card and match scoring helpers for UNO."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from .cards import Card, NumberCard, SpecialCard, WildCard

SPECIAL_CARD_POINTS = 20
WILD_CARD_POINTS = 50


class ScoringError(ValueError):
    """Raised when a match cannot be scored."""


@dataclass(frozen=True)
class PlayerScore:
    player_id: str
    rank: int
    card_count: int
    hand_points: int
    score: int


@dataclass(frozen=True)
class MatchScoreResult:
    winner_id: str
    winner_score: int
    rankings: Tuple[PlayerScore, ...]

    def for_player(self, player_id: str) -> PlayerScore:
        for entry in self.rankings:
            if entry.player_id == player_id:
                return entry
        raise KeyError(player_id)


def card_score(card: Card) -> int:
    if isinstance(card, NumberCard):
        return card.value
    if isinstance(card, SpecialCard):
        return SPECIAL_CARD_POINTS
    if isinstance(card, WildCard):
        return WILD_CARD_POINTS
    raise ValueError(f"Unknown card variant: {card!r}")


def hand_score(cards: Iterable[Card]) -> int:
    return sum(card_score(card) for card in cards)


def is_special_card(card: Card) -> bool:
    """True for action and wild cards, False only for number cards."""
    if isinstance(card, NumberCard):
        return False
    if isinstance(card, (SpecialCard, WildCard)):
        return True
    raise ValueError(f"Unknown card variant: {card!r}")


def score_match(winner_id: str, hands: Mapping[str, Sequence[Card]]) -> MatchScoreResult:
    """Score a finished match.

    The winner collects the value of every card left in the opponents' hands.
    Rankings put the winner first, then the others by remaining card count;
    ties keep the order of ``hands``.
    """
    if winner_id not in hands:
        raise ScoringError(f"Winner {winner_id!r} is not part of the match.")
    if hands[winner_id]:
        raise ScoringError("The winner must have an empty hand.")

    hand_points: Dict[str, int] = {player: hand_score(cards) for player, cards in hands.items()}
    winner_score = sum(points for player, points in hand_points.items() if player != winner_id)

    seating = list(hands)
    losers = sorted(
        (player for player in seating if player != winner_id),
        key=lambda player: (len(hands[player]), seating.index(player)),
    )
    ordered: List[str] = [winner_id, *losers]

    rankings = tuple(
        PlayerScore(
            player_id=player,
            rank=position + 1,
            card_count=len(hands[player]),
            hand_points=hand_points[player],
            score=winner_score if player == winner_id else 0,
        )
        for position, player in enumerate(ordered)
    )
    return MatchScoreResult(winner_id=winner_id, winner_score=winner_score, rankings=rankings)
