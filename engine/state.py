"""Match turn state and action handling for UNO."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from random import Random
from typing import Dict, List, Optional, Sequence

from .cards import Card, Color, WildCard, card_label
from .errors import ErrorCode, GameStateError, ResourceExhausted, RuleViolation, ValidationFailure
from .house_rules import HouseRules
from .mechanics import active_color, apply_effect, is_playable, playable_indices, wild_draw_four_allowed
from .scoring import MatchScoreResult, is_special_card, score_match
from .turns import Direction, next_player_index, reverse_acts_as_skip

MAX_DRAW_TO_MATCH_ATTEMPTS = 50


class MatchStatus(Enum):
    WAITING = "waiting"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    def __str__(self) -> str:
        return self.value


@dataclass
class PlayerStats:
    cards_played: int = 0
    cards_drawn: int = 0
    turns_played: int = 0
    special_cards_played: int = 0


@dataclass
class PlayResult:
    card: Card
    next_player: Optional[str]
    winner: Optional[str] = None


@dataclass
class DrawResult:
    drawn: List[Card]
    next_player: str
    turn_passed: bool


@dataclass
class MatchState:
    players: List[str]
    hands: Dict[str, List[Card]]
    discard_pile: List[Card]
    draw_pile: List[Card]
    house_rules: HouseRules = field(default_factory=HouseRules)
    current_index: int = 0
    direction: Direction = Direction.CLOCKWISE
    must_draw: int = 0
    current_color: Optional[Color] = None
    status: MatchStatus = MatchStatus.IN_PROGRESS
    winner: Optional[str] = None
    rng: Random = field(default_factory=Random, repr=False)
    stats: Dict[str, PlayerStats] = field(default_factory=dict)
    has_called_uno: Dict[str, bool] = field(default_factory=dict)
    must_call_uno: Dict[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if len(self.players) < 2:
            raise ValueError("A match needs at least two players.")
        if len(set(self.players)) != len(self.players):
            raise ValueError("Player identifiers must be unique.")
        if set(self.hands) != set(self.players):
            raise ValueError("Every player needs exactly one hand.")
        if not self.discard_pile:
            raise ValueError("The discard pile must hold at least the starting card.")
        if not 0 <= self.current_index < len(self.players):
            raise ValueError(f"Current index {self.current_index} out of range.")
        if self.must_draw < 0:
            raise ValueError("Forced-draw count cannot be negative.")
        self.players = list(self.players)
        self.hands = {player: list(self.hands[player]) for player in self.players}
        self.discard_pile = list(self.discard_pile)
        self.draw_pile = list(self.draw_pile)
        for player in self.players:
            self.stats.setdefault(player, PlayerStats())
            self.has_called_uno.setdefault(player, False)
            self.must_call_uno.setdefault(player, False)

    # Accessors ---------------------------------------------------------

    @property
    def top_card(self) -> Card:
        return self.discard_pile[-1]

    @property
    def current_player_id(self) -> Optional[str]:
        if self.status is not MatchStatus.IN_PROGRESS:
            return None
        return self.players[self.current_index]

    def active_color(self) -> Optional[Color]:
        return active_color(self.top_card, self.current_color)

    def playable_indices(self, player_id: str) -> List[int]:
        if self.current_player_id != player_id:
            return []
        return playable_indices(self.hand_of(player_id), self.top_card, self.current_color, self.must_draw, self.house_rules)

    def hand_of(self, player_id: str) -> List[Card]:
        try:
            return self.hands[player_id]
        except KeyError:
            raise GameStateError(ErrorCode.NOT_IN_GAME, f"Player {player_id} is not in this match.") from None

    def final_scores(self) -> MatchScoreResult:
        if self.status is not MatchStatus.COMPLETED or self.winner is None:
            raise GameStateError(ErrorCode.GAME_NOT_IN_PROGRESS, "Match has not finished.")
        return score_match(self.winner, self.hands)

    # Actions -----------------------------------------------------------

    def play_card(self, player_id: str, card_index: int, chosen_color: Optional[Color] = None) -> PlayResult:
        self._ensure_turn(player_id)
        hand = self.hands[player_id]
        if not 0 <= card_index < len(hand):
            raise ValidationFailure(ErrorCode.INVALID_CARD_INDEX, "Invalid card index.", {"cardIndex": card_index})

        card = hand[card_index]
        if isinstance(card, WildCard):
            if chosen_color is None:
                raise ValidationFailure(ErrorCode.WILD_COLOR_REQUIRED, "Wild card requires a chosen color.")
            if not isinstance(chosen_color, Color):
                raise ValidationFailure(ErrorCode.INVALID_COLOR, f"Unknown color {chosen_color!r}.")

        if not is_playable(card, self.top_card, self.current_color, self.must_draw, self.house_rules):
            if self.must_draw > 0:
                raise RuleViolation(
                    ErrorCode.MUST_DRAW_CARDS,
                    f"You must draw {self.must_draw} cards.",
                    {"mustDraw": self.must_draw},
                )
            raise RuleViolation(
                ErrorCode.CARD_NOT_PLAYABLE,
                "Card cannot be played.",
                {"card": card_label(card), "topCard": card_label(self.top_card)},
            )
        if not wild_draw_four_allowed(hand, card_index, self.top_card, self.current_color, self.must_draw):
            raise RuleViolation(
                ErrorCode.ILLEGAL_WILD_DRAW_FOUR,
                "Wild Draw Four can only be played when you have no card of the active color.",
            )

        effect = apply_effect(card, self.direction, self.must_draw)
        skip_next = effect.skip_next or reverse_acts_as_skip(card, len(self.players))

        hand.pop(card_index)
        self.discard_pile.append(card)
        self.direction = effect.direction
        self.must_draw = effect.must_draw
        self.current_color = chosen_color if isinstance(card, WildCard) else None

        stats = self.stats[player_id]
        stats.cards_played += 1
        stats.turns_played += 1
        if is_special_card(card):
            stats.special_cards_played += 1
        self.has_called_uno[player_id] = False
        self.must_call_uno[player_id] = len(hand) == 1

        if not hand:
            self.status = MatchStatus.COMPLETED
            self.winner = player_id
            return PlayResult(card=card, next_player=None, winner=player_id)

        self.current_index = next_player_index(len(self.players), self.current_index, self.direction, skip_next)
        return PlayResult(card=card, next_player=self.players[self.current_index])

    def draw_cards(self, player_id: str, count: int = 1) -> DrawResult:
        self._ensure_turn(player_id)
        if count < 1:
            raise ValidationFailure(ErrorCode.INVALID_DRAW_COUNT, "Draw count must be at least 1.", {"count": count})

        top_card = self.top_card
        penalty = self.must_draw > 0
        draw_to_match = not penalty and self.house_rules.draw_to_match

        if penalty:
            drawn = self._take_from_pile(self.must_draw)
        elif draw_to_match:
            drawn = []
            while len(drawn) < MAX_DRAW_TO_MATCH_ATTEMPTS and self._available_cards() > 0:
                card = self._take_from_pile(1)[0]
                drawn.append(card)
                if is_playable(card, top_card, self.current_color, 0, self.house_rules):
                    break
            if not drawn:
                raise ResourceExhausted(ErrorCode.DECK_EXHAUSTED, "Not enough cards in deck to draw.")
        else:
            drawn = self._take_from_pile(count)

        self.hands[player_id].extend(drawn)
        self.has_called_uno[player_id] = False
        self.must_call_uno[player_id] = False
        stats = self.stats[player_id]
        stats.cards_drawn += len(drawn)

        if penalty:
            turn_passed = True
        elif draw_to_match:
            turn_passed = False
        else:
            turn_passed = not any(
                is_playable(card, top_card, self.current_color, 0, self.house_rules) for card in drawn
            )

        self.must_draw = 0
        if penalty:
            stats.turns_played += 1
        if turn_passed:
            self.current_index = next_player_index(len(self.players), self.current_index, self.direction, False)
        return DrawResult(drawn=drawn, next_player=self.players[self.current_index], turn_passed=turn_passed)

    def pass_turn(self, player_id: str) -> str:
        self._ensure_turn(player_id)
        if self.must_draw > 0:
            raise RuleViolation(
                ErrorCode.MUST_DRAW_CARDS,
                "You must draw cards before passing.",
                {"mustDraw": self.must_draw},
            )
        self.stats[player_id].turns_played += 1
        self.has_called_uno[player_id] = False
        self.must_call_uno[player_id] = False
        self.current_index = next_player_index(len(self.players), self.current_index, self.direction, False)
        return self.players[self.current_index]

    def call_uno(self, player_id: str) -> None:
        self._ensure_in_progress()
        hand = self.hand_of(player_id)
        if len(hand) != 1:
            raise RuleViolation(
                ErrorCode.UNO_NOT_ALLOWED,
                "UNO can only be called with exactly one card left.",
                {"cardCount": len(hand)},
            )
        self.has_called_uno[player_id] = True
        self.must_call_uno[player_id] = False

    # Helpers -----------------------------------------------------------

    def _ensure_in_progress(self) -> None:
        if self.status is not MatchStatus.IN_PROGRESS:
            raise GameStateError(ErrorCode.GAME_NOT_IN_PROGRESS, "Match is not in progress.")

    def _ensure_turn(self, player_id: str) -> None:
        self._ensure_in_progress()
        if player_id not in self.hands:
            raise GameStateError(ErrorCode.NOT_IN_GAME, f"Player {player_id} is not in this match.")
        if self.current_player_id != player_id:
            raise RuleViolation(ErrorCode.NOT_YOUR_TURN, "Not your turn.")

    def _available_cards(self) -> int:
        return len(self.draw_pile) + len(self.discard_pile) - 1

    def _take_from_pile(self, count: int) -> List[Card]:
        """Pop ``count`` cards, recycling the discard pile below its top card if needed."""
        if count > self._available_cards():
            raise ResourceExhausted(
                ErrorCode.DECK_EXHAUSTED,
                "Not enough cards in deck to draw.",
                {"requested": count, "available": self._available_cards()},
            )
        if len(self.draw_pile) < count:
            self._recycle_discards()
        return [self.draw_pile.pop() for _ in range(count)]

    def _recycle_discards(self) -> None:
        top = self.discard_pile[-1]
        recycled = self.discard_pile[:-1]
        self.rng.shuffle(recycled)
        self.draw_pile = recycled + self.draw_pile
        self.discard_pile = [top]


def new_match_state(
    players: Sequence[str],
    hands: Dict[str, List[Card]],
    draw_pile: Sequence[Card],
    *,
    house_rules: Optional[HouseRules] = None,
    rng: Optional[Random] = None,
) -> MatchState:
    """Flip the starting card off ``draw_pile`` and build the opening state.

    A wild card cannot open the match since nobody has chosen a color for it;
    it is buried back in the pile and the next card is flipped instead.
    """
    pile = list(draw_pile)
    rng = rng or Random()
    if not any(not isinstance(card, WildCard) for card in pile):
        raise ResourceExhausted(ErrorCode.DECK_EXHAUSTED, "No colored card left to start the discard pile.")
    while True:
        first = pile.pop()
        if not isinstance(first, WildCard):
            break
        pile.insert(rng.randrange(len(pile) + 1), first)
    return MatchState(
        players=list(players),
        hands=hands,
        discard_pile=[first],
        draw_pile=pile,
        house_rules=house_rules or HouseRules(),
        rng=rng,
    )
