"""Validation schema for persisted match records and match configuration."""

from __future__ import annotations

from random import Random
from typing import Annotated, Iterable, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from .cards import Card, Color, deserialize_card, serialize_card
from .game import DEFAULT_MAX_PLAYERS, MAX_PLAYERS, MIN_PLAYERS, GameConfig
from .house_rules import HouseRules, parse_house_rule
from .mechanics import is_playable
from .state import MatchState, MatchStatus
from .turns import Direction

ColorName = Literal["red", "yellow", "green", "blue"]


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class NumberCardModel(_Record):
    kind: Literal["number"] = "number"
    color: ColorName
    value: int = Field(ge=0, le=9)

    def to_card(self) -> Card:
        return deserialize_card(self.model_dump())


class SpecialCardModel(_Record):
    kind: Literal["special"] = "special"
    color: ColorName
    value: Literal["skip", "reverse", "draw2"]

    def to_card(self) -> Card:
        return deserialize_card(self.model_dump())


class WildCardModel(_Record):
    kind: Literal["wild"] = "wild"
    value: Literal["wild", "wild_draw4"]

    def to_card(self) -> Card:
        return deserialize_card(self.model_dump())


CardModel = Annotated[
    Union[NumberCardModel, SpecialCardModel, WildCardModel],
    Field(discriminator="kind"),
]

_card_adapter: TypeAdapter = TypeAdapter(CardModel)


def card_model(card: Card) -> Union[NumberCardModel, SpecialCardModel, WildCardModel]:
    return _card_adapter.validate_python(serialize_card(card))


def parse_card(payload: object) -> Card:
    """Validate an untrusted card payload and return the engine value."""
    return _card_adapter.validate_python(payload).to_card()


def _known_house_rules(value: List[str]) -> List[str]:
    # Unknown flags are dropped rather than rejected.
    return [rule for rule in value if parse_house_rule(rule) is not None]


class GameConfigModel(_Record):
    is_private: bool = Field(False, alias="isPrivate")
    max_players: int = Field(DEFAULT_MAX_PLAYERS, alias="maxPlayers", ge=MIN_PLAYERS, le=MAX_PLAYERS)
    house_rules: List[str] = Field(default_factory=list, alias="houseRules")

    @field_validator("house_rules")
    @classmethod
    def drop_unknown_rules(cls, value: List[str]) -> List[str]:
        return _known_house_rules(value)

    def to_config(self) -> GameConfig:
        return GameConfig(
            is_private=self.is_private,
            max_players=self.max_players,
            house_rules=HouseRules(self.house_rules),
        )


class MatchRecord(_Record):
    """The turn-relevant subset of a persisted match document."""

    status: Literal["waiting", "in-progress", "completed"] = "in-progress"
    players: List[str]
    direction: Literal["clockwise", "counter-clockwise"] = "clockwise"
    current_turn_player_id: Optional[str] = Field(None, alias="currentTurnPlayerId")
    current_color: Optional[ColorName] = Field(None, alias="currentColor")
    must_draw: int = Field(0, alias="mustDraw", ge=0)
    discard_pile: List[CardModel] = Field(default_factory=list, alias="discardPile")
    house_rules: List[str] = Field(default_factory=list, alias="houseRules")

    @field_validator("house_rules")
    @classmethod
    def drop_unknown_rules(cls, value: List[str]) -> List[str]:
        return _known_house_rules(value)

    @field_validator("players")
    @classmethod
    def unique_players(cls, value: List[str]) -> List[str]:
        if len(set(value)) != len(value):
            raise ValueError("Player identifiers must be unique.")
        return value

    @classmethod
    def from_state(cls, state: MatchState) -> "MatchRecord":
        return cls(
            status=state.status.value,
            players=list(state.players),
            direction=state.direction.value,
            current_turn_player_id=state.current_player_id,
            current_color=state.current_color.value if state.current_color else None,
            must_draw=state.must_draw,
            discard_pile=[card_model(card) for card in state.discard_pile],
            house_rules=state.house_rules.names(),
        )

    def discard_cards(self) -> List[Card]:
        return [card.to_card() for card in self.discard_pile]

    def color(self) -> Optional[Color]:
        return Color(self.current_color) if self.current_color else None

    def can_play(self, card: Card) -> bool:
        """Run the legality check straight off the persisted fields."""
        if not self.discard_pile:
            raise ValueError("Match record has an empty discard pile.")
        return is_playable(
            card,
            self.discard_pile[-1].to_card(),
            self.color(),
            self.must_draw,
            HouseRules(self.house_rules),
        )

    def match_status(self) -> MatchStatus:
        return MatchStatus(self.status)

    def to_state(
        self,
        hands: Iterable["PlayerHandRecord"],
        draw_pile: Sequence[Card],
        rng: Optional[Random] = None,
    ) -> MatchState:
        """Rebuild engine state from this record and the players' private hands.

        Raises ``ValueError`` when the hands do not belong to exactly the
        recorded players or the current turn names someone else.
        """
        status = self.match_status()
        if status is MatchStatus.WAITING:
            raise ValueError("A waiting match has no turn state.")
        by_player = {}
        for record in hands:
            if record.player_id in by_player:
                raise ValueError(f"Duplicate hand for player {record.player_id}.")
            by_player[record.player_id] = record.cards()

        current_index = 0
        if self.current_turn_player_id is not None:
            if self.current_turn_player_id not in self.players:
                raise ValueError(f"Current player {self.current_turn_player_id} is not seated in this match.")
            current_index = self.players.index(self.current_turn_player_id)
        elif status is MatchStatus.IN_PROGRESS:
            raise ValueError("A match in progress needs a current player.")

        winner = None
        if status is MatchStatus.COMPLETED:
            winner = next((player for player in self.players if not by_player.get(player)), None)

        return MatchState(
            players=list(self.players),
            hands=by_player,
            discard_pile=self.discard_cards(),
            draw_pile=list(draw_pile),
            house_rules=HouseRules(self.house_rules),
            current_index=current_index,
            direction=Direction(self.direction),
            must_draw=self.must_draw,
            current_color=self.color(),
            status=status,
            winner=winner,
            rng=rng or Random(),
        )


class PlayerHandRecord(_Record):
    player_id: str = Field(alias="playerId")
    hand: List[CardModel] = Field(default_factory=list)

    @classmethod
    def from_cards(cls, player_id: str, cards: List[Card]) -> "PlayerHandRecord":
        return cls(player_id=player_id, hand=[card_model(card) for card in cards])

    @classmethod
    def from_state(cls, state: MatchState) -> List["PlayerHandRecord"]:
        return [cls.from_cards(player, state.hands[player]) for player in state.players]

    def cards(self) -> List[Card]:
        return [card.to_card() for card in self.hand]
