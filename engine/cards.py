"""Card-related data structures and helpers for UNO."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Union


class Color(Enum):
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    BLUE = "blue"

    def __str__(self) -> str:
        return self.value


class SpecialValue(Enum):
    SKIP = "skip"
    REVERSE = "reverse"
    DRAW_TWO = "draw2"

    def __str__(self) -> str:
        return self.value


class WildValue(Enum):
    WILD = "wild"
    WILD_DRAW_FOUR = "wild_draw4"

    def __str__(self) -> str:
        return self.value


NUMBER_VALUES = range(0, 10)


@dataclass(frozen=True)
class NumberCard:
    """Colored card with a face value between 0 and 9."""

    color: Color
    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.color, Color):
            raise TypeError(f"Number card color must be a Color, got {self.color!r}")
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"Number card value must be an int, got {self.value!r}")
        if self.value not in NUMBER_VALUES:
            raise ValueError(f"Number card value out of range: {self.value}")


@dataclass(frozen=True)
class SpecialCard:
    """Colored action card: skip, reverse or draw two."""

    color: Color
    value: SpecialValue

    def __post_init__(self) -> None:
        if not isinstance(self.color, Color):
            raise TypeError(f"Special card color must be a Color, got {self.color!r}")
        if not isinstance(self.value, SpecialValue):
            raise TypeError(f"Special card value must be a SpecialValue, got {self.value!r}")


@dataclass(frozen=True)
class WildCard:
    """Colorless card; the player chooses the active color when playing it."""

    value: WildValue

    def __post_init__(self) -> None:
        if not isinstance(self.value, WildValue):
            raise TypeError(f"Wild card value must be a WildValue, got {self.value!r}")


Card = Union[NumberCard, SpecialCard, WildCard]


def card_kind(card: Card) -> str:
    if isinstance(card, NumberCard):
        return "number"
    if isinstance(card, SpecialCard):
        return "special"
    if isinstance(card, WildCard):
        return "wild"
    raise ValueError(f"Unknown card variant: {card!r}")


def card_color(card: Card) -> Optional[Color]:
    """Return the card's color, or None for wild cards."""
    if isinstance(card, (NumberCard, SpecialCard)):
        return card.color
    if isinstance(card, WildCard):
        return None
    raise ValueError(f"Unknown card variant: {card!r}")


def is_draw_card(card: Card) -> bool:
    """Return True for the draw-inducing cards: draw two and wild draw four."""
    if isinstance(card, SpecialCard):
        return card.value is SpecialValue.DRAW_TWO
    if isinstance(card, WildCard):
        return card.value is WildValue.WILD_DRAW_FOUR
    if isinstance(card, NumberCard):
        return False
    raise ValueError(f"Unknown card variant: {card!r}")


def same_value(left: Card, right: Card) -> bool:
    """Face/action value comparison across colors."""
    return card_kind(left) == card_kind(right) and left.value == right.value


def serialize_card(card: Card) -> dict:
    kind = card_kind(card)
    if isinstance(card, NumberCard):
        return {"kind": kind, "color": card.color.value, "value": card.value}
    if isinstance(card, SpecialCard):
        return {"kind": kind, "color": card.color.value, "value": card.value.value}
    return {"kind": kind, "value": card.value.value}


def _field(payload: Mapping[str, object], key: str) -> object:
    value = payload.get(key)
    if value is None:
        raise ValueError(f"Card payload is missing {key!r}: {dict(payload)!r}")
    return value


def deserialize_card(payload: Mapping[str, object]) -> Card:
    kind = payload.get("kind")
    if kind == "number":
        return NumberCard(Color(_field(payload, "color")), _field(payload, "value"))
    if kind == "special":
        return SpecialCard(Color(_field(payload, "color")), SpecialValue(_field(payload, "value")))
    if kind == "wild":
        return WildCard(WildValue(_field(payload, "value")))
    raise ValueError(f"Unknown card kind: {kind!r}")


_SPECIAL_LABELS = {
    SpecialValue.SKIP: "Skip",
    SpecialValue.REVERSE: "Reverse",
    SpecialValue.DRAW_TWO: "Draw Two",
}


def card_label(card: Card) -> str:
    if isinstance(card, NumberCard):
        return f"{card.color.name.title()} {card.value}"
    if isinstance(card, SpecialCard):
        return f"{card.color.name.title()} {_SPECIAL_LABELS[card.value]}"
    if isinstance(card, WildCard):
        return "Wild Draw Four" if card.value is WildValue.WILD_DRAW_FOUR else "Wild"
    raise ValueError(f"Unknown card variant: {card!r}")
