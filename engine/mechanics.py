"""Card legality and effect resolution for UNO."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Union

from .cards import (
    Card,
    Color,
    NumberCard,
    SpecialCard,
    SpecialValue,
    WildCard,
    WildValue,
    card_color,
    is_draw_card,
    same_value,
)
from .house_rules import HouseRule, HouseRules, as_house_rules
from .turns import Direction

HouseRuleInput = Union[HouseRules, Iterable[Union[str, HouseRule]], None]


@dataclass(frozen=True)
class CardEffect:
    direction: Direction
    must_draw: int
    skip_next: bool


def active_color(top_card: Card, color_override: Optional[Color]) -> Optional[Color]:
    """Color a play has to match; a wild top without an override constrains nothing."""
    if color_override is not None:
        return color_override
    return card_color(top_card)


def is_playable(
    card: Card,
    top_card: Card,
    color_override: Optional[Color],
    forced_draw_count: int,
    house_rules: HouseRuleInput = None,
) -> bool:
    """Return True if ``card`` may be played on ``top_card``."""
    draw_card = is_draw_card(card)
    if forced_draw_count > 0:
        return draw_card and as_house_rules(house_rules).stacking

    if isinstance(card, WildCard):
        return True

    color = active_color(top_card, color_override)
    if color is not None and card_color(card) is color:
        return True

    return same_value(card, top_card)


def wild_draw_four_allowed(
    hand: Sequence[Card],
    card_index: int,
    top_card: Card,
    color_override: Optional[Color],
    forced_draw_count: int,
) -> bool:
    """A wild draw four may not be played while holding a card of the active color.

    The restriction only applies when no draw is pending; stacking onto a
    pending draw is governed by ``is_playable``.
    """
    card = hand[card_index]
    if not (isinstance(card, WildCard) and card.value is WildValue.WILD_DRAW_FOUR):
        return True
    if forced_draw_count > 0:
        return True
    color = active_color(top_card, color_override)
    if color is None:
        return True
    return not any(
        index != card_index and card_color(other) is color for index, other in enumerate(hand)
    )


def playable_indices(
    hand: Sequence[Card],
    top_card: Card,
    color_override: Optional[Color],
    forced_draw_count: int,
    house_rules: HouseRuleInput = None,
) -> List[int]:
    """Return the hand positions that may legally be played."""
    rules = as_house_rules(house_rules)
    return [
        index
        for index, card in enumerate(hand)
        if is_playable(card, top_card, color_override, forced_draw_count, rules)
        and wild_draw_four_allowed(hand, index, top_card, color_override, forced_draw_count)
    ]


def apply_effect(card: Card, direction: Direction, forced_draw_count: int) -> CardEffect:
    """Resolve the intrinsic effect of an accepted card."""
    next_direction = direction
    must_draw = forced_draw_count
    skip_next = False

    if isinstance(card, SpecialCard):
        if card.value is SpecialValue.SKIP:
            skip_next = True
        elif card.value is SpecialValue.REVERSE:
            next_direction = direction.flipped()
        elif card.value is SpecialValue.DRAW_TWO:
            must_draw += 2
    elif isinstance(card, WildCard):
        if card.value is WildValue.WILD_DRAW_FOUR:
            must_draw += 4
    elif not isinstance(card, NumberCard):
        raise ValueError(f"Unknown card variant: {card!r}")

    return CardEffect(direction=next_direction, must_draw=must_draw, skip_next=skip_next)
