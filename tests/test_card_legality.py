import itertools

import pytest

from engine.cards import Color, NumberCard, SpecialCard, SpecialValue, WildCard, WildValue, card_color
from engine.deck import build_deck
from engine.mechanics import is_playable, playable_indices, wild_draw_four_allowed

RED_5 = NumberCard(Color.RED, 5)
BLUE_5 = NumberCard(Color.BLUE, 5)
BLUE_3 = NumberCard(Color.BLUE, 3)
RED_SKIP = SpecialCard(Color.RED, SpecialValue.SKIP)
GREEN_SKIP = SpecialCard(Color.GREEN, SpecialValue.SKIP)
BLUE_DRAW_TWO = SpecialCard(Color.BLUE, SpecialValue.DRAW_TWO)
WILD = WildCard(WildValue.WILD)
WILD_FOUR = WildCard(WildValue.WILD_DRAW_FOUR)

UNIQUE_CARDS = list(dict.fromkeys(build_deck()))


def test_color_or_value_match_against_colored_top():
    for card, top in itertools.product(UNIQUE_CARDS, UNIQUE_CARDS):
        if isinstance(top, WildCard):
            continue
        expected = isinstance(card, WildCard) or card_color(card) is top.color or (
            type(card) is type(top) and card.value == top.value
        )
        assert is_playable(card, top, None, 0, []) is expected, (card, top)


def test_wild_always_playable_without_pending_draw():
    assert is_playable(WILD, RED_5, Color.GREEN, 0, [])
    assert is_playable(WILD_FOUR, BLUE_DRAW_TWO, None, 0, [])


def test_same_number_different_color():
    assert is_playable(BLUE_5, RED_5, None, 0, [])
    assert not is_playable(BLUE_3, RED_5, None, 0, [])


def test_action_values_match_across_colors():
    assert is_playable(GREEN_SKIP, RED_SKIP, None, 0, [])


def test_color_override_takes_precedence_over_top():
    assert is_playable(BLUE_3, RED_5, Color.BLUE, 0, [])
    assert not is_playable(NumberCard(Color.RED, 2), RED_5, Color.BLUE, 0, [])
    # Value matching against the top card still applies.
    assert is_playable(NumberCard(Color.YELLOW, 5), RED_5, Color.BLUE, 0, [])


def test_wild_top_without_override_constrains_no_color():
    assert not is_playable(RED_5, WILD, None, 0, [])
    assert is_playable(RED_5, WILD, Color.RED, 0, [])
    assert is_playable(WILD, WILD, None, 0, [])


def test_pending_draw_blocks_everything_without_stacking():
    for card in UNIQUE_CARDS:
        assert not is_playable(card, BLUE_DRAW_TWO, None, 2, [])
        assert not is_playable(card, WILD_FOUR, Color.RED, 4, ["jumpIn"])


def test_stacking_allows_only_draw_cards():
    assert is_playable(BLUE_DRAW_TWO, BLUE_DRAW_TWO, None, 2, ["stacking"])
    assert is_playable(SpecialCard(Color.RED, SpecialValue.DRAW_TWO), WILD_FOUR, Color.GREEN, 4, ["stacking"])
    assert is_playable(WILD_FOUR, BLUE_DRAW_TWO, None, 2, ["stacking"])
    assert not is_playable(WILD, BLUE_DRAW_TWO, None, 2, ["stacking"])
    assert not is_playable(NumberCard(Color.BLUE, 1), BLUE_DRAW_TWO, None, 2, ["stacking"])


@pytest.mark.parametrize("forced", [0, 2])
def test_unknown_card_variant_raises_even_with_pending_draw(forced):
    with pytest.raises(ValueError):
        is_playable("x", RED_5, None, forced, [])


def test_unknown_house_rules_are_inert():
    assert is_playable(BLUE_5, RED_5, None, 0, ["noSuchRule", "stacking"])
    assert not is_playable(BLUE_3, RED_5, None, 0, ["noSuchRule"])


def test_legality_is_pure():
    args = (BLUE_DRAW_TWO, BLUE_DRAW_TWO, None, 2, ["stacking"])
    assert is_playable(*args) == is_playable(*args)


def test_wild_draw_four_blocked_when_holding_active_color():
    hand = [WILD_FOUR, NumberCard(Color.RED, 1)]
    assert not wild_draw_four_allowed(hand, 0, RED_5, None, 0)
    assert wild_draw_four_allowed(hand, 0, BLUE_3, None, 0)
    # A pending draw lifts the restriction for stacking.
    assert wild_draw_four_allowed(hand, 0, RED_5, None, 2)
    # Other cards are never affected.
    assert wild_draw_four_allowed(hand, 1, RED_5, None, 0)


def test_playable_indices_combines_both_checks():
    hand = [RED_SKIP, BLUE_3, WILD, WILD_FOUR]
    assert playable_indices(hand, RED_5, None, 0, []) == [0, 2]
    assert playable_indices([BLUE_3, WILD_FOUR], RED_5, None, 0, []) == [1]


@pytest.mark.parametrize("forced", [1, 2, 4, 8])
def test_no_play_without_stacking_for_any_positive_count(forced):
    assert not any(is_playable(card, RED_5, None, forced, None) for card in UNIQUE_CARDS)
