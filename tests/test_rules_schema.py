from random import Random

import pytest
from pydantic import ValidationError

from engine.cards import Color, NumberCard, SpecialCard, SpecialValue, WildCard, WildValue
from engine.house_rules import HouseRules
from engine.rules_schema import GameConfigModel, MatchRecord, PlayerHandRecord, parse_card
from engine.state import MatchState, MatchStatus
from engine.turns import Direction


def test_parse_card_accepts_each_variant():
    assert parse_card({"kind": "number", "color": "red", "value": 0}) == NumberCard(Color.RED, 0)
    assert parse_card({"kind": "special", "color": "blue", "value": "draw2"}) == SpecialCard(
        Color.BLUE, SpecialValue.DRAW_TWO
    )
    assert parse_card({"kind": "wild", "value": "wild_draw4"}) == WildCard(WildValue.WILD_DRAW_FOUR)


@pytest.mark.parametrize(
    "payload",
    [
        {"kind": "number", "color": "red", "value": 10},
        {"kind": "number", "color": "purple", "value": 1},
        {"kind": "special", "color": "red", "value": "draw4"},
        {"kind": "wild", "value": "skip"},
        {"kind": "joker", "value": "wild"},
    ],
)
def test_parse_card_rejects_malformed_payloads(payload):
    with pytest.raises(ValidationError):
        parse_card(payload)


def test_game_config_drops_unknown_house_rules():
    config = GameConfigModel.model_validate({"maxPlayers": 3, "houseRules": ["stacking", "mystery"]})
    assert config.house_rules == ["stacking"]
    assert config.to_config().house_rules == HouseRules(["stacking"])
    assert config.to_config().max_players == 3


def test_game_config_bounds():
    with pytest.raises(ValidationError):
        GameConfigModel.model_validate({"maxPlayers": 1})
    with pytest.raises(ValidationError):
        GameConfigModel.model_validate({"maxPlayers": 11})


def test_match_record_validates_persisted_shape():
    record = MatchRecord.model_validate(
        {
            "players": ["A", "B"],
            "direction": "counter-clockwise",
            "currentTurnPlayerId": "B",
            "currentColor": "green",
            "mustDraw": 2,
            "discardPile": [
                {"kind": "number", "color": "red", "value": 4},
                {"kind": "special", "color": "green", "value": "draw2"},
            ],
            "houseRules": ["stacking", "somethingNew"],
        }
    )
    assert record.color() is Color.GREEN
    assert record.house_rules == ["stacking"]
    assert record.discard_cards()[-1] == SpecialCard(Color.GREEN, SpecialValue.DRAW_TWO)
    assert record.can_play(SpecialCard(Color.RED, SpecialValue.DRAW_TWO))
    assert not record.can_play(NumberCard(Color.GREEN, 1))


def test_match_record_rejects_negative_must_draw():
    with pytest.raises(ValidationError):
        MatchRecord.model_validate({"players": ["A", "B"], "mustDraw": -1})
    with pytest.raises(ValidationError):
        MatchRecord.model_validate({"players": ["A", "A"]})


def test_match_record_round_trips_engine_state():
    state = MatchState(
        players=["A", "B"],
        hands={"A": [NumberCard(Color.RED, 1)], "B": [NumberCard(Color.BLUE, 2)]},
        discard_pile=[NumberCard(Color.YELLOW, 5), WildCard(WildValue.WILD)],
        draw_pile=[],
        house_rules=HouseRules(["drawToMatch"]),
        current_color=Color.RED,
        rng=Random(0),
    )
    dumped = MatchRecord.from_state(state).model_dump(by_alias=True)
    assert dumped["currentTurnPlayerId"] == "A"
    assert dumped["currentColor"] == "red"
    assert dumped["mustDraw"] == 0
    assert dumped["discardPile"][-1] == {"kind": "wild", "value": "wild"}
    assert dumped["houseRules"] == ["drawToMatch"]

    restored = MatchRecord.model_validate(dumped)
    assert restored.discard_cards() == state.discard_pile
    assert restored.can_play(state.hands["A"][0])


def test_player_hand_record():
    cards = [NumberCard(Color.RED, 1), WildCard(WildValue.WILD)]
    record = PlayerHandRecord.from_cards("A", cards)
    assert record.model_dump(by_alias=True)["playerId"] == "A"
    assert record.cards() == cards


def test_match_record_rebuilds_playable_state():
    state = MatchState(
        players=["A", "B", "C"],
        hands={
            "A": [NumberCard(Color.RED, 1)],
            "B": [NumberCard(Color.GREEN, 2), NumberCard(Color.RED, 9)],
            "C": [NumberCard(Color.BLUE, 2)],
        },
        discard_pile=[NumberCard(Color.YELLOW, 5), WildCard(WildValue.WILD)],
        draw_pile=[NumberCard(Color.YELLOW, 3)],
        house_rules=HouseRules(["stacking"]),
        current_index=1,
        direction=Direction.COUNTER_CLOCKWISE,
        current_color=Color.GREEN,
        rng=Random(0),
    )
    record = MatchRecord.model_validate(MatchRecord.from_state(state).model_dump(by_alias=True))
    hands = PlayerHandRecord.from_state(state)

    rebuilt = record.to_state(hands, state.draw_pile, rng=Random(0))
    assert rebuilt.current_player_id == "B"
    assert rebuilt.direction is Direction.COUNTER_CLOCKWISE
    assert rebuilt.current_color is Color.GREEN
    assert rebuilt.house_rules == state.house_rules
    assert rebuilt.discard_pile == state.discard_pile
    assert rebuilt.hands == state.hands

    result = rebuilt.play_card("B", 0)
    assert result.next_player == "A"
    assert rebuilt.top_card == NumberCard(Color.GREEN, 2)
    assert rebuilt.current_color is None


def test_match_record_to_state_rejects_mismatched_hands():
    record = MatchRecord.model_validate(
        {
            "players": ["A", "B"],
            "currentTurnPlayerId": "A",
            "discardPile": [{"kind": "number", "color": "red", "value": 4}],
        }
    )
    with pytest.raises(ValueError):
        record.to_state([PlayerHandRecord.from_cards("A", [])], [])
    stranger = record.model_copy(update={"current_turn_player_id": "Z"})
    with pytest.raises(ValueError):
        stranger.to_state([PlayerHandRecord.from_cards("A", []), PlayerHandRecord.from_cards("B", [])], [])


def test_completed_record_restores_winner():
    record = MatchRecord.model_validate(
        {
            "status": "completed",
            "players": ["A", "B"],
            "discardPile": [{"kind": "number", "color": "red", "value": 4}],
        }
    )
    hands = [PlayerHandRecord.from_cards("A", [NumberCard(Color.BLUE, 7)]), PlayerHandRecord.from_cards("B", [])]
    state = record.to_state(hands, [])
    assert state.status is MatchStatus.COMPLETED
    assert state.winner == "B"
    assert state.final_scores().winner_score == 7
