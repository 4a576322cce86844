from fastapi.testclient import TestClient

from server.play_service import app

client = TestClient(app)


def create_started_match(players=("A", "B")):
    response = client.post("/matches", json={"player_id": players[0], "house_rules": ["stacking", "bogus"]})
    assert response.status_code == 200
    match_id = response.json()["match_id"]
    for player in players[1:]:
        assert client.post(f"/matches/{match_id}/join", json={"player_id": player}).status_code == 200
    response = client.post(f"/matches/{match_id}/start", json={"player_id": players[0], "seed": "api"})
    assert response.status_code == 200
    return match_id, response.json()["state"]


def test_create_and_start_match():
    match_id, state = create_started_match()
    assert state["status"] == "in-progress"
    assert state["house_rules"] == ["stacking"]
    assert len(state["hand"]) == 7
    assert state["current_player"] == "A"


def test_out_of_turn_play_is_precondition_failure():
    match_id, _ = create_started_match()
    response = client.post(f"/matches/{match_id}/play", json={"player_id": "B", "card_index": 0})
    assert response.status_code == 412
    assert response.json()["code"] == "NOT_YOUR_TURN"


def test_bad_card_index_is_invalid_argument():
    match_id, _ = create_started_match()
    response = client.post(f"/matches/{match_id}/play", json={"player_id": "A", "card_index": 40})
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_CARD_INDEX"


def test_unknown_match_is_not_found():
    response = client.get("/matches/nope")
    assert response.status_code == 404
    assert response.json()["code"] == "GAME_NOT_FOUND"


def test_request_validation():
    response = client.post("/matches", json={"player_id": "A", "max_players": 20})
    assert response.status_code == 422
    match_id, _ = create_started_match()
    response = client.post(
        f"/matches/{match_id}/play",
        json={"player_id": "A", "card_index": 0, "chosen_color": "purple"},
    )
    assert response.status_code == 422


def test_draw_then_view():
    match_id, _ = create_started_match()
    response = client.post(f"/matches/{match_id}/draw", json={"player_id": "A"})
    assert response.status_code == 200
    state = response.json()["state"]
    assert len(state["hand"]) == 8
    response = client.get(f"/matches/{match_id}", params={"player_id": "B"})
    assert response.status_code == 200
    assert len(response.json()["state"]["hand"]) == 7


def test_playable_card_can_be_played():
    match_id, state = create_started_match()
    if not state["playable"]:
        response = client.post(f"/matches/{match_id}/draw", json={"player_id": "A"})
        state = response.json()["state"]
        if not state["playable"]:
            return
    index = state["playable"][0]
    card = state["hand"][index]
    payload = {"player_id": "A", "card_index": index}
    if card["kind"] == "wild":
        payload["chosen_color"] = "red"
    response = client.post(f"/matches/{match_id}/play", json=payload)
    assert response.status_code == 200
    assert response.json()["state"]["top_card"] == card


def test_uno_call_rejected_with_full_hand():
    match_id, _ = create_started_match()
    response = client.post(f"/matches/{match_id}/uno", json={"player_id": "A"})
    assert response.status_code == 412
    assert response.json()["code"] == "UNO_NOT_ALLOWED"
