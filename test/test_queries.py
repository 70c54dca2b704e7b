"""
Client-side delta merging and board summaries.
"""

from endofline.engine.events import StateDelta, parse_server_message
from endofline.engine.hexgrid import modify_territory
from endofline.engine.queries import apply_state_delta, merge_by_id, territory_control
from endofline.engine.utils import initialize_game_state


def test_merge_replaces_whole_entry_and_keeps_order():
    existing = [{"id": "a", "x": 1, "y": 1}, {"id": "b", "x": 2}]
    merged = merge_by_id(existing, [{"id": "a", "x": 5}])
    assert merged == [{"id": "a", "x": 5}, {"id": "b", "x": 2}]


def test_merge_appends_unknown_and_never_deletes():
    existing = [{"id": "a"}, {"id": "b"}]
    merged = merge_by_id(existing, [{"id": "c"}, {"id": "b", "v": 1}])
    assert [e["id"] for e in merged] == ["a", "b", "c"]
    assert merged[1] == {"id": "b", "v": 1}
    assert merge_by_id(existing, []) == existing


def test_merge_does_not_mutate_input():
    existing = [{"id": "a", "x": 1}]
    merge_by_id(existing, [{"id": "a", "x": 2}, {"id": "z"}])
    assert existing == [{"id": "a", "x": 1}]


def test_apply_state_delta_only_touches_present_collections():
    snapshot = {"players": [{"id": "p1", "credits": 5}], "territories": [{"id": "hex-0-0"}]}
    updated = apply_state_delta(snapshot, {"players": [{"id": "p1", "credits": 3}]})
    assert updated["players"] == [{"id": "p1", "credits": 3}]
    assert updated["territories"] is snapshot["territories"]
    assert snapshot["players"] == [{"id": "p1", "credits": 5}]


def test_apply_state_delta_accepts_model_and_new_collections():
    delta = StateDelta(cards=[{"id": "weyland-005"}])
    updated = apply_state_delta({}, delta)
    assert updated == {"cards": [{"id": "weyland-005"}]}


def test_client_replaying_broadcasts_matches_server(router, match, corp, runner):
    # the state the runner was sent on join
    snapshot = {
        "territories": [t.to_dict() for t in match.state.territories],
        "players": [p.to_dict() for p in match.state.players],
    }
    router.handle_raw(corp, {"type": "PLACE_INFLUENCE", "territoryId": "hex-1-1", "amount": 25})
    router.handle_raw(corp, {"type": "PLAY_CARD", "cardId": "weyland-005"})
    router.handle_raw(corp, {"type": "END_TURN"})
    router.handle_raw(runner, {"type": "RUN_TERRITORY", "territoryId": "hex-1-1"})

    for raw in runner.connection.sent:
        message = parse_server_message(raw)
        if message.type == "STATE_DELTA":
            snapshot = apply_state_delta(snapshot, message.delta)

    server = match.state.to_dict()
    assert snapshot["territories"] == server["territories"]
    assert snapshot["players"] == server["players"]
    assert snapshot["cards"] == server["cards"]


def test_client_sees_every_copy_of_a_repeated_install(router, match, corp, runner):
    router.handle_raw(corp, {"type": "PLAY_CARD", "cardId": "weyland-005"})
    router.handle_raw(corp, {"type": "PLAY_CARD", "cardId": "weyland-005"})

    snapshot = {}
    for raw in runner.connection.sent:
        message = parse_server_message(raw)
        if message.type == "STATE_DELTA":
            snapshot = apply_state_delta(snapshot, message.delta)

    server_cards = match.state.to_dict()["cards"]
    assert len(server_cards) == 2
    assert snapshot["cards"] == server_cards


def test_territory_control_counts():
    state = initialize_game_state("p1")
    state.replace_territory(modify_territory(state.territories[0], corporate_influence=80))
    state.replace_territory(modify_territory(state.territories[1], corporate_influence=10))
    assert territory_control(state) == {"corp": 1, "runner": 1, "contested": 7}
