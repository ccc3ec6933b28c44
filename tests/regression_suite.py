"""Scenario regression suite for the room state machine.

Drives the resolver transitions directly against in-memory rooms.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from nexus_tcg.content.balance import DEFAULTS, INFINITE
from nexus_tcg.content.catalog import load_catalog
from nexus_tcg.engine import dice, resolver
from nexus_tcg.engine.errors import IllegalAction, InsufficientResource, NotInRoom, RoomFull
from nexus_tcg.engine.models import SIDES, PlayerInfo, Room, Unit

CATALOG = load_catalog()

U1 = PlayerInfo(user_id="u1", name="Alice")
U2 = PlayerInfo(user_id="u2", name="Bob")
U3 = PlayerInfo(user_id="u3", name="Carol")


def state_extract(room: Room) -> Dict[str, Any]:
    return room.to_dict()


def _assert_invariants(room: Room) -> None:
    assert room.mode in ("lobby", "play")
    for side in SIDES:
        assert len(room.board[side]) <= DEFAULTS["board_size"], f"board overflow on {side}"
        assert room.hero[side] >= 0, f"negative hero hp on {side}"
        assert all(n >= 0 for n in room.dice[side].values()), f"negative dice on {side}"
        for unit in room.board[side]:
            assert 0 <= unit.gauge <= 3, f"gauge out of range on {unit.code}"
            assert unit.hp > 0, f"dead unit left on board: {unit.code}"


def make_lobby(seed: int = 123) -> Room:
    room = Room(id="ABC123", seed=seed)
    resolver.create_room(room, U1)
    resolver.join_room(room, U2)
    return room


def make_match(seed: int = 123) -> Room:
    room = make_lobby(seed)
    resolver.mark_ready(room, U1, CATALOG)
    resolver.mark_ready(room, U2, CATALOG)
    _assert_invariants(room)
    return room


def user_for(room: Room, side: str) -> PlayerInfo:
    return room.players[side]


def scenario_create_join_ready_starts_game() -> bool:
    room = make_lobby()
    assert room.players["p1"].user_id == "u1"
    assert room.players["p2"].user_id == "u2"
    resolver.mark_ready(room, U1, CATALOG)
    assert room.mode == "lobby", "one ready seat must not start the game"
    resolver.mark_ready(room, U2, CATALOG)

    assert room.mode == "play"
    assert room.phase_no == 1
    for side in SIDES:
        assert len(room.hand[side]) == 5, f"{side} should open with 5 cards"
        assert dice.total(room.dice[side]) == 10, f"{side} should start with 10 dice"
        assert len(room.board[side]) == 3
    assert room.coin.decided and room.coin.winner in SIDES
    assert room.turn == room.phase_actor == room.coin.winner
    assert room.coin_ack == {"p1": False, "p2": False}
    return True


def scenario_ready_again_does_not_redeal() -> bool:
    room = make_match()
    before = state_extract(room)
    resolver.mark_ready(room, U1, CATALOG)
    resolver.mark_ready(room, U2, CATALOG)
    resolver.start_game(room, CATALOG)
    assert state_extract(room) == before, "start_game must run once per lobby->play transition"
    return True


def scenario_create_is_idempotent() -> bool:
    room = make_lobby()
    resolver.create_room(room, U3)
    assert room.side_of("u3") is None, "create on an occupied room must be a no-op"
    return True


def scenario_rejoin_refreshes_display_info() -> bool:
    room = make_lobby()
    resolver.join_room(room, PlayerInfo(user_id="u2", name="Bobby", avatar="b.png"))
    assert room.players["p2"].name == "Bobby"
    assert room.players["p2"].avatar == "b.png"
    return True


def scenario_seat_b_takeover_then_original_reconnects() -> bool:
    room = make_lobby()
    resolver.join_room(room, U3)
    assert room.players["p2"].user_id == "u3", "unready seat B should be taken over in lobby"

    resolver.mark_ready(room, U3, CATALOG)
    try:
        resolver.join_room(room, U2)
    except RoomFull:
        pass
    else:
        raise AssertionError("original occupant should get RoomFull once seat B is ready")
    assert room.players["p2"].user_id == "u3"
    return True


def scenario_third_player_rejected_after_start() -> bool:
    room = make_match()
    try:
        resolver.join_room(room, U3)
    except RoomFull:
        return True
    raise AssertionError("join after game start should fail with RoomFull")


def scenario_not_in_room() -> bool:
    room = make_match()
    for step in (
        lambda: resolver.end_phase(room, "ghost"),
        lambda: resolver.ack_coin(room, "ghost"),
        lambda: resolver.combat(room, "ghost", 0, 0, "basic"),
        lambda: resolver.play_card(room, "ghost", 0, CATALOG),
    ):
        try:
            step()
        except NotInRoom:
            continue
        raise AssertionError("unseated user should get NotInRoom")
    return True


def scenario_coin_ack_is_one_shot() -> bool:
    room = make_match()
    resolver.ack_coin(room, "u1")
    assert room.coin.decided, "one ack must not consume the coin"
    resolver.ack_coin(room, "u2")
    assert not room.coin.decided, "both acks consume the coin"
    assert room.coin_ack == {"p1": True, "p2": True}
    return True


def scenario_end_phase_out_of_turn_is_noop() -> bool:
    room = make_match()
    room.phase_actor = room.turn = "p2"
    before = state_extract(room)
    resolver.end_phase(room, "u1")
    assert state_extract(room) == before
    return True


def scenario_end_phase_first_finisher_starts_next_phase() -> bool:
    for first in SIDES:
        room = make_match()
        second = "p2" if first == "p1" else "p1"
        room.phase_actor = room.turn = first
        for side in SIDES:
            room.deck[side] = ["FIREWORKS", "HEALING_AMULET", "BLAZING_SIGIL"]
        hands ={side: len(room.hand[side]) for side in SIDES}

        resolver.end_phase(room, user_for(room, first).user_id)
        assert room.phase_actor == second and room.phase_no == 1
        assert room.ended_phase[first] and not room.ended_phase[second]

        resolver.end_phase(room, user_for(room, second).user_id)
        assert room.phase_no == 2
        assert room.phase_actor == room.turn == first, "first seat to end starts the next phase"
        assert room.ended_phase == {"p1": False, "p2": False}
        assert room.phase_end_order == []
        for side in SIDES:
            assert len(room.hand[side]) == hands[side] + 2
        _assert_invariants(room)
    return True


def scenario_phase_draw_stops_at_empty_pile() -> bool:
    room = make_match()
    room.deck["p1"] = ["FIREWORKS"]
    room.phase_actor = room.turn = "p1"
    hand_before = len(room.hand["p1"])
    resolver.end_phase(room, "u1")
    resolver.end_phase(room, "u2")
    assert len(room.hand["p1"]) == hand_before + 1
    assert room.deck["p1"] == []
    return True


def scenario_ult_kills_target_and_passes_turn() -> bool:
    room = make_match()
    room.phase_actor = room.turn = "p1"
    room.board["p1"] = [Unit(code="BLAZE_KNIGHT", element="Pyro", attack=4, hp=4, gauge=3)]
    room.board["p2"] = [Unit(code="TIDE_MAGE", element="Hydro", attack=2, hp=5)]
    room.dice["p1"] = {"Pyro": 5, "Geo": 2}

    resolver.combat(room, "u1", 0, 0, "ult")

    assert room.board["p2"] == [], "target should be removed"
    assert room.board["p1"][0].gauge == 0
    assert room.dice["p1"] == {"Geo": 2}
    assert room.turn == room.phase_actor == "p2"
    _assert_invariants(room)
    return True


def scenario_unpayable_cost_is_atomic() -> bool:
    room = make_match()
    room.phase_actor = room.turn = "p1"
    room.board["p1"] = [Unit(code="BLAZE_KNIGHT", element="Pyro", attack=5, hp=4, gauge=1)]
    room.dice["p1"] = {"Pyro": 1, INFINITE: 1, "Hydro": 4}
    before = state_extract(room)
    try:
        resolver.combat(room, "u1", 0, 0, "skill")
    except InsufficientResource:
        pass
    else:
        raise AssertionError("skill needs 3 Pyro-equivalent dice")
    assert state_extract(room) == before
    assert room.turn == "p1"
    return True


def scenario_skill_uses_wildcards_for_shortfall() -> bool:
    room = make_match()
    room.phase_actor = room.turn = "p1"
    room.board["p1"] = [Unit(code="BLAZE_KNIGHT", element="Pyro", attack=5, hp=4)]
    room.board["p2"] = [Unit(code="STONE_BULWARK", element="Geo", attack=2, hp=9)]
    room.dice["p1"] = {"Pyro": 1, INFINITE: 2, "Hydro": 1}
    resolver.combat(room, "u1", 0, 0, "skill")
    assert room.dice["p1"] == {"Hydro": 1}
    assert room.board["p2"][0].hp == 3
    assert room.board["p1"][0].gauge == 1
    return True


def scenario_hero_damage_is_floored() -> bool:
    room = make_match()
    room.phase_actor = room.turn = "p1"
    room.board["p1"] = [Unit(code="THUNDER_COLOSSUS", element="Electro", attack=99, hp=7)]
    room.board["p2"] = []
    room.hero["p2"] = 3
    room.dice["p1"] = {"Geo": 1}
    resolver.combat(room, "u1", 0, None, "basic")
    assert room.hero["p2"] == 0
    assert room.winner == "p1"
    _assert_invariants(room)
    return True


def scenario_card_effects() -> bool:
    room = make_match()
    room.phase_actor = room.turn = "p1"
    room.hero["p1"] = 29
    room.hand["p1"] = ["HEALING_AMULET", "BLAZING_SIGIL", "FIREWORKS", "BLAZE_KNIGHT", "MYSTERY"]
    room.board["p1"] = [Unit(code="TIDE_MAGE", element="Hydro", attack=2, hp=4)]
    room.board["p2"] = [
        Unit(code="CINDER_SCOUT", element="Pyro", attack=3, hp=2),
        Unit(code="ICE_WARDEN", element="Cryo", attack=4, hp=5),
    ]

    resolver.play_card(room, "u1", 0, CATALOG)
    assert room.hero["p1"] == 30, "amulet heals but caps at starting hp"
    resolver.play_card(room, "u1", 0, CATALOG)
    assert room.board["p1"][0].hp == 6
    resolver.play_card(room, "u1", 0, CATALOG)
    assert [u.code for u in room.board["p2"]] == ["ICE_WARDEN"]
    assert room.board["p2"][0].hp == 3
    resolver.play_card(room, "u1", 0, CATALOG)
    resolver.play_card(room, "u1", 0, CATALOG)
    assert room.hand["p1"] == [], "characters and unknown codes are still removed"
    resolver.play_card(room, "u1", 7, CATALOG)
    assert room.turn == "p1", "playing cards never passes the turn"
    return True


def scenario_discard_for_infinite() -> bool:
    room = make_match()
    room.phase_actor = room.turn = "p1"
    hand = list(room.hand["p1"])
    total = dice.total(room.dice["p1"])
    resolver.discard_for_infinite(room, "u1", 0)
    assert room.hand["p1"] == hand[1:]
    assert room.dice["p1"][INFINITE] >= 1
    assert dice.total(room.dice["p1"]) == total + 1
    return True


def scenario_lobby_rejects_combat_silently() -> bool:
    room = make_lobby()
    before = state_extract(room)
    resolver.combat(room, "u1", 0, 0, "basic")
    resolver.play_card(room, "u1", 0, CATALOG)
    resolver.end_phase(room, "u1")
    assert state_extract(room) == before
    return True


def scenario_starting_dice_mirrored_by_default() -> bool:
    for seed in (1, 7, 123, 2024):
        room = make_match(seed)
        assert room.dice["p1"] == room.dice["p2"], f"seed {seed}: mirrored pools differ"
        assert room.dice["p1"] is not room.dice["p2"], "seats must not share one pool object"
        assert dice.total(room.dice["p1"]) == DEFAULTS["starting_dice"]
    return True


def scenario_starting_dice_independent_when_not_mirrored() -> bool:
    pools = []
    for seed in (1, 7, 123, 2024):
        room = make_lobby(seed)
        resolver.mark_ready(room, U1, CATALOG, mirror_dice=False)
        resolver.mark_ready(room, U2, CATALOG, mirror_dice=False)
        for side in SIDES:
            assert dice.total(room.dice[side]) == DEFAULTS["starting_dice"]
        again = make_lobby(seed)
        resolver.mark_ready(again, U1, CATALOG, mirror_dice=False)
        resolver.mark_ready(again, U2, CATALOG, mirror_dice=False)
        assert again.dice == room.dice, "per-seat rolls must be reproducible from the seed"
        pools.append(room.dice)
    assert any(p["p1"] != p["p2"] for p in pools), "per-seat rolls should not always match"
    return True


def scenario_end_turn_passes_control_only_for_turn_holder() -> bool:
    room = make_match()
    room.phase_actor = room.turn = "p1"
    before = state_extract(room)
    resolver.end_turn(room, "u2")
    assert state_extract(room) == before, "end_turn out of turn is a no-op"

    resolver.end_turn(room, "u1")
    assert room.turn == room.phase_actor == "p2"
    assert room.log[-1] == "Alice ends the turn."
    resolver.end_turn(room, "u2")
    assert room.turn == room.phase_actor == "p1"
    return True


def scenario_uncharged_ult_is_rejected() -> bool:
    room = make_match()
    room.phase_actor = room.turn = "p1"
    room.board["p1"] = [Unit(code="BLAZE_KNIGHT", element="Pyro", attack=4, hp=4, gauge=2)]
    room.dice["p1"] = {"Pyro": 6}
    before = state_extract(room)
    try:
        resolver.combat(room, "u1", 0, 0, "ult")
    except IllegalAction:
        pass
    else:
        raise AssertionError("ult with gauge below 3 must be rejected")
    assert state_extract(room) == before
    assert room.dice["p1"] == {"Pyro": 6}
    return True


def scenario_fireworks_hits_hero_on_empty_board() -> bool:
    room = make_match()
    room.phase_actor = room.turn = "p1"
    room.board["p2"] = []
    room.hand["p1"] = ["FIREWORKS"]
    resolver.play_card(room, "u1", 0, CATALOG)
    assert room.hero["p2"] == DEFAULTS["hero_hp"] - 2
    assert room.hand["p1"] == []
    return True


def scenario_basic_pays_with_wildcard_first() -> bool:
    room = make_match()
    room.phase_actor = room.turn = "p1"
    room.board["p1"] = [Unit(code="CINDER_SCOUT", element="Pyro", attack=3, hp=2)]
    room.board["p2"] = [Unit(code="STONE_BULWARK", element="Geo", attack=2, hp=9)]
    room.dice["p1"] = {INFINITE: 1, "Geo": 1}
    resolver.combat(room, "u1", 0, 0, "basic")
    assert room.dice["p1"] == {"Geo": 1}, "basic cost should consume the wildcard first"
    assert room.board["p2"][0].hp == 6
    return True


def scenario_no_deck_service_means_no_warning() -> bool:
    room = make_match()
    assert room.warn_no_deck == [], "without a deck service nobody is missing a deck"
    return True


def scenario_unseated_combat_is_not_in_room_before_mode_check() -> bool:
    room = make_match()
    try:
        resolver.combat(room, "ghost", 0, 0, "smash")
    except NotInRoom:
        pass
    else:
        raise AssertionError("unseated caller should get NotInRoom even with a bad mode")
    try:
        resolver.combat(room, "u1", 0, 0, "smash")
    except IllegalAction:
        return True
    raise AssertionError("seated caller with a bad mode should get IllegalAction")


SCENARIOS = [
    scenario_create_join_ready_starts_game,
    scenario_ready_again_does_not_redeal,
    scenario_create_is_idempotent,
    scenario_rejoin_refreshes_display_info,
    scenario_seat_b_takeover_then_original_reconnects,
    scenario_third_player_rejected_after_start,
    scenario_not_in_room,
    scenario_coin_ack_is_one_shot,
    scenario_end_phase_out_of_turn_is_noop,
    scenario_end_phase_first_finisher_starts_next_phase,
    scenario_phase_draw_stops_at_empty_pile,
    scenario_ult_kills_target_and_passes_turn,
    scenario_unpayable_cost_is_atomic,
    scenario_skill_uses_wildcards_for_shortfall,
    scenario_hero_damage_is_floored,
    scenario_card_effects,
    scenario_discard_for_infinite,
    scenario_lobby_rejects_combat_silently,
    scenario_starting_dice_mirrored_by_default,
    scenario_starting_dice_independent_when_not_mirrored,
    scenario_end_turn_passes_control_only_for_turn_holder,
    scenario_uncharged_ult_is_rejected,
    scenario_fireworks_hits_hero_on_empty_board,
    scenario_basic_pays_with_wildcard_first,
    scenario_no_deck_service_means_no_warning,
    scenario_unseated_combat_is_not_in_room_before_mode_check,
]


def run_all(scenarios=None) -> List[Tuple[str, bool, str]]:
    results: List[Tuple[str, bool, str]] = []
    for scenario in scenarios if scenarios is not None else SCENARIOS:
        try:
            scenario()
            results.append((scenario.__name__, True, ""))
        except AssertionError as exc:
            results.append((scenario.__name__, False, str(exc)))
    return results
