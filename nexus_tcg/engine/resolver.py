# nexus_tcg/engine/resolver.py
"""
Room transitions. Each function mutates the room it is handed; callers run
them against a private copy and persist the result through the room store.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..content.balance import CAPS, COMBAT_MODES, DEFAULTS, INFINITE
from ..content.catalog import CardCatalog
from .deck import fetch_deck, resolve_setup, to_unit
from .dice import add_die, roll_pool, rng_for, spend_any, spend_element
from .effects import apply_card_effect
from .errors import IllegalAction, InsufficientResource, NotInRoom, RoomFull
from .models import SIDES, Coin, PlayerInfo, Room, other_side
from .rules import charge_gauge, damage_hero, damage_unit

log = logging.getLogger(__name__)


def label(room: Room, side: str) -> str:
    info = room.players.get(side)
    if info and info.name:
        return info.name
    return side.upper()


def seated_side(room: Room, user_id: str) -> str:
    side = room.side_of(user_id)
    if not side:
        raise NotInRoom()
    return side


def draw(room: Room, side: str, n: int) -> int:
    """Move up to ``n`` cards from the front of the pile into hand."""
    drawn = 0
    for _ in range(n):
        if not room.deck[side]:
            break
        room.hand[side].append(room.deck[side].pop(0))
        drawn += 1
    return drawn


def pass_control(room: Room, to_side: str) -> None:
    room.turn = to_side
    room.phase_actor = to_side


def check_winner(room: Room) -> None:
    if room.winner:
        return
    for side in SIDES:
        if room.hero[side] <= CAPS["hero_min"]:
            room.winner = other_side(side)
            room.log.append(f"{label(room, room.winner)} wins the duel.")
            return


# ---------------------------------------------------------------- lobby

def create_room(room: Room, user: Optional[PlayerInfo]) -> None:
    if not user or not user.user_id:
        return
    if room.players["p1"] is None and room.players["p2"] is None:
        room.players["p1"] = user
        room.log.append(f"{label(room, 'p1')} opened the room.")


def can_take_over_seat_b(room: Room) -> bool:
    # abandoned seat B may be claimed until the game starts or B readies up
    return room.mode == "lobby" and not room.ready["p2"]


def join_room(room: Room, user: PlayerInfo) -> str:
    side = room.side_of(user.user_id)
    if side:
        room.players[side] = user
        return side
    for side in SIDES:
        if room.players[side] is None:
            room.players[side] = user
            room.log.append(f"{label(room, side)} joined as {side.upper()}.")
            return side
    if can_take_over_seat_b(room):
        previous = room.players["p2"]
        room.players["p2"] = user
        room.log.append(f"{label(room, 'p2')} took over P2 from {previous.name or previous.user_id}.")
        log.info("room %s: seat p2 taken over by %s", room.id, user.user_id)
        return "p2"
    raise RoomFull()


def missing_decks(room: Room, decks) -> list:
    if decks is None:
        return []
    missing = []
    for side in SIDES:
        info = room.players[side]
        if info and fetch_deck(decks, info) is None:
            missing.append(info.name or side.upper())
    return missing


def mark_ready(room: Room, user: PlayerInfo, catalog: CardCatalog, decks=None, mirror_dice: bool = True) -> None:
    side = room.side_of(user.user_id)
    if side:
        room.players[side] = user
    else:
        side = join_room(room, user)
    if room.ready[side]:
        return
    room.ready[side] = True
    room.log.append(f"{label(room, side)} is ready.")
    room.warn_no_deck = missing_decks(room, decks)
    if room.ready["p1"] and room.ready["p2"] and room.mode == "lobby":
        start_game(room, catalog, decks, mirror_dice)


def start_game(room: Room, catalog: CardCatalog, decks=None, mirror_dice: bool = True) -> None:
    """
    Called once when both seats are ready: deal boards/piles/hands, roll
    dice, flip the coin for the opening seat.

    With ``mirror_dice`` both seats open with the same pool; otherwise each
    seat rolls from its own stream.
    """
    if room.mode != "lobby":
        return
    room.mode = "play"
    room.phase_no = 1
    room.ended_phase = {side: False for side in SIDES}
    room.phase_end_order = []
    room.hero = {side: DEFAULTS["hero_hp"] for side in SIDES}
    room.winner = None

    shared = roll_pool(DEFAULTS["starting_dice"], rng_for(room.seed, "dice")) if mirror_dice else None
    for side in SIDES:
        saved = fetch_deck(decks, room.players[side])
        board, pile = resolve_setup(catalog, saved, rng_for(room.seed, f"deck:{side}"))
        room.board[side] = [u for u in (to_unit(catalog, code) for code in board) if u]
        room.deck[side] = pile
        room.hand[side] = []
        draw(room, side, DEFAULTS["opening_hand"])
        if shared is not None:
            room.dice[side] = dict(shared)
        else:
            room.dice[side] = roll_pool(DEFAULTS["starting_dice"], rng_for(room.seed, f"dice:{side}"))

    winner = "p1" if rng_for(room.seed, "coin").random() < 0.5 else "p2"
    room.coin = Coin(decided=True, winner=winner)
    room.coin_ack = {side: False for side in SIDES}
    pass_control(room, winner)
    room.log.append(f"Game start. {label(room, winner)} wins the coin flip.")
    log.info("room %s: game started, %s opens", room.id, winner)


def ack_coin(room: Room, user_id: str) -> None:
    side = seated_side(room, user_id)
    if not room.coin.decided:
        return
    room.coin_ack[side] = True
    if all(room.coin_ack[s] for s in SIDES):
        room.coin.decided = False


# ---------------------------------------------------------------- turn flow

def end_turn(room: Room, user_id: str) -> None:
    side = seated_side(room, user_id)
    if room.mode != "play" or room.turn != side:
        return
    pass_control(room, other_side(side))
    room.log.append(f"{label(room, side)} ends the turn.")


def end_phase(room: Room, user_id: str) -> None:
    side = seated_side(room, user_id)
    if room.mode != "play" or room.phase_actor != side or room.ended_phase[side]:
        return

    room.ended_phase[side] = True
    if side not in room.phase_end_order:
        room.phase_end_order.append(side)
    room.log.append(f"{label(room, side)} ends phase {room.phase_no}.")

    if not all(room.ended_phase[s] for s in SIDES):
        pass_control(room, other_side(side))
        return

    starter = room.phase_end_order[0] if room.phase_end_order else "p1"
    room.phase_no += 1
    pass_control(room, starter)
    room.ended_phase = {s: False for s in SIDES}
    room.phase_end_order = []
    for s in SIDES:
        draw(room, s, DEFAULTS["phase_draw"])
    room.log.append(f"Phase {room.phase_no}. {label(room, starter)} acts first.")


# ---------------------------------------------------------------- cards

def _acting_side(room: Room, user_id: str) -> Optional[str]:
    side = seated_side(room, user_id)
    if room.mode != "play" or room.phase_actor != side:
        return None
    return side


def play_card(room: Room, user_id: str, hand_index: int, catalog: CardCatalog) -> None:
    side = _acting_side(room, user_id)
    if not side or not 0 <= hand_index < len(room.hand[side]):
        return
    code = room.hand[side].pop(hand_index)
    if catalog.is_character(code):
        room.log.append(f"{label(room, side)} discards {code}.")
        return
    room.log.append(apply_card_effect(room, side, code))
    check_winner(room)


def discard_for_infinite(room: Room, user_id: str, hand_index: int) -> None:
    side = _acting_side(room, user_id)
    if not side or not 0 <= hand_index < len(room.hand[side]):
        return
    code = room.hand[side].pop(hand_index)
    add_die(room.dice[side], INFINITE, 1)
    room.log.append(f"{label(room, side)} converts {code} into an {INFINITE} die.")


# ---------------------------------------------------------------- combat

def pay_cost(pool, mode_data, element: str) -> bool:
    if mode_data["element"] is None:
        return spend_any(pool, mode_data["cost"])
    return spend_element(pool, element, mode_data["cost"])


def combat(room: Room, user_id: str, attacker_index: int, target_index: Optional[int], mode: str) -> None:
    seated_side(room, user_id)
    mode_data = COMBAT_MODES.get(mode)
    if mode_data is None:
        raise IllegalAction(f"Unknown combat mode: {mode}")
    side = _acting_side(room, user_id)
    if not side:
        return

    foe = other_side(side)
    if not 0 <= attacker_index < len(room.board[side]):
        return
    attacker = room.board[side][attacker_index]
    target = 0 if target_index is None else target_index
    if room.board[foe] and not 0 <= target < len(room.board[foe]):
        return
    if attacker.gauge < mode_data["requires_gauge"]:
        raise IllegalAction("Ultimate is not charged")

    # all-or-nothing: spend on a copy, commit only if fully paid
    pool = dict(room.dice[side])
    if not pay_cost(pool, mode_data, attacker.element):
        raise InsufficientResource(f"Not enough dice for {mode}")
    room.dice[side] = pool

    damage = attacker.attack + mode_data["bonus"]
    if mode_data["gauge"] == "reset":
        attacker.gauge = 0
    else:
        charge_gauge(attacker, mode_data["gauge"])

    if not room.board[foe]:
        room.hero[foe] = damage_hero(room.hero[foe], damage)
        room.log.append(f"{attacker.code} ({mode}) hits {label(room, foe)}'s hero for {damage}.")
    else:
        tgt_code = room.board[foe][target].code
        died = damage_unit(room.board[foe], target, damage)
        suffix = " It is defeated!" if died else ""
        room.log.append(f"{attacker.code} ({mode}) hits {tgt_code} for {damage}.{suffix}")

    check_winner(room)
    pass_control(room, foe)
