# nexus_tcg/engine/effects.py
"""Support and event card effects, applied immediately when played."""

from __future__ import annotations

from typing import Callable, Dict

from ..content.balance import DEFAULTS
from .models import Room, other_side
from .rules import damage_hero, damage_unit


def healing_amulet(room: Room, side: str) -> str:
    room.hero[side] = min(room.hero[side] + 2, DEFAULTS["hero_hp"])
    return f"{side} heals their hero to {room.hero[side]}."


def blazing_sigil(room: Room, side: str) -> str:
    for unit in room.board[side]:
        unit.hp += 2
    return f"{side}'s characters gain 2 HP."


def fireworks(room: Room, side: str) -> str:
    foe = other_side(side)
    if not room.board[foe]:
        room.hero[foe] = damage_hero(room.hero[foe], 2)
        return f"Fireworks hit {foe}'s hero for 2."
    # walk backwards so removals keep indices valid
    for i in range(len(room.board[foe]) - 1, -1, -1):
        damage_unit(room.board[foe], i, 2)
    return f"Fireworks hit every {foe} character for 2."


CARD_EFFECTS: Dict[str, Callable[[Room, str], str]] = {
    "HEALING_AMULET": healing_amulet,
    "BLAZING_SIGIL": blazing_sigil,
    "FIREWORKS": fireworks,
}


def apply_card_effect(room: Room, side: str, code: str) -> str:
    effect = CARD_EFFECTS.get(code)
    if not effect:
        return f"{side} plays {code}. Nothing happens."
    return effect(room, side)
