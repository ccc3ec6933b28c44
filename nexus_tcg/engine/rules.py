# nexus_tcg/engine/rules.py
from typing import List

from ..content.balance import CAPS
from .models import Unit


def clamp(x: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, x))


def damage_hero(current: int, amount: int) -> int:
    return max(CAPS["hero_min"], current - max(0, amount))


def damage_unit(board: List[Unit], index: int, amount: int) -> bool:
    """Hit ``board[index]``; removes it when hp drops to 0. Returns True if it died."""
    unit = board[index]
    unit.hp -= amount
    if unit.hp <= 0:
        board.pop(index)
        return True
    return False


def charge_gauge(unit: Unit, delta: int) -> None:
    unit.gauge = clamp(unit.gauge + delta, 0, CAPS["gauge_max"])
