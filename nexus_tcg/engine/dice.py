# nexus_tcg/engine/dice.py
import random
from typing import Dict, Optional

from ..content.balance import ELEMENTS, INFINITE

DicePool = Dict[str, int]


def rng_for(seed: int, tag) -> random.Random:
    # deterministic per room seed + tag
    return random.Random(f"{seed}:{tag}")


def roll_element(r: random.Random) -> str:
    return r.choice(ELEMENTS)


def roll_pool(count: int, r: random.Random) -> DicePool:
    pool: DicePool = {}
    for _ in range(count):
        add_die(pool, roll_element(r))
    return pool


def add_die(pool: DicePool, element: str, n: int = 1) -> None:
    pool[element] = pool.get(element, 0) + n


def total(pool: DicePool) -> int:
    return sum(max(0, n) for n in pool.values())


def spend_any(pool: DicePool, n: int) -> bool:
    """Pay ``n`` dice of any element, wildcards first. All-or-nothing."""
    if total(pool) < n:
        return False
    remain = n
    use_inf = min(pool.get(INFINITE, 0), remain)
    if use_inf:
        pool[INFINITE] -= use_inf
        remain -= use_inf
    for element in list(pool):
        if remain <= 0:
            break
        take = min(pool[element], remain)
        if take > 0:
            pool[element] -= take
            remain -= take
    _prune(pool)
    return True


def spend_element(pool: DicePool, element: Optional[str], n: int) -> bool:
    """Pay ``n`` dice of ``element``; wildcards cover the shortfall. All-or-nothing."""
    have = pool.get(element, 0) if element else 0
    wild = pool.get(INFINITE, 0)
    if have + wild < n:
        return False
    use_el = min(have, n)
    if use_el:
        pool[element] -= use_el
    if n - use_el:
        pool[INFINITE] = wild - (n - use_el)
    _prune(pool)
    return True


def _prune(pool: DicePool) -> None:
    for element in [k for k, v in pool.items() if v <= 0]:
        del pool[element]
