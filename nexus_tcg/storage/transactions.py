# nexus_tcg/storage/transactions.py
"""
Optimistic-concurrency loop: read, apply a transition to a private copy,
write back conditional on the version read. A losing writer recomputes
against the fresh state, up to ``RetryPolicy.attempts`` tries in total.
"""

from __future__ import annotations

import copy
import logging
import time
from dataclasses import dataclass
from typing import Callable, Union

from ..engine.models import Room
from .rooms import Conflict

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    attempts: int = 3
    backoff: float = 0.01          # seconds; doubles after every lost race

    def delay(self, attempt: int) -> float:
        return self.backoff * (2 ** attempt)


@dataclass
class TransitionResult:
    room: Room
    version: int
    changed: bool


def apply_transition(
    store,
    room_id: str,
    transition: Callable[[Room], None],
    retry: RetryPolicy = RetryPolicy(),
    sleep: Callable[[float], None] = time.sleep,
) -> Union[TransitionResult, Conflict]:
    """
    ``transition`` mutates the room it is given or raises GameError to reject.
    A transition that leaves the room as it was is not written.
    """
    conflict = None
    for attempt in range(max(1, retry.attempts)):
        room, version = store.load(room_id)
        before = room.to_dict()
        working = copy.deepcopy(room)
        transition(working)
        if working.to_dict() == before:
            return TransitionResult(working, version, changed=False)

        outcome = store.compare_and_swap(room_id, working, version)
        if not isinstance(outcome, Conflict):
            return TransitionResult(working, outcome, changed=True)

        conflict = outcome
        log.info(
            "room %s: lost write at version %s (now %s), attempt %s",
            room_id, version, outcome.current_version, attempt + 1,
        )
        if attempt + 1 < retry.attempts:
            sleep(retry.delay(attempt))
    return conflict
