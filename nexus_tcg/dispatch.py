# nexus_tcg/dispatch.py
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

from .engine import resolver
from .engine.actions import (
    AckCoin, Action, Combat, CreateRoom, DiscardForInfinite, EndPhase,
    EndTurn, GetState, Hello, JoinRoom, PlayCard, Ready,
)
from .engine.errors import ConflictError, IllegalAction
from .engine.models import PlayerInfo, Room
from .projection import snapshot_for
from .state import GameServices
from .storage.rooms import Conflict
from .storage.transactions import apply_transition

log = logging.getLogger(__name__)

API_VERSION = 1

Notifier = Callable[[str, int], None]


def refresh_member(room: Room, user: Optional[PlayerInfo]) -> None:
    """Keep a seated user's name/avatar current; never seats anyone."""
    if not user:
        return
    side = room.side_of(user.user_id)
    if side:
        room.players[side] = user


class Dispatcher:
    """
    Runs one inbound action: load room, apply the matching transition,
    persist through the version check, return the caller's projection.
    """

    def __init__(self, services: GameServices, notify: Optional[Notifier] = None):
        self.services = services
        self.notify = notify

    def dispatch(self, action: Action) -> Dict[str, Any]:
        if isinstance(action, Hello):
            return {
                "ok": True,
                "time": int(time.time() * 1000),
                "version": API_VERSION,
                "db": "on" if self.services.db_on else "off",
            }
        if isinstance(action, GetState):
            room, _ = self.services.rooms.load(action.room_id)
            return {"ok": True, "state": snapshot_for(room, action.user_id)}

        transition, viewer = self.transition_for(action)
        outcome = apply_transition(
            self.services.rooms, action.room_id, transition, retry=self.services.retry
        )
        if isinstance(outcome, Conflict):
            log.info("room %s: giving up after %s attempts", outcome.room_id, self.services.retry.attempts)
            raise ConflictError()
        if outcome.changed and self.notify:
            self.notify(outcome.room.id, outcome.version)

        response = {"ok": True, "state": snapshot_for(outcome.room, viewer)}
        if isinstance(action, (CreateRoom, JoinRoom)):
            response["roomId"] = outcome.room.id
        return response

    def transition_for(self, action: Action):
        """(transition, viewer user id) for a state-changing action."""
        catalog = self.services.catalog
        decks = self.services.decks
        mirror = self.services.mirror_dice

        if isinstance(action, CreateRoom):
            return (lambda room: resolver.create_room(room, action.user)), _uid(action.user)
        if isinstance(action, JoinRoom):
            def join(room: Room) -> None:
                if action.user:
                    resolver.join_room(room, action.user)
            return join, _uid(action.user)
        if isinstance(action, Ready):
            return (lambda room: resolver.mark_ready(room, action.user, catalog, decks, mirror)), action.user.user_id

        user = action.user
        if isinstance(action, AckCoin):
            step = lambda room: resolver.ack_coin(room, user.user_id)
        elif isinstance(action, EndTurn):
            if not self.services.allow_end_turn:
                raise IllegalAction("endTurn is disabled; combat ends the turn")
            step = lambda room: resolver.end_turn(room, user.user_id)
        elif isinstance(action, EndPhase):
            step = lambda room: resolver.end_phase(room, user.user_id)
        elif isinstance(action, PlayCard):
            step = lambda room: resolver.play_card(room, user.user_id, action.index, catalog)
        elif isinstance(action, DiscardForInfinite):
            step = lambda room: resolver.discard_for_infinite(room, user.user_id, action.index)
        elif isinstance(action, Combat):
            step = lambda room: resolver.combat(room, user.user_id, action.attacker, action.target, action.mode)
        else:
            raise IllegalAction(f"Unsupported action {type(action).__name__}")

        def seated_step(room: Room) -> None:
            refresh_member(room, user)
            step(room)

        return seated_step, user.user_id


def _uid(user: Optional[PlayerInfo]) -> str:
    return user.user_id if user else ""
