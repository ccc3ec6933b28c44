# nexus_tcg/storage/rooms.py
"""
Room stores. Every record carries a version counter; writers must name the
version they read and lose with a ``Conflict`` if someone committed first.
"""

from __future__ import annotations

import copy
import logging
import random
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple, Union

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..engine.models import Room
from .creation import make_session_factory, session_scope
from .tables import RoomRow

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Conflict:
    room_id: str
    current_version: int


CasResult = Union[int, Conflict]


def fresh_room(room_id: str, seed: Optional[int] = None) -> Room:
    if seed is None:
        seed = random.getrandbits(32)
    return Room(id=room_id, seed=seed)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryRoomStore:
    """Process-local store. No cross-process consistency."""

    name = "memory"

    def __init__(self):
        self._rooms: Dict[str, Tuple[int, dict]] = {}
        self._lock = threading.Lock()

    def peek(self, room_id: str) -> Optional[Tuple[Room, int]]:
        with self._lock:
            entry = self._rooms.get(room_id.upper())
        if entry is None:
            return None
        version, state = entry
        return Room.from_dict(copy.deepcopy(state)), version

    def load(self, room_id: str) -> Tuple[Room, int]:
        room_id = room_id.upper()
        with self._lock:
            if room_id not in self._rooms:
                self._rooms[room_id] = (1, fresh_room(room_id).to_dict())
            version, state = self._rooms[room_id]
        return Room.from_dict(copy.deepcopy(state)), version

    def compare_and_swap(self, room_id: str, room: Room, expected_version: int) -> CasResult:
        room_id = room_id.upper()
        with self._lock:
            current = self._rooms.get(room_id)
            current_version = current[0] if current else 0
            if current_version != expected_version:
                return Conflict(room_id, current_version)
            self._rooms[room_id] = (expected_version + 1, room.to_dict())
            return expected_version + 1


class SqlRoomStore:
    """``rooms`` table; the write is ``UPDATE ... WHERE id = ? AND version = ?``."""

    name = "sql"

    def __init__(self, engine):
        self.engine = engine
        self.sessions = make_session_factory(engine)

    def peek(self, room_id: str) -> Optional[Tuple[Room, int]]:
        with session_scope(self.sessions) as session:
            row = session.get(RoomRow, room_id.upper())
            if row is None:
                return None
            return Room.from_dict(row.state_json), int(row.version)

    def load(self, room_id: str) -> Tuple[Room, int]:
        room_id = room_id.upper()
        found = self.peek(room_id)
        if found:
            return found
        room = fresh_room(room_id)
        try:
            with session_scope(self.sessions) as session:
                session.add(RoomRow(id=room_id, version=1, state_json=room.to_dict(), updated_at=_now()))
        except IntegrityError:
            # lost the insert race; someone else created it
            found = self.peek(room_id)
            if found:
                return found
            raise
        log.info("room %s created", room_id)
        return room, 1

    def compare_and_swap(self, room_id: str, room: Room, expected_version: int) -> CasResult:
        room_id = room_id.upper()
        with session_scope(self.sessions) as session:
            result = session.execute(
                update(RoomRow)
                .where(RoomRow.id == room_id, RoomRow.version == expected_version)
                .values(state_json=room.to_dict(), version=expected_version + 1, updated_at=_now())
            )
            if result.rowcount == 1:
                return expected_version + 1
            current = session.execute(select(RoomRow.version).where(RoomRow.id == room_id)).scalar()
        return Conflict(room_id, int(current or 0))


class FallbackRoomStore:
    """
    Serve from ``primary``; when it raises a database error, degrade to
    ``fallback`` for that call. Rooms written during an outage live only in
    the fallback.
    """

    name = "fallback"

    def __init__(self, primary, fallback=None):
        self.primary = primary
        self.fallback = fallback or MemoryRoomStore()
        self.degraded = False

    def _call(self, method: str, *args):
        try:
            result = getattr(self.primary, method)(*args)
            if self.degraded:
                log.info("room store recovered, using %s again", self.primary.name)
                self.degraded = False
            return result
        except SQLAlchemyError:
            if not self.degraded:
                log.warning("room store %s unavailable, degrading to memory", self.primary.name, exc_info=True)
            self.degraded = True
            return getattr(self.fallback, method)(*args)

    def peek(self, room_id: str):
        return self._call("peek", room_id)

    def load(self, room_id: str):
        return self._call("load", room_id)

    def compare_and_swap(self, room_id: str, room: Room, expected_version: int) -> CasResult:
        return self._call("compare_and_swap", room_id, room, expected_version)
