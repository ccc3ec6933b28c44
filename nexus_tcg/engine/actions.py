# nexus_tcg/engine/actions.py
"""
Inbound requests as a closed set of action types, one per room transition.
``parse_action`` turns a loosely-typed request body into one of them.
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
from urllib.parse import urlparse

from .errors import IllegalAction
from .models import PlayerInfo

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits


@dataclass(frozen=True)
class Hello:
    pass


@dataclass(frozen=True)
class CreateRoom:
    room_id: str
    user: Optional[PlayerInfo] = None


@dataclass(frozen=True)
class JoinRoom:
    room_id: str
    user: Optional[PlayerInfo] = None


@dataclass(frozen=True)
class GetState:
    room_id: str
    user_id: str = ""


@dataclass(frozen=True)
class Ready:
    room_id: str
    user: PlayerInfo


@dataclass(frozen=True)
class AckCoin:
    room_id: str
    user: PlayerInfo


@dataclass(frozen=True)
class EndTurn:
    room_id: str
    user: PlayerInfo


@dataclass(frozen=True)
class EndPhase:
    room_id: str
    user: PlayerInfo


@dataclass(frozen=True)
class PlayCard:
    room_id: str
    user: PlayerInfo
    index: int = 0


@dataclass(frozen=True)
class DiscardForInfinite:
    room_id: str
    user: PlayerInfo
    index: int = 0


@dataclass(frozen=True)
class Combat:
    room_id: str
    user: PlayerInfo
    attacker: int = 0
    target: Optional[int] = None
    mode: str = "basic"


Action = Union[
    Hello, CreateRoom, JoinRoom, GetState, Ready, AckCoin,
    EndTurn, EndPhase, PlayCard, DiscardForInfinite, Combat,
]

# actions that act on behalf of a seated user
SEATED_ACTIONS = {
    "ready": Ready,
    "ackCoin": AckCoin,
    "endTurn": EndTurn,
    "endPhase": EndPhase,
}


def new_room_code(length: int = 6) -> str:
    return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(length))


def room_from_referrer(referrer: Optional[str]) -> str:
    """``https://host/play/abc123`` -> ``ABC123``."""
    if not referrer:
        return ""
    parts = [p for p in urlparse(referrer).path.split("/") if p]
    if len(parts) >= 2 and parts[-2] == "play":
        return parts[-1].upper()
    return ""


def _int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise IllegalAction(f"Expected an integer, got {value!r}")


def _user(body: Dict[str, Any]) -> Optional[PlayerInfo]:
    raw = body.get("user")
    if isinstance(raw, dict):
        user_id = str(raw.get("userId") or raw.get("user_id") or "")
        if user_id:
            return PlayerInfo(user_id=user_id, name=raw.get("name"), avatar=raw.get("avatar"))
    user_id = str(body.get("userId") or body.get("user_id") or "")
    if user_id:
        return PlayerInfo(user_id=user_id, name=body.get("name"), avatar=body.get("avatar"))
    return None


def parse_action(body: Dict[str, Any], referrer: Optional[str] = None) -> Action:
    body = body if isinstance(body, dict) else {}
    name = str(body.get("action") or "")
    if not name:
        raise IllegalAction("Missing action")
    if name == "hello":
        return Hello()

    room_id = str(body.get("roomId") or body.get("room_id") or "").strip().upper()
    if not room_id:
        room_id = room_from_referrer(referrer)
    user = _user(body)

    if name == "createRoom":
        return CreateRoom(room_id=room_id or new_room_code(), user=user)
    if not room_id:
        raise IllegalAction("Missing roomId")
    if name == "joinRoom":
        return JoinRoom(room_id=room_id, user=user)
    if name == "getState":
        return GetState(room_id=room_id, user_id=user.user_id if user else "")

    if name not in SEATED_ACTIONS and name not in ("playCard", "discardForInfinite", "combat"):
        raise IllegalAction(f"Unknown action: {name}")
    if user is None:
        raise IllegalAction("Missing userId")

    if name in SEATED_ACTIONS:
        return SEATED_ACTIONS[name](room_id=room_id, user=user)
    if name == "playCard":
        return PlayCard(room_id=room_id, user=user, index=_int(body.get("index")))
    if name == "discardForInfinite":
        return DiscardForInfinite(room_id=room_id, user=user, index=_int(body.get("index")))
    target = body.get("target")
    return Combat(
        room_id=room_id,
        user=user,
        attacker=_int(body.get("attacker")),
        target=None if target is None or target == "" else _int(target),
        mode=str(body.get("mode") or "basic"),
    )
