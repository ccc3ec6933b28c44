# nexus_tcg/engine/models.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from ..content.balance import DEFAULTS

SIDES = ("p1", "p2")  # p1 is seat A (host), p2 is seat B


def other_side(side: str) -> str:
    return "p2" if side == "p1" else "p1"


def per_side(factory) -> Dict[str, Any]:
    return {side: factory() for side in SIDES}


@dataclass
class PlayerInfo:
    user_id: str
    name: Optional[str] = None
    avatar: Optional[str] = None


@dataclass
class Unit:
    code: str
    element: str
    attack: int
    hp: int
    gauge: int = 0                         # ultimate charge, 0..3


@dataclass
class Coin:
    decided: bool = False
    winner: Optional[str] = None


@dataclass
class Room:
    id: str
    mode: str = "lobby"                    # "lobby" | "play"
    seed: int = 0                          # for deterministic shuffles/dice
    players: Dict[str, Optional[PlayerInfo]] = field(default_factory=lambda: per_side(lambda: None))
    ready: Dict[str, bool] = field(default_factory=lambda: per_side(lambda: False))
    coin: Coin = field(default_factory=Coin)
    coin_ack: Dict[str, bool] = field(default_factory=lambda: per_side(lambda: False))
    phase_no: int = 0
    turn: str = "p1"
    phase_actor: str = "p1"
    ended_phase: Dict[str, bool] = field(default_factory=lambda: per_side(lambda: False))
    phase_end_order: List[str] = field(default_factory=list)
    hero: Dict[str, int] = field(default_factory=lambda: per_side(lambda: DEFAULTS["hero_hp"]))
    board: Dict[str, List[Unit]] = field(default_factory=lambda: per_side(list))
    hand: Dict[str, List[str]] = field(default_factory=lambda: per_side(list))
    deck: Dict[str, List[str]] = field(default_factory=lambda: per_side(list))
    dice: Dict[str, Dict[str, int]] = field(default_factory=lambda: per_side(dict))
    warn_no_deck: List[str] = field(default_factory=list)
    winner: Optional[str] = None
    log: List[str] = field(default_factory=list)

    def side_of(self, user_id: str) -> Optional[str]:
        if not user_id:
            return None
        for side in SIDES:
            info = self.players.get(side)
            if info and info.user_id == user_id:
                return side
        return None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Room":
        data = dict(data)
        players = {}
        for side in SIDES:
            raw = (data.get("players") or {}).get(side)
            players[side] = PlayerInfo(**raw) if raw else None
        data["players"] = players
        data["coin"] = Coin(**(data.get("coin") or {}))
        data["board"] = {
            side: [Unit(**u) for u in (data.get("board") or {}).get(side, [])]
            for side in SIDES
        }
        known = cls.__dataclass_fields__.keys()
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class SavedDeck:
    name: str = "My Deck"
    characters: List[int] = field(default_factory=list)   # char_id, at most 3
    cards: List[int] = field(default_factory=list)        # support/event id, at most 20
