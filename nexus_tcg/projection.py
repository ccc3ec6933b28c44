# nexus_tcg/projection.py
from dataclasses import asdict
from typing import Any, Dict, Optional

from .engine.models import SIDES, Room

LOG_TAIL = 30


def snapshot_for(room: Room, viewer_id: Optional[str]) -> Dict[str, Any]:
    """
    Client view of ``room`` for ``viewer_id``. Only the viewer's own hand
    is included; both sides' hand and pile sizes are public.
    """
    you = room.side_of(viewer_id) if viewer_id else None

    def public_player(side: str):
        info = room.players.get(side)
        if not info:
            return None
        fallback = "Host" if side == "p1" else "Player"
        return {"name": info.name or fallback, "avatar": info.avatar}

    return {
        "id": room.id,
        "mode": room.mode,
        "you": you,
        "players": {side: public_player(side) for side in SIDES},
        "ready": dict(room.ready),
        "coin": {"decided": room.coin.decided, "winner": room.coin.winner},
        "coin_ack": dict(room.coin_ack),
        "turn": room.turn,
        "phase_no": room.phase_no,
        "phase_actor": room.phase_actor,
        "ended_phase": dict(room.ended_phase),
        "hero": dict(room.hero),
        "dice": {side: dict(room.dice[side]) for side in SIDES},
        "board": {side: [asdict(u) for u in room.board[side]] for side in SIDES},
        "hand": list(room.hand[you]) if you else [],
        "hand_count": {side: len(room.hand[side]) for side in SIDES},
        "deck_count": {side: len(room.deck[side]) for side in SIDES},
        "warn_no_deck": list(room.warn_no_deck) or None,
        "winner": room.winner,
        "log": room.log[-LOG_TAIL:],
        "log_length": len(room.log),
    }
