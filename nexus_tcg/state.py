# nexus_tcg/state.py
"""Wiring of the stores and catalog a running app uses."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from flask import current_app

from .content.catalog import CardCatalog, load_catalog
from .storage.creation import create_tables, make_engine
from .storage.decks import MemoryDeckRepository, SqlDeckRepository
from .storage.rooms import FallbackRoomStore, MemoryRoomStore, SqlRoomStore
from .storage.transactions import RetryPolicy

log = logging.getLogger(__name__)

EXTENSION_KEY = "nexus"

_BOOL_KEYS = {"ROOM_STORE_FALLBACK", "ALLOW_END_TURN", "MIRROR_STARTING_DICE"}
_INT_KEYS = {"CONFLICT_RETRIES"}
_FLOAT_KEYS = {"CONFLICT_BACKOFF"}


@dataclass
class GameServices:
    catalog: CardCatalog
    rooms: Any
    decks: Any
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    allow_end_turn: bool = True
    mirror_dice: bool = True
    db_on: bool = False


def env_overrides(environ: Mapping[str, str], keys) -> dict:
    out = {}
    for key in keys:
        raw = environ.get(f"NEXUS_{key}")
        if raw is None:
            continue
        if key in _BOOL_KEYS:
            out[key] = raw.strip().lower() in ("1", "true", "yes", "on")
        elif key in _INT_KEYS:
            out[key] = int(raw)
        elif key in _FLOAT_KEYS:
            out[key] = float(raw)
        else:
            out[key] = raw
    return out


def build_services(config: Mapping[str, Any]) -> GameServices:
    cards_path = config.get("CARDS_PATH")
    catalog = load_catalog(str(cards_path) if cards_path else None)

    room_mode = config.get("ROOM_STORE", "memory")
    deck_mode = config.get("DECK_STORE", "memory")
    engine = None
    if "sql" in (room_mode, deck_mode):
        engine = make_engine(config["DATABASE_URL"])
        create_tables(engine)

    if room_mode == "sql":
        rooms = SqlRoomStore(engine)
        if config.get("ROOM_STORE_FALLBACK", True):
            rooms = FallbackRoomStore(rooms, MemoryRoomStore())
    elif room_mode == "memory":
        rooms = MemoryRoomStore()
    else:
        raise ValueError(f"Unknown ROOM_STORE {room_mode!r}")

    if deck_mode == "sql":
        decks = SqlDeckRepository(engine, catalog)
    elif deck_mode == "memory":
        decks = MemoryDeckRepository(catalog)
    else:
        raise ValueError(f"Unknown DECK_STORE {deck_mode!r}")

    log.info("room store: %s, deck store: %s", rooms.name, deck_mode)
    return GameServices(
        catalog=catalog,
        rooms=rooms,
        decks=decks,
        retry=RetryPolicy(
            attempts=int(config.get("CONFLICT_RETRIES", 3)),
            backoff=float(config.get("CONFLICT_BACKOFF", 0.01)),
        ),
        allow_end_turn=bool(config.get("ALLOW_END_TURN", True)),
        mirror_dice=bool(config.get("MIRROR_STARTING_DICE", True)),
        db_on=room_mode == "sql",
    )


def services() -> GameServices:
    return current_app.extensions[EXTENSION_KEY]
