# nexus_tcg/storage/decks.py
from __future__ import annotations

import threading
from typing import Dict, Optional

from sqlalchemy import select

from ..content.balance import DEFAULTS
from ..content.catalog import CardCatalog
from ..engine.errors import IllegalAction
from ..engine.models import SavedDeck
from .creation import make_session_factory, session_scope
from .tables import DECK_CARD_SLOTS, DeckRow


def validate_deck(deck: SavedDeck, catalog: CardCatalog) -> SavedDeck:
    if len(deck.characters) > DEFAULTS["board_size"]:
        raise IllegalAction(f"A deck holds at most {DEFAULTS['board_size']} characters")
    if len(deck.cards) > DEFAULTS["deck_size"]:
        raise IllegalAction(f"A deck holds at most {DEFAULTS['deck_size']} cards")
    for char_id in deck.characters:
        if catalog.character_by_id(int(char_id)) is None:
            raise IllegalAction(f"Unknown character id {char_id}")
    for card_id in deck.cards:
        if catalog.other_by_id(int(card_id)) is None:
            raise IllegalAction(f"Unknown card id {card_id}")
    return deck


class MemoryDeckRepository:
    def __init__(self, catalog: CardCatalog):
        self.catalog = catalog
        self._decks: Dict[str, SavedDeck] = {}
        self._lock = threading.Lock()

    def get_deck(self, user_id: str) -> Optional[SavedDeck]:
        with self._lock:
            return self._decks.get(str(user_id))

    def save_deck(self, user_id: str, deck: SavedDeck) -> SavedDeck:
        validate_deck(deck, self.catalog)
        with self._lock:
            self._decks[str(user_id)] = deck
        return deck


class SqlDeckRepository:
    """Active row of the ``decks`` table per user."""

    def __init__(self, engine, catalog: CardCatalog):
        self.catalog = catalog
        self.sessions = make_session_factory(engine)

    @staticmethod
    def _active(session, user_id: str) -> Optional[DeckRow]:
        return session.execute(
            select(DeckRow).where(DeckRow.user_id == str(user_id), DeckRow.is_active.is_(True)).limit(1)
        ).scalar_one_or_none()

    def get_deck(self, user_id: str) -> Optional[SavedDeck]:
        with session_scope(self.sessions) as session:
            row = self._active(session, user_id)
            if row is None:
                return None
            chars = [v for v in (row.card_char1, row.card_char2, row.card_char3) if v is not None]
            cards = [getattr(row, f"card{i}") for i in range(1, DECK_CARD_SLOTS + 1)]
            return SavedDeck(
                name=row.name or "My Deck",
                characters=chars,
                cards=[v for v in cards if v is not None],
            )

    def save_deck(self, user_id: str, deck: SavedDeck) -> SavedDeck:
        validate_deck(deck, self.catalog)
        with session_scope(self.sessions) as session:
            row = self._active(session, user_id)
            if row is None:
                row = DeckRow(user_id=str(user_id), is_active=True)
                session.add(row)
            row.name = deck.name
            chars = list(deck.characters) + [None] * DEFAULTS["board_size"]
            row.card_char1, row.card_char2, row.card_char3 = chars[:3]
            cards = list(deck.cards) + [None] * DECK_CARD_SLOTS
            for i in range(1, DECK_CARD_SLOTS + 1):
                setattr(row, f"card{i}", cards[i - 1])
        return deck
