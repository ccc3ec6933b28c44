# nexus_tcg/engine/deck.py
from __future__ import annotations

import logging
import random
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from ..content.balance import DEFAULTS
from ..content.catalog import CardCatalog
from .models import PlayerInfo, SavedDeck, Unit

log = logging.getLogger(__name__)


def to_unit(catalog: CardCatalog, code: str) -> Optional[Unit]:
    ch = catalog.character(code)
    if not ch:
        return None
    return Unit(code=ch.code, element=ch.element, attack=ch.attack, hp=ch.hp, gauge=0)


def fetch_deck(decks, user: Optional[PlayerInfo]) -> Optional[SavedDeck]:
    """Saved deck for ``user``; repository failures count as no deck."""
    if decks is None or user is None:
        return None
    try:
        return decks.get_deck(user.user_id)
    except SQLAlchemyError:
        log.warning("deck lookup failed for %s", user.user_id, exc_info=True)
        return None


def resolve_saved(catalog: CardCatalog, saved: Optional[SavedDeck]) -> Tuple[List[str], List[str]]:
    if not saved:
        return [], []
    chars = []
    for char_id in saved.characters[: DEFAULTS["board_size"]]:
        ch = catalog.character_by_id(int(char_id))
        if ch:
            chars.append(ch.code)
    pile = []
    for card_id in saved.cards[: DEFAULTS["deck_size"]]:
        card = catalog.other_by_id(int(card_id))
        if card:
            pile.append(card.code)
    return chars, pile


def resolve_setup(
    catalog: CardCatalog, saved: Optional[SavedDeck], r: random.Random
) -> Tuple[List[str], List[str]]:
    """
    Starting board codes and shuffled draw pile for one seat.
    Each half falls back to the full catalog independently.
    """
    board, pile = resolve_saved(catalog, saved)
    r.shuffle(pile)

    if not board:
        candidates = [c.code for c in catalog.characters()]
        r.shuffle(candidates)
        board = candidates[: DEFAULTS["board_size"]]
    if not pile:
        supports = [c.code for c in catalog.supports()]
        events = [c.code for c in catalog.events()]
        pile = [*supports, *events, *supports, *events]
        r.shuffle(pile)
    return board, pile
