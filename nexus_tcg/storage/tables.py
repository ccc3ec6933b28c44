"""
Declares database tables
"""
from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String

from .creation import BASE

DECK_CARD_SLOTS = 20


class RoomRow(BASE):
    """
    One match room. ``state_json`` holds the serialised Room; ``version``
    is bumped on every committed write and guards concurrent writers.
    """
    __tablename__ = "rooms"
    id = Column(String(16), primary_key=True)
    version = Column(Integer, nullable=False, default=1)
    state_json = Column(JSON, nullable=False)
    updated_at = Column(DateTime, nullable=True)


class DeckRow(BASE):
    """
    A user's saved deck: three character slots plus twenty support/event
    slots, each holding a catalog id or NULL.
    """
    __tablename__ = "decks"
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    name = Column(String(64), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    card_char1 = Column(Integer, nullable=True)
    card_char2 = Column(Integer, nullable=True)
    card_char3 = Column(Integer, nullable=True)


for _i in range(1, DECK_CARD_SLOTS + 1):
    setattr(DeckRow, f"card{_i}", Column(f"card{_i}", Integer, nullable=True))
