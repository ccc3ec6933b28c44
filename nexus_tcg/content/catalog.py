# nexus_tcg/content/catalog.py
"""Static card reference data.

Loaded once per process from ``cards.json`` and shared read-only between
requests, so no locking is needed around it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional

DEFAULT_CARDS_PATH = Path(__file__).with_name("cards.json")


@dataclass(frozen=True)
class CharacterCard:
    char_id: int
    code: str
    name: str
    element: str
    attack: int
    hp: int
    cost: int = 0
    ability: str = ""
    art: str = ""

    @property
    def kind(self) -> str:
        return "character"


@dataclass(frozen=True)
class ActionCard:
    id: int
    code: str
    name: str
    kind: str  # "support" | "event"
    element: str = "Neutral"
    cost: int = 0
    text: str = ""
    art: str = ""


class CardCatalog:
    def __init__(self, characters: Iterable[CharacterCard], supports: Iterable[ActionCard], events: Iterable[ActionCard]):
        self._characters: List[CharacterCard] = list(characters)
        self._supports: List[ActionCard] = list(supports)
        self._events: List[ActionCard] = list(events)
        self._by_code: Dict[str, object] = {}
        for card in [*self._characters, *self._supports, *self._events]:
            self._by_code[card.code] = card
        self._char_by_id = {c.char_id: c for c in self._characters}
        self._other_by_id = {c.id: c for c in [*self._supports, *self._events]}

    @classmethod
    def from_dict(cls, data: Dict) -> "CardCatalog":
        characters = [
            CharacterCard(
                char_id=int(raw["char_id"]),
                code=str(raw["code"]),
                name=raw.get("name") or raw["code"],
                element=raw.get("element") or "Neutral",
                attack=int(raw.get("attack", 0) or 0),
                hp=int(raw.get("hp", 0) or 0),
                cost=int(raw.get("cost", 0) or 0),
                ability=raw.get("ability", ""),
                art=raw.get("art", ""),
            )
            for raw in data.get("characters", [])
        ]

        def others(kind: str) -> List[ActionCard]:
            return [
                ActionCard(
                    id=int(raw["id"]),
                    code=str(raw["code"]),
                    name=raw.get("name") or raw["code"],
                    kind=kind,
                    element=raw.get("element") or "Neutral",
                    cost=int(raw.get("cost", 0) or 0),
                    text=raw.get("text", ""),
                    art=raw.get("art", ""),
                )
                for raw in data.get(kind + "s", [])
            ]

        return cls(characters, others("support"), others("event"))

    @classmethod
    def from_file(cls, path) -> "CardCatalog":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def characters(self) -> List[CharacterCard]:
        return list(self._characters)

    def supports(self) -> List[ActionCard]:
        return list(self._supports)

    def events(self) -> List[ActionCard]:
        return list(self._events)

    def get(self, code: str):
        return self._by_code.get(code)

    def character(self, code: str) -> Optional[CharacterCard]:
        card = self.get(code)
        return card if isinstance(card, CharacterCard) else None

    def is_character(self, code: str) -> bool:
        return self.character(code) is not None

    def character_by_id(self, char_id: int) -> Optional[CharacterCard]:
        return self._char_by_id.get(char_id)

    def other_by_id(self, card_id: int) -> Optional[ActionCard]:
        return self._other_by_id.get(card_id)

    def pick(self, codes: Optional[Iterable[str]] = None) -> list:
        """Cards for ``codes`` in request order, deduplicated; everything when ``codes`` is None."""
        if codes is None:
            return list(self._by_code.values())
        out = []
        seen = set()
        for code in codes:
            if code in seen:
                continue
            seen.add(code)
            card = self.get(code)
            if card is not None:
                out.append(card)
        return out


def card_to_dict(card) -> Dict:
    if isinstance(card, CharacterCard):
        return {
            "id": card.char_id,
            "code": card.code,
            "name": card.name,
            "kind": card.kind,
            "element": card.element,
            "attack": card.attack,
            "hp": card.hp,
            "cost": card.cost,
            "ability": card.ability,
            "art": card.art,
        }
    return {
        "id": card.id,
        "code": card.code,
        "name": card.name,
        "kind": card.kind,
        "element": card.element,
        "cost": card.cost,
        "text": card.text,
        "art": card.art,
    }


@lru_cache(maxsize=None)
def load_catalog(path: Optional[str] = None) -> CardCatalog:
    return CardCatalog.from_file(path or DEFAULT_CARDS_PATH)
