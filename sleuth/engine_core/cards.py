"""
Cards - Card identity and categories.

Every card belongs to exactly one category (room, subject or tool).
Categories are a closed enum; behaviour that differs per category is
looked up from the enum, not implemented through subclasses.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping


class CardCategory(str, Enum):
    """Card categories. Values match the catalog file format."""
    ROOM = "ROOM"
    SUBJECT = "SUBJECT"
    TOOL = "TOOL"

    @property
    def order(self) -> int:
        """Stable sort position (rooms first)."""
        return _CATEGORY_ORDER[self]

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_ORDER = {category: idx for idx, category in enumerate(CardCategory)}

_CATEGORY_LABELS = {
    CardCategory.ROOM: "Where",
    CardCategory.SUBJECT: "Who",
    CardCategory.TOOL: "What",
}


@dataclass(frozen=True)
class Card:
    """
    A card in play.

    Identity is the id alone: two cards with the same id are the same card.
    """
    id: str
    category: CardCategory = field(compare=False)
    display_names: Mapping[str, str] = field(default_factory=dict, compare=False)

    def display_name(self, locale: str = "en") -> str:
        """Localized name, falling back to English, then to the id."""
        return self.display_names.get(locale) or self.display_names.get("en") or self.id

    def __repr__(self) -> str:
        return f"Card({self.id!r}, {self.category.value})"


def card_sort_key(card: Card) -> tuple[int, str]:
    """Sort key: category order, then id."""
    return (card.category.order, card.id)


def sort_cards(cards: Iterable[Card]) -> list[Card]:
    """Return cards sorted by category, then id."""
    return sorted(cards, key=card_sort_key)


def cards_by_category(cards: Iterable[Card]) -> dict[CardCategory, list[Card]]:
    """Group cards by category. Every category is present, possibly empty."""
    grouped: dict[CardCategory, list[Card]] = {category: [] for category in CardCategory}
    for card in sort_cards(cards):
        grouped[card.category].append(card)
    return grouped


def first_card_per_category(priority_cards: Iterable[Card]) -> dict[CardCategory, Card]:
    """
    Pick the first card of each category from a priority-ordered sequence.

    Categories without any candidate are missing from the result.
    """
    picked: dict[CardCategory, Card] = {}
    for card in priority_cards:
        if card.category not in picked:
            picked[card.category] = card
            if len(picked) == len(CardCategory):
                break
    return picked
