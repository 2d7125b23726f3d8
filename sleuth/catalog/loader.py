"""
Card Catalog Loader - Reads card definitions from JSON.

Format: a list of records
    {"type": "ROOM" | "SUBJECT" | "TOOL", "id": "...", "displayNames": {"en": "..."}}

Records are validated with pydantic. Duplicate records collapse into one
card; the same id with two different categories is rejected.
"""

from __future__ import annotations
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from ..engine_core.cards import Card, CardCategory
from ..engine_core.errors import SleuthError


BUILTIN_CATALOGS = {
    "standard": "cards.json",
    "small": "cards_small.json",
}


class CatalogError(SleuthError):
    """Base class for catalog loading failures."""


class CatalogNotFoundError(CatalogError):
    """The catalog resource does not exist."""


class CatalogDecodeError(CatalogError):
    """The catalog resource is not a valid card list."""

    def __init__(self, message: str, errors: list[str] | None = None):
        self.errors = errors or []
        super().__init__(message)


class RawCard(BaseModel):
    """One card record as stored in the catalog file."""
    type: CardCategory
    id: str = Field(min_length=1)
    display_names: dict[str, str] = Field(default_factory=dict, alias="displayNames")

    model_config = {"populate_by_name": True, "extra": "forbid"}

    def to_card(self) -> Card:
        return Card(id=self.id, category=self.type, display_names=dict(self.display_names))


_RAW_CARD_LIST = TypeAdapter(list[RawCard])


def parse_catalog(data: str | bytes, source: str = "<memory>") -> frozenset[Card]:
    """Decode catalog JSON into a deduplicated card set."""
    try:
        raw_cards = _RAW_CARD_LIST.validate_json(data)
    except ValidationError as e:
        raise CatalogDecodeError(
            f"Invalid card catalog {source}: {e.error_count()} error(s)",
            errors=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
        ) from e

    cards: dict[str, Card] = {}
    for raw in raw_cards:
        existing = cards.get(raw.id)
        if existing is not None and existing.category != raw.type:
            raise CatalogDecodeError(
                f"Card '{raw.id}' listed as both {existing.category.value} and {raw.type.value}"
            )
        if existing is None:
            cards[raw.id] = raw.to_card()
    return frozenset(cards.values())


def load_catalog(path: str | Path) -> frozenset[Card]:
    """Load a catalog file from disk."""
    path = Path(path)
    if not path.is_file():
        raise CatalogNotFoundError(f"Resource not found: {path}")
    return parse_catalog(path.read_bytes(), source=str(path))


def load_builtin_catalog(name: str = "standard") -> frozenset[Card]:
    """Load one of the catalogs shipped with the package."""
    filename = BUILTIN_CATALOGS.get(name)
    if filename is None:
        raise CatalogNotFoundError(
            f"Unknown built-in catalog '{name}' (available: {', '.join(sorted(BUILTIN_CATALOGS))})"
        )
    resource = resources.files(__package__).joinpath("data").joinpath(filename)
    if not resource.is_file():
        raise CatalogNotFoundError(f"Resource not found: {filename}")
    return parse_catalog(resource.read_bytes(), source=filename)


def resolve_catalog(name_or_path: str) -> frozenset[Card]:
    """A built-in catalog name, or otherwise a path to a catalog file."""
    if name_or_path in BUILTIN_CATALOGS:
        return load_builtin_catalog(name_or_path)
    return load_catalog(name_or_path)
