"""
Catalog module - Card definitions loaded from JSON resources.

Built-in catalogs:
- standard: the classic 21 cards (6 subjects, 6 tools, 9 rooms)
- small: 9 cards (3 per category) for tests and quick runs
"""

from .loader import (
    BUILTIN_CATALOGS,
    CatalogError,
    CatalogNotFoundError,
    CatalogDecodeError,
    RawCard,
    parse_catalog,
    load_catalog,
    load_builtin_catalog,
    resolve_catalog,
)

__all__ = [
    "BUILTIN_CATALOGS",
    "CatalogError",
    "CatalogNotFoundError",
    "CatalogDecodeError",
    "RawCard",
    "parse_catalog",
    "load_catalog",
    "load_builtin_catalog",
    "resolve_catalog",
]
