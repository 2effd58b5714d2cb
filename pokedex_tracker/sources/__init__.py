"""Catalog source protocol and source registry."""

from __future__ import annotations

import importlib
from typing import Dict, List, Protocol, Type, runtime_checkable

from pokedex_tracker.models import CatalogEntry


class CatalogSourceError(RuntimeError):
    """Raised by a source when the catalog query cannot be answered."""


@runtime_checkable
class CatalogSource(Protocol):
    """Protocol that all catalog sources must satisfy.

    Sources are selected by name from YAML config.  Each source knows how
    to talk to one backend and normalize its output into CatalogEntry
    records ordered by id ascending.
    """

    @property
    def name(self) -> str:
        """Human-readable source name for logging."""
        ...

    async def fetch_catalog(self, limit: int) -> List[CatalogEntry]:
        """Return up to ``limit`` entries ordered by id ascending."""
        ...

    async def close(self) -> None:
        """Clean up any resources (HTTP clients, etc.)."""
        ...


# source name -> qualified class name
_SOURCE_REGISTRY: Dict[str, str] = {
    "pokeapi-graphql": "pokedex_tracker.sources.pokeapi_graphql.PokeApiGraphqlSource",
    "local-json": "pokedex_tracker.sources.local_json.LocalJsonSource",
}


def get_source_class(name: str) -> Type[CatalogSource]:
    """Import and return the source class registered under ``name``."""
    qualified = _SOURCE_REGISTRY.get(name)
    if qualified is None:
        raise ValueError(
            f"Unknown catalog source '{name}'. Available: {list(_SOURCE_REGISTRY.keys())}"
        )
    module_path, class_name = qualified.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)


def known_sources() -> set[str]:
    return set(_SOURCE_REGISTRY.keys())
