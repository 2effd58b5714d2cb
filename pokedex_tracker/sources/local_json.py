"""Local JSON source — reads a saved GraphQL response from disk.

Useful offline and for fixtures.  The file holds the same body the
GraphQL endpoint returns (``{"data": {"pokemon_v2_pokemon": [...]}}``).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

from pokedex_tracker.models import CatalogEntry
from pokedex_tracker.sources import CatalogSourceError
from pokedex_tracker.sources.pokeapi_graphql import parse_catalog_response

logger = logging.getLogger(__name__)


class LocalJsonSource:
    """Catalog source reading a GraphQL response saved to a local file."""

    def __init__(self, local_path: str) -> None:
        self._path = Path(local_path)

    @property
    def name(self) -> str:
        return "local-json"

    async def fetch_catalog(self, limit: int) -> List[CatalogEntry]:
        if not self._path.exists():
            raise CatalogSourceError(f"Catalog file not found: {self._path}")
        try:
            body = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise CatalogSourceError(f"Cannot read catalog file {self._path}: {exc}") from exc

        entries = parse_catalog_response(body, source=self.name)[:limit]
        logger.info("Local JSON: loaded %d entries from %s", len(entries), self._path)
        return entries

    async def close(self) -> None:
        pass
