"""PokeAPI GraphQL source — primary catalog backend.

Queries ``pokemon_v2_pokemon`` ordered by id with a limit and normalizes
each row into a CatalogEntry.  No retries: a failed query is terminal.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from pokedex_tracker.models import CatalogEntry
from pokedex_tracker.sources import CatalogSourceError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://beta.pokeapi.co/graphql/v1beta"

CATALOG_QUERY = """
query GetPokemons($limit: Int!) {
  pokemon_v2_pokemon(limit: $limit, order_by: {id: asc}) {
    id
    name
    pokemon_v2_pokemontypes {
      pokemon_v2_type {
        name
      }
    }
    pokemon_v2_pokemonsprites {
      sprites
    }
  }
}
"""


class PokeApiGraphqlSource:
    """Catalog source backed by the PokeAPI GraphQL endpoint."""

    def __init__(self, endpoint: str = DEFAULT_ENDPOINT, timeout_s: float = 30.0) -> None:
        self._endpoint = endpoint
        self._timeout = timeout_s
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def name(self) -> str:
        return "pokeapi-graphql"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": "PokedexTracker/0.1"},
            )
        return self._client

    async def fetch_catalog(self, limit: int) -> List[CatalogEntry]:
        client = self._get_client()
        try:
            resp = await client.post(
                self._endpoint,
                json={"query": CATALOG_QUERY, "variables": {"limit": limit}},
            )
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPError as exc:
            raise CatalogSourceError(f"PokeAPI request failed: {exc}") from exc
        except ValueError as exc:
            raise CatalogSourceError(f"PokeAPI returned invalid JSON: {exc}") from exc

        entries = parse_catalog_response(body, source=self.name)[:limit]
        logger.info("PokeAPI: fetched %d entries", len(entries))
        return entries

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()


def parse_catalog_response(body: Any, source: str) -> List[CatalogEntry]:
    """Normalize a GraphQL response body into entries sorted by id.

    Shared with the local JSON source, which reads the same shape.
    """
    if not isinstance(body, dict):
        raise CatalogSourceError("Catalog response is not a JSON object")
    errors = body.get("errors")
    if errors:
        if not isinstance(errors, list):
            raise CatalogSourceError(f"GraphQL errors: {errors!r}")
        messages = "; ".join(str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors)
        raise CatalogSourceError(f"GraphQL errors: {messages}")

    data = body.get("data") or {}
    if not isinstance(data, dict):
        raise CatalogSourceError("Catalog response data is not a JSON object")
    rows = data.get("pokemon_v2_pokemon")
    if not isinstance(rows, list):
        raise CatalogSourceError("Catalog response has no pokemon_v2_pokemon list")

    entries: List[CatalogEntry] = []
    seen: set = set()
    for raw in rows:
        try:
            entry = _parse_entry(raw, source)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping unparseable catalog row %r: %s", _row_label(raw), exc)
            continue
        if entry.id in seen:
            logger.warning("Skipping duplicate catalog id %d", entry.id)
            continue
        seen.add(entry.id)
        entries.append(entry)

    entries.sort(key=lambda e: e.id)
    return entries


def _parse_entry(raw: Dict[str, Any], source: str) -> CatalogEntry:
    categories = [
        str(t["pokemon_v2_type"]["name"])
        for t in raw.get("pokemon_v2_pokemontypes") or []
    ]
    return CatalogEntry(
        id=int(raw["id"]),
        name=str(raw.get("name", "")),
        categories=categories,
        media_payload=_sprites_payload(raw.get("pokemon_v2_pokemonsprites")),
        source=source,
    )


def _sprites_payload(sprite_rows: Any) -> Optional[str]:
    """Return the first sprites document as raw text.

    The endpoint may deliver sprites either as a JSON string or as an
    already decoded object; objects are re-encoded so the resolver always
    sees text.
    """
    if not sprite_rows or not isinstance(sprite_rows, list):
        return None
    first = sprite_rows[0]
    sprites = first.get("sprites") if isinstance(first, dict) else None
    if sprites is None:
        return None
    if isinstance(sprites, str):
        return sprites
    return json.dumps(sprites)


def _row_label(raw: Any) -> str:
    if isinstance(raw, dict):
        return str(raw.get("name", raw.get("id", "?")))
    return "?"
