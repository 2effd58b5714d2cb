"""Shared fixtures: a sample GraphQL body and an in-memory catalog source."""

import json
from typing import List, Optional

import pytest

from pokedex_tracker.models import CatalogEntry
from pokedex_tracker.sources import CatalogSourceError


def _sprites(front=None, artwork=None, home=None) -> str:
    return json.dumps({
        "front_default": front,
        "other": {
            "official-artwork": {"front_default": artwork},
            "home": {"front_default": home},
        },
    })


SAMPLE_BODY = {
    "data": {
        "pokemon_v2_pokemon": [
            {
                "id": 1,
                "name": "bulbasaur",
                "pokemon_v2_pokemontypes": [
                    {"pokemon_v2_type": {"name": "grass"}},
                    {"pokemon_v2_type": {"name": "poison"}},
                ],
                "pokemon_v2_pokemonsprites": [{"sprites": _sprites(front="https://img/1.png")}],
            },
            {
                "id": 4,
                "name": "charmander",
                "pokemon_v2_pokemontypes": [{"pokemon_v2_type": {"name": "fire"}}],
                "pokemon_v2_pokemonsprites": [{"sprites": _sprites(artwork="https://art/4.png")}],
            },
            {
                "id": 6,
                "name": "charizard",
                "pokemon_v2_pokemontypes": [
                    {"pokemon_v2_type": {"name": "fire"}},
                    {"pokemon_v2_type": {"name": "flying"}},
                ],
                "pokemon_v2_pokemonsprites": [{"sprites": "{not json"}],
            },
        ]
    }
}


class FakeSource:
    """In-memory catalog source for engine tests."""

    def __init__(self, entries: Optional[List[CatalogEntry]] = None, error: Optional[str] = None) -> None:
        self.entries = entries or []
        self.error = error
        self.closed = False
        self.calls = 0

    @property
    def name(self) -> str:
        return "fake"

    async def fetch_catalog(self, limit: int) -> List[CatalogEntry]:
        self.calls += 1
        if self.error:
            raise CatalogSourceError(self.error)
        return self.entries[:limit]

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def sample_body():
    return json.loads(json.dumps(SAMPLE_BODY))


@pytest.fixture
def sample_entries():
    return [
        CatalogEntry(
            id=1,
            name="bulbasaur",
            categories=["grass", "poison"],
            media_payload=_sprites(front="https://img/1.png"),
            source="fake",
        ),
        CatalogEntry(
            id=4,
            name="charmander",
            categories=["fire"],
            media_payload=_sprites(artwork="https://art/4.png"),
            source="fake",
        ),
        CatalogEntry(
            id=6,
            name="charizard",
            categories=["fire", "flying"],
            media_payload="{not json",
            source="fake",
        ),
    ]


@pytest.fixture
def catalog_file(tmp_path, sample_body):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(sample_body), encoding="utf-8")
    return path
