"""Type distribution over the catalog."""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List

from pokedex_tracker.models import CatalogEntry, CategoryBar

DEFAULT_CATEGORY_COLOR = "#2a75bb"

CATEGORY_COLORS: Dict[str, str] = {
    "grass": "#78C850",
    "fire": "#F08030",
    "water": "#6890F0",
    "bug": "#A8B820",
    "normal": "#A8A878",
    "poison": "#A040A0",
    "electric": "#F8D030",
    "ground": "#E0C068",
    "fairy": "#EE99AC",
    "fighting": "#C03028",
    "psychic": "#F85888",
    "rock": "#B8A038",
    "ghost": "#705898",
    "ice": "#98D8D8",
    "dragon": "#7038F8",
    "dark": "#705848",
    "steel": "#B8B8D0",
    "flying": "#A890F0",
}


def aggregate_categories(entries: Iterable[CatalogEntry]) -> Dict[str, int]:
    """Count category occurrences across the catalog.

    An entry with several categories counts once toward each.  Keys keep
    the order in which categories first appear.
    """
    counts: Counter[str] = Counter()
    for entry in entries:
        counts.update(entry.categories)
    return dict(counts)


def category_color(category: str) -> str:
    return CATEGORY_COLORS.get(category, DEFAULT_CATEGORY_COLOR)


def category_bars(counts: Dict[str, int]) -> List[CategoryBar]:
    return [
        CategoryBar(category=cat, count=n, color=category_color(cat))
        for cat, n in counts.items()
    ]
