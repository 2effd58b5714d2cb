"""Sprite URL resolution from raw, possibly malformed sprite payloads.

PokeAPI delivers sprites as a JSON document.  The grid view prefers the
standard sprite and falls back to the official artwork, then the HOME
render.  The collection view only looks at the standard sprite, which is
the same chain cut to depth 1.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Tuple

logger = logging.getLogger(__name__)

# Ordered fallback chain: each link is a key path into the sprites document
SPRITE_FALLBACK_CHAIN: Tuple[Tuple[str, ...], ...] = (
    ("front_default",),
    ("other", "official-artwork", "front_default"),
    ("other", "home", "front_default"),
)

FULL_DEPTH = len(SPRITE_FALLBACK_CHAIN)

PLACEHOLDER_URL = (
    "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/items/poke-ball.png"
)


class AssetResolver:
    """Resolves a display URL by walking the first ``depth`` chain links."""

    def __init__(self, depth: int = FULL_DEPTH) -> None:
        if not 1 <= depth <= FULL_DEPTH:
            raise ValueError(f"Chain depth must be between 1 and {FULL_DEPTH}, got {depth}")
        self._chain = SPRITE_FALLBACK_CHAIN[:depth]

    @property
    def depth(self) -> int:
        return len(self._chain)

    def resolve(self, media_payload: Optional[str]) -> Optional[str]:
        """Return the first usable URL in the chain, or None.

        Never raises: absent, malformed, or oddly shaped payloads all
        resolve to None.
        """
        if not media_payload:
            return None
        try:
            sprites = json.loads(media_payload)
        except (ValueError, TypeError):
            logger.debug("Unparseable sprite payload: %.40r", media_payload)
            return None
        if not isinstance(sprites, dict):
            return None

        for path in self._chain:
            url = _lookup(sprites, path)
            if url:
                return url
        return None

    __call__ = resolve


def resolve_asset(media_payload: Optional[str], depth: int = FULL_DEPTH) -> Optional[str]:
    """Convenience wrapper around ``AssetResolver(depth).resolve``."""
    return AssetResolver(depth).resolve(media_payload)


def _lookup(doc: Any, path: Tuple[str, ...]) -> Optional[str]:
    node = doc
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    if isinstance(node, str) and node:
        return node
    return None
