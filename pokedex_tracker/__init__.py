"""Pokédex catalog browser with catch tracking and collection stats."""

__version__ = "0.1.0"
