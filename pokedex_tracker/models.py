"""Data models for catalog entries, catalog state, and engine snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

# Catalog lifecycle
LOADING = "loading"
READY = "ready"
ERROR = "error"

# Per-entry acquisition status
NOT_ACQUIRED = "not_acquired"
ACQUIRING = "acquiring"
ACQUIRED = "acquired"


@dataclass
class CatalogEntry:
    """One catalog item as produced by a catalog source."""

    id: int
    name: str
    categories: list[str] = field(default_factory=list)  # e.g. ["grass", "poison"]
    media_payload: Optional[str] = None  # Raw sprites JSON, may be malformed
    source: str = ""  # Which source provided this entry


@dataclass
class CatalogState:
    """Lifecycle of the single catalog query."""

    status: str = LOADING
    entries: list[CatalogEntry] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def catalog(self) -> List[CatalogEntry]:
        """Entries visible to derivations: empty unless the query is ready."""
        if self.status != READY:
            return []
        return self.entries

    def ids(self) -> set[int]:
        return {e.id for e in self.catalog}


@dataclass
class AcquisitionEvent:
    """Published by the tracker on every state transition."""

    entry_id: int
    status: str  # ACQUIRING or ACQUIRED


@dataclass
class CategoryBar:
    """One row of the type distribution view."""

    category: str
    count: int
    color: str


@dataclass
class EngineSnapshot:
    """Everything the view layer reads, recomputed on every change."""

    catalog_status: str
    entries: list[CatalogEntry]
    acquired: frozenset[int]
    acquired_in_order: Tuple[int, ...]
    in_progress: frozenset[int]
    grid_assets: Dict[int, Optional[str]]
    collection: list[CatalogEntry]
    collection_assets: Dict[int, Optional[str]]
    category_counts: Dict[str, int]
    acquired_count: int
    catalog_size: int
    complete: bool
    error: Optional[str] = None

    def status_of(self, entry_id: int) -> str:
        if entry_id in self.acquired:
            return ACQUIRED
        if entry_id in self.in_progress:
            return ACQUIRING
        return NOT_ACQUIRED
