"""Collection engine — wires a catalog source, the tracker, and derivations.

The view layer subscribes to snapshots and only ever writes through
``initiate_acquire``.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

import httpx

from pokedex_tracker.assets import AssetResolver
from pokedex_tracker.completion import is_complete
from pokedex_tracker.config import AppConfig, SourceConfig
from pokedex_tracker.models import (
    ERROR,
    LOADING,
    READY,
    AcquisitionEvent,
    CatalogState,
    EngineSnapshot,
)
from pokedex_tracker.sources import CatalogSource, CatalogSourceError, get_source_class
from pokedex_tracker.stats import aggregate_categories
from pokedex_tracker.tracker import AcquisitionTracker

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[EngineSnapshot], None]


class CollectionEngine:
    """Tracks a catalog browsing session:
    1. Load the catalog once from the configured source
    2. Accept acquire requests for catalog entries
    3. Recompute assets, stats, and completion on every change
    4. Publish a snapshot to subscribers
    """

    def __init__(self, config: AppConfig, source: Optional[CatalogSource] = None) -> None:
        self._config = config
        self._source = source if source is not None else build_source(config.source)
        self._state = CatalogState()
        self._tracker = AcquisitionTracker(config.tracker.acquire_delay_ms)
        self._grid_resolver = AssetResolver(config.assets.grid_chain_depth)
        self._collection_resolver = AssetResolver(config.assets.collection_chain_depth)
        self._listeners: List[SnapshotListener] = []
        self._tracker.subscribe(self._on_acquisition)

    @property
    def catalog_state(self) -> CatalogState:
        return self._state

    @property
    def tracker(self) -> AcquisitionTracker:
        return self._tracker

    async def load(self) -> CatalogState:
        """Run the catalog query.  Errors are terminal: no retry."""
        self._state = CatalogState(status=LOADING)
        try:
            entries = await self._source.fetch_catalog(self._config.source.limit)
        except (CatalogSourceError, httpx.HTTPError) as exc:
            logger.error("Catalog source %s failed: %s", self._source.name, exc)
            self._state = CatalogState(status=ERROR, error=str(exc))
        else:
            self._state = CatalogState(status=READY, entries=list(entries))
            logger.info("Catalog ready: %d entries from %s", len(entries), self._source.name)
        self._publish()
        return self._state

    def initiate_acquire(self, entry_id: int) -> bool:
        """Start catching an entry of the loaded catalog."""
        if entry_id not in self._state.ids():
            logger.debug("Ignoring acquire for %d: not in the %s catalog", entry_id, self._state.status)
            return False
        return self._tracker.initiate_acquire(entry_id)

    async def wait_idle(self) -> None:
        await self._tracker.wait_idle()

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a snapshot listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> EngineSnapshot:
        entries = list(self._state.catalog)
        acquired = self._tracker.acquired
        collection = [e for e in entries if e.id in acquired]
        return EngineSnapshot(
            catalog_status=self._state.status,
            entries=entries,
            acquired=acquired,
            acquired_in_order=self._tracker.acquired_in_order,
            in_progress=self._tracker.in_progress,
            grid_assets={e.id: self._grid_resolver.resolve(e.media_payload) for e in entries},
            collection=collection,
            collection_assets={
                e.id: self._collection_resolver.resolve(e.media_payload) for e in collection
            },
            category_counts=aggregate_categories(entries),
            acquired_count=len(collection),
            catalog_size=len(entries),
            complete=is_complete(len(collection), len(entries)),
            error=self._state.error,
        )

    async def aclose(self) -> None:
        """Cancel outstanding acquisitions, then release the source."""
        await self._tracker.aclose()
        self._listeners.clear()
        try:
            await self._source.close()
        except Exception as exc:
            logger.warning("Failed to close source %s: %s", self._source.name, exc)

    async def __aenter__(self) -> "CollectionEngine":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _on_acquisition(self, event: AcquisitionEvent) -> None:
        self._publish()

    def _publish(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception as exc:
                logger.warning("Snapshot listener failed: %s", exc)


def build_source(cfg: SourceConfig) -> CatalogSource:
    """Create a source instance with config-appropriate kwargs."""
    cls = get_source_class(cfg.name)
    kwargs = {}
    if hasattr(cls.__init__, "__code__"):
        params = cls.__init__.__code__.co_varnames
        if "endpoint" in params:
            kwargs["endpoint"] = cfg.endpoint
        if "timeout_s" in params:
            kwargs["timeout_s"] = cfg.timeout_s
        if "local_path" in params and cfg.local_path:
            kwargs["local_path"] = cfg.local_path
    return cls(**kwargs)
