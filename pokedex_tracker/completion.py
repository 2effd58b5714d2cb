"""Collection completion flag and progress figure."""

from __future__ import annotations


def is_complete(acquired_count: int, catalog_size: int) -> bool:
    """True iff the catalog is non-empty and every entry has been acquired.

    An empty catalog is never complete, so nothing celebrates before the
    catalog has loaded.
    """
    return catalog_size > 0 and acquired_count == catalog_size


def progress_label(acquired_count: int, catalog_size: int) -> str:
    return f"{acquired_count} / {catalog_size}"
