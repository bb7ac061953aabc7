"""
Batch-scoped catalog cache.

A CatalogStore is a caller-owned handle: the batch runner prefetches every
namespace the profile references with ONE source read, every item and every
template of the batch reads from the same store, and the runner clears it when
the batch finishes. Nothing is module-global, so two concurrent batches never
share or leak catalog state.

Prefetch is an optimization, never a correctness dependency: reading a
namespace that was not prefetched falls back to a direct (uncached) read.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Tuple

from domain.catalog import CatalogEntry
from domain.errors import CatalogUnavailableError

from .sources import CatalogSource

logger = logging.getLogger(__name__)


class CatalogStore:
    def __init__(self, source: CatalogSource):
        self._source = source
        self._cache: Dict[str, Tuple[CatalogEntry, ...]] = {}
        self.reads = 0

    def _read(self, namespaces: List[str]) -> List[CatalogEntry]:
        self.reads += 1
        return list(self._source.fetch(namespaces))

    def prefetch(self, namespaces: Iterable[str]) -> None:
        """Bulk-load all given namespaces into the cache (re-calling refreshes them)."""
        wanted = sorted({ns for ns in namespaces if ns})
        if not wanted:
            return

        try:
            entries = self._read(wanted)
        except Exception as e:
            raise CatalogUnavailableError(
                f"Failed to load catalog entries for: {', '.join(wanted)}"
            ) from e

        grouped: Dict[str, List[CatalogEntry]] = {ns: [] for ns in wanted}
        for entry in entries:
            if entry.field_key in grouped:
                grouped[entry.field_key].append(entry)
        self._cache.update({ns: tuple(group) for ns, group in grouped.items()})

        logger.info("Prefetched %d catalog entries for %d namespaces", len(entries), len(wanted))

    def entries_for(self, namespace: str) -> Tuple[CatalogEntry, ...]:
        """Cached entries for a namespace (read-only), or a direct read if it was never prefetched."""
        if not namespace:
            return ()
        if namespace in self._cache:
            return self._cache[namespace]

        logger.debug("Catalog namespace '%s' not prefetched, reading directly", namespace)
        try:
            entries = self._read([namespace])
        except Exception:
            logger.exception("Catalog read failed for namespace '%s'", namespace)
            return ()
        return tuple(e for e in entries if e.field_key == namespace)

    def is_cached(self, namespace: str) -> bool:
        return namespace in self._cache

    def cached_namespaces(self) -> List[str]:
        return list(self._cache)

    def clear(self) -> None:
        """Release every cached namespace."""
        self._cache.clear()

    @contextmanager
    def prefetched(self, namespaces: Iterable[str]) -> Iterator["CatalogStore"]:
        """Prefetch on enter and clear on exit, even when the batch fails."""
        self.prefetch(namespaces)
        try:
            yield self
        finally:
            self.clear()
