"""
Catalog reconciliation.

Resolves one raw extracted string against one catalog namespace. Strategies are
tried in strict priority order and the first hit wins:

1. exact     - case-insensitive, trimmed equality with the entry name
2. alias     - the same equality against any alias
3. fuzzy     - closest name/alias by Levenshtein distance, within a threshold
               scaled by input length (1 up to 4 chars, 2 up to 7, else 3)
4. compound  - split the raw value ("WHITE/PEARL", "pale rose") and retry
               exact then alias on each part, in order
5. none      - the input is returned verbatim with an empty code

Reconciliation never raises: an empty value, an unknown namespace or a
namespace without entries all produce a `none` result.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from rapidfuzz.distance import Levenshtein

from config import COMPOUND_SEPARATORS, FUZZY_MAX_DISTANCE, FUZZY_THRESHOLDS
from domain.catalog import CatalogEntry, MatchType, ReconciliationResult, normalize_term

from .store import CatalogStore

logger = logging.getLogger(__name__)


def fuzzy_threshold(length: int) -> int:
    """Maximum accepted edit distance for an input of the given length."""
    for max_length, distance in FUZZY_THRESHOLDS:
        if length <= max_length:
            return distance
    return FUZZY_MAX_DISTANCE


def split_compound(value: str) -> List[str]:
    """Split "WHITE/PEARL" or "pale rose" into its non-empty parts."""
    return [p.strip() for p in COMPOUND_SEPARATORS.split(value or "") if p.strip()]


def _exact(entries: Sequence[CatalogEntry], term: str) -> Optional[CatalogEntry]:
    for entry in entries:
        if normalize_term(entry.name) == term:
            return entry
    return None


def _alias(entries: Sequence[CatalogEntry], term: str) -> Optional[CatalogEntry]:
    for entry in entries:
        for alias in entry.aliases:
            if normalize_term(alias) == term:
                return entry
    return None


def _closest(entries: Sequence[CatalogEntry], term: str) -> Optional[Tuple[CatalogEntry, int]]:
    threshold = fuzzy_threshold(len(term))
    best: Optional[Tuple[CatalogEntry, int]] = None

    for entry in entries:
        for candidate in entry.terms():
            distance = Levenshtein.distance(term, normalize_term(candidate), score_cutoff=threshold)
            if distance > threshold:
                continue
            # strict "<" keeps the first-encountered candidate on ties
            if best is None or distance < best[1]:
                best = (entry, distance)
    return best


def reconcile_entries(
    raw_value: str,
    entries: Sequence[CatalogEntry],
    fuzzy_enabled: bool = True,
) -> ReconciliationResult:
    """Reconcile a value against an explicit list of entries (no store involved)."""
    raw_value = "" if raw_value is None else str(raw_value)
    term = normalize_term(raw_value)
    if not term or not entries:
        return ReconciliationResult.no_match(raw_value)

    entry = _exact(entries, term)
    if entry is not None:
        return ReconciliationResult.from_entry(entry, MatchType.EXACT)

    entry = _alias(entries, term)
    if entry is not None:
        return ReconciliationResult.from_entry(entry, MatchType.ALIAS)

    if fuzzy_enabled:
        best = _closest(entries, term)
        if best is not None:
            return ReconciliationResult.from_entry(best[0], MatchType.FUZZY, distance=best[1])

    parts = split_compound(raw_value)
    if len(parts) > 1:
        for part in parts:
            part_term = normalize_term(part)
            entry = _exact(entries, part_term) or _alias(entries, part_term)
            if entry is not None:
                return ReconciliationResult.from_entry(entry, MatchType.COMPOUND, matched_part=part)

    return ReconciliationResult.no_match(raw_value)


class Reconciler:
    """Reconciles values against namespaces held by a (prefetched) CatalogStore."""

    def __init__(self, store: CatalogStore, fuzzy_enabled: bool = True):
        self.store = store
        self.fuzzy_enabled = fuzzy_enabled

    def reconcile(
        self,
        raw_value: str,
        namespace: str,
        fuzzy_enabled: Optional[bool] = None,
    ) -> ReconciliationResult:
        raw_value = "" if raw_value is None else str(raw_value)
        if not raw_value.strip() or not namespace:
            return ReconciliationResult.no_match(raw_value)

        use_fuzzy = self.fuzzy_enabled if fuzzy_enabled is None else fuzzy_enabled
        try:
            entries = self.store.entries_for(namespace)
            return reconcile_entries(raw_value, entries, fuzzy_enabled=use_fuzzy)
        except Exception:
            logger.exception("Reconciliation failed for %r in namespace '%s'", raw_value, namespace)
            return ReconciliationResult.no_match(raw_value)

    def match_against_catalog(self, raw_value: str, namespace: str) -> str:
        """Canonical name for the value, or the value itself when nothing matches."""
        return self.reconcile(raw_value, namespace).normalized

    def match_many(self, values: Iterable[str], namespace: str) -> Dict[str, str]:
        return {value: self.match_against_catalog(value, namespace) for value in values}


def reconcile(
    raw_value: str,
    namespace: str,
    store: CatalogStore,
    fuzzy_enabled: bool = True,
) -> ReconciliationResult:
    """Reconcile one raw value against one namespace of the given store."""
    return Reconciler(store, fuzzy_enabled=fuzzy_enabled).reconcile(raw_value, namespace)
