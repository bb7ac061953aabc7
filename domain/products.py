"""
Product row shapes flowing through the normalization pipeline.

RawProduct is what the AI extraction step returns for a single row: a mapping of
field key -> raw string. NormalizedProduct is the typed result for the same row,
holding exactly the profile's keys in profile order (plus the review marker
when the extraction flagged fields for human review).

Both are plain dicts so they serialize directly to the persistence layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

RawProduct = Dict[str, Any]
NormalizedValue = Union[str, int, float, List[Dict[str, str]]]
NormalizedProduct = Dict[str, NormalizedValue]


@dataclass(frozen=True)
class ItemFailure:
    index: int
    message: str

    @property
    def sequence(self) -> int:
        return self.index + 1


@dataclass
class BatchResult:
    """Outcome of a batch run: successful products (original order) and per-item failures."""

    products: List[NormalizedProduct] = field(default_factory=list)
    indices: List[int] = field(default_factory=list)
    failures: List[ItemFailure] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def succeeded_count(self) -> int:
        return len(self.products)

    def leading_errors(self, limit: int = 3) -> List[str]:
        return [f"Item {f.sequence}: {f.message}" for f in self.failures[:limit]]
