"""
AI enrichment merge contract.

Computed fields with `logic_type=ai_enrichment` are filled by an external text
generation collaborator. The collaborator receives one EnrichmentField per
field plus a snapshot of each product and returns `{key: value}` per product,
in product order. Only the merge is owned here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from domain.products import NormalizedProduct
from domain.profile import Profile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnrichmentField:
    key: str
    label: str
    prompt: str
    fallback: str = ""


class Enricher(Protocol):
    def enrich(
        self,
        fields: Sequence[EnrichmentField],
        products: Sequence[Mapping[str, Any]],
    ) -> List[Dict[str, str]]:
        ...


def enrichment_fields(profile: Profile, field_keys: Optional[Sequence[str]] = None) -> List[EnrichmentField]:
    selected = set(field_keys) if field_keys else None
    return [
        EnrichmentField(key=f.key, label=f.label, prompt=f.ai_prompt, fallback=f.fallback)
        for f in profile.enrichment_fields()
        if selected is None or f.key in selected
    ]


def merge_enrichments(
    product: NormalizedProduct,
    enrichment: Optional[Mapping[str, Any]],
    fields: Sequence[EnrichmentField],
) -> NormalizedProduct:
    """Copy of `product` with the enrichment values of `fields` merged in (fallback when empty)."""
    merged = dict(product)
    enrichment = enrichment or {}
    for f in fields:
        value = enrichment.get(f.key)
        merged[f.key] = str(value) if value not in (None, "") else f.fallback
    return merged


def collect_enrichments(
    enricher: Enricher,
    fields: Sequence[EnrichmentField],
    products: Sequence[NormalizedProduct],
) -> List[Dict[str, str]]:
    """Ask the collaborator for enrichment values; a failed call yields fallbacks for every product."""
    if not fields or not products:
        return [{} for _ in products]

    try:
        results = list(enricher.enrich(fields, products))
    except Exception:
        logger.exception("AI enrichment failed for %d products, using fallbacks", len(products))
        return [{} for _ in products]

    if len(results) != len(products):
        logger.warning(
            "AI enrichment returned %d results for %d products, using fallbacks for the rest",
            len(results),
            len(products),
        )
        results = (results + [{} for _ in products])[: len(products)]

    return [dict(r) if isinstance(r, Mapping) else {} for r in results]
