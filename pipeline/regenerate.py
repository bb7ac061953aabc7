"""
Regeneration of computed fields on already-normalized items.

After a user edits line items (or the catalog changes), template fields and AI
enrichment fields are recomputed from the items' current values. Regeneration
can be restricted to a subset of field keys; other fields are left untouched.
Each item keeps its original sequence number.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from catalog.store import CatalogStore
from domain.errors import NoComputedFieldsError
from domain.products import NormalizedProduct
from domain.profile import as_profile
from fields.classification import DEFAULT_CLASSIFIER, KeyClassifier
from fields.normalization import coerce_value
from templating.engine import TemplateEngine, build_context, catalog_namespaces

from .enrichment import Enricher, collect_enrichments, enrichment_fields, merge_enrichments

logger = logging.getLogger(__name__)


@dataclass
class RegenerateResult:
    items: List[Tuple[int, NormalizedProduct]] = field(default_factory=list)
    fields_updated: List[str] = field(default_factory=list)

    @property
    def regenerated_count(self) -> int:
        return len(self.items)


def regenerate_computed_fields(
    items: Sequence[Tuple[int, NormalizedProduct]],
    schema: Any,
    store: CatalogStore,
    field_keys: Optional[Sequence[str]] = None,
    enricher: Optional[Enricher] = None,
    classifier: KeyClassifier = DEFAULT_CLASSIFIER,
) -> RegenerateResult:
    """
    Recompute computed fields for `(sequence, product)` pairs.

    Raises NoComputedFieldsError when the profile (or the `field_keys` filter)
    selects no computed field at all.
    """
    profile = as_profile(schema)
    selected = set(field_keys) if field_keys else None

    template_fields = [f for f in profile.template_fields() if selected is None or f.key in selected]
    ai_fields = enrichment_fields(profile, field_keys)
    if not template_fields and not ai_fields:
        raise NoComputedFieldsError("No computed fields in profile")

    engine = TemplateEngine(store)
    updated: List[Tuple[int, NormalizedProduct]] = []

    with store.prefetched(catalog_namespaces(profile)):
        for sequence, product in items:
            data = dict(product or {})
            context = build_context(data, sequence or 1, profile)
            for f in template_fields:
                try:
                    data[f.key] = coerce_value(f.key, engine.evaluate(f.template, context) or f.fallback, classifier)
                except Exception:
                    logger.warning("Failed to regenerate '%s' for item %s", f.key, sequence, exc_info=True)
            updated.append((sequence, data))

    if ai_fields and updated:
        if enricher is None:
            logger.warning("No enrichment collaborator configured, skipping AI enrichment")
        else:
            enrichments = collect_enrichments(enricher, ai_fields, [data for _, data in updated])
            updated = [
                (sequence, merge_enrichments(data, enrichment, ai_fields))
                for (sequence, data), enrichment in zip(updated, enrichments)
            ]

    keys = [f.key for f in template_fields] + [f.key for f in ai_fields]
    logger.info("Regenerated %s for %d items", ", ".join(keys), len(updated))
    return RegenerateResult(items=updated, fields_updated=keys)
