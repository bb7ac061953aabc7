"""
Single-item normalization.

Transforms one RawProduct into a NormalizedProduct, driven entirely by the
profile (no hardcoded field assumptions):

1. Catalog-bound extracted fields are reconciled; the canonical name becomes the
   working value. Codes are only substituted inside templates.
2. Fallback literals fill empty fields, so templates can see them.
3. Template fields are evaluated against the working values; a failing template
   yields "" and the item continues.
4. Assembly walks the profile in order: enrichment value, templated value, then
   working value, each coerced by the key classifier.

Field-level problems never raise. Structural problems (a row that is not a
mapping, nested values in a field) raise and are handled by the batch runner.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from config import REVIEW_MARKER_KEY
from domain.products import NormalizedProduct, RawProduct
from domain.profile import Profile
from fields.classification import DEFAULT_CLASSIFIER, KeyClassifier
from fields.normalization import coerce_value
from templating.engine import TemplateEngine, build_context

logger = logging.getLogger(__name__)


def _raw_text(key: str, value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (Mapping, list, tuple, set)):
        raise ValueError(f"Field '{key}' holds a nested {type(value).__name__}, expected a scalar")
    return value.strip() if isinstance(value, str) else str(value)


def working_values(raw: RawProduct, profile: Profile, engine: TemplateEngine) -> Dict[str, str]:
    """Raw values with catalog reconciliation (step 1) and fallbacks (step 2) applied."""
    if not isinstance(raw, Mapping):
        raise TypeError(f"Raw product must be a mapping, got {type(raw).__name__}")

    values: Dict[str, str] = {}
    for key, value in raw.items():
        if key == REVIEW_MARKER_KEY:
            continue
        values[str(key)] = _raw_text(str(key), value)

    for f in profile.extracted_fields():
        if f.catalog_key and values.get(f.key):
            result = engine.reconciler.reconcile(values[f.key], f.catalog_key)
            if result.matched:
                logger.debug(
                    "Reconciled %s=%r -> %r (%s)", f.key, values[f.key], result.normalized, result.match_type.value
                )
            values[f.key] = result.normalized

    for f in profile.extracted_fields():
        if not values.get(f.key) and f.fallback:
            values[f.key] = f.fallback

    return values


def evaluate_templates(
    values: Mapping[str, str],
    sequence: int,
    profile: Profile,
    engine: TemplateEngine,
) -> Dict[str, str]:
    """Step 3: evaluate every template field; failures degrade to ""."""
    context = build_context(values, sequence, profile)
    templated: Dict[str, str] = {}
    for f in profile.template_fields():
        try:
            templated[f.key] = engine.evaluate(f.template, context)
        except Exception:
            logger.warning("Template for field '%s' failed on item %d", f.key, sequence, exc_info=True)
            templated[f.key] = ""
    return templated


def _review_marker(raw: RawProduct) -> Optional[list]:
    marker = raw.get(REVIEW_MARKER_KEY)
    if isinstance(marker, list) and marker:
        return [dict(flag) if isinstance(flag, Mapping) else {"field": str(flag), "reason": ""} for flag in marker]
    return None


def _coerce(key: str, value: Any, classifier: KeyClassifier) -> Any:
    try:
        return coerce_value(key, value, classifier)
    except Exception:
        logger.warning("Could not coerce field '%s' value %r, keeping it as text", key, value, exc_info=True)
        return "" if value is None else str(value)


def normalize_product(
    raw: RawProduct,
    index: int,
    profile: Profile,
    engine: TemplateEngine,
    classifier: KeyClassifier = DEFAULT_CLASSIFIER,
    enrichment: Optional[Mapping[str, str]] = None,
) -> NormalizedProduct:
    """Normalize the raw row at `index` (its sequence number is index + 1)."""
    sequence = index + 1
    values = working_values(raw, profile, engine)
    templated = evaluate_templates(values, sequence, profile, engine)
    enrichment = enrichment or {}

    result: NormalizedProduct = {}
    for f in profile.fields:
        if f.is_enrichment:
            value = enrichment.get(f.key) or f.fallback
        elif f.is_template:
            value = templated.get(f.key) or f.fallback
        elif f.is_computed:
            value = f.fallback
        else:
            value = values.get(f.key, "")
        result[f.key] = _coerce(f.key, value, classifier)

    marker = _review_marker(raw)
    if marker:
        result[REVIEW_MARKER_KEY] = marker

    return result
