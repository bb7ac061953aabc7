"""
Template evaluation.

Placeholders are resolved against a TemplateContext built per item:
- `{sequence}` is the item's 1-based position in the batch.
- `{name}` is the field's current value; when the field is bound to a catalog
  namespace the value is reconciled and replaced by the entry code.
- `{name.code}` reconciles explicitly (the field key doubles as the namespace
  when the field has no binding).
- `{name.column}` reads a custom column from the matched entry's extra_data.
- Unknown variables resolve to "".

Every lookup goes through the Reconciler of ONE shared CatalogStore, so a batch
costs one catalog read per namespace regardless of item/template count.
Evaluation never raises; a failing placeholder degrades and is logged.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from catalog.reconciler import Reconciler
from catalog.store import CatalogStore
from domain.profile import Profile

from .parser import SEQUENCE, Placeholder, parse_template

logger = logging.getLogger(__name__)

_NUMERIC = re.compile(r"^[0-9]+$")


@dataclass
class TemplateContext:
    values: Dict[str, str]
    sequence: int = 1
    catalog_mapping: Dict[str, str] = field(default_factory=dict)


def apply_width(value: str, width: Optional[int]) -> str:
    """Zero-pad numeric values; cut or X-pad and upper-case everything else."""
    if not width:
        return value
    if _NUMERIC.match(value):
        return value.rjust(width, "0")
    return value[:width].ljust(width, "X").upper()


class TemplateEngine:
    def __init__(self, store: CatalogStore, fuzzy_enabled: bool = True):
        self.reconciler = Reconciler(store, fuzzy_enabled=fuzzy_enabled)

    def _lookup(self, placeholder: Placeholder, raw_value: str, context: TemplateContext) -> str:
        bound = context.catalog_mapping.get(placeholder.name)

        if placeholder.custom_column:
            result = self.reconciler.reconcile(raw_value, bound or placeholder.name)
            extra = result.extra_data.get(placeholder.custom_column)
            return "" if extra is None else str(extra)

        namespace = bound or (placeholder.name if placeholder.use_code else None)
        if not namespace:
            return raw_value

        result = self.reconciler.reconcile(raw_value, namespace)
        return result.code if result.matched else raw_value

    def resolve(self, placeholder: Placeholder, context: TemplateContext) -> str:
        if placeholder.name == SEQUENCE and placeholder.column is None:
            value = str(context.sequence)
        elif placeholder.name not in context.values:
            value = ""
        else:
            raw_value = context.values.get(placeholder.name) or ""
            try:
                value = self._lookup(placeholder, str(raw_value), context)
            except Exception:
                logger.exception("Failed to resolve {%s} for value %r", placeholder.name, raw_value)
                value = "" if placeholder.custom_column else str(raw_value)

        try:
            return apply_width(value, placeholder.width)
        except Exception:
            logger.exception("Failed to apply width %s to {%s}", placeholder.width, placeholder.name)
            return value

    def evaluate(self, template: str, context: TemplateContext) -> str:
        parts: List[str] = []
        for segment in parse_template(template or ""):
            if isinstance(segment, str):
                parts.append(segment)
            else:
                parts.append(self.resolve(segment, context))
        return "".join(parts)


def evaluate_template(template: str, context: TemplateContext, store: CatalogStore) -> str:
    """Evaluate a single template against a prefetched store."""
    return TemplateEngine(store).evaluate(template, context)


def build_context(
    values: Mapping[str, object],
    sequence: int,
    profile: Profile,
) -> TemplateContext:
    """
    Template context from an item's working values.

    Computed fields are never exposed as template inputs, so a template can
    never depend on another computed field.
    """
    computed = profile.computed_keys()
    context_values = {
        key: "" if value is None else str(value)
        for key, value in values.items()
        if key not in computed and isinstance(value, (str, int, float))
    }
    return TemplateContext(
        values=context_values,
        sequence=sequence,
        catalog_mapping=profile.catalog_mapping(),
    )


def catalog_namespaces(profile: Profile) -> List[str]:
    """
    Every namespace a batch over `profile` can read: explicit catalog bindings
    plus the field keys that unbound `{name.code}` or `{name.column}`
    placeholders fall back to.
    """
    namespaces = profile.catalog_keys()
    mapping = profile.catalog_mapping()
    for f in profile.template_fields():
        for segment in parse_template(f.template):
            if not isinstance(segment, Placeholder) or segment.column is None:
                continue
            if segment.name not in mapping and segment.name not in namespaces:
                namespaces.append(segment.name)
    return namespaces


def validate_template(template: str, profile: Profile) -> List[str]:
    """Problems a template would hit at evaluation time (empty list when fine)."""
    problems: List[str] = []
    computed = profile.computed_keys()
    known = set(profile.keys)

    for segment in parse_template(template or ""):
        if not isinstance(segment, Placeholder):
            continue
        if segment.name == SEQUENCE:
            if segment.column is not None:
                problems.append(f"{{{SEQUENCE}}} does not support .{segment.column}")
            continue
        if segment.name not in known:
            problems.append(f"Unknown variable {{{segment.name}}}")
        elif segment.name in computed:
            problems.append(f"{{{segment.name}}} is a computed field and always resolves empty")
    return problems
