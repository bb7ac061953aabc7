"""
Schema key classification.

Profiles are dynamic, so numeric coercion cannot rely on fixed field names.
A field is treated as a quantity or a price when its key contains one of the
configured patterns ("order_qty", "unit_price", ...). Deployments with other
naming conventions pass their own KeyClassifier to the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from config import PRICE_KEY_PATTERNS, QUANTITY_KEY_PATTERNS


class FieldKind(str, Enum):
    NONE = "none"
    QUANTITY = "quantity"
    PRICE = "price"


@dataclass(frozen=True)
class KeyClassifier:
    quantity_patterns: Tuple[str, ...] = QUANTITY_KEY_PATTERNS
    price_patterns: Tuple[str, ...] = PRICE_KEY_PATTERNS

    def classify(self, key: str) -> FieldKind:
        """Quantity patterns win over price patterns ("total_qty" is a quantity)."""
        key_lower = (key or "").lower()
        if any(p in key_lower for p in self.quantity_patterns):
            return FieldKind.QUANTITY
        if any(p in key_lower for p in self.price_patterns):
            return FieldKind.PRICE
        return FieldKind.NONE


DEFAULT_CLASSIFIER = KeyClassifier()


def classify_key(key: str) -> FieldKind:
    return DEFAULT_CLASSIFIER.classify(key)
