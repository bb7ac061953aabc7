"""
Basic type coercion for assembled product fields.

Only numeric shape is decided here:
- quantity-like fields become positive integers ("12 pcs" -> 12, junk -> 1)
- price-like fields become floats, with European ("1.234,56") and US
  ("1,234.56") separators detected per value
- everything else stays a string

Whether a quantity or price is acceptable for the business is not decided here.
"""

from __future__ import annotations

import re
from typing import Any, Tuple

from config import DEFAULT_CURRENCY

from .classification import DEFAULT_CLASSIFIER, FieldKind, KeyClassifier

_CURRENCY_SYMBOLS = re.compile(r"[€$£]")
_NUMBER_RUN = re.compile(r"\d*\.?\d+")


def parse_quantity(text: Any) -> int:
    """Digits of the value as a positive integer; empty, non-numeric or < 1 gives 1."""
    if isinstance(text, bool):
        return 1
    if isinstance(text, (int, float)):
        return int(text) if text >= 1 else 1

    digits = re.sub(r"[^0-9]", "", str(text or ""))
    if not digits:
        return 1
    quantity = int(digits)
    return quantity if quantity >= 1 else 1


def detect_currency(text: str) -> str:
    lowered = text.lower()
    if "$" in text or "usd" in lowered:
        return "USD"
    if "£" in text or "gbp" in lowered:
        return "GBP"
    return DEFAULT_CURRENCY


def parse_price(text: Any) -> Tuple[float, str]:
    """
    Parse a price string into (amount, currency).

    If the last comma comes after the last dot, the comma is the decimal
    separator and dots group thousands ("1.234,56"). Otherwise commas group
    thousands and the dot is the decimal ("1,234.56").
    """
    if isinstance(text, bool):
        return 0.0, DEFAULT_CURRENCY
    if isinstance(text, (int, float)):
        return float(text), DEFAULT_CURRENCY
    if not text:
        return 0.0, DEFAULT_CURRENCY

    raw = str(text)
    currency = detect_currency(raw)
    cleaned = _CURRENCY_SYMBOLS.sub("", raw).strip()

    if cleaned.rfind(",") > cleaned.rfind("."):
        cleaned = cleaned.replace(".", "").replace(",", ".", 1)
    else:
        cleaned = cleaned.replace(",", "")

    # first well-formed number wins: "12.99." -> 12.99, "1.234.567" -> 1.234
    match = _NUMBER_RUN.search(cleaned)
    if not match:
        return 0.0, currency
    return float(match.group(0)), currency


def coerce_value(key: str, value: Any, classifier: KeyClassifier = DEFAULT_CLASSIFIER) -> Any:
    """Coerce an assembled value according to the kind of its key."""
    kind = classifier.classify(key)
    if kind is FieldKind.QUANTITY:
        return parse_quantity(value)
    if kind is FieldKind.PRICE:
        amount, _ = parse_price(value)
        return amount
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
