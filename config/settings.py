"""
Central configuration for catalog matching, templating and batch processing.

This module defines:
- Fuzzy-match thresholds and compound-value separators used by the reconciler.
- Default key patterns that classify schema fields as quantity/price fields.
- Batch limits (worker count) for item fan-out.
- Workbook limits to prevent memory issues with oversized catalog sheets.
- LLM-related settings for the AI enrichment collaborator.

All values are constants and should be imported where needed (no runtime logic here).
"""

from __future__ import annotations

import re

# Length-scaled edit-distance thresholds: (max input length, max distance).
# Kept tight so short words such as "mint" and "pink" never cross-match.
FUZZY_THRESHOLDS = ((4, 1), (7, 2))
FUZZY_MAX_DISTANCE = 3

COMPOUND_SEPARATORS = re.compile(r"[\s/,&\-+]+")

QUANTITY_KEY_PATTERNS = ("quantity", "qty", "amount")
PRICE_KEY_PATTERNS = ("price", "cost", "total")
DEFAULT_CURRENCY = "EUR"

# Reserved raw-row key carrying the extraction review flags.
REVIEW_MARKER_KEY = "needs_checking"

MAX_WORKERS = 4

MAX_SHEET_ROWS = 10_000
MAX_SHEET_COLS = 100
ALIAS_SEPARATORS = re.compile(r"[;|]")

ENRICHMENT_BATCH_SIZE = 10
JSON_RETRY_ATTEMPTS = 3

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0
