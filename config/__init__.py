from .settings import (
    ALIAS_SEPARATORS,
    COMPOUND_SEPARATORS,
    DEFAULT_CURRENCY,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    ENRICHMENT_BATCH_SIZE,
    FUZZY_MAX_DISTANCE,
    FUZZY_THRESHOLDS,
    JSON_RETRY_ATTEMPTS,
    MAX_SHEET_COLS,
    MAX_SHEET_ROWS,
    MAX_WORKERS,
    PRICE_KEY_PATTERNS,
    QUANTITY_KEY_PATTERNS,
    REVIEW_MARKER_KEY,
)
