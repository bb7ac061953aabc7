from .classification import DEFAULT_CLASSIFIER, FieldKind, KeyClassifier, classify_key
from .normalization import coerce_value, detect_currency, parse_price, parse_quantity
