from .catalog import CatalogEntry, MatchType, ReconciliationResult, normalize_term
from .errors import (
    CatalogUnavailableError,
    ItemProcessingError,
    NoComputedFieldsError,
    ProfileError,
    TransformError,
)
from .products import BatchResult, ItemFailure, NormalizedProduct, RawProduct
from .profile import FieldDefinition, FieldSource, LogicType, Profile, ValueType, as_profile
