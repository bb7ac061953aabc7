from .batch import NormalizationPipeline, normalize, normalize_batch
from .enrichment import EnrichmentField, collect_enrichments, enrichment_fields, merge_enrichments
from .normalizer import normalize_product
from .regenerate import RegenerateResult, regenerate_computed_fields
