"""
Batch orchestration.

Runs single-item normalization over a batch of raw rows:
- collects every catalog namespace the profile references and prefetches them
  ONCE into the caller's CatalogStore before any item starts
- fans items out over a bounded thread pool (items are independent; each item's
  sequence number comes from its original index, never completion order)
- optionally merges AI enrichment values for `ai_enrichment` fields
- clears the store once every item has finished

Failure handling is caller-selectable:
- batch mode (default): a failing item is recorded in BatchResult.failures and
  the rest of the batch continues
- strict mode: the first failing item aborts the run with ItemProcessingError
"""

from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any, List, Optional, Sequence, Union

from catalog.store import CatalogStore
from config import MAX_WORKERS
from domain.errors import ItemProcessingError, ProfileError, TransformError
from domain.products import BatchResult, ItemFailure, NormalizedProduct, RawProduct
from domain.profile import Profile, as_profile
from fields.classification import DEFAULT_CLASSIFIER, KeyClassifier
from fields.normalization import coerce_value
from templating.engine import TemplateEngine, catalog_namespaces

from .enrichment import Enricher, collect_enrichments, enrichment_fields, merge_enrichments
from .normalizer import normalize_product

logger = logging.getLogger(__name__)

Outcome = Union[NormalizedProduct, ItemFailure]


class NormalizationPipeline:
    def __init__(
        self,
        store: CatalogStore,
        schema: Any,
        classifier: KeyClassifier = DEFAULT_CLASSIFIER,
        max_workers: int = MAX_WORKERS,
        strict: bool = False,
        fuzzy_enabled: bool = True,
        enricher: Optional[Enricher] = None,
    ):
        if schema is None:
            raise ProfileError("Processing profile is required")
        self.store = store
        self.profile: Profile = as_profile(schema)
        self.classifier = classifier
        self.max_workers = max(1, int(max_workers or 1))
        self.strict = strict
        self.engine = TemplateEngine(store, fuzzy_enabled=fuzzy_enabled)
        self.enricher = enricher

    def _process(self, index: int, raw: RawProduct) -> Outcome:
        try:
            return normalize_product(raw, index, self.profile, self.engine, self.classifier)
        except Exception as e:
            message = str(e) or type(e).__name__
            if self.strict:
                raise ItemProcessingError(index, message) from e
            logger.warning("Item %d failed: %s", index + 1, message, exc_info=True)
            return ItemFailure(index=index, message=message)

    def _run_sequential(self, raw_batch: Sequence[RawProduct]) -> List[Outcome]:
        return [self._process(i, raw) for i, raw in enumerate(raw_batch)]

    def _run_parallel(self, raw_batch: Sequence[RawProduct]) -> List[Outcome]:
        outcomes: List[Optional[Outcome]] = [None] * len(raw_batch)
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {executor.submit(self._process, i, raw): i for i, raw in enumerate(raw_batch)}
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            for future in pending:
                future.cancel()
            for future in done:
                # re-raises the ItemProcessingError of strict mode
                outcomes[futures[future]] = future.result()
        return outcomes

    def _enrich(self, products: List[NormalizedProduct]) -> List[NormalizedProduct]:
        fields = enrichment_fields(self.profile)
        if self.enricher is None or not fields or not products:
            return products
        enrichments = collect_enrichments(self.enricher, fields, products)
        merged = []
        for product, enrichment in zip(products, enrichments):
            product = merge_enrichments(product, enrichment, fields)
            for f in fields:
                product[f.key] = coerce_value(f.key, product[f.key], self.classifier)
            merged.append(product)
        return merged

    def run(self, raw_batch: Sequence[RawProduct]) -> BatchResult:
        """Normalize a batch; raises only for batch-level errors (or item errors in strict mode)."""
        if raw_batch is None or isinstance(raw_batch, (str, bytes)):
            raise TransformError("Raw batch must be a list of products")
        raw_batch = list(raw_batch)

        logger.info(
            "Normalizing %d products with profile '%s' (%d fields)",
            len(raw_batch),
            self.profile.name,
            len(self.profile.fields),
        )

        with self.store.prefetched(catalog_namespaces(self.profile)):
            if self.max_workers == 1 or len(raw_batch) <= 1:
                outcomes = self._run_sequential(raw_batch)
            else:
                outcomes = self._run_parallel(raw_batch)

            result = BatchResult()
            for index, outcome in enumerate(outcomes):
                if isinstance(outcome, ItemFailure):
                    result.failures.append(outcome)
                else:
                    result.products.append(outcome)
                    result.indices.append(index)

            result.products = self._enrich(result.products)

        if result.failures:
            logger.warning(
                "%d of %d products failed: %s",
                result.failed_count,
                len(raw_batch),
                "; ".join(result.leading_errors()),
            )
        logger.info("Normalized %d products", result.succeeded_count)
        return result


def normalize_batch(
    raw_batch: Sequence[RawProduct],
    schema: Any,
    store: CatalogStore,
    **options: Any,
) -> BatchResult:
    """Normalize a batch in batch mode unless `strict=True` is passed."""
    return NormalizationPipeline(store, schema, **options).run(raw_batch)


def normalize(
    raw_batch: Sequence[RawProduct],
    schema: Any,
    store: CatalogStore,
    strict: bool = True,
    **options: Any,
) -> List[NormalizedProduct]:
    """
    Normalize a batch and return the products in original order.

    Strict by default: any failing item raises ItemProcessingError, so the
    returned list always lines up with `raw_batch`.
    """
    return NormalizationPipeline(store, schema, strict=strict, **options).run(raw_batch).products

