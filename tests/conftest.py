from __future__ import annotations

from typing import Iterable, List

import pytest

from catalog import CatalogStore, InMemoryCatalogSource
from domain import CatalogEntry, Profile


CATALOG_ROWS = [
    {"field_key": "color", "name": "Black", "code": "01", "aliases": ["Noir", "Schwarz"]},
    {"field_key": "color", "name": "White", "code": "02", "aliases": ["Blanc"]},
    {"field_key": "color", "name": "Pearl", "code": "03", "extra_data": {"xentral_code": "X-PRL"}},
    {"field_key": "color", "name": "Mint", "code": "04"},
    {"field_key": "color", "name": "Navy Blue", "code": "05", "aliases": ["Marine"]},
    {"field_key": "brand", "name": "Acme", "code": "AC", "aliases": ["Acme Corp"]},
    {"field_key": "brand", "name": "Globex", "code": "GX"},
    {"field_key": "mint_only", "name": "Mint", "code": "M1"},
    {"field_key": "pearl_only", "name": "Pearl", "code": "P1"},
]


class CountingSource:
    """In-memory source that records every fetch call."""

    def __init__(self, rows: Iterable = CATALOG_ROWS, fail: bool = False):
        self.inner = InMemoryCatalogSource(rows)
        self.fail = fail
        self.calls: List[List[str]] = []

    def fetch(self, namespaces) -> List[CatalogEntry]:
        self.calls.append(sorted(namespaces))
        if self.fail:
            raise ConnectionError("catalog backend down")
        return self.inner.fetch(namespaces)


@pytest.fixture
def source() -> CountingSource:
    return CountingSource()


@pytest.fixture
def store(source) -> CatalogStore:
    return CatalogStore(source)


@pytest.fixture
def prefetched_store(store) -> CatalogStore:
    store.prefetch({"color", "brand", "mint_only", "pearl_only"})
    return store


@pytest.fixture
def product_profile() -> Profile:
    return Profile.from_fields(
        [
            {"key": "name", "label": "Name"},
            {"key": "color", "label": "Color", "catalog_key": "color"},
            {"key": "brand", "label": "Brand", "catalog_key": "brand", "fallback": "Acme"},
            {"key": "quantity", "label": "Quantity", "type": "number"},
            {"key": "unit_price", "label": "Unit price", "type": "number"},
            {
                "key": "sku",
                "label": "SKU",
                "source": "computed",
                "logic_type": "template",
                "template": "{brand:2}-{color.code}-{sequence:3}",
            },
        ],
        name="fashion",
    )
