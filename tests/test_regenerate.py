import pytest

from domain import NoComputedFieldsError, Profile
from pipeline import regenerate_computed_fields


@pytest.fixture
def profile(product_profile):
    return Profile.from_fields(
        list(product_profile.fields)
        + [
            {"key": "ean", "source": "computed", "logic_type": "template", "template": "40{color.code}{sequence:4}"},
            {
                "key": "description",
                "source": "computed",
                "logic_type": "ai_enrichment",
                "ai_prompt": "Short description",
                "fallback": "n/a",
            },
        ],
        name="fashion",
    )


@pytest.fixture
def items():
    return [
        (1, {"name": "Runner", "color": "Black", "brand": "Acme", "quantity": 2, "sku": "old", "ean": "old",
             "description": "kept"}),
        (5, {"name": "Trail", "color": "White", "brand": "Globex", "quantity": 1, "sku": "old", "ean": "old",
             "description": "kept"}),
    ]


class StubEnricher:
    def enrich(self, fields, products):
        return [{"description": f"{p['name']} ({p['sku']})"} for p in products]


class TestRegenerate:
    def test_all_template_fields(self, profile, items, store):
        result = regenerate_computed_fields(items, profile, store)

        assert [seq for seq, _ in result.items] == [1, 5]
        assert [p["sku"] for _, p in result.items] == ["AC-01-001", "GX-02-005"]
        assert [p["ean"] for _, p in result.items] == ["40010001", "40020005"]
        assert result.fields_updated == ["sku", "ean", "description"]
        assert result.regenerated_count == 2

    def test_selected_field_only(self, profile, items, store):
        result = regenerate_computed_fields(items, profile, store, field_keys=["ean"])

        _, first = result.items[0]
        assert first["ean"] == "40010001"
        assert first["sku"] == "old"
        assert first["description"] == "kept"
        assert result.fields_updated == ["ean"]

    def test_input_items_are_not_mutated(self, profile, items, store):
        regenerate_computed_fields(items, profile, store)
        assert items[0][1]["sku"] == "old"

    def test_one_read_and_cleared(self, profile, items, store, source):
        regenerate_computed_fields(items, profile, store)
        assert source.calls == [["brand", "color"]]
        assert store.cached_namespaces() == []

    def test_enrichment_sees_regenerated_templates(self, profile, items, store):
        result = regenerate_computed_fields(items, profile, store, enricher=StubEnricher())
        assert [p["description"] for _, p in result.items] == ["Runner (AC-01-001)", "Trail (GX-02-005)"]

    def test_without_enricher_enrichment_fields_are_untouched(self, profile, items, store):
        result = regenerate_computed_fields(items, profile, store, field_keys=["description"])
        assert [p["description"] for _, p in result.items] == ["kept", "kept"]

    def test_empty_template_result_uses_fallback(self, store):
        profile = Profile.from_fields(
            [
                {"key": "size"},
                {"key": "label", "source": "computed", "logic_type": "template", "template": "{size}", "fallback": "ONE"},
            ]
        )
        result = regenerate_computed_fields([(3, {"size": None, "label": "M"})], profile, store)
        assert result.items[0][1]["label"] == "ONE"


class TestNothingToRegenerate:
    def test_profile_without_computed_fields(self, store):
        profile = Profile.from_fields([{"key": "name"}, {"key": "color", "catalog_key": "color"}])
        with pytest.raises(NoComputedFieldsError):
            regenerate_computed_fields([(1, {"name": "x"})], profile, store)

    def test_selection_without_computed_fields(self, profile, items, store):
        with pytest.raises(NoComputedFieldsError):
            regenerate_computed_fields(items, profile, store, field_keys=["name", "color"])


class TestImplicitNamespaces:
    def test_unbound_custom_column_is_prefetched(self, store):
        profile = Profile.from_fields(
            [
                {"key": "color"},
                {"key": "erp", "source": "computed", "logic_type": "template", "template": "{color.xentral_code}"},
            ]
        )
        items = [(i, {"color": "Pearl", "erp": ""}) for i in range(1, 11)]

        result = regenerate_computed_fields(items, profile, store)

        assert {p["erp"] for _, p in result.items} == {"X-PRL"}
        assert store.reads == 1
