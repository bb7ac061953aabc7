import pytest

from catalog import CatalogStore, InMemoryCatalogSource, build_match_guide
from domain import CatalogEntry, CatalogUnavailableError
from extraction.prompts import build_catalog_guide_section

from .conftest import CountingSource


class TestPrefetch:
    def test_single_read_for_all_namespaces(self, store, source):
        store.prefetch({"color", "brand"})

        assert source.calls == [["brand", "color"]]
        assert [e.name for e in store.entries_for("brand")] == ["Acme", "Globex"]
        assert len(store.entries_for("color")) == 5
        assert store.reads == 1

    def test_namespace_without_rows_is_cached_empty(self, store, source):
        store.prefetch({"material"})
        assert store.is_cached("material")
        assert store.entries_for("material") == ()
        assert store.reads == 1

    def test_empty_prefetch_does_not_read(self, store, source):
        store.prefetch(set())
        store.prefetch({""})
        assert source.calls == []

    def test_prefetch_again_refreshes(self, store, source):
        store.prefetch({"brand"})
        source.inner.add(CatalogEntry(field_key="brand", name="Initech", code="IN"))
        store.prefetch({"brand"})
        assert [e.code for e in store.entries_for("brand")] == ["AC", "GX", "IN"]

    def test_prefetch_failure_is_batch_level(self):
        store = CatalogStore(CountingSource(fail=True))
        with pytest.raises(CatalogUnavailableError):
            store.prefetch({"color"})


class TestFallbackReads:
    def test_unprefetched_namespace_reads_directly(self, store, source):
        entries = store.entries_for("brand")
        assert [e.name for e in entries] == ["Acme", "Globex"]
        assert source.calls == [["brand"]]
        assert not store.is_cached("brand")

    def test_fallback_failure_returns_no_entries(self):
        store = CatalogStore(CountingSource(fail=True))
        assert store.entries_for("color") == ()

    def test_empty_namespace(self, store, source):
        assert store.entries_for("") == ()
        assert source.calls == []


class TestLifecycle:
    def test_cached_entries_are_read_only(self, prefetched_store):
        entries = prefetched_store.entries_for("brand")
        assert isinstance(entries, tuple)
        with pytest.raises(AttributeError):
            entries.append(CatalogEntry(field_key="brand", name="Initech", code="IN"))
        assert [e.code for e in prefetched_store.entries_for("brand")] == ["AC", "GX"]

    def test_clear_releases_everything(self, prefetched_store):
        assert prefetched_store.cached_namespaces()
        prefetched_store.clear()
        assert prefetched_store.cached_namespaces() == []

    def test_prefetched_context_clears_on_error(self, store):
        with pytest.raises(RuntimeError):
            with store.prefetched({"color"}):
                assert store.is_cached("color")
                raise RuntimeError("boom")
        assert not store.is_cached("color")

    def test_stores_do_not_share_state(self):
        first = CatalogStore(InMemoryCatalogSource([{"field_key": "c", "name": "Red", "code": "R"}]))
        second = CatalogStore(InMemoryCatalogSource([]))
        first.prefetch({"c"})
        second.prefetch({"c"})
        assert len(first.entries_for("c")) == 1
        assert second.entries_for("c") == ()


class TestMatchGuide:
    def test_lines_per_namespace(self, prefetched_store):
        guide = build_match_guide(prefetched_store, ["brand", "color", "material", "brand"])
        assert guide == "brand: Acme, Globex\ncolor: Black, White, Pearl, Mint, Navy Blue"

    def test_empty_guide(self, store):
        assert build_match_guide(store, ["material"]) == ""
        assert build_catalog_guide_section("") == ""

    def test_prompt_section_embeds_guide(self, prefetched_store):
        section = build_catalog_guide_section(build_match_guide(prefetched_store, ["brand"]))
        assert section.startswith("CATALOG MATCH GUIDE")
        assert section.endswith("brand: Acme, Globex")
