from datetime import datetime

import pytest
from openpyxl import Workbook

from catalog import CatalogStore, Reconciler, WorkbookCatalogSource
from input_readers import cell_to_text, read_excel, read_raw_products


def write_sheet(path, rows, title="Catalog"):
    wb = Workbook()
    ws = wb.active
    ws.title = title
    for row in rows:
        ws.append(row)
    wb.save(path)
    return path


@pytest.fixture
def catalog_xlsx(tmp_path):
    return write_sheet(
        tmp_path / "catalog.xlsx",
        [
            ["Field_Key", "Name", "Code", "Aliases", "xentral_code"],
            ["color", "Black", "01", "Noir; Schwarz | noir", "X-BLK"],
            ["color", "Pearl", 3, None, None],
            ["color", "Grey", None, "Gris", None],
            [None, None, None, None, None],
            ["brand", "Acme", "AC", "Acme Corp", None],
        ],
    )


class TestCellToText:
    @pytest.mark.parametrize(
        "value, text",
        [
            (None, ""),
            (float("nan"), ""),
            (12.0, "12"),
            (12.5, "12.5"),
            (7, "7"),
            ("  Black ", "Black"),
            (datetime(2024, 3, 1, 9, 30), "2024-03-01T09:30:00"),
        ],
    )
    def test_values(self, value, text):
        assert cell_to_text(value) == text


class TestReadExcel:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_excel(tmp_path / "nope.xlsx")

    def test_missing_sheet(self, catalog_xlsx):
        with pytest.raises(ValueError):
            read_excel(catalog_xlsx, sheet_name="Colors")

    def test_empty_rows_are_skipped(self, catalog_xlsx):
        rows = read_excel(catalog_xlsx, sheet_name="Catalog")
        assert len(rows) == 4
        assert rows[0]["Name"] == "Black"


class TestWorkbookCatalogSource:
    def test_fetch_only_requested_namespaces(self, catalog_xlsx):
        entries = WorkbookCatalogSource(catalog_xlsx).fetch(["color"])
        assert [(e.name, e.code) for e in entries] == [("Black", "01"), ("Pearl", "3")]

    def test_aliases_and_custom_columns(self, catalog_xlsx):
        black = WorkbookCatalogSource(catalog_xlsx).fetch(["color"])[0]
        assert black.aliases == ("Noir", "Schwarz")
        assert black.extra_data == {"xentral_code": "X-BLK"}

    def test_rows_without_code_are_skipped(self, catalog_xlsx, caplog):
        entries = WorkbookCatalogSource(catalog_xlsx).fetch(["color"])
        assert "Grey" not in [e.name for e in entries]
        assert "Skipping catalog row" in caplog.text

    def test_backs_a_store(self, catalog_xlsx):
        store = CatalogStore(WorkbookCatalogSource(catalog_xlsx))
        with store.prefetched(["color", "brand"]):
            reconciler = Reconciler(store)
            assert reconciler.reconcile("schwarz", "color").code == "01"
            assert reconciler.reconcile("ACME CORP", "brand").normalized == "Acme"
        assert store.reads == 1


class TestReadRawProducts:
    def test_rows_become_strings(self, tmp_path):
        path = write_sheet(
            tmp_path / "rows.xlsx",
            [
                ["name", "quantity", "unit_price", "needs_checking"],
                ["Runner", 12, 19.9, "color"],
                ["Trail", None, "1.234,56", None],
            ],
            title="Rows",
        )
        assert read_raw_products(path) == [
            {"name": "Runner", "quantity": "12", "unit_price": "19.9"},
            {"name": "Trail", "quantity": "", "unit_price": "1.234,56"},
        ]
