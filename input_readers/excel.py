"""
EXCEL READER
------------
Reads Excel sheets into raw dict rows with NO transformation beyond turning
cells into strings. Used for file-based catalogs and for raw product batches
exported from the extraction step.
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd
from openpyxl import load_workbook

from config import MAX_SHEET_COLS, MAX_SHEET_ROWS, REVIEW_MARKER_KEY
from domain.products import RawProduct


def cell_to_text(value: Any) -> str:
    """Convert an Excel/pandas cell into a string ("" for empty, NaN or NaT)."""
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if pd.isna(value):
        return ""
    return str(value).strip()


def read_excel(xlsx_path: Path, sheet_name: str | None = None) -> List[Dict[str, Any]]:
    """
    Read Excel file where row 1 = headers, rows 2+ = data.

    Args:
        xlsx_path: Path to Excel file
        sheet_name: Optional sheet name (uses first sheet if None)

    Returns:
        List of row dicts with original headers as keys

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If file is not a valid Excel file or exceeds sheet limits
    """
    xlsx_path = Path(xlsx_path).expanduser().resolve()

    if not xlsx_path.exists():
        raise FileNotFoundError(f"Excel file not found: {xlsx_path}")

    try:
        wb = load_workbook(xlsx_path, data_only=True)
    except Exception as e:
        raise ValueError(f"Cannot read Excel file (is it corrupted or wrong format?): {e}") from e

    try:
        if sheet_name and sheet_name not in wb.sheetnames:
            raise ValueError(f"Sheet '{sheet_name}' not found in {xlsx_path.name}")
        ws = wb[sheet_name] if sheet_name else wb.worksheets[0]

        if ws.max_row > MAX_SHEET_ROWS + 1 or ws.max_column > MAX_SHEET_COLS:
            raise ValueError(
                f"Sheet '{ws.title}' is too large ({ws.max_row} rows x {ws.max_column} cols). "
                f"Limits: {MAX_SHEET_ROWS} rows, {MAX_SHEET_COLS} cols."
            )

        # Extract headers from row 1
        headers: List[str] = []
        for c in range(1, ws.max_column + 1):
            h = ws.cell(row=1, column=c).value
            headers.append(str(h).strip() if h is not None else f"col_{c}")

        # Extract data rows (skip empty rows)
        rows: List[Dict[str, Any]] = []
        for r in range(2, ws.max_row + 1):
            row: Dict[str, Any] = {}
            is_empty = True

            for c, header in enumerate(headers, start=1):
                value = ws.cell(row=r, column=c).value
                if value not in (None, ""):
                    is_empty = False
                row[header] = value

            if not is_empty:
                rows.append(row)
    finally:
        wb.close()

    return rows


def read_raw_products(xlsx_path: Path, sheet_name: str | None = None) -> List[RawProduct]:
    """Read a sheet of extracted rows as RawProduct dicts (every value a string)."""
    products: List[RawProduct] = []
    for row in read_excel(xlsx_path, sheet_name=sheet_name):
        product: RawProduct = {}
        for key, value in row.items():
            if key == REVIEW_MARKER_KEY:
                continue
            product[key] = cell_to_text(value)
        products.append(product)
    return products
