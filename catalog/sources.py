"""
Backing stores for catalog entries.

A CatalogSource performs ONE bulk read returning every entry whose namespace
(`field_key`) is in the requested set. The CatalogStore decides when to call
it; sources never cache.

Implementations:
- InMemoryCatalogSource: entries held in memory (tests, seeded defaults, rows
  already fetched by the persistence layer).
- WorkbookCatalogSource: entries maintained in an Excel sheet with columns
  `field_key`, `name`, `code`, `aliases`; every other non-empty column is a
  custom column stored in `extra_data`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Protocol

from config import ALIAS_SEPARATORS
from domain.catalog import CatalogEntry
from input_readers.excel import cell_to_text, read_excel

logger = logging.getLogger(__name__)

_BUILTIN_COLUMNS = {"field_key", "name", "code", "aliases"}


class CatalogSource(Protocol):
    def fetch(self, namespaces: Iterable[str]) -> List[CatalogEntry]:
        ...


class InMemoryCatalogSource:
    """Catalog source over entries (or backing-store row dicts) kept in memory."""

    def __init__(self, entries: Iterable[Any] = ()):
        self._entries: List[CatalogEntry] = [
            e if isinstance(e, CatalogEntry) else CatalogEntry.from_dict(e) for e in entries
        ]

    def add(self, entry: CatalogEntry) -> None:
        self._entries.append(entry)

    def fetch(self, namespaces: Iterable[str]) -> List[CatalogEntry]:
        wanted = set(namespaces)
        return [e for e in self._entries if e.field_key in wanted]


def _row_to_entry(row: Mapping[str, Any], row_number: int) -> CatalogEntry | None:
    normalized = {str(k).strip().lower(): v for k, v in row.items()}

    field_key = cell_to_text(normalized.get("field_key"))
    name = cell_to_text(normalized.get("name"))
    code = cell_to_text(normalized.get("code"))
    if not field_key or not name or not code:
        logger.warning("Skipping catalog row %s: field_key, name and code are required", row_number)
        return None

    aliases = [a.strip() for a in ALIAS_SEPARATORS.split(cell_to_text(normalized.get("aliases"))) if a.strip()]

    extra_data = {}
    for header, value in row.items():
        column = str(header).strip()
        if column.lower() in _BUILTIN_COLUMNS:
            continue
        text = cell_to_text(value)
        if text:
            extra_data[column] = text

    return CatalogEntry(
        field_key=field_key,
        name=name,
        code=code,
        aliases=tuple(aliases),
        extra_data=extra_data,
    )


class WorkbookCatalogSource:
    """Catalog source reading an Excel sheet on every fetch."""

    def __init__(self, xlsx_path: Path, sheet_name: str | None = None):
        self.xlsx_path = Path(xlsx_path)
        self.sheet_name = sheet_name

    def fetch(self, namespaces: Iterable[str]) -> List[CatalogEntry]:
        wanted = set(namespaces)
        rows = read_excel(self.xlsx_path, sheet_name=self.sheet_name)

        entries: List[CatalogEntry] = []
        for row_number, row in enumerate(rows, start=2):
            entry = _row_to_entry(row, row_number)
            if entry is not None and entry.field_key in wanted:
                entries.append(entry)
        return entries
