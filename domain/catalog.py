"""
Catalog entry and reconciliation result definitions.

A catalog is a controlled vocabulary grouped by namespace (the `field_key`,
e.g. "color"). Each entry carries a canonical name, a short code used by
generated fields, an ordered list of aliases and an open `extra_data` mapping
holding custom columns that templates can read (`{color.xentral_code}`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple


def normalize_term(value: Any) -> str:
    """Lower-case and trim a value for case-insensitive comparison."""
    if value is None:
        return ""
    return str(value).strip().lower()


def _dedupe_aliases(aliases: Iterable[Any]) -> Tuple[str, ...]:
    seen = set()
    ordered = []
    for alias in aliases:
        if alias is None:
            continue
        text = str(alias).strip()
        key = text.lower()
        if not text or key in seen:
            continue
        seen.add(key)
        ordered.append(text)
    return tuple(ordered)


@dataclass(frozen=True)
class CatalogEntry:
    field_key: str
    name: str
    code: str
    aliases: Tuple[str, ...] = ()
    extra_data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not str(self.name or "").strip():
            raise ValueError(f"Catalog entry in '{self.field_key}' has an empty name")
        if not str(self.code or "").strip():
            raise ValueError(f"Catalog entry '{self.name}' in '{self.field_key}' has an empty code")
        object.__setattr__(self, "aliases", _dedupe_aliases(self.aliases or ()))
        object.__setattr__(self, "extra_data", dict(self.extra_data or {}))

    @classmethod
    def from_dict(cls, row: Mapping[str, Any], field_key: Optional[str] = None) -> "CatalogEntry":
        """Build an entry from a backing-store row (`field_key`, `name`, `code`, `aliases`, `extra_data`)."""
        aliases = row.get("aliases") or ()
        if isinstance(aliases, str):
            aliases = [aliases]
        return cls(
            field_key=str(field_key or row.get("field_key") or ""),
            name=str(row.get("name") or "").strip(),
            code=str(row.get("code") or "").strip(),
            aliases=tuple(aliases),
            extra_data=dict(row.get("extra_data") or {}),
        )

    def terms(self) -> Tuple[str, ...]:
        """Name followed by aliases, in match order."""
        return (self.name,) + self.aliases


class MatchType(str, Enum):
    EXACT = "exact"
    ALIAS = "alias"
    FUZZY = "fuzzy"
    COMPOUND = "compound"
    NONE = "none"


@dataclass(frozen=True)
class ReconciliationResult:
    normalized: str
    code: str
    match_type: MatchType
    entry: Optional[CatalogEntry] = None
    extra_data: Dict[str, Any] = field(default_factory=dict)
    distance: Optional[int] = None
    matched_part: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.match_type is not MatchType.NONE

    @classmethod
    def no_match(cls, raw_value: str) -> "ReconciliationResult":
        return cls(normalized=raw_value, code="", match_type=MatchType.NONE)

    @classmethod
    def from_entry(
        cls,
        entry: CatalogEntry,
        match_type: MatchType,
        distance: Optional[int] = None,
        matched_part: Optional[str] = None,
    ) -> "ReconciliationResult":
        return cls(
            normalized=entry.name,
            code=entry.code,
            match_type=match_type,
            entry=entry,
            extra_data=dict(entry.extra_data),
            distance=distance,
            matched_part=matched_part,
        )
