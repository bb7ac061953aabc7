"""
Field schema ("profile") definitions.

A profile is an ordered list of FieldDefinition items. Field behaviour is
entirely data-driven: extracted fields come from the AI extraction step and may
be bound to a catalog namespace, computed fields are produced by a template or
by an external AI enrichment collaborator.

Profiles are usually stored as JSON, so `FieldDefinition.from_dict` accepts
the stored shape, including two older spellings:
- `use_template: true` (a templated field before `source`/`logic_type` existed)
- `normalize_with: "<namespace>"` (the catalog binding before `catalog_key`)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .errors import ProfileError


class FieldSource(str, Enum):
    EXTRACTED = "extracted"
    COMPUTED = "computed"


class LogicType(str, Enum):
    NONE = "none"
    TEMPLATE = "template"
    AI_ENRICHMENT = "ai_enrichment"


class ValueType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


def _enum_value(enum_cls, raw: Any, default):
    if raw is None or raw == "":
        return default
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError as e:
        raise ProfileError(f"Invalid {enum_cls.__name__} value: {raw!r}") from e


@dataclass(frozen=True)
class FieldDefinition:
    key: str
    label: str = ""
    value_type: ValueType = ValueType.STRING
    source: FieldSource = FieldSource.EXTRACTED
    catalog_key: Optional[str] = None
    logic_type: LogicType = LogicType.NONE
    template: str = ""
    ai_prompt: str = ""
    fallback: str = ""

    @property
    def is_computed(self) -> bool:
        return self.source is FieldSource.COMPUTED

    @property
    def is_template(self) -> bool:
        return self.is_computed and self.logic_type is LogicType.TEMPLATE and bool(self.template)

    @property
    def is_enrichment(self) -> bool:
        return self.is_computed and self.logic_type is LogicType.AI_ENRICHMENT and bool(self.ai_prompt)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "FieldDefinition":
        if not isinstance(raw, Mapping):
            raise ProfileError(f"Field definition must be a mapping, got {type(raw).__name__}")

        key = str(raw.get("key") or "").strip()
        if not key:
            raise ProfileError(f"Field definition without a key: {dict(raw)!r}")

        source = _enum_value(FieldSource, raw.get("source"), FieldSource.EXTRACTED)
        logic_type = _enum_value(LogicType, raw.get("logic_type"), LogicType.NONE)
        template = str(raw.get("template") or "")

        if raw.get("use_template") and template:
            source = FieldSource.COMPUTED
            logic_type = LogicType.TEMPLATE

        if source is FieldSource.EXTRACTED:
            logic_type = LogicType.NONE

        catalog_key = raw.get("catalog_key") or raw.get("normalize_with") or None

        return cls(
            key=key,
            label=str(raw.get("label") or key),
            value_type=_enum_value(ValueType, raw.get("type", raw.get("value_type")), ValueType.STRING),
            source=source,
            catalog_key=str(catalog_key).strip() if catalog_key else None,
            logic_type=logic_type,
            template=template,
            ai_prompt=str(raw.get("ai_prompt") or ""),
            fallback="" if raw.get("fallback") is None else str(raw.get("fallback")),
        )


@dataclass(frozen=True)
class Profile:
    fields: tuple
    name: str = "default"

    def __post_init__(self) -> None:
        fields = tuple(self.fields)
        if not fields:
            raise ProfileError(f"Profile '{self.name}' defines no fields")
        seen = set()
        for f in fields:
            if f.key in seen:
                raise ProfileError(f"Profile '{self.name}' defines field '{f.key}' twice")
            seen.add(f.key)
        object.__setattr__(self, "fields", fields)

    @classmethod
    def from_fields(cls, raw_fields: Iterable[Any], name: str = "default") -> "Profile":
        """Build a profile from FieldDefinition objects or their stored dict form."""
        if raw_fields is None:
            raise ProfileError("Processing profile is required")
        parsed = [
            f if isinstance(f, FieldDefinition) else FieldDefinition.from_dict(f)
            for f in raw_fields
        ]
        return cls(fields=tuple(parsed), name=name)

    @property
    def keys(self) -> List[str]:
        return [f.key for f in self.fields]

    def get(self, key: str) -> Optional[FieldDefinition]:
        for f in self.fields:
            if f.key == key:
                return f
        return None

    def extracted_fields(self) -> List[FieldDefinition]:
        return [f for f in self.fields if not f.is_computed]

    def template_fields(self) -> List[FieldDefinition]:
        return [f for f in self.fields if f.is_template]

    def enrichment_fields(self) -> List[FieldDefinition]:
        return [f for f in self.fields if f.is_enrichment]

    def computed_keys(self) -> set:
        return {f.key for f in self.fields if f.is_computed}

    def catalog_keys(self) -> List[str]:
        """Distinct catalog namespaces referenced by the schema, in schema order."""
        keys: List[str] = []
        for f in self.fields:
            if f.catalog_key and f.catalog_key not in keys:
                keys.append(f.catalog_key)
        return keys

    def catalog_mapping(self) -> Dict[str, str]:
        """Field key -> catalog namespace, for every bound field."""
        return {f.key: f.catalog_key for f in self.fields if f.catalog_key}


def as_profile(schema: Any) -> Profile:
    """Accept a Profile, or a list of FieldDefinition/dict items."""
    if isinstance(schema, Profile):
        return schema
    return Profile.from_fields(schema)
