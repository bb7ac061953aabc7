"""
Template parsing.

Template syntax:
    {name}            value of a field (catalog code when the field is catalog-bound)
    {name.code}       catalog code for the field value, spelled explicitly
    {name.column}     custom column of the matched catalog entry (extra_data)
    {name:N}          fixed width: numbers are zero-padded, text is cut/padded with X
    {sequence}        1-based position of the item in its batch

Parsing never fails: an unterminated "{" or a brace body that is not a valid
placeholder stays in the output as literal text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Tuple, Union

_PLACEHOLDER = re.compile(
    r"^([A-Za-z_][A-Za-z0-9_]*)(?:\.([A-Za-z_][A-Za-z0-9_]*))?(?::(\d+))?$"
)

SEQUENCE = "sequence"
CODE_COLUMN = "code"


@dataclass(frozen=True)
class Placeholder:
    name: str
    column: Optional[str] = None
    width: Optional[int] = None

    @property
    def use_code(self) -> bool:
        return self.column == CODE_COLUMN

    @property
    def custom_column(self) -> Optional[str]:
        return self.column if self.column and self.column != CODE_COLUMN else None


Segment = Union[str, Placeholder]


def _placeholder(body: str) -> Optional[Placeholder]:
    match = _PLACEHOLDER.match(body)
    if not match:
        return None
    name, column, width = match.groups()
    return Placeholder(name=name, column=column, width=int(width) if width else None)


@lru_cache(maxsize=512)
def parse_template(template: str) -> Tuple[Segment, ...]:
    """Split a template into literal strings and Placeholder segments, left to right."""
    segments: List[Segment] = []
    literal: List[str] = []

    i = 0
    length = len(template or "")
    while i < length:
        char = template[i]
        if char != "{":
            literal.append(char)
            i += 1
            continue

        end = template.find("}", i + 1)
        placeholder = _placeholder(template[i + 1:end]) if end != -1 else None
        if placeholder is None:
            literal.append(char)
            i += 1
            continue

        if literal:
            segments.append("".join(literal))
            literal = []
        segments.append(placeholder)
        i = end + 1

    if literal:
        segments.append("".join(literal))

    return tuple(segments)


def template_variables(template: str) -> List[str]:
    """Distinct placeholder names in order of first appearance."""
    names: List[str] = []
    for segment in parse_template(template):
        if isinstance(segment, Placeholder) and segment.name not in names:
            names.append(segment.name)
    return names
