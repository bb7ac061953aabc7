"""Catalog match guide injected into extraction prompts."""

from __future__ import annotations

from typing import Iterable

from .store import CatalogStore


def build_match_guide(store: CatalogStore, namespaces: Iterable[str]) -> str:
    """
    Render the valid catalog names per namespace, one line each:

        color: Black, White, Pearl
        brand: Acme

    Namespaces without entries are omitted; returns "" when nothing is known.
    """
    lines = []
    seen = set()
    for namespace in namespaces:
        if not namespace or namespace in seen:
            continue
        seen.add(namespace)
        names = [entry.name for entry in store.entries_for(namespace)]
        if names:
            lines.append(f"{namespace}: {', '.join(names)}")
    return "\n".join(lines)
