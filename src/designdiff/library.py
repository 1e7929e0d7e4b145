"""Library index -- catalog of a document's components and styles.

Indexing is deterministic for a given document version, so callers that
compare many version pairs can keep a :class:`LibraryIndexCache` keyed by
``(document id, version id)``.  The cache is an ordinary object owned by the
caller; nothing in this package holds one globally.
"""

from __future__ import annotations

import logging
from collections import OrderedDict

from .models import DocumentSnapshot, IndexedComponent, LibraryIndex
from .names import base_name, parse_variant_properties

logger = logging.getLogger(__name__)


def _variant_part(name: str) -> dict[str, str] | None:
    _head, sep, tail = name.partition("/")
    if not sep:
        return None
    return parse_variant_properties(tail) or None


def index_library(
    snapshot: DocumentSnapshot,
    file_key: str,
    version_id: str | None = None,
) -> LibraryIndex:
    """Group library components by base name and list styles by type."""
    grouped: dict[str, dict] = {}
    for comp in snapshot.components.values():
        name = base_name(comp.name)
        props = _variant_part(comp.name)
        entry = grouped.setdefault(name, {
            "key": comp.key,
            "description": comp.description,
            "options": {},
            "default": props,
        })
        for prop, value in (props or {}).items():
            entry["options"].setdefault(prop, set()).add(value)

    components = [
        IndexedComponent(
            key=entry["key"],
            name=name,
            description=entry["description"],
            variants={prop: sorted(values) for prop, values in entry["options"].items()},
            default_variant=entry["default"],
        )
        for name, entry in grouped.items()
    ]
    components.sort(key=lambda c: c.name.lower())

    styles: dict[str, list[str]] = {}
    for style in snapshot.styles.values():
        styles.setdefault(style.style_type.lower(), []).append(style.name)

    logger.debug(
        "Indexed %d components and %d styles for %s",
        len(components), len(snapshot.styles), file_key,
    )
    return LibraryIndex(
        file_key=file_key,
        file_name=snapshot.name,
        version_id=version_id or snapshot.version,
        components=components,
        styles=styles,
    )


def find_component(index: LibraryIndex, search: str) -> IndexedComponent | None:
    """Exact case-insensitive name match first, then substring match."""
    wanted = search.lower()
    for comp in index.components:
        if comp.name.lower() == wanted:
            return comp
    for comp in index.components:
        if wanted in comp.name.lower():
            return comp
    return None


class LibraryIndexCache:
    """Bounded LRU cache of library indices keyed by document and version."""

    def __init__(self, max_entries: int = 32) -> None:
        self.max_entries = max_entries
        self._entries: OrderedDict[tuple[str, str], LibraryIndex] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, document_id: str, version_id: str) -> LibraryIndex | None:
        key = (document_id, version_id)
        index = self._entries.get(key)
        if index is not None:
            self._entries.move_to_end(key)
        return index

    def put(self, document_id: str, version_id: str, index: LibraryIndex) -> None:
        key = (document_id, version_id)
        self._entries[key] = index
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted library index %s@%s", *evicted)

    def get_or_build(
        self,
        snapshot: DocumentSnapshot,
        document_id: str,
        version_id: str,
    ) -> LibraryIndex:
        index = self.get(document_id, version_id)
        if index is None:
            index = index_library(snapshot, document_id, version_id)
            self.put(document_id, version_id, index)
        return index

    def clear(self) -> None:
        self._entries.clear()
