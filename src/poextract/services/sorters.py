"""Orderings for references, locations and catalog entries."""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from poextract.errors import ConfigError
from poextract.parsers.po_parser import CatalogEntry


@dataclass(frozen=True)
class SortContext:
    """What a comparator may know besides the two entries."""
    source_order: dict[str, int] = field(default_factory=dict)


EntryComparator = Callable[[CatalogEntry, CatalogEntry, SortContext], int]


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _split_ref(ref: str) -> tuple[str, int]:
    path, sep, line = ref.rpartition(":")
    if sep and line.isdigit():
        return path, int(line)
    return ref, -1


# ── Sort keys for plain values ───────────────────────────────────


def sort_lc_key(value: str) -> tuple[str, str]:
    return value.lower(), value


def sort_ref_key(ref: str) -> tuple[str, int, str]:
    path, line = _split_ref(ref)
    return path.lower(), line, path


def sort_location_key(location) -> tuple:
    file = location.file or ""
    return file.lower(), file, location.span.start.line, location.span.start.column


# ── Comparators ──────────────────────────────────────────────────


def cmp_lc(a: str, b: str) -> int:
    return _cmp(a.lower(), b.lower())


def cmp_ref(a: str, b: str) -> int:
    afile, aline = _split_ref(a)
    bfile, bline = _split_ref(b)
    return cmp_lc(afile, bfile) or _cmp(aline, bline)


def cmp_refs(a: list[str], b: list[str]) -> int:
    """Element-wise reference comparison; non-empty lists sort first."""
    if not a or not b:
        if a:
            return -1
        if b:
            return 1
        return 0
    for aref, bref in zip(a, b):
        result = cmp_ref(aref, bref)
        if result:
            return result
    return _cmp(len(a), len(b))


def by_msgid(a: CatalogEntry, b: CatalogEntry, context: SortContext) -> int:
    return cmp_lc(a.msgid, b.msgid)


def by_file(a: CatalogEntry, b: CatalogEntry, context: SortContext) -> int:
    arefs, brefs = a.references, b.references
    if arefs and brefs:
        return cmp_refs(arefs, brefs) or by_msgid(a, b, context)
    if arefs:
        return -1
    if brefs:
        return 1
    return by_msgid(a, b, context)


def by_source(a: CatalogEntry, b: CatalogEntry, context: SortContext) -> int:
    asrc = context.source_order.get(a.msgid)
    bsrc = context.source_order.get(b.msgid)
    if asrc is None or bsrc is None:
        if asrc is not None:
            return -1
        if bsrc is not None:
            return 1
        return by_msgid(a, b, context)
    return _cmp(asrc, bsrc)


def descending(comparator: EntryComparator) -> EntryComparator:
    def desc(a, b, context):
        return comparator(b, a, context)
    desc.__name__ = f"{comparator.__name__}_desc"
    return desc


SORTERS: dict[str, EntryComparator] = {
    "msgid": by_msgid,
    "file": by_file,
    "source": by_source,
}


def get_comparator(sort: Union[str, EntryComparator, None]) -> EntryComparator:
    """Resolve a sort option: a strategy name, ``name-asc``/``name-desc``, or a callable."""
    if sort is None:
        return by_source
    if callable(sort):
        return sort
    if isinstance(sort, str):
        name, _, direction = sort.lower().partition("-")
        if name in SORTERS and direction in ("", "asc", "desc"):
            comparator = SORTERS[name]
            return descending(comparator) if direction == "desc" else comparator
    choices = ", ".join(f"{n}, {n}-asc, {n}-desc" for n in SORTERS)
    raise ConfigError(f"Invalid sort option: {sort!r}. Expected a function or one of: {choices}")


class CatalogSorter:
    """Puts the entries of a catalog bucket in their serialization order."""

    def __init__(self, sort: Union[str, EntryComparator, None] = "source"):
        self.comparator = get_comparator(sort)

    def sort(self, entries: list[CatalogEntry], context: Optional[SortContext] = None) -> list[CatalogEntry]:
        context = context or SortContext()
        key = functools.cmp_to_key(lambda a, b: self.comparator(a, b, context))
        return sorted(entries, key=key)

    def sorted_bucket(self, bucket: dict[str, CatalogEntry],
                      source_order: Optional[dict[str, int]] = None) -> dict[str, CatalogEntry]:
        """A new bucket with the same entries, inserted in sorted order."""
        entries = self.sort(list(bucket.values()), SortContext(source_order or {}))
        return {entry.msgid: entry for entry in entries}
