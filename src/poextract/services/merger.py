"""Reconcile extracted messages with a catalog's context bucket.

The merge yields two catalogs. *patch* keeps every entry of the bucket,
including ones no longer found in source. *replace* holds only the entries of
the extracted messages.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

from poextract.errors import DuplicateKeyError, MissingContextError
from poextract.parsers.po_parser import HEADER_MSGID, Catalog, CatalogEntry, reference_tokens
from poextract.services.collator import Message
from poextract.services.diagnostics import DiagnosticLog
from poextract.services.references import ReferenceBuilder
from poextract.services.sorters import CatalogSorter

logger = logging.getLogger(__name__)

ADDED = "added"
FOUND = "found"
CHANGED = "changed"
MISSING = "missing"

TRACK_KINDS = (ADDED, FOUND, CHANGED, MISSING)


@dataclass(frozen=True)
class Change:
    field: str
    old: Optional[str]
    new: Optional[str]


@dataclass
class TrackInfo:
    entry: CatalogEntry
    message: Optional[Message] = None
    changes: list[Change] = field(default_factory=list)


@dataclass(frozen=True)
class MergeEvent:
    kind: str
    entry: CatalogEntry
    message: Optional[Message] = None
    changes: tuple[Change, ...] = ()


@dataclass
class MergeResult:
    """Outcome of one CatalogMerger.merge call."""
    context: str = ""
    track_added: dict[str, TrackInfo] = field(default_factory=dict)
    track_found: dict[str, TrackInfo] = field(default_factory=dict)
    track_changed: dict[str, TrackInfo] = field(default_factory=dict)
    track_missing: dict[str, TrackInfo] = field(default_factory=dict)
    patch_catalog: Optional[Catalog] = None
    replace_catalog: Optional[Catalog] = None
    events: list[MergeEvent] = field(default_factory=list)
    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)

    def track(self, kind: str) -> dict[str, TrackInfo]:
        return getattr(self, f"track_{kind}")

    @property
    def counts(self) -> dict[str, int]:
        return {kind: len(self.track(kind)) for kind in TRACK_KINDS}

    @property
    def is_change(self) -> bool:
        counts = self.counts
        return bool(counts[ADDED] + counts[CHANGED] + counts[MISSING])

    def catalog(self, replace: bool = False) -> Catalog:
        return self.replace_catalog if replace else self.patch_catalog


EventCallback = Callable[[MergeEvent], Any]


class CatalogMerger:
    """Merges messages into the bucket of one context.

    Accepts a Settings object, or keyword options for ``context``,
    ``references`` (bool or a ReferenceBuilder) and ``sort``.
    """

    def __init__(self, settings=None, *, context: Optional[str] = None,
                 references: Any = None, sort: Any = None):
        if settings is not None:
            context = settings["context"] if context is None else context
            if references is None:
                references = (ReferenceBuilder.from_settings(settings)
                              if settings.references_enabled else False)
            sort = settings["sort"] if sort is None else sort
        self.context = context or ""
        if references is True and settings is not None:
            references = ReferenceBuilder.from_settings(settings)
        elif references is None or references is True:
            references = ReferenceBuilder()
        self.references: Optional[ReferenceBuilder] = references or None
        self.sorter = CatalogSorter("source" if sort is None else sort)

    # ── Public API ────────────────────────────────────────────────

    def merge(self, catalog: Catalog, messages: Iterable[Message],
              on_event: Optional[EventCallback] = None) -> MergeResult:
        context = self.context
        if context not in catalog.translations:
            raise MissingContextError(context, catalog.path)

        source = catalog.translations[context]
        result = MergeResult(context=context)
        patch: dict[str, CatalogEntry] = {}
        replace: dict[str, CatalogEntry] = {}

        def emit(kind: str, entry: CatalogEntry, message: Optional[Message] = None,
                 changes: Iterable[Change] = ()):
            event = MergeEvent(kind, entry, message, tuple(changes))
            result.events.append(event)
            if on_event is not None:
                on_event(event)

        logger.info(
            "Processing po (context=%r, language=%s, translations=%d)",
            context, catalog.language or "unknown", len(catalog.entries(context)),
        )

        for message in messages:
            msgid = message.key
            if msgid in patch:
                raise DuplicateKeyError(msgid)

            found = source.get(msgid)
            entry = found.copy() if found is not None else CatalogEntry(msgid=msgid, msgstr=[""])
            patch[msgid] = entry
            changes: list[Change] = []

            logger.debug("Merging %r (found=%s)", msgid, found is not None)

            if self.references is not None:
                if message.references:
                    change = self._set_reference(entry, message.references)
                    if change:
                        changes.append(change)
                else:
                    result.diagnostics.warn(f"Missing location reference for '{msgid}'", key=msgid)

            if message.comments:
                change = self._set_extracted(entry, message.comments)
                if change:
                    changes.append(change)

            if found is not None:
                info = TrackInfo(entry, message)
                result.track_found[msgid] = info
                emit(FOUND, entry, message)
                if changes:
                    info.changes = changes
                    result.track_changed[msgid] = info
                    emit(CHANGED, entry, message, changes)
            else:
                if context:
                    entry.msgctxt = context
                result.track_added[msgid] = TrackInfo(entry, message)
                emit(ADDED, entry, message)

            replace[msgid] = entry.copy()

        for msgid, existing in source.items():
            if msgid == HEADER_MSGID or msgid in patch:
                continue
            entry = existing.copy()
            patch[msgid] = entry
            result.track_missing[msgid] = TrackInfo(entry)
            logger.debug("Missing %r", msgid)
            emit(MISSING, entry)

        # Header stays first in both outputs
        header = source.get(HEADER_MSGID)
        source_order = {msgid: i for i, msgid in enumerate(source)}
        result.patch_catalog = self._output(catalog, patch, header, source_order)
        result.replace_catalog = self._output(catalog, replace, header, source_order)

        logger.info("Totals %s", ", ".join(f"{k}={v}" for k, v in result.counts.items()))
        return result

    # ── Private ───────────────────────────────────────────────────

    def _output(self, catalog: Catalog, entries: dict[str, CatalogEntry],
                header: Optional[CatalogEntry], source_order: dict[str, int]) -> Catalog:
        out = catalog.shallow_copy()
        bucket = self.sorter.sorted_bucket(entries, source_order)
        if header is not None:
            bucket = {HEADER_MSGID: header.copy(), **bucket}
        out.translations[self.context] = bucket
        return out

    def _set_reference(self, entry: CatalogEntry, references: Iterable[str]) -> Optional[Change]:
        reference = self.references.build(references)
        old = entry.comments.reference
        if reference_tokens(old) == reference_tokens(reference):
            return None
        entry.comments.reference = reference or None
        return Change("comments.reference", old, reference)

    def _set_extracted(self, entry: CatalogEntry, comments: Iterable[str]) -> Optional[Change]:
        extracted = "\n".join(comments)
        old = entry.comments.extracted
        if old == extracted:
            return None
        entry.comments.extracted = extracted
        return Change("comments.extracted", old, extracted)
