"""PO/POT catalog codec using polib.

A catalog is held as ``translations[context][msgid] -> CatalogEntry``. The
empty context bucket always exists and carries the header block under the
empty msgid.
"""

from __future__ import annotations

import polib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

HEADER_MSGID = ""


@dataclass
class EntryComments:
    """Comment annotations of a catalog entry."""
    reference: Optional[str] = None   # "#:" file:line tokens
    extracted: Optional[str] = None   # "#."
    translator: Optional[str] = None  # "#"
    flags: list[str] = field(default_factory=list)
    previous: Optional[str] = None    # "#| msgid"

    def copy(self) -> "EntryComments":
        return EntryComments(
            reference=self.reference,
            extracted=self.extracted,
            translator=self.translator,
            flags=list(self.flags),
            previous=self.previous,
        )


@dataclass
class CatalogEntry:
    """A single translation unit."""
    msgid: str
    msgstr: list[str] = field(default_factory=lambda: [""])
    msgctxt: Optional[str] = None
    msgid_plural: str = ""
    comments: EntryComments = field(default_factory=EntryComments)
    obsolete: bool = False

    @property
    def fuzzy(self) -> bool:
        return "fuzzy" in self.comments.flags

    @property
    def translated(self) -> bool:
        return any(self.msgstr)

    @property
    def references(self) -> list[str]:
        return reference_tokens(self.comments.reference)

    def copy(self) -> "CatalogEntry":
        return CatalogEntry(
            msgid=self.msgid,
            msgstr=list(self.msgstr),
            msgctxt=self.msgctxt,
            msgid_plural=self.msgid_plural,
            comments=self.comments.copy(),
            obsolete=self.obsolete,
        )

    @classmethod
    def from_polib(cls, entry: polib.POEntry) -> "CatalogEntry":
        if entry.msgid_plural and entry.msgstr_plural:
            plural = dict(entry.msgstr_plural)
            msgstr = [plural[i] for i in sorted(plural)]
        else:
            msgstr = [entry.msgstr or ""]
        refs = [f"{path}:{line}" if line else path for path, line in entry.occurrences]
        return cls(
            msgid=entry.msgid,
            msgstr=msgstr,
            msgctxt=entry.msgctxt,
            msgid_plural=entry.msgid_plural or "",
            comments=EntryComments(
                reference=" ".join(refs) or None,
                extracted=entry.comment or None,
                translator=entry.tcomment or None,
                flags=list(entry.flags),
                previous=entry.previous_msgid or None,
            ),
            obsolete=entry.obsolete,
        )

    def to_polib(self) -> polib.POEntry:
        entry = polib.POEntry(
            msgid=self.msgid,
            msgctxt=self.msgctxt or None,
            comment=self.comments.extracted or "",
            tcomment=self.comments.translator or "",
            flags=list(self.comments.flags),
            occurrences=_occurrences(self.comments.reference),
            obsolete=self.obsolete,
        )
        if self.comments.previous:
            entry.previous_msgid = self.comments.previous
        if self.msgid_plural:
            entry.msgid_plural = self.msgid_plural
            entry.msgstr_plural = {i: s for i, s in enumerate(self.msgstr or [""])}
        else:
            entry.msgstr = self.msgstr[0] if self.msgstr else ""
        return entry


@dataclass
class Catalog:
    """Parsed PO catalog, grouped by context."""
    headers: dict[str, str] = field(default_factory=dict)
    translations: dict[str, dict[str, CatalogEntry]] = field(default_factory=lambda: {"": {}})
    obsolete: list[CatalogEntry] = field(default_factory=list)
    header_comment: str = ""
    charset: str = "utf-8"
    path: Optional[Path] = None

    def bucket(self, context: str = "") -> dict[str, CatalogEntry]:
        return self.translations[context]

    def entries(self, context: str = "") -> list[CatalogEntry]:
        """Entries of a bucket, without the header block."""
        return [e for e in self.translations.get(context, {}).values() if e.msgid != HEADER_MSGID]

    @property
    def language(self) -> str:
        for key, value in self.headers.items():
            if key.lower() == "language":
                return value
        return ""

    @property
    def total_count(self) -> int:
        return sum(len(self.entries(ctx)) for ctx in self.translations)

    @property
    def untranslated_count(self) -> int:
        return sum(1 for ctx in self.translations for e in self.entries(ctx) if not e.translated)

    @property
    def fuzzy_count(self) -> int:
        return sum(1 for ctx in self.translations for e in self.entries(ctx) if e.fuzzy)

    def shallow_copy(self) -> "Catalog":
        """A new catalog sharing buckets, with its own translations mapping."""
        return Catalog(
            headers=self.headers,
            translations=dict(self.translations),
            obsolete=self.obsolete,
            header_comment=self.header_comment,
            charset=self.charset,
            path=self.path,
        )


def reference_tokens(reference: Optional[str]) -> list[str]:
    """Split reference comment text into ``file:line`` tokens."""
    return reference.split() if reference else []


def _occurrences(reference: Optional[str]) -> list[tuple[str, str]]:
    occurrences = []
    for token in reference_tokens(reference):
        path, sep, line = token.rpartition(":")
        if sep and line.isdigit():
            occurrences.append((path, line))
        else:
            occurrences.append((token, ""))
    return occurrences


def _header_text(metadata: dict[str, str]) -> str:
    return "".join(f"{key}: {value}\n" for key, value in metadata.items())


def _from_polib(po: polib.POFile, path: Optional[Path]) -> Catalog:
    metadata = dict(po.metadata) if po.metadata else {}
    catalog = Catalog(
        headers=metadata,
        header_comment=po.header or "",
        charset=po.encoding or "utf-8",
        path=path,
    )
    if metadata:
        catalog.translations[""][HEADER_MSGID] = CatalogEntry(
            msgid=HEADER_MSGID, msgstr=[_header_text(metadata)],
        )
    for pe in po:
        entry = CatalogEntry.from_polib(pe)
        if entry.obsolete:
            catalog.obsolete.append(entry)
            continue
        catalog.translations.setdefault(entry.msgctxt or "", {})[entry.msgid] = entry
    return catalog


def parse_po(path: str | Path, charset: Optional[str] = None) -> Catalog:
    """Parse a PO or POT file."""
    path = Path(path)
    po = polib.pofile(str(path), encoding=charset) if charset else polib.pofile(str(path))
    return _from_polib(po, path)


def parse_po_text(text: str) -> Catalog:
    """Parse PO content held in memory."""
    return _from_polib(polib.pofile(text), None)


def _to_polib(catalog: Catalog, wrap_width: int) -> polib.POFile:
    po = polib.POFile(wrapwidth=wrap_width)
    po.metadata = dict(catalog.headers)
    po.header = catalog.header_comment
    po.encoding = catalog.charset
    contexts = [""] + [ctx for ctx in catalog.translations if ctx != ""]
    for ctx in contexts:
        for entry in catalog.translations.get(ctx, {}).values():
            if entry.msgid == HEADER_MSGID:
                continue
            po.append(entry.to_polib())
    for entry in catalog.obsolete:
        pe = entry.to_polib()
        pe.obsolete = True
        po.append(pe)
    return po


def compile_po(catalog: Catalog, wrap_width: int = 78) -> str:
    """Serialize a catalog to PO text."""
    text = str(_to_polib(catalog, wrap_width))
    return text if text.endswith("\n") else text + "\n"


def save_po(catalog: Catalog, path: Optional[str | Path] = None, wrap_width: int = 78) -> None:
    """Save a catalog as a PO file."""
    out = Path(path) if path else catalog.path
    if out is None:
        raise ValueError("No path given for a catalog that was not read from a file")
    out.write_text(compile_po(catalog, wrap_width), encoding=catalog.charset)
