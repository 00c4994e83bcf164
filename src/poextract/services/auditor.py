"""Report untranslated and fuzzy messages in PO files."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from poextract.errors import MissingContextError
from poextract.parsers.po_parser import CatalogEntry, parse_po
from poextract.services.paths import Globs, glob_files, rel_path, resolve
from poextract.services.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class AuditResult:
    file: str
    untranslated: list[CatalogEntry] = field(default_factory=list)
    fuzzy: list[CatalogEntry] = field(default_factory=list)
    total: int = 0

    @property
    def complete(self) -> bool:
        return not self.untranslated


class Auditor:
    def __init__(self, settings: Optional[Settings] = None, **overrides):
        if settings is None:
            settings = Settings(**overrides)
        elif overrides:
            settings = Settings(settings.as_dict(), **overrides)
        self.settings = settings

    def get_result(self, file: str | Path) -> AuditResult:
        base_dir = self.settings.base_dir
        path = resolve(base_dir, file)
        rel = rel_path(base_dir, path)
        context = self.settings["context"]
        logger.info("Reading %s", rel)
        catalog = parse_po(path, self.settings["charset"])
        if context not in catalog.translations:
            raise MissingContextError(context, rel)
        entries = catalog.entries(context)
        result = AuditResult(
            file=rel,
            untranslated=[e for e in entries if not e.translated],
            fuzzy=[e for e in entries if e.fuzzy],
            total=len(entries),
        )
        logger.info("Totals untranslated=%d, fuzzy=%d, total=%d",
                    len(result.untranslated), len(result.fuzzy), result.total)
        return result

    def get_results(self, globs: Globs) -> list[AuditResult]:
        files = glob_files(self.settings.base_dir, globs)
        if files:
            logger.info("Processing %d files", len(files))
        else:
            logger.warning("No files found")
        return [self.get_result(file) for file in files]


def format_results(results: list[AuditResult]) -> list[str]:
    """Report lines: complete files first, then the rest by most untranslated."""
    lines = [f"{r.file} has no missing translations" for r in results if r.complete]
    pending = sorted((r for r in results if not r.complete), key=lambda r: -len(r.untranslated))
    for result in pending:
        lines.append(f"{result.file} has {len(result.untranslated)} untranslated messages")
        lines.extend(f"    {entry.msgid}" for entry in result.untranslated)
    return lines
