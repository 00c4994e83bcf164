"""Read PO files, merge extracted messages into them, and write them back."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

from poextract.parsers.po_parser import Catalog, compile_po, parse_po_text
from poextract.services.collator import Message
from poextract.services.git_integration import check_clean
from poextract.services.merger import CatalogMerger, EventCallback, MergeResult
from poextract.services.paths import Globs, glob_files, rel_path, resolve
from poextract.services.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class PoMergeResult:
    file: str
    content: str
    source_content: str
    catalog: Catalog
    source_catalog: Catalog
    merge: MergeResult
    source_file: Optional[str] = None
    written: bool = False

    @property
    def is_change(self) -> bool:
        return self.merge.is_change

    @property
    def counts(self) -> dict[str, int]:
        return self.merge.counts


class PoMerger:
    """File-level driver around CatalogMerger.

    ``before_save(path, content)`` is called right before each write.
    """

    def __init__(self, settings: Optional[Settings] = None, on_event: Optional[EventCallback] = None,
                 before_save: Optional[Callable[[Path, str], None]] = None, **overrides):
        if settings is None:
            settings = Settings(**overrides)
        elif overrides:
            settings = Settings(settings.as_dict(), **overrides)
        self.settings = settings
        self.merger = CatalogMerger(settings)
        self.on_event = on_event
        self.before_save = before_save

    @property
    def base_dir(self) -> Path:
        return self.settings.base_dir

    def rel(self, file: str | Path) -> str:
        return rel_path(self.base_dir, resolve(self.base_dir, file))

    # ── Public API ────────────────────────────────────────────────

    def get_merge_result(self, source_file: str | Path, messages: Sequence[Message]) -> PoMergeResult:
        """Merge without writing anything."""
        path = resolve(self.base_dir, source_file)
        rel = self.rel(path)
        charset = self.settings["charset"] or "utf-8"
        logger.info("Reading %s", rel)
        source_content = path.read_text(charset)
        source_catalog = parse_po_text(source_content)
        source_catalog.path = path
        merge = self.merger.merge(source_catalog, messages, self.on_event)
        catalog = merge.catalog(replace=self.settings["replace"])
        content = compile_po(catalog, self.settings["wrap_width"])
        return PoMergeResult(
            file=rel,
            content=content,
            source_content=source_content,
            catalog=catalog,
            source_catalog=source_catalog,
            merge=merge,
        )

    def merge_po(self, file: str | Path, messages: Sequence[Message]) -> PoMergeResult:
        """Update one PO file in place."""
        path = resolve(self.base_dir, file)
        self.check_git(path)
        result = self.get_merge_result(path, messages)
        if result.is_change or self.settings["force_save"] or result.content != result.source_content:
            self._write(path, result)
        else:
            logger.info("No changes to write for %s", result.file)
        return result

    def merge_pos(self, globs: Globs, messages: Sequence[Message]) -> list[PoMergeResult]:
        files = glob_files(self.base_dir, globs)
        for file in files:
            self.check_git(file)
        if files:
            logger.info("Updating %d po files", len(files))
        else:
            logger.warning("No po files found")
        return [self.merge_po(file, messages) for file in files]

    def merge_po_to(self, source_file: str | Path, dest_file: str | Path,
                    messages: Sequence[Message]) -> PoMergeResult:
        """Merge ``source_file`` and write the output to ``dest_file``."""
        dest = resolve(self.base_dir, dest_file)
        self.check_git(dest)
        result = self.get_merge_result(source_file, messages)
        result.source_file = result.file
        result.file = self.rel(dest)
        self._write(dest, result)
        return result

    def merge_pos_to(self, source_globs: Globs, dest_dir: str | Path,
                     messages: Sequence[Message]) -> list[PoMergeResult]:
        """Merge each matching file into ``dest_dir``, dropping its first path component."""
        dest_dir = resolve(self.base_dir, dest_dir)
        sources = glob_files(self.base_dir, source_globs)
        dests = []
        for source in sources:
            parts = Path(self.rel(source)).parts
            short = Path(*parts[1:]) if len(parts) > 1 else Path(*parts)
            dests.append(dest_dir / short)
        if sources:
            logger.info("Creating %d new po files", len(sources))
        else:
            logger.warning("No po files found")
        for dest in dests:
            self.check_git(dest)
        return [self.merge_po_to(src, dest, messages) for src, dest in zip(sources, dests)]

    def check_git(self, file: str | Path) -> None:
        mode = self.settings["git_check"]
        if mode:
            check_clean(resolve(self.base_dir, file), mode, self.rel(file))

    # ── Private ───────────────────────────────────────────────────

    def _write(self, path: Path, result: PoMergeResult) -> None:
        if self.settings["dry_run"]:
            logger.info("Dry run, not writing %s", result.file)
            return
        if self.before_save is not None:
            self.before_save(path, result.content)
        logger.info("Writing %s", result.file)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(result.content, encoding=self.settings["charset"] or "utf-8")
        result.written = True
