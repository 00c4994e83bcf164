"""Source files in, collated messages out."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from poextract.errors import SourceParseError
from poextract.parsers import get_parser
from poextract.services.collator import Message, MessageCollator
from poextract.services.collector import KeyCollector
from poextract.services.diagnostics import DiagnosticLog
from poextract.services.paths import Globs, glob_files, rel_path, resolve
from poextract.services.settings import Settings

logger = logging.getLogger(__name__)


class Extractor:
    """Runs parser, collector and collator over a set of source files.

    Messages accumulate across ``add_file`` calls until ``clear``.
    """

    def __init__(self, settings: Optional[Settings] = None, **overrides):
        if settings is None:
            settings = Settings(**overrides)
        elif overrides:
            settings = Settings(settings.as_dict(), **overrides)
        self.settings = settings
        self.parser = get_parser(settings["parser"])
        self.collector = KeyCollector.from_settings(settings)
        self.collator = MessageCollator(settings["context"])
        self.diagnostics: DiagnosticLog = self.collector.diagnostics
        self.files: list[str] = []

    @property
    def base_dir(self) -> Path:
        return self.settings.base_dir

    def add_file(self, file: str | Path) -> "Extractor":
        path = resolve(self.base_dir, file)
        rel = rel_path(self.base_dir, path)
        logger.info("Reading %s", rel)
        try:
            source = path.read_text("utf-8")
        except UnicodeDecodeError as e:
            raise SourceParseError(rel, f"not valid UTF-8 ({e})") from e
        self.add_source(source, rel)
        return self

    def add_source(self, source: str, file: str) -> "Extractor":
        """Extract from source text already in memory; ``file`` names it in references."""
        tree = self.parser(source, file)
        instances = self.collector.collect(tree, file)
        self.collator.add(instances, file)
        self.files.append(file)
        return self

    def add_files(self, globs: Globs) -> "Extractor":
        files = glob_files(self.base_dir, globs)
        if files:
            logger.info("Extracting from %d files", len(files))
        else:
            logger.warning("No source files found")
        for file in files:
            self.add_file(file)
        return self

    def get_messages(self) -> list[Message]:
        return self.collator.messages()

    def extract(self, globs: Globs) -> list[Message]:
        """Extract messages from the files matching ``globs``."""
        return self.add_files(globs).get_messages()

    def clear(self) -> "Extractor":
        self.collator.clear()
        self.diagnostics.clear()
        self.files.clear()
        return self
