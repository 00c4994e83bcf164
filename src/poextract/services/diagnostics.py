"""Non-fatal problems found while extracting and merging."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class Diagnostic:
    severity: str  # "warning", "info"
    message: str
    file: Optional[str] = None
    line: int = -1
    key: Optional[str] = None

    def __str__(self) -> str:
        where = self.file or ""
        if where and self.line >= 0:
            where = f"{where}:{self.line}"
        return f"{where}: {self.message}" if where else self.message


@dataclass
class DiagnosticLog:
    """Collects diagnostics and logs each one as it is recorded."""
    items: list[Diagnostic] = field(default_factory=list)

    def warn(self, message: str, file: Optional[str] = None, line: int = -1,
             key: Optional[str] = None) -> Diagnostic:
        return self._add(Diagnostic("warning", message, file, line, key), logging.WARNING)

    def info(self, message: str, file: Optional[str] = None, line: int = -1,
             key: Optional[str] = None) -> Diagnostic:
        return self._add(Diagnostic("info", message, file, line, key), logging.INFO)

    def _add(self, diagnostic: Diagnostic, level: int) -> Diagnostic:
        self.items.append(diagnostic)
        logger.log(level, "%s", diagnostic)
        return diagnostic

    def extend(self, other: "DiagnosticLog") -> None:
        self.items.extend(other.items)

    def clear(self) -> None:
        self.items.clear()

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.items if d.severity == "warning")

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)
