"""Render ``file:line`` references into reference comment text."""

from __future__ import annotations

from typing import Iterable


def over_max(value: int, limit: int) -> bool:
    """True when ``value`` exceeds ``limit``; a negative limit means unlimited."""
    return limit >= 0 and value > limit


class ReferenceBuilder:
    """Applies the reference caps and wraps the survivors into lines.

    ``max`` caps the total, ``per_file`` caps each file, ``per_line`` and
    ``line_length`` decide where a new comment line starts. Any negative
    value is unlimited.
    """

    def __init__(self, max: int = -1, per_file: int = -1, per_line: int = -1, line_length: int = -1):
        self.max = max
        self.per_file = per_file
        self.per_line = per_line
        self.line_length = line_length

    @classmethod
    def from_settings(cls, settings) -> "ReferenceBuilder":
        refs = settings["references"]
        return cls(
            max=refs["max"],
            per_file=refs["per_file"],
            per_line=refs["per_line"],
            line_length=refs["line_length"],
        )

    def select(self, references: Iterable[str]) -> list[str]:
        """The references that survive the total and per-file caps."""
        counts: dict[str, int] = {}
        built: list[str] = []
        for ref in references:
            if self.max >= 0 and len(built) >= self.max:
                break
            file = ref.rpartition(":")[0] or ref
            counts[file] = counts.get(file, 0) + 1
            if over_max(counts[file], self.per_file):
                continue
            built.append(ref)
        return built

    def lines(self, references: Iterable[str]) -> list[str]:
        lines: list[str] = []
        line = ""
        count = 0
        for ref in self.select(references):
            if line and (
                over_max(count + 1, self.per_line)
                or over_max(len(line) + len(ref) + 1, self.line_length)
            ):
                lines.append(line)
                line = ""
                count = 0
            line = f"{line} {ref}" if line else ref
            count += 1
        if line:
            lines.append(line)
        return lines

    def build(self, references: Iterable[str]) -> str:
        return "\n".join(self.lines(references))
