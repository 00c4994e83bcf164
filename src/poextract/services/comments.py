"""Per-file index of source comments, keyed by the line they end on."""

from __future__ import annotations

from typing import Iterable

from poextract.parsers.syntax import SourceComment


class CommentIndex:
    """Lets the collector claim comments next to an extraction site.

    A comment is found from its own end line or the line below it, so both
    trailing (``__('x') // note``) and preceding comments attach. Once
    consumed, a comment is never handed out again.
    """

    def __init__(self, comments: Iterable[SourceComment] = ()):
        self._by_line: dict[int, dict[tuple[int, int, int, int], SourceComment]] = {}
        self.index(comments)

    def index(self, comments: Iterable[SourceComment]) -> None:
        for comment in comments:
            self._by_line.setdefault(comment.span.end.line, {})[comment.span.key] = comment

    def for_line(self, line: int) -> list[SourceComment]:
        found = []
        for candidate in (line - 1, line):
            found.extend(self._by_line.get(candidate, {}).values())
        return sorted(found, key=lambda c: c.span)

    def consume(self, comments: Iterable[SourceComment]) -> None:
        for comment in comments:
            bucket = self._by_line.get(comment.span.end.line)
            if bucket is None:
                continue
            bucket.pop(comment.span.key, None)
            if not bucket:
                del self._by_line[comment.span.end.line]

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._by_line.values())
