"""Aggregate raw key instances from many files into one message per key."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from poextract.parsers.syntax import Span
from poextract.services.collector import RawKeyInstance
from poextract.services.sorters import sort_lc_key, sort_location_key, sort_ref_key


@dataclass(frozen=True)
class Location:
    file: Optional[str]
    span: Span


@dataclass(frozen=True)
class Message:
    """One extracted (context, key) with everything known about it."""
    key: str
    context: str = ""
    files: tuple[str, ...] = ()
    references: tuple[str, ...] = ()
    comments: tuple[str, ...] = ()
    locations: tuple[Location, ...] = ()


@dataclass
class _Indexed:
    files: dict[str, None] = field(default_factory=dict)
    refs: dict[str, list[str]] = field(default_factory=dict)
    unreferenced: list[str] = field(default_factory=list)
    locations: dict[tuple, Location] = field(default_factory=dict)


def _add_comment(comments: list[str], comment: Optional[str]) -> None:
    if comment and comment not in comments:
        comments.append(comment)


class MessageCollator:
    """Accumulates instances across an extraction run."""

    def __init__(self, context: str = ""):
        self.context = context
        self._index: dict[str, _Indexed] = {}

    def add(self, instances: Iterable[RawKeyInstance], file: Optional[str] = None) -> "MessageCollator":
        for instance in instances:
            indexed = self._index.get(instance.key)
            if indexed is None:
                indexed = self._index[instance.key] = _Indexed()
            if file:
                indexed.files[file] = None
            line = instance.span.start.line if instance.span else None
            if file and line:
                ref = f"{file}:{line}"
                _add_comment(indexed.refs.setdefault(ref, []), instance.comment)
            else:
                _add_comment(indexed.unreferenced, instance.comment)
            if instance.span:
                location = Location(file, instance.span)
                indexed.locations[(file, instance.span.key)] = location
        return self

    def messages(self) -> list[Message]:
        """One finalized Message per key, in first-seen order."""
        result = []
        for key, indexed in self._index.items():
            refs = sorted(indexed.refs, key=sort_ref_key)
            comments: list[str] = []
            for ref in refs:
                for comment in indexed.refs[ref]:
                    _add_comment(comments, comment)
            for comment in indexed.unreferenced:
                _add_comment(comments, comment)
            result.append(Message(
                key=key,
                context=self.context,
                files=tuple(sorted(indexed.files, key=sort_lc_key)),
                references=tuple(refs),
                comments=tuple(comments),
                locations=tuple(sorted(indexed.locations.values(), key=sort_location_key)),
            ))
        return result

    def clear(self) -> None:
        self._index.clear()

    def __len__(self) -> int:
        return len(self._index)
