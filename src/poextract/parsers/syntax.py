"""Language-neutral syntax tree handed from the parser adapters to the collector.

Adapters reduce a real parse tree to the few shapes the key collector cares
about: the flat comment list, every call expression, and the argument
expressions of those calls as a small tagged union.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True, order=True)
class Position:
    line: int
    column: int


@dataclass(frozen=True, order=True)
class Span:
    start: Position
    end: Position

    @classmethod
    def of(cls, start_line: int, start_col: int, end_line: int, end_col: int) -> "Span":
        return cls(Position(start_line, start_col), Position(end_line, end_col))

    @property
    def key(self) -> tuple[int, int, int, int]:
        """Structural hash of the range."""
        return (self.start.line, self.start.column, self.end.line, self.end.column)


@dataclass(frozen=True)
class SourceComment:
    value: str
    span: Span


# ── Argument expressions ─────────────────────────────────────────


@dataclass(frozen=True)
class StringLiteral:
    value: str
    span: Span


@dataclass(frozen=True)
class Concat:
    """Binary ``+``."""
    left: "Expression"
    right: "Expression"
    span: Span


@dataclass(frozen=True)
class Template:
    """Template literal; one interpolation sits between each pair of chunks."""
    chunks: tuple[str, ...]
    span: Span


@dataclass(frozen=True)
class Conditional:
    consequent: "Expression"
    alternate: "Expression"
    span: Span


@dataclass(frozen=True)
class LogicalAnd:
    left: "Expression"
    right: "Expression"
    span: Span


@dataclass(frozen=True)
class LogicalOr:
    left: "Expression"
    right: "Expression"
    span: Span


@dataclass(frozen=True)
class Dynamic:
    """A call, identifier or member access with no static value."""
    kind: str
    span: Span


@dataclass(frozen=True)
class Unsupported:
    kind: str
    span: Span


Expression = Union[
    StringLiteral, Concat, Template, Conditional, LogicalAnd, LogicalOr, Dynamic, Unsupported,
]


# ── Calls ────────────────────────────────────────────────────────

CALLEE_IDENTIFIER = "identifier"
CALLEE_MEMBER = "member"
CALLEE_OTHER = "other"


@dataclass(frozen=True)
class CallSite:
    callee_kind: str  # identifier / member / other
    callee_name: str | None
    callee_property: str | None
    arguments: tuple[Expression, ...]
    span: Span


@dataclass
class SourceTree:
    """Everything the collector needs from one parsed file."""
    comments: list[SourceComment] = field(default_factory=list)
    calls: list[CallSite] = field(default_factory=list)
