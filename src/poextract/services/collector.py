"""Find extraction call sites in a syntax tree and resolve them to keys."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Union

from poextract.errors import ConfigError
from poextract.parsers.syntax import (
    CALLEE_IDENTIFIER,
    CALLEE_MEMBER,
    CallSite,
    Concat,
    Conditional,
    Dynamic,
    Expression,
    LogicalAnd,
    LogicalOr,
    SourceComment,
    SourceTree,
    Span,
    StringLiteral,
    Template,
    Unsupported,
)
from poextract.services.comments import CommentIndex
from poextract.services.diagnostics import DiagnosticLog

logger = logging.getLogger(__name__)

WILDCARD = "*"

RegexOption = Union[str, re.Pattern, None]


@dataclass(frozen=True)
class RawKeyInstance:
    """One key found at one place in one file."""
    key: str
    span: Span
    comment: Optional[str] = None


def _compile(value: RegexOption, name: str, need_group: bool = False) -> Optional[re.Pattern]:
    if value is None or value == "":
        return None
    try:
        pattern = value if isinstance(value, re.Pattern) else re.compile(value)
    except (re.error, TypeError) as e:
        raise ConfigError(f"Option ({name}) is not a valid regex: {value!r} ({e})") from e
    if need_group and pattern.groups < 1:
        raise ConfigError(f"Option ({name}) must have a capture group for the key: {pattern.pattern!r}")
    return pattern


def _check_markers(markers: Union[str, Iterable[str]]) -> frozenset[str]:
    if isinstance(markers, str):
        markers = [markers]
    try:
        names = list(markers)
    except TypeError:
        raise ConfigError(f"Option (markers) must be a string or list of strings, got {markers!r}") from None
    if not names:
        raise ConfigError("Option (markers) cannot be empty")
    for name in names:
        if not isinstance(name, str) or not name:
            raise ConfigError(f"Invalid marker: {name!r}")
    return frozenset(names)


def _clean_comment(value: str) -> str:
    lines = []
    for line in value.splitlines():
        line = line.strip()
        if line.startswith("*"):
            line = line[1:].strip()
        if line:
            lines.append(line)
    return "\n".join(lines)


def _union(*groups: list) -> list:
    seen = []
    for group in groups:
        for key in group:
            if key not in seen:
                seen.append(key)
    return seen


class KeyCollector:
    """Walks one file's calls and yields the keys at the configured argument.

    A call counts when its callee is a marker name, or with ``members`` on,
    when it is ``obj.marker(...)``. Comments matching ``key_regex`` declare a
    key directly; a comment matching ``ignore_regex`` switches off extraction
    on the line it ends on.
    """

    def __init__(
        self,
        markers: Union[str, Iterable[str]] = ("__",),
        arg_pos: int = 0,
        members: bool = False,
        extract_comments: bool = True,
        key_regex: RegexOption = r"i18n-extract (.+)",
        ignore_regex: RegexOption = r"i18n-ignore-line",
    ):
        if isinstance(arg_pos, bool) or not isinstance(arg_pos, int):
            raise ConfigError(f"Option (arg_pos) must be an integer, got {arg_pos!r}")
        self.markers = _check_markers(markers)
        self.arg_pos = arg_pos
        self.members = bool(members)
        self.extract_comments = bool(extract_comments)
        self.key_regex = _compile(key_regex, "comments.key_regex", need_group=True)
        self.ignore_regex = _compile(ignore_regex, "comments.ignore_regex")
        self.diagnostics = DiagnosticLog()
        self._resolvers: dict[type, Callable[[Expression, Optional[str]], list]] = {
            StringLiteral: self._resolve_literal,
            Concat: self._resolve_concat,
            Template: self._resolve_template,
            Conditional: self._resolve_conditional,
            LogicalAnd: self._resolve_and,
            LogicalOr: self._resolve_or,
            Dynamic: self._resolve_dynamic,
            Unsupported: self._resolve_unsupported,
        }

    @classmethod
    def from_settings(cls, settings) -> "KeyCollector":
        comments = settings["comments"]
        return cls(
            markers=settings["markers"],
            arg_pos=settings["arg_pos"],
            members=settings["members"],
            extract_comments=comments["extract"],
            key_regex=comments["key_regex"],
            ignore_regex=comments["ignore_regex"],
        )

    # ── Public API ────────────────────────────────────────────────

    def collect(self, tree: SourceTree, file: Optional[str] = None) -> list[RawKeyInstance]:
        """Return the key instances of one parsed file, in source order."""
        index = CommentIndex()
        ignored: set[int] = set()
        pending: list[tuple[Span, str]] = []

        for comment in tree.comments:
            if self._is_key_comment(comment, pending):
                continue
            if self.ignore_regex and self.ignore_regex.search(comment.value):
                ignored.add(comment.span.end.line)
                continue
            index.index([comment])

        for call in tree.calls:
            if call.span.start.line in ignored or not self.is_marker_call(call):
                continue
            arg = self._argument(call)
            if arg is None:
                self.diagnostics.warn(
                    f"No argument at position {self.arg_pos} for marker call",
                    file, call.span.start.line,
                )
                continue
            for key in self.resolve(arg, file):
                if key is not None:
                    pending.append((call.span, key))

        pending.sort(key=lambda item: item[0])
        instances = []
        for span, key in pending:
            comment = None
            adjacent = index.for_line(span.start.line)
            if adjacent:
                index.consume(adjacent)
                if self.extract_comments:
                    comment = "\n".join(_clean_comment(c.value) for c in adjacent) or None
            instances.append(RawKeyInstance(key, span, comment))
        logger.debug("Collected %d keys from %s", len(instances), file or "<source>")
        return instances

    def is_marker_call(self, call: CallSite) -> bool:
        if call.callee_kind == CALLEE_IDENTIFIER:
            return call.callee_name in self.markers
        if call.callee_kind == CALLEE_MEMBER and self.members:
            return call.callee_property in self.markers
        return False

    def resolve(self, expr: Expression, file: Optional[str] = None) -> list[Optional[str]]:
        """Resolve an argument expression to its possible keys.

        Statically unknown parts become ``*``; an unrecognized expression
        resolves to ``[None]``.
        """
        resolver = self._resolvers.get(type(expr))
        if resolver is None:
            raise TypeError(f"Not an argument expression: {expr!r}")
        return resolver(expr, file)

    # ── Private ───────────────────────────────────────────────────

    def _is_key_comment(self, comment: SourceComment, pending: list) -> bool:
        if not self.key_regex:
            return False
        match = self.key_regex.search(comment.value)
        if not match or match.group(1) is None:
            return False
        key = match.group(1).strip()
        if key:
            pending.append((comment.span, key))
        return True

    def _argument(self, call: CallSite) -> Optional[Expression]:
        pos = self.arg_pos
        if pos < 0:
            pos += len(call.arguments)
        if 0 <= pos < len(call.arguments):
            return call.arguments[pos]
        return None

    def _resolve_literal(self, expr: StringLiteral, file):
        return [expr.value]

    def _resolve_concat(self, expr: Concat, file):
        left = self.resolve(expr.left, file)
        right = self.resolve(expr.right, file)
        if len(left) > 1 or len(right) > 1:
            self.diagnostics.warn(
                "Unsupported multiple keys for binary expression, using the first of each side",
                file, expr.span.start.line,
            )
        if left[0] is None or right[0] is None:
            return [None]
        return [left[0] + right[0]]

    def _resolve_template(self, expr: Template, file):
        return [WILDCARD.join(expr.chunks)]

    def _resolve_conditional(self, expr: Conditional, file):
        return _union(self.resolve(expr.consequent, file), self.resolve(expr.alternate, file))

    def _resolve_and(self, expr: LogicalAnd, file):
        return self.resolve(expr.right, file)

    def _resolve_or(self, expr: LogicalOr, file):
        return _union(self.resolve(expr.left, file), self.resolve(expr.right, file))

    def _resolve_dynamic(self, expr: Dynamic, file):
        return [WILDCARD]

    def _resolve_unsupported(self, expr: Unsupported, file):
        self.diagnostics.warn(
            f"Cannot resolve key from {expr.kind} expression", file, expr.span.start.line,
        )
        return [None]
