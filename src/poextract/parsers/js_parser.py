"""JavaScript (ES2017 + JSX) source adapter built on esprima."""

from __future__ import annotations

import logging
from typing import Any

import esprima

from poextract.errors import SourceParseError
from poextract.parsers.syntax import (
    CALLEE_IDENTIFIER,
    CALLEE_MEMBER,
    CALLEE_OTHER,
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

logger = logging.getLogger(__name__)

_OPTIONS = {"loc": True, "comment": True, "jsx": True}

_DYNAMIC = {
    "CallExpression": "call",
    "Identifier": "identifier",
    "MemberExpression": "member",
    "ThisExpression": "identifier",
}


def _get(node: Any, name: str, default: Any = None) -> Any:
    """esprima hands out both node objects and plain dicts."""
    if node is None:
        return default
    if isinstance(node, dict):
        return node.get(name, default)
    return getattr(node, name, default)


def _is_node(value: Any) -> bool:
    return isinstance(_get(value, "type"), str)


def _span(node: Any) -> Span:
    loc = _get(node, "loc")
    start, end = _get(loc, "start"), _get(loc, "end")
    return Span.of(
        _get(start, "line", 0), _get(start, "column", 0),
        _get(end, "line", 0), _get(end, "column", 0),
    )


def _children(node: Any):
    fields = node.items() if isinstance(node, dict) else vars(node).items()
    for name, value in fields:
        if name in ("loc", "range", "leadingComments", "trailingComments", "innerComments"):
            continue
        if isinstance(value, (list, tuple)):
            for item in value:
                if _is_node(item):
                    yield item
        elif _is_node(value):
            yield value


def _iter_nodes(root: Any):
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(list(_children(node))))


def _parse(source: str, filename: str) -> Any:
    try:
        return esprima.parseModule(source, dict(_OPTIONS))
    except Exception as module_error:
        logger.debug("Module parse of %s failed (%s), retrying as script", filename, module_error)
        try:
            return esprima.parseScript(source, dict(_OPTIONS))
        except Exception as e:
            raise SourceParseError(filename, str(e)) from e


def _convert(node: Any) -> Expression:
    kind = _get(node, "type")
    span = _span(node)
    if kind == "Literal":
        value = _get(node, "value")
        if isinstance(value, str):
            return StringLiteral(value, span)
        return Unsupported("Literal", span)
    if kind == "TemplateLiteral":
        chunks = []
        for quasi in _get(node, "quasis", []):
            value = _get(quasi, "value")
            cooked = _get(value, "cooked")
            chunks.append(cooked if cooked is not None else _get(value, "raw", ""))
        return Template(tuple(chunks), span)
    if kind == "BinaryExpression" and _get(node, "operator") == "+":
        return Concat(_convert(_get(node, "left")), _convert(_get(node, "right")), span)
    if kind == "LogicalExpression":
        operator = _get(node, "operator")
        left, right = _convert(_get(node, "left")), _convert(_get(node, "right"))
        if operator == "&&":
            return LogicalAnd(left, right, span)
        return LogicalOr(left, right, span)
    if kind == "ConditionalExpression":
        return Conditional(_convert(_get(node, "consequent")), _convert(_get(node, "alternate")), span)
    if kind in _DYNAMIC:
        return Dynamic(_DYNAMIC[kind], span)
    return Unsupported(kind or "unknown", span)


def _callee(callee: Any) -> tuple[str, str | None, str | None]:
    kind = _get(callee, "type")
    if kind == "Identifier":
        return CALLEE_IDENTIFIER, _get(callee, "name"), None
    if kind == "MemberExpression":
        obj = _get(callee, "object")
        name = _get(obj, "name") if _get(obj, "type") == "Identifier" else None
        prop = _get(callee, "property")
        if _get(callee, "computed"):
            value = _get(prop, "value")
            prop_name = value if _get(prop, "type") == "Literal" and isinstance(value, str) else None
        else:
            prop_name = _get(prop, "name")
        if prop_name is not None:
            return CALLEE_MEMBER, name, prop_name
    return CALLEE_OTHER, None, None


def parse_js(source: str, filename: str = "<source>") -> SourceTree:
    """Parse JavaScript source into a SourceTree."""
    program = _parse(source, filename)
    comments = [
        SourceComment(str(_get(c, "value", "")), _span(c))
        for c in (_get(program, "comments") or [])
    ]
    calls = []
    for node in _iter_nodes(program):
        if _get(node, "type") != "CallExpression":
            continue
        kind, name, prop = _callee(_get(node, "callee"))
        args = tuple(_convert(arg) for arg in _get(node, "arguments", []))
        calls.append(CallSite(kind, name, prop, args, _span(node)))
    calls.sort(key=lambda c: c.span)
    return SourceTree(comments=comments, calls=calls)
