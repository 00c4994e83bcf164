"""Python source adapter using the stdlib ast and tokenize modules."""

from __future__ import annotations

import ast
import io
import tokenize

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


def _span(node: ast.AST) -> Span:
    end_line = getattr(node, "end_lineno", None) or node.lineno
    end_col = getattr(node, "end_col_offset", None) or node.col_offset
    return Span.of(node.lineno, node.col_offset, end_line, end_col)


def _template(node: ast.JoinedStr) -> Template:
    chunks = [""]
    for value in node.values:
        if isinstance(value, ast.Constant) and isinstance(value.value, str):
            chunks[-1] += value.value
        else:
            chunks.append("")
    return Template(tuple(chunks), _span(node))


def _convert(node: ast.AST) -> Expression:
    span = _span(node)
    if isinstance(node, ast.Constant):
        if isinstance(node.value, str):
            return StringLiteral(node.value, span)
        return Unsupported(type(node.value).__name__, span)
    if isinstance(node, ast.JoinedStr):
        return _template(node)
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.Add):
        return Concat(_convert(node.left), _convert(node.right), span)
    if isinstance(node, ast.IfExp):
        return Conditional(_convert(node.body), _convert(node.orelse), span)
    if isinstance(node, ast.BoolOp):
        # a and b and c -> (a and b) and c
        combine = LogicalAnd if isinstance(node.op, ast.And) else LogicalOr
        result = _convert(node.values[0])
        for value in node.values[1:]:
            result = combine(result, _convert(value), span)
        return result
    if isinstance(node, ast.Call):
        return Dynamic("call", span)
    if isinstance(node, ast.Name):
        return Dynamic("identifier", span)
    if isinstance(node, (ast.Attribute, ast.Subscript)):
        return Dynamic("member", span)
    return Unsupported(type(node).__name__, span)


def _callee(func: ast.AST) -> tuple[str, str | None, str | None]:
    if isinstance(func, ast.Name):
        return CALLEE_IDENTIFIER, func.id, None
    if isinstance(func, ast.Attribute):
        name = func.value.id if isinstance(func.value, ast.Name) else None
        return CALLEE_MEMBER, name, func.attr
    return CALLEE_OTHER, None, None


def _comments(source: str) -> list[SourceComment]:
    comments = []
    for tok in tokenize.generate_tokens(io.StringIO(source).readline):
        if tok.type != tokenize.COMMENT:
            continue
        (start_line, start_col), (end_line, end_col) = tok.start, tok.end
        comments.append(SourceComment(
            tok.string[1:].strip(),
            Span.of(start_line, start_col, end_line, end_col),
        ))
    return comments


def parse_python(source: str, filename: str = "<source>") -> SourceTree:
    """Parse Python source into a SourceTree."""
    try:
        module = ast.parse(source, filename=filename)
        comments = _comments(source)
    except (SyntaxError, tokenize.TokenError) as e:
        raise SourceParseError(filename, str(e)) from e
    calls = []
    for node in ast.walk(module):
        if not isinstance(node, ast.Call):
            continue
        kind, name, prop = _callee(node.func)
        args = tuple(_convert(arg) for arg in node.args)
        calls.append(CallSite(kind, name, prop, args, _span(node)))
    calls.sort(key=lambda c: c.span)
    return SourceTree(comments=comments, calls=calls)
