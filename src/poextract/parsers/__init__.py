"""Source parsers (JavaScript, Python) and the PO catalog codec."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Union

from poextract.errors import ConfigError
from poextract.parsers.syntax import SourceTree

SourceParser = Callable[[str, str], SourceTree]

_PYTHON_SUFFIXES = {".py", ".pyw", ".pyi"}

# esprima stops at ES2017 and has no TypeScript grammar
_UNSUPPORTED_SUFFIXES = {".ts", ".tsx", ".mts", ".cts"}

PARSER_NAMES = ("auto", "javascript", "js", "jsx", "mjs", "cjs", "python", "py")


def _javascript(source: str, filename: str) -> SourceTree:
    from poextract.parsers.js_parser import parse_js
    return parse_js(source, filename)


def _python(source: str, filename: str) -> SourceTree:
    from poextract.parsers.py_parser import parse_python
    return parse_python(source, filename)


def _auto(source: str, filename: str) -> SourceTree:
    suffix = Path(filename).suffix.lower()
    if suffix in _UNSUPPORTED_SUFFIXES:
        raise ConfigError(
            f"No parser for TypeScript source {filename}. "
            "Compile it to JavaScript first or pass a parser callable"
        )
    if suffix in _PYTHON_SUFFIXES:
        return _python(source, filename)
    return _javascript(source, filename)


def get_parser(name: Union[str, SourceParser]) -> SourceParser:
    """Resolve a parser option to a callable ``(source, filename) -> SourceTree``."""
    if callable(name):
        return name
    if not isinstance(name, str):
        raise ConfigError(f"Option (parser) must be a parser name or callable, got {name!r}")
    key = name.lower()
    if key == "auto":
        return _auto
    if key in ("python", "py"):
        return _python
    if key in ("javascript", "js", "jsx", "mjs", "cjs"):
        return _javascript
    raise ConfigError(f"Unknown parser: '{name}'. Expected one of {', '.join(PARSER_NAMES)}")
