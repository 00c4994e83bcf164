"""Exception types raised by the extraction and merge pipeline."""

from __future__ import annotations

from typing import Optional


class PoExtractError(Exception):
    """Base class for all fatal poextract errors."""


class ConfigError(PoExtractError, ValueError):
    """Invalid option, marker, parser, sort strategy or argument shape."""


class MissingContextError(PoExtractError):
    """The requested context bucket does not exist in a catalog."""

    def __init__(self, context: str, file: Optional[str] = None):
        self.context = context
        self.file = file
        where = f" in {file}" if file else ""
        super().__init__(f"Context '{context}' missing from po{where}")


class DuplicateKeyError(PoExtractError):
    """Two incoming messages share a msgid within one merge."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Duplicate msgid: '{key}'. Collate the messages first.")


class SourceParseError(PoExtractError):
    """A source file could not be turned into a syntax tree."""

    def __init__(self, file: str, reason: str = ""):
        self.file = file
        self.reason = reason
        super().__init__(f"Failed to parse {file}: {reason}" if reason else f"Failed to parse {file}")


class GitCheckError(PoExtractError):
    """A catalog failed the git working-tree check."""

    def __init__(self, message: str, file: Optional[str] = None):
        self.file = file
        super().__init__(message)


class UnsavedChangesError(GitCheckError):
    """The catalog has uncommitted or untracked changes."""


class GitExecError(GitCheckError):
    """Git could not be executed or exited with an error."""
