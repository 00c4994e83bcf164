"""Path helpers shared by the file-level services."""

from __future__ import annotations

import glob
import os
from pathlib import Path
from typing import Iterable, Union

from poextract.errors import ConfigError

Globs = Union[str, Path, Iterable[Union[str, Path]]]


def resolve(base_dir: str | Path, file: str | Path) -> Path:
    path = Path(file)
    return path if path.is_absolute() else Path(base_dir) / path


def rel_path(base_dir: str | Path, file: str | Path) -> str:
    """``file`` relative to ``base_dir`` with ``/`` separators."""
    try:
        rel = os.path.relpath(Path(file).resolve(), Path(base_dir).resolve())
    except ValueError:
        # Different drive on Windows
        rel = str(file)
    return Path(rel).as_posix()


def glob_files(base_dir: str | Path, globs: Globs) -> list[Path]:
    """Files matching any of the globs, resolved against ``base_dir``."""
    if isinstance(globs, (str, Path)):
        globs = [globs]
    patterns = [str(resolve(base_dir, g)) for g in globs if str(g)]
    if not patterns:
        raise ConfigError("Argument (globs) cannot be empty")
    seen: dict[Path, None] = {}
    for pattern in patterns:
        for match in sorted(glob.glob(pattern, recursive=True)):
            path = Path(match)
            if path.is_file():
                seen.setdefault(path, None)
    return list(seen)
