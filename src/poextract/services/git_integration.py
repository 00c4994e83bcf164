"""Git working-tree check for catalogs about to be overwritten."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from poextract.errors import GitExecError, UnsavedChangesError

logger = logging.getLogger(__name__)

TRACKED_ONLY = "tracked-only"

GitCheckMode = Union[bool, str]


@dataclass
class GitStatus:
    """Porcelain status of the files asked about."""
    is_repo: bool = False
    modified_files: list[str] = field(default_factory=list)
    untracked_files: list[str] = field(default_factory=list)


def _run_git(args: list[str], cwd: str | Path) -> tuple[bool, str]:
    """Run a git command. Returns (success, output)."""
    try:
        result = subprocess.run(
            ["git"] + args,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        raise GitExecError(f"Git execution failed: {e}. Use option git_check=false to disable this check") from e
    # rstrip only: porcelain lines start with a status column that may be blank
    output = result.stdout.rstrip() if result.returncode == 0 else result.stderr.strip()
    return result.returncode == 0, output


def get_status(file_path: str | Path) -> GitStatus:
    """Git status of one file."""
    path = Path(file_path).resolve()
    cwd = path.parent
    ok, _ = _run_git(["rev-parse", "--is-inside-work-tree"], cwd)
    if not ok:
        return GitStatus(is_repo=False)

    status = GitStatus(is_repo=True)
    ok, output = _run_git(["status", "--porcelain", "--", path.name], cwd)
    if not ok:
        raise GitExecError(f"Git execution failed: {output}", str(path))
    for line in output.splitlines():
        if len(line) < 4:
            continue
        code, fname = line[:2], line[3:]
        if code == "??":
            status.untracked_files.append(fname)
        else:
            status.modified_files.append(fname)
    return status


def check_clean(file_path: str | Path, mode: GitCheckMode = True, rel: str | None = None) -> None:
    """Raise UnsavedChangesError if the file has changes git does not have.

    ``mode`` False skips the check; ``"tracked-only"`` lets untracked files
    through. Files outside a repository, and files that do not exist yet,
    always pass.
    """
    if not mode:
        return
    path = Path(file_path)
    name = rel or str(path)
    if not path.exists():
        return
    status = get_status(path)
    if not status.is_repo:
        logger.debug("%s is not in a git repository", name)
        return
    if status.modified_files:
        raise UnsavedChangesError(
            f"Dirty path detected at {name}. Commit, stash, or abandon the changes and retry. "
            f"Use option git_check=false to ignore this check.",
            name,
        )
    if status.untracked_files and mode != TRACKED_ONLY:
        raise UnsavedChangesError(
            f"Untracked path detected at {name}. Commit or delete the file and retry. "
            f"Use option git_check='{TRACKED_ONLY}' to ignore this check.",
            name,
        )
