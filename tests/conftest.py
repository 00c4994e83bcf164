"""Shared fixtures for poextract tests."""
import shutil
import sys
from pathlib import Path

import pytest

# Ensure src is on path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir():
    return FIXTURES


@pytest.fixture
def tmp_out(tmp_path):
    """Temp directory for output files."""
    return tmp_path


@pytest.fixture
def workdir(tmp_path):
    """Copy of the fixture tree that tests may write to."""
    dest = tmp_path / "work"
    shutil.copytree(FIXTURES, dest)
    return dest
