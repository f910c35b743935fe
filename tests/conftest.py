"""Root test configuration: session-level cleanup of runtime artifacts"""

import os
import shutil
from pathlib import Path

import pytest


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_FILES = ["postpub.db", "test.db"]
_CLEANUP_DIRS = ["public"]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep POSTPUB_* variables from the developer's shell out of tests."""
    for name in list(os.environ):
        if name.startswith("POSTPUB_"):
            monkeypatch.delenv(name)


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove DB files and output directories created during the test session."""
    yield
    for name in _CLEANUP_FILES:
        p = _PROJECT_ROOT / name
        if p.exists():
            p.unlink()
    for name in _CLEANUP_DIRS:
        p = _PROJECT_ROOT / name
        if p.exists():
            shutil.rmtree(p)
