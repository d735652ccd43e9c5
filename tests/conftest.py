"""Pytest configuration for trackersync tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install (`pip install -e .`).
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Subprocess-based CLI tests need the same import path.
py_path = os.environ.get("PYTHONPATH", "")
parts = [p for p in py_path.split(os.pathsep) if p]
if str(SRC) not in parts:
    parts.insert(0, str(SRC))
    os.environ["PYTHONPATH"] = os.pathsep.join(parts)

pytest_plugins = ["pytest_asyncio"]


@pytest.fixture(autouse=True)
def _fresh_logger(monkeypatch: pytest.MonkeyPatch) -> None:
    # Handlers bind the stream at creation; rebuild per test so capture works.
    import trackersync.logging as ts_logging

    monkeypatch.setattr(ts_logging, "_GLOBAL", None)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in (
        "GITHUB_TOKEN",
        "GH_TOKEN",
        "GITHUB_PAT",
        "LINEAR_API_KEY",
        "JIRA_API_TOKEN",
        "ATLASSIAN_API_TOKEN",
        "JIRA_EMAIL",
        "JIRA_BASE_URL",
        "TRACKERSYNC_QUIET",
    ):
        monkeypatch.delenv(var, raising=False)
