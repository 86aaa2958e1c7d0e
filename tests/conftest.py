"""Pytest fixtures shared by the test modules.

Each test gets the bundled rule tables, or a writable copy of them under its
own ``tmp_path`` when it needs to edit a table.
"""

import shutil
from pathlib import Path

import pytest

from sui_ledger.rules import CONFIG_DIR, load_rule_set


@pytest.fixture
def rule_set():
    return load_rule_set()


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """A writable copy of the bundled rule tables."""
    target = tmp_path / "config"
    shutil.copytree(CONFIG_DIR, target)
    return target
