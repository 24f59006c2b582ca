"""Shared fixtures for treeforge tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest


def snapshot(root: Path) -> dict[str, bytes]:
    """Map every file under ``root`` (relative path) to its bytes."""
    result = {}
    for dirpath, _, filenames in os.walk(root):
        for filename in filenames:
            path = Path(dirpath) / filename
            result[path.relative_to(root).as_posix()] = path.read_bytes()
    return result


@pytest.fixture
def work(tmp_path: Path) -> Path:
    root = tmp_path / "work"
    root.mkdir()
    return root
