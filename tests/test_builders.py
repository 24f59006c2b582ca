"""Tests for DirectoryBuilder and FileBuilder."""

from __future__ import annotations

from pathlib import Path

import pytest

from treeforge_lib.builders import DirectoryBuilder, FileBuilder, Tier
from treeforge_lib.content_updater import markers_for
from treeforge_lib.errors import MarkerCorruptionError
from treeforge_lib.languages import get_strategy
from treeforge_lib.models import Status

START, END = markers_for("#")


def test_ensure_creates_missing_ancestors(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b" / "c"
    assert DirectoryBuilder.ensure(str(target)) is True
    assert target.is_dir()


def test_ensure_is_idempotent(tmp_path: Path) -> None:
    assert DirectoryBuilder.ensure(str(tmp_path)) is False


def test_ensure_rejects_file_collision(tmp_path: Path) -> None:
    blocker = tmp_path / "pkg"
    blocker.write_text("not a dir")
    with pytest.raises(FileExistsError):
        DirectoryBuilder.ensure(str(blocker))


@pytest.mark.parametrize(
    ("lang", "name", "expected"),
    [
        ("rust", "mod", ("mod.rs", Tier.MANAGEMENT)),
        ("rust", "main", ("main.rs", Tier.MANAGEMENT)),
        ("rust", "model", ("model.rs", Tier.CODE)),
        ("rust", "Cargo.toml", ("Cargo.toml", Tier.CONFIG)),
        ("python", "__init__", ("__init__.py", Tier.MANAGEMENT)),
        ("typescript", "index", ("index.ts", Tier.MANAGEMENT)),
        ("typescript", "package.json", ("package.json", Tier.CONFIG)),
        ("go", "go.mod", ("go.mod", Tier.CONFIG)),
        ("go", "README.md", ("README.md", Tier.CODE)),
        ("any", "index.ts", ("index.ts", Tier.CODE)),
    ],
)
def test_resolve(lang: str, name: str, expected: tuple) -> None:
    assert FileBuilder.resolve(name, get_strategy(lang)) == expected


def test_create_once_never_touches_existing_file(tmp_path: Path) -> None:
    path = tmp_path / "main.go"
    path.write_bytes(b"")
    assert FileBuilder.create_once(str(path), "package main\n") is Status.SKIPPED
    assert path.read_bytes() == b""


def test_create_once_writes_absent_file(tmp_path: Path) -> None:
    path = tmp_path / "go.mod"
    assert FileBuilder.create_once(str(path), "module app\n") is Status.CREATED
    assert path.read_text() == "module app\n"


def test_merge_creates_then_reports_unchanged(tmp_path: Path) -> None:
    path = tmp_path / "__init__.py"
    block = "from .model import *\n"
    assert FileBuilder.merge(str(path), block, START, END) is Status.CREATED
    assert path.read_text() == f"{START}\n{block}{END}\n"
    assert FileBuilder.merge(str(path), block, START, END) is Status.SKIPPED


def test_merge_updates_region_and_keeps_user_text(tmp_path: Path) -> None:
    path = tmp_path / "__init__.py"
    path.write_text(f"import os\n{START}\nfrom .old import *\n{END}\nVERSION = '1'\n")

    status = FileBuilder.merge(str(path), "from .new import *\n", START, END)

    assert status is Status.MERGED
    assert path.read_text() == f"import os\n{START}\nfrom .new import *\n{END}\nVERSION = '1'\n"


def test_merge_preserves_crlf_outside_markers(tmp_path: Path) -> None:
    path = tmp_path / "__init__.py"
    path.write_bytes(b"import os\r\n")
    FileBuilder.merge(str(path), "from .a import *\n", START, END)
    assert path.read_bytes().startswith(b"import os\r\n")


def test_merge_leaves_corrupted_file_untouched(tmp_path: Path) -> None:
    path = tmp_path / "__init__.py"
    original = f"{START}\nfrom .a import *\n".encode()
    path.write_bytes(original)

    with pytest.raises(MarkerCorruptionError) as excinfo:
        FileBuilder.merge(str(path), "from .b import *\n", START, END)

    assert excinfo.value.path == str(path)
    assert path.read_bytes() == original
