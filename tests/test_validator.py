"""Tests for specification loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from treeforge_lib.errors import ValidationError
from treeforge_lib.models import NodeKind
from treeforge_lib.validator import load_spec, validate


def _issue_paths(excinfo: pytest.ExceptionInfo) -> list[str]:
    return [path for path, _ in excinfo.value.issues]


def test_builds_arena_in_declaration_order() -> None:
    spec = validate(
        [
            {
                "name": "app",
                "lang": "go",
                "file": [{"name": "main"}],
                "tree": [{"name": "pkg", "file": [{"name": "a"}, {"name": "b"}], "tree": [{"name": "sub"}]}],
            }
        ]
    )
    project = spec.projects[0]
    assert project.root is True
    assert [spec.node(i).name for i in project.file] == ["main"]
    pkg = spec.node(project.tree[0])
    assert pkg.kind is NodeKind.DIR
    assert [spec.node(i).name for i in pkg.file] == ["a", "b"]
    assert spec.node(pkg.tree[0]).parent == project.tree[0]
    assert [node.name for node in spec.nodes] == ["main", "pkg", "a", "b", "sub"]


def test_accepts_projects_mapping() -> None:
    spec = validate({"projects": [{"name": "app", "lang": "any"}]})
    assert spec.projects[0].name == "app"


def test_first_project_defaults_to_root() -> None:
    spec = validate([{"name": "api", "lang": "rust"}, {"name": "cli", "lang": "rust"}])
    assert [p.root for p in spec.projects] == [True, False]
    assert spec.root_project() is spec.projects[0]


def test_explicit_root_is_kept() -> None:
    spec = validate([{"name": "api", "lang": "rust"}, {"name": "cli", "lang": "rust", "root": True}])
    assert [p.root for p in spec.projects] == [False, True]


def test_more_than_one_root_fails() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate([{"name": "a", "lang": "go", "root": True}, {"name": "b", "lang": "go", "root": True}])
    assert "projects" in _issue_paths(excinfo)


def test_root_project_name_defaults() -> None:
    spec = validate([{"lang": "python"}], default_name="workdir")
    assert spec.projects[0].name == "workdir"


def test_non_root_project_requires_name() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate([{"name": "a", "lang": "go"}, {"lang": "go"}], default_name="workdir")
    assert "projects[1].name" in _issue_paths(excinfo)


def test_unknown_language_fails() -> None:
    with pytest.raises(ValidationError, match="unsupported language 'cobol'"):
        validate([{"name": "a", "lang": "cobol"}])


def test_from_with_tree_fails_before_anything_else() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate(
            [
                {
                    "name": "a",
                    "lang": "any",
                    "tree": [{"name": "vendor", "from": "https://h/o/r.git", "tree": [{"name": "x"}]}],
                }
            ]
        )
    assert "projects[0].tree[0].tree" in _issue_paths(excinfo)


def test_from_requires_any_language() -> None:
    with pytest.raises(ValidationError, match="requires lang 'any'"):
        validate([{"name": "a", "lang": "rust", "tree": [{"from": "https://h/o/r.git"}]}])


def test_from_infers_directory_name() -> None:
    spec = validate([{"name": "a", "lang": "any", "tree": [{"from": "git@github.com:org/tool.git"}]}])
    node = spec.node(spec.projects[0].tree[0])
    assert node.name == "tool"
    assert node.is_external


def test_directory_needs_name_or_from() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate([{"name": "a", "lang": "go", "tree": [{"file": [{"name": "x"}]}]}])
    assert "projects[0].tree[0]" in _issue_paths(excinfo)


def test_collects_every_issue() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate(
            [
                {"name": "a", "lang": "go", "tree": [{"name": "x/y"}], "file": [{}]},
                {"name": "a", "lang": "go", "colour": "red"},
            ]
        )
    paths = _issue_paths(excinfo)
    assert "projects[0].tree[0].name" in paths
    assert "projects[0].file[0].name" in paths
    assert "projects[1].name" in paths
    assert "projects[1]" in paths


def test_visibility_values() -> None:
    spec = validate(
        [{"name": "a", "lang": "rust", "tree": [{"name": "m", "pub": "crate", "file": [{"name": "f", "pub": False}]}]}]
    )
    module = spec.node(spec.projects[0].tree[0])
    assert module.visibility == "crate"
    assert spec.node(module.file[0]).visibility == "no"

    with pytest.raises(ValidationError, match="must be one of"):
        validate([{"name": "a", "lang": "rust", "file": [{"name": "f", "pub": "public"}]}])


def test_empty_document_fails() -> None:
    with pytest.raises(ValidationError):
        validate(None)
    with pytest.raises(ValidationError):
        validate([])


def test_load_spec_reads_yaml(tmp_path: Path) -> None:
    path = tmp_path / "treeforge.yml"
    path.write_text(
        """
- name: app
  lang: go
  tree:
    - name: pkg
      file:
        - name: main
""",
        encoding="utf-8",
    )
    spec = load_spec(str(path))
    assert spec.projects[0].lang == "go"


def test_load_spec_reports_yaml_errors(tmp_path: Path) -> None:
    path = tmp_path / "treeforge.yml"
    path.write_text("- name: [unclosed\n", encoding="utf-8")
    with pytest.raises(ValidationError, match="invalid YAML"):
        load_spec(str(path))
