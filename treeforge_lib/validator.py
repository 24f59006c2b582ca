"""
Loading and validating specification documents.

A document is a list of projects (or a mapping with a ``projects`` list):

    - name: app
      lang: go
      tree:
        - name: pkg
          file:
            - name: main

validate() checks the whole document and either returns a SpecTree or
raises a single ValidationError listing every problem. Nothing touches
the filesystem here.
"""
from typing import Any, List, Mapping, Optional, Tuple

import yaml

from .errors import ValidationError
from .fetcher import repo_name_from_url
from .languages import RUST_VISIBILITY, get_strategy
from .models import LANGUAGES, Node, NodeKind, ProjectSpec, SpecTree

PROJECT_KEYS = {"name", "root", "lang", "tree", "file"}
DIR_KEYS = {"name", "from", "pub", "tree", "file"}
FILE_KEYS = {"name", "pub"}


def load_spec_document(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_spec(path: str, default_name: Optional[str] = None) -> SpecTree:
    try:
        data = load_spec_document(path)
    except yaml.YAMLError as e:
        raise ValidationError([(path, f"invalid YAML: {e}")]) from e
    return validate(data, default_name=default_name)


def _bad_name(name: str) -> Optional[str]:
    if "/" in name or "\\" in name:
        return "name cannot contain path separators"
    if name in (".", ".."):
        return f"name cannot be {name!r}"
    return None


class _Checker:
    def __init__(self) -> None:
        self.issues: List[Tuple[str, str]] = []
        self.tree = SpecTree()

    def error(self, path: str, message: str) -> None:
        self.issues.append((path, message))

    def _unknown_keys(self, data: Mapping[str, Any], allowed: set, path: str) -> None:
        for key in data:
            if key not in allowed:
                self.error(path, f"unknown field {key!r}")

    def _list(self, data: Mapping[str, Any], key: str, path: str) -> List[Any]:
        value = data.get(key)
        if value is None:
            return []
        if not isinstance(value, list):
            self.error(f"{path}.{key}", "must be a list")
            return []
        return value

    def _visibility(self, data: Mapping[str, Any], path: str) -> Optional[str]:
        value = data.get("pub")
        if value is None:
            return None
        # YAML reads bare yes/no as booleans
        if isinstance(value, bool):
            value = "yes" if value else "no"
        if value not in RUST_VISIBILITY:
            self.error(f"{path}.pub", f"must be one of {', '.join(RUST_VISIBILITY)}")
            return None
        return value

    def files(self, items: List[Any], path: str, parent: Optional[int]) -> List[int]:
        indices = []
        for i, item in enumerate(items):
            item_path = f"{path}.file[{i}]"
            if not isinstance(item, dict):
                self.error(item_path, "file entry must be a mapping")
                continue
            self._unknown_keys(item, FILE_KEYS, item_path)
            name = item.get("name")
            if not isinstance(name, str) or not name.strip():
                self.error(f"{item_path}.name", "file name is required")
                continue
            problem = _bad_name(name)
            if problem:
                self.error(f"{item_path}.name", problem)
                continue
            node = Node(NodeKind.FILE, name, parent=parent, visibility=self._visibility(item, item_path))
            indices.append(self.tree.add(node))
        return indices

    def dirs(self, items: List[Any], path: str, lang: str, parent: Optional[int]) -> List[int]:
        indices = []
        for i, item in enumerate(items):
            item_path = f"{path}.tree[{i}]"
            if not isinstance(item, dict):
                self.error(item_path, "tree entry must be a mapping")
                continue
            self._unknown_keys(item, DIR_KEYS, item_path)
            name = item.get("name")
            source = item.get("from")

            if name is None and source is None:
                self.error(item_path, "directory must have either 'name' or 'from'")
                continue
            if name is not None and (not isinstance(name, str) or not name.strip()):
                self.error(f"{item_path}.name", "directory name must be a non-empty string")
                continue
            if source is not None:
                if not isinstance(source, str) or not source.strip():
                    self.error(f"{item_path}.from", "must be a repository URL")
                    continue
                if not get_strategy(lang).supports_external:
                    self.error(f"{item_path}.from", f"'from' requires lang 'any' (project uses {lang!r})")
                if item.get("tree"):
                    self.error(f"{item_path}.tree", "a 'from' directory cannot declare 'tree'")
                if item.get("file"):
                    self.error(f"{item_path}.file", "a 'from' directory cannot declare 'file'")
                if name is None:
                    name = repo_name_from_url(source)
                    if not name:
                        self.error(f"{item_path}.from", "cannot infer a directory name from the URL")
                        continue

            problem = _bad_name(name)
            if problem:
                self.error(f"{item_path}.name", problem)
                continue

            index = self.tree.add(
                Node(NodeKind.DIR, name, parent=parent, source=source, visibility=self._visibility(item, item_path))
            )
            node = self.tree.node(index)
            if source is None:
                node.file = self.files(self._list(item, "file", item_path), item_path, index)
                node.tree = self.dirs(self._list(item, "tree", item_path), item_path, lang, index)
            indices.append(index)
        return indices

    def project(self, data: Any, path: str) -> Optional[ProjectSpec]:
        if not isinstance(data, dict):
            self.error(path, "project must be a mapping")
            return None
        self._unknown_keys(data, PROJECT_KEYS, path)

        lang = data.get("lang")
        if lang is None:
            self.error(f"{path}.lang", "project language is required")
            lang = "any"
        elif lang not in LANGUAGES:
            self.error(f"{path}.lang", f"unsupported language {lang!r} (expected one of {', '.join(LANGUAGES)})")
            lang = "any"

        root = data.get("root", False)
        if not isinstance(root, bool):
            self.error(f"{path}.root", "must be true or false")
            root = False

        # a missing name is resolved once the root project is known
        name = data.get("name")
        if name is not None:
            if not isinstance(name, str) or not name.strip():
                self.error(f"{path}.name", "project name must be a non-empty string")
                name = None
            elif _bad_name(name):
                self.error(f"{path}.name", _bad_name(name))

        project = ProjectSpec(name=name or "", lang=lang, root=root)
        project.file = self.files(self._list(data, "file", path), path, None)
        project.tree = self.dirs(self._list(data, "tree", path), path, lang, None)
        return project


def validate(data: Any, default_name: Optional[str] = None) -> SpecTree:
    """Validate a parsed document and build the SpecTree.

    ``default_name`` names the root project when it omits ``name``.
    When no project is marked ``root``, the first one becomes root.
    """
    if isinstance(data, dict) and "projects" in data:
        data = data["projects"]
    if not isinstance(data, list) or not data:
        raise ValidationError([("projects", "specification must contain at least one project")])

    checker = _Checker()
    for i, raw in enumerate(data):
        project = checker.project(raw, f"projects[{i}]")
        if project is not None:
            checker.tree.projects.append(project)

    projects = checker.tree.projects
    roots = [p for p in projects if p.root]
    if len(roots) > 1:
        checker.error("projects", "only one project can be marked as root")
    elif not roots and projects:
        projects[0].root = True

    seen = set()
    for i, project in enumerate(projects):
        if not project.name and project.root and default_name:
            project.name = default_name
        if not project.name:
            if project.root:
                checker.error(f"projects[{i}].name", "root project has no name and no default was given")
            else:
                checker.error(f"projects[{i}].name", "project name is required")
            continue
        if project.name in seen:
            checker.error(f"projects[{i}].name", f"duplicate project name {project.name!r}")
        seen.add(project.name)

    if checker.issues:
        raise ValidationError(checker.issues)
    return checker.tree
