import os
from typing import Any, Dict, List, Optional

import yaml

from .languages import LanguageStrategy, get_strategy

MANAGED_FILES = {"mod.rs", "__init__.py", "index.ts", "index.js"}

EXCLUDED_FILES = {
    "treeforge.yml",
    "Cargo.toml",
    "Cargo.lock",
    "package.json",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "tsconfig.json",
    "go.mod",
    "go.sum",
    "pyproject.toml",
    "requirements.txt",
    "setup.py",
    "setup.cfg",
}

EXCLUDED_DIRS = {"node_modules", "target", "__pycache__", "venv", "dist", "build"}


def _skip(entry: str, is_dir: bool) -> bool:
    if entry.startswith("."):
        return True
    if is_dir:
        return entry in EXCLUDED_DIRS
    return entry in MANAGED_FILES or entry in EXCLUDED_FILES


def _file_name(entry: str, strategy: LanguageStrategy) -> str:
    # the generator re-adds the default extension
    ext = strategy.default_extension
    if ext and entry.endswith(ext) and entry.count(".") == 1:
        return entry[: -len(ext)]
    return entry


def _scan_directory_to_nodes(directory: str, strategy: LanguageStrategy) -> Dict[str, List[Any]]:
    """Recursively scan a directory into ``{"tree": [...], "file": [...]}``.

    Empty lists are left out of child entries; entries are sorted so the
    output is stable.
    """
    try:
        entries = sorted(os.listdir(directory))
    except FileNotFoundError:
        return {"tree": [], "file": []}

    tree: List[Dict[str, Any]] = []
    files: List[Dict[str, Any]] = []
    for entry in entries:
        full_path = os.path.join(directory, entry)
        if os.path.isdir(full_path):
            if _skip(entry, True):
                continue
            children = _scan_directory_to_nodes(full_path, strategy)
            node: Dict[str, Any] = {"name": entry}
            if children["file"]:
                node["file"] = children["file"]
            if children["tree"]:
                node["tree"] = children["tree"]
            tree.append(node)
        elif os.path.isfile(full_path):
            if _skip(entry, False):
                continue
            files.append({"name": _file_name(entry, strategy)})
        # symlinks to nowhere, sockets and devices are ignored
    return {"tree": tree, "file": files}


def scan_directory(input_dir: str, lang: str, name: Optional[str] = None) -> List[Dict[str, Any]]:
    """Describe an existing directory as a one-project specification document."""
    if not os.path.isdir(input_dir):
        raise ValueError(f"Input directory does not exist or is not a directory: {input_dir}")
    strategy = get_strategy(lang)
    nodes = _scan_directory_to_nodes(input_dir, strategy)
    project: Dict[str, Any] = {
        "name": name or os.path.basename(os.path.abspath(input_dir)),
        "root": True,
        "lang": lang,
    }
    if nodes["file"]:
        project["file"] = nodes["file"]
    if nodes["tree"]:
        project["tree"] = nodes["tree"]
    return [project]


def write_spec(document: List[Dict[str, Any]], output_path: str) -> None:
    with open(output_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(document, f, sort_keys=False, allow_unicode=True, default_flow_style=False)
