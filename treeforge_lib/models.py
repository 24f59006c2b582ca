"""Data model: validated specification tree and generation outcomes.

Nodes live in a flat arena (``SpecTree.nodes``) and refer to their
children by index. Projects own the index lists of their top-level
directories and files.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

LANGUAGES = ("rust", "go", "python", "typescript", "javascript", "any")


class NodeKind(str, Enum):
    DIR = "dir"
    FILE = "file"
    PROJECT = "project"
    WORKSPACE = "workspace"


@dataclass
class Node:
    kind: NodeKind
    name: str
    parent: Optional[int] = None
    source: Optional[str] = None
    visibility: Optional[str] = None
    tree: List[int] = field(default_factory=list)
    file: List[int] = field(default_factory=list)

    @property
    def is_external(self) -> bool:
        return self.source is not None


@dataclass
class ProjectSpec:
    name: str
    lang: str
    root: bool = False
    tree: List[int] = field(default_factory=list)
    file: List[int] = field(default_factory=list)


@dataclass
class SpecTree:
    projects: List[ProjectSpec] = field(default_factory=list)
    nodes: List[Node] = field(default_factory=list)

    def add(self, node: Node) -> int:
        self.nodes.append(node)
        return len(self.nodes) - 1

    def node(self, index: int) -> Node:
        return self.nodes[index]

    def root_project(self) -> Optional[ProjectSpec]:
        for project in self.projects:
            if project.root:
                return project
        return None


class Status(str, Enum):
    CREATED = "created"
    SKIPPED = "skipped"
    MERGED = "merged"
    WARNED = "warned"
    FAILED = "failed"


@dataclass
class Outcome:
    path: str
    kind: NodeKind
    status: Status
    detail: str = ""

    def __str__(self) -> str:
        text = f"{self.status.value:<8} {self.path}"
        return f"{text} ({self.detail})" if self.detail else text


@dataclass
class GenerationReport:
    outcomes: List[Outcome] = field(default_factory=list)

    def add(self, path: str, kind: NodeKind, status: Status, detail: str = "") -> Outcome:
        outcome = Outcome(path, kind, status, detail)
        self.outcomes.append(outcome)
        return outcome

    def by_status(self, status: Status) -> List[Outcome]:
        return [o for o in self.outcomes if o.status is status]

    def counts(self) -> dict:
        return {s.value: len(self.by_status(s)) for s in Status}

    @property
    def ok(self) -> bool:
        return not any(o.status in (Status.FAILED, Status.WARNED) for o in self.outcomes)

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1
