"""
Generation engine: walks a validated SpecTree and materializes it on disk.

The root project is laid out directly in the working root, every other
project in a subdirectory named after it. Within a directory the order is
fixed: the directory itself, its files, then its subdirectories, all in
declaration order. Failures are recorded per node in the returned
GenerationReport; only a failed directory prunes its own subtree.
"""
import logging
import os
import re
import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .builders import DirectoryBuilder, FileBuilder, Tier, read_text
from .content_updater import has_markers, markers_for, render_block
from .errors import ExternalFetchWarning, GenerationError, MarkerCorruptionError
from .fetcher import ExternalFetcher, FetchStatus
from .languages import (
    STRATEGIES,
    WORKSPACE_COMMENT,
    ChildModule,
    LanguageStrategy,
    get_strategy,
    strip_extension,
    workspace_members,
    workspace_template,
)
from .models import GenerationReport, NodeKind, ProjectSpec, SpecTree, Status

logger = logging.getLogger(__name__)

WORKSPACE_TABLE = re.compile(r"^\s*\[workspace\]\s*$", re.MULTILINE)


class Mode(str, Enum):
    INITIALIZE = "initialize"
    REGENERATE = "regenerate"


def _default_git() -> str:
    return os.environ.get("TREEFORGE_GIT", "git")


@dataclass
class GenerationOptions:
    mode: Mode = Mode.REGENERATE
    git_command: str = field(default_factory=_default_git)


@dataclass
class _Context:
    working_root: str
    tree: SpecTree
    project: ProjectSpec
    strategy: LanguageStrategy
    report: GenerationReport
    fetcher: ExternalFetcher

    def rel(self, path: str) -> str:
        return os.path.relpath(path, self.working_root)


def project_path(working_root: str, project: ProjectSpec) -> str:
    return working_root if project.root else os.path.join(working_root, project.name)


def _child_modules(ctx: _Context, files: List[int], dirs: List[int], target: str) -> List[ChildModule]:
    """Modules a management file named ``target`` aggregates, in declaration order."""
    strategy = ctx.strategy
    children = []
    for index in files:
        node = ctx.tree.node(index)
        filename = strategy.filename_for(node.name)
        if filename == target or not strategy.is_code_file(filename):
            continue
        if strategy.is_management_file(filename):
            continue
        children.append(ChildModule(strip_extension(filename), filename, False, node.visibility))
    for index in dirs:
        node = ctx.tree.node(index)
        if node.is_external:
            continue
        children.append(ChildModule(node.name, "", True, node.visibility))
    return children


def _materialize(
    ctx: _Context,
    dir_path: str,
    filename: str,
    tier: Tier,
    files: List[int],
    dirs: List[int],
    package: str,
) -> None:
    strategy = ctx.strategy
    path = os.path.join(dir_path, filename)
    try:
        if tier is Tier.MANAGEMENT:
            lines = strategy.aggregate(_child_modules(ctx, files, dirs, filename), filename)
            start, end = strategy.markers
            status = FileBuilder.merge(
                path, render_block(lines), start, end, template=strategy.management_template(filename)
            )
        elif tier is Tier.CONFIG:
            status = FileBuilder.create_once(path, strategy.config_content(filename, ctx.project.name))
        else:
            status = FileBuilder.create_once(path, strategy.boilerplate(filename, package))
    except MarkerCorruptionError as exc:
        logger.error("Refusing to rewrite %s: %s", path, exc)
        ctx.report.add(ctx.rel(path), NodeKind.FILE, Status.FAILED, f"MarkerCorruptionError: {exc}")
    except OSError as exc:
        logger.error("Failed to write %s: %s", path, exc)
        ctx.report.add(ctx.rel(path), NodeKind.FILE, Status.FAILED, str(exc))
    else:
        ctx.report.add(ctx.rel(path), NodeKind.FILE, status, tier.name.lower())


def _process_files(
    ctx: _Context,
    dir_path: str,
    files: List[int],
    dirs: List[int],
    package: str,
    extra: List[str],
) -> None:
    """Create declared files, then any ``extra`` files the language implies."""
    declared = set()
    for index in files:
        filename, tier = FileBuilder.resolve(ctx.tree.node(index).name, ctx.strategy)
        if filename in declared:
            continue
        declared.add(filename)
        _materialize(ctx, dir_path, filename, tier, files, dirs, package)

    for filename in extra:
        if filename in declared:
            continue
        _, tier = FileBuilder.resolve(filename, ctx.strategy)
        _materialize(ctx, dir_path, filename, tier, files, dirs, package)


def _fetch(ctx: _Context, url: str, path: str) -> None:
    result = ctx.fetcher.fetch(url, path)
    if result.status is FetchStatus.CLONED:
        ctx.report.add(ctx.rel(path), NodeKind.DIR, Status.CREATED, f"cloned from {url}")
    elif result.status is FetchStatus.EXISTS:
        ctx.report.add(ctx.rel(path), NodeKind.DIR, Status.SKIPPED, "already present, not pulled")
    elif result.status is FetchStatus.FAILED:
        message = f"could not clone {url}: {result.message}"
        warnings.warn(message, ExternalFetchWarning, stacklevel=2)
        ctx.report.add(ctx.rel(path), NodeKind.DIR, Status.WARNED, f"ExternalFetchWarning: {message}")


def _process_directory(ctx: _Context, parent_path: str, index: int) -> None:
    node = ctx.tree.node(index)
    path = os.path.join(parent_path, node.name)

    if node.is_external:
        _fetch(ctx, node.source, path)
        return

    try:
        created = DirectoryBuilder.ensure(path)
    except OSError as exc:
        logger.error("Failed to create directory %s, skipping its subtree: %s", path, exc)
        ctx.report.add(ctx.rel(path), NodeKind.DIR, Status.FAILED, str(exc))
        return
    ctx.report.add(ctx.rel(path), NodeKind.DIR, Status.CREATED if created else Status.SKIPPED)

    strategy = ctx.strategy
    extra = []
    if strategy.auto_management and node.name not in strategy.auto_management_skip:
        extra.append(strategy.auto_management)
    _process_files(ctx, path, node.file, node.tree, node.name, extra)

    for child in node.tree:
        _process_directory(ctx, path, child)


def _process_project(ctx: _Context) -> None:
    project = ctx.project
    path = project_path(ctx.working_root, project)
    if not project.root:
        try:
            created = DirectoryBuilder.ensure(path)
        except OSError as exc:
            logger.error("Failed to create project directory %s: %s", path, exc)
            ctx.report.add(ctx.rel(path), NodeKind.PROJECT, Status.FAILED, str(exc))
            return
        ctx.report.add(ctx.rel(path), NodeKind.PROJECT, Status.CREATED if created else Status.SKIPPED)

    _process_files(ctx, path, project.file, project.tree, "", list(ctx.strategy.config_files))
    for index in project.tree:
        _process_directory(ctx, path, index)


def _write_workspace(
    working_root: str, lang: str, spec: SpecTree, projects: List[ProjectSpec], report: GenerationReport
) -> None:
    strategy = STRATEGIES[lang]
    path = os.path.join(working_root, strategy.workspace_manifest)
    rel = os.path.relpath(path, working_root)
    start, end = markers_for(WORKSPACE_COMMENT)
    root = spec.root_project()
    block = render_block(workspace_members([p.name for p in projects if p is not root]))
    template = workspace_template()

    base = None
    try:
        if os.path.exists(path):
            existing = read_text(path)
            if not has_markers(existing, start, end):
                if WORKSPACE_TABLE.search(existing):
                    logger.warning("%s has a hand-written [workspace] table, leaving it alone", path)
                    report.add(rel, NodeKind.WORKSPACE, Status.WARNED, "unmarked [workspace] table left untouched")
                    return
                separator = "\n" if existing.endswith("\n") else "\n\n"
                base = (existing + separator if existing else "") + template
        status = FileBuilder.merge(path, block, start, end, template=template, base=base)
    except MarkerCorruptionError as exc:
        logger.error("Refusing to rewrite %s: %s", path, exc)
        report.add(rel, NodeKind.WORKSPACE, Status.FAILED, f"MarkerCorruptionError: {exc}")
    except OSError as exc:
        logger.error("Failed to write %s: %s", path, exc)
        report.add(rel, NodeKind.WORKSPACE, Status.FAILED, str(exc))
    else:
        report.add(rel, NodeKind.WORKSPACE, status, f"{lang} workspace")


def generate(
    spec: SpecTree,
    working_root: str,
    options: Optional[GenerationOptions] = None,
    fetcher: Optional[ExternalFetcher] = None,
) -> GenerationReport:
    """Materialize every project of ``spec`` under ``working_root``.

    Raises GenerationError only when the working root itself is unusable;
    everything else is reported through the returned GenerationReport.
    """
    options = options or GenerationOptions()
    fetcher = fetcher or ExternalFetcher(options.git_command)
    working_root = os.path.abspath(working_root)

    if options.mode is Mode.REGENERATE:
        if not os.path.isdir(working_root):
            raise GenerationError(f"Working root does not exist: {working_root}")
    else:
        try:
            DirectoryBuilder.ensure(working_root)
        except OSError as exc:
            raise GenerationError(f"Cannot create working root {working_root}: {exc}") from exc

    report = GenerationReport()
    for project in spec.projects:
        logger.info("Generating project %s (%s)", project.name, project.lang)
        ctx = _Context(working_root, spec, project, get_strategy(project.lang), report, fetcher)
        _process_project(ctx)

    for lang, strategy in STRATEGIES.items():
        if not strategy.workspace_manifest:
            continue
        members = [p for p in spec.projects if p.lang == lang]
        if len(members) > 1:
            _write_workspace(working_root, lang, spec, members, report)

    return report
