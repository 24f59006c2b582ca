"""Cloning external repositories into the generated tree."""
import logging
import os
import subprocess
from enum import Enum
from typing import Callable, List, NamedTuple, Optional

logger = logging.getLogger(__name__)

Runner = Callable[[List[str]], "subprocess.CompletedProcess[str]"]


class FetchStatus(str, Enum):
    CLONED = "cloned"
    EXISTS = "exists"
    FAILED = "failed"


class FetchResult(NamedTuple):
    status: FetchStatus
    message: str = ""


def repo_name_from_url(url: str) -> str:
    """Infer a directory name from an HTTPS or SSH git URL.

    >>> repo_name_from_url("git@github.com:org/tool.git")
    'tool'
    """
    tail = url.rstrip("/")
    if tail.endswith(".git"):
        tail = tail[: -len(".git")]
    for sep in ("/", ":"):
        if sep in tail:
            tail = tail.rsplit(sep, 1)[1]
    return tail


def _run(argv: List[str]) -> "subprocess.CompletedProcess[str]":
    return subprocess.run(argv, capture_output=True, text=True, check=False)


class ExternalFetcher:
    def __init__(self, git_command: str = "git", runner: Optional[Runner] = None):
        self.git_command = git_command
        self.runner = runner or _run

    def fetch(self, url: str, target_path: str) -> FetchResult:
        """Clone ``url`` into ``target_path`` unless the path already exists.

        Never raises for clone problems; a failed clone comes back as a
        FAILED result carrying the git error text.
        """
        if os.path.exists(target_path):
            logger.debug("Clone target exists, skipping: %s", target_path)
            return FetchResult(FetchStatus.EXISTS)

        argv = [self.git_command, "clone", url, target_path]
        logger.info("Cloning %s -> %s", url, target_path)
        try:
            proc = self.runner(argv)
        except OSError as exc:
            logger.warning("Failed to execute %s for %s: %s", self.git_command, url, exc)
            return FetchResult(FetchStatus.FAILED, str(exc))

        if proc.returncode != 0:
            message = (proc.stderr or proc.stdout or "").strip() or f"exit status {proc.returncode}"
            logger.warning("Failed to clone %s: %s", url, message)
            return FetchResult(FetchStatus.FAILED, message)
        return FetchResult(FetchStatus.CLONED)
