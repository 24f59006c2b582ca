"""
Filesystem builders.

DirectoryBuilder creates directories idempotently. FileBuilder resolves a
file node's on-disk name and protection tier, then materializes it:

- Tier 1 (code): created with boilerplate when absent, never touched again
- Tier 2 (management): marker region refreshed on every run
- Tier 3 (config): created with canonical content when absent, never touched again

Anything not recognized as management or config is Tier 1.
"""
import logging
import os
from enum import IntEnum
from typing import Optional, Tuple

from .content_updater import splice
from .errors import MarkerCorruptionError
from .languages import LanguageStrategy
from .models import Status

logger = logging.getLogger(__name__)


class Tier(IntEnum):
    CODE = 1
    MANAGEMENT = 2
    CONFIG = 3


def read_text(path: str) -> str:
    # undecodable bytes round-trip unchanged through surrogateescape
    with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
        return f.read()


def write_text(path: str, data: str) -> None:
    with open(path, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
        f.write(data)


class DirectoryBuilder:
    @staticmethod
    def ensure(path: str) -> bool:
        """Create ``path`` and missing ancestors. Returns True if it was created.

        Raises FileExistsError when ``path`` exists as a non-directory.
        """
        if os.path.isdir(path):
            return False
        if os.path.lexists(path):
            raise FileExistsError(f"Path exists and is not a directory: {path}")
        os.makedirs(path, exist_ok=True)
        logger.info("Created directory %s", path)
        return True


class FileBuilder:
    @staticmethod
    def resolve(name: str, strategy: LanguageStrategy) -> Tuple[str, Tier]:
        filename = strategy.filename_for(name)
        if strategy.is_management_file(filename):
            return filename, Tier.MANAGEMENT
        if strategy.is_config_file(filename):
            return filename, Tier.CONFIG
        return filename, Tier.CODE

    @staticmethod
    def create_once(path: str, content: str) -> Status:
        """Tier 1 and Tier 3: write ``content`` only if nothing exists at ``path``."""
        if os.path.lexists(path):
            logger.debug("Exists, leaving untouched: %s", path)
            return Status.SKIPPED
        write_text(path, content)
        logger.info("Created %s", path)
        return Status.CREATED

    @staticmethod
    def merge(
        path: str,
        block: str,
        start_marker: str,
        end_marker: str,
        template: str = "",
        base: Optional[str] = None,
    ) -> Status:
        """Tier 2: refresh the marker region of ``path``.

        A missing file starts from ``template``. ``base`` overrides the text
        that is spliced into (the file's current content otherwise).
        Corrupted markers raise MarkerCorruptionError before anything is written.
        """
        exists = os.path.exists(path)
        existing = read_text(path) if exists else template
        try:
            updated = splice(existing if base is None else base, block, start_marker, end_marker)
        except MarkerCorruptionError as exc:
            raise MarkerCorruptionError(str(exc), path=path) from None

        if exists and updated == existing:
            logger.debug("Unchanged: %s", path)
            return Status.SKIPPED
        write_text(path, updated)
        if exists:
            logger.info("Merged generated region of %s", path)
            return Status.MERGED
        logger.info("Created %s", path)
        return Status.CREATED
