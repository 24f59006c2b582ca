"""Exception taxonomy for treeforge."""
from typing import List, Optional, Sequence, Tuple


class TreeforgeError(Exception):
    """Base class for every error raised by treeforge_lib."""


class ValidationError(TreeforgeError, ValueError):
    """The specification document is structurally invalid.

    Raised before any filesystem mutation. ``issues`` holds every problem
    found as ``(path, message)`` pairs, e.g. ``("projects[0].tree[1]", "...")``.
    """

    def __init__(self, issues: Sequence[Tuple[str, str]]):
        self.issues: List[Tuple[str, str]] = list(issues)
        lines = [f"  {path}: {message}" for path, message in self.issues]
        super().__init__("Specification validation failed:\n" + "\n".join(lines))


class GenerationError(TreeforgeError):
    """A precondition of the whole run does not hold."""


class MarkerCorruptionError(TreeforgeError):
    """A management file carries an unpaired or out-of-order marker."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class ExternalFetchWarning(UserWarning):
    """An external repository could not be cloned; the run continues."""
