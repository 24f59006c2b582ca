"""
Marker-delimited splicing of generator-owned regions.

A management file may hold arbitrary user text. The generator owns only
the lines strictly between a start marker line and an end marker line;
everything else belongs to the user and is preserved byte for byte.

    # user text
    # start auto exported by treeforge.
    from .model import *
    # end auto exported by treeforge.
    # more user text
"""
import re
from typing import Pattern, Tuple

from .errors import MarkerCorruptionError

MARKER_START_TEXT = "start auto exported by treeforge."
MARKER_END_TEXT = "end auto exported by treeforge."


def markers_for(comment: str) -> Tuple[str, str]:
    """Return the (start, end) marker lines for a comment prefix such as ``//``."""
    return f"{comment} {MARKER_START_TEXT}", f"{comment} {MARKER_END_TEXT}"


def _line_pattern(marker: str) -> Pattern[str]:
    # a marker only counts when it is the whole line
    return re.compile(rf"^{re.escape(marker)}\r?$", re.MULTILINE)


def render_block(lines) -> str:
    """Join generated lines into a block; every line ends with a newline."""
    return "".join(f"{line}\n" for line in lines)


def splice(existing: str, block: str, start_marker: str, end_marker: str) -> str:
    """Return ``existing`` with the region between the markers set to ``block``.

    - both markers present, start before end: only the text between them changes
    - neither present: the marked block is appended (an empty ``existing``
      yields exactly the marked block)
    - anything else raises MarkerCorruptionError; no repair is attempted
    """
    if block and not block.endswith("\n"):
        block += "\n"

    start_re, end_re = _line_pattern(start_marker), _line_pattern(end_marker)
    start = start_re.search(existing)
    first_end = end_re.search(existing)

    if start is None and first_end is None:
        prefix = existing
        if prefix and not prefix.endswith("\n"):
            prefix += "\n"
        return f"{prefix}{start_marker}\n{block}{end_marker}\n"

    if start is None:
        raise MarkerCorruptionError("end marker found without a start marker")
    if first_end is not None and first_end.start() < start.start():
        raise MarkerCorruptionError("end marker appears before the start marker")

    inner = start.end()
    end = end_re.search(existing, inner)
    if end is None:
        raise MarkerCorruptionError("start marker has no matching end marker")
    if start_re.search(existing, inner, end.start()) is not None:
        raise MarkerCorruptionError("nested start marker inside the generated region")

    return existing[:inner] + "\n" + block + existing[end.start():]


def has_markers(content: str, start_marker: str, end_marker: str) -> bool:
    return bool(_line_pattern(start_marker).search(content) or _line_pattern(end_marker).search(content))
