from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List

from .utils import open_textmaybe_gzip

logger = logging.getLogger(__name__)


def truncate_at_terminator(entries: Iterable[str]) -> List[str]:
    """Return entries up to (not including) the first empty string.

    An empty entry ends the list: anything listed after it is never opened.
    """
    out: List[str] = []
    for entry in entries:
        if entry == "":
            break
        out.append(entry)
    return out


def load_path_list(list_path: str | Path) -> List[str]:
    """Load an ordered list of primary source paths, one per line.

    Line terminators are stripped; the first empty line terminates the list.
    Paths are returned as written (relative paths resolve against the current
    working directory when opened).

    Raises
    ------
    OSError
        If the list file cannot be read.
    ValueError
        If the list yields no entries.
    """
    with open_textmaybe_gzip(list_path, "rt") as fh:
        lines = [line.rstrip("\r\n") for line in fh]

    paths = truncate_at_terminator(lines)
    if len(paths) < len(lines):
        dropped = len(lines) - len(paths) - 1
        if dropped > 0:
            logger.warning(
                "Empty line in %s terminates the primary list; ignoring %d entries after it.",
                list_path,
                dropped,
            )
    if not paths:
        raise ValueError(f"Primary list {list_path} contains no entries.")
    logger.info("Loaded %d primary source(s) from %s", len(paths), list_path)
    return paths
