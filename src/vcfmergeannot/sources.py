"""Opening of variant sources and destinations.

All pysam handles used by the merge are opened here so that open failures are
reported uniformly as :class:`SourceOpenError`, naming the role the file was
meant to play in the run.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pysam

logger = logging.getLogger(__name__)


class SourceOpenError(OSError):
    """Raised when a primary source, annotation source or output cannot be opened."""

    def __init__(self, path: str | Path, *, role: str, reason: str) -> None:
        super().__init__(f"Could not open {role} file: {path} ({reason})")
        self.path = str(path)
        self.role = role
        self.reason = reason


def output_mode_for(path: str | Path) -> str:
    """Pick a pysam write mode from the destination suffix."""
    p = str(path)
    if p.endswith(".bcf"):
        return "wb"
    if p.endswith(".gz") or p.endswith(".bgz"):
        return "wz"
    return "w"


def open_variant_file(
    path: str | Path,
    *,
    role: str = "primary",
    mode: str = "r",
    header: Optional[pysam.VariantHeader] = None,
) -> pysam.VariantFile:
    """Open a VCF/BCF with pysam, raising SourceOpenError on failure."""
    p = str(path)
    if mode.startswith("r") and p != "-" and not Path(p).exists():
        raise SourceOpenError(p, role=role, reason="no such file")
    try:
        if header is None:
            vf = pysam.VariantFile(p, mode)
        else:
            vf = pysam.VariantFile(p, mode, header=header)
    except (OSError, ValueError) as e:
        raise SourceOpenError(p, role=role, reason=str(e)) from e
    logger.debug("Opened %s file %s (mode=%s)", role, p, mode)
    return vf
