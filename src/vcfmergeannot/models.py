from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class CursorSummary:
    """Per-annotation-source counters for one merge run.

    Attributes
    ----------
    name:
        Source path (or label for in-memory sources).
    records_read:
        Records pulled from the source, including the priming read.
    matched:
        Primary records annotated from this source.
    caught_up:
        Advances made because the source had fallen behind the primary stream.
    exhausted:
        Whether the source was drained by the end of the run.
    """

    name: str
    records_read: int
    matched: int
    caught_up: int
    exhausted: bool


@dataclass(frozen=True)
class MergeSummary:
    """Counters for one merge run."""

    primary_records: int
    records_written: int
    catch_up: str
    sources: List[CursorSummary] = field(default_factory=list)

    @property
    def matched_total(self) -> int:
        return sum(s.matched for s in self.sources)

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["matched_total"] = self.matched_total
        return out
