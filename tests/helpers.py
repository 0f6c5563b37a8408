from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

CONTIG_IDS = {"chr1": 0, "chr2": 1}


@dataclass
class Site:
    """In-memory stand-in for a pysam.VariantRecord (rid/start/alleles/info/id)."""

    rid: int
    start: int
    alleles: Tuple[str, ...]
    id: Optional[str] = None
    info: Dict[str, Any] = field(default_factory=dict)


def site(contig: str, pos: int, alleles: str, **info: Any) -> Site:
    return Site(rid=CONTIG_IDS[contig], start=pos, alleles=tuple(alleles.split(",")), info=dict(info))


class ListSink:
    def __init__(self) -> None:
        self.records: List[Any] = []

    def write(self, record: Any) -> None:
        self.records.append(record)
