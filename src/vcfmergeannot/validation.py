from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

logger = logging.getLogger(__name__)


_UCSC_PREFIX = "chr"


def detect_contig_style(contigs: Iterable[str]) -> str:
    """Infer contig style: 'ucsc' if most contigs start with 'chr', else 'ensembl'."""
    names = [c for c in contigs if c]
    if not names:
        return "unknown"
    chr_like = [c for c in names if c.startswith(_UCSC_PREFIX)]
    if len(chr_like) >= max(1, int(0.5 * len(names))):
        return "ucsc"
    return "ensembl"


def check_contig_order(reference: Sequence[str], other: Sequence[str]) -> List[str]:
    """List the ways ``other`` disagrees with ``reference`` on contig ids.

    Loci are compared by contig index, so a contig named by both dictionaries
    must sit at the same index in each. Contigs only one side knows about are
    not reported.
    """
    problems: List[str] = []
    if not other:
        problems.append(
            "no ##contig lines; contig ids follow order of first appearance in the records"
        )
        return problems
    ref_index = {name: i for i, name in enumerate(reference)}
    for i, name in enumerate(other):
        j = ref_index.get(name)
        if j is not None and j != i:
            problems.append(f"contig {name} has id {i} here but {j} in the reference header")
    return problems


def warn_on_contig_mismatch(reference: Sequence[str], other: Sequence[str], *, label: str) -> List[str]:
    """Log contig dictionary problems for ``label`` at WARNING and return them."""
    problems = check_contig_order(reference, other)
    ref_style = detect_contig_style(reference)
    other_style = detect_contig_style(other)
    if "unknown" not in (ref_style, other_style) and ref_style != other_style:
        problems.append(f"contig naming style differs (reference={ref_style}, {label}={other_style})")

    shown = problems[:5]
    for msg in shown:
        logger.warning("%s: %s", label, msg)
    if len(problems) > len(shown):
        logger.warning("%s: %d further contig problems not shown", label, len(problems) - len(shown))
    return problems
