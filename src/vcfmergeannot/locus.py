"""Locus predicates for synchronising annotation cursors with the primary stream.

Records are only inspected through ``rid`` (contig index in the record's
header), ``start`` (0-based position) and ``alleles`` (REF first), the
accessors of :class:`pysam.VariantRecord`.

Ordering only looks at ``(rid, start)``; alleles take part in equality. Two
records at the same locus with different alleles are therefore unordered
relative to each other yet not equal.
"""

from __future__ import annotations

from typing import Any, Tuple


def locus_key(rec: Any) -> Tuple[int, int]:
    return int(rec.rid), int(rec.start)


def matches(a: Any, b: Any) -> bool:
    """True if both records sit at the same locus with identical alleles in the same order."""
    if a.rid != b.rid or a.start != b.start:
        return False
    alleles_a = a.alleles or ()
    alleles_b = b.alleles or ()
    if len(alleles_a) != len(alleles_b):
        return False
    for x, y in zip(alleles_a, alleles_b):
        if x != y:
            return False
    return True


def precedes(a: Any, b: Any) -> bool:
    """True if ``b`` lies strictly behind ``a`` on the ``(rid, start)`` order.

    Used by the merge as "the annotation ``b`` has fallen behind the primary ``a``".
    """
    return a.rid > b.rid or (a.rid == b.rid and a.start > b.start)
