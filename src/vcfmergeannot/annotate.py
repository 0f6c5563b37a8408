"""Annotation policies applied to matched primary records.

The merge engine calls :meth:`Annotator.apply` once for every primary record
that matches the current record of an annotation cursor. The base class copies
nothing; :class:`InfoFieldCopier` copies an allowlist of INFO fields and,
optionally, the variant ID.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Sequence

import pysam

logger = logging.getLogger(__name__)


class Annotator:
    """No-op annotation policy; subclass to copy payload onto primary records."""

    def prepare_header(
        self,
        output_header: pysam.VariantHeader,
        annotation_headers: Sequence[pysam.VariantHeader],
    ) -> None:
        """Add whatever definitions :meth:`apply` needs before the output is opened."""

    def apply(self, primary: Any, annotation: Any, source_index: int) -> Any:
        return primary


def _merge_ids(primary_id: str | None, annotation_id: str | None) -> str | None:
    if not annotation_id:
        return primary_id
    ids: List[str] = []
    for value in (primary_id, annotation_id):
        if not value:
            continue
        for part in value.split(";"):
            if part and part != "." and part not in ids:
                ids.append(part)
    return ";".join(ids) if ids else primary_id


class InfoFieldCopier(Annotator):
    """Copy allowlisted INFO fields (and optionally the ID) from the annotation record.

    Parameters
    ----------
    fields:
        INFO keys to copy. Each must be defined by at least one annotation header.
    copy_id:
        Merge the annotation ID into the primary ID (``;``-separated, deduplicated).
    overwrite:
        If False, INFO values already present on the primary record are kept.
    """

    def __init__(self, fields: Iterable[str], *, copy_id: bool = False, overwrite: bool = True) -> None:
        self.fields: List[str] = []
        for f in fields:
            if f and f not in self.fields:
                self.fields.append(f)
        self.copy_id = copy_id
        self.overwrite = overwrite

    def prepare_header(
        self,
        output_header: pysam.VariantHeader,
        annotation_headers: Sequence[pysam.VariantHeader],
    ) -> None:
        for key in self.fields:
            if key in output_header.info:
                continue
            for hdr in annotation_headers:
                if key in hdr.info:
                    meta = hdr.info[key]
                    output_header.info.add(key, meta.number, meta.type, meta.description)
                    logger.info("Added INFO/%s definition to output header", key)
                    break
            else:
                raise ValueError(f"INFO field '{key}' is not defined by any annotation source header.")

    def apply(self, primary: Any, annotation: Any, source_index: int) -> Any:
        for key in self.fields:
            if key not in annotation.info:
                continue
            if not self.overwrite and key in primary.info:
                continue
            primary.info[key] = annotation.info[key]
        if self.copy_id:
            merged = _merge_ids(primary.id, annotation.id)
            if merged != primary.id:
                primary.id = merged
        return primary
