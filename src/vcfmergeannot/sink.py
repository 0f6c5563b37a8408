from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pysam

from .sources import open_variant_file, output_mode_for

logger = logging.getLogger(__name__)


class VariantSink:
    """Append-only writer for the annotated primary stream.

    The destination is opened (and its header written) on construction. Records
    written here must belong to :attr:`header`, the writer's own copy of the
    header it was opened with.
    """

    def __init__(self, path: str | Path, header: pysam.VariantHeader) -> None:
        self.path = str(path)
        self.mode = output_mode_for(path)
        self.records_written = 0
        self._vcf = open_variant_file(path, role="output", mode=self.mode, header=header)

    @property
    def header(self) -> pysam.VariantHeader:
        return self._vcf.header

    def write(self, record: Any) -> None:
        self._vcf.write(record)
        self.records_written += 1

    def close(self) -> None:
        if self._vcf is not None:
            vcf, self._vcf = self._vcf, None
            vcf.close()
            logger.info("Wrote %d records to %s", self.records_written, self.path)

    def __enter__(self) -> "VariantSink":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
