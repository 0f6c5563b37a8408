from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

import pysam

from .locus import locus_key
from .sources import open_variant_file

logger = logging.getLogger(__name__)


class AnnotationCursor:
    """Forward-only pointer into one position-sorted annotation source.

    The cursor is either active, holding ``current``, or exhausted. It primes
    itself on construction so ``current`` is the first record (or the cursor is
    already exhausted for an empty source). Once exhausted it stays exhausted
    and its source is released.

    A read failure ends the source exactly like end-of-stream; the only trace
    left is a WARNING in the log.
    """

    def __init__(
        self,
        records: Iterable[Any],
        *,
        name: str = "<annotation>",
        header: Optional[pysam.VariantHeader] = None,
        on_close: Optional[Callable[[], None]] = None,
    ) -> None:
        self.name = name
        self.header = header
        self.records_read = 0
        self._records = iter(records)
        self._on_close = on_close
        self._current: Any = None
        self._exhausted = False
        self.advance()

    @classmethod
    def open(cls, path: str | Path) -> "AnnotationCursor":
        vcf = open_variant_file(path, role="annotation")
        try:
            return cls(vcf, name=str(path), header=vcf.header, on_close=vcf.close)
        except BaseException:
            vcf.close()
            raise

    @property
    def current(self) -> Any:
        return self._current

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def advance(self) -> None:
        if self._exhausted:
            return
        try:
            rec = next(self._records)
        except StopIteration:
            logger.info("Annotation source %s exhausted after %d records", self.name, self.records_read)
            self._finish()
            return
        except (OSError, ValueError) as e:
            logger.warning(
                "Read failure on annotation source %s after %d records; treating as end of stream: %s",
                self.name,
                self.records_read,
                e,
            )
            self._finish()
            return
        self._current = rec
        self.records_read += 1
        logger.debug("%s now at %s", self.name, locus_key(rec))

    def _finish(self) -> None:
        self._current = None
        self._exhausted = True
        self.close()

    def close(self) -> None:
        if self._on_close is not None:
            on_close, self._on_close = self._on_close, None
            on_close()

    def __enter__(self) -> "AnnotationCursor":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
