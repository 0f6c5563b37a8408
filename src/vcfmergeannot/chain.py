from __future__ import annotations

import logging
from functools import partial
from typing import Any, Callable, Iterator, List, Optional, Sequence

import pysam

from .pathlist import truncate_at_terminator
from .sources import open_variant_file
from .validation import warn_on_contig_mismatch

logger = logging.getLogger(__name__)


class PrimaryChain:
    """Read a list of primary sources as one continuous record stream.

    Sources are concatenated in list order without any cross-source sorting.
    The list is cut at the first empty entry. A source that cannot be opened
    raises :class:`~vcfmergeannot.sources.SourceOpenError`; a read failure in
    the middle of a source ends that source and the chain moves on.

    Parameters
    ----------
    paths:
        Primary source paths, in order.
    opener:
        Callable returning an open record source for a path; defaults to pysam.
    target_header:
        If set, each record is translated into this header before it is
        yielded (the output sink's header). Headers are not reconciled, so a
        later source whose samples or tags the target header lacks raises
        ValueError naming that source.
    """

    def __init__(
        self,
        paths: Sequence[str],
        *,
        opener: Optional[Callable[[str], Any]] = None,
        target_header: Optional[pysam.VariantHeader] = None,
    ) -> None:
        self.paths: List[str] = truncate_at_terminator(paths)
        self.target_header = target_header
        self.records_read = 0
        self.sources_opened = 0
        self._opener = opener or partial(open_variant_file, role="primary")
        self._index = -1
        self._current: Any = None
        self._handle: Any = None
        self._first_contigs: Optional[List[str]] = None
        self._header: Optional[pysam.VariantHeader] = None

    @property
    def header(self) -> pysam.VariantHeader:
        """Header of the first primary source (opens it if needed)."""
        if self._index < 0:
            if not self.paths:
                raise ValueError("Primary source list is empty.")
            self._open_next()
        return self._header

    @property
    def current_path(self) -> Optional[str]:
        if self._current is None:
            return None
        return self.paths[self._index]

    def _open_next(self) -> bool:
        self._close_current()
        if self._index >= len(self.paths):
            return False
        self._index += 1
        if self._index >= len(self.paths):
            return False

        path = self.paths[self._index]
        src = self._opener(path)
        self._current = iter(src)
        self._handle = src
        self.sources_opened += 1
        logger.info("Reading primary source %d/%d: %s", self._index + 1, len(self.paths), path)

        header = getattr(src, "header", None)
        if header is not None:
            contigs = list(header.contigs)
            if self._first_contigs is None:
                self._first_contigs = contigs
                self._header = header
            else:
                warn_on_contig_mismatch(self._first_contigs, contigs, label=path)
        return True

    def _close_current(self) -> None:
        if self._current is None:
            return
        handle = self._handle
        self._current = None
        self._handle = None
        close = getattr(handle, "close", None)
        if close is not None:
            close()

    def __iter__(self) -> Iterator[Any]:
        return self

    def __next__(self) -> Any:
        while True:
            if self._current is None and not self._open_next():
                raise StopIteration
            try:
                rec = next(self._current)
            except StopIteration:
                self._close_current()
                continue
            except (OSError, ValueError) as e:
                logger.warning(
                    "Read failure in primary source %s; moving to the next source: %s",
                    self.current_path,
                    e,
                )
                self._close_current()
                continue

            self.records_read += 1
            if self.target_header is not None:
                try:
                    rec.translate(self.target_header)
                except ValueError as e:
                    raise ValueError(
                        f"Cannot translate a record from primary source {self.current_path} "
                        f"into the output header (headers are not reconciled): {e}"
                    ) from e
            return rec

    def close(self) -> None:
        self._close_current()
        self._index = len(self.paths)

    def __enter__(self) -> "PrimaryChain":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
