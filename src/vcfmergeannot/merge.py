from __future__ import annotations

import logging
import time
from contextlib import ExitStack
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .annotate import Annotator
from .chain import PrimaryChain
from .cursor import AnnotationCursor
from .engine import MergeEngine
from .sink import VariantSink
from .validation import warn_on_contig_mismatch

logger = logging.getLogger(__name__)


def merge_vcfs(
    *,
    primary_paths: Sequence[str],
    annotation_paths: Sequence[str | Path],
    output_path: str | Path,
    annotator: Optional[Annotator] = None,
    catch_up: str = "single",
    progress: bool = True,
) -> Dict[str, object]:
    """Annotate the concatenated primary sources and write them to ``output_path``.

    The output header is a copy of the first primary source's header, extended
    only by whatever ``annotator.prepare_header`` adds. Every handle opened here
    is closed on return, including when a later source fails to open.

    Returns
    -------
    dict
        The merge summary plus input/output paths and runtime.
    """
    t0 = time.time()
    annotator = annotator if annotator is not None else Annotator()

    with ExitStack() as stack:
        chain = stack.enter_context(PrimaryChain(primary_paths))
        primary_header = chain.header
        primary_contigs = list(primary_header.contigs)

        cursors: List[AnnotationCursor] = []
        for path in annotation_paths:
            cursor = stack.enter_context(AnnotationCursor.open(path))
            warn_on_contig_mismatch(primary_contigs, list(cursor.header.contigs), label=str(path))
            cursors.append(cursor)
        if not cursors:
            logger.warning("No annotation sources given; output is a plain concatenation.")

        out_header = primary_header.copy()
        annotator.prepare_header(out_header, [c.header for c in cursors])

        sink = stack.enter_context(VariantSink(output_path, out_header))
        chain.target_header = sink.header

        engine = MergeEngine(
            chain,
            cursors,
            sink,
            annotator=annotator,
            catch_up=catch_up,
            progress=progress,
        )
        summary = engine.run()
        sources_opened = chain.sources_opened

    dt = time.time() - t0
    out = summary.to_dict()
    out.update(
        {
            "primary_paths": list(chain.paths),
            "primary_sources_opened": int(sources_opened),
            "annotation_paths": [str(p) for p in annotation_paths],
            "output_path": str(output_path),
            "runtime_seconds": float(dt),
        }
    )
    return out
