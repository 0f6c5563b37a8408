from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .annotate import Annotator, InfoFieldCopier
from .engine import CATCH_UP_MODES
from .merge import merge_vcfs
from .pathlist import load_path_list
from .plotting import plot_source_matches, plot_source_progress
from .report import render_report
from .toy_data import make_toy_data
from .utils import ensure_outdir, write_json


def _setup_logging(verbosity: int, *, logfile: Optional[Path] = None) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    log_fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    logging.basicConfig(level=level, format=log_fmt, stream=sys.stderr)

    if logfile is not None:
        logfile.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(logfile)
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(log_fmt))
        logging.getLogger().addHandler(fh)


def _handle_error(err: Exception, *, log_path: Optional[Path] = None) -> int:
    sys.stderr.write(f"{err.__class__.__name__}: {err}\n")
    if log_path is not None:
        sys.stderr.write(f"See log: {log_path}\n")
    return 2


def _split_fields(values: Optional[List[str]]) -> List[str]:
    fields: List[str] = []
    for v in values or []:
        fields.extend(x.strip() for x in v.split(",") if x.strip())
    return fields


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="vcfmergeannot",
        description=(
            "vcfmergeannot: annotate a position-sorted stream of VCF/BCF files (given as a list file) "
            "with records from one or more position-sorted annotation VCFs, matching on "
            "contig, position and alleles. Output keeps every primary record in input order."
        ),
        epilog=(
            "Options go before or after all positional arguments, not between them. "
            "Example: vcfmergeannot genotypes.list dbsnp.vcf.gz annotated.vcf.gz --info RS --copy-id"
        ),
    )
    p.add_argument("--version", action="version", version=f"vcfmergeannot {__version__}")

    p.add_argument(
        "primary_list",
        help="Text file listing primary VCF/BCF paths, one per line; an empty line ends the list.",
    )
    p.add_argument(
        "annotations",
        nargs="*",
        help="Annotation VCF/BCF files, each sorted like the primary stream.",
    )
    p.add_argument("output", help="Output VCF (.vcf, .vcf.gz, .bcf, or - for stdout).")

    p.add_argument(
        "--info",
        action="append",
        default=None,
        metavar="FIELD",
        help="INFO field to copy from matching annotation records (repeatable or comma-separated).",
    )
    p.add_argument(
        "--copy-id",
        action="store_true",
        help="Merge the annotation ID (e.g. rsID) into the primary record's ID.",
    )
    p.add_argument(
        "--no-overwrite",
        action="store_true",
        help="Keep INFO values already present on primary records.",
    )
    p.add_argument(
        "--catch-up",
        choices=list(CATCH_UP_MODES),
        default="single",
        help=(
            "How far a lagging annotation source advances per primary record: "
            "'single' (one record, historic behaviour) or 'full' (until it reaches the primary locus)."
        ),
    )
    p.add_argument(
        "--report-dir",
        default=None,
        help="Write summary.json, plots and report.html into this directory.",
    )
    p.add_argument("--log-file", default=None, help="Also write the log to this file.")
    p.add_argument("--no-progress", action="store_true", help="Disable the progress bar.")
    p.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v/-vv).")
    return p


def _build_annotator(args: argparse.Namespace) -> Annotator:
    fields = _split_fields(args.info)
    if not fields and not args.copy_id:
        return Annotator()
    return InfoFieldCopier(fields, copy_id=bool(args.copy_id), overwrite=not bool(args.no_overwrite))


def _write_report(report_dir: Path, run: dict) -> Path:
    outdir = ensure_outdir(report_dir)
    write_json(outdir / "summary.json", run)

    plots = {}
    if run["sources"]:
        plots_dir = outdir / "plots"
        matches_png = plots_dir / "source_matches.png"
        progress_png = plots_dir / "source_progress.png"
        plot_source_matches(
            sources=run["sources"],
            primary_records=int(run["primary_records"]),
            out_png=matches_png,
        )
        plot_source_progress(sources=run["sources"], out_png=progress_png)
        plots = {
            "source_matches": str(Path("plots") / matches_png.name),
            "source_progress": str(Path("plots") / progress_png.name),
        }

    return render_report(outdir=outdir, version=__version__, run=run, plots=plots)


def cmd_merge(args: argparse.Namespace) -> int:
    log_path = Path(args.log_file).expanduser().resolve() if args.log_file else None
    _setup_logging(args.verbose, logfile=log_path)

    logger = logging.getLogger("vcfmergeannot")
    logger.info("vcfmergeannot %s", __version__)

    try:
        primary_paths = load_path_list(args.primary_list)
        annotator = _build_annotator(args)

        run = merge_vcfs(
            primary_paths=primary_paths,
            annotation_paths=list(args.annotations),
            output_path=args.output,
            annotator=annotator,
            catch_up=str(args.catch_up),
            progress=not bool(args.no_progress),
        )

        if args.report_dir:
            report_path = _write_report(Path(args.report_dir).expanduser().resolve(), run)
            logger.info("Report written: %s", report_path)

        logger.info(
            "Wrote %d records (%d annotated) to %s",
            run["records_written"],
            run["matched_total"],
            args.output,
        )
        return 0
    except Exception as e:
        return _handle_error(e, log_path=log_path)


def build_toy_data_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="vcfmergeannot-make-toy-data",
        description="Generate two primary VCFs, a primary list and an annotation VCF for demos/tests.",
    )
    p.add_argument("--outdir", required=True, help="Output directory for toy data.")
    return p


def cmd_make_toy_data(args: argparse.Namespace) -> int:
    try:
        summary = make_toy_data(outdir=args.outdir)
    except Exception as e:
        return _handle_error(e)
    print(json.dumps(summary, indent=2))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return cmd_merge(args)


def make_toy_data_main(argv: Optional[list[str]] = None) -> int:
    args = build_toy_data_parser().parse_args(argv)
    return cmd_make_toy_data(args)


if __name__ == "__main__":
    raise SystemExit(main())
