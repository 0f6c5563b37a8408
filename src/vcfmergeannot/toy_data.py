from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

import pysam

from .utils import ensure_outdir, write_json

# (contig, pos0, alleles, id, info)
Site = Tuple[str, int, Sequence[str], Optional[str], Mapping[str, Any]]

TOY_CONTIGS: Dict[str, int] = {"chr1": 1000, "chr2": 1000}

TOY_INFO: Dict[str, Tuple[Any, str, str]] = {
    "AF": ("A", "Float", "Population allele frequency"),
    "GENE": (1, "String", "Overlapping gene symbol"),
}


def make_header(
    *,
    contigs: Mapping[str, int] = TOY_CONTIGS,
    info: Optional[Mapping[str, Tuple[Any, str, str]]] = None,
    samples: Iterable[str] = (),
) -> pysam.VariantHeader:
    header = pysam.VariantHeader()
    header.add_meta("fileformat", "VCFv4.2")
    for name, length in contigs.items():
        header.contigs.add(name, length=length)
    for key, (number, typ, desc) in (info or {}).items():
        header.info.add(key, number, typ, desc)
    for s in samples:
        header.add_sample(s)
    return header


def write_sites_vcf(
    path: str | Path,
    sites: Iterable[Site],
    *,
    contigs: Mapping[str, int] = TOY_CONTIGS,
    info: Optional[Mapping[str, Tuple[Any, str, str]]] = None,
) -> Path:
    """Write a sites-only VCF. Sites are written in the order given (callers sort them)."""
    path = Path(path)
    header = make_header(contigs=contigs, info=info)
    with pysam.VariantFile(str(path), "w", header=header) as vcf:
        for contig, pos0, alleles, rid, rec_info in sites:
            rec = vcf.new_record(
                contig=contig,
                start=pos0,
                stop=pos0 + len(alleles[0]),
                alleles=tuple(alleles),
                id=rid,
                qual=60,
                filter="PASS",
            )
            for key, value in rec_info.items():
                rec.info[key] = value
            vcf.write(rec)
    return path


def make_toy_data(*, outdir: str | Path) -> Dict[str, str]:
    """Create two primary VCFs, a primary list, and an annotation VCF for demos/tests.

    The primary sources are position-continuations of each other; the
    annotation source shares their contig dictionary and carries INFO/AF and
    INFO/GENE plus rsIDs.

    Returns
    -------
    dict
        Paths to the generated files.
    """
    outdir_p = ensure_outdir(outdir)

    primary_1 = write_sites_vcf(
        outdir_p / "primary_1.vcf",
        [
            ("chr1", 99, ("A", "T"), None, {}),
            ("chr1", 199, ("G", "C"), None, {}),
            ("chr1", 299, ("C", "A"), None, {}),
        ],
    )
    primary_2 = write_sites_vcf(
        outdir_p / "primary_2.vcf",
        [
            ("chr1", 499, ("T", "G"), None, {}),
            ("chr2", 49, ("A", "C"), None, {}),
        ],
    )

    list_path = outdir_p / "primary.list"
    list_path.write_text(f"{primary_1}\n{primary_2}\n", encoding="utf-8")

    annotation = write_sites_vcf(
        outdir_p / "annotation.vcf",
        [
            ("chr1", 99, ("A", "T"), "rs100", {"AF": (0.25,), "GENE": "GENE1"}),
            ("chr1", 299, ("C", "A", "G"), "rs300", {"AF": (0.5, 0.125)}),
            ("chr1", 499, ("T", "G"), "rs500", {"AF": (0.75,), "GENE": "GENE2"}),
            ("chr2", 49, ("A", "C"), "rs2050", {"AF": (0.5,)}),
        ],
        info=TOY_INFO,
    )

    summary = {
        "primary_1": str(primary_1),
        "primary_2": str(primary_2),
        "primary_list": str(list_path),
        "annotation_vcf": str(annotation),
        "outdir": str(outdir_p),
    }

    write_json(outdir_p / "toy_summary.json", summary)
    return summary
