import logging
from pathlib import Path
from typing import List

import pysam
import pytest

from vcfmergeannot.annotate import InfoFieldCopier
from vcfmergeannot.chain import PrimaryChain
from vcfmergeannot.cursor import AnnotationCursor
from vcfmergeannot.merge import merge_vcfs
from vcfmergeannot.pathlist import load_path_list
from vcfmergeannot.sources import SourceOpenError
from vcfmergeannot.toy_data import make_toy_data, write_sites_vcf


def _read(path: Path) -> List[pysam.VariantRecord]:
    with pysam.VariantFile(str(path)) as vcf:
        return list(vcf)


def _merge(toy, out: Path, **kwargs):
    return merge_vcfs(
        primary_paths=load_path_list(toy["primary_list"]),
        annotation_paths=[toy["annotation_vcf"]],
        output_path=out,
        progress=False,
        **kwargs,
    )


def test_merge_single_step(tmp_path: Path) -> None:
    toy = make_toy_data(outdir=tmp_path / "toy")
    out = tmp_path / "out.vcf"

    run = _merge(toy, out, annotator=InfoFieldCopier(["AF", "GENE"], copy_id=True))

    recs = _read(out)
    assert [(r.contig, r.start) for r in recs] == [
        ("chr1", 99),
        ("chr1", 199),
        ("chr1", 299),
        ("chr1", 499),
        ("chr2", 49),
    ]
    assert recs[0].id == "rs100"
    assert recs[0].info["AF"] == pytest.approx((0.25,))
    assert recs[0].info["GENE"] == "GENE1"
    assert all("AF" not in r.info for r in recs[1:])

    assert run["primary_records"] == run["records_written"] == 5
    assert run["primary_sources_opened"] == 2
    assert run["matched_total"] == 1
    assert run["sources"][0]["exhausted"] is False


def test_merge_full_catch_up(tmp_path: Path) -> None:
    toy = make_toy_data(outdir=tmp_path / "toy")
    out = tmp_path / "out.vcf"

    run = _merge(toy, out, annotator=InfoFieldCopier(["AF", "GENE"], copy_id=True), catch_up="full")

    recs = _read(out)
    assert len(recs) == 5
    assert [r.id for r in recs] == ["rs100", None, None, "rs500", "rs2050"]
    assert recs[3].info["GENE"] == "GENE2"
    assert recs[4].info["AF"] == pytest.approx((0.5,))
    assert "AF" not in recs[2].info  # same locus, different allele count
    assert run["matched_total"] == 3
    assert run["sources"][0]["exhausted"] is True


def test_output_header_is_first_primary_header(tmp_path: Path) -> None:
    toy = make_toy_data(outdir=tmp_path / "toy")
    out = tmp_path / "out.vcf"
    _merge(toy, out)

    with pysam.VariantFile(str(out)) as vcf:
        assert list(vcf.header.contigs) == ["chr1", "chr2"]
        assert "AF" not in vcf.header.info


def test_empty_line_terminates_primary_list(tmp_path: Path) -> None:
    toy = make_toy_data(outdir=tmp_path / "toy")
    lst = tmp_path / "inputs.list"
    lst.write_text(f"{toy['primary_1']}\n\n{tmp_path / 'never_opened.vcf'}\n", encoding="utf-8")
    out = tmp_path / "out.vcf"

    run = merge_vcfs(
        primary_paths=load_path_list(lst),
        annotation_paths=[toy["annotation_vcf"]],
        output_path=out,
        progress=False,
    )

    assert run["primary_sources_opened"] == 1
    assert len(_read(out)) == 3


def test_merge_is_idempotent(tmp_path: Path) -> None:
    toy = make_toy_data(outdir=tmp_path / "toy")
    out1 = tmp_path / "out1.vcf"
    out2 = tmp_path / "out2.vcf"
    _merge(toy, out1, annotator=InfoFieldCopier(["AF"], copy_id=True))
    _merge(toy, out2, annotator=InfoFieldCopier(["AF"], copy_id=True))
    assert out1.read_bytes() == out2.read_bytes()


def test_compressed_output(tmp_path: Path) -> None:
    toy = make_toy_data(outdir=tmp_path / "toy")
    out = tmp_path / "out.vcf.gz"
    _merge(toy, out)
    assert out.read_bytes()[:2] == b"\x1f\x8b"
    assert len(_read(out)) == 5


def test_missing_annotation_source_aborts_before_output(tmp_path: Path) -> None:
    toy = make_toy_data(outdir=tmp_path / "toy")
    out = tmp_path / "out.vcf"
    with pytest.raises(SourceOpenError) as excinfo:
        merge_vcfs(
            primary_paths=load_path_list(toy["primary_list"]),
            annotation_paths=[tmp_path / "missing.vcf"],
            output_path=out,
            progress=False,
        )
    assert excinfo.value.role == "annotation"
    assert not out.exists()


def test_missing_primary_source_is_fatal(tmp_path: Path) -> None:
    toy = make_toy_data(outdir=tmp_path / "toy")
    with pytest.raises(SourceOpenError):
        merge_vcfs(
            primary_paths=[toy["primary_1"], str(tmp_path / "missing.vcf")],
            annotation_paths=[],
            output_path=tmp_path / "out.vcf",
            progress=False,
        )


def test_contig_order_mismatch_is_logged(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    toy = make_toy_data(outdir=tmp_path / "toy")
    annot = write_sites_vcf(
        tmp_path / "swapped.vcf",
        [("chr2", 49, ("A", "C"), "rsX", {})],
        contigs={"chr2": 1000, "chr1": 1000},
    )
    with caplog.at_level(logging.WARNING):
        merge_vcfs(
            primary_paths=load_path_list(toy["primary_list"]),
            annotation_paths=[annot],
            output_path=tmp_path / "out.vcf",
            progress=False,
        )
    assert "contig chr2 has id 0" in caplog.text


def test_output_open_failure_releases_sources(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    toy = make_toy_data(outdir=tmp_path / "toy")
    closed: List[str] = []

    cursor_close = AnnotationCursor.close
    chain_close = PrimaryChain.close

    def record_cursor_close(self: AnnotationCursor) -> None:
        closed.append("cursor")
        cursor_close(self)

    def record_chain_close(self: PrimaryChain) -> None:
        closed.append("chain")
        chain_close(self)

    monkeypatch.setattr(AnnotationCursor, "close", record_cursor_close)
    monkeypatch.setattr(PrimaryChain, "close", record_chain_close)

    with pytest.raises(SourceOpenError) as excinfo:
        merge_vcfs(
            primary_paths=load_path_list(toy["primary_list"]),
            annotation_paths=[toy["annotation_vcf"]],
            output_path=tmp_path / "nodir" / "out.vcf",
            progress=False,
        )
    assert excinfo.value.role == "output"
    assert "cursor" in closed
    assert "chain" in closed
    assert closed.index("cursor") < closed.index("chain")
