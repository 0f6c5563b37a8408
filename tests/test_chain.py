from pathlib import Path
from typing import Dict, List

import pytest
from helpers import site

from vcfmergeannot.chain import PrimaryChain
from vcfmergeannot.sources import SourceOpenError
from vcfmergeannot.toy_data import write_sites_vcf


class FakeSource:
    def __init__(self, records: List) -> None:
        self._it = iter(records)
        self.closed = False

    def __iter__(self):
        return self

    def __next__(self):
        return next(self._it)

    def close(self) -> None:
        self.closed = True


def _opener(sources: Dict[str, List], opened: List[str]):
    handles: Dict[str, FakeSource] = {}

    def open_(path: str) -> FakeSource:
        opened.append(path)
        if path not in sources:
            raise SourceOpenError(path, role="primary", reason="no such file")
        handles[path] = FakeSource(sources[path])
        return handles[path]

    open_.handles = handles  # type: ignore[attr-defined]
    return open_


def test_chain_concatenates_in_list_order() -> None:
    opened: List[str] = []
    sources = {
        "a": [site("chr1", 1, "A,C"), site("chr1", 2, "A,C")],
        "b": [],
        "c": [site("chr1", 3, "A,C")],
    }
    opener = _opener(sources, opened)
    chain = PrimaryChain(["a", "b", "c"], opener=opener)
    assert [r.start for r in chain] == [1, 2, 3]
    assert opened == ["a", "b", "c"]
    assert chain.records_read == 3
    assert all(h.closed for h in opener.handles.values())


def test_chain_stops_at_empty_entry() -> None:
    opened: List[str] = []
    sources = {"fileA": [site("chr1", 1, "A,C")], "fileB": [site("chr1", 2, "A,C")]}
    chain = PrimaryChain(["fileA", "", "fileB"], opener=_opener(sources, opened))
    assert [r.start for r in chain] == [1]
    assert opened == ["fileA"]


def test_chain_does_not_skip_unopenable_sources() -> None:
    opened: List[str] = []
    chain = PrimaryChain(["a", "missing"], opener=_opener({"a": [site("chr1", 1, "A,C")]}, opened))
    assert next(chain).start == 1
    with pytest.raises(SourceOpenError):
        next(chain)


def test_chain_read_failure_moves_to_next_source() -> None:
    def broken():
        yield site("chr1", 1, "A,C")
        raise OSError("bad block")

    chain = PrimaryChain(
        ["a", "b"],
        opener=lambda p: broken() if p == "a" else iter([site("chr1", 5, "A,C")]),
    )
    assert [r.start for r in chain] == [1, 5]


def test_chain_header_is_first_source_header(tmp_path: Path) -> None:
    a = write_sites_vcf(tmp_path / "a.vcf", [("chr1", 10, ("A", "C"), None, {})])
    b = write_sites_vcf(
        tmp_path / "b.vcf",
        [("chrX", 20, ("G", "T"), None, {})],
        contigs={"chrX": 500},
    )
    with PrimaryChain([str(a), str(b)]) as chain:
        assert list(chain.header.contigs) == ["chr1", "chr2"]
        starts = [r.start for r in chain]
    assert starts == [10, 20]
    assert chain.sources_opened == 2


def test_chain_empty_list_has_no_header() -> None:
    with pytest.raises(ValueError):
        PrimaryChain([""]).header


class _UntranslatableSite:
    rid = 0
    start = 1
    alleles = ("A", "C")

    def translate(self, header) -> None:
        raise ValueError("Number of samples does not match header (2 vs 1)")


def test_chain_translation_failure_names_source() -> None:
    chain = PrimaryChain(["a", "b.vcf"], opener=lambda p: iter([] if p == "a" else [_UntranslatableSite()]))
    chain.target_header = object()
    with pytest.raises(ValueError, match="b.vcf"):
        next(chain)
