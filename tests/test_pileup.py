import gzip
from pathlib import Path

import pytest

from covreduce.models import DepthPoint, Region
from covreduce.pileup import PileupFormatError, iter_pileup_lines, pileup_points_from_bam, read_pileup
from covreduce.toy_data import make_toy_data

PILEUP = [
    "[mpileup] 1 samples in 1 input files\n",
    "<mpileup> Set max per-file depth to 8000\n",
    "13\t130045\tA\t40\t....\tIIII\n",
    "\n",
    "13\t130046\tC\t0\t*\t*\n",
    "13\t140043\tG\t54\t,,,,\tIIII\n",
]


def test_iter_pileup_lines_skips_banners():
    points = list(iter_pileup_lines(PILEUP))
    assert points == [
        DepthPoint(position=130045, depth=40),
        DepthPoint(position=130046, depth=0),
        DepthPoint(position=140043, depth=54),
    ]


def test_iter_pileup_lines_malformed():
    with pytest.raises(PileupFormatError, match="Line 2"):
        list(iter_pileup_lines(["13\t1\tA\t3\n", "13\t2\tA\n"]))
    with pytest.raises(PileupFormatError):
        list(iter_pileup_lines(["13\tx\tA\t3\n"]))


def test_iter_pileup_lines_requires_increasing_positions():
    with pytest.raises(PileupFormatError, match="does not follow"):
        list(iter_pileup_lines(["13\t5\tA\t3\n", "13\t5\tA\t3\n"]))


def test_read_pileup_gzip(tmp_path: Path):
    path = tmp_path / "sample.pileup.gz"
    with gzip.open(path, "wt") as fh:
        fh.writelines(PILEUP)
    assert [p.position for p in read_pileup(path)] == [130045, 130046, 140043]


def test_bam_pileup_matches_toy_pileup(tmp_path: Path):
    toy = make_toy_data(outdir=tmp_path / "toy")
    region = Region(contig="chr1", start=0, end=1000)

    from_bam = pileup_points_from_bam(toy["bam"], region, min_baseq=0)
    by_pos = {p.position: p.depth for p in from_bam}

    assert from_bam[0] == DepthPoint(position=101, depth=1)
    assert by_pos[121] == 20
    assert by_pos[641] == 9
    assert 400 not in by_pos

    assert read_pileup(toy["pileup"]) == from_bam


def test_bam_pileup_unknown_contig(tmp_path: Path):
    toy = make_toy_data(outdir=tmp_path / "toy")
    with pytest.raises(ValueError, match="not found in BAM header"):
        pileup_points_from_bam(toy["bam"], Region(contig="chr2", start=0, end=10))
