from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import pysam

from .models import Region
from .pileup import pileup_points_from_bam
from .utils import ensure_outdir, write_json

TOY_CONTIG = "chr1"
TOY_LENGTH = 1000
TOY_READ_LENGTH = 50


def _write_fasta(path: Path, contig: str, seq: str) -> None:
    lines = [f">{contig}"]
    for i in range(0, len(seq), 60):
        lines.append(seq[i : i + 60])
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def _make_read(
    name: str,
    start0: int,
    seq: str,
    mapq: int = 60,
) -> pysam.AlignedSegment:
    a = pysam.AlignedSegment()
    a.query_name = name
    a.query_sequence = seq
    a.flag = 0
    a.reference_id = 0
    a.reference_start = start0
    a.mapping_quality = mapq
    a.cigartuples = [(0, len(seq))]
    a.query_qualities = pysam.qualitystring_to_array("I" * len(seq))
    return a


def make_toy_data(*, outdir: str | Path) -> Dict[str, str]:
    """Create a tiny reference, BAM, and pileup suitable for quick demos/tests.

    Coverage has two blocks: a deep one around 100-170 and a shallower,
    staggered one around 600-700. Everything else is uncovered, so the
    zero-fill path is exercised.

    The outputs include:
    - toy_ref.fa (+ .fai)
    - sample.bam (+ .bai)
    - sample.pileup (mpileup-style text, with a leading banner line)

    Returns
    -------
    dict
        Paths to the generated files plus a matching region and keep string.
    """
    outdir_p = ensure_outdir(outdir)

    ref_seq = ("ACGTTGCA" * (TOY_LENGTH // 8 + 1))[:TOY_LENGTH]
    ref_fa = outdir_p / "toy_ref.fa"
    _write_fasta(ref_fa, TOY_CONTIG, ref_seq)
    pysam.faidx(str(ref_fa))

    starts: List[int] = list(range(100, 120))
    starts += list(range(600, 650, 5))

    reads = [
        _make_read(f"r_{i}", s, ref_seq[s : s + TOY_READ_LENGTH])
        for i, s in enumerate(sorted(starts))
    ]

    bam_path = outdir_p / "sample.bam"
    header = {
        "HD": {"VN": "1.6", "SO": "coordinate"},
        "SQ": [{"SN": TOY_CONTIG, "LN": len(ref_seq)}],
    }
    with pysam.AlignmentFile(str(bam_path), "wb", header=header) as bam:
        for r in reads:
            bam.write(r)
    pysam.index(str(bam_path))

    region = Region(contig=TOY_CONTIG, start=0, end=TOY_LENGTH)
    keep = f"{TOY_CONTIG}:120:121,{TOY_CONTIG}:640:641"

    pileup_path = outdir_p / "sample.pileup"
    lines = ["[mpileup] 1 samples in 1 input files"]
    for p in pileup_points_from_bam(bam_path, region, min_baseq=0):
        base = ref_seq[p.position - 1]
        lines.append("\t".join([TOY_CONTIG, str(p.position), base, str(p.depth), "." * p.depth, "I" * p.depth]))
    pileup_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    summary = {
        "ref_fa": str(ref_fa),
        "bam": str(bam_path),
        "pileup": str(pileup_path),
        "region": str(region),
        "keep": keep,
        "outdir": str(outdir_p),
    }

    write_json(outdir_p / "toy_summary.json", summary)
    return summary
