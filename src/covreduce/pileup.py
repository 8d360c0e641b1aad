"""Depth point sources: pileup text, BAM via pysam, BAM via samtools.

Pileup records are tab-separated ``ref, pos, base, depth, ...``. Only the
position and depth columns are used. Positions are kept exactly as the tool
reports them.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

import pysam
from tqdm import tqdm

from .external import SAMTOOLS_HINT, ensure_executable_in_path, run_command, samtools_mpileup_cmd
from .models import DepthPoint, Region
from .utils import open_text_input

logger = logging.getLogger(__name__)

# Banner lines samtools writes into the pileup stream.
_BANNER_PREFIXES = ("[mpileup]", "<mpileup>")


class PileupFormatError(ValueError):
    """Raised for a pileup record that cannot be parsed."""


def parse_pileup_line(line: str, *, lineno: int = 0) -> Optional[DepthPoint]:
    """Parse one pileup record; return None for banner and blank lines."""
    if not line.strip() or line.startswith(_BANNER_PREFIXES):
        return None

    fields = line.rstrip("\r\n").split("\t")
    if len(fields) < 4:
        raise PileupFormatError(
            f"Line {lineno}: expected at least 4 tab-separated fields (ref, pos, base, depth), got {len(fields)}"
        )
    try:
        position = int(fields[1])
        depth = int(fields[3])
    except ValueError:
        raise PileupFormatError(f"Line {lineno}: position and depth must be integers") from None
    if depth < 0:
        raise PileupFormatError(f"Line {lineno}: negative depth {depth}")
    return DepthPoint(position=position, depth=depth)


def iter_pileup_lines(lines: Iterable[str]) -> Iterator[DepthPoint]:
    """Yield depth points from pileup text lines.

    Raises ``PileupFormatError`` for malformed records and when positions do
    not strictly increase.
    """
    last: Optional[int] = None
    for lineno, line in enumerate(lines, start=1):
        point = parse_pileup_line(line, lineno=lineno)
        if point is None:
            continue
        if last is not None and point.position <= last:
            raise PileupFormatError(
                f"Line {lineno}: position {point.position} does not follow {last}; "
                "pileup input must be sorted and cover a single contig"
            )
        last = point.position
        yield point


def read_pileup(path: str | Path) -> List[DepthPoint]:
    """Read pileup text from a file (optionally .gz) or ``-`` for stdin."""
    logger.info("Reading pileup: %s", "stdin" if str(path) == "-" else path)
    with open_text_input(path) as fh:
        points = list(iter_pileup_lines(fh))
    logger.info("Read %d depth points", len(points))
    return points


def pileup_points_from_bam(
    bam_path: str | Path,
    region: Region,
    *,
    min_baseq: int = 13,
    max_depth: int = 1_000_000,
    progress: bool = False,
) -> List[DepthPoint]:
    """Walk a sorted, indexed BAM with pysam and return per-position depths.

    Positions are reported 1-based (``reference_pos + 1``) so they line up
    with ``samtools mpileup`` records. Columns without reads are absent.
    """
    points: List[DepthPoint] = []
    with pysam.AlignmentFile(str(bam_path), "rb") as bam:
        if region.contig not in bam.references:
            raise ValueError(
                f"Contig '{region.contig}' not found in BAM header (first contigs: {list(bam.references)[:5]})"
            )
        it = bam.pileup(
            region.contig,
            region.start,
            region.end,
            truncate=True,
            min_base_quality=int(min_baseq),
            max_depth=int(max_depth),
        )
        if progress:
            it = tqdm(it, unit="pos", desc="Pileup", total=region.end - region.start)
        for column in it:
            points.append(DepthPoint(position=column.reference_pos + 1, depth=int(column.get_num_aligned())))

    logger.info("Collected %d covered positions from %s", len(points), bam_path)
    return points


def samtools_mpileup_points(
    bam_path: str | Path,
    region: Region,
    *,
    ref_fa: Optional[str | Path] = None,
    min_baseq: Optional[int] = None,
) -> List[DepthPoint]:
    """Run ``samtools mpileup`` over ``region`` and parse its output."""
    ensure_executable_in_path("samtools", hint=SAMTOOLS_HINT)
    cmd = samtools_mpileup_cmd(bam_path, region.samtools_region(), ref_fa=ref_fa, min_baseq=min_baseq)
    cp = run_command(cmd)
    points = list(iter_pileup_lines(cp.stdout.splitlines()))
    logger.info("samtools mpileup returned %d covered positions", len(points))
    return points
