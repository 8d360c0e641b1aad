from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


class InvalidRegion(ValueError):
    """Raised when a region's end lies before its start."""


@dataclass(frozen=True)
class DepthPoint:
    """Read depth at a single position.

    Attributes
    ----------
    position:
        Genomic coordinate as reported by the pileup tool. Within one stream
        positions are strictly increasing but may have gaps.
    depth:
        Number of reads covering the position (non-negative).
    """

    position: int
    depth: int


@dataclass(frozen=True)
class Region:
    """A contiguous span on a single contig.

    ``start`` and ``end`` are taken from a ``contig:start:end`` string in the
    samtools zero-based half-open convention. The reducer treats the pair as
    an inclusive interval ``[start, end]``.
    """

    contig: str
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise InvalidRegion(
                f"Region end ({self.end}) is before its start ({self.start}) on contig '{self.contig}'"
            )

    @property
    def span(self) -> int:
        return self.end - self.start + 1

    def samtools_region(self) -> str:
        """Region string for ``samtools mpileup -r`` (1-based, inclusive).

        A one-base region ``c:s:s`` fetches ``s + 1`` only, so samtools gets a
        non-empty range. Its dense series has two slots, which always makes
        the reducer pass points through, so that record is reported as read.
        """
        return f"{self.contig}:{self.start + 1}-{max(self.end, self.start + 1)}"

    def __str__(self) -> str:
        return f"{self.contig}:{self.start}:{self.end}"


@dataclass(frozen=True)
class CoverageResult:
    """Output of one coverage reduction run."""

    reserved: List[DepthPoint]
    reduced: List[DepthPoint]
    stats: Dict[str, int] = field(default_factory=dict)
