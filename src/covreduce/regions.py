from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .models import Region

logger = logging.getLogger(__name__)


def _split_region(text: str) -> Tuple[str, int, int]:
    """Split ``contig:start:end`` (or ``contig:start-end``) into its parts."""
    s = text.strip()
    tokens = s.split(":")
    if len(tokens) == 2 and "-" in tokens[1]:
        tokens = [tokens[0]] + tokens[1].split("-", 1)
    if len(tokens) != 3 or not tokens[0]:
        raise ValueError(f"Malformed region '{text}'. Expected contig:start:end, e.g. 13:130000:150000")
    try:
        start = int(tokens[1])
        end = int(tokens[2])
    except ValueError:
        raise ValueError(f"Region coordinates must be integers: '{text}'") from None
    return tokens[0], start, end


def parse_region(text: str) -> Region:
    """Parse a region string such as ``13:130000:150000``.

    Raises ``InvalidRegion`` when end < start, ``ValueError`` for anything
    that does not look like a region.
    """
    contig, start, end = _split_region(text)
    return Region(contig=contig, start=start, end=end)


def parse_keep_positions(text: Optional[str], *, contig: Optional[str] = None) -> List[int]:
    """Turn ``contig:start:end,contig:start:end`` into sorted pileup positions.

    Each sub-region contributes ``start + 1``, which converts its zero-based
    start to the coordinate used by pileup records. Only the start of each
    sub-region is kept. Duplicates collapse to one position.
    """
    if text is None or not text.strip():
        return []

    positions = set()
    for item in text.split(","):
        if not item.strip():
            continue
        sub_contig, start, end = _split_region(item)
        if contig is not None and sub_contig != contig:
            raise ValueError(
                f"Position '{item.strip()}' is on contig '{sub_contig}', but the region is on '{contig}'. "
                "Only one contig per run is supported."
            )
        if end - start > 1:
            logger.debug("Keep sub-region %s spans %d bases; only its first base is kept.", item.strip(), end - start)
        positions.add(start + 1)

    return sorted(positions)
