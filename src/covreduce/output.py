from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Iterable, List

from .models import CoverageResult, DepthPoint, Region

SPECIFIC_HEADER = "#specific_points"
REDUCED_HEADER = "#reduced_points"


def _point_lines(points: Iterable[DepthPoint]) -> List[str]:
    return [f"{p.position}\t{p.depth}" for p in points]


def format_points_text(result: CoverageResult) -> str:
    """Render both result sets as two headed sections of ``pos<TAB>depth`` lines."""
    lines = [SPECIFIC_HEADER]
    lines += _point_lines(result.reserved)
    lines.append(REDUCED_HEADER)
    lines += _point_lines(result.reduced)
    return "\n".join(lines) + "\n"


def result_to_jsonable(result: CoverageResult, *, region: Region, keep: List[int]) -> Dict[str, Any]:
    return {
        "region": asdict(region),
        "keep_positions": list(keep),
        "stats": dict(result.stats),
        "specific_points": [asdict(p) for p in result.reserved],
        "reduced_points": [asdict(p) for p in result.reduced],
    }
