from __future__ import annotations

from typing import Dict, Sequence

from .models import CoverageResult, DepthPoint, Region
from .partition import partition_points
from .reducer import dense_size, reduce_points, window_plan


def summarize_coverage(
    points: Sequence[DepthPoint],
    region: Region,
    keep: Sequence[int],
    max_points: int,
) -> CoverageResult:
    """Partition ``points`` against ``keep`` and reduce the rest over ``region``.

    Reserved points keep their exact depth. Remaining points are zero-filled
    and window-averaged to at most ``max_points`` points.
    """
    reserved, remaining = partition_points(points, keep)
    reduced = reduce_points(region.start, region.end, remaining, max_points)

    n_dense = dense_size(region.start, region.end)
    factor, modulo = window_plan(n_dense, max_points) if max_points > 1 else (0, 0)
    passthrough = max_points <= 1 or factor <= 1

    stats: Dict[str, int] = {
        "points_in": len(points),
        "points_reserved": len(reserved),
        "points_remaining": len(remaining),
        "keep_requested": len(keep),
        "keep_missing": len(keep) - len(reserved),
        "dense_size": n_dense,
        "max_points": int(max_points),
        "window_factor": factor,
        "window_modulo": modulo,
        "reduced_points": len(reduced),
        "passthrough": int(passthrough),
    }
    return CoverageResult(reserved=reserved, reduced=reduced, stats=stats)
