from __future__ import annotations

from typing import List, Sequence, Tuple

from .models import DepthPoint


def partition_points(
    points: Sequence[DepthPoint],
    keep: Sequence[int],
) -> Tuple[List[DepthPoint], List[DepthPoint]]:
    """Split depth points into (reserved, remaining) with one ordered merge.

    Both ``points`` and ``keep`` must be sorted ascending. A point whose
    position equals the current keep position is reserved and both cursors
    move on; any other point is remaining and only the point cursor moves.
    A keep position that never occurs in ``points`` therefore holds the keep
    cursor, and no later keep position is matched. Both outputs preserve
    input order.
    """
    reserved: List[DepthPoint] = []
    remaining: List[DepthPoint] = []

    k = 0
    n_keep = len(keep)
    for point in points:
        if k < n_keep and keep[k] == point.position:
            reserved.append(point)
            k += 1
        else:
            remaining.append(point)

    return reserved, remaining
