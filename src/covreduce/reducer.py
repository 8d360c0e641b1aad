"""Zero-fill and window-average a depth series down to a bounded point count.

The dense series spans ``region_end - region_start + 2`` slots: the inclusive
region plus one trailing slot that always stays at zero. Window arithmetic is
done on that size, so changing it shifts every window boundary.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from .models import DepthPoint, InvalidRegion


def _check_region(region_start: int, region_end: int) -> None:
    if region_end < region_start:
        raise InvalidRegion(f"Region end ({region_end}) is before its start ({region_start})")


def dense_size(region_start: int, region_end: int) -> int:
    _check_region(region_start, region_end)
    return (region_end - region_start + 1) + 1


def zero_fill(region_start: int, region_end: int, points: Sequence[DepthPoint]) -> np.ndarray:
    """Return a dense int64 depth array for ``[region_start, region_end + 1]``.

    Slot ``i`` holds the depth at position ``region_start + i``; positions with
    no input point are 0. Points outside ``[region_start, region_end]`` are
    dropped.
    """
    dense = np.zeros(dense_size(region_start, region_end), dtype=np.int64)
    if len(points) == 0:
        return dense

    positions = np.fromiter((p.position for p in points), dtype=np.int64, count=len(points))
    depths = np.fromiter((p.depth for p in points), dtype=np.int64, count=len(points))
    inside = (positions >= region_start) & (positions <= region_end)
    dense[positions[inside] - region_start] = depths[inside]
    return dense


def window_plan(n_dense: int, max_points: int) -> Tuple[int, int]:
    """Return ``(factor, modulo)``: base window size and number of widened windows."""
    if max_points < 1:
        raise ValueError(f"max_points must be >= 1, got {max_points}")
    return divmod(n_dense, max_points)


def window_sizes(n_dense: int, max_points: int) -> List[int]:
    """Window sizes tiling ``n_dense`` slots into at most ``max_points`` windows.

    The first ``modulo`` windows are one slot wider than the rest.
    """
    factor, modulo = window_plan(n_dense, max_points)
    if factor == 0:
        return [1] * n_dense
    return [factor + 1] * modulo + [factor] * (max_points - modulo)


def reduce_points(
    region_start: int,
    region_end: int,
    points: Sequence[DepthPoint],
    max_points: int,
) -> List[DepthPoint]:
    """Reduce ``points`` over ``[region_start, region_end]`` to at most ``max_points`` points.

    Missing positions count as zero depth. Each output point carries the
    position of its window's first slot and the truncated integer mean of the
    window's depths.

    When ``max_points <= 1``, or when the dense series would shrink by less
    than a factor of two, the input points are returned as they are.

    Raises
    ------
    InvalidRegion
        If ``region_end < region_start``.
    """
    n_dense = dense_size(region_start, region_end)

    if max_points <= 1:
        return list(points)

    factor, _ = window_plan(n_dense, max_points)
    if factor <= 1:
        return list(points)

    dense = zero_fill(region_start, region_end, points)
    sizes = np.asarray(window_sizes(n_dense, max_points), dtype=np.int64)
    starts = np.concatenate((np.zeros(1, dtype=np.int64), np.cumsum(sizes)[:-1]))

    means = np.add.reduceat(dense, starts) // sizes
    anchors = region_start + starts
    return [DepthPoint(position=int(pos), depth=int(d)) for pos, d in zip(anchors, means)]
