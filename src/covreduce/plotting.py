from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt

from .models import DepthPoint

logger = logging.getLogger(__name__)


def plot_coverage(
    *,
    reduced: Sequence[DepthPoint],
    reserved: Sequence[DepthPoint],
    out_png: str | Path,
    title: str = "Coverage",
) -> None:
    """Plot reduced depth as a step line with reserved positions as markers.

    Each reduced point is drawn from its anchor position until the next
    anchor, matching the window it summarizes.
    """
    out_png = Path(out_png)
    out_png.parent.mkdir(parents=True, exist_ok=True)

    plt.figure(figsize=(10, 3.5))
    if reduced:
        xs = [p.position for p in reduced]
        ys = [p.depth for p in reduced]
        plt.step(xs, ys, where="post", linewidth=1.0, label="Reduced depth")
        plt.fill_between(xs, ys, step="post", alpha=0.25)
    if reserved:
        plt.scatter(
            [p.position for p in reserved],
            [p.depth for p in reserved],
            color="tab:red",
            marker="o",
            s=18,
            zorder=3,
            label="Specific positions",
        )
    if reduced or reserved:
        plt.legend(loc="upper right", fontsize="small")
    else:
        logger.warning("No points to plot for %s", out_png)

    plt.xlabel("Position")
    plt.ylabel("Depth")
    plt.title(title)
    plt.tight_layout()
    plt.savefig(out_png, dpi=160)
    plt.close()
