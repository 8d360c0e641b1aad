"""CovReduce: downsample pileup coverage for plotting while keeping exact depths at chosen positions.

Public API is intentionally small; most users should use the CLI:

    covreduce reduce --pileup sample.pileup --region 13:130000:150000 --max-points 1000

"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
