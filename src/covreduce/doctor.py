"""Environment self-checks.

This module powers the ``covreduce doctor`` CLI command.

Reading pileup text and BAMs through pysam needs nothing outside Python.
``samtools`` is only required for ``reduce --engine samtools``.
"""

from __future__ import annotations

import logging
import platform
import shutil
from dataclasses import dataclass
from typing import Dict, Optional

from .external import SAMTOOLS_HINT, run_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckResult:
    name: str
    ok: bool
    detail: str
    howto: Optional[str] = None


def check_python() -> CheckResult:
    v = platform.python_version()
    return CheckResult(name="python", ok=True, detail=f"Python {v}")


def check_pysam() -> CheckResult:
    try:
        import pysam
    except ImportError as e:
        return CheckResult(
            name="pysam",
            ok=False,
            detail=f"not importable: {e}",
            howto="pip install pysam  (or: mamba install -c bioconda pysam)",
        )
    return CheckResult(name="pysam", ok=True, detail=f"pysam {pysam.__version__}")


def check_samtools() -> CheckResult:
    p = shutil.which("samtools")
    if p is None:
        return CheckResult(name="samtools", ok=False, detail="not found in PATH", howto=SAMTOOLS_HINT)
    try:
        cp = run_command(["samtools", "--version"])
    except Exception as e:
        return CheckResult(name="samtools", ok=False, detail=f"samtools present but not usable: {e}", howto=SAMTOOLS_HINT)
    first = cp.stdout.splitlines()[0] if isinstance(cp.stdout, str) and cp.stdout.strip() else p
    return CheckResult(name="samtools", ok=True, detail=first)


def collect_checks() -> Dict[str, CheckResult]:
    """Run all checks and return a mapping name->result."""
    checks: Dict[str, CheckResult] = {}
    checks["python"] = check_python()
    checks["pysam"] = check_pysam()
    checks["samtools"] = check_samtools()
    return checks
