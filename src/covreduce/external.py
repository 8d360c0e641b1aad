"""Running ``samtools`` as a subprocess.

Reading BAMs normally goes through pysam. ``samtools mpileup`` is only needed
when depths must match the command-line tool exactly, and ``doctor`` asks it
for its version.
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

SAMTOOLS_HINT = (
    "Ubuntu: sudo apt-get install -y samtools\n"
    "Conda/mamba: mamba install -c bioconda samtools"
)


class ExternalCommandError(RuntimeError):
    """Raised when samtools (or another helper command) exits non-zero."""

    def __init__(self, message: str, *, cmd: Sequence[str], returncode: int, stderr: Optional[str] = None) -> None:
        super().__init__(message)
        self.cmd = list(cmd)
        self.returncode = int(returncode)
        self.stderr = stderr


def cmd_to_str(cmd: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(x)) for x in cmd)


def ensure_executable_in_path(exe: str, *, hint: Optional[str] = None) -> None:
    if shutil.which(exe) is None:
        msg = f"Required executable '{exe}' was not found in your PATH."
        if hint:
            msg += "\n\n" + hint
        raise FileNotFoundError(msg)


def run_command(cmd: Sequence[str], *, check: bool = True) -> subprocess.CompletedProcess:
    """Run ``cmd`` with stdout and stderr captured as text.

    With ``check`` a non-zero exit raises ``ExternalCommandError`` carrying
    the tail of the command's stderr.
    """
    logger.debug("Running command: %s", cmd_to_str(cmd))
    cp = subprocess.run([str(x) for x in cmd], check=False, capture_output=True, text=True)

    if check and cp.returncode != 0:
        raise ExternalCommandError(
            f"Command failed (exit code {cp.returncode}): {cmd_to_str(cmd)}\n"
            f"stderr (tail):\n{_tail(cp.stderr)}",
            cmd=cmd,
            returncode=cp.returncode,
            stderr=cp.stderr,
        )
    return cp


def _tail(s: Optional[str], n: int = 3000) -> str:
    if not s:
        return "(empty)"
    return s if len(s) <= n else "..." + s[-n:]


def samtools_mpileup_cmd(
    bam_path: str | Path,
    region: str,
    *,
    ref_fa: Optional[str | Path] = None,
    min_baseq: Optional[int] = None,
) -> list[str]:
    """Build ``samtools mpileup -r <region> [-f ref] [-Q q] <bam>``."""
    cmd = ["samtools", "mpileup", "-r", region]
    if ref_fa is not None:
        cmd += ["-f", str(ref_fa)]
    if min_baseq is not None:
        cmd += ["-Q", str(int(min_baseq))]
    cmd.append(str(bam_path))
    return cmd
