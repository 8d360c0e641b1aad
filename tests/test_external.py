import sys

import pytest

from covreduce.external import ExternalCommandError, run_command, samtools_mpileup_cmd


def test_run_command_captures_stdout():
    cp = run_command([sys.executable, "-c", "print('samtools 1.0')"])
    assert cp.returncode == 0
    assert cp.stdout.strip() == "samtools 1.0"


def test_run_command_raises_with_stderr_tail():
    cmd = [sys.executable, "-c", "import sys; sys.stderr.write('bad region'); sys.exit(3)"]
    with pytest.raises(ExternalCommandError) as excinfo:
        run_command(cmd)
    assert excinfo.value.returncode == 3
    assert excinfo.value.stderr == "bad region"
    assert "bad region" in str(excinfo.value)

    cp = run_command(cmd, check=False)
    assert cp.returncode == 3


def test_samtools_mpileup_cmd():
    assert samtools_mpileup_cmd("x.bam", "13:1-10", min_baseq=13) == [
        "samtools", "mpileup", "-r", "13:1-10", "-Q", "13", "x.bam",
    ]
    assert samtools_mpileup_cmd("x.bam", "13:1-10", ref_fa="ref.fa") == [
        "samtools", "mpileup", "-r", "13:1-10", "-f", "ref.fa", "x.bam",
    ]
