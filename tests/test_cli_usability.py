import json
import subprocess
import sys
from pathlib import Path
from typing import Optional

from covreduce.toy_data import make_toy_data


def _run_cli(args: list[str], stdin: Optional[str] = None) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-m", "covreduce"] + args,
        check=False,
        capture_output=True,
        text=True,
        input=stdin,
    )


def _pileup_text() -> str:
    rows = [(1, 4), (2, 6), (3, 50), (4, 8), (5, 10)]
    lines = ["[mpileup] 1 samples in 1 input files"]
    lines += [f"chr1\t{pos}\tA\t{depth}\t.\tI" for pos, depth in rows]
    return "\n".join(lines) + "\n"


def test_quickstart_output() -> None:
    cp = _run_cli(["quickstart"])
    assert cp.returncode == 0
    assert "covreduce reduce" in cp.stdout
    assert "covreduce make-toy-data" in cp.stdout


def test_reduce_passthrough_from_file(tmp_path: Path) -> None:
    pileup = tmp_path / "sample.pileup"
    pileup.write_text(_pileup_text(), encoding="utf-8")

    cp = _run_cli(
        [
            "reduce",
            "--pileup",
            str(pileup),
            "--region",
            "chr1:0:10",
            "--keep",
            "chr1:2:3",
            "--max-points",
            "1",
        ]
    )
    assert cp.returncode == 0, cp.stderr
    assert cp.stdout == "#specific_points\n3\t50\n#reduced_points\n1\t4\n2\t6\n4\t8\n5\t10\n"


def test_reduce_windows_from_stdin() -> None:
    cp = _run_cli(
        ["reduce", "--pileup", "-", "--region", "chr1:0:9", "--keep", "chr1:2:3", "--max-points", "3"],
        stdin=_pileup_text(),
    )
    assert cp.returncode == 0, cp.stderr
    # dense series 0..10 -> windows of 4, 4, 3; position 3 is reserved and counts as 0
    assert cp.stdout == "#specific_points\n3\t50\n#reduced_points\n0\t2\n4\t4\n8\t0\n"


def test_reduce_invalid_region() -> None:
    cp = _run_cli(["reduce", "--pileup", "-", "--region", "chr1:10:5"], stdin=_pileup_text())
    assert cp.returncode == 2
    assert "InvalidRegion" in cp.stderr


def test_reduce_dry_run_does_not_write_outputs(tmp_path: Path) -> None:
    toy = make_toy_data(outdir=tmp_path / "toy")
    outdir = tmp_path / "out"
    cp = _run_cli(
        [
            "reduce",
            "--bam",
            toy["bam"],
            "--region",
            toy["region"],
            "--engine",
            "samtools",
            "--outdir",
            str(outdir),
            "--dry-run",
        ]
    )
    assert cp.returncode == 0
    assert "Dry-run" in cp.stdout
    assert "samtools mpileup -r chr1:1-1000" in cp.stdout
    assert not outdir.exists()


def test_make_toy_data_and_reduce(tmp_path: Path) -> None:
    toy_dir = tmp_path / "toy"
    cp = _run_cli(["make-toy-data", "--outdir", str(toy_dir)])
    assert cp.returncode == 0
    toy = json.loads(cp.stdout)

    outdir = tmp_path / "out"
    cp = _run_cli(
        [
            "reduce",
            "--bam",
            toy["bam"],
            "--region",
            toy["region"],
            "--keep",
            toy["keep"],
            "--max-points",
            "100",
            "--min-baseq",
            "0",
            "--outdir",
            str(outdir),
        ]
    )
    assert cp.returncode == 0, cp.stderr
    assert (outdir / "report.html").exists()
    assert (outdir / "plots" / "coverage.png").exists()

    summary = json.loads((outdir / "summary.json").read_text(encoding="utf-8"))
    assert summary["stats"]["points_reserved"] == 2
    assert summary["stats"]["reduced_points"] == 100
    assert summary["specific_points"] == [
        {"position": 121, "depth": 20},
        {"position": 641, "depth": 9},
    ]

    text = (outdir / "coverage.txt").read_text(encoding="utf-8")
    assert text.startswith("#specific_points\n121\t20\n641\t9\n#reduced_points\n")


def test_missing_keep_position_warns(tmp_path: Path) -> None:
    pileup = tmp_path / "sample.pileup"
    pileup.write_text(_pileup_text(), encoding="utf-8")
    cp = _run_cli(
        ["reduce", "--pileup", str(pileup), "--region", "chr1:0:10", "--keep", "chr1:8:9", "--max-points", "1"]
    )
    assert cp.returncode == 0
    assert "#specific_points\n#reduced_points\n" in cp.stdout
    assert "had no pileup record" in cp.stderr


def test_doctor_dry_run() -> None:
    cp = _run_cli(["doctor", "--dry-run"])
    assert cp.returncode == 0
    assert "pysam" in cp.stdout
    assert "samtools" in cp.stdout
