from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .coverage import summarize_coverage
from .doctor import collect_checks
from .external import ExternalCommandError, cmd_to_str, samtools_mpileup_cmd
from .models import DepthPoint, Region
from .output import format_points_text, result_to_jsonable
from .pileup import pileup_points_from_bam, read_pileup, samtools_mpileup_points
from .plotting import plot_coverage
from .regions import parse_keep_positions, parse_region
from .report import render_report
from .toy_data import make_toy_data
from .utils import ensure_outdir, write_json


def _setup_logging(verbosity: int, *, logfile: Optional[Path] = None) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    log_fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    logging.basicConfig(level=level, format=log_fmt, stream=sys.stderr)

    if logfile is not None:
        logfile.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(logfile)
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(log_fmt))
        logging.getLogger().addHandler(fh)


def _path_exists(p: str) -> str:
    if p != "-" and not Path(p).exists():
        raise argparse.ArgumentTypeError(f"Path does not exist: {p}")
    return p


def _log_path(outdir: Path, name: str) -> Path:
    return outdir / "logs" / name


def _handle_error(err: Exception, *, log_path: Optional[Path] = None) -> int:
    if isinstance(err, ExternalCommandError):
        msg = str(err)
    else:
        msg = f"{err.__class__.__name__}: {err}"

    sys.stderr.write(msg + "\n")
    if log_path is not None:
        sys.stderr.write(f"See log: {log_path}\n")
    return 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="covreduce",
        description=(
            "CovReduce: reduce per-base pileup coverage over a region to a bounded number of "
            "points for plotting, keeping exact depths at selected positions."
        ),
    )
    p.add_argument("--version", action="version", version=f"covreduce {__version__}")

    sub = p.add_subparsers(dest="cmd", required=True)

    # -----------------
    # quickstart
    # -----------------
    sub.add_parser(
        "quickstart",
        help="Print ready-to-run recipes for common scenarios.",
    )

    # -----------------
    # make-toy-data
    # -----------------
    t = sub.add_parser(
        "make-toy-data",
        help="Generate a tiny reference, BAM, and pileup for demos/tests.",
    )
    t.add_argument("--outdir", required=True, help="Output directory for toy data.")
    t.add_argument("--dry-run", action="store_true", help="Validate paths without writing files.")

    # -----------------
    # reduce
    # -----------------
    r = sub.add_parser(
        "reduce",
        help="Reduce pileup coverage over a region, keeping exact depth at selected positions.",
    )
    src = r.add_mutually_exclusive_group(required=True)
    src.add_argument(
        "--pileup",
        type=_path_exists,
        help="samtools mpileup output (.txt/.gz), or '-' to read stdin.",
    )
    src.add_argument("--bam", type=_path_exists, help="Sorted, indexed BAM to pile up directly.")
    r.add_argument(
        "--region",
        required=True,
        help="Region to reduce as contig:start:end (zero-based start), e.g. 13:130000:150000.",
    )
    r.add_argument(
        "--keep",
        default=None,
        help=(
            "Comma-separated positions to report exactly, each as contig:start:end, "
            "e.g. 13:130044:130045,13:140042:140043."
        ),
    )
    r.add_argument(
        "--max-points",
        type=int,
        default=1000,
        help="Maximum number of reduced points (<=1 disables reduction).",
    )
    r.add_argument(
        "--engine",
        choices=["pysam", "samtools"],
        default="pysam",
        help="How to pile up --bam input (samtools must be in PATH for 'samtools').",
    )
    r.add_argument("--ref", type=_path_exists, default=None, help="Reference FASTA (samtools engine only).")
    r.add_argument("--min-baseq", type=int, default=13, help="Minimum base quality counted toward depth (BAM input).")
    r.add_argument("--out", default=None, help="Write the points to this file instead of stdout.")
    r.add_argument(
        "--outdir",
        default=None,
        help="Also write coverage.txt, summary.json, plots/coverage.png and report.html here.",
    )
    r.add_argument("--progress", action="store_true", help="Show a progress bar while piling up a BAM.")
    r.add_argument("--dry-run", action="store_true", help="Validate inputs and print planned outputs.")
    r.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v/-vv).")

    # -----------------
    # doctor
    # -----------------
    d = sub.add_parser(
        "doctor",
        help="Check your environment for pysam and samtools.",
    )
    d.add_argument("--dry-run", action="store_true", help="Print checks without exiting nonzero.")
    d.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v/-vv).")

    return p


# -----------------
# Command handlers
# -----------------

def cmd_quickstart() -> int:
    lines = [
        "CovReduce quickstart (copy/paste):",
        "",
        "1) samtools mpileup output on stdin (classic usage):",
        "   samtools mpileup -r 13:130001-150000 sample.bam | covreduce reduce \\",
        "     --pileup - \\",
        "     --region 13:130000:150000 \\",
        "     --keep 13:130044:130045,13:140042:140043 \\",
        "     --max-points 1000",
        "",
        "2) BAM directly, with plot and HTML report:",
        "   covreduce reduce \\",
        "     --bam sample.bam \\",
        "     --region 13:130000:150000 \\",
        "     --outdir results/",
        "   Outputs: results/report.html, results/coverage.txt, results/summary.json",
        "",
        "3) Try it on toy data:",
        "   covreduce make-toy-data --outdir toy/",
        "   covreduce reduce --pileup toy/sample.pileup --region chr1:0:1000 --max-points 100",
        "",
        "Tip: use --dry-run to validate inputs and print the planned outputs.",
    ]
    print("\n".join(lines))
    return 0


def cmd_make_toy_data(args: argparse.Namespace) -> int:
    outdir = Path(args.outdir).expanduser().resolve()
    if args.dry_run:
        print(f"Would write toy data into: {outdir}")
        return 0

    summary = make_toy_data(outdir=outdir)
    print(json.dumps(summary, indent=2))
    return 0


def _load_points(args: argparse.Namespace, region: Region) -> List[DepthPoint]:
    if args.pileup is not None:
        return read_pileup(args.pileup)
    if args.engine == "samtools":
        return samtools_mpileup_points(args.bam, region, ref_fa=args.ref, min_baseq=int(args.min_baseq))
    return pileup_points_from_bam(
        args.bam,
        region,
        min_baseq=int(args.min_baseq),
        progress=bool(args.progress),
    )


def cmd_reduce(args: argparse.Namespace) -> int:
    outdir = Path(args.outdir).expanduser().resolve() if args.outdir else None
    log_path = _log_path(outdir, "reduce.log") if outdir is not None and not args.dry_run else None
    _setup_logging(args.verbose, logfile=log_path)

    logger = logging.getLogger("covreduce")
    logger.info("covreduce %s", __version__)

    try:
        region = parse_region(args.region)
        keep = parse_keep_positions(args.keep, contig=region.contig)
        source = args.pileup if args.pileup is not None else args.bam

        if args.dry_run:
            print("Dry-run: inputs look OK.")
            print(f"Region: {region} (span {region.span})")
            print(f"Specific positions: {len(keep)}")
            print(f"Max points: {args.max_points}")
            if args.bam is not None and args.engine == "samtools":
                print("Planned command:")
                cmd = samtools_mpileup_cmd(args.bam, region.samtools_region(), ref_fa=args.ref, min_baseq=args.min_baseq)
                print("  " + cmd_to_str(cmd))
            print("Planned outputs:")
            print(f"  points -> {args.out or 'stdout'}")
            if outdir is not None:
                for name in ["coverage.txt", "summary.json", "plots/coverage.png", "report.html"]:
                    print(f"  {name} -> {outdir / name}")
            return 0

        points = _load_points(args, region)
        result = summarize_coverage(points, region, keep, int(args.max_points))

        stats = result.stats
        logger.info(
            "Read %d points: %d specific, %d reduced to %d",
            stats["points_in"],
            stats["points_reserved"],
            stats["points_remaining"],
            stats["reduced_points"],
        )
        if stats["keep_missing"] > 0:
            logger.warning(
                "%d of %d specific positions were not reported: one had no pileup record, "
                "so it and any later ones were left in the reduction.",
                stats["keep_missing"],
                stats["keep_requested"],
            )
        if stats["passthrough"]:
            logger.info("No reduction applied (max points %d, series length %d).", args.max_points, stats["dense_size"])

        text = format_points_text(result)
        if args.out:
            Path(args.out).write_text(text, encoding="utf-8")
        elif outdir is None:
            sys.stdout.write(text)

        if outdir is not None:
            outdir = ensure_outdir(outdir)
            (outdir / "coverage.txt").write_text(text, encoding="utf-8")
            write_json(outdir / "summary.json", result_to_jsonable(result, region=region, keep=keep))

            plot_png = outdir / "plots" / "coverage.png"
            plot_coverage(
                reduced=result.reduced,
                reserved=result.reserved,
                out_png=plot_png,
                title=f"Coverage {region}",
            )
            report_path = render_report(
                outdir=outdir,
                version=__version__,
                region=region,
                result=result,
                source=str(source),
                plots={"coverage": str(Path("plots") / plot_png.name)},
                outputs=["coverage.txt", "summary.json", "plots/coverage.png"],
            )
            logger.info("Report written: %s", report_path)
            print(str(report_path))
        return 0
    except Exception as e:
        return _handle_error(e, log_path=log_path)


def cmd_doctor(args: argparse.Namespace) -> int:
    _setup_logging(args.verbose, logfile=None)

    checks = collect_checks()

    lines = []
    ok_all = True
    for name in ["python", "pysam", "samtools"]:
        r = checks[name]
        status = "OK" if r.ok else "MISSING"
        lines.append(f"{name:9s} : {status:7s}  {r.detail}")
        if not r.ok:
            ok_all = False

    print("\n".join(lines))

    for name in ["pysam", "samtools"]:
        r = checks[name]
        if not r.ok and r.howto:
            print("\n---")
            print(f"How to install/fix '{name}':")
            print(r.howto)

    if args.dry_run:
        return 0
    return 0 if ok_all else 1


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.cmd == "quickstart":
        return cmd_quickstart()
    if args.cmd == "make-toy-data":
        return cmd_make_toy_data(args)
    if args.cmd == "reduce":
        return cmd_reduce(args)
    if args.cmd == "doctor":
        return cmd_doctor(args)

    parser.error(f"Unknown command: {args.cmd}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
