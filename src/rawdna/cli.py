from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import MergeConfig, RohConfig, load_config
from .errors import FormatError
from .merger import merge_files
from .models import RohRun
from .readers import read_raw_file
from .report import format_run, render_report, run_to_dict, write_merged_table, write_runs_tsv
from .roh import RunDetector, scan_runs
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


def _log_path(outdir: Path, name: str) -> Path:
    return outdir / "logs" / name


def _handle_error(err: Exception, *, log_path: Optional[Path] = None) -> int:
    sys.stderr.write(f"{err.__class__.__name__}: {err}\n")
    if log_path is not None:
        sys.stderr.write(f"See log: {log_path}\n")
    return 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="rawdna",
        description=(
            "rawdna: merge consumer DNA raw data files (23andMe, AncestryDNA, Genes for Good) "
            "and scan them for runs of homozygosity (ROH)."
        ),
    )
    p.add_argument("--version", action="version", version=f"rawdna {__version__}")

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
        help="Generate small 23andMe and AncestryDNA raw files for demos/tests.",
    )
    t.add_argument("--outdir", required=True, help="Output directory for toy data.")
    t.add_argument("--dry-run", action="store_true", help="Validate paths without writing files.")

    # -----------------
    # merge
    # -----------------
    m = sub.add_parser(
        "merge",
        help="Merge raw files of one person into a single 23andMe-format file.",
    )
    m.add_argument("files", nargs="+", help="Raw data files (.txt or .txt.gz), in merge order.")
    m.add_argument("--out", default=None, help="Write the merged file here (default: stdout).")
    m.add_argument("--summary-json", default=None, help="Optional path for a JSON merge summary.")
    m.add_argument("--progress", action="store_true", help="Show progress bars on stderr.")
    m.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v/-vv).")

    # -----------------
    # roh
    # -----------------
    r = sub.add_parser(
        "roh",
        help="Report runs of homozygosity and no-call runs in one raw file.",
    )
    r.add_argument("-f", "--file", default=None, help="Input raw (unzipped or .gz) DNA file.")
    r.add_argument(
        "-l",
        "--length",
        type=int,
        default=None,
        help="Min length of ROHs to report (default: 200).",
    )
    r.add_argument(
        "-n",
        "--no-call-length",
        type=int,
        default=None,
        help="Min length of no-call runs to report (default: 10).",
    )
    r.add_argument(
        "-t",
        "--treat-no-calls",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Treat no-calls as homozygous when finding ROHs (default: yes).",
    )
    r.add_argument(
        "-i",
        "--treat-homo",
        type=int,
        default=None,
        help=(
            "Treat as homozygous any heterozygous SNP that is more than COUNT SNPs away "
            "from its nearest heterozygous SNP (default: 150)."
        ),
    )
    r.add_argument("--config", default=None, help="TOML file with a [roh] table of settings.")
    r.add_argument(
        "--outdir",
        default=None,
        help="Also write runs.tsv, summary.json and report.html into this directory.",
    )
    r.add_argument("--progress", action="store_true", help="Show a progress bar on stderr.")
    r.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v/-vv).")

    return p


# -----------------
# Command handlers
# -----------------

def cmd_quickstart() -> int:
    lines = [
        "rawdna quickstart (copy/paste):",
        "",
        "1) Merge raw files of one person (23andMe format out):",
        "   rawdna merge AncestryDNA.txt genome_John_Doe_v4_Full.txt > merged_raw.txt",
        "   Conflicting calls and the intersection count are printed to stderr.",
        "",
        "2) Scan one file for runs of homozygosity:",
        "   rawdna roh --file merged_raw.txt",
        "",
        "3) Stricter scan with an HTML report:",
        "   rawdna roh --file merged_raw.txt --length 400 --no-treat-no-calls --outdir roh_run/",
        "   Outputs: roh_run/report.html, roh_run/runs.tsv, roh_run/summary.json",
        "",
        "Tip: rawdna make-toy-data --outdir toy/ writes small example inputs.",
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


def cmd_merge(args: argparse.Namespace) -> int:
    _setup_logging(args.verbose, logfile=None)
    logger = logging.getLogger("rawdna")
    logger.info("rawdna %s", __version__)

    try:
        config = MergeConfig(input_files=[Path(f) for f in args.files]).validate()
        result = merge_files(config.input_files, progress=bool(args.progress))

        if len(result.failed_files) == len(config.input_files):
            raise FormatError("None of the input files could be read")

        if args.out is not None:
            out_path = Path(args.out).expanduser()
            out_path.parent.mkdir(parents=True, exist_ok=True)
            with open(out_path, "wt", encoding="utf-8") as fh:
                write_merged_table(result, fh)
        else:
            write_merged_table(result, sys.stdout)

        sys.stderr.write(f"{result.intersections} intersections found.\n")

        if args.summary_json is not None:
            write_json(
                args.summary_json,
                {
                    "inputs": [str(p) for p in config.input_files],
                    "counts": result.counts,
                    "intersections": result.intersections,
                    "conflicts": len(result.conflicts),
                    "failed_files": result.failed_files,
                    "merged_snps": result.total_records,
                },
            )
        return 0
    except Exception as e:
        return _handle_error(e)


def _resolve_roh_config(args: argparse.Namespace) -> RohConfig:
    config = load_config(args.config) if args.config else RohConfig()
    config = config.with_overrides(
        {
            "length_threshold": args.length,
            "no_call_threshold": args.no_call_length,
            "treat_no_calls_as_homozygous": args.treat_no_calls,
            "min_to_ignore_heterozygous": args.treat_homo,
            "input_file": args.file,
        }
    )
    return config.validate()


def cmd_roh(args: argparse.Namespace) -> int:
    outdir = Path(args.outdir).expanduser().resolve() if args.outdir else None
    log_path = _log_path(outdir, "roh.log") if outdir is not None else None
    _setup_logging(args.verbose, logfile=log_path)

    logger = logging.getLogger("rawdna")
    logger.info("rawdna %s", __version__)

    try:
        config = _resolve_roh_config(args)

        print(f"File to be processed: {config.input_file}")
        print(f"ROHs of length at least {config.length_threshold} will be reported.")
        print(f"No-call runs of length at least {config.no_call_threshold} will be reported.")
        if config.treat_no_calls_as_homozygous:
            print("No-Calls will be treated as homozygous.")
        print(
            "Heterozygous SNPs that are at least "
            f"{config.min_to_ignore_heterozygous} SNPs away from the nearest heterozygous SNP "
            "will be treated as homozygous."
        )

        source, records = read_raw_file(config.input_file)
        print(f"File was detected as {source}")

        detector = RunDetector(config)
        runs: List[RohRun] = []
        for run in scan_runs(records, detector=detector, progress=bool(args.progress)):
            print(format_run(run))
            runs.append(run)

        if outdir is not None:
            outdir = ensure_outdir(outdir)
            settings = {
                "length_threshold": config.length_threshold,
                "no_call_threshold": config.no_call_threshold,
                "treat_no_calls_as_homozygous": config.treat_no_calls_as_homozygous,
                "min_to_ignore_heterozygous": config.min_to_ignore_heterozygous,
            }
            write_runs_tsv(runs, outdir / "runs.tsv")
            write_json(
                outdir / "summary.json",
                {
                    "input_file": str(config.input_file),
                    "source": source,
                    "settings": settings,
                    "snps_scanned": len(records),
                    "ordering_warnings": detector.warnings,
                    "runs": [run_to_dict(r) for r in runs],
                },
            )
            render_report(
                outdir=outdir,
                version=__version__,
                input_file=str(config.input_file),
                source=source,
                settings=settings,
                runs=runs,
                snps_scanned=len(records),
                ordering_warnings=detector.warnings,
            )
        return 0
    except Exception as e:
        return _handle_error(e, log_path=log_path)


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.cmd == "quickstart":
        return cmd_quickstart()
    if args.cmd == "make-toy-data":
        return cmd_make_toy_data(args)
    if args.cmd == "merge":
        return cmd_merge(args)
    if args.cmd == "roh":
        return cmd_roh(args)

    parser.error(f"Unknown command: {args.cmd}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
