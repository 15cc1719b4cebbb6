from __future__ import annotations

import argparse
import json
import math
import sys
from datetime import datetime, timezone
from pathlib import Path
from time import perf_counter

from voxel_surface import __version__
from voxel_surface.io import DEFAULT_DELIMITER, DEFAULT_INPUT_NAME, read_voxel_file, write_voxel_file
from voxel_surface.methods import (
    MISMATCH_POLICY_CHOICES,
    PRECISION_CHOICES,
    BoundaryAreaResult,
    BoundaryLengthMismatchError,
    boundary_table,
    compute_boundary_surface,
)
from voxel_surface.progress import ProgressPrinter
from voxel_surface.store import MalformedRecordError
from voxel_surface.synthetic import SYNTHETIC_PRESETS, generate_synthetic_voxels, shuffled

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_FILE_NOT_FOUND = 2
EXIT_MALFORMED = 3
EXIT_MISMATCH = 4
EXIT_UNREADABLE = 5


def format_area(area: float) -> str:
    """One digit after the decimal point, no grouping (e.g. ``1234.5``)."""
    return f"{float(area):.1f}"


def _env_versions() -> dict[str, str]:
    import matplotlib
    import numpy
    import pandas

    return {
        "python": sys.version.replace("\n", " "),
        "voxel_surface": __version__,
        "numpy": numpy.__version__,
        "pandas": pandas.__version__,
        "matplotlib": matplotlib.__version__,
    }


def _result_json(result: BoundaryAreaResult) -> dict:
    return {
        "area": float(result.area),
        "area_formatted": format_area(result.area),
        "voxel_count": int(result.voxel_count),
        "boundary_counts": dict(result.boundary_counts),
        "pairs_summed": int(result.pairs_summed),
        "lengths_equal": bool(result.lengths_equal),
    }


def _write_run_info(outdir: Path, payload: dict) -> Path:
    outdir.mkdir(parents=True, exist_ok=True)
    path = outdir / "run_info.json"
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="python -m voxel_surface", description="Voxel boundary surface area estimator")
    sub = p.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Estimate the surface area of a voxel coordinate file")
    run.add_argument(
        "--input",
        type=Path,
        default=Path(DEFAULT_INPUT_NAME),
        help=f"Voxel coordinate file, one '<rl>, <fh>, <ap>' per line (default: {DEFAULT_INPUT_NAME})",
    )
    run.add_argument("--delimiter", type=str, default=DEFAULT_DELIMITER, help="Field separator (default: ', ')")
    run.add_argument(
        "--precision",
        choices=PRECISION_CHOICES,
        default="float32",
        help="Arithmetic for the +/-1 neighbour test (default: float32, single-precision coordinates)",
    )
    run.add_argument(
        "--tolerance",
        type=float,
        default=0.0,
        help="Neighbour match tolerance; 0 means exact equality (default: 0)",
    )
    run.add_argument(
        "--mismatch_policy",
        choices=MISMATCH_POLICY_CHOICES,
        default="first_axis",
        help="How to pair per-axis boundary lists of different lengths (default: first_axis)",
    )
    run.add_argument("--outdir", type=Path, default=None, help="Optional output directory for run_info.json and CSV")
    run.add_argument("--plots", action="store_true", help="Generate PNG plots (requires --outdir)")
    run.add_argument("--verbose", action="store_true", help="Print timing and diagnostics to stderr")

    synth = sub.add_parser("synth", help="Write a synthetic voxel coordinate file")
    synth.add_argument("--out", required=True, type=Path, help="Output text file path")
    synth.add_argument("--preset", choices=SYNTHETIC_PRESETS, default="ball")
    synth.add_argument("--size", type=int, default=3, help="Preset size parameter (radius, side, ...)")
    synth.add_argument("--seed", type=int, default=None)
    synth.add_argument("--shuffle", action="store_true", help="Randomise voxel order")

    return p


def cmd_run(args: argparse.Namespace) -> int:
    path: Path = args.input
    progress = ProgressPrinter(verbose=bool(args.verbose))

    if not math.isfinite(args.tolerance) or args.tolerance < 0:
        print(f"ERROR: --tolerance must be a finite number >= 0, got {args.tolerance}", file=sys.stderr)
        return EXIT_USAGE
    if args.plots and args.outdir is None:
        print("ERROR: --plots requires --outdir", file=sys.stderr)
        return EXIT_USAGE

    t0 = perf_counter()
    try:
        store = read_voxel_file(path, delimiter=args.delimiter)
    except FileNotFoundError:
        print(f"File not found: {path}", file=sys.stderr)
        return EXIT_FILE_NOT_FOUND
    except MalformedRecordError as e:
        print(f"ERROR: malformed voxel record in {path}: {e}", file=sys.stderr)
        return EXIT_MALFORMED
    except OSError as e:
        print(f"ERROR: cannot read {path}: {e}", file=sys.stderr)
        return EXIT_UNREADABLE
    t_read = perf_counter() - t0
    progress.debug(f"Loaded {store.size()} voxel(s) from: {path} in {t_read:.3f}s")

    def _progress(stage: str, current: int, total: int) -> None:
        progress.update(label=stage, current=current, total=total)

    t0 = perf_counter()
    try:
        result = compute_boundary_surface(
            store,
            precision=args.precision,
            tolerance=float(args.tolerance),
            mismatch_policy=args.mismatch_policy,
            progress=_progress,
        )
    except BoundaryLengthMismatchError as e:
        progress.finish()
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_MISMATCH
    progress.finish()
    t_compute = perf_counter() - t0

    counts = ", ".join(f"{k}={v}" for k, v in result.boundary_counts.items())
    progress.debug(f"Boundary voxels: {counts}; pairs summed: {result.pairs_summed}; {t_compute:.3f}s")
    if not result.lengths_equal:
        progress.log(f"WARNING: per-axis boundary counts differ ({counts}); paired by {result.mismatch_policy}")

    if args.outdir is not None:
        outdir: Path = args.outdir
        run_info = {
            "timestamp_utc": datetime.now(timezone.utc).isoformat(),
            "input": str(path),
            "versions": _env_versions(),
            "params": {
                "delimiter": args.delimiter,
                "precision": result.precision,
                "tolerance": result.tolerance,
                "mismatch_policy": result.mismatch_policy,
            },
            "result": _result_json(result),
            "runtime_sec": {"read": float(t_read), "compute": float(t_compute)},
        }
        info_path = _write_run_info(outdir, run_info)

        df = boundary_table(store, precision=args.precision, tolerance=float(args.tolerance))
        csv_path = outdir / "boundary_voxels.csv"
        df.to_csv(csv_path, index=False)
        progress.log(f"Wrote: {info_path}")
        progress.log(f"Wrote: {csv_path}")

        if args.plots:
            from voxel_surface.plotting import plot_boundary_counts, plot_boundary_projections

            progress.log("Plotting...")
            plot_boundary_counts(result, outdir)
            plot_boundary_projections(df, outdir)
            progress.log(f"Wrote plots to: {outdir}")

    print(format_area(result.area))
    return EXIT_OK


def cmd_synth(args: argparse.Namespace) -> int:
    try:
        store = generate_synthetic_voxels(args.preset, size=int(args.size), seed=args.seed)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_USAGE
    if args.shuffle:
        store = shuffled(store, seed=args.seed)
    out = write_voxel_file(args.out, store)
    print(f"Wrote: {out} ({store.size()} voxels)")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "run":
        return cmd_run(args)
    if args.command == "synth":
        return cmd_synth(args)

    parser.print_help()
    return EXIT_USAGE
