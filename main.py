from __future__ import annotations

from dataclasses import MISSING, dataclass, field
import math
import sys
from pathlib import Path

import voxel_surface.cli as voxel_surface_cli
from voxel_surface.io import DEFAULT_INPUT_NAME


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Run settings used by `python main.py` without arguments.

    The fields are translated into `python -m voxel_surface run ...` arguments.
    """

    input: str = field(
        default=DEFAULT_INPUT_NAME,
        metadata={"help": "Voxel coordinate file, one '<rl>, <fh>, <ap>' per line (working-directory relative)."},
    )
    precision: str = field(
        default="float32",
        metadata={"help": f"Neighbour test arithmetic: {' | '.join(voxel_surface_cli.PRECISION_CHOICES)}."},
    )
    tolerance: float = field(
        default=0.0,
        metadata={"help": "Neighbour match tolerance. 0 => exact equality."},
    )
    mismatch_policy: str = field(
        default="first_axis",
        metadata={"help": f"Boundary list pairing: {' | '.join(voxel_surface_cli.MISMATCH_POLICY_CHOICES)}."},
    )
    outdir: str | None = field(
        default=None,
        metadata={"help": "Optional output directory for run_info.json / boundary_voxels.csv."},
    )
    plots: bool = field(
        default=False,
        metadata={"help": "True => PNG plots into outdir (CLI: --plots)."},
    )

    def validate(self) -> None:
        input_path = Path(self.input)
        if input_path.exists() and input_path.is_dir():
            raise ValueError(f"input must be a file, got directory: {input_path}")

        if self.outdir is not None:
            outdir_path = Path(self.outdir)
            if outdir_path.exists() and not outdir_path.is_dir():
                raise ValueError(f"outdir must be a directory path, got file: {outdir_path}")

        if self.precision not in voxel_surface_cli.PRECISION_CHOICES:
            raise ValueError(f"precision must be one of: {', '.join(voxel_surface_cli.PRECISION_CHOICES)}")
        if self.mismatch_policy not in voxel_surface_cli.MISMATCH_POLICY_CHOICES:
            raise ValueError(
                f"mismatch_policy must be one of: {', '.join(voxel_surface_cli.MISMATCH_POLICY_CHOICES)}"
            )
        if (
            not isinstance(self.tolerance, (int, float))
            or not math.isfinite(float(self.tolerance))
            or float(self.tolerance) < 0
        ):
            raise ValueError(f"tolerance must be a finite number >= 0, got: {self.tolerance!r}")
        if self.plots and self.outdir is None:
            raise ValueError("plots requires outdir")

    def to_argv(self) -> list[str]:
        self.validate()

        argv: list[str] = [
            "run",
            "--input",
            self.input,
            "--precision",
            self.precision,
            "--tolerance",
            f"{float(self.tolerance):g}",
            "--mismatch_policy",
            self.mismatch_policy,
        ]
        if self.outdir is not None:
            argv.extend(["--outdir", self.outdir])
        if self.plots:
            argv.append("--plots")
        return argv


DEFAULT_RUN_CONFIG = RunConfig()


def _print_main_help() -> None:
    print("Usage:")
    print("  python main.py run [--input <path>] [--mismatch_policy ...] [--outdir <dir>] [--plots]")
    print(f"  python main.py              # DEFAULT_RUN_CONFIG ({DEFAULT_INPUT_NAME} in the working directory)")
    print("  python main.py --help")
    print("")
    print("RunConfig fields:")
    for f in RunConfig.__dataclass_fields__.values():  # type: ignore[attr-defined]
        help_text = (f.metadata or {}).get("help", "")
        if f.default is not MISSING:
            default_repr = f.default
        elif f.default_factory is not MISSING:
            default_repr = "<factory>"
        else:
            default_repr = None
        print(f"  - {f.name}: {help_text} (default: {default_repr})")


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    if len(argv) == 1 and argv[0] in {"-h", "--help", "help"}:
        _print_main_help()
        return 0
    if argv:
        return int(voxel_surface_cli.main(argv))

    try:
        return int(voxel_surface_cli.main(DEFAULT_RUN_CONFIG.to_argv()))
    except ValueError as e:
        print(f"Invalid main.py defaults: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
