"""Plotting utilities for boundary diagnostics."""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd

from voxel_surface.methods import BoundaryAreaResult
from voxel_surface.store import AXES


def _prep_axes(ax: plt.Axes, title: str, xlabel: str, ylabel: str) -> plt.Axes:
    ax.set_title(title)
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    ax.grid(True, which="both", linestyle="--", linewidth=0.5, alpha=0.6)
    return ax


def plot_boundary_counts(result: BoundaryAreaResult, outdir: str | Path) -> Path:
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(7, 5))
    _prep_axes(ax, f"Boundary voxels per axis (N={result.voxel_count})", "axis", "boundary voxels")
    counts = [result.boundary_counts[a] for a in AXES]
    bars = ax.bar(list(AXES), counts, color=["tab:blue", "tab:orange", "tab:green"])
    ax.axhline(result.pairs_summed, color="black", linestyle=":", linewidth=1.0, label="pairs summed")
    ax.bar_label(bars, labels=[str(c) for c in counts], fontsize=9)
    ax.legend(loc="best", fontsize=9)

    path = outdir / "boundary_counts.png"
    fig.tight_layout()
    fig.savefig(path, dpi=160)
    plt.close(fig)
    return path


def plot_boundary_projections(df: pd.DataFrame, outdir: str | Path) -> Path | None:
    """Scatter the three axis-plane projections, boundary voxels highlighted.

    Expects the columns produced by methods.boundary_table.
    """
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    if df.empty:
        return None

    any_boundary = df["is_rl"] | df["is_fh"] | df["is_ap"]
    inner = df[~any_boundary]
    edge = df[any_boundary]

    fig, axes = plt.subplots(1, 3, figsize=(15, 5))
    for ax, (a, b) in zip(axes, [("rl", "fh"), ("rl", "ap"), ("fh", "ap")]):
        _prep_axes(ax, f"{a} / {b}", a, b)
        if not inner.empty:
            ax.scatter(inner[a], inner[b], s=4, color="lightgray", label="interior")
        ax.scatter(edge[a], edge[b], s=4, color="tab:red", label="boundary")
        ax.set_aspect("equal", adjustable="datalim")
    axes[0].legend(loc="best", fontsize=9)

    path = outdir / "boundary_projections.png"
    fig.tight_layout()
    fig.savefig(path, dpi=160)
    plt.close(fig)
    return path
