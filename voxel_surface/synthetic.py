"""Synthetic voxel clouds and a plain-Python reference estimator.

Presets:
- single:   one voxel at (size, size + 1, size + 3)
- corners:  8 isolated voxels at the corners of a box with side ``size * 10``
- cube:     solid ``size**3`` block of unit voxels starting at the origin
- ball:     unit voxels inside a sphere of radius ``size``
- scatter:  ``size**3`` random voxels on a grid with spacing 3 (all isolated)

Voxels of the block presets are emitted with the first axis varying slowest,
so results that depend on visit order are reproducible.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from voxel_surface.store import CoordinateStore

SYNTHETIC_PRESETS = ["single", "corners", "cube", "ball", "scatter"]


@dataclass(frozen=True, slots=True)
class VoxelGrid:
    nx: int
    ny: int
    nz: int
    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)

    @property
    def count(self) -> int:
        return int(self.nx) * int(self.ny) * int(self.nz)


def grid_voxels(grid: VoxelGrid) -> np.ndarray:
    """Return (count, 3) centres of a solid block, first axis slowest."""
    if min(grid.nx, grid.ny, grid.nz) < 0:
        raise ValueError(f"grid dimensions must be >= 0, got {grid}")
    ox, oy, oz = (float(v) for v in grid.origin)
    i, j, k = np.meshgrid(
        np.arange(grid.nx, dtype=np.float64) + ox,
        np.arange(grid.ny, dtype=np.float64) + oy,
        np.arange(grid.nz, dtype=np.float64) + oz,
        indexing="ij",
    )
    return np.column_stack([i.ravel(), j.ravel(), k.ravel()])


def from_array(points: np.ndarray) -> CoordinateStore:
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    return CoordinateStore(rl=pts[:, 0], fh=pts[:, 1], ap=pts[:, 2])


def single_voxel(x: float, y: float, z: float) -> CoordinateStore:
    return CoordinateStore.load([(x, y, z)])


def solid_box(nx: int, ny: int, nz: int, *, origin: tuple[float, float, float] = (0.0, 0.0, 0.0)) -> CoordinateStore:
    return from_array(grid_voxels(VoxelGrid(nx=nx, ny=ny, nz=nz, origin=origin)))


def isolated_corners(low: float = 0.0, high: float = 10.0) -> CoordinateStore:
    """8 voxels at every (low|high) combination; isolated when |high - low| != 1."""
    return CoordinateStore.load(list(itertools.product((low, high), repeat=3)))


def ball(radius: float, *, center: tuple[float, float, float] = (0.0, 0.0, 0.0)) -> CoordinateStore:
    """Unit voxels whose centres lie within ``radius`` of ``center``."""
    if radius < 0:
        raise ValueError(f"radius must be >= 0, got {radius}")
    r = int(np.floor(radius))
    offsets = np.arange(-r, r + 1, dtype=np.float64)
    i, j, k = np.meshgrid(offsets, offsets, offsets, indexing="ij")
    inside = (i * i + j * j + k * k) <= float(radius) ** 2
    cx, cy, cz = (float(v) for v in center)
    return from_array(np.column_stack([i[inside] + cx, j[inside] + cy, k[inside] + cz]))


def scattered(count: int, *, spacing: float = 3.0, extent: int = 50, seed: int | None = None) -> CoordinateStore:
    """Random distinct voxels on a ``spacing`` lattice; spacing != 1 keeps them isolated."""
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    if count > extent**3:
        raise ValueError(f"count={count} exceeds the {extent}^3 lattice")
    rng = np.random.default_rng(seed)
    flat = rng.choice(extent**3, size=count, replace=False)
    idx = np.column_stack(np.unravel_index(flat, (extent, extent, extent))).astype(np.float64)
    return from_array(idx * float(spacing))


def shuffled(store: CoordinateStore, *, seed: int | None = None) -> CoordinateStore:
    """Same voxels in a random order (per-voxel triples are kept together)."""
    rng = np.random.default_rng(seed)
    order = rng.permutation(store.size())
    return CoordinateStore(rl=store.rl[order], fh=store.fh[order], ap=store.ap[order])


def generate_synthetic_voxels(preset: str, *, size: int = 3, seed: int | None = None) -> CoordinateStore:
    p = preset.strip().lower()
    if size < 1:
        raise ValueError(f"size must be >= 1, got {size}")
    if p == "single":
        return single_voxel(float(size), float(size + 1), float(size + 3))
    if p == "corners":
        return isolated_corners(0.0, float(size) * 10.0)
    if p == "cube":
        return solid_box(size, size, size)
    if p == "ball":
        return ball(float(size))
    if p == "scatter":
        return scattered(size**3, spacing=3.0, extent=max(size * 2, 2), seed=seed)
    raise ValueError(f"Unknown preset: {preset!r}. Choices: {SYNTHETIC_PRESETS}")


def reference_boundary_area(records: Iterable[Sequence[float]]) -> float:
    """Voxel-by-voxel reference of the boundary area (first-axis pairing).

    Raises IndexError when the fh/ap boundary lists are shorter than rl.
    """
    rows = [tuple(float(v) for v in r) for r in records]
    axes = list(zip(*rows)) if rows else [(), (), ()]
    lists: list[list[float]] = []
    for values in axes:
        present = set(values)
        lists.append([v for v in values if (v - 1) not in present or (v + 1) not in present])

    rl, fh, ap = lists
    area = 0.0
    for i in range(len(rl)):
        x, y, z = abs(rl[i]), abs(fh[i]), abs(ap[i])
        area += 2 * (x * y + y * z + x * z)
    return area
