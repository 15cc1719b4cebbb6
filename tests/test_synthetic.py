from __future__ import annotations

import numpy as np
import pytest

from voxel_surface.methods import compute_boundary_surface
from voxel_surface.synthetic import (
    SYNTHETIC_PRESETS,
    VoxelGrid,
    ball,
    generate_synthetic_voxels,
    grid_voxels,
    reference_boundary_area,
    shuffled,
    solid_box,
)


def test_grid_voxels_first_axis_slowest() -> None:
    pts = grid_voxels(VoxelGrid(nx=2, ny=2, nz=2, origin=(1.0, 0.0, 0.0)))
    assert pts.shape == (8, 3)
    assert pts[:4, 0].tolist() == [1.0] * 4
    assert pts[:, 2].tolist() == [0.0, 1.0] * 4


def test_ball_is_symmetric() -> None:
    store = ball(3.0)
    assert store.size() == 123
    r = compute_boundary_surface(store, mismatch_policy="strict")
    assert r.boundary_counts["rl"] == r.boundary_counts["fh"] == r.boundary_counts["ap"]


def test_flat_slab_is_boundary_on_thin_axis() -> None:
    store = solid_box(4, 4, 1)
    r = compute_boundary_surface(store, mismatch_policy="min")
    assert r.boundary_counts["ap"] == 16
    assert r.boundary_counts["rl"] == 8


@pytest.mark.parametrize("preset", SYNTHETIC_PRESETS)
def test_presets_agree_with_reference_loop(preset: str) -> None:
    store = generate_synthetic_voxels(preset, size=2, seed=3)
    assert store.size() > 0

    r = compute_boundary_surface(store, mismatch_policy="first_axis")
    ref = reference_boundary_area(store.records())
    assert abs(r.area - ref) <= 1e-9 * max(ref, 1.0)


def test_single_preset_matches_known_area() -> None:
    store = generate_synthetic_voxels("single", size=2)
    assert store.records().tolist() == [[2.0, 3.0, 5.0]]
    assert reference_boundary_area(store.records()) == 62.0


def test_shuffled_keeps_voxel_triples() -> None:
    store = solid_box(3, 2, 2, origin=(0.0, 10.0, 20.0))
    mixed = shuffled(store, seed=0)
    a = {tuple(r) for r in store.records().tolist()}
    b = {tuple(r) for r in mixed.records().tolist()}
    assert a == b
    assert mixed.size() == store.size()


def test_unknown_preset_rejected() -> None:
    with pytest.raises(ValueError):
        generate_synthetic_voxels("torus")
    with pytest.raises(ValueError):
        generate_synthetic_voxels("cube", size=0)


def test_reference_handles_empty_input() -> None:
    assert reference_boundary_area(np.zeros((0, 3))) == 0.0
