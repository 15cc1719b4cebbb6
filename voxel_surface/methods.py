"""Boundary-voxel surface area estimator.

All computations treat coordinates as lying on a unit grid: the neighbours of a
value ``v`` on an axis are ``v - 1`` and ``v + 1``.

Boundary detection:
- Each axis is handled independently. A voxel is a boundary voxel on an axis if
  ``v - 1`` OR ``v + 1`` is absent from the set of all values on that axis.
  Other axes are ignored, so this is not joint 3D adjacency.
- Neighbour lookup uses exact floating-point equality unless a tolerance is given.
  The default precision is float32: coordinates are rounded to single precision
  and v +/- 1 is evaluated there, as the original program did.

Summation:
- Boundary values of the three axes are paired by position and each triple
  contributes the box surface ``2*(x*y + y*z + x*z)`` with ``x, y, z`` taken as
  absolute coordinate values.
- The three boundary lists are not guaranteed to have equal length; see
  MismatchPolicy.

The original program also rotated a copy of each axis array once per voxel;
the rotated values were never read, so that step is not reproduced here.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Literal

import numpy as np

from voxel_surface.store import AXES, CoordinateStore

ProgressFn = Callable[[str, int, int], None]

Precision = Literal["float32", "float64"]

# first_axis: iterate the rl boundary list, fail if fh/ap are shorter.
# min:        iterate the shortest of the three lists.
# strict:     require equal lengths.
MismatchPolicy = Literal["first_axis", "min", "strict"]

PRECISION_CHOICES = ["float32", "float64"]

MISMATCH_POLICY_CHOICES = ["first_axis", "min", "strict"]


class BoundaryLengthMismatchError(RuntimeError):
    """Per-axis boundary lists cannot be paired under the selected policy."""

    def __init__(self, counts: dict[str, int], policy: str) -> None:
        self.counts = dict(counts)
        self.policy = policy
        detail = ", ".join(f"{k}={v}" for k, v in self.counts.items())
        super().__init__(f"boundary list lengths cannot be paired under policy {policy!r}: {detail}")


@dataclass(frozen=True, slots=True)
class BoundaryAreaResult:
    area: float
    voxel_count: int
    boundary_counts: dict[str, int]
    pairs_summed: int
    mismatch_policy: str
    precision: str
    tolerance: float

    @property
    def lengths_equal(self) -> bool:
        return len(set(self.boundary_counts.values())) <= 1


def _as_precision(values: np.ndarray, precision: Precision) -> np.ndarray:
    p = str(precision).strip().lower()
    if p == "float64":
        return np.asarray(values, dtype=np.float64)
    if p == "float32":
        return np.asarray(values, dtype=np.float32)
    raise ValueError(f"Unsupported precision: {precision!r} (use float32|float64)")


def _has_value_near(sorted_values: np.ndarray, targets: np.ndarray, tolerance: float) -> np.ndarray:
    """For each target, True if some sorted value lies within tolerance of it."""
    n = sorted_values.size
    idx = np.searchsorted(sorted_values, targets)
    lo = np.clip(idx - 1, 0, n - 1)
    hi = np.clip(idx, 0, n - 1)
    d_lo = np.abs(sorted_values[lo].astype(np.float64) - targets.astype(np.float64))
    d_hi = np.abs(sorted_values[hi].astype(np.float64) - targets.astype(np.float64))
    return np.minimum(d_lo, d_hi) <= float(tolerance)


def axis_boundary_mask(values: np.ndarray, *, tolerance: float = 0.0) -> np.ndarray:
    """Per-voxel boundary flags for one axis.

    ``values`` keeps its dtype, so float32 input performs the +/-1 arithmetic
    and the equality test in single precision.
    """
    v = np.asarray(values)
    if v.ndim != 1:
        raise ValueError("values must be 1D")
    if not math.isfinite(tolerance) or tolerance < 0:
        raise ValueError(f"tolerance must be a finite number >= 0, got {tolerance}")
    if v.size == 0:
        return np.zeros(0, dtype=bool)

    one = v.dtype.type(1)
    below = v - one
    above = v + one

    if tolerance == 0:
        has_below = np.isin(below, v)
        has_above = np.isin(above, v)
    else:
        s = np.sort(v)
        has_below = _has_value_near(s, below, tolerance)
        has_above = _has_value_near(s, above, tolerance)

    return ~(has_below & has_above)


def boundary_values(values: np.ndarray, *, tolerance: float = 0.0) -> np.ndarray:
    """Boundary coordinate values of one axis, in voxel order."""
    v = np.asarray(values)
    return v[axis_boundary_mask(v, tolerance=tolerance)]


def _pair_count(counts: dict[str, int], policy: MismatchPolicy) -> int:
    p = str(policy).strip().lower()
    rl, fh, ap = (counts[a] for a in AXES)
    if p == "first_axis":
        if fh < rl or ap < rl:
            raise BoundaryLengthMismatchError(counts, p)
        return rl
    if p == "min":
        return min(rl, fh, ap)
    if p == "strict":
        if not (rl == fh == ap):
            raise BoundaryLengthMismatchError(counts, p)
        return rl
    raise ValueError(f"Unsupported mismatch policy: {policy!r} (use first_axis|min|strict)")


def box_surface_sum(x: np.ndarray, y: np.ndarray, z: np.ndarray) -> float:
    """Sum of ``2*(x*y + y*z + x*z)`` over absolute values, in float64."""
    ax = np.abs(np.asarray(x, dtype=np.float64))
    ay = np.abs(np.asarray(y, dtype=np.float64))
    az = np.abs(np.asarray(z, dtype=np.float64))
    if not (ax.shape == ay.shape == az.shape):
        raise ValueError("x, y and z must have the same shape")
    return float((2.0 * (ax * ay + ay * az + ax * az)).sum(dtype=np.float64))


def compute_boundary_surface(
    store: CoordinateStore,
    *,
    precision: Precision = "float32",
    tolerance: float = 0.0,
    mismatch_policy: MismatchPolicy = "first_axis",
    progress: ProgressFn | None = None,
) -> BoundaryAreaResult:
    """Detect per-axis boundary voxels and sum their box surfaces.

    Returns area 0.0 for an empty store.

    Raises:
      BoundaryLengthMismatchError: the boundary lists cannot be paired under
        ``mismatch_policy``.
    """
    policy = str(mismatch_policy).strip().lower()
    if policy not in MISMATCH_POLICY_CHOICES:
        raise ValueError(f"Unsupported mismatch policy: {mismatch_policy!r} (use first_axis|min|strict)")
    if not math.isfinite(tolerance) or tolerance < 0:
        raise ValueError(f"tolerance must be a finite number >= 0, got {tolerance}")

    n = store.size()
    boundary: dict[str, np.ndarray] = {}
    for i, axis in enumerate(AXES, start=1):
        values = _as_precision(store.axis_values(axis), precision)
        boundary[axis] = boundary_values(values, tolerance=tolerance)
        if progress is not None:
            progress(f"boundary {axis}", i, len(AXES))

    counts = {axis: int(boundary[axis].size) for axis in AXES}
    pairs = _pair_count(counts, policy)

    area = box_surface_sum(
        boundary["rl"][:pairs],
        boundary["fh"][:pairs],
        boundary["ap"][:pairs],
    )
    return BoundaryAreaResult(
        area=area,
        voxel_count=n,
        boundary_counts=counts,
        pairs_summed=int(pairs),
        mismatch_policy=policy,
        precision=str(precision).strip().lower(),
        tolerance=float(tolerance),
    )


def estimate_surface_area(
    store: CoordinateStore,
    *,
    precision: Precision = "float32",
    tolerance: float = 0.0,
    mismatch_policy: MismatchPolicy = "first_axis",
) -> float:
    """Surface area estimate of the voxel set (0.0 when the store is empty)."""
    return compute_boundary_surface(
        store,
        precision=precision,
        tolerance=tolerance,
        mismatch_policy=mismatch_policy,
    ).area


def boundary_table(store: CoordinateStore, *, precision: Precision = "float32", tolerance: float = 0.0):
    """Per-voxel boundary flags as a pandas DataFrame (columns rl, fh, ap, is_rl, is_fh, is_ap)."""
    df = store.to_frame()
    for axis in AXES:
        values = _as_precision(store.axis_values(axis), precision)
        df[f"is_{axis}"] = axis_boundary_mask(values, tolerance=tolerance)
    return df
