"""Coordinate store: three positionally aligned per-axis coordinate sequences."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Literal, Sequence

import numpy as np
import pandas as pd

Axis = Literal["rl", "fh", "ap"]

AXES: tuple[Axis, Axis, Axis] = ("rl", "fh", "ap")


class MalformedRecordError(ValueError):
    """A voxel record does not hold exactly three finite real values."""

    def __init__(
        self,
        reason: str,
        *,
        index: int | None = None,
        line_number: int | None = None,
        line: str | None = None,
    ) -> None:
        self.reason = reason
        self.index = index
        self.line_number = line_number
        self.line = line
        if line_number is not None:
            message = f"line {line_number}: {reason}"
            if line is not None:
                message = f"{message} (got {line!r})"
        elif index is not None:
            message = f"record {index}: {reason}"
        else:
            message = reason
        super().__init__(message)


def _parse_real(value: Any, *, index: int) -> float:
    if isinstance(value, bool):
        raise MalformedRecordError(f"boolean is not a coordinate: {value!r}", index=index)
    if isinstance(value, str) and "_" in value:
        raise MalformedRecordError(f"not a real number: {value!r}", index=index)
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise MalformedRecordError(f"not a real number: {value!r}", index=index) from None
    if not math.isfinite(v):
        raise MalformedRecordError(f"coordinate must be finite, got {value!r}", index=index)
    return v


def _readonly(values: np.ndarray) -> np.ndarray:
    out = np.array(values, dtype=np.float64, copy=True).reshape(-1)
    out.setflags(write=False)
    return out


@dataclass(frozen=True, slots=True, eq=False)
class CoordinateStore:
    """Voxel centre coordinates, one entry per voxel id on each axis.

    Index ``i`` refers to the same voxel in ``rl``, ``fh`` and ``ap``.
    Arrays are float64 and read-only.
    """

    rl: np.ndarray
    fh: np.ndarray
    ap: np.ndarray

    def __post_init__(self) -> None:
        rl = _readonly(self.rl)
        fh = _readonly(self.fh)
        ap = _readonly(self.ap)
        if not (rl.size == fh.size == ap.size):
            raise ValueError(
                f"axis sequences must have equal length, got rl={rl.size}, fh={fh.size}, ap={ap.size}"
            )
        object.__setattr__(self, "rl", rl)
        object.__setattr__(self, "fh", fh)
        object.__setattr__(self, "ap", ap)

    @classmethod
    def load(cls, records: Iterable[Sequence[Any]]) -> CoordinateStore:
        """Build a store from ``(rl, fh, ap)`` records (numbers or numeric strings)."""
        rl: list[float] = []
        fh: list[float] = []
        ap: list[float] = []
        for i, rec in enumerate(records):
            if isinstance(rec, (str, bytes)):
                raise MalformedRecordError(f"expected 3 fields, got a string {rec!r}", index=i)
            try:
                fields = list(rec)
            except TypeError:
                raise MalformedRecordError(f"expected 3 fields, got {rec!r}", index=i) from None
            if len(fields) != 3:
                raise MalformedRecordError(f"expected 3 fields, got {len(fields)}", index=i)
            rl.append(_parse_real(fields[0], index=i))
            fh.append(_parse_real(fields[1], index=i))
            ap.append(_parse_real(fields[2], index=i))
        return cls(rl=np.asarray(rl), fh=np.asarray(fh), ap=np.asarray(ap))

    @classmethod
    def empty(cls) -> CoordinateStore:
        return cls(rl=np.zeros(0), fh=np.zeros(0), ap=np.zeros(0))

    def size(self) -> int:
        return int(self.rl.size)

    def __len__(self) -> int:
        return self.size()

    def axis_values(self, axis: Axis | int) -> np.ndarray:
        """Return one axis' coordinates in load order."""
        if isinstance(axis, int) and not isinstance(axis, bool):
            if not 0 <= axis < len(AXES):
                raise ValueError(f"axis index must be 0, 1 or 2, got {axis}")
            axis = AXES[axis]
        name = str(axis).strip().lower()
        if name == "rl":
            return self.rl
        if name == "fh":
            return self.fh
        if name == "ap":
            return self.ap
        raise ValueError(f"Unknown axis: {axis!r} (use rl|fh|ap)")

    def records(self) -> np.ndarray:
        """Return an (N, 3) float64 array of ``(rl, fh, ap)`` rows."""
        return np.column_stack([self.rl, self.fh, self.ap]) if self.size() else np.zeros((0, 3))

    def to_frame(self) -> pd.DataFrame:
        """Voxels as a DataFrame with columns ``rl``, ``fh``, ``ap`` in load order."""
        return pd.DataFrame({"rl": self.rl, "fh": self.fh, "ap": self.ap})


def load(records: Iterable[Sequence[Any]]) -> CoordinateStore:
    return CoordinateStore.load(records)
