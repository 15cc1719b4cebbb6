"""Surface area estimation from voxel centre coordinates.

This package provides a boundary-voxel surface area estimator and a CLI to:
- read a segmented structure as one "<rl>, <fh>, <ap>" voxel per line
- detect boundary voxels independently per axis
- sum a box-surface contribution per boundary voxel
- export diagnostics as CSV/JSON and plots

Run `python -m voxel_surface --help` for usage.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
