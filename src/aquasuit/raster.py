#!/usr/bin/env python3
"""aquasuit.raster

In-memory raster model shared by every stage of the pipeline.

A Raster is a 2D float64 grid + affine transform + CRS. No-data is NaN,
which keeps it distinct from every numeric value (including 0). Rasters are
immutable: the array is copied on construction and flagged read-only, so
derived rasters are always new values.

Design notes:
- Transforms are rasterio Affine objects (north-up grids: a > 0, e < 0)
- CRS is normalized to pyproj.CRS so it compares cleanly with GeoDataFrame.crs
- "Same grid" means identical shape, transform, and CRS. No tolerance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Tuple

import numpy as np
from pyproj import CRS
from rasterio.transform import Affine

from aquasuit.errors import GridMismatchError


BBox = Tuple[float, float, float, float]


def _as_crs(crs: Any) -> Optional[CRS]:
    """Normalize anything pyproj understands (EPSG string, WKT, rasterio CRS) to pyproj.CRS."""
    if crs is None:
        return None
    if isinstance(crs, CRS):
        return crs
    # rasterio.crs.CRS has to_wkt(); pyproj accepts the WKT
    if hasattr(crs, "to_wkt"):
        return CRS.from_wkt(crs.to_wkt())
    return CRS.from_user_input(crs)


@dataclass(frozen=True, eq=False)
class Raster:
    data: np.ndarray
    transform: Affine
    crs: Optional[CRS] = None

    def __post_init__(self) -> None:
        arr = np.array(self.data, dtype=np.float64, copy=True)
        if arr.ndim != 2:
            raise ValueError(f"Raster data must be 2D, got shape {arr.shape}")
        arr.setflags(write=False)
        object.__setattr__(self, "data", arr)
        object.__setattr__(self, "crs", _as_crs(self.crs))

    # --- Grid geometry ---

    @property
    def shape(self) -> Tuple[int, int]:
        return self.data.shape  # type: ignore[return-value]

    @property
    def height(self) -> int:
        return self.data.shape[0]

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def res(self) -> Tuple[float, float]:
        """(x resolution, y resolution); positive for a north-up grid."""
        return (self.transform.a, -self.transform.e)

    @property
    def bounds(self) -> BBox:
        """(xmin, ymin, xmax, ymax) of the full grid."""
        x0, y0 = self.transform * (0, 0)
        x1, y1 = self.transform * (self.width, self.height)
        return (min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1))

    def same_grid(self, other: "Raster") -> bool:
        return (
            self.shape == other.shape
            and tuple(self.transform) == tuple(other.transform)
            and self.crs == other.crs
        )

    # --- Values ---

    @property
    def valid(self) -> np.ndarray:
        """Boolean mask of defined (non-no-data) cells."""
        return ~np.isnan(self.data)

    def with_data(self, data: np.ndarray) -> "Raster":
        """New raster on the same grid with different cell values."""
        return Raster(data=data, transform=self.transform, crs=self.crs)

    def writable_data(self) -> np.ndarray:
        """A writable copy of the cell values (rasterio's Cython routines reject read-only buffers)."""
        return np.array(self.data, copy=True)


def require_same_grid(a: Raster, b: Raster, what: str = "rasters") -> None:
    """Raise GridMismatchError unless a and b share grid geometry."""
    if a.same_grid(b):
        return
    problems = []
    if a.shape != b.shape:
        problems.append(f"shape {a.shape} != {b.shape}")
    if tuple(a.transform) != tuple(b.transform):
        problems.append(f"transform {tuple(a.transform)[:6]} != {tuple(b.transform)[:6]}")
    if a.crs != b.crs:
        problems.append(f"crs {_crs_label(a.crs)} != {_crs_label(b.crs)}")
    raise GridMismatchError(f"{what} are not on the same grid: " + "; ".join(problems))


def _crs_label(crs: Optional[CRS]) -> str:
    if crs is None:
        return "None"
    return crs.to_string()


@dataclass(frozen=True)
class RasterStack:
    """Ordered sequence of rasters on one grid (e.g. one per year)."""

    rasters: Tuple[Raster, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        rasters = tuple(self.rasters)
        object.__setattr__(self, "rasters", rasters)
        for i, r in enumerate(rasters[1:], start=1):
            require_same_grid(rasters[0], r, what=f"stack members 0 and {i}")

    @classmethod
    def of(cls, rasters: Iterable[Raster]) -> "RasterStack":
        return cls(tuple(rasters))

    def __len__(self) -> int:
        return len(self.rasters)

    def __iter__(self):
        return iter(self.rasters)

    def __getitem__(self, i: int) -> Raster:
        return self.rasters[i]

    def to_array(self) -> np.ndarray:
        """(N, rows, cols) array of the stacked values."""
        return np.stack([r.data for r in self.rasters], axis=0)
