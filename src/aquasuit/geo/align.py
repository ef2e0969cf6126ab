#!/usr/bin/env python3
"""align.py

Put a source raster on a reference raster's grid.

Bathymetry and SST come from different products with different extents and
resolutions, so before any cell-wise comparison the bathymetry is:
1. cropped to the SST extent (crop_to), then
2. resampled onto the SST grid by nearest neighbour (align_to_grid).

Both functions are pure. CRS agreement between source and reference is
checked by the caller (see aquasuit.geo.layers), not here.
"""

from __future__ import annotations

import math

import numpy as np
from rasterio.warp import Resampling, reproject
from rasterio.windows import Window, from_bounds
from rasterio.windows import transform as window_transform

from aquasuit.errors import CRSMismatchError, GridMismatchError
from aquasuit.raster import Raster


def _check_reference(reference: Raster) -> None:
    if reference.height == 0 or reference.width == 0:
        raise GridMismatchError(f"Reference grid has zero area (shape={reference.shape})")
    xres, yres = reference.res
    if not (xres > 0 and yres > 0):
        raise GridMismatchError(f"Reference grid has non-positive resolution {reference.res}")


def crop_to(source: Raster, reference: Raster) -> Raster:
    """Crop source to the cells that cover reference's bounds.

    The window is widened to whole cells (floor offsets, ceil ends) so the
    crop never loses a partially covering edge cell.
    """
    win = from_bounds(*reference.bounds, transform=source.transform)

    col0 = max(0, math.floor(win.col_off))
    row0 = max(0, math.floor(win.row_off))
    col1 = min(source.width, math.ceil(win.col_off + win.width))
    row1 = min(source.height, math.ceil(win.row_off + win.height))

    if col1 <= col0 or row1 <= row0:
        raise GridMismatchError(
            f"Source bounds {source.bounds} do not intersect reference bounds {reference.bounds}"
        )

    data = source.data[row0:row1, col0:col1]
    win = Window(col0, row0, col1 - col0, row1 - row0)
    return Raster(data=data, transform=window_transform(win, source.transform), crs=source.crs)


def align_to_grid(source: Raster, reference: Raster) -> Raster:
    """Resample source onto reference's extent, resolution and CRS (nearest neighbour).

    Reference cells that no source cell covers come back as no-data.
    """
    _check_reference(reference)
    if source.crs is None or reference.crs is None:
        raise CRSMismatchError("Both rasters need a CRS before they can be aligned")

    # Start from all no-data; reproject only writes cells it can fill
    out = np.full(reference.shape, np.nan, dtype=np.float64)
    reproject(
        source=source.writable_data(),
        destination=out,
        src_transform=source.transform,
        src_crs=source.crs.to_wkt(),
        src_nodata=np.nan,
        dst_transform=reference.transform,
        dst_crs=reference.crs.to_wkt(),
        dst_nodata=np.nan,
        resampling=Resampling.nearest,
    )
    return Raster(data=out, transform=reference.transform, crs=reference.crs)
