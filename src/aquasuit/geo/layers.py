#!/usr/bin/env python3
"""layers.py

One-time setup of the environmental layers shared by every species query.

prepare_layers():
1. Mean of the yearly SST stack, converted to °C (Kelvin by default)
2. Check bathymetry and SST share a CRS
3. Crop bathymetry to the SST extent
4. Nearest-neighbour resample bathymetry onto the SST grid

The returned (depth, temperature) pair is on one grid and can be passed
straight to compute_zone_suitability().
"""

from __future__ import annotations

from typing import Tuple

from aquasuit.config import KELVIN_OFFSET, format_bbox
from aquasuit.errors import CRSMismatchError
from aquasuit.geo.align import align_to_grid, crop_to
from aquasuit.geo.temporal import reduce_stack
from aquasuit.raster import Raster, RasterStack, require_same_grid


def prepare_layers(
    bathymetry: Raster,
    sst: RasterStack,
    *,
    scale: float = 1.0,
    offset: float = KELVIN_OFFSET,
) -> Tuple[Raster, Raster]:
    """Return (depth, temperature) on the SST grid."""
    temperature = reduce_stack(sst, scale=scale, offset=offset)
    print(f"[LAYERS] Mean SST over {len(sst)} rasters, grid {temperature.shape} {format_bbox(temperature.bounds)}")

    if bathymetry.crs != temperature.crs:
        raise CRSMismatchError(
            f"Bathymetry CRS ({bathymetry.crs}) differs from SST CRS ({temperature.crs}); "
            "reproject one of them first"
        )

    cropped = crop_to(bathymetry, temperature)
    depth = align_to_grid(cropped, temperature)
    require_same_grid(depth, temperature, what="aligned depth and temperature")

    if bathymetry.res != temperature.res:
        print(f"[LAYERS] Resampled bathymetry {bathymetry.res} -> {temperature.res} (nearest)")
    return depth, temperature
