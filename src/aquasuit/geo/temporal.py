#!/usr/bin/env python3
"""temporal.py

Collapse a multi-year stack of SST rasters into one mean raster.

- mean_stack(): cell-wise mean across the stack, ignoring no-data
- convert_units(): affine value transform (scale * v + offset) on defined cells
- reduce_stack(): both, in that order

A cell that is no-data in every year stays no-data; it never becomes 0.
"""

from __future__ import annotations

import numpy as np

from aquasuit.config import KELVIN_OFFSET
from aquasuit.errors import EmptyStackError
from aquasuit.raster import Raster, RasterStack


def mean_stack(stack: RasterStack) -> Raster:
    """Arithmetic mean per cell over the stack, excluding no-data."""
    if len(stack) == 0:
        raise EmptyStackError("Cannot reduce an empty raster stack")

    values = stack.to_array()
    valid = ~np.isnan(values)
    count = valid.sum(axis=0)
    total = np.where(valid, values, 0.0).sum(axis=0)

    # nanmean would warn on all-NaN cells; divide only where something was defined
    mean = np.full(count.shape, np.nan, dtype=np.float64)
    np.divide(total, count, out=mean, where=count > 0)
    return stack[0].with_data(mean)


def convert_units(raster: Raster, scale: float = 1.0, offset: float = 0.0) -> Raster:
    """Apply scale * value + offset to every defined cell. NaN stays NaN."""
    return raster.with_data(raster.data * scale + offset)


def kelvin_to_celsius(raster: Raster) -> Raster:
    return convert_units(raster, offset=KELVIN_OFFSET)


def reduce_stack(stack: RasterStack, scale: float = 1.0, offset: float = 0.0) -> Raster:
    """Mean over the stack, then unit conversion."""
    return convert_units(mean_stack(stack), scale=scale, offset=offset)
