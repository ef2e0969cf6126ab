#!/usr/bin/env python3
"""overlay.py

Combine two classified rasters into the final suitability raster.

Strict logical AND: a cell is kept (value 1) only when both inputs are
defined and equal to 1. Everything else, including no-data on either side,
becomes no-data. Unsuitable cells are dropped rather than kept as 0 so the
result can be vectorized directly.
"""

from __future__ import annotations

import numpy as np

from aquasuit.geo.classify import is_binary
from aquasuit.raster import Raster, require_same_grid


def overlay(a: Raster, b: Raster) -> Raster:
    require_same_grid(a, b, what="classified rasters")
    for label, r in (("first", a), ("second", b)):
        if not is_binary(r):
            raise ValueError(f"The {label} overlay input has values other than 0/1; classify it first")

    # NaN == 1 is False, so no-data never survives
    both = (a.data == 1.0) & (b.data == 1.0)
    return a.with_data(np.where(both, 1.0, np.nan))
