#!/usr/bin/env python3

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest
from rasterio.transform import from_origin

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from aquasuit.errors import CRSMismatchError
from aquasuit.geo.layers import prepare_layers
from aquasuit.raster import Raster, RasterStack


def _raster(values, x0, y0, res, crs="EPSG:4326"):
    return Raster(data=np.array(values, dtype=float), transform=from_origin(x0, y0, res, res), crs=crs)


def test_prepare_layers_aligns_bathymetry_to_sst():
    # bathymetry: finer and larger than the SST grid
    bathy = _raster(np.arange(64, dtype=float).reshape(8, 8) * -1, -126.0, 42.0, 0.25)
    sst = RasterStack.of([
        _raster([[283.15, 293.15], [288.15, np.nan]], -125.0, 41.0, 0.5),
        _raster([[285.15, 295.15], [288.15, np.nan]], -125.0, 41.0, 0.5),
    ])

    depth, temp = prepare_layers(bathy, sst)

    assert depth.same_grid(temp)
    assert temp.shape == (2, 2)
    assert temp.data[0, 0] == pytest.approx(11.0)
    assert temp.data[0, 1] == pytest.approx(21.0)
    assert np.isnan(temp.data[1, 1])
    # every depth value comes from the bathymetry raster (nearest neighbour)
    assert set(depth.data.ravel().tolist()) <= set(bathy.data.ravel().tolist())


def test_prepare_layers_celsius_input():
    bathy = _raster([[-10.0]], -125.0, 41.0, 0.5)
    sst = RasterStack.of([_raster([[12.0]], -125.0, 41.0, 0.5)])
    _, temp = prepare_layers(bathy, sst, offset=0.0)
    assert temp.data[0, 0] == pytest.approx(12.0)


def test_prepare_layers_crs_mismatch():
    bathy = _raster([[-10.0]], 0.0, 1000.0, 1000.0, crs="EPSG:6933")
    sst = RasterStack.of([_raster([[283.15]], -125.0, 41.0, 0.5)])
    with pytest.raises(CRSMismatchError):
        prepare_layers(bathy, sst)
