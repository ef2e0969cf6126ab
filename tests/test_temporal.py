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

from aquasuit.errors import EmptyStackError, GridMismatchError
from aquasuit.geo.temporal import convert_units, kelvin_to_celsius, mean_stack, reduce_stack
from aquasuit.raster import Raster, RasterStack

NAN = np.nan


def _raster(values, origin=(-125.0, 40.0)):
    return Raster(data=np.array(values, dtype=float), transform=from_origin(*origin, 0.05, 0.05), crs="EPSG:4326")


def test_mean_excludes_nodata():
    stack = RasterStack.of([
        _raster([[280.0, NAN], [NAN, 290.0]]),
        _raster([[290.0, 285.0], [NAN, NAN]]),
        _raster([[300.0, NAN], [NAN, 293.0]]),
    ])
    out = mean_stack(stack)
    assert out.data[0, 0] == pytest.approx(290.0)
    assert out.data[0, 1] == pytest.approx(285.0)
    assert np.isnan(out.data[1, 0])
    assert out.data[1, 1] == pytest.approx(291.5)
    assert out.same_grid(stack[0])


def test_single_raster_stack_is_identity():
    r = _raster([[1.0, 2.0]])
    np.testing.assert_array_equal(mean_stack(RasterStack.of([r])).data, r.data)


def test_empty_stack():
    with pytest.raises(EmptyStackError):
        mean_stack(RasterStack.of([]))
    with pytest.raises(EmptyStackError):
        reduce_stack(RasterStack())


def test_stack_members_must_share_grid():
    with pytest.raises(GridMismatchError):
        RasterStack.of([_raster([[1.0]]), _raster([[1.0]], origin=(-120.0, 40.0))])


def test_kelvin_to_celsius_leaves_nodata():
    out = kelvin_to_celsius(_raster([[273.15, NAN], [300.0, 0.0]]))
    assert out.data[0, 0] == pytest.approx(0.0)
    assert np.isnan(out.data[0, 1])
    assert out.data[1, 0] == pytest.approx(26.85)
    assert out.data[1, 1] == pytest.approx(-273.15)


def test_convert_units_scale_and_offset():
    out = convert_units(_raster([[10.0, 20.0]]), scale=2.0, offset=1.0)
    np.testing.assert_allclose(out.data, [[21.0, 41.0]])


def test_reduce_stack_means_then_converts():
    stack = RasterStack.of([_raster([[283.15]]), _raster([[293.15]])])
    out = reduce_stack(stack, offset=-273.15)
    assert out.data[0, 0] == pytest.approx(15.0)
