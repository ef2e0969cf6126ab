#!/usr/bin/env python3

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest
from rasterio.transform import Affine, from_origin

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from aquasuit.errors import CRSMismatchError, GridMismatchError
from aquasuit.geo.align import align_to_grid, crop_to
from aquasuit.raster import Raster

NAN = np.nan
CRS = "EPSG:6933"


def _raster(values, x0, y0, res, crs=CRS):
    return Raster(data=np.array(values, dtype=float), transform=from_origin(x0, y0, res, res), crs=crs)


def _blank(shape, x0, y0, res, crs=CRS):
    return _raster(np.zeros(shape), x0, y0, res, crs=crs)


def test_coarse_to_fine_nearest():
    source = _raster([[1, 2], [3, 4]], 0, 4000, 2000)
    reference = _blank((4, 4), 0, 4000, 1000)

    out = align_to_grid(source, reference)

    np.testing.assert_array_equal(
        out.data,
        [[1, 1, 2, 2],
         [1, 1, 2, 2],
         [3, 3, 4, 4],
         [3, 3, 4, 4]],
    )
    assert out.same_grid(reference)


def test_fine_to_coarse_picks_existing_values():
    source = _raster(np.arange(16).reshape(4, 4), 0, 4000, 1000)
    reference = _blank((2, 2), 0, 4000, 2000)

    out = align_to_grid(source, reference)

    assert out.shape == (2, 2)
    assert set(out.data.ravel().tolist()) <= set(range(16))


def test_outside_source_coverage_is_nodata():
    source = _raster([[1, 2], [3, 4]], 0, 4000, 2000)
    reference = _blank((4, 6), 0, 4000, 1000)

    out = align_to_grid(source, reference)

    assert np.isnan(out.data[:, 4:]).all()
    assert not np.isnan(out.data[:, :4]).any()


def test_source_nodata_propagates():
    source = _raster([[NAN, 2], [3, 4]], 0, 4000, 2000)
    reference = _blank((4, 4), 0, 4000, 1000)

    out = align_to_grid(source, reference)

    assert np.isnan(out.data[:2, :2]).all()
    assert out.data[3, 3] == 4


def test_zero_area_reference():
    source = _raster([[1, 2]], 0, 1000, 1000)
    reference = Raster(data=np.empty((0, 3)), transform=from_origin(0, 1000, 1000, 1000), crs=CRS)
    with pytest.raises(GridMismatchError):
        align_to_grid(source, reference)


def test_non_positive_resolution_reference():
    source = _raster([[1, 2]], 0, 1000, 1000)
    south_up = Raster(data=np.zeros((1, 2)), transform=Affine(1000, 0, 0, 0, 1000, 0), crs=CRS)
    with pytest.raises(GridMismatchError):
        align_to_grid(source, south_up)


def test_missing_crs():
    source = _raster([[1, 2]], 0, 1000, 1000, crs=None)
    with pytest.raises(CRSMismatchError):
        align_to_grid(source, _blank((1, 2), 0, 1000, 1000))


def test_crop_to_reference_bounds_keeps_partial_cells():
    source = _raster(np.arange(36).reshape(6, 6), 0, 6000, 1000)
    reference = _blank((4, 4), 1500, 3500, 500)

    cropped = crop_to(source, reference)

    assert cropped.shape == (3, 3)
    assert cropped.transform.c == pytest.approx(1000)
    assert cropped.transform.f == pytest.approx(4000)
    np.testing.assert_array_equal(cropped.data, source.data[2:5, 1:4])


def test_crop_to_disjoint_reference():
    source = _raster(np.zeros((6, 6)), 0, 6000, 1000)
    with pytest.raises(GridMismatchError):
        crop_to(source, _blank((2, 2), 10000, 20000, 1000))
