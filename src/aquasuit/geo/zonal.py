#!/usr/bin/env python3
"""zonal.py

Turn the suitability raster into suitable area (km²) per zone (EEZ).

Steps:
1. vectorize()       suitable cells -> one polygon per 4-connected patch
2. check_crs()       zones and raster must share a CRS (checked, never assumed)
3. filter_zones()    keep zones that intersect any suitable patch
4. cell_area_km2()   true ground area of each suitable cell
5. aggregate_zones() sum cell areas per zone, by cell centre

Notes:
- "No suitable habitat" is an empty GeoDataFrame, not an error.
- Each cell is assigned to at most one zone (zones are burned into one
  label grid), so per-zone totals never double count.
- Cell areas are geodesic on the CRS ellipsoid unless the CRS is an
  equal-area projection, where flat area is already correct.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import geopandas as gpd
import numpy as np
from pyproj import CRS, Transformer
from rasterio.features import rasterize, shapes
from shapely.geometry import shape

from aquasuit.config import DEFAULT_ZONE_ID_FIELD
from aquasuit.errors import CRSMismatchError
from aquasuit.raster import Raster


SUITABLE_AREA = "suitable_area"

# Projection methods whose planar area is true ground area
_EQUAL_AREA_METHODS = (
    "equal area",
    "mollweide",
    "sinusoidal",
    "eckert iv",
    "eckert vi",
    "goode homolosine",
    "equal earth",
)

# Cylindrical methods: cell area depends on the row only
_CYLINDRICAL_METHODS = (
    "mercator",
    "equidistant cylindrical",
    "plate carree",
)


# -----------------------------------------------------------------------------
# Records
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ZoneSuitability:
    zone_id: Any
    suitable_area: float
    attributes: Dict[str, Any] = field(default_factory=dict)


def as_records(result: gpd.GeoDataFrame, id_field: str = DEFAULT_ZONE_ID_FIELD) -> List[ZoneSuitability]:
    """Convert aggregate_zones() output into ZoneSuitability records."""
    records = []
    for _, row in result.iterrows():
        attrs = {k: v for k, v in row.items() if k not in (id_field, SUITABLE_AREA, result.geometry.name)}
        records.append(
            ZoneSuitability(zone_id=row[id_field], suitable_area=float(row[SUITABLE_AREA]), attributes=attrs)
        )
    return records


# -----------------------------------------------------------------------------
# Vectorization
# -----------------------------------------------------------------------------

def vectorize(result: Raster) -> gpd.GeoDataFrame:
    """One polygon per connected patch of suitable (== 1) cells, in the raster CRS."""
    suitable = result.data == 1.0
    if not suitable.any():
        return gpd.GeoDataFrame({"value": [], "geometry": []}, geometry="geometry", crs=result.crs)

    image = suitable.astype(np.uint8)
    geoms = [
        shape(geom)
        for geom, _ in shapes(image, mask=suitable, transform=result.transform, connectivity=4)
    ]
    return gpd.GeoDataFrame({"value": [1] * len(geoms)}, geometry=geoms, crs=result.crs)


# -----------------------------------------------------------------------------
# Zones
# -----------------------------------------------------------------------------

def check_crs(zones: gpd.GeoDataFrame, crs: Optional[CRS]) -> None:
    if zones.crs is None:
        raise CRSMismatchError("Zones have no CRS; set or reproject them to the raster CRS first")
    if crs is None:
        raise CRSMismatchError("Suitability raster has no CRS")
    if CRS.from_user_input(zones.crs) != crs:
        raise CRSMismatchError(
            f"Zones CRS ({zones.crs.to_string()}) differs from raster CRS ({crs.to_string()})"
        )


def validate_zones(zones: gpd.GeoDataFrame, id_field: str) -> None:
    """Zones must carry a unique id column."""
    if id_field not in zones.columns:
        raise ValueError(f"Zone id field '{id_field}' not found. Available columns: {list(zones.columns)}")
    dupes = zones[id_field][zones[id_field].duplicated()].unique().tolist()
    if dupes:
        raise ValueError(f"Duplicate zone ids in '{id_field}': {dupes}")


def filter_zones(zones: gpd.GeoDataFrame, polygons: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    """Zones that share at least one point with the suitable patches."""
    if polygons.empty:
        return zones.iloc[0:0].copy()
    union = polygons.geometry.union_all()
    return zones.loc[zones.geometry.intersects(union)].copy()


# -----------------------------------------------------------------------------
# Cell area
# -----------------------------------------------------------------------------

def _is_equal_area(crs: CRS) -> bool:
    if not crs.is_projected or crs.coordinate_operation is None:
        return False
    method = crs.coordinate_operation.method_name.lower()
    return any(m in method for m in _EQUAL_AREA_METHODS)


def _is_cylindrical(crs: CRS) -> bool:
    if not crs.is_projected or crs.coordinate_operation is None:
        return False
    method = crs.coordinate_operation.method_name.lower()
    if "transverse" in method or "oblique" in method:
        return False
    return any(m in method for m in _CYLINDRICAL_METHODS)


def _geodesic_areas(geod, lons: np.ndarray, lats: np.ndarray) -> np.ndarray:
    """Area (m²) of each quadrilateral; lons/lats are (n, 4) corner arrays."""
    out = np.empty(lons.shape[0], dtype=np.float64)
    for i in range(lons.shape[0]):
        area, _ = geod.polygon_area_perimeter(lons[i], lats[i])
        out[i] = abs(area)
    return out


def _row_areas_km2(raster: Raster, rows: np.ndarray, to_geo: Optional[Transformer] = None) -> np.ndarray:
    """Area of the cells at `rows`, measuring one cell per distinct row.

    Only valid when cell area does not change along a row.
    """
    t = raster.transform
    uniq = np.unique(rows)
    top = t.f + uniq * t.e
    bottom = top + t.e
    xs = np.tile([t.c, t.c + t.a, t.c + t.a, t.c], (uniq.size, 1))
    ys = np.column_stack([top, top, bottom, bottom])
    if to_geo is not None:
        xs, ys = to_geo.transform(xs, ys)
    per_row = _geodesic_areas(raster.crs.get_geod(), np.asarray(xs), np.asarray(ys)) / 1e6
    return per_row[np.searchsorted(uniq, rows)]


def cell_area_km2(raster: Raster, mask: bool = True) -> Raster:
    """Ground area of each cell in km².

    With mask=True only defined cells get an area; the rest stay no-data.

    Geographic and cylindrical grids cost one geodesic polygon per row.
    Equal-area grids need none. Any other projection (conic, transverse
    mercator, rotated grids) measures every cell on its own, one geodesic
    polygon each, which is noticeably slower on large grids; reproject to
    an equal-area CRS first if that matters.
    """
    crs = raster.crs
    if crs is None:
        raise CRSMismatchError("Cell areas need a CRS")

    if mask:
        rows, cols = np.nonzero(raster.valid)
    else:
        rows, cols = (a.ravel() for a in np.indices(raster.shape))

    areas = np.full(raster.shape, np.nan, dtype=np.float64)
    if rows.size == 0:
        return raster.with_data(areas)

    t = raster.transform
    rectilinear = t.b == 0 and t.d == 0

    if crs.is_geographic and rectilinear:
        areas[rows, cols] = _row_areas_km2(raster, rows)

    elif _is_equal_area(crs) and rectilinear:
        unit = crs.axis_info[0].unit_conversion_factor
        areas[rows, cols] = abs(t.a * t.e) * unit * unit / 1e6

    elif _is_cylindrical(crs) and rectilinear:
        to_geo = Transformer.from_crs(crs, crs.geodetic_crs, always_xy=True)
        areas[rows, cols] = _row_areas_km2(raster, rows, to_geo)

    else:
        # Project cell corners to lon/lat and measure each cell on the ellipsoid
        geod = crs.get_geod()
        to_geo = Transformer.from_crs(crs, crs.geodetic_crs, always_xy=True)
        corner_cols = np.column_stack([cols, cols + 1, cols + 1, cols])
        corner_rows = np.column_stack([rows, rows, rows + 1, rows + 1])
        xs = t.c + corner_cols * t.a + corner_rows * t.b
        ys = t.f + corner_cols * t.d + corner_rows * t.e
        lons, lats = to_geo.transform(xs, ys)
        areas[rows, cols] = _geodesic_areas(geod, np.asarray(lons), np.asarray(lats)) / 1e6

    return raster.with_data(areas)


def total_suitable_area(result: Raster) -> float:
    """Area (km²) of all suitable cells, regardless of zones."""
    suitable = result.with_data(np.where(result.data == 1.0, 1.0, np.nan))
    return float(np.nansum(cell_area_km2(suitable).data))


# -----------------------------------------------------------------------------
# Aggregation
# -----------------------------------------------------------------------------

def _empty_result(zones: Optional[gpd.GeoDataFrame], id_field: str) -> gpd.GeoDataFrame:
    if zones is None:
        return gpd.GeoDataFrame(
            {id_field: [], SUITABLE_AREA: np.array([], dtype=np.float64), "geometry": []},
            geometry="geometry",
        )
    out = zones.iloc[0:0].copy()
    out[SUITABLE_AREA] = np.array([], dtype=np.float64)
    return out


def zone_labels(result: Raster, zones: gpd.GeoDataFrame) -> np.ndarray:
    """Burn zones into an int grid: 0 = no zone, i + 1 = zones.iloc[i].

    A cell belongs to the zone containing its centre. If zones overlap, the
    later zone wins, so a cell is still counted once.
    """
    return rasterize(
        ((geom, i + 1) for i, geom in enumerate(zones.geometry)),
        out_shape=result.shape,
        transform=result.transform,
        fill=0,
        dtype="int32",
        all_touched=False,
    )


def aggregate_zones(
    result: Raster,
    zones: Optional[gpd.GeoDataFrame],
    id_field: str = DEFAULT_ZONE_ID_FIELD,
) -> gpd.GeoDataFrame:
    """Suitable area per zone.

    Returns the zones that intersect suitable habitat, with their original
    attributes plus a `suitable_area` column (km²). A selected zone whose
    overlap holds no cell centre keeps suitable_area = 0.0.

    Zones are checked (CRS, unique ids) whenever any are given, so bad zones
    fail the same way whether or not anything turns out suitable.
    """
    if zones is None or zones.empty:
        return _empty_result(zones, id_field)

    check_crs(zones, result.crs)
    validate_zones(zones, id_field)

    polygons = vectorize(result)
    if polygons.empty:
        return _empty_result(zones, id_field)

    selected = filter_zones(zones, polygons)
    if selected.empty:
        return _empty_result(zones, id_field)
    selected = selected.reset_index(drop=True)

    areas = cell_area_km2(result).data
    labels = zone_labels(result, selected)
    counted = ~np.isnan(areas) & (labels > 0)
    sums = np.bincount(labels[counted], weights=areas[counted], minlength=len(selected) + 1)

    selected[SUITABLE_AREA] = sums[1:].astype(np.float64)
    return selected
