#!/usr/bin/env python3
"""prep_zones.py

Turn an EEZ polygon file (e.g. wc_regions_clean.shp) into a clean zone
collection for the suitability pipeline.

This module exposes:
1. prep_zones() - read, clean, reproject (and optionally write) zones
2. load_zones() - read a prepared zones GeoPackage back

Notes:
- Zones must carry a unique id column (rgn_id for the West Coast EEZs).
- Zone area is computed in an equal-area CRS before reprojecting.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import geopandas as gpd

from aquasuit.config import DEFAULT_CRS, DEFAULT_ZONE_ID_FIELD


# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------

def _make_valid(gdf: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    """Fix invalid geometries (self-intersections are common in EEZ outlines)."""
    gdf = gdf.copy()
    invalid = ~gdf.geometry.is_valid
    if invalid.any():
        gdf.loc[invalid, gdf.geometry.name] = gdf.geometry[invalid].make_valid()
    return gdf


def _compute_area_km2(gdf: gpd.GeoDataFrame, area_crs: str) -> List[float]:
    """Compute polygon area in km² using an equal-area CRS."""
    if gdf.crs is None:
        raise ValueError("Input geometries have no CRS; can't compute area safely.")
    tmp = gdf.to_crs(area_crs)
    return (tmp.geometry.area / 1_000_000.0).astype(float).tolist()


def _check_ids(gdf: gpd.GeoDataFrame, id_field: str) -> None:
    if id_field not in gdf.columns:
        raise SystemExit(f"Zone id field '{id_field}' not found. Available columns: {list(gdf.columns)}")
    if gdf[id_field].isna().any():
        raise SystemExit(f"{int(gdf[id_field].isna().sum())} zone(s) have no '{id_field}'")
    dupes = sorted(gdf.loc[gdf[id_field].duplicated(), id_field].unique().tolist())
    if dupes:
        raise SystemExit(
            f"Duplicate zone ids in '{id_field}': {dupes}\n"
            "Zones must be unique by id; dissolve or fix the source first."
        )


# -----------------------------------------------------------------------------
# Core functions
# -----------------------------------------------------------------------------

def prep_zones(
    zones_path: Path,
    out_gpkg: Optional[Path] = None,
    *,
    layer: str = "zones",
    id_field: str = DEFAULT_ZONE_ID_FIELD,
    target_crs: str = DEFAULT_CRS,
    area_crs: str = "EPSG:3310",
    qa_csv: Optional[Path] = None,
) -> gpd.GeoDataFrame:
    """Read and clean zone polygons.

    It:
    1. Reads the zone file and requires a CRS
    2. Fixes invalid geometries and drops empty ones
    3. Checks zone ids are present and unique
    4. Computes zone area in km² (area_crs, default California Albers)
    5. Reprojects to target_crs (the raster CRS)
    6. Optionally writes a GeoPackage and a QA CSV

    Returns:
        The cleaned GeoDataFrame, one row per zone.

    Raises:
        SystemExit: On missing file, missing CRS, empty input or bad ids.
    """
    if not zones_path.exists():
        raise SystemExit(f"Zones file not found: {zones_path}")

    gdf = gpd.read_file(zones_path)

    if gdf.empty:
        raise SystemExit("Loaded zones file but it contains zero features. Wrong file?")

    if gdf.crs is None:
        raise SystemExit(
            "Zones file has no CRS (.prj missing or unreadable). "
            "Fix that first; the CRS check against the rasters depends on it."
        )

    # --- Geometry cleanup ---
    out = _make_valid(gdf)
    out = out[out.geometry.notna() & ~out.geometry.is_empty].copy()

    _check_ids(out, id_field)

    out["zone_area_km2"] = _compute_area_km2(out, area_crs=area_crs)
    out = out.to_crs(target_crs).reset_index(drop=True)

    # --- Write outputs ---
    if out_gpkg is not None:
        out_gpkg.parent.mkdir(parents=True, exist_ok=True)
        out.to_file(out_gpkg, layer=layer, driver="GPKG")
        print(f"[ZONES] Wrote {len(out)} zones -> {out_gpkg} (layer={layer})")

    if qa_csv:
        qa_csv.parent.mkdir(parents=True, exist_ok=True)
        out.drop(columns=out.geometry.name).to_csv(qa_csv, index=False)

    print(f"[ZONES] {len(out)} zones (id field: {id_field}; CRS: {target_crs})")
    for _, row in out.sort_values(id_field).iterrows():
        print(f"  - {row[id_field]} | area_km2={row['zone_area_km2']:.1f}")

    return out


def load_zones(gpkg: Path, layer: str = "zones") -> gpd.GeoDataFrame:
    """Read zones written by prep_zones()."""
    if not gpkg.exists():
        raise SystemExit(f"Zones GeoPackage not found: {gpkg} (run: python -m aquasuit.registry prep-zones)")
    return gpd.read_file(gpkg, layer=layer)
