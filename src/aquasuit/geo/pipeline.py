#!/usr/bin/env python3
"""pipeline.py

Per-species suitability: depth + SST criteria -> suitable area per zone.

    depth ----> classify(depth criterion) --\
                                             overlay --> aggregate_zones --> per-zone table
    sst   ----> classify(temp criterion)  --/

Inputs are the aligned layers from aquasuit.geo.layers.prepare_layers()
plus the zone collection. Nothing here reads files or keeps state between
calls, so one set of layers can serve any number of species queries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import geopandas as gpd

from aquasuit.config import DEFAULT_ZONE_ID_FIELD
from aquasuit.geo.classify import SuitabilityCriterion, classify
from aquasuit.geo.overlay import overlay
from aquasuit.geo.zonal import aggregate_zones
from aquasuit.raster import Raster, require_same_grid


@dataclass(frozen=True)
class SuitabilityRun:
    """Everything one species query produced, intermediate rasters included."""

    depth_criterion: SuitabilityCriterion
    temperature_criterion: SuitabilityCriterion
    depth_classes: Raster
    temperature_classes: Raster
    suitability: Raster
    zones: gpd.GeoDataFrame


def run_suitability(
    depth_raster: Raster,
    temperature_raster: Raster,
    zones: Optional[gpd.GeoDataFrame],
    min_depth: float,
    max_depth: float,
    min_temp: float,
    max_temp: float,
    *,
    id_field: str = DEFAULT_ZONE_ID_FIELD,
) -> SuitabilityRun:
    # Criteria first: bad bounds fail before any raster is touched
    depth_criterion = SuitabilityCriterion(min_depth, max_depth, name="depth")
    temperature_criterion = SuitabilityCriterion(min_temp, max_temp, name="temperature")

    require_same_grid(depth_raster, temperature_raster, what="depth and temperature rasters")

    depth_classes = classify(depth_raster, depth_criterion)
    temperature_classes = classify(temperature_raster, temperature_criterion)
    suitability = overlay(depth_classes, temperature_classes)

    return SuitabilityRun(
        depth_criterion=depth_criterion,
        temperature_criterion=temperature_criterion,
        depth_classes=depth_classes,
        temperature_classes=temperature_classes,
        suitability=suitability,
        zones=aggregate_zones(suitability, zones, id_field=id_field),
    )


def compute_zone_suitability(
    depth_raster: Raster,
    temperature_raster: Raster,
    zones: Optional[gpd.GeoDataFrame],
    min_depth: float,
    max_depth: float,
    min_temp: float,
    max_temp: float,
    *,
    id_field: str = DEFAULT_ZONE_ID_FIELD,
) -> gpd.GeoDataFrame:
    """Suitable area (km²) per zone for one species.

    Args:
        depth_raster: Aligned bathymetry (negative = below sea level)
        temperature_raster: Aligned mean SST in °C, same grid as depth_raster
        zones: Zone polygons in the raster CRS, unique by `id_field`
        min_depth, max_depth: Depth interval [min_depth, max_depth)
        min_temp, max_temp: Temperature interval [min_temp, max_temp)
        id_field: Zone id column

    Returns:
        Zones intersecting suitable habitat with their attributes plus
        `suitable_area`, as a GeoDataFrame. Pass it to
        `aquasuit.geo.zonal.as_records` for a list of ZoneSuitability
        records instead. Empty when nothing is suitable.

    Raises:
        InvalidCriterionError: min >= max for either criterion
        GridMismatchError: the two rasters are not on one grid
        CRSMismatchError: zones and rasters disagree on CRS
        ValueError: zone ids are missing or not unique
    """
    return run_suitability(
        depth_raster,
        temperature_raster,
        zones,
        min_depth,
        max_depth,
        min_temp,
        max_temp,
        id_field=id_field,
    ).zones
