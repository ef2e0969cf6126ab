#!/usr/bin/env python3
"""aquasuit.geo

Suitability analysis CLI for aquasuit.

This is one of several aquasuit subsystem CLIs:
- aquasuit.registry → zone (EEZ) preparation
- aquasuit.ingest   → raster inputs
- aquasuit.geo      → suitability analysis (this file)

aquasuit.geo answers: for a species with a depth range and an SST range,
how much suitable area lies in each EEZ?

Design notes:
- Layers are loaded and aligned once per invocation (aquasuit.geo.layers)
- Species ranges come from species.yaml or explicit --min/--max flags
- Lazy-imports geo modules to keep CLI startup fast
- Output is a per-zone table (stdout, optional CSV); no maps

Examples:
  # List configured species
  python -m aquasuit.geo species

  # Oysters, ranges from species.yaml
  python -m aquasuit.geo suitability --species oyster --out-csv out/oyster.csv

  # Explicit ranges
  python -m aquasuit.geo suitability --min-depth -70 --max-depth 0 --min-temp 11 --max-temp 30
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional, Tuple

from aquasuit.config import (
    get_species,
    load_species_yaml,
    load_yaml,
    source_block,
    species_bounds,
    DEFAULT_SOURCES_YAML,
    DEFAULT_SPECIES_YAML,
    DEFAULT_ZONE_ID_FIELD,
)


# -----------------------------------------------------------------------------
# CLI structure
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for aquasuit.geo."""
    ap = argparse.ArgumentParser(
        prog="aquasuit.geo",
        description="Habitat suitability by EEZ for aquasuit",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Subsystem CLIs:
  python -m aquasuit.registry  # Zone preparation
  python -m aquasuit.ingest    # Raster input checks
  python -m aquasuit.geo       # Suitability analysis (this)
        """,
    )

    # --- Global args ---
    ap.add_argument(
        "--sources-yaml",
        type=Path,
        default=DEFAULT_SOURCES_YAML,
        help=f"Path to sources YAML (default: {DEFAULT_SOURCES_YAML})",
    )
    ap.add_argument(
        "--species-yaml",
        type=Path,
        default=DEFAULT_SPECIES_YAML,
        help=f"Path to species YAML (default: {DEFAULT_SPECIES_YAML})",
    )
    ap.add_argument(
        "--dry-run",
        action="store_true",
        help="Print planned actions without reading rasters or writing files",
    )

    # --- Subcommands ---
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("species", help="List species defined in species YAML")

    suit = sub.add_parser(
        "suitability",
        help="Suitable area per zone for one species",
        description="""
Compute suitable habitat area (km²) per EEZ.

This command:
1. Reads bathymetry and the yearly SST rasters (sources.yaml)
2. Averages SST, converts to °C, aligns bathymetry to the SST grid
3. Classifies depth and SST with half-open ranges [min, max)
4. Keeps cells suitable on both criteria
5. Sums suitable cell area per zone

Depth is elevation: below sea level is negative, so 0-70 m deep is
--min-depth -70 --max-depth 0.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    suit.add_argument("--species", default=None, help="Species name from species YAML")
    suit.add_argument("--min-depth", type=float, default=None, help="Lower depth bound (inclusive)")
    suit.add_argument("--max-depth", type=float, default=None, help="Upper depth bound (exclusive)")
    suit.add_argument("--min-temp", type=float, default=None, help="Lower SST bound in °C (inclusive)")
    suit.add_argument("--max-temp", type=float, default=None, help="Upper SST bound in °C (exclusive)")
    suit.add_argument(
        "--zones-gpkg",
        type=Path,
        default=None,
        help="Prepared zones GeoPackage (default: prepare from sources.zones on the fly)",
    )
    suit.add_argument("--out-csv", type=Path, default=None, help="Write the per-zone table to CSV")

    return ap


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def _resolve_bounds(args: argparse.Namespace) -> Tuple[str, Tuple[float, float, float, float]]:
    """Species ranges from YAML, with any explicit flag taking precedence."""
    explicit = (args.min_depth, args.max_depth, args.min_temp, args.max_temp)

    if args.species:
        entry = get_species(load_species_yaml(args.species_yaml), args.species)
        base = species_bounds(entry)
        bounds = tuple(e if e is not None else b for e, b in zip(explicit, base))
        return str(entry.get("name", args.species)), bounds  # type: ignore[return-value]

    if any(v is None for v in explicit):
        raise SystemExit("Give --species, or all of --min-depth --max-depth --min-temp --max-temp")
    return "custom", explicit  # type: ignore[return-value]


# -----------------------------------------------------------------------------
# Command handlers
# -----------------------------------------------------------------------------

def _handle_species(args: argparse.Namespace) -> int:
    species = load_species_yaml(args.species_yaml)
    for entry in species:
        min_depth, max_depth, min_temp, max_temp = species_bounds(entry)
        print(
            f"  - {entry.get('name')} | depth [{min_depth:g}, {max_depth:g}) m"
            f" | SST [{min_temp:g}, {max_temp:g}) °C"
        )
    return 0


def _handle_suitability(args: argparse.Namespace) -> int:
    name, (min_depth, max_depth, min_temp, max_temp) = _resolve_bounds(args)

    sources_yaml = load_yaml(args.sources_yaml)
    zones_cfg = source_block(sources_yaml, "zones")
    id_field = zones_cfg.get("id_field") or DEFAULT_ZONE_ID_FIELD

    if args.dry_run:
        print(f"[dry-run] Would compute suitability for {name}:")
        print(f"  Depth: [{min_depth:g}, {max_depth:g})")
        print(f"  SST:   [{min_temp:g}, {max_temp:g})")
        print(f"  Zones: {args.zones_gpkg or zones_cfg.get('path')} (id field: {id_field})")
        print(f"  Output CSV: {args.out_csv}")
        return 0

    # Lazy imports: rasterio/geopandas only when actually computing
    from aquasuit.geo.layers import prepare_layers
    from aquasuit.geo.pipeline import run_suitability
    from aquasuit.geo.zonal import SUITABLE_AREA, total_suitable_area
    from aquasuit.ingest.read_rasters import load_layers, sst_conversion
    from aquasuit.registry.prep_zones import load_zones, prep_zones

    bathymetry, sst = load_layers(sources_yaml)
    scale, offset = sst_conversion(sources_yaml)
    depth, temperature = prepare_layers(bathymetry, sst, scale=scale, offset=offset)

    if args.zones_gpkg is not None:
        zones = load_zones(args.zones_gpkg)
    else:
        if not zones_cfg.get("path"):
            raise SystemExit("No --zones-gpkg given and sources.yaml has no sources.zones.path")
        zones = prep_zones(Path(zones_cfg["path"]), id_field=id_field, target_crs=temperature.crs.to_string())

    # Zones must be in the raster CRS; reprojecting is the caller's job
    if zones.crs is not None and zones.crs != temperature.crs:
        print(f"[SUITABILITY] Reprojecting zones {zones.crs.to_string()} -> {temperature.crs.to_string()}")
        zones = zones.to_crs(temperature.crs)

    run = run_suitability(
        depth,
        temperature,
        zones,
        min_depth,
        max_depth,
        min_temp,
        max_temp,
        id_field=id_field,
    )
    table = run.zones

    print(f"[SUITABILITY] {name}: depth [{min_depth:g}, {max_depth:g}) SST [{min_temp:g}, {max_temp:g})")
    print(f"[SUITABILITY] Total suitable area: {total_suitable_area(run.suitability):.1f} km²")
    if table.empty:
        print("[SUITABILITY] No suitable habitat in any zone")
    else:
        for _, row in table.sort_values(SUITABLE_AREA, ascending=False).iterrows():
            print(f"  - {row[id_field]} | suitable_area={row[SUITABLE_AREA]:.1f} km²")

    if args.out_csv is not None:
        args.out_csv.parent.mkdir(parents=True, exist_ok=True)
        table.drop(columns=table.geometry.name).to_csv(args.out_csv, index=False)
        print(f"Wrote {len(table)} zones -> {args.out_csv}")

    return 0


# -----------------------------------------------------------------------------
# Main entrypoint
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """Main entrypoint for aquasuit.geo CLI."""
    ap = build_parser()
    args = ap.parse_args(argv)

    handlers = {
        "species": _handle_species,
        "suitability": _handle_suitability,
    }

    handler = handlers.get(args.command)
    if handler is None:
        raise SystemExit(f"Unknown command: {args.command}")

    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
