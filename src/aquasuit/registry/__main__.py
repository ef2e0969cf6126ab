#!/usr/bin/env python3
"""aquasuit.registry

Zone definition CLI for aquasuit.

This is one of several aquasuit subsystem CLIs:
- aquasuit.registry → zone (EEZ) preparation (this file)
- aquasuit.ingest   → raster inputs
- aquasuit.geo      → suitability analysis

aquasuit.registry defines WHICH ZONES EXIST. aquasuit.geo consumes its
output GeoPackage.

Examples:
  python -m aquasuit.registry prep-zones \
    --zones-shp data/wc_regions_clean.shp \
    --out-gpkg data/interim/vectors/zones.gpkg
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from aquasuit.config import (
    load_yaml,
    source_block,
    DEFAULT_CRS,
    DEFAULT_SOURCES_YAML,
    DEFAULT_ZONE_ID_FIELD,
    DEFAULT_ZONES_GPKG,
)


# -----------------------------------------------------------------------------
# CLI structure
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for aquasuit.registry."""
    ap = argparse.ArgumentParser(
        prog="aquasuit.registry",
        description="Zone definition for aquasuit (EEZ polygons)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Subsystem CLIs:
  python -m aquasuit.registry  # Zone preparation (this)
  python -m aquasuit.ingest    # Raster input checks
  python -m aquasuit.geo       # Suitability analysis
        """,
    )

    ap.add_argument(
        "--sources-yaml",
        type=Path,
        default=DEFAULT_SOURCES_YAML,
        help=f"Path to sources YAML (default: {DEFAULT_SOURCES_YAML})",
    )
    ap.add_argument(
        "--dry-run",
        action="store_true",
        help="Print planned actions without writing files",
    )

    sub = ap.add_subparsers(dest="command", required=True)

    prep = sub.add_parser(
        "prep-zones",
        help="Clean and reproject EEZ polygons",
        description="""
Process an EEZ shapefile into the canonical zones GeoPackage.

This command:
1. Reads the zone polygons (path from --zones-shp or sources.yaml)
2. Fixes invalid geometries, checks ids are unique
3. Computes zone areas in an equal-area CRS
4. Reprojects to the raster CRS and writes the GeoPackage
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    prep.add_argument(
        "--zones-shp",
        type=Path,
        default=None,
        help="Zone polygons file (default: sources.zones.path)",
    )
    prep.add_argument(
        "--out-gpkg",
        type=Path,
        default=DEFAULT_ZONES_GPKG,
        help=f"Output GeoPackage path (default: {DEFAULT_ZONES_GPKG})",
    )
    prep.add_argument("--layer", default="zones", help="Layer name in output GeoPackage (default: zones)")
    prep.add_argument(
        "--id-field",
        default=None,
        help=f"Zone id column (default: sources.zones.id_field or {DEFAULT_ZONE_ID_FIELD})",
    )
    prep.add_argument(
        "--target-crs",
        default=None,
        help=f"Output CRS (default: sources.yaml crs or {DEFAULT_CRS})",
    )
    prep.add_argument(
        "--area-crs",
        default="EPSG:3310",
        help="CRS for area calculations (default: EPSG:3310 / California Albers)",
    )
    prep.add_argument("--qa-csv", type=Path, default=None, help="Optional path to write a QA CSV summary")

    return ap


# -----------------------------------------------------------------------------
# Command handlers
# -----------------------------------------------------------------------------

def _handle_prep_zones(args: argparse.Namespace) -> int:
    """Handle the prep-zones subcommand."""
    sources_yaml = load_yaml(args.sources_yaml)
    zones_cfg = source_block(sources_yaml, "zones")

    zones_path = args.zones_shp or (Path(zones_cfg["path"]) if zones_cfg.get("path") else None)
    if zones_path is None:
        raise SystemExit("No --zones-shp given and sources.yaml has no sources.zones.path")

    id_field = args.id_field or zones_cfg.get("id_field") or DEFAULT_ZONE_ID_FIELD
    target_crs = args.target_crs or sources_yaml.get("crs") or DEFAULT_CRS

    if args.dry_run:
        print("[dry-run] Would prepare zones:")
        print(f"  Input: {zones_path}")
        print(f"  Output GeoPackage: {args.out_gpkg} (layer={args.layer})")
        print(f"  Id field: {id_field}")
        print(f"  CRS: {target_crs} (area in {args.area_crs})")
        return 0

    # Lazy import: keeps CLI startup fast, avoids loading geopandas until needed
    from aquasuit.registry.prep_zones import prep_zones

    prep_zones(
        zones_path,
        args.out_gpkg,
        layer=args.layer,
        id_field=id_field,
        target_crs=target_crs,
        area_crs=args.area_crs,
        qa_csv=args.qa_csv,
    )
    return 0


# -----------------------------------------------------------------------------
# Main entrypoint
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """Main entrypoint for aquasuit.registry CLI."""
    ap = build_parser()
    args = ap.parse_args(argv)

    handlers = {
        "prep-zones": _handle_prep_zones,
    }

    handler = handlers.get(args.command)
    if handler is None:
        raise SystemExit(f"Unknown command: {args.command}")

    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
