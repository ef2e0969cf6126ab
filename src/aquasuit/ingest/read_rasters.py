#!/usr/bin/env python3
"""read_rasters.py

Read bathymetry and SST GeoTIFFs into in-memory Rasters.

This is the only place the pipeline touches raster files. Everything
downstream works on aquasuit.raster.Raster values.

- nodata (whatever the file declares) becomes NaN
- files without a CRS get `assume_crs` (the West Coast layers ship
  without one and are known to be EPSG:4326); otherwise we fail
- SST paths come from an explicit list or a glob in sources.yaml

Required deps: rasterio, numpy
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import rasterio

from aquasuit.config import KELVIN_OFFSET, source_block
from aquasuit.raster import Raster, RasterStack


def read_raster(path: Path, band: int = 1, assume_crs: Optional[str] = None) -> Raster:
    """Read one band of a raster file; nodata -> NaN."""
    if not Path(path).exists():
        raise SystemExit(f"Raster not found: {path}")

    with rasterio.open(path) as src:
        if band < 1 or band > src.count:
            raise SystemExit(f"{path} has {src.count} band(s); band {band} requested")

        data = src.read(band, masked=True).astype(np.float64).filled(np.nan)

        crs = src.crs
        if crs is None:
            if assume_crs is None:
                raise SystemExit(f"Raster has no CRS: {path} (set 'crs:' in sources.yaml)")
            crs = assume_crs

        return Raster(data=data, transform=src.transform, crs=crs)


def read_raster_stack(paths: Sequence[Path], band: int = 1, assume_crs: Optional[str] = None) -> RasterStack:
    """Read several rasters on one grid (e.g. one per year)."""
    return RasterStack.of(read_raster(p, band=band, assume_crs=assume_crs) for p in paths)


# -----------------------------------------------------------------------------
# Config-driven loading
# -----------------------------------------------------------------------------

def _source_paths(cfg: Dict[str, Any]) -> List[Path]:
    """Resolve `path`, `paths` or `glob` from a source block."""
    if isinstance(cfg.get("paths"), list):
        return [Path(p) for p in cfg["paths"]]
    if isinstance(cfg.get("glob"), str) and cfg["glob"].strip():
        return sorted(Path().glob(cfg["glob"]))
    if cfg.get("path"):
        return [Path(cfg["path"])]
    return []


def sst_conversion(sources_yaml: Dict[str, Any]) -> Tuple[float, float]:
    """(scale, offset) that turns stored SST values into °C."""
    units = str(source_block(sources_yaml, "sst").get("units", "kelvin")).strip().lower()
    if units in ("k", "kelvin"):
        return (1.0, KELVIN_OFFSET)
    if units in ("c", "degc", "celsius"):
        return (1.0, 0.0)
    raise SystemExit(f"Unsupported SST units '{units}' (expected kelvin or celsius)")


def load_layers(sources_yaml: Dict[str, Any]) -> Tuple[Raster, RasterStack]:
    """Read bathymetry and the SST stack listed in sources.yaml."""
    assume_crs = sources_yaml.get("crs")

    bathy_paths = _source_paths(source_block(sources_yaml, "bathymetry"))
    if len(bathy_paths) != 1:
        raise SystemExit(f"sources.bathymetry must name exactly one raster, got {len(bathy_paths)}")

    sst_paths = _source_paths(source_block(sources_yaml, "sst"))
    if not sst_paths:
        raise SystemExit("sources.sst lists no rasters (use 'paths:' or 'glob:')")

    print(f"[INGEST] Bathymetry: {bathy_paths[0]}")
    bathymetry = read_raster(bathy_paths[0], assume_crs=assume_crs)
    print(f"[INGEST] SST: {len(sst_paths)} raster(s)")
    for p in sst_paths:
        print(f"  - {p}")
    sst = read_raster_stack(sst_paths, assume_crs=assume_crs)
    return bathymetry, sst


def verify_source(source_id: str, sources_yaml: Dict[str, Any]) -> Dict[str, Any]:
    """Check that the files a source points to exist.

    Presence only; nothing is opened.
    """
    sources = sources_yaml.get("sources")
    if not isinstance(sources, dict) or source_id not in sources:
        return {"source": source_id, "ok": False, "reason": "unknown source"}

    cfg = sources[source_id]
    if not isinstance(cfg, dict):
        return {"source": source_id, "ok": False, "reason": "bad config block"}

    paths = _source_paths(cfg)
    if not paths:
        return {"source": source_id, "ok": False, "reason": "no path, paths or glob"}

    missing = [str(p) for p in paths if not p.exists()]
    result: Dict[str, Any] = {"source": source_id, "ok": not missing, "count": len(paths)}
    if missing:
        result["reason"] = f"{len(missing)} missing file(s)"
        result["sample"] = missing[:5]
    return result
