#!/usr/bin/env python3
"""aquasuit.config

Shared configuration utilities for aquasuit CLI subsystems.

This module provides common helpers used across aquasuit.ingest,
aquasuit.registry and aquasuit.geo. Centralizing these avoids duplication
and ensures consistent behavior.

Design notes:
- YAML loading is strict: files must exist and be valid mappings.
- Species entries carry depth/temperature ranges as [min, max] pairs.
- All functions are pure (no side effects on import).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml


# -----------------------------------------------------------------------------
# YAML loading
# -----------------------------------------------------------------------------

def load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML file and return as dict.

    Raises SystemExit on missing file or invalid format (non-mapping).
    """
    if not path.exists():
        raise SystemExit(f"Config not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise SystemExit(f"Expected YAML mapping at {path}")
    return data


def load_species_yaml(path: Path) -> List[dict]:
    """Load species definitions from a species YAML file.

    Expects structure like:
        species:
          - name: oyster
            depth: [-70, 0]
            temperature: [11, 30]

    Returns the list of species dicts.
    Raises ValueError if structure is invalid.
    """
    data = load_yaml(path)
    if "species" not in data or not isinstance(data["species"], list):
        raise ValueError(f"{path} must have a top-level 'species:' list.")
    return data["species"]


# -----------------------------------------------------------------------------
# Species helpers
# -----------------------------------------------------------------------------

def coerce_range(x: Any) -> Optional[Tuple[float, float]]:
    """Try to coerce [min, max] into a float pair.

    Returns None if input is invalid or missing. Ordering is not checked here;
    SuitabilityCriterion does that.
    """
    if isinstance(x, (list, tuple)) and len(x) == 2:
        try:
            lo, hi = map(float, x)
        except (TypeError, ValueError):
            return None
        return (lo, hi)
    return None


def get_species(species: List[dict], name: str) -> dict:
    """Look up a species entry by name (case-insensitive)."""
    wanted = name.strip().lower()
    for entry in species:
        if str(entry.get("name", "")).strip().lower() == wanted:
            return entry
    known = sorted(str(e.get("name", "")) for e in species)
    raise KeyError(f"Unknown species '{name}'. Known species: {known}")


def species_bounds(entry: dict) -> Tuple[float, float, float, float]:
    """Return (min_depth, max_depth, min_temp, max_temp) for a species entry."""
    depth = coerce_range(entry.get("depth"))
    temp = coerce_range(entry.get("temperature"))
    if depth is None or temp is None:
        raise ValueError(
            f"Species '{entry.get('name', '?')}' needs 'depth: [min, max]' and "
            f"'temperature: [min, max]'; got depth={entry.get('depth')!r} "
            f"temperature={entry.get('temperature')!r}"
        )
    return (depth[0], depth[1], temp[0], temp[1])


# -----------------------------------------------------------------------------
# Sources helpers
# -----------------------------------------------------------------------------

def source_block(sources_yaml: Dict[str, Any], source_id: str) -> Dict[str, Any]:
    """Return sources: -> <source_id> or fail with a readable message."""
    sources = sources_yaml.get("sources")
    if not isinstance(sources, dict):
        raise SystemExit("sources.yaml must contain top-level 'sources:' mapping")
    cfg = sources.get(source_id)
    if not isinstance(cfg, dict):
        raise SystemExit(f"sources.yaml missing sources: -> {source_id}")
    return cfg


def format_bbox(b: Tuple[float, float, float, float], precision: int = 5) -> str:
    """Format a bbox tuple as a readable string."""
    return f"[{b[0]:.{precision}f}, {b[1]:.{precision}f}, {b[2]:.{precision}f}, {b[3]:.{precision}f}]"


# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------
# Centralized so all CLIs use the same defaults.

DEFAULT_SOURCES_YAML = Path("config/sources.yaml")
DEFAULT_SPECIES_YAML = Path("config/species.yaml")
DEFAULT_ZONES_GPKG = Path("data/interim/vectors/zones.gpkg")

DEFAULT_CRS = "EPSG:4326"
DEFAULT_ZONE_ID_FIELD = "rgn_id"

# Offset applied to SST rasters stored in Kelvin
KELVIN_OFFSET = -273.15
