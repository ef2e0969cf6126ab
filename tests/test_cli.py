#!/usr/bin/env python3

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from aquasuit.geo import __main__ as geo_cli
from aquasuit.registry import __main__ as registry_cli

SOURCES = ROOT / "config" / "sources.yaml"
SPECIES = ROOT / "config" / "species.yaml"


def test_geo_species_lists_config(capsys):
    assert geo_cli.main(["--species-yaml", str(SPECIES), "species"]) == 0
    out = capsys.readouterr().out
    assert "oyster" in out
    assert "[-70, 0)" in out


def test_geo_suitability_dry_run(capsys):
    rc = geo_cli.main([
        "--sources-yaml", str(SOURCES),
        "--species-yaml", str(SPECIES),
        "--dry-run",
        "suitability", "--species", "oyster", "--max-temp", "25",
    ])
    assert rc == 0
    out = capsys.readouterr().out
    assert "[11, 25)" in out
    assert "rgn_id" in out


def test_geo_suitability_needs_bounds():
    with pytest.raises(SystemExit):
        geo_cli.main(["--sources-yaml", str(SOURCES), "--dry-run", "suitability", "--min-depth", "-70"])


def test_registry_prep_zones_dry_run(capsys):
    rc = registry_cli.main(["--sources-yaml", str(SOURCES), "--dry-run", "prep-zones"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "wc_regions_clean.shp" in out
    assert "EPSG:4326" in out
