#!/usr/bin/env python3
"""aquasuit.ingest

Input checks for aquasuit.

This is one of several aquasuit subsystem CLIs:
- aquasuit.registry → zone (EEZ) preparation
- aquasuit.ingest   → raster inputs (this file)
- aquasuit.geo      → suitability analysis

The rasters themselves are downloaded by hand (GEBCO bathymetry, NOAA
CoralTemp annual SST); this CLI only confirms that what sources.yaml
points at is actually on disk.

Examples:
  python -m aquasuit.ingest verify
  python -m aquasuit.ingest verify --source sst --json
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import List, Optional

from aquasuit.config import load_yaml, DEFAULT_SOURCES_YAML


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="aquasuit.ingest", description="Raster inputs for aquasuit")

    ap.add_argument("--sources-yaml", type=Path, default=DEFAULT_SOURCES_YAML, help=f"Path to sources.yaml (default: {DEFAULT_SOURCES_YAML})")

    sub = ap.add_subparsers(dest="command", required=True)

    ver = sub.add_parser("verify", help="Verify that configured input files exist")
    ver.add_argument("--source", default="all", help="Source id to verify (or 'all')")
    ver.add_argument("--json", action="store_true", help="Emit JSON to stdout")

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    sources_yaml = load_yaml(args.sources_yaml)

    if args.command == "verify":
        sources = sources_yaml.get("sources")
        if not isinstance(sources, dict):
            raise SystemExit("sources.yaml must contain top-level 'sources:' mapping")

        from aquasuit.ingest.read_rasters import verify_source

        if args.source == "all":
            results = [verify_source(sid, sources_yaml) for sid in sorted(sources.keys())]
        else:
            results = [verify_source(args.source, sources_yaml)]

        ok = all(r.get("ok") for r in results)
        if args.json:
            print(json.dumps({"ok": ok, "results": results}, indent=2))
        else:
            for r in results:
                status = "OK" if r.get("ok") else "MISSING"
                print(f"[{status}] {r['source']}")
                if "reason" in r:
                    print(f"  - reason: {r['reason']}")
                if "count" in r:
                    print(f"  - files: {r['count']}")
                for s in r.get("sample", []):
                    print(f"    - {s}")
            print(f"Overall: {'OK' if ok else 'NOT OK'}")
        return 0 if ok else 2

    raise SystemExit(f"Unknown command: {args.command}")


if __name__ == "__main__":
    raise SystemExit(main())
