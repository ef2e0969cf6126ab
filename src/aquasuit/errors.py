#!/usr/bin/env python3
"""aquasuit.errors

Error kinds raised by the suitability pipeline.

Every error is raised by the stage that detects it; nothing downstream
tries to recover. They subclass ValueError so callers that only care about
"bad input" can catch that.
"""

from __future__ import annotations


class SuitabilityError(Exception):
    """Base class for pipeline errors."""


class GridMismatchError(SuitabilityError, ValueError):
    """Rasters don't share extent/resolution/CRS where a cell-wise op needs them to."""


class InvalidCriterionError(SuitabilityError, ValueError):
    """Criterion bounds are malformed (lower >= upper, or NaN)."""


class EmptyStackError(SuitabilityError, ValueError):
    """Temporal reduction was asked to reduce zero rasters."""


class CRSMismatchError(SuitabilityError, ValueError):
    """Geometries and rasters disagree on CRS at the vector/raster boundary."""
