#!/usr/bin/env python3
"""classify.py

Threshold reclassification: continuous raster -> binary suitable/unsuitable.

Boundary rule (half-open interval):
    lower <= value < upper  -> 1
    anything else defined   -> 0
    no-data                 -> no-data

A cell sitting exactly on `upper` is unsuitable. Open bounds (-inf / inf)
are fine, e.g. SuitabilityCriterion(-70, float("inf")).
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from aquasuit.errors import InvalidCriterionError
from aquasuit.raster import Raster


@dataclass(frozen=True)
class SuitabilityCriterion:
    lower: float
    upper: float
    name: str = ""

    def __post_init__(self) -> None:
        lower, upper = float(self.lower), float(self.upper)
        if math.isnan(lower) or math.isnan(upper):
            raise InvalidCriterionError(f"{self._label()} bounds must be numbers, got ({self.lower}, {self.upper})")
        if lower >= upper:
            raise InvalidCriterionError(
                f"{self._label()} lower bound must be < upper bound, got ({self.lower}, {self.upper})"
            )
        object.__setattr__(self, "lower", lower)
        object.__setattr__(self, "upper", upper)

    def _label(self) -> str:
        return f"Criterion '{self.name}'" if self.name else "Criterion"

    def contains(self, value: float) -> bool:
        return self.lower <= value < self.upper


def classify(raster: Raster, criterion: SuitabilityCriterion) -> Raster:
    """Return a {0, 1, no-data} raster for one criterion."""
    values = raster.data
    valid = ~np.isnan(values)
    with np.errstate(invalid="ignore"):
        inside = (values >= criterion.lower) & (values < criterion.upper)
    out = np.where(valid, inside.astype(np.float64), np.nan)
    return raster.with_data(out)


def is_binary(raster: Raster) -> bool:
    """True if every defined cell is 0 or 1."""
    defined = raster.data[raster.valid]
    return bool(np.isin(defined, (0.0, 1.0)).all())
