"""
Area, envelope and parking calculators derived from R-Code limits.

All three calculators look up the R-Code first and return ``None`` when it
is not recognised.  Lengths are metres, areas square metres.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from rcodes_yield.zoning_engine.rcode_tables import (
    DEFAULT_REPOSITORY,
    CodeRule,
    CodeRuleRepository,
    Setbacks,
)

logger = logging.getLogger(__name__)

# Standard bay 5.5m x 2.5m = 13.75 sqm; ~18 sqm once the access aisle share is added
PARKING_BAY_AREA_SQM = 18
PARKING_BAY_DIMENSIONS = "5.5m × 2.5m"


# ──────────────────────────────────────────────────────────────────
# DATA CLASSES
# ──────────────────────────────────────────────────────────────────

@dataclass
class BuildableArea:
    total_lot_area: float
    max_site_coverage: float   # sqm of footprint
    max_gfa: float             # theoretical multi-storey ceiling
    min_open_space_area: float
    usable_build_area: float
    max_stories: int

    def to_dict(self) -> dict:
        return {
            "total_lot_area": self.total_lot_area,
            "max_site_coverage": self.max_site_coverage,
            "max_gfa": self.max_gfa,
            "min_open_space_area": self.min_open_space_area,
            "usable_build_area": self.usable_build_area,
            "max_stories": self.max_stories,
        }


@dataclass
class BuildableEnvelope:
    """Setback-adjusted buildable rectangle.

    ``effective_width`` and ``effective_depth`` are clamped to zero for
    reporting, but ``envelope_area`` is ``max(0, raw_width * raw_depth)``:
    when both raw dimensions are negative the product is positive.
    ``degenerate`` flags that case (and any lot whose setbacks consume a
    full dimension) so callers do not mistake the area for a real one.
    """
    lot_width: float
    lot_depth: float
    raw_effective_width: float
    raw_effective_depth: float
    effective_width: float
    effective_depth: float
    envelope_area: float
    degenerate: bool
    setbacks: Setbacks

    def to_dict(self) -> dict:
        return {
            "lot_width": self.lot_width,
            "lot_depth": self.lot_depth,
            "raw_effective_width": self.raw_effective_width,
            "raw_effective_depth": self.raw_effective_depth,
            "effective_width": self.effective_width,
            "effective_depth": self.effective_depth,
            "envelope_area": self.envelope_area,
            "degenerate": self.degenerate,
            "setbacks": self.setbacks.to_dict(),
        }


@dataclass
class ParkingRequirements:
    resident_bays: int
    visitor_bays: int
    total_bays: int
    parking_area: float
    bay_dimensions: str = PARKING_BAY_DIMENSIONS

    def to_dict(self) -> dict:
        return {
            "resident_bays": self.resident_bays,
            "visitor_bays": self.visitor_bays,
            "total_bays": self.total_bays,
            "parking_area": self.parking_area,
            "bay_dimensions": self.bay_dimensions,
        }


# ──────────────────────────────────────────────────────────────────
# CALCULATORS
# ──────────────────────────────────────────────────────────────────

def calculate_buildable_area(
    lot_area: float,
    rcode: str,
    repository: CodeRuleRepository = DEFAULT_REPOSITORY,
) -> Optional[BuildableArea]:
    """Maximum footprint, GFA and open-space figures for a lot.

    ``max_gfa`` multiplies plot ratio by the storey limit.  It is the
    theoretical multi-storey ceiling, not the single plot-ratio cap the
    optimizer and comparator enforce.
    """
    rules = repository.get_rule(rcode)
    if rules is None:
        return None

    max_footprint = lot_area * rules.max_site_coverage
    max_gfa = lot_area * rules.max_plot_ratio * rules.max_stories
    min_open_space_area = lot_area * rules.min_open_space

    return BuildableArea(
        total_lot_area=lot_area,
        max_site_coverage=max_footprint,
        max_gfa=max_gfa,
        min_open_space_area=min_open_space_area,
        usable_build_area=lot_area - min_open_space_area,
        max_stories=rules.max_stories,
    )


def calculate_buildable_envelope(
    lot_width: float,
    lot_depth: float,
    rcode: str,
    repository: CodeRuleRepository = DEFAULT_REPOSITORY,
) -> Optional[BuildableEnvelope]:
    """Subtract setbacks from the lot rectangle.

    Side setbacks apply to both sides; primary street and rear setbacks
    come off the depth.
    """
    rules = repository.get_rule(rcode)
    if rules is None:
        return None
    return envelope_for_rule(lot_width, lot_depth, rules)


def envelope_for_rule(lot_width: float, lot_depth: float, rules: CodeRule) -> BuildableEnvelope:
    setbacks = rules.setbacks
    raw_width = lot_width - setbacks.side * 2
    raw_depth = lot_depth - setbacks.primary_street - setbacks.rear
    degenerate = raw_width <= 0 or raw_depth <= 0
    if degenerate:
        logger.warning(
            "Setbacks exceed lot dimensions for %s: %.1fm x %.1fm leaves %.2fm x %.2fm",
            rules.label, lot_width, lot_depth, raw_width, raw_depth,
        )

    return BuildableEnvelope(
        lot_width=lot_width,
        lot_depth=lot_depth,
        raw_effective_width=raw_width,
        raw_effective_depth=raw_depth,
        effective_width=max(0, raw_width),
        effective_depth=max(0, raw_depth),
        envelope_area=max(0, raw_width * raw_depth),
        degenerate=degenerate,
        setbacks=setbacks,
    )


def calculate_parking_requirements(
    num_dwellings: int,
    rcode: str,
    repository: CodeRuleRepository = DEFAULT_REPOSITORY,
) -> Optional[ParkingRequirements]:
    """Resident and visitor bays, each rounded up, and the area they take."""
    rules = repository.get_rule(rcode)
    if rules is None:
        return None
    return parking_for_rule(num_dwellings, rules)


def parking_for_rule(num_dwellings: int, rules: CodeRule) -> ParkingRequirements:
    resident = math.ceil(num_dwellings * rules.parking_per_dwelling)
    visitor = math.ceil(num_dwellings * rules.visitor_parking_ratio)
    total = resident + visitor

    return ParkingRequirements(
        resident_bays=resident,
        visitor_bays=visitor,
        total_bays=total,
        parking_area=total * PARKING_BAY_AREA_SQM,
    )
