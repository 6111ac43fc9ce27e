"""
Site layout classification and shared-access infrastructure estimates.

Grouped dwelling sites give up land to a common driveway, a turning bay
once the development is large enough to need one, and communal
landscaping / pedestrian paths.  Inputs are assumed valid.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SiteLayout(str, Enum):
    BATTLE_AXE = "battle-axe"
    WIDE_FRONTAGE = "wide-frontage"
    STANDARD = "standard"


# Shared driveway: 3.5m single lane, 6m two-way
SINGLE_LANE_DRIVEWAY_WIDTH = 3.5
TWO_WAY_DRIVEWAY_WIDTH = 6
TWO_WAY_THRESHOLD_UNITS = 3

BATTLE_AXE_DRIVEWAY_LENGTH = 25
STANDARD_DRIVEWAY_LENGTH = 15

TURNING_AREA_SQM = 50
TURNING_AREA_THRESHOLD_UNITS = 4

LANDSCAPING_PER_DWELLING_SQM = 8

# Visitor bays sit outside the dwellings' own footprint
EXTERNAL_BAY_AREA_SQM = 15


@dataclass
class InfrastructureArea:
    driveway_area: float
    turning_area: float
    common_landscaping: float
    total_infra_area: float

    def to_dict(self) -> dict:
        return {
            "driveway_area": self.driveway_area,
            "turning_area": self.turning_area,
            "common_landscaping": self.common_landscaping,
            "total_infra_area": self.total_infra_area,
        }


def determine_site_layout(lot_width: float, lot_depth: float) -> SiteLayout:
    """Classify a lot by its proportions.

    Deep narrow lots (depth more than 2.5x width) are battle-axe sites
    reached by a long shared drive; lots noticeably wider than deep are
    wide-frontage; everything else is standard.
    """
    if lot_depth / lot_width > 2.5:
        return SiteLayout.BATTLE_AXE
    if lot_width > lot_depth * 1.2:
        return SiteLayout.WIDE_FRONTAGE
    return SiteLayout.STANDARD


def calculate_infrastructure_area(num_dwellings: int, layout: SiteLayout | str) -> InfrastructureArea:
    """Estimate common access and landscaping area for ``num_dwellings``."""
    if num_dwellings > TWO_WAY_THRESHOLD_UNITS:
        driveway_width = TWO_WAY_DRIVEWAY_WIDTH
    else:
        driveway_width = SINGLE_LANE_DRIVEWAY_WIDTH

    if layout == SiteLayout.BATTLE_AXE:
        driveway_length = BATTLE_AXE_DRIVEWAY_LENGTH
    else:
        driveway_length = STANDARD_DRIVEWAY_LENGTH

    driveway_area = driveway_width * driveway_length
    turning_area = TURNING_AREA_SQM if num_dwellings > TURNING_AREA_THRESHOLD_UNITS else 0
    landscaping = num_dwellings * LANDSCAPING_PER_DWELLING_SQM

    return InfrastructureArea(
        driveway_area=driveway_area,
        turning_area=turning_area,
        common_landscaping=landscaping,
        total_infra_area=driveway_area + turning_area + landscaping,
    )
