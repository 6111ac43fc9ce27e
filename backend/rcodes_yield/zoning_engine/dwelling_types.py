"""
Dwelling type catalog and reference sale prices.

The reference product is a two-storey townhouse in three sizes.  Footprint
is the ground floor only; total build area is GFA across both levels, so
GFA is roughly twice the footprint.

Catalog order matters: the optimizer treats the first entry as the
smallest type (used for the single-unit fallback) and the last as the
large type whose share of a mix is capped.  New types are added with
``register_dwelling_type``; no search logic changes.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Mapping


@dataclass(frozen=True)
class DwellingTypeTemplate:
    key: str
    label: str
    ground_floor_area: float   # sqm footprint
    total_build_area: float    # sqm GFA, all levels
    parking_demand: float      # bays, rounded up once summed over a mix
    min_lot_width: float       # m of frontage
    internal_garage: float = 0  # sqm, included in total_build_area
    stories: int = 2

    def to_dict(self) -> dict:
        return asdict(self)


# ──────────────────────────────────────────────────────────────────
# CATALOG (smallest → largest)
# ──────────────────────────────────────────────────────────────────

DWELLING_TYPES: dict[str, DwellingTypeTemplate] = {}


def register_dwelling_type(template: DwellingTypeTemplate) -> None:
    """Add or replace a dwelling type in the catalog."""
    DWELLING_TYPES[template.key] = template


register_dwelling_type(DwellingTypeTemplate(
    key="2bed", label="2 Bedroom",
    ground_floor_area=55, total_build_area=100, parking_demand=1,
    min_lot_width=6, internal_garage=18,
))
register_dwelling_type(DwellingTypeTemplate(
    key="3bed", label="3 Bedroom",
    ground_floor_area=70, total_build_area=145, parking_demand=1.5,
    min_lot_width=7.5, internal_garage=20,
))
register_dwelling_type(DwellingTypeTemplate(
    key="4bed", label="4 Bedroom",
    ground_floor_area=95, total_build_area=200, parking_demand=2,
    min_lot_width=9, internal_garage=22,
))


# ──────────────────────────────────────────────────────────────────
# PRICES (AUD per dwelling)
# ──────────────────────────────────────────────────────────────────

# Internal ranking only; never reported as a financial result.
REFERENCE_SALE_PRICES: Mapping[str, float] = {
    "2bed": 450_000,
    "3bed": 620_000,
    "4bed": 780_000,
}

# Used by the scenario comparator when the caller supplies no market prices.
DEFAULT_MARKET_PRICES: Mapping[str, float] = {
    "2bed": 550_000,
    "3bed": 650_000,
    "4bed": 780_000,
}


def get_dwelling_types() -> dict[str, DwellingTypeTemplate]:
    return dict(DWELLING_TYPES)


def smallest_type_key(catalog: Mapping[str, DwellingTypeTemplate]) -> str:
    return next(iter(catalog))


def largest_type_key(catalog: Mapping[str, DwellingTypeTemplate]) -> str:
    return list(catalog)[-1]


def price_for(key: str, prices: Mapping[str, float] | None, fallback: Mapping[str, float]) -> float:
    """Price for one dwelling type, falling back per type when missing."""
    if prices and prices.get(key):
        return prices[key]
    return fallback.get(key, 0)
