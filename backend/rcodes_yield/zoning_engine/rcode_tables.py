"""
WA Residential Design Codes (R-Codes) density tables.

Each R-Code is a density tier: the number roughly tracks dwellings per
hectare, so R20 is a low-density suburban code and R80 a high-density
infill code.  A tier caps how much floor area, site coverage and how many
storeys a lot may carry, and sets minimum open space, setbacks and parking.

The tables are built once at import and exposed read-only.  Lookups never
raise: an unknown, blank or missing code resolves to ``None`` so that
callers can short-circuit.

Sources:
  - State Planning Policy 7.3, Residential Design Codes Volume 1
  - Table 1 (general site requirements) and Part 5 deemed-to-comply provisions
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────
# DATA CLASSES
# ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Setbacks:
    """Minimum building setbacks in metres."""
    primary_street: float
    secondary_street: float
    side: float
    rear: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class CodeRule:
    """Numeric constraints for one R-Code density tier.

    Ratios (plot ratio, open space, site coverage) are fractions of the
    lot area in (0, 1].
    """
    label: str
    min_lot_size: float        # sqm of lot per dwelling
    avg_lot_size: float        # sqm, average site area per dwelling
    max_plot_ratio: float      # GFA / lot area
    min_open_space: float      # open space / lot area
    max_site_coverage: float   # covered area / lot area
    max_stories: int
    max_wall_height: float     # m
    max_building_height: float  # m
    setbacks: Setbacks
    parking_per_dwelling: float
    visitor_parking_ratio: float
    typical_density: str

    def to_dict(self) -> dict:
        return asdict(self)


# ──────────────────────────────────────────────────────────────────
# R-CODE TABLE (ordered low → high density)
# ──────────────────────────────────────────────────────────────────

R_CODE_RULES: Mapping[str, CodeRule] = MappingProxyType({
    "R20": CodeRule(
        label="R20",
        min_lot_size=350,
        avg_lot_size=450,
        max_plot_ratio=0.5,
        min_open_space=0.50,
        max_site_coverage=0.50,
        max_stories=2,
        max_wall_height=6,
        max_building_height=9,
        setbacks=Setbacks(primary_street=6, secondary_street=1.5, side=1.5, rear=6),
        parking_per_dwelling=2,
        visitor_parking_ratio=0.25,
        typical_density="Low",
    ),
    "R30": CodeRule(
        label="R30",
        min_lot_size=260,
        avg_lot_size=300,
        max_plot_ratio=0.6,
        min_open_space=0.45,
        max_site_coverage=0.55,
        max_stories=2,
        max_wall_height=6,
        max_building_height=9,
        setbacks=Setbacks(primary_street=4, secondary_street=1.5, side=1.0, rear=1.5),
        parking_per_dwelling=2,
        visitor_parking_ratio=0.25,
        typical_density="Medium",
    ),
    "R40": CodeRule(
        label="R40",
        min_lot_size=180,
        avg_lot_size=220,
        max_plot_ratio=0.6,
        min_open_space=0.45,
        max_site_coverage=0.60,
        max_stories=2,
        max_wall_height=7,
        max_building_height=10,
        setbacks=Setbacks(primary_street=4, secondary_street=1.5, side=1.0, rear=1.5),
        parking_per_dwelling=1.5,
        visitor_parking_ratio=0.25,
        typical_density="Medium-High",
    ),
    "R60": CodeRule(
        label="R60",
        min_lot_size=120,
        avg_lot_size=150,
        max_plot_ratio=0.7,
        min_open_space=0.40,
        max_site_coverage=0.65,
        max_stories=3,
        max_wall_height=9,
        max_building_height=12,
        setbacks=Setbacks(primary_street=4, secondary_street=1.5, side=1.0, rear=1.5),
        parking_per_dwelling=1,
        visitor_parking_ratio=0.25,
        typical_density="High",
    ),
    "R80": CodeRule(
        label="R80",
        min_lot_size=100,
        avg_lot_size=120,
        max_plot_ratio=0.8,
        min_open_space=0.35,
        max_site_coverage=0.70,
        max_stories=4,
        max_wall_height=12,
        max_building_height=15,
        setbacks=Setbacks(primary_street=3, secondary_street=1.5, side=1.0, rear=1.0),
        parking_per_dwelling=1,
        visitor_parking_ratio=0.20,
        typical_density="High",
    ),
})


# ──────────────────────────────────────────────────────────────────
# REPOSITORY
# ──────────────────────────────────────────────────────────────────

class CodeRuleRepository:
    """Read-only lookup of R-Code rules by label.

    Built from any iterable of ``CodeRule`` so tests and callers can inject
    their own tiers; order of the iterable is the order ``list_codes``
    reports.
    """

    def __init__(self, rules: Iterable[CodeRule]):
        self._rules: Mapping[str, CodeRule] = MappingProxyType(
            {rule.label.strip().upper(): rule for rule in rules}
        )

    def get_rule(self, code: Optional[str]) -> Optional[CodeRule]:
        """Return the rule for ``code`` or ``None`` if it is not recognised."""
        if not code or not isinstance(code, str):
            return None
        rule = self._rules.get(code.strip().upper())
        if rule is None:
            logger.warning("Unknown R-Code %r", code)
        return rule

    def list_codes(self) -> list[str]:
        return list(self._rules)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.strip().upper() in self._rules

    def __len__(self) -> int:
        return len(self._rules)


DEFAULT_REPOSITORY = CodeRuleRepository(R_CODE_RULES.values())


def get_rcode_rules(rcode: Optional[str]) -> Optional[CodeRule]:
    """Look up an R-Code in the default table."""
    return DEFAULT_REPOSITORY.get_rule(rcode)


def get_all_rcodes() -> list[str]:
    """All known R-Codes, lowest density first."""
    return DEFAULT_REPOSITORY.list_codes()
