"""
Deemed-to-comply check for a proposed development.

Unlike the optimizer, which builds mixes itself, this takes a proposal's
headline figures (dwellings, GFA, covered area, open space, storeys) and
reports each R-Code limit as a named pass/fail line suitable for a report
table.  Setback and parking lines are informational: the proposal is
assumed to meet the required setbacks and provide the required bays.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from rcodes_yield.zoning_engine.geometry import (
    BuildableEnvelope,
    ParkingRequirements,
    envelope_for_rule,
    parking_for_rule,
)
from rcodes_yield.zoning_engine.rcode_tables import (
    DEFAULT_REPOSITORY,
    CodeRule,
    CodeRuleRepository,
)


@dataclass
class ComplianceCheck:
    name: str
    allowed: str
    proposed: str
    compliant: bool

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "allowed": self.allowed,
            "proposed": self.proposed,
            "compliant": self.compliant,
        }


@dataclass
class ComplianceReport:
    valid: bool
    checks: list[ComplianceCheck] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    rules: Optional[CodeRule] = None
    envelope: Optional[BuildableEnvelope] = None
    parking: Optional[ParkingRequirements] = None

    def failed_checks(self) -> list[ComplianceCheck]:
        return [c for c in self.checks if not c.compliant]

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "checks": [c.to_dict() for c in self.checks],
            "errors": list(self.errors),
            "rules": self.rules.to_dict() if self.rules else None,
            "envelope": self.envelope.to_dict() if self.envelope else None,
            "parking": self.parking.to_dict() if self.parking else None,
        }


def _pct(ratio: float, places: int) -> str:
    return f"{ratio * 100:.{places}f}%"


def check_compliance(
    lot_area: float,
    lot_width: float,
    lot_depth: float,
    rcode: str,
    proposed_dwellings: int,
    proposed_gfa: float,
    proposed_site_coverage: float,
    proposed_open_space: float,
    proposed_height: int,
    repository: CodeRuleRepository = DEFAULT_REPOSITORY,
) -> ComplianceReport:
    """Check a proposal against its R-Code.

    Args:
        lot_area: Lot area in sqm
        lot_width: Lot frontage in metres
        lot_depth: Lot depth in metres
        rcode: R-Code label (e.g. "R40")
        proposed_dwellings: Number of dwellings
        proposed_gfa: Total GFA in sqm
        proposed_site_coverage: Covered area in sqm
        proposed_open_space: Open space in sqm
        proposed_height: Building height in storeys

    An unknown R-Code gives ``valid=False`` with an error and no checks.
    """
    rules = repository.get_rule(rcode)
    if rules is None:
        return ComplianceReport(valid=False, errors=["Invalid R-Code"])

    checks: list[ComplianceCheck] = []

    plot_ratio = proposed_gfa / lot_area
    checks.append(ComplianceCheck(
        name="Plot Ratio",
        allowed=_pct(rules.max_plot_ratio, 0),
        proposed=_pct(plot_ratio, 1),
        compliant=plot_ratio <= rules.max_plot_ratio,
    ))

    coverage_ratio = proposed_site_coverage / lot_area
    checks.append(ComplianceCheck(
        name="Site Coverage",
        allowed=_pct(rules.max_site_coverage, 0),
        proposed=_pct(coverage_ratio, 1),
        compliant=coverage_ratio <= rules.max_site_coverage,
    ))

    open_space_ratio = proposed_open_space / lot_area
    checks.append(ComplianceCheck(
        name="Open Space",
        allowed=f">= {_pct(rules.min_open_space, 0)}",
        proposed=_pct(open_space_ratio, 1),
        compliant=open_space_ratio >= rules.min_open_space,
    ))

    checks.append(ComplianceCheck(
        name="Building Height",
        allowed=f"{rules.max_stories} stories",
        proposed=f"{proposed_height} stories",
        compliant=proposed_height <= rules.max_stories,
    ))

    parking = parking_for_rule(proposed_dwellings, rules)
    checks.append(ComplianceCheck(
        name="Parking Bays",
        allowed=f"{parking.total_bays} bays required",
        proposed=f"{parking.total_bays} bays allocated",
        compliant=True,
    ))

    envelope = envelope_for_rule(lot_width, lot_depth, rules)
    setbacks = rules.setbacks
    checks.append(ComplianceCheck(
        name="Primary Setback",
        allowed=f"{setbacks.primary_street}m",
        proposed=f"{setbacks.primary_street}m",
        compliant=True,
    ))
    checks.append(ComplianceCheck(
        name="Side Setbacks",
        allowed=f"{setbacks.side}m each side",
        proposed=f"{setbacks.side}m",
        compliant=True,
    ))
    checks.append(ComplianceCheck(
        name="Rear Setback",
        allowed=f"{setbacks.rear}m",
        proposed=f"{setbacks.rear}m",
        compliant=True,
    ))

    return ComplianceReport(
        valid=all(c.compliant for c in checks),
        checks=checks,
        rules=rules,
        envelope=envelope,
        parking=parking,
    )
