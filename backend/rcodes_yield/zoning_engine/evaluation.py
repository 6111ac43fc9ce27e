"""
Mix evaluation shared by the yield optimizer and the scenario comparator.

A mix is a mapping of dwelling type key → count.  Evaluating it against a
lot and an R-Code produces every derived metric both searches need:
floor area, footprint, infrastructure, parking, coverage, open space, the
resulting ratios and one pass/fail flag per constraint.

Coverage counts dwelling footprints, shared infrastructure and external
visitor bays.  Resident bays are assumed to sit in each dwelling's garage.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Mapping

from rcodes_yield.zoning_engine.dwelling_types import DwellingTypeTemplate
from rcodes_yield.zoning_engine.geometry import (
    BuildableEnvelope,
    ParkingRequirements,
    parking_for_rule,
)
from rcodes_yield.zoning_engine.infrastructure import (
    EXTERNAL_BAY_AREA_SQM,
    InfrastructureArea,
    SiteLayout,
    calculate_infrastructure_area,
)
from rcodes_yield.zoning_engine.rcode_tables import CodeRule

Mix = dict[str, int]

# Flags the optimizer requires; the comparator's full mode adds min_lot_size.
CORE_CHECKS = ("plot_ratio", "site_coverage", "open_space")


@dataclass
class EvaluatedConfiguration:
    mix: Mix
    total_units: int
    total_gfa: float = 0
    total_footprint: float = 0
    total_parking_demand: int = 0
    estimated_revenue: float = 0
    infrastructure: InfrastructureArea | None = None
    parking: ParkingRequirements | None = None
    external_parking_area: float = 0
    total_coverage: float = 0
    open_space: float = 0
    plot_ratio: float = 0
    site_coverage_ratio: float = 0
    open_space_ratio: float = 0
    lot_size_per_unit: float = 0
    utilization: float = 0  # total GFA / plot-ratio GFA cap
    compliance: dict[str, bool] = field(default_factory=dict)
    compliant: bool = False
    dwelling_details: list[dict] = field(default_factory=list)

    def passes(self, checks: tuple[str, ...]) -> bool:
        return all(self.compliance.get(name, False) for name in checks)

    def to_dict(self) -> dict:
        return {
            "mix": dict(self.mix),
            "total_units": self.total_units,
            "total_gfa": self.total_gfa,
            "total_footprint": self.total_footprint,
            "total_parking_demand": self.total_parking_demand,
            "estimated_revenue": self.estimated_revenue,
            "infrastructure": self.infrastructure.to_dict() if self.infrastructure else None,
            "parking": self.parking.to_dict() if self.parking else None,
            "external_parking_area": self.external_parking_area,
            "total_coverage": self.total_coverage,
            "open_space": self.open_space,
            "plot_ratio": self.plot_ratio,
            "site_coverage_ratio": self.site_coverage_ratio,
            "open_space_ratio": self.open_space_ratio,
            "lot_size_per_unit": self.lot_size_per_unit,
            "utilization": self.utilization,
            "compliance": dict(self.compliance),
            "compliant": self.compliant,
            "dwelling_details": [dict(d) for d in self.dwelling_details],
        }


def evaluate_mix(
    mix: Mapping[str, int],
    lot_area: float,
    rules: CodeRule,
    layout: SiteLayout,
    envelope: BuildableEnvelope,
    catalog: Mapping[str, DwellingTypeTemplate],
    prices: Mapping[str, float],
) -> EvaluatedConfiguration:
    """Score one mix against a lot.

    Types missing from ``prices`` are priced 0.  Types in the
    catalog but absent from ``mix`` count as zero.
    """
    counts: Mix = {key: int(mix.get(key, 0)) for key in catalog}
    total_units = sum(counts.values())
    if total_units == 0:
        return EvaluatedConfiguration(mix=counts, total_units=0)

    total_gfa = 0.0
    total_footprint = 0.0
    parking_demand = 0.0
    revenue = 0.0
    details = []
    for key, count in counts.items():
        if count <= 0:
            continue
        template = catalog[key]
        total_gfa += count * template.total_build_area
        total_footprint += count * template.ground_floor_area
        parking_demand += count * template.parking_demand
        revenue += count * prices.get(key, 0)
        details.append({
            "type": template.label,
            "key": key,
            "quantity": count,
            "avg_size": template.total_build_area,
            "total_gfa": count * template.total_build_area,
            "footprint": count * template.ground_floor_area,
        })

    infra = calculate_infrastructure_area(total_units, layout)
    parking = parking_for_rule(total_units, rules)
    external_parking_area = parking.visitor_bays * EXTERNAL_BAY_AREA_SQM

    total_coverage = total_footprint + infra.total_infra_area + external_parking_area
    open_space = lot_area - total_coverage

    plot_ratio = total_gfa / lot_area
    site_coverage_ratio = total_coverage / lot_area
    open_space_ratio = open_space / lot_area
    lot_size_per_unit = lot_area / total_units
    gfa_cap = lot_area * rules.max_plot_ratio

    compliance = {
        "plot_ratio": plot_ratio <= rules.max_plot_ratio,
        "site_coverage": site_coverage_ratio <= rules.max_site_coverage,
        "open_space": open_space_ratio >= rules.min_open_space,
        "min_lot_size": lot_size_per_unit >= rules.min_lot_size,
        "footprint": total_footprint <= lot_area * rules.max_site_coverage,
        # Tracked, not enforced
        "envelope": total_coverage <= envelope.envelope_area + infra.total_infra_area,
    }

    return EvaluatedConfiguration(
        mix=counts,
        total_units=total_units,
        total_gfa=total_gfa,
        total_footprint=total_footprint,
        total_parking_demand=math.ceil(parking_demand),
        estimated_revenue=revenue,
        infrastructure=infra,
        parking=parking,
        external_parking_area=external_parking_area,
        total_coverage=total_coverage,
        open_space=open_space,
        plot_ratio=plot_ratio,
        site_coverage_ratio=site_coverage_ratio,
        open_space_ratio=open_space_ratio,
        lot_size_per_unit=lot_size_per_unit,
        utilization=total_gfa / gfa_cap if gfa_cap > 0 else 0,
        compliance=compliance,
        compliant=all(compliance[name] for name in CORE_CHECKS),
        dwelling_details=details,
    )
