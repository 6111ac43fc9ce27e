"""
Yield calculator: one entry point over the R-Code engine.

Bundles a rule repository, dwelling catalog and settings so callers work
with validated ``LotInput`` / ``ScenarioRequest`` models instead of wiring
the individual calculators together.
"""

from __future__ import annotations

from typing import Mapping, Optional

from rcodes_yield.config import Settings, settings as default_settings
from rcodes_yield.models.schemas import ComplianceRequest, LotInput, ScenarioRequest
from rcodes_yield.zoning_engine.compliance import ComplianceReport, check_compliance
from rcodes_yield.zoning_engine.dwelling_types import DWELLING_TYPES, DwellingTypeTemplate
from rcodes_yield.zoning_engine.geometry import (
    BuildableArea,
    BuildableEnvelope,
    ParkingRequirements,
    calculate_buildable_area,
    calculate_buildable_envelope,
    calculate_parking_requirements,
)
from rcodes_yield.zoning_engine.rcode_tables import (
    DEFAULT_REPOSITORY,
    CodeRule,
    CodeRuleRepository,
)
from rcodes_yield.zoning_engine.scenarios import (
    SCENARIO_DEFINITIONS,
    ScenarioDefinition,
    ScenarioResult,
    generate_mixed_scenarios,
    rank_scenarios,
)
from rcodes_yield.zoning_engine.yield_optimizer import YieldResult, optimize_yield


class YieldCalculator:
    """Computes yield, scenarios and compliance for a lot."""

    def __init__(
        self,
        repository: Optional[CodeRuleRepository] = None,
        catalog: Optional[Mapping[str, DwellingTypeTemplate]] = None,
        settings: Optional[Settings] = None,
    ):
        self.repository = repository if repository is not None else DEFAULT_REPOSITORY
        self.catalog = catalog if catalog is not None else DWELLING_TYPES
        self.settings = settings if settings is not None else default_settings

    # ── Lookups ──

    def rules(self, rcode: str) -> Optional[CodeRule]:
        return self.repository.get_rule(rcode)

    def codes(self) -> list[str]:
        return self.repository.list_codes()

    def dwelling_types(self) -> dict[str, DwellingTypeTemplate]:
        return dict(self.catalog)

    # ── Geometry ──

    def buildable_area(self, lot: LotInput) -> Optional[BuildableArea]:
        return calculate_buildable_area(lot.lot_area, lot.rcode, self.repository)

    def buildable_envelope(self, lot: LotInput) -> Optional[BuildableEnvelope]:
        return calculate_buildable_envelope(lot.lot_width, lot.lot_depth, lot.rcode, self.repository)

    def parking(self, num_dwellings: int, rcode: str) -> Optional[ParkingRequirements]:
        return calculate_parking_requirements(num_dwellings, rcode, self.repository)

    # ── Search ──

    def optimize(self, lot: LotInput) -> Optional[YieldResult]:
        """Best single dwelling mix, or ``None`` for an unknown R-Code."""
        return optimize_yield(
            lot.lot_area, lot.lot_width, lot.lot_depth, lot.rcode,
            repository=self.repository,
            catalog=self.catalog,
            settings=self.settings,
        )

    def compare_scenarios(
        self,
        request: ScenarioRequest,
        definitions: Optional[list[ScenarioDefinition]] = None,
    ) -> list[ScenarioResult]:
        """Best mix per scenario definition, in definition order unless ranked."""
        lot = request.lot
        results = generate_mixed_scenarios(
            lot.lot_area, lot.lot_width, lot.lot_depth, lot.rcode,
            definitions=definitions if definitions is not None else SCENARIO_DEFINITIONS,
            prices=request.prices,
            mode=request.mode,
            repository=self.repository,
            catalog=self.catalog,
            settings=self.settings,
        )
        if request.rank_by:
            results = rank_scenarios(results, request.rank_by)
        return results

    def check_compliance(self, request: ComplianceRequest) -> ComplianceReport:
        lot = request.lot
        return check_compliance(
            lot.lot_area, lot.lot_width, lot.lot_depth, lot.rcode,
            proposed_dwellings=request.proposed_dwellings,
            proposed_gfa=request.proposed_gfa,
            proposed_site_coverage=request.proposed_site_coverage,
            proposed_open_space=request.proposed_open_space,
            proposed_height=request.proposed_height,
            repository=self.repository,
        )

    def analyze(self, request: ScenarioRequest) -> dict:
        """Full analysis: rules, geometry, best single mix and scenarios."""
        lot = request.lot
        rules = self.rules(lot.rcode)
        if rules is None:
            return {"rcode": lot.rcode, "error": "Invalid R-Code"}

        optimized = self.optimize(lot)
        scenarios = self.compare_scenarios(request)
        return {
            "rcode": rules.label,
            "rules": rules.to_dict(),
            "buildable_area": self.buildable_area(lot).to_dict(),
            "envelope": self.buildable_envelope(lot).to_dict(),
            "yield": optimized.to_dict(),
            "scenarios": [s.to_dict() for s in scenarios],
        }
