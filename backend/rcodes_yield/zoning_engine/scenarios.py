"""
Multi-scenario comparator.

Each scenario definition is a market positioning strategy expressed as
target ratios across dwelling types (e.g. 30% 2-bed / 70% 3-bed).  For every
definition the comparator tries each unit total in a bounded range, turns
the ratios into whole-unit counts, evaluates the mix and keeps the
configuration that uses the most of the plot-ratio GFA cap while staying
compliant and inside the utilization band.

Two search modes:

  FULL_COMPLIANCE  (default)
      plot ratio, site coverage (footprint + infrastructure + visitor bays),
      open space and minimum lot size per dwelling must all pass.
      Unit totals 2..20, utilization band 50–95%.

  BASIC_CEILING
      only the plot-ratio GFA ceiling and the dwelling-footprint ceiling
      (lot area × max site coverage) are checked.  Unit totals 2..12,
      utilization band 70–95%.

Mixes outside the band are discarded even when compliant.

Definitions with no viable configuration are left out of the result, so
the list may be shorter than the catalog, or empty.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping, Optional

from rcodes_yield.config import Settings, settings as default_settings
from rcodes_yield.zoning_engine.dwelling_types import (
    DEFAULT_MARKET_PRICES,
    DWELLING_TYPES,
    DwellingTypeTemplate,
    price_for,
)
from rcodes_yield.zoning_engine.evaluation import (
    EvaluatedConfiguration,
    Mix,
    evaluate_mix,
)
from rcodes_yield.zoning_engine.geometry import envelope_for_rule
from rcodes_yield.zoning_engine.infrastructure import determine_site_layout
from rcodes_yield.zoning_engine.rcode_tables import (
    DEFAULT_REPOSITORY,
    CodeRule,
    CodeRuleRepository,
)

logger = logging.getLogger(__name__)


class SearchMode(str, Enum):
    FULL_COMPLIANCE = "full_compliance"
    BASIC_CEILING = "basic_ceiling"


MODE_CHECKS: dict[SearchMode, tuple[str, ...]] = {
    SearchMode.FULL_COMPLIANCE: ("plot_ratio", "site_coverage", "open_space", "min_lot_size"),
    SearchMode.BASIC_CEILING: ("plot_ratio", "footprint"),
}


@dataclass(frozen=True)
class ScenarioDefinition:
    name: str
    description: str
    strategy: str
    ratios: Mapping[str, float]
    risk_level: str

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "strategy": self.strategy,
            "ratios": dict(self.ratios),
            "risk_level": self.risk_level,
        }


# ──────────────────────────────────────────────────────────────────
# SCENARIO CATALOG
# No pure single-type configurations.
# ──────────────────────────────────────────────────────────────────

SCENARIO_DEFINITIONS: list[ScenarioDefinition] = []


def register_scenario(definition: ScenarioDefinition) -> None:
    """Append a definition to the built-in catalog."""
    SCENARIO_DEFINITIONS.append(definition)


register_scenario(ScenarioDefinition(
    name="Balanced Affordable",
    description="Even split of smaller dwellings targeting affordability and fast sales turnover.",
    strategy="Maximize unit count with affordable product, targeting first-home buyers and investors.",
    ratios={"2bed": 0.50, "3bed": 0.50, "4bed": 0},
    risk_level="LOW",
))
register_scenario(ScenarioDefinition(
    name="3-Bed Dominant",
    description="Family-focused mix with majority 3-bedroom units and some smaller options.",
    strategy="Target the largest buyer segment (families) with mainstream 3-bed product.",
    ratios={"2bed": 0.30, "3bed": 0.70, "4bed": 0},
    risk_level="LOW",
))
register_scenario(ScenarioDefinition(
    name="Balanced Premium",
    description="Larger dwellings split between 3 and 4 bedroom for premium suburbs.",
    strategy="Premium positioning with larger homes targeting upsizers and established families.",
    ratios={"2bed": 0, "3bed": 0.50, "4bed": 0.50},
    risk_level="MEDIUM",
))
register_scenario(ScenarioDefinition(
    name="4-Bed Dominant",
    description="Premium-heavy mix focused on larger family homes with some 3-bed options.",
    strategy="Maximum revenue per unit targeting high-value family market. Longer sales period expected.",
    ratios={"2bed": 0, "3bed": 0.30, "4bed": 0.70},
    risk_level="MEDIUM-HIGH",
))
register_scenario(ScenarioDefinition(
    name="Diversified Mix",
    description="Broad range covering all unit types for maximum market appeal.",
    strategy="Diversified product appeals to multiple buyer segments, reducing market concentration risk.",
    ratios={"2bed": 0.30, "3bed": 0.40, "4bed": 0.30},
    risk_level="LOW",
))
register_scenario(ScenarioDefinition(
    name="Entry-Level Focus",
    description="Weighted toward smaller affordable product with family-size backup.",
    strategy="Strong appeal to investors and first-home buyers with affordable entry prices.",
    ratios={"2bed": 0.60, "3bed": 0.40, "4bed": 0},
    risk_level="LOW",
))
register_scenario(ScenarioDefinition(
    name="Mainstream Focus",
    description="Mainstream 3-bed core with balanced smaller and larger options.",
    strategy="Broad market appeal centred on the most popular dwelling size.",
    ratios={"2bed": 0.20, "3bed": 0.60, "4bed": 0.20},
    risk_level="LOW",
))


@dataclass
class ScenarioResult:
    definition: ScenarioDefinition
    configuration: EvaluatedConfiguration
    mode: SearchMode
    estimated_grv: float
    mix_breakdown: list[dict] = field(default_factory=list)
    limits: dict = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def total_units(self) -> int:
        return self.configuration.total_units

    @property
    def grv_per_sqm(self) -> float:
        gfa = self.configuration.total_gfa
        return self.estimated_grv / gfa if gfa > 0 else 0.0

    def to_dict(self) -> dict:
        result = self.definition.to_dict()
        result.update(self.configuration.to_dict())
        result.update({
            "mode": self.mode.value,
            "estimated_grv": self.estimated_grv,
            "mix_breakdown": [dict(m) for m in self.mix_breakdown],
            "limits": dict(self.limits),
        })
        return result


# ──────────────────────────────────────────────────────────────────
# RATIO → UNIT COUNTS
# ──────────────────────────────────────────────────────────────────

def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def allocate_units(
    total_units: int,
    ratios: Mapping[str, float],
    catalog: Mapping[str, DwellingTypeTemplate] = DWELLING_TYPES,
) -> Mix:
    """Turn target ratios into whole-unit counts.

    Each type with a non-zero ratio gets ``round(total × ratio)`` except the
    last, which takes the remainder.  Any non-zero-ratio type left below
    one unit is bumped to one, so the actual total can exceed
    ``total_units``.
    """
    types = [key for key, ratio in ratios.items() if ratio > 0]
    counts: Mix = {key: 0 for key in catalog}

    assigned = 0
    for i, key in enumerate(types):
        if i == len(types) - 1:
            counts[key] = total_units - assigned  # Last type gets remainder
        else:
            counts[key] = _round_half_up(total_units * ratios[key])
            assigned += counts[key]

    for key in types:
        if counts[key] < 1:
            counts[key] = 1

    return counts


# ──────────────────────────────────────────────────────────────────
# SEARCH
# ──────────────────────────────────────────────────────────────────

def _mode_bounds(mode: SearchMode, settings: Settings) -> tuple[int, tuple[float, float]]:
    if mode == SearchMode.BASIC_CEILING:
        return settings.basic_search_max_units, settings.basic_utilization_band
    return settings.full_search_max_units, settings.full_utilization_band


def calculate_mixed_config(
    lot_area: float,
    lot_width: float,
    lot_depth: float,
    rules: CodeRule,
    ratios: Mapping[str, float],
    prices: Mapping[str, float],
    mode: SearchMode = SearchMode.FULL_COMPLIANCE,
    catalog: Mapping[str, DwellingTypeTemplate] = DWELLING_TYPES,
    settings: Settings = default_settings,
) -> Optional[EvaluatedConfiguration]:
    """Best configuration for one ratio template, or ``None`` if none is viable.

    Among viable configurations the highest utilization wins; the first
    one found is kept on a tie.
    """
    layout = determine_site_layout(lot_width, lot_depth)
    envelope = envelope_for_rule(lot_width, lot_depth, rules)
    max_units, (low, high) = _mode_bounds(mode, settings)
    checks = MODE_CHECKS[mode]

    best: Optional[EvaluatedConfiguration] = None
    for target in range(settings.scenario_min_units, max_units + 1):
        counts = allocate_units(target, ratios, catalog)
        config = evaluate_mix(counts, lot_area, rules, layout, envelope, catalog, prices)

        if not config.passes(checks):
            continue
        if not low <= config.utilization <= high:
            continue
        if best is None or config.utilization > best.utilization:
            best = config

    return best


def _mix_breakdown(
    config: EvaluatedConfiguration,
    catalog: Mapping[str, DwellingTypeTemplate],
) -> list[dict]:
    breakdown = []
    for key, count in config.mix.items():
        if count <= 0:
            continue
        template = catalog[key]
        breakdown.append({
            "type": key,
            "label": template.label,
            "units": count,
            "percentage": _round_half_up(count / config.total_units * 100),
            "footprint": count * template.ground_floor_area,
            "gfa": count * template.total_build_area,
        })
    return breakdown


def generate_mixed_scenarios(
    lot_area: float,
    lot_width: float,
    lot_depth: float,
    rcode: str,
    definitions: Optional[Iterable[ScenarioDefinition]] = None,
    prices: Optional[Mapping[str, float]] = None,
    mode: SearchMode | str | None = None,
    repository: CodeRuleRepository = DEFAULT_REPOSITORY,
    catalog: Mapping[str, DwellingTypeTemplate] = DWELLING_TYPES,
    settings: Settings = default_settings,
) -> list[ScenarioResult]:
    """One best configuration per viable scenario, in definition order.

    ``prices`` maps type key → sale price per dwelling; missing types use
    the default market prices.  Unknown R-Code → empty list.
    """
    rules = repository.get_rule(rcode)
    if rules is None:
        return []

    mode = SearchMode(mode or settings.default_search_mode)
    definitions = list(SCENARIO_DEFINITIONS if definitions is None else definitions)
    resolved_prices = {
        key: price_for(key, prices, DEFAULT_MARKET_PRICES) for key in catalog
    }
    limits = {
        "max_plot_ratio": rules.max_plot_ratio,
        "max_site_coverage": rules.max_site_coverage,
        "min_open_space": rules.min_open_space,
        "min_lot_size": rules.min_lot_size,
    }

    results: list[ScenarioResult] = []
    for definition in definitions:
        config = calculate_mixed_config(
            lot_area, lot_width, lot_depth, rules, definition.ratios,
            resolved_prices, mode, catalog, settings,
        )
        if config is None:
            logger.debug("Scenario %r has no viable mix on %s", definition.name, rules.label)
            continue

        results.append(ScenarioResult(
            definition=definition,
            configuration=config,
            mode=mode,
            estimated_grv=config.estimated_revenue,
            mix_breakdown=_mix_breakdown(config, catalog),
            limits=dict(limits),
        ))

    logger.debug(
        "%d of %d scenarios viable for %.0f sqm %s lot (%s)",
        len(results), len(definitions), lot_area, rules.label, mode.value,
    )
    return results


RANKING_KEYS = {
    "estimated_grv": lambda r: r.estimated_grv,
    "grv_per_sqm": lambda r: r.grv_per_sqm,
    "total_units": lambda r: r.total_units,
    "utilization": lambda r: r.configuration.utilization,
}


def rank_scenarios(results: Iterable[ScenarioResult], key: str = "estimated_grv") -> list[ScenarioResult]:
    """Highest first by ``key``; equal values keep their original order."""
    if key not in RANKING_KEYS:
        raise ValueError(f"Unknown ranking key {key!r}; expected one of {sorted(RANKING_KEYS)}")
    return sorted(results, key=RANKING_KEYS[key], reverse=True)
