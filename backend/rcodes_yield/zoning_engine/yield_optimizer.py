"""
Single-mix yield optimizer.

Enumerates every dwelling mix of 1..N units (N = ``max_total_units``) across
the dwelling catalog and keeps the compliant mix with the highest estimated
revenue.  Revenue uses the reference price table (overridable per type) and
is only a ranking device; financial reporting happens downstream with
market prices.

Search space per unit total:
  - the largest type is capped at ``large_unit_share`` of the total
    (all-large mixes are implausible on a single lot)
  - the middle types take every split of what is left
  - the smallest type takes the remainder

Ranking is by revenue, then higher total GFA, then fewer large units.
Exact ties beyond that keep the first mix generated.

If nothing passes, the result falls back to one unit of the smallest type.
That fallback is evaluated but NOT filtered: ``compliant`` may be False and
``is_fallback`` is set.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterator, Mapping, Optional

from rcodes_yield.config import Settings, settings as default_settings
from rcodes_yield.zoning_engine.dwelling_types import (
    DWELLING_TYPES,
    REFERENCE_SALE_PRICES,
    DwellingTypeTemplate,
    largest_type_key,
    price_for,
    smallest_type_key,
)
from rcodes_yield.zoning_engine.evaluation import (
    EvaluatedConfiguration,
    Mix,
    evaluate_mix,
)
from rcodes_yield.zoning_engine.geometry import BuildableEnvelope, envelope_for_rule
from rcodes_yield.zoning_engine.infrastructure import SiteLayout, determine_site_layout
from rcodes_yield.zoning_engine.rcode_tables import (
    DEFAULT_REPOSITORY,
    CodeRule,
    CodeRuleRepository,
)

logger = logging.getLogger(__name__)


@dataclass
class YieldResult:
    configuration: EvaluatedConfiguration
    layout: SiteLayout
    layout_description: str
    rcode: str
    rules: CodeRule
    envelope: BuildableEnvelope
    is_fallback: bool = False

    # Shortcuts used by callers that only need the headline numbers
    @property
    def total_units(self) -> int:
        return self.configuration.total_units

    @property
    def compliant(self) -> bool:
        return self.configuration.compliant

    @property
    def mix(self) -> Mix:
        return self.configuration.mix

    def to_dict(self) -> dict:
        result = self.configuration.to_dict()
        result.update({
            "layout": self.layout.value,
            "layout_description": self.layout_description,
            "rcode": self.rcode,
            "rules": self.rules.to_dict(),
            "envelope": self.envelope.to_dict(),
            "is_fallback": self.is_fallback,
        })
        return result


# ──────────────────────────────────────────────────────────────────
# CANDIDATE GENERATION
# ──────────────────────────────────────────────────────────────────

def _splits(units: int, slots: int) -> Iterator[tuple[int, ...]]:
    """Every tuple of ``slots`` non-negative counts summing to at most ``units``."""
    if slots == 0:
        yield ()
        return
    for first in range(units + 1):
        for rest in _splits(units - first, slots - 1):
            yield (first,) + rest


def generate_mixes(
    total_units: int,
    catalog: Mapping[str, DwellingTypeTemplate] = DWELLING_TYPES,
    large_unit_share: float = 0.3,
) -> Iterator[Mix]:
    """Lazily yield candidate mixes of exactly ``total_units`` dwellings.

    The generator is finite and can be re-created at will; ordering is
    deterministic (large count ascending, then middle counts ascending).
    """
    keys = list(catalog)
    if len(keys) == 1:
        yield {keys[0]: total_units}
        return

    smallest, middle, largest = keys[0], keys[1:-1], keys[-1]
    large_cap = min(total_units, math.floor(total_units * large_unit_share))

    for large in range(large_cap + 1):
        for split in _splits(total_units - large, len(middle)):
            mix = {smallest: total_units - large - sum(split)}
            mix.update(zip(middle, split))
            mix[largest] = large
            yield mix


def _rank_key(config: EvaluatedConfiguration, large_key: str) -> tuple:
    return (config.estimated_revenue, config.total_gfa, -config.mix.get(large_key, 0))


# ──────────────────────────────────────────────────────────────────
# LAYOUT DESCRIPTIONS
# ──────────────────────────────────────────────────────────────────

def get_layout_description(layout: SiteLayout, total_units: int) -> str:
    if layout == SiteLayout.BATTLE_AXE:
        return (
            "Battle-axe configuration with shared driveway access from the street. "
            f"{total_units} dwellings arranged along the driveway with individual access "
            "to each unit. Deep lot allows for rear positioning of units with private "
            "courtyard spaces."
        )
    if layout == SiteLayout.WIDE_FRONTAGE:
        return (
            "Linear frontage configuration maximizing street presence. "
            f"{total_units} dwellings arranged side-by-side with individual street access "
            "where possible. Wide lot allows for varied facade treatments and direct "
            "vehicle access."
        )
    driveway = "central" if total_units > 3 else "side"
    return (
        f"Standard grouped dwelling configuration with {driveway} shared driveway. "
        f"{total_units} dwellings arranged to maximize private open space for each unit "
        "while maintaining efficient common area usage."
    )


# ──────────────────────────────────────────────────────────────────
# OPTIMIZER
# ──────────────────────────────────────────────────────────────────

def optimize_yield(
    lot_area: float,
    lot_width: float,
    lot_depth: float,
    rcode: str,
    repository: CodeRuleRepository = DEFAULT_REPOSITORY,
    catalog: Mapping[str, DwellingTypeTemplate] = DWELLING_TYPES,
    settings: Settings = default_settings,
    reference_prices: Optional[Mapping[str, float]] = None,
) -> Optional[YieldResult]:
    """Find the revenue-best compliant dwelling mix for a lot.

    ``reference_prices`` overrides the ranking price per type; catalog types
    missing from it and from ``REFERENCE_SALE_PRICES`` are priced 0.
    Returns ``None`` for an unknown R-Code.
    """
    rules = repository.get_rule(rcode)
    if rules is None:
        return None

    layout = determine_site_layout(lot_width, lot_depth)
    envelope = envelope_for_rule(lot_width, lot_depth, rules)
    large_key = largest_type_key(catalog)
    prices = {
        key: price_for(key, reference_prices, REFERENCE_SALE_PRICES) for key in catalog
    }

    def candidates() -> Iterator[EvaluatedConfiguration]:
        for total in range(1, settings.max_total_units + 1):
            for mix in generate_mixes(total, catalog, settings.large_unit_share):
                yield evaluate_mix(
                    mix, lot_area, rules, layout, envelope, catalog, prices,
                )

    best = max(
        (c for c in candidates() if c.compliant),
        key=lambda c: _rank_key(c, large_key),
        default=None,
    )

    is_fallback = best is None
    if is_fallback:
        logger.info(
            "No compliant mix for %.0f sqm %s lot; falling back to a single unit",
            lot_area, rules.label,
        )
        best = evaluate_mix(
            {smallest_type_key(catalog): 1},
            lot_area, rules, layout, envelope, catalog, prices,
        )
    else:
        logger.debug(
            "Best mix for %.0f sqm %s lot: %s (%d units, revenue %.0f)",
            lot_area, rules.label, best.mix, best.total_units, best.estimated_revenue,
        )

    return YieldResult(
        configuration=best,
        layout=layout,
        layout_description=get_layout_description(layout, best.total_units),
        rcode=rules.label,
        rules=rules,
        envelope=envelope,
        is_fallback=is_fallback,
    )
