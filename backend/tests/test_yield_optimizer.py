"""Tests for the single-mix yield optimizer.

Standard test property: R60, 800 sqm, 20m × 40m.
"""

from __future__ import annotations

import pytest

from rcodes_yield.config import Settings
from rcodes_yield.zoning_engine.dwelling_types import (
    DWELLING_TYPES,
    REFERENCE_SALE_PRICES,
    DwellingTypeTemplate,
)
from rcodes_yield.zoning_engine.evaluation import EvaluatedConfiguration, evaluate_mix
from rcodes_yield.zoning_engine.infrastructure import SiteLayout
from rcodes_yield.zoning_engine.rcode_tables import get_rcode_rules
from rcodes_yield.zoning_engine.yield_optimizer import (
    _rank_key,
    generate_mixes,
    get_layout_description,
    optimize_yield,
)


@pytest.fixture(scope="module")
def r60_result():
    return optimize_yield(800, 20, 40, "R60")


# ──────────────────────────────────────────────────────────────────
# CANDIDATE GENERATION
# ──────────────────────────────────────────────────────────────────

class TestGenerateMixes:
    """Lazy enumeration of mixes for one unit total."""

    def test_every_mix_sums_to_total(self):
        for mix in generate_mixes(7):
            assert sum(mix.values()) == 7
            assert all(count >= 0 for count in mix.values())

    def test_four_units_mix_count(self):
        # 4-bed capped at floor(4 × 0.3) = 1: five splits with none, four with one
        assert len(list(generate_mixes(4))) == 9

    def test_large_share_cap(self):
        for mix in generate_mixes(10):
            assert mix["4bed"] <= 3

    def test_single_unit_has_no_large(self):
        mixes = list(generate_mixes(1))
        assert mixes == [
            {"2bed": 1, "3bed": 0, "4bed": 0},
            {"2bed": 0, "3bed": 1, "4bed": 0},
        ]

    def test_order_is_deterministic(self):
        assert list(generate_mixes(6)) == list(generate_mixes(6))

    def test_first_mix_all_small(self):
        assert next(generate_mixes(5)) == {"2bed": 5, "3bed": 0, "4bed": 0}

    def test_single_type_catalog(self):
        catalog = {"2bed": DWELLING_TYPES["2bed"]}
        assert list(generate_mixes(3, catalog)) == [{"2bed": 3}]

    def test_four_type_catalog(self):
        catalog = dict(DWELLING_TYPES)
        catalog["5bed"] = DwellingTypeTemplate(
            key="5bed", label="5 Bedroom",
            ground_floor_area=120, total_build_area=250,
            parking_demand=2, min_lot_width=10,
        )
        mixes = list(generate_mixes(4, catalog))
        assert all(sum(m.values()) == 4 for m in mixes)
        assert all(m["5bed"] <= 1 for m in mixes)
        assert {"2bed": 0, "3bed": 2, "4bed": 2, "5bed": 0} in mixes


# ──────────────────────────────────────────────────────────────────
# STANDARD PROPERTY
# ──────────────────────────────────────────────────────────────────

class TestStandardProperty:
    """R60 / 800 sqm / 20m × 40m."""

    def test_result_is_compliant(self, r60_result):
        assert r60_result is not None
        assert r60_result.compliant is True
        assert r60_result.is_fallback is False

    def test_within_limits(self, r60_result):
        rules = get_rcode_rules("R60")
        config = r60_result.configuration
        assert config.plot_ratio <= rules.max_plot_ratio
        assert config.site_coverage_ratio <= rules.max_site_coverage
        assert config.open_space_ratio >= rules.min_open_space

    def test_best_mix(self, r60_result):
        assert r60_result.mix == {"2bed": 1, "3bed": 3, "4bed": 0}
        assert r60_result.total_units == 4
        assert r60_result.configuration.estimated_revenue == 2_310_000
        assert r60_result.configuration.total_gfa == 535

    def test_coverage_breakdown(self, r60_result):
        config = r60_result.configuration
        assert config.total_footprint == 265
        assert config.infrastructure.total_infra_area == 122
        assert config.external_parking_area == 15
        assert config.total_coverage == 402
        assert config.open_space == 398

    def test_compliance_flags(self, r60_result):
        flags = r60_result.configuration.compliance
        assert flags["plot_ratio"] is True
        assert flags["site_coverage"] is True
        assert flags["open_space"] is True
        assert flags["envelope"] is True

    def test_parking(self, r60_result):
        parking = r60_result.configuration.parking
        assert parking.resident_bays == 4
        assert parking.total_bays == 5

    def test_layout(self, r60_result):
        assert r60_result.layout == SiteLayout.STANDARD
        assert "central shared driveway" in r60_result.layout_description
        assert "4 dwellings" in r60_result.layout_description

    def test_dwelling_details_sum_to_gfa(self, r60_result):
        details = r60_result.configuration.dwelling_details
        assert details
        assert sum(d["total_gfa"] for d in details) == r60_result.configuration.total_gfa
        for d in details:
            assert d["quantity"] > 0

    def test_revenue_uses_reference_prices(self, r60_result):
        mix = r60_result.mix
        expected = sum(count * REFERENCE_SALE_PRICES[key] for key, count in mix.items())
        assert r60_result.configuration.estimated_revenue == expected


class TestOtherCodes:
    """Different R-Codes on the same lot."""

    def test_r40_compliant(self):
        result = optimize_yield(800, 20, 40, "R40")
        assert result.compliant is True
        assert result.configuration.plot_ratio <= 0.6

    def test_r20_fewer_or_equal_units(self, r60_result):
        result = optimize_yield(800, 20, 40, "R20")
        assert result.mix == {"2bed": 4, "3bed": 0, "4bed": 0}
        assert result.total_units <= r60_result.total_units

    def test_r80_compliant(self):
        result = optimize_yield(800, 20, 40, "R80")
        assert result.compliant is True
        assert result.configuration.plot_ratio <= 0.8


class TestEdgeCases:
    """Unknown codes, tiny lots, layouts, determinism."""

    def test_unknown_code(self):
        assert optimize_yield(800, 20, 40, "R99") is None

    def test_small_lot_falls_back_to_one_unit(self):
        result = optimize_yield(200, 10, 20, "R60")
        assert result is not None
        assert result.is_fallback is True
        assert result.mix == {"2bed": 1, "3bed": 0, "4bed": 0}
        # Fallback is not filtered for compliance
        assert result.compliant is False

    def test_battle_axe_layout(self):
        result = optimize_yield(400, 10, 40, "R60")
        assert result.layout == SiteLayout.BATTLE_AXE
        assert result.layout_description.startswith("Battle-axe configuration")

    def test_idempotent(self):
        first = optimize_yield(800, 20, 40, "R60").to_dict()
        second = optimize_yield(800, 20, 40, "R60").to_dict()
        assert first == second

    def test_search_bound_from_settings(self):
        result = optimize_yield(800, 20, 40, "R60", settings=Settings(max_total_units=2))
        assert result.total_units <= 2

    def test_to_dict_has_layout_fields(self, r60_result):
        data = r60_result.to_dict()
        assert data["layout"] == "standard"
        assert data["rcode"] == "R60"
        assert data["rules"]["max_plot_ratio"] == 0.7
        assert data["total_units"] == 4


# ──────────────────────────────────────────────────────────────────
# RANKING
# ──────────────────────────────────────────────────────────────────

def _config(mix, revenue, gfa):
    return EvaluatedConfiguration(
        mix=mix, total_units=sum(mix.values()),
        total_gfa=gfa, estimated_revenue=revenue, compliant=True,
    )


class TestRanking:
    """Revenue, then GFA, then fewer large units, then generation order."""

    def test_revenue_first(self):
        richer = _config({"2bed": 0, "3bed": 2, "4bed": 0}, 1_240_000, 290)
        bigger = _config({"2bed": 3, "3bed": 0, "4bed": 0}, 1_200_000, 300)
        assert max([bigger, richer], key=lambda c: _rank_key(c, "4bed")) is richer

    def test_gfa_breaks_revenue_tie(self):
        small = _config({"2bed": 2, "3bed": 0, "4bed": 0}, 900_000, 200)
        large = _config({"2bed": 0, "3bed": 1, "4bed": 0}, 900_000, 145)
        picked = max([large, small], key=lambda c: _rank_key(c, "4bed"))
        assert picked is small

    def test_fewer_large_units_break_gfa_tie(self):
        with_large = _config({"2bed": 1, "3bed": 0, "4bed": 1}, 1_230_000, 300)
        without = _config({"2bed": 0, "3bed": 2, "4bed": 0}, 1_230_000, 300)
        picked = max([with_large, without], key=lambda c: _rank_key(c, "4bed"))
        assert picked is without

    def test_exact_tie_keeps_first(self):
        first = _config({"2bed": 1, "3bed": 1, "4bed": 0}, 1_000_000, 245)
        second = _config({"2bed": 1, "3bed": 1, "4bed": 0}, 1_000_000, 245)
        assert max([first, second], key=lambda c: _rank_key(c, "4bed")) is first

    def test_equal_prices_rank_by_gfa(self):
        # Every 4-unit mix earns the same, so the largest compliant GFA wins:
        # 2 x 2-bed + 3-bed + 4-bed = 545 sqm beats 2-bed + 3 x 3-bed = 535 sqm
        flat = {"2bed": 1, "3bed": 1, "4bed": 1}
        result = optimize_yield(800, 20, 40, "R60", reference_prices=flat)
        assert result.total_units == 4
        assert result.mix == {"2bed": 2, "3bed": 1, "4bed": 1}
        assert result.configuration.total_gfa == 545


# ──────────────────────────────────────────────────────────────────
# CATALOG EXTENSION
# ──────────────────────────────────────────────────────────────────

FIVE_BED = DwellingTypeTemplate(
    key="5bed", label="5 Bedroom",
    ground_floor_area=120, total_build_area=250,
    parking_demand=2, min_lot_width=10,
)


class TestExtendedCatalog:
    """A fourth dwelling type needs no optimizer change."""

    def test_unpriced_type_optimizes(self):
        catalog = {**DWELLING_TYPES, "5bed": FIVE_BED}
        result = optimize_yield(2000, 40, 50, "R60", catalog=catalog)
        assert result is not None
        assert result.compliant is True
        assert set(result.mix) == {"2bed", "3bed", "4bed", "5bed"}
        # Priced 0, so swapping any 5-bed for a 2-bed always earns more
        assert result.mix["5bed"] == 0

    def test_priced_type_optimizes(self):
        catalog = {**DWELLING_TYPES, "5bed": FIVE_BED}
        result = optimize_yield(
            2000, 40, 50, "R60", catalog=catalog,
            reference_prices={"5bed": 1_100_000},
        )
        assert result.compliant is True
        revenue = sum(
            count * {**REFERENCE_SALE_PRICES, "5bed": 1_100_000}[key]
            for key, count in result.mix.items()
        )
        assert result.configuration.estimated_revenue == revenue

    def test_fallback_with_extended_catalog(self):
        catalog = {**DWELLING_TYPES, "5bed": FIVE_BED}
        result = optimize_yield(200, 10, 20, "R60", catalog=catalog)
        assert result.is_fallback is True
        assert result.mix["2bed"] == 1

    def test_evaluate_mix_prices_missing_type_at_zero(self):
        catalog = {**DWELLING_TYPES, "5bed": FIVE_BED}
        rules = get_rcode_rules("R60")
        result = optimize_yield(800, 20, 40, "R60")
        config = evaluate_mix(
            {"2bed": 1, "5bed": 1}, 800, rules, SiteLayout.STANDARD,
            result.envelope, catalog, REFERENCE_SALE_PRICES,
        )
        assert config.estimated_revenue == 450_000
        assert config.total_gfa == 350


class TestLayoutDescription:
    """Three fixed templates, parameterised by unit count."""

    def test_standard_side_driveway_for_small_sites(self):
        assert "side shared driveway" in get_layout_description(SiteLayout.STANDARD, 3)

    def test_wide_frontage(self):
        text = get_layout_description(SiteLayout.WIDE_FRONTAGE, 5)
        assert text.startswith("Linear frontage configuration")
        assert "5 dwellings" in text
