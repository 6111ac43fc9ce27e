#!/usr/bin/env python3
"""
Run the R-Code yield engine against a set of sample WA lots.

Prints the best single mix, the scenario comparison and a compliance
check of the best mix for each lot, for manual review.

Usage:
    python3 scripts/validate_sample_lots.py
    python3 scripts/validate_sample_lots.py --tests 1 3 --mode basic_ceiling
    python3 scripts/validate_sample_lots.py --json > results.json
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import datetime

# Add backend to path so the engine imports without installing
SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
BACKEND_DIR = os.path.join(os.path.dirname(SCRIPT_DIR), "backend")
sys.path.insert(0, BACKEND_DIR)

from rcodes_yield.config import settings  # noqa: E402
from rcodes_yield.models.schemas import ComplianceRequest, LotInput, ScenarioRequest  # noqa: E402
from rcodes_yield.zoning_engine.calculator import YieldCalculator  # noqa: E402

# ──────────────────────────────────────────────────────────────────
# SAMPLE LOTS
# ──────────────────────────────────────────────────────────────────

SAMPLE_LOTS = [
    {
        "name": "R60 standard lot",
        "lot": {"lot_area": 800, "lot_width": 20, "lot_depth": 40, "rcode": "R60"},
        "verify": [
            "Best mix 1 × 2-bed + 3 × 3-bed",
            "Central shared driveway",
            "All seven scenarios viable",
        ],
    },
    {
        "name": "R20 suburban lot",
        "lot": {"lot_area": 800, "lot_width": 20, "lot_depth": 40, "rcode": "R20"},
        "verify": [
            "Plot ratio 50% caps GFA at 400 sqm",
            "Four 2-bed units",
        ],
    },
    {
        "name": "R40 deep battle-axe lot",
        "lot": {"lot_area": 1000, "lot_width": 15, "lot_depth": 66.7, "rcode": "R40"},
        "verify": [
            "Battle-axe layout (depth > 2.5 × width)",
            "25 m driveway in infrastructure",
        ],
    },
    {
        "name": "R80 wide frontage lot",
        "lot": {"lot_area": 1200, "lot_width": 40, "lot_depth": 30, "rcode": "R80"},
        "verify": [
            "Wide-frontage layout (width > 1.2 × depth)",
            "Higher unit count than R60",
        ],
    },
    {
        "name": "R60 small lot",
        "lot": {"lot_area": 200, "lot_width": 10, "lot_depth": 20, "rcode": "R60"},
        "verify": [
            "Fallback to a single 2-bed unit",
            "No viable scenarios",
        ],
    },
    {
        "name": "Unknown code",
        "lot": {"lot_area": 800, "lot_width": 20, "lot_depth": 40, "rcode": "R99"},
        "verify": [
            "Invalid R-Code error",
        ],
    },
]


def run_analysis(calculator: YieldCalculator, test: dict, mode: str | None) -> dict:
    lot = LotInput(**test["lot"])
    result = calculator.analyze(ScenarioRequest(lot=lot, mode=mode))
    if "error" in result:
        return result

    best = result["yield"]
    compliance = calculator.check_compliance(ComplianceRequest(
        lot=lot,
        proposed_dwellings=best["total_units"],
        proposed_gfa=best["total_gfa"],
        proposed_site_coverage=best["total_coverage"],
        proposed_open_space=best["open_space"],
        proposed_height=2,
    ))
    result["compliance"] = compliance.to_dict()
    return result


def format_result(test: dict, result: dict) -> str:
    """Format a single lot result for console output."""
    lines = []
    lines.append(f"\n{'='*70}")
    lines.append(f"LOT: {test['name']}")
    lines.append(f"{'='*70}")

    lot = test["lot"]
    lines.append(f"  Code:     {lot['rcode']}")
    lines.append(f"  Lot:      {lot['lot_area']:,.0f} sqm, {lot['lot_width']:.1f}m × {lot['lot_depth']:.1f}m")

    if "error" in result:
        lines.append(f"  ERROR: {result['error']}")
        return "\n".join(lines)

    area = result["buildable_area"]
    env = result["envelope"]
    lines.append(f"\n  LIMITS:")
    lines.append(f"    Max GFA:      {area['max_gfa']:,.0f} sqm")
    lines.append(f"    Max cover:    {area['max_site_coverage']:,.0f} sqm")
    lines.append(f"    Open space:   {area['min_open_space_area']:,.0f} sqm")
    lines.append(f"    Envelope:     {env['effective_width']:.1f}m × {env['effective_depth']:.1f}m = {env['envelope_area']:,.0f} sqm"
                 + (" (setbacks exceed lot)" if env["degenerate"] else ""))

    best = result["yield"]
    mix_str = ", ".join(f"{count} × {key}" for key, count in best["mix"].items() if count)
    lines.append(f"\n  BEST MIX ({best['layout']}):")
    lines.append(f"    Units:    {best['total_units']}: {mix_str}")
    lines.append(f"    GFA:      {best['total_gfa']:,.0f} sqm (plot ratio {best['plot_ratio']:.1%})")
    lines.append(f"    Coverage: {best['total_coverage']:,.1f} sqm ({best['site_coverage_ratio']:.1%})")
    lines.append(f"    Revenue:  ${best['estimated_revenue']:,.0f}")
    if best["is_fallback"]:
        lines.append(f"    Fallback: no compliant mix (compliant={best['compliant']})")

    scenarios = result["scenarios"]
    lines.append(f"\n  SCENARIOS ({len(scenarios)}):")
    for s in scenarios:
        parts = ", ".join(f"{b['units']} {b['type']}" for b in s["mix_breakdown"])
        lines.append(
            f"    {s['name']:<22} {s['total_units']:>2} units ({parts}), "
            f"GRV ${s['estimated_grv']:,.0f}, util {s['utilization']:.0%}"
        )

    compliance = result["compliance"]
    failed = [c["name"] for c in compliance["checks"] if not c["compliant"]]
    lines.append(f"\n  COMPLIANCE: {'PASS' if compliance['valid'] else 'FAIL'}"
                 + (f" ({', '.join(failed)})" if failed else ""))

    lines.append(f"\n  VERIFY:")
    for v in test.get("verify", []):
        lines.append(f"    [ ] {v}")

    return "\n".join(lines)


# ──────────────────────────────────────────────────────────────────
# MAIN
# ──────────────────────────────────────────────────────────────────

def main():
    parser = argparse.ArgumentParser(description="Run the R-Code yield engine against sample lots")
    parser.add_argument("--tests", nargs="*", type=int, help="Run specific lot numbers (1-indexed)")
    parser.add_argument("--mode", choices=["full_compliance", "basic_ceiling"], default=None,
                        help="Scenario search mode (defaults to settings)")
    parser.add_argument("--json", action="store_true", help="Print raw results as JSON")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    tests_to_run = SAMPLE_LOTS
    if args.tests:
        tests_to_run = [SAMPLE_LOTS[i-1] for i in args.tests if 1 <= i <= len(SAMPLE_LOTS)]

    calculator = YieldCalculator()

    if args.json:
        output = [
            {"name": test["name"], "result": run_analysis(calculator, test, args.mode)}
            for test in tests_to_run
        ]
        print(json.dumps(output, indent=2))
        return

    print(f"\nR-Code Yield Engine Check")
    print(f"Date: {datetime.now().strftime('%Y-%m-%d %H:%M')}")
    print(f"Mode: {args.mode or settings.default_search_mode}")
    print(f"Lots: {len(tests_to_run)} of {len(SAMPLE_LOTS)} configured")

    for test in tests_to_run:
        print(format_result(test, run_analysis(calculator, test, args.mode)))
    print()


if __name__ == "__main__":
    main()
