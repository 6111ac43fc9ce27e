from __future__ import annotations

from rcodes_yield.zoning_engine.calculator import YieldCalculator

__all__ = ["YieldCalculator"]
