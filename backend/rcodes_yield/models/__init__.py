from __future__ import annotations

from rcodes_yield.models.schemas import ComplianceRequest, LotInput, ScenarioRequest

__all__ = ["LotInput", "ScenarioRequest", "ComplianceRequest"]
