from __future__ import annotations

from pydantic import BaseModel, Field, field_validator
from typing import Literal, Optional


class LotInput(BaseModel):
    lot_area: float = Field(gt=0)   # sqm
    lot_width: float = Field(gt=0)  # m of frontage
    lot_depth: float = Field(gt=0)  # m
    rcode: str

    @field_validator("rcode")
    @classmethod
    def _normalise_rcode(cls, value: str) -> str:
        return value.strip().upper()


class ScenarioRequest(BaseModel):
    lot: LotInput
    prices: Optional[dict[str, float]] = None  # type key → sale price per dwelling
    mode: Optional[Literal["full_compliance", "basic_ceiling"]] = None
    rank_by: Optional[Literal["estimated_grv", "grv_per_sqm", "total_units", "utilization"]] = None


class ComplianceRequest(BaseModel):
    lot: LotInput
    proposed_dwellings: int = Field(ge=0)
    proposed_gfa: float = Field(ge=0)
    proposed_site_coverage: float = Field(ge=0)
    proposed_open_space: float
    proposed_height: int = Field(ge=1)  # storeys
