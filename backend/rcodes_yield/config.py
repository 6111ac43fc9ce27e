from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Single-mix optimizer search space
    max_total_units: int = 20
    large_unit_share: float = 0.3  # cap on 4-bed units as a share of the total

    # Multi-scenario comparator search space
    scenario_min_units: int = 2
    full_search_max_units: int = 20
    basic_search_max_units: int = 12
    full_utilization_band: tuple[float, float] = (0.50, 0.95)
    basic_utilization_band: tuple[float, float] = (0.70, 0.95)
    default_search_mode: str = "full_compliance"  # or "basic_ceiling"

    log_level: str = "INFO"

    model_config = {
        "env_prefix": "RCODES_YIELD_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


settings = Settings()
