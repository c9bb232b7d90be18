"""Pydantic schema for scenario configuration."""

import hashlib
import json
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SimulationParameters(BaseModel):
    """Deployment and spend inputs for one scenario."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    start_year: int = Field(description="First simulated calendar year")
    years_to_simulate: int = Field(ge=0, description="Number of simulated years")
    cities_per_year: float = Field(ge=0, description="Cities launched per year")
    vehicles_per_city: float = Field(ge=0, description="Fleet size per fully ramped city")
    profit_per_mile: float = Field(description="Operating profit per production mile (USD)")
    annual_rd_spend: float = Field(ge=0, description="Base annual R&D spend (billions USD)")
    ramp_time_per_city: float = Field(gt=0, description="Years for a city cohort to reach production")

    @field_validator("years_to_simulate", "start_year", mode="before")
    @classmethod
    def coerce_whole_years(cls, v):
        """Accept whole-number floats (e.g. 26.0 from YAML/JSON) for year fields."""
        if isinstance(v, float) and v.is_integer():
            return int(v)
        return v


class UtilizationProfile(BaseModel):
    """Per-vehicle utilization and R&D taper multipliers."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    production_utilization: float = Field(ge=0, description="Production miles per vehicle per day")
    validation_utilization: float = Field(ge=0, description="Validation miles per vehicle per day")
    rd_taper_after_breakeven: float = Field(
        ge=0, le=1,
        description="R&D multiplier applied once the previous year's cumulative cash is non-negative"
    )


class ScenarioProfile(BaseModel):
    """A named parameter bundle: inputs plus utilization multipliers."""
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    inputs: SimulationParameters
    multipliers: UtilizationProfile

    def compute_hash(self) -> str:
        """Compute profile hash for reproducibility."""
        profile_dict = self.model_dump(mode="json")
        profile_str = json.dumps(profile_dict, sort_keys=True)
        return hashlib.sha256(profile_str.encode()).hexdigest()[:16]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScenarioProfile':
        """Create profile from dictionary."""
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert profile to dictionary."""
        return self.model_dump()


class ProfilesConfig(BaseModel):
    """Complete configuration: the named profile catalogue and its default."""
    default_profile: str
    profiles: Dict[str, ScenarioProfile]

    @model_validator(mode="after")
    def validate_default_profile(self):
        """Ensure the default profile exists in the catalogue."""
        if self.default_profile not in self.profiles:
            raise ValueError(
                f"default_profile '{self.default_profile}' is not one of "
                f"{sorted(self.profiles)}"
            )
        return self

    def get_profile(self, name: str) -> ScenarioProfile:
        """Look up a profile by key, case-insensitively."""
        key = name.lower()
        if key not in self.profiles:
            raise ValueError(f"Unknown profile: {name}")
        return self.profiles[key]

    def compute_hash(self) -> str:
        """Compute config hash for reproducibility."""
        config_str = json.dumps(self.model_dump(mode="json"), sort_keys=True)
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]
