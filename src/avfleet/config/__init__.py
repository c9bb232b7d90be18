"""Scenario configuration: schema and YAML loader."""

from .loader import load_config, load_profile, profile_from_dict
from .schema import ProfilesConfig, ScenarioProfile, SimulationParameters, UtilizationProfile

__all__ = [
    "ProfilesConfig",
    "ScenarioProfile",
    "SimulationParameters",
    "UtilizationProfile",
    "load_config",
    "load_profile",
    "profile_from_dict",
]
