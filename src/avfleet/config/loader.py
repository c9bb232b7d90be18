"""Configuration loader from YAML."""

from pathlib import Path
from typing import Any, Dict

import yaml

from .schema import ProfilesConfig, ScenarioProfile


def load_config(yaml_path: str = None) -> ProfilesConfig:
    """
    Load the profile catalogue from a YAML file.

    Args:
        yaml_path: Path to YAML file (defaults to defaults.yaml)

    Returns:
        ProfilesConfig object
    """
    if yaml_path is None:
        yaml_path = Path(__file__).parent / "defaults.yaml"

    with open(yaml_path, 'r') as f:
        data = yaml.safe_load(f)

    return ProfilesConfig(**data)


def load_profile(name: str = None, yaml_path: str = None) -> ScenarioProfile:
    """
    Load a single named profile.

    Args:
        name: Profile key (defaults to the catalogue's default_profile)
        yaml_path: Path to YAML file (defaults to defaults.yaml)

    Returns:
        ScenarioProfile object
    """
    config = load_config(yaml_path)
    return config.get_profile(name or config.default_profile)


def profile_from_dict(data: Dict[str, Any]) -> ScenarioProfile:
    """
    Create a profile from dictionary.

    Args:
        data: Profile dictionary with name, inputs and multipliers

    Returns:
        ScenarioProfile object
    """
    return ScenarioProfile.from_dict(data)
