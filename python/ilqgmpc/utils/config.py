"""YAML helpers shared by the settings dataclasses."""

import dataclasses
from typing import Any, Dict, Optional

import yaml

from ..exceptions import ConfigurationError


def load_yaml_section(yaml_path: str, section: Optional[str] = None) -> Dict[str, Any]:
    """
    Read a YAML file and return the mapping stored under 'section'.

    Args:
        yaml_path: Path to the YAML file
        section: Top-level key to extract (None returns the whole file)

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigurationError: Unparsable file, missing section or non-mapping content
    """
    with open(yaml_path, "r") as file:
        try:
            config = yaml.safe_load(file)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"cannot parse {yaml_path}: {exc}") from exc

    if config is None:
        config = {}
    if section is not None:
        if not isinstance(config, dict) or section not in config:
            raise ConfigurationError(f"{yaml_path} has no section '{section}'")
        config = config[section]
    if not isinstance(config, dict):
        raise ConfigurationError(f"{yaml_path}: expected a mapping, got {type(config).__name__}")
    return config


def check_keys(cls, config: Dict[str, Any]) -> None:
    """Raise ConfigurationError for keys that are not fields of dataclass cls."""
    known = {f.name for f in dataclasses.fields(cls)}
    unknown = set(config) - known
    if unknown:
        raise ConfigurationError(f"unknown {cls.__name__} keys: {sorted(unknown)}")
