"""Load and save allocation settings as YAML."""
from __future__ import annotations

from typing import Any, Dict

import yaml

from ..models.config import AllocationConfig, MIN_GROUP_SIZE, is_real_number

MAX_GROUP_SIZE = 8


def _number_mapping(data: Any, key: str) -> Dict[str, float]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{key} must be a mapping")
    parsed: Dict[str, float] = {}
    for name, value in data.items():
        if not is_real_number(value):
            raise ValueError(f"{key}: value for '{name}' must be a finite number")
        parsed[str(name)] = float(value)
    return parsed


def parse_config(data: Any) -> AllocationConfig:
    """Validate a decoded YAML document and build an :class:`AllocationConfig`."""
    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping")
    if "group_size" not in data:
        raise ValueError("Config is missing required field: group_size")

    group_size = data["group_size"]
    if isinstance(group_size, bool) or not isinstance(group_size, int):
        raise ValueError("group_size must be an integer")
    if not MIN_GROUP_SIZE <= group_size <= MAX_GROUP_SIZE:
        raise ValueError(
            f"group_size must be between {MIN_GROUP_SIZE} and {MAX_GROUP_SIZE}"
        )

    priorities = _number_mapping(data.get("skill_priorities"), "skill_priorities")
    for skill, priority in priorities.items():
        if priority <= 0:
            raise ValueError(f"skill_priorities: '{skill}' must be positive")

    return AllocationConfig(
        group_size=group_size,
        skill_priorities=priorities,
        weights=_number_mapping(data.get("weights"), "weights"),
    )


def load_config(path: str) -> AllocationConfig:
    """Parse a YAML file into an :class:`AllocationConfig`."""
    with open(path, "r", encoding="utf8") as handle:
        data = yaml.safe_load(handle)
    return parse_config(data)


def config_to_dict(config: AllocationConfig) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "group_size": config.group_size,
        "skill_priorities": dict(config.skill_priorities),
    }
    if config.weights:
        data["weights"] = dict(config.weights)
    return data


def save_config(config: AllocationConfig, path: str) -> None:
    """Write ``config`` to ``path`` as YAML.

    The data is checked with the same rules as :func:`load_config` first, so
    a saved file can always be loaded back.
    """
    data = config_to_dict(config)
    parse_config(data)
    with open(path, "w", encoding="utf8") as handle:
        yaml.safe_dump(data, handle, sort_keys=True)
