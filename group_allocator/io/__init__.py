"""Input/output helpers for :mod:`group_allocator`."""

from .roster_loader import load_roster
from .config_loader import MAX_GROUP_SIZE, load_config, parse_config, save_config

__all__ = [
    "load_roster",
    "load_config",
    "parse_config",
    "save_config",
    "MAX_GROUP_SIZE",
]
