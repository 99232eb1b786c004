from __future__ import annotations

import argparse
import logging
import os
from typing import Dict, List

import yaml

from ..engine.allocator import allocate
from ..io.config_loader import load_config, save_config
from ..io.roster_loader import load_roster
from ..models.config import AllocationConfig
from ..reporting.rationale import export_csv, export_yaml

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Command implementations
# ---------------------------------------------------------------------------

def cmd_allocate(args: argparse.Namespace) -> None:
    roster = load_roster(args.roster)
    config = load_config(args.config)
    if getattr(args, "group_size", None) is not None:
        config.group_size = args.group_size

    outcome = allocate(roster, config)
    if not outcome.ok:
        logger.error("Allocation failed: %s", outcome.message)
        raise SystemExit(1)

    os.makedirs(args.output, exist_ok=True)
    if args.format == "csv":
        allocation_file = os.path.join(args.output, "allocation.csv")
        rationale_file = os.path.join(args.output, "rationale.csv")
        export_csv(outcome, allocation_file, rationale_file)
    else:
        allocation_file = os.path.join(args.output, "allocation.yaml")
        rationale_file = os.path.join(args.output, "rationale.yaml")
        export_yaml(outcome, allocation_file, rationale_file)

    print(f"Wrote allocation to {allocation_file} and rationale to {rationale_file}")


def cmd_set_priority(args: argparse.Namespace) -> None:
    config = load_config(args.config)
    config.skill_priorities[args.skill] = float(args.priority)
    save_config(config, args.config)


def cmd_set_group_size(args: argparse.Namespace) -> None:
    if os.path.exists(args.config):
        config = load_config(args.config)
        config.group_size = int(args.size)
    else:
        config = AllocationConfig(group_size=int(args.size))
    save_config(config, args.config)


def cmd_compare(args: argparse.Namespace) -> None:
    def _load_alloc(directory: str) -> Dict[str, List[str]]:
        path = os.path.join(directory, "allocation.yaml")
        with open(path, "r", encoding="utf8") as handle:
            return yaml.safe_load(handle) or {}

    alloc1 = _load_alloc(args.dir1)
    alloc2 = _load_alloc(args.dir2)

    groups = sorted(set(alloc1) | set(alloc2))
    for group in groups:
        members1 = {str(m) for m in alloc1.get(group, [])}
        members2 = {str(m) for m in alloc2.get(group, [])}
        added = sorted(members2 - members1)
        removed = sorted(members1 - members2)
        if added or removed:
            print(f"{group}:")
            if added:
                print(f"  + {'; '.join(added)}")
            if removed:
                print(f"  - {'; '.join(removed)}")


# ---------------------------------------------------------------------------
# Argument parser setup
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="group-allocator")
    sub = parser.add_subparsers(dest="command", required=True)

    # allocate
    p_alloc = sub.add_parser("allocate", help="Run allocation")
    p_alloc.add_argument("--roster", required=True, help="Roster CSV path")
    p_alloc.add_argument("--config", required=True, help="Config YAML path")
    p_alloc.add_argument("--output", required=True, help="Output directory")
    p_alloc.add_argument(
        "--group-size",
        type=int,
        help="Override the group size from the config file",
    )
    p_alloc.add_argument(
        "--format",
        choices=["yaml", "csv"],
        default="yaml",
        help="Output format (default: yaml)",
    )
    p_alloc.set_defaults(func=cmd_allocate)

    # set-priority
    p_priority = sub.add_parser("set-priority", help="Set a skill priority in the config")
    p_priority.add_argument("config", help="Config YAML path")
    p_priority.add_argument("skill", help="Skill name")
    p_priority.add_argument("priority", type=float, help="Priority weight")
    p_priority.set_defaults(func=cmd_set_priority)

    # set-group-size
    p_size = sub.add_parser("set-group-size", help="Set the target group size in the config")
    p_size.add_argument("config", help="Config YAML path")
    p_size.add_argument("size", type=int, help="Students per group")
    p_size.set_defaults(func=cmd_set_group_size)

    # compare
    p_compare = sub.add_parser("compare", help="Compare two allocation directories")
    p_compare.add_argument("dir1", help="First allocation directory")
    p_compare.add_argument("dir2", help="Second allocation directory")
    p_compare.set_defaults(func=cmd_compare)

    return parser


def main(argv: List[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
