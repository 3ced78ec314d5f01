"""
CLI Module

Architectural Intent:
- `fly [task:]target` command-line entry point
- Loads configuration and the flightplan script, then delegates to the
  orchestrator via the composition root
- Unknown `--key=value` arguments are passed to the run as options
"""

import argparse
import logging
import sys
from typing import Any, Optional, Sequence
from flightdeck.composition_root import create_container
from flightdeck.domain.entities.flight import DEFAULT_TASK
from flightdeck.domain.errors import FlightdeckError
from flightdeck.infrastructure.config import load_config
from flightdeck.infrastructure.logging import configure_logging
from flightdeck.infrastructure.script_loader import load_flightplan

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fly", description="Run a flightplan against a target"
    )
    parser.add_argument(
        "destination", nargs="?", help="[task:]target to run, e.g. deploy:production"
    )
    parser.add_argument(
        "--flightplan", "-f", default="flightplan.py", help="Path to flightplan"
    )
    parser.add_argument("--username", "-u", help="User for ssh connections")
    parser.add_argument(
        "--debug", "-d", action="store_true", help="Enable debug mode"
    )
    parser.add_argument(
        "--no-color", "-C", action="store_true", help="Disable colors in output"
    )
    parser.add_argument("--config", "-c", help="Path to flightdeck.json")
    parser.add_argument(
        "--targets", "-t", action="store_true", help="List available targets"
    )
    parser.add_argument(
        "--tasks", "-T", action="store_true", help="List available tasks"
    )
    return parser


def parse_destination(destination: str) -> tuple[str, str]:
    """`task:target` or `target` (task defaults to "default")."""
    if ":" in destination:
        task, _, target = destination.partition(":")
        return task or DEFAULT_TASK, target
    return DEFAULT_TASK, destination


def parse_extra_options(extra: Sequence[str]) -> dict[str, Any]:
    """Turn leftover `--key=value` / `--flag` arguments into run options."""
    options: dict[str, Any] = {}
    for arg in extra:
        if not arg.startswith("--"):
            continue
        key, sep, value = arg[2:].partition("=")
        if not key:
            continue
        options[key.replace("-", "_")] = value if sep else True
    return options


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args, extra = parser.parse_known_args(argv)

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"[-] Invalid configuration: {e}", file=sys.stderr)
        return 1

    debug = args.debug or config.debug
    configure_logging(
        level=logging.DEBUG if debug else config.log_level,
        color=config.color and not args.no_color,
    )

    container = create_container(config)
    plan = container.orchestrator
    try:
        load_flightplan(args.flightplan, plan)
    except FlightdeckError as e:
        logger.error("%s", e.message)
        return 1

    if args.targets:
        for name in plan.available_targets():
            print(name)
        return 0
    if args.tasks:
        for name in plan.available_tasks():
            print(name)
        return 0

    if not args.destination:
        parser.print_usage(sys.stderr)
        logger.error("A target is required, e.g. `fly production`")
        return 1

    task, target = parse_destination(args.destination)
    options = parse_extra_options(extra)
    if args.username:
        options["username"] = args.username
    if debug:
        options["debug"] = True

    return plan.start(task, target, options)


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
