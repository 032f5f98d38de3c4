from __future__ import annotations

"""Engine configuration.

The flags keep the option names of the compiler pass so that build scripts
can forward them unchanged.
"""

import argparse
from dataclasses import dataclass
from typing import Optional

DEFAULT_OUTPUT = "wedlock.jsonl"


@dataclass(frozen=True)
class WedlockConfig:
    """Settings fixed at pipeline setup and handed to the engine."""
    enabled: bool = False
    output: str = DEFAULT_OUTPUT
    pretty_print_mi: bool = False
    logging_output: Optional[str] = None

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "WedlockConfig":
        """Build a config from flags registered by add_arguments()."""
        return cls(
            enabled=bool(args.wedlock),
            output=args.wedlock_output or DEFAULT_OUTPUT,
            pretty_print_mi=bool(args.wedlock_pretty_print_mi),
            logging_output=args.wedlock_logging_output or None,
        )


def add_arguments(parser: argparse.ArgumentParser, enabled_by_default: bool = False) -> None:
    """Register the wedlock flags on an argument parser."""
    group = parser.add_argument_group("wedlock")
    group.add_argument(
        "--wedlock",
        dest="wedlock",
        action="store_true",
        default=enabled_by_default,
        help="Enable the wedlock pass",
    )
    group.add_argument(
        "--no-wedlock",
        dest="wedlock",
        action="store_false",
        help="Disable the wedlock pass",
    )
    group.add_argument(
        "--wedlock-output",
        default=DEFAULT_OUTPUT,
        help=f"The output filename (default: {DEFAULT_OUTPUT})",
    )
    group.add_argument(
        "--wedlock-pretty-print-mi",
        action="store_true",
        help="Enable pretty-printing of machine instructions",
    )
    group.add_argument(
        "--wedlock-logging-output",
        default=None,
        help="Logging and diagnostic output",
    )
