from __future__ import annotations

"""Pipeline driver: run the wedlock engine over machine-function dumps."""

import argparse
import logging
from typing import List

from .config import WedlockConfig, add_arguments
from .engine import Wedlock
from .errors import WedlockError
from .parser import load_machine_functions

log = logging.getLogger(__name__)


def run(input_paths: List[str], config: WedlockConfig) -> int:
    """Inspect every function in `input_paths`; return the number of records written.

    The streams are opened before any input is read, so an unwritable output
    path aborts the run before the first function is inspected.
    """
    with Wedlock(config) as engine:
        for path in input_paths:
            functions = load_machine_functions(path)
            log.debug("%s: %d machine functions", path, len(functions))
            for fn in functions:
                engine.run_on_machine_function(fn)
        return engine.records_written


def main(argv: List[str] | None = None) -> int:
    """CLI entry point for record extraction."""
    parser = argparse.ArgumentParser(
        description="Emit one wedlock record per machine function."
    )
    parser.add_argument(
        "--input",
        required=True,
        action="append",
        help="Machine-function dump NDJSON (repeatable)",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    add_arguments(parser, enabled_by_default=True)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    config = WedlockConfig.from_args(args)
    if not config.enabled:
        log.info("wedlock disabled; nothing to do")
        return 0

    try:
        count = run(args.input, config)
    except (OSError, WedlockError) as exc:
        log.error("%s", exc)
        return 1

    log.info("wedlock: %d records written to %s", count, config.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
