from __future__ import annotations

"""Emit per-function metrics CSV from a wedlock record stream."""

import argparse
import csv
import logging
from typing import IO, Iterable, List

from .errors import WedlockError
from .models import FunctionRecord
from .parser import load_function_records

log = logging.getLogger(__name__)

FIELDNAMES = [
    "fn",
    "number",
    "module",
    "bb_count",
    "inst_count",
    "frame_setup_count",
    "frame_destroy_count",
    "stack_size",
    "prologue_blocks",
    "epilogue_blocks",
    "inline_asm_blocks",
    "is_mangled",
]


def function_row(record: FunctionRecord) -> dict:
    """Flatten one record into a CSV row."""
    instrs = [i for bb in record.bbs for i in bb.instrs]
    return {
        "fn": record.name,
        "number": record.number,
        "module": record.module.module_name if record.module is not None else None,
        "bb_count": len(record.bbs),
        "inst_count": len(instrs),
        "frame_setup_count": sum(1 for i in instrs if i.frame_setup),
        "frame_destroy_count": sum(1 for i in instrs if i.frame_destroy),
        "stack_size": record.frame_info.stack_size,
        "prologue_blocks": sum(1 for bb in record.bbs if bb.is_prologue_insertion_block),
        "epilogue_blocks": sum(1 for bb in record.bbs if bb.is_epilogue_insertion_block),
        "inline_asm_blocks": sum(1 for bb in record.bbs if bb.has_inline_asm),
        "is_mangled": record.is_mangled,
    }


def write_metrics(f: IO[str], records: Iterable[FunctionRecord]) -> None:
    writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
    writer.writeheader()
    for record in records:
        writer.writerow(function_row(record))


def main(argv: List[str] | None = None) -> int:
    """CLI entry point for metrics export."""
    parser = argparse.ArgumentParser(
        description="Emit per-function metrics from wedlock NDJSON."
    )
    parser.add_argument("--records", required=True, help="Path to wedlock NDJSON")
    parser.add_argument("--out", required=True, help="Output CSV file")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    try:
        records = load_function_records(args.records)
    except (OSError, WedlockError) as exc:
        log.error("%s", exc)
        return 1

    with open(args.out, "w", newline="", encoding="utf-8") as f:
        write_metrics(f, records)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
