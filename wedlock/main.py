from __future__ import annotations

"""CLI utilities for inspecting wedlock record streams."""

import argparse
import logging
from collections import Counter
from typing import List

from .errors import WedlockError
from .models import FunctionRecord
from .parser import load_function_records

log = logging.getLogger(__name__)


def summarize_records(path: str, records: List[FunctionRecord]) -> None:
    """Print summary stats for a wedlock NDJSON file."""
    blocks = [bb for r in records for bb in r.bbs]
    modules = sorted({r.module.module_name for r in records if r.module is not None})
    opcode_counts = Counter(i.opcode for bb in blocks for i in bb.instrs)

    print(f"records: {path}")
    print(f"  functions: {len(records)}")
    print(f"  modules: {', '.join(modules)}")
    print(f"  mangled: {sum(1 for r in records if r.is_mangled)}")
    print(f"  demangled: {sum(1 for r in records if r.demangled_name is not None)}")
    print(f"  blocks: {len(blocks)}")
    print(f"  instructions: {sum(opcode_counts.values())}")
    print(f"  prologue sites: {sum(1 for bb in blocks if bb.is_prologue_insertion_block)}")
    print(f"  epilogue sites: {sum(1 for bb in blocks if bb.is_epilogue_insertion_block)}")
    print(f"  inline asm blocks: {sum(1 for bb in blocks if bb.has_inline_asm)}")
    multi = [r.name for r in records if sum(bb.is_prologue_insertion_block for bb in r.bbs) > 1]
    if multi:
        print(f"  multiple prologue sites: {', '.join(multi)}")
    print("  top opcodes:")
    for opcode, count in opcode_counts.most_common(10):
        print(f"    {opcode}: {count}")


def show_blocks(records: List[FunctionRecord]) -> None:
    """Print the block layout of every function."""
    for r in records:
        label = r.demangled_name or r.name
        print(f"  function {label} (frame {r.frame_info.stack_size} bytes)")
        for bb in r.bbs:
            tags = []
            if bb.is_prologue_insertion_block:
                tags.append("prologue")
            if bb.is_epilogue_insertion_block:
                tags.append("epilogue")
            if bb.can_fallthrough:
                tags.append("fallthrough")
            if bb.has_inline_asm:
                tags.append("asm")
            succs = ", ".join(
                f"{s.symbol}{'*' if s.layout_successor else ''}" for s in bb.succs
            )
            print(f"    {bb.symbol} [{' '.join(tags)}] -> {succs}")


def main(argv: List[str] | None = None) -> int:
    """Entry point for the record summary CLI."""
    parser = argparse.ArgumentParser(
        description="Parse and summarize wedlock NDJSON outputs."
    )
    parser.add_argument("records", help="Path to wedlock NDJSON")
    parser.add_argument("--show-blocks", action="store_true", help="Print block layouts")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    try:
        records = load_function_records(args.records)
    except (OSError, WedlockError) as exc:
        log.error("%s", exc)
        return 1

    summarize_records(args.records, records)
    if args.show_blocks:
        show_blocks(records)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
