from __future__ import annotations

"""Block and instruction extraction for a machine function.

Walks blocks in layout order and builds one BlockRecord per block. Anything
inconsistent in the graph (null edges, edges to blocks outside the function,
missing IR correlation) is reported to the diagnostic logger and left out of
the record; extraction itself never fails on it.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from .frame import is_epilogue_insertion_block, is_prologue_insertion_block
from .machine import MachineBasicBlock, MachineFunction, MachineInstr
from .models import BlockRecord, EdgeRecord, InstructionRecord

Printer = Callable[[MachineInstr, str], str]


def format_instr(instr: MachineInstr, target: str) -> str:
    """Default instruction printer: host text, else a target/opcode placeholder."""
    if instr.text is not None:
        return instr.text
    return f"<{target}> opcode {instr.opcode}"


def can_fall_through(fn: MachineFunction, block: MachineBasicBlock) -> bool:
    """Whether control can run off the end of `block` into its layout successor.

    A host-provided answer wins. Otherwise the block needs a layout successor
    that is also a CFG successor, and must not end in a return or barrier.
    """
    if block.can_fallthrough is not None:
        return block.can_fallthrough
    nxt = fn.layout_successor(block)
    if nxt is None or nxt.number not in block.succs:
        return False
    if block.instrs:
        last = block.instrs[-1]
        if last.is_return or last.is_barrier:
            return False
    return True


def extract_instructions(block: MachineBasicBlock) -> List[InstructionRecord]:
    """One InstructionRecord per instruction, in program order."""
    return [
        InstructionRecord(
            opcode=mi.opcode,
            frame_setup=mi.is_frame_setup,
            frame_destroy=mi.is_frame_destroy,
        )
        for mi in block.instrs
    ]


def _edges(
    fn: MachineFunction,
    block: MachineBasicBlock,
    numbers: Sequence[Optional[int]],
    kind: str,
    by_number: Dict[int, MachineBasicBlock],
    diag: logging.Logger,
    layout_next: Optional[MachineBasicBlock] = None,
    mark_layout: bool = False,
) -> List[EdgeRecord]:
    out: List[EdgeRecord] = []
    for num in numbers:
        if num is None:
            diag.info("Weird: null %s for MBB bb.%d in %s?", kind, block.number, fn.name)
            continue
        target = by_number.get(num)
        if target is None:
            diag.info(
                "Weird: %s bb.%d of bb.%d is not a block of %s; dropping edge",
                kind, num, block.number, fn.name,
            )
            continue
        layout = None
        if mark_layout:
            layout = layout_next is not None and layout_next.number == target.number
        out.append(
            EdgeRecord(
                number=target.number,
                symbol=target.label(fn.number),
                layout_successor=layout,
            )
        )
    return out


def extract_blocks(
    fn: MachineFunction,
    diag: logging.Logger,
    pretty_print: bool = False,
    printer: Printer = format_instr,
) -> List[BlockRecord]:
    """Build BlockRecords for every block of `fn`, preserving layout order."""
    if not fn.blocks:
        diag.info("No blocks in %s; emitting an empty block list", fn.name)

    by_number = {b.number: b for b in fn.blocks}
    frame = fn.frame_info

    print_target: Optional[str] = None
    if pretty_print:
        if fn.target is None:
            diag.info("No target instruction info for %s; omitting asm", fn.name)
        else:
            print_target = fn.target

    records: List[BlockRecord] = []
    for idx, block in enumerate(fn.blocks):
        if block.ir_operand is None:
            diag.info("No IR BB for this machine BB (bb.%d); emitting partial!", block.number)

        layout_next = fn.blocks[idx + 1] if idx + 1 < len(fn.blocks) else None
        asm: Optional[List[str]] = None
        if print_target is not None:
            asm = [printer(mi, print_target) for mi in block.instrs]

        records.append(
            BlockRecord(
                number=block.number,
                symbol=block.label(fn.number),
                ir_operand=block.ir_operand,
                can_fallthrough=can_fall_through(fn, block),
                ends_in_return=block.is_return_block,
                is_epilogue_insertion_block=is_epilogue_insertion_block(frame, block),
                is_prologue_insertion_block=is_prologue_insertion_block(frame, block, fn),
                address_taken=block.address_taken,
                has_inline_asm=any(mi.is_inline_asm for mi in block.instrs),
                preds=_edges(fn, block, block.preds, "predecessor", by_number, diag),
                succs=_edges(
                    fn, block, block.succs, "successor", by_number, diag,
                    layout_next=layout_next, mark_layout=True,
                ),
                instrs=extract_instructions(block),
                asm=asm,
            )
        )
    return records
