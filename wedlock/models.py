from __future__ import annotations

"""Dataclasses for the per-function records written to the wedlock stream.

These models define the output contract between the engine and downstream
consumers. `to_json()` produces the exact on-disk shape; optional fields are
left out entirely rather than written as null.
"""

from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class InstructionRecord:
    """Opcode and frame flags for one machine instruction."""
    opcode: int
    frame_setup: bool
    frame_destroy: bool

    def to_json(self) -> dict:
        return {
            "opcode": self.opcode,
            "frame_setup": self.frame_setup,
            "frame_destroy": self.frame_destroy,
        }


@dataclass(frozen=True)
class EdgeRecord:
    """Reference to a neighbouring block.

    layout_successor is only set for successor edges.
    """
    number: int
    symbol: str
    layout_successor: Optional[bool] = None

    def to_json(self) -> dict:
        rec: dict = {"number": self.number, "symbol": self.symbol}
        if self.layout_successor is not None:
            rec["layout_successor"] = self.layout_successor
        return rec


@dataclass(frozen=True)
class BlockRecord:
    """Basic block record, one per block in layout order."""
    number: int
    symbol: str
    ir_operand: Optional[str]
    can_fallthrough: bool
    ends_in_return: bool
    is_epilogue_insertion_block: bool
    is_prologue_insertion_block: bool
    address_taken: bool
    has_inline_asm: bool
    preds: Sequence[EdgeRecord]
    succs: Sequence[EdgeRecord]
    instrs: Sequence[InstructionRecord]
    asm: Optional[Sequence[str]] = None

    def to_json(self) -> dict:
        mi: dict = {
            "number": self.number,
            "symbol": self.symbol,
            "can_fallthrough": self.can_fallthrough,
            "ends_in_return": self.ends_in_return,
            "is_epilogue_insertion_block": self.is_epilogue_insertion_block,
            "is_prologue_insertion_block": self.is_prologue_insertion_block,
            "address_taken": self.address_taken,
            "has_inline_asm": self.has_inline_asm,
            "preds": [p.to_json() for p in self.preds],
            "succs": [s.to_json() for s in self.succs],
            "instrs": [i.to_json() for i in self.instrs],
        }
        if self.asm is not None:
            mi["asm"] = list(self.asm)
        rec: dict = {}
        if self.ir_operand is not None:
            rec["ir"] = {"operand": self.ir_operand}
        rec["mi"] = mi
        return rec


@dataclass(frozen=True)
class FrameSummary:
    """Stack frame properties captured at inspection time."""
    has_stack_objects: bool
    has_variadic_objects: bool
    is_frame_address_taken: bool
    is_return_address_taken: bool
    num_objects: int
    num_fixed_objects: int
    stack_size: int
    adjusts_stack: bool

    def to_json(self) -> dict:
        return {
            "has_stack_objects": self.has_stack_objects,
            "has_variadic_objects": self.has_variadic_objects,
            "is_frame_address_taken": self.is_frame_address_taken,
            "is_return_address_taken": self.is_return_address_taken,
            "num_objects": self.num_objects,
            "num_fixed_objects": self.num_fixed_objects,
            "stack_size": self.stack_size,
            "adjusts_stack": self.adjusts_stack,
        }


@dataclass(frozen=True)
class ModuleSummary:
    """Owning module and source file, with their path stems."""
    module_name: str
    module_stem: str
    source_name: str
    source_stem: str

    def to_json(self) -> dict:
        return {
            "module_name": self.module_name,
            "module_stem": self.module_stem,
            "source_name": self.source_name,
            "source_stem": self.source_stem,
        }


@dataclass(frozen=True)
class FunctionRecord:
    """Root record: one per inspected function, one line of output."""
    operand: Optional[str]
    name: str
    number: int
    is_mangled: bool
    demangled_name: Optional[str]
    frame_info: FrameSummary
    bbs: Sequence[BlockRecord]
    module: Optional[ModuleSummary]

    def to_json(self) -> dict:
        fn: dict = {}
        if self.operand is not None:
            fn["operand"] = self.operand
        fn["name"] = self.name
        fn["number"] = self.number
        fn["is_mangled"] = self.is_mangled
        if self.demangled_name is not None:
            fn["demangled_name"] = self.demangled_name
        fn["frame_info"] = self.frame_info.to_json()
        fn["bbs"] = [bb.to_json() for bb in self.bbs]
        rec: dict = {"function": fn}
        if self.module is not None:
            rec["module"] = self.module.to_json()
        return rec
