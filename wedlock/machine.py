from __future__ import annotations

"""Read-only model of a compiled machine function.

The host (a compiler binding, or the NDJSON dump reader in parser.py) builds
these objects; the engine only ever reads them. Edges are block numbers and
may be None when the host observed a null pointer.
"""

import enum
from dataclasses import dataclass, field
from typing import Optional, Sequence


class MIFlag(enum.IntFlag):
    """Machine instruction flag bits exposed in records."""
    FRAME_SETUP = 1 << 0
    FRAME_DESTROY = 1 << 1


@dataclass(frozen=True)
class MachineInstr:
    """A single machine instruction."""
    opcode: int
    flags: int = 0
    is_inline_asm: bool = False
    is_return: bool = False
    is_barrier: bool = False
    text: Optional[str] = None

    @property
    def is_frame_setup(self) -> bool:
        return bool(self.flags & MIFlag.FRAME_SETUP)

    @property
    def is_frame_destroy(self) -> bool:
        return bool(self.flags & MIFlag.FRAME_DESTROY)


@dataclass(frozen=True)
class MachineBasicBlock:
    """Basic block with its instructions and CFG edges."""
    number: int
    symbol: Optional[str] = None
    ir_operand: Optional[str] = None
    address_taken: bool = False
    can_fallthrough: Optional[bool] = None
    preds: Sequence[Optional[int]] = ()
    succs: Sequence[Optional[int]] = ()
    instrs: Sequence[MachineInstr] = ()

    @property
    def is_return_block(self) -> bool:
        """True if the last instruction returns."""
        return bool(self.instrs) and self.instrs[-1].is_return

    def label(self, function_number: int) -> str:
        """Return the block symbol, falling back to the assembler's .LBB naming."""
        if self.symbol:
            return self.symbol
        return f".LBB{function_number}_{self.number}"


@dataclass(frozen=True)
class FrameInfo:
    """Stack frame facts, plus shrink-wrapping save/restore block numbers."""
    has_stack_objects: bool = False
    has_variadic_objects: bool = False
    is_frame_address_taken: bool = False
    is_return_address_taken: bool = False
    num_objects: int = 0
    num_fixed_objects: int = 0
    stack_size: int = 0
    adjusts_stack: bool = False
    save_point: Optional[int] = None
    restore_point: Optional[int] = None


@dataclass(frozen=True)
class SourceModule:
    """Module that owns a function."""
    name: str
    source_file_name: str


@dataclass(frozen=True)
class MachineFunction:
    """A compiled function: frame info plus blocks in layout order."""
    name: str
    number: int = 0
    operand: Optional[str] = None
    target: Optional[str] = None
    frame_info: FrameInfo = field(default_factory=FrameInfo)
    blocks: Sequence[MachineBasicBlock] = ()
    module: Optional[SourceModule] = None

    @property
    def entry_block(self) -> Optional[MachineBasicBlock]:
        """First block in layout order."""
        return self.blocks[0] if self.blocks else None

    def layout_successor(self, block: MachineBasicBlock) -> Optional[MachineBasicBlock]:
        """Return the block placed immediately after `block`."""
        for idx, candidate in enumerate(self.blocks):
            if candidate.number == block.number:
                if idx + 1 < len(self.blocks):
                    return self.blocks[idx + 1]
                return None
        return None
