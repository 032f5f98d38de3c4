from __future__ import annotations

"""Prologue/epilogue insertion-site classification.

Mirrors where the prologue/epilogue inserter puts frame code: at the
shrink-wrapping save/restore points when shrink-wrapping picked them,
otherwise at the entry block and at every return block.

We only expect a single prologue per function. Funclet-based exception
handling can produce more; each block is classified on its own and no
uniqueness is asserted.
"""

from .machine import FrameInfo, MachineBasicBlock, MachineFunction
from .models import FrameSummary

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


def is_epilogue_insertion_block(frame: FrameInfo, block: MachineBasicBlock) -> bool:
    """True if epilogue/restore code will be inserted into `block`."""
    if frame.restore_point is not None:
        return block.number == frame.restore_point
    return block.is_return_block


def is_prologue_insertion_block(
    frame: FrameInfo,
    block: MachineBasicBlock,
    fn: MachineFunction,
) -> bool:
    """True if prologue/frame construction code will be inserted into `block`."""
    if frame.save_point is not None:
        return block.number == frame.save_point
    entry = fn.entry_block
    return entry is not None and block.number == entry.number


def _as_int64(value: int) -> int:
    """Reinterpret an unsigned 64-bit frame size as signed."""
    value = int(value)
    if INT64_MIN <= value <= INT64_MAX:
        return value
    value &= (1 << 64) - 1
    return value - (1 << 64) if value > INT64_MAX else value


def summarize_frame(frame: FrameInfo) -> FrameSummary:
    return FrameSummary(
        has_stack_objects=frame.has_stack_objects,
        has_variadic_objects=frame.has_variadic_objects,
        is_frame_address_taken=frame.is_frame_address_taken,
        is_return_address_taken=frame.is_return_address_taken,
        num_objects=frame.num_objects,
        num_fixed_objects=frame.num_fixed_objects,
        stack_size=_as_int64(frame.stack_size),
        adjusts_stack=frame.adjusts_stack,
    )
