from wedlock.frame import (
    is_epilogue_insertion_block,
    is_prologue_insertion_block,
    summarize_frame,
)
from wedlock.machine import FrameInfo, MachineBasicBlock, MachineFunction, MachineInstr

RET = MachineInstr(opcode=1, is_return=True)
NOP = MachineInstr(opcode=2)


def _sites(fn: MachineFunction) -> list[tuple[int, bool, bool]]:
    frame = fn.frame_info
    return [
        (
            bb.number,
            is_prologue_insertion_block(frame, bb, fn),
            is_epilogue_insertion_block(frame, bb),
        )
        for bb in fn.blocks
    ]


def test_default_placement_uses_entry_and_return_blocks() -> None:
    fn = MachineFunction(
        name="f",
        blocks=[
            MachineBasicBlock(number=0, succs=[1], instrs=[NOP]),
            MachineBasicBlock(number=1, preds=[0], instrs=[NOP, RET]),
        ],
    )
    assert _sites(fn) == [(0, True, False), (1, False, True)]


def test_every_return_block_is_an_epilogue_site() -> None:
    fn = MachineFunction(
        name="f",
        blocks=[
            MachineBasicBlock(number=0, succs=[1, 2], instrs=[NOP]),
            MachineBasicBlock(number=1, instrs=[RET]),
            MachineBasicBlock(number=2, instrs=[RET]),
        ],
    )
    assert [s[2] for s in _sites(fn)] == [False, True, True]


def test_entry_is_first_in_layout_not_lowest_number() -> None:
    fn = MachineFunction(
        name="f",
        blocks=[
            MachineBasicBlock(number=3, succs=[0]),
            MachineBasicBlock(number=0, instrs=[RET]),
        ],
    )
    assert _sites(fn) == [(3, True, False), (0, False, True)]


def test_shrink_wrapping_points_override_defaults() -> None:
    fn = MachineFunction(
        name="f",
        frame_info=FrameInfo(save_point=1, restore_point=2),
        blocks=[
            MachineBasicBlock(number=0, succs=[1, 3]),
            MachineBasicBlock(number=1, succs=[2]),
            MachineBasicBlock(number=2, succs=[3]),
            MachineBasicBlock(number=3, instrs=[RET]),
        ],
    )
    assert _sites(fn) == [
        (0, False, False),
        (1, True, False),
        (2, False, True),
        (3, False, False),
    ]


def test_block_can_be_both_prologue_and_epilogue_site() -> None:
    fn = MachineFunction(name="leaf", blocks=[MachineBasicBlock(number=0, instrs=[RET])])
    assert _sites(fn) == [(0, True, True)]


def test_stack_size_is_reported_as_signed_64_bit() -> None:
    assert summarize_frame(FrameInfo(stack_size=48)).stack_size == 48
    assert summarize_frame(FrameInfo(stack_size=(1 << 64) - 8)).stack_size == -8


def _shrink_wrapped(frame: FrameInfo) -> MachineFunction:
    return MachineFunction(
        name="f",
        frame_info=frame,
        blocks=[
            MachineBasicBlock(number=0, succs=[1, 2]),
            MachineBasicBlock(number=1, succs=[2]),
            MachineBasicBlock(number=2, instrs=[RET]),
        ],
    )


def test_save_point_alone_moves_only_the_prologue() -> None:
    fn = _shrink_wrapped(FrameInfo(save_point=1))
    assert _sites(fn) == [(0, False, False), (1, True, False), (2, False, True)]


def test_restore_point_alone_moves_only_the_epilogue() -> None:
    fn = _shrink_wrapped(FrameInfo(restore_point=1))
    assert _sites(fn) == [(0, True, False), (1, False, True), (2, False, False)]
