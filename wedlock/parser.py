from __future__ import annotations

"""NDJSON readers for machine-function dumps and wedlock records."""

import json
from typing import Iterable, List, Optional, Tuple

from .errors import RecordFormatError
from .machine import (
    FrameInfo,
    MachineBasicBlock,
    MachineFunction,
    MachineInstr,
    SourceModule,
)
from .models import (
    BlockRecord,
    EdgeRecord,
    FrameSummary,
    FunctionRecord,
    InstructionRecord,
    ModuleSummary,
)


def read_ndjson(path: str) -> Iterable[Tuple[int, dict]]:
    """Yield (line number, object) for every non-empty line of an NDJSON file."""
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                rec = json.loads(line)
            except json.JSONDecodeError as exc:
                raise RecordFormatError(path, lineno, f"invalid JSON: {exc.msg}") from exc
            if not isinstance(rec, dict):
                raise RecordFormatError(path, lineno, "expected a JSON object")
            yield lineno, rec


def _opt_edge(value: object) -> Optional[int]:
    return None if value is None else int(value)


def _machine_instr(rec: dict) -> MachineInstr:
    return MachineInstr(
        opcode=int(rec["opcode"]),
        flags=int(rec.get("flags", 0)),
        is_inline_asm=bool(rec.get("inline_asm", False)),
        is_return=bool(rec.get("return", False)),
        is_barrier=bool(rec.get("barrier", False)),
        text=rec.get("text"),
    )


def _machine_block(rec: dict) -> MachineBasicBlock:
    return MachineBasicBlock(
        number=int(rec["number"]),
        symbol=rec.get("symbol"),
        ir_operand=rec.get("ir_operand"),
        address_taken=bool(rec.get("address_taken", False)),
        can_fallthrough=rec.get("can_fallthrough"),
        preds=[_opt_edge(p) for p in rec.get("preds", [])],
        succs=[_opt_edge(s) for s in rec.get("succs", [])],
        instrs=[_machine_instr(i) for i in rec.get("instrs", [])],
    )


def _frame_info(rec: dict) -> FrameInfo:
    return FrameInfo(
        has_stack_objects=bool(rec.get("has_stack_objects", False)),
        has_variadic_objects=bool(rec.get("has_variadic_objects", False)),
        is_frame_address_taken=bool(rec.get("is_frame_address_taken", False)),
        is_return_address_taken=bool(rec.get("is_return_address_taken", False)),
        num_objects=int(rec.get("num_objects", 0)),
        num_fixed_objects=int(rec.get("num_fixed_objects", 0)),
        stack_size=int(rec.get("stack_size", 0)),
        adjusts_stack=bool(rec.get("adjusts_stack", False)),
        save_point=_opt_edge(rec.get("save_point")),
        restore_point=_opt_edge(rec.get("restore_point")),
    )


def parse_machine_function(rec: dict) -> MachineFunction:
    """Build a MachineFunction from one dump object."""
    module = None
    if rec.get("module") is not None:
        module = SourceModule(
            name=rec["module"].get("name", ""),
            source_file_name=rec["module"].get("source_file_name", ""),
        )
    return MachineFunction(
        name=rec["name"],
        number=int(rec.get("number", 0)),
        operand=rec.get("operand"),
        target=rec.get("target"),
        frame_info=_frame_info(rec.get("frame_info") or {}),
        blocks=[_machine_block(b) for b in rec.get("blocks", [])],
        module=module,
    )


def load_machine_functions(path: str) -> List[MachineFunction]:
    """Load machine_function dump records, in file order."""
    out: List[MachineFunction] = []
    for lineno, rec in read_ndjson(path):
        if rec.get("kind") != "machine_function":
            continue
        try:
            out.append(parse_machine_function(rec))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise RecordFormatError(path, lineno, f"bad machine_function: {exc!r}") from exc
    return out


def _edge_record(rec: dict) -> EdgeRecord:
    return EdgeRecord(
        number=int(rec["number"]),
        symbol=rec["symbol"],
        layout_successor=rec.get("layout_successor"),
    )


def _block_record(rec: dict) -> BlockRecord:
    mi = rec["mi"]
    ir = rec.get("ir")
    asm = mi.get("asm")
    return BlockRecord(
        number=int(mi["number"]),
        symbol=mi["symbol"],
        ir_operand=ir.get("operand") if ir else None,
        can_fallthrough=bool(mi["can_fallthrough"]),
        ends_in_return=bool(mi["ends_in_return"]),
        is_epilogue_insertion_block=bool(mi["is_epilogue_insertion_block"]),
        is_prologue_insertion_block=bool(mi["is_prologue_insertion_block"]),
        address_taken=bool(mi["address_taken"]),
        has_inline_asm=bool(mi["has_inline_asm"]),
        preds=[_edge_record(p) for p in mi.get("preds", [])],
        succs=[_edge_record(s) for s in mi.get("succs", [])],
        instrs=[
            InstructionRecord(
                opcode=int(i["opcode"]),
                frame_setup=bool(i["frame_setup"]),
                frame_destroy=bool(i["frame_destroy"]),
            )
            for i in mi.get("instrs", [])
        ],
        asm=list(asm) if asm is not None else None,
    )


def parse_function_record(rec: dict) -> FunctionRecord:
    """Rebuild a FunctionRecord from one line of the wedlock stream."""
    fn = rec["function"]
    fi = fn["frame_info"]
    module = None
    if rec.get("module") is not None:
        m = rec["module"]
        module = ModuleSummary(
            module_name=m["module_name"],
            module_stem=m["module_stem"],
            source_name=m["source_name"],
            source_stem=m["source_stem"],
        )
    return FunctionRecord(
        operand=fn.get("operand"),
        name=fn["name"],
        number=int(fn.get("number", 0)),
        is_mangled=bool(fn["is_mangled"]),
        demangled_name=fn.get("demangled_name"),
        frame_info=FrameSummary(
            has_stack_objects=bool(fi["has_stack_objects"]),
            has_variadic_objects=bool(fi["has_variadic_objects"]),
            is_frame_address_taken=bool(fi["is_frame_address_taken"]),
            is_return_address_taken=bool(fi["is_return_address_taken"]),
            num_objects=int(fi["num_objects"]),
            num_fixed_objects=int(fi["num_fixed_objects"]),
            stack_size=int(fi["stack_size"]),
            adjusts_stack=bool(fi["adjusts_stack"]),
        ),
        bbs=[_block_record(b) for b in fn.get("bbs", [])],
        module=module,
    )


def load_function_records(path: str) -> List[FunctionRecord]:
    """Load every record from a wedlock NDJSON stream."""
    out: List[FunctionRecord] = []
    for lineno, rec in read_ndjson(path):
        try:
            out.append(parse_function_record(rec))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise RecordFormatError(path, lineno, f"bad function record: {exc!r}") from exc
    return out
