from __future__ import annotations

"""Wedlock engine: inspects machine functions and streams one record per function.

The engine owns two streams for the lifetime of a pipeline run:

- the primary NDJSON stream (required; failing to open it is fatal), and
- an optional diagnostic text stream, fed through a private logger that
  discards everything when no path was configured.

Streams are opened once, either explicitly via do_initialization() or lazily
on the first inspected function, and closed once by do_finalization().
"""

import json
import logging
import threading
from pathlib import PurePath
from typing import IO, Optional

from .cfg import Printer, extract_blocks, format_instr
from .config import WedlockConfig
from .errors import EngineFinalizedError, StreamOpenError
from .frame import summarize_frame
from .machine import MachineFunction, SourceModule
from .models import FunctionRecord, ModuleSummary
from .symbols import CxxFiltDemangler, Demangler, classify_symbol

log = logging.getLogger(__name__)

DIAGNOSTIC_FORMAT = "%(message)s"


def path_stem(path: str) -> str:
    """File name up to its last dot ("dir/foo.ll" -> "foo", ".bashrc" -> "").

    "." and ".." are returned unchanged.
    """
    if not path:
        return ""
    name = PurePath(path).name or path
    if name in (".", ".."):
        return name
    dot = name.rfind(".")
    return name if dot < 0 else name[:dot]


def summarize_module(module: SourceModule) -> ModuleSummary:
    return ModuleSummary(
        module_name=module.name,
        module_stem=path_stem(module.name),
        source_name=module.source_file_name,
        source_stem=path_stem(module.source_file_name),
    )


class Wedlock:
    """Per-pipeline engine instance."""

    def __init__(
        self,
        config: WedlockConfig,
        demangler: Optional[Demangler] = None,
        printer: Optional[Printer] = None,
    ) -> None:
        self.config = config
        self.demangler: Demangler = demangler if demangler is not None else CxxFiltDemangler()
        self.printer: Printer = printer if printer is not None else format_instr
        self.records_written = 0
        self._stream: Optional[IO[str]] = None
        self._stream_lock = threading.Lock()
        self._init_lock = threading.Lock()
        self._diag_handler: Optional[logging.Handler] = None
        self._initialized = False
        self._finalized = False
        self.diagnostics = logging.Logger(f"wedlock.diagnostics.{id(self):x}", logging.DEBUG)
        self.diagnostics.propagate = False
        self.diagnostics.addHandler(logging.NullHandler())

    def __enter__(self) -> "Wedlock":
        self.do_initialization()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.do_finalization()

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    def do_initialization(self) -> None:
        """Open the diagnostic stream (if configured) and the primary stream."""
        if not self.config.enabled:
            return
        if self._finalized:
            raise EngineFinalizedError(self.config.output)
        if self._initialized:
            return
        with self._init_lock:
            if self._finalized:
                raise EngineFinalizedError(self.config.output)
            if self._initialized:
                return

            if self.config.logging_output:
                try:
                    handler = logging.FileHandler(
                        self.config.logging_output, mode="w", encoding="utf-8"
                    )
                except OSError as exc:
                    raise StreamOpenError(self.config.logging_output) from exc
                handler.setFormatter(logging.Formatter(DIAGNOSTIC_FORMAT))
                self.diagnostics.addHandler(handler)
                self._diag_handler = handler

            # Created or truncated once per run; records are only appended after this.
            try:
                self._stream = open(self.config.output, "w", encoding="utf-8")
            except OSError as exc:
                self._close_diagnostics()
                raise StreamOpenError(self.config.output) from exc

            self._initialized = True
        log.debug("wedlock: writing records to %s", self.config.output)

    def do_finalization(self) -> None:
        """Close both streams. Safe to call more than once."""
        with self._init_lock:
            if self._finalized:
                return
            self._finalized = True
        with self._stream_lock:
            if self._stream is not None:
                self._stream.close()
                self._stream = None
        self._close_diagnostics()
        if self._initialized:
            log.debug("wedlock: wrote %d records to %s", self.records_written, self.config.output)

    def _close_diagnostics(self) -> None:
        if self._diag_handler is not None:
            self.diagnostics.removeHandler(self._diag_handler)
            self._diag_handler.close()
            self._diag_handler = None

    def run_on_machine_function(self, fn: MachineFunction) -> Optional[FunctionRecord]:
        """Inspect `fn` and append its record. Returns None when disabled."""
        if not self.config.enabled:
            return None
        self.do_initialization()
        record = self.inspect(fn)
        self.write_record(record)
        return record

    def inspect(self, fn: MachineFunction) -> FunctionRecord:
        """Build the record for `fn` without writing it."""
        diag = self.diagnostics

        if fn.operand is None:
            diag.info("No IR function for %s; omitting operand", fn.name)
        module: Optional[ModuleSummary] = None
        if fn.module is None:
            diag.info("No Module for machine function %s; omitting module", fn.name)
        else:
            module = summarize_module(fn.module)

        symbol = classify_symbol(fn.name, self.demangler, diag)

        bbs = extract_blocks(
            fn,
            diag,
            pretty_print=self.config.pretty_print_mi,
            printer=self.printer,
        )

        return FunctionRecord(
            operand=fn.operand,
            name=fn.name,
            number=fn.number,
            is_mangled=symbol.is_mangled,
            demangled_name=symbol.demangled_name,
            frame_info=summarize_frame(fn.frame_info),
            bbs=bbs,
            module=module,
        )

    def write_record(self, record: FunctionRecord) -> None:
        """Append one record as a single NDJSON line."""
        line = json.dumps(record.to_json()) + "\n"
        with self._stream_lock:
            if self._stream is None:
                if self._finalized:
                    raise EngineFinalizedError(self.config.output)
                raise StreamOpenError(self.config.output)
            self._stream.write(line)
            self._stream.flush()
            self.records_written += 1
