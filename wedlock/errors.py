from __future__ import annotations

"""Exception hierarchy for the wedlock engine and its readers."""


class WedlockError(Exception):
    """Base class for all wedlock errors."""


class StreamOpenError(WedlockError):
    """Raised when an output stream cannot be opened.

    This is the only error the engine lets escape: without its streams it
    cannot emit anything, so the enclosing pipeline has to stop.
    """

    def __init__(self, path: str) -> None:
        super().__init__(f"Failed to open {path}")
        self.path = path


class EngineFinalizedError(WedlockError):
    """Raised when a finalized engine is asked to open or write its streams again."""

    def __init__(self, path: str) -> None:
        super().__init__(f"wedlock engine for {path} was already finalized")
        self.path = path


class RecordFormatError(WedlockError):
    """Raised when an NDJSON input line does not have the expected shape."""

    def __init__(self, path: str, line: int, reason: str) -> None:
        super().__init__(f"{path}:{line}: {reason}")
        self.path = path
        self.line = line
        self.reason = reason


__all__ = ["WedlockError", "StreamOpenError", "EngineFinalizedError", "RecordFormatError"]
