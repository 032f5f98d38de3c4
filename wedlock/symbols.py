from __future__ import annotations

"""Linkage name classification and demangling."""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Callable, Dict, Optional

log = logging.getLogger(__name__)

Demangler = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class SymbolInfo:
    """Result of classifying a linkage name."""
    is_mangled: bool
    demangled_name: Optional[str]


def is_itanium_encoding(name: str) -> bool:
    """Return True if `name` starts with 1-4 underscores followed by 'Z'.

    This is only a cheap filter; the rest of the mangling grammar is not
    checked.
    """
    pos = 0
    while pos < len(name) and name[pos] == "_":
        pos += 1
    return 0 < pos <= 4 and pos < len(name) and name[pos] == "Z"


class CxxFiltDemangler:
    """Demangle names with the c++filt tool.

    Returns None when the tool is unavailable, fails, or hands the name back
    unchanged (its way of reporting a name it cannot demangle).
    """

    def __init__(self, binary: str = "c++filt", timeout: float = 10.0) -> None:
        self.binary = binary
        self.timeout = timeout
        self._cache: Dict[str, Optional[str]] = {}
        self._path: Optional[str] = None
        self._looked_up = False

    def _tool(self) -> Optional[str]:
        if not self._looked_up:
            self._looked_up = True
            self._path = shutil.which(self.binary)
            if self._path is None:
                log.warning("%s not found; demangled names will be omitted", self.binary)
        return self._path

    def __call__(self, name: str) -> Optional[str]:
        if name in self._cache:
            return self._cache[name]
        tool = self._tool()
        if tool is None:
            return None
        try:
            proc = subprocess.run(
                [tool, name],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            log.warning("%s failed on %s: %s", self.binary, name, exc)
            self._cache[name] = None
            return None
        out = proc.stdout.strip()
        result = out if proc.returncode == 0 and out and out != name else None
        self._cache[name] = result
        return result


def classify_symbol(
    name: str,
    demangler: Demangler,
    diag: Optional[logging.Logger] = None,
) -> SymbolInfo:
    """Tag `name` as mangled or not, and demangle it if it is.

    The demangler is host code; anything it raises is noted on `diag` and the
    demangled name is left out.
    """
    if not is_itanium_encoding(name):
        return SymbolInfo(is_mangled=False, demangled_name=None)
    try:
        demangled = demangler(name)
    except Exception as exc:
        (diag or log).info("Demangler failed on %s: %r", name, exc)
        demangled = None
    if not demangled or demangled == name:
        demangled = None
    return SymbolInfo(is_mangled=True, demangled_name=demangled)
