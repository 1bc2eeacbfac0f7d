"""Hardware configuration of the simulated machine."""

from __future__ import annotations

import re
from dataclasses import dataclass

_UNSIGNED = re.compile(r"\+?[0-9]+")
_U8_MAX = 2**8 - 1
_USIZE_MAX = 2**64 - 1


def _parse_unsigned(text: str, maximum: int) -> int | None:
    if not _UNSIGNED.fullmatch(text):
        return None
    value = int(text)
    return value if value <= maximum else None


@dataclass
class InterpreterOptions:
    """Number of registers and RAM cache lines available to a program."""

    num_registers: int = 6
    num_cachelines: int = 16

    def update_from_text(self, num_registers: str, num_cachelines: str) -> None:
        """Take new sizes from user-entered text, keeping a value whose text is invalid."""
        registers = _parse_unsigned(num_registers, _U8_MAX)
        if registers is not None:
            self.num_registers = registers
        cachelines = _parse_unsigned(num_cachelines, _USIZE_MAX)
        if cachelines is not None:
            self.num_cachelines = cachelines