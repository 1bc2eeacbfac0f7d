"""Interpreter for the register-machine instruction set."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Callable

from lndw.options import InterpreterOptions
from lndw.types import Inst, InterpretError, Opcode

logger = logging.getLogger(__name__)

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_INTEGER = re.compile(r"[+-]?[0-9]+")


def _wrap(value: int) -> int:
    return (value - _I32_MIN) % 2**32 + _I32_MIN


def _divide(left: int, right: int) -> int:
    if left == _I32_MIN and right == -1:
        raise InterpretError("attempt to divide with overflow")
    quotient = abs(left) // abs(right)
    return -quotient if (left < 0) != (right < 0) else quotient


_BINARY: dict[Opcode, Callable[[int, int], int]] = {
    Opcode.ADD: lambda a, b: _wrap(a + b),
    Opcode.SUB: lambda a, b: _wrap(a - b),
    Opcode.MUL: lambda a, b: _wrap(a * b),
    Opcode.DIV: _divide,
    Opcode.SHL: lambda a, b: _wrap(a << (b & 31)),
    Opcode.SHR: lambda a, b: a >> (b & 31),
}

_SYMBOLS = {
    Opcode.ADD: "+",
    Opcode.SUB: "-",
    Opcode.MUL: "*",
    Opcode.DIV: "/",
    Opcode.SHL: "<<",
    Opcode.SHR: ">>",
}


class Interpreter:
    """Executes an instruction list step by step, exposing registers and RAM."""

    def __init__(
        self,
        hw: InterpreterOptions | None = None,
        instructions: Iterable[Inst] = (),
        variables: Mapping[str, str] | None = None,
        tracing: bool = False,
    ) -> None:
        hw = hw if hw is not None else InterpreterOptions()
        self.registers: dict[str, int] = {}
        self.ram: list[int] = [0] * hw.num_cachelines
        self.instructions: list[Inst] = list(instructions)
        self.program_counter = 0
        self.variables = dict(variables) if variables is not None else None
        self.running = True
        self.tracing = tracing
        self._trace = ""
        if tracing and self.instructions:
            self._trace = self._describe()

    def step(self) -> int | None:
        """Execute one instruction; return the program result once it finishes, else None."""
        if not self.running:
            raise InterpretError(
                "The interpreter was either not ready to run or finished execution"
            )
        if self.program_counter >= len(self.instructions):
            raise InterpretError("no result found")
        if self.tracing:
            self._trace = self._describe()

        inst = self.instructions[self.program_counter]
        opcode = inst.opcode
        if opcode in _BINARY:
            a, b = inst.args
            if opcode is Opcode.DIV and self.registers.get(b) == 0:
                raise InterpretError("division by zero")
            self._binop(a, b, _BINARY[opcode])
        elif opcode is Opcode.STORE:
            value, reg = inst.args
            self._set_register(reg, value)
        elif opcode is Opcode.TRANSFER:
            name, reg = inst.args
            self._set_register(reg, self._variable(name))
        elif opcode is Opcode.RESULT:
            (reg,) = inst.args
            self.program_counter += 1
            self.running = False
            if reg not in self.registers:
                raise InterpretError(f"register `{reg}` is empty")
            return self.registers[reg]
        elif opcode is Opcode.WRITE:
            reg, addr = inst.args
            self._check_address(addr)
            if reg not in self.registers:
                raise InterpretError(f"register `{reg}` is empty")
            self.ram[addr] = self.registers[reg]
        else:
            addr, reg = inst.args
            self._check_address(addr)
            self.registers[reg] = self.ram[addr]

        self.program_counter += 1
        return None

    def run_to_end(self) -> int:
        """Execute until the program yields its result."""
        while True:
            result = self.step()
            if result is not None:
                return result

    def display_current(self) -> str:
        """Describe the instruction being executed; empty unless tracing is on."""
        return self._trace

    def reset(self) -> None:
        """Rewind to the first instruction and clear registers and RAM."""
        self.program_counter = 0
        self.ram = [0] * len(self.ram)
        self.registers.clear()

    def _set_register(self, reg: str, value: int) -> None:
        if reg in self.registers:
            logger.warning("overwriting register `%s`", reg)
        self.registers[reg] = value

    def _variable(self, name: str) -> int:
        if self.variables is None:
            raise InterpretError("No variables loaded")
        if name not in self.variables:
            raise InterpretError(f"unknown variable `{name}`")
        text = self.variables[name]
        if not text:
            raise InterpretError(f"variable `{name}` has no value")
        if not _INTEGER.fullmatch(text) or not _I32_MIN <= int(text) <= _I32_MAX:
            raise InterpretError(f"value `{text}` of variable `{name}` is not a number")
        return int(text)

    def _check_address(self, addr: int) -> None:
        if addr >= len(self.ram):
            raise InterpretError(f"requested RAM address {addr} doesn't exist.")

    def _binop(self, a: str, b: str, op: Callable[[int, int], int]) -> None:
        if a not in self.registers:
            raise InterpretError(f"no such reg `{a}`")
        if b not in self.registers:
            raise InterpretError(f"no such reg `{b}`")
        self.registers[b] = op(self.registers[a], self.registers[b])

    def _value(self, reg: str) -> int:
        if reg not in self.registers:
            raise InterpretError(f"register `{reg}` is empty")
        return self.registers[reg]

    def _describe(self) -> str:
        inst = self.instructions[self.program_counter]
        opcode = inst.opcode
        if opcode in _SYMBOLS:
            a, b = inst.args
            return f"{self._value(a)} {_SYMBOLS[opcode]} {self._value(b)}"
        if opcode in (Opcode.STORE, Opcode.TRANSFER):
            operand, reg = inst.args
            return f"{operand} ➡ [{reg}]"
        if opcode is Opcode.RESULT:
            return f"= {self._value(inst.args[0])}"
        if opcode is Opcode.WRITE:
            reg, addr = inst.args
            return f"⎘ [{reg}] ➡ [{addr}]"
        addr, reg = inst.args
        return f"⎗ [{reg}] ⬅ [{addr}]"