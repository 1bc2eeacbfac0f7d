"""Core data types: errors, operators, expression trees and instructions."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union


class LpErr(Exception):
    """Base class for every error raised while compiling or running a program."""

    stage = ""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        if self.stage:
            return f"{self.message} ({self.stage})"
        return self.message


class ParseError(LpErr):
    """The source text is not a valid expression."""

    stage = "parse"


class IRError(LpErr):
    """Instruction generation failed."""

    stage = "ir gen"


class InterpretError(LpErr):
    """Execution of the instruction list failed."""

    stage = "interpreter"


class Operator(enum.Enum):
    """Arithmetic operators, valued by their symbol."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    SHL = "<<"
    SHR = ">>"

    @classmethod
    def from_char(cls, char: str) -> Operator:
        """Return the operator written as a single character in source text."""
        try:
            return _CHAR_OPERATORS[char]
        except KeyError:
            raise ValueError(f"not an operator character: {char!r}") from None

    def __str__(self) -> str:
        return self.value


_CHAR_OPERATORS = {
    "+": Operator.ADD,
    "-": Operator.SUB,
    "*": Operator.MUL,
    "/": Operator.DIV,
}


@dataclass(frozen=True)
class Num:
    """An integer literal."""

    value: int


@dataclass(frozen=True)
class Var:
    """A named input variable."""

    name: str


@dataclass(frozen=True)
class UnaryOp:
    """An operator applied to a single operand."""

    op: Operator
    operand: Expr


@dataclass(frozen=True)
class BinaryOp:
    """An operator applied to two operands."""

    left: Expr
    op: Operator
    right: Expr


Expr = Union[Num, Var, UnaryOp, BinaryOp]


class Opcode(enum.Enum):
    """Instruction kinds of the target machine."""

    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    SHL = "shl"
    SHR = "shr"
    STORE = "store"
    TRANSFER = "transfer"
    RESULT = "result"
    WRITE = "write"
    LOAD = "load"


_ARITY = {opcode: 2 for opcode in Opcode}
_ARITY[Opcode.RESULT] = 1


@dataclass(frozen=True, init=False)
class Inst:
    """A single machine instruction.

    Operand layout per opcode:
    binary ops ``(reg_a, reg_b)`` with the result written to ``reg_b``;
    STORE ``(number, reg)``; TRANSFER ``(variable, reg)``; RESULT ``(reg,)``;
    WRITE ``(reg, address)``; LOAD ``(address, reg)``.
    """

    opcode: Opcode
    args: tuple

    def __init__(self, opcode: Opcode, *args: object) -> None:
        opcode = Opcode(opcode)
        if len(args) != _ARITY[opcode]:
            raise ValueError(
                f"{opcode.value} takes {_ARITY[opcode]} operands, got {len(args)}"
            )
        object.__setattr__(self, "opcode", opcode)
        object.__setattr__(self, "args", tuple(args))

    def __str__(self) -> str:
        return f"{self.opcode.value} {', '.join(str(arg) for arg in self.args)}"