"""Compilation of expressions into register-machine instructions."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from lndw.options import InterpreterOptions
from lndw.parser import parse
from lndw.passes import (
    constant_fold,
    extract_common_factors,
    replace_multiplications_with_bitshifts,
    run_cache_optimization,
)
from lndw.types import (
    BinaryOp,
    Expr,
    Inst,
    IRError,
    Num,
    Opcode,
    Operator,
    UnaryOp,
    Var,
)

logger = logging.getLogger(__name__)

_OPCODES = {
    Operator.ADD: Opcode.ADD,
    Operator.SUB: Opcode.SUB,
    Operator.MUL: Opcode.MUL,
    Operator.DIV: Opcode.DIV,
    Operator.SHL: Opcode.SHL,
    Operator.SHR: Opcode.SHR,
}


def register_name(reg: int) -> str:
    """Name register number ``reg``: 0 is ``a``, 1 is ``b`` and so on up to ``z``."""
    if not 0 <= reg < 26:
        raise ValueError(f"register {reg} out of range: max 26 registers supported (a..z)")
    return chr(ord("a") + reg)


@dataclass
class CompileOptions:
    """Which optimisations the compiler applies."""

    do_constant_folding: bool = False
    run_cache_optimization: bool = False
    do_common_factor_elimination: bool = False
    do_shift_replacement: bool = False

    def any(self) -> bool:
        """Whether at least one optimisation is enabled."""
        return (
            self.do_constant_folding
            or self.run_cache_optimization
            or self.do_common_factor_elimination
            or self.do_shift_replacement
        )


@dataclass(frozen=True)
class _Location:
    in_ram: bool
    index: int


class _IrBuilder:
    """Generates instructions for one expression tree, spilling registers to RAM."""

    def __init__(self, hw: InterpreterOptions) -> None:
        self.num_registers = hw.num_registers
        self.num_cachelines = hw.num_cachelines
        self.next_reg = 0
        self.ram_idx = 0
        self.code: list[Inst] = []
        self.variables: set[str] = set()
        self.locations: dict[Expr, _Location] = {}
        self.registers: dict[int, Expr] = {}

    def build(self, ast: Expr) -> tuple[list[Inst], set[str]]:
        result = self._emit(ast)
        self.code.append(Inst(Opcode.RESULT, register_name(result)))
        return self.code, self.variables

    def _bump_register(self) -> None:
        if self.num_registers == 0:
            raise IRError("the machine has no registers")
        self.next_reg = (self.next_reg + 1) % self.num_registers

    def _write_back(self, expr: Expr) -> None:
        location = self.locations.get(expr)
        if location is None:
            logger.warning("tried to create write for non-existent expression %r", expr)
            return
        if location.in_ram:
            logger.warning("tried to push RAM to RAM for %r", expr)
            return
        if self.num_cachelines == 0:
            raise IRError("the machine has no RAM")
        self.code.append(Inst(Opcode.WRITE, register_name(location.index), self.ram_idx))
        self.locations[expr] = _Location(True, self.ram_idx)
        self.ram_idx = (self.ram_idx + 1) % self.num_cachelines
        if self.ram_idx == 0:
            logger.warning("RAM overrun detected")

    def _load(self, expr: Expr) -> None:
        location = self.locations.get(expr)
        if location is None:
            logger.warning("tried to create load for non-existent expression %r", expr)
            return
        if not location.in_ram:
            logger.warning("tried to load register to register for %r", expr)
            return
        self.code.append(Inst(Opcode.LOAD, location.index, register_name(self.next_reg)))
        self.locations[expr] = _Location(False, self.next_reg)
        self._bump_register()

    def _reserve(self, reg: int, expr: Expr) -> None:
        evicted = self.registers.get(reg)
        if evicted is not None:
            self._write_back(evicted)
        self.registers[reg] = expr

    def _fetch(self, reg: int, expr: Expr) -> int:
        """Return the register holding ``expr``, reloading it if it was evicted."""
        if self.registers[reg] == expr:
            return reg
        target = self.next_reg
        self._reserve(target, expr)
        self._load(expr)
        return target

    def _emit_leaf(self, ast: Expr, opcode: Opcode, operand: object) -> int:
        reg = self.next_reg
        self._reserve(reg, ast)
        self.code.append(Inst(opcode, operand, register_name(reg)))
        if ast in self.locations:
            logger.warning("tried overwriting existing location -- duplicate expression %r", ast)
        else:
            self.locations[ast] = _Location(False, reg)
        self._bump_register()
        return reg

    def _emit_operation(self, left: Expr, opcode: Opcode, right: Expr, ast: Expr) -> int:
        left_reg = self._emit(left)
        right_reg = self._emit(right)
        left_reg = self._fetch(left_reg, left)
        right_reg = self._fetch(right_reg, right)
        self.code.append(Inst(opcode, register_name(left_reg), register_name(right_reg)))
        if right_reg in self.registers:
            self.registers[right_reg] = ast
        # a register is more useful than a potential hit in RAM
        self.locations[ast] = _Location(False, right_reg)
        return right_reg

    def _emit(self, ast: Expr) -> int:
        if isinstance(ast, Num):
            return self._emit_leaf(ast, Opcode.STORE, ast.value)
        if isinstance(ast, Var):
            self.variables.add(ast.name)
            return self._emit_leaf(ast, Opcode.TRANSFER, ast.name)
        if isinstance(ast, UnaryOp):
            if ast.op is not Operator.SUB:
                raise IRError(f"invalid unary operator `{ast.op}`")
            return self._emit_operation(Num(0), Opcode.SUB, ast.operand, ast)
        if isinstance(ast, BinaryOp):
            return self._emit_operation(ast.left, _OPCODES[ast.op], ast.right, ast)
        raise IRError(f"unknown expression {ast!r}")


class Compiler:
    """Turns source text into an instruction list for a given machine."""

    def __init__(
        self,
        options: CompileOptions | None = None,
        hw: InterpreterOptions | None = None,
    ) -> None:
        self.options = options if options is not None else CompileOptions()
        self.hw = hw if hw is not None else InterpreterOptions()

    def compile(self, source: str) -> tuple[list[Inst], set[str]]:
        """Compile ``source``, returning the instructions and the input variable names."""
        options = self.options
        ast = parse(source)
        if options.do_constant_folding:
            ast = constant_fold(ast)
        if options.do_common_factor_elimination:
            ast = extract_common_factors(ast)
        if options.do_shift_replacement:
            ast = replace_multiplications_with_bitshifts(ast)
        if options.do_constant_folding:
            ast = constant_fold(ast)

        instructions, variables = _IrBuilder(self.hw).build(ast)

        if options.run_cache_optimization:
            instructions = run_cache_optimization(instructions)
        return instructions, variables