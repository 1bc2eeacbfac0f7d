"""Optimisation passes over expression trees and instruction lists."""

from __future__ import annotations

import logging

from lndw.types import BinaryOp, Expr, Inst, IRError, Num, Opcode, Operator, UnaryOp

logger = logging.getLogger(__name__)

_I32_MIN = -(2**31)


def _wrap(value: int) -> int:
    return (value - _I32_MIN) % 2**32 + _I32_MIN


def _truncating_div(left: int, right: int) -> int:
    quotient = abs(left) // abs(right)
    return _wrap(-quotient if (left < 0) != (right < 0) else quotient)


def _apply(op: Operator, left: int, right: int) -> int:
    if op is Operator.ADD:
        return _wrap(left + right)
    if op is Operator.SUB:
        return _wrap(left - right)
    if op is Operator.MUL:
        return _wrap(left * right)
    if op is Operator.DIV:
        return _truncating_div(left, right)
    if op is Operator.SHL:
        return _wrap(left << (right & 31))
    return left >> (right & 31)


def constant_fold(expr: Expr) -> Expr:
    """Evaluate every subexpression built only from literals."""
    if isinstance(expr, UnaryOp):
        operand = constant_fold(expr.operand)
        if isinstance(operand, Num) and expr.op is Operator.SUB:
            return Num(_wrap(-operand.value))
        return UnaryOp(expr.op, operand)
    if isinstance(expr, BinaryOp):
        left = constant_fold(expr.left)
        right = constant_fold(expr.right)
        if isinstance(left, Num) and isinstance(right, Num):
            if expr.op is Operator.DIV and right.value == 0:
                logger.warning(
                    "detected division by zero during constant folding; not folding"
                )
                return BinaryOp(left, expr.op, right)
            return Num(_apply(expr.op, left.value, right.value))
        return BinaryOp(left, expr.op, right)
    return expr


def _is_power_of_two(value: int) -> bool:
    if value == 0 or value == _I32_MIN:
        raise IRError(f"cannot turn an operation with {value} into a shift")
    return value > 0 and value & (value - 1) == 0


def replace_multiplications_with_bitshifts(expr: Expr) -> Expr:
    """Turn multiplications and divisions by powers of two into shifts."""
    if isinstance(expr, UnaryOp):
        return UnaryOp(expr.op, replace_multiplications_with_bitshifts(expr.operand))
    if not isinstance(expr, BinaryOp):
        return expr

    left, op, right = expr.left, expr.op, expr.right
    if op not in (Operator.MUL, Operator.DIV):
        return BinaryOp(
            replace_multiplications_with_bitshifts(left),
            op,
            replace_multiplications_with_bitshifts(right),
        )

    if isinstance(left, Num) and op is Operator.MUL and _is_power_of_two(left.value):
        return BinaryOp(right, Operator.SHL, Num(left.value.bit_length() - 1))
    if isinstance(right, Num) and _is_power_of_two(right.value):
        shift = Operator.SHL if op is Operator.MUL else Operator.SHR
        return BinaryOp(
            replace_multiplications_with_bitshifts(left),
            shift,
            Num(right.value.bit_length() - 1),
        )
    return BinaryOp(
        replace_multiplications_with_bitshifts(left),
        op,
        replace_multiplications_with_bitshifts(right),
    )


def _multiplication_factors(expr: Expr) -> list[Expr]:
    if isinstance(expr, BinaryOp) and expr.op is Operator.MUL:
        return _multiplication_factors(expr.left) + _multiplication_factors(expr.right)
    return [expr]


def _common_factors(left: Expr, right: Expr) -> list[Expr]:
    right_factors = _multiplication_factors(right)
    return [
        factor
        for factor in _multiplication_factors(left)
        for other in right_factors
        if factor == other
    ]


def _remove_factor(expr: Expr, factor: Expr) -> Expr:
    if isinstance(expr, BinaryOp) and expr.op is Operator.MUL:
        if expr.left == factor:
            return expr.right
        if expr.right == factor:
            return expr.left
        new_left = _remove_factor(expr.left, factor)
        new_right = _remove_factor(expr.right, factor)
        if new_left == expr.left and new_right == expr.right:
            return expr
        return BinaryOp(new_left, Operator.MUL, new_right)
    return Num(1) if expr == factor else expr


def extract_common_factors(expr: Expr) -> Expr:
    """Rewrite ``a * b + a * c`` as ``a * (b + c)`` throughout the tree."""
    if isinstance(expr, BinaryOp):
        left = extract_common_factors(expr.left)
        right = extract_common_factors(expr.right)
        if expr.op is not Operator.ADD:
            return BinaryOp(left, expr.op, right)
        common = _common_factors(left, right)
        if not common:
            return BinaryOp(left, Operator.ADD, right)
        factor = common[0]
        total = BinaryOp(
            _remove_factor(left, factor), Operator.ADD, _remove_factor(right, factor)
        )
        return BinaryOp(factor, Operator.MUL, total)
    if isinstance(expr, UnaryOp):
        return UnaryOp(expr.op, extract_common_factors(expr.operand))
    return expr


def run_cache_optimization(instructions: list[Inst]) -> list[Inst]:
    """Drop RAM writes to lines that are never loaded back."""
    loaded = {inst.args[0] for inst in instructions if inst.opcode is Opcode.LOAD}
    return [
        inst
        for inst in instructions
        if inst.opcode is not Opcode.WRITE or inst.args[1] in loaded
    ]