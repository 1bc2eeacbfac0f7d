import pytest

from lndw.parser import parse
from lndw.passes import (
    constant_fold,
    extract_common_factors,
    replace_multiplications_with_bitshifts,
    run_cache_optimization,
)
from lndw.types import BinaryOp, Inst, IRError, Num, Opcode, Operator, UnaryOp, Var


def test_fold_leaves_variables_alone():
    assert constant_fold(Var("x")) == Var("x")
    assert constant_fold(Num(4)) == Num(4)


def test_fold_partial_expression():
    assert constant_fold(parse("x + 2 * 3")) == BinaryOp(Var("x"), Operator.ADD, Num(6))


def test_fold_division_truncates_toward_zero():
    assert constant_fold(parse("-7 / 2")) == Num(-3)


def test_fold_negation_of_literal():
    assert constant_fold(UnaryOp(Operator.SUB, Num(5))) == Num(-5)


def test_fold_keeps_negation_of_variable():
    expr = UnaryOp(Operator.SUB, Var("y"))
    assert constant_fold(expr) == expr


def test_fold_does_not_divide_by_zero():
    expr = BinaryOp(Num(6), Operator.DIV, Num(0))
    assert constant_fold(expr) == expr


@pytest.mark.parametrize(
    "text",
    ["1000 * 2 + 4 * 5 + (15 / 3) + x * 13 - y * 2", "3 + 2 + 1", "t * 16 + t * (3 + 2)"],
)
def test_fold_is_idempotent(text):
    once = constant_fold(parse(text))
    assert constant_fold(once) == once


def test_fold_fully_constant_expression_gives_number():
    result = constant_fold(parse("(1000 + 2) * (4 * 5 + (15 / 3) + 17 * 13 - 8 * 2)"))
    assert result == Num(230460)


def test_shift_replacement_right_power_of_two():
    result = replace_multiplications_with_bitshifts(parse("x * 8"))
    assert result.left == Var("x")
    assert result.op is Operator.SHL
    assert 1 << result.right.value == 8


def test_shift_replacement_left_power_of_two():
    result = replace_multiplications_with_bitshifts(parse("8 * x"))
    assert result.left == Var("x")
    assert result.op is Operator.SHL
    assert 1 << result.right.value == 8


def test_shift_replacement_division():
    result = replace_multiplications_with_bitshifts(parse("x / 4"))
    assert result.left == Var("x")
    assert result.op is Operator.SHR
    assert 1 << result.right.value == 4


def test_shift_replacement_keeps_division_of_power_by_variable():
    expr = parse("8 / x")
    assert replace_multiplications_with_bitshifts(expr) == expr


def test_shift_replacement_keeps_other_factors():
    expr = parse("x * 6 + y / 3")
    assert replace_multiplications_with_bitshifts(expr) == expr


@pytest.mark.parametrize("text", ["16 / 2 * 4 / 4", "3 * 32 + 64 / 16", "-(2 * 7)"])
def test_shift_replacement_preserves_value(text):
    expr = parse(text)
    replaced = replace_multiplications_with_bitshifts(expr)
    assert constant_fold(replaced) == constant_fold(expr)


def test_shift_replacement_rejects_zero():
    with pytest.raises(IRError):
        replace_multiplications_with_bitshifts(parse("x * 0"))


def test_common_factor_example():
    result = extract_common_factors(parse("t * 16 + t * (3 + 2)"))
    assert result == BinaryOp(
        Var("t"),
        Operator.MUL,
        BinaryOp(Num(16), Operator.ADD, BinaryOp(Num(3), Operator.ADD, Num(2))),
    )


def test_common_factor_alone_becomes_one():
    result = extract_common_factors(parse("x + x * 3"))
    assert result == BinaryOp(
        Var("x"), Operator.MUL, BinaryOp(Num(1), Operator.ADD, Num(3))
    )


def test_no_common_factor_leaves_tree():
    expr = parse("a * 2 + b * 3")
    assert extract_common_factors(expr) == expr


@pytest.mark.parametrize("text", ["2 * 5 + 2 * 7", "3 * 4 + 3", "(6 * 2 + 6 * 9) * 5"])
def test_common_factor_preserves_value(text):
    expr = parse(text)
    assert constant_fold(extract_common_factors(expr)) == constant_fold(expr)


def test_cache_optimization_drops_unloaded_writes():
    store = Inst(Opcode.STORE, 1, "a")
    kept = Inst(Opcode.WRITE, "a", 0)
    dropped = Inst(Opcode.WRITE, "b", 1)
    load = Inst(Opcode.LOAD, 0, "a")
    result = Inst(Opcode.RESULT, "a")
    instructions = [store, kept, dropped, load, result]
    assert run_cache_optimization(instructions) == [store, kept, load, result]


def test_cache_optimization_without_writes_is_identity():
    instructions = [Inst(Opcode.STORE, 2, "a"), Inst(Opcode.RESULT, "a")]
    assert run_cache_optimization(instructions) == instructions