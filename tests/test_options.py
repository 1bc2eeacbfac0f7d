import pytest

from lndw.options import InterpreterOptions


def test_defaults():
    options = InterpreterOptions()
    assert options.num_registers == 6
    assert options.num_cachelines == 16


def test_update_from_valid_text():
    options = InterpreterOptions()
    options.update_from_text("4", "32")
    assert options.num_registers == 4
    assert options.num_cachelines == 32


def test_leading_plus_is_accepted():
    options = InterpreterOptions()
    options.update_from_text("+3", "+8")
    assert (options.num_registers, options.num_cachelines) == (3, 8)


@pytest.mark.parametrize("text", ["", "abc", "-1", " 4", "4 ", "2.5", "256"])
def test_invalid_register_text_keeps_previous_value(text):
    options = InterpreterOptions(num_registers=5, num_cachelines=9)
    options.update_from_text(text, "9")
    assert options.num_registers == 5


@pytest.mark.parametrize("text", ["", "many", "-3", "1e3", "18446744073709551616"])
def test_invalid_cacheline_text_keeps_previous_value(text):
    options = InterpreterOptions(num_registers=5, num_cachelines=9)
    options.update_from_text("5", text)
    assert options.num_cachelines == 9


def test_fields_update_independently():
    options = InterpreterOptions(num_registers=5, num_cachelines=9)
    options.update_from_text("bad", "12")
    assert options.num_registers == 5
    assert options.num_cachelines == 12


def test_register_limit_is_inclusive():
    options = InterpreterOptions()
    options.update_from_text("255", "0")
    assert options.num_registers == 255
    assert options.num_cachelines == 0