import pytest

from lndw.app import App, main
from lndw.compiler import CompileOptions
from lndw.examples import preloaded_examples


def test_editor_open_by_default():
    app = App()
    assert app.is_open("editor.name")
    assert app.open == {"editor.name"}


def test_set_open_toggles():
    app = App()
    app.set_open("output.unopt", True)
    app.set_open("output.unopt", True)
    assert app.is_open("output.unopt")
    app.set_open("output.unopt", False)
    assert not app.is_open("output.unopt")
    app.set_open("missing", False)
    assert app.open == {"editor.name"}


def test_window_names_order():
    app = App()
    assert app.window_names == [
        "editor.name",
        "output.unopt",
        "output.opt",
        "interp_opts.name",
        "examples.name",
    ]


def test_compile_sets_variables_and_opens_outputs():
    app = App()
    app.code_editor.code = "a + b"
    app.code_editor.request_compile()
    app.process_actions()
    assert app.code_editor.input_variables == {"a": "", "b": ""}
    assert app.is_open("output.unopt")
    assert app.is_open("output.opt")
    assert app.asm_unoptimized.instructions()


def test_compile_without_optimisations_leaves_optimized_closed():
    app = App()
    app.code_editor.compile_options = CompileOptions()
    app.code_editor.request_compile()
    app.process_actions()
    assert app.is_open("output.unopt")
    assert not app.is_open("output.opt")
    assert app.asm_optimized.instructions() == []


def test_compile_error_clears_variables():
    app = App()
    app.code_editor.input_variables = {"x": "1"}
    app.code_editor.code = "1 +"
    app.code_editor.request_compile()
    app.process_actions()
    assert app.code_editor.input_variables == {}
    assert app.asm_unoptimized.error.startswith("Compile error")
    assert app.asm_optimized.error.startswith("Compile error")


def test_compile_and_run_results_agree():
    app = App()
    app.code_editor.code = "x * 4 + x * 2"
    app.code_editor.compile_options = CompileOptions(
        do_constant_folding=True,
        do_common_factor_elimination=True,
        do_shift_replacement=True,
        run_cache_optimization=True,
    )
    app.code_editor.request_compile()
    app.process_actions()
    app.code_editor.input_variables["x"] = "5"
    app.code_editor.request_run(False)
    app.process_actions()
    assert app.asm_unoptimized.program_result is not None
    assert app.asm_unoptimized.program_result == app.asm_optimized.program_result


def test_run_simple_program_and_disable_run():
    app = App()
    app.code_editor.request_compile_and_run()
    app.process_actions()
    assert app.asm_unoptimized.program_result == 2
    app.process_actions()
    assert app.code_editor.disable_run is True
    assert app.code_editor.request_run() is False


def test_clear_resets_outputs():
    app = App()
    app.code_editor.request_compile_and_run()
    app.process_actions()
    app.code_editor.request_clear()
    app.process_actions()
    assert app.asm_unoptimized.instructions() == []
    assert app.asm_optimized.instructions() == []
    assert app.asm_unoptimized.program_result is None
    assert app.result is None
    app.process_actions()
    assert app.code_editor.disable_run is False


def test_choose_example_loads_code_and_options():
    app = App()
    app.code_editor.input_variables = {"q": "1"}
    example = app.choose_example(1)
    expected = preloaded_examples()[1]
    assert example == expected
    assert app.code_editor.code == expected.input
    assert app.code_editor.compile_options == expected.options
    assert app.code_editor.input_variables == {}


def test_choose_example_out_of_range():
    app = App()
    with pytest.raises(IndexError):
        app.choose_example(len(app.examples))


def test_main_runs_expression(capsys):
    assert main(["1 + 1"]) == 0
    out = capsys.readouterr().out
    assert "result: 2" in out
    assert "output.opt" not in out


def test_main_with_variable_and_optimisation(capsys):
    assert main(["a", "--var", "a=5", "--constant-folding"]) == 0
    out = capsys.readouterr().out
    assert out.count("result: 5") == 2


def test_main_missing_variable_fails(capsys):
    assert main(["a + 1"]) == 1
    assert "Runtime error" in capsys.readouterr().err


def test_main_compile_error(capsys):
    assert main(["1 +"]) == 1
    assert "Compile error" in capsys.readouterr().err


def test_main_example_matches_source_example(capsys):
    assert main(["--example", "0"]) == 0
    out = capsys.readouterr().out
    assert "result:" in out


def test_main_requires_input():
    with pytest.raises(SystemExit):
        main([])


def test_main_rejects_bad_var():
    with pytest.raises(SystemExit):
        main(["a", "--var", "a"])