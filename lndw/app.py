"""Application state tying the editor, the outputs and the examples together."""

from __future__ import annotations

import argparse
import dataclasses
import sys
from dataclasses import dataclass, field

from lndw.compiler import CompileOptions
from lndw.editor import CodeEditor, EditorAction
from lndw.examples import Example, preloaded_examples
from lndw.options import InterpreterOptions
from lndw.output import AssemblyOutput
from lndw.types import LpErr

INTERPRETER_OPTIONS_NAME = "interp_opts.name"
EXAMPLES_NAME = "examples.name"


@dataclass
class App:
    """All application state, including which windows are open."""

    code_editor: CodeEditor = field(default_factory=CodeEditor)
    interpreter_options: InterpreterOptions = field(default_factory=InterpreterOptions)
    asm_unoptimized: AssemblyOutput = field(
        default_factory=lambda: AssemblyOutput("output.unopt")
    )
    asm_optimized: AssemblyOutput = field(
        default_factory=lambda: AssemblyOutput("output.opt")
    )
    examples: list[Example] = field(default_factory=preloaded_examples)
    result: int | None = None
    language: str = "en"
    open: set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        self.set_open(self.code_editor.name, True)

    @property
    def window_names(self) -> list[str]:
        """Names of all windows in sidebar order."""
        return [
            self.code_editor.name,
            self.asm_unoptimized.name,
            self.asm_optimized.name,
            INTERPRETER_OPTIONS_NAME,
            EXAMPLES_NAME,
        ]

    def set_open(self, name: str, is_open: bool) -> None:
        """Open or close the window called ``name``."""
        if is_open:
            self.open.add(name)
        else:
            self.open.discard(name)

    def is_open(self, name: str) -> bool:
        """Whether the window called ``name`` is open."""
        return name in self.open

    def process_actions(self) -> None:
        """Carry out every action the editor has queued."""
        editor = self.code_editor
        editor.disable_run = self.asm_unoptimized.running or self.asm_optimized.running

        for action in editor.take_actions():
            if action is EditorAction.COMPILE:
                self._compile()
            elif action is EditorAction.CLEAR:
                self.asm_unoptimized.clear()
                self.asm_optimized.clear()
                self.result = None
            else:
                self._run(action.stepwise)

    def _compile(self) -> None:
        editor = self.code_editor
        try:
            variables = self.asm_unoptimized.compile(
                editor.code, CompileOptions(), self.interpreter_options
            )
        except LpErr:
            editor.input_variables.clear()
        else:
            editor.input_variables = {name: "" for name in sorted(variables)}

        if editor.compile_options.any():
            try:
                self.asm_optimized.compile(
                    editor.code,
                    dataclasses.replace(editor.compile_options),
                    self.interpreter_options,
                )
            except LpErr:
                pass
            self.set_open(self.asm_optimized.name, True)

        self.set_open(self.asm_unoptimized.name, True)

    def _run(self, stepwise: bool) -> None:
        editor = self.code_editor
        self.set_open(self.asm_unoptimized.name, True)
        self.asm_unoptimized.run(editor.input_variables, stepwise)
        if editor.compile_options.any():
            self.set_open(self.asm_optimized.name, True)
            self.asm_optimized.run(editor.input_variables, stepwise)

    def choose_example(self, index: int) -> Example:
        """Load example ``index`` into the editor and return it."""
        example = self.examples[index]
        editor = self.code_editor
        editor.input_variables.clear()
        editor.code = example.input
        editor.compile_options = dataclasses.replace(example.options)
        return example


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lndw",
        description="Compile an arithmetic expression for a small register machine and run it.",
    )
    parser.add_argument("expression", nargs="?", help="expression to compile")
    parser.add_argument(
        "--example", type=int, metavar="INDEX", help="use a built-in example instead"
    )
    parser.add_argument(
        "--var",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="value of an input variable (repeatable)",
    )
    parser.add_argument("--constant-folding", action="store_true")
    parser.add_argument("--cache-optimization", action="store_true")
    parser.add_argument("--common-factor-elimination", action="store_true")
    parser.add_argument("--shift-replacement", action="store_true")
    parser.add_argument("--registers", type=int, default=InterpreterOptions.num_registers)
    parser.add_argument(
        "--cachelines", type=int, default=InterpreterOptions.num_cachelines
    )
    return parser


def _print_output(output: AssemblyOutput) -> bool:
    print(f"{output.heading}:")
    if output.error is not None:
        print(output.error, file=sys.stderr)
        return False
    for inst in output.instructions():
        print(f"  {inst}")
    print(f"result: {output.program_result}")
    return True


def main(argv: list[str] | None = None) -> int:
    """Compile and run an expression from the command line; return the exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not 1 <= args.registers <= 26:
        parser.error("--registers must be between 1 and 26")
    if args.cachelines < 0:
        parser.error("--cachelines must not be negative")

    given: dict[str, str] = {}
    for item in args.var:
        name, sep, value = item.partition("=")
        if not sep or not name:
            parser.error(f"invalid --var {item!r}, expected NAME=VALUE")
        given[name] = value

    app = App(
        interpreter_options=InterpreterOptions(
            num_registers=args.registers, num_cachelines=args.cachelines
        )
    )
    if args.example is not None:
        if not 0 <= args.example < len(app.examples):
            parser.error(f"no example {args.example}")
        app.choose_example(args.example)
    elif args.expression is not None:
        app.code_editor.code = args.expression
        app.code_editor.compile_options = CompileOptions(
            do_constant_folding=args.constant_folding,
            run_cache_optimization=args.cache_optimization,
            do_common_factor_elimination=args.common_factor_elimination,
            do_shift_replacement=args.shift_replacement,
        )
    else:
        parser.error("an expression or --example is required")

    app.code_editor.request_compile()
    app.process_actions()
    if app.asm_unoptimized.error is None:
        app.code_editor.input_variables.update(given)
        app.code_editor.request_run(False)
        app.process_actions()

    outputs = [app.asm_unoptimized]
    if app.code_editor.compile_options.any():
        outputs.append(app.asm_optimized)
    ok = True
    for output in outputs:
        ok = _print_output(output) and ok
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())