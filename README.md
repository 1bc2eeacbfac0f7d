# lndw

A small teaching compiler for integer arithmetic expressions. It parses an
expression such as `1000 * 2 + x * 13 - y * 2`, can optionally optimise it,
translates it into instructions for a simple register machine with a few
registers and a small RAM, and runs those instructions.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Command line

```
lndw "1 + 2"
```

compiles the expression without optimisations, runs it and prints the
instructions and the result:

```
output.unopt:
  store 1, a
  store 2, b
  add a, b
  result b
result: 3
```

Options:

- `--var NAME=VALUE` gives an input variable a value (repeatable), e.g.
  `lndw "x * 4 + 1" --var x=5`. A variable that is used but not given fails
  at run time.
- `--constant-folding`, `--cache-optimization`,
  `--common-factor-elimination`, `--shift-replacement` enable the
  optimisation passes. When any of them is on, an optimised version is
  compiled and run as well and printed after the unoptimised one, under
  the heading `output.opt`.
- `--registers N` sets the number of registers (1 to 26, default 6);
  `--cachelines N` sets the number of RAM cells (default 16).
- `--example INDEX` uses one of the built-in examples, with the compile
  options that belong to it, instead of an expression; for instance
  `lndw --example 1 --var x=3 --var y=4`.

Compile and runtime errors are printed to standard error and the command
exits with status 1.

## Library use

- `lndw.parser.parse(text)` turns source text into an expression tree built
  from `Num`, `Var`, `UnaryOp` and `BinaryOp` (see `lndw.types`). The
  grammar has `+ - * /`, unary minus, parentheses, non-negative integer
  literals that fit in 32 bits and ASCII identifiers. Invalid input raises
  `ParseError`.
- `lndw.passes` holds the optimisation passes: `constant_fold`,
  `replace_multiplications_with_bitshifts`, `extract_common_factors`, and
  `run_cache_optimization`, which works on instruction lists and drops RAM
  writes to cells that are never loaded back. Arithmetic wraps like 32-bit
  signed integers.
- `lndw.compiler.Compiler(options, hw)` compiles source text. Its `compile`
  method returns the instruction list (`Inst` values with an `Opcode` and
  operands) and the set of input variable names. `CompileOptions` selects
  the passes. `InterpreterOptions` from `lndw.options` sets the number of
  registers (6 by default) and RAM cache lines (16 by default); when the
  registers run out, values are spilled to RAM and loaded back.
  `register_name(n)` gives the letter naming register `n`.
- `lndw.interpreter.Interpreter(hw, instructions, variables, tracing)` runs
  the instructions. Call `step` once per instruction (it returns the result
  once the program finishes, otherwise `None`) or `run_to_end` to get the
  result. Variable values are given as strings and parsed as integers. With
  tracing on, `display_current` describes the instruction being executed.
  Runtime problems such as division by zero or missing variables raise
  `InterpretError`. All errors derive from `LpErr`.

```python
from lndw.compiler import CompileOptions, Compiler
from lndw.interpreter import Interpreter
from lndw.options import InterpreterOptions

hw = InterpreterOptions()
code, variables = Compiler(CompileOptions(do_constant_folding=True), hw).compile("x * 4 + 2 * 3")
print(Interpreter(hw, code, {"x": "5"}, False).run_to_end())  # 26
```

The remaining modules hold application state that a front end can drive:

- `lndw.examples.preloaded_examples()` returns the built-in examples, each
  an `Example` with the compile options it demonstrates.
- `lndw.output.AssemblyOutput` compiles and runs a program and animates its
  execution frame by frame (`advance`, `request_step`, `run_to_finish`),
  exposing `register_values()` and `ram_rows()` for display.
- `lndw.editor.CodeEditor` keeps the program text, the chosen options, the
  input values and a queue of `EditorAction`s.
- `lndw.app.App` ties these together: `process_actions` carries out the
  queued editor actions, `choose_example` loads an example, and
  `set_open`/`is_open` track which views are open.

## What it does not do

There is no graphical interface: the package provides the state and logic
behind the editor, output and example views, and the `lndw` command, which
prints its results as text. Window titles and labels are kept as message
keys such as `output.unopt`; no translations are included.