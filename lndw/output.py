"""State behind an assembly output view: compile, run and animate execution."""

from __future__ import annotations

from collections.abc import Mapping

from lndw.compiler import CompileOptions, Compiler, register_name
from lndw.interpreter import Interpreter
from lndw.options import InterpreterOptions
from lndw.types import Inst, LpErr, Opcode

# Fraction of an instruction's execution completed per displayed frame.
_PROGRESS_INCREMENT = {
    Opcode.ADD: 0.03333,
    Opcode.SUB: 0.03333,
    Opcode.MUL: 0.01667,
    Opcode.DIV: 0.00833,
    Opcode.SHL: 0.03333,
    Opcode.SHR: 0.03333,
    Opcode.STORE: 0.0667,
    Opcode.TRANSFER: 0.0667,
    Opcode.RESULT: 0.0667,
    Opcode.WRITE: 0.0033,
    Opcode.LOAD: 0.0033,
}

_FRAME_TIME = 0.016667
_MIN_RAM_ROWS = 4


class AssemblyOutput:
    """Compiled instructions, their execution progress and the machine state."""

    def __init__(self, heading: str = "") -> None:
        self.heading = heading
        self._asm: list[Inst] | None = None
        self.progress: list[float] = []
        self.error: str | None = None
        self.program_result: int | None = None
        self.interpreter: Interpreter | None = None
        self.hw: InterpreterOptions | None = None
        self.running = False
        self.stepwise = False
        self.step_triggered = False
        self.total_time = 0.0

    @property
    def name(self) -> str:
        return self.heading

    def clear(self) -> None:
        """Drop any instructions, error, result and execution state."""
        self._asm = None
        self.progress = []
        self.error = None
        self.program_result = None
        self.running = False
        self.total_time = 0.0
        self.hw = None
        self.interpreter = None
        self.stepwise = False
        self.step_triggered = False

    def instructions(self) -> list[Inst]:
        """Return the compiled instructions, empty if nothing is compiled."""
        return list(self._asm) if self._asm is not None else []

    def compile(
        self,
        source: str,
        options: CompileOptions | None = None,
        hw: InterpreterOptions | None = None,
    ) -> set[str]:
        """Compile ``source`` and return its input variables.

        On failure the error message is kept for display and the error re-raised.
        """
        self.clear()
        hw = hw if hw is not None else InterpreterOptions()
        self.hw = hw
        try:
            instructions, variables = Compiler(options, hw).compile(source)
        except LpErr as err:
            self.error = f"Compile error: {err}"
            raise
        self._asm = instructions
        self.progress = [0.0] * len(instructions)
        return variables

    def run(self, variables: Mapping[str, str], stepwise: bool = False) -> int | None:
        """Execute the compiled program and prepare a tracing interpreter for the animation.

        Returns the program result, or None if nothing is compiled or execution failed;
        a failure is kept as the error message.
        """
        self.program_result = None
        self.stepwise = stepwise
        self.step_triggered = False
        if self._asm is None:
            return None

        hw = self.hw if self.hw is not None else InterpreterOptions()
        try:
            result = Interpreter(hw, self.instructions(), variables).run_to_end()
        except LpErr as err:
            self.error = f"Runtime error: {err}"
            return None

        self.program_result = result
        self.running = True
        if self.interpreter is None:
            self.interpreter = Interpreter(
                hw, self.instructions(), variables, tracing=True
            )
        return result

    def advance(self) -> bool:
        """Advance the execution animation by one frame; return True once it is done."""
        if self.error is not None or self._asm is None:
            return False

        self.step_triggered = self.step_triggered or not self.stepwise
        if not (self.running and self.step_triggered):
            return False

        current = next(
            (index for index, done in enumerate(self.progress) if done < 1.0), None
        )
        if current is None:
            return True

        if self.progress[current] == 0.0 and self.interpreter is not None:
            try:
                self.interpreter.step()
            except LpErr:
                pass
        self.progress[current] += _PROGRESS_INCREMENT[self._asm[current].opcode]
        if self.progress[current] >= 1.0:
            self.step_triggered = False
        self.total_time += _FRAME_TIME
        return False

    def _interpreter_running(self) -> bool:
        return self.interpreter is not None and self.interpreter.running

    def request_step(self) -> None:
        """Start animating the next instruction when executing stepwise."""
        if self._interpreter_running() and self.stepwise and not self.step_triggered:
            self.step_triggered = True

    def run_to_finish(self) -> None:
        """Leave stepwise mode so the animation runs through to the end."""
        if self._interpreter_running() and self.stepwise:
            self.stepwise = False

    def current_description(self) -> str:
        """Text describing the instruction being executed."""
        return self.interpreter.display_current() if self.interpreter else " "

    def register_values(self) -> list[tuple[str, int]]:
        """Return each register's name and its current value, zero when empty."""
        if self.hw is None:
            return []
        registers = self.interpreter.registers if self.interpreter else {}
        return [
            (name, registers.get(name, 0))
            for name in map(register_name, range(self.hw.num_registers))
        ]

    def ram_rows(self) -> tuple[list[tuple[int, int]], bool]:
        """Return the RAM cells worth showing and whether further cells are hidden.

        At least one cell past the last nonzero one is shown, and at least four,
        but never more than the RAM holds.
        """
        if self.hw is None:
            return [], False
        ram_size = self.hw.num_cachelines
        ram = self.interpreter.ram if self.interpreter else [0] * ram_size
        end = next(
            (index for index in range(len(ram) - 1, -1, -1) if ram[index] != 0), 0
        )
        shown = min(max(end + 1, _MIN_RAM_ROWS), ram_size)
        rows = [(index, ram[index] if index < len(ram) else 0) for index in range(shown)]
        return rows, shown < ram_size