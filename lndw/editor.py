"""State behind the code editor: the program text, options and queued actions."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from lndw.compiler import CompileOptions


class EditorAction(enum.Enum):
    """Actions the editor asks the application to carry out."""

    COMPILE = "compile"
    RUN = "run"
    STEP = "step"
    CLEAR = "clear"

    @property
    def stepwise(self) -> bool:
        """Whether this action starts a stepwise execution."""
        return self is EditorAction.STEP


def _default_compile_options() -> CompileOptions:
    return CompileOptions(run_cache_optimization=True)


@dataclass
class CodeEditor:
    """Program text, chosen optimisations, input values and pending actions."""

    code: str = "1 + 1"
    compile_options: CompileOptions = field(default_factory=_default_compile_options)
    actions: list[EditorAction] = field(default_factory=list)
    input_variables: dict[str, str] = field(default_factory=dict)
    disable_run: bool = False

    @property
    def name(self) -> str:
        return "editor.name"

    def request_compile(self) -> None:
        """Queue a compilation of the current code."""
        self.actions.append(EditorAction.COMPILE)

    def request_run(self, stepwise: bool = False) -> bool:
        """Queue an execution unless running is disabled; return whether it was queued."""
        if self.disable_run:
            return False
        self.actions.append(EditorAction.STEP if stepwise else EditorAction.RUN)
        return True

    def request_clear(self) -> None:
        """Queue clearing of all outputs."""
        self.actions.append(EditorAction.CLEAR)

    def request_compile_and_run(self) -> None:
        """Queue a compilation followed by a full execution."""
        self.actions.append(EditorAction.COMPILE)
        self.actions.append(EditorAction.RUN)

    def take_actions(self) -> list[EditorAction]:
        """Return the queued actions in order and empty the queue."""
        actions, self.actions = self.actions, []
        return actions