"""Final output of a picker session."""

from typing import TextIO

from linepick.models import ExitCode, LoopState
from linepick.selection import SelectionModel


class ResultEmitter:
    """Maps the finished loop state to output lines and an exit code."""

    def __init__(self, model: SelectionModel, state: LoopState):
        self.model = model
        self.state = state

    def collect(self) -> list[str]:
        if self.state is not LoopState.CONFIRMED:
            return []
        return [entry.output_id for entry in self.model.confirm()]

    def exit_code(self) -> ExitCode:
        if self.state is LoopState.ABORTED:
            return ExitCode.ABORTED
        if self.state is LoopState.CONFIRMED and len(self.model) == 0:
            return ExitCode.EMPTY_INPUT
        if self.state is LoopState.CONFIRMED:
            return ExitCode.SUCCESS
        raise RuntimeError("Picker has not finished")

    def write(self, stream: TextIO) -> None:
        """Write one output line per chosen entry."""
        lines = self.collect()
        if lines:
            stream.write("\n".join(lines) + "\n")
            stream.flush()
