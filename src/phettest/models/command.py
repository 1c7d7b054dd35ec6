"""Outcome of running one external command."""

from typing import Literal

from pydantic import BaseModel

# Exit code reported when the process could not be started at all
SPAWN_FAILURE_EXIT_CODE = -1


class CommandSuccess(BaseModel):
    """The process exited with code 0."""

    kind: Literal["success"] = "success"
    output: str = ""


class CommandFailure(BaseModel):
    """The process exited non-zero or could not be spawned."""

    kind: Literal["failure"] = "failure"
    exit_code: int
    diagnostic: str = ""

    @property
    def spawn_failed(self) -> bool:
        return self.exit_code == SPAWN_FAILURE_EXIT_CODE


OperationResult = CommandSuccess | CommandFailure
