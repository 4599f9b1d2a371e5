"""
Run outcome model.

Defines how a single child process run ended. Produced exactly once per
ChildInvocation by the supervisor or the stream relay.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

TIMEOUT_EXIT_CODE = -1
START_FAILURE_EXIT_CODE = -2


class CompletionState(str, Enum):
	"""How the child process run ended."""

	COMPLETED = "completed"
	TIMED_OUT = "timed_out"
	FAILED_TO_START = "failed_to_start"


class RunOutcome(BaseModel):
	"""Exit status of one child process run."""

	model_config = ConfigDict(frozen=True)

	exit_code: int
	state: CompletionState
	elapsed_seconds: float = 0.0
	pid: int | None = Field(default=None,
	                        description="Child PID, if it was started")
	injections: int = Field(
	    default=0,
	    description="Prompt-bypass attempts issued during the run",
	)
	error: str | None = None

	@property
	def completed(self) -> bool:
		return self.state is CompletionState.COMPLETED

	@property
	def succeeded(self) -> bool:
		"""Return True when the child exited on its own with code 0."""
		return self.completed and self.exit_code == 0

	@classmethod
	def failed_to_start(cls, error: str,
	                    elapsed_seconds: float = 0.0) -> RunOutcome:
		"""Build the outcome for a child that never ran."""
		return cls(
		    exit_code=START_FAILURE_EXIT_CODE,
		    state=CompletionState.FAILED_TO_START,
		    elapsed_seconds=elapsed_seconds,
		    error=error,
		)


__all__ = [
    "CompletionState",
    "RunOutcome",
    "TIMEOUT_EXIT_CODE",
    "START_FAILURE_EXIT_CODE",
]
