"""
Child invocation model.

Defines the immutable description of one external tool run: what to
execute, where, for how long, and which files it is expected to produce.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class ChildInvocation(BaseModel):
	"""A single child process run for one target.

	Created by the orchestrator per target (a model name or a set of
	test class names) and never mutated afterwards.
	"""

	model_config = ConfigDict(frozen=True)

	target: str = Field(description="Target name (model or test classes)")
	executable: Path = Field(description="Path to the tool executable")
	arguments: tuple[str, ...] = Field(
	    default=(),
	    description="Command-line arguments passed to the executable",
	)
	working_dir: Path = Field(description="Working directory for the child")
	timeout_seconds: float | None = Field(
	    default=None,
	    description="Per-run timeout; None uses the executor default",
	)
	result_path: Path | None = Field(
	    default=None,
	    description="Structured XML document the tool is expected to write",
	)
	stdout_path: Path | None = Field(
	    default=None,
	    description="Raw stdout capture file (captured runs only)",
	)
	stderr_path: Path | None = Field(
	    default=None,
	    description="Raw stderr capture file (captured runs only)",
	)

	@property
	def command(self) -> list[str]:
		"""Return the full argv list."""
		return [str(self.executable), *self.arguments]

	def display_command(self) -> str:
		"""Return a single-line rendering of the command for logs."""
		return " ".join([self.executable.name, *self.arguments])


__all__ = ["ChildInvocation"]
