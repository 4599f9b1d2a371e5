"""
Protocol definitions for dependency injection.

Defines Protocol classes for the console API, the prompt-bypass
capability and child executors so tests can substitute fakes.
"""

from __future__ import annotations

from typing import Any, Protocol

from xpp_runner.models.invocation import ChildInvocation
from xpp_runner.models.outcome import RunOutcome


class ConsoleApiProtocol(Protocol):
	"""
	Protocol for the OS console input API.

	Mirrors the three kernel32 calls the injector needs.
	"""

	def get_std_input_handle(self) -> Any:
		"""Return the handle of the inherited standard input."""
		...

	def get_console_mode(self, handle: Any) -> int | None:
		"""Return the console mode, or None if the handle is no console."""
		...

	def write_console_input(self, handle: Any, records: Any,
	                        count: int) -> int:
		"""Append input records; return the number actually written."""
		...


class PromptBypass(Protocol):
	"""
	Protocol for answering a blocking "press a key" prompt.

	Implemented by console-buffer injection for children sharing the
	console and by a stdin newline write for children with piped input.
	"""

	async def available(self) -> bool:
		"""Return False when the bypass can never work for this run."""
		...

	async def press(self) -> bool:
		"""Send one synthetic key press; return True if it was delivered."""
		...


class ChildExecutor(Protocol):
	"""Protocol for anything that runs a ChildInvocation to completion."""

	async def run(self, invocation: ChildInvocation) -> RunOutcome:
		"""Run the child and report how it ended."""
		...


__all__ = ["ConsoleApiProtocol", "PromptBypass", "ChildExecutor"]
