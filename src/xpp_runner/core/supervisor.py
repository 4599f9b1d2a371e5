"""
Debug-prompt bypass supervisor.

Runs a child that may block on a "press any key" debug-attach prompt.
Redirecting the child's stdin makes that prompt fail outright, so the
child inherits this process's console instead, and a background task
injects Enter into the shared console input buffer on a bounded
schedule while the supervisor waits for exit or a hard timeout.
"""

from __future__ import annotations

import asyncio
import time

from xpp_runner.console.bypass import (
    ConsoleInjection,
    InjectionSchedule,
    PromptBypassLoop,
)
from xpp_runner.console.injector import ConsoleInputBuffer
from xpp_runner.core.processes import launch_problem, terminate_tree
from xpp_runner.models.config import Config
from xpp_runner.models.invocation import ChildInvocation
from xpp_runner.models.outcome import (
    CompletionState,
    RunOutcome,
    TIMEOUT_EXIT_CODE,
)
from xpp_runner.utils.logging import get_logger

logger = get_logger(__name__)


class PromptBypassSupervisor:
	"""Run one child at a time with console inheritance and key injection."""

	def __init__(
	    self,
	    buffer: ConsoleInputBuffer,
	    schedule: InjectionSchedule | None = None,
	    timeout_seconds: float = 1200.0,
	    cancel_grace_seconds: float = 3.0,
	) -> None:
		"""
		Initialize the supervisor.

		Parameters:
			buffer: Console input buffer shared with the child.
			schedule: Injection timing policy.
			timeout_seconds: Default hard timeout per child.
			cancel_grace_seconds: Bounded wait for the injector to stop.
		"""
		self.buffer = buffer
		self.schedule = schedule or InjectionSchedule()
		self.timeout_seconds = timeout_seconds
		self.cancel_grace_seconds = cancel_grace_seconds

	@classmethod
	def from_config(
	        cls,
	        config: Config,
	        buffer: ConsoleInputBuffer | None = None) -> PromptBypassSupervisor:
		return cls(
		    buffer or ConsoleInputBuffer.from_std_input(),
		    InjectionSchedule(
		        warmup_seconds=config.injection_warmup_seconds,
		        interval_seconds=config.injection_interval_seconds,
		        max_attempts=config.injection_max_attempts,
		    ),
		    timeout_seconds=config.run_timeout_seconds,
		    cancel_grace_seconds=config.injection_cancel_grace_seconds,
		)

	async def _stop_injector(self, task: asyncio.Task) -> None:
		"""Cancel the injector and wait a bounded time; never raises."""
		if not task.done():
			task.cancel()
			await asyncio.wait({task}, timeout=self.cancel_grace_seconds)
			if not task.done():
				logger.warning("key injector did not stop within %.1fs",
				               self.cancel_grace_seconds)
				return
		if not task.cancelled() and task.exception() is not None:
			logger.warning("key injector failed: %s", task.exception())

	async def run(self, invocation: ChildInvocation) -> RunOutcome:
		"""
		Run the child to completion or timeout.

		Parameters:
			invocation: What to run.

		Returns:
			RunOutcome with state completed, timed_out or failed_to_start.
		"""
		start = time.monotonic()
		problem = launch_problem(invocation)
		if problem:
			logger.error("[%s] %s", invocation.target, problem)
			return RunOutcome.failed_to_start(problem)

		timeout = invocation.timeout_seconds or self.timeout_seconds
		loop = PromptBypassLoop(ConsoleInjection(self.buffer), self.schedule)
		injector = asyncio.create_task(loop.run(),
		                               name=f"key-injector-{invocation.target}")
		try:
			logger.info("[%s] starting: %s", invocation.target,
			            invocation.display_command())
			try:
				# no stdio arguments: the child inherits our console
				proc = await asyncio.create_subprocess_exec(
				    *invocation.command,
				    cwd=str(invocation.working_dir),
				)
			except Exception as exc:
				await self._stop_injector(injector)
				logger.error("[%s] failed to start: %s", invocation.target,
				             exc)
				return RunOutcome.failed_to_start(
				    str(exc), elapsed_seconds=time.monotonic() - start)

			logger.info("[%s] pid %d", invocation.target, proc.pid)
			try:
				exit_code = await asyncio.wait_for(proc.wait(),
				                                   timeout=timeout)
			except asyncio.TimeoutError:
				await self._stop_injector(injector)
				logger.error("[%s] timeout: killing pid %d after %gs",
				             invocation.target, proc.pid, timeout)
				await terminate_tree(proc)
				return RunOutcome(
				    exit_code=TIMEOUT_EXIT_CODE,
				    state=CompletionState.TIMED_OUT,
				    elapsed_seconds=time.monotonic() - start,
				    pid=proc.pid,
				    injections=loop.attempts,
				    error=f"timed out after {timeout:g}s",
				)

			await self._stop_injector(injector)
			logger.info("[%s] exited with code %d", invocation.target,
			            exit_code)
			return RunOutcome(
			    exit_code=exit_code,
			    state=CompletionState.COMPLETED,
			    elapsed_seconds=time.monotonic() - start,
			    pid=proc.pid,
			    injections=loop.attempts,
			)
		finally:
			if not injector.done():
				await self._stop_injector(injector)


__all__ = ["PromptBypassSupervisor"]
