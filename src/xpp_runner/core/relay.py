"""
Stream relay for children launched with piped stdio.

Used when stdout/stderr must be captured as log text. Each stream is
drained line by line on its own task, echoed live to the parent stream
and appended to a capture file. A stdout line containing the debug
prompt is answered with a newline on the child's stdin. This is a
degraded fallback: some prompts refuse redirected input altogether.
"""

from __future__ import annotations

import asyncio
import contextlib
import sys
import time
from pathlib import Path
from typing import IO, TextIO

from xpp_runner.console.bypass import StdinWrite
from xpp_runner.core.processes import launch_problem, terminate_tree
from xpp_runner.models.config import Config
from xpp_runner.models.invocation import ChildInvocation
from xpp_runner.models.outcome import (
    CompletionState,
    RunOutcome,
    TIMEOUT_EXIT_CODE,
)
from xpp_runner.utils.logging import get_logger
from xpp_runner.utils.protocols import PromptBypass

logger = get_logger(__name__)

PROMPT_TEXT = "Press any key to continue"
# asyncio's default 64 KiB line limit is too small for some tool output
STREAM_LIMIT = 1024 * 1024


def _open_capture(stack: contextlib.ExitStack,
                  path: Path | None) -> IO[str] | None:
	if path is None:
		return None
	path.parent.mkdir(parents=True, exist_ok=True)
	return stack.enter_context(open(path, "w", encoding="utf-8"))


class StreamRelay:
	"""Run one child with piped stdio, relaying both streams live."""

	def __init__(
	    self,
	    prompt_text: str = PROMPT_TEXT,
	    prompt_delay_seconds: float = 0.2,
	    join_timeout_seconds: float = 5.0,
	    timeout_seconds: float = 1200.0,
	    stdout: TextIO | None = None,
	    stderr: TextIO | None = None,
	    encoding: str = "utf-8",
	) -> None:
		"""
		Initialize the relay.

		Parameters:
			prompt_text: Stdout substring that marks the blocking prompt.
			prompt_delay_seconds: Delay before answering the prompt.
			join_timeout_seconds: Bounded wait for pumps after exit.
			timeout_seconds: Default hard timeout per child.
			stdout: Parent sink for child stdout (default sys.stdout).
			stderr: Parent sink for child stderr (default sys.stderr).
			encoding: Encoding used to decode child output.
		"""
		self.prompt_text = prompt_text
		self.prompt_delay_seconds = prompt_delay_seconds
		self.join_timeout_seconds = join_timeout_seconds
		self.timeout_seconds = timeout_seconds
		self.stdout = stdout
		self.stderr = stderr
		self.encoding = encoding

	@classmethod
	def from_config(cls, config: Config) -> StreamRelay:
		return cls(
		    prompt_text=config.prompt_text,
		    prompt_delay_seconds=config.prompt_response_delay_seconds,
		    join_timeout_seconds=config.relay_join_timeout_seconds,
		    timeout_seconds=config.run_timeout_seconds,
		)

	async def _pump(
	    self,
	    name: str,
	    reader: asyncio.StreamReader,
	    sink: TextIO,
	    capture: IO[str] | None,
	    bypass: PromptBypass | None,
	) -> int:
		"""Relay one stream until EOF; return prompts answered."""
		answered = 0
		try:
			while True:
				raw = await reader.readline()
				if not raw:
					break
				line = raw.decode(self.encoding,
				                  errors="replace").rstrip("\r\n")
				sink.write(line + "\n")
				sink.flush()
				if capture is not None:
					capture.write(line + "\n")
					capture.flush()
				if bypass is not None and self.prompt_text in line:
					logger.info("detected debug prompt, answering with Enter")
					await asyncio.sleep(self.prompt_delay_seconds)
					if await bypass.press():
						answered += 1
		except asyncio.CancelledError:
			raise
		except Exception as exc:
			logger.warning("%s reader error: %s", name, exc)
		return answered

	async def _join(self, tasks: list[asyncio.Task]) -> None:
		"""Wait a bounded time for the pumps, cancelling stragglers."""
		_, pending = await asyncio.wait(tasks,
		                                timeout=self.join_timeout_seconds)
		if pending:
			logger.warning("%d stream reader(s) still open after %gs",
			               len(pending), self.join_timeout_seconds)
			for task in pending:
				task.cancel()
			await asyncio.gather(*pending, return_exceptions=True)

	async def run(self, invocation: ChildInvocation) -> RunOutcome:
		"""
		Run the child to completion or timeout, relaying its output.

		Parameters:
			invocation: What to run; stdout_path/stderr_path receive the
				raw capture, truncated first.

		Returns:
			RunOutcome with state completed, timed_out or failed_to_start.
		"""
		start = time.monotonic()
		problem = launch_problem(invocation)
		if problem:
			logger.error("[%s] %s", invocation.target, problem)
			return RunOutcome.failed_to_start(problem)

		timeout = invocation.timeout_seconds or self.timeout_seconds
		with contextlib.ExitStack() as stack:
			try:
				out_capture = _open_capture(stack, invocation.stdout_path)
				err_capture = _open_capture(stack, invocation.stderr_path)
			except OSError as exc:
				logger.error("[%s] cannot open capture file: %s",
				             invocation.target, exc)
				return RunOutcome.failed_to_start(str(exc))

			logger.info("[%s] starting: %s", invocation.target,
			            invocation.display_command())
			try:
				proc = await asyncio.create_subprocess_exec(
				    *invocation.command,
				    cwd=str(invocation.working_dir),
				    stdin=asyncio.subprocess.PIPE,
				    stdout=asyncio.subprocess.PIPE,
				    stderr=asyncio.subprocess.PIPE,
				    limit=STREAM_LIMIT,
				)
			except Exception as exc:
				logger.error("[%s] failed to start: %s", invocation.target,
				             exc)
				return RunOutcome.failed_to_start(
				    str(exc), elapsed_seconds=time.monotonic() - start)

			logger.info("[%s] pid %d", invocation.target, proc.pid)
			out_task = asyncio.create_task(
			    self._pump("stdout", proc.stdout, self.stdout or sys.stdout,
			               out_capture, StdinWrite(proc.stdin)))
			err_task = asyncio.create_task(
			    self._pump("stderr", proc.stderr, self.stderr or sys.stderr,
			               err_capture, None))

			state = CompletionState.COMPLETED
			try:
				exit_code = await asyncio.wait_for(proc.wait(),
				                                   timeout=timeout)
			except asyncio.TimeoutError:
				logger.error("[%s] timeout: killing pid %d after %gs",
				             invocation.target, proc.pid, timeout)
				await terminate_tree(proc)
				state = CompletionState.TIMED_OUT
				exit_code = TIMEOUT_EXIT_CODE

			await self._join([out_task, err_task])

		if proc.stdin is not None and not proc.stdin.is_closing():
			proc.stdin.close()

		answered = 0
		if out_task.done() and not out_task.cancelled():
			answered = out_task.result()
		logger.info("[%s] exited with code %d", invocation.target, exit_code)
		return RunOutcome(
		    exit_code=exit_code,
		    state=state,
		    elapsed_seconds=time.monotonic() - start,
		    pid=proc.pid,
		    injections=answered,
		    error=(f"timed out after {timeout:g}s"
		           if state is CompletionState.TIMED_OUT else None),
		)


__all__ = ["StreamRelay", "PROMPT_TEXT"]
