"""
Prompt-bypass strategies and the shared injection schedule.

Two ways to answer a blocking "press a key" prompt: inject a keystroke
into a shared console input buffer, or write a newline into a piped
stdin. Both are best effort; failures are logged and swallowed.
"""

from __future__ import annotations

import asyncio
import os
from typing import Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field

from xpp_runner.console.injector import ConsoleInputBuffer
from xpp_runner.utils.logging import get_logger
from xpp_runner.utils.protocols import PromptBypass

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class InjectionSchedule(BaseModel):
	"""Timing policy for repeated prompt-bypass attempts."""

	model_config = ConfigDict(frozen=True)

	warmup_seconds: float = Field(5.0, ge=0)
	interval_seconds: float = Field(2.0, gt=0)
	max_attempts: int = Field(15, ge=0)


class ConsoleInjection:
	"""Answer the prompt by injecting Enter into the shared console."""

	def __init__(self, buffer: ConsoleInputBuffer) -> None:
		self.buffer = buffer
		self._available: bool | None = None

	async def available(self) -> bool:
		# queried once; a failure is final for this invocation
		if self._available is None:
			self._available = self.buffer.is_console()
			if not self._available:
				logger.warning(
				    "no console input buffer (input redirected?); "
				    "keystroke injection disabled for this run")
		return self._available

	async def press(self) -> bool:
		if not await self.available():
			return False
		return self.buffer.inject_enter() == 2


class StdinWrite:
	"""Answer the prompt by writing a newline to the child's piped stdin."""

	def __init__(self, stream: asyncio.StreamWriter | None) -> None:
		self.stream = stream

	async def available(self) -> bool:
		return self.stream is not None and not self.stream.is_closing()

	async def press(self) -> bool:
		if not await self.available():
			return False
		try:
			self.stream.write(os.linesep.encode())
			await self.stream.drain()
		except Exception as exc:
			# the child may already have closed its input
			logger.debug("stdin newline write failed: %s", exc)
			return False
		return True


class PromptBypassLoop:
	"""
	Repeated bypass attempts on a fixed schedule.

	Sleeps the warm-up, checks the bypass once, then presses up to
	``max_attempts`` times with ``interval_seconds`` between presses and
	stops for good. The owner cancels the task as soon as the child exits.
	"""

	def __init__(self, bypass: PromptBypass, schedule: InjectionSchedule,
	             sleep: Sleep = asyncio.sleep) -> None:
		self.bypass = bypass
		self.schedule = schedule
		self.attempts = 0
		self._sleep = sleep

	async def run(self) -> int:
		"""
		Run the schedule to completion.

		Returns:
			Number of press attempts issued.
		"""
		await self._sleep(self.schedule.warmup_seconds)
		if not await self.bypass.available():
			return 0
		while self.attempts < self.schedule.max_attempts:
			delivered = await self.bypass.press()
			self.attempts += 1
			logger.debug("prompt bypass attempt %d/%d delivered=%s",
			             self.attempts, self.schedule.max_attempts,
			             delivered)
			if self.attempts < self.schedule.max_attempts:
				await self._sleep(self.schedule.interval_seconds)
		return self.attempts


__all__ = [
    "InjectionSchedule",
    "ConsoleInjection",
    "StdinWrite",
    "PromptBypassLoop",
]
