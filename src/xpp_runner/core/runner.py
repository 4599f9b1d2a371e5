"""
Main orchestrator for compile and test runs.

Runs one child per target strictly in order, parses each target's result
file and folds everything into an AggregateSummary plus a text report.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from xpp_runner.core.commands import (
    compile_invocations,
    resolve_tools,
    test_invocations,
)
from xpp_runner.core.relay import StreamRelay
from xpp_runner.core.supervisor import PromptBypassSupervisor
from xpp_runner.models.config import Config
from xpp_runner.models.invocation import ChildInvocation
from xpp_runner.models.outcome import RunOutcome
from xpp_runner.models.run_params import RunParams
from xpp_runner.models.summary import (
    AggregateSummary,
    TargetKind,
    TargetResult,
    build_summary,
)
from xpp_runner.ui.reporting import REPORT_FILE, render_report_text, save_report
from xpp_runner.utils.logging import get_logger
from xpp_runner.utils.parsing import parse_compile_log, parse_test_log
from xpp_runner.utils.paths import ensure_within, reset_file
from xpp_runner.utils.protocols import ChildExecutor

logger = get_logger(__name__)

ProgressCallback = Callable[[str, str], None]


class Orchestrator:
	"""Run targets one after another with a single executor."""

	def __init__(self, executor: ChildExecutor) -> None:
		self.executor = executor

	def _parse(self, kind: TargetKind, result: TargetResult) -> TargetResult:
		if result.result_path is None:
			return result
		if kind is TargetKind.COMPILE:
			log = parse_compile_log(result.result_path)
			update = {"compile_log": log}
		else:
			log = parse_test_log(result.result_path)
			update = {"test_log": log}
		if log is None:
			logger.warning("[%s] no results produced at %s", result.target,
			               result.result_path)
			return result
		return result.model_copy(update=update)

	async def run_target(
	    self,
	    kind: TargetKind,
	    invocation: ChildInvocation,
	    progress_cb: ProgressCallback | None = None,
	) -> TargetResult:
		"""
		Run a single target and parse its result file.

		Never raises for target-level problems: an unexpected exception
		from the executor becomes a failed_to_start outcome.

		Parameters:
			kind: Target kind, selects the result parser.
			invocation: What to run.
			progress_cb: Optional progress callback.

		Returns:
			TargetResult for the target.
		"""
		if progress_cb:
			progress_cb(invocation.target, "started")
		try:
			# a result file left by an earlier run must not be parsed
			reset_file(invocation.result_path)
			outcome = await self.executor.run(invocation)
		except Exception as exc:
			logger.exception("[%s] run failed", invocation.target)
			outcome = RunOutcome.failed_to_start(str(exc))

		result = TargetResult(
		    target=invocation.target,
		    kind=kind,
		    outcome=outcome,
		    result_path=invocation.result_path,
		    stdout_path=invocation.stdout_path,
		    stderr_path=invocation.stderr_path,
		)
		if outcome.completed:
			result = self._parse(kind, result)
		if progress_cb:
			progress_cb(invocation.target, result.status)
		return result

	async def run(
	    self,
	    kind: TargetKind,
	    invocations: list[ChildInvocation],
	    progress_cb: ProgressCallback | None = None,
	) -> AggregateSummary:
		"""
		Run every invocation sequentially, in list order.

		Parameters:
			kind: Target kind for the whole run.
			invocations: One invocation per target.
			progress_cb: Optional progress callback.

		Returns:
			AggregateSummary with one result per invocation.
		"""
		start = time.monotonic()
		logger.info("%s run start: %d target(s)", kind.value, len(invocations))
		results = []
		for invocation in invocations:
			results.append(await self.run_target(kind, invocation, progress_cb))
		summary = build_summary(kind, results, time.monotonic() - start)
		logger.info("%s run done: %d failed target(s)", kind.value,
		            len(summary.failed_targets))
		return summary


def select_executor(config: Config, capture: bool) -> ChildExecutor:
	"""Return the stream relay when capturing, else the supervisor."""
	if capture:
		return StreamRelay.from_config(config)
	return PromptBypassSupervisor.from_config(config)


def write_report(config: Config, summary: AggregateSummary) -> str:
	"""Write the text report for ``summary``; return its path."""
	base = config.output_path.resolve()
	path = ensure_within(base, base / summary.kind.value / REPORT_FILE)
	save_report(path, render_report_text(summary))
	logger.info("report written to %s", path)
	return str(path)


async def _run_kind(
    config: Config,
    kind: TargetKind,
    invocations: list[ChildInvocation],
    capture: bool,
    executor: Optional[ChildExecutor],
    progress_cb: ProgressCallback | None,
) -> AggregateSummary:
	orchestrator = Orchestrator(executor or select_executor(config, capture))
	summary = await orchestrator.run(kind, invocations, progress_cb=progress_cb)
	write_report(config, summary)
	return summary


async def run_compile(
    config: Config,
    params: RunParams,
    progress_cb: ProgressCallback | None = None,
    executor: Optional[ChildExecutor] = None,
) -> AggregateSummary:
	"""
	Compile every model in ``params.targets``.

	Parameters:
		config: Application configuration.
		params: Validated run parameters.
		progress_cb: Optional progress callback.
		executor: Executor override; chosen from ``params.capture`` if None.

	Returns:
		AggregateSummary for the run.

	Raises:
		ToolNotFoundError: If the compiler cannot be located.
	"""
	tools = resolve_tools(config, TargetKind.COMPILE)
	invocations = compile_invocations(config, tools, params)
	return await _run_kind(config, TargetKind.COMPILE, invocations,
	                       params.capture, executor, progress_cb)


async def run_tests(
    config: Config,
    params: RunParams,
    progress_cb: ProgressCallback | None = None,
    executor: Optional[ChildExecutor] = None,
) -> AggregateSummary:
	"""
	Run every test class list in ``params.targets``.

	Raises:
		ToolNotFoundError: If the test runner cannot be located.
	"""
	tools = resolve_tools(config, TargetKind.TEST)
	invocations = test_invocations(config, tools, params)
	return await _run_kind(config, TargetKind.TEST, invocations,
	                       params.capture, executor, progress_cb)


__all__ = [
    "Orchestrator",
    "ProgressCallback",
    "select_executor",
    "write_report",
    "run_compile",
    "run_tests",
]
