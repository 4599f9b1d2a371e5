"""
Aggregate summary models.

Per-target results and the aggregate summary computed from them. These
are derived on every run and only persisted as the text report.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from .diagnostic import CompileLog
from .outcome import CompletionState, RunOutcome
from .test_result import TestLog

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_SUPERVISOR_FAILURE = 2


class TargetKind(str, Enum):
	"""What kind of tool a target was submitted to."""

	COMPILE = "compile"
	TEST = "test"


class TargetResult(BaseModel):
	"""Outcome of one target: process outcome plus parsed results."""

	target: str
	kind: TargetKind
	outcome: RunOutcome
	compile_log: CompileLog | None = None
	test_log: TestLog | None = None
	result_path: Path | None = None
	stdout_path: Path | None = None
	stderr_path: Path | None = None

	@property
	def has_results(self) -> bool:
		return self.compile_log is not None or self.test_log is not None

	@property
	def supervisor_failure(self) -> bool:
		"""Return True when the run timed out or never started."""
		return self.outcome.state is not CompletionState.COMPLETED

	@property
	def failed(self) -> bool:
		if self.supervisor_failure or not self.has_results:
			return True
		if self.outcome.exit_code != 0:
			return True
		if self.compile_log is not None and self.compile_log.failed:
			return True
		return self.test_log is not None and self.test_log.failed > 0

	@property
	def status(self) -> str:
		"""Return a short human-readable status label."""
		if self.outcome.state is CompletionState.TIMED_OUT:
			return "timed out"
		if self.outcome.state is CompletionState.FAILED_TO_START:
			return "failed to start"
		if not self.has_results:
			return "no results"
		return "failed" if self.failed else "passed"


class AggregateSummary(BaseModel):
	"""Totals across every target of one run, in target-list order."""

	kind: TargetKind
	targets: list[TargetResult] = Field(default_factory=list)
	elapsed_seconds: float = 0.0

	def _sum_compile(self, attr: str) -> int:
		return sum(
		    getattr(t.compile_log, attr) for t in self.targets
		    if t.compile_log is not None)

	def _sum_test(self, attr: str) -> int:
		return sum(
		    getattr(t.test_log, attr) for t in self.targets
		    if t.test_log is not None)

	@property
	def errors(self) -> int:
		return self._sum_compile("errors")

	@property
	def warnings(self) -> int:
		return self._sum_compile("warnings")

	@property
	def passed(self) -> int:
		return self._sum_test("passed")

	@property
	def failed(self) -> int:
		return self._sum_test("failed")

	@property
	def skipped(self) -> int:
		return self._sum_test("skipped")

	@property
	def failed_targets(self) -> list[TargetResult]:
		return [t for t in self.targets if t.failed]

	@property
	def exit_code(self) -> int:
		"""Return the process exit code for the whole run.

		2 when any target timed out or failed to start, 1 when any
		target failed otherwise, 0 when everything is clean.
		"""
		if any(t.supervisor_failure for t in self.targets):
			return EXIT_SUPERVISOR_FAILURE
		if self.failed_targets:
			return EXIT_FAILURES
		return EXIT_OK


def build_summary(
    kind: TargetKind,
    results: list[TargetResult],
    elapsed_seconds: float,
) -> AggregateSummary:
	"""Assemble an AggregateSummary from ordered per-target results.

	Parameters:
		kind: Target kind for the whole run.
		results: Per-target results in target-list order.
		elapsed_seconds: Wall time of the whole run.

	Returns:
		AggregateSummary preserving the given order.
	"""
	return AggregateSummary(
	    kind=kind,
	    targets=list(results),
	    elapsed_seconds=elapsed_seconds,
	)


__all__ = [
    "TargetKind",
    "TargetResult",
    "AggregateSummary",
    "build_summary",
    "EXIT_OK",
    "EXIT_FAILURES",
    "EXIT_SUPERVISOR_FAILURE",
]
