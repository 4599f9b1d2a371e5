"""Tests for TargetResult status and AggregateSummary totals."""

from xpp_runner.models.diagnostic import CompileLog, Diagnostic, Severity
from xpp_runner.models.outcome import (
    CompletionState,
    RunOutcome,
    TIMEOUT_EXIT_CODE,
)
from xpp_runner.models.summary import (
    AggregateSummary,
    TargetKind,
    TargetResult,
    build_summary,
)
from xpp_runner.models.test_result import TestCaseResult, TestLog, TestOutcome


def _ok(exit_code: int = 0) -> RunOutcome:
	return RunOutcome(exit_code=exit_code, state=CompletionState.COMPLETED)


def _compile(target: str, *severities: Severity,
             outcome: RunOutcome | None = None) -> TargetResult:
	log = CompileLog(diagnostics=[
	    Diagnostic(severity=s, path=f"{target}/x", message="m")
	    for s in severities
	])
	return TargetResult(target=target, kind=TargetKind.COMPILE,
	                    outcome=outcome or _ok(), compile_log=log)


def _tests(target: str, *outcomes: TestOutcome) -> TargetResult:
	log = TestLog(cases=[
	    TestCaseResult(name=f"{target}.t{i}", outcome=o)
	    for i, o in enumerate(outcomes)
	])
	return TargetResult(target=target, kind=TargetKind.TEST, outcome=_ok(),
	                    test_log=log)


def test_clean_compile_exits_zero():
	summary = build_summary(TargetKind.COMPILE, [
	    _compile("A", Severity.WARNING, Severity.INFORMATIONAL),
	    _compile("B"),
	], 1.5)
	assert summary.errors == 0
	assert summary.warnings == 1
	assert summary.failed_targets == []
	assert summary.exit_code == 0
	assert [t.status for t in summary.targets] == ["passed", "passed"]


def test_error_diagnostic_fails_target():
	summary = build_summary(TargetKind.COMPILE, [
	    _compile("A", Severity.ERROR, Severity.ERROR, Severity.WARNING),
	    _compile("B"),
	], 1.0)
	assert summary.errors == 2
	assert [t.target for t in summary.failed_targets] == ["A"]
	assert summary.exit_code == 1


def test_nonzero_exit_fails_target_even_without_errors():
	result = _compile("A", outcome=_ok(exit_code=3))
	assert result.failed
	assert build_summary(TargetKind.COMPILE, [result], 0).exit_code == 1


def test_missing_results_fail_target():
	result = TargetResult(target="A", kind=TargetKind.COMPILE, outcome=_ok())
	assert not result.has_results
	assert result.failed
	assert result.status == "no results"
	assert build_summary(TargetKind.COMPILE, [result], 0).exit_code == 1


def test_test_totals():
	summary = build_summary(TargetKind.TEST, [
	    _tests("ATest", TestOutcome.PASSED, TestOutcome.FAILED),
	    _tests("BTest", TestOutcome.PASSED, TestOutcome.SKIPPED),
	], 2.0)
	assert (summary.passed, summary.failed, summary.skipped) == (2, 1, 1)
	assert [t.target for t in summary.failed_targets] == ["ATest"]
	assert summary.exit_code == 1


def test_timeout_outranks_failures():
	timed_out = TargetResult(
	    target="Slow",
	    kind=TargetKind.TEST,
	    outcome=RunOutcome(exit_code=TIMEOUT_EXIT_CODE,
	                       state=CompletionState.TIMED_OUT),
	)
	summary = build_summary(
	    TargetKind.TEST,
	    [_tests("ATest", TestOutcome.FAILED), timed_out], 0)
	assert timed_out.supervisor_failure
	assert timed_out.status == "timed out"
	assert summary.exit_code == 2


def test_failed_to_start_exits_two():
	result = TargetResult(target="A", kind=TargetKind.COMPILE,
	                      outcome=RunOutcome.failed_to_start("no exe"))
	assert result.status == "failed to start"
	assert build_summary(TargetKind.COMPILE, [result], 0).exit_code == 2


def test_empty_summary_is_clean():
	summary = AggregateSummary(kind=TargetKind.TEST)
	assert summary.exit_code == 0
	assert summary.passed == 0
