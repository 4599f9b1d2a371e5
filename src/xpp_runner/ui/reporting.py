"""
Report rendering and persistence utilities.

Renders an AggregateSummary to the plain-text run report and saves it
next to the run outputs.
"""

from __future__ import annotations

from pathlib import Path
from string import Template

from xpp_runner.models.summary import (
    AggregateSummary,
    TargetKind,
    TargetResult,
)

REPORT_FILE = "summary.txt"

REPORT_TEMPLATE = Template("""X++ ${kind} run summary
${rule}
Targets:  ${target_count}
Elapsed:  ${elapsed}

${target_blocks}
${rule}
Grand total: ${totals}
Failed targets: ${failed_targets}
Result: ${result}
""")


def _totals(summary: AggregateSummary) -> str:
	if summary.kind is TargetKind.COMPILE:
		return f"{summary.errors} error(s), {summary.warnings} warning(s)"
	return (f"{summary.passed} passed, {summary.failed} failed, "
	        f"{summary.skipped} skipped")


def render_target_block(result: TargetResult) -> str:
	"""
	Render the report lines for one target.

	Parameters:
		result: Per-target result.

	Returns:
		Multi-line text block ending with a newline.
	"""
	outcome = result.outcome
	lines = [
	    f"[{result.status.upper()}] {result.target} "
	    f"(exit {outcome.exit_code}, {outcome.elapsed_seconds:.1f}s)"
	]
	if outcome.error:
		lines.append(f"  error: {outcome.error}")
	if outcome.injections:
		lines.append(f"  prompt bypass attempts: {outcome.injections}")

	if result.compile_log is not None:
		log = result.compile_log
		lines.append(f"  {log.errors} error(s), {log.warnings} warning(s), "
		             f"{log.informational} informational")
		for diag in log.error_diagnostics:
			lines.append(f"    {diag.location}: {diag.message}")
	elif result.test_log is not None:
		log = result.test_log
		lines.append(f"  {log.passed} passed, {log.failed} failed, "
		             f"{log.skipped} skipped")
		for case in log.failed_cases:
			lines.append(f"    FAILED {case.name}")
			for message in case.messages:
				lines.append(f"      {message.text}")
	elif outcome.completed:
		lines.append(f"  no results produced at {result.result_path}")

	if result.stdout_path is not None:
		lines.append(f"  stdout: {result.stdout_path}")
	if result.stderr_path is not None:
		lines.append(f"  stderr: {result.stderr_path}")
	return "\n".join(lines) + "\n"


def render_report_text(summary: AggregateSummary) -> str:
	"""
	Render the plain-text report for a whole run.

	Parameters:
		summary: Aggregate summary in target-list order.

	Returns:
		Rendered report text.
	"""
	failed = [t.target for t in summary.failed_targets]
	data = {
	    "kind": summary.kind.value,
	    "rule": "=" * 60,
	    "target_count": len(summary.targets),
	    "elapsed": f"{summary.elapsed_seconds:.1f}s",
	    "target_blocks": "\n".join(
	        render_target_block(t) for t in summary.targets),
	    "totals": _totals(summary),
	    "failed_targets": ", ".join(failed) if failed else "none",
	    "result": "FAILED" if summary.exit_code else "OK",
	}
	return REPORT_TEMPLATE.safe_substitute(**data)


def save_report(path: Path | str, content: str) -> None:
	"""
	Persist report text to disk, ensuring parent directories.

	Parameters:
		path: Destination file path.
		content: Report text to write.
	"""
	Path(path).parent.mkdir(parents=True, exist_ok=True)
	Path(path).write_text(content, encoding="utf-8")


__all__ = [
    "REPORT_FILE",
    "render_target_block",
    "render_report_text",
    "save_report",
]
