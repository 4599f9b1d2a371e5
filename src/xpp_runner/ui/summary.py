"""
Terminal summary view for compile and test runs.

Prints per-target progress lines while targets run and Rich tables with
the final summary, compiler errors and failed test cases. Children
write straight to the console while they run, so there is no live
display.
"""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from xpp_runner.models.summary import (
    AggregateSummary,
    TargetKind,
    TargetResult,
)

_STATUS_STYLES = {
    "passed": "green",
    "failed": "red",
    "no results": "yellow",
    "timed out": "bold red",
    "failed to start": "bold red",
}


def _status_text(result: TargetResult) -> Text:
	style = _STATUS_STYLES.get(result.status, "white")
	return Text(result.status.upper(), style=style)


class SummaryView:
	"""Rich output for one run."""

	def __init__(self, console: Console | None = None):
		self.console = console or Console()

	def progress(self, target: str, msg: str) -> None:
		"""Print one progress line for a target."""
		style = "red" if ("fail" in msg or "timed out" in msg) else "cyan"
		self.console.print(Text(f">> {target}: {msg}", style=style))

	def _targets_table(self, summary: AggregateSummary) -> Table:
		table = Table(
		    title=f"X++ {summary.kind.value} summary",
		    box=box.ROUNDED,
		    expand=True,
		    title_style="bold cyan",
		)
		table.add_column("Target", style="bold")
		table.add_column("Status")
		table.add_column("Exit", justify="right")
		table.add_column("Time", justify="right")
		if summary.kind is TargetKind.COMPILE:
			table.add_column("Errors", justify="right")
			table.add_column("Warnings", justify="right")
		else:
			table.add_column("Passed", justify="right")
			table.add_column("Failed", justify="right")
			table.add_column("Skipped", justify="right")

		for t in summary.targets:
			row = [
			    Text(t.target),
			    _status_text(t),
			    str(t.outcome.exit_code),
			    f"{t.outcome.elapsed_seconds:.1f}s",
			]
			if summary.kind is TargetKind.COMPILE:
				log = t.compile_log
				row += [str(log.errors), str(log.warnings)] if log else ["-", "-"]
			else:
				log = t.test_log
				row += ([str(log.passed),
				         str(log.failed),
				         str(log.skipped)] if log else ["-", "-", "-"])
			table.add_row(*row)

		if summary.kind is TargetKind.COMPILE:
			totals = [str(summary.errors), str(summary.warnings)]
		else:
			totals = [
			    str(summary.passed),
			    str(summary.failed),
			    str(summary.skipped)
			]
		table.add_row("total", "", "", f"{summary.elapsed_seconds:.1f}s",
		              *totals, style="bold")
		return table

	def _errors_table(self, summary: AggregateSummary) -> Table | None:
		rows = [(t.target, d) for t in summary.targets if t.compile_log
		        for d in t.compile_log.error_diagnostics]
		if not rows:
			return None
		table = Table(title="Compiler errors", box=box.ROUNDED, expand=True,
		              title_style="bold red")
		table.add_column("Model")
		table.add_column("Location")
		table.add_column("Message")
		for target, diag in rows:
			table.add_row(Text(target), Text(diag.location), Text(diag.message))
		return table

	def _failed_tests_table(self, summary: AggregateSummary) -> Table | None:
		rows = [(t.target, c) for t in summary.targets if t.test_log
		        for c in t.test_log.failed_cases]
		if not rows:
			return None
		table = Table(title="Failed tests", box=box.ROUNDED, expand=True,
		              title_style="bold red")
		table.add_column("Target")
		table.add_column("Test")
		table.add_column("Message")
		for target, case in rows:
			table.add_row(Text(target), Text(case.name),
			              Text("\n".join(m.text for m in case.messages)))
		return table

	def print_summary(self, summary: AggregateSummary,
	                  report_path: str | None = None) -> None:
		"""Print the final summary tables."""
		self.console.print()
		self.console.print(self._targets_table(summary))
		for table in (self._errors_table(summary),
		              self._failed_tests_table(summary)):
			if table is not None:
				self.console.print(table)
		if report_path:
			self.console.print()
			self.console.print(Text(f"Report: {report_path}", style="dim"))


__all__ = ["SummaryView"]
