from __future__ import annotations

import asyncio
import sys
from typing import List, Optional

import typer
from pydantic import ValidationError
from typer.main import get_command

from xpp_runner.core.commands import ToolNotFoundError
from xpp_runner.core.runner import run_compile, run_tests
from xpp_runner.models.config import Config, load_env
from xpp_runner.models.run_params import RunParams
from xpp_runner.models.summary import EXIT_SUPERVISOR_FAILURE, TargetKind
from xpp_runner.ui.reporting import REPORT_FILE
from xpp_runner.ui.summary import SummaryView
from xpp_runner.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

RUN_LOG_FILE = "run.log"

cli = typer.Typer(add_completion=False, no_args_is_help=True)


@cli.callback()
def root() -> None:
	"""
	Run the X++ compiler and test runner unattended.

	Each target runs in its own child process; debug-attach prompts are
	answered automatically and results are summarized at the end.
	"""
	return None


def run_impl(
    kind: TargetKind,
    targets: List[str],
    timeout: Optional[float] = None,
    output_dir: Optional[str] = None,
    capture: bool = False,
    verbose: bool = False,
    incremental: bool = False,
    parallel: bool = False,
) -> int:
	"""
	Run every target of one kind and print the summary.

	Loads configuration, resolves the tool, runs the targets one at a
	time and writes the text report next to the per-target outputs.

	Parameters:
		kind: Compile or test.
		targets: Model names, or comma-separated test class lists.
		timeout: Override for the per-target timeout in seconds.
		output_dir: Override for the output directory.
		capture: Capture stdout/stderr through the stream relay.
		verbose: Pass -verbose to the compiler.
		incremental: Pass -incremental to the compiler.
		parallel: Pass /parallel to the test runner.

	Returns:
		Process exit code for the run.
	"""
	load_env()
	params = RunParams(
	    targets=targets,
	    timeout=timeout,
	    output_dir=output_dir,
	    capture=capture,
	    verbose=verbose,
	    incremental=incremental,
	    parallel=parallel,
	)
	config = Config()
	config.apply_overrides(params)
	kind_dir = config.output_path / kind.value
	configure_logging(config.log_level, log_file=kind_dir / RUN_LOG_FILE)
	typer.echo(f"Running {kind.value} for {len(params.targets)} target(s), "
	           f"timeout={config.run_timeout_seconds:g}s, "
	           f"capture={params.capture}, output={config.output_path}")

	view = SummaryView()
	runner = run_compile if kind is TargetKind.COMPILE else run_tests
	try:
		summary = asyncio.run(
		    runner(config, params, progress_cb=view.progress))
	except ToolNotFoundError as exc:
		logger.error("%s", exc)
		typer.echo(f"error: {exc}", err=True)
		return EXIT_SUPERVISOR_FAILURE

	view.print_summary(summary, report_path=str(kind_dir / REPORT_FILE))
	return summary.exit_code


def _run_command(kind: TargetKind, targets: List[str], **kwargs) -> None:
	try:
		code = run_impl(kind, targets, **kwargs)
	except ValidationError as exc:
		raise typer.BadParameter(str(exc)) from exc
	raise typer.Exit(code)


@cli.command("compile")
def compile_models(
    models: List[str] = typer.Argument(..., help="Model names to compile"),
    timeout: float = typer.Option(None, "--timeout",
                                  help="Override per-model timeout seconds"),
    output_dir: str = typer.Option(None, "--output-dir",
                                   help="Override output directory"),
    capture: bool = typer.Option(
        False,
        "--capture/--no-capture",
        help="Capture stdout/stderr to files (piped stdio)",
    ),
    verbose: bool = typer.Option(False, "--verbose",
                                 help="Pass -verbose to the compiler"),
    incremental: bool = typer.Option(False, "--incremental",
                                     help="Pass -incremental to the compiler"),
) -> None:
	"""Compile one or more models, one compiler run per model."""
	_run_command(TargetKind.COMPILE, models, timeout=timeout,
	             output_dir=output_dir, capture=capture, verbose=verbose,
	             incremental=incremental)


@cli.command("test")
def run_test_classes(
    classes: List[str] = typer.Argument(
        ..., help="Test classes; a comma-separated list runs as one target"),
    timeout: float = typer.Option(None, "--timeout",
                                  help="Override per-target timeout seconds"),
    output_dir: str = typer.Option(None, "--output-dir",
                                   help="Override output directory"),
    capture: bool = typer.Option(
        False,
        "--capture/--no-capture",
        help="Capture stdout/stderr to files (piped stdio)",
    ),
    parallel: bool = typer.Option(False, "--parallel",
                                  help="Pass /parallel to the test runner"),
) -> None:
	"""Run one or more test class lists, one runner process per list."""
	_run_command(TargetKind.TEST, classes, timeout=timeout,
	             output_dir=output_dir, capture=capture, parallel=parallel)


def entrypoint(argv=None, *, standalone_mode: bool = True):
	"""
	Typer entrypoint for the xpp-runner console script.

	Parameters:
		argv: Command-line arguments. Defaults to sys.argv[1:].
		standalone_mode: If True, Click handles exit codes.

	Returns:
		Result of the Click application main invocation.
	"""
	args = sys.argv[1:] if argv is None else list(argv)
	_click_app = get_command(cli)
	return _click_app.main(
	    args=args,
	    prog_name="xpp-runner",
	    standalone_mode=standalone_mode,
	)


if __name__ == "__main__":
	entrypoint()
