"""
External tool locations and command lines.

Resolves the compiler and test runner executables and builds one
ChildInvocation per target with its own output directory.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from pydantic import BaseModel

from xpp_runner.models.config import Config
from xpp_runner.models.invocation import ChildInvocation
from xpp_runner.models.run_params import RunParams
from xpp_runner.models.summary import TargetKind
from xpp_runner.utils.logging import get_logger
from xpp_runner.utils.paths import ensure_within, first_existing_dir

logger = get_logger(__name__)

COMPILE_XML = "build.xml"
COMPILE_LOG = "build.log"
TEST_XML = "results.xml"
STDOUT_LOG = "stdout.log"
STDERR_LOG = "stderr.log"


class ToolNotFoundError(RuntimeError):
	"""A required directory or executable does not exist."""


class ToolLocations(BaseModel):
	"""Resolved paths of the metadata root and the tool executables."""

	packages_dir: Path
	compiler: Path
	test_runner: Path
	reference_dir: Path

	@property
	def bin_dir(self) -> Path:
		return self.packages_dir / "bin"

	def model_bin_dir(self, model: str) -> Path:
		"""Return the output directory for a compiled model."""
		return self.packages_dir / model / "bin"


def resolve_tools(config: Config, kind: TargetKind) -> ToolLocations:
	"""
	Resolve tool locations and check the one needed for ``kind`` exists.

	Parameters:
		config: Application configuration.
		kind: Which tool the run needs.

	Returns:
		ToolLocations for the run.

	Raises:
		ToolNotFoundError: If the metadata root or the executable is missing.
	"""
	if config.packages_dir:
		packages = Path(config.packages_dir)
		if not packages.is_dir():
			raise ToolNotFoundError(f"packages directory not found: {packages}")
	else:
		packages = first_existing_dir(config.packages_candidates)
		if packages is None:
			raise ToolNotFoundError(
			    "could not find PackagesLocalDirectory; tried: " +
			    ", ".join(config.packages_candidates))

	bin_dir = packages / "bin"
	tools = ToolLocations(
	    packages_dir=packages,
	    compiler=bin_dir / config.compiler_exe,
	    test_runner=bin_dir / config.test_runner_exe,
	    reference_dir=Path(config.reference_dir)
	    if config.reference_dir else bin_dir,
	)
	needed = tools.compiler if kind is TargetKind.COMPILE else tools.test_runner
	if not needed.is_file():
		raise ToolNotFoundError(f"{needed.name} not found at: {needed}")
	logger.info("using %s from %s", needed.name, bin_dir)
	return tools


def compiler_arguments(
    tools: ToolLocations,
    model: str,
    output_dir: Path,
    xml_log: Path | None = None,
    text_log: Path | None = None,
    verbose: bool = False,
    incremental: bool = False,
) -> list[str]:
	"""Build the compiler argument list for one model."""
	args = [
	    f"-metadata={tools.packages_dir}",
	    f"-compilermetadata={tools.packages_dir}",
	    f"-modelmodule={model}",
	    f"-output={output_dir}",
	    f"-referenceFolder={tools.reference_dir}",
	]
	if text_log is not None:
		args.append(f"-log={text_log}")
	if xml_log is not None:
		args.append(f"-xmlLog={xml_log}")
	if verbose:
		args.append("-verbose")
	if incremental:
		args.append("-incremental")
	return args


def test_arguments(
    classes: Sequence[str],
    xml_path: Path,
    parallel: bool = False,
) -> list[str]:
	"""Build the test runner argument list for one set of test classes."""
	args = [f"/test:{','.join(classes)}", f"/xml:{xml_path}"]
	if parallel:
		args.append("/parallel")
	return args


def _target_dir(config: Config, kind: TargetKind, target: str) -> Path:
	base = config.output_path.resolve()
	target_dir = ensure_within(
	    base, base / kind.value / RunParams.slugify(target))
	target_dir.mkdir(parents=True, exist_ok=True)
	return target_dir


def compile_invocations(config: Config, tools: ToolLocations,
                        params: RunParams) -> list[ChildInvocation]:
	"""Build one compiler invocation per model, in the given order."""
	invocations = []
	for model in params.targets:
		target_dir = _target_dir(config, TargetKind.COMPILE, model)
		xml_log = target_dir / COMPILE_XML
		invocations.append(
		    ChildInvocation(
		        target=model,
		        executable=tools.compiler,
		        arguments=tuple(
		            compiler_arguments(
		                tools,
		                model,
		                tools.model_bin_dir(model),
		                xml_log=xml_log,
		                text_log=target_dir / COMPILE_LOG,
		                verbose=params.verbose,
		                incremental=params.incremental,
		            )),
		        working_dir=tools.bin_dir,
		        timeout_seconds=config.run_timeout_seconds,
		        result_path=xml_log,
		        stdout_path=target_dir / STDOUT_LOG if params.capture else None,
		        stderr_path=target_dir / STDERR_LOG if params.capture else None,
		    ))
	return invocations


def test_invocations(config: Config, tools: ToolLocations,
                     params: RunParams) -> list[ChildInvocation]:
	"""Build one test runner invocation per class list, in the given order."""
	invocations = []
	for target in params.targets:
		classes = [c for c in target.split(",") if c]
		target_dir = _target_dir(config, TargetKind.TEST, target)
		xml_path = target_dir / TEST_XML
		invocations.append(
		    ChildInvocation(
		        target=target,
		        executable=tools.test_runner,
		        arguments=tuple(
		            test_arguments(classes, xml_path,
		                           parallel=params.parallel)),
		        working_dir=tools.bin_dir,
		        timeout_seconds=config.run_timeout_seconds,
		        result_path=xml_path,
		        stdout_path=target_dir / STDOUT_LOG if params.capture else None,
		        stderr_path=target_dir / STDERR_LOG if params.capture else None,
		    ))
	return invocations


__all__ = [
    "ToolNotFoundError",
    "ToolLocations",
    "resolve_tools",
    "compiler_arguments",
    "test_arguments",
    "compile_invocations",
    "test_invocations",
]
