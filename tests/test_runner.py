import pytest

from xpp_runner.core.commands import ToolNotFoundError
from xpp_runner.core.relay import StreamRelay
from xpp_runner.core.runner import (
    Orchestrator,
    run_compile,
    run_tests,
    select_executor,
)
from xpp_runner.core.supervisor import PromptBypassSupervisor
from xpp_runner.models.config import Config
from xpp_runner.models.invocation import ChildInvocation
from xpp_runner.models.outcome import (
    CompletionState,
    RunOutcome,
    TIMEOUT_EXIT_CODE,
)
from xpp_runner.models.run_params import RunParams
from xpp_runner.models.summary import TargetKind

CLEAN_LOG = "<Diagnostics><Items/></Diagnostics>"
ERROR_LOG = ("<Diagnostics><Items><Diagnostic><Severity>Error</Severity>"
             "<Path>Class/A</Path><Message>bad</Message></Diagnostic>"
             "</Items></Diagnostics>")
TEST_LOG = ('<TestResults><TestSuite name="ATest">'
            '<TestCase name="t1" success="true"/>'
            '<TestCase name="t2" success="false"><Error>boom</Error></TestCase>'
            '</TestSuite></TestResults>')


class FakeExecutor:
	"""Writes a canned result document per target instead of running."""

	def __init__(self, documents=None, outcomes=None, raises=()):
		self.documents = documents or {}
		self.outcomes = outcomes or {}
		self.raises = set(raises)
		self.calls = []

	async def run(self, invocation: ChildInvocation) -> RunOutcome:
		self.calls.append(invocation.target)
		if invocation.target in self.raises:
			raise RuntimeError("executor exploded")
		doc = self.documents.get(invocation.target)
		if doc is not None:
			invocation.result_path.parent.mkdir(parents=True, exist_ok=True)
			invocation.result_path.write_text(doc)
		return self.outcomes.get(
		    invocation.target,
		    RunOutcome(exit_code=0, state=CompletionState.COMPLETED))


def _invocations(tmp_path, *targets):
	return [
	    ChildInvocation(
	        target=t,
	        executable=tmp_path / "tool.exe",
	        working_dir=tmp_path,
	        result_path=tmp_path / t / "result.xml",
	    ) for t in targets
	]


@pytest.mark.asyncio
async def test_targets_run_in_order(tmp_path):
	executor = FakeExecutor(documents={
	    "C": CLEAN_LOG,
	    "A": ERROR_LOG,
	    "B": CLEAN_LOG
	})
	summary = await Orchestrator(executor).run(
	    TargetKind.COMPILE, _invocations(tmp_path, "C", "A", "B"))
	assert executor.calls == ["C", "A", "B"]
	assert [t.target for t in summary.targets] == ["C", "A", "B"]
	assert summary.errors == 1
	assert [t.target for t in summary.failed_targets] == ["A"]
	assert summary.exit_code == 1


@pytest.mark.asyncio
async def test_absent_result_file_is_a_failure(tmp_path):
	executor = FakeExecutor(documents={"A": CLEAN_LOG})
	summary = await Orchestrator(executor).run(
	    TargetKind.COMPILE, _invocations(tmp_path, "A", "B"))
	a, b = summary.targets
	assert a.compile_log is not None and not a.failed
	assert b.compile_log is None
	assert b.status == "no results"
	assert summary.exit_code == 1


@pytest.mark.asyncio
async def test_stale_result_file_is_removed(tmp_path):
	(invocation,) = _invocations(tmp_path, "A")
	invocation.result_path.parent.mkdir(parents=True)
	invocation.result_path.write_text(CLEAN_LOG)
	summary = await Orchestrator(FakeExecutor()).run(TargetKind.COMPILE,
	                                                  [invocation])
	assert summary.targets[0].status == "no results"


@pytest.mark.asyncio
async def test_executor_exception_only_affects_its_target(tmp_path):
	executor = FakeExecutor(documents={"B": CLEAN_LOG}, raises={"A"})
	summary = await Orchestrator(executor).run(
	    TargetKind.COMPILE, _invocations(tmp_path, "A", "B"))
	a, b = summary.targets
	assert a.outcome.state is CompletionState.FAILED_TO_START
	assert "exploded" in a.outcome.error
	assert b.status == "passed"
	assert summary.exit_code == 2


@pytest.mark.asyncio
async def test_timed_out_target_is_not_parsed(tmp_path):
	executor = FakeExecutor(
	    documents={"A": TEST_LOG},
	    outcomes={
	        "A":
	        RunOutcome(exit_code=TIMEOUT_EXIT_CODE,
	                   state=CompletionState.TIMED_OUT)
	    },
	)
	summary = await Orchestrator(executor).run(TargetKind.TEST,
	                                           _invocations(tmp_path, "A"))
	assert summary.targets[0].test_log is None
	assert summary.targets[0].status == "timed out"
	assert summary.exit_code == 2


@pytest.mark.asyncio
async def test_progress_callback(tmp_path):
	seen = []
	executor = FakeExecutor(documents={"A": TEST_LOG})
	summary = await Orchestrator(executor).run(
	    TargetKind.TEST, _invocations(tmp_path, "A"),
	    progress_cb=lambda target, msg: seen.append((target, msg)))
	assert summary.failed == 1
	assert seen == [("A", "started"), ("A", "failed")]


def _packages(tmp_path, exe):
	bin_dir = tmp_path / "packages" / "bin"
	bin_dir.mkdir(parents=True)
	(bin_dir / exe).write_text("")
	return bin_dir.parent


@pytest.mark.asyncio
async def test_run_tests_writes_report(tmp_path):
	packages = _packages(tmp_path, "SysTestConsole.17.0.exe")
	cfg = Config(XPP_PACKAGES_DIR=str(packages),
	             OUTPUT_DIR=str(tmp_path / "runs"))
	executor = FakeExecutor(documents={"ATest": TEST_LOG})
	summary = await run_tests(cfg, RunParams(targets=["ATest"]),
	                          executor=executor)
	assert summary.kind is TargetKind.TEST
	assert (summary.passed, summary.failed) == (1, 1)
	report = (tmp_path / "runs" / "test" / "summary.txt").read_text()
	assert "[FAILED] ATest" in report
	assert "FAILED ATest.t2" in report


@pytest.mark.asyncio
async def test_run_compile_missing_tool(tmp_path):
	cfg = Config(XPP_PACKAGES_DIR=str(tmp_path),
	             OUTPUT_DIR=str(tmp_path / "runs"))
	with pytest.raises(ToolNotFoundError):
		await run_compile(cfg, RunParams(targets=["M"]),
		                  executor=FakeExecutor())


def test_select_executor():
	cfg = Config()
	assert isinstance(select_executor(cfg, capture=True), StreamRelay)
	assert isinstance(select_executor(cfg, capture=False),
	                  PromptBypassSupervisor)
