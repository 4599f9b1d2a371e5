import asyncio
import sys
import time
from pathlib import Path

import pytest

from xpp_runner.console.bypass import InjectionSchedule
from xpp_runner.console.injector import ConsoleInputBuffer, DetachedConsoleApi
from xpp_runner.core.processes import is_process_alive
from xpp_runner.core.supervisor import PromptBypassSupervisor
from xpp_runner.models.config import Config
from xpp_runner.models.invocation import ChildInvocation
from xpp_runner.models.outcome import (
    CompletionState,
    START_FAILURE_EXIT_CODE,
    TIMEOUT_EXIT_CODE,
)


class CountingConsoleApi:

	def __init__(self):
		self.writes = 0

	def get_std_input_handle(self):
		return None

	def get_console_mode(self, handle):
		return 3

	def write_console_input(self, handle, records, count):
		self.writes += 1
		return count


def _python(tmp_path, code, *args, timeout=None):
	return ChildInvocation(
	    target="child",
	    executable=Path(sys.executable),
	    arguments=("-c", code, *args),
	    working_dir=tmp_path,
	    timeout_seconds=timeout,
	)


def _supervisor(api=None, **schedule):
	buffer = ConsoleInputBuffer.from_std_input(api or DetachedConsoleApi())
	return PromptBypassSupervisor(buffer, InjectionSchedule(**schedule),
	                              timeout_seconds=30, cancel_grace_seconds=1)


@pytest.mark.asyncio
async def test_quick_child_gets_no_injection(tmp_path):
	api = CountingConsoleApi()
	sup = _supervisor(api, warmup_seconds=5)
	start = time.monotonic()
	outcome = await sup.run(_python(tmp_path, "import sys; sys.exit(3)"))
	assert outcome.state is CompletionState.COMPLETED
	assert outcome.exit_code == 3
	assert outcome.injections == 0
	assert api.writes == 0
	# the injector is cancelled instead of waited out
	assert time.monotonic() - start < 5


@pytest.mark.asyncio
async def test_injections_stop_at_max_attempts(tmp_path):
	api = CountingConsoleApi()
	sup = _supervisor(api, warmup_seconds=0, interval_seconds=0.05,
	                  max_attempts=3)
	outcome = await sup.run(_python(tmp_path, "import time; time.sleep(1.5)"))
	assert outcome.state is CompletionState.COMPLETED
	assert outcome.exit_code == 0
	assert outcome.injections == 3
	assert api.writes == 3


@pytest.mark.asyncio
async def test_console_failure_does_not_affect_outcome(tmp_path):
	sup = _supervisor(DetachedConsoleApi(), warmup_seconds=0)
	outcome = await sup.run(_python(tmp_path, "import time; time.sleep(0.3)"))
	assert outcome.state is CompletionState.COMPLETED
	assert outcome.succeeded
	assert outcome.injections == 0


@pytest.mark.asyncio
async def test_timeout_kills_child(tmp_path):
	sup = _supervisor(warmup_seconds=60)
	outcome = await sup.run(
	    _python(tmp_path, "import time; time.sleep(60)", timeout=1))
	assert outcome.state is CompletionState.TIMED_OUT
	assert outcome.exit_code == TIMEOUT_EXIT_CODE
	assert outcome.pid is not None
	assert not is_process_alive(outcome.pid)
	assert "timed out" in outcome.error


@pytest.mark.asyncio
async def test_timeout_kills_grandchildren(tmp_path):
	pid_file = tmp_path / "grandchild.pid"
	code = ("import subprocess, sys, time\n"
	        "p = subprocess.Popen([sys.executable, '-c', "
	        "'import time; time.sleep(60)'])\n"
	        "open(sys.argv[1], 'w').write(str(p.pid))\n"
	        "time.sleep(60)\n")
	sup = _supervisor(warmup_seconds=60)
	outcome = await sup.run(_python(tmp_path, code, str(pid_file), timeout=3))
	assert outcome.state is CompletionState.TIMED_OUT
	grandchild = int(pid_file.read_text())
	assert not is_process_alive(outcome.pid)
	assert not is_process_alive(grandchild)


@pytest.mark.asyncio
async def test_missing_executable_fails_to_start(tmp_path):
	sup = _supervisor()
	invocation = ChildInvocation(
	    target="missing",
	    executable=tmp_path / "nope.exe",
	    working_dir=tmp_path,
	)
	outcome = await sup.run(invocation)
	assert outcome.state is CompletionState.FAILED_TO_START
	assert outcome.exit_code == START_FAILURE_EXIT_CODE
	assert outcome.pid is None
	assert "nope.exe" in outcome.error


@pytest.mark.asyncio
async def test_missing_working_dir_fails_to_start(tmp_path):
	sup = _supervisor()
	invocation = ChildInvocation(
	    target="bad-cwd",
	    executable=Path(sys.executable),
	    working_dir=tmp_path / "absent",
	)
	outcome = await sup.run(invocation)
	assert outcome.state is CompletionState.FAILED_TO_START


@pytest.mark.asyncio
async def test_sequential_runs_leave_no_injector_tasks(tmp_path):
	sup = _supervisor(warmup_seconds=0, interval_seconds=0.05,
	                  max_attempts=100)
	for code in (0, 1):
		outcome = await sup.run(
		    _python(tmp_path, f"import sys, time; time.sleep(0.2); "
		            f"sys.exit({code})"))
		assert outcome.exit_code == code
	pending = [
	    t for t in asyncio.all_tasks()
	    if t.get_name().startswith("key-injector")
	]
	assert pending == []


def test_from_config_uses_schedule_settings():
	cfg = Config(INJECTION_WARMUP_SECONDS=1, INJECTION_INTERVAL_SECONDS=0.5,
	             INJECTION_MAX_ATTEMPTS=4, RUN_TIMEOUT_SECONDS=99)
	sup = PromptBypassSupervisor.from_config(
	    cfg, ConsoleInputBuffer.from_std_input(DetachedConsoleApi()))
	assert sup.schedule.warmup_seconds == 1
	assert sup.schedule.interval_seconds == 0.5
	assert sup.schedule.max_attempts == 4
	assert sup.timeout_seconds == 99
