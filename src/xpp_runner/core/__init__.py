"""Core run logic for the X++ tool runner.

This subpackage contains process supervision, stream relaying, tool
command construction and the run orchestrator.

Key modules:
    - runner: Sequential orchestration via Orchestrator, run_compile(), run_tests()
    - supervisor: Console-inheriting supervisor with prompt bypass
    - relay: Piped-stdio runner with live stream relay and capture
    - commands: Tool resolution and per-target invocations
    - processes: Launch checks and process-tree termination
"""

from xpp_runner.core.commands import (
    ToolLocations,
    ToolNotFoundError,
    compile_invocations,
    compiler_arguments,
    resolve_tools,
    test_arguments,
    test_invocations,
)
from xpp_runner.core.processes import (
    is_process_alive,
    kill_descendants,
    launch_problem,
    terminate_tree,
)
from xpp_runner.core.relay import StreamRelay
from xpp_runner.core.supervisor import PromptBypassSupervisor
from xpp_runner.core.runner import (
    Orchestrator,
    ProgressCallback,
    run_compile,
    run_tests,
    select_executor,
    write_report,
)

__all__ = [
    # commands
    "ToolLocations",
    "ToolNotFoundError",
    "compile_invocations",
    "compiler_arguments",
    "resolve_tools",
    "test_arguments",
    "test_invocations",
    # processes
    "is_process_alive",
    "kill_descendants",
    "launch_problem",
    "terminate_tree",
    # executors
    "StreamRelay",
    "PromptBypassSupervisor",
    # runner
    "Orchestrator",
    "ProgressCallback",
    "run_compile",
    "run_tests",
    "select_executor",
    "write_report",
]
