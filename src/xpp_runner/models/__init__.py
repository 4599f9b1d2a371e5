"""
xpp-runner models.

This subpackage contains Pydantic models for configuration, run
parameters, child invocations, outcomes and parsed tool results.

Key models:
    - Config: Application configuration loaded from environment
    - RunParams: Parameters for a compile or test run
    - ChildInvocation: One external tool run for one target
    - RunOutcome: How a child process run ended
    - CompileLog / Diagnostic: Parsed compiler XML log
    - TestLog / TestCaseResult: Parsed test runner XML output
    - AggregateSummary: Totals across all targets of a run
"""

from .config import Config, load_env
from .run_params import RunParams
from .invocation import ChildInvocation
from .outcome import (
    CompletionState,
    RunOutcome,
    TIMEOUT_EXIT_CODE,
    START_FAILURE_EXIT_CODE,
)
from .diagnostic import Severity, Diagnostic, CompileLog
from .test_result import TestOutcome, TestMessage, TestCaseResult, TestLog
from .summary import (
    TargetKind,
    TargetResult,
    AggregateSummary,
    build_summary,
    EXIT_OK,
    EXIT_FAILURES,
    EXIT_SUPERVISOR_FAILURE,
)

__all__ = [
    "Config",
    "load_env",
    "RunParams",
    "ChildInvocation",
    "CompletionState",
    "RunOutcome",
    "TIMEOUT_EXIT_CODE",
    "START_FAILURE_EXIT_CODE",
    "Severity",
    "Diagnostic",
    "CompileLog",
    "TestOutcome",
    "TestMessage",
    "TestCaseResult",
    "TestLog",
    "TargetKind",
    "TargetResult",
    "AggregateSummary",
    "build_summary",
    "EXIT_OK",
    "EXIT_FAILURES",
    "EXIT_SUPERVISOR_FAILURE",
]
