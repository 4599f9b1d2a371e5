"""Shared utility functions.

This subpackage provides common utility functions used across
the application.

Key modules:
    - parsing: Compiler and test runner XML result parsing
    - paths: Output path safety and directory discovery
    - logging: Logging configuration
    - protocols: Protocol definitions for dependency injection
"""

from .logging import configure_logging, get_logger
from .paths import ensure_within, first_existing_dir, reset_file
from .parsing import (
    field_text,
    find_case_groupings,
    parse_compile_log,
    parse_test_log,
)
from .protocols import ChildExecutor, ConsoleApiProtocol, PromptBypass

__all__ = [
    # logging
    "configure_logging",
    "get_logger",
    # paths
    "ensure_within",
    "first_existing_dir",
    "reset_file",
    # parsing
    "field_text",
    "find_case_groupings",
    "parse_compile_log",
    "parse_test_log",
    # protocols
    "ChildExecutor",
    "ConsoleApiProtocol",
    "PromptBypass",
]
