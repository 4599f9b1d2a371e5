"""Console input injection and prompt-bypass strategies.

Key modules:
    - injector: ctypes console input buffer access
    - bypass: ConsoleInjection / StdinWrite strategies and the schedule loop
"""

from xpp_runner.console.injector import (
    ConsoleInputBuffer,
    DetachedConsoleApi,
    Win32ConsoleApi,
    build_key_records,
    default_console_api,
)
from xpp_runner.console.bypass import (
    ConsoleInjection,
    InjectionSchedule,
    PromptBypassLoop,
    StdinWrite,
)

__all__ = [
    "ConsoleInputBuffer",
    "DetachedConsoleApi",
    "Win32ConsoleApi",
    "build_key_records",
    "default_console_api",
    "ConsoleInjection",
    "InjectionSchedule",
    "PromptBypassLoop",
    "StdinWrite",
]
