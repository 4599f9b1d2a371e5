"""User interface components.

This subpackage provides terminal output and report rendering
for compile and test runs.

Key modules:
    - summary: Rich-based summary tables and progress lines
    - reporting: Plain-text report rendering and persistence
"""

from xpp_runner.ui.summary import SummaryView
from xpp_runner.ui.reporting import (
    REPORT_FILE,
    render_report_text,
    render_target_block,
    save_report,
)

__all__ = [
    "SummaryView",
    "REPORT_FILE",
    "render_report_text",
    "render_target_block",
    "save_report",
]
