"""
Logging configuration module.

Provides centralized logging setup for the application with
configurable log levels and consistent formatting.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class _RunLogHandler(logging.FileHandler):
	"""File handler for the orchestrator log of the current run."""


def configure_logging(level: str = "info",
                      log_file: Path | str | None = None) -> None:
	"""
	Configure basic logging with level and format.

	When ``log_file`` is given, the run log is also written there,
	overwritten on every run. Repeated calls replace the previous run log
	handler instead of adding another one.

	Parameters:
		level: Log level string (e.g., "info", "debug", "warning").
		log_file: Optional path for the orchestrator log file.
	"""
	lvl = logging._nameToLevel.get(level.upper(), logging.INFO)
	logging.basicConfig(level=lvl, format=LOG_FORMAT)
	root = logging.getLogger()
	root.setLevel(lvl)
	for handler in [h for h in root.handlers if isinstance(h, _RunLogHandler)]:
		root.removeHandler(handler)
		handler.close()
	if log_file is not None:
		path = Path(log_file)
		path.parent.mkdir(parents=True, exist_ok=True)
		handler = _RunLogHandler(path, mode="w", encoding="utf-8")
		handler.setFormatter(logging.Formatter(LOG_FORMAT))
		root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
	"""
	Get a logger for the specified module.

	Parameters:
		name: The logger name, typically __name__.

	Returns:
		Configured logger instance.
	"""
	return logging.getLogger(name)


__all__ = [
    "configure_logging",
    "get_logger",
    "LOG_FORMAT",
]
