"""
Path utilities.

Provides functions for ensuring per-target output paths stay within the
run's output directory and for picking the first existing directory from
a list of candidates.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


def ensure_within(base: Path, path: Path) -> Path:
	"""
	Ensure a path is within the specified base directory.

	Parameters:
		base: The allowed base directory.
		path: The path to validate.

	Returns:
		The original path if valid.

	Raises:
		ValueError: If path escapes the base directory.
	"""
	resolved_base = base.resolve()
	resolved_path = path.resolve()
	if resolved_path == resolved_base or resolved_path.is_relative_to(
	    resolved_base):
		return path
	raise ValueError(f"Path {resolved_path} escapes base {resolved_base}")


def first_existing_dir(candidates: Iterable[str | Path]) -> Path | None:
	"""
	Return the first candidate that is an existing directory.

	Parameters:
		candidates: Directory paths in priority order.

	Returns:
		The first existing directory, or None if none exists.
	"""
	for candidate in candidates:
		p = Path(candidate)
		if p.is_dir():
			return p
	return None


def reset_file(path: Path | None) -> None:
	"""Remove a stale output file from a previous run, if present."""
	if path is not None:
		path.unlink(missing_ok=True)


__all__ = ["ensure_within", "first_existing_dir", "reset_file"]
