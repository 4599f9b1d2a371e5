"""
Run parameters model.

Defines validated run parameters for CLI invocation and orchestration.
Provides sanitized slugs for safe per-target output directories.
"""

from __future__ import annotations

import hashlib
import re
from typing import Optional
from pydantic import BaseModel, Field, field_validator

# model names and comma-separated test class lists
TARGET_RE = re.compile(r"^[A-Za-z0-9_.]+(,[A-Za-z0-9_.]+)*$")
SAFE_SLUG_RE = re.compile(r"[^A-Za-z0-9_.+-]+")
MAX_SLUG_LEN = 96


class RunParams(BaseModel):
	"""Validated run parameters for CLI/runner."""

	targets: list[str] = Field(
	    description="Model names, or comma-separated test class lists")
	timeout: Optional[float] = Field(default=None,
	                                 description="Per-target timeout")
	output_dir: Optional[str] = Field(default=None,
	                                  description="Output directory")
	capture: bool = Field(
	    default=False,
	    description="Capture stdout/stderr through the stream relay",
	)
	verbose: bool = Field(default=False, description="Compiler -verbose")
	incremental: bool = Field(default=False,
	                          description="Compiler -incremental")
	parallel: bool = Field(default=False, description="Test runner /parallel")

	@field_validator('targets')
	@classmethod
	def validate_targets(cls, v: list[str]) -> list[str]:
		cleaned = [t.replace(" ", "") for t in v]
		for target in cleaned:
			if not TARGET_RE.match(target):
				raise ValueError(
				    f"invalid target {target!r}: use names of "
				    "alnum/_. separated by commas")
		return cleaned

	@field_validator('timeout')
	@classmethod
	def validate_positive(cls, v: Optional[float]) -> Optional[float]:
		if v is None:
			return v
		if v <= 0:
			raise ValueError("timeout must be > 0")
		return v

	@staticmethod
	def slugify(v: str) -> str:
		"""Return a filesystem-safe slug for a target name."""
		slug = SAFE_SLUG_RE.sub('_', v.replace(",", "+")).strip('_')
		if len(slug) > MAX_SLUG_LEN:
			# Keep truncated slugs distinct for targets sharing a long prefix.
			digest = hashlib.sha1(v.encode("utf-8")).hexdigest()[:8]
			slug = f"{slug[:MAX_SLUG_LEN - 9]}-{digest}"
		return slug or "default"


__all__ = ["RunParams"]
