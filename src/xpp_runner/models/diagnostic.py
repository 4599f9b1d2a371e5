"""
Compiler diagnostic models.

Defines the Diagnostic record parsed from the compiler's XML log and the
CompileLog container that buckets diagnostics by severity.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
	"""Diagnostic severity as reported by the compiler."""

	ERROR = "Error"
	WARNING = "Warning"
	INFORMATIONAL = "Informational"

	@classmethod
	def from_text(cls, value: str | None) -> Severity:
		"""Map a raw severity string; anything unknown is informational.

		Matching is case-sensitive: only ``Error`` and ``Warning`` are
		recognised.
		"""
		if value == cls.ERROR.value:
			return cls.ERROR
		if value == cls.WARNING.value:
			return cls.WARNING
		return cls.INFORMATIONAL


class Diagnostic(BaseModel):
	"""A single compiler diagnostic."""

	model_config = ConfigDict(frozen=True)

	severity: Severity
	path: str = Field(default="", description="Dotted path identifier")
	message: str = ""
	line: int = 0
	column: int = 0
	end_line: int = 0
	end_column: int = 0
	element_type: str | None = None
	rule: str | None = Field(default=None,
	                         description="Rule or moniker name, if any")
	diagnostic_type: str | None = Field(
	    default=None, description="Type tag of the diagnostic entry")

	@property
	def location(self) -> str:
		"""Return ``path(line,column)`` for display."""
		return f"{self.path}({self.line},{self.column})"


class CompileLog(BaseModel):
	"""All diagnostics parsed from one compiler XML log."""

	diagnostics: list[Diagnostic] = Field(default_factory=list)

	def _count(self, severity: Severity) -> int:
		return sum(1 for d in self.diagnostics if d.severity is severity)

	@property
	def errors(self) -> int:
		return self._count(Severity.ERROR)

	@property
	def warnings(self) -> int:
		return self._count(Severity.WARNING)

	@property
	def informational(self) -> int:
		return self._count(Severity.INFORMATIONAL)

	@property
	def error_diagnostics(self) -> list[Diagnostic]:
		"""Return Error-severity diagnostics in document order."""
		return [d for d in self.diagnostics if d.severity is Severity.ERROR]

	@property
	def failed(self) -> bool:
		return self.errors > 0


__all__ = ["Severity", "Diagnostic", "CompileLog"]
