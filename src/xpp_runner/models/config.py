from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_core.core_schema import ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

DEFAULT_PACKAGES_CANDIDATES = [
    r"C:\AosService\PackagesLocalDirectory",
    r"K:\AosService\PackagesLocalDirectory",
    r"J:\AosService\PackagesLocalDirectory",
    r"E:\AosService\PackagesLocalDirectory",
]


def load_env(env_file: str | Path | None = None) -> None:
	"""Load environment variables from an `.env` file if present."""
	env_path = Path(env_file) if env_file else Path(".env")
	if env_path.exists():
		load_dotenv(env_path)


class Config(BaseSettings):
	"""Runtime configuration loaded from environment variables."""

	model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

	packages_dir: str | None = Field(
	    default=None,
	    alias="XPP_PACKAGES_DIR",
	    description="Metadata root (PackagesLocalDirectory). "
	    "If unset, the first existing candidate is used.",
	)
	packages_candidates: Any = Field(
	    default_factory=lambda: list(DEFAULT_PACKAGES_CANDIDATES),
	    alias="XPP_PACKAGES_CANDIDATES",
	    description="Candidate metadata roots searched in order",
	)
	compiler_exe: str = Field(
	    "xppc.exe",
	    alias="XPP_COMPILER_EXE",
	    description="Compiler executable name under <packages>/bin",
	)
	test_runner_exe: str = Field(
	    "SysTestConsole.17.0.exe",
	    alias="XPP_TEST_RUNNER_EXE",
	    description="Test runner executable name under <packages>/bin",
	)
	reference_dir: str | None = Field(
	    default=None,
	    alias="XPP_REFERENCE_DIR",
	    description="Compiler reference folder (default <packages>/bin)",
	)
	output_dir: str = Field("runs", alias="OUTPUT_DIR",
	                        description="Base output directory")
	run_timeout_seconds: float = Field(
	    1200,
	    alias="RUN_TIMEOUT_SECONDS",
	    description="Hard timeout per child process in seconds",
	)
	injection_warmup_seconds: float = Field(
	    5.0,
	    alias="INJECTION_WARMUP_SECONDS",
	    description="Delay before the first synthetic keystroke",
	)
	injection_interval_seconds: float = Field(
	    2.0,
	    alias="INJECTION_INTERVAL_SECONDS",
	    description="Delay between synthetic keystrokes",
	)
	injection_max_attempts: int = Field(
	    15,
	    alias="INJECTION_MAX_ATTEMPTS",
	    description="Maximum synthetic keystrokes per run",
	)
	injection_cancel_grace_seconds: float = Field(
	    3.0,
	    alias="INJECTION_CANCEL_GRACE_SECONDS",
	    description="Bounded wait for the injector to stop after exit",
	)
	prompt_text: str = Field(
	    "Press any key to continue",
	    alias="PROMPT_TEXT",
	    description="Stdout substring that marks the debug-attach prompt",
	)
	prompt_response_delay_seconds: float = Field(
	    0.2,
	    alias="PROMPT_RESPONSE_DELAY_SECONDS",
	    description="Delay between seeing the prompt and answering it",
	)
	relay_join_timeout_seconds: float = Field(
	    5.0,
	    alias="RELAY_JOIN_TIMEOUT_SECONDS",
	    description="Bounded wait for stream pumps after child exit",
	)
	log_level: str = Field("info", alias="LOG_LEVEL",
	                       description="Log level")

	@field_validator("packages_candidates", mode="before")
	@classmethod
	def split_candidates(cls, v: Any) -> list[str]:
		"""Normalize candidates to a list regardless of input format."""
		if v is None or v == "":
			return []
		if isinstance(v, list):
			return v
		if isinstance(v, tuple):
			return list(v)
		# fallback: comma-separated string
		return [p.strip() for p in str(v).split(",") if p.strip()]

	@field_validator("run_timeout_seconds", "injection_interval_seconds",
	                 "injection_max_attempts",
	                 "injection_cancel_grace_seconds",
	                 "relay_join_timeout_seconds")
	@classmethod
	def validate_positive(cls, v: Any, info: "ValidationInfo") -> Any:
		if v is None:
			return v
		if v <= 0:
			raise ValueError(f"{info.field_name} must be > 0")
		return v

	@field_validator("injection_warmup_seconds",
	                 "prompt_response_delay_seconds")
	@classmethod
	def validate_non_negative(cls, v: Any, info: "ValidationInfo") -> Any:
		if v < 0:
			raise ValueError(f"{info.field_name} must be >= 0")
		return v

	@property
	def output_path(self) -> Path:
		"""Return output_dir as Path."""
		return Path(self.output_dir)

	def apply_overrides(self, run_params: "RunParams") -> None:
		"""Apply CLI overrides from RunParams onto this config.

		Only non-None fields in run_params are applied, preserving
		environment-based defaults for anything the user didn't explicitly set.

		Parameters:
			run_params: Validated run parameters with optional overrides.
		"""
		_OVERRIDES: list[tuple[str, str]] = [
			("timeout", "run_timeout_seconds"),
			("output_dir", "output_dir"),
		]
		for param_field, config_field in _OVERRIDES:
			value = getattr(run_params, param_field)
			if value is not None:
				setattr(self, config_field, value)


__all__ = ["Config", "load_env", "DEFAULT_PACKAGES_CANDIDATES"]
