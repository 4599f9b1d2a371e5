import pytest

from xpp_runner.models.config import (
    Config,
    DEFAULT_PACKAGES_CANDIDATES,
    load_env,
)
from xpp_runner.models.run_params import RunParams


def test_defaults():
	cfg = Config()
	assert cfg.compiler_exe == "xppc.exe"
	assert cfg.test_runner_exe == "SysTestConsole.17.0.exe"
	assert cfg.run_timeout_seconds == 1200
	assert cfg.injection_warmup_seconds == 5.0
	assert cfg.injection_interval_seconds == 2.0
	assert cfg.injection_max_attempts == 15
	assert cfg.relay_join_timeout_seconds == 5.0
	assert cfg.prompt_text == "Press any key to continue"
	assert cfg.packages_candidates == DEFAULT_PACKAGES_CANDIDATES


def test_packages_candidates_parsing():
	cfg = Config(XPP_PACKAGES_CANDIDATES="C:\\a , D:\\b,,")
	assert cfg.packages_candidates == ["C:\\a", "D:\\b"]


def test_env_variables_are_read(monkeypatch):
	monkeypatch.setenv("RUN_TIMEOUT_SECONDS", "30")
	monkeypatch.setenv("XPP_COMPILER_EXE", "xppc2.exe")
	cfg = Config()
	assert cfg.run_timeout_seconds == 30
	assert cfg.compiler_exe == "xppc2.exe"


def test_load_env_file(tmp_path, monkeypatch):
	monkeypatch.delenv("INJECTION_MAX_ATTEMPTS", raising=False)
	env_file = tmp_path / ".env"
	env_file.write_text("INJECTION_MAX_ATTEMPTS=7\n")
	load_env(env_file)
	try:
		assert Config().injection_max_attempts == 7
	finally:
		monkeypatch.delenv("INJECTION_MAX_ATTEMPTS", raising=False)


def test_timeout_rejects_zero():
	with pytest.raises(ValueError):
		Config(RUN_TIMEOUT_SECONDS=0)


def test_warmup_rejects_negative():
	with pytest.raises(ValueError):
		Config(INJECTION_WARMUP_SECONDS=-1)


def test_apply_overrides():
	cfg = Config()
	cfg.apply_overrides(
	    RunParams(targets=["MyModel"], timeout=90, output_dir="out"))
	assert cfg.run_timeout_seconds == 90
	assert cfg.output_dir == "out"


def test_apply_overrides_none_preserves_values():
	cfg = Config(RUN_TIMEOUT_SECONDS=300, OUTPUT_DIR="builds")
	cfg.apply_overrides(RunParams(targets=["MyModel"]))
	assert cfg.run_timeout_seconds == 300
	assert str(cfg.output_path) == "builds"
