import pytest

from xpp_runner.utils.paths import ensure_within, first_existing_dir, reset_file


def test_ensure_within(tmp_path):
	base = tmp_path / "base"
	child = base / "compile" / "MyModel"
	# path may not exist; ensure_within should still allow
	assert ensure_within(base, child) == child


def test_ensure_within_raises(tmp_path):
	base = tmp_path / "base"
	outside = tmp_path.parent / "other"
	with pytest.raises(ValueError):
		ensure_within(base, outside)


def test_first_existing_dir(tmp_path):
	present = tmp_path / "b"
	present.mkdir()
	(tmp_path / "file").write_text("")
	candidates = [tmp_path / "a", tmp_path / "file", present]
	assert first_existing_dir(candidates) == present
	assert first_existing_dir([tmp_path / "a"]) is None


def test_reset_file(tmp_path):
	stale = tmp_path / "results.xml"
	stale.write_text("<old/>")
	reset_file(stale)
	assert not stale.exists()
	reset_file(stale)
	reset_file(None)
