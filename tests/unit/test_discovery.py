from __future__ import annotations

from pathlib import Path

import pytest

from storyrun.core import discovery
from storyrun.core.errors import NoFeatureFilesError, StepLoadError


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_find_feature_files_sorted_and_not_recursive(tmp_path):
    _write(tmp_path / "b.feature", "Feature: b\n")
    _write(tmp_path / "a.feature", "Feature: a\n")
    _write(tmp_path / "nested" / "c.feature", "Feature: c\n")
    _write(tmp_path / "notes.txt", "x\n")

    assert [p.name for p in discovery.find_feature_files(tmp_path)] == ["a.feature", "b.feature"]


def test_find_feature_files_empty_or_missing_dir(tmp_path):
    with pytest.raises(NoFeatureFilesError, match="No .feature files in"):
        discovery.find_feature_files(tmp_path)
    with pytest.raises(NoFeatureFilesError):
        discovery.find_feature_files(tmp_path / "missing")


def test_load_step_providers_in_file_order(tmp_path):
    _write(
        tmp_path / "b_steps.py",
        "from storyrun import StepLibrary\nsecond = StepLibrary('second')\nsecond.add('b', lambda c: None)\n",
    )
    _write(
        tmp_path / "a_steps.py",
        "from storyrun import StepLibrary\nfirst = StepLibrary('first')\nalias = first\nfirst.add('a', lambda c: None)\n",
    )
    _write(tmp_path / "_helpers.py", "raise RuntimeError('never imported')\n")

    providers = discovery.load_step_providers(tmp_path)

    assert [p.name for p in providers] == ["first", "second"]


def test_missing_steps_dir_yields_no_providers(tmp_path):
    assert discovery.load_step_providers(tmp_path / "nope") == []


def test_module_without_library_is_ignored(tmp_path):
    _write(tmp_path / "plain.py", "VALUE = 1\n")
    assert discovery.load_step_providers(tmp_path) == []


def test_broken_step_module_raises_step_load_error(tmp_path):
    path = _write(tmp_path / "broken.py", "raise ValueError('bad module')\n")
    with pytest.raises(StepLoadError) as excinfo:
        discovery.load_step_providers(tmp_path)
    assert excinfo.value.path == path
    assert "ValueError: bad module" in str(excinfo.value)
