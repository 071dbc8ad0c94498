import json
import os
import shutil
import subprocess
import sys
from pathlib import Path

PROJECTS = Path(__file__).resolve().parents[1] / "fixtures" / "projects"


def _project(tmp_path: Path, name: str) -> Path:
    target = tmp_path / name
    shutil.copytree(PROJECTS / name, target)
    return target


def _run(cwd: Path, *args: str, env: dict[str, str] | None = None) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-m", "storyrun.cli", *args],
        cwd=cwd,
        env=env,
        capture_output=True,
        text=True,
    )


def test_console_output_for_passing_project(tmp_path):
    project = _project(tmp_path, "passing")
    p = _run(project, "run")
    assert p.returncode == 0, p.stderr
    lines = p.stdout.splitlines()
    assert "Feature: Counting apples" in lines
    assert "  Scenario: Adding apples to the basket" in lines
    assert '    Given I have "3" apples' in lines
    assert lines[-3:] == [
        "Features:  1 ran, 1 passed, 0 failed.",
        "Scenarios: 2 ran, 2 passed, 0 failed, 0 skipped.",
        "Steps:     5 ran, 5 passed, 0 failed, 0 skipped, 0 pending, 0 missing.",
    ]


def test_console_output_for_mixed_project(tmp_path):
    project = _project(tmp_path, "mixed")
    p = _run(project, "run")
    assert p.returncode == 1
    out = p.stdout
    assert '    [failed] Then "2" plates are left dirty' in out
    assert "wrong number of dirty plates" in out
    assert "    [skipped] And the kitchen is tidy" in out
    assert "    [pending] When I dry the plates" in out
    assert "    [missing] Given the floor is wet" in out
    assert "Add the following to your steps definitions to implement missing steps:" in out
    assert out.count("@steps.step('the floor is wet')") == 1
    assert "@steps.step('I mop \"arg1\"')" in out
    assert "Steps:     4 ran, 3 passed, 1 failed, 2 skipped, 1 pending, 3 missing." in out


def test_json_output_for_mixed_project(tmp_path):
    project = _project(tmp_path, "mixed")
    p = _run(project, "run", "--json")
    assert p.returncode == 1
    out = json.loads(p.stdout)
    assert out["ok"] is True
    data = out["data"]
    assert data["success"] is False
    assert data["results"] == {
        "features": {"passed": 0, "failed": 1},
        "scenarios": {"passed": 0, "failed": 1, "skipped": 1},
        "steps": {"passed": 3, "failed": 1, "skipped": 2, "missing": 3, "pending": 1},
    }
    patterns = [skeleton["pattern"] for skeleton in data["missing_steps"]]
    assert patterns == ["the floor is wet", 'I mop "arg1"']
    washing = data["features"][0]["scenarios"][0]
    assert [step["status"] for step in washing["steps"]] == ["passed", "passed", "failed", "skipped"]


def test_started_at_uses_clock_override(tmp_path):
    project = _project(tmp_path, "passing")
    env = os.environ.copy()
    env["STORYRUN_TEST_NOW_ISO"] = "2025-01-02T03:04:05+00:00"
    out = json.loads(_run(project, "run", "--json", env=env).stdout)
    assert out["data"]["started_at"] == "2025-01-02T03:04:05+00:00"


def test_set_populates_context(tmp_path):
    project = tmp_path / "ctx"
    steps = project / "features" / "steps"
    steps.mkdir(parents=True)
    (project / "features" / "greet.feature").write_text(
        'Feature: Greeting\n  Scenario: Hello\n    Then the greeting is "hello"\n', encoding="utf-8"
    )
    (steps / "greet_steps.py").write_text(
        "from storyrun import StepLibrary\n"
        "steps = StepLibrary()\n"
        "@steps.then('the greeting is \"expected\"')\n"
        "def _(context):\n"
        "    assert context.greeting == context.expected\n",
        encoding="utf-8",
    )
    assert _run(project, "run", "--set", "greeting=hello").returncode == 0
    assert _run(project, "run", "--set", "greeting=bye").returncode == 1


def test_config_file_supplies_directories_and_context(tmp_path):
    project = _project(tmp_path, "passing")
    config = tmp_path / "config.toml"
    config.write_text(
        f'[run]\nfeatures_dir = "{project / "features"}"\nsteps_dir = "{project / "features" / "steps"}"\n',
        encoding="utf-8",
    )
    env = os.environ.copy()
    env["STORYRUN_CONFIG_PATH"] = str(config)
    p = _run(tmp_path, "run", "--json", env=env)
    assert p.returncode == 0, p.stderr
    assert json.loads(p.stdout)["data"]["results"]["steps"]["passed"] == 5


def test_invalid_set_is_rejected(tmp_path):
    project = _project(tmp_path, "passing")
    p = _run(project, "run", "--set", "novalue", "--json")
    assert p.returncode == 1
    out = json.loads(p.stdout)
    assert out["error"]["type"] == "INVALID_ARGUMENT"


def test_parse_error_in_console_mode_bails(tmp_path):
    project = _project(tmp_path, "broken")
    p = _run(project, "run")
    assert p.returncode == 1
    assert "Bailing: can't understand" in p.stdout
    assert "Because this is not a keyword" in p.stdout
    assert "Features:" not in p.stdout
