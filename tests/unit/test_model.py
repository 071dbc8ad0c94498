from __future__ import annotations

import pytest

from storyrun.core.model import Context, RunResult, RunStatus


def test_context_attribute_and_item_access():
    context = Context(user="ann")
    context["3"] = "three"
    assert context.user == "ann"
    assert context["user"] == "ann"
    assert getattr(context, "3") == "three"
    assert "3" in context
    with pytest.raises(KeyError):
        context["missing"]


def test_fresh_result_is_zeroed():
    result = RunResult()
    assert result.to_dict() == {
        "features": {"passed": 0, "failed": 0},
        "scenarios": {"passed": 0, "failed": 0, "skipped": 0},
        "steps": {"passed": 0, "failed": 0, "skipped": 0, "missing": 0, "pending": 0},
    }
    assert result.success is False


def test_success_requires_no_failed_or_missing_steps():
    result = RunResult(status=RunStatus.DONE)
    assert result.success is True
    result.steps["missing"] = 1
    assert result.success is False
