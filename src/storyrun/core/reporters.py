from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

import typer

from storyrun.core.model import MissingStepSkeleton
from storyrun.core.observer import Notification, Status


class Reporter(ABC):
    """Observer that dispatches each notification to the method named after its status."""

    def update(self, notification: Notification) -> None:
        handler = getattr(self, notification.status.value)
        handler(notification.lines, notification.error)

    @abstractmethod
    def feature_text(self, text: list[Any], error: str) -> None: ...

    @abstractmethod
    def scenario_text(self, text: list[Any], error: str) -> None: ...

    @abstractmethod
    def step_passed(self, text: list[Any], error: str) -> None: ...

    @abstractmethod
    def step_failed(self, text: list[Any], error: str) -> None: ...

    @abstractmethod
    def step_skipped(self, text: list[Any], error: str) -> None: ...

    @abstractmethod
    def step_missing(self, text: list[Any], error: str) -> None: ...

    @abstractmethod
    def step_pending(self, text: list[Any], error: str) -> None: ...

    @abstractmethod
    def run_done(self, text: list[Any], error: str) -> None:
        """Summary lines, then the missing-step header and skeletons when there are any."""

    @abstractmethod
    def run_failed(self, text: list[Any], error: str) -> None: ...


def render_skeleton(skeleton: MissingStepSkeleton) -> list[str]:
    return [
        f"@steps.step({skeleton.pattern!r})",
        "def _(context):",
        "    return PENDING",
    ]


class ConsoleReporter(Reporter):
    def __init__(self, echo: Callable[[str], None] = typer.echo) -> None:
        self._echo = echo

    def _output(self, text: Any, indent: int = 0) -> None:
        lines = text if isinstance(text, list) else [text]
        leading_space = " " * (indent * 2)
        for line in lines:
            if isinstance(line, list):
                self._output(line, indent)
            elif isinstance(line, MissingStepSkeleton):
                self._output(render_skeleton(line) + [""], indent)
            else:
                self._echo(f"{leading_space}{line}" if line else "")

    def feature_text(self, text: list[Any], error: str) -> None:
        self._output(["", *text])

    def scenario_text(self, text: list[Any], error: str) -> None:
        self._output(["", *text], 1)

    def step_passed(self, text: list[Any], error: str) -> None:
        self._output(text[0], 2)

    def step_failed(self, text: list[Any], error: str) -> None:
        self._output(["", f"[failed] {text[0]}", error, ""], 2)

    def step_skipped(self, text: list[Any], error: str) -> None:
        self._output(f"[skipped] {text[0]}", 2)

    def step_missing(self, text: list[Any], error: str) -> None:
        self._output(f"[missing] {text[0]}", 2)

    def step_pending(self, text: list[Any], error: str) -> None:
        self._output(f"[pending] {text[0]}", 2)

    def run_done(self, text: list[Any], error: str) -> None:
        self._output(["", *text])

    def run_failed(self, text: list[Any], error: str) -> None:
        self._output(f"Bailing: {error}")


class RecordingReporter(Reporter):
    """Keeps every notification; backs `--json` output and tests."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def update(self, notification: Notification) -> None:
        self.notifications.append(notification)
        super().update(notification)

    def statuses(self) -> list[Status]:
        return [n.status for n in self.notifications]

    def _noop(self, text: list[Any], error: str) -> None:
        return None

    feature_text = scenario_text = _noop
    step_passed = step_failed = step_skipped = step_missing = step_pending = _noop
    run_done = run_failed = _noop

    def features(self) -> list[dict[str, Any]]:
        """Group step notifications under the feature and scenario they ran in."""
        features: list[dict[str, Any]] = []
        scenario: dict[str, Any] | None = None
        for n in self.notifications:
            if n.status is Status.FEATURE_TEXT:
                lines = n.lines
                features.append({"name": lines[0] if lines else "", "scenarios": []})
                scenario = None
            elif n.status is Status.SCENARIO_TEXT and features:
                lines = n.lines
                scenario = {"name": lines[0] if lines else "", "steps": []}
                features[-1]["scenarios"].append(scenario)
            elif n.status.value.startswith("step_") and scenario is not None:
                entry: dict[str, Any] = {"text": n.lines[0], "status": n.status.value.removeprefix("step_")}
                if n.error:
                    entry["error"] = n.error
                scenario["steps"].append(entry)
        return features
