from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import SimpleNamespace
from typing import Any


@dataclass(frozen=True)
class Step:
    line: str
    text: str


@dataclass
class Scenario:
    description: list[str]
    # Keyed by the literal step line; repeating a line within a scenario keeps the first entry only.
    steps: dict[str, Step] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.description[0] if self.description else ""

    def add_step(self, step: Step) -> None:
        self.steps.setdefault(step.line, step)


@dataclass
class Feature:
    description: list[str]
    scenarios: list[Scenario] = field(default_factory=list)
    path: Path | None = None

    @property
    def name(self) -> str:
        return self.description[0] if self.description else ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path) if self.path is not None else None,
            "name": self.name,
            "description": list(self.description),
            "scenarios": [
                {"name": scenario.name, "steps": list(scenario.steps)}
                for scenario in self.scenarios
            ],
        }


class StepStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    MISSING = "missing"
    PENDING = "pending"


class RunStatus(str, Enum):
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class MissingStepSkeleton:
    skeleton_id: str
    pattern: str
    placeholders: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.skeleton_id, "pattern": self.pattern, "placeholders": list(self.placeholders)}


class Context(SimpleNamespace):
    """Attribute bag handed to every step action.

    Placeholder bindings whose names are not identifiers (``"3"``) are
    reachable with ``context["3"]``.
    """

    def __getitem__(self, name: str) -> Any:
        try:
            return getattr(self, name)
        except AttributeError:
            raise KeyError(name) from None

    def __setitem__(self, name: str, value: Any) -> None:
        setattr(self, name, value)

    def __contains__(self, name: str) -> bool:
        return hasattr(self, name)


@dataclass
class RunResult:
    features: dict[str, int] = field(default_factory=lambda: {"passed": 0, "failed": 0})
    scenarios: dict[str, int] = field(default_factory=lambda: {"passed": 0, "failed": 0, "skipped": 0})
    steps: dict[str, int] = field(
        default_factory=lambda: {"passed": 0, "failed": 0, "skipped": 0, "missing": 0, "pending": 0}
    )
    status: RunStatus | None = None
    error: str = ""
    missing_steps: dict[str, MissingStepSkeleton] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.status is RunStatus.DONE and self.steps["failed"] == 0 and self.steps["missing"] == 0

    def summary_lines(self) -> list[str]:
        features, scenarios, steps = self.features, self.scenarios, self.steps
        return [
            "Features:  %d ran, %d passed, %d failed."
            % (features["passed"] + features["failed"], features["passed"], features["failed"]),
            "Scenarios: %d ran, %d passed, %d failed, %d skipped."
            % (scenarios["passed"] + scenarios["failed"], scenarios["passed"], scenarios["failed"], scenarios["skipped"]),
            "Steps:     %d ran, %d passed, %d failed, %d skipped, %d pending, %d missing."
            % (
                steps["passed"] + steps["failed"],
                steps["passed"],
                steps["failed"],
                steps["skipped"],
                steps["pending"],
                steps["missing"],
            ),
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "features": dict(self.features),
            "scenarios": dict(self.scenarios),
            "steps": dict(self.steps),
        }
