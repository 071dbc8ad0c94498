from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, Union

Text = Union[str, list[Any]]


class Status(str, Enum):
    STEP_PASSED = "step_passed"
    STEP_FAILED = "step_failed"
    STEP_SKIPPED = "step_skipped"
    STEP_MISSING = "step_missing"
    STEP_PENDING = "step_pending"
    FEATURE_TEXT = "feature_text"
    SCENARIO_TEXT = "scenario_text"
    RUN_FAILED = "run_failed"
    RUN_DONE = "run_done"


@dataclass(frozen=True)
class Notification:
    status: Status
    text: Text = ""
    error: str = ""

    @property
    def lines(self) -> list[Any]:
        if isinstance(self.text, str):
            return [self.text] if self.text else []
        return list(self.text)


class Observer(Protocol):
    def update(self, notification: Notification) -> None: ...


class Subject:
    """Push-notification source.

    `text` and `error` are cleared after every `notify()`; `status` persists
    until it is set again.
    """

    def __init__(self) -> None:
        self._observers: list[Observer] = []
        self.status: Status | None = None
        self.text: Text = ""
        self.error: str = ""

    def attach(self, observer: Observer) -> None:
        if not any(existing is observer for existing in self._observers):
            self._observers.append(observer)

    def detach(self, observer: Observer) -> None:
        self._observers = [existing for existing in self._observers if existing is not observer]

    def notify(self) -> None:
        if self.status is None:
            raise RuntimeError("notify() called before a status was set")
        notification = Notification(status=self.status, text=self.text, error=self.error)
        for observer in self._observers:
            observer.update(notification)
        self.text = ""
        self.error = ""

    def emit(self, status: Status, text: Text = "", error: str = "") -> None:
        self.status = status
        self.text = text
        self.error = error
        self.notify()
