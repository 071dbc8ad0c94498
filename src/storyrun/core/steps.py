from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Final, Protocol, Sequence

from storyrun.core.model import StepStatus
from storyrun.core.placeholders import Matcher, compile_pattern

# Returned by a step action that exists but is not implemented yet.
PENDING: Final = StepStatus.PENDING

StepAction = Callable[[Any], Any]


@dataclass(frozen=True)
class StepDefinition:
    pattern: str
    matcher: Matcher
    action: StepAction

    @classmethod
    def create(cls, pattern: str, action: StepAction) -> "StepDefinition":
        return cls(pattern=pattern, matcher=compile_pattern(pattern), action=action)


class StepProvider(Protocol):
    def definitions(self) -> Sequence[StepDefinition]: ...


class StepLibrary:
    """Ordered collection of step definitions, used as a decorator registry.

    Step modules create one library at module level::

        steps = StepLibrary()

        @steps.given('I have "3" apples')
        def _(context):
            context.apples = int(context["3"])

    The keyword aliases all register into the same ordered list; the keyword
    of a step line plays no part in matching.
    """

    def __init__(self, name: str | None = None) -> None:
        self.name = name
        self._definitions: list[StepDefinition] = []

    def add(self, pattern: str, action: StepAction) -> StepDefinition:
        definition = StepDefinition.create(pattern, action)
        self._definitions.append(definition)
        return definition

    def step(self, pattern: str) -> Callable[[StepAction], StepAction]:
        def decorator(func: StepAction) -> StepAction:
            self.add(pattern, func)
            return func

        return decorator

    given = when = then = and_ = but = step

    def definitions(self) -> Sequence[StepDefinition]:
        return tuple(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        return f"<StepLibrary {self.name or ''} definitions={len(self._definitions)}>"
