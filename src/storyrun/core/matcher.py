from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from storyrun.core.steps import PENDING, StepDefinition, StepProvider

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    SUCCESS = "success"
    PENDING = "pending"
    NOT_MATCHED = "not_matched"
    FAILED = "failed"


@dataclass(frozen=True)
class StepOutcome:
    kind: Outcome
    error: str = ""
    definition: StepDefinition | None = None


def _failure_message(exc: BaseException) -> str:
    frames = traceback.extract_tb(exc.__traceback__)
    if not frames:
        return f"{type(exc).__name__}: {exc}"
    frame = frames[-1]
    if isinstance(exc, AssertionError):
        message = f"Failed assertion on line {frame.lineno} of {frame.filename}: {frame.line or ''}".rstrip()
        detail = str(exc)
        return f"{message} ({detail})" if detail else message
    return f"{type(exc).__name__} on line {frame.lineno} of {frame.filename}: {exc}"


def _execute(definition: StepDefinition, context: object) -> StepOutcome:
    try:
        returned = definition.action(context)
    except AssertionError as exc:
        return StepOutcome(Outcome.FAILED, _failure_message(exc), definition)
    except Exception as exc:
        logger.debug("step action %r raised", definition.pattern, exc_info=True)
        return StepOutcome(Outcome.FAILED, _failure_message(exc), definition)
    if isinstance(returned, str) and returned == PENDING:
        return StepOutcome(Outcome.PENDING, definition=definition)
    return StepOutcome(Outcome.SUCCESS, definition=definition)


def match_step(text: str, context: object, providers: Sequence[StepProvider]) -> StepOutcome:
    """Run the first step definition whose pattern matches `text`.

    Providers are tried in order, and each provider's definitions in
    declaration order. Placeholder values are bound on `context` before the
    action runs; a context that rejects them fails the step.
    """
    for provider in providers:
        for definition in provider.definitions():
            try:
                matched = definition.matcher.bind(text, context)
            except (AttributeError, TypeError) as exc:
                message = f"Cannot bind placeholders of {definition.pattern!r} on {type(context).__name__}: {exc}"
                return StepOutcome(Outcome.FAILED, message, definition)
            if matched:
                logger.debug("step %r matched %r", text, definition.pattern)
                return _execute(definition, context)
    return StepOutcome(Outcome.NOT_MATCHED)
