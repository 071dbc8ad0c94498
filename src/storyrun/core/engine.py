from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Sequence, Union

from storyrun.core import discovery, ids, parser
from storyrun.core.errors import NoFeatureFilesError, StoryRunError
from storyrun.core.matcher import Outcome, match_step
from storyrun.core.model import Feature, MissingStepSkeleton, RunResult, RunStatus, Scenario, StepStatus
from storyrun.core.observer import Observer, Status, Subject
from storyrun.core.placeholders import generalize
from storyrun.core.steps import StepProvider

logger = logging.getLogger(__name__)

FeatureSource = Union[str, Path, Feature]

MISSING_STEPS_HEADER = "Add the following to your steps definitions to implement missing steps:"

_STEP_EVENTS = {
    StepStatus.PASSED: Status.STEP_PASSED,
    StepStatus.FAILED: Status.STEP_FAILED,
    StepStatus.SKIPPED: Status.STEP_SKIPPED,
    StepStatus.MISSING: Status.STEP_MISSING,
    StepStatus.PENDING: Status.STEP_PENDING,
}

# A scenario stops trying to match once one of its steps ends in one of these.
_CASCADING = {StepStatus.FAILED, StepStatus.PENDING, StepStatus.SKIPPED}


class StoryRunner(Subject):
    """Runs parsed features against step providers and pushes progress to observers.

    A runner holds the counters of a single run; create a new one per run.
    """

    def __init__(self, observers: Iterable[Observer] = ()) -> None:
        super().__init__()
        for observer in observers:
            self.attach(observer)
        self.result = RunResult()
        self.failure: StoryRunError | None = None
        self._step_status: StepStatus | None = None

    def run(
        self,
        context: object,
        feature_sources: Sequence[FeatureSource],
        providers: Sequence[StepProvider],
    ) -> RunResult:
        try:
            if not feature_sources:
                raise NoFeatureFilesError()
            for source in feature_sources:
                feature = source if isinstance(source, Feature) else parser.parse_file(source)
                self.run_feature(feature, context, providers)
        except StoryRunError as exc:
            return self._abort(exc)
        self.result.status = RunStatus.DONE
        self.emit(Status.RUN_DONE, self.result.summary_lines())
        self._notify_missing_steps()
        return self.result

    def run_directory(
        self,
        context: object,
        features_dir: str | Path = discovery.DEFAULT_FEATURES_DIR,
        steps_dir: str | Path = discovery.DEFAULT_STEPS_DIR,
    ) -> RunResult:
        """Load step modules from `steps_dir`, then run every feature file in `features_dir`.

        A step module that fails to import raises `StepLoadError` before
        anything runs. An empty feature directory ends the run as failed.
        """
        providers = discovery.load_step_providers(steps_dir)
        try:
            sources: list[FeatureSource] = list(discovery.find_feature_files(features_dir))
        except NoFeatureFilesError as exc:
            return self._abort(exc)
        return self.run(context, sources, providers)

    def _abort(self, exc: StoryRunError) -> RunResult:
        logger.warning("run aborted: %s", exc)
        self.failure = exc
        self.result.status = RunStatus.FAILED
        self.result.error = str(exc)
        self.emit(Status.RUN_FAILED, error=str(exc))
        return self.result

    def run_feature(self, feature: Feature, context: object, providers: Sequence[StepProvider]) -> bool:
        logger.info("feature %s (%s)", feature.name, feature.path or "<string>")
        self.emit(Status.FEATURE_TEXT, list(feature.description))
        scenarios_passed = 0
        for scenario in feature.scenarios:
            if self.run_scenario(scenario, context, providers):
                scenarios_passed += 1
        # Failed features are only counted by the assertion-failure handler.
        passed = scenarios_passed == len(feature.scenarios)
        if passed:
            self.result.features["passed"] += 1
        return passed

    def run_scenario(self, scenario: Scenario, context: object, providers: Sequence[StepProvider]) -> bool:
        self.emit(Status.SCENARIO_TEXT, list(scenario.description))
        self._step_status = None
        steps_passed = 0
        for step in scenario.steps.values():
            error = ""
            if self._step_status in _CASCADING:
                self.result.steps["skipped"] += 1
                self._step_status = StepStatus.SKIPPED
            else:
                outcome = match_step(step.text, context, providers)
                if outcome.kind is Outcome.PENDING:
                    self.result.steps["pending"] += 1
                    self.result.scenarios["skipped"] += 1
                    self._step_status = StepStatus.PENDING
                elif outcome.kind is Outcome.SUCCESS:
                    self.result.steps["passed"] += 1
                    self._step_status = StepStatus.PASSED
                    steps_passed += 1
                elif outcome.kind is Outcome.FAILED:
                    error = outcome.error
                    self._record_failure()
                else:
                    self.result.steps["missing"] += 1
                    self._step_status = StepStatus.MISSING
                    self._define_missing_step(step.text)
            logger.debug("step %r: %s", step.line, self._step_status.value)
            self.emit(_STEP_EVENTS[self._step_status], step.line, error)
        passed = steps_passed == len(scenario.steps)
        if passed:
            self.result.scenarios["passed"] += 1
        return passed

    def _record_failure(self) -> None:
        """Count a failed step.

        Every failure bumps the step, scenario and feature failure counters
        once each, so a scenario or feature with several failing steps is
        counted several times.
        """
        self.result.steps["failed"] += 1
        self.result.scenarios["failed"] += 1
        self.result.features["failed"] += 1
        self._step_status = StepStatus.FAILED

    def _define_missing_step(self, text: str) -> MissingStepSkeleton:
        pattern, names = generalize(text)
        skeleton = MissingStepSkeleton(skeleton_id=ids.skeleton_id(pattern=pattern), pattern=pattern, placeholders=names)
        return self.result.missing_steps.setdefault(skeleton.skeleton_id, skeleton)

    def _notify_missing_steps(self) -> None:
        if self.result.status is not RunStatus.DONE or not self.result.missing_steps:
            return
        self.emit(Status.RUN_DONE, MISSING_STEPS_HEADER)
        self.emit(Status.RUN_DONE, list(self.result.missing_steps.values()))


def run(
    context: object,
    feature_sources: Sequence[FeatureSource],
    providers: Sequence[StepProvider],
    observers: Iterable[Observer] = (),
) -> RunResult:
    return StoryRunner(observers).run(context, feature_sources, providers)
