from __future__ import annotations

from storyrun.core.engine import StoryRunner, run
from storyrun.core.errors import NoFeatureFilesError, ParseError, StepLoadError, StoryRunError
from storyrun.core.model import Context, Feature, RunResult, Scenario, Step
from storyrun.core.observer import Notification, Observer, Status
from storyrun.core.parser import parse, parse_file
from storyrun.core.reporters import ConsoleReporter, RecordingReporter, Reporter
from storyrun.core.steps import PENDING, StepDefinition, StepLibrary, StepProvider

__version__ = "0.1.0"

__all__ = [
    "PENDING",
    "ConsoleReporter",
    "Context",
    "Feature",
    "NoFeatureFilesError",
    "Notification",
    "Observer",
    "ParseError",
    "RecordingReporter",
    "Reporter",
    "RunResult",
    "Scenario",
    "Status",
    "Step",
    "StepDefinition",
    "StepLibrary",
    "StepLoadError",
    "StepProvider",
    "StoryRunError",
    "StoryRunner",
    "parse",
    "parse_file",
    "run",
]
