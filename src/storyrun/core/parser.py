from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from storyrun.core.errors import ParseError
from storyrun.core.model import Feature, Scenario, Step

logger = logging.getLogger(__name__)

_FEATURE_RE = re.compile(r"^Feature:", re.IGNORECASE)
_SCENARIO_RE = re.compile(r"^Scenario:", re.IGNORECASE)
_STEP_RE = re.compile(r"^(given|when|then|and|but)\s*(.*)$", re.IGNORECASE)


class _State(Enum):
    START = "start"
    IN_FEATURE_HEADER = "in_feature_header"
    IN_SCENARIO = "in_scenario"


@dataclass
class _ParseState:
    state: _State = _State.START
    feature: Feature | None = None
    scenario: Scenario | None = None


def _parse_line(line: str, st: _ParseState, *, line_no: int, path: Path | None) -> None:
    if _FEATURE_RE.match(line):
        # A repeated header extends the feature already open in this file.
        if st.feature is None:
            st.feature = Feature(description=[line], path=path)
        else:
            st.feature.description.append(line)
        st.scenario = None
        st.state = _State.IN_FEATURE_HEADER
    elif st.feature is not None and _SCENARIO_RE.match(line):
        st.scenario = Scenario(description=[line])
        st.feature.scenarios.append(st.scenario)
        st.state = _State.IN_SCENARIO
    elif st.state is _State.IN_FEATURE_HEADER and st.feature is not None:
        st.feature.description.append(f"  {line}")
    elif st.state is _State.IN_SCENARIO and st.scenario is not None and _STEP_RE.match(line):
        m = _STEP_RE.match(line)
        st.scenario.add_step(Step(line=line, text=m.group(2)))
    else:
        raise ParseError(line, line_no=line_no, path=path)


def parse(text: str, path: Path | None = None) -> Feature:
    """Parse one feature file's text into a `Feature`.

    Blank lines are skipped; every other line is stripped and classified.
    Raises `ParseError` on the first line that fits none of the grammar rules.
    """
    st = _ParseState()
    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue
        _parse_line(line, st, line_no=line_no, path=path)
    if st.feature is None:
        raise ParseError("", path=path, reason="no Feature: header")
    logger.debug("parsed %s: %d scenario(s)", path or "<string>", len(st.feature.scenarios))
    return st.feature


def parse_file(path: str | Path) -> Feature:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError("", path=path, reason=f"unreadable feature file ({exc})") from exc
    return parse(text, path=path)
