from __future__ import annotations

from pathlib import Path


class StoryRunError(Exception):
    """Base class for errors that stop a run before it completes."""


class ParseError(StoryRunError):
    def __init__(
        self,
        line: str,
        *,
        line_no: int | None = None,
        path: Path | str | None = None,
        reason: str | None = None,
    ) -> None:
        where = str(path) if path is not None else "<string>"
        message = f"{reason} in {where}" if reason else f"can't understand {where}: {line}"
        super().__init__(message)
        self.line = line
        self.line_no = line_no
        self.path = path


class NoFeatureFilesError(StoryRunError):
    def __init__(self, directory: Path | str | None = None) -> None:
        super().__init__(f"No .feature files in {directory}" if directory is not None else "No .feature files to run")
        self.directory = directory


class StepLoadError(StoryRunError):
    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"Failed to load step definitions from {path}: {reason}")
        self.path = path
        self.reason = reason
