from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import typer

from storyrun import __version__
from storyrun.core import (
    clock,
    config as config_core,
    discovery,
    envelope,
    ids,
    parser,
)
from storyrun.core.engine import StoryRunner
from storyrun.core.errors import NoFeatureFilesError, ParseError, StepLoadError
from storyrun.core.jsonio import dumps
from storyrun.core.model import Context
from storyrun.core.reporters import ConsoleReporter, RecordingReporter

app = typer.Typer(add_completion=False, help="storyrun - plain-text feature stories, executed against Python step definitions")


def _emit(out: dict, exit_code: int | None = None) -> None:
    typer.echo(dumps(out))
    if exit_code is None:
        exit_code = 0 if out.get("ok") is True else 1
    raise typer.Exit(code=exit_code)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _resolve_dir(
    *,
    cli_value: str | None,
    default: Path,
    env_key: str,
    config_key: str,
) -> Path:
    if cli_value:
        return Path(cli_value).expanduser()
    config_value = config_core.get_config_value("run", config_key)
    if isinstance(config_value, str) and config_value.strip():
        return Path(config_value).expanduser()
    env_value = os.environ.get(env_key)
    return Path(env_value).expanduser() if env_value else default


def _build_context(assignments: list[str] | None) -> Context:
    fields = config_core.context_defaults()
    for assignment in assignments or []:
        key, sep, value = assignment.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid --set value {assignment!r} (expected KEY=VALUE)")
        fields[key.strip()] = value
    return Context(**fields)


# ---- Global commands ----
@app.command()
def version(json_output: bool = typer.Option(False, "--json", help="Output JSON envelope")):
    if json_output:
        _emit(envelope.ok(command="version", data={"version": __version__}))
    typer.echo(f"storyrun {__version__}")


@app.command()
def run(
    features: str | None = typer.Option(None, "--features", help="Directory holding *.feature files"),
    steps: str | None = typer.Option(None, "--steps", help="Directory holding step definition modules"),
    assignments: list[str] | None = typer.Option(None, "--set", help="Initial context field, KEY=VALUE"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON envelope"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Run every feature in the features directory against the step definitions."""
    _configure_logging(verbose)
    started_at = clock.now_utc()
    try:
        features_dir = _resolve_dir(
            cli_value=features,
            default=discovery.DEFAULT_FEATURES_DIR,
            env_key="STORYRUN_FEATURES_DIR",
            config_key="features_dir",
        )
        steps_dir = _resolve_dir(
            cli_value=steps,
            default=discovery.DEFAULT_STEPS_DIR,
            env_key="STORYRUN_STEPS_DIR",
            config_key="steps_dir",
        )
        context = _build_context(assignments)
    except ValueError as exc:
        if json_output:
            _emit(envelope.err(command="run", error_type="INVALID_ARGUMENT", message=str(exc)))
        typer.echo(f"Bailing: {exc}", err=True)
        raise typer.Exit(code=1)

    recorder = RecordingReporter()
    runner = StoryRunner([recorder] if json_output else [ConsoleReporter()])
    try:
        result = runner.run_directory(context, features_dir, steps_dir)
    except StepLoadError as exc:
        if json_output:
            _emit(
                envelope.err(
                    command="run",
                    error_type="STEP_LOAD_FAILED",
                    message=str(exc),
                    details={"path": str(exc.path), "steps_dir": str(steps_dir)},
                )
            )
        typer.echo(f"Bailing: {exc}", err=True)
        raise typer.Exit(code=1)

    exit_code = 0 if result.success else 1
    if not json_output:
        raise typer.Exit(code=exit_code)

    failure = runner.failure
    if failure is not None:
        details: dict[str, object] = {"features_dir": str(features_dir)}
        error_type = "NO_FEATURE_FILES"
        if isinstance(failure, ParseError):
            error_type = "PARSE_ERROR"
            details.update({"path": str(failure.path), "line": failure.line, "line_no": failure.line_no})
        _emit(envelope.err(command="run", error_type=error_type, message=result.error, details=details))

    out = envelope.ok(
        command="run",
        data={
            "run_id": ids.run_id_ulid(),
            "started_at": started_at.isoformat(),
            "success": result.success,
            "results": result.to_dict(),
            "summary": result.summary_lines(),
            "features": recorder.features(),
            "missing_steps": [skeleton.to_dict() for skeleton in result.missing_steps.values()],
        },
        limits={"features_dir": str(features_dir), "steps_dir": str(steps_dir)},
    )
    _emit(out, exit_code)


@app.command()
def parse(
    features: str | None = typer.Option(None, "--features", help="Directory holding *.feature files"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON envelope"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Parse every feature file without running anything."""
    _configure_logging(verbose)
    features_dir = _resolve_dir(
        cli_value=features,
        default=discovery.DEFAULT_FEATURES_DIR,
        env_key="STORYRUN_FEATURES_DIR",
        config_key="features_dir",
    )
    try:
        parsed = [parser.parse_file(path) for path in discovery.find_feature_files(features_dir)]
    except NoFeatureFilesError as exc:
        out = envelope.err(
            command="parse",
            error_type="NO_FEATURE_FILES",
            message=str(exc),
            details={"features_dir": str(features_dir)},
        )
    except ParseError as exc:
        out = envelope.err(
            command="parse",
            error_type="PARSE_ERROR",
            message=str(exc),
            details={"path": str(exc.path), "line": exc.line, "line_no": exc.line_no},
        )
    else:
        out = envelope.ok(command="parse", data={"features": [feature.to_dict() for feature in parsed]})

    if json_output:
        _emit(out)
    if out["ok"] is not True:
        typer.echo(f"Bailing: {out['error']['message']}", err=True)
        raise typer.Exit(code=1)
    for feature in parsed:
        scenario_count = len(feature.scenarios)
        step_count = sum(len(scenario.steps) for scenario in feature.scenarios)
        typer.echo(f"{feature.path}: {feature.name} ({scenario_count} scenarios, {step_count} steps)")


if __name__ == "__main__":
    app()
