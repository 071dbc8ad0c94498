from __future__ import annotations

import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType

from storyrun.core import ids
from storyrun.core.errors import NoFeatureFilesError, StepLoadError
from storyrun.core.steps import StepLibrary

logger = logging.getLogger(__name__)

DEFAULT_FEATURES_DIR = Path("features")
DEFAULT_STEPS_DIR = Path("features") / "steps"


def find_feature_files(directory: str | Path) -> list[Path]:
    directory = Path(directory)
    files = sorted(directory.glob("*.feature")) if directory.is_dir() else []
    if not files:
        raise NoFeatureFilesError(directory)
    return files


def find_step_files(directory: str | Path) -> list[Path]:
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning("steps directory not found: %s", directory)
        return []
    return sorted(p for p in directory.glob("*.py") if not p.name.startswith("_"))


def _import_step_module(path: Path) -> ModuleType:
    module_name = f"_storyrun_steps_{ids.module_key(path=str(path.resolve()))}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise StepLoadError(path, "not an importable Python file")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(module_name, None)
        raise StepLoadError(path, f"{type(exc).__name__}: {exc}") from exc
    return module


def libraries_in(module: ModuleType) -> list[StepLibrary]:
    found: list[StepLibrary] = []
    for value in vars(module).values():
        if isinstance(value, StepLibrary) and not any(value is lib for lib in found):
            found.append(value)
    return found


def load_step_providers(directory: str | Path) -> list[StepLibrary]:
    """Import every step module in `directory` and collect its `StepLibrary` objects.

    Modules load in file-name order; a library shared between modules is
    only registered once.
    """
    providers: list[StepLibrary] = []
    for path in find_step_files(directory):
        module = _import_step_module(path)
        libraries = libraries_in(module)
        if not libraries:
            logger.warning("no StepLibrary defined in %s", path)
        for library in libraries:
            if not any(library is existing for existing in providers):
                providers.append(library)
        logger.debug("loaded %d step library(ies) from %s", len(libraries), path)
    return providers
