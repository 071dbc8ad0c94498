from __future__ import annotations

from typing import Final

# Error envelopes carry a typed error so callers (CI scripts, editors) can branch without parsing strings.
# Keep this list minimal and grow it only when a new type is actually emitted.
KNOWN_ERROR_TYPES: Final[set[str]] = {
    "INVALID_ARGUMENT",
    "NO_FEATURE_FILES",
    "PARSE_ERROR",
    "STEP_LOAD_FAILED",
}


def assert_known_error_type(error_type: str) -> None:
    if error_type not in KNOWN_ERROR_TYPES:
        raise ValueError(f"Unknown error type: {error_type!r}. Add it to storyrun.core.error_types.KNOWN_ERROR_TYPES.")
