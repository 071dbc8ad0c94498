from __future__ import annotations

import hashlib
import re

import ulid

SKELETON_ID_RE = re.compile(r"^sk_[0-9a-f]{12}$")
RUN_ID_RE = re.compile(r"^run_[0-9A-Z]{26}$")


def _hex12(payload: str) -> str:
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()[:12]


def skeleton_id(*, pattern: str) -> str:
    return f"sk_{_hex12(f'skeleton|{pattern}')}"


def module_key(*, path: str) -> str:
    return _hex12(f"module|{path}")


def run_id_ulid() -> str:
    return f"run_{ulid.new()}"


def is_skeleton_id(value: str) -> bool:
    return bool(SKELETON_ID_RE.fullmatch(value))


def is_run_id(value: str) -> bool:
    return bool(RUN_ID_RE.fullmatch(value))
