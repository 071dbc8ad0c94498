from __future__ import annotations

import functools
import re
from dataclasses import dataclass

# A placeholder is any double-quoted segment of a step definition pattern.
_QUOTED_RE = re.compile(r'"(.*?)"')


@dataclass(frozen=True)
class Matcher:
    """Compiled step definition pattern.

    `names[i]` is the placeholder bound from regex group `p{i}`. Python group
    names must be identifiers, so the quoted text cannot be used directly.
    """

    pattern: str
    regex: re.Pattern[str]
    names: tuple[str, ...]

    def match(self, text: str) -> dict[str, str] | None:
        m = self.regex.search(text)
        if m is None:
            return None
        bindings: dict[str, str] = {}
        for index, name in enumerate(self.names):
            # Strip the delimiting quotes captured with the value.
            bindings[name] = m.group(f"p{index}")[1:-1]
        return bindings

    def bind(self, text: str, context: object) -> bool:
        bindings = self.match(text)
        if bindings is None:
            return False
        for name, value in bindings.items():
            setattr(context, name, value)
        return True


@functools.lru_cache(maxsize=512)
def compile_pattern(pattern: str) -> Matcher:
    parts = _QUOTED_RE.split(pattern)
    regex_parts: list[str] = []
    names: list[str] = []
    for index, part in enumerate(parts):
        if index % 2 == 0:
            regex_parts.append(re.escape(part))
        else:
            regex_parts.append(f'(?P<p{len(names)}>".*?")')
            names.append(part)
    return Matcher(pattern=pattern, regex=re.compile("".join(regex_parts)), names=tuple(names))


def generalize(text: str) -> tuple[str, tuple[str, ...]]:
    """Turn step text into a definition pattern with `"arg1"`, `"arg2"`, ... placeholders."""
    names: list[str] = []

    def _replace(_: re.Match[str]) -> str:
        names.append(f"arg{len(names) + 1}")
        return f'"{names[-1]}"'

    return _QUOTED_RE.sub(_replace, text), tuple(names)
