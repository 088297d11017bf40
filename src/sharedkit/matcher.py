"""Include/exclude path filtering for template trees."""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import PurePath
from typing import Iterable, Literal

from pydantic import BaseModel, ConfigDict, Field

from .core.errors import InvalidFilterPattern

__all__ = [
    "FilterRule",
    "PathFilter",
    "is_included",
    "normalize_path",
    "parse_rules",
]


REGEX_PREFIX = "regex:"


@lru_cache(maxsize=None)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


def normalize_path(path: str | PurePath) -> str:
    """Return ``path`` as a forward-slash path relative to the template root."""

    text = str(path).replace("\\", "/")
    segments = [segment for segment in text.split("/") if segment and segment != "."]
    return "/".join(segments)


class FilterRule(BaseModel):
    """A literal or regex rule deciding whether a path participates in a step.

    Literal rules come in three shapes:

    * ``/src`` is anchored at the template root and covers ``src`` and
      everything nested under it.
    * ``package.json`` (no slash) matches any path segment with that exact name,
      so it covers the file wherever it appears, or a directory of that name
      together with its contents.
    * ``src/lib`` (inner slash) is treated like an anchored rule.

    Regex rules are written ``regex:<pattern>`` and are searched against the
    normalized relative path.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["literal", "regex"] = Field(..., description="How the pattern is interpreted.")
    pattern: str = Field(..., description="Literal path or regular expression source.")

    @classmethod
    def parse(cls, raw: str) -> "FilterRule":
        if raw.startswith(REGEX_PREFIX):
            return cls(kind="regex", pattern=raw[len(REGEX_PREFIX) :])
        return cls(kind="literal", pattern=raw)

    @property
    def is_regex(self) -> bool:
        return self.kind == "regex"

    def __str__(self) -> str:
        return f"{REGEX_PREFIX}{self.pattern}" if self.is_regex else self.pattern

    def compiled(self) -> re.Pattern[str]:
        """Return the compiled regular expression, raising on a malformed pattern."""

        try:
            return _compile(self.pattern)
        except re.error as exc:
            raise InvalidFilterPattern(
                f"invalid filter pattern '{self}': {exc}", rule=str(self)
            ) from exc

    def matches(self, path: str | PurePath) -> bool:
        candidate = normalize_path(path)
        if self.is_regex:
            return self.compiled().search(candidate) is not None

        anchored = self.pattern.startswith("/")
        literal = normalize_path(self.pattern)
        if not literal:
            # "/" covers the whole tree
            return anchored

        if anchored or "/" in literal:
            return candidate == literal or candidate.startswith(f"{literal}/")

        return literal in candidate.split("/")


def parse_rules(raw_rules: Iterable[str | FilterRule] | None) -> tuple[FilterRule, ...]:
    """Convert raw rule strings into :class:`FilterRule` instances."""

    if not raw_rules:
        return ()
    return tuple(rule if isinstance(rule, FilterRule) else FilterRule.parse(rule) for rule in raw_rules)


def is_included(
    path: str | PurePath,
    include_rules: Iterable[FilterRule],
    exclude_rules: Iterable[FilterRule],
) -> bool:
    """Return whether ``path`` survives ``include_rules`` and ``exclude_rules``.

    A path is included when there are no include rules or at least one of them
    matches, and no exclude rule matches. Exclusion always wins.
    """

    candidate = normalize_path(path)
    if any(rule.matches(candidate) for rule in exclude_rules):
        return False

    includes = tuple(include_rules)
    if not includes:
        return True
    return any(rule.matches(candidate) for rule in includes)


class PathFilter:
    """Bound include/exclude rule lists, reusable across many paths."""

    def __init__(
        self,
        includes: Iterable[FilterRule] = (),
        excludes: Iterable[FilterRule] = (),
    ) -> None:
        self.includes = tuple(includes)
        self.excludes = tuple(excludes)

    def __call__(self, path: str | PurePath) -> bool:
        return is_included(path, self.includes, self.excludes)

    def validate(self) -> None:
        """Compile every regex rule so malformed patterns fail up front."""

        for rule in (*self.includes, *self.excludes):
            if rule.is_regex:
                rule.compiled()

    def __repr__(self) -> str:
        return f"PathFilter(includes={list(map(str, self.includes))!r}, excludes={list(map(str, self.excludes))!r})"
