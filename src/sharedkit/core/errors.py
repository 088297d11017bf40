"""Exception types raised by the shared-kit generation engine."""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class ErrorKind(str, Enum):
    """Terminal failure categories reported to the CLI layer."""

    MALFORMED_REFERENCE = "MalformedReference"
    AMBIGUOUS_VERSION_SELECTOR = "AmbiguousVersionSelector"
    UNSUPPORTED_HOST = "UnsupportedHost"
    TEMPLATE_SOURCE_NOT_FOUND = "TemplateSourceNotFound"
    REPOSITORY_RESOLUTION_FAILED = "RepositoryResolutionFailed"
    NO_TEMPLATE_SELECTED = "NoTemplateSelected"
    INVALID_FILTER_PATTERN = "InvalidFilterPattern"
    MISSING_VARIABLE_VALUE = "MissingVariableValue"
    TARGET_DIRECTORY_EXISTS = "TargetDirectoryExists"
    COPY_FAILED = "CopyFailed"
    POST_SCRIPT_FAILED = "PostScriptFailed"
    CONFIG_LOAD_FAILED = "ConfigLoadFailed"


class ScaffoldError(RuntimeError):
    """Base class for every failure that terminates a generation run."""

    kind: ErrorKind

    def __init__(
        self,
        detail: str,
        *,
        path: str | Path | None = None,
        rule: str | None = None,
        command: str | None = None,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.path = path
        self.rule = rule
        self.command = command


class ReferenceParseError(ScaffoldError):
    """Common parent for repository reference parse failures."""


class MalformedReference(ReferenceParseError):
    kind = ErrorKind.MALFORMED_REFERENCE


class AmbiguousVersionSelector(ReferenceParseError):
    kind = ErrorKind.AMBIGUOUS_VERSION_SELECTOR


class UnsupportedHost(ReferenceParseError):
    kind = ErrorKind.UNSUPPORTED_HOST


class TemplateSourceNotFound(ScaffoldError):
    kind = ErrorKind.TEMPLATE_SOURCE_NOT_FOUND


class RepositoryResolutionFailed(ScaffoldError):
    kind = ErrorKind.REPOSITORY_RESOLUTION_FAILED


class NoTemplateSelected(ScaffoldError):
    kind = ErrorKind.NO_TEMPLATE_SELECTED


class InvalidFilterPattern(ScaffoldError):
    kind = ErrorKind.INVALID_FILTER_PATTERN


class MissingVariableValue(ScaffoldError):
    kind = ErrorKind.MISSING_VARIABLE_VALUE


class TargetDirectoryExists(ScaffoldError):
    kind = ErrorKind.TARGET_DIRECTORY_EXISTS


class CopyFailed(ScaffoldError):
    kind = ErrorKind.COPY_FAILED


class PostScriptFailed(ScaffoldError):
    kind = ErrorKind.POST_SCRIPT_FAILED


class ConfigLoadFailed(ScaffoldError):
    kind = ErrorKind.CONFIG_LOAD_FAILED


__all__ = [
    "AmbiguousVersionSelector",
    "ConfigLoadFailed",
    "CopyFailed",
    "ErrorKind",
    "InvalidFilterPattern",
    "MalformedReference",
    "MissingVariableValue",
    "NoTemplateSelected",
    "PostScriptFailed",
    "ReferenceParseError",
    "RepositoryResolutionFailed",
    "ScaffoldError",
    "TargetDirectoryExists",
    "TemplateSourceNotFound",
    "UnsupportedHost",
]
