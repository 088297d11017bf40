"""Template definitions and the loader that builds them from TOML or JSON.

The on-disk shape mirrors the ``metadata.toml`` files used by the CLI::

    [templates.web-app]
    kind = "project"
    template = "./templates/web-app"
    includes = ["/src", "package.json"]
    excludes = ["/src/secrets"]

    [[templates.web-app.template_vars]]
    placeholder = "{{project_name}}"
    prompt = "Project name"
    default = "my-app"
    completed_script = ["CD_TARGET", "pnpm i"]

Every model is frozen and validated when the file is loaded, so the generation
pipeline never has to re-check shape invariants mid-run.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tomllib
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Literal, Mapping, Union

from platformdirs import user_config_dir
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .core.errors import ConfigLoadFailed, ReferenceParseError
from .matcher import FilterRule, PathFilter, parse_rules
from .reference import RepositoryReference, parse_reference

__all__ = [
    "CD_TARGET",
    "ChangeDirectoryToTarget",
    "DEFAULT_CONFIG_DIR",
    "DEFAULT_CONFIG_FILENAME",
    "HookStep",
    "ShellCommand",
    "TemplateDefinition",
    "TemplateKind",
    "TemplateVariable",
    "default_config_path",
    "load_config",
    "parse_hook_steps",
    "parse_templates",
    "resolve_template_path",
]


LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = "shared-kit-cli"
DEFAULT_CONFIG_FILENAME = "metadata.toml"
CD_TARGET = "CD_TARGET"

_NON_WORD_EDGES = re.compile(r"^\W+|\W+$")


class TemplateKind(str, Enum):
    """Categories a template can be filed under."""

    PROJECT = "project"
    PACKAGE = "package"
    MONOREPO = "monorepo"


class ChangeDirectoryToTarget(BaseModel):
    """Hook step that moves later commands into the generated directory."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["cd_target"] = "cd_target"

    def __str__(self) -> str:
        return CD_TARGET


class ShellCommand(BaseModel):
    """Hook step running a shell command line."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["shell"] = "shell"
    text: str = Field(..., min_length=1, description="Command line handed to the shell.")

    def __str__(self) -> str:
        return self.text


HookStep = Annotated[Union[ChangeDirectoryToTarget, ShellCommand], Field(discriminator="type")]


def parse_hook_steps(raw_steps: Any) -> Any:
    """Turn ``completed_script`` strings into tagged hook steps."""

    if raw_steps is None:
        return ()
    if isinstance(raw_steps, str):
        raise ValueError("completed_script must be a list of commands")

    steps: list[Any] = []
    for raw in raw_steps:
        if not isinstance(raw, str):
            steps.append(raw)
            continue
        command = raw.strip()
        if not command:
            raise ValueError("completed_script entries must not be blank")
        if command == CD_TARGET:
            steps.append(ChangeDirectoryToTarget())
        else:
            steps.append(ShellCommand(text=command))
    return tuple(steps)


def _parse_rule_field(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        raise ValueError("filter rules must be given as a list")
    return parse_rules(value)


class TemplateVariable(BaseModel):
    """A placeholder token and how to obtain its value."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    placeholder: str = Field(..., description="Literal token replaced in file contents.")
    prompt: str | None = Field(None, description="Question shown when asking for a value.")
    default: str | None = Field(None, description="Value used when nothing else is supplied.")
    completed_script: tuple[HookStep, ...] = Field(default=(), description="Commands run after generation.")
    includes_paths: tuple[FilterRule, ...] | None = Field(None, description="Files the placeholder applies to.")
    excludes_paths: tuple[FilterRule, ...] | None = Field(None, description="Files the placeholder skips.")

    @field_validator("placeholder")
    @classmethod
    def _placeholder_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("placeholder must not be empty")
        return value

    @field_validator("completed_script", mode="before")
    @classmethod
    def _parse_completed_script(cls, value: Any) -> Any:
        return parse_hook_steps(value)

    @field_validator("includes_paths", "excludes_paths", mode="before")
    @classmethod
    def _parse_scoping_rules(cls, value: Any) -> Any:
        return _parse_rule_field(value)

    @property
    def key(self) -> str:
        """Bare name of the placeholder, e.g. ``project_name`` for ``{{project_name}}``."""

        return _NON_WORD_EDGES.sub("", self.placeholder) or self.placeholder

    @property
    def scope(self) -> PathFilter:
        return PathFilter(self.includes_paths or (), self.excludes_paths or ())

    def applies_to(self, path: str) -> bool:
        """Return whether this variable is substituted into ``path``."""

        return self.scope(path)


class TemplateDefinition(BaseModel):
    """A named template: where it lives, what to copy, and what to ask."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Registry key of the template.")
    kind: TemplateKind = Field(..., description="Category used to filter the registry.")
    template: str | None = Field(None, description="Local directory holding the template.")
    repo: str | None = Field(None, description="Repository reference holding the template.")
    includes: tuple[FilterRule, ...] = Field(default=(), description="Paths to copy; empty copies everything.")
    excludes: tuple[FilterRule, ...] = Field(default=(), description="Paths never copied.")
    template_vars: tuple[TemplateVariable, ...] = Field(default=(), description="Placeholders to resolve.")
    completed_script: tuple[HookStep, ...] = Field(default=(), description="Commands run after all variable hooks.")

    @field_validator("includes", "excludes", mode="before")
    @classmethod
    def _parse_rules(cls, value: Any) -> Any:
        return _parse_rule_field(value) or ()

    @field_validator("template_vars", mode="before")
    @classmethod
    def _default_vars(cls, value: Any) -> Any:
        return () if value is None else value

    @field_validator("completed_script", mode="before")
    @classmethod
    def _parse_completed_script(cls, value: Any) -> Any:
        return parse_hook_steps(value)

    @field_validator("repo")
    @classmethod
    def _repo_is_parseable(cls, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            parse_reference(value)
        except ReferenceParseError as exc:
            raise ValueError(f"{exc.kind.value}: {exc.detail}") from exc
        return value

    @model_validator(mode="after")
    def _check_source_and_placeholders(self) -> "TemplateDefinition":
        if self.template is None and self.repo is None:
            raise ValueError("a template needs either 'template' or 'repo'")
        if self.template is not None and self.repo is not None:
            raise ValueError("'template' and 'repo' are mutually exclusive")

        seen: set[str] = set()
        for variable in self.template_vars:
            if variable.placeholder in seen:
                raise ValueError(f"duplicate placeholder '{variable.placeholder}'")
            seen.add(variable.placeholder)
        return self

    @property
    def reference(self) -> RepositoryReference | None:
        return parse_reference(self.repo) if self.repo is not None else None

    @property
    def copy_filter(self) -> PathFilter:
        return PathFilter(self.includes, self.excludes)

    def hook_lists(self) -> list[tuple[HookStep, ...]]:
        """Hook lists in execution order: per variable, then template wide."""

        lists = [variable.completed_script for variable in self.template_vars if variable.completed_script]
        if self.completed_script:
            lists.append(self.completed_script)
        return lists


def default_config_path() -> Path:
    """Location of the per-user ``metadata.toml``."""

    return Path(user_config_dir(DEFAULT_CONFIG_DIR)) / DEFAULT_CONFIG_FILENAME


def resolve_template_path(raw: str | Path, base_dir: Path | None = None) -> Path:
    """Expand ``~`` and anchor relative paths at ``base_dir`` (or the working directory)."""

    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir or Path.cwd()) / path
    return Path(os.path.normpath(path))


def parse_templates(
    data: Mapping[str, Any],
    *,
    source: str | Path | None = None,
) -> dict[str, TemplateDefinition]:
    """Build template definitions from already-decoded configuration data."""

    origin = str(source) if source is not None else "<memory>"
    templates = data.get("templates", {})
    if not isinstance(templates, Mapping):
        raise ConfigLoadFailed(f"'templates' in {origin} must be a table", path=source)

    definitions: dict[str, TemplateDefinition] = {}
    for name, body in templates.items():
        if not isinstance(body, Mapping):
            raise ConfigLoadFailed(f"template '{name}' in {origin} must be a table", path=source)
        try:
            definitions[name] = TemplateDefinition.model_validate({**body, "name": name})
        except ValidationError as exc:
            raise ConfigLoadFailed(f"template '{name}' in {origin} is invalid: {exc}", path=source) from exc

    return definitions


def load_config(path: str | Path) -> dict[str, TemplateDefinition]:
    """Read a TOML or JSON configuration file into template definitions."""

    config_path = Path(path).expanduser()
    if not config_path.is_file():
        raise ConfigLoadFailed(f"config file not found: {config_path}", path=config_path)

    try:
        text = config_path.read_text(encoding="utf-8")
        if config_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = tomllib.loads(text)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigLoadFailed(f"failed to read config {config_path}: {exc}", path=config_path) from exc

    if not isinstance(data, Mapping):
        raise ConfigLoadFailed(f"config {config_path} must contain a table at the top level", path=config_path)

    definitions = parse_templates(data, source=config_path)
    LOGGER.debug("Loaded %d template(s) from %s", len(definitions), config_path)
    return definitions
