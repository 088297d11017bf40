"""Decide which template tree a generation run copies from."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .config import TemplateDefinition, TemplateKind, resolve_template_path
from .core.errors import (
    NoTemplateSelected,
    RepositoryResolutionFailed,
    ScaffoldError,
    TemplateSourceNotFound,
)
from .io.interfaces import Chooser, RepositoryResolver
from .reference import RepositoryReference, parse_reference
from .registry import TemplateRegistry

__all__ = ["ResolvedSource", "SourceRequest", "SourceResolver", "SourceState"]


LOGGER = logging.getLogger(__name__)


class SourceState(str, Enum):
    START = "start"
    HAVE_LOCAL_PATH = "have_local_path"
    HAVE_REPO_REF = "have_repo_ref"
    FILTER_BY_KIND = "filter_by_kind"
    INTERACTIVE_CHOICE = "interactive_choice"
    RESOLVED = "resolved"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True)
class SourceRequest:
    """What the caller asked for; every field is optional."""

    template_path: str | Path | None = None
    repo: str | None = None
    kind: TemplateKind | None = None
    template_name: str | None = None


@dataclass(frozen=True, slots=True)
class ResolvedSource:
    """A template tree on disk plus the definition it came from, if any.

    ``definition`` is ``None`` for ad-hoc sources given directly as a path or a
    repository reference; those copy everything and define no variables.
    """

    root: Path
    definition: TemplateDefinition | None = None
    reference: RepositoryReference | None = None

    @property
    def label(self) -> str:
        if self.definition is not None:
            return f"template '{self.definition.name}'"
        if self.reference is not None:
            return f"repository {self.reference}"
        return f"directory {self.root}"


class SourceResolver:
    """Resolve a :class:`SourceRequest` into a :class:`ResolvedSource`.

    Explicit sources win in this order: local path, repository reference,
    template name. Without any of them the registry (optionally narrowed by
    kind) is offered through the chooser, and the picked template's own source
    is then resolved the same way.
    """

    def __init__(
        self,
        registry: TemplateRegistry,
        repositories: RepositoryResolver,
        chooser: Chooser | None = None,
    ) -> None:
        self.registry = registry
        self.repositories = repositories
        self.chooser = chooser
        self.states: list[SourceState] = []

    def _enter(self, state: SourceState) -> None:
        LOGGER.debug("source resolver -> %s", state.value)
        self.states.append(state)

    def resolve(self, request: SourceRequest) -> ResolvedSource:
        self.states = []
        self._enter(SourceState.START)
        try:
            source = self._resolve(request)
        except ScaffoldError:
            self._enter(SourceState.ABORTED)
            raise
        self._enter(SourceState.RESOLVED)
        LOGGER.info("Using %s from %s", source.label, source.root)
        return source

    def _resolve(self, request: SourceRequest) -> ResolvedSource:
        if request.template_path is not None:
            return self._from_local(request.template_path, base_dir=None)

        if request.repo is not None:
            return self._from_repository(request.repo)

        if request.template_name is not None:
            definition = self.registry.by_name(request.template_name)
            if definition is None:
                raise TemplateSourceNotFound(
                    f"no template named '{request.template_name}' in {self._config_label()}"
                )
            return self._from_definition(definition)

        if request.kind is not None:
            self._enter(SourceState.FILTER_BY_KIND)
        candidates = self.registry.by_kind(request.kind)
        definition = self._choose(candidates, request.kind)
        return self._from_definition(definition)

    def _from_definition(self, definition: TemplateDefinition) -> ResolvedSource:
        if definition.repo is not None:
            return self._from_repository(definition.repo, definition)
        assert definition.template is not None
        return self._from_local(definition.template, base_dir=self.registry.base_dir, definition=definition)

    def _from_local(
        self,
        raw_path: str | Path,
        *,
        base_dir: Path | None,
        definition: TemplateDefinition | None = None,
    ) -> ResolvedSource:
        self._enter(SourceState.HAVE_LOCAL_PATH)
        path = resolve_template_path(raw_path, base_dir)
        if not path.is_dir():
            raise TemplateSourceNotFound(
                f"template path does not exist or is not a directory: '{path}'", path=path
            )
        return ResolvedSource(root=path, definition=definition)

    def _from_repository(self, raw: str, definition: TemplateDefinition | None = None) -> ResolvedSource:
        self._enter(SourceState.HAVE_REPO_REF)
        reference = parse_reference(raw)
        try:
            root = Path(self.repositories.resolve(reference))
        except OSError as exc:
            raise RepositoryResolutionFailed(f"failed to resolve {reference}: {exc}") from exc

        if not root.is_dir():
            raise RepositoryResolutionFailed(f"resolving {reference} did not produce a directory: '{root}'", path=root)
        return ResolvedSource(root=root, definition=definition, reference=reference)

    def _choose(
        self,
        candidates: tuple[TemplateDefinition, ...],
        kind: TemplateKind | None,
    ) -> TemplateDefinition:
        self._enter(SourceState.INTERACTIVE_CHOICE)
        if not candidates:
            scope = f"of kind '{kind.value}' " if kind is not None else ""
            raise NoTemplateSelected(
                f"no templates {scope}found in {self._config_label()}; "
                "use --template or --repo to specify one directly"
            )

        if self.chooser is None:
            raise NoTemplateSelected(
                "no template specified and interactive selection is unavailable; "
                "use --use, --template or --repo"
            )

        labels = [f"{definition.name} ({definition.kind.value})" for definition in candidates]
        index = self.chooser.choose("Select a template to use", labels)
        if index is None:
            raise NoTemplateSelected("template selection was cancelled")
        return candidates[index]

    def _config_label(self) -> str:
        if self.registry.config_path is None:
            return "the template registry"
        return f"config '{self.registry.config_path}'"
