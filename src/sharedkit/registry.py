"""Read-only view over the configured templates."""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from .config import TemplateDefinition, TemplateKind, default_config_path, load_config, resolve_template_path

__all__ = ["TemplateRegistry"]


LOGGER = logging.getLogger(__name__)


class TemplateRegistry:
    """Templates keyed by name, in the order they were declared.

    The registry is never mutated after construction; lookups that find nothing
    return ``None`` or an empty tuple rather than raising.
    """

    def __init__(
        self,
        definitions: Mapping[str, TemplateDefinition] | Iterable[TemplateDefinition] = (),
        *,
        config_path: Path | None = None,
    ) -> None:
        if isinstance(definitions, Mapping):
            items = dict(definitions)
        else:
            items = {definition.name: definition for definition in definitions}
        self._templates: Mapping[str, TemplateDefinition] = MappingProxyType(items)
        self.config_path = config_path

    @classmethod
    def from_path(cls, path: str | Path | None = None) -> "TemplateRegistry":
        """Load the registry from ``path`` or from the per-user default location.

        A missing default file yields an empty registry; an explicitly requested
        file that cannot be loaded raises :class:`~sharedkit.core.errors.ConfigLoadFailed`.
        """

        if path is not None:
            config_path = Path(path).expanduser().resolve()
            return cls(load_config(config_path), config_path=config_path)

        config_path = default_config_path()
        if not config_path.is_file():
            LOGGER.info("No config found at %s; starting with an empty template registry.", config_path)
            return cls(config_path=config_path)
        return cls(load_config(config_path), config_path=config_path)

    @property
    def base_dir(self) -> Path | None:
        """Directory relative ``template`` paths are resolved against."""

        return self.config_path.parent if self.config_path is not None else None

    def by_name(self, name: str) -> TemplateDefinition | None:
        return self._templates.get(name)

    def by_kind(self, kind: TemplateKind | str | None = None) -> tuple[TemplateDefinition, ...]:
        """Templates of ``kind`` in declaration order; every template when ``kind`` is ``None``."""

        if kind is None:
            return tuple(self._templates.values())
        wanted = TemplateKind(kind)
        return tuple(definition for definition in self._templates.values() if definition.kind is wanted)

    def local_path(self, definition: TemplateDefinition) -> Path | None:
        """Absolute location of a template's local directory, if it has one."""

        if definition.template is None:
            return None
        return resolve_template_path(definition.template, self.base_dir)

    def names(self) -> tuple[str, ...]:
        return tuple(self._templates)

    def __iter__(self) -> Iterator[TemplateDefinition]:
        return iter(self._templates.values())

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __repr__(self) -> str:
        return f"TemplateRegistry(names={list(self._templates)!r}, config_path={self.config_path!r})"
