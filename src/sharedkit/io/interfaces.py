"""Abstract capabilities the generation engine depends on."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence

from ..reference import RepositoryReference


class Chooser(ABC):
    """Asks the operator to pick one entry from a list."""

    @abstractmethod
    def choose(self, message: str, options: Sequence[str]) -> Optional[int]:
        """Return the index of the selected option, or ``None`` when declined."""


class Prompter(ABC):
    """Asks the operator for a free-form string."""

    @abstractmethod
    def prompt_string(self, message: str, default: Optional[str] = None) -> Optional[str]:
        """Return the entered value, or ``None`` when nothing was provided."""


class InteractiveIO(Chooser, Prompter, ABC):
    """Both interactive capabilities from a single source."""


class RepositoryResolver(ABC):
    """Materializes a repository revision as a local directory."""

    @abstractmethod
    def resolve(self, reference: RepositoryReference) -> Path:
        """Return a directory containing the referenced revision."""

    def close(self) -> None:
        """Release any temporary checkouts created by :meth:`resolve`."""

    def __enter__(self) -> "RepositoryResolver":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class CommandRunner(ABC):
    """Executes post-generation commands."""

    @abstractmethod
    def run(self, command: str, cwd: Path) -> int:
        """Run ``command`` inside ``cwd`` and return its exit status."""


__all__ = ["Chooser", "CommandRunner", "InteractiveIO", "Prompter", "RepositoryResolver"]
