"""Deterministic collaborators for tests and unattended runs."""

from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence, Union

from ...core.errors import RepositoryResolutionFailed
from ...reference import RepositoryReference
from ..interfaces import CommandRunner, InteractiveIO, RepositoryResolver

Choice = Union[int, str, None]


class ScriptedIO(InteractiveIO):
    """Answer choices and prompts from pre-recorded scripts.

    ``choices`` entries may be an option index, an option label, or ``None`` to
    decline. ``answers`` are consumed in order by :meth:`prompt_string`. Once a
    script runs dry every further request is declined.
    """

    def __init__(self, choices: Iterable[Choice] = (), answers: Iterable[Optional[str]] = ()) -> None:
        self._choices: deque[Choice] = deque(choices)
        self._answers: deque[Optional[str]] = deque(answers)
        self.messages: list[str] = []
        self.offered: list[tuple[str, ...]] = []

    def choose(self, message: str, options: Sequence[str]) -> Optional[int]:
        self.messages.append(message)
        self.offered.append(tuple(options))
        if not self._choices:
            return None
        choice = self._choices.popleft()
        if choice is None:
            return None
        if isinstance(choice, str):
            return options.index(choice) if choice in options else None
        return choice if 0 <= choice < len(options) else None

    def prompt_string(self, message: str, default: Optional[str] = None) -> Optional[str]:
        self.messages.append(message)
        if not self._answers:
            return None
        return self._answers.popleft()


class StaticRepositoryResolver(RepositoryResolver):
    """Map ``owner/name`` pairs onto directories that already exist locally."""

    def __init__(self, checkouts: Mapping[str, str | Path]) -> None:
        self._checkouts = {key: Path(value) for key, value in checkouts.items()}
        self.requested: list[RepositoryReference] = []
        self.closed = False

    def resolve(self, reference: RepositoryReference) -> Path:
        self.requested.append(reference)
        key = f"{reference.owner}/{reference.name}"
        try:
            return self._checkouts[key]
        except KeyError:
            raise RepositoryResolutionFailed(f"no checkout registered for {reference}") from None

    def close(self) -> None:
        self.closed = True


class RecordingCommandRunner(CommandRunner):
    """Record every command instead of executing it.

    ``exit_codes`` maps command lines to the status they should report; all
    other commands succeed.
    """

    def __init__(self, exit_codes: Mapping[str, int] | None = None) -> None:
        self._exit_codes = dict(exit_codes or {})
        self.calls: list[tuple[str, Path]] = []

    def run(self, command: str, cwd: Path) -> int:
        self.calls.append((command, Path(cwd)))
        return self._exit_codes.get(command, 0)


__all__ = ["RecordingCommandRunner", "ScriptedIO", "StaticRepositoryResolver"]
