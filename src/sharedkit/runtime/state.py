"""State tracked while a single generation run is in progress."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..resolver import ResolvedSource

LOGGER = logging.getLogger(__name__)


class GenerationStage(str, Enum):
    RESOLVING_SOURCE = "resolving_source"
    FILTERING = "filtering"
    RESOLVING_VARIABLES = "resolving_variables"
    SUBSTITUTING = "substituting"
    COPYING = "copying"
    RUNNING_HOOKS = "running_hooks"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STAGES = frozenset({GenerationStage.SUCCEEDED, GenerationStage.FAILED})


@dataclass(slots=True)
class GenerationContext:
    """Working state owned by the orchestrator for one invocation.

    ``pending`` maps relative paths to the text (already substituted) or raw
    bytes that will be written under :attr:`target_dir`; ``modes`` holds the
    permission bits read from each source file alongside it.
    """

    target_dir: Path
    source: ResolvedSource | None = None
    overwrite: bool = False
    copy_set: list[str] = field(default_factory=list)
    values: dict[str, str] = field(default_factory=dict)
    pending: dict[str, str | bytes] = field(default_factory=dict)
    modes: dict[str, int] = field(default_factory=dict)
    written: list[Path] = field(default_factory=list)
    diagnostics: list[str] = field(default_factory=list)
    stages: list[GenerationStage] = field(default_factory=list)

    @property
    def stage(self) -> GenerationStage | None:
        return self.stages[-1] if self.stages else None

    def advance(self, stage: GenerationStage) -> None:
        if self.stage in TERMINAL_STAGES:
            raise RuntimeError(f"generation already finished as {self.stage.value}")
        LOGGER.debug("generation -> %s", stage.value)
        self.stages.append(stage)

    def note(self, message: str) -> None:
        """Record a non-fatal observation for the final report."""

        LOGGER.debug(message)
        self.diagnostics.append(message)
