"""Execution of post-generation hook lists."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Sequence

from ..config import ChangeDirectoryToTarget, HookStep
from ..core.errors import PostScriptFailed
from ..io.interfaces import CommandRunner

LOGGER = logging.getLogger(__name__)


def run_hook_lists(
    hook_lists: Iterable[Sequence[HookStep]],
    runner: CommandRunner,
    target_dir: Path,
    *,
    origin_dir: Path | None = None,
) -> int:
    """Run every hook list in order and return the number of commands executed.

    Each list starts in ``origin_dir`` (the process working directory by
    default); a ``CD_TARGET`` step switches the rest of that list to
    ``target_dir``. The first failing command raises :class:`PostScriptFailed`
    and nothing after it runs.
    """

    start_dir = origin_dir or Path.cwd()
    executed = 0
    for steps in hook_lists:
        working_dir = start_dir
        for step in steps:
            if isinstance(step, ChangeDirectoryToTarget):
                working_dir = target_dir
                continue

            LOGGER.info("Running '%s' in %s", step.text, working_dir)
            status = runner.run(step.text, working_dir)
            executed += 1
            if status != 0:
                raise PostScriptFailed(
                    f"post-generation command '{step.text}' exited with status {status} in {working_dir}",
                    path=working_dir,
                    command=step.text,
                )
    return executed


__all__ = ["run_hook_lists"]
