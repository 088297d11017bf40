"""Run hook commands through the system shell."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from ..interfaces import CommandRunner

LOGGER = logging.getLogger(__name__)

SPAWN_FAILED_STATUS = 127


class ShellCommandRunner(CommandRunner):
    """Execute command lines with ``shell=True``, streaming output to the terminal."""

    def run(self, command: str, cwd: Path) -> int:
        LOGGER.debug("Executing: %s (cwd=%s)", command, cwd)
        try:
            completed = subprocess.run(command, shell=True, cwd=cwd, check=False)
        except OSError as exc:
            LOGGER.error("Could not start '%s' in %s: %s", command, cwd, exc)
            return SPAWN_FAILED_STATUS
        return completed.returncode


__all__ = ["ShellCommandRunner"]
