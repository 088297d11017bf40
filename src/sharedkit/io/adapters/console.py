"""Rich-powered terminal prompts."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from ..interfaces import InteractiveIO

LOGGER = logging.getLogger(__name__)

CANCEL_KEY = "q"


class ConsoleIO(InteractiveIO):
    """Ask questions on the terminal using :mod:`rich` prompts."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def choose(self, message: str, options: Sequence[str]) -> Optional[int]:
        if not options:
            return None

        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column(style="bold cyan", justify="right")
        table.add_column()
        for index, label in enumerate(options, start=1):
            table.add_row(str(index), label)

        self.console.print(f"[bold]{message}[/bold]")
        self.console.print(table)

        keys = [str(index) for index in range(1, len(options) + 1)]
        try:
            answer = Prompt.ask(
                f"Enter a number ([dim]{CANCEL_KEY} to cancel[/dim])",
                choices=[*keys, CANCEL_KEY],
                show_choices=False,
                console=self.console,
            )
        except (EOFError, KeyboardInterrupt):
            LOGGER.debug("Selection aborted by the operator")
            return None

        if answer == CANCEL_KEY:
            return None
        return int(answer) - 1

    def prompt_string(self, message: str, default: Optional[str] = None) -> Optional[str]:
        try:
            if default is None:
                answer = Prompt.ask(message, console=self.console)
            else:
                answer = Prompt.ask(message, default=default, console=self.console)
        except (EOFError, KeyboardInterrupt):
            LOGGER.debug("Prompt aborted by the operator")
            return None

        answer = answer.strip()
        return answer or None


__all__ = ["ConsoleIO"]
