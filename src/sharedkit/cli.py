"""Command line interface for shared-kit."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from rich.console import Console
from rich.table import Table

from .config import TemplateKind
from .core.errors import ScaffoldError
from .io.adapters import ArchiveRepositoryResolver, ConsoleIO, ShellCommandRunner
from .logging_setup import setup_logging
from .registry import TemplateRegistry
from .scaffold import GenerationOrchestrator, GenerationRequest

console = Console()
error_console = Console(stderr=True)


def _parse_key_value(pair: str) -> tuple[str, str]:
    if "=" not in pair:
        raise argparse.ArgumentTypeError(
            f"invalid key/value pair '{pair}'. Expected KEY=VALUE syntax."
        )
    key, value = pair.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("keys must not be empty")
    return key, value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shared-kit",
        description="Create projects, packages and monorepos from reusable templates",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Template config file (default: the per-user metadata.toml)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    new_parser = subparsers.add_parser("new", help="generate a new project from a template")
    new_parser.add_argument("name", help="Name of the directory to create")
    new_parser.add_argument(
        "-k",
        "--kind",
        type=TemplateKind,
        choices=list(TemplateKind),
        metavar="{project,package,monorepo}",
        help="Only offer templates of this kind",
    )
    source = new_parser.add_mutually_exclusive_group()
    source.add_argument("-p", "--template", help="Local template directory, bypassing the config")
    source.add_argument("-r", "--repo", help="Repository reference such as owner/name#branch")
    source.add_argument("-u", "--use", metavar="TEMPLATE", help="Name of a configured template")
    new_parser.add_argument(
        "-c",
        "--config",
        dest="command_config",
        type=Path,
        help="Template config file for this command only",
    )
    new_parser.add_argument(
        "-d",
        "--directory",
        type=Path,
        default=Path.cwd(),
        help="Parent directory for the new project",
    )
    new_parser.add_argument(
        "--var",
        metavar="KEY=VALUE",
        type=_parse_key_value,
        action="append",
        default=[],
        help="Value for a template placeholder (token or bare name)",
    )
    new_parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Overwrite the target directory if it already exists",
    )
    new_parser.add_argument(
        "--no-input",
        action="store_true",
        help="Never prompt; rely on --var values and defaults",
    )

    list_parser = subparsers.add_parser("list", help="show the configured templates")
    list_parser.add_argument(
        "-k",
        "--kind",
        type=TemplateKind,
        choices=list(TemplateKind),
        metavar="{project,package,monorepo}",
        help="Only list templates of this kind",
    )
    list_parser.add_argument(
        "-c",
        "--config",
        dest="command_config",
        type=Path,
        help="Template config file for this command only",
    )

    return parser


def _load_registry(args: argparse.Namespace) -> TemplateRegistry:
    return TemplateRegistry.from_path(args.command_config or args.config)


def _report_error(error: ScaffoldError) -> int:
    error_console.print(f"[bold red]{error.kind.value}[/bold red]: {error.detail}", highlight=False)
    return 1


def _handle_new(args: argparse.Namespace) -> int:
    try:
        registry = _load_registry(args)
    except ScaffoldError as exc:
        return _report_error(exc)

    interactive = None
    if not args.no_input and sys.stdin.isatty():
        interactive = ConsoleIO(console)
    show_progress = not args.no_input and error_console.is_terminal

    orchestrator = GenerationOrchestrator(
        registry,
        repositories=ArchiveRepositoryResolver(show_progress=show_progress, console=error_console),
        runner=ShellCommandRunner(),
        chooser=interactive,
        prompter=interactive,
        show_progress=show_progress,
        console=error_console,
    )
    request = GenerationRequest(
        name=args.name,
        directory=args.directory,
        template_path=args.template,
        repo=args.repo,
        kind=args.kind,
        template_name=args.use,
        variables=dict(args.var),
        force=args.force,
    )
    result = orchestrator.generate(request)

    for diagnostic in result.diagnostics:
        error_console.print(f"[yellow]note[/yellow]: {diagnostic}", highlight=False)

    if result.ok:
        console.print(f"[bold green]{result.message}[/bold green]", highlight=False)
        return 0

    error_console.print(f"[bold red]{result.error_kind.value}[/bold red]: {result.detail}", highlight=False)
    return 1


def _handle_list(args: argparse.Namespace) -> int:
    try:
        registry = _load_registry(args)
    except ScaffoldError as exc:
        return _report_error(exc)

    definitions = registry.by_kind(args.kind)
    if not definitions:
        console.print("No templates configured.")
        return 0

    table = Table(title="Templates")
    table.add_column("Name", style="bold")
    table.add_column("Kind")
    table.add_column("Source")
    table.add_column("Variables")
    for definition in definitions:
        source = definition.repo or str(registry.local_path(definition))
        placeholders = ", ".join(variable.placeholder for variable in definition.template_vars)
        table.add_row(definition.name, definition.kind.value, source, placeholders or "-")
    console.print(table)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging("DEBUG" if args.verbose else "INFO")
    if args.command == "new":
        return _handle_new(args)
    if args.command == "list":
        return _handle_list(args)
    parser.error("no command provided")
    return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
