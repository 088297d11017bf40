"""Generate a new project directory from a template."""

from __future__ import annotations

import logging
import os
import shutil
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn

from .config import TemplateKind, TemplateVariable
from .core.errors import (
    CopyFailed,
    ErrorKind,
    MissingVariableValue,
    ScaffoldError,
    TargetDirectoryExists,
)
from .io.interfaces import Chooser, CommandRunner, Prompter, RepositoryResolver
from .matcher import PathFilter, normalize_path
from .registry import TemplateRegistry
from .resolver import ResolvedSource, SourceRequest, SourceResolver
from .runtime.hooks import run_hook_lists
from .runtime.state import GenerationContext, GenerationStage
from .template import read_template_file, substitute

__all__ = [
    "GenerationOrchestrator",
    "GenerationRequest",
    "GenerationResult",
    "TARGET_ACTIONS",
]


LOGGER = logging.getLogger(__name__)

TARGET_ACTIONS = (
    "Overwrite the existing directory",
    "Rename the project directory",
    "Cancel",
)


@dataclass(slots=True)
class GenerationRequest:
    """Everything the CLI layer knows about one ``new`` invocation."""

    name: str
    directory: Path = field(default_factory=Path.cwd)
    template_path: str | Path | None = None
    repo: str | None = None
    kind: TemplateKind | None = None
    template_name: str | None = None
    variables: Mapping[str, str] = field(default_factory=dict)
    force: bool = False

    @property
    def target_dir(self) -> Path:
        return (Path(self.directory).expanduser() / self.name).resolve()

    def source_request(self) -> SourceRequest:
        return SourceRequest(
            template_path=self.template_path,
            repo=self.repo,
            kind=self.kind,
            template_name=self.template_name,
        )


@dataclass(frozen=True, slots=True)
class GenerationResult:
    """Single terminal outcome of a generation run."""

    ok: bool
    target_dir: Path | None
    error_kind: ErrorKind | None = None
    detail: str = ""
    diagnostics: tuple[str, ...] = ()
    files_written: int = 0

    @classmethod
    def success(cls, context: GenerationContext) -> "GenerationResult":
        return cls(
            ok=True,
            target_dir=context.target_dir,
            detail=f"Project created at {context.target_dir}",
            diagnostics=tuple(context.diagnostics),
            files_written=len(context.written),
        )

    @classmethod
    def failure(cls, error: ScaffoldError, context: GenerationContext) -> "GenerationResult":
        return cls(
            ok=False,
            target_dir=context.target_dir,
            error_kind=error.kind,
            detail=error.detail,
            diagnostics=tuple(context.diagnostics),
            files_written=len(context.written),
        )

    @property
    def message(self) -> str:
        if self.ok:
            return self.detail
        assert self.error_kind is not None
        return f"{self.error_kind.value}: {self.detail}"


class GenerationOrchestrator:
    """Drive source resolution, filtering, substitution, copying and hooks.

    Stages run strictly in sequence and the first :class:`ScaffoldError` ends
    the run. Nothing touches the filesystem before the copying stage; once
    copying starts, partially written output is left in place on failure.

    With ``show_progress`` the copying stage draws a file-count bar on
    ``console``.
    """

    def __init__(
        self,
        registry: TemplateRegistry,
        *,
        repositories: RepositoryResolver,
        runner: CommandRunner,
        chooser: Chooser | None = None,
        prompter: Prompter | None = None,
        show_progress: bool = False,
        console: Console | None = None,
    ) -> None:
        self.registry = registry
        self.repositories = repositories
        self.runner = runner
        self.chooser = chooser
        self.prompter = prompter
        self.show_progress = show_progress
        self.console = console

    def generate(self, request: GenerationRequest) -> GenerationResult:
        context = GenerationContext(target_dir=request.target_dir)
        try:
            context.advance(GenerationStage.RESOLVING_SOURCE)
            self._prepare_target(context, request.force)
            context.source = SourceResolver(self.registry, self.repositories, self.chooser).resolve(
                request.source_request()
            )
            self._check_overwrite(context)

            context.advance(GenerationStage.FILTERING)
            self._filter(context)

            context.advance(GenerationStage.RESOLVING_VARIABLES)
            self._resolve_variables(context, request.variables)

            context.advance(GenerationStage.SUBSTITUTING)
            self._substitute(context)

            context.advance(GenerationStage.COPYING)
            self._copy(context)

            context.advance(GenerationStage.RUNNING_HOOKS)
            self._run_hooks(context)
        except ScaffoldError as exc:
            context.advance(GenerationStage.FAILED)
            LOGGER.error("Generation failed while %s: %s", context.stages[-2].value, exc.detail)
            return GenerationResult.failure(exc, context)
        finally:
            self.repositories.close()

        context.advance(GenerationStage.SUCCEEDED)
        LOGGER.info("Project created at %s (%d files)", context.target_dir, len(context.written))
        return GenerationResult.success(context)

    # -- stages ------------------------------------------------------------

    def _prepare_target(self, context: GenerationContext, force: bool) -> None:
        """Settle where output goes without modifying anything on disk."""

        target = context.target_dir
        while target.exists():
            if force:
                context.overwrite = True
                break
            if self.chooser is None:
                raise TargetDirectoryExists(
                    f"target directory '{target}' already exists; use --force to overwrite it",
                    path=target,
                )

            choice = self.chooser.choose(
                f"Target directory '{target}' already exists. What would you like to do?",
                list(TARGET_ACTIONS),
            )
            if choice == 0:
                context.overwrite = True
                break
            if choice == 1:
                new_name = self.prompter.prompt_string("New project directory name") if self.prompter else None
                if not new_name:
                    raise TargetDirectoryExists(f"no new name given for existing directory '{target}'", path=target)
                target = (target.parent / new_name).resolve()
                continue
            raise TargetDirectoryExists(f"generation cancelled: '{target}' already exists", path=target)

        context.target_dir = target
        LOGGER.info("Project will be created in '%s'", target)

    def _check_overwrite(self, context: GenerationContext) -> None:
        """Refuse to replace a directory that holds the template being copied."""

        if not context.overwrite:
            return
        root = self._source(context).root.resolve()
        target = context.target_dir
        if root == target or target in root.parents:
            raise TargetDirectoryExists(
                f"cannot overwrite '{target}': the template '{root}' lives inside it",
                path=target,
            )

    def _filter(self, context: GenerationContext) -> None:
        source = self._source(context)
        copy_filter = source.definition.copy_filter if source.definition is not None else PathFilter()
        copy_filter.validate()

        # real directories already entered on the way down to each walked path
        chains = {str(source.root): frozenset({os.path.realpath(source.root)})}
        for dirpath, dirnames, filenames in os.walk(source.root, followlinks=True):
            dirnames.sort()
            chain = chains.pop(dirpath)
            for dirname in list(dirnames):
                child = os.path.join(dirpath, dirname)
                real = os.path.realpath(child)
                if real in chain:
                    LOGGER.warning("Skipping '%s': symlink loops back to '%s'", child, real)
                    dirnames.remove(dirname)
                    continue
                chains[child] = chain | {real}

            relative_dir = Path(dirpath).relative_to(source.root)
            for filename in sorted(filenames):
                relative = normalize_path(relative_dir / filename)
                if copy_filter(relative):
                    context.copy_set.append(relative)
                else:
                    LOGGER.debug("skipping %s", relative)

        LOGGER.debug("%d file(s) selected from %s", len(context.copy_set), source.root)

    def _resolve_variables(self, context: GenerationContext, supplied: Mapping[str, str]) -> None:
        variables = self._variables(context)
        known = {name for variable in variables for name in (variable.placeholder, variable.key)}
        for name in supplied:
            if name not in known:
                context.note(f"ignoring value for unknown variable '{name}'")

        for variable in variables:
            context.values[variable.placeholder] = self._value_for(variable, supplied)

    def _value_for(self, variable: TemplateVariable, supplied: Mapping[str, str]) -> str:
        if variable.placeholder in supplied:
            return supplied[variable.placeholder]
        if variable.key in supplied:
            return supplied[variable.key]

        if self.prompter is not None:
            message = variable.prompt or f"Enter a value for {variable.placeholder}"
            answer = self.prompter.prompt_string(message, variable.default)
            if answer:
                return answer

        if variable.default is not None:
            return variable.default

        raise MissingVariableValue(
            f"no value supplied for placeholder '{variable.placeholder}' and it has no default",
        )

    def _substitute(self, context: GenerationContext) -> None:
        source = self._source(context)
        variables = self._variables(context)
        for relative in context.copy_set:
            origin = source.root / relative
            try:
                content = read_template_file(origin)
                context.modes[relative] = stat.S_IMODE(os.stat(origin).st_mode)
            except OSError as exc:
                raise CopyFailed(f"failed to read '{origin}': {exc}", path=origin) from exc

            if isinstance(content, bytes):
                LOGGER.debug("copying binary file %s unchanged", relative)
            elif variables:
                eligible = {
                    variable.placeholder: context.values[variable.placeholder]
                    for variable in variables
                    if variable.applies_to(relative)
                }
                content = substitute(content, eligible)
            context.pending[relative] = content

    def _copy(self, context: GenerationContext) -> None:
        target = context.target_dir
        try:
            if context.overwrite and target.exists():
                LOGGER.warning("Removing existing '%s'", target)
                if target.is_dir() and not target.is_symlink():
                    shutil.rmtree(target)
                else:
                    target.unlink()
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CopyFailed(f"failed to prepare target directory '{target}': {exc}", path=target) from exc

        progress = Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TextColumn("files"),
            TimeElapsedColumn(),
            console=self.console,
            disable=not self.show_progress,
            transient=True,
        )
        with progress:
            task = progress.add_task("Copying", total=len(context.pending))
            for relative, content in context.pending.items():
                destination = target / relative
                try:
                    destination.parent.mkdir(parents=True, exist_ok=True)
                    payload = content.encode("utf-8") if isinstance(content, str) else content
                    destination.write_bytes(payload)
                    if relative in context.modes:
                        os.chmod(destination, context.modes[relative])
                except OSError as exc:
                    raise CopyFailed(f"failed to write '{relative}': {exc}", path=destination) from exc
                context.written.append(destination)
                progress.update(task, advance=1, description=f"Copying {escape(relative)}")

    def _run_hooks(self, context: GenerationContext) -> None:
        source = self._source(context)
        if source.definition is None:
            return
        executed = run_hook_lists(source.definition.hook_lists(), self.runner, context.target_dir)
        if executed:
            LOGGER.debug("%d post-generation command(s) completed", executed)

    # -- helpers -----------------------------------------------------------

    @staticmethod
    def _source(context: GenerationContext) -> ResolvedSource:
        if context.source is None:
            raise RuntimeError("template source has not been resolved")
        return context.source

    def _variables(self, context: GenerationContext) -> tuple[TemplateVariable, ...]:
        definition = self._source(context).definition
        return definition.template_vars if definition is not None else ()
