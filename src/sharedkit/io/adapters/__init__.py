"""Concrete collaborator implementations."""

from .archive import ArchiveRepositoryResolver, archive_url
from .console import ConsoleIO
from .scripted import RecordingCommandRunner, ScriptedIO, StaticRepositoryResolver
from .shell import ShellCommandRunner

__all__ = [
    "ArchiveRepositoryResolver",
    "ConsoleIO",
    "RecordingCommandRunner",
    "ScriptedIO",
    "ShellCommandRunner",
    "StaticRepositoryResolver",
    "archive_url",
]
