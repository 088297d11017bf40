"""Collaborator interfaces and their concrete adapters."""

from .interfaces import Chooser, CommandRunner, InteractiveIO, Prompter, RepositoryResolver

__all__ = [
    "Chooser",
    "CommandRunner",
    "InteractiveIO",
    "Prompter",
    "RepositoryResolver",
]
