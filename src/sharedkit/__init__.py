"""Template-driven project scaffolding.

The package resolves a template (a local directory, a GitHub/GitLab repository,
or an entry in the user's template registry), selects the files to copy with
include/exclude rules, substitutes placeholder values into text files, writes
the result to a fresh directory and finally runs the template's post-generation
commands. It can be used programmatically or via the ``shared-kit`` command.
"""

from __future__ import annotations

from .config import TemplateDefinition, TemplateKind, TemplateVariable, load_config
from .core.errors import ErrorKind, ScaffoldError
from .matcher import FilterRule, PathFilter, is_included
from .reference import RepositoryReference, parse_reference
from .registry import TemplateRegistry
from .resolver import ResolvedSource, SourceRequest, SourceResolver
from .scaffold import GenerationOrchestrator, GenerationRequest, GenerationResult
from .template import substitute

__all__ = [
    "ErrorKind",
    "FilterRule",
    "GenerationOrchestrator",
    "GenerationRequest",
    "GenerationResult",
    "PathFilter",
    "RepositoryReference",
    "ResolvedSource",
    "ScaffoldError",
    "SourceRequest",
    "SourceResolver",
    "TemplateDefinition",
    "TemplateKind",
    "TemplateRegistry",
    "TemplateVariable",
    "is_included",
    "load_config",
    "parse_reference",
    "substitute",
]

__version__ = "0.1.0"
