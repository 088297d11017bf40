"""Core primitives shared across the shared-kit engine."""

from .errors import ErrorKind, ScaffoldError

__all__ = ["ErrorKind", "ScaffoldError"]
