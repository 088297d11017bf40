"""Runtime state and hook execution for generation runs."""

from .hooks import run_hook_lists
from .state import GenerationContext, GenerationStage

__all__ = ["GenerationContext", "GenerationStage", "run_hook_lists"]
