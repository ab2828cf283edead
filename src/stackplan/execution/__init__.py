"""Execution: apply plans against a provider."""

from .models import ActionStatus, ActionOutcome, ApplyResult, ExecutorSettings
from .executor import Executor, apply_plan, resolve_references

__all__ = [
    "ActionStatus",
    "ActionOutcome",
    "ApplyResult",
    "ExecutorSettings",
    "Executor",
    "apply_plan",
    "resolve_references",
]
