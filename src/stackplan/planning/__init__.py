"""Planning: turn a desired graph and prior state into an ordered plan."""

from .models import ActionType, AttributeChange, PlannedAction, Plan
from .planner import plan, diff_config

__all__ = ["ActionType", "AttributeChange", "PlannedAction", "Plan", "plan", "diff_config"]
