"""Pydantic models for plans."""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from ..model.resources import ResourceKind


class ActionType(str, Enum):
    """Plan action types."""
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class AttributeChange(BaseModel):
    """Before/after values of one attribute."""
    before: Optional[Any] = None
    after: Optional[Any] = None


class PlannedAction(BaseModel):
    """One step of a plan."""
    node_id: str = Field(..., description="Logical id of the resource")
    kind: ResourceKind = Field(..., description="Resource kind")
    action: ActionType = Field(..., description="What to do with the resource")
    changes: Dict[str, AttributeChange] = Field(default_factory=dict, description="Changed attributes only")
    config: Dict[str, Any] = Field(default_factory=dict, description="Desired config (prior config for deletes)")
    references: List[str] = Field(default_factory=list, description="Node ids referenced by the resource")
    requires: List[str] = Field(default_factory=list, description="Node ids whose actions must succeed first")


class Plan(BaseModel):
    """Ordered create/update/delete actions for one stack."""
    stack: str = Field(default="stack")
    actions: List[PlannedAction] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.actions

    def summary(self) -> Dict[str, int]:
        """Count actions by type."""
        counts = {action_type.value: 0 for action_type in ActionType}
        for planned in self.actions:
            counts[ActionType(planned.action).value] += 1
        return counts

    def get(self, node_id: str) -> Optional[PlannedAction]:
        for planned in self.actions:
            if planned.node_id == node_id:
                return planned
        return None
