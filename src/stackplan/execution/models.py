"""Pydantic models for apply results and executor settings."""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator
from ..planning.models import ActionType


class ActionStatus(str, Enum):
    """Lifecycle of one planned action during apply."""
    PENDING = "PENDING"
    IN_FLIGHT = "IN_FLIGHT"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    UNATTEMPTED = "UNATTEMPTED"


class ActionOutcome(BaseModel):
    """What happened to one action."""
    node_id: str
    action: ActionType
    status: ActionStatus = ActionStatus.PENDING
    attempts: int = Field(default=0, ge=0)
    provider_id: Optional[str] = None
    error: Optional[str] = None


class ApplyResult(BaseModel):
    """Outcome of an apply run, in plan order."""
    stack: str = "stack"
    outcomes: List[ActionOutcome] = Field(default_factory=list)
    cancelled: bool = False

    def _with_status(self, status: ActionStatus) -> List[str]:
        return [o.node_id for o in self.outcomes if o.status == status]

    @property
    def succeeded(self) -> List[str]:
        return self._with_status(ActionStatus.SUCCEEDED)

    @property
    def failed(self) -> List[str]:
        return self._with_status(ActionStatus.FAILED)

    @property
    def unattempted(self) -> List[str]:
        return self._with_status(ActionStatus.UNATTEMPTED)

    @property
    def ok(self) -> bool:
        return not self.cancelled and all(o.status == ActionStatus.SUCCEEDED for o in self.outcomes)

    def get(self, node_id: str) -> Optional[ActionOutcome]:
        for outcome in self.outcomes:
            if outcome.node_id == node_id:
                return outcome
        return None


class ExecutorSettings(BaseModel):
    """Concurrency and retry knobs for the executor."""
    concurrency: int = Field(default=10, ge=1, description="Maximum actions in flight")
    max_attempts: int = Field(default=5, ge=1, description="Attempts per action for transient errors")
    base_delay: float = Field(default=1.0, ge=0, description="First backoff delay in seconds")
    max_delay: float = Field(default=30.0, ge=0, description="Backoff delay cap in seconds")

    @model_validator(mode="after")
    def check_delays(self):
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must not be smaller than base_delay")
        return self

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retrying after the given failed attempt (1-based)."""
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)
