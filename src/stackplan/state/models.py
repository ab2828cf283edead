"""Pydantic models for last-applied provider state."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from ..model.resources import ResourceKind


class StateEntry(BaseModel):
    """Last-applied snapshot of one resource."""
    kind: ResourceKind = Field(..., description="Resource kind at apply time")
    config: Dict[str, Any] = Field(default_factory=dict, description="Configuration as declared (unresolved)")
    references: List[str] = Field(default_factory=list, description="Node ids this resource referenced")
    provider_id: str = Field(..., description="Identifier assigned by the provider")
    outputs: Dict[str, Any] = Field(default_factory=dict, description="Attributes returned by the provider")


class ProviderState(BaseModel):
    """Snapshot of every applied resource, keyed by logical id."""
    version: str = Field(default="1", description="State format version")
    stack: Optional[str] = Field(None, description="Stack name the state belongs to")
    entries: Dict[str, StateEntry] = Field(default_factory=dict)

    def get(self, node_id: str) -> Optional[StateEntry]:
        return self.entries.get(node_id)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self.entries

    def __len__(self) -> int:
        return len(self.entries)
