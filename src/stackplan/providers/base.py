"""Abstract base class for infrastructure providers."""

from abc import ABC, abstractmethod
from typing import Any, Dict
from pydantic import BaseModel, Field
from ..model.resources import ResourceKind


class ProviderResult(BaseModel):
    """What a provider returns after a successful create or update."""
    provider_id: str = Field(..., description="Provider-assigned identifier")
    outputs: Dict[str, Any] = Field(default_factory=dict, description="Attributes computed by the provider")


class Provider(ABC):
    """
    Abstract provider capability.

    Implementations talk to one infrastructure API. They receive fully
    resolved configuration (no ${...} tokens) and must raise
    TransientProviderError for failures worth retrying and
    PermanentProviderError for everything else.
    """

    name = "provider"

    @abstractmethod
    async def create(self, kind: ResourceKind, config: Dict[str, Any]) -> ProviderResult:
        """Create a resource and return its identifier and outputs."""
        pass

    @abstractmethod
    async def update(self, kind: ResourceKind, provider_id: str, config: Dict[str, Any]) -> ProviderResult:
        """Update an existing resource in place."""
        pass

    @abstractmethod
    async def delete(self, kind: ResourceKind, provider_id: str) -> None:
        """Delete a resource."""
        pass
