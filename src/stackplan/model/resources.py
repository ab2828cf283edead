"""Pydantic models for declared resources."""

import re
from enum import Enum
from typing import List, Dict, Any, Iterator
from pydantic import BaseModel, ConfigDict, Field, field_validator


# "$${...}" is an escaped literal "${...}", not a reference
REFERENCE_PATTERN = re.compile(r"(?<!\$)\$\{([A-Za-z0-9_\-]+)(?:\.([A-Za-z0-9_\-]+))?\}")
ESCAPED_REFERENCE = "$${"


class ResourceKind(str, Enum):
    """Infrastructure object kinds the engine understands."""
    NETWORK = "network"
    SUBNET = "subnet"
    SECURITY_GROUP = "security-group"
    SECURITY_RULE = "security-rule"
    INSTANCE = "instance"
    LOAD_BALANCER = "load-balancer"
    LISTENER = "listener"
    TARGET_GROUP = "target-group"
    DISTRIBUTION = "distribution"


class ResourceNode(BaseModel):
    """Desired configuration for one infrastructure object."""

    model_config = ConfigDict(use_enum_values=False)

    id: str = Field(..., min_length=1, description="Logical name, unique within a deployment")
    kind: ResourceKind = Field(..., description="Resource kind")
    config: Dict[str, Any] = Field(default_factory=dict, description="Desired attributes")
    depends_on: List[str] = Field(default_factory=list, description="Explicit references to other node ids")

    @field_validator("id")
    @classmethod
    def check_id(cls, value: str) -> str:
        if not re.fullmatch(r"[A-Za-z0-9_\-]+", value):
            raise ValueError(f"invalid logical id '{value}' (letters, digits, '-' and '_' only)")
        return value

    @property
    def inferred_references(self) -> List[str]:
        """Node ids named by ${id} tokens anywhere in the config."""
        seen: List[str] = []
        for ref_id, _ in iter_reference_tokens(self.config):
            if ref_id not in seen:
                seen.append(ref_id)
        return seen

    @property
    def references(self) -> List[str]:
        """Explicit plus inferred references, first-seen order."""
        refs = list(dict.fromkeys(self.depends_on))
        for ref_id in self.inferred_references:
            if ref_id not in refs:
                refs.append(ref_id)
        return refs


def iter_reference_tokens(value: Any) -> Iterator[tuple]:
    """Yield (node_id, attribute) for every ${...} token inside value."""
    if isinstance(value, str):
        for match in REFERENCE_PATTERN.finditer(value):
            yield match.group(1), match.group(2)
    elif isinstance(value, dict):
        for item in value.values():
            yield from iter_reference_tokens(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from iter_reference_tokens(item)


def ref(node_id: str, attribute: str = None) -> str:
    """Build a reference token for use inside a node's config."""
    if attribute:
        return f"${{{node_id}.{attribute}}}"
    return f"${{{node_id}}}"
