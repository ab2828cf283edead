"""Resource model: declared nodes and per-kind schemas."""

from .resources import ResourceKind, ResourceNode, ref, iter_reference_tokens
from .schemas import validate_node_config, KIND_SCHEMAS

__all__ = [
    "ResourceKind",
    "ResourceNode",
    "ref",
    "iter_reference_tokens",
    "validate_node_config",
    "KIND_SCHEMAS",
]
