"""Custom exception classes for StackPlan."""

from typing import Optional


class StackPlanError(Exception):
    """Base exception for all StackPlan errors."""
    pass


class NodeError(StackPlanError):
    """Base for errors that concern one specific resource node."""

    def __init__(self, message: str, node_id: Optional[str] = None):
        super().__init__(message)
        self.node_id = node_id


class DuplicateIdError(NodeError):
    """Raised when a logical id is added to a graph twice."""
    pass


class UnknownNodeError(NodeError):
    """Raised when a reference names a node that is not in the graph."""
    pass


class CycleError(NodeError):
    """Raised when a reference would close a dependency cycle."""

    def __init__(self, message: str, node_id: Optional[str] = None, path: Optional[list] = None):
        super().__init__(message, node_id)
        self.path = path or []


class ConfigValidationError(NodeError):
    """Raised when a node's configuration violates its kind's schema."""
    pass


class ProviderError(NodeError):
    """Raised by providers when an API call fails."""

    transient = False


class TransientProviderError(ProviderError):
    """Provider failure worth retrying (rate limit, timeout)."""

    transient = True


class PermanentProviderError(ProviderError):
    """Provider failure that will not succeed on retry (rejected config, quota)."""
    pass


class PartialApplyError(StackPlanError):
    """Raised when apply stops before every action succeeded."""

    def __init__(self, message: str, result=None):
        super().__init__(message)
        self.result = result


class ApplyCancelledError(PartialApplyError):
    """Raised when apply is cancelled before all actions ran."""
    pass


class DeclarationLoadError(StackPlanError):
    """Raised when a stack declaration cannot be loaded or is invalid."""
    pass


class StateStoreError(StackPlanError):
    """Raised when provider state cannot be read or written."""
    pass


class ConfigError(StackPlanError):
    """Raised when configuration is invalid or missing."""
    pass
