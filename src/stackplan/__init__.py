"""StackPlan - Dependency-ordered plan/apply engine for declared infrastructure."""

from typing import Optional
from .declare.loader import load_declaration
from .execution.executor import Executor, apply_plan
from .execution.models import ApplyResult, ExecutorSettings
from .graph.dependency_graph import DeploymentGraph
from .model.resources import ResourceKind, ResourceNode, ref
from .planning.models import Plan
from .planning.planner import plan
from .providers.base import Provider
from .providers.simulated import SimulatedProvider
from .state.store import JsonFileStateStore, StateStore
from .utils.logging import setup_logging, get_logger
from .utils.errors import StackPlanError

__version__ = "0.1.0"

__all__ = [
    "plan_stack",
    "apply_stack",
    "plan",
    "apply_plan",
    "Executor",
    "DeploymentGraph",
    "ResourceNode",
    "ResourceKind",
    "ref",
    "Plan",
    "ApplyResult",
    "ExecutorSettings",
    "StackPlanError",
]

logger = get_logger("api")


def plan_stack(declaration_path: str, state_store: StateStore) -> Plan:
    """Load a declaration and plan it against the stored state."""
    graph = load_declaration(declaration_path)
    prior_state = state_store.load()
    return plan(graph, prior_state)


def apply_stack(
    declaration_path: str,
    state_path: str,
    settings: Optional[ExecutorSettings] = None,
    provider: Optional[Provider] = None,
) -> ApplyResult:
    """
    Plan and apply a declaration, persisting state to state_path.

    Without an explicit provider the simulated provider is used, seeded
    with the resources already recorded in state.
    """
    store = JsonFileStateStore(state_path)
    try:
        stack_plan = plan_stack(declaration_path, store)
        if provider is None:
            provider = SimulatedProvider.from_state(store.load())
        return apply_plan(stack_plan, provider, store, settings)
    except StackPlanError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during apply: {e}", exc_info=True)
        raise StackPlanError(f"Apply failed: {e}") from e
