"""Planner: diff the desired graph against prior state."""

import networkx as nx
from typing import Any, Dict, List, Optional
from ..graph.dependency_graph import DeploymentGraph
from ..model.resources import ResourceKind
from ..state.models import ProviderState
from ..utils.errors import ConfigValidationError, StateStoreError
from ..utils.logging import get_logger
from .models import ActionType, AttributeChange, Plan, PlannedAction

logger = get_logger("planning.planner")

REFERENCES_ATTRIBUTE = "depends_on"


def diff_config(before: Dict[str, Any], after: Dict[str, Any]) -> Dict[str, AttributeChange]:
    """Return only the attributes whose values differ (removed ones have after=None)."""
    changes: Dict[str, AttributeChange] = {}
    for key, value in after.items():
        if key not in before or before[key] != value:
            changes[key] = AttributeChange(before=before.get(key), after=value)
    for key, value in before.items():
        if key not in after:
            changes[key] = AttributeChange(before=value, after=None)
    return changes


def plan(graph: DeploymentGraph, prior_state: Optional[ProviderState] = None) -> Plan:
    """
    Build a plan that moves prior_state to the graph's desired state.

    Every node is validated before any action is produced; one invalid
    node aborts the whole plan.

    Args:
        graph: Desired deployment graph
        prior_state: Last-applied state (empty if None)

    Returns:
        Plan with creates/updates in dependency order, then deletes in
        reverse dependency order

    Raises:
        ConfigValidationError: If any node violates its kind schema or
            changes kind
        UnknownNodeError, CycleError: If references cannot be wired
    """
    if prior_state is None:
        prior_state = ProviderState()

    graph.validate()
    _check_kinds(graph, prior_state)

    actions: List[PlannedAction] = []
    planned_ids = set()

    for node_id in graph.topological_order():
        node = graph.get_node(node_id)
        references = node.references
        requires = [ref_id for ref_id in references if ref_id in planned_ids]
        entry = prior_state.get(node_id)

        if entry is None:
            changes = {key: AttributeChange(after=value) for key, value in node.config.items()}
            action_type = ActionType.CREATE
        else:
            changes = diff_config(entry.config, node.config)
            if set(entry.references) != set(references):
                changes[REFERENCES_ATTRIBUTE] = AttributeChange(before=entry.references, after=references)
            if not changes:
                logger.debug(f"No changes for {node_id}")
                continue
            action_type = ActionType.UPDATE

        actions.append(PlannedAction(
            node_id=node_id,
            kind=node.kind,
            action=action_type,
            changes=changes,
            config=dict(node.config),
            references=list(references),
            requires=requires,
        ))
        planned_ids.add(node_id)

    actions.extend(_plan_deletes(graph, prior_state, planned_ids))

    result = Plan(stack=graph.name, actions=actions)
    summary = result.summary()
    logger.info(
        f"Plan for '{graph.name}': {summary['CREATE']} to create, "
        f"{summary['UPDATE']} to update, {summary['DELETE']} to delete"
    )
    return result


def _check_kinds(graph: DeploymentGraph, prior_state: ProviderState) -> None:
    """A logical id keeps its kind for life."""
    for node in graph.nodes():
        entry = prior_state.get(node.id)
        if entry is not None and ResourceKind(entry.kind) != ResourceKind(node.kind):
            raise ConfigValidationError(
                f"Resource '{node.id}' changed kind from {ResourceKind(entry.kind).value} "
                f"to {ResourceKind(node.kind).value}; use a new logical id to replace it",
                node_id=node.id,
            )


def _plan_deletes(graph: DeploymentGraph, prior_state: ProviderState, planned_ids: set) -> List[PlannedAction]:
    """Deletes for state entries no longer declared, dependents first."""
    orphans = [node_id for node_id in prior_state.entries if node_id not in graph]
    if not orphans:
        return []

    state_index = {node_id: idx for idx, node_id in enumerate(prior_state.entries)}
    orphan_graph = nx.DiGraph()
    orphan_graph.add_nodes_from(orphans)
    for node_id in orphans:
        for ref_id in prior_state.entries[node_id].references:
            if ref_id in orphan_graph:
                orphan_graph.add_edge(node_id, ref_id)

    try:
        ordered = list(nx.lexicographical_topological_sort(orphan_graph, key=state_index.__getitem__))
    except nx.NetworkXUnfeasible:
        raise StateStoreError("Prior state contains a reference cycle among removed resources")

    deletes = []
    for node_id in ordered:
        entry = prior_state.entries[node_id]
        requires = [
            other_id for other_id, other in prior_state.entries.items()
            if node_id in other.references and (other_id in orphan_graph or other_id in planned_ids)
        ]
        deletes.append(PlannedAction(
            node_id=node_id,
            kind=entry.kind,
            action=ActionType.DELETE,
            changes={key: AttributeChange(before=value) for key, value in entry.config.items()},
            config=dict(entry.config),
            references=list(entry.references),
            requires=requires,
        ))
    return deletes
