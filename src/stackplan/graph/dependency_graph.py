"""Directed dependency graph over declared resource nodes."""

import networkx as nx
from typing import Dict, Iterable, Iterator, List, Optional, Set
from ..model.resources import ResourceNode
from ..model.schemas import validate_node_config
from ..utils.errors import CycleError, DuplicateIdError, UnknownNodeError
from ..utils.logging import get_logger

logger = get_logger("graph.dependency_graph")


class DeploymentGraph:
    """Directed dependency graph: nodes=resources, edges=node -> referenced node."""

    def __init__(self, name: str = "stack"):
        self.name = name
        self.graph = nx.DiGraph()
        self._nodes: Dict[str, ResourceNode] = {}
        self._order: Dict[str, int] = {}

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def add_node(self, node: ResourceNode) -> None:
        """Add a node. References are wired separately."""
        if node.id in self._nodes:
            raise DuplicateIdError(f"Duplicate resource id: '{node.id}'", node_id=node.id)
        self._nodes[node.id] = node
        self._order[node.id] = len(self._order)
        self.graph.add_node(node.id, kind=node.kind)

    def add_nodes(self, nodes: Iterable[ResourceNode]) -> None:
        """Add a batch of nodes, then wire all of their references."""
        nodes = list(nodes)
        for node in nodes:
            self.add_node(node)
        for node in nodes:
            for ref_id in node.references:
                self.add_reference(node.id, ref_id)
        logger.debug(
            f"Graph '{self.name}' now has {self.graph.number_of_nodes()} nodes "
            f"and {self.graph.number_of_edges()} edges"
        )

    def add_reference(self, from_id: str, to_id: str) -> None:
        """
        Record that from_id depends on to_id.

        Raises:
            UnknownNodeError: If either id is not in the graph
            CycleError: If the edge would close a cycle (graph left unchanged)
        """
        for node_id in (from_id, to_id):
            if node_id not in self._nodes:
                raise UnknownNodeError(
                    f"Unknown resource id '{node_id}' in reference {from_id} -> {to_id}",
                    node_id=node_id,
                )

        if self.graph.has_edge(from_id, to_id):
            return

        if from_id == to_id or nx.has_path(self.graph, to_id, from_id):
            if from_id == to_id:
                cycle = [from_id, from_id]
            else:
                cycle = [from_id] + nx.shortest_path(self.graph, to_id, from_id)
            raise CycleError(
                f"Reference {from_id} -> {to_id} would create a cycle: {' -> '.join(cycle)}",
                node_id=from_id,
                path=cycle,
            )

        self.graph.add_edge(from_id, to_id)
        node = self._nodes[from_id]
        if to_id not in node.references:
            node.depends_on.append(to_id)
        logger.debug(f"Added dependency edge: {from_id} -> {to_id}")

    def topological_order(self) -> Iterator[str]:
        """Yield node ids so every node follows the nodes it references.

        Independent nodes come out in insertion order.
        """
        dependency_first = self.graph.reverse(copy=False)
        yield from nx.lexicographical_topological_sort(dependency_first, key=self._order.__getitem__)

    def validate(self) -> None:
        """Wire any unwired references and check every node's schema."""
        for node_id in list(self._nodes):
            node = self._nodes[node_id]
            for ref_id in node.references:
                self.add_reference(node_id, ref_id)
        for node_id in self.topological_order():
            validate_node_config(self._nodes[node_id])
        logger.info(f"Validated graph '{self.name}' ({len(self._nodes)} resources)")

    def get_node(self, node_id: str) -> Optional[ResourceNode]:
        """Get a node by id."""
        return self._nodes.get(node_id)

    def nodes(self) -> List[ResourceNode]:
        """All nodes in insertion order."""
        return list(self._nodes.values())

    def references_of(self, node_id: str) -> List[str]:
        """Direct references of a node, insertion order."""
        if node_id not in self.graph:
            return []
        return sorted(self.graph.successors(node_id), key=self._order.__getitem__)

    def dependents_of(self, node_id: str) -> List[str]:
        """Nodes that reference node_id directly."""
        if node_id not in self.graph:
            return []
        return sorted(self.graph.predecessors(node_id), key=self._order.__getitem__)

    def get_downstream_resources(self, node_id: str) -> Set[str]:
        """Get all resources that depend on the given resource, directly or not."""
        if node_id not in self.graph:
            return set()
        return set(nx.ancestors(self.graph, node_id))

    def get_upstream_resources(self, node_id: str) -> Set[str]:
        """Get all resources the given resource depends on, directly or not."""
        if node_id not in self.graph:
            return set()
        return set(nx.descendants(self.graph, node_id))
