"""Tests for dependency graph."""

import random
import pytest
from stackplan.graph.dependency_graph import DeploymentGraph
from stackplan.model.resources import ResourceKind, ResourceNode, ref
from stackplan.utils.errors import CycleError, DuplicateIdError, UnknownNodeError


@pytest.fixture
def sample_nodes():
    """Network, security group and instance chain."""
    return [
        ResourceNode(id="net", kind=ResourceKind.NETWORK, config={"cidr_block": "10.0.0.0/16"}),
        ResourceNode(id="sg", kind=ResourceKind.SECURITY_GROUP, config={"network": ref("net")}),
        ResourceNode(
            id="machine",
            kind=ResourceKind.INSTANCE,
            config={"instance_type": "t3a.medium", "image": "al2023", "security_group": ref("sg")},
        ),
    ]


def _bare(node_id):
    return ResourceNode(id=node_id, kind=ResourceKind.NETWORK, config={"cidr_block": "10.0.0.0/16"})


class TestDeploymentGraph:
    """Test graph construction and ordering."""

    def test_build_graph_from_nodes(self, sample_nodes):
        graph = DeploymentGraph()
        graph.add_nodes(sample_nodes)

        assert graph.graph.number_of_nodes() == 3
        assert graph.graph.number_of_edges() == 2
        assert graph.references_of("machine") == ["sg"]
        assert graph.dependents_of("net") == ["sg"]

    def test_declaration_order_does_not_matter(self, sample_nodes):
        """References to nodes declared later are wired."""
        graph = DeploymentGraph()
        graph.add_nodes(reversed(sample_nodes))
        assert list(graph.topological_order()) == ["net", "sg", "machine"]

    def test_duplicate_id(self, sample_nodes):
        graph = DeploymentGraph()
        graph.add_node(sample_nodes[0])
        with pytest.raises(DuplicateIdError) as exc_info:
            graph.add_node(_bare("net"))
        assert exc_info.value.node_id == "net"

    def test_unknown_reference(self):
        graph = DeploymentGraph()
        graph.add_node(_bare("a"))
        with pytest.raises(UnknownNodeError) as exc_info:
            graph.add_reference("a", "missing")
        assert exc_info.value.node_id == "missing"

    def test_unknown_inferred_reference(self):
        graph = DeploymentGraph()
        with pytest.raises(UnknownNodeError):
            graph.add_nodes([ResourceNode(id="sg", kind=ResourceKind.SECURITY_GROUP, config={"network": ref("nope")})])

    def test_cycle_rejected_without_mutation(self):
        """Closing a cycle fails and leaves edges and nodes untouched."""
        graph = DeploymentGraph()
        for node_id in ("a", "b", "c"):
            graph.add_node(_bare(node_id))
        graph.add_reference("a", "b")
        graph.add_reference("b", "c")
        edges_before = set(graph.graph.edges())

        with pytest.raises(CycleError) as exc_info:
            graph.add_reference("c", "a")

        assert set(graph.graph.edges()) == edges_before
        assert graph.get_node("c").depends_on == []
        assert exc_info.value.path == ["c", "a", "b", "c"]

    def test_self_reference_is_cycle(self):
        graph = DeploymentGraph()
        graph.add_node(_bare("a"))
        with pytest.raises(CycleError):
            graph.add_reference("a", "a")
        assert graph.graph.number_of_edges() == 0

    def test_add_reference_records_explicit_dependency(self):
        graph = DeploymentGraph()
        graph.add_node(_bare("a"))
        graph.add_node(_bare("b"))
        graph.add_reference("b", "a")
        graph.add_reference("b", "a")
        assert graph.get_node("b").depends_on == ["a"]
        assert graph.graph.number_of_edges() == 1

    def test_ties_broken_by_insertion_order(self):
        graph = DeploymentGraph()
        for node_id in ("z", "m", "a"):
            graph.add_node(_bare(node_id))
        assert list(graph.topological_order()) == ["z", "m", "a"]

    def test_topological_order_is_lazy(self, sample_nodes):
        graph = DeploymentGraph()
        graph.add_nodes(sample_nodes)
        order = graph.topological_order()
        assert next(order) == "net"

    def test_random_dags_respect_references(self):
        """Every node comes after all nodes it references."""
        rng = random.Random(7)
        for _ in range(20):
            graph = DeploymentGraph()
            ids = [f"n{i}" for i in range(15)]
            for node_id in ids:
                graph.add_node(_bare(node_id))
            for _ in range(30):
                a, b = rng.sample(ids, 2)
                try:
                    graph.add_reference(a, b)
                except CycleError:
                    pass
            order = list(graph.topological_order())
            position = {node_id: idx for idx, node_id in enumerate(order)}
            assert sorted(order) == sorted(ids)
            for a, b in graph.graph.edges():
                assert position[b] < position[a]

    def test_upstream_and_downstream(self, sample_nodes):
        graph = DeploymentGraph()
        graph.add_nodes(sample_nodes)
        assert graph.get_upstream_resources("machine") == {"sg", "net"}
        assert graph.get_downstream_resources("net") == {"sg", "machine"}
        assert graph.get_downstream_resources("missing") == set()

    def test_validate_wires_nodes_added_one_by_one(self, sample_nodes):
        graph = DeploymentGraph()
        for node in sample_nodes:
            graph.add_node(node)
        assert graph.graph.number_of_edges() == 0
        graph.validate()
        assert graph.graph.number_of_edges() == 2
