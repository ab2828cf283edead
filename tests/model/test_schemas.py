"""Tests for resource nodes and kind schemas."""

import pytest
from pydantic import ValidationError
from stackplan.model.resources import ResourceKind, ResourceNode, ref
from stackplan.model.schemas import validate_node_config
from stackplan.utils.errors import ConfigValidationError


class TestResourceNode:
    """Test node model and reference inference."""

    def test_inferred_references_from_tokens(self):
        """Tokens anywhere in config become references."""
        node = ResourceNode(
            id="lb",
            kind=ResourceKind.LOAD_BALANCER,
            config={"subnets": [ref("public-a"), ref("public-b")], "tags": {"sg": ref("sg", "id")}},
        )
        assert node.inferred_references == ["public-a", "public-b", "sg"]

    def test_references_merge_explicit_first(self):
        """Explicit depends_on come first, duplicates dropped."""
        node = ResourceNode(
            id="machine",
            kind=ResourceKind.INSTANCE,
            config={"subnet": ref("public-a")},
            depends_on=["rule", "public-a"],
        )
        assert node.references == ["rule", "public-a"]

    def test_embedded_token(self):
        """Tokens inside longer strings are still references."""
        node = ResourceNode(id="x", kind=ResourceKind.INSTANCE, config={"user_data": "curl http://${lb.dns_name}/"})
        assert node.inferred_references == ["lb"]

    def test_invalid_id_rejected(self):
        """Ids with spaces or dots are rejected."""
        with pytest.raises(ValidationError):
            ResourceNode(id="bad id", kind=ResourceKind.NETWORK)

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            ResourceNode(id="thing", kind="database")

    def test_escaped_token_is_not_a_reference(self):
        node = ResourceNode(
            id="machine",
            kind=ResourceKind.INSTANCE,
            config={"user_data": "cd $${HOME} && run --sg ${sg}"},
        )
        assert node.references == ["sg"]

class TestKindSchemas:
    """Test per-kind validation."""

    def test_valid_network(self):
        validate_node_config(ResourceNode(id="vpc", kind=ResourceKind.NETWORK, config={"cidr_block": "10.0.0.0/16"}))

    def test_network_bad_cidr(self):
        node = ResourceNode(id="vpc", kind=ResourceKind.NETWORK, config={"cidr_block": "10.0.0.300/16"})
        with pytest.raises(ConfigValidationError, match="vpc") as exc_info:
            validate_node_config(node)
        assert exc_info.value.node_id == "vpc"

    def test_security_rule_missing_port_range(self):
        """A security rule without ports is rejected with the node id."""
        node = ResourceNode(
            id="rule",
            kind=ResourceKind.SECURITY_RULE,
            config={"security_group": ref("sg"), "protocol": "tcp"},
        )
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_node_config(node)
        assert exc_info.value.node_id == "rule"
        assert "from_port" in str(exc_info.value)
        assert "to_port" in str(exc_info.value)

    def test_security_rule_inverted_range(self):
        node = ResourceNode(
            id="rule",
            kind=ResourceKind.SECURITY_RULE,
            config={"security_group": ref("sg"), "protocol": "tcp", "from_port": 443, "to_port": 80},
        )
        with pytest.raises(ConfigValidationError, match="inverted"):
            validate_node_config(node)

    def test_security_rule_ipv6_cidr(self):
        validate_node_config(ResourceNode(
            id="rule",
            kind=ResourceKind.SECURITY_RULE,
            config={"security_group": ref("sg"), "protocol": "tcp", "from_port": 0, "to_port": 65535, "cidr": "::/0"},
        ))

    def test_extra_attributes_allowed(self):
        validate_node_config(ResourceNode(
            id="machine",
            kind=ResourceKind.INSTANCE,
            config={"instance_type": "t3a.medium", "image": "al2023", "root_device": "/dev/xvda"},
        ))

    def test_load_balancer_needs_subnets(self):
        node = ResourceNode(id="lb", kind=ResourceKind.LOAD_BALANCER, config={"subnets": []})
        with pytest.raises(ConfigValidationError):
            validate_node_config(node)

    def test_listener_protocol(self):
        node = ResourceNode(
            id="listener",
            kind=ResourceKind.LISTENER,
            config={"load_balancer": ref("lb"), "protocol": "FTP", "port": 21},
        )
        with pytest.raises(ConfigValidationError, match="protocol"):
            validate_node_config(node)

    def test_distribution_needs_origin(self):
        node = ResourceNode(id="cdn", kind=ResourceKind.DISTRIBUTION, config={})
        with pytest.raises(ConfigValidationError, match="origin"):
            validate_node_config(node)
