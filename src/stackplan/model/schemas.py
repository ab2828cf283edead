"""Per-kind configuration schemas.

Each kind gets a small pydantic model listing the attributes the engine
requires. Extra attributes pass through untouched; the provider owns
anything beyond this minimal contract.
"""

import ipaddress
from typing import Dict, List, Optional, Type
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from ..utils.errors import ConfigValidationError
from .resources import ResourceKind, ResourceNode


def _check_cidr(value: str) -> str:
    try:
        ipaddress.ip_network(value, strict=False)
    except ValueError as e:
        raise ValueError(f"invalid CIDR '{value}': {e}")
    return value


class KindSchema(BaseModel):
    """Base schema: unknown attributes are allowed."""

    model_config = ConfigDict(extra="allow")


class NetworkSchema(KindSchema):
    cidr_block: str

    @field_validator("cidr_block")
    @classmethod
    def check_cidr_block(cls, value: str) -> str:
        return _check_cidr(value)


class SubnetSchema(KindSchema):
    network: str = Field(..., min_length=1)
    cidr_block: str

    @field_validator("cidr_block")
    @classmethod
    def check_cidr_block(cls, value: str) -> str:
        return _check_cidr(value)


class SecurityGroupSchema(KindSchema):
    network: str = Field(..., min_length=1)


class SecurityRuleSchema(KindSchema):
    security_group: str = Field(..., min_length=1)
    protocol: str
    from_port: int = Field(..., ge=0, le=65535)
    to_port: int = Field(..., ge=0, le=65535)
    direction: str = "ingress"
    cidr: Optional[str] = None

    @field_validator("protocol")
    @classmethod
    def check_protocol(cls, value: str) -> str:
        if value.lower() not in ("tcp", "udp", "icmp", "all"):
            raise ValueError(f"unsupported protocol '{value}'")
        return value

    @field_validator("direction")
    @classmethod
    def check_direction(cls, value: str) -> str:
        if value not in ("ingress", "egress"):
            raise ValueError(f"direction must be 'ingress' or 'egress', got '{value}'")
        return value

    @field_validator("cidr")
    @classmethod
    def check_rule_cidr(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _check_cidr(value)

    @model_validator(mode="after")
    def check_port_range(self):
        if self.from_port > self.to_port:
            raise ValueError(f"port range {self.from_port}-{self.to_port} is inverted")
        return self


class InstanceSchema(KindSchema):
    instance_type: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1)
    volume_size: Optional[int] = Field(None, gt=0)


class LoadBalancerSchema(KindSchema):
    subnets: List[str] = Field(..., min_length=1)
    scheme: str = "internet-facing"

    @field_validator("scheme")
    @classmethod
    def check_scheme(cls, value: str) -> str:
        if value not in ("internet-facing", "internal"):
            raise ValueError(f"scheme must be 'internet-facing' or 'internal', got '{value}'")
        return value


class ListenerSchema(KindSchema):
    load_balancer: str = Field(..., min_length=1)
    protocol: str
    port: int = Field(..., ge=1, le=65535)

    @field_validator("protocol")
    @classmethod
    def check_protocol(cls, value: str) -> str:
        if value not in ("HTTP", "HTTPS", "TCP"):
            raise ValueError(f"listener protocol must be HTTP, HTTPS or TCP, got '{value}'")
        return value


class TargetGroupSchema(KindSchema):
    protocol: str
    port: int = Field(..., ge=1, le=65535)
    targets: List[str] = Field(default_factory=list)


class DistributionSchema(KindSchema):
    origin: str = Field(..., min_length=1)
    origin_protocol_policy: str = "http-only"

    @field_validator("origin_protocol_policy")
    @classmethod
    def check_policy(cls, value: str) -> str:
        if value not in ("http-only", "https-only", "match-viewer"):
            raise ValueError(f"unsupported origin protocol policy '{value}'")
        return value


KIND_SCHEMAS: Dict[ResourceKind, Type[KindSchema]] = {
    ResourceKind.NETWORK: NetworkSchema,
    ResourceKind.SUBNET: SubnetSchema,
    ResourceKind.SECURITY_GROUP: SecurityGroupSchema,
    ResourceKind.SECURITY_RULE: SecurityRuleSchema,
    ResourceKind.INSTANCE: InstanceSchema,
    ResourceKind.LOAD_BALANCER: LoadBalancerSchema,
    ResourceKind.LISTENER: ListenerSchema,
    ResourceKind.TARGET_GROUP: TargetGroupSchema,
    ResourceKind.DISTRIBUTION: DistributionSchema,
}


def validate_node_config(node: ResourceNode) -> None:
    """
    Validate a node's configuration against its kind schema.

    Raises:
        ConfigValidationError: naming the node and every violated attribute
    """
    schema = KIND_SCHEMAS[ResourceKind(node.kind)]
    try:
        schema.model_validate(node.config)
    except ValidationError as e:
        problems = []
        for err in e.errors():
            location = ".".join(str(part) for part in err["loc"]) or "config"
            problems.append(f"{location}: {err['msg']}")
        raise ConfigValidationError(
            f"Invalid configuration for '{node.id}' ({ResourceKind(node.kind).value}): {'; '.join(problems)}",
            node_id=node.id,
        )
