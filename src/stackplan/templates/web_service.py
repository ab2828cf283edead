"""Web service template: network, instance, optional load balancer and CDN.

One template covers both deployment profiles (direct instance access, or
load balancer plus CDN in front of it); the profile is chosen by options.
"""

import ipaddress
from typing import List
from pydantic import BaseModel, Field, field_validator, model_validator
from ..graph.dependency_graph import DeploymentGraph
from ..model.resources import ResourceKind, ResourceNode, ref
from ..utils.errors import ConfigError
from ..utils.logging import get_logger

logger = get_logger("templates.web_service")

AVAILABILITY_ZONES = ["a", "b", "c", "d", "e", "f"]


class WebServiceOptions(BaseModel):
    """Knobs for the web service template."""
    name: str = Field(default="url-shortener", min_length=1)
    region: str = Field(default="us-east-1")
    cidr_block: str = Field(default="10.0.0.0/16")
    max_azs: int = Field(default=2, ge=1, le=len(AVAILABILITY_ZONES))
    instance_type: str = Field(default="t3a.medium")
    image: str = Field(default="amazon-linux-2023")
    volume_size: int = Field(default=50, gt=0)
    volume_type: str = Field(default="io2")
    volume_iops: int = Field(default=3200, gt=0)
    app_port: int = Field(default=3333, ge=1, le=65535)
    service_command: str = Field(default="/var/url-shortener/url-shortener")
    with_load_balancer: bool = True
    with_cdn: bool = True

    @field_validator("cidr_block")
    @classmethod
    def check_cidr_block(cls, value: str) -> str:
        network = ipaddress.ip_network(value, strict=False)
        if network.version != 4 or network.prefixlen > 22:
            raise ValueError("cidr_block must be an IPv4 network of /22 or larger")
        return value

    @model_validator(mode="after")
    def check_subnet_room(self):
        room = 2 ** (24 - ipaddress.ip_network(self.cidr_block, strict=False).prefixlen)
        if self.max_azs > room:
            raise ValueError(f"cidr_block {self.cidr_block} holds only {room} /24 subnets, max_azs is {self.max_azs}")
        return self


def _subnet_cidrs(cidr_block: str, count: int) -> List[str]:
    network = ipaddress.ip_network(cidr_block, strict=False)
    subnets = network.subnets(new_prefix=24)
    return [str(next(subnets)) for _ in range(count)]


def web_service_template(options: WebServiceOptions = None) -> DeploymentGraph:
    """
    Build the web service stack as a DeploymentGraph.

    Raises:
        ConfigError: If the CDN is requested without the load balancer
    """
    if options is None:
        options = WebServiceOptions()

    if options.with_cdn and not options.with_load_balancer:
        raise ConfigError("with_cdn requires with_load_balancer: the CDN origin is the load balancer")

    nodes: List[ResourceNode] = [
        ResourceNode(id="vpc", kind=ResourceKind.NETWORK, config={
            "cidr_block": options.cidr_block,
            "nat_gateways": 0,
            "tags": {"stack": options.name},
        }),
    ]

    subnet_ids = []
    for zone, cidr in zip(AVAILABILITY_ZONES, _subnet_cidrs(options.cidr_block, options.max_azs)):
        subnet_id = f"public-{zone}"
        subnet_ids.append(subnet_id)
        nodes.append(ResourceNode(id=subnet_id, kind=ResourceKind.SUBNET, config={
            "network": ref("vpc"),
            "cidr_block": cidr,
            "availability_zone": f"{options.region}{zone}",
            "public": True,
        }))

    nodes.append(ResourceNode(id="security-group", kind=ResourceKind.SECURITY_GROUP, config={
        "network": ref("vpc"),
        "description": f"{options.name} open access",
    }))
    for rule_id, cidr, description in (
        ("allow-all-tcp-ipv4", "0.0.0.0/0", "All Open IPv4"),
        ("allow-all-tcp-ipv6", "::/0", "All Open IPv6"),
    ):
        nodes.append(ResourceNode(id=rule_id, kind=ResourceKind.SECURITY_RULE, config={
            "security_group": ref("security-group"),
            "direction": "ingress",
            "protocol": "tcp",
            "from_port": 0,
            "to_port": 65535,
            "cidr": cidr,
            "description": description,
        }))

    nodes.append(ResourceNode(
        id="machine",
        kind=ResourceKind.INSTANCE,
        config={
            "instance_type": options.instance_type,
            "image": options.image,
            "subnet": ref(subnet_ids[0]),
            "security_group": ref("security-group"),
            "volume_size": options.volume_size,
            "volume_type": options.volume_type,
            "volume_iops": options.volume_iops,
            "root_device": "/dev/xvda",
            "services": [{
                "name": options.name,
                "command": options.service_command,
                "cwd": options.service_command.rsplit("/", 1)[0],
                "enabled": True,
            }],
        },
        depends_on=["allow-all-tcp-ipv4", "allow-all-tcp-ipv6"],
    ))

    if options.with_load_balancer:
        nodes.extend([
            ResourceNode(id="load-balancer", kind=ResourceKind.LOAD_BALANCER, config={
                "subnets": [ref(subnet_id) for subnet_id in subnet_ids],
                "security_group": ref("security-group"),
                "scheme": "internet-facing",
            }),
            ResourceNode(id="targets", kind=ResourceKind.TARGET_GROUP, config={
                "network": ref("vpc"),
                "protocol": "HTTP",
                "port": options.app_port,
                "targets": [ref("machine")],
            }),
            ResourceNode(id="listener", kind=ResourceKind.LISTENER, config={
                "load_balancer": ref("load-balancer"),
                "protocol": "HTTP",
                "port": 80,
                "default_target_group": ref("targets"),
            }),
        ])

    if options.with_cdn:
        nodes.append(ResourceNode(
            id="cdn",
            kind=ResourceKind.DISTRIBUTION,
            config={
                "origin": ref("load-balancer", "dns_name"),
                "origin_protocol_policy": "http-only",
                "origin_request_policy": "all-viewer-and-cloudfront",
                "allowed_methods": ["GET", "HEAD", "OPTIONS", "PUT", "PATCH", "POST", "DELETE"],
            },
            depends_on=["listener"],
        ))

    graph = DeploymentGraph(name=options.name)
    graph.add_nodes(nodes)
    logger.info(
        f"Built web service template '{options.name}' with {len(graph)} resources "
        f"(load balancer: {options.with_load_balancer}, cdn: {options.with_cdn})"
    )
    return graph

