"""Declaration loader - load a stack declaration from YAML."""

import yaml
from pathlib import Path
from typing import Any, Dict, List
from pydantic import ValidationError
from ..graph.dependency_graph import DeploymentGraph
from ..model.resources import ResourceNode
from ..utils.errors import DeclarationLoadError
from ..utils.logging import get_logger

logger = get_logger("declare.loader")


def load_declaration(declaration_file: str) -> DeploymentGraph:
    """
    Load a stack declaration from a YAML file.

    Args:
        declaration_file: Path to declaration YAML file

    Returns:
        DeploymentGraph with every resource added and references wired

    Raises:
        DeclarationLoadError: If the file is missing or malformed
        DuplicateIdError, UnknownNodeError, CycleError: From graph construction
    """
    path = Path(declaration_file)

    if not path.exists():
        raise DeclarationLoadError(f"Declaration file not found: {declaration_file}")

    if not path.is_file():
        raise DeclarationLoadError(f"Path is not a file: {declaration_file}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise DeclarationLoadError(f"Invalid YAML in declaration file: {e}")
    except OSError as e:
        raise DeclarationLoadError(f"Error reading declaration file: {e}")

    graph = parse_declaration(data)
    logger.info(f"Loaded {len(graph)} resources for stack '{graph.name}' from {declaration_file}")
    return graph


def parse_declaration(data: Any) -> DeploymentGraph:
    """Build a DeploymentGraph from an already-parsed declaration mapping."""
    if not isinstance(data, dict):
        raise DeclarationLoadError("Declaration must contain a dictionary")

    if "resources" not in data:
        raise DeclarationLoadError("Declaration must contain 'resources' key")

    resources_data = data["resources"]
    if not isinstance(resources_data, dict):
        raise DeclarationLoadError("'resources' must be a mapping of id to resource")

    nodes: List[ResourceNode] = []
    for node_id, node_data in resources_data.items():
        if not isinstance(node_data, dict):
            raise DeclarationLoadError(f"Resource '{node_id}' must be a mapping")
        try:
            nodes.append(ResourceNode(
                id=str(node_id),
                kind=node_data.get("kind"),
                config=node_data.get("config") or {},
                depends_on=node_data.get("depends_on") or [],
            ))
        except ValidationError as e:
            raise DeclarationLoadError(f"Invalid resource '{node_id}': {e}")

    graph = DeploymentGraph(name=str(data.get("stack") or "stack"))
    graph.add_nodes(nodes)
    return graph


def graph_to_declaration(graph: DeploymentGraph) -> Dict[str, Any]:
    """Serialise a graph back to the declaration shape."""
    resources: Dict[str, Any] = {}
    for node in graph.nodes():
        entry: Dict[str, Any] = {"kind": node.kind.value, "config": node.config}
        explicit = [ref_id for ref_id in node.depends_on if ref_id not in node.inferred_references]
        if explicit:
            entry["depends_on"] = explicit
        resources[node.id] = entry
    return {"stack": graph.name, "resources": resources}


def dump_declaration(graph: DeploymentGraph) -> str:
    """Render a graph as declaration YAML."""
    return yaml.safe_dump(graph_to_declaration(graph), default_flow_style=False, sort_keys=False)
