"""Stack declarations: YAML in, DeploymentGraph out."""

from .loader import load_declaration, parse_declaration, graph_to_declaration, dump_declaration

__all__ = ["load_declaration", "parse_declaration", "graph_to_declaration", "dump_declaration"]
