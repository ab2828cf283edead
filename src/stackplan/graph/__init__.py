"""Dependency graph over declared resources."""

from .dependency_graph import DeploymentGraph

__all__ = ["DeploymentGraph"]
