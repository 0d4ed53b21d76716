"""
Directed acyclic graph of resource references.

A node is added together with its dependencies, and every dependency must
already be in the graph. Insertion order is therefore always a valid
topological order, and no sequence of additions can close a cycle.
"""

from typing import Dict, List, Optional, Any, Iterable
from dataclasses import dataclass, field


@dataclass
class DAGNode:
    """A declared resource in the reference graph."""

    name: str
    kind: str
    dependencies: tuple[str, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict)


class DAG:
    """
    Append-only graph of resource references.

    An edge ``a -> b`` means resource ``b`` references resource ``a`` and
    must be realized after it.
    """

    def __init__(self):
        self.nodes: Dict[str, DAGNode] = {}

    def add_node(
        self,
        name: str,
        kind: str,
        dependencies: Iterable[str] = (),
        metadata: Optional[Dict[str, Any]] = None,
    ) -> DAGNode:
        """
        Add a node after all of its dependencies.

        Nothing is added if the node is rejected.

        Raises:
            ValueError: If the name is taken, the node references itself, or
                a dependency has not been added yet
        """
        if name in self.nodes:
            raise ValueError(f"Node '{name}' already exists in DAG")

        dependencies = tuple(dependencies)
        if name in dependencies:
            raise ValueError(f"Node '{name}' cannot depend on itself")
        missing = [dep for dep in dependencies if dep not in self.nodes]
        if missing:
            raise ValueError(
                f"Node '{name}' depends on nodes not in DAG: {', '.join(missing)}"
            )

        node = DAGNode(name=name, kind=kind, dependencies=dependencies, metadata=metadata or {})
        self.nodes[name] = node
        return node

    def remove_node(self, name: str) -> None:
        """
        Remove a node nothing depends on.

        Raises:
            KeyError: If the node does not exist
            ValueError: If another node depends on it
        """
        if name not in self.nodes:
            raise KeyError(name)
        referenced_by = [n.name for n in self.nodes.values() if name in n.dependencies]
        if referenced_by:
            raise ValueError(
                f"Node '{name}' is referenced by: {', '.join(referenced_by)}"
            )
        del self.nodes[name]

    def get_dependencies(self, node_name: str) -> List[str]:
        """Get all nodes that this node references."""
        return list(self.nodes[node_name].dependencies) if node_name in self.nodes else []

    def topological_sort(self) -> List[str]:
        """Nodes in insertion order, which always respects every edge."""
        return list(self.nodes)

    def edges(self) -> List[tuple[str, str]]:
        """All ``(referenced, referencing)`` pairs in insertion order."""
        return [
            (dep, node.name)
            for node in self.nodes.values()
            for dep in node.dependencies
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert DAG to dictionary representation for serialization."""
        return {
            "nodes": [
                {
                    "name": node.name,
                    "kind": node.kind,
                    "dependencies": list(node.dependencies),
                    "metadata": node.metadata,
                }
                for node in self.nodes.values()
            ],
            "edges": [{"from": src, "to": dst} for src, dst in self.edges()],
        }

    def __len__(self) -> int:
        return len(self.nodes)

    def __repr__(self) -> str:
        return f"DAG(nodes={len(self.nodes)}, edges={len(self.edges())})"
