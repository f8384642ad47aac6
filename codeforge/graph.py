# File: codeforge/graph.py
"""
CodeForge - Relationship Graph Checker
======================================
Directed graph of entities built from relationship fields.

An edge ``A -> B`` exists for every field on ``A`` whose relationship
targets ``B``, except ``oneToMany`` fields: those are the inverse side of a
``manyToOne`` edge recorded on the other entity.  Targets that are not
declared entities are ignored here; they are reported by the
relationship-integrity rule.

Cycle membership is decided per entity by a depth-first search rooted at
that entity, using a ``visited`` set and a recursion stack; an edge back to
the root while it is still on the stack means the root lies on a cycle.
Complexity: O(V × (V + E)), fine for entity graphs.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Set

from codeforge.models import DataModel, RelationshipType

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("codeforge.graph")


class RelationshipGraph:
    """Adjacency lists keyed by entity name, in declaration order."""

    __slots__ = ("_adjacency",)

    def __init__(self, adjacency: Dict[str, List[str]]) -> None:
        self._adjacency: Dict[str, List[str]] = adjacency

    @classmethod
    def from_model(cls, model: DataModel) -> RelationshipGraph:
        known: Set[str] = set(model.entity_names)
        adjacency: Dict[str, List[str]] = {name: [] for name in model.entity_names}
        for entity in model.entities:
            for entity_field in entity.relationship_fields:
                rel = entity_field.relationship
                if rel.type == RelationshipType.ONE_TO_MANY:
                    continue
                if rel.target not in known:
                    continue
                if rel.target not in adjacency[entity.name]:
                    adjacency[entity.name].append(rel.target)
        return cls(adjacency)

    @property
    def nodes(self) -> List[str]:
        return list(self._adjacency)

    def neighbours(self, node: str) -> List[str]:
        return list(self._adjacency.get(node, []))

    def edge_count(self) -> int:
        return sum(len(targets) for targets in self._adjacency.values())

    def _reaches_root(
        self,
        root: str,
        node: str,
        visited: Set[str],
        stack: Set[str],
    ) -> bool:
        visited.add(node)
        stack.add(node)
        for target in self._adjacency.get(node, []):
            if target in stack:
                if target == root:
                    return True
                continue
            if target not in visited and self._reaches_root(root, target, visited, stack):
                return True
        stack.discard(node)
        return False

    def on_cycle(self, node: str) -> bool:
        """True when *node* can reach itself through one or more edges."""
        return self._reaches_root(node, node, set(), set())

    def cycle_members(self) -> List[str]:
        """Every node lying on at least one cycle, in declaration order."""
        return [node for node in self._adjacency if self.on_cycle(node)]


def find_circular_entities(model: DataModel) -> List[str]:
    graph: RelationshipGraph = RelationshipGraph.from_model(model)
    members: List[str] = graph.cycle_members()
    logger.debug(
        "Relationship graph: %d node(s), %d edge(s), %d on a cycle.",
        len(graph.nodes),
        graph.edge_count(),
        len(members),
    )
    return members


__all__: List[str] = [
    "RelationshipGraph",
    "find_circular_entities",
]
