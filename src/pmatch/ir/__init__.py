"""
Intermediate pattern graph.
"""

from .nodes import (
    NodeKind, EdgeKind, NodeId, EdgeId, PatternNode, PatternEdge, Incidence, PatternGraph,
)

__all__ = [
    "NodeKind", "EdgeKind", "NodeId", "EdgeId", "PatternNode", "PatternEdge",
    "Incidence", "PatternGraph",
]
