"""
Intermediate Pattern Graph

A small typed directed multigraph kept as an arena: nodes and edges live in
lists and are addressed by NodeId/EdgeId handles, so cycles in the pattern
never become reference cycles. Traversal state is keyed by handle.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..frontend.tokens import ConstraintForm, Direction


class NodeKind(Enum):
    ANCHOR = "anchor"
    PATTERN = "pattern-node"
    ARGUMENT = "argument-node"
    CONSTRAINT = "constraint-node"


class EdgeKind(Enum):
    PRECEDES = "precedes"
    HAS_START = "has-start"
    PATTERN = "pattern-edge"
    ARGUMENT = "argument-edge"

    @property
    def structural(self) -> bool:
        """Pattern and argument edges correspond to edges in the matched model."""
        return self in (EdgeKind.PATTERN, EdgeKind.ARGUMENT)


@dataclass(frozen=True)
class NodeId:
    index: int

    def __str__(self) -> str:
        return f"n{self.index}"


@dataclass(frozen=True)
class EdgeId:
    index: int

    def __str__(self) -> str:
        return f"e{self.index}"


@dataclass
class PatternNode:
    """A node of the intermediate graph. `form` is set on constraint nodes only."""
    id: NodeId
    kind: NodeKind
    name: Optional[str] = None
    type_name: Optional[str] = None
    form: Optional[ConstraintForm] = None
    token_index: Optional[int] = None

    @property
    def anonymous(self) -> bool:
        return self.name is None


@dataclass
class PatternEdge:
    """
    An edge of the intermediate graph, stored in its declared orientation
    (source = alpha, target = omega).
    """
    id: EdgeId
    kind: EdgeKind
    alpha: NodeId
    omega: NodeId
    name: Optional[str] = None
    type_name: Optional[str] = None
    token_index: Optional[int] = None

    @property
    def anonymous(self) -> bool:
        return self.name is None


@dataclass(frozen=True)
class Incidence:
    """
    An edge seen from one of its end nodes. `direction` is OUT when the edge
    is traversed along its declared orientation.
    """
    edge: EdgeId
    this: NodeId
    that: NodeId
    direction: Direction

    def __str__(self) -> str:
        arrow = "-->" if self.direction is Direction.OUT else "<--"
        return f"{self.this} {arrow}[{self.edge}] {self.that}"


@dataclass
class PatternGraph:
    """
    Arena of pattern nodes and edges. Node 0 is always the anchor.
    Created fresh per compilation and discarded once a plan is produced.
    """
    nodes: List[PatternNode] = field(default_factory=list)
    edges: List[PatternEdge] = field(default_factory=list)
    _incidences: Dict[NodeId, List[Incidence]] = field(default_factory=dict)
    _by_name: Dict[str, Tuple[str, Any]] = field(default_factory=dict)

    def __post_init__(self):
        if not self.nodes:
            self.add_node(NodeKind.ANCHOR)

    @property
    def anchor(self) -> NodeId:
        return self.nodes[0].id

    # =========================================================================
    # Construction
    # =========================================================================

    def add_node(self, kind: NodeKind, name: Optional[str] = None,
                 type_name: Optional[str] = None, form: Optional[ConstraintForm] = None,
                 token_index: Optional[int] = None) -> NodeId:
        node_id = NodeId(len(self.nodes))
        self.nodes.append(PatternNode(node_id, kind, name, type_name, form, token_index))
        self._incidences[node_id] = []
        if name is not None:
            self._by_name[name] = ("node", node_id)
        return node_id

    def add_edge(self, kind: EdgeKind, alpha: NodeId, omega: NodeId,
                 name: Optional[str] = None, type_name: Optional[str] = None,
                 token_index: Optional[int] = None) -> EdgeId:
        edge_id = EdgeId(len(self.edges))
        self.edges.append(PatternEdge(edge_id, kind, alpha, omega, name, type_name, token_index))
        self._incidences[alpha].append(Incidence(edge_id, alpha, omega, Direction.OUT))
        self._incidences[omega].append(Incidence(edge_id, omega, alpha, Direction.IN))
        if name is not None:
            self._by_name[name] = ("edge", edge_id)
        return edge_id

    # =========================================================================
    # Lookup
    # =========================================================================

    def node(self, node_id: NodeId) -> PatternNode:
        return self.nodes[node_id.index]

    def edge(self, edge_id: EdgeId) -> PatternEdge:
        return self.edges[edge_id.index]

    def lookup(self, name: str) -> Optional[Tuple[str, Any]]:
        """Return ("node", NodeId) or ("edge", EdgeId) for a declared name."""
        return self._by_name.get(name)

    def incidences(self, node_id: NodeId) -> List[Incidence]:
        """Incidences of a node in edge creation order."""
        return list(self._incidences[node_id])

    def iter_nodes(self, kind: Optional[NodeKind] = None) -> Iterator[PatternNode]:
        for node in self.nodes:
            if kind is None or node.kind is kind:
                yield node

    def iter_edges(self, kind: Optional[EdgeKind] = None) -> Iterator[PatternEdge]:
        for edge in self.edges:
            if kind is None or edge.kind is kind:
                yield edge

    def reachable_from(self, start: NodeId) -> List[NodeId]:
        """Nodes reachable from `start` over any edge, ignoring orientation."""
        seen = {start: None}
        stack = [start]
        while stack:
            current = stack.pop()
            for inc in self._incidences[current]:
                if inc.that not in seen:
                    seen[inc.that] = None
                    stack.append(inc.that)
        return list(seen)

    def describe(self, node_id: NodeId) -> str:
        node = self.node(node_id)
        label = node.name or "_"
        if node.type_name:
            label += f"<{node.type_name}>"
        return f"{node.kind.value} {label}"

    def __str__(self) -> str:
        lines = [f"PatternGraph({len(self.nodes)} nodes, {len(self.edges)} edges)"]
        for edge in self.edges:
            label = edge.name or "_"
            if edge.type_name:
                label += f"<{edge.type_name}>"
            lines.append(
                f"  {edge.kind.value} {label}: "
                f"{self.describe(edge.alpha)} -> {self.describe(edge.omega)}"
            )
        return "\n".join(lines)
