"""
Path Compressor

Collapses a maximal chain of anonymous nodes and edges into one composite
path expression, evaluated by a single reachability call instead of one plan
step per element.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Set, Union

from .base import CompileContext
from ..ir.nodes import PatternGraph, NodeKind, EdgeKind, NodeId, EdgeId, Incidence
from ..plan.steps import PathSeq, PathSegment, TypeRestriction
from ..shared.errors import AmbiguousAnonymousChain

logger = logging.getLogger("pmatch.passes.path_compression")

Visited = Set[Union[NodeId, EdgeId]]


@dataclass
class CompressedChain:
    """
    Result of one compression.

    - path: segments in walk order
    - terminal: node the walk stopped at
    - elements: every node/edge consumed by the walk (terminal included)
    - constraints: Precedes incidences hanging off consumed anonymous nodes
    - open_end: the terminal is anonymous but still has named continuations
    """
    path: PathSeq
    terminal: NodeId
    elements: List[Union[NodeId, EdgeId]] = field(default_factory=list)
    constraints: List[Incidence] = field(default_factory=list)
    open_end: bool = False


class PathCompressor:
    def __init__(self, graph: PatternGraph, cx: CompileContext):
        self.graph = graph
        self.cx = cx

    def from_edge(self, incidence: Incidence, visited: Visited) -> CompressedChain:
        """Compress starting with an anonymous edge leaving an already bound node."""
        edge = self.graph.edge(incidence.edge)
        segments: List[PathSegment] = [
            self.cx.target.edge_segment(edge, incidence.direction, self.cx)
        ]
        done = set(visited)
        done.add(incidence.edge)
        return self._walk(incidence.that, done, segments, [incidence.edge])

    def from_node(self, node_id: NodeId, visited: Visited) -> CompressedChain:
        """Compress starting at an anonymous node reached through a named edge."""
        return self._walk(node_id, set(visited), [], [])

    def _walk(self, current: NodeId, done: Visited,
              segments: List[PathSegment], elements: List[Union[NodeId, EdgeId]]) -> CompressedChain:
        constraints: List[Incidence] = []
        open_end = False
        while True:
            node = self.graph.node(current)
            if node.kind is NodeKind.PATTERN and node.type_name:
                segments.append(TypeRestriction(node.type_name))
            if not node.anonymous or current in done:
                break

            done.add(current)
            continuations = []
            for inc in self.graph.incidences(current):
                if inc.edge in done:
                    continue
                kind = self.graph.edge(inc.edge).kind
                if kind.structural:
                    continuations.append(inc)
                elif kind is EdgeKind.PRECEDES and inc.this == current:
                    constraints.append(inc)

            if len(continuations) > 1:
                raise AmbiguousAnonymousChain(
                    "anonymous chain forks: an anonymous node has "
                    f"{len(continuations)} unvisited continuations",
                    location=self.cx.location(node.token_index),
                    pattern_text=self.cx.pattern_text,
                    label="this anonymous node cannot be linearized",
                    help="name the node so the pattern can branch from it",
                )
            if not continuations:
                break
            nxt = continuations[0]
            edge = self.graph.edge(nxt.edge)
            if not edge.anonymous:
                # The named edge needs this node bound; stop here
                open_end = True
                break

            elements.append(current)
            segments.append(self.cx.target.edge_segment(edge, nxt.direction, self.cx))
            done.add(nxt.edge)
            elements.append(nxt.edge)
            current = nxt.that

        elements.append(current)
        logger.debug(f"Compressed anonymous chain of {len(elements)} element(s) into {len(segments)} segment(s)")
        return CompressedChain(PathSeq(tuple(segments)), current, elements, constraints, open_end)
