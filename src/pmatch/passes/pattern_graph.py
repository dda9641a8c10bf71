"""
Pattern Graph Builder Pass

Consumes the classified token stream left to right and builds the
intermediate pattern graph. A cursor starts at the anchor; node tokens move
it, edge tokens connect it to the following node token and move it there,
constraint forms hang off it via Precedes edges without moving it.
"""

import logging
from typing import List, Optional

from .base import BasePass, CompileContext
from ..frontend.tokens import NodeToken, EdgeToken, ConstraintForm, Direction, PatternToken
from ..ir.nodes import PatternGraph, NodeKind, EdgeKind, NodeId
from ..shared.errors import DuplicateOrConflictingName, MalformedToken

logger = logging.getLogger("pmatch.passes.pattern_graph")


class PatternGraphBuilderPass(BasePass):
    requires = []

    def run(self, tokens: List[PatternToken], cx: CompileContext) -> PatternGraph:
        graph = PatternGraph()
        cursor = graph.anchor
        # Last constraint node while consecutive constraint forms are read;
        # the next form continues its Precedes chain
        chain_tail: Optional[NodeId] = None

        i = 0
        while i < len(tokens):
            token = tokens[i]
            if isinstance(token, ConstraintForm):
                node = graph.add_node(NodeKind.CONSTRAINT, form=token, token_index=token.index)
                graph.add_edge(EdgeKind.PRECEDES, chain_tail or cursor, node)
                chain_tail = node
                i += 1
                continue

            chain_tail = None
            if isinstance(token, NodeToken):
                cursor = self._resolve_node(graph, token, cx)
                i += 1
            else:
                if cursor == graph.anchor:
                    raise MalformedToken(
                        "edge token has no source node",
                        location=cx.location(token.index),
                        pattern_text=cx.pattern_text,
                        label="this edge has no source",
                        help="start the pattern with the node the edge leaves from",
                    )
                target_token = tokens[i + 1] if i + 1 < len(tokens) else None
                if not isinstance(target_token, NodeToken):
                    raise MalformedToken(
                        "edge token is not followed by a node token",
                        location=cx.location(token.index),
                        pattern_text=cx.pattern_text,
                        label="this edge has no target",
                        help="every edge token must be followed by the node it leads to",
                    )
                target = self._resolve_node(graph, target_token, cx)
                self._add_pattern_edge(graph, token, cursor, target, cx)
                cursor = target
                i += 2

        logger.debug(f"Built pattern graph: {len(graph.nodes)} nodes, {len(graph.edges)} edges")
        cx.set_analysis(PatternGraphBuilderPass, graph)
        return graph

    def _resolve_node(self, graph: PatternGraph, token: NodeToken, cx: CompileContext) -> NodeId:
        """Reuse the node declared under the token's name, or create a new one."""
        name, type_name = token.name, token.type_name
        if name is None:
            return graph.add_node(NodeKind.PATTERN, None, type_name, token_index=token.index)

        if name in cx.argument_set and type_name is not None:
            raise self._conflict(
                f"the pattern declares `{name}` although that's an argument already",
                token.index, cx, "arguments cannot be redeclared with a type",
            )

        existing = graph.lookup(name)
        if existing is not None:
            kind, ref = existing
            if kind == "edge":
                raise self._conflict(
                    f"`{name}` is already declared as an edge", token.index, cx,
                    "node and edge names share one namespace",
                )
            node = graph.node(ref)
            if type_name is not None and type_name != node.type_name:
                declared = f"<{node.type_name}>" if node.type_name else "without a type"
                raise self._conflict(
                    f"`{name}` is declared again with conflicting type <{type_name}>",
                    token.index, cx, f"first declared {declared}",
                )
            return ref

        kind = NodeKind.ARGUMENT if name in cx.argument_set else NodeKind.PATTERN
        return graph.add_node(kind, name, type_name, token_index=token.index)

    def _add_pattern_edge(self, graph: PatternGraph, token: EdgeToken,
                          cursor: NodeId, target: NodeId, cx: CompileContext) -> None:
        kind = EdgeKind.PATTERN
        if token.name is not None:
            if graph.lookup(token.name) is not None:
                raise self._conflict(
                    f"a pattern element named `{token.name}` is already declared",
                    token.index, cx, "edge names must be unique",
                )
            if token.name in cx.argument_set:
                kind = EdgeKind.ARGUMENT

        if token.direction is Direction.OUT:
            alpha, omega = cursor, target
        else:
            alpha, omega = target, cursor
        graph.add_edge(kind, alpha, omega, token.name, token.type_name, token_index=token.index)

    @staticmethod
    def _conflict(message: str, index: int, cx: CompileContext, note: str) -> DuplicateOrConflictingName:
        return DuplicateOrConflictingName(
            message,
            location=cx.location(index),
            pattern_text=cx.pattern_text,
            label=note,
        )
