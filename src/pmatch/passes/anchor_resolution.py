"""
Component Anchor Resolver Pass

Links every connected component of the pattern graph to the anchor so the
binding compiler has one starting point per component.
"""

import logging

from .base import BasePass, CompileContext
from .pattern_graph import PatternGraphBuilderPass
from ..ir.nodes import PatternGraph, EdgeKind

logger = logging.getLogger("pmatch.passes.anchor_resolution")


class AnchorResolverPass(BasePass):
    requires = [PatternGraphBuilderPass]

    def run(self, graph: PatternGraph, cx: CompileContext) -> PatternGraph:
        starts = 0
        while True:
            reached = set(graph.reachable_from(graph.anchor))
            disconnected = [n.id for n in graph.iter_nodes() if n.id not in reached]
            if not disconnected:
                break
            # Declaration order: the first unreached node starts its component
            graph.add_edge(EdgeKind.HAS_START, graph.anchor, disconnected[0])
            starts += 1

        logger.debug(f"Anchored {starts} pattern component(s)")
        return graph
