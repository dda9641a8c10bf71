"""
Tests for the path compressor on hand-built pattern graphs.
"""

import pytest
from pmatch.compiler.targets import target_for
from pmatch.frontend.tokens import Direction
from pmatch.ir.nodes import PatternGraph, NodeKind, EdgeKind
from pmatch.passes.base import CompileContext
from pmatch.passes.path_compression import PathCompressor
from pmatch.plan.steps import EdgeStep, TypeRestriction
from pmatch.shared.backend_kind import BackendKind
from pmatch.shared.errors import AmbiguousAnonymousChain


def context(backend=BackendKind.GRAPH):
    return CompileContext((), [], backend, target_for(backend))


class TestPathCompressor:
    def test_fork_is_ambiguous(self):
        graph = PatternGraph()
        hub = graph.add_node(NodeKind.PATTERN)
        a = graph.add_node(NodeKind.PATTERN, "a")
        b = graph.add_node(NodeKind.PATTERN, "b")
        graph.add_edge(EdgeKind.PATTERN, hub, a)
        graph.add_edge(EdgeKind.PATTERN, hub, b)
        with pytest.raises(AmbiguousAnonymousChain, match="2 unvisited continuations"):
            PathCompressor(graph, context()).from_node(hub, set())

    def test_fork_resolved_by_visited_branch(self):
        graph = PatternGraph()
        hub = graph.add_node(NodeKind.PATTERN)
        a = graph.add_node(NodeKind.PATTERN, "a")
        b = graph.add_node(NodeKind.PATTERN, "b", "B")
        to_a = graph.add_edge(EdgeKind.PATTERN, hub, a)
        graph.add_edge(EdgeKind.PATTERN, b, hub, type_name="E")
        chain = PathCompressor(graph, context()).from_node(hub, {a, to_a})
        assert chain.terminal == b
        assert chain.path.segments == (EdgeStep(Direction.IN, "E"), TypeRestriction("B"))
        assert not chain.open_end

    def test_walk_records_consumed_elements(self):
        graph = PatternGraph()
        a = graph.add_node(NodeKind.PATTERN, "a")
        mid = graph.add_node(NodeKind.PATTERN, type_name="Mid")
        c = graph.add_node(NodeKind.PATTERN, "c")
        first = graph.add_edge(EdgeKind.PATTERN, a, mid)
        second = graph.add_edge(EdgeKind.PATTERN, mid, c)
        [incidence] = [i for i in graph.incidences(a) if i.edge == first]
        chain = PathCompressor(graph, context()).from_edge(incidence, {a})
        assert chain.elements == [first, mid, second, c]
        assert chain.path.segments == (
            EdgeStep(Direction.OUT), TypeRestriction("Mid"), EdgeStep(Direction.OUT),
        )

    def test_stops_at_named_edge(self):
        graph = PatternGraph()
        mid = graph.add_node(NodeKind.PATTERN)
        b = graph.add_node(NodeKind.PATTERN, "b")
        graph.add_edge(EdgeKind.PATTERN, mid, b, name="e")
        chain = PathCompressor(graph, context()).from_node(mid, set())
        assert chain.terminal == mid
        assert chain.open_end
        assert chain.path.segments == ()

    def test_collects_constraints_of_consumed_nodes(self):
        graph = PatternGraph()
        mid = graph.add_node(NodeKind.PATTERN)
        c = graph.add_node(NodeKind.PATTERN, "c")
        check = graph.add_node(NodeKind.CONSTRAINT)
        precedes = graph.add_edge(EdgeKind.PRECEDES, mid, check)
        graph.add_edge(EdgeKind.PATTERN, mid, c)
        chain = PathCompressor(graph, context()).from_node(mid, set())
        assert [inc.edge for inc in chain.constraints] == [precedes]
        assert chain.terminal == c
