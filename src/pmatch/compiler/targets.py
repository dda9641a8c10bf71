"""
Compile Targets

The binding compiler drives one traversal for both backends; what differs
is captured here: whether named edges can be bound, how candidate sets are
generated and how edges become path segments.
"""

from abc import ABC, abstractmethod
from typing import Optional, Union, TYPE_CHECKING

from ..frontend.tokens import Direction
from ..ir.nodes import PatternGraph, PatternEdge, EdgeKind
from ..plan.steps import (
    Expr, InstancesOf, AdjacentByEdge, Reachables, PathSeq, EdgeStep,
)
from ..shared.backend_kind import BackendKind
from ..shared.errors import (
    UnresolvedBackendContext,
    UnsupportedNamedEdge,
    UnsupportedArgumentEdge,
    UnsupportedEdgeDirection,
)

if TYPE_CHECKING:
    from ..passes.base import CompileContext


class CompileTarget(ABC):
    """Capabilities of one backend kind, as seen by the binding compiler."""
    kind: BackendKind
    supports_named_edges: bool = False

    def validate(self, graph: PatternGraph, cx: "CompileContext") -> None:
        """Reject pattern graphs this backend cannot execute."""
        if self.supports_named_edges:
            return
        backend = self.kind.value
        for edge in graph.iter_edges():
            if edge.kind is EdgeKind.ARGUMENT:
                raise UnsupportedArgumentEdge(
                    f"there mustn't be argument edges for the {backend} backend: `{edge.name}`",
                    location=cx.location(edge.token_index),
                    pattern_text=cx.pattern_text,
                    label="argument edge",
                )
            if edge.kind is EdgeKind.PATTERN and not edge.anonymous:
                raise UnsupportedNamedEdge(
                    f"edges mustn't be named for the {backend} backend: `{edge.name}`",
                    location=cx.location(edge.token_index),
                    pattern_text=cx.pattern_text,
                    label="named edge",
                    help="drop the name, e.g. -<ref>-> instead of -name<ref>->",
                )

    def generator_call(self, type_name: Optional[str]) -> Expr:
        return InstancesOf(type_name)

    def reachability_call(self, start: Expr, path: PathSeq) -> Expr:
        return Reachables(start, path)

    @abstractmethod
    def edge_generator_call(self, source: Expr, type_name: Optional[str],
                            direction: Direction) -> Expr:
        raise NotImplementedError

    @abstractmethod
    def edge_segment(self, edge: PatternEdge, direction: Direction,
                     cx: "CompileContext") -> EdgeStep:
        raise NotImplementedError


class GraphTarget(CompileTarget):
    """Typed graph engine: edges have identity and can be traversed both ways."""
    kind = BackendKind.GRAPH
    supports_named_edges = True

    def edge_generator_call(self, source: Expr, type_name: Optional[str],
                            direction: Direction) -> Expr:
        return AdjacentByEdge(source, type_name, direction)

    def edge_segment(self, edge: PatternEdge, direction: Direction,
                     cx: "CompileContext") -> EdgeStep:
        return EdgeStep(direction, edge.type_name)


class ContainmentTarget(CompileTarget):
    """
    Object containment engine: references have no identity of their own, so
    every edge must be anonymous and is only followed forward.
    """
    kind = BackendKind.CONTAINMENT
    supports_named_edges = False

    def edge_generator_call(self, source: Expr, type_name: Optional[str],
                            direction: Direction) -> Expr:
        raise NotImplementedError("containment backend has no edge generators")

    def edge_segment(self, edge: PatternEdge, direction: Direction,
                     cx: "CompileContext") -> EdgeStep:
        if direction is not Direction.OUT:
            raise UnsupportedEdgeDirection(
                "backward edges are unsupported by the containment backend",
                location=cx.location(edge.token_index),
                pattern_text=cx.pattern_text,
                label="traversed against its direction",
                note="references can only be followed from their owner",
            )
        return EdgeStep(Direction.OUT, edge.type_name)


_TARGETS = {
    BackendKind.GRAPH: GraphTarget,
    BackendKind.CONTAINMENT: ContainmentTarget,
}


def resolve_backend(backend: Union[BackendKind, str, None]) -> BackendKind:
    """Accept a BackendKind or its value; anything else is unresolved."""
    if isinstance(backend, BackendKind):
        return backend
    if isinstance(backend, str):
        try:
            return BackendKind(backend)
        except ValueError:
            pass
    raise UnresolvedBackendContext(
        f"the pattern backend is not set (got {backend!r})",
        help="pass backend=BackendKind.GRAPH or backend=BackendKind.CONTAINMENT",
    )


def target_for(backend: Union[BackendKind, str, None]) -> CompileTarget:
    return _TARGETS[resolve_backend(backend)]()
