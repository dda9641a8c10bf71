"""
Typed Graph Backend

An in-memory typed, attributed, directed graph with ordered incidences, and
the backend that evaluates binding plans over it. Edges have identity, so
named edges can be bound and traversed in either direction.
"""

import itertools
import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .base import EdgeBackend
from .paths import evaluate_path
from .types import type_matches, all_supertypes
from ..frontend.tokens import Direction
from ..plan.steps import PathSeq
from ..shared.backend_kind import BackendKind
from ..shared.errors import PatternRuntimeError

logger = logging.getLogger("pmatch.backends.graph")


class ElementClass:
    """A vertex or edge class of a schema; supertypes are ElementClasses."""

    def __init__(self, name: str, supertypes: Tuple["ElementClass", ...] = (), is_edge: bool = False):
        self.name = name
        self.supertypes = supertypes
        self.is_edge = is_edge
        self._ancestors = frozenset(all_supertypes(supertypes))

    def is_a(self, name: str) -> bool:
        return name == self.name or name in self._ancestors

    def __repr__(self) -> str:
        kind = "EdgeClass" if self.is_edge else "VertexClass"
        return f"{kind}({self.name})"


class Schema:
    """Named vertex and edge classes with single or multiple inheritance."""

    def __init__(self):
        self._classes: Dict[str, ElementClass] = {}

    def vertex_class(self, name: str, *supertypes: str) -> ElementClass:
        return self._define(name, supertypes, is_edge=False)

    def edge_class(self, name: str, *supertypes: str) -> ElementClass:
        return self._define(name, supertypes, is_edge=True)

    def lookup(self, name: str) -> ElementClass:
        try:
            return self._classes[name]
        except KeyError:
            raise KeyError(f"schema has no class named {name!r}") from None

    def _define(self, name: str, supertypes: Tuple[str, ...], is_edge: bool) -> ElementClass:
        if name in self._classes:
            raise ValueError(f"class {name!r} is already defined")
        supers = tuple(self.lookup(s) for s in supertypes)
        for s in supers:
            if s.is_edge != is_edge:
                raise ValueError(f"{name!r} cannot specialize {s.name!r}: vertex/edge mismatch")
        cls = ElementClass(name, supers, is_edge)
        self._classes[name] = cls
        return cls


class Vertex:
    def __init__(self, graph: "TypedGraph", id: int, type: ElementClass, attributes: Dict[str, Any]):
        self.graph = graph
        self.id = id
        self.type = type
        self.attributes = attributes
        self._incidences: List[Tuple["Edge", Direction]] = []

    def value(self, name: str) -> Any:
        return self.attributes[name]

    def incidences(self, type_spec: Optional[str] = None,
                   direction: Optional[Direction] = None) -> Iterator["Edge"]:
        """Incident edges in creation order."""
        for edge, incident in self._incidences:
            if direction is not None and incident is not direction:
                continue
            if type_matches(edge.type, type_spec):
                yield edge

    def __repr__(self) -> str:
        return f"v{self.id}:{self.type.name}"


class Edge:
    def __init__(self, id: int, type: ElementClass, alpha: Vertex, omega: Vertex, attributes: Dict[str, Any]):
        self.id = id
        self.type = type
        self.alpha = alpha
        self.omega = omega
        self.attributes = attributes

    def value(self, name: str) -> Any:
        return self.attributes[name]

    def __repr__(self) -> str:
        return f"e{self.id}:{self.type.name}({self.alpha!r} -> {self.omega!r})"


class TypedGraph:
    """Vertices and edges kept in creation order."""

    def __init__(self, schema: Schema):
        self.schema = schema
        self._vertices: List[Vertex] = []
        self._edges: List[Edge] = []
        self._ids = itertools.count(1)

    def create_vertex(self, type_name: str, **attributes) -> Vertex:
        cls = self.schema.lookup(type_name)
        if cls.is_edge:
            raise ValueError(f"{type_name!r} is an edge class")
        v = Vertex(self, next(self._ids), cls, attributes)
        self._vertices.append(v)
        return v

    def create_edge(self, type_name: str, alpha: Vertex, omega: Vertex, **attributes) -> Edge:
        cls = self.schema.lookup(type_name)
        if not cls.is_edge:
            raise ValueError(f"{type_name!r} is a vertex class")
        e = Edge(next(self._ids), cls, alpha, omega, attributes)
        self._edges.append(e)
        alpha._incidences.append((e, Direction.OUT))
        omega._incidences.append((e, Direction.IN))
        return e

    def vertices(self, type_spec: Optional[str] = None) -> Iterator[Vertex]:
        return (v for v in self._vertices if type_matches(v.type, type_spec))

    def edges(self, type_spec: Optional[str] = None) -> Iterator[Edge]:
        return (e for e in self._edges if type_matches(e.type, type_spec))

    def __repr__(self) -> str:
        return f"TypedGraph({len(self._vertices)} vertices, {len(self._edges)} edges)"


class GraphBackend(EdgeBackend):
    """Evaluates binding plans over a TypedGraph."""
    kind = BackendKind.GRAPH

    def instances_of_type(self, model: TypedGraph, type_spec: Optional[str]) -> Iterator[Vertex]:
        if not isinstance(model, TypedGraph):
            raise PatternRuntimeError(f"graph backend cannot match against {type(model).__name__}")
        return model.vertices(type_spec)

    def is_instance(self, element: Any, type_spec: str) -> bool:
        return isinstance(element, (Vertex, Edge)) and type_matches(element.type, type_spec)

    def adjacent_by_edge(self, element: Vertex, type_spec: Optional[str],
                         direction: Direction) -> Iterator[Edge]:
        return element.incidences(type_spec, direction)

    def this(self, edge: Edge, direction: Direction) -> Vertex:
        return edge.alpha if direction is Direction.OUT else edge.omega

    def that(self, edge: Edge, direction: Direction) -> Vertex:
        return edge.omega if direction is Direction.OUT else edge.alpha

    def reachables(self, start: Vertex, path: PathSeq) -> List[Vertex]:
        result = evaluate_path(start, path, self._neighbours, self.is_instance)
        logger.debug(f"{len(result)} element(s) reachable from {start!r} via {path}")
        return result

    def _neighbours(self, element: Vertex, type_spec: Optional[str], direction: Direction) -> Iterator[Vertex]:
        for edge in element.incidences(type_spec, direction):
            yield self.that(edge, direction)
