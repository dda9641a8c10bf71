"""
Backend Interface

The contract a compiled plan consumes at execution time. Every call must be
read-only and reentrant: a plan calls them many times per outer iteration,
interleaved across independent match attempts.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional

from ..frontend.tokens import Direction
from ..plan.steps import PathSeq
from ..shared.backend_kind import BackendKind


class Backend(ABC):
    """
    Backend interface shared by both model engines.

    - instances_of_type: candidate sets for pattern nodes
    - is_instance: type guards on bound elements
    - reachables: one call per compressed anonymous chain
    """
    kind: BackendKind

    @abstractmethod
    def instances_of_type(self, model: Any, type_spec: Optional[str]) -> Iterable[Any]:
        """Lazily yield the model's elements matching `type_spec` (None: all)."""
        raise NotImplementedError

    @abstractmethod
    def is_instance(self, element: Any, type_spec: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def reachables(self, start: Any, path: PathSeq) -> List[Any]:
        """Ordered, duplicate-free elements reachable from `start` along `path`."""
        raise NotImplementedError


class EdgeBackend(Backend):
    """
    Backend whose edges have identity (the typed graph engine): named edges
    are bound by iterating incidences and reading their ends.
    """

    @abstractmethod
    def adjacent_by_edge(self, element: Any, type_spec: Optional[str],
                         direction: Direction) -> Iterable[Any]:
        """Lazily yield the edges incident to `element` in `direction`."""
        raise NotImplementedError

    @abstractmethod
    def this(self, edge: Any, direction: Direction) -> Any:
        """The end of `edge` it is traversed from."""
        raise NotImplementedError

    @abstractmethod
    def that(self, edge: Any, direction: Direction) -> Any:
        """The end of `edge` it is traversed to."""
        raise NotImplementedError


def engine_for(kind: BackendKind) -> Backend:
    """The in-memory reference engine for a backend kind."""
    if kind is BackendKind.GRAPH:
        from .graph import GraphBackend
        return GraphBackend()
    from .containment import ContainmentBackend
    return ContainmentBackend()
