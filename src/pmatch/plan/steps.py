"""
Binding Plan

The compiled form of a pattern: an ordered sequence of Generator, Let and
Guard steps over a small expression language. Plans are plain data and are
interpreted by the plan executor; they compare equal structurally.
"""

import inspect
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Optional, Tuple, Union

from ..frontend.tokens import Direction
from ..shared.backend_kind import BackendKind
from ..utils.config import HIDDEN_NAME_PREFIX


# =============================================================================
# Path expressions (evaluated by one backend reachability call)
# =============================================================================

@dataclass(frozen=True)
class TypeRestriction:
    """Keep only elements matching `type_name`."""
    type_name: str

    def __str__(self) -> str:
        return f"restr<{self.type_name}>"


@dataclass(frozen=True)
class EdgeStep:
    """Follow edges (or references) of an optional type in one direction."""
    direction: Direction
    type_name: Optional[str] = None

    def __str__(self) -> str:
        label = f"<{self.type_name}>" if self.type_name else ""
        return f"-{label}->" if self.direction is Direction.OUT else f"<-{label}-"


PathSegment = Union[TypeRestriction, EdgeStep]


@dataclass(frozen=True)
class PathSeq:
    """A composite path: segments applied left to right."""
    segments: Tuple[PathSegment, ...]

    def __str__(self) -> str:
        return "[" + " ".join(str(s) for s in self.segments) + "]"


# =============================================================================
# Expressions
# =============================================================================

@dataclass(frozen=True)
class Var:
    """Reference to a variable bound by an earlier step."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ArgumentRef:
    """The externally supplied value of an argument."""
    name: str

    def __str__(self) -> str:
        return f"arg:{self.name}"


@dataclass(frozen=True)
class InstancesOf:
    """All elements of the model matching a type (None: all elements)."""
    type_name: Optional[str] = None


@dataclass(frozen=True)
class AdjacentByEdge:
    """Edges incident to `source` in `direction`, optionally type restricted."""
    source: "Expr"
    type_name: Optional[str]
    direction: Direction


@dataclass(frozen=True)
class EdgeEnd:
    """
    One end of an edge traversed in `direction`: the far end ("that") when
    `far` is true, else the near end ("this").
    """
    edge: "Expr"
    direction: Direction
    far: bool = True


@dataclass(frozen=True)
class Reachables:
    """Ordered, duplicate-free elements reachable from `start` along `path`."""
    start: "Expr"
    path: PathSeq


@dataclass(frozen=True)
class Equals:
    left: "Expr"
    right: "Expr"


@dataclass(frozen=True)
class IsInstance:
    value: "Expr"
    type_name: str


@dataclass(frozen=True)
class NonEmpty:
    collection: "Expr"


@dataclass(frozen=True)
class MemberOf:
    element: "Expr"
    collection: "Expr"


@dataclass(frozen=True)
class Present:
    """True unless the value is absent (None)."""
    value: "Expr"


@dataclass(frozen=True)
class UserForm:
    """A constraint or binding form supplied verbatim in the pattern."""
    fn: Callable[..., Any]

    def __str__(self) -> str:
        return getattr(self.fn, "__qualname__", repr(self.fn))


@lru_cache(maxsize=1024)
def form_signature(fn: Callable[..., Any]) -> inspect.Signature:
    """Signature of a user form; forms are called with bindings by parameter name."""
    return inspect.signature(fn)


Expr = Union[
    Var, ArgumentRef, InstancesOf, AdjacentByEdge, EdgeEnd, Reachables,
    Equals, IsInstance, NonEmpty, MemberOf, Present, UserForm,
]


# =============================================================================
# Steps
# =============================================================================

@dataclass(frozen=True)
class Generator:
    """Bind `name` to each element of `source` in turn."""
    name: str
    source: Expr


@dataclass(frozen=True)
class Let:
    """Bind `name` to the value of `expr`."""
    name: str
    expr: Expr


@dataclass(frozen=True)
class LetBatch:
    """
    Several bindings declared together. Only produced by the binding
    compiler; the post-processor rewrites each batch into Let/Guard pairs.
    """
    bindings: Tuple[Tuple[str, Expr], ...]


@dataclass(frozen=True)
class Guard:
    """Drop the current partial match unless `predicate` holds."""
    predicate: Expr


@dataclass(frozen=True)
class While:
    """Stop the innermost enclosing generator once `predicate` fails."""
    predicate: Expr


BindingStep = Union[Generator, Let, LetBatch, Guard, While]


def is_hidden(name: str) -> bool:
    return name.startswith(HIDDEN_NAME_PREFIX)


@dataclass(frozen=True)
class BindingPlan:
    """Ordered binding plan for one pattern, targeting one backend kind."""
    steps: Tuple[BindingStep, ...]
    argument_names: Tuple[str, ...]
    backend: BackendKind

    @property
    def bound_names(self) -> Tuple[str, ...]:
        """Every name bound by a Generator/Let step, in binding order."""
        names = []
        for step in self.steps:
            if isinstance(step, (Generator, Let)):
                names.append(step.name)
            elif isinstance(step, LetBatch):
                names.extend(name for name, _ in step.bindings)
        return tuple(names)

    @property
    def result_names(self) -> Tuple[str, ...]:
        """Names making up a match tuple: bound names, hidden ones excluded."""
        seen = {}
        for name in self.bound_names:
            if not is_hidden(name):
                seen.setdefault(name, None)
        return tuple(seen)

    def __len__(self) -> int:
        return len(self.steps)

    def __str__(self) -> str:
        from .serialization import dump_plan
        return dump_plan(self)
