"""
Pattern Tokens

Classified pattern elements produced by the token classifier.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Tuple, Union

from ..utils.config import DIRECTION_OUT, DIRECTION_IN, WHEN_MARKER, LET_MARKER, WHILE_MARKER


class Direction(Enum):
    """Edge direction, relative to the node the edge is traversed from."""
    OUT = DIRECTION_OUT
    IN = DIRECTION_IN

    def reverse(self) -> "Direction":
        return Direction.IN if self is Direction.OUT else Direction.OUT


class ConstraintKind(Enum):
    WHEN = WHEN_MARKER
    LET = LET_MARKER
    WHILE = WHILE_MARKER


@dataclass(frozen=True)
class NodeToken:
    name: Optional[str]
    type_name: Optional[str]
    index: int = 0

    @property
    def anonymous(self) -> bool:
        return self.name is None


@dataclass(frozen=True)
class EdgeToken:
    name: Optional[str]
    type_name: Optional[str]
    direction: Direction
    index: int = 0

    @property
    def anonymous(self) -> bool:
        return self.name is None


@dataclass(frozen=True)
class ConstraintForm:
    """
    A constraint marker with its verbatim payload. For WHEN/WHILE the
    payload is a predicate; for LET it is a tuple of (name, callable) pairs.
    """
    kind: ConstraintKind
    payload: Union[Callable[..., Any], Tuple[Tuple[str, Callable[..., Any]], ...]]
    index: int = 0


PatternToken = Union[NodeToken, EdgeToken, ConstraintForm]
