"""
Containment Backend

An in-memory object model: typed objects holding attributes and named
references, some of which are containments. References have no identity of
their own and can only be followed from their owner.
"""

import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .base import Backend
from .paths import evaluate_path
from .types import type_matches, all_supertypes
from ..frontend.tokens import Direction
from ..plan.steps import PathSeq
from ..shared.backend_kind import BackendKind
from ..shared.errors import PatternRuntimeError

logger = logging.getLogger("pmatch.backends.containment")


class ObjectClass:
    """
    Class of model objects.

    Args:
        name: Class name
        supertypes: Direct superclasses
        containments: Reference names whose targets are contained by the owner
    """

    def __init__(self, name: str, supertypes: Tuple["ObjectClass", ...] = (),
                 containments: Iterable[str] = ()):
        self.name = name
        self.supertypes = supertypes
        self._ancestors = frozenset(all_supertypes(supertypes))
        self.containments = frozenset(containments).union(
            *(s.containments for s in supertypes)
        )

    def is_a(self, name: str) -> bool:
        return name == self.name or name in self._ancestors

    def __repr__(self) -> str:
        return f"ObjectClass({self.name})"


class ModelObject:
    def __init__(self, cls: ObjectClass, **attributes):
        self.cls = cls
        self.attributes = attributes
        self.container: Optional["ModelObject"] = None
        self._references: Dict[str, List["ModelObject"]] = {}

    @property
    def type(self) -> ObjectClass:
        return self.cls

    def value(self, name: str) -> Any:
        return self.attributes[name]

    def add(self, reference: str, target: "ModelObject") -> "ModelObject":
        """Add `target` to a reference; containments set its container."""
        if reference in self.cls.containments:
            if target.container is not None:
                raise ValueError(f"{target!r} is already contained by {target.container!r}")
            target.container = self
        self._references.setdefault(reference, []).append(target)
        return target

    def references(self, name: Optional[str] = None) -> Iterator["ModelObject"]:
        """Targets of one reference, or of all references in declaration order."""
        if name is not None:
            yield from self._references.get(name, ())
            return
        for targets in self._references.values():
            yield from targets

    def contents(self) -> Iterator["ModelObject"]:
        for name, targets in self._references.items():
            if name in self.cls.containments:
                yield from targets

    def __repr__(self) -> str:
        label = self.attributes.get("name")
        return f"{self.cls.name}({label})" if label is not None else f"{self.cls.name}@{id(self):x}"


class ObjectModel:
    """A forest of contained objects rooted at `roots`."""

    def __init__(self, roots: Iterable[ModelObject] = ()):
        self.roots: List[ModelObject] = list(roots)

    def add_root(self, obj: ModelObject) -> ModelObject:
        self.roots.append(obj)
        return obj

    def all_objects(self, type_spec: Optional[str] = None) -> Iterator[ModelObject]:
        """Pre-order walk of the containment tree."""
        stack = list(reversed(self.roots))
        while stack:
            obj = stack.pop()
            if type_matches(obj.cls, type_spec):
                yield obj
            stack.extend(reversed(list(obj.contents())))


class ContainmentBackend(Backend):
    """Evaluates binding plans over an ObjectModel."""
    kind = BackendKind.CONTAINMENT

    def instances_of_type(self, model: ObjectModel, type_spec: Optional[str]) -> Iterator[ModelObject]:
        if not isinstance(model, ObjectModel):
            raise PatternRuntimeError(f"containment backend cannot match against {type(model).__name__}")
        return model.all_objects(type_spec)

    def is_instance(self, element: Any, type_spec: str) -> bool:
        return isinstance(element, ModelObject) and type_matches(element.cls, type_spec)

    def reachables(self, start: ModelObject, path: PathSeq) -> List[ModelObject]:
        result = evaluate_path(start, path, self._neighbours, self.is_instance)
        logger.debug(f"{len(result)} object(s) reachable from {start!r} via {path}")
        return result

    @staticmethod
    def _neighbours(obj: ModelObject, reference: Optional[str], direction: Direction) -> Iterator[ModelObject]:
        if direction is not Direction.OUT:
            raise PatternRuntimeError("references can only be followed from their owner")
        return obj.references(reference)
