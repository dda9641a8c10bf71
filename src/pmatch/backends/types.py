"""
Type Specifications

A type specification names a model type:
- `Name`  matches Name and all of its subtypes
- `Name!` matches Name exactly
- `!Name` negates (also combinable: `!Name!`)
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Protocol, Tuple


class Typed(Protocol):
    name: str

    def is_a(self, name: str) -> bool: ...


@dataclass(frozen=True)
class TypeMatcher:
    name: str
    exact: bool = False
    negated: bool = False

    def matches(self, type_obj: Typed) -> bool:
        if self.exact:
            hit = type_obj.name == self.name
        else:
            hit = type_obj.is_a(self.name)
        return not hit if self.negated else hit


@lru_cache(maxsize=256)
def parse_type_spec(spec: str) -> TypeMatcher:
    negated = spec.startswith("!")
    if negated:
        spec = spec[1:]
    exact = spec.endswith("!")
    if exact:
        spec = spec[:-1]
    return TypeMatcher(spec, exact=exact, negated=negated)


def type_matches(type_obj: Typed, spec: Optional[str]) -> bool:
    """None and the empty spec match everything."""
    if not spec:
        return True
    return parse_type_spec(spec).matches(type_obj)


def all_supertypes(supertypes: Tuple[Typed, ...]) -> Tuple[str, ...]:
    """Names of all transitive supertypes, nearest first, without duplicates."""
    seen = {}
    stack = list(reversed(supertypes))
    while stack:
        t = stack.pop()
        if t.name not in seen:
            seen[t.name] = None
            stack.extend(reversed(getattr(t, "supertypes", ())))
    return tuple(seen)
