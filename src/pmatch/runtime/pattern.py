"""
Pattern Definitions

A Pattern bundles compiled variants of one pattern, dispatched on the
number of arguments, and is called like a function: pattern(model, *args).
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence, Tuple, Union

from .executor import PlanExecutor, Matches
from ..backends.base import Backend, engine_for
from ..compiler.driver import compile_pattern
from ..compiler.targets import resolve_backend
from ..plan.steps import BindingPlan
from ..shared.backend_kind import BackendKind
from ..shared.errors import PatternError

logger = logging.getLogger("pmatch.runtime.pattern")


@dataclass(frozen=True)
class PatternVariant:
    """One arity of a pattern."""
    argument_names: Tuple[str, ...]
    plan: BindingPlan
    result: Optional[Callable[..., Any]] = None

    @property
    def arity(self) -> int:
        return len(self.argument_names)


class Pattern:
    def __init__(self, name: str, variants: Sequence[PatternVariant],
                 engine: Backend, doc: Optional[str] = None):
        self.__name__ = name
        self.__doc__ = doc
        self.engine = engine
        self.executor = PlanExecutor(engine)
        self.variants: Dict[int, PatternVariant] = {}
        for variant in variants:
            if variant.arity in self.variants:
                raise PatternError(f"pattern {name!r} defines arity {variant.arity} twice")
            self.variants[variant.arity] = variant

    def variant(self, arity: int) -> PatternVariant:
        try:
            return self.variants[arity]
        except KeyError:
            known = ", ".join(str(a) for a in sorted(self.variants))
            raise PatternError(
                f"pattern {self.__name__!r} takes {known} argument(s), got {arity}"
            ) from None

    def __call__(self, model: Any, *args: Any) -> Matches:
        variant = self.variant(len(args))
        return self.executor.matches(
            variant.plan, model, dict(zip(variant.argument_names, args)), variant.result,
        )

    def __repr__(self) -> str:
        return f"<Pattern {self.__name__} arities={sorted(self.variants)}>"


VariantSpec = Union[
    Tuple[Sequence[str], Any],
    Tuple[Sequence[str], Any, Callable[..., Any]],
]


def defpattern(name: str, *variants: VariantSpec,
               backend: Union[BackendKind, str, None] = None,
               engine: Optional[Backend] = None,
               doc: Optional[str] = None) -> Pattern:
    """
    Compile a named pattern.

    Args:
        name: Pattern name
        variants: (argument_names, pattern) or (argument_names, pattern, result)
        backend: Backend kind every variant is compiled for
        engine: Runtime backend; defaults to the in-memory reference engine
        doc: Docstring of the resulting pattern

    Example:
        >>> families = defpattern(
        ...     "families",
        ...     ((), "f<Family> -<HasFather>-> m<Member>"),
        ...     (("f",), "f -<HasFather>-> m<Member>"),
        ...     backend="graph",
        ... )
        >>> list(families(graph))
    """
    kind = resolve_backend(backend)
    if engine is not None and engine.kind is not kind:
        raise PatternError(f"engine {type(engine).__name__} does not implement the {kind.value} backend")

    compiled = []
    for spec in variants:
        argument_names, pattern, *rest = spec
        result = rest[0] if rest else None
        plan = compile_pattern(tuple(argument_names), pattern, kind)
        compiled.append(PatternVariant(tuple(argument_names), plan, result))
    logger.debug(f"Defined pattern {name!r} with {len(compiled)} variant(s)")
    return Pattern(name, compiled, engine or engine_for(kind), doc)
