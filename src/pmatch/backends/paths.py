"""
Path Evaluation

Shared evaluator for compiled path expressions. A path is applied to a
working set of elements segment by segment; the working set stays ordered
and duplicate free.
"""

from typing import Any, Callable, Iterable, List, Optional

from ..frontend.tokens import Direction
from ..plan.steps import PathSeq, EdgeStep, TypeRestriction

StepFn = Callable[[Any, Optional[str], Direction], Iterable[Any]]
RestrictFn = Callable[[Any, str], bool]


def ordered_set(elements: Iterable[Any]) -> List[Any]:
    return list(dict.fromkeys(elements))


def evaluate_path(start: Any, path: PathSeq, step: StepFn, restrict: RestrictFn) -> List[Any]:
    """
    Apply `path` to `start`.

    Args:
        start: Element the path starts at
        path: Compiled path expression
        step: Neighbours of one element across edges of a type in a direction
        restrict: Type test used by restriction segments
    """
    current = [start]
    for segment in path.segments:
        if not current:
            break
        if isinstance(segment, EdgeStep):
            current = ordered_set(
                neighbour
                for element in current
                for neighbour in step(element, segment.type_name, segment.direction)
            )
        elif isinstance(segment, TypeRestriction):
            current = [e for e in current if restrict(e, segment.type_name)]
        else:
            raise TypeError(f"unknown path segment {segment!r}")
    return current
