"""
Base Pass System

Each compiler stage is a pass. Passes declare the passes they depend on and
the pass manager runs them in dependency order over a single compilation
context.
"""

from abc import ABC, abstractmethod
from typing import List, Type, Any, Dict, Optional, Sequence, Tuple, TYPE_CHECKING

from ..shared.backend_kind import BackendKind
from ..shared.errors import render_pattern, locate_element

if TYPE_CHECKING:
    from ..compiler.targets import CompileTarget


class CompileContext:
    """
    Compilation context - single source of truth for one compile call.

    - Inputs: argument names, raw pattern elements, target backend
    - Analysis results stored here (not in passes)
    - Created fresh per compilation; nothing survives the call
    """

    def __init__(self, argument_names: Sequence[str], elements: Sequence[Any],
                 backend: BackendKind, target: "CompileTarget"):
        self.argument_names: Tuple[str, ...] = tuple(argument_names)
        self.argument_set = frozenset(self.argument_names)
        self.elements: Tuple[Any, ...] = tuple(elements)
        self.backend = backend
        self.target = target
        self._analysis_results: Dict[Type['BasePass'], Any] = {}

    @property
    def pattern_text(self) -> str:
        return render_pattern(self.elements)

    def location(self, index: Optional[int]):
        """Location of a pattern element for diagnostics (None if unknown)."""
        if index is None:
            return None
        return locate_element(self.elements, index)

    def get_analysis(self, pass_class: Type['BasePass']) -> Any:
        """Get analysis results from a pass"""
        if pass_class not in self._analysis_results:
            raise RuntimeError(f"Analysis {pass_class} not available")
        return self._analysis_results[pass_class]

    def has_analysis(self, pass_class: Type['BasePass']) -> bool:
        return pass_class in self._analysis_results

    def set_analysis(self, pass_class: Type['BasePass'], results: Any) -> None:
        """Store analysis results"""
        self._analysis_results[pass_class] = results


class BasePass(ABC):
    """
    Base class for all compiler passes.

    - Explicit dependencies via `requires`
    - `run` receives the unit produced by the previous pass and returns the
      next one (token list -> pattern graph -> binding plan)
    """
    requires: List[Type['BasePass']] = []

    @abstractmethod
    def run(self, unit: Any, cx: CompileContext) -> Any:
        raise NotImplementedError


class PassManager:
    """
    Pass manager with dependency resolution.

    - Automatic dependency resolution (topological sort)
    - Passes run in dependency order
    - Single CompileContext shared across all passes
    """

    def __init__(self):
        self.passes: List[Type[BasePass]] = []
        self._dependency_graph: dict[Type[BasePass], set[Type[BasePass]]] = {}

    def register_pass(self, pass_class: Type[BasePass]) -> None:
        """Register a pass"""
        self.passes.append(pass_class)
        self._dependency_graph[pass_class] = set(pass_class.requires)

    def run_all(self, unit: Any, cx: CompileContext, stop_after_pass: Optional[str] = None) -> Any:
        """
        Run all passes in dependency order.

        Args:
            unit: Input unit of the first pass
            cx: Compilation context
            stop_after_pass: Optional pass name to stop after; the unit produced
                by that pass is returned (useful to inspect the pattern graph)
        """
        for pass_class in self._topological_sort():
            unit = pass_class().run(unit, cx)
            if stop_after_pass == pass_class.__name__:
                break
        return unit

    def _topological_sort(self) -> List[Type[BasePass]]:
        """Topological sort of passes by dependencies"""
        in_degree = {p: len(self._dependency_graph[p]) for p in self.passes}
        queue = [p for p, degree in in_degree.items() if degree == 0]
        result = []

        while queue:
            pass_class = queue.pop(0)
            result.append(pass_class)

            for other_pass in self.passes:
                if pass_class in self._dependency_graph[other_pass]:
                    in_degree[other_pass] -= 1
                    if in_degree[other_pass] == 0:
                        queue.append(other_pass)

        if len(result) != len(self.passes):
            raise RuntimeError("Circular dependency detected in passes")

        return result
