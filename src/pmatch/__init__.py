"""
pmatch: compiles graph patterns into lazy binding plans and runs them over
typed graphs or object containment models.
"""

from .compiler.driver import PatternCompiler, compile_pattern
from .plan.steps import BindingPlan
from .plan.serialization import dump_plan
from .runtime.executor import PlanExecutor, Matches
from .runtime.pattern import Pattern, defpattern
from .shared.backend_kind import BackendKind
from .shared.errors import PatternError, PatternCompileError, PatternRuntimeError

__all__ = [
    'PatternCompiler',
    'compile_pattern',
    'BindingPlan',
    'dump_plan',
    'PlanExecutor',
    'Matches',
    'Pattern',
    'defpattern',
    'BackendKind',
    'PatternError',
    'PatternCompileError',
    'PatternRuntimeError',
]
