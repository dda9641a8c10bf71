"""
Runtime: plan execution and callable pattern definitions
"""

from .executor import PlanExecutor, Matches
from .pattern import Pattern, PatternVariant, defpattern

__all__ = [
    'PlanExecutor',
    'Matches',
    'Pattern',
    'PatternVariant',
    'defpattern',
]
