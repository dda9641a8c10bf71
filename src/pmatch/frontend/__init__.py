"""
Frontend: pattern token classification.
"""

from .tokens import (
    NodeToken, EdgeToken, ConstraintForm, ConstraintKind, Direction, PatternToken,
)
from .classifier import TokenClassifier, split_pattern

__all__ = [
    "NodeToken", "EdgeToken", "ConstraintForm", "ConstraintKind", "Direction",
    "PatternToken", "TokenClassifier", "split_pattern",
]
