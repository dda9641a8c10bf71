"""
Token Location (Span)

Locates an element of a pattern specification for diagnostics.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TokenLocation:
    """
    Location of one pattern element.

    - index: position of the element in the pattern sequence
    - column: 1-based column of the element in the rendered pattern text
    - length: width of the rendered element (caret span)
    """
    index: int
    column: int = 0
    length: int = 0

    def __str__(self) -> str:
        return f"element {self.index}"
