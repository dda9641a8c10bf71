"""
Backend kinds a pattern can be compiled for.
"""

from enum import Enum


class BackendKind(Enum):
    GRAPH = "graph"
    CONTAINMENT = "containment"
