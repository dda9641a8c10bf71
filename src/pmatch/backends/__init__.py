"""
Backends: the runtime interface plans execute against, and two in-memory
reference engines.
"""

from .base import Backend, EdgeBackend, engine_for
from .types import TypeMatcher, parse_type_spec, type_matches
from .paths import evaluate_path
from .graph import Schema, ElementClass, TypedGraph, Vertex, Edge, GraphBackend
from .containment import ObjectClass, ModelObject, ObjectModel, ContainmentBackend

__all__ = [
    'Backend',
    'EdgeBackend',
    'engine_for',
    'TypeMatcher',
    'parse_type_spec',
    'type_matches',
    'evaluate_path',
    'Schema',
    'ElementClass',
    'TypedGraph',
    'Vertex',
    'Edge',
    'GraphBackend',
    'ObjectClass',
    'ModelObject',
    'ObjectModel',
    'ContainmentBackend',
]
