"""
Pattern compiler driver and compile targets.
"""

from .targets import CompileTarget, GraphTarget, ContainmentTarget, target_for, resolve_backend
from .driver import PatternCompiler, compile_pattern
