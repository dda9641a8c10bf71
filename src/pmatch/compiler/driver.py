"""
Compiler Driver

Orchestrates one pattern compilation: token classification, then the
registered passes in dependency order.
"""

import logging
import os
from typing import Any, Optional, Sequence, Union

from ..frontend.classifier import TokenClassifier, split_pattern
from ..passes.base import CompileContext, PassManager
from ..passes.pattern_graph import PatternGraphBuilderPass
from ..passes.anchor_resolution import AnchorResolverPass
from ..passes.binding_compiler import BindingCompilerPass
from ..passes.post_processing import BindingPostProcessorPass
from ..passes.plan_verification import PlanVerificationPass
from ..plan.steps import BindingPlan
from ..plan.serialization import dump_plan
from ..shared.backend_kind import BackendKind
from .targets import target_for, resolve_backend
from ..utils.config import ENV_DUMP_PLAN

logger = logging.getLogger("pmatch.compiler.driver")


class PatternCompiler:
    """
    Pattern compiler driver.

    - Classifies pattern tokens (lark grammar, built once per driver)
    - Runs the passes over a fresh CompileContext per call
    - Returns the binding plan or raises a PatternCompileError

    The driver holds no per-pattern state and can be shared.
    """

    def __init__(self):
        self.pass_manager = PassManager()
        self.classifier = TokenClassifier()
        self._register_passes()

    def _register_passes(self) -> None:
        """
        Pass order:
        1. PatternGraphBuilderPass (tokens -> pattern graph)
        2. AnchorResolverPass (one start per component)
        3. BindingCompilerPass (pattern graph -> plan)
        4. BindingPostProcessorPass (let batches -> let/guard pairs)
        5. PlanVerificationPass (no double bindings)
        """
        self.pass_manager.register_pass(PatternGraphBuilderPass)
        self.pass_manager.register_pass(AnchorResolverPass)
        self.pass_manager.register_pass(BindingCompilerPass)
        self.pass_manager.register_pass(BindingPostProcessorPass)
        self.pass_manager.register_pass(PlanVerificationPass)

    def compile(
        self,
        argument_names: Sequence[str],
        pattern: Union[str, Sequence[Any]],
        backend: Union[BackendKind, str, None],
        stop_after_pass: Optional[str] = None,
    ) -> Any:
        """
        Compile a pattern.

        Args:
            argument_names: Ordered external parameter names
            pattern: Pattern elements, or one whitespace-separated token string
            backend: Target backend kind; None fails with UnresolvedBackendContext
            stop_after_pass: Optional pass name to stop after (e.g.
                "AnchorResolverPass" returns the pattern graph)
        """
        kind = resolve_backend(backend)
        elements = split_pattern(pattern)
        cx = CompileContext(argument_names, elements, kind, target_for(kind))

        tokens = self.classifier.classify(elements)
        result = self.pass_manager.run_all(tokens, cx, stop_after_pass=stop_after_pass)

        if isinstance(result, BindingPlan) and os.environ.get(ENV_DUMP_PLAN):
            logger.info(f"Compiled plan for {cx.pattern_text!r}:\n{dump_plan(result)}")
        return result


_default_compiler: Optional[PatternCompiler] = None


def compile_pattern(
    argument_names: Sequence[str],
    pattern: Union[str, Sequence[Any]],
    backend: Union[BackendKind, str, None],
) -> BindingPlan:
    """Compile a pattern with a shared driver instance."""
    global _default_compiler
    if _default_compiler is None:
        _default_compiler = PatternCompiler()
    return _default_compiler.compile(argument_names, pattern, backend)
