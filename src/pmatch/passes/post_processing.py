"""
Binding Post-Processor Pass

Rewrites every batch of let bindings into individual Let steps, each
followed by a Guard that the bound value is present. A match attempt then
aborts at the first absent binding instead of carrying a partially
undefined tuple forward.
"""

import logging
from typing import List

from .base import BasePass, CompileContext
from .binding_compiler import BindingCompilerPass
from ..plan.steps import BindingPlan, BindingStep, LetBatch, Let, Guard, Present, Var

logger = logging.getLogger("pmatch.passes.post_processing")


class BindingPostProcessorPass(BasePass):
    requires = [BindingCompilerPass]

    def run(self, plan: BindingPlan, cx: CompileContext) -> BindingPlan:
        steps: List[BindingStep] = []
        rewritten = 0
        for step in plan.steps:
            if isinstance(step, LetBatch):
                for name, expr in step.bindings:
                    steps.append(Let(name, expr))
                    steps.append(Guard(Present(Var(name))))
                rewritten += 1
            else:
                steps.append(step)
        logger.debug(f"Short-circuited {rewritten} let batch(es)")
        return BindingPlan(tuple(steps), plan.argument_names, plan.backend)
