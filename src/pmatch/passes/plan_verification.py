"""
Plan Verification Pass

Ensures no variable is bound twice by the finished plan, that no binding
shadows an argument it does not stand for, and that every user form only
names variables bound before it runs.
"""

import inspect
from collections import Counter
from typing import Callable, Iterator, Optional

from .base import BasePass, CompileContext
from .pattern_graph import PatternGraphBuilderPass
from .post_processing import BindingPostProcessorPass
from ..frontend.tokens import ConstraintKind
from ..plan.steps import (
    BindingPlan, BindingStep, Generator, Let, LetBatch, Guard, While,
    ArgumentRef, UserForm, form_signature,
)
from ..shared.errors import DuplicateOrConflictingName, UnboundFormName
from ..shared.source_location import TokenLocation


class PlanVerificationPass(BasePass):
    requires = [BindingPostProcessorPass]

    def run(self, plan: BindingPlan, cx: CompileContext) -> BindingPlan:
        frequencies = Counter(plan.bound_names)
        doubles = [f"- {name} is declared {count} times" for name, count in frequencies.items() if count > 1]
        if doubles:
            raise DuplicateOrConflictingName(
                "these names are declared multiple times:\n" + "\n".join(doubles),
                pattern_text=cx.pattern_text,
            )

        for step in plan.steps:
            if (isinstance(step, Let) and step.name in cx.argument_set
                    and not isinstance(step.expr, ArgumentRef)):
                raise DuplicateOrConflictingName(
                    f"`{step.name}` is bound by the pattern although that's an argument already",
                    pattern_text=cx.pattern_text,
                )

        self._check_form_parameters(plan, cx)
        return plan

    def _check_form_parameters(self, plan: BindingPlan, cx: CompileContext) -> None:
        bound = set(cx.argument_set)
        for step in plan.steps:
            if isinstance(step, LetBatch):
                for name, expr in step.bindings:
                    self._check_form(expr, bound, cx)
                    bound.add(name)
                continue
            for expr in _step_exprs(step):
                self._check_form(expr, bound, cx)
            if isinstance(step, (Generator, Let)):
                bound.add(step.name)

    def _check_form(self, expr, bound: set, cx: CompileContext) -> None:
        if not isinstance(expr, UserForm):
            return
        try:
            signature = form_signature(expr.fn)
        except (TypeError, ValueError):
            # No introspectable signature; the executor reports it when called
            return
        params = signature.parameters.values()
        if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in params):
            return
        for p in params:
            if p.kind is inspect.Parameter.VAR_POSITIONAL or p.default is not inspect.Parameter.empty:
                continue
            if p.name not in bound:
                raise UnboundFormName(
                    f"form `{expr}` refers to `{p.name}`, which is not bound at this point of the pattern",
                    location=_form_location(expr.fn, cx),
                    pattern_text=cx.pattern_text,
                    label=f"`{p.name}` is unbound here",
                    help=f"move the form after the element that binds `{p.name}`",
                )


def _step_exprs(step: BindingStep) -> Iterator:
    if isinstance(step, Let):
        yield step.expr
    elif isinstance(step, (Guard, While)):
        yield step.predicate


def _form_location(fn: Callable, cx: CompileContext) -> Optional[TokenLocation]:
    """Locate the constraint marker that supplied `fn`, if the pattern graph is known."""
    if not cx.has_analysis(PatternGraphBuilderPass):
        return None
    graph = cx.get_analysis(PatternGraphBuilderPass)
    for node in graph.iter_nodes():
        form = node.form
        if form is None:
            continue
        if form.kind is ConstraintKind.LET:
            callables = [value for _, value in form.payload]
        else:
            callables = [form.payload]
        if any(value is fn for value in callables):
            return cx.location(node.token_index)
    return None
