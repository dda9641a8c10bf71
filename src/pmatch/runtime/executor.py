"""
Plan Executor

Interprets a binding plan as nested loops: every Generator opens a loop,
Let extends the binding context, Guard filters it and While stops the
innermost enclosing loop. Contexts are copied per level, so an abandoned
iteration leaves nothing behind.
"""

import inspect
import logging
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Tuple

from ..backends.base import Backend, EdgeBackend
from ..plan.steps import (
    BindingPlan, BindingStep, Expr,
    Generator, Let, LetBatch, Guard, While, form_signature, is_hidden,
)
from ..shared.errors import PatternRuntimeError

logger = logging.getLogger("pmatch.runtime.executor")

# Yielded upward by a failing While; consumed by the enclosing Generator
_HALT = object()
_MISSING = object()

Context = Dict[str, Any]


class Matches:
    """
    Lazy sequence of matches for one (plan, model, arguments) triple.
    Iterating it again re-runs the plan from scratch.
    """

    def __init__(self, executor: "PlanExecutor", plan: BindingPlan, model: Any,
                 arguments: Context, result: Optional[Callable[..., Any]]):
        self.executor = executor
        self.plan = plan
        self.model = model
        self.arguments = arguments
        self.result = result

    def __iter__(self) -> Iterator[Any]:
        return self.executor.iterate(self.plan, self.model, self.arguments, self.result)

    def first(self, default: Any = None) -> Any:
        return next(iter(self), default)

    def __repr__(self) -> str:
        return f"Matches({len(self.plan)} step(s), model={self.model!r})"


class PlanExecutor:
    """Runs binding plans against one backend."""

    def __init__(self, backend: Backend):
        self.backend = backend

    def matches(self, plan: BindingPlan, model: Any,
                arguments: Optional[Mapping[str, Any]] = None,
                result: Optional[Callable[..., Any]] = None) -> Matches:
        """
        Bind `arguments` and return the lazy match sequence.

        Raises:
            PatternRuntimeError: backend kind mismatch or a missing argument
        """
        if self.backend.kind is not plan.backend:
            raise PatternRuntimeError(
                f"plan compiled for the {plan.backend.value} backend cannot run on "
                f"the {self.backend.kind.value} backend"
            )
        arguments = dict(arguments or {})
        missing = [name for name in plan.argument_names if name not in arguments]
        if missing:
            raise PatternRuntimeError(f"missing pattern argument(s): {', '.join(missing)}")
        return Matches(self, plan, model, arguments, result)

    def iterate(self, plan: BindingPlan, model: Any, arguments: Context,
                result: Optional[Callable[..., Any]] = None) -> Iterator[Any]:
        logger.debug(f"Executing {len(plan)} step(s) with arguments {sorted(arguments)}")
        steps = plan.steps

        def emit(context: Context) -> Any:
            if result is not None:
                return self.call_form(result, context)
            return tuple(context[name] for name in plan.result_names)

        for item in self._run_level(steps, 0, dict(arguments), model):
            if item is not _HALT:
                yield emit(item)

    def _run_level(self, steps: Tuple[BindingStep, ...], level: int,
                   context: Context, model: Any) -> Iterator[Any]:
        if level == len(steps):
            yield context
            return

        step = steps[level]
        if isinstance(step, Generator):
            for value in self.evaluate(step.source, context, model):
                inner = dict(context)
                inner[step.name] = value
                halted = False
                for item in self._run_level(steps, level + 1, inner, model):
                    if item is _HALT:
                        halted = True
                        break
                    yield item
                if halted:
                    break
        elif isinstance(step, Let):
            inner = dict(context)
            inner[step.name] = self.evaluate(step.expr, context, model)
            yield from self._run_level(steps, level + 1, inner, model)
        elif isinstance(step, Guard):
            if self.evaluate(step.predicate, context, model):
                yield from self._run_level(steps, level + 1, context, model)
        elif isinstance(step, While):
            if self.evaluate(step.predicate, context, model):
                yield from self._run_level(steps, level + 1, context, model)
            else:
                yield _HALT
        elif isinstance(step, LetBatch):
            raise PatternRuntimeError("plan contains an unexpanded let batch")
        else:
            raise PatternRuntimeError(f"unknown binding step {type(step).__name__}")

    # =========================================================================
    # Expressions
    # =========================================================================

    def evaluate(self, expr: Expr, context: Context, model: Any) -> Any:
        method = getattr(self, f"_eval_{type(expr).__name__}", None)
        if method is None:
            raise PatternRuntimeError(f"cannot evaluate {type(expr).__name__}")
        return method(expr, context, model)

    def _eval_Var(self, expr, context, model):
        try:
            return context[expr.name]
        except KeyError:
            raise PatternRuntimeError(f"variable `{expr.name}` is used before it is bound") from None

    def _eval_ArgumentRef(self, expr, context, model):
        return context[expr.name]

    def _eval_InstancesOf(self, expr, context, model):
        return self.backend.instances_of_type(model, expr.type_name)

    def _eval_AdjacentByEdge(self, expr, context, model):
        backend = self._edge_backend()
        return backend.adjacent_by_edge(self.evaluate(expr.source, context, model),
                                        expr.type_name, expr.direction)

    def _eval_EdgeEnd(self, expr, context, model):
        backend = self._edge_backend()
        edge = self.evaluate(expr.edge, context, model)
        if expr.far:
            return backend.that(edge, expr.direction)
        return backend.this(edge, expr.direction)

    def _eval_Reachables(self, expr, context, model):
        return self.backend.reachables(self.evaluate(expr.start, context, model), expr.path)

    def _eval_Equals(self, expr, context, model):
        return self.evaluate(expr.left, context, model) == self.evaluate(expr.right, context, model)

    def _eval_IsInstance(self, expr, context, model):
        return self.backend.is_instance(self.evaluate(expr.value, context, model), expr.type_name)

    def _eval_NonEmpty(self, expr, context, model):
        return next(iter(self.evaluate(expr.collection, context, model)), _MISSING) is not _MISSING

    def _eval_MemberOf(self, expr, context, model):
        return self.evaluate(expr.element, context, model) in self.evaluate(expr.collection, context, model)

    def _eval_Present(self, expr, context, model):
        return self.evaluate(expr.value, context, model) is not None

    def _eval_UserForm(self, expr, context, model):
        return self.call_form(expr.fn, context)

    def _edge_backend(self) -> EdgeBackend:
        if not isinstance(self.backend, EdgeBackend):
            raise PatternRuntimeError(f"the {self.backend.kind.value} backend has no edges with identity")
        return self.backend

    # =========================================================================
    # User forms
    # =========================================================================

    def call_form(self, fn: Callable[..., Any], context: Context) -> Any:
        """
        Call a user form with the bindings it names as parameters; a form
        taking **kwargs receives every visible binding.
        """
        signature = form_signature(fn)
        params = signature.parameters.values()
        if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in params):
            return fn(**{k: v for k, v in context.items() if not is_hidden(k)})

        kwargs = {}
        for p in params:
            if p.name in context:
                kwargs[p.name] = context[p.name]
            elif p.default is inspect.Parameter.empty and p.kind is not inspect.Parameter.VAR_POSITIONAL:
                raise PatternRuntimeError(
                    f"form {getattr(fn, '__qualname__', fn)!r} refers to `{p.name}`, "
                    "which is not bound at this point of the pattern"
                )
        return fn(**kwargs)

