"""
Plan Serialization to S-Expressions
====================================

Converts binding plans to a canonical S-expression format for logging,
debugging and structural comparison in tests.

Builds structured sexpr (nested lists + sexpdata.Symbol), then either
pretty-prints it or hands it to sexpdata for compact output.
"""

from typing import Any

import sexpdata

from .steps import BindingPlan
from ..frontend.tokens import Direction


def _sym(s: str) -> sexpdata.Symbol:
    """Keyword/symbol (no quotes in output)."""
    return sexpdata.Symbol(s)


def _pretty_dumps(sexpr: Any, indent: int = 0, indent_str: str = "  ", max_line: int = 100) -> str:
    """
    Pretty-print structured sexpr. Keeps short forms on one line; breaks only when needed.
    """
    if isinstance(sexpr, sexpdata.Symbol):
        return sexpr.value()
    if isinstance(sexpr, (int, float)):
        return str(sexpr)
    if isinstance(sexpr, str):
        escaped = sexpr.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    if isinstance(sexpr, list):
        if not sexpr:
            return "()"
        parts = [_pretty_dumps(e, indent + 1, indent_str, max_line) for e in sexpr]
        one_line = "(" + " ".join(parts) + ")"
        if len(one_line) <= max_line and "\n" not in one_line:
            return one_line
        prefix = indent_str * indent
        next_prefix = indent_str * (indent + 1)
        rest = "\n".join(next_prefix + p for p in parts[1:])
        inner = parts[0] + ("\n" + rest if rest else "")
        return f"({inner}\n{prefix})"
    return str(sexpr)


class PlanSerializer:
    """
    Binding plan to structured S-expression serializer.

    Dispatches on the class name of each plan object (`_serialize_<Class>`).
    """

    def serialize_to_sexpr(self, node: Any) -> Any:
        if node is None:
            return _sym("nil")
        if isinstance(node, bool):
            return _sym("true" if node else "false")
        if isinstance(node, (str, int)):
            return node
        method = getattr(self, f"_serialize_{type(node).__name__}", None)
        if method is None:
            return [_sym(type(node).__name__), _sym("...")]
        return method(node)

    def _serialize_BindingPlan(self, plan: BindingPlan) -> list:
        return [
            _sym("plan"),
            _sym(":backend"), _sym(plan.backend.value),
            _sym(":args"), [_sym(a) for a in plan.argument_names],
            *[self.serialize_to_sexpr(step) for step in plan.steps],
        ]

    # Steps

    def _serialize_Generator(self, step) -> list:
        return [_sym("generator"), _sym(step.name), self.serialize_to_sexpr(step.source)]

    def _serialize_Let(self, step) -> list:
        return [_sym("let"), _sym(step.name), self.serialize_to_sexpr(step.expr)]

    def _serialize_LetBatch(self, step) -> list:
        return [_sym("let*")] + [
            [_sym(name), self.serialize_to_sexpr(expr)] for name, expr in step.bindings
        ]

    def _serialize_Guard(self, step) -> list:
        return [_sym("guard"), self.serialize_to_sexpr(step.predicate)]

    def _serialize_While(self, step) -> list:
        return [_sym("while"), self.serialize_to_sexpr(step.predicate)]

    # Expressions

    def _serialize_Var(self, expr) -> Any:
        return _sym(expr.name)

    def _serialize_ArgumentRef(self, expr) -> list:
        return [_sym("arg"), _sym(expr.name)]

    def _serialize_InstancesOf(self, expr) -> list:
        return [_sym("instances-of"), self.serialize_to_sexpr(expr.type_name)]

    def _serialize_AdjacentByEdge(self, expr) -> list:
        return [
            _sym("adjacent-by-edge"),
            self.serialize_to_sexpr(expr.source),
            self.serialize_to_sexpr(expr.type_name),
            _sym(f":{expr.direction.value}"),
        ]

    def _serialize_EdgeEnd(self, expr) -> list:
        return [
            _sym("that" if expr.far else "this"),
            self.serialize_to_sexpr(expr.edge),
            _sym(f":{expr.direction.value}"),
        ]

    def _serialize_Reachables(self, expr) -> list:
        return [
            _sym("reachables"),
            self.serialize_to_sexpr(expr.start),
            self.serialize_to_sexpr(expr.path),
        ]

    def _serialize_Equals(self, expr) -> list:
        return [_sym("="), self.serialize_to_sexpr(expr.left), self.serialize_to_sexpr(expr.right)]

    def _serialize_IsInstance(self, expr) -> list:
        return [_sym("instance?"), self.serialize_to_sexpr(expr.value), expr.type_name]

    def _serialize_NonEmpty(self, expr) -> list:
        return [_sym("seq"), self.serialize_to_sexpr(expr.collection)]

    def _serialize_MemberOf(self, expr) -> list:
        return [
            _sym("member?"),
            self.serialize_to_sexpr(expr.element),
            self.serialize_to_sexpr(expr.collection),
        ]

    def _serialize_Present(self, expr) -> list:
        return [_sym("some?"), self.serialize_to_sexpr(expr.value)]

    def _serialize_UserForm(self, expr) -> list:
        return [_sym("form"), _sym(str(expr))]

    # Paths

    def _serialize_PathSeq(self, path) -> list:
        return [_sym("p-seq")] + [self.serialize_to_sexpr(s) for s in path.segments]

    def _serialize_TypeRestriction(self, segment) -> list:
        return [_sym("p-restr"), segment.type_name]

    def _serialize_EdgeStep(self, segment) -> list:
        arrow = "-->" if segment.direction is Direction.OUT else "<--"
        return [_sym(arrow), self.serialize_to_sexpr(segment.type_name)]


def plan_to_sexpr(plan: BindingPlan) -> Any:
    return PlanSerializer().serialize_to_sexpr(plan)


def dump_plan(plan: BindingPlan, pretty: bool = True) -> str:
    """
    Serialize a plan to an S-expression string.

    Args:
        plan: Binding plan to serialize
        pretty: Use pretty-printed format (default True). Set False for
            compact single-line output produced by sexpdata.
    """
    sexpr = plan_to_sexpr(plan)
    if pretty:
        return _pretty_dumps(sexpr)
    return sexpdata.dumps(sexpr)
