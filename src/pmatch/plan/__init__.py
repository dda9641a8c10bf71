"""
Binding plans: steps, expressions, path expressions and serialization.
"""

from .steps import (
    TypeRestriction, EdgeStep, PathSeq, PathSegment,
    Var, ArgumentRef, InstancesOf, AdjacentByEdge, EdgeEnd, Reachables,
    Equals, IsInstance, NonEmpty, MemberOf, Present, UserForm, Expr,
    Generator, Let, LetBatch, Guard, While, BindingStep, BindingPlan, is_hidden,
)
from .serialization import plan_to_sexpr, dump_plan
