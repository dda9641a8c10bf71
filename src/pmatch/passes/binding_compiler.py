"""
Binding Compiler Pass

Walks the pattern graph depth first from the anchor with an explicit stack
and emits the binding plan. The walk is shared by both backends; the
backend-specific parts come from the compile target in the context.

Stack entries are nodes or incidences (an edge seen from the node it is
traversed from). A structural edge is visited once, whichever end it is
reached from.
"""

import logging
from typing import List, Set, Union

from .base import BasePass, CompileContext
from .anchor_resolution import AnchorResolverPass
from .path_compression import PathCompressor, CompressedChain
from ..frontend.tokens import ConstraintForm, ConstraintKind
from ..ir.nodes import PatternGraph, NodeKind, EdgeKind, NodeId, EdgeId, Incidence
from ..plan.steps import (
    BindingPlan, BindingStep, Expr,
    Generator, Let, LetBatch, Guard, While,
    Var, ArgumentRef, EdgeEnd, Equals, IsInstance, NonEmpty, MemberOf, UserForm,
)
from ..utils.config import HIDDEN_NAME_PREFIX

logger = logging.getLogger("pmatch.passes.binding_compiler")


class BindingCompilerPass(BasePass):
    requires = [AnchorResolverPass]

    def run(self, graph: PatternGraph, cx: CompileContext) -> BindingPlan:
        cx.target.validate(graph, cx)
        walk = _BindingWalk(graph, cx)
        steps = walk.compile()
        logger.debug(f"Compiled {len(steps)} binding step(s) for backend {cx.backend.value}")
        return BindingPlan(tuple(steps), cx.argument_names, cx.backend)


class _BindingWalk:
    """State of one traversal: stack, visited set and emitted steps."""

    def __init__(self, graph: PatternGraph, cx: CompileContext):
        self.graph = graph
        self.cx = cx
        self.target = cx.target
        self.compressor = PathCompressor(graph, cx)
        self.visited: Set[Union[NodeId, EdgeId]] = set()
        self.stack: List[Union[NodeId, Incidence]] = []
        self.steps: List[BindingStep] = []

    def compile(self) -> List[BindingStep]:
        self.stack.append(self.graph.anchor)
        while self.stack:
            current = self.stack.pop()
            if isinstance(current, NodeId):
                if current not in self.visited:
                    self.visit_node(current)
            elif current.edge not in self.visited:
                self.visit_incidence(current)
        return self.steps

    # =========================================================================
    # Helpers
    # =========================================================================

    def var(self, node_id: NodeId) -> str:
        """Variable bound to a node; anonymous nodes get a hidden name."""
        node = self.graph.node(node_id)
        return node.name if node.name is not None else f"{HIDDEN_NAME_PREFIX}{node_id.index}"

    def enqueue(self, node_id: NodeId) -> None:
        """Push unvisited incidences so they pop in declaration order."""
        pending = [inc for inc in self.graph.incidences(node_id) if inc.edge not in self.visited]
        self.stack.extend(reversed(pending))

    def mark(self, *elements: Union[NodeId, EdgeId]) -> None:
        self.visited.update(elements)

    # =========================================================================
    # Nodes
    # =========================================================================

    def visit_node(self, node_id: NodeId) -> None:
        node = self.graph.node(node_id)
        self.mark(node_id)
        if node.kind is NodeKind.PATTERN:
            self.steps.append(Generator(self.var(node_id), self.target.generator_call(node.type_name)))
        elif node.kind is NodeKind.ARGUMENT:
            self.steps.append(Let(node.name, ArgumentRef(node.name)))
        self.enqueue(node_id)

    # =========================================================================
    # Incidences
    # =========================================================================

    def visit_incidence(self, inc: Incidence) -> None:
        edge = self.graph.edge(inc.edge)
        self.mark(inc.edge)
        if edge.kind is EdgeKind.HAS_START:
            self.stack.append(inc.that)
        elif edge.kind is EdgeKind.PRECEDES:
            self.splice_constraints(inc)
        elif edge.kind is EdgeKind.ARGUMENT:
            self.visit_argument_edge(inc)
        elif edge.anonymous:
            chain = self.compressor.from_edge(inc, self.visited)
            self.emit_chain(Var(self.var(inc.this)), chain)
        else:
            self.visit_named_edge(inc)

    def visit_named_edge(self, inc: Incidence) -> None:
        edge = self.graph.edge(inc.edge)
        self.steps.append(Generator(
            edge.name,
            self.target.edge_generator_call(Var(self.var(inc.this)), edge.type_name, inc.direction),
        ))
        self.bind_far_end(inc, Var(edge.name))

    def visit_argument_edge(self, inc: Incidence) -> None:
        edge = self.graph.edge(inc.edge)
        edge_var = Var(edge.name)
        self.steps.append(Guard(Equals(
            Var(self.var(inc.this)), EdgeEnd(edge_var, inc.direction, far=False),
        )))
        self.bind_far_end(inc, edge_var)

    def bind_far_end(self, inc: Incidence, edge_var: Expr) -> None:
        """Bind, check or compress the node at the far end of a named edge."""
        target = self.graph.node(inc.that)
        that = EdgeEnd(edge_var, inc.direction)
        if inc.that in self.visited or target.kind is NodeKind.ARGUMENT:
            self.steps.append(Guard(Equals(Var(self.var(inc.that)), that)))
        elif target.anonymous:
            chain = self.compressor.from_node(inc.that, self.visited)
            self.emit_chain(that, chain)
            return
        else:
            self.steps.append(LetBatch(((target.name, that),)))
            if target.type_name:
                self.steps.append(Guard(IsInstance(Var(target.name), target.type_name)))
        self.mark(inc.that)
        self.enqueue(inc.that)

    def emit_chain(self, start: Expr, chain: CompressedChain) -> None:
        """Turn a compressed chain into one reachability step."""
        terminal = self.graph.node(chain.terminal)
        reach = self.target.reachability_call(start, chain.path)
        if chain.terminal in self.visited or terminal.kind is NodeKind.ARGUMENT:
            self.steps.append(Guard(MemberOf(Var(self.var(chain.terminal)), reach)))
        elif terminal.anonymous and not chain.open_end:
            self.steps.append(Guard(NonEmpty(reach)))
        else:
            self.steps.append(Generator(self.var(chain.terminal), reach))

        self.mark(*chain.elements)
        self.enqueue(chain.terminal)
        # Pushed last so they are spliced right after the reachability step
        self.stack.extend(reversed(chain.constraints))

    # =========================================================================
    # Constraint forms
    # =========================================================================

    def splice_constraints(self, inc: Incidence) -> None:
        """Splice the whole Precedes chain starting at inc's target, in order."""
        current = inc.that
        while current is not None:
            node = self.graph.node(current)
            self.mark(current)
            self.steps.append(constraint_step(node.form))
            current = None
            for nxt in self.graph.incidences(node.id):
                edge = self.graph.edge(nxt.edge)
                if edge.kind is EdgeKind.PRECEDES and nxt.this == node.id and nxt.edge not in self.visited:
                    self.mark(nxt.edge)
                    current = nxt.that
                    break


def constraint_step(form: ConstraintForm) -> BindingStep:
    if form.kind is ConstraintKind.WHEN:
        return Guard(UserForm(form.payload))
    if form.kind is ConstraintKind.WHILE:
        return While(UserForm(form.payload))
    return LetBatch(tuple((name, UserForm(fn)) for name, fn in form.payload))
