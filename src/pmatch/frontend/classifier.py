"""
Token Classifier

Classifies pattern elements as node tokens, edge tokens or constraint
forms. Node and edge tokens are parsed with a small lark grammar.
"""

import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple, Union
import logging

from lark import Lark, Transformer
from lark.exceptions import UnexpectedInput

from .tokens import (
    NodeToken, EdgeToken, ConstraintForm, ConstraintKind, Direction, PatternToken,
)
from ..shared.errors import MalformedToken, locate_element, render_pattern
from ..utils.config import CONSTRAINT_MARKERS, MARKER_PREFIX, GRAMMAR_FILE, GRAMMAR_START

logger = logging.getLogger("pmatch.frontend.classifier")

_IDENTIFIER = re.compile(r"[a-zA-Z0-9_]+")


class _TypeAnnotation:
    __slots__ = ("value",)

    def __init__(self, value: Optional[str]):
        self.value = value


class TokenTransformer(Transformer):
    """Turns a parsed token tree into a NodeToken or EdgeToken."""

    def type_ann(self, items):
        return _TypeAnnotation(str(items[0]) if items else None)

    def spec(self, items) -> Tuple[Optional[str], Optional[str]]:
        name = None
        type_name = None
        for item in items:
            if isinstance(item, _TypeAnnotation):
                type_name = item.value
            else:
                name = str(item)
        return name, type_name

    def node(self, items) -> NodeToken:
        name, type_name = items[0]
        return NodeToken(name, type_name)

    def out_edge(self, items) -> EdgeToken:
        name, type_name = items[0] if items else (None, None)
        return EdgeToken(name, type_name, Direction.OUT)

    def in_edge(self, items) -> EdgeToken:
        name, type_name = items[0] if items else (None, None)
        return EdgeToken(name, type_name, Direction.IN)


class TokenClassifier:
    """
    Classifies a pattern specification left to right.

    Constraint markers (`:when`, `:let`, `:while`) consume the following
    element as their payload; every other element must be a string that
    parses as a node or edge token.
    """

    def __init__(self):
        grammar_path = Path(__file__).parent / GRAMMAR_FILE
        self.parser = Lark.open(
            grammar_path,
            start=GRAMMAR_START,
            parser='lalr',
            maybe_placeholders=False,
        )
        self.transformer = TokenTransformer()

    def classify_token(self, text: str) -> Union[NodeToken, EdgeToken]:
        """Parse a single node/edge token. Raises lark's UnexpectedInput."""
        tree = self.parser.parse(text.strip())
        return self.transformer.transform(tree)

    def classify(self, pattern: Union[str, Sequence[Any]]) -> List[PatternToken]:
        elements = split_pattern(pattern)
        tokens: List[PatternToken] = []
        i = 0
        while i < len(elements):
            element = elements[i]
            if not isinstance(element, str):
                raise self._malformed(elements, i, f"unexpected pattern element {element!r}",
                                      "expected a node token, an edge token or a constraint marker")
            if element.startswith(MARKER_PREFIX):
                tokens.append(self._constraint(elements, i))
                i += 2
                continue
            try:
                token = self.classify_token(element)
            except UnexpectedInput as e:
                raise self._malformed(
                    elements, i, f"malformed pattern token `{element}`",
                    "not a node or edge token",
                ) from e
            tokens.append(_with_index(token, i))
            i += 1
        logger.debug(f"Classified {len(tokens)} pattern tokens")
        return tokens

    def _constraint(self, elements: Sequence[Any], i: int) -> ConstraintForm:
        marker = elements[i]
        if marker not in CONSTRAINT_MARKERS:
            raise self._malformed(elements, i, f"unknown constraint marker `{marker}`",
                                  "not a constraint keyword")
        if i + 1 >= len(elements):
            raise self._malformed(elements, i, f"constraint marker `{marker}` has no form",
                                  "expected a form after this marker")
        kind = ConstraintKind(marker)
        payload = elements[i + 1]
        if kind is ConstraintKind.LET:
            return ConstraintForm(kind, self._let_bindings(elements, i + 1), index=i)
        if not callable(payload):
            raise self._malformed(elements, i + 1, f"`{marker}` expects a predicate",
                                  "not callable")
        return ConstraintForm(kind, payload, index=i)

    def _let_bindings(self, elements: Sequence[Any], i: int):
        payload = elements[i]
        pairs = list(payload.items()) if isinstance(payload, Mapping) else payload
        bindings = []
        try:
            for name, form in pairs:
                if not (isinstance(name, str) and _IDENTIFIER.fullmatch(name) and callable(form)):
                    raise ValueError(name)
                bindings.append((name, form))
        except (TypeError, ValueError) as e:
            raise self._malformed(
                elements, i, "`:let` expects (name, callable) bindings",
                "not a binding list",
            ) from e
        return tuple(bindings)

    @staticmethod
    def _malformed(elements, index, message, label) -> MalformedToken:
        return MalformedToken(
            message,
            location=locate_element(elements, index),
            pattern_text=render_pattern(elements),
            label=label,
            help="nodes are written name<Type>, edges -name<Type>-> or <-name<Type>-",
        )


def split_pattern(pattern: Union[str, Sequence[Any]]) -> List[Any]:
    """A pattern given as one string is a whitespace-separated token list."""
    if isinstance(pattern, str):
        return pattern.split()
    return list(pattern)


def _with_index(token, index: int):
    if isinstance(token, EdgeToken):
        return EdgeToken(token.name, token.type_name, token.direction, index=index)
    return NodeToken(token.name, token.type_name, index=index)
