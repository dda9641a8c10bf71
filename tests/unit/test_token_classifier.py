"""
Tests for the token classifier: node/edge token grammar, constraint
markers and malformed input.
"""

import pytest
from pmatch.frontend.classifier import TokenClassifier, split_pattern
from pmatch.frontend.tokens import NodeToken, EdgeToken, ConstraintForm, ConstraintKind, Direction
from pmatch.shared.errors import MalformedToken


@pytest.fixture(scope="module")
def classifier():
    return TokenClassifier()


class TestNodeTokens:
    @pytest.mark.parametrize("text, name, type_name", [
        ("f<Family>", "f", "Family"),
        ("f", "f", None),
        ("f<>", "f", None),
        ("<Family>", None, "Family"),
        ("<>", None, None),
        ("c<model.Class>", "c", "model.Class"),
        ("c<Class!>", "c", "Class!"),
        ("c<!Class>", "c", "!Class"),
        ("x_1<T2>", "x_1", "T2"),
    ])
    def test_node_token(self, classifier, text, name, type_name):
        assert classifier.classify_token(text) == NodeToken(name, type_name)

    def test_anonymous(self, classifier):
        assert classifier.classify_token("<Family>").anonymous
        assert not classifier.classify_token("f").anonymous


class TestEdgeTokens:
    @pytest.mark.parametrize("text, name, type_name, direction", [
        ("-->", None, None, Direction.OUT),
        ("-<>->", None, None, Direction.OUT),
        ("-<HasFather>->", None, "HasFather", Direction.OUT),
        ("-e->", "e", None, Direction.OUT),
        ("-e<HasFather>->", "e", "HasFather", Direction.OUT),
        ("<--", None, None, Direction.IN),
        ("<-<HasFather>-", None, "HasFather", Direction.IN),
        ("<-e-", "e", None, Direction.IN),
        ("<-e<HasFather>-", "e", "HasFather", Direction.IN),
    ])
    def test_edge_token(self, classifier, text, name, type_name, direction):
        assert classifier.classify_token(text) == EdgeToken(name, type_name, direction)

    def test_direction_reverse(self):
        assert Direction.OUT.reverse() is Direction.IN
        assert Direction.IN.reverse() is Direction.OUT


class TestClassify:
    def test_string_pattern_is_split_on_whitespace(self, classifier):
        tokens = classifier.classify("f<Family>  -<HasFather>->\tm<Member>")
        assert tokens == [
            NodeToken("f", "Family", index=0),
            EdgeToken(None, "HasFather", Direction.OUT, index=1),
            NodeToken("m", "Member", index=2),
        ]

    def test_constraint_marker_consumes_payload(self, classifier):
        def smith(f):
            return True
        tokens = classifier.classify(["f<Family>", ":when", smith, "-->", "m"])
        assert tokens == [
            NodeToken("f", "Family", index=0),
            ConstraintForm(ConstraintKind.WHEN, smith, index=1),
            EdgeToken(None, None, Direction.OUT, index=3),
            NodeToken("m", None, index=4),
        ]

    def test_while_marker(self, classifier):
        def pred(n):
            return True
        tokens = classifier.classify(["n", ":while", pred])
        assert tokens[1] == ConstraintForm(ConstraintKind.WHILE, pred, index=1)

    def test_let_accepts_mapping(self, classifier):
        def last_name(f):
            return f
        tokens = classifier.classify(["f", ":let", {"name": last_name}])
        assert tokens[1].kind is ConstraintKind.LET
        assert tokens[1].payload == (("name", last_name),)

    def test_let_accepts_pairs(self, classifier):
        def one():
            return 1

        def two():
            return 2
        tokens = classifier.classify(["f", ":let", [("x", one), ("y", two)]])
        assert tokens[1].payload == (("x", one), ("y", two))

    def test_split_pattern_keeps_sequences(self):
        fn = len
        assert split_pattern(["a", ":when", fn]) == ["a", ":when", fn]
        assert split_pattern("a  -->  b") == ["a", "-->", "b"]


class TestMalformed:
    @pytest.mark.parametrize("text", ["a<A", "a-b", "-->>", "<-e->", "a<A>b", "-e<E>-", ""])
    def test_malformed_token(self, classifier, text):
        with pytest.raises(MalformedToken):
            classifier.classify([text])

    def test_error_points_at_element(self, classifier):
        with pytest.raises(MalformedToken) as exc_info:
            classifier.classify(["f<Family>", "-x>", "m"])
        assert exc_info.value.location.index == 1
        assert exc_info.value.location.column == 11
        assert exc_info.value.code == "P0001"

    def test_lark_error_is_chained(self, classifier):
        with pytest.raises(MalformedToken) as exc_info:
            classifier.classify(["a<A"])
        assert exc_info.value.__cause__ is not None

    def test_unknown_marker(self, classifier):
        with pytest.raises(MalformedToken, match="unknown constraint marker"):
            classifier.classify(["a", ":unless", len])

    def test_marker_without_form(self, classifier):
        with pytest.raises(MalformedToken, match="has no form"):
            classifier.classify(["a", ":when"])

    def test_when_requires_callable(self, classifier):
        with pytest.raises(MalformedToken, match="expects a predicate"):
            classifier.classify(["a", ":when", 42])

    def test_let_requires_identifier_names(self, classifier):
        with pytest.raises(MalformedToken, match="binding"):
            classifier.classify(["a", ":let", {"not a name": len}])

    def test_let_requires_callables(self, classifier):
        with pytest.raises(MalformedToken, match="binding"):
            classifier.classify(["a", ":let", {"x": 1}])

    def test_non_string_element(self, classifier):
        with pytest.raises(MalformedToken, match="unexpected pattern element"):
            classifier.classify(["a", 42])
