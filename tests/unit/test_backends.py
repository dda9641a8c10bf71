"""
Tests for the reference backends: type specifications, the shared path
evaluator, the typed graph and the containment model.
"""

import pytest
from pmatch.backends.base import engine_for
from pmatch.backends.containment import ContainmentBackend, ObjectClass, ModelObject, ObjectModel
from pmatch.backends.graph import GraphBackend, Schema, TypedGraph
from pmatch.backends.paths import evaluate_path, ordered_set
from pmatch.backends.types import parse_type_spec, type_matches, TypeMatcher
from pmatch.frontend.tokens import Direction
from pmatch.plan.steps import PathSeq, EdgeStep, TypeRestriction
from pmatch.shared.backend_kind import BackendKind
from pmatch.shared.errors import PatternRuntimeError

OUT, IN = Direction.OUT, Direction.IN


def path(*segments):
    return PathSeq(tuple(segments))


def first_names(vertices):
    return [v.value("firstName") for v in vertices]


class TestTypeSpecs:
    @pytest.mark.parametrize("spec, matcher", [
        ("Family", TypeMatcher("Family")),
        ("Family!", TypeMatcher("Family", exact=True)),
        ("!Family", TypeMatcher("Family", negated=True)),
        ("!Family!", TypeMatcher("Family", exact=True, negated=True)),
        ("model.Family", TypeMatcher("model.Family")),
    ])
    def test_parse(self, spec, matcher):
        assert parse_type_spec(spec) == matcher

    def test_subtypes(self, family_schema):
        member = family_schema.lookup("Member")
        assert type_matches(member, "Member")
        assert type_matches(member, "Named")
        assert not type_matches(member, "Named!")
        assert type_matches(member, "Member!")
        assert type_matches(member, "!Family")
        assert not type_matches(member, "!Named")
        assert type_matches(member, None)

    def test_multiple_inheritance(self):
        schema = Schema()
        schema.vertex_class("A")
        schema.vertex_class("B")
        schema.vertex_class("C", "A")
        schema.vertex_class("D", "C", "B")
        d = schema.lookup("D")
        assert all(d.is_a(name) for name in "ABCD")


class TestPathEvaluator:
    def test_ordered_set(self):
        assert ordered_set([3, 1, 3, 2, 1]) == [3, 1, 2]

    def test_evaluate_path_deduplicates(self):
        links = {1: [2, 3], 2: [4], 3: [4, 5], 4: [], 5: []}

        def step(element, type_spec, direction):
            return links[element]

        def restrict(element, type_spec):
            return element % 2 == int(type_spec)

        assert evaluate_path(1, path(EdgeStep(OUT), EdgeStep(OUT)), step, restrict) == [4, 5]
        assert evaluate_path(1, path(EdgeStep(OUT), EdgeStep(OUT), TypeRestriction("1")), step, restrict) == [5]
        assert evaluate_path(1, path(), step, restrict) == [1]


class TestGraphBackend:
    @pytest.fixture(scope="class")
    def backend(self):
        return GraphBackend()

    def test_instances_of_type(self, backend, family_graph):
        assert len(list(backend.instances_of_type(family_graph, "Family"))) == 3
        assert len(list(backend.instances_of_type(family_graph, "Member"))) == 6
        assert len(list(backend.instances_of_type(family_graph, "Named"))) == 9
        assert len(list(backend.instances_of_type(family_graph, None))) == 9

    def test_instances_of_type_is_lazy_and_restartable(self, backend, family_graph):
        first = list(backend.instances_of_type(family_graph, "Family"))
        second = list(backend.instances_of_type(family_graph, "Family"))
        assert first == second

    def test_adjacent_by_edge(self, backend, family_graph):
        jones = list(family_graph.vertices("Family"))[2]
        sons = list(backend.adjacent_by_edge(jones, "HasSon", OUT))
        assert [backend.that(e, OUT).value("firstName") for e in sons] == ["Ray", "Sam"]
        assert all(backend.this(e, OUT) is jones for e in sons)
        assert len(list(backend.adjacent_by_edge(jones, "HasMember", OUT))) == 3
        assert list(backend.adjacent_by_edge(jones, None, IN)) == []

    def test_this_and_that_follow_direction(self, backend, family_graph):
        edge = next(family_graph.edges("HasFather"))
        assert backend.this(edge, IN) is edge.omega
        assert backend.that(edge, IN) is edge.alpha

    def test_reachables(self, backend, family_graph):
        jones = list(family_graph.vertices("Family"))[2]
        assert first_names(backend.reachables(jones, path(EdgeStep(OUT, "HasSon")))) == ["Ray", "Sam"]
        assert first_names(backend.reachables(jones, path(EdgeStep(OUT), TypeRestriction("Member")))) == [
            "Tom", "Ray", "Sam",
        ]
        ray = backend.reachables(jones, path(EdgeStep(OUT, "HasSon")))[0]
        assert backend.reachables(ray, path(EdgeStep(IN), TypeRestriction("Family"))) == [jones]

    def test_is_instance(self, backend, family_graph):
        edge = next(family_graph.edges())
        assert backend.is_instance(edge, "HasMember")
        assert backend.is_instance(edge.alpha, "Family")
        assert not backend.is_instance("Family", "Family")

    def test_wrong_model(self, backend):
        with pytest.raises(PatternRuntimeError):
            backend.instances_of_type(ObjectModel(), "Family")

    def test_schema_errors(self, family_schema):
        with pytest.raises(ValueError):
            family_schema.vertex_class("Family")
        with pytest.raises(KeyError):
            family_schema.lookup("Nope")
        graph = TypedGraph(family_schema)
        with pytest.raises(ValueError):
            graph.create_vertex("HasSon")


class TestContainmentBackend:
    @pytest.fixture(scope="class")
    def backend(self):
        return ContainmentBackend()

    def test_pre_order_instances(self, backend, class_model):
        assert [o.value("name") for o in backend.instances_of_type(class_model, None)] == [
            "root", "Person", "name", "age", "Student", "school", "util", "Date", "day",
        ]
        assert [o.value("name") for o in backend.instances_of_type(class_model, "Class")] == [
            "Person", "Student", "Date",
        ]

    def test_containment_sets_container(self, class_model):
        root = class_model.roots[0]
        person = next(root.references("classes"))
        assert person.container is root
        student = list(root.references("classes"))[1]
        # Cross references do not contain
        assert next(student.references("superclass")).container is root

    def test_reachables_follow_named_references(self, backend, class_model):
        root = class_model.roots[0]
        reached = backend.reachables(root, path(EdgeStep(OUT, "classes"), EdgeStep(OUT, "attributes")))
        assert [o.value("name") for o in reached] == ["name", "age", "school"]

    def test_reachables_follow_all_references(self, backend, class_model):
        root = class_model.roots[0]
        student = list(root.references("classes"))[1]
        reached = backend.reachables(student, path(EdgeStep(OUT)))
        assert [o.value("name") for o in reached] == ["school", "Person"]

    def test_backward_step_rejected(self, backend, class_model):
        with pytest.raises(PatternRuntimeError):
            backend.reachables(class_model.roots[0], path(EdgeStep(IN)))

    def test_single_container(self):
        cls = ObjectClass("Box", containments=["items"])
        a, b = ModelObject(cls), ModelObject(cls)
        item = a.add("items", ModelObject(cls))
        with pytest.raises(ValueError):
            b.add("items", item)

    def test_containments_are_inherited(self):
        base = ObjectClass("Base", containments=["children"])
        sub = ObjectClass("Sub", (base,))
        assert "children" in sub.containments
        assert sub.is_a("Base")


class TestEngineFor:
    def test_engines(self):
        assert isinstance(engine_for(BackendKind.GRAPH), GraphBackend)
        assert isinstance(engine_for(BackendKind.CONTAINMENT), ContainmentBackend)
