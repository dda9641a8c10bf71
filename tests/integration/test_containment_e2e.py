"""
End-to-end tests over the containment backend.
"""

import pytest
from tests.test_utils import run_pattern, names

pytestmark = pytest.mark.integration


class TestContainmentMatching:
    def test_class_attributes(self, containment_executor, class_model):
        matches = run_pattern(containment_executor, "c<Class> -<attributes>-> a<Attribute>", class_model)
        assert names(matches) == [
            ("Person", "name"), ("Person", "age"), ("Student", "school"), ("Date", "day"),
        ]

    def test_cross_reference(self, containment_executor, class_model):
        matches = run_pattern(containment_executor, "s<Class> -<superclass>-> p<Class>", class_model)
        assert names(matches) == [("Student", "Person")]

    def test_compressed_chain_through_anonymous_class(self, containment_executor, class_model):
        pattern = "p<Package> -<classes>-> <Class> -<attributes>-> a"
        assert names(run_pattern(containment_executor, pattern, class_model)) == [
            ("root", "name"), ("root", "age"), ("root", "school"), ("util", "day"),
        ]

    def test_anonymous_start(self, containment_executor, class_model):
        matches = run_pattern(containment_executor, "<Package> -<packages>-> q", class_model)
        assert names(matches) == [("util",)]

    def test_exact_type(self, containment_executor, class_model):
        assert len(run_pattern(containment_executor, "e<NamedElement>", class_model)) == 9
        assert run_pattern(containment_executor, "e<NamedElement!>", class_model) == []
        assert len(run_pattern(containment_executor, "e<!Attribute>", class_model)) == 5

    def test_constraint_in_chain(self, containment_executor, class_model):
        pattern = ["p<Package>", "-<classes>->", "<Class>", ":when", lambda p: p.value("name") == "util",
                   "-<attributes>->", "a"]
        assert names(run_pattern(containment_executor, pattern, class_model)) == [("util", "day")]

    def test_argument(self, containment_executor, class_model):
        root = class_model.roots[0]
        matches = run_pattern(containment_executor, "p -<packages>-> q -<classes>-> c", class_model,
                              arguments={"p": root}, argument_names=("p",))
        assert names(matches) == [("root", "util", "Date")]
