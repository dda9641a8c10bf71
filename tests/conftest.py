"""
Pytest configuration and shared fixtures for all pmatch tests.

Compiler and executors are stateless and shared per session; models are
small in-memory graphs and object trees built once per session and never
mutated by the tests.
"""

import sys
import pytest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from pmatch.compiler.driver import PatternCompiler
from pmatch.runtime.executor import PlanExecutor
from pmatch.backends.graph import Schema, TypedGraph, GraphBackend
from pmatch.backends.containment import ObjectClass, ModelObject, ObjectModel, ContainmentBackend


# =============================================================================
# Session-scoped fixtures (shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def session_compiler():
    """
    Session-scoped compiler shared across ALL tests.

    - The lark parser is built once
    - Every compile call gets a fresh CompileContext, so sharing is safe
    """
    return PatternCompiler()


@pytest.fixture(scope="session")
def graph_executor():
    return PlanExecutor(GraphBackend())


@pytest.fixture(scope="session")
def containment_executor():
    return PlanExecutor(ContainmentBackend())


@pytest.fixture(scope="class")
def compiler(session_compiler):
    """Class-scoped compiler - shared across all tests in a class."""
    return session_compiler


# =============================================================================
# Models
# =============================================================================

@pytest.fixture(scope="session")
def family_schema():
    schema = Schema()
    schema.vertex_class("Named")
    schema.vertex_class("Family", "Named")
    schema.vertex_class("Member", "Named")
    schema.edge_class("HasMember")
    schema.edge_class("HasFather", "HasMember")
    schema.edge_class("HasSon", "HasMember")
    return schema


@pytest.fixture(scope="session")
def family_graph(family_schema):
    """
    Three families, each with a father; two of them are Smiths.

        Smith  -HasFather-> Ben,   -HasSon-> Tim
        Smith  -HasFather-> Joe
        Jones  -HasFather-> Tom,   -HasSon-> Ray, -HasSon-> Sam
    """
    g = TypedGraph(family_schema)
    families = [
        ("Smith", "Ben", ["Tim"]),
        ("Smith", "Joe", []),
        ("Jones", "Tom", ["Ray", "Sam"]),
    ]
    for last_name, father, sons in families:
        family = g.create_vertex("Family", lastName=last_name)
        g.create_edge("HasFather", family, g.create_vertex("Member", firstName=father))
        for son in sons:
            g.create_edge("HasSon", family, g.create_vertex("Member", firstName=son))
    return g


@pytest.fixture(scope="session")
def link_graph():
    """
    Five nodes, directed links with a 2-cycle (n2 <-> n3), a self loop on n5
    and a node without outgoing links (n4).
    """
    schema = Schema()
    schema.vertex_class("Node")
    schema.edge_class("Link")
    g = TypedGraph(schema)
    nodes = [g.create_vertex("Node", name=f"n{i}") for i in range(1, 6)]
    for a, b in [(1, 2), (2, 3), (3, 2), (3, 4), (1, 5), (5, 5), (5, 4)]:
        g.create_edge("Link", nodes[a - 1], nodes[b - 1])
    return g


@pytest.fixture(scope="session")
def number_graph():
    """Num vertices with values 1..5 in creation order."""
    schema = Schema()
    schema.vertex_class("Num")
    g = TypedGraph(schema)
    for v in range(1, 6):
        g.create_vertex("Num", v=v)
    return g


@pytest.fixture(scope="session")
def class_model():
    """
    root (Package)
      classes:  Person [name, age], Student [school] (superclass Person)
      packages: util (Package)
                  classes: Date [day]
    """
    named = ObjectClass("NamedElement")
    package = ObjectClass("Package", (named,), containments=["classes", "packages"])
    clazz = ObjectClass("Class", (named,), containments=["attributes"])
    attribute = ObjectClass("Attribute", (named,))

    root = ModelObject(package, name="root")
    person = root.add("classes", ModelObject(clazz, name="Person"))
    person.add("attributes", ModelObject(attribute, name="name"))
    person.add("attributes", ModelObject(attribute, name="age"))
    student = root.add("classes", ModelObject(clazz, name="Student"))
    student.add("attributes", ModelObject(attribute, name="school"))
    student.add("superclass", person)
    util = root.add("packages", ModelObject(package, name="util"))
    date = util.add("classes", ModelObject(clazz, name="Date"))
    date.add("attributes", ModelObject(attribute, name="day"))
    return ObjectModel([root])


# =============================================================================
# Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers for test organization."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
