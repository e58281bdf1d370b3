"""Unit tests for scopes of type declarations and the names declared by a file."""

from conftest import PACKAGE_NAME

from ktpoet.names import Declared
from ktpoet.scope import Scope
from ktpoet.specs import FileSpec, TypeSpec
from ktpoet.writer_dto import DeclaredTypes


def _outer_inner_scope() -> Scope:
    root = Scope.root(PACKAGE_NAME, ["Outer", "Other"])
    return root.enter("Outer", ["A", "Inner"]).enter("Inner", ["A"])


def test_class_name():
    scope = _outer_inner_scope()
    assert scope.class_name == Declared.of(PACKAGE_NAME, "Outer", "Inner")
    assert Scope.root(PACKAGE_NAME).class_name is None
    assert [s.name for s in scope.trace] == ["", "Outer", "Inner"]


def test_innermost_declaration_wins():
    scope = _outer_inner_scope()
    assert scope.resolve("A") == Declared.of(PACKAGE_NAME, "Outer", "Inner", "A")
    assert scope.parent.resolve("A") == Declared.of(PACKAGE_NAME, "Outer", "A")
    assert scope.resolve("Other") == Declared.of(PACKAGE_NAME, "Other")
    assert scope.resolve("Missing") is None


def test_visible_names():
    assert _outer_inner_scope().visible_names() == frozenset({"Outer", "Other", "A", "Inner"})


def test_declared_types_of_file():
    red = TypeSpec.anonymous_class_builder().add_type(TypeSpec.class_builder("Shade").build()).build()
    color = TypeSpec.enum_builder("Color").add_enum_constant("RED", red).build()
    outer = TypeSpec.class_builder("Outer").add_type(TypeSpec.class_builder("Inner").build()).build()
    file_spec = FileSpec.builder(PACKAGE_NAME, "Types").add_type(color).add_type(outer).build()

    declared_types = DeclaredTypes.create(file_spec)

    assert declared_types.top_level == frozenset({"Color", "Outer"})
    assert declared_types.all_names == frozenset({"Color", "Shade", "Outer", "Inner"})
