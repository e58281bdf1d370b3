"""Pytest configuration and fixtures for ktpoet tests."""

from __future__ import annotations

import pytest

from ktpoet.names import STRING, Declared
from ktpoet.specs import FileSpec, FunSpec, TypeSpec

PACKAGE_NAME = "com.example"


@pytest.fixture(scope="module")
def greeter_type() -> TypeSpec:
    """A class with a property and a function returning a greeting."""
    greet = FunSpec.builder("greet").returns(STRING).add_statement("return %S + name", "Hello, ").build()
    return TypeSpec.class_builder("Greeter").add_property("name", STRING).add_function(greet).build()


@pytest.fixture(scope="module")
def greeter_file(greeter_type: TypeSpec) -> FileSpec:
    return FileSpec.get(PACKAGE_NAME, greeter_type)


@pytest.fixture
def hoverboard() -> Declared:
    return Declared.of("com.mattel", "Hoverboard")


def type_in_file(type_spec: TypeSpec, package_name: str = PACKAGE_NAME) -> str:
    """Render a file holding only `type_spec`."""
    return str(FileSpec.get(package_name, type_spec))
