"""Tests for the structural checks of the spec builders."""

import pytest

from ktpoet.code_block import CodeBlock
from ktpoet.kotlin_types import Modifier, TypeKind
from ktpoet.names import INT, STRING, Declared, TypeVariable
from ktpoet.specs import (
    AnnotationSpec,
    FileSpec,
    FunSpec,
    ParameterSpec,
    PropertySpec,
    SpecStructureError,
    TypeAliasSpec,
    TypeSpec,
)

PRINT_HELLO = CodeBlock.builder().add_statement("println(%S)", "hello").build()


class TestFunctions:
    def test_duplicate_parameter(self):
        with pytest.raises(SpecStructureError, match="Duplicate parameter 'x'"):
            FunSpec.builder("f").add_parameter("x", INT).add_parameter("x", STRING)

    def test_constructor_return_type(self):
        with pytest.raises(SpecStructureError, match="constructor cannot declare a return type"):
            FunSpec.constructor_builder().returns(INT)

    def test_abstract_function_with_code(self):
        builder = FunSpec.builder("f").add_modifiers(Modifier.ABSTRACT).add_statement("return")
        with pytest.raises(SpecStructureError, match="cannot have code"):
            builder.build()

    def test_invalid_name(self):
        with pytest.raises(SpecStructureError, match="not a valid function name"):
            FunSpec.builder("no-dash")

    def test_parameter_modifiers(self):
        with pytest.raises(SpecStructureError, match="not allowed on parameter 'x'"):
            ParameterSpec.of("x", INT, Modifier.PRIVATE)

    def test_parameter_type_is_checked(self):
        with pytest.raises(SpecStructureError, match="Expected a type"):
            ParameterSpec.of("x", "Int")

    def test_type_variable_is_checked(self):
        with pytest.raises(SpecStructureError, match="Expected a type variable"):
            FunSpec.builder("f").add_type_variable(INT)

    def test_only_constructors_delegate(self):
        with pytest.raises(SpecStructureError, match="Only constructors can delegate"):
            FunSpec.builder("f").call_super_constructor()

    def test_constructor_has_no_receiver(self):
        with pytest.raises(SpecStructureError, match="cannot have a receiver type"):
            FunSpec.constructor_builder().receiver(STRING)

    def test_delegation_arguments_become_code(self):
        constructor = FunSpec.constructor_builder().call_this_constructor("0", CodeBlock.of("%S", "a")).build()
        assert constructor.delegate_constructor == "this"
        assert constructor.delegate_constructor_args == (CodeBlock.of("0"), CodeBlock.of("%S", "a"))

    def test_lookup_of_parameter(self):
        function = FunSpec.builder("f").add_parameter("x", INT).build()
        assert function.parameter("x") == ParameterSpec.of("x", INT)
        assert function.parameter("y") is None


class TestTypes:
    def test_enum_needs_constant(self):
        with pytest.raises(SpecStructureError, match="at least one constant"):
            TypeSpec.enum_builder("Empty").build()

    def test_enum_constant_outside_enum(self):
        with pytest.raises(SpecStructureError, match="only allowed in enums"):
            TypeSpec.class_builder("Color").add_enum_constant("RED")

    def test_duplicate_enum_constant(self):
        with pytest.raises(SpecStructureError, match="Duplicate enum constant 'RED'"):
            TypeSpec.enum_builder("Color").add_enum_constant("RED").add_enum_constant("RED")

    def test_enum_constant_body_must_be_anonymous(self):
        with pytest.raises(SpecStructureError, match="must be an anonymous type"):
            TypeSpec.enum_builder("Color").add_enum_constant("RED", TypeSpec.class_builder("Red").build())

    def test_enum_constant_lookup(self):
        color = TypeSpec.enum_builder("Color").add_enum_constant("RED").build()
        assert color.enum_constant("RED") == TypeSpec(TypeKind.CLASS, None)
        assert color.enum_constant("BLUE") is None

    def test_anonymous_type_rules(self):
        with pytest.raises(SpecStructureError, match="Modifiers are not allowed"):
            TypeSpec.anonymous_class_builder().add_modifiers(Modifier.PRIVATE)
        with pytest.raises(SpecStructureError, match="Type variables are not allowed"):
            TypeSpec.anonymous_class_builder().add_type_variable(TypeVariable("T"))
        with pytest.raises(SpecStructureError, match="not both"):
            (
                TypeSpec.anonymous_class_builder()
                .superclass(Declared.of("a", "Base"))
                .add_superinterface(Declared.of("a", "Runnable"))
                .build()
            )
        with pytest.raises(SpecStructureError, match="single superinterface"):
            (
                TypeSpec.anonymous_class_builder()
                .add_superinterface(Declared.of("a", "Runnable"))
                .add_superinterface(Declared.of("a", "Closeable"))
                .build()
            )
        with pytest.raises(SpecStructureError, match="cannot declare constructors"):
            TypeSpec.anonymous_class_builder().add_function(FunSpec.constructor_builder().build()).build()

    def test_nested_type_needs_name(self):
        with pytest.raises(SpecStructureError, match="must have a name"):
            TypeSpec.class_builder("Outer").add_type(TypeSpec.anonymous_class_builder().build())

    def test_interface_rules(self):
        with pytest.raises(SpecStructureError, match="Interface 'Shape' cannot have initializer blocks"):
            TypeSpec.interface_builder("Shape").add_init_block(PRINT_HELLO).build()
        with pytest.raises(SpecStructureError, match="Interface 'Shape' cannot declare constructors"):
            TypeSpec.interface_builder("Shape").add_function(FunSpec.constructor_builder().build()).build()

    def test_interface_may_have_companion_initializer(self):
        shape = TypeSpec.interface_builder("Shape").add_static_block(PRINT_HELLO).build()
        assert not shape.static_block.is_empty()

    def test_annotation_rules(self):
        with pytest.raises(SpecStructureError, match="cannot have initializer blocks"):
            TypeSpec.annotation_builder("Tag").add_static_block(PRINT_HELLO).build()
        with pytest.raises(SpecStructureError, match="cannot have a body"):
            member = FunSpec.builder("value").returns(INT).add_statement("return 1").build()
            TypeSpec.annotation_builder("Tag").add_function(member).build()
        with pytest.raises(SpecStructureError, match="cannot have parameters"):
            member = FunSpec.builder("value").returns(INT).add_parameter("x", INT).build()
            TypeSpec.annotation_builder("Tag").add_function(member).build()
        with pytest.raises(SpecStructureError, match="needs a return type"):
            TypeSpec.annotation_builder("Tag").add_function(FunSpec.builder("value").build()).build()
        with pytest.raises(SpecStructureError, match="cannot declare properties"):
            TypeSpec.annotation_builder("Tag").add_property("value", INT).build()

    def test_object_rules(self):
        with pytest.raises(SpecStructureError, match="cannot declare type variables"):
            TypeSpec.object_builder("Registry").add_type_variable(TypeVariable("T"))
        with pytest.raises(SpecStructureError, match="Object 'Registry' cannot declare constructors"):
            TypeSpec.object_builder("Registry").add_function(FunSpec.constructor_builder().build()).build()

    def test_abstract_function_needs_abstract_class(self):
        area = FunSpec.builder("area").add_modifiers(Modifier.ABSTRACT).returns(INT).build()
        with pytest.raises(SpecStructureError, match="cannot declare abstract function 'area'"):
            TypeSpec.class_builder("Shape").add_function(area).build()
        sealed = TypeSpec.class_builder("Shape").add_modifiers(Modifier.SEALED).add_function(area).build()
        assert sealed.methods == [area]

    def test_superclass_rules(self):
        with pytest.raises(SpecStructureError, match="Only classes and objects have a superclass"):
            TypeSpec.interface_builder("Shape").superclass(Declared.of("a", "Base"))
        with pytest.raises(SpecStructureError, match="already set"):
            TypeSpec.class_builder("Sub").superclass(Declared.of("a", "Base")).superclass(Declared.of("a", "Other"))

    def test_superclass_arguments_on_interface(self):
        with pytest.raises(SpecStructureError, match="cannot pass superclass arguments"):
            TypeSpec.interface_builder("Shape").add_super_constructor_argument("%L", 1).build()

    def test_member_views(self):
        constructor = FunSpec.constructor_builder().build()
        method = FunSpec.builder("run").build()
        static = PropertySpec.builder("COUNT", INT).static().build()
        instance = PropertySpec.of("name", STRING)
        holder = (
            TypeSpec.class_builder("Holder")
            .add_function(method)
            .add_function(constructor)
            .add_property(static)
            .add_property(instance)
            .build()
        )
        assert holder.constructors == [constructor]
        assert holder.methods == [method]
        assert holder.static_properties == [static]
        assert holder.instance_properties == [instance]


class TestConstructors:
    def test_secondary_constructor_and_superclass_arguments_need_primary(self):
        builder = (
            TypeSpec.class_builder("Child")
            .superclass(Declared.of("a", "Base"))
            .add_super_constructor_argument("%L", 1)
            .add_function(FunSpec.constructor_builder().add_parameter("x", INT).build())
        )
        with pytest.raises(SpecStructureError, match="without a primary constructor cannot declare secondary"):
            builder.build()

    def test_secondary_constructor_delegates_to_primary(self):
        builder = (
            TypeSpec.class_builder("Child")
            .primary_constructor(FunSpec.constructor_builder().build())
            .add_function(FunSpec.constructor_builder().add_parameter("x", INT).build())
        )
        with pytest.raises(SpecStructureError, match="must delegate to the primary constructor"):
            builder.build()

    def test_primary_constructor_rules(self):
        constructor = FunSpec.constructor_builder().build()
        with pytest.raises(SpecStructureError, match="Only classes and enums have a primary constructor"):
            TypeSpec.interface_builder("Shape").primary_constructor(constructor)
        with pytest.raises(SpecStructureError, match="anonymous type cannot declare constructors"):
            TypeSpec.anonymous_class_builder().primary_constructor(constructor)
        with pytest.raises(SpecStructureError, match="must be a constructor"):
            TypeSpec.class_builder("Point").primary_constructor(FunSpec.builder("create").build())
        delegating = FunSpec.constructor_builder().call_super_constructor().build()
        with pytest.raises(SpecStructureError, match="cannot delegate"):
            TypeSpec.class_builder("Point").primary_constructor(delegating)

    def test_promoted_properties_leave_the_body(self):
        x = PropertySpec.builder("x", INT).initializer("%N", "x").build()
        y = PropertySpec.builder("y", INT).initializer("%N + 1", "x").build()
        point = (
            TypeSpec.class_builder("Point")
            .primary_constructor(FunSpec.constructor_builder().add_parameter("x", INT).add_parameter("y", INT).build())
            .add_property(x)
            .add_property(y)
            .build()
        )
        assert point.constructor_properties == {"x": x}
        assert point.instance_properties == [y]


class TestAccessors:
    def test_getter_has_no_parameters(self):
        with pytest.raises(SpecStructureError, match="getter cannot have parameters"):
            FunSpec.getter_builder().add_parameter("x", INT).build()

    def test_setter_parameters(self):
        with pytest.raises(SpecStructureError, match="at most one parameter"):
            FunSpec.setter_builder().add_parameter("a", INT).add_parameter("b", INT).build()
        with pytest.raises(SpecStructureError, match="without a parameter cannot have code"):
            FunSpec.setter_builder().add_statement("println()").build()

    def test_accessors_belong_to_properties(self):
        getter = FunSpec.getter_builder().build()
        setter = FunSpec.setter_builder().build()
        with pytest.raises(SpecStructureError, match="must be built with a getter builder"):
            PropertySpec.builder("x", INT).getter(setter)
        with pytest.raises(SpecStructureError, match="Immutable property 'x' cannot have a setter"):
            PropertySpec.builder("x", INT).setter(setter).build()
        with pytest.raises(SpecStructureError, match="Accessors belong to a property"):
            TypeSpec.class_builder("Holder").add_function(getter)
        with pytest.raises(SpecStructureError, match="accessor cannot be declared at the top level"):
            FileSpec.builder("com.example", "Main").add_function(getter)
        assert PropertySpec.builder("x", INT).mutable().setter(setter).build().setter == setter


class TestTypeAliases:
    def test_modifiers(self):
        with pytest.raises(SpecStructureError, match="not allowed on type alias 'Handler'"):
            TypeAliasSpec.builder("Handler", INT).add_modifiers(Modifier.ABSTRACT)
        alias = TypeAliasSpec.builder("Handler", INT).add_modifiers(Modifier.INTERNAL).build()
        assert alias.modifiers == frozenset({Modifier.INTERNAL})

    def test_aliased_type_is_checked(self):
        with pytest.raises(SpecStructureError, match="type alias 'Handler'"):
            TypeAliasSpec.builder("Handler", "kotlin.Int")

    def test_file_lists_aliases(self):
        alias = TypeAliasSpec.builder("Handler", INT).build()
        file_spec = FileSpec.builder("com.example", "Aliases").add_type_alias(alias).build()
        assert file_spec.type_aliases == [alias]


class TestAnnotations:
    def test_duplicate_member(self):
        builder = AnnotationSpec.builder(Declared.of("a", "Tag")).add_member("x", "%L", 1)
        with pytest.raises(SpecStructureError, match="Duplicate member 'x'"):
            builder.add_member("x", "%L", 2)

    def test_annotation_type_must_be_declared(self):
        with pytest.raises(SpecStructureError, match="must be a declared type"):
            AnnotationSpec.builder(INT)


class TestFiles:
    def test_invalid_package(self):
        with pytest.raises(SpecStructureError, match="not a valid package name"):
            FileSpec.builder("com..example", "Main")

    def test_missing_name(self):
        with pytest.raises(SpecStructureError, match="needs a name"):
            FileSpec.builder("com.example", "")

    def test_top_level_rules(self):
        builder = FileSpec.builder("com.example", "Main")
        with pytest.raises(SpecStructureError, match="Top-level types must have a name"):
            builder.add_type(TypeSpec.anonymous_class_builder().build())
        with pytest.raises(SpecStructureError, match="constructor cannot be declared at the top level"):
            builder.add_function(FunSpec.constructor_builder().build())
        with pytest.raises(SpecStructureError, match="cannot be static"):
            builder.add_property(PropertySpec.builder("COUNT", INT).static().build())

    def test_file_named_after_anonymous_type(self):
        with pytest.raises(SpecStructureError, match="anonymous type"):
            FileSpec.get("com.example", TypeSpec.anonymous_class_builder().build())

    def test_specs_are_immutable(self, greeter_file):
        with pytest.raises(AttributeError):
            greeter_file.name = "Other"
