"""Immutable models of the declarations in a generated file, and the builders that assemble them.

Builders check the structural rules of the generated language when `build()` is called (or as soon as a
member is added, where the rule only concerns that member) and raise `SpecStructureError` on violations.
The built specs are frozen and can be shared and emitted any number of times.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from typing_extensions import override

from ktpoet import helper
from ktpoet.code_block import EMPTY, CodeBlock, CodeBlockBuilder
from ktpoet.kotlin_types import Modifier, TypeKind
from ktpoet.names import Declared, Name, TypeVariable, is_name

if TYPE_CHECKING:
    from ktpoet.run import SourceFile

CONSTRUCTOR = "constructor"
GETTER = "get()"
SETTER = "set()"

PARAMETER_MODIFIERS = frozenset({Modifier.VARARG, Modifier.NOINLINE, Modifier.CROSSINLINE})
TYPE_ALIAS_MODIFIERS = frozenset({Modifier.PUBLIC, Modifier.INTERNAL, Modifier.PRIVATE})


class SpecStructureError(ValueError):
    """Raised when declarations are assembled in a way the generated language does not allow."""

    pass


def _check_name(name: str, kind: str) -> str:
    if not isinstance(name, str) or not helper.is_identifier(name):
        raise SpecStructureError(f"'{name}' is not a valid {kind} name.")
    return name


def _check_type(type_name: Any, context: str) -> Name:
    if not is_name(type_name):
        raise SpecStructureError(f"Expected a type for {context} but got {type_name!r}.")
    return type_name


def _check_modifiers(modifiers: Iterable[Any], context: str) -> set[Modifier]:
    checked = set()
    for modifier in modifiers:
        if not isinstance(modifier, Modifier):
            raise SpecStructureError(f"'{modifier!r}' of {context} is not a modifier.")
        checked.add(modifier)
    return checked


class _Emittable:
    """Rendering of a spec on its own, with every type reference fully qualified."""

    @override
    def __str__(self) -> str:
        from ktpoet import writer

        return writer.emit(self)


@dataclass(frozen=True)
class AnnotationSpec(_Emittable):
    """An annotation use, e.g. `@Named("greeter")`.

    Attributes:
        type_name: The annotation type.
        members: The member values in declaration order, as `(name, value)` pairs.
    """

    type_name: Declared
    members: tuple[tuple[str, CodeBlock], ...] = ()

    @staticmethod
    def builder(type_name: Declared) -> AnnotationSpecBuilder:
        return AnnotationSpecBuilder(type_name)

    @classmethod
    def of(cls, type_name: Declared) -> AnnotationSpec:
        return AnnotationSpecBuilder(type_name).build()

    def member(self, name: str) -> CodeBlock | None:
        for member_name, value in self.members:
            if member_name == name:
                return value
        return None


class AnnotationSpecBuilder:
    def __init__(self, type_name: Declared) -> None:
        if not isinstance(type_name, Declared):
            raise SpecStructureError(f"An annotation type must be a declared type, got {type_name!r}.")
        self._type_name = type_name
        self._members: dict[str, CodeBlock] = {}

    def add_member(self, name: str, template: str, *args: Any) -> AnnotationSpecBuilder:
        _check_name(name, "annotation member")
        if name in self._members:
            raise SpecStructureError(f"Duplicate member '{name}' in annotation '{self._type_name}'.")
        self._members[name] = CodeBlock.of(template, *args)
        return self

    def build(self) -> AnnotationSpec:
        return AnnotationSpec(self._type_name, tuple(self._members.items()))


@dataclass(frozen=True)
class ParameterSpec(_Emittable):
    """A parameter of a function or constructor."""

    name: str
    type_name: Name
    annotations: tuple[AnnotationSpec, ...] = ()
    modifiers: frozenset[Modifier] = frozenset()
    default_value: CodeBlock | None = None

    @staticmethod
    def builder(name: str, type_name: Name, *modifiers: Modifier) -> ParameterSpecBuilder:
        return ParameterSpecBuilder(name, type_name, *modifiers)

    @classmethod
    def of(cls, name: str, type_name: Name, *modifiers: Modifier) -> ParameterSpec:
        return ParameterSpecBuilder(name, type_name, *modifiers).build()


class ParameterSpecBuilder:
    def __init__(self, name: str, type_name: Name, *modifiers: Modifier) -> None:
        self._name = _check_name(name, "parameter")
        self._type_name = _check_type(type_name, f"parameter '{name}'")
        self._annotations: list[AnnotationSpec] = []
        self._modifiers: set[Modifier] = set()
        self._default_value: CodeBlock | None = None
        self.add_modifiers(*modifiers)

    def add_annotation(self, annotation: AnnotationSpec | Declared) -> ParameterSpecBuilder:
        if isinstance(annotation, Declared):
            annotation = AnnotationSpec.of(annotation)
        self._annotations.append(annotation)
        return self

    def add_modifiers(self, *modifiers: Modifier) -> ParameterSpecBuilder:
        checked = _check_modifiers(modifiers, f"parameter '{self._name}'")
        unsupported = checked - PARAMETER_MODIFIERS
        if unsupported:
            keywords = ", ".join(sorted(modifier.keyword for modifier in unsupported))
            raise SpecStructureError(f"Modifiers {keywords} are not allowed on parameter '{self._name}'.")
        self._modifiers |= checked
        return self

    def default_value(self, template: str, *args: Any) -> ParameterSpecBuilder:
        self._default_value = CodeBlock.of(template, *args)
        return self

    def build(self) -> ParameterSpec:
        return ParameterSpec(
            name=self._name,
            type_name=self._type_name,
            annotations=tuple(self._annotations),
            modifiers=frozenset(self._modifiers),
            default_value=self._default_value,
        )


@dataclass(frozen=True)
class PropertySpec(_Emittable):
    """A property of a type or a file.

    Static properties are grouped in the companion object of their type.

    Attributes:
        getter: A custom accessor built with `FunSpec.getter_builder`.
        setter: A custom accessor built with `FunSpec.setter_builder`, only for mutable properties.
    """

    name: str
    type_name: Name
    kdoc: CodeBlock = EMPTY
    annotations: tuple[AnnotationSpec, ...] = ()
    modifiers: frozenset[Modifier] = frozenset()
    mutable: bool = False
    is_static: bool = False
    initializer: CodeBlock | None = None
    getter: FunSpec | None = None
    setter: FunSpec | None = None

    @staticmethod
    def builder(name: str, type_name: Name, *modifiers: Modifier) -> PropertySpecBuilder:
        return PropertySpecBuilder(name, type_name, *modifiers)

    @classmethod
    def of(cls, name: str, type_name: Name, *modifiers: Modifier) -> PropertySpec:
        return PropertySpecBuilder(name, type_name, *modifiers).build()


class PropertySpecBuilder:
    def __init__(self, name: str, type_name: Name, *modifiers: Modifier) -> None:
        self._name = _check_name(name, "property")
        self._type_name = _check_type(type_name, f"property '{name}'")
        self._kdoc = CodeBlockBuilder()
        self._annotations: list[AnnotationSpec] = []
        self._modifiers: set[Modifier] = set()
        self._mutable = False
        self._is_static = False
        self._initializer: CodeBlock | None = None
        self._getter: FunSpec | None = None
        self._setter: FunSpec | None = None
        self.add_modifiers(*modifiers)

    def add_kdoc(self, template: str, *args: Any) -> PropertySpecBuilder:
        self._kdoc.add(template, *args)
        return self

    def add_annotation(self, annotation: AnnotationSpec | Declared) -> PropertySpecBuilder:
        if isinstance(annotation, Declared):
            annotation = AnnotationSpec.of(annotation)
        self._annotations.append(annotation)
        return self

    def add_modifiers(self, *modifiers: Modifier) -> PropertySpecBuilder:
        self._modifiers |= _check_modifiers(modifiers, f"property '{self._name}'")
        return self

    def mutable(self, mutable: bool = True) -> PropertySpecBuilder:
        self._mutable = mutable
        return self

    def static(self, is_static: bool = True) -> PropertySpecBuilder:
        self._is_static = is_static
        return self

    def initializer(self, template: str, *args: Any) -> PropertySpecBuilder:
        self._initializer = CodeBlock.of(template, *args)
        return self

    def getter(self, getter: FunSpec) -> PropertySpecBuilder:
        if getter.name != GETTER:
            raise SpecStructureError(f"The getter of property '{self._name}' must be built with a getter builder.")
        self._getter = getter
        return self

    def setter(self, setter: FunSpec) -> PropertySpecBuilder:
        if setter.name != SETTER:
            raise SpecStructureError(f"The setter of property '{self._name}' must be built with a setter builder.")
        self._setter = setter
        return self

    def build(self) -> PropertySpec:
        if self._setter is not None and not self._mutable:
            raise SpecStructureError(f"Immutable property '{self._name}' cannot have a setter.")
        return PropertySpec(
            name=self._name,
            type_name=self._type_name,
            kdoc=self._kdoc.build(),
            annotations=tuple(self._annotations),
            modifiers=frozenset(self._modifiers),
            mutable=self._mutable,
            is_static=self._is_static,
            initializer=self._initializer,
            getter=self._getter,
            setter=self._setter,
        )


@dataclass(frozen=True)
class FunSpec(_Emittable):
    """A function, a constructor or a property accessor.

    Attributes:
        receiver: The receiver type of an extension function.
        delegate_constructor: `this` or `super` when a constructor calls another constructor first.
        delegate_constructor_args: The arguments of that call.
        default_value: The default of an annotation member, only used inside annotation types.
    """

    name: str
    kdoc: CodeBlock = EMPTY
    annotations: tuple[AnnotationSpec, ...] = ()
    modifiers: frozenset[Modifier] = frozenset()
    type_variables: tuple[TypeVariable, ...] = ()
    receiver: Name | None = None
    parameters: tuple[ParameterSpec, ...] = ()
    return_type: Name | None = None
    delegate_constructor: str | None = None
    delegate_constructor_args: tuple[CodeBlock, ...] = ()
    body: CodeBlock = EMPTY
    default_value: CodeBlock | None = None

    @staticmethod
    def builder(name: str) -> FunSpecBuilder:
        return FunSpecBuilder(name)

    @staticmethod
    def constructor_builder() -> FunSpecBuilder:
        return FunSpecBuilder(CONSTRUCTOR)

    @staticmethod
    def getter_builder() -> FunSpecBuilder:
        return FunSpecBuilder(GETTER)

    @staticmethod
    def setter_builder() -> FunSpecBuilder:
        return FunSpecBuilder(SETTER)

    @property
    def is_constructor(self) -> bool:
        return self.name == CONSTRUCTOR

    @property
    def is_accessor(self) -> bool:
        return self.name in (GETTER, SETTER)

    @property
    def is_abstract(self) -> bool:
        return Modifier.ABSTRACT in self.modifiers

    def parameter(self, name: str) -> ParameterSpec | None:
        for parameter in self.parameters:
            if parameter.name == name:
                return parameter
        return None


class FunSpecBuilder:
    def __init__(self, name: str) -> None:
        if name not in (CONSTRUCTOR, GETTER, SETTER):
            _check_name(name, "function")
        self._name = name
        self._kdoc = CodeBlockBuilder()
        self._annotations: list[AnnotationSpec] = []
        self._modifiers: set[Modifier] = set()
        self._type_variables: list[TypeVariable] = []
        self._receiver: Name | None = None
        self._parameters: list[ParameterSpec] = []
        self._return_type: Name | None = None
        self._delegate_constructor: str | None = None
        self._delegate_constructor_args: list[CodeBlock] = []
        self._body = CodeBlockBuilder()
        self._default_value: CodeBlock | None = None

    def add_kdoc(self, template: str, *args: Any) -> FunSpecBuilder:
        self._kdoc.add(template, *args)
        return self

    def add_annotation(self, annotation: AnnotationSpec | Declared) -> FunSpecBuilder:
        if isinstance(annotation, Declared):
            annotation = AnnotationSpec.of(annotation)
        self._annotations.append(annotation)
        return self

    def add_modifiers(self, *modifiers: Modifier) -> FunSpecBuilder:
        self._modifiers |= _check_modifiers(modifiers, f"function '{self._name}'")
        return self

    def add_type_variable(self, type_variable: TypeVariable) -> FunSpecBuilder:
        if not isinstance(type_variable, TypeVariable):
            raise SpecStructureError(f"Expected a type variable for '{self._name}' but got {type_variable!r}.")
        self._type_variables.append(type_variable)
        return self

    def receiver(self, type_name: Name) -> FunSpecBuilder:
        """Make this an extension function of `type_name`."""
        if self._name in (CONSTRUCTOR, GETTER, SETTER):
            raise SpecStructureError(f"'{self._name}' cannot have a receiver type.")
        self._receiver = _check_type(type_name, f"the receiver of '{self._name}'")
        return self

    def call_this_constructor(self, *args: CodeBlock | str) -> FunSpecBuilder:
        """Delegate to another constructor of the same class, e.g. `constructor() : this(0)`.

        Arguments given as strings are format strings without placeholders.
        """
        return self._call_constructor("this", args)

    def call_super_constructor(self, *args: CodeBlock | str) -> FunSpecBuilder:
        """Delegate to a constructor of the superclass, e.g. `constructor(x: Int) : super(x)`."""
        return self._call_constructor("super", args)

    def _call_constructor(self, delegate: str, args: Iterable[CodeBlock | str]) -> FunSpecBuilder:
        if self._name != CONSTRUCTOR:
            raise SpecStructureError(f"Only constructors can delegate to another constructor, not '{self._name}'.")
        self._delegate_constructor = delegate
        self._delegate_constructor_args = [arg if isinstance(arg, CodeBlock) else CodeBlock.of(arg) for arg in args]
        return self

    def add_parameter(
        self,
        parameter: ParameterSpec | str,
        type_name: Name | None = None,
        *modifiers: Modifier,
    ) -> FunSpecBuilder:
        """Add a parameter, either as a `ParameterSpec` or from its name, type and modifiers."""
        if isinstance(parameter, str):
            parameter = ParameterSpecBuilder(parameter, type_name, *modifiers).build()
        if any(existing.name == parameter.name for existing in self._parameters):
            raise SpecStructureError(f"Duplicate parameter '{parameter.name}' in function '{self._name}'.")
        self._parameters.append(parameter)
        return self

    def returns(self, type_name: Name) -> FunSpecBuilder:
        if self._name == CONSTRUCTOR:
            raise SpecStructureError("A constructor cannot declare a return type.")
        self._return_type = _check_type(type_name, f"the return type of '{self._name}'")
        return self

    def add_code(self, template: str, *args: Any) -> FunSpecBuilder:
        self._body.add(template, *args)
        return self

    def add_named_code(self, template: str, arguments: dict[str, Any]) -> FunSpecBuilder:
        self._body.add_named(template, arguments)
        return self

    def add_statement(self, template: str, *args: Any) -> FunSpecBuilder:
        self._body.add_statement(template, *args)
        return self

    def begin_control_flow(self, control_flow: str, *args: Any) -> FunSpecBuilder:
        self._body.begin_control_flow(control_flow, *args)
        return self

    def next_control_flow(self, control_flow: str, *args: Any) -> FunSpecBuilder:
        self._body.next_control_flow(control_flow, *args)
        return self

    def end_control_flow(self, control_flow: str | None = None, *args: Any) -> FunSpecBuilder:
        self._body.end_control_flow(control_flow, *args)
        return self

    def default_value(self, template: str, *args: Any) -> FunSpecBuilder:
        self._default_value = CodeBlock.of(template, *args)
        return self

    def build(self) -> FunSpec:
        body = self._body.build()
        if Modifier.ABSTRACT in self._modifiers and not body.is_empty():
            raise SpecStructureError(f"Abstract function '{self._name}' cannot have code.")
        if self._name == GETTER and self._parameters:
            raise SpecStructureError("A getter cannot have parameters.")
        if self._name == SETTER:
            if len(self._parameters) > 1:
                raise SpecStructureError("A setter can have at most one parameter.")
            if not self._parameters and not body.is_empty():
                raise SpecStructureError("A setter without a parameter cannot have code.")
        return FunSpec(
            name=self._name,
            kdoc=self._kdoc.build(),
            annotations=tuple(self._annotations),
            modifiers=frozenset(self._modifiers),
            type_variables=tuple(self._type_variables),
            receiver=self._receiver,
            parameters=tuple(self._parameters),
            return_type=self._return_type,
            delegate_constructor=self._delegate_constructor,
            delegate_constructor_args=tuple(self._delegate_constructor_args),
            body=body,
            default_value=self._default_value,
        )


@dataclass(frozen=True)
class TypeSpec(_Emittable):
    """A class, interface, enum, annotation or object declaration; or an anonymous object without a name.

    Attributes:
        primary_constructor: The constructor declared in the type header.
        super_constructor_args: Arguments passed to the superclass constructor (or, for an enum constant,
            to the enum constructor).
        enum_constants: `(name, body)` pairs, each body is an anonymous type that may be empty.
        static_block: Code that runs when the companion object is initialized.
        init_block: Code that runs when an instance is initialized.
    """

    kind: str
    name: str | None
    kdoc: CodeBlock = EMPTY
    annotations: tuple[AnnotationSpec, ...] = ()
    modifiers: frozenset[Modifier] = frozenset()
    type_variables: tuple[TypeVariable, ...] = ()
    primary_constructor: FunSpec | None = None
    superclass: Name | None = None
    super_constructor_args: tuple[CodeBlock, ...] = ()
    superinterfaces: tuple[Name, ...] = ()
    enum_constants: tuple[tuple[str, TypeSpec], ...] = ()
    properties: tuple[PropertySpec, ...] = ()
    static_block: CodeBlock = EMPTY
    init_block: CodeBlock = EMPTY
    functions: tuple[FunSpec, ...] = ()
    types: tuple[TypeSpec, ...] = ()

    @staticmethod
    def class_builder(name: str) -> TypeSpecBuilder:
        return TypeSpecBuilder(TypeKind.CLASS, name)

    @staticmethod
    def interface_builder(name: str) -> TypeSpecBuilder:
        return TypeSpecBuilder(TypeKind.INTERFACE, name)

    @staticmethod
    def enum_builder(name: str) -> TypeSpecBuilder:
        return TypeSpecBuilder(TypeKind.ENUM, name)

    @staticmethod
    def annotation_builder(name: str) -> TypeSpecBuilder:
        return TypeSpecBuilder(TypeKind.ANNOTATION, name)

    @staticmethod
    def object_builder(name: str) -> TypeSpecBuilder:
        return TypeSpecBuilder(TypeKind.OBJECT, name)

    @staticmethod
    def anonymous_class_builder(template: str = "", *args: Any) -> TypeSpecBuilder:
        """Start an anonymous object, `template` and `args` form the superclass constructor arguments."""
        builder = TypeSpecBuilder(TypeKind.CLASS, None)
        if template:
            builder.add_super_constructor_argument(template, *args)
        return builder

    @property
    def is_anonymous(self) -> bool:
        return self.name is None

    @property
    def constructors(self) -> list[FunSpec]:
        return [function for function in self.functions if function.is_constructor]

    @property
    def methods(self) -> list[FunSpec]:
        return [function for function in self.functions if not function.is_constructor]

    @property
    def static_properties(self) -> list[PropertySpec]:
        return [prop for prop in self.properties if prop.is_static]

    @property
    def constructor_properties(self) -> dict[str, PropertySpec]:
        """Properties that are declared as `val` or `var` parameters of the primary constructor.

        A property moves into the primary constructor when a parameter has the same name and type, and the
        property is initialized with that parameter and has no custom accessors.
        """
        if self.primary_constructor is None:
            return {}

        result = {}
        for prop in self.properties:
            parameter = self.primary_constructor.parameter(prop.name)
            if parameter is None or prop.is_static or parameter.type_name != prop.type_name:
                continue
            if prop.getter is not None or prop.setter is not None:
                continue
            if prop.initializer in (CodeBlock.of("%N", parameter.name), CodeBlock.of(parameter.name)):
                result[prop.name] = prop
        return result

    @property
    def instance_properties(self) -> list[PropertySpec]:
        """Non-static properties declared in the body, i.e. not in the primary constructor."""
        constructor_properties = self.constructor_properties
        return [
            prop for prop in self.properties if not prop.is_static and constructor_properties.get(prop.name) is not prop
        ]

    def enum_constant(self, name: str) -> TypeSpec | None:
        for constant_name, constant in self.enum_constants:
            if constant_name == name:
                return constant
        return None


class TypeSpecBuilder:
    def __init__(self, kind: str, name: str | None) -> None:
        if name is not None:
            _check_name(name, "type")
        self._kind = kind
        self._name = name
        self._kdoc = CodeBlockBuilder()
        self._annotations: list[AnnotationSpec] = []
        self._modifiers: set[Modifier] = set()
        self._type_variables: list[TypeVariable] = []
        self._primary_constructor: FunSpec | None = None
        self._superclass: Name | None = None
        self._super_constructor_args: list[CodeBlock] = []
        self._superinterfaces: list[Name] = []
        self._enum_constants: dict[str, TypeSpec] = {}
        self._properties: list[PropertySpec] = []
        self._static_block = CodeBlockBuilder()
        self._init_block = CodeBlockBuilder()
        self._functions: list[FunSpec] = []
        self._types: list[TypeSpec] = []

    @property
    def _description(self) -> str:
        return f"'{self._name}'" if self._name else "anonymous type"

    def add_kdoc(self, template: str, *args: Any) -> TypeSpecBuilder:
        self._kdoc.add(template, *args)
        return self

    def add_annotation(self, annotation: AnnotationSpec | Declared) -> TypeSpecBuilder:
        if isinstance(annotation, Declared):
            annotation = AnnotationSpec.of(annotation)
        self._annotations.append(annotation)
        return self

    def add_modifiers(self, *modifiers: Modifier) -> TypeSpecBuilder:
        if self._name is None and modifiers:
            raise SpecStructureError("Modifiers are not allowed on an anonymous type.")
        self._modifiers |= _check_modifiers(modifiers, f"type {self._description}")
        return self

    def add_type_variable(self, type_variable: TypeVariable) -> TypeSpecBuilder:
        if self._name is None:
            raise SpecStructureError("Type variables are not allowed on an anonymous type.")
        if self._kind == TypeKind.OBJECT:
            raise SpecStructureError(f"Object {self._description} cannot declare type variables.")
        if not isinstance(type_variable, TypeVariable):
            raise SpecStructureError(f"Expected a type variable for {self._description} but got {type_variable!r}.")
        self._type_variables.append(type_variable)
        return self

    def primary_constructor(self, constructor: FunSpec) -> TypeSpecBuilder:
        if self._name is None:
            raise SpecStructureError("An anonymous type cannot declare constructors.")
        if self._kind not in (TypeKind.CLASS, TypeKind.ENUM):
            raise SpecStructureError(
                f"Only classes and enums have a primary constructor, {self._description} is a {self._kind}."
            )
        if not constructor.is_constructor:
            raise SpecStructureError(f"The primary constructor of {self._description} must be a constructor.")
        if constructor.delegate_constructor is not None:
            raise SpecStructureError(f"The primary constructor of {self._description} cannot delegate.")
        self._primary_constructor = constructor
        return self

    def superclass(self, type_name: Name) -> TypeSpecBuilder:
        if self._kind not in (TypeKind.CLASS, TypeKind.OBJECT):
            raise SpecStructureError(
                f"Only classes and objects have a superclass, {self._description} is a {self._kind}."
            )
        if self._superclass is not None:
            raise SpecStructureError(f"The superclass of {self._description} is already set to '{self._superclass}'.")
        self._superclass = _check_type(type_name, f"the superclass of {self._description}")
        return self

    def add_super_constructor_argument(self, template: str, *args: Any) -> TypeSpecBuilder:
        self._super_constructor_args.append(CodeBlock.of(template, *args))
        return self

    def add_superinterface(self, type_name: Name) -> TypeSpecBuilder:
        self._superinterfaces.append(_check_type(type_name, f"a superinterface of {self._description}"))
        return self

    def add_enum_constant(self, name: str, body: TypeSpec | None = None) -> TypeSpecBuilder:
        """Add an enum constant, optionally with arguments and members given as an anonymous type."""
        if self._kind != TypeKind.ENUM:
            raise SpecStructureError(
                f"Enum constants are only allowed in enums, {self._description} is a {self._kind}."
            )
        _check_name(name, "enum constant")
        if name in self._enum_constants:
            raise SpecStructureError(f"Duplicate enum constant '{name}' in {self._description}.")
        if body is None:
            body = TypeSpec(TypeKind.CLASS, None)
        elif not body.is_anonymous:
            raise SpecStructureError(f"The body of enum constant '{name}' must be an anonymous type.")
        self._enum_constants[name] = body
        return self

    def add_property(
        self,
        prop: PropertySpec | str,
        type_name: Name | None = None,
        *modifiers: Modifier,
    ) -> TypeSpecBuilder:
        """Add a property, either as a `PropertySpec` or from its name, type and modifiers."""
        if isinstance(prop, str):
            prop = PropertySpecBuilder(prop, type_name, *modifiers).build()
        self._properties.append(prop)
        return self

    def add_static_block(self, code_block: CodeBlock) -> TypeSpecBuilder:
        self._static_block.add_code(code_block)
        return self

    def add_init_block(self, code_block: CodeBlock) -> TypeSpecBuilder:
        self._init_block.add_code(code_block)
        return self

    def add_function(self, function: FunSpec) -> TypeSpecBuilder:
        if function.is_accessor:
            raise SpecStructureError(f"Accessors belong to a property, they cannot be added to {self._description}.")
        self._functions.append(function)
        return self

    def add_type(self, type_spec: TypeSpec) -> TypeSpecBuilder:
        if type_spec.is_anonymous:
            raise SpecStructureError(f"Nested types of {self._description} must have a name.")
        self._types.append(type_spec)
        return self

    def _check_annotation_members(self) -> None:
        for function in self._functions:
            if function.is_constructor:
                raise SpecStructureError(f"Annotation {self._description} cannot declare constructors.")
            if not function.body.is_empty():
                raise SpecStructureError(f"Annotation member '{self._name}.{function.name}' cannot have a body.")
            if function.parameters:
                raise SpecStructureError(f"Annotation member '{self._name}.{function.name}' cannot have parameters.")
            if function.return_type is None:
                raise SpecStructureError(f"Annotation member '{self._name}.{function.name}' needs a return type.")
        if self._properties:
            raise SpecStructureError(f"Annotation {self._description} cannot declare properties.")

    def build(self) -> TypeSpec:
        """Assemble the type, checking the rules that depend on its kind.

        Raises:
            SpecStructureError: If the members do not fit the kind of the type.
        """
        static_block = self._static_block.build()
        init_block = self._init_block.build()
        constructors = [function for function in self._functions if function.is_constructor]

        if self._kind == TypeKind.ENUM and not self._enum_constants:
            raise SpecStructureError(f"Enum {self._description} requires at least one constant.")

        if self._name is None:
            if self._superclass is not None and self._superinterfaces:
                raise SpecStructureError("An anonymous type may have a superclass or a superinterface, not both.")
            if len(self._superinterfaces) > 1:
                raise SpecStructureError("An anonymous type may implement a single superinterface only.")
            if constructors:
                raise SpecStructureError("An anonymous type cannot declare constructors.")

        if self._kind in (TypeKind.ANNOTATION, TypeKind.INTERFACE):
            if not static_block.is_empty() and self._kind == TypeKind.ANNOTATION:
                raise SpecStructureError(f"Annotation {self._description} cannot have initializer blocks.")
            if not init_block.is_empty():
                kind = self._kind.capitalize()
                raise SpecStructureError(f"{kind} {self._description} cannot have initializer blocks.")
            if constructors:
                raise SpecStructureError(f"{self._kind.capitalize()} {self._description} cannot declare constructors.")

        if self._kind == TypeKind.ANNOTATION:
            self._check_annotation_members()

        if self._kind == TypeKind.OBJECT and constructors:
            raise SpecStructureError(f"Object {self._description} cannot declare constructors.")

        if self._kind == TypeKind.CLASS and self._name is not None:
            can_be_abstract = Modifier.ABSTRACT in self._modifiers or Modifier.SEALED in self._modifiers
            for function in self._functions:
                if function.is_abstract and not can_be_abstract:
                    raise SpecStructureError(
                        f"Non-abstract type {self._description} cannot declare abstract function '{function.name}'."
                    )

        if self._super_constructor_args and self._kind not in (TypeKind.CLASS, TypeKind.OBJECT):
            raise SpecStructureError(f"The {self._kind} {self._description} cannot pass superclass arguments.")

        if self._primary_constructor is None:
            if constructors and self._super_constructor_args:
                raise SpecStructureError(
                    f"Type {self._description} without a primary constructor cannot declare secondary constructors"
                    " and pass superclass arguments."
                )
        else:
            for constructor in constructors:
                if constructor.delegate_constructor != "this":
                    raise SpecStructureError(
                        f"Secondary constructors of {self._description} must delegate to the primary constructor."
                    )

        return TypeSpec(
            kind=self._kind,
            name=self._name,
            kdoc=self._kdoc.build(),
            annotations=tuple(self._annotations),
            modifiers=frozenset(self._modifiers),
            type_variables=tuple(self._type_variables),
            primary_constructor=self._primary_constructor,
            superclass=self._superclass,
            super_constructor_args=tuple(self._super_constructor_args),
            superinterfaces=tuple(self._superinterfaces),
            enum_constants=tuple(self._enum_constants.items()),
            properties=tuple(self._properties),
            static_block=static_block,
            init_block=init_block,
            functions=tuple(self._functions),
            types=tuple(self._types),
        )


@dataclass(frozen=True)
class TypeAliasSpec(_Emittable):
    """A top-level alternative name for a type, e.g. `typealias Handler = (String) -> Unit`."""

    name: str
    type_name: Name
    kdoc: CodeBlock = EMPTY
    annotations: tuple[AnnotationSpec, ...] = ()
    modifiers: frozenset[Modifier] = frozenset()
    type_variables: tuple[TypeVariable, ...] = ()

    @staticmethod
    def builder(name: str, type_name: Name) -> TypeAliasSpecBuilder:
        return TypeAliasSpecBuilder(name, type_name)


class TypeAliasSpecBuilder:
    def __init__(self, name: str, type_name: Name) -> None:
        self._name = _check_name(name, "type alias")
        self._type_name = _check_type(type_name, f"type alias '{name}'")
        self._kdoc = CodeBlockBuilder()
        self._annotations: list[AnnotationSpec] = []
        self._modifiers: set[Modifier] = set()
        self._type_variables: list[TypeVariable] = []

    def add_kdoc(self, template: str, *args: Any) -> TypeAliasSpecBuilder:
        self._kdoc.add(template, *args)
        return self

    def add_annotation(self, annotation: AnnotationSpec | Declared) -> TypeAliasSpecBuilder:
        if isinstance(annotation, Declared):
            annotation = AnnotationSpec.of(annotation)
        self._annotations.append(annotation)
        return self

    def add_modifiers(self, *modifiers: Modifier) -> TypeAliasSpecBuilder:
        checked = _check_modifiers(modifiers, f"type alias '{self._name}'")
        unsupported = checked - TYPE_ALIAS_MODIFIERS
        if unsupported:
            keywords = ", ".join(sorted(modifier.keyword for modifier in unsupported))
            raise SpecStructureError(f"Modifiers {keywords} are not allowed on type alias '{self._name}'.")
        self._modifiers |= checked
        return self

    def add_type_variable(self, type_variable: TypeVariable) -> TypeAliasSpecBuilder:
        if not isinstance(type_variable, TypeVariable):
            raise SpecStructureError(f"Expected a type variable for '{self._name}' but got {type_variable!r}.")
        self._type_variables.append(type_variable)
        return self

    def build(self) -> TypeAliasSpec:
        return TypeAliasSpec(
            name=self._name,
            type_name=self._type_name,
            kdoc=self._kdoc.build(),
            annotations=tuple(self._annotations),
            modifiers=frozenset(self._modifiers),
            type_variables=tuple(self._type_variables),
        )


FileMember = TypeSpec | FunSpec | PropertySpec | TypeAliasSpec


@dataclass(frozen=True)
class FileSpec(_Emittable):
    """A source file: a package, an optional header comment and top-level declarations.

    Attributes:
        package_name: The package of the file, empty for the default package.
        name: The file name without extension, usually the name of the main top-level type.
        comment: A comment written above the package statement.
        members: Types, functions, properties and type aliases in declaration order.
    """

    package_name: str
    name: str
    comment: CodeBlock = EMPTY
    members: tuple[FileMember, ...] = ()

    @staticmethod
    def builder(package_name: str, name: str) -> FileSpecBuilder:
        return FileSpecBuilder(package_name, name)

    @classmethod
    def get(cls, package_name: str, type_spec: TypeSpec) -> FileSpec:
        """A file that only contains `type_spec`, named after it."""
        if type_spec.name is None:
            raise SpecStructureError("A file cannot be named after an anonymous type.")
        return FileSpecBuilder(package_name, type_spec.name).add_type(type_spec).build()

    @property
    def type_specs(self) -> list[TypeSpec]:
        return [member for member in self.members if isinstance(member, TypeSpec)]

    @property
    def type_aliases(self) -> list[TypeAliasSpec]:
        return [member for member in self.members if isinstance(member, TypeAliasSpec)]

    @property
    def imports(self) -> list[Declared]:
        """The types that are imported by the rendered file."""
        from ktpoet import writer

        return list(writer.resolve_imports(self).imports)

    def write_to(self, directory: str | Path) -> Path:
        """Write the file below `directory`, in the directory structure of its package."""
        from ktpoet import run

        return run.write_file(self, directory)

    def to_source_file(self) -> SourceFile:
        from ktpoet import run

        return run.to_source_file(self)


class FileSpecBuilder:
    def __init__(self, package_name: str, name: str) -> None:
        if package_name:
            for segment in package_name.split("."):
                _check_name(segment, "package")
        if not name:
            raise SpecStructureError("A file needs a name.")
        self._package_name = package_name
        self._name = name
        self._comment = CodeBlockBuilder()
        self._members: list[FileMember] = []

    def add_comment(self, template: str, *args: Any) -> FileSpecBuilder:
        self._comment.add(template, *args)
        return self

    def add_type(self, type_spec: TypeSpec) -> FileSpecBuilder:
        if type_spec.is_anonymous:
            raise SpecStructureError("Top-level types must have a name.")
        self._members.append(type_spec)
        return self

    def add_function(self, function: FunSpec) -> FileSpecBuilder:
        if function.is_constructor:
            raise SpecStructureError("A constructor cannot be declared at the top level of a file.")
        if function.is_accessor:
            raise SpecStructureError("An accessor cannot be declared at the top level of a file.")
        self._members.append(function)
        return self

    def add_type_alias(self, type_alias: TypeAliasSpec) -> FileSpecBuilder:
        self._members.append(type_alias)
        return self

    def add_property(self, prop: PropertySpec) -> FileSpecBuilder:
        if prop.is_static:
            raise SpecStructureError(f"Top-level property '{prop.name}' cannot be static.")
        self._members.append(prop)
        return self

    def build(self) -> FileSpec:
        return FileSpec(
            package_name=self._package_name,
            name=self._name,
            comment=self._comment.build(),
            members=tuple(self._members),
        )
