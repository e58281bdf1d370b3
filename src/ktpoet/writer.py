"""Generate Kotlin source text from models of files, types, functions and properties.

Files are emitted in two passes. The first pass traverses the file with a `NameCollector`, which records every
referenced type. The `ImportResolver` then decides which types are imported and written short and which are
written fully qualified, and the second pass writes the text with that resolution.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from ktpoet import helper, kotlin_types, names
from ktpoet.code_block import CodeBlock, InstructionKind, join_to_code
from ktpoet.code_writer import CodeWriter
from ktpoet.imports import ImportResolution, ImportResolver, NameCollector
from ktpoet.kotlin_types import Modifier, TypeKind
from ktpoet.names import ArrayName, Declared, Lambda, Name, Primitive, TypeVariable, Wildcard
from ktpoet.scope import Scope
from ktpoet.specs import (
    CONSTRUCTOR,
    GETTER,
    SETTER,
    AnnotationSpec,
    FileSpec,
    FunSpec,
    ParameterSpec,
    PropertySpec,
    TypeAliasSpec,
    TypeSpec,
)
from ktpoet.writer_dto import DeclaredTypes

logger = logging.getLogger(__name__)

NameRenderer = NameCollector | ImportResolution

PUBLIC_ONLY = frozenset({Modifier.PUBLIC})
INTERFACE_MEMBER_MODIFIERS = frozenset({Modifier.PUBLIC, Modifier.ABSTRACT})


class Writer:
    """A class that walks a spec tree and writes it as source text."""

    def __init__(
        self,
        renderer: NameRenderer,
        package_name: str = "",
        indent: str = kotlin_types.DEFAULT_INDENT,
        column_limit: int = kotlin_types.DEFAULT_COLUMN_LIMIT,
    ) -> None:
        """Initialize the writer.

        Args:
            renderer (NameRenderer): Writes type references, either fully qualified while collecting them
                or according to a resolved set of imports.
            package_name (str): The package of the emitted file.
            indent (str): A single indentation unit.
            column_limit (int): The column at which soft-wrap points turn into line breaks.
        """
        self.renderer = renderer
        self.code_writer = CodeWriter(indent, column_limit)
        self.scope = Scope.root(package_name)

    def dumps(self) -> str:
        """The emitted source text."""
        return self.code_writer.text()

    def gen_spec(self, spec: Any) -> None:
        """Write any single spec or code block, outside of a file."""
        match spec:
            case FileSpec():
                self.gen_file(spec)
            case TypeSpec():
                self.gen_type(spec)
            case FunSpec():
                self.gen_function(spec, PUBLIC_ONLY)
            case PropertySpec():
                self.gen_property(spec, PUBLIC_ONLY)
            case TypeAliasSpec():
                self.gen_type_alias(spec)
            case ParameterSpec():
                self.gen_parameter(spec)
            case AnnotationSpec():
                self.gen_annotation(spec, inline=False)
            case CodeBlock():
                self.gen_code(spec)
            case _:
                raise TypeError(f"Cannot emit {spec!r}.")

    def gen_file(self, file_spec: FileSpec, imports: Sequence[Declared] = ()) -> None:
        """Write a file: the header comment, the package, the imports and the members.

        Args:
            file_spec (FileSpec): The file to write.
            imports (Sequence[Declared]): The types to import, in the order they are written.
        """
        code_writer = self.code_writer
        top_level_names = [t.name for t in file_spec.type_specs if t.name]
        top_level_names.extend(type_alias.name for type_alias in file_spec.type_aliases)
        self.scope = Scope.root(file_spec.package_name, top_level_names)

        if not file_spec.comment.is_empty():
            code_writer.begin_comment()
            self.gen_code(file_spec.comment)
            code_writer.end_comment()
            code_writer.ensure_newline()

        if file_spec.package_name:
            code_writer.emit(f"package {helper.escape_segments(file_spec.package_name)}\n")
            code_writer.blank_line()
        elif not file_spec.comment.is_empty() and (imports or file_spec.members):
            code_writer.blank_line()

        if imports:
            for declared in imports:
                code_writer.emit(f"import {helper.escape_segments(declared.canonical_name)}\n")
            code_writer.blank_line()

        for position, member in enumerate(file_spec.members):
            if position > 0:
                code_writer.blank_line()
            match member:
                case TypeSpec():
                    self.gen_type(member)
                case FunSpec():
                    self.gen_function(member, PUBLIC_ONLY)
                case PropertySpec():
                    self.gen_property(member, PUBLIC_ONLY)
                case TypeAliasSpec():
                    self.gen_type_alias(member)

    @contextmanager
    def _statements_set_aside(self) -> Iterator[None]:
        """Set open statements aside, so a declaration used in the middle of a statement keeps its indentation."""
        statements = self.code_writer.stash_statements()
        try:
            yield
        finally:
            self.code_writer.restore_statements(statements)

    def gen_type(self, type_spec: TypeSpec, enum_name: str | None = None) -> None:
        """Write a type declaration, an anonymous object or (with `enum_name`) an enum constant."""
        with self._statements_set_aside():
            self._gen_type(type_spec, enum_name)

    def gen_type_alias(self, type_alias: TypeAliasSpec) -> None:
        code_writer = self.code_writer
        self.gen_kdoc(type_alias.kdoc)
        self.gen_annotations(type_alias.annotations, inline=False)
        self.gen_modifiers(type_alias.modifiers, PUBLIC_ONLY)
        code_writer.emit(f"typealias {helper.escape_if_keyword(type_alias.name)}")
        self.gen_type_variables(type_alias.type_variables)
        code_writer.emit(" = ")
        self.gen_type_name(type_alias.type_name)
        code_writer.emit("\n")

    def _gen_type(self, type_spec: TypeSpec, enum_name: str | None) -> None:
        code_writer = self.code_writer
        outer_scope = self.scope

        if enum_name is not None:
            self.gen_kdoc(type_spec.kdoc)
            self.gen_annotations(type_spec.annotations, inline=False)
            code_writer.emit(helper.escape_if_keyword(enum_name))
            if type_spec.super_constructor_args:
                code_writer.emit("(")
                self.gen_code(join_to_code(type_spec.super_constructor_args))
                code_writer.emit(")")
            if not _has_body(type_spec):
                return
            code_writer.emit(" {\n")
        elif type_spec.is_anonymous:
            code_writer.emit("object")
            self._gen_supertypes(type_spec)
            code_writer.emit(" {\n")
        else:
            self.gen_kdoc(_kdoc_with_constructor_docs(type_spec))
            self.gen_annotations(type_spec.annotations, inline=False)
            self.gen_modifiers(type_spec.modifiers, PUBLIC_ONLY)
            code_writer.emit(kotlin_types.DECLARATION_KEYWORDS[type_spec.kind])
            code_writer.emit(" ")
            code_writer.emit(helper.escape_if_keyword(type_spec.name))
            self.gen_type_variables(type_spec.type_variables)
            if type_spec.primary_constructor is not None:
                self._gen_primary_constructor(type_spec)
            if type_spec.kind == TypeKind.ANNOTATION:
                self._gen_annotation_members(type_spec.functions)
            self._gen_supertypes(type_spec)
            self.gen_where_clause(type_spec.type_variables)
            if not _has_body(type_spec):
                code_writer.emit("\n")
                return
            code_writer.emit(" {\n")
            self.scope = self.scope.enter(type_spec.name, (t.name for t in type_spec.types if t.name))

        code_writer.indent()
        self._gen_type_members(type_spec)
        code_writer.unindent()
        self.scope = outer_scope

        code_writer.emit("}")
        if enum_name is None and not type_spec.is_anonymous:
            code_writer.emit("\n")

    def _gen_supertypes(self, type_spec: TypeSpec) -> None:
        supertypes: list[CodeBlock] = []
        if type_spec.superclass is not None:
            if type_spec.primary_constructor is None and type_spec.constructors:
                # Secondary constructors call the superclass constructor themselves.
                supertypes.append(CodeBlock.of("%T", type_spec.superclass))
            else:
                arguments = join_to_code(type_spec.super_constructor_args)
                supertypes.append(CodeBlock.of("%T(%L)", type_spec.superclass, arguments))
        supertypes.extend(CodeBlock.of("%T", superinterface) for superinterface in type_spec.superinterfaces)

        if supertypes:
            self.code_writer.emit(" : ")
            self.gen_code(join_to_code(supertypes))

    def _gen_primary_constructor(self, type_spec: TypeSpec) -> None:
        """Write the primary constructor in the type header, one parameter per line.

        Parameters that declare a property are written as `val` or `var` parameters, with the modifiers and
        annotations of the property.
        """
        code_writer = self.code_writer
        constructor = type_spec.primary_constructor
        if constructor.annotations or constructor.modifiers:
            code_writer.emit(" ")
            self.gen_annotations(constructor.annotations, inline=True)
            self.gen_modifiers(constructor.modifiers)
            code_writer.emit(CONSTRUCTOR)

        constructor_properties = type_spec.constructor_properties
        code_writer.emit("(")
        if constructor.parameters:
            code_writer.emit("\n")
            code_writer.indent()
            for parameter in constructor.parameters:
                prop = constructor_properties.get(parameter.name)
                if prop is None:
                    self.gen_parameter(parameter)
                else:
                    self.gen_annotations((*prop.annotations, *parameter.annotations), inline=True)
                    self.gen_modifiers(prop.modifiers | parameter.modifiers, PUBLIC_ONLY)
                    code_writer.emit("var " if prop.mutable else "val ")
                    self._gen_parameter_declaration(parameter)
                code_writer.emit(",\n")
            code_writer.unindent()
        code_writer.emit(")")

    def _gen_annotation_members(self, functions: Sequence[FunSpec]) -> None:
        """Write the members of an annotation type as the `val` parameters of its constructor."""
        if not functions:
            return

        code_writer = self.code_writer
        code_writer.emit("(")
        for position, function in enumerate(functions):
            if position > 0:
                code_writer.emit(",")
                code_writer.wrapping_space()
            code_writer.emit(f"val {helper.escape_if_keyword(function.name)}: ")
            self.gen_type_name(function.return_type)
            if function.default_value is not None:
                code_writer.emit(" = ")
                self.gen_code(function.default_value)
        code_writer.emit(")")

    def _gen_type_members(self, type_spec: TypeSpec) -> None:
        """Write the members of a type body, in groups separated by blank lines.

        The order is enum constants, the companion object (static properties and the static initializer),
        instance properties, the instance initializer, the body of the primary constructor, secondary
        constructors, functions and nested types.
        """
        code_writer = self.code_writer
        wrote_group = False

        if type_spec.enum_constants:
            has_other_members = _has_body(type_spec, include_enum_constants=False)
            last_position = len(type_spec.enum_constants) - 1
            for position, (name, constant) in enumerate(type_spec.enum_constants):
                self.gen_type(constant, enum_name=name)
                if position < last_position:
                    code_writer.emit(",\n")
                elif has_other_members:
                    code_writer.emit(";\n")
                else:
                    code_writer.emit("\n")
            wrote_group = True

        static_properties = type_spec.static_properties
        if static_properties or not type_spec.static_block.is_empty():
            if wrote_group:
                code_writer.blank_line()
            self._gen_companion(static_properties, type_spec.static_block)
            wrote_group = True

        instance_properties = type_spec.instance_properties
        if instance_properties:
            if wrote_group:
                code_writer.blank_line()
            for prop in instance_properties:
                self.gen_property(prop, PUBLIC_ONLY)
            wrote_group = True

        for init_block in _init_blocks(type_spec):
            if wrote_group:
                code_writer.blank_line()
            self._gen_init_block(init_block)
            wrote_group = True

        functions: list[FunSpec] = []
        if type_spec.kind != TypeKind.ANNOTATION:
            functions = type_spec.constructors + type_spec.methods
        is_interface = type_spec.kind == TypeKind.INTERFACE
        for function in functions:
            if wrote_group:
                code_writer.blank_line()
            if is_interface:
                self.gen_function(function, INTERFACE_MEMBER_MODIFIERS, allow_bodyless=True)
            else:
                self.gen_function(function, PUBLIC_ONLY)
            wrote_group = True

        for nested in type_spec.types:
            if wrote_group:
                code_writer.blank_line()
            self.gen_type(nested)
            wrote_group = True

    def _gen_companion(self, static_properties: Sequence[PropertySpec], static_block: CodeBlock) -> None:
        code_writer = self.code_writer
        code_writer.emit("companion object {\n")
        code_writer.indent()
        for prop in static_properties:
            self.gen_property(prop, PUBLIC_ONLY)
        if not static_block.is_empty():
            if static_properties:
                code_writer.blank_line()
            self._gen_init_block(static_block)
        code_writer.unindent()
        code_writer.emit("}\n")

    def _gen_init_block(self, code_block: CodeBlock) -> None:
        code_writer = self.code_writer
        code_writer.emit("init {\n")
        code_writer.indent()
        self.gen_code(code_block)
        code_writer.ensure_newline()
        code_writer.unindent()
        code_writer.emit("}\n")

    def gen_property(
        self,
        prop: PropertySpec,
        implicit_modifiers: frozenset[Modifier] = frozenset(),
        end_line: bool = True,
    ) -> None:
        """Write a property and its accessors, which are indented below the declaration.

        Args:
            prop (PropertySpec): The property to write.
            implicit_modifiers (frozenset[Modifier]): Modifiers that apply anyway and are left out.
            end_line (bool): Whether the last line is terminated, it is not when the property is a literal.
        """
        code_writer = self.code_writer
        self.gen_kdoc(prop.kdoc)
        self.gen_annotations(prop.annotations, inline=False)
        self.gen_modifiers(prop.modifiers, implicit_modifiers)
        code_writer.emit("var " if prop.mutable else "val ")
        code_writer.emit(f"{helper.escape_if_keyword(prop.name)}: ")
        self.gen_type_name(prop.type_name)
        if prop.initializer is not None:
            code_writer.emit(" = ")
            code_writer.begin_statement()
            self.gen_code(prop.initializer)
            code_writer.end_statement()

        for accessor in (prop.getter, prop.setter):
            if accessor is None:
                continue
            code_writer.emit("\n")
            code_writer.indent()
            self.gen_function(accessor, PUBLIC_ONLY, end_line=False)
            code_writer.unindent()

        if end_line:
            code_writer.emit("\n")

    def gen_function(
        self,
        function: FunSpec,
        implicit_modifiers: frozenset[Modifier] = frozenset(),
        allow_bodyless: bool = False,
        end_line: bool = True,
    ) -> None:
        """Write a function, a constructor or a property accessor.

        Args:
            function (FunSpec): The function to write.
            implicit_modifiers (frozenset[Modifier]): Modifiers that apply anyway and are left out.
            allow_bodyless (bool): Whether a function without code is written without braces, as in interfaces.
            end_line (bool): Whether the last line is terminated, it is not when the function is a literal.
        """
        code_writer = self.code_writer
        self.gen_kdoc(function.kdoc)
        self.gen_annotations(function.annotations, inline=False)
        self.gen_modifiers(function.modifiers, implicit_modifiers)

        empty_setter = function.name == SETTER and not function.parameters
        if function.is_constructor:
            code_writer.emit(CONSTRUCTOR)
        elif function.name == GETTER:
            code_writer.emit("get")
        elif function.name == SETTER:
            code_writer.emit("set")
        else:
            code_writer.emit("fun ")
            if function.type_variables:
                self.gen_type_variables(function.type_variables)
                code_writer.emit(" ")
            if function.receiver is not None:
                self._gen_receiver(function.receiver)
            code_writer.emit(helper.escape_if_keyword(function.name))

        if not empty_setter:
            self.gen_parameters(function.parameters, include_types=function.name != SETTER)
        if function.return_type is not None and function.return_type != names.UNIT:
            code_writer.emit(": ")
            self.gen_type_name(function.return_type)
        if function.delegate_constructor is not None:
            code_writer.emit(f" : {function.delegate_constructor}(")
            self.gen_code(join_to_code(function.delegate_constructor_args))
            code_writer.emit(")")
        self.gen_where_clause(function.type_variables)

        bodyless = function.is_abstract or Modifier.EXTERNAL in function.modifiers or empty_setter
        if bodyless or (allow_bodyless and function.body.is_empty()):
            if end_line:
                code_writer.emit("\n")
            return

        code_writer.emit(" {\n")
        code_writer.indent()
        self.gen_code(function.body)
        code_writer.ensure_newline()
        code_writer.unindent()
        code_writer.emit("}")
        if end_line:
            code_writer.emit("\n")

    def _gen_receiver(self, receiver: Name) -> None:
        """Write the receiver of an extension function, function types are put in parentheses."""
        if isinstance(receiver, Lambda):
            self.code_writer.emit("(")
            self.gen_type_name(receiver)
            self.code_writer.emit(")")
        else:
            self.gen_type_name(receiver)
        self.code_writer.emit(".")

    def gen_parameters(self, parameters: Sequence[ParameterSpec], include_types: bool = True) -> None:
        """Write a parenthesized parameter list, with a soft-wrap point after every separator."""
        code_writer = self.code_writer
        code_writer.emit("(")
        for position, parameter in enumerate(parameters):
            if position > 0:
                code_writer.emit(",")
                code_writer.wrapping_space()
            if include_types:
                self.gen_parameter(parameter)
            else:
                code_writer.emit(helper.escape_if_keyword(parameter.name))
        code_writer.emit(")")

    def gen_parameter(self, parameter: ParameterSpec) -> None:
        self.gen_annotations(parameter.annotations, inline=True)
        self.gen_modifiers(parameter.modifiers)
        self._gen_parameter_declaration(parameter)

    def _gen_parameter_declaration(self, parameter: ParameterSpec) -> None:
        """Write `name: Type`, followed by the default value if there is one."""
        code_writer = self.code_writer
        code_writer.emit(f"{helper.escape_if_keyword(parameter.name)}: ")
        self.gen_type_name(parameter.type_name)
        if parameter.default_value is not None:
            code_writer.emit(" = ")
            self.gen_code(parameter.default_value)

    def gen_modifiers(
        self, modifiers: Iterable[Modifier], implicit_modifiers: frozenset[Modifier] = frozenset()
    ) -> None:
        for modifier in kotlin_types.sort_modifiers(set(modifiers) - implicit_modifiers):
            self.code_writer.emit(f"{modifier.keyword} ")

    def gen_type_variables(self, type_variables: Sequence[TypeVariable]) -> None:
        """Write `<T : Bound, out E>`; variables with several bounds list them in the `where` clause instead."""
        if not type_variables:
            return

        code_writer = self.code_writer
        code_writer.emit("<")
        for position, type_variable in enumerate(type_variables):
            if position > 0:
                code_writer.emit(", ")
            if type_variable.reified:
                code_writer.emit("reified ")
            if type_variable.variance:
                code_writer.emit(f"{type_variable.variance} ")
            code_writer.emit(type_variable.name)
            if len(type_variable.bounds) == 1 and type_variable.bounds[0] != names.NULLABLE_ANY:
                code_writer.emit(" : ")
                self.gen_type_name(type_variable.bounds[0])
        code_writer.emit(">")

    def gen_where_clause(self, type_variables: Sequence[TypeVariable]) -> None:
        constraints = [
            (type_variable, bound)
            for type_variable in type_variables
            if len(type_variable.bounds) > 1
            for bound in type_variable.bounds
        ]
        if not constraints:
            return

        code_writer = self.code_writer
        code_writer.emit(" where ")
        for position, (type_variable, bound) in enumerate(constraints):
            if position > 0:
                code_writer.emit(",")
                code_writer.wrapping_space()
            code_writer.emit(f"{type_variable.name} : ")
            self.gen_type_name(bound)

    def gen_annotations(self, annotations: Sequence[AnnotationSpec], inline: bool) -> None:
        for annotation in annotations:
            self.gen_annotation(annotation, inline)
            self.code_writer.emit(" " if inline else "\n")

    def gen_annotation(self, annotation: AnnotationSpec, inline: bool) -> None:
        """Write an annotation use.

        A single `value` member is written without its name. Several members are written on one line when
        `inline` is set, otherwise one member per line.
        """
        code_writer = self.code_writer
        code_writer.emit("@")
        self.gen_type_name(annotation.type_name)

        members = annotation.members
        if not members:
            return

        if len(members) == 1 and members[0][0] == "value":
            code_writer.emit("(")
            self.gen_code(members[0][1])
            code_writer.emit(")")
            return

        if inline or len(members) == 1:
            code_writer.emit("(")
            for position, (name, value) in enumerate(members):
                if position > 0:
                    code_writer.emit(",")
                    code_writer.wrapping_space()
                code_writer.emit(f"{helper.escape_if_keyword(name)} = ")
                self.gen_code(value)
            code_writer.emit(")")
            return

        code_writer.emit("(\n")
        code_writer.indent()
        last_position = len(members) - 1
        for position, (name, value) in enumerate(members):
            code_writer.emit(f"{helper.escape_if_keyword(name)} = ")
            self.gen_code(value)
            code_writer.emit(",\n" if position < last_position else "\n")
        code_writer.unindent()
        code_writer.emit(")")

    def gen_kdoc(self, kdoc: CodeBlock) -> None:
        if kdoc.is_empty():
            return

        code_writer = self.code_writer
        code_writer.emit("/**\n")
        code_writer.begin_kdoc()
        self.gen_code(kdoc)
        code_writer.ensure_newline()
        code_writer.end_kdoc()
        code_writer.emit(" */\n")

    def gen_code(self, code_block: CodeBlock) -> None:
        """Carry out the emit instructions of a code block."""
        code_writer = self.code_writer
        for instruction in code_block.instructions:
            value = instruction.value
            match instruction.kind:
                case InstructionKind.TEXT:
                    code_writer.emit(value)
                case InstructionKind.NAME:
                    code_writer.emit(helper.escape_if_keyword(value))
                case InstructionKind.STRING:
                    code_writer.emit("null" if value is None else helper.string_literal_with_quotes(value))
                case InstructionKind.TYPE:
                    self.gen_type_name(value)
                case InstructionKind.LITERAL:
                    self._gen_literal(value)
                case InstructionKind.INDENT:
                    code_writer.indent()
                case InstructionKind.UNINDENT:
                    code_writer.unindent()
                case InstructionKind.STATEMENT_BEGIN:
                    code_writer.begin_statement()
                case InstructionKind.STATEMENT_END:
                    code_writer.end_statement()
                case InstructionKind.WRAPPING_SPACE:
                    code_writer.wrapping_space()
                case InstructionKind.ZERO_WIDTH_SPACE:
                    code_writer.zero_width_space()
                case _:
                    raise ValueError(f"Unknown instruction kind '{instruction.kind}'.")

    def _gen_literal(self, value: Any) -> None:
        match value:
            case TypeSpec():
                self.gen_type(value)
            case AnnotationSpec():
                self.gen_annotation(value, inline=True)
            case FunSpec():
                with self._statements_set_aside():
                    self.gen_function(value, PUBLIC_ONLY, end_line=False)
            case PropertySpec():
                with self._statements_set_aside():
                    self.gen_property(value, PUBLIC_ONLY, end_line=False)
            case _:
                self.code_writer.emit(str(value))

    def gen_type_name(self, name: Name) -> None:
        """Write a type reference, with declared types written as the import resolution decided."""
        code_writer = self.code_writer
        match name:
            case Primitive():
                code_writer.emit(name.simple_name)
            case ArrayName(element=element, nullable=nullable):
                self.gen_type_name(names.ARRAY)
                code_writer.emit("<")
                self.gen_type_name(element)
                code_writer.emit(">?" if nullable else ">")
            case Declared(type_arguments=type_arguments, nullable=nullable):
                code_writer.emit(self.renderer.render(name.raw(), self.scope))
                if type_arguments:
                    code_writer.emit("<")
                    code_writer.zero_width_space()
                    for position, type_argument in enumerate(type_arguments):
                        if position > 0:
                            code_writer.emit(",")
                            code_writer.wrapping_space()
                        self.gen_type_name(type_argument)
                    code_writer.emit(">")
                if nullable:
                    code_writer.emit("?")
            case TypeVariable(name=variable_name, nullable=nullable):
                code_writer.emit(variable_name + ("?" if nullable else ""))
            case Wildcard(upper_bounds=upper_bounds, lower_bounds=lower_bounds):
                if lower_bounds:
                    code_writer.emit("in ")
                    self.gen_type_name(lower_bounds[0])
                elif upper_bounds[0] == names.NULLABLE_ANY:
                    code_writer.emit("*")
                else:
                    code_writer.emit("out ")
                    self.gen_type_name(upper_bounds[0])
            case Lambda(parameters=parameters, return_type=return_type, receiver=receiver, nullable=nullable):
                if nullable:
                    code_writer.emit("(")
                if name.suspending:
                    code_writer.emit("suspend ")
                if receiver is not None:
                    self._gen_receiver(receiver)
                code_writer.emit("(")
                for position, parameter in enumerate(parameters):
                    if position > 0:
                        code_writer.emit(", ")
                    self.gen_type_name(parameter)
                code_writer.emit(") -> ")
                self.gen_type_name(return_type)
                if nullable:
                    code_writer.emit(")?")
            case _:
                raise TypeError(f"Unsupported type name {name!r}.")


def _init_blocks(type_spec: TypeSpec) -> list[CodeBlock]:
    """The non-empty `init` blocks of a type, the primary constructor body runs after the instance initializer."""
    init_blocks = [type_spec.init_block]
    if type_spec.primary_constructor is not None:
        init_blocks.append(type_spec.primary_constructor.body)
    return [init_block for init_block in init_blocks if not init_block.is_empty()]


def _kdoc_with_constructor_docs(type_spec: TypeSpec) -> CodeBlock:
    """The KDoc of a type, with a `@property` tag for each documented property of the primary constructor."""
    documented = [prop for prop in type_spec.constructor_properties.values() if not prop.kdoc.is_empty()]
    if not documented:
        return type_spec.kdoc

    builder = type_spec.kdoc.to_builder()
    for prop in documented:
        builder.add("@property %L %L", prop.name, prop.kdoc)
    return builder.build()


def _has_body(type_spec: TypeSpec, include_enum_constants: bool = True) -> bool:
    """Whether a type has members that are written between braces."""
    if include_enum_constants and type_spec.enum_constants:
        return True
    if type_spec.kind != TypeKind.ANNOTATION and type_spec.functions:
        return True
    return bool(
        type_spec.static_properties
        or type_spec.instance_properties
        or not type_spec.static_block.is_empty()
        or _init_blocks(type_spec)
        or type_spec.types
    )


def resolve_imports(
    file_spec: FileSpec,
    implicit_packages: Iterable[str] = kotlin_types.DEFAULT_IMPLICIT_PACKAGES,
) -> ImportResolution:
    """Traverse a file once and resolve the imports of every type it references.

    Args:
        file_spec: The file to resolve.
        implicit_packages: Packages whose types are visible without an import statement.

    Returns:
        The import resolution of the file.
    """
    collector = NameCollector()
    Writer(collector, file_spec.package_name).gen_file(file_spec)
    resolver = ImportResolver(implicit_packages)
    return resolver.resolve(file_spec.package_name, DeclaredTypes.create(file_spec), collector.occurrences)


def emit(
    spec: Any,
    implicit_packages: Iterable[str] = kotlin_types.DEFAULT_IMPLICIT_PACKAGES,
    indent: str = kotlin_types.DEFAULT_INDENT,
    column_limit: int = kotlin_types.DEFAULT_COLUMN_LIMIT,
) -> str:
    """Render a spec as source text.

    A `FileSpec` is rendered as a complete file with its imports. Any other spec (or code block) is rendered
    on its own, with every type reference fully qualified.

    Args:
        spec: The spec to render.
        implicit_packages: Packages whose types are visible without an import statement.
        indent: A single indentation unit.
        column_limit: The column at which soft-wrap points turn into line breaks.

    Returns:
        The source text.
    """
    if not isinstance(spec, FileSpec):
        writer = Writer(NameCollector(), indent=indent, column_limit=column_limit)
        writer.gen_spec(spec)
        return writer.dumps()

    resolution = resolve_imports(spec, implicit_packages)
    writer = Writer(resolution, spec.package_name, indent, column_limit)
    writer.gen_file(spec, resolution.imports)
    logger.debug("Emitted file '%s' with %d imports.", spec.name, len(resolution.imports))
    return writer.dumps()
