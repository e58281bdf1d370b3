"""Format strings with embedded directives, interpreted into emit instructions.

A directive is a `%` followed by one character:

* `%L` inserts a literal. Code blocks are spliced, type and annotation specs are emitted as declarations,
  anything else is converted with `str()`.
* `%S` inserts a string literal with quotes and escaping.
* `%T` inserts a type reference, which is shortened or qualified by the import resolution.
* `%N` inserts an identifier, escaped with backticks if it is a keyword.
* `%%` is a literal percent sign.
* `%>` and `%<` increase and decrease the indentation.
* `%[` and `%]` begin and end a statement, continuation lines of a statement are indented.
* `%W` is a space that may be replaced by a line break, `%Z` a line break opportunity without a space.

Placeholders that consume an argument are either relative (`%L`), indexed (`%2L`, one-based) or named
(`%name:L`, see `CodeBlock.named`).
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from typing_extensions import override

from ktpoet import names

NAMED_ARGUMENT = re.compile(r"%([a-zA-Z][\w]*):([a-zA-Z])")
LOWERCASE = re.compile(r"[a-z]+[\w]*")


class FormatStringError(ValueError):
    """Raised when a format string is malformed or does not match its arguments.

    Attributes:
        template: The offending format string.
        index: The zero-based argument index (or argument name) that caused the failure, if any.
    """

    def __init__(self, message: str, template: str, index: int | str | None = None) -> None:
        super().__init__(message)
        self.template = template
        self.index = index


class InstructionKind:
    """Kinds of emit instructions."""

    TEXT = "text"
    LITERAL = "literal"
    NAME = "name"
    STRING = "string"
    TYPE = "type"
    INDENT = "indent"
    UNINDENT = "unindent"
    STATEMENT_BEGIN = "statement_begin"
    STATEMENT_END = "statement_end"
    WRAPPING_SPACE = "wrapping_space"
    ZERO_WIDTH_SPACE = "zero_width_space"


@dataclass(frozen=True)
class EmitInstruction:
    """A single step of emitting a code block."""

    kind: str
    value: Any = None


ARGUMENT_DIRECTIVES = frozenset("LNST")

NO_ARGUMENT_DIRECTIVES = {
    "%": EmitInstruction(InstructionKind.TEXT, "%"),
    ">": EmitInstruction(InstructionKind.INDENT),
    "<": EmitInstruction(InstructionKind.UNINDENT),
    "[": EmitInstruction(InstructionKind.STATEMENT_BEGIN),
    "]": EmitInstruction(InstructionKind.STATEMENT_END),
    "W": EmitInstruction(InstructionKind.WRAPPING_SPACE),
    "Z": EmitInstruction(InstructionKind.ZERO_WIDTH_SPACE),
}


def _append(instructions: list[EmitInstruction], instruction: EmitInstruction) -> None:
    """Append an instruction, merging adjacent text."""
    if instruction.kind == InstructionKind.TEXT:
        if not instruction.value:
            return
        if instructions and instructions[-1].kind == InstructionKind.TEXT:
            instructions[-1] = EmitInstruction(InstructionKind.TEXT, instructions[-1].value + instruction.value)
            return
    instructions.append(instruction)


def _literal_text(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _argument_instructions(template: str, directive: str, argument: Any, index: int | str) -> list[EmitInstruction]:
    """Interpret a single argument for the placeholder that consumes it.

    Args:
        template: The format string, for error messages.
        directive: One of `L`, `N`, `S` and `T`.
        argument: The argument value.
        index: The zero-based index (or the name) of the argument.

    Returns:
        The instructions that emit the argument.
    """
    if directive == "L":
        if isinstance(argument, CodeBlock):
            return list(argument.instructions)
        if argument is None or isinstance(argument, str | int | float | bool):
            return [EmitInstruction(InstructionKind.TEXT, _literal_text(argument))]
        return [EmitInstruction(InstructionKind.LITERAL, argument)]

    if isinstance(argument, CodeBlock):
        raise FormatStringError(
            f"A code block must be inserted with %L, not %{directive} (argument {index} in '{template}').",
            template,
            index,
        )

    if directive == "N":
        name = argument if isinstance(argument, str) else getattr(argument, "name", None)
        if not isinstance(name, str):
            raise FormatStringError(
                f"Expected a name for %N at argument {index} in '{template}' but got {argument!r}.", template, index
            )
        return [EmitInstruction(InstructionKind.NAME, name)]

    if directive == "S":
        return [EmitInstruction(InstructionKind.STRING, None if argument is None else str(argument))]

    if not names.is_name(argument):
        raise FormatStringError(
            f"Expected a type for %T at argument {index} in '{template}' but got {argument!r}.", template, index
        )
    return [EmitInstruction(InstructionKind.TYPE, argument)]


def _no_argument_instruction(template: str, position: int) -> EmitInstruction:
    """The instruction for a directive that does not consume an argument, `position` points at the `%`."""
    if position + 1 >= len(template):
        raise FormatStringError(f"Dangling format characters in '{template}'.", template)
    directive = template[position + 1]
    if directive not in NO_ARGUMENT_DIRECTIVES:
        raise FormatStringError(f"Unknown format %{directive} at {position + 1} in '{template}'.", template)
    return NO_ARGUMENT_DIRECTIVES[directive]


def interpret(template: str, arguments: Sequence[Any]) -> list[EmitInstruction]:
    """Interpret a format string with relative or indexed placeholders.

    Relative and indexed placeholders cannot be mixed. Indexed placeholders may refer to the same argument
    more than once, but every argument has to be referenced.

    Args:
        template: The format string.
        arguments: The arguments consumed by the placeholders.

    Returns:
        The emit instructions, with nested code blocks spliced in.

    Raises:
        FormatStringError: If the template is malformed or does not match the arguments.
    """
    instructions: list[EmitInstruction] = []
    used = [False] * len(arguments)
    relative_index = 0
    has_relative = False
    has_indexed = False

    position = 0
    while position < len(template):
        if template[position] != "%":
            end = template.find("%", position)
            if end == -1:
                end = len(template)
            _append(instructions, EmitInstruction(InstructionKind.TEXT, template[position:end]))
            position = end
            continue

        cursor = position + 1
        while cursor < len(template) and template[cursor].isdigit():
            cursor += 1
        if cursor >= len(template):
            raise FormatStringError(f"Dangling format characters in '{template}'.", template)

        explicit_index = template[position + 1 : cursor]
        directive = template[cursor]

        if directive not in ARGUMENT_DIRECTIVES:
            if explicit_index:
                raise FormatStringError(f"%{directive} may not have an index in '{template}'.", template)
            _append(instructions, _no_argument_instruction(template, cursor - 1))
            position = cursor + 1
            continue

        if explicit_index:
            index = int(explicit_index) - 1
            has_indexed = True
        else:
            index = relative_index
            relative_index += 1
            has_relative = True

        if has_indexed and has_relative:
            raise FormatStringError(f"Cannot mix indexed and positional arguments in '{template}'.", template, index)

        if not 0 <= index < len(arguments):
            raise FormatStringError(
                f"Missing argument at index {index} for '%{directive}' in '{template}' "
                f"(received {len(arguments)} arguments).",
                template,
                index,
            )

        used[index] = True
        for instruction in _argument_instructions(template, directive, arguments[index], index):
            _append(instructions, instruction)
        position = cursor + 1

    unused = [index for index, was_used in enumerate(used) if not was_used]
    if unused:
        raise FormatStringError(
            f"Unused arguments at {', '.join(str(index) for index in unused)} in '{template}': "
            f"expected {len(arguments) - len(unused)}, received {len(arguments)}.",
            template,
            unused[0],
        )
    return instructions


def interpret_named(template: str, arguments: Mapping[str, Any]) -> list[EmitInstruction]:
    """Interpret a format string with named placeholders such as `%food:L`.

    Args:
        template: The format string.
        arguments: The arguments by name, every name has to start with a lowercase letter.

    Returns:
        The emit instructions.

    Raises:
        FormatStringError: If an argument name is invalid or a referenced argument is missing.
    """
    for name in arguments:
        if not LOWERCASE.fullmatch(name):
            raise FormatStringError(f"Argument '{name}' must start with a lowercase character.", template, name)

    instructions: list[EmitInstruction] = []
    position = 0
    while position < len(template):
        if template[position] != "%":
            end = template.find("%", position)
            if end == -1:
                end = len(template)
            _append(instructions, EmitInstruction(InstructionKind.TEXT, template[position:end]))
            position = end
            continue

        match = NAMED_ARGUMENT.match(template, position)
        if match is None:
            _append(instructions, _no_argument_instruction(template, position))
            position += 2
            continue

        name, directive = match.groups()
        if directive not in ARGUMENT_DIRECTIVES:
            raise FormatStringError(
                f"Unknown format %{directive} for argument '{name}' in '{template}'.", template, name
            )
        if name not in arguments:
            raise FormatStringError(f"Missing named argument for %{name} in '{template}'.", template, name)
        for instruction in _argument_instructions(template, directive, arguments[name], name):
            _append(instructions, instruction)
        position = match.end()

    return instructions


class CodeBlockBuilder:
    """Accumulates instructions for a `CodeBlock`."""

    def __init__(self, instructions: Iterable[EmitInstruction] = ()) -> None:
        self._instructions: list[EmitInstruction] = list(instructions)

    def is_empty(self) -> bool:
        return not self._instructions

    def _extend(self, instructions: Iterable[EmitInstruction]) -> CodeBlockBuilder:
        for instruction in instructions:
            _append(self._instructions, instruction)
        return self

    def add(self, template: str, *args: Any) -> CodeBlockBuilder:
        """Add a format string with relative or indexed placeholders.

        The builder is left unchanged if the format string cannot be interpreted.
        """
        return self._extend(interpret(template, args))

    def add_named(self, template: str, arguments: Mapping[str, Any]) -> CodeBlockBuilder:
        return self._extend(interpret_named(template, arguments))

    def add_code(self, code_block: CodeBlock) -> CodeBlockBuilder:
        return self._extend(code_block.instructions)

    def add_statement(self, template: str, *args: Any) -> CodeBlockBuilder:
        """Add a statement, i.e. a line whose continuation lines are indented."""
        statement = interpret(template, args)
        return self._extend(
            [
                NO_ARGUMENT_DIRECTIVES["["],
                *statement,
                EmitInstruction(InstructionKind.TEXT, "\n"),
                NO_ARGUMENT_DIRECTIVES["]"],
            ]
        )

    def begin_control_flow(self, control_flow: str, *args: Any) -> CodeBlockBuilder:
        """Open a block, e.g. `begin_control_flow("if (%N > 0)", "count")` emits `if (count > 0) {`.

        Args:
            control_flow: The control flow construct and its condition, without the opening brace.
            args: Arguments for the placeholders in `control_flow`.
        """
        self.add(control_flow + " {\n", *args)
        return self.indent()

    def next_control_flow(self, control_flow: str, *args: Any) -> CodeBlockBuilder:
        """Close the current block and open the next one, e.g. `} else {`."""
        self.unindent()
        self.add("} " + control_flow + " {\n", *args)
        return self.indent()

    def end_control_flow(self, control_flow: str | None = None, *args: Any) -> CodeBlockBuilder:
        """Close the current block, optionally with a trailing construct such as `} while (running)`."""
        self.unindent()
        if control_flow is None:
            return self.add("}\n")
        return self.add("} " + control_flow + "\n", *args)

    def indent(self) -> CodeBlockBuilder:
        return self._extend([NO_ARGUMENT_DIRECTIVES[">"]])

    def unindent(self) -> CodeBlockBuilder:
        return self._extend([NO_ARGUMENT_DIRECTIVES["<"]])

    def build(self) -> CodeBlock:
        return CodeBlock(tuple(self._instructions))


@dataclass(frozen=True)
class CodeBlock:
    """An immutable fragment of code: a sequence of emit instructions.

    Code blocks are built from format strings, see the module documentation for the directives.
    """

    instructions: tuple[EmitInstruction, ...] = ()

    @classmethod
    def of(cls, template: str, *args: Any) -> CodeBlock:
        """Interpret a format string into a code block.

        Examples:
            >>> str(CodeBlock.of("val %N = %S", "greeting", "hi"))
            'val greeting = "hi"'
        """
        return CodeBlockBuilder().add(template, *args).build()

    @classmethod
    def named(cls, template: str, arguments: Mapping[str, Any]) -> CodeBlock:
        return CodeBlockBuilder().add_named(template, arguments).build()

    @staticmethod
    def builder() -> CodeBlockBuilder:
        return CodeBlockBuilder()

    def is_empty(self) -> bool:
        return not self.instructions

    def to_builder(self) -> CodeBlockBuilder:
        return CodeBlockBuilder(self.instructions)

    @override
    def __str__(self) -> str:
        from ktpoet import writer

        return writer.emit(self)


EMPTY = CodeBlock()


def join_to_code(
    code_blocks: Iterable[CodeBlock],
    separator: str = ", ",
    prefix: str = "",
    suffix: str = "",
) -> CodeBlock:
    """Join code blocks into a single one.

    Args:
        code_blocks: The blocks to join.
        separator: Text placed between two blocks.
        prefix: Text placed before the first block.
        suffix: Text placed after the last block.

    Returns:
        The joined code block.
    """
    builder = CodeBlockBuilder().add("%L", prefix)
    for position, code_block in enumerate(code_blocks):
        if position > 0:
            builder.add("%L", separator)
        builder.add_code(code_block)
    return builder.add("%L", suffix).build()
