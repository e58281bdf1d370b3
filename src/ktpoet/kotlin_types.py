"""Language tables of the Kotlin sources that are generated."""

from __future__ import annotations

from enum import Enum

KOTLIN_PACKAGE = "kotlin"

PRIMITIVE_TYPE_TO_KOTLIN = {
    "boolean": "Boolean",
    "byte": "Byte",
    "char": "Char",
    "double": "Double",
    "float": "Float",
    "int": "Int",
    "long": "Long",
    "short": "Short",
    "unit": "Unit",
}

# Alternative spellings that are accepted when constructing primitives.
PRIMITIVE_ALIASES = {"void": "unit"}

# Packages whose members are visible in every Kotlin file without an import statement.
DEFAULT_IMPLICIT_PACKAGES = frozenset(
    {
        "kotlin",
        "kotlin.annotation",
        "kotlin.collections",
        "kotlin.comparisons",
        "kotlin.io",
        "kotlin.ranges",
        "kotlin.sequences",
        "kotlin.text",
    }
)

# Hard keywords, these can never be used as plain identifiers.
KEYWORDS = frozenset(
    {
        "as",
        "break",
        "class",
        "continue",
        "do",
        "else",
        "false",
        "for",
        "fun",
        "if",
        "in",
        "interface",
        "is",
        "null",
        "object",
        "package",
        "return",
        "super",
        "this",
        "throw",
        "true",
        "try",
        "typealias",
        "typeof",
        "val",
        "var",
        "when",
        "while",
    }
)

DEFAULT_INDENT = "  "
DEFAULT_COLUMN_LIMIT = 100
SOURCE_SUFFIX = ".kt"


class TypeKind:
    """Kinds of type declarations."""

    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    ANNOTATION = "annotation"
    OBJECT = "object"


DECLARATION_KEYWORDS = {
    TypeKind.CLASS: "class",
    TypeKind.INTERFACE: "interface",
    TypeKind.ENUM: "enum class",
    TypeKind.ANNOTATION: "annotation class",
    TypeKind.OBJECT: "object",
}


class Modifier(Enum):
    """Declaration modifiers, listed in the order they are emitted."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"
    INTERNAL = "internal"
    FINAL = "final"
    OPEN = "open"
    ABSTRACT = "abstract"
    OVERRIDE = "override"
    INNER = "inner"
    DATA = "data"
    SEALED = "sealed"
    INLINE = "inline"
    NOINLINE = "noinline"
    CROSSINLINE = "crossinline"
    INFIX = "infix"
    OPERATOR = "operator"
    LATEINIT = "lateinit"
    CONST = "const"
    EXTERNAL = "external"
    SUSPEND = "suspend"
    TAILREC = "tailrec"
    VARARG = "vararg"

    @property
    def keyword(self) -> str:
        return self.value


MODIFIER_ORDER = {modifier: position for position, modifier in enumerate(Modifier)}


def sort_modifiers(modifiers: frozenset[Modifier] | set[Modifier]) -> list[Modifier]:
    """Sort modifiers into their emission order.

    Args:
        modifiers: The modifiers to sort.

    Returns:
        The modifiers, ordered as they are declared in `Modifier`.
    """
    return sorted(modifiers, key=MODIFIER_ORDER.__getitem__)
