from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ktpoet.names import Declared
    from ktpoet.specs import FileSpec, TypeSpec


class Rendering:
    """How references to a top-level type (and the types nested in it) are written."""

    # The simple name chain, the type is imported or needs no import.
    SHORT = "short"
    # The fully qualified name, the simple name would be ambiguous.
    QUALIFIED = "qualified"
    # The type is declared in the file, the shortest chain that resolves from the enclosing scopes is used.
    LOCAL = "local"


@dataclass(frozen=True)
class NameOccurrence:
    """A reference to a declared type, as recorded while the file is traversed.

    Attributes:
        name: The raw referenced type.
        visible_names: Simple names of types declared by the enclosing declarations at the reference.
    """

    name: Declared
    visible_names: frozenset[str]


@dataclass(frozen=True)
class DeclaredTypes:
    """Simple names of the types that a file declares.

    Attributes:
        top_level: Names of the top-level types and type aliases of the file.
        all_names: Names of every named type in the file, at any nesting depth.
    """

    top_level: frozenset[str]
    all_names: frozenset[str]

    @classmethod
    def create(cls, file_spec: FileSpec) -> DeclaredTypes:
        """Collect the declared type names of a file.

        Args:
            file_spec: The file to inspect.

        Returns:
            The names declared by the file.
        """
        from ktpoet.specs import TypeSpec

        type_specs = [member for member in file_spec.members if isinstance(member, TypeSpec)]
        aliases = frozenset(type_alias.name for type_alias in file_spec.type_aliases)
        top_level = frozenset(type_spec.name for type_spec in type_specs if type_spec.name) | aliases
        return cls(top_level=top_level, all_names=frozenset(_collect_names(type_specs)) | aliases)


def _collect_names(type_specs: Iterable[TypeSpec]) -> Iterable[str]:
    for type_spec in type_specs:
        if type_spec.name:
            yield type_spec.name
        yield from _collect_names(type_spec.types)
        yield from _collect_names(constant for _, constant in type_spec.enum_constants)
