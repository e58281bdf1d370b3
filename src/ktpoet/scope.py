"""Scopes of the type declarations that enclose the code being emitted."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from ktpoet.names import Declared


@dataclass(frozen=True)
class Scope:
    """A type declaration that encloses emitted code, or the file itself for the root scope.

    Attributes:
        package_name: The package of the file.
        name: The simple name of the enclosing type, empty for the root scope.
        nested_names: Simple names of the types declared directly inside this scope.
        parent: The next outer scope, `None` for the root scope.
    """

    package_name: str
    name: str = ""
    nested_names: frozenset[str] = field(default_factory=frozenset)
    parent: Scope | None = None

    @classmethod
    def root(cls, package_name: str, top_level_names: Iterable[str] = ()) -> Scope:
        return cls(package_name, nested_names=frozenset(top_level_names))

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def trace(self) -> list[Scope]:
        """All scopes from the root scope down to this one."""
        scopes = []
        scope: Scope | None = self
        while scope is not None:
            scopes.append(scope)
            scope = scope.parent
        return list(reversed(scopes))

    @property
    def class_name(self) -> Declared | None:
        """The name of the enclosing type, `None` for the root scope."""
        names = [scope.name for scope in self.trace if not scope.is_root]
        if not names:
            return None
        return Declared(self.package_name, tuple(names))

    def enter(self, name: str, nested_names: Iterable[str]) -> Scope:
        """Create the scope of a type declared within this scope."""
        return Scope(self.package_name, name, frozenset(nested_names), self)

    def visible_names(self) -> frozenset[str]:
        """Simple names that refer to types of the enclosing declarations."""
        visible: set[str] = set()
        for scope in self.trace:
            visible |= scope.nested_names
        return frozenset(visible)

    def resolve(self, simple_name: str) -> Declared | None:
        """Find the type that a simple name refers to from within this scope.

        The innermost scope declaring a type with that name wins.

        Args:
            simple_name: The simple name to look up.

        Returns:
            The declared type, or `None` if no enclosing declaration provides that name.
        """
        scope: Scope | None = self
        while scope is not None:
            if simple_name in scope.nested_names:
                class_name = scope.class_name
                if class_name is None:
                    return Declared(self.package_name, (simple_name,))
                return class_name.nested(simple_name)
            scope = scope.parent
        return None
