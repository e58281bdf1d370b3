"""Decide, for every type a file references, whether it is imported and written short or written qualified."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from ktpoet import helper, kotlin_types
from ktpoet.names import Declared
from ktpoet.scope import Scope
from ktpoet.writer_dto import DeclaredTypes, NameOccurrence, Rendering

logger = logging.getLogger(__name__)


class NameCollector:
    """Records every referenced type while writing each of them fully qualified.

    Used for the traversal that precedes the import resolution, and to render specs outside of a file.
    """

    def __init__(self) -> None:
        self.occurrences: list[NameOccurrence] = []

    def render(self, name: Declared, scope: Scope) -> str:
        self.occurrences.append(NameOccurrence(name, scope.visible_names()))
        return helper.escape_segments(name.canonical_name)


@dataclass(frozen=True)
class ImportResolution:
    """The outcome of the import resolution of a file.

    Attributes:
        package_name: The package of the file.
        renderings: The `Rendering` of each referenced top-level type, keyed by package and simple name.
        imports: The types to import, sorted by package and simple name.
    """

    package_name: str
    renderings: Mapping[tuple[str, str], str] = field(default_factory=dict)
    imports: tuple[Declared, ...] = ()

    def rendering_of(self, name: Declared) -> str:
        top_level = name.top_level()
        return self.renderings.get((top_level.package_name, top_level.simple_name), Rendering.QUALIFIED)

    def render(self, name: Declared, scope: Scope) -> str:
        """Write a raw type reference from within a scope.

        Args:
            name: The referenced type, without type arguments.
            scope: The scope that encloses the reference.

        Returns:
            The text of the reference.
        """
        rendering = self.rendering_of(name)
        if rendering == Rendering.SHORT:
            simple_names = name.simple_names
        elif rendering == Rendering.LOCAL:
            simple_names = _shortest_resolvable_chain(name, scope)
        else:
            return helper.escape_segments(name.canonical_name)
        return ".".join(helper.escape_if_keyword(simple_name) for simple_name in simple_names)


def _shortest_resolvable_chain(name: Declared, scope: Scope) -> tuple[str, ...]:
    """The shortest suffix of the nesting chain of `name` that refers to `name` from within `scope`.

    Examples:
        Inside `Outer.Inner`, `Outer.Inner.Leaf` is written `Leaf` and `Outer.Sibling` is written `Sibling`.
    """
    candidate: Declared | None = name
    while candidate is not None:
        if scope.resolve(candidate.simple_name) == candidate:
            return name.simple_names[len(candidate.simple_names) - 1 :]
        candidate = candidate.enclosing()
    return name.simple_names


class ImportResolver:
    """Computes the imports of a file from the type references recorded while traversing it."""

    def __init__(self, implicit_packages: Iterable[str] = kotlin_types.DEFAULT_IMPLICIT_PACKAGES) -> None:
        """Initialize the resolver.

        Args:
            implicit_packages: Packages whose types are visible without an import statement.
        """
        self.implicit_packages = frozenset(implicit_packages)

    def needs_import(self, package_name: str, file_package_name: str) -> bool:
        return bool(package_name) and package_name != file_package_name and package_name not in self.implicit_packages

    def resolve(
        self,
        package_name: str,
        declared_types: DeclaredTypes,
        occurrences: Iterable[NameOccurrence],
    ) -> ImportResolution:
        """Resolve the rendering of every referenced type.

        References are grouped by their top-level simple name. A group from a single package is written
        short (and imported if necessary), unless its simple name is also declared by the file or is a keyword.
        Groups that span several packages are written fully qualified. Types declared in the file are never
        imported.

        Args:
            package_name: The package of the file.
            declared_types: The types declared by the file.
            occurrences: The recorded type references.

        Returns:
            The resolution, with the imports sorted by package and simple name.
        """
        packages_by_simple_name: dict[str, set[str]] = {}
        shadowed_names = set(declared_types.all_names)
        for occurrence in occurrences:
            top_level = occurrence.name.top_level()
            packages_by_simple_name.setdefault(top_level.simple_name, set()).add(top_level.package_name)
            shadowed_names |= occurrence.visible_names

        renderings: dict[tuple[str, str], str] = {}
        imports: list[Declared] = []
        for simple_name, packages in packages_by_simple_name.items():
            for package in packages:
                key = (package, simple_name)
                if package == package_name and simple_name in declared_types.top_level:
                    renderings[key] = Rendering.LOCAL
                elif len(packages) > 1 or simple_name in shadowed_names or helper.is_keyword(simple_name):
                    logger.debug("Qualifying '%s.%s', its simple name is ambiguous.", package, simple_name)
                    renderings[key] = Rendering.QUALIFIED
                else:
                    renderings[key] = Rendering.SHORT
                    if self.needs_import(package, package_name):
                        imports.append(Declared(package, (simple_name,)))

        imports.sort(key=lambda declared: (declared.package_name, declared.simple_names))
        logger.debug("Resolved %d referenced types into %d imports.", len(renderings), len(imports))
        return ImportResolution(package_name=package_name, renderings=renderings, imports=tuple(imports))
