"""Immutable values naming the types that generated code can reference.

A name is one of six variants: `Primitive`, `ArrayName`, `Declared`, `TypeVariable`, `Wildcard` and the
function type `Lambda`.
Rendering a name to text is a single exhaustive match in `canonical_text`, and two names are equal
whenever their canonical text is equal, no matter how they were constructed.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing_extensions import override

from ktpoet import helper, kotlin_types


class NameModelError(ValueError):
    """Raised when a type name cannot be constructed from the provided parts."""

    pass


class _NameBase:
    """Behaviour shared by every name variant."""

    __slots__ = ()

    @override
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _NameBase):
            return NotImplemented
        return canonical_text(self) == canonical_text(other)

    @override
    def __hash__(self) -> int:
        return hash(canonical_text(self))

    @override
    def __str__(self) -> str:
        return canonical_text(self)

    def parameterized_by(self, *type_arguments: Name) -> Declared:
        """Apply type arguments to this name.

        Only a declared, not yet parameterized name can be parameterized.

        Raises:
            NameModelError: For every other kind of name.
        """
        raise NameModelError(f"The type '{self}' cannot be parameterized.")


@dataclass(frozen=True, eq=False)
class Primitive(_NameBase):
    """A built-in value type, e.g. `int` which renders as `Int`."""

    kind: str

    def __post_init__(self) -> None:
        kind = kotlin_types.PRIMITIVE_ALIASES.get(self.kind, self.kind)
        if kind not in kotlin_types.PRIMITIVE_TYPE_TO_KOTLIN:
            raise NameModelError(f"Unknown primitive kind '{self.kind}'.")
        object.__setattr__(self, "kind", kind)

    @property
    def simple_name(self) -> str:
        return kotlin_types.PRIMITIVE_TYPE_TO_KOTLIN[self.kind]


@dataclass(frozen=True, eq=False)
class ArrayName(_NameBase):
    """An array of some element type."""

    element: Name
    nullable: bool = False

    def as_nullable(self) -> ArrayName:
        return dataclasses.replace(self, nullable=True)


@dataclass(frozen=True, eq=False)
class Declared(_NameBase):
    """A named, possibly nested and possibly parameterized, class or interface.

    Attributes:
        package_name: The dotted package, empty for the default package.
        simple_names: The nesting chain, outermost first, e.g. `("Map", "Entry")`.
        type_arguments: The type arguments; empty for the raw type.
        nullable: Whether the reference admits null.
    """

    package_name: str
    simple_names: tuple[str, ...]
    type_arguments: tuple[Name, ...] = ()
    nullable: bool = False

    def __post_init__(self) -> None:
        simple_names = tuple(self.simple_names)
        if not simple_names:
            raise NameModelError("A declared name needs at least one simple name.")
        for simple_name in simple_names:
            if not helper.is_identifier(simple_name):
                raise NameModelError(f"'{simple_name}' is not a valid simple name.")
        if self.package_name:
            for segment in self.package_name.split("."):
                if not helper.is_identifier(segment):
                    raise NameModelError(f"'{self.package_name}' is not a valid package name.")
        object.__setattr__(self, "simple_names", simple_names)
        object.__setattr__(self, "type_arguments", tuple(self.type_arguments))

    @classmethod
    def of(cls, package_name: str, simple_name: str, *simple_names: str) -> Declared:
        """Create a declared name from its package and its nesting chain.

        Examples:
            >>> str(Declared.of("java.util", "Map", "Entry"))
            'java.util.Map.Entry'
        """
        return cls(package_name, (simple_name, *simple_names))

    @classmethod
    def best_guess(cls, dotted_name: str) -> Declared:
        """Guess a declared name from its dotted form, assuming conventional capitalization.

        Lowercase segments are taken as the package, the first capitalized segment and everything after
        it as the nesting chain. This is an opt-in heuristic, prefer `Declared.of` when the parts are known.

        Args:
            dotted_name: E.g. `java.util.Map.Entry`.

        Returns:
            The guessed name.

        Raises:
            NameModelError: If no segment starts with an uppercase letter, or a segment is empty.
        """
        segments = dotted_name.split(".")
        for position, segment in enumerate(segments):
            if segment[:1].isupper():
                package_name = ".".join(segments[:position])
                simple_names = segments[position:]
                break
        else:
            raise NameModelError(f"Couldn't make a guess for '{dotted_name}'.")

        if any(not segment for segment in segments):
            raise NameModelError(f"Couldn't make a guess for '{dotted_name}'.")
        return cls(package_name, tuple(simple_names))

    @property
    def simple_name(self) -> str:
        return self.simple_names[-1]

    @property
    def canonical_name(self) -> str:
        """The fully qualified dotted name, without type arguments."""
        if self.package_name:
            return f"{self.package_name}.{'.'.join(self.simple_names)}"
        return ".".join(self.simple_names)

    def nested(self, simple_name: str) -> Declared:
        """The name of a type declared inside this one."""
        return Declared(self.package_name, (*self.simple_names, simple_name))

    def peer(self, simple_name: str) -> Declared:
        """The name of a type declared next to this one."""
        return Declared(self.package_name, (*self.simple_names[:-1], simple_name))

    def enclosing(self) -> Declared | None:
        """The enclosing type, or `None` for a top-level type."""
        if len(self.simple_names) == 1:
            return None
        return Declared(self.package_name, self.simple_names[:-1])

    def top_level(self) -> Declared:
        return Declared(self.package_name, self.simple_names[:1])

    def raw(self) -> Declared:
        """This name without type arguments and without nullability."""
        if not self.type_arguments and not self.nullable:
            return self
        return Declared(self.package_name, self.simple_names)

    @override
    def parameterized_by(self, *type_arguments: Name) -> Declared:
        if self.type_arguments:
            raise NameModelError(f"The type '{self}' is already parameterized.")
        if not type_arguments:
            raise NameModelError(f"At least one type argument is needed to parameterize '{self}'.")
        for type_argument in type_arguments:
            if not isinstance(type_argument, _NameBase):
                raise NameModelError(f"Type argument '{type_argument!r}' of '{self}' is not a type name.")
        return dataclasses.replace(self, type_arguments=tuple(type_arguments))

    def as_nullable(self) -> Declared:
        return dataclasses.replace(self, nullable=True)

    def as_non_null(self) -> Declared:
        return dataclasses.replace(self, nullable=False)


@dataclass(frozen=True, eq=False)
class TypeVariable(_NameBase):
    """A type variable such as `T`, with optional bounds and declaration-site variance."""

    name: str
    bounds: tuple[Name, ...] = ()
    variance: str | None = None
    reified: bool = False
    nullable: bool = False

    def __post_init__(self) -> None:
        if not helper.is_name(self.name):
            raise NameModelError(f"'{self.name}' is not a valid type variable name.")
        if self.variance not in (None, "in", "out"):
            raise NameModelError(f"Unknown variance '{self.variance}' for type variable '{self.name}'.")
        object.__setattr__(self, "bounds", tuple(self.bounds))

    def with_bounds(self, *bounds: Name) -> TypeVariable:
        return dataclasses.replace(self, bounds=(*self.bounds, *bounds))

    def as_nullable(self) -> TypeVariable:
        return dataclasses.replace(self, nullable=True)


@dataclass(frozen=True, eq=False)
class Wildcard(_NameBase):
    """A use-site projection: `out T`, `in T` or the star projection `*`."""

    upper_bounds: tuple[Name, ...]
    lower_bounds: tuple[Name, ...] = ()

    def __post_init__(self) -> None:
        upper_bounds = tuple(self.upper_bounds)
        lower_bounds = tuple(self.lower_bounds)
        if len(upper_bounds) != 1:
            raise NameModelError(f"A wildcard needs exactly one upper bound, got {len(upper_bounds)}.")
        if len(lower_bounds) > 1:
            raise NameModelError(f"A wildcard accepts at most one lower bound, got {len(lower_bounds)}.")
        object.__setattr__(self, "upper_bounds", upper_bounds)
        object.__setattr__(self, "lower_bounds", lower_bounds)

    @classmethod
    def subtype_of(cls, upper_bound: Name) -> Wildcard:
        """`out upper_bound`."""
        return cls((upper_bound,))

    @classmethod
    def supertype_of(cls, lower_bound: Name) -> Wildcard:
        """`in lower_bound`."""
        return cls((NULLABLE_ANY,), (lower_bound,))


@dataclass(frozen=True, eq=False)
class Lambda(_NameBase):
    """A function type such as `(Int) -> String`, optionally with a receiver as in `String.(Int) -> Unit`."""

    parameters: tuple[Name, ...]
    return_type: Name
    receiver: Name | None = None
    nullable: bool = False
    suspending: bool = False

    def __post_init__(self) -> None:
        parameters = tuple(self.parameters)
        for part in (*parameters, self.return_type):
            if not isinstance(part, _NameBase):
                raise NameModelError(f"'{part!r}' of a function type is not a type name.")
        if self.receiver is not None and not isinstance(self.receiver, _NameBase):
            raise NameModelError(f"The receiver '{self.receiver!r}' of a function type is not a type name.")
        object.__setattr__(self, "parameters", parameters)

    @classmethod
    def of(cls, *parameters: Name, returns: Name | None = None, receiver: Name | None = None) -> Lambda:
        """Create a function type, returning `Unit` unless `returns` is given.

        Examples:
            >>> str(Lambda.of(INT, returns=STRING))
            '(kotlin.Int) -> kotlin.String'
        """
        return cls(parameters, UNIT if returns is None else returns, receiver)

    def as_nullable(self) -> Lambda:
        return dataclasses.replace(self, nullable=True)

    def as_suspending(self) -> Lambda:
        return dataclasses.replace(self, suspending=True)


Name = Primitive | ArrayName | Declared | TypeVariable | Wildcard | Lambda


def _nullable_suffix(nullable: bool) -> str:
    return "?" if nullable else ""


def canonical_text(name: Name) -> str:
    """The fully qualified, deterministic text of a name.

    Args:
        name: Any name variant.

    Returns:
        The canonical text, e.g. `kotlin.collections.Map<kotlin.String, out kotlin.Number>`.

    Raises:
        TypeError: If `name` is not one of the name variants.
    """
    match name:
        case Primitive():
            return f"{kotlin_types.KOTLIN_PACKAGE}.{name.simple_name}"
        case ArrayName(element=element, nullable=nullable):
            return f"{ARRAY.canonical_name}<{canonical_text(element)}>{_nullable_suffix(nullable)}"
        case Declared(type_arguments=type_arguments, nullable=nullable):
            text = name.canonical_name
            if type_arguments:
                text += "<" + ", ".join(canonical_text(argument) for argument in type_arguments) + ">"
            return text + _nullable_suffix(nullable)
        case TypeVariable(name=variable_name, nullable=nullable):
            return variable_name + _nullable_suffix(nullable)
        case Wildcard(upper_bounds=upper_bounds, lower_bounds=lower_bounds):
            if lower_bounds:
                return f"in {canonical_text(lower_bounds[0])}"
            if upper_bounds[0] == NULLABLE_ANY:
                return "*"
            return f"out {canonical_text(upper_bounds[0])}"
        case Lambda(parameters=parameters, return_type=return_type, receiver=receiver, nullable=nullable):
            text = "suspend " if name.suspending else ""
            if receiver is not None:
                receiver_text = canonical_text(receiver)
                text += f"({receiver_text})." if isinstance(receiver, Lambda) else f"{receiver_text}."
            text += "(" + ", ".join(canonical_text(parameter) for parameter in parameters) + ") -> "
            text += canonical_text(return_type)
            return f"({text})?" if nullable else text
        case _:
            raise TypeError(f"Unsupported name {name!r}.")


def is_name(value: object) -> bool:
    """Whether a value is one of the name variants."""
    return isinstance(value, _NameBase)


BOOLEAN = Primitive("boolean")
BYTE = Primitive("byte")
CHAR = Primitive("char")
DOUBLE = Primitive("double")
FLOAT = Primitive("float")
INT = Primitive("int")
LONG = Primitive("long")
SHORT = Primitive("short")
UNIT = Primitive("unit")

ANY = Declared(kotlin_types.KOTLIN_PACKAGE, ("Any",))
NULLABLE_ANY = ANY.as_nullable()
ARRAY = Declared(kotlin_types.KOTLIN_PACKAGE, ("Array",))
STRING = Declared(kotlin_types.KOTLIN_PACKAGE, ("String",))
STAR = Wildcard((NULLABLE_ANY,))
