"""Helper functionality that is used in other modules of this package."""

from __future__ import annotations

from ktpoet import kotlin_types

# Characters with a dedicated escape sequence inside Kotlin string and character literals.
_ESCAPE_SEQUENCES = {
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\r": "\\r",
    "\\": "\\\\",
}


def is_keyword(name: str) -> bool:
    """Whether a name is a hard keyword of the generated language."""
    return name in kotlin_types.KEYWORDS


def is_identifier(name: str) -> bool:
    """Whether a string is shaped like an identifier, keywords included.

    Examples:
        >>> is_identifier("greet")
        True
        >>> is_identifier("object")
        True
        >>> is_identifier("1st")
        False
    """
    return name.isidentifier()


def is_name(name: str) -> bool:
    """Whether a string can be used as a plain identifier, i.e. it is not a keyword."""
    return is_identifier(name) and not is_keyword(name)


def escape_if_keyword(name: str) -> str:
    """Escape a name with backticks if it is a keyword.

    E.g. 'object' becomes '`object`', 'greet' stays 'greet'.

    Args:
        name (str): The original name.

    Returns:
        str: The escaped name.
    """
    if is_keyword(name):
        return f"`{name}`"
    return name


def escape_segments(dotted_name: str) -> str:
    """Escape every keyword segment of a dotted name.

    Examples:
        >>> escape_segments("com.example.in.Reader")
        'com.example.`in`.Reader'
    """
    return ".".join(escape_if_keyword(segment) for segment in dotted_name.split("."))


def _unicode_escape(character: str) -> str:
    """Escape a single code point as one or two UTF-16 `\\uXXXX` units.

    Code points outside the basic multilingual plane are written as a complete surrogate pair.
    """
    code_point = ord(character)
    if code_point <= 0xFFFF:
        return f"\\u{code_point:04x}"

    code_point -= 0x10000
    high = 0xD800 + (code_point >> 10)
    low = 0xDC00 + (code_point & 0x3FF)
    return f"\\u{high:04x}\\u{low:04x}"


def _escape_character(character: str, quote: str) -> str:
    if character in _ESCAPE_SEQUENCES:
        return _ESCAPE_SEQUENCES[character]

    if character == quote:
        return f"\\{quote}"

    code_point = ord(character)
    if code_point < 0x20 or code_point >= 0x7F:
        return _unicode_escape(character)

    return character


def string_literal_with_quotes(value: str) -> str:
    """Render a string value as a double-quoted literal.

    Quotes, backslashes and `$` are escaped, as well as control characters and non-ASCII characters
    (as `\\uXXXX`), so that the literal reproduces `value` exactly.

    Args:
        value (str): The raw string.

    Returns:
        str: The quoted and escaped literal.

    Examples:
        >>> string_literal_with_quotes('say "hi"')
        '"say \\\\"hi\\\\""'
        >>> string_literal_with_quotes("$total")
        '"\\\\$total"'
    """
    escaped = []
    for character in value:
        if character == "$":
            escaped.append("\\$")
        else:
            escaped.append(_escape_character(character, '"'))
    return '"' + "".join(escaped) + '"'
