"""Line and indentation state of the source text that is being emitted."""

from __future__ import annotations

from dataclasses import dataclass

from ktpoet import kotlin_types
from ktpoet.line_wrapper import LineWrapper


@dataclass
class _Statement:
    """An open statement.

    Attributes:
        indent_level: The indent level the statement started at.
        lines: The number of line breaks it contains so far.
        continued: Whether the continuation indentation is applied.
        block: Whether an explicit indent was opened inside the statement, e.g. for a lambda body. Such a
            statement is not given continuation indentation any more.
    """

    indent_level: int
    lines: int = 0
    continued: bool = False
    block: bool = False


class CodeWriter:
    """Accumulates source text, tracking indentation, statements and soft-wrap points.

    Indentation is written lazily when the first text of a line arrives, so blank lines stay empty and lines
    never carry trailing whitespace. The lines after the first line of a statement are indented by one extra
    unit (unless the statement opens an indented block such as a lambda body), and a soft-wrap point inside a
    statement continues one unit deeper than the line the statement started on. Inside KDoc and comments, a
    soft-wrap point continues at the current indentation, after the comment prefix.
    """

    def __init__(
        self,
        indent: str = kotlin_types.DEFAULT_INDENT,
        column_limit: int = kotlin_types.DEFAULT_COLUMN_LIMIT,
    ) -> None:
        """Initialize the writer.

        Args:
            indent (str): A single indentation unit.
            column_limit (int): The column at which soft-wrap points turn into line breaks.
        """
        self._chunks: list[str] = []
        self._out = LineWrapper(self._chunks, indent, column_limit)
        self._indent = indent
        self.indent_level = 0

        self._kdoc = False
        self._comment = False
        self._trailing_newline = True
        self._newlines_in_a_row = 0
        self._statements: list[_Statement] = []

    def indent(self, levels: int = 1) -> CodeWriter:
        if self._statements and not self._statements[-1].block:
            statement = self._statements[-1]
            statement.block = True
            if statement.continued:
                # The block replaces the continuation indentation.
                statement.continued = False
                self.indent_level -= 1
        self.indent_level += levels
        return self

    def unindent(self, levels: int = 1) -> CodeWriter:
        if self.indent_level - levels < 0:
            raise ValueError(f"Cannot unindent {levels} from {self.indent_level}.")
        self.indent_level -= levels
        return self

    def begin_statement(self) -> CodeWriter:
        self._statements.append(_Statement(self.indent_level))
        return self

    def end_statement(self) -> CodeWriter:
        if not self._statements:
            raise ValueError("Statement end has no matching statement begin.")
        statement = self._statements.pop()
        if statement.continued:
            self.unindent()
        return self

    def stash_statements(self) -> list[_Statement]:
        """Detach the open statements, e.g. while a nested type is emitted in the middle of a statement."""
        statements = self._statements
        self._statements = []
        return statements

    def restore_statements(self, statements: list[_Statement]) -> None:
        self._statements = statements

    def _continuation(self) -> tuple[int, str]:
        """The indent level and the line prefix of a line that continues after a soft-wrap point."""
        if self._kdoc:
            return self.indent_level, " * "
        if self._comment:
            return self.indent_level, "// "
        if self._statements and not self._statements[-1].block:
            return self._statements[-1].indent_level + 1, ""
        return self.indent_level + 1, ""

    def wrapping_space(self) -> CodeWriter:
        """A space that turns into a line break if the following text does not fit on the line."""
        self._out.wrapping_space(*self._continuation())
        return self

    def zero_width_space(self) -> CodeWriter:
        """A line break opportunity that emits nothing if the following text fits on the line."""
        self._out.zero_width_space(*self._continuation())
        return self

    def begin_kdoc(self) -> None:
        self._kdoc = True

    def end_kdoc(self) -> None:
        self._kdoc = False

    def begin_comment(self) -> None:
        self._comment = True

    def end_comment(self) -> None:
        self._comment = False

    def emit(self, text: str) -> CodeWriter:
        """Emit text, indenting every line that starts within it.

        Args:
            text (str): The text, which may contain line breaks.

        Returns:
            CodeWriter: This writer.
        """
        first = True
        for line in text.split("\n"):
            if not first:
                if (self._kdoc or self._comment) and self._trailing_newline:
                    # An empty line inside a comment still gets its prefix.
                    self._emit_indentation()
                    self._out.append(" *" if self._kdoc else "//")
                self._out.append("\n")
                self._trailing_newline = True
                self._newlines_in_a_row += 1
                if self._statements:
                    statement = self._statements[-1]
                    if statement.lines == 0 and not statement.block:
                        # Continuation lines of a statement are indented by one extra unit.
                        self.indent_level += 1
                        statement.continued = True
                    statement.lines += 1
            first = False

            if not line:
                continue

            if self._trailing_newline:
                self._emit_indentation()
                if self._kdoc:
                    self._out.append(" * ")
                elif self._comment:
                    self._out.append("// ")

            self._out.append(line)
            self._trailing_newline = False
            self._newlines_in_a_row = 0
        return self

    def ensure_newline(self) -> CodeWriter:
        """Terminate the current line, unless nothing was written on it yet."""
        if not self._trailing_newline and self._chunks_written():
            self.emit("\n")
        return self

    def blank_line(self) -> CodeWriter:
        """Emit a blank line after a finished line; repeated requests collapse into one blank line."""
        if self._newlines_in_a_row == 1:
            self.emit("\n")
        return self

    def _chunks_written(self) -> bool:
        return bool(self._chunks) or self._out.has_pending_wrap

    def _emit_indentation(self) -> None:
        self._out.append(self._indent * self.indent_level)

    def text(self) -> str:
        """Finish writing and return the accumulated text."""
        self._out.close()
        return "".join(self._chunks)
