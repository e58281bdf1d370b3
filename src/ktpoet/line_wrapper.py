"""Column-aware output that turns soft-wrap points into line breaks when a line would get too long."""

from __future__ import annotations


class LineWrapper:
    """Writes text to a list of chunks, wrapping at the most recent soft-wrap point when needed.

    Text that follows a soft-wrap point is held back until it is known whether it fits on the current line.
    If it does not, the soft-wrap point becomes a line break followed by the indentation and the line prefix
    (e.g. ` * ` inside KDoc) that were requested together with the soft-wrap point. Text between two soft-wrap
    points is never split.
    """

    def __init__(self, out: list[str], indent: str, column_limit: int) -> None:
        """Initialize the wrapper.

        Args:
            out (list[str]): The chunks of text that are written.
            indent (str): A single indentation unit.
            column_limit (int): The maximal number of characters per line.
        """
        self._out = out
        self._indent = indent
        self.column_limit = column_limit
        self.column = 0
        self._closed = False

        self._buffer: list[str] = []
        # The pending soft-wrap point: whether it is a space, and the indent level and prefix after a break.
        self._pending_space: bool | None = None
        self._pending_indent_level = -1
        self._pending_prefix = ""

    @property
    def has_pending_wrap(self) -> bool:
        return self._pending_space is not None

    def append(self, text: str) -> None:
        """Emit text that may contain line breaks, but that does not itself wrap."""
        if self._closed:
            raise ValueError("Cannot append to a closed line wrapper.")

        if self._pending_space is not None:
            newline_position = text.find("\n")

            # The text still fits, keep it buffered until the next soft-wrap point or line break.
            if newline_position == -1 and self.column + len(text) <= self.column_limit:
                self._buffer.append(text)
                self.column += len(text)
                return

            # Wrap if the first line of the text does not fit.
            wrap = newline_position == -1 or self.column + newline_position > self.column_limit
            self._flush(wrap)

        self._out.append(text)
        last_newline = text.rfind("\n")
        if last_newline != -1:
            self.column = len(text) - last_newline - 1
        else:
            self.column += len(text)

    def wrapping_space(self, indent_level: int, prefix: str = "") -> None:
        """Emit a space, or a line break if the following text does not fit.

        Args:
            indent_level (int): The indentation of the continuation line, in units.
            prefix (str): Text written after the indentation of the continuation line.
        """
        if self._closed:
            raise ValueError("Cannot append to a closed line wrapper.")

        if self._pending_space is not None:
            self._flush(False)
        self._pending_space = True
        self._pending_indent_level = indent_level
        self._pending_prefix = prefix
        self.column += 1

    def zero_width_space(self, indent_level: int, prefix: str = "") -> None:
        """Like `wrapping_space`, but nothing is emitted if the following text fits."""
        if self._closed:
            raise ValueError("Cannot append to a closed line wrapper.")

        if self._pending_space is not None:
            self._flush(False)
        self._pending_space = False
        self._pending_indent_level = indent_level
        self._pending_prefix = prefix

    def close(self) -> None:
        """Flush any pending text, the wrapper cannot be used afterwards."""
        if self._pending_space is not None:
            self._flush(False)
        self._closed = True

    def _flush(self, wrap: bool) -> None:
        """Write the pending soft-wrap point and the buffered text."""
        if wrap:
            self._out.append("\n")
            continuation = self._indent * self._pending_indent_level + self._pending_prefix
            self._out.append(continuation)
            # The column restarts after the continuation, followed by the buffered text.
            self.column = len(continuation) + sum(len(chunk) for chunk in self._buffer)
        elif self._pending_space:
            self._out.append(" ")

        self._out.extend(self._buffer)
        self._buffer.clear()
        self._pending_space = None
        self._pending_indent_level = -1
        self._pending_prefix = ""
