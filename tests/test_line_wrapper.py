"""Unit tests for soft wrapping of long lines."""

import pytest

from ktpoet.line_wrapper import LineWrapper


def _wrapper(column_limit: int = 10) -> tuple[LineWrapper, list[str]]:
    out: list[str] = []
    return LineWrapper(out, "  ", column_limit), out


def test_wraps_when_text_does_not_fit():
    wrapper, out = _wrapper()
    wrapper.append("abc")
    wrapper.wrapping_space(1)
    wrapper.append("defghij")
    wrapper.close()
    assert "".join(out) == "abc\n  defghij"


def test_space_when_text_fits():
    wrapper, out = _wrapper()
    wrapper.append("abc")
    wrapper.wrapping_space(1)
    wrapper.append("def")
    wrapper.close()
    assert "".join(out) == "abc def"


def test_text_ending_exactly_at_limit_does_not_wrap():
    wrapper, out = _wrapper()
    wrapper.append("abc")
    wrapper.wrapping_space(1)
    wrapper.append("defghi")
    wrapper.close()
    assert "".join(out) == "abc defghi"


def test_zero_width_space():
    wrapper, out = _wrapper()
    wrapper.append("List<")
    wrapper.zero_width_space(2)
    wrapper.append("Int>")
    wrapper.close()
    assert "".join(out) == "List<Int>"

    wrapper, out = _wrapper()
    wrapper.append("List<")
    wrapper.zero_width_space(2)
    wrapper.append("LongName>")
    wrapper.close()
    assert "".join(out) == "List<\n    LongName>"


def test_text_between_wrap_points_is_kept_together():
    wrapper, out = _wrapper()
    wrapper.append("a,")
    wrapper.wrapping_space(1)
    wrapper.append("b")
    wrapper.append("c,")
    wrapper.wrapping_space(1)
    wrapper.append("dddddddd")
    wrapper.close()
    assert "".join(out) == "a, bc,\n  dddddddd"


def test_newline_decides_on_first_line_only():
    wrapper, out = _wrapper()
    wrapper.append("abc")
    wrapper.wrapping_space(1)
    wrapper.append("def\nghijklmnopq")
    wrapper.close()
    assert "".join(out) == "abc def\nghijklmnopq"
    assert wrapper.column == 11


def test_closed_wrapper_rejects_text():
    wrapper, _ = _wrapper()
    wrapper.close()
    with pytest.raises(ValueError, match="closed"):
        wrapper.append("a")
