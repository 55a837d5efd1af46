# tests/test_core/test_text_buffer.py
"""TextBuffer Tests
========================

Unit tests for the line buffer's edit primitives:

1. Character and multi-line insertion, auto-closing delimiters.
2. Backspace/Delete including line joins and buffer boundaries.
3. Line splitting with smart indentation.
4. Word motions, word deletion and word bounds.
5. Range extraction/deletion, search and word collection.
"""

import pytest

from termi.core.Languages import LANGUAGES, PLAIN
from termi.core.TextBuffer import CharClass, TextBuffer, char_class


def test_buffer_is_never_empty():
    assert TextBuffer().lines == [""]
    assert TextBuffer([]).lines == [""]
    buf = TextBuffer(["a"])
    buf.restore(())
    assert buf.lines == [""]


@pytest.mark.parametrize(
    "ch, expected",
    [
        (" ", CharClass.WHITESPACE),
        ("\t", CharClass.WHITESPACE),
        ("a", CharClass.WORD),
        ("_", CharClass.WORD),
        ("7", CharClass.WORD),
        ("é", CharClass.WORD),
        (".", CharClass.PUNCTUATION),
        ("{", CharClass.PUNCTUATION),
        ("~", CharClass.PUNCTUATION),
    ],
)
def test_char_class(ch, expected):
    assert char_class(ch) is expected


# --- insertion -------------------------------------------------------------
def test_insert_char_plain():
    buf = TextBuffer(["ac"])
    assert buf.insert_char((0, 1), "b") == (0, 2)
    assert buf.lines == ["abc"]


@pytest.mark.parametrize("opener, closer", [("(", ")"), ("[", "]"), ("{", "}"), ('"', '"'), ("'", "'")])
def test_insert_char_auto_closes(opener, closer):
    buf = TextBuffer(["x"])
    assert buf.insert_char((0, 1), opener) == (0, 2)
    assert buf.lines == ["x" + opener + closer]


def test_insert_char_auto_close_even_when_balanced():
    buf = TextBuffer(["f)"])
    buf.insert_char((0, 1), "(")
    assert buf.lines == ["f())"]


def test_insert_text_single_line():
    buf = TextBuffer(["hello"])
    assert buf.insert_text((0, 5), " world") == (0, 11)
    assert buf.lines == ["hello world"]


def test_insert_text_multi_line_keeps_remainder():
    buf = TextBuffer(["abXY"])
    end = buf.insert_text((0, 2), "1\n2\n3")
    assert buf.lines == ["ab1", "2", "3XY"]
    assert end == (2, 1)


def test_insert_text_normalizes_crlf():
    buf = TextBuffer([""])
    buf.insert_text((0, 0), "a\r\nb\rc")
    assert buf.lines == ["a", "b", "c"]


# --- deletion --------------------------------------------------------------
def test_delete_backward_within_line():
    buf = TextBuffer(["abc"])
    assert buf.delete_backward((0, 2)) == (0, 1)
    assert buf.lines == ["ac"]


def test_delete_backward_joins_lines():
    buf = TextBuffer(["ab", "cd"])
    assert buf.delete_backward((1, 0)) == (0, 2)
    assert buf.lines == ["abcd"]


def test_delete_backward_at_buffer_start_is_noop():
    buf = TextBuffer(["ab"])
    assert buf.delete_backward((0, 0)) is None
    assert buf.lines == ["ab"]


def test_delete_forward_joins_and_stops_at_end():
    buf = TextBuffer(["ab", "cd"])
    assert buf.delete_forward((0, 2)) == (0, 2)
    assert buf.lines == ["abcd"]
    assert buf.delete_forward((0, 4)) is None


def test_backspace_inverts_insert_char_without_auto_close():
    buf = TextBuffer(["hello"])
    pos = buf.insert_char((0, 2), "x", auto_close=False)
    buf.delete_backward(pos)
    assert buf.lines == ["hello"]


# --- split line / indentation ----------------------------------------------
def test_split_line_plain_keeps_indent():
    buf = TextBuffer(["    foo bar"])
    assert buf.split_line((0, 7), PLAIN) == (1, 4)
    assert buf.lines == ["    foo", "     bar"]


def test_split_line_python_block_adds_indent():
    buf = TextBuffer(["def f():"])
    assert buf.split_line((0, 8), LANGUAGES["python"]) == (1, 4)
    assert buf.lines == ["def f():", "    "]


def test_split_line_rust_brace():
    buf = TextBuffer(["fn main() {}"])
    pos = buf.split_line((0, 11), LANGUAGES["rust"])
    assert buf.lines == ["fn main() {", "    }"]
    assert pos == (1, 4)


def test_split_line_guarded_prefix_with_terminator():
    buf = TextBuffer(["if (x) return;"])
    buf.split_line((0, 14), LANGUAGES["c"])
    assert buf.lines[1] == ""


def test_split_line_at_column_zero():
    buf = TextBuffer(["abc"])
    assert buf.split_line((0, 0)) == (1, 0)
    assert buf.lines == ["", "abc"]


def test_indent_and_unindent():
    buf = TextBuffer(["x"])
    assert buf.indent((0, 0)) == (0, 4)
    assert buf.lines == ["    x"]
    assert buf.unindent((0, 5)) == (0, 1)
    assert buf.lines == ["x"]
    assert buf.unindent((0, 1)) is None


def test_unindent_removes_single_tab():
    buf = TextBuffer(["\t\tx"])
    assert buf.unindent((0, 2)) == (0, 1)
    assert buf.lines == ["\tx"]


# --- words -----------------------------------------------------------------
def test_word_right_and_left():
    buf = TextBuffer(["foo.bar  baz"])
    assert buf.word_right((0, 0)) == (0, 3)
    assert buf.word_right((0, 3)) == (0, 4)
    assert buf.word_right((0, 7)) == (0, 12)
    assert buf.word_left((0, 12)) == (0, 9)
    assert buf.word_left((0, 9)) == (0, 4)
    assert buf.word_left((0, 4)) == (0, 3)


def test_word_motion_wraps_lines():
    buf = TextBuffer(["ab", "cd"])
    assert buf.word_right((0, 2)) == (1, 0)
    assert buf.word_left((1, 0)) == (0, 2)
    assert buf.word_right((1, 2)) == (1, 2)
    assert buf.word_left((0, 0)) == (0, 0)


def test_word_motion_always_progresses_over_symbols():
    buf = TextBuffer(["a ~~ b"])
    assert buf.word_right((0, 1)) == (0, 3)


def _run_starts(line):
    """Columns where a word run or a symbol begins."""
    starts = []
    for col, ch in enumerate(line):
        cls = char_class(ch)
        if cls is CharClass.WHITESPACE:
            continue
        if col == 0 or cls is CharClass.PUNCTUATION or char_class(line[col - 1]) is not cls:
            starts.append(col)
    return starts


@pytest.mark.parametrize(
    "line",
    ["foo.bar  baz", "let x_1 = f(a, b);", "  a ~~ b", "if (x) { return; }", "über straße"],
)
def test_word_left_undoes_word_right(line):
    buf = TextBuffer([line])
    for col in _run_starts(line):
        forward = buf.word_right((0, col))
        assert forward != (0, col)
        assert buf.word_left(forward) == (0, col)


def test_word_left_undoes_word_right_across_lines():
    buf = TextBuffer(["alpha", "beta"])
    assert buf.word_left(buf.word_right((0, 5))) == (0, 5)
    assert buf.word_left(buf.word_right((0, 0))) == (0, 0)


def test_delete_word_backward():
    buf = TextBuffer(["foo bar"])
    assert buf.delete_word_backward((0, 7)) == (0, 4)
    assert buf.lines == ["foo "]
    assert buf.delete_word_backward((0, 4)) == (0, 3)
    assert buf.lines == ["foo"]


def test_delete_word_backward_joins_at_line_start():
    buf = TextBuffer(["ab", "cd"])
    assert buf.delete_word_backward((1, 0)) == (0, 2)
    assert buf.lines == ["abcd"]


def test_delete_word_forward_takes_trailing_blanks():
    buf = TextBuffer(["foo   bar"])
    assert buf.delete_word_forward((0, 0)) == (0, 0)
    assert buf.lines == ["bar"]


def test_delete_word_forward_at_end_of_buffer():
    assert TextBuffer(["x"]).delete_word_forward((0, 1)) is None


def test_word_bounds():
    buf = TextBuffer(["let foo_bar = 1;"])
    assert buf.word_bounds(0, 5) == (4, 11)
    assert buf.word_bounds(0, 12) == (12, 13)
    assert buf.word_bounds(0, 40) == (15, 16)
    assert TextBuffer([""]).word_bounds(0, 0) == (0, 0)


def test_word_prefix():
    buf = TextBuffer(["x = pri"])
    assert buf.word_prefix((0, 7)) == ("pri", 4)
    assert buf.word_prefix((0, 4)) == ("", 4)


# --- ranges, search, words ---------------------------------------------------
def test_text_range_and_delete_range_multi_line():
    buf = TextBuffer(["hello", "big", "world"])
    assert buf.text_range((0, 3), (2, 2)) == "lo\nbig\nwo"
    assert buf.delete_range((0, 3), (2, 2)) == (0, 3)
    assert buf.lines == ["helrld"]


def test_replace_span():
    buf = TextBuffer(["x = pri"])
    assert buf.replace_span(0, 4, 7, "print") == (0, 9)
    assert buf.lines == ["x = print"]


def test_find_all_overlapping():
    buf = TextBuffer(["aaa", "baa"])
    assert buf.find_all("aa") == [(0, 0), (0, 1), (1, 1)]
    assert buf.find_all("") == []


def test_collect_words_minimum_length():
    buf = TextBuffer(["a bb ccc", "dd_e x9"])
    assert buf.collect_words() == {"bb", "ccc", "dd_e", "x9"}


def test_clamp():
    buf = TextBuffer(["abc", "d"])
    assert buf.clamp((5, 5)) == (1, 1)
    assert buf.clamp((-1, -3)) == (0, 0)
    assert buf.clamp((0, 10)) == (0, 3)
