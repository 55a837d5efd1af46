# tests/test_core/test_languages.py
import pytest

from termi.core.Languages import (
    LANGUAGES,
    PLAIN,
    detect_language,
    get_language,
    leading_indent_width,
    next_line_indent,
)


@pytest.mark.parametrize(
    "path, tag",
    [
        ("main.rs", "rust"),
        ("app.JS", "javascript"),
        ("/tmp/x/script.py", "python"),
        ("a.c", "c"),
        ("a.hpp", "cpp"),
        ("Main.java", "java"),
        ("notes.txt", "plain"),
        ("Makefile", "plain"),
        (None, "plain"),
    ],
)
def test_detect_language(path, tag):
    assert detect_language(path).tag == tag


def test_detect_language_through_pygments_registry():
    # ".pyi" is not in the extension table; Pygments knows it as Python.
    assert detect_language("stubs.pyi") is LANGUAGES["python"]


def test_get_language_falls_back_to_plain():
    assert get_language("python") is LANGUAGES["python"]
    assert get_language("cobol") is PLAIN
    assert get_language(None) is PLAIN


def test_plain_language_properties():
    assert PLAIN.is_plain
    assert not LANGUAGES["python"].is_plain
    assert not PLAIN.opens_block("if x:")


def test_leading_indent_width():
    assert leading_indent_width("    x") == 4
    assert leading_indent_width("\t x") == 5
    assert leading_indent_width("") == 0


@pytest.mark.parametrize(
    "tag, line, expected",
    [
        ("python", "    if ready:", 8),
        ("python", "    return x", 4),
        ("rust", "fn main() {", 4),
        ("rust", "match value", 4),
        ("javascript", "const f = () =>", 4),
        ("c", "for (;;)", 0),
        ("c", "while (x)", 4),
        ("java", "}", 0),
    ],
)
def test_next_line_indent(tag, line, expected):
    assert next_line_indent(line, LANGUAGES[tag]) == expected
