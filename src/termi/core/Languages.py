# termi/core/Languages.py
"""Languages Module for the termi Editor
=======================================
Static per-language tables consumed by the tokenizer and by smart indentation.

Every supported language is described by one frozen :class:`Language` record: its keyword set,
its line-comment marker(s) and the plain-data rules deciding whether a line "opens a block"
(so that the next line is indented one level deeper). Behaviour is selected by looking a record
up by tag; nothing here is subclassed.

Detection goes through the file extension first. Extensions that are not in the table are
resolved through Pygments' lexer registry, whose aliases are matched against the known tags.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound


INDENT_WIDTH = 4


@dataclass(frozen=True)
class Language:
    """One row of the language table."""

    tag: str
    keywords: frozenset[str] = field(default_factory=frozenset)
    comment_markers: tuple[str, ...] = ()
    # Trimmed line ends with one of these -> next line is indented.
    indent_suffixes: tuple[str, ...] = ()
    # Trimmed line starts with one of these -> next line is indented.
    indent_prefixes: tuple[str, ...] = ()
    # Like indent_prefixes, but only when the line holds no statement terminator.
    guarded_prefixes: tuple[str, ...] = ()
    statement_terminator: str = ";"

    @property
    def is_plain(self) -> bool:
        return not self.keywords and not self.comment_markers

    def opens_block(self, trimmed_line: str) -> bool:
        """Returns True when a line with this (left-trimmed) content opens a block."""
        if not trimmed_line:
            return False
        if trimmed_line.endswith(self.indent_suffixes):
            return True
        if trimmed_line.startswith(self.indent_prefixes):
            return True
        if self.guarded_prefixes and trimmed_line.startswith(self.guarded_prefixes):
            return self.statement_terminator not in trimmed_line
        return False


_C_FAMILY_BLOCK_RULES = {
    "indent_suffixes": ("{", "=>"),
    "indent_prefixes": (
        "fn ", "impl ", "trait ", "struct ", "enum ", "match ", "unsafe ", "loop ",
        "function ", "class ",
    ),
    "guarded_prefixes": ("if ", "for ", "while "),
}

_C_KEYWORDS = frozenset({
    "int", "char", "float", "double", "void", "struct", "enum", "if", "else", "for",
    "while", "return", "break", "continue", "switch", "case", "default", "typedef",
    "static", "const", "extern", "volatile", "goto",
})

PLAIN = Language(tag="plain")

LANGUAGES: dict[str, Language] = {
    "rust": Language(
        tag="rust",
        keywords=frozenset({
            "fn", "let", "mut", "const", "struct", "enum", "impl", "trait", "use", "mod", "pub",
            "if", "else", "match", "for", "while", "loop", "return", "break", "continue",
            "true", "false", "self", "Self", "super", "as", "dyn", "unsafe",
        }),
        comment_markers=("//",),
        **_C_FAMILY_BLOCK_RULES,
    ),
    "javascript": Language(
        tag="javascript",
        keywords=frozenset({
            "function", "const", "let", "var", "if", "else", "for", "while", "return", "class",
            "extends", "import", "export", "default", "async", "await", "true", "false", "null",
            "undefined", "this", "new", "typeof", "instanceof",
        }),
        comment_markers=("//",),
        **_C_FAMILY_BLOCK_RULES,
    ),
    "python": Language(
        tag="python",
        keywords=frozenset({
            "def", "class", "if", "else", "elif", "for", "while", "return", "import", "from",
            "as", "try", "except", "finally", "with", "lambda", "True", "False", "None",
            "and", "or", "not", "in", "is",
        }),
        comment_markers=("#",),
        indent_suffixes=(":",),
        indent_prefixes=(
            "if ", "elif ", "else ", "for ", "while ", "def ", "class ", "try:", "except ",
            "finally:", "with ", "async ",
        ),
    ),
    "c": Language(tag="c", keywords=_C_KEYWORDS, comment_markers=("//",), **_C_FAMILY_BLOCK_RULES),
    "cpp": Language(tag="cpp", keywords=_C_KEYWORDS, comment_markers=("//",), **_C_FAMILY_BLOCK_RULES),
    "java": Language(
        tag="java",
        keywords=frozenset({
            "class", "interface", "public", "private", "protected", "static", "final", "void",
            "int", "String", "if", "else", "for", "while", "return", "new", "this", "super",
            "extends", "implements", "import", "package",
        }),
        comment_markers=("//",),
        **_C_FAMILY_BLOCK_RULES,
    ),
}

EXTENSIONS: dict[str, str] = {
    "rs": "rust",
    "js": "javascript", "jsx": "javascript", "mjs": "javascript",
    "py": "python", "pyw": "python",
    "c": "c",
    "cpp": "cpp", "cc": "cpp", "cxx": "cpp", "hpp": "cpp", "hxx": "cpp",
    "java": "java",
}

# Pygments lexer aliases that correspond to a table entry.
_PYGMENTS_ALIASES: dict[str, str] = {
    "python": "python", "python3": "python", "py": "python",
    "rust": "rust", "rs": "rust",
    "javascript": "javascript", "js": "javascript",
    "c": "c",
    "cpp": "cpp", "c++": "cpp",
    "java": "java",
}


def get_language(tag: Optional[str]) -> Language:
    """Looks a language up by tag, falling back to plain text."""
    if not tag:
        return PLAIN
    return LANGUAGES.get(tag, PLAIN)


def detect_language(path: Optional[str]) -> Language:
    """Selects the language table entry for a file path.

    The extension table is authoritative. For anything else the Pygments lexer registry is asked
    for a lexer by filename and its aliases are mapped onto the known tags.

    Args:
        path: File path or name. ``None`` (unnamed buffer) yields plain text.

    Returns:
        Language: The matching table row, or ``PLAIN``.
    """
    if not path:
        return PLAIN

    _, ext = os.path.splitext(path)
    tag = EXTENSIONS.get(ext.lower().lstrip("."))
    if tag:
        return get_language(tag)

    try:
        lexer = get_lexer_for_filename(os.path.basename(path))
    except ClassNotFound:
        logging.debug(f"Languages: no lexer registered for '{path}', using plain text.")
        return PLAIN

    for alias in lexer.aliases:
        mapped = _PYGMENTS_ALIASES.get(alias)
        if mapped:
            logging.debug(f"Languages: '{path}' mapped to '{mapped}' via lexer '{lexer.name}'.")
            return get_language(mapped)

    logging.debug(f"Languages: lexer '{lexer.name}' for '{path}' has no table entry.")
    return PLAIN


def leading_indent_width(line: str) -> int:
    """Width of a line's leading whitespace (a tab counts as one indent unit)."""
    width = 0
    for ch in line:
        if ch == " ":
            width += 1
        elif ch == "\t":
            width += INDENT_WIDTH
        else:
            break
    return width


def next_line_indent(previous_line: str, language: Language) -> int:
    """Indentation, in columns, for a line opened right after ``previous_line``."""
    width = leading_indent_width(previous_line)
    if language.opens_block(previous_line.lstrip()):
        width += INDENT_WIDTH
    return width
