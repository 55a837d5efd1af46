# termi/core/BracketMatcher.py
"""Bracket matching across lines.

The scan is purely textual: brackets inside strings or comments count like any other, which can
produce surprising pairs in source code. Only ``()``, ``[]`` and ``{}`` are matched.
"""

from typing import Optional, Sequence

from termi.core.TextBuffer import Position


BRACKET_PAIRS: dict[str, str] = {
    "(": ")", "[": "]", "{": "}",
    ")": "(", "]": "[", "}": "{",
}
OPENING_BRACKETS = "([{"


def find_match(lines: Sequence[str], row: int, col: int) -> Optional[Position]:
    """Searches for the bracket balancing the one at (row, col).

    An opening bracket is matched by scanning forward, a closing one by scanning backward, while a
    depth counter tracks nested brackets of the same type.

    Args:
        lines: Buffer lines.
        row: Row of the bracket to start from.
        col: Column of the bracket to start from.

    Returns:
        Optional[Position]: (row, col) of the matching bracket, or None when the character is
        not a bracket or the buffer ends before the pair balances.
    """
    if not (0 <= row < len(lines) and 0 <= col < len(lines[row])):
        return None

    bracket = lines[row][col]
    target = BRACKET_PAIRS.get(bracket)
    if target is None:
        return None

    depth = 1
    if bracket in OPENING_BRACKETS:
        cur_row, cur_col = row, col + 1
        while cur_row < len(lines):
            line = lines[cur_row]
            while cur_col < len(line):
                ch = line[cur_col]
                if ch == bracket:
                    depth += 1
                elif ch == target:
                    depth -= 1
                    if depth == 0:
                        return cur_row, cur_col
                cur_col += 1
            cur_row += 1
            cur_col = 0
    else:
        cur_row, cur_col = row, col - 1
        while cur_row >= 0:
            line = lines[cur_row]
            while cur_col >= 0:
                ch = line[cur_col]
                if ch == bracket:
                    depth += 1
                elif ch == target:
                    depth -= 1
                    if depth == 0:
                        return cur_row, cur_col
                cur_col -= 1
            cur_row -= 1
            if cur_row >= 0:
                cur_col = len(lines[cur_row]) - 1

    return None


def match_at_cursor(lines: Sequence[str], row: int, col: int) -> Optional[tuple[Position, Position]]:
    """Finds the bracket pair highlighted for a cursor at (row, col).

    The character under the cursor is tried first, then the one to its left, so a cursor placed
    just after a bracket still highlights it.

    Returns:
        The pair ``(bracket, match)`` or None.
    """
    for candidate in (col, col - 1):
        if candidate < 0:
            continue
        match = find_match(lines, row, candidate)
        if match is not None:
            return (row, candidate), match
    return None
