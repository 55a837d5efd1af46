# termi/utils/storage.py
"""Plain-text file storage.

`read_text` detects the encoding with chardet and falls back through UTF-8 and latin-1;
`write_text` always writes UTF-8 with ``\\n`` line endings and a single trailing newline.
Errors are not handled here: callers receive ``OSError`` or ``UnicodeDecodeError`` and decide
what to tell the user.
"""

import logging
from pathlib import Path
from typing import Iterable, Union

import chardet

PathLike = Union[str, Path]

CHARDET_SAMPLE_SIZE = 20 * 1024
CHARDET_MIN_CONFIDENCE = 0.75


def _candidate_encodings(sample: bytes) -> list[str]:
    result = chardet.detect(sample)
    guess = result.get("encoding")
    confidence = result.get("confidence") or 0.0
    logging.debug(f"storage: chardet guessed '{guess}' with confidence {confidence:.2f}.")

    candidates = []
    if guess and confidence >= CHARDET_MIN_CONFIDENCE:
        candidates.append(guess)
    for fallback in ("utf-8", "latin-1"):
        if fallback not in candidates:
            candidates.append(fallback)
    return candidates


def read_text(path: PathLike) -> list[str]:
    """Reads a file into buffer lines.

    Args:
        path: File to read.

    Returns:
        list[str]: The file's lines without terminators; ``[""]`` for an empty file.

    Raises:
        OSError: The file cannot be opened or read.
    """
    raw = Path(path).read_bytes()
    if not raw:
        return [""]

    for encoding in _candidate_encodings(raw[:CHARDET_SAMPLE_SIZE]):
        try:
            text = raw.decode(encoding)
        except (UnicodeDecodeError, LookupError) as e_decode:
            logging.warning(f"storage: decoding '{path}' as '{encoding}' failed: {e_decode}")
            continue
        logging.info(f"storage: read '{path}' using encoding '{encoding}'.")
        return _split_lines(text)

    # latin-1 decodes any byte sequence, so this is unreachable in practice.
    return _split_lines(raw.decode("utf-8", errors="replace"))


def _split_lines(text: str) -> list[str]:
    """Splits on ``\\n`` only, dropping one ``\\r`` before it and the empty piece after a final newline."""
    lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
    if len(lines) > 1 and lines[-1] == "":
        lines.pop()
    return lines


def write_text(path: PathLike, lines: Iterable[str]) -> None:
    """Writes buffer lines to ``path`` as UTF-8.

    A buffer consisting of one empty line is written as an empty file.

    Raises:
        OSError: The file cannot be written.
    """
    content = "\n".join(lines)
    if content:
        content += "\n"
    Path(path).write_text(content, encoding="utf-8")
    logging.debug(f"storage: wrote {len(content)} chars to '{path}'.")
