"""Content normalization ahead of chunking.

Normalization is deliberately lossy: whitespace, comment markers and case are
removed so that reformatted copies of the same code still produce identical
chunks.
"""

from pathlib import Path
from typing import Iterable

from chunkdup.exceptions import FileOperationError

# Removed in this order after whitespace has been stripped out
COMMENT_MARKERS = ("//", "/*", "*/", "#")

# Unicode White_Space; the \x1c-\x1f separators are kept
WHITESPACE = (
    "\t\n\x0b\x0c\r\x20\x85\xa0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000"
)


def normalize_line(line: str) -> str:
    """Return the canonical form of a single line (may be empty)."""
    cleaned = line.strip(WHITESPACE).replace(" ", "").replace("\t", "")
    for marker in COMMENT_MARKERS:
        cleaned = cleaned.replace(marker, "")
    return cleaned.lower()


def normalize_lines(lines: Iterable[str]) -> str:
    """Normalize lines, dropping the ones that end up empty."""
    parts = []
    for line in lines:
        cleaned = normalize_line(line)
        if cleaned:
            parts.append(cleaned)
            parts.append("\n")
    return "".join(parts)


def normalize(raw_text: str) -> str:
    """Normalize raw file text.

    Lines are split on ``\\n``; a trailing ``\\r`` is removed by the trim.
    Every kept line is followed by a single newline.
    """
    return normalize_lines(raw_text.split("\n"))


def read_normalized(path: Path) -> bytes:
    """Read a file and return its normalized content as UTF-8 bytes.

    Raises:
        FileOperationError: If the file cannot be read or is not valid UTF-8
    """
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise FileOperationError(
            f"Failed to read file: {e}", str(path), "read"
        ) from e

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise FileOperationError(
            f"File is not valid UTF-8: {e}", str(path), "decode"
        ) from e

    return normalize(text).encode("utf-8")
