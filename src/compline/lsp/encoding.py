"""
Position encoding conversion.

LSP character offsets count code units of the negotiated position encoding
(utf-16 unless the provider says otherwise). Python strings index by code
point, so offsets are converted before slicing a line.
"""

from typing import Optional

UTF8 = "utf-8"
UTF16 = "utf-16"
UTF32 = "utf-32"

DEFAULT_ENCODING = UTF16


def _unit_length(char: str, encoding: str) -> int:
    if encoding == UTF8:
        return len(char.encode("utf-8"))
    if encoding == UTF16:
        return 2 if ord(char) > 0xFFFF else 1
    return 1


def str_index(line: str, encoding: Optional[str], offset: int) -> int:
    """
    Convert a code-unit offset into an index into ``line``.

    Offsets past the end of the line clamp to ``len(line)``; an offset in the
    middle of a multi-unit character maps to the index after that character.

    Args:
        line: Line text
        encoding: 'utf-8', 'utf-16' or 'utf-32' (None means utf-16)
        offset: Code-unit offset from the provider

    Returns:
        Index into ``line``
    """
    encoding = (encoding or DEFAULT_ENCODING).lower()
    if encoding == UTF32:
        return max(0, min(offset, len(line)))

    units = 0
    for index, char in enumerate(line):
        if units >= offset:
            return index
        units += _unit_length(char, encoding)
    return len(line)


def unit_offset(line: str, encoding: Optional[str], index: int) -> int:
    """Inverse of :func:`str_index`: code units before ``line[index]``."""
    encoding = (encoding or DEFAULT_ENCODING).lower()
    prefix = line[:index]
    if encoding == UTF32:
        return len(prefix)
    return sum(_unit_length(char, encoding) for char in prefix)
