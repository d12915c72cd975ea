"""
Apply LSP TextEdits to a buffer held as a list of lines.
"""

from typing import List, Optional, Sequence, Tuple

from compline.lsp.encoding import str_index
from compline.lsp.protocol import Position, TextEdit

# (start offset, edit index, end offset, new text)
Span = Tuple[int, int, int, str]


def position_offset(lines: Sequence[str], position: Position, encoding: Optional[str]) -> int:
    """Absolute offset into '\\n'.join(lines) for an LSP position."""
    if position.line >= len(lines):
        return max(sum(len(line) + 1 for line in lines) - 1, 0)
    offset = sum(len(line) + 1 for line in lines[:position.line])
    return offset + str_index(lines[position.line], encoding, position.character)


def edit_spans(
    lines: Sequence[str], edits: Sequence[TextEdit], encoding: Optional[str] = None
) -> List[Span]:
    """
    Resolve edits to absolute spans of the original text, last edit first.

    Edits sharing a start position keep their given order once applied.
    """
    spans: List[Span] = []
    for index, edit in enumerate(edits):
        edit_range = edit.range or edit.replace or edit.insert
        if edit_range is None:
            continue
        start = position_offset(lines, edit_range.start, encoding)
        end = position_offset(lines, edit_range.end, encoding)
        spans.append((start, index, max(start, end), edit.new_text or ""))
    return sorted(spans, reverse=True)


def apply_text_edits(
    lines: Sequence[str], edits: Sequence[TextEdit], encoding: Optional[str] = None
) -> List[str]:
    """
    Apply edits to ``lines`` and return the new lines.

    All ranges refer to the original document.

    Args:
        lines: Buffer lines (without trailing newlines)
        edits: TextEdits with a ``range`` (insert/replace edits use ``replace``)
        encoding: Position encoding of the edit ranges

    Returns:
        The edited buffer as a list of lines
    """
    text = "\n".join(lines)
    for start, _, end, new_text in edit_spans(lines, edits, encoding):
        text = text[:start] + new_text + text[end:]
    return text.split("\n")


def shift_offset(offset: int, spans: Sequence[Span]) -> int:
    """Where ``offset`` of the original text lands after applying ``spans``."""
    shifted = offset
    for start, _, end, new_text in spans:
        if end <= offset:
            shifted += len(new_text) - (end - start)
        elif start < offset:
            # Offset inside a replaced span: move to the end of the new text
            shifted += start + len(new_text) - offset
    return shifted
