"""
Word boundary reconciliation.

The editor computes where the word under the cursor starts; providers may
anchor their edits elsewhere. With lua-language-server, for example:

    require('plenary.asy|
            ^       ^   ^
            |       |   cursor: 20
            |       local word boundary: 17
            textEdit.range.start.character: 9, newText 'plenary.async'

Filtering on the local prefix 'asy' would drop 'plenary.async', so the
provider boundary is preferred whenever it is unambiguous.
"""

import re
from typing import Iterable, Optional

from compline.lsp.encoding import str_index
from compline.lsp.protocol import CompletionItem

_TRAILING_WORD = re.compile(r"\w*$")


def word_boundary(line_to_cursor: str) -> int:
    """Index where the keyword run ending at the cursor starts."""
    return _TRAILING_WORD.search(line_to_cursor).start()


def adjust_start_col(
    lnum: int, line: str, items: Iterable[CompletionItem], encoding: Optional[str]
) -> Optional[int]:
    """
    The provider's edit start on ``lnum``, if all its edits agree.

    Args:
        lnum: 0-indexed line of the cursor
        line: Text of that line
        items: Items of one provider response (defaults already applied)
        encoding: The provider's position encoding

    Returns:
        Start index into ``line``, or None when no item has a range on the
        line or two items disagree on the start character
    """
    start_char = None
    for item in items:
        edit = item.text_edit
        if edit is None or edit.range is None or edit.range.start.line != lnum:
            continue
        character = edit.range.start.character
        if start_char is not None and start_char != character:
            return None
        start_char = character

    if start_char is None:
        return None
    return str_index(line, encoding, start_char)


def reconcile(
    client_boundary: int,
    server_boundary: Optional[int],
    line: str,
    lnum: int,
    items: Iterable[CompletionItem],
    encoding: Optional[str],
) -> Optional[int]:
    """
    Decide the provider boundary after seeing one more response.

    Args:
        client_boundary: Locally computed word start
        server_boundary: Boundary established by earlier responses, if any
        line: Current line text
        lnum: 0-indexed cursor line
        items: Items of the new response
        encoding: Position encoding of the new response

    Returns:
        The boundary to carry forward; None means "use the local boundary"
    """
    start = adjust_start_col(lnum, line, items, encoding)
    if server_boundary is None:
        return start
    if start is not None and start != server_boundary:
        return client_boundary
    return server_boundary
