"""
Completion provider over a fixed vocabulary.

Answers like a language server would: each item carries a textEdit spanning
the word under the cursor, and results beyond ``max_items`` are cut off with
``isIncomplete`` set so the engine keeps refining while the user types.
"""

import logging
from typing import Any, Iterable, List, Optional

from compline.completion.boundary import word_boundary
from compline.host.surface import EditorSurface
from compline.lsp.encoding import str_index, unit_offset
from compline.lsp.protocol import (
    CompletionItem,
    CompletionList,
    CompletionParams,
    Position,
    Range,
    TextEdit,
)
from compline.lsp.provider import CompletionProvider

logger = logging.getLogger(__name__)

# CompletionItemKind.Text
_TEXT_KIND = 1


class WordProvider(CompletionProvider):
    """Completes words from a vocabulary, case-insensitively."""

    def __init__(
        self,
        words: Iterable[str],
        surface: EditorSurface,
        provider_id: Any = "words",
        max_items: int = 50,
        trigger_characters: Optional[List[str]] = None,
    ):
        """
        Initialize the provider.

        Args:
            words: Vocabulary (duplicates and blanks are dropped)
            surface: Surface whose text the requests refer to
            provider_id: Registration identifier
            max_items: Cap on items per response
            trigger_characters: Characters that start completion automatically
        """
        self.words = sorted({word.strip() for word in words if word.strip()})
        self.surface = surface
        self.max_items = max_items
        self.trigger_characters = list(trigger_characters or [])
        self._provider_id = provider_id

    @property
    def provider_id(self) -> Any:
        return self._provider_id

    @property
    def name(self) -> str:
        return "words"

    async def complete(self, params: CompletionParams) -> CompletionList:
        line = self.surface.get_line(params.position.line)
        cursor_col = str_index(line, self.position_encoding, params.position.character)
        start_col = word_boundary(line[:cursor_col])
        prefix = line[start_col:cursor_col].lower()

        matches = [word for word in self.words if word.lower().startswith(prefix)]
        edit_range = Range(
            start=Position(params.position.line, unit_offset(line, self.position_encoding, start_col)),
            end=Position(params.position.line, params.position.character),
        )
        items = [
            CompletionItem(
                label=word,
                kind=_TEXT_KIND,
                text_edit=TextEdit(new_text=word, range=edit_range),
            )
            for word in matches[: self.max_items]
        ]
        logger.debug(f"{len(matches)} word(s) match {prefix!r}")
        return CompletionList(items=items, is_incomplete=len(matches) > self.max_items)
