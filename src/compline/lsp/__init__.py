"""
LSP module - completion protocol records and the provider interface.
"""

from compline.lsp.encoding import DEFAULT_ENCODING, str_index, unit_offset
from compline.lsp.protocol import (
    Command,
    CompletionContext,
    CompletionItem,
    CompletionList,
    CompletionParams,
    CompletionTriggerKind,
    InsertTextFormat,
    ItemDefaults,
    Position,
    Range,
    ResponseError,
    TextEdit,
)
from compline.lsp.provider import CompletionProvider, ProviderError
from compline.lsp.text_edits import apply_text_edits

__all__ = [
    # Provider interface
    "CompletionProvider",
    "ProviderError",
    # Protocol records
    "Command",
    "CompletionContext",
    "CompletionItem",
    "CompletionList",
    "CompletionParams",
    "CompletionTriggerKind",
    "InsertTextFormat",
    "ItemDefaults",
    "Position",
    "Range",
    "ResponseError",
    "TextEdit",
    # Helpers
    "DEFAULT_ENCODING",
    "str_index",
    "unit_offset",
    "apply_text_edits",
]
