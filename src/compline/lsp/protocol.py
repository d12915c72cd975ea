"""
LSP completion protocol records.

Completion results arrive already deserialized (JSON-like dicts and lists);
these dataclasses give them a typed shape and convert back to the wire form
for round trips such as completionItem/resolve.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class Position:
    """LSP Position (0-indexed line and character)."""

    line: int
    character: int

    def to_dict(self) -> Dict[str, int]:
        return {"line": self.line, "character": self.character}

    @classmethod
    def from_dict(cls, data: Dict) -> "Position":
        return cls(line=data["line"], character=data["character"])


@dataclass
class Range:
    """LSP Range with start and end positions."""

    start: Position
    end: Position

    def to_dict(self) -> Dict:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict) -> "Range":
        start = Position.from_dict(data["start"])
        # Servers occasionally omit the end of a zero-width range
        end = Position.from_dict(data["end"]) if "end" in data else Position(start.line, start.character)
        return cls(start=start, end=end)


@dataclass
class TextEdit:
    """
    A TextEdit or an InsertReplaceEdit.

    Exactly one of ``range`` or the ``insert``/``replace`` pair is normally set.
    """

    new_text: Optional[str] = None
    range: Optional[Range] = None
    insert: Optional[Range] = None
    replace: Optional[Range] = None

    def to_dict(self) -> Dict:
        data: Dict[str, Any] = {}
        if self.new_text is not None:
            data["newText"] = self.new_text
        if self.range is not None:
            data["range"] = self.range.to_dict()
        if self.insert is not None:
            data["insert"] = self.insert.to_dict()
        if self.replace is not None:
            data["replace"] = self.replace.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "TextEdit":
        return cls(
            new_text=data.get("newText"),
            range=Range.from_dict(data["range"]) if data.get("range") else None,
            insert=Range.from_dict(data["insert"]) if data.get("insert") else None,
            replace=Range.from_dict(data["replace"]) if data.get("replace") else None,
        )


@dataclass
class Command:
    """An LSP Command attached to a completion item."""

    title: str
    command: str
    arguments: Optional[List[Any]] = None

    def to_dict(self) -> Dict:
        data: Dict[str, Any] = {"title": self.title, "command": self.command}
        if self.arguments is not None:
            data["arguments"] = self.arguments
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "Command":
        return cls(
            title=data.get("title", ""),
            command=data["command"],
            arguments=data.get("arguments"),
        )


# Wire names for the CompletionItem fields modelled explicitly
_ITEM_FIELDS = {
    "label": "label",
    "kind": "kind",
    "tags": "tags",
    "detail": "detail",
    "documentation": "documentation",
    "deprecated": "deprecated",
    "sortText": "sort_text",
    "filterText": "filter_text",
    "insertText": "insert_text",
    "insertTextFormat": "insert_text_format",
    "insertTextMode": "insert_text_mode",
    "textEdit": "text_edit",
    "textEditText": "text_edit_text",
    "additionalTextEdits": "additional_text_edits",
    "command": "command",
    "data": "data",
}


@dataclass
class CompletionItem:
    """
    A single completion item as returned by a provider.

    Fields not modelled here are kept in ``extra`` so the item survives a
    resolve round trip unchanged.
    """

    label: str
    kind: Optional[int] = None
    tags: Optional[List[int]] = None
    detail: Optional[str] = None
    documentation: Any = None
    deprecated: Optional[bool] = None
    sort_text: Optional[str] = None
    filter_text: Optional[str] = None
    insert_text: Optional[str] = None
    insert_text_format: Optional[int] = None
    insert_text_mode: Optional[int] = None
    text_edit: Optional[TextEdit] = None
    text_edit_text: Optional[str] = None
    additional_text_edits: Optional[List[TextEdit]] = None
    command: Optional[Command] = None
    data: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_snippet(self) -> bool:
        return self.insert_text_format == InsertTextFormat.Snippet

    def to_dict(self) -> Dict:
        data: Dict[str, Any] = dict(self.extra)
        for wire_name, attr in _ITEM_FIELDS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            if attr == "text_edit" or attr == "command":
                value = value.to_dict()
            elif attr == "additional_text_edits":
                value = [edit.to_dict() for edit in value]
            data[wire_name] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "CompletionItem":
        kwargs: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in data.items():
            attr = _ITEM_FIELDS.get(key)
            if attr is None:
                extra[key] = value
                continue
            if value is None:
                continue
            if attr == "text_edit":
                value = TextEdit.from_dict(value)
            elif attr == "command":
                value = Command.from_dict(value)
            elif attr == "additional_text_edits":
                value = [TextEdit.from_dict(edit) for edit in value]
            kwargs[attr] = value
        kwargs.setdefault("label", "")
        return cls(extra=extra, **kwargs)

    @classmethod
    def coerce(cls, value: Union["CompletionItem", Dict]) -> "CompletionItem":
        """Accept either a record or its wire dict."""
        if isinstance(value, CompletionItem):
            return value
        return cls.from_dict(value)


@dataclass
class EditRange:
    """itemDefaults.editRange: a plain Range or an insert/replace pair."""

    range: Optional[Range] = None
    insert: Optional[Range] = None
    replace: Optional[Range] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "EditRange":
        if "start" in data:
            return cls(range=Range.from_dict(data))
        return cls(
            insert=Range.from_dict(data["insert"]) if data.get("insert") else None,
            replace=Range.from_dict(data["replace"]) if data.get("replace") else None,
        )


@dataclass
class ItemDefaults:
    """Defaults supplied once per CompletionList for every item."""

    edit_range: Optional[EditRange] = None
    insert_text_format: Optional[int] = None
    insert_text_mode: Optional[int] = None
    data: Any = None

    @classmethod
    def from_dict(cls, data: Dict) -> "ItemDefaults":
        return cls(
            edit_range=EditRange.from_dict(data["editRange"]) if data.get("editRange") else None,
            insert_text_format=data.get("insertTextFormat"),
            insert_text_mode=data.get("insertTextMode"),
            data=data.get("data"),
        )


@dataclass
class CompletionList:
    """A completion list, possibly partial and possibly carrying item defaults."""

    items: List[CompletionItem] = field(default_factory=list)
    is_incomplete: bool = False
    item_defaults: Optional[ItemDefaults] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "CompletionList":
        defaults = data.get("itemDefaults")
        return cls(
            items=[CompletionItem.coerce(item) for item in data.get("items") or []],
            is_incomplete=bool(data.get("isIncomplete", False)),
            item_defaults=ItemDefaults.from_dict(defaults) if defaults else None,
        )


# Result of textDocument/completion: a bare list or a wrapped list-with-defaults
CompletionResult = Union[List[CompletionItem], CompletionList]


def parse_completion_result(raw: Any) -> Optional[CompletionResult]:
    """
    Resolve a raw provider result into one of the two result variants.

    Args:
        raw: None, a list of items (records or dicts), a CompletionList or its dict

    Returns:
        A list of CompletionItem, a CompletionList, or None for "no result"
    """
    if raw is None:
        return None
    if isinstance(raw, CompletionList):
        return raw
    if isinstance(raw, dict):
        return CompletionList.from_dict(raw)
    return [CompletionItem.coerce(item) for item in raw]


def is_incomplete(result: Optional[CompletionResult]) -> bool:
    """True if the provider signalled a partial result set."""
    return isinstance(result, CompletionList) and result.is_incomplete


@dataclass
class CompletionContext:
    """How a completion request was triggered."""

    trigger_kind: int = 1
    trigger_character: Optional[str] = None

    def to_dict(self) -> Dict:
        data: Dict[str, Any] = {"triggerKind": self.trigger_kind}
        if self.trigger_character is not None:
            data["triggerCharacter"] = self.trigger_character
        return data


@dataclass
class TextDocumentIdentifier:
    """Identifies a text document."""

    uri: str

    def to_dict(self) -> Dict[str, str]:
        return {"uri": self.uri}


@dataclass
class CompletionParams:
    """Parameters for a textDocument/completion request."""

    text_document: TextDocumentIdentifier
    position: Position
    context: Optional[CompletionContext] = None

    def to_dict(self) -> Dict:
        data = {
            "textDocument": self.text_document.to_dict(),
            "position": self.position.to_dict(),
        }
        if self.context is not None:
            data["context"] = self.context.to_dict()
        return data


@dataclass
class ResponseError:
    """A JSON-RPC error carried by a provider response."""

    code: Optional[int]
    message: str
    data: Any = None


class InsertTextFormat:
    PlainText = 1
    Snippet = 2


class InsertTextMode:
    AsIs = 1
    AdjustIndentation = 2


class CompletionItemTag:
    Deprecated = 1


class CompletionTriggerKind:
    Invoked = 1
    TriggerCharacter = 2
    TriggerForIncompleteCompletions = 3


COMPLETION_ITEM_KINDS = {
    1: "Text",
    2: "Method",
    3: "Function",
    4: "Constructor",
    5: "Field",
    6: "Variable",
    7: "Class",
    8: "Interface",
    9: "Module",
    10: "Property",
    11: "Unit",
    12: "Value",
    13: "Enum",
    14: "Keyword",
    15: "Snippet",
    16: "Color",
    17: "File",
    18: "Reference",
    19: "Folder",
    20: "EnumMember",
    21: "Constant",
    22: "Struct",
    23: "Event",
    24: "Operator",
    25: "TypeParameter",
}


def kind_name(kind: Optional[int]) -> str:
    """Display name for a CompletionItemKind, 'Unknown' if unrecognized."""
    return COMPLETION_ITEM_KINDS.get(kind, "Unknown")


# LSP Error Codes
class LSPErrorCodes:
    """Standard LSP error codes."""

    ParseError = -32700
    InvalidRequest = -32600
    MethodNotFound = -32601
    InvalidParams = -32602
    InternalError = -32603
    ServerNotInitialized = -32002
    UnknownErrorCode = -32001
    RequestCancelled = -32800
    ContentModified = -32801
