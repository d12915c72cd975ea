"""
Turn provider completion results into candidate records for the host popup.
"""

import copy
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from compline.completion.matching import Matcher, prefix_match
from compline.completion.snippet import to_plain_text
from compline.lsp.protocol import (
    CompletionItem,
    CompletionItemTag,
    CompletionList,
    ItemDefaults,
    TextEdit,
    kind_name,
    parse_completion_result,
)

logger = logging.getLogger(__name__)

DEPRECATED_HLGROUP = "DiagnosticDeprecated"

# Key under which candidate metadata travels through the host's user data
USER_DATA_KEY = "compline"

# Fields the convert hook may override
DISPLAY_FIELDS = ("abbr", "kind", "menu", "info", "abbr_hlgroup", "icase", "dup", "empty")

_LEADING_WORD = re.compile(r"\w*")
_LEADING_NON_SPACE = re.compile(r"\S*")
_HAS_ALNUM = re.compile(r"[^\W_]")

Convert = Callable[[CompletionItem], Mapping[str, Any]]


@dataclass
class CandidateMetadata:
    """Where a candidate came from."""

    completion_item: CompletionItem
    provider_id: Any

    def to_user_data(self) -> Dict[str, Any]:
        return {
            USER_DATA_KEY: {
                "completion_item": self.completion_item,
                "provider_id": self.provider_id,
            }
        }

    @classmethod
    def from_user_data(cls, user_data: Any) -> Optional["CandidateMetadata"]:
        """Recover metadata from host user data; None if it isn't ours."""
        if not isinstance(user_data, Mapping):
            return None
        ours = user_data.get(USER_DATA_KEY)
        if not isinstance(ours, Mapping):
            return None
        item = ours.get("completion_item")
        provider_id = ours.get("provider_id")
        if not item or provider_id is None:
            return None
        return cls(completion_item=CompletionItem.coerce(item), provider_id=provider_id)


@dataclass
class CandidateRecord:
    """
    One popup entry.

    ``word`` is what the host matches typed text against and inserts;
    ``abbr`` is what it displays. They differ for postfix and snippet items.
    """

    word: str
    abbr: str
    kind: str
    menu: str
    info: str
    metadata: CandidateMetadata
    abbr_hlgroup: str = ""
    icase: int = 1
    dup: int = 1
    empty: int = 1
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def sort_key(self) -> str:
        item = self.metadata.completion_item
        return item.sort_text or item.label

    def to_dict(self) -> Dict[str, Any]:
        """The record in the host's complete-item shape."""
        data = dict(self.extra)
        data.update(
            word=self.word,
            abbr=self.abbr,
            kind=self.kind,
            menu=self.menu,
            info=self.info,
            abbr_hlgroup=self.abbr_hlgroup,
            icase=self.icase,
            dup=self.dup,
            empty=self.empty,
            user_data=self.metadata.to_user_data(),
        )
        return data


def apply_defaults(item: CompletionItem, defaults: Optional[ItemDefaults]) -> None:
    """
    Fill the item's empty fields from the list's item defaults, in place.

    Values already present on the item always win.
    """
    if not defaults:
        return

    if item.insert_text_format is None:
        item.insert_text_format = defaults.insert_text_format
    if item.insert_text_mode is None:
        item.insert_text_mode = defaults.insert_text_mode
    if item.data is None:
        item.data = defaults.data

    edit_range = defaults.edit_range
    if edit_range:
        text_edit = item.text_edit or TextEdit()
        item.text_edit = text_edit
        if text_edit.new_text is None:
            text_edit.new_text = item.text_edit_text or item.insert_text or item.label
        if edit_range.range is not None:
            if text_edit.range is None:
                text_edit.range = copy.deepcopy(edit_range.range)
        elif edit_range.insert is not None:
            text_edit.insert = copy.deepcopy(edit_range.insert)
            text_edit.replace = copy.deepcopy(edit_range.replace)


def get_items(result: Any) -> List[CompletionItem]:
    """Unwrap a completion result, applying item defaults of a CompletionList."""
    result = parse_completion_result(result)
    if result is None:
        return []
    if isinstance(result, CompletionList):
        for item in result.items:
            apply_defaults(item, result.item_defaults)
        return result.items
    return result


def get_doc(item: CompletionItem) -> str:
    doc = item.documentation
    if not doc:
        return ""
    if isinstance(doc, str):
        return doc
    if isinstance(doc, Mapping) and isinstance(doc.get("value"), str):
        return doc["value"]

    logger.warning(f"invalid documentation value: {doc!r}")
    return ""


def is_deprecated(item: CompletionItem) -> bool:
    return bool(item.deprecated) or CompletionItemTag.Deprecated in (item.tags or [])


def get_completion_word(item: CompletionItem, prefix: str, match: Matcher) -> str:
    """
    The text used for filtering an item, and inserted by the host.

    Precedence follows the protocol: textEdit.newText > insertText > label,
    except for snippets.
    """
    if item.is_snippet:
        if item.text_edit is not None or item.insert_text:
            # A postfix snippet such as `table.insert(f, $0)` labelled
            # `insert` must survive typing `i`, so prefer the label unless the
            # rendered text is the shorter of the two.
            body = item.insert_text or (item.text_edit.new_text if item.text_edit else None) or ""
            text = to_plain_text(body)
            if len(text) < len(item.label):
                word = _LEADING_WORD.match(text).group()
            else:
                word = item.label
            if item.filter_text and not match(word, prefix):
                return item.filter_text
            return word
        return item.label

    if item.text_edit is not None and item.text_edit.new_text is not None:
        return _LEADING_NON_SPACE.match(item.text_edit.new_text).group()
    if item.insert_text:
        return item.insert_text
    return item.label


def _make_filter(prefix: str, match: Matcher) -> Callable[[CompletionItem], bool]:
    if not _HAS_ALNUM.search(prefix):
        return lambda item: True

    def matches(item: CompletionItem) -> bool:
        if item.filter_text is not None:
            return match(item.filter_text, prefix)
        if item.text_edit is not None:
            # provider already filtered
            return True
        return match(item.label, prefix)

    return matches


def _apply_convert(candidate: CandidateRecord, converted: Optional[Mapping[str, Any]]) -> None:
    if not converted:
        return
    for key, value in converted.items():
        if key in DISPLAY_FIELDS:
            setattr(candidate, key, value)
        elif key not in ("word", "user_data", "metadata"):
            candidate.extra[key] = value


def normalize(
    result: Any,
    prefix: str,
    provider_id: Any,
    match: Optional[Matcher] = None,
    convert: Optional[Convert] = None,
) -> List[CandidateRecord]:
    """
    Convert one provider result into sorted candidate records.

    Args:
        result: Completion result (list, CompletionList, or their JSON shapes)
        prefix: Text typed between the boundary and the cursor
        provider_id: Provider the result came from
        match: Prefix predicate for the configured match mode
        convert: Optional hook customizing the display of each item

    Returns:
        Candidates sorted by sortText (falling back to label)
    """
    items = get_items(result)
    if not items:
        return []

    match = match or prefix_match
    matches = _make_filter(prefix, match)

    candidates = []
    for item in items:
        if not matches(item):
            continue
        candidate = CandidateRecord(
            word=get_completion_word(item, prefix, match),
            abbr=item.label,
            kind=kind_name(item.kind),
            menu=item.detail or "",
            info=get_doc(item),
            abbr_hlgroup=DEPRECATED_HLGROUP if is_deprecated(item) else "",
            metadata=CandidateMetadata(completion_item=item, provider_id=provider_id),
        )
        if convert:
            _apply_convert(candidate, convert(item))
        candidates.append(candidate)

    candidates.sort(key=lambda candidate: candidate.sort_key)
    return candidates
