"""
Prefix matching used to filter completion items.
"""

from enum import Enum
from typing import Callable

Matcher = Callable[[str, str], bool]


class MatchMode(str, Enum):
    FUZZY = "fuzzy"
    IGNORE_CASE = "ignorecase"
    SMART_CASE = "smartcase"
    CASE = "case"


def fuzzy_match(value: str, prefix: str) -> bool:
    """True if the characters of ``prefix`` occur in ``value`` in order, ignoring case."""
    remaining = iter(value.lower())
    return all(char in remaining for char in prefix.lower())


def prefix_match(value: str, prefix: str, mode: MatchMode = MatchMode.CASE) -> bool:
    """
    Match ``value`` against the typed ``prefix`` under ``mode``.

    Smart case ignores case only while the prefix has no uppercase letter.
    An empty prefix matches everything.
    """
    if prefix == "":
        return True
    if mode == MatchMode.FUZZY:
        return fuzzy_match(value, prefix)
    if mode == MatchMode.IGNORE_CASE or (
        mode == MatchMode.SMART_CASE and not any(char.isupper() for char in prefix)
    ):
        return value.lower().startswith(prefix.lower())
    return value.startswith(prefix)


def make_matcher(mode: MatchMode) -> Matcher:
    """Bind a match mode into a ``match(value, prefix)`` predicate."""
    mode = MatchMode(mode)

    def match(value: str, prefix: str) -> bool:
        return prefix_match(value, prefix, mode)

    return match
