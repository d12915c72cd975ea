"""
Host text surface contract.

An editable surface is one buffer shown in one window: it knows its cursor,
its lines, whether it is in insert mode and whether the completion popup is
open. compline never touches a surface except through this interface.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence, Tuple

from compline.lsp.protocol import TextEdit


class EditorSurface(ABC):
    """
    Abstract editable surface.

    Rows and columns are 0-indexed; columns index into the Python string of
    the line.
    """

    @property
    @abstractmethod
    def surface_id(self) -> Any:
        """Stable identifier of the surface"""
        pass

    @property
    def uri(self) -> str:
        """Document URI sent to providers."""
        return f"untitled:{self.surface_id}"

    @property
    @abstractmethod
    def changedtick(self) -> int:
        """Counter incremented on every buffer modification"""
        pass

    @abstractmethod
    def get_cursor(self) -> Tuple[int, int]:
        """Current (row, col)"""
        pass

    @abstractmethod
    def get_line(self, row: Optional[int] = None) -> str:
        """Text of ``row`` (default: the cursor row)"""
        pass

    @abstractmethod
    def get_lines(self) -> List[str]:
        """Whole buffer"""
        pass

    @abstractmethod
    def in_insert_mode(self) -> bool:
        pass

    @abstractmethod
    def popup_visible(self) -> bool:
        pass

    @abstractmethod
    def show_popup(self, start_col: int, candidates: Sequence[Any]) -> None:
        """
        Open (or replace) the completion popup.

        Args:
            start_col: Column where the completed word starts
            candidates: CandidateRecord entries in display order
        """
        pass

    @abstractmethod
    def set_text(
        self, start_row: int, start_col: int, end_row: int, end_col: int, lines: List[str]
    ) -> None:
        """Replace the span [start, end) with ``lines``; the cursor follows the edit."""
        pass

    @abstractmethod
    def apply_text_edits(self, edits: Sequence[TextEdit], encoding: Optional[str]) -> None:
        pass

    @abstractmethod
    def expand_snippet(self, body: str) -> None:
        """Insert a snippet body at the cursor"""
        pass
