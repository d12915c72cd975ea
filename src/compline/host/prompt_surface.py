"""
EditorSurface backed by a prompt_toolkit Buffer.

Lets a prompt_toolkit application (REPL, TUI editor) use compline: candidates
become prompt_toolkit Completions, typing is forwarded to the engine, and
accepting a completion reports back so side effects get applied.
"""

from typing import Any, List, Optional, Sequence, Tuple

from prompt_toolkit.buffer import Buffer, CompletionState
from prompt_toolkit.completion import Completion
from prompt_toolkit.document import Document

from compline.completion.items import CandidateRecord
from compline.completion.snippet import to_plain_text
from compline.host.surface import EditorSurface
from compline.lsp.protocol import TextEdit
from compline.lsp.text_edits import edit_spans, shift_offset


class CandidateCompletion(Completion):
    """A prompt_toolkit Completion that remembers its candidate."""

    def __init__(self, candidate: CandidateRecord, start_position: int):
        super().__init__(
            text=candidate.word,
            start_position=start_position,
            display=candidate.abbr,
            display_meta=candidate.menu or candidate.kind,
            style="class:completion-menu.deprecated" if candidate.abbr_hlgroup else "",
        )
        self.candidate = candidate


class PromptToolkitSurface(EditorSurface):
    """
    Adapts a prompt_toolkit Buffer to the EditorSurface contract.

    prompt_toolkit drops its completion state on every text change, so the
    surface keeps the popup itself and re-filters it by word prefix as the
    user types, the way an editor popup narrows while typing.
    """

    def __init__(self, buffer: Buffer, surface_id: Any = "prompt", engine: Any = None):
        """
        Initialize the surface.

        Args:
            buffer: The prompt_toolkit buffer to complete in
            surface_id: Identifier used for registration
            engine: Optional CompletionEngine receiving typing events
        """
        self.buffer = buffer
        self.engine = engine
        self._surface_id = surface_id
        self._changedtick = 0
        self._insert_mode = True
        self._popup: Optional[Tuple[int, int, List[CandidateRecord]]] = None

        buffer.on_text_changed += self._on_text_changed
        buffer.on_cursor_position_changed += self._on_cursor_moved
        buffer.on_text_insert += self._on_text_insert

    @property
    def surface_id(self) -> Any:
        return self._surface_id

    @property
    def changedtick(self) -> int:
        return self._changedtick

    def get_cursor(self) -> Tuple[int, int]:
        document = self.buffer.document
        return document.cursor_position_row, document.cursor_position_col

    def get_line(self, row: Optional[int] = None) -> str:
        lines = self.buffer.document.lines
        if row is None:
            row = self.buffer.document.cursor_position_row
        return lines[row] if row < len(lines) else ""

    def get_lines(self) -> List[str]:
        return list(self.buffer.document.lines)

    def in_insert_mode(self) -> bool:
        return self._insert_mode

    def enter_insert(self) -> None:
        self._insert_mode = True

    def leave_insert(self) -> None:
        """Leave insertion: closes the popup and tells the engine."""
        self._insert_mode = False
        self.close_popup()
        if self.engine is not None:
            self.engine.on_insert_leave(self.surface_id)

    # --- Popup ---

    def popup_visible(self) -> bool:
        return self._popup is not None

    def show_popup(self, start_col: int, candidates: Sequence[CandidateRecord]) -> None:
        row, _ = self.get_cursor()
        self._popup = (row, start_col, list(candidates))
        self._publish()

    def close_popup(self) -> None:
        self._popup = None
        self.buffer.complete_state = None

    def visible_candidates(self) -> List[CandidateRecord]:
        state = self.buffer.complete_state
        if state is None:
            return []
        return [c.candidate for c in state.completions if isinstance(c, CandidateCompletion)]

    def _publish(self) -> None:
        row, start_col, candidates = self._popup
        cursor_row, cursor_col = self.get_cursor()
        if cursor_row != row or cursor_col < start_col:
            self.close_popup()
            return

        typed = self.get_line(row)[start_col:cursor_col].lower()
        completions: List[Completion] = [
            CandidateCompletion(candidate, start_col - cursor_col)
            for candidate in candidates
            if candidate.word.lower().startswith(typed)
        ]
        if not completions:
            self.buffer.complete_state = None
            return
        self.buffer.complete_state = CompletionState(
            original_document=self.buffer.document, completions=completions
        )
        self.buffer.on_completions_changed.fire()

    def apply_candidate(self, candidate: CandidateRecord) -> Any:
        """
        Insert an accepted candidate and report the acceptance.

        Returns:
            The engine's AcceptanceOutcome, if an engine is attached
        """
        popup = self._popup
        self._popup = None
        self.buffer.complete_state = None

        if popup is not None:
            _, start_col, _ = popup
            _, cursor_col = self.get_cursor()
            self.buffer.delete_before_cursor(max(cursor_col - start_col, 0))
        self.buffer.insert_text(candidate.word, fire_event=False)

        if self.engine is not None:
            return self.engine.on_complete_done(self.surface_id, candidate, "accept")
        return None

    def dismiss_popup(self) -> None:
        self.close_popup()
        if self.engine is not None:
            self.engine.on_complete_done(self.surface_id, None, "cancel")

    # --- Buffer mutation ---

    def set_text(
        self, start_row: int, start_col: int, end_row: int, end_col: int, lines: List[str]
    ) -> None:
        document = self.buffer.document
        start = document.translate_row_col_to_index(start_row, start_col)
        end = document.translate_row_col_to_index(end_row, end_col)
        replacement = "\n".join(lines)
        text = document.text[:start] + replacement + document.text[end:]
        self.buffer.document = Document(text, start + len(replacement))

    def apply_text_edits(self, edits: Sequence[TextEdit], encoding: Optional[str]) -> None:
        document = self.buffer.document
        lines = self.get_lines()
        spans = edit_spans(lines, edits, encoding)
        text = document.text
        for start, _, end, new_text in spans:
            text = text[:start] + new_text + text[end:]
        cursor = shift_offset(document.cursor_position, spans)
        self.buffer.document = Document(text, min(cursor, len(text)))

    def expand_snippet(self, body: str) -> None:
        self.buffer.insert_text(to_plain_text(body), fire_event=False)

    # --- Events ---

    def _on_text_changed(self, _buffer: Buffer) -> None:
        self._changedtick += 1
        if self._popup is not None:
            self._publish()

    def _on_cursor_moved(self, _buffer: Buffer) -> None:
        # Buffer drops complete_state whenever the cursor moves
        if self._popup is not None:
            self._publish()

    def _on_text_insert(self, buffer: Buffer) -> None:
        if self.engine is None or not self._insert_mode:
            return
        char = buffer.document.char_before_cursor
        if char:
            self.engine.on_insert_char(self.surface_id, char)
