"""
Shared fakes for the completion pipeline tests.

Providers, surfaces and timers are replaced by in-memory doubles so every
scenario runs deterministically inside a single asyncio.run().
"""

import asyncio
import io
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import pytest
from rich.console import Console

from compline.config import CompletionConfig
from compline.host.notify import Notifier
from compline.host.scheduler import Scheduler
from compline.host.surface import EditorSurface
from compline.lsp.protocol import Command, CompletionItem, CompletionParams, TextEdit
from compline.lsp.provider import CompletionProvider
from compline.lsp.text_edits import apply_text_edits


class FakeScheduler(Scheduler):
    """Manual clock and timer queue. Time only moves on advance()."""

    def __init__(self):
        self.now = 0.0
        self._timers: Dict[int, Tuple[float, Callable[[], None]]] = {}
        self._next_token = 0
        self.scheduled: List[float] = []

    def clock(self) -> float:
        return self.now

    def after(self, delay_ms: float, fn: Callable[[], None]) -> int:
        token = self._next_token
        self._next_token += 1
        self._timers[token] = (self.now + delay_ms, fn)
        self.scheduled.append(delay_ms)
        return token

    def soon(self, fn: Callable[[], None]) -> int:
        return self.after(0, fn)

    def cancel(self, token: Any) -> None:
        self._timers.pop(token, None)

    @property
    def pending(self) -> int:
        return len(self._timers)

    def advance(self, ms: float = 0) -> None:
        """Move the clock forward and fire every timer that came due."""
        self.now += ms
        while True:
            due = [(when, token) for token, (when, _) in self._timers.items() if when <= self.now]
            if not due:
                return
            _, token = min(due)
            _, fn = self._timers.pop(token)
            fn()


class FakeSurface(EditorSurface):
    """In-memory editable surface recording popups and side effects."""

    def __init__(self, lines: Optional[List[str]] = None, cursor: Tuple[int, int] = (0, 0), surface_id: Any = 1):
        self.lines = list(lines or [""])
        self.cursor = cursor
        self.insert_mode = True
        self.popup_open = False
        self.popups: List[Tuple[int, list]] = []
        self.snippets: List[str] = []
        self.applied_edits: List[Tuple[list, Optional[str]]] = []
        self._surface_id = surface_id
        self._changedtick = 0

    @property
    def surface_id(self) -> Any:
        return self._surface_id

    @property
    def changedtick(self) -> int:
        return self._changedtick

    def touch(self) -> None:
        self._changedtick += 1

    def get_cursor(self) -> Tuple[int, int]:
        return self.cursor

    def get_line(self, row: Optional[int] = None) -> str:
        return self.lines[self.cursor[0] if row is None else row]

    def get_lines(self) -> List[str]:
        return list(self.lines)

    def in_insert_mode(self) -> bool:
        return self.insert_mode

    def popup_visible(self) -> bool:
        return self.popup_open

    def show_popup(self, start_col: int, candidates: Sequence[Any]) -> None:
        self.popup_open = True
        self.popups.append((start_col, list(candidates)))

    def type(self, text: str) -> None:
        row, col = self.cursor
        line = self.lines[row]
        self.lines[row] = line[:col] + text + line[col:]
        self.cursor = (row, col + len(text))
        self.touch()

    def set_text(self, start_row, start_col, end_row, end_col, lines):
        head = self.lines[start_row][:start_col]
        tail = self.lines[end_row][end_col:]
        new_lines = list(lines)
        new_lines[0] = head + new_lines[0]
        self.cursor = (start_row + len(new_lines) - 1, len(new_lines[-1]))
        new_lines[-1] = new_lines[-1] + tail
        self.lines[start_row:end_row + 1] = new_lines
        self.touch()

    def apply_text_edits(self, edits, encoding):
        self.applied_edits.append((list(edits), encoding))
        self.lines = apply_text_edits(self.lines, edits, encoding)
        self.touch()

    def expand_snippet(self, body: str) -> None:
        self.snippets.append(body)


class FakeProvider(CompletionProvider):
    """
    Provider answering from canned values.

    hold() makes complete() wait until release(), to keep a request in flight.
    """

    def __init__(
        self,
        provider_id: Any = "fake",
        result: Any = None,
        error: Optional[Exception] = None,
        trigger_characters: Optional[List[str]] = None,
        resolve_provider: bool = False,
        resolved: Any = None,
        resolve_error: Optional[Exception] = None,
        position_encoding: str = "utf-16",
    ):
        self._provider_id = provider_id
        self.result = result
        self.error = error
        self.trigger_characters = trigger_characters or []
        self.resolve_provider = resolve_provider
        self.resolved = resolved
        self.resolve_error = resolve_error
        self.position_encoding = position_encoding
        self.available = True
        self.requests: List[CompletionParams] = []
        self.resolve_requests: List[CompletionItem] = []
        self.commands: List[Command] = []
        self._gate: Optional[asyncio.Event] = None
        self._resolve_gate: Optional[asyncio.Event] = None

    @property
    def provider_id(self) -> Any:
        return self._provider_id

    @property
    def name(self) -> str:
        return f"provider-{self._provider_id}"

    @property
    def is_available(self) -> bool:
        return self.available

    def hold(self) -> None:
        self._gate = asyncio.Event()

    def release(self) -> None:
        if self._gate is not None:
            self._gate.set()

    def hold_resolve(self) -> None:
        self._resolve_gate = asyncio.Event()

    def release_resolve(self) -> None:
        if self._resolve_gate is not None:
            self._resolve_gate.set()

    async def complete(self, params):
        self.requests.append(params)
        if self._gate is not None:
            await self._gate.wait()
        if self.error is not None:
            raise self.error
        return self.result

    async def resolve(self, item):
        self.resolve_requests.append(item)
        if self._resolve_gate is not None:
            await self._resolve_gate.wait()
        if self.resolve_error is not None:
            raise self.resolve_error
        return self.resolved

    def execute_command(self, command, surface):
        self.commands.append(command)


class RecordingNotifier(Notifier):
    """Notifier writing to a buffer and remembering what it showed."""

    def __init__(self):
        super().__init__(console=Console(file=io.StringIO(), force_terminal=False))
        self.messages: List[Tuple[int, str]] = []

    def notify(self, message: str, level: int = logging.INFO) -> None:
        self.messages.append((level, message))
        super().notify(message, level)


async def drain(turns: int = 10) -> None:
    """Let pending tasks and their done callbacks run."""
    for _ in range(turns):
        await asyncio.sleep(0)


def edit_item(label: str, start: int, end: int, line: int = 0, new_text: Optional[str] = None) -> Dict:
    """Wire-form item whose textEdit replaces [start, end) on ``line``."""
    return {
        "label": label,
        "textEdit": {
            "range": {
                "start": {"line": line, "character": start},
                "end": {"line": line, "character": end},
            },
            "newText": label if new_text is None else new_text,
        },
    }


def insert_edit(line: int, character: int, text: str) -> TextEdit:
    return TextEdit.from_dict(
        {
            "range": {
                "start": {"line": line, "character": character},
                "end": {"line": line, "character": character},
            },
            "newText": text,
        }
    )


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def config():
    return CompletionConfig()
