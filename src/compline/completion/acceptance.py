"""
Accept-time side effects of a completion candidate.

When the host reports that a candidate was accepted, the inserted word may
still need work: snippets are expanded in place of the literal word the popup
inserted, additional text edits (auto-imports and the like) are applied, and
the item's command runs. Providers that support completionItem/resolve
deliver those edits lazily, so acceptance may wait for one more round trip;
if the buffer changes meanwhile the resolved result is dropped.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from compline.completion.context import SessionContext
from compline.completion.items import CandidateMetadata, CandidateRecord
from compline.host.notify import Notifier
from compline.host.surface import EditorSurface
from compline.lsp.protocol import CompletionItem
from compline.lsp.provider import CompletionProvider, ProviderError
from compline.utils.logger import logger as clog

logger = logging.getLogger(__name__)


class AcceptState(str, Enum):
    RESOLVING = "resolving"
    READY = "ready"
    CANCELLED = "cancelled"


@dataclass
class AcceptanceOutcome:
    """
    Result of accept().

    ``done`` is set while a resolve request is outstanding; ``state`` moves
    to READY or CANCELLED when it finishes.
    """

    state: AcceptState
    done: Optional[asyncio.Task] = None


def metadata_of(completed: Any) -> Optional[CandidateMetadata]:
    """Extract candidate metadata from whatever the host reported."""
    if completed is None:
        return None
    if isinstance(completed, CandidateMetadata):
        return completed
    if isinstance(completed, CandidateRecord):
        return completed.metadata
    if isinstance(completed, dict):
        return CandidateMetadata.from_user_data(completed.get("user_data"))
    return None


class AcceptanceHandler:
    """Applies the side effects of accepted candidates on one surface."""

    def __init__(
        self,
        surface: EditorSurface,
        context: SessionContext,
        get_provider: Callable[[Any], Optional[CompletionProvider]],
        notifier: Notifier,
    ):
        self.surface = surface
        self.context = context
        self.get_provider = get_provider
        self.notifier = notifier

    def accept(self, completed: Any) -> AcceptanceOutcome:
        """
        Handle an accepted candidate.

        Args:
            completed: The accepted CandidateRecord, or the host's dict form
                carrying ``user_data``

        Returns:
            The acceptance outcome
        """
        metadata = metadata_of(completed)
        if metadata is None:
            # Not one of ours
            self.context.reset()
            return AcceptanceOutcome(AcceptState.CANCELLED)

        item = metadata.completion_item
        cursor_row, cursor_col = self.surface.get_cursor()
        expand_snippet = item.is_snippet and (
            item.text_edit is not None or item.insert_text is not None
        )

        self.context.reset()

        provider = self.get_provider(metadata.provider_id)
        if provider is None or not provider.is_available:
            logger.debug(f"Provider {metadata.provider_id} is gone; skipping side effects")
            return AcceptanceOutcome(AcceptState.CANCELLED)

        clog.accept_start(metadata.provider_id, item.label, expand_snippet)
        end = (cursor_row, cursor_col)

        if item.additional_text_edits:
            clog.accept_branch("additional text edits")
            self._clear_word(expand_snippet, end)
            self.surface.apply_text_edits(item.additional_text_edits, provider.position_encoding)
            self._apply_snippet_and_command(item, provider, expand_snippet)
            return AcceptanceOutcome(AcceptState.READY)

        if provider.resolve_provider:
            clog.accept_branch("resolve")
            outcome = AcceptanceOutcome(AcceptState.RESOLVING)
            outcome.done = asyncio.get_running_loop().create_task(
                self._resolve(item, provider, expand_snippet, end, outcome, self.surface.changedtick)
            )
            return outcome

        clog.accept_branch("direct")
        self._clear_word(expand_snippet, end)
        self._apply_snippet_and_command(item, provider, expand_snippet)
        return AcceptanceOutcome(AcceptState.READY)

    async def _resolve(
        self,
        item: CompletionItem,
        provider: CompletionProvider,
        expand_snippet: bool,
        end: tuple,
        outcome: AcceptanceOutcome,
        changedtick: int,
    ) -> None:
        error = None
        result = None
        try:
            result = await provider.resolve(item)
        except ProviderError as e:
            error = e.message
        except Exception as e:
            logger.error(f"completionItem/resolve via {provider.name} failed: {e}", exc_info=True)
            error = str(e)

        if changedtick != self.surface.changedtick:
            clog.resolve_stale(provider.provider_id, changedtick, self.surface.changedtick)
            outcome.state = AcceptState.CANCELLED
            return

        self._clear_word(expand_snippet, end)
        if error is not None:
            self.notifier.notify_once(error, logging.WARNING)
        elif result is not None:
            resolved = CompletionItem.coerce(result)
            if resolved.additional_text_edits:
                self.surface.apply_text_edits(
                    resolved.additional_text_edits, provider.position_encoding
                )
            if resolved.command is not None:
                item.command = resolved.command
        self._apply_snippet_and_command(item, provider, expand_snippet)
        outcome.state = AcceptState.READY

    def _clear_word(self, expand_snippet: bool, end: tuple) -> None:
        """Remove the word the popup inserted, when a snippet replaces it."""
        if not expand_snippet or self.context.cursor is None:
            return
        start_row, start_col = self.context.cursor
        end_row, end_col = end
        self.surface.set_text(start_row, start_col, end_row, end_col, [""])

    def _apply_snippet_and_command(
        self, item: CompletionItem, provider: CompletionProvider, expand_snippet: bool
    ) -> None:
        if expand_snippet:
            if item.text_edit is not None and item.text_edit.new_text is not None:
                self.surface.expand_snippet(item.text_edit.new_text)
            elif item.insert_text is not None:
                self.surface.expand_snippet(item.insert_text)

        command = item.command
        if command is not None:
            clog.command(provider.provider_id, command.title)
            try:
                provider.execute_command(command, self.surface)
            except Exception as e:
                clog.error("accept", f"Command {command.command} failed", e)
                self.notifier.notify_once(f"{provider.name}: {command.command} failed: {e}", logging.WARNING)
