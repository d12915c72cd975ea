"""
Decides when completion requests fire on a surface.

States:
    IDLE       no timer, no request in flight
    PENDING    a settle or debounce timer is armed
    IN_FLIGHT  a request batch is outstanding

Only the newest request matters: arming a timer or dispatching a batch
always cancels the previous one first.
"""

import logging
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence

from compline.completion.boundary import reconcile, word_boundary
from compline.completion.context import SessionContext
from compline.completion.coordinator import RequestCoordinator, Responses
from compline.completion.items import CandidateRecord, get_items, normalize
from compline.completion.latency import LatencyEstimator, next_debounce
from compline.completion.matching import Matcher
from compline.completion.registry import SurfaceRegistration
from compline.host.notify import Notifier
from compline.host.scheduler import Scheduler
from compline.lsp.encoding import unit_offset
from compline.lsp.protocol import (
    CompletionContext,
    CompletionParams,
    CompletionTriggerKind,
    Position,
    TextDocumentIdentifier,
    is_incomplete,
)
from compline.lsp.provider import CompletionProvider
from compline.utils.logger import logger as clog


class TriggerState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    IN_FLIGHT = "in_flight"


class TriggerController:
    """Completion trigger state machine for one surface."""

    def __init__(
        self,
        registration: SurfaceRegistration,
        context: SessionContext,
        estimator: LatencyEstimator,
        coordinator: RequestCoordinator,
        scheduler: Scheduler,
        clock: Callable[[], float],
        notifier: Notifier,
        match: Matcher,
        trigger_delay_ms: float = 25,
    ):
        self.registration = registration
        self.context = context
        self.estimator = estimator
        self.coordinator = coordinator
        self.scheduler = scheduler
        self.clock = clock
        self.notifier = notifier
        self.match = match
        self.trigger_delay_ms = trigger_delay_ms
        self._timer: Any = None

    @property
    def surface(self):
        return self.registration.surface

    @property
    def state(self) -> TriggerState:
        if self._timer is not None:
            return TriggerState.PENDING
        if any(batch.pending for batch in self.context.pending_requests):
            return TriggerState.IN_FLIGHT
        return TriggerState.IDLE

    def reset_timer(self) -> None:
        if self._timer is not None:
            self.scheduler.cancel(self._timer)
        self._timer = None

    def close(self) -> None:
        self.reset_timer()
        self.context.cancel_pending()

    # --- Requests ---

    def get(self, ctx: Optional[CompletionContext] = None) -> None:
        """Request completion from every provider on the surface."""
        ctx = ctx or CompletionContext(trigger_kind=CompletionTriggerKind.Invoked)
        self.trigger(list(self.registration.providers.values()), ctx)

    def trigger(self, providers: Sequence[CompletionProvider], ctx: CompletionContext) -> None:
        """
        Start a new request batch, superseding any timer or batch in flight.

        Does nothing while a complete popup is open: the user is navigating
        existing candidates.
        """
        self.reset_timer()
        surface = self.surface
        pending = sum(batch.pending for batch in self.context.pending_requests)
        if pending:
            clog.request_cancelled(surface.surface_id, pending)
        self.context.cancel_pending()

        if surface.popup_visible() and not self.context.is_incomplete:
            return
        if not providers:
            return

        cursor_row, cursor_col = surface.get_cursor()
        line = surface.get_line(cursor_row)
        boundary = word_boundary(line[:cursor_col])
        seed = None
        if ctx.trigger_kind == CompletionTriggerKind.TriggerForIncompleteCompletions:
            seed = self.context.server_boundary
        start_time = self.clock()
        self.context.last_request_time = start_time

        def params_for(provider: CompletionProvider) -> CompletionParams:
            character = unit_offset(line, provider.position_encoding, cursor_col)
            return CompletionParams(
                text_document=TextDocumentIdentifier(uri=surface.uri),
                position=Position(line=cursor_row, character=character),
                context=ctx,
            )

        def on_complete(responses: Responses) -> None:
            self._on_responses(responses, cursor_row, cursor_col, line, boundary, seed, start_time)

        clog.request_dispatch(surface.surface_id, [p.provider_id for p in providers], ctx.trigger_kind)
        batch = self.coordinator.dispatch(providers, params_for, on_complete)
        self.context.pending_requests.append(batch)

    def _on_responses(
        self,
        responses: Responses,
        cursor_row: int,
        cursor_col: int,
        line: str,
        client_boundary: int,
        server_boundary: Optional[int],
        start_time: float,
    ) -> None:
        elapsed = self.clock() - start_time
        rtt = self.estimator.observe(elapsed)
        surface = self.surface
        clog.request_complete(surface.surface_id, elapsed, rtt)

        self.context.pending_requests = []
        self.context.is_incomplete = False

        if surface.get_cursor()[0] != cursor_row:
            clog.batch_stale(surface.surface_id, "cursor row changed")
            return
        if not surface.in_insert_mode():
            clog.batch_stale(surface.surface_id, "left insert mode")
            return

        matches: List[CandidateRecord] = []
        for provider_id, response in responses.items():
            provider = response.provider
            if response.error is not None:
                code = response.error.code if response.error.code is not None else "NO_CODE"
                clog.provider_error(provider.name, code, response.error.message)
                self.notifier.notify_once(
                    f"{provider.name}: {code} {response.error.message}", logging.WARNING
                )

            if response.result is None:
                continue
            self.context.is_incomplete = self.context.is_incomplete or is_incomplete(response.result)
            items = get_items(response.result)
            server_boundary = reconcile(
                client_boundary, server_boundary, line, cursor_row, items, provider.position_encoding
            )
            start = client_boundary if server_boundary is None else server_boundary
            matches.extend(
                normalize(
                    items,
                    line[start:cursor_col],
                    provider_id,
                    match=self.match,
                    convert=self.registration.options.convert,
                )
            )

        start_col = client_boundary if server_boundary is None else server_boundary
        self.context.cursor = (cursor_row, start_col)
        self.context.server_boundary = server_boundary
        clog.popup(surface.surface_id, start_col, len(matches), self.context.is_incomplete)
        surface.show_popup(start_col, matches)

    # --- Host events ---

    def on_insert_char(self, char: str) -> None:
        """
        React to a character about to be inserted.

        With a popup open, only incomplete results are refreshed (debounced by
        the latency estimate). Otherwise a trigger character arms a short
        settle timer so multi-character input collapses into one request.
        """
        if self.surface.popup_visible():
            if self.context.is_incomplete:
                self.reset_timer()
                debounce_ms = next_debounce(
                    self.estimator.estimate, self.context.last_request_time, self.clock()
                )
                ctx = CompletionContext(
                    trigger_kind=CompletionTriggerKind.TriggerForIncompleteCompletions
                )
                clog.debounce(self.surface.surface_id, debounce_ms)
                if debounce_ms == 0:
                    self._timer = self.scheduler.soon(lambda: self.get(ctx))
                else:
                    self._timer = self.scheduler.after(debounce_ms, lambda: self.get(ctx))
            return

        matched = self.registration.providers_for_trigger(char)
        if self._timer is None and matched:
            ctx = CompletionContext(
                trigger_kind=CompletionTriggerKind.TriggerCharacter, trigger_character=char
            )
            self._timer = self.scheduler.after(
                self.trigger_delay_ms, lambda: self.trigger(matched, ctx)
            )

    def on_insert_leave(self) -> None:
        self.reset_timer()
        self.context.teardown()
