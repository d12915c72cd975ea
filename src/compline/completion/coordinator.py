"""
Fan a completion request out to several providers and collect every outcome.
"""

import asyncio
import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence

from compline.lsp.protocol import (
    CompletionParams,
    CompletionResult,
    LSPErrorCodes,
    ResponseError,
    parse_completion_result,
)
from compline.lsp.provider import CompletionProvider, ProviderError
from compline.utils.logger import logger as clog

logger = logging.getLogger(__name__)


@dataclass
class ProviderResponse:
    """Outcome of one provider's request: an error, a result, or neither."""

    provider: CompletionProvider
    error: Optional[ResponseError] = None
    result: Optional[CompletionResult] = None


Responses = Dict[Any, ProviderResponse]


class RequestBatch:
    """
    Handle on one fan-out.

    ``on_complete`` runs once, after every provider has answered or failed,
    unless the batch was cancelled first. cancel() is idempotent and does
    nothing once the batch has completed.
    """

    def __init__(
        self,
        providers: Sequence[CompletionProvider],
        on_complete: Callable[[Responses], None],
        loop: asyncio.AbstractEventLoop,
    ):
        self._providers = list(providers)
        self._on_complete = on_complete
        self._responses: Responses = {}
        self._tasks: Dict[Any, asyncio.Task] = {}
        self._remaining = len(self._providers)
        self.cancelled = False
        self.completed = False
        self.future: asyncio.Future = loop.create_future()

    @property
    def pending(self) -> int:
        """Number of providers that have not answered yet."""
        return 0 if self.completed or self.cancelled else self._remaining

    def cancel(self) -> None:
        if self.cancelled or self.completed:
            return
        self.cancelled = True
        for provider_id, task in self._tasks.items():
            if not task.done():
                logger.debug(f"Cancelling completion request to {provider_id}")
                task.cancel()
        self._tasks.clear()
        if not self.future.done():
            self.future.cancel()

    async def wait(self) -> Responses:
        """Wait for all responses (raises CancelledError if cancelled)."""
        return await self.future

    def _settle(self, provider: CompletionProvider, task: asyncio.Task) -> None:
        if self.cancelled:
            return

        if task.cancelled():
            response = ProviderResponse(
                provider=provider,
                error=ResponseError(code=LSPErrorCodes.RequestCancelled, message="request cancelled"),
            )
        else:
            response = task.result()
        self._responses[provider.provider_id] = response
        self._remaining -= 1
        if self._remaining == 0:
            self._finish()

    def _finish(self) -> None:
        self.completed = True
        self._tasks.clear()
        responses = {
            provider.provider_id: self._responses[provider.provider_id]
            for provider in self._providers
            if provider.provider_id in self._responses
        }
        if not self.future.done():
            self.future.set_result(responses)
        try:
            self._on_complete(responses)
        except Exception as e:
            clog.error("request", "Error handling completion responses", e)


class RequestCoordinator:
    """Dispatches textDocument/completion to a set of providers concurrently."""

    def dispatch(
        self,
        providers: Sequence[CompletionProvider],
        params_for: Callable[[CompletionProvider], CompletionParams],
        on_complete: Callable[[Responses], None],
    ) -> RequestBatch:
        """
        Send one completion request per provider.

        Args:
            providers: Providers to query
            params_for: Builds the request parameters for a provider
                (positions depend on the provider's encoding)
            on_complete: Called with {provider_id: ProviderResponse} once all
                providers have settled

        Returns:
            The batch handle; cancel() aborts every pending request
        """
        loop = asyncio.get_running_loop()
        batch = RequestBatch(providers, on_complete, loop)

        if not providers:
            # Nothing to ask: complete on the next loop turn with no results
            loop.call_soon(lambda: None if batch.cancelled else batch._finish())
            return batch

        for provider in providers:
            params = params_for(provider)
            task = loop.create_task(self._request(provider, params))
            batch._tasks[provider.provider_id] = task
            task.add_done_callback(functools.partial(batch._settle, provider))

        return batch

    async def _request(
        self, provider: CompletionProvider, params: CompletionParams
    ) -> ProviderResponse:
        try:
            raw = await provider.complete(params)
            return ProviderResponse(provider=provider, result=parse_completion_result(raw))
        except ProviderError as e:
            return ProviderResponse(provider=provider, error=e.to_response_error())
        except Exception as e:
            logger.error(f"Completion request to {provider.name} failed: {e}", exc_info=True)
            return ProviderResponse(
                provider=provider,
                error=ResponseError(code=LSPErrorCodes.InternalError, message=str(e)),
            )
