"""
Base completion provider interface.

All completion sources (language servers, snippet engines, anything that
answers textDocument/completion) must implement this interface. The transport
behind it is the provider's business; compline only awaits results.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from compline.lsp.encoding import DEFAULT_ENCODING
from compline.lsp.protocol import (
    Command,
    CompletionItem,
    CompletionParams,
    CompletionResult,
    ResponseError,
)


class CompletionProvider(ABC):
    """
    Abstract base class for completion providers.

    Providers must implement:
    - complete(): answer a textDocument/completion request
    - provider_id / name: identity used for registration and messages

    Providers that support completionItem/resolve set ``resolve_provider`` and
    override resolve(). Commands attached to items go through
    execute_command().
    """

    trigger_characters: Sequence[str] = ()
    resolve_provider: bool = False
    position_encoding: str = DEFAULT_ENCODING

    @property
    @abstractmethod
    def provider_id(self) -> Any:
        """Stable identifier for this provider"""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human readable name used in notifications"""
        pass

    @property
    def is_available(self) -> bool:
        """False once the provider has shut down."""
        return True

    @abstractmethod
    async def complete(self, params: CompletionParams) -> Optional[CompletionResult]:
        """
        Request completions at a position.

        Args:
            params: Document, position and trigger context

        Returns:
            A list of items, a CompletionList (or their JSON shapes), or None

        Raises:
            ProviderError: If the provider answers with a protocol error
        """
        pass

    async def resolve(self, item: CompletionItem) -> Optional[CompletionItem]:
        """
        Fill in lazily computed fields of an item (completionItem/resolve).

        Only called when ``resolve_provider`` is set; providers setting it
        override this. The default resolves nothing.

        Returns:
            The resolved item, or None to keep the item as it is

        Raises:
            ProviderError: If the provider answers with a protocol error
        """
        return None

    def execute_command(self, command: Command, surface: Any) -> None:
        """
        Run a command attached to an accepted item.

        Override in subclasses; the default ignores the command.
        """
        return None


# Exceptions
class ProviderError(Exception):
    """Raised when a provider answers a request with a protocol error"""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_response_error(self) -> ResponseError:
        return ResponseError(code=self.code, message=self.message, data=self.data)
