"""
Per-surface provider registration.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from compline.completion.items import Convert
from compline.host.surface import EditorSurface
from compline.lsp.provider import CompletionProvider


@dataclass
class SurfaceOptions:
    """How completion behaves on a surface."""

    autotrigger: bool = False
    convert: Optional[Convert] = None


@dataclass
class SurfaceRegistration:
    """
    Providers enabled on one surface.

    ``triggers`` maps a trigger character to the providers that declared it,
    in the order they were enabled.
    """

    surface: EditorSurface
    options: SurfaceOptions = field(default_factory=SurfaceOptions)
    providers: Dict[Any, CompletionProvider] = field(default_factory=dict)
    triggers: Dict[str, List[CompletionProvider]] = field(default_factory=dict)

    def add_provider(self, provider: CompletionProvider) -> bool:
        """
        Register a provider and its trigger characters.

        Returns:
            False if the provider was already registered
        """
        if provider.provider_id in self.providers:
            return False

        self.providers[provider.provider_id] = provider
        for char in provider.trigger_characters or []:
            for_char = self.triggers.setdefault(char, [])
            if not any(p.provider_id == provider.provider_id for p in for_char):
                for_char.append(provider)
        return True

    def remove_provider(self, provider_id: Any) -> bool:
        """
        Unregister a provider.

        Returns:
            True if no providers remain and the registration should go away
        """
        self.providers.pop(provider_id, None)
        if not self.providers:
            return True
        for char, providers in list(self.triggers.items()):
            remaining = [p for p in providers if p.provider_id != provider_id]
            if remaining:
                self.triggers[char] = remaining
            else:
                del self.triggers[char]
        return False

    def providers_for_trigger(self, char: str) -> List[CompletionProvider]:
        return list(self.triggers.get(char, []))


# Exceptions
class RegistrationError(Exception):
    """Raised when enabling or disabling completion with invalid arguments"""

    pass
