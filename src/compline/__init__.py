"""
compline - LSP completion orchestration for editable text surfaces.

Fans completion requests out to language-server style providers, reconciles
their results into one popup and applies accept-time side effects.
"""

__version__ = "0.1.0"

from compline.completion.engine import CompletionEngine
from compline.config import CompletionConfig, load_config
from compline.host.surface import EditorSurface
from compline.lsp.provider import CompletionProvider, ProviderError

__all__ = [
    "CompletionEngine",
    "CompletionConfig",
    "load_config",
    "EditorSurface",
    "CompletionProvider",
    "ProviderError",
    "__version__",
]
