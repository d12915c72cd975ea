"""
Completion engine - registration API and host event entry points.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from compline.completion.acceptance import AcceptanceHandler, AcceptanceOutcome
from compline.completion.context import SessionContext
from compline.completion.coordinator import RequestCoordinator
from compline.completion.items import Convert
from compline.completion.latency import LatencyEstimator
from compline.completion.matching import MatchMode, make_matcher
from compline.completion.registry import RegistrationError, SurfaceOptions, SurfaceRegistration
from compline.completion.trigger import TriggerController
from compline.config import CompletionConfig
from compline.host.notify import Notifier
from compline.host.scheduler import AsyncioScheduler, Scheduler, monotonic_ms
from compline.host.surface import EditorSurface
from compline.lsp.protocol import CompletionContext
from compline.lsp.provider import CompletionProvider
from compline.utils.logger import logger as clog

logger = logging.getLogger(__name__)


@dataclass
class SurfaceSession:
    """Everything the engine keeps for one surface."""

    registration: SurfaceRegistration
    context: SessionContext
    trigger: TriggerController
    acceptance: AcceptanceHandler


class CompletionEngine:
    """
    Orchestrates completion across providers and surfaces.

    Features:
    - Surfaces are set up on the first enable() and torn down when their last
      provider is disabled or the surface detaches
    - One latency estimate shared by every surface
    - One session context and trigger controller per surface
    """

    def __init__(
        self,
        config: Optional[CompletionConfig] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[Callable[[], float]] = None,
        notifier: Optional[Notifier] = None,
    ):
        """
        Initialize the engine.

        Args:
            config: Settings (default: built from the environment)
            scheduler: Timer capability (default: the running asyncio loop)
            clock: Millisecond clock (default: monotonic)
            notifier: User-visible notification channel
        """
        self.config = config or CompletionConfig.from_env()
        self.scheduler = scheduler or AsyncioScheduler()
        self.clock = clock or monotonic_ms
        self.notifier = notifier or Notifier()
        self.estimator = LatencyEstimator(
            window=self.config.rtt_window,
            warmup=self.config.rtt_warmup,
            initial_ms=self.config.initial_rtt_ms,
        )
        self.coordinator = RequestCoordinator()
        self.match = make_matcher(MatchMode(self.config.match_mode))
        self._providers: Dict[Any, CompletionProvider] = {}
        self._sessions: Dict[Any, SurfaceSession] = {}

        if self.config.enable_logging:
            clog.configure(level=self.config.log_level, log_dir=self.config.log_dir)

    # --- Registration ---

    def enable(
        self,
        provider: CompletionProvider,
        surface: EditorSurface,
        autotrigger: bool = False,
        convert: Optional[Convert] = None,
    ) -> None:
        """
        Enable completion from ``provider`` on ``surface``.

        Options only take effect when they create the surface's registration;
        later calls add providers to it.

        Args:
            provider: Completion provider
            surface: Editable surface
            autotrigger: Trigger completion on the providers' trigger characters
            convert: Hook customizing how items are displayed
        """
        if provider is None or surface is None:
            raise RegistrationError("enable() needs a provider and a surface")

        known = self._providers.get(provider.provider_id)
        if known is not None and known is not provider:
            raise RegistrationError(f"Another provider is registered as {provider.provider_id!r}")
        self._providers[provider.provider_id] = provider

        session = self._sessions.get(surface.surface_id)
        if session is None:
            session = self._create_session(surface, SurfaceOptions(autotrigger=autotrigger, convert=convert))
            self._sessions[surface.surface_id] = session

        if session.registration.add_provider(provider):
            logger.info(f"Enabled completion from {provider.name} on {surface.surface_id}")

    def disable(self, provider_id: Any, surface_id: Any) -> None:
        """Disable a provider on a surface; the last one tears the surface down."""
        session = self._sessions.get(surface_id)
        if session is None:
            return
        if session.registration.remove_provider(provider_id):
            self.detach(surface_id)
        logger.info(f"Disabled completion from {provider_id} on {surface_id}")

    def remove_provider(self, provider_id: Any) -> None:
        """Forget a provider that shut down, on every surface."""
        self._providers.pop(provider_id, None)
        for surface_id, session in list(self._sessions.items()):
            if provider_id in session.registration.providers:
                self.disable(provider_id, surface_id)

    def get_provider(self, provider_id: Any) -> Optional[CompletionProvider]:
        return self._providers.get(provider_id)

    def detach(self, surface_id: Any) -> None:
        """Tear down everything kept for a surface (surface closed)."""
        session = self._sessions.pop(surface_id, None)
        if session is not None:
            session.trigger.close()

    def is_enabled(self, surface_id: Any) -> bool:
        return surface_id in self._sessions

    def get_registration(self, surface_id: Any) -> Optional[SurfaceRegistration]:
        session = self._sessions.get(surface_id)
        return session.registration if session else None

    def get_session(self, surface_id: Any) -> Optional[SurfaceSession]:
        return self._sessions.get(surface_id)

    def _create_session(self, surface: EditorSurface, options: SurfaceOptions) -> SurfaceSession:
        registration = SurfaceRegistration(surface=surface, options=options)
        context = SessionContext()
        trigger = TriggerController(
            registration=registration,
            context=context,
            estimator=self.estimator,
            coordinator=self.coordinator,
            scheduler=self.scheduler,
            clock=self.clock,
            notifier=self.notifier,
            match=self.match,
            trigger_delay_ms=self.config.trigger_delay_ms,
        )
        acceptance = AcceptanceHandler(
            surface=surface,
            context=context,
            get_provider=self.get_provider,
            notifier=self.notifier,
        )
        return SurfaceSession(registration, context, trigger, acceptance)

    # --- Requests ---

    def invoke(self, surface_id: Any, ctx: Optional[CompletionContext] = None) -> None:
        """Trigger completion once on a surface (trigger kind Invoked by default)."""
        session = self._sessions.get(surface_id)
        if session is None:
            logger.debug(f"Completion is not enabled on {surface_id}")
            return
        session.trigger.get(ctx)

    # --- Host events ---

    def on_insert_char(self, surface_id: Any, char: str) -> None:
        """A character is about to be inserted on the surface."""
        session = self._sessions.get(surface_id)
        if session is not None and session.registration.options.autotrigger:
            session.trigger.on_insert_char(char)

    def on_insert_leave(self, surface_id: Any) -> None:
        """The surface left insert mode; drops timers, requests and popup state."""
        session = self._sessions.get(surface_id)
        if session is not None:
            session.trigger.on_insert_leave()

    def on_complete_done(
        self, surface_id: Any, completed: Any, reason: str = "accept"
    ) -> Optional[AcceptanceOutcome]:
        """
        The popup closed.

        Only an ``accept`` reason applies side effects; cancelled or
        discarded popups are ignored.
        """
        session = self._sessions.get(surface_id)
        if session is None or reason != "accept":
            return None
        return session.acceptance.accept(completed)
