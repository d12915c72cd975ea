"""
Completion module - triggering, request fan-out, result normalization and
acceptance.
"""

from compline.completion.acceptance import AcceptanceHandler, AcceptanceOutcome, AcceptState
from compline.completion.coordinator import ProviderResponse, RequestBatch, RequestCoordinator
from compline.completion.engine import CompletionEngine
from compline.completion.items import CandidateMetadata, CandidateRecord, normalize
from compline.completion.latency import LatencyEstimator
from compline.completion.matching import MatchMode
from compline.completion.registry import RegistrationError, SurfaceOptions
from compline.completion.trigger import TriggerController, TriggerState

__all__ = [
    "CompletionEngine",
    "AcceptanceHandler",
    "AcceptanceOutcome",
    "AcceptState",
    "ProviderResponse",
    "RequestBatch",
    "RequestCoordinator",
    "CandidateMetadata",
    "CandidateRecord",
    "normalize",
    "LatencyEstimator",
    "MatchMode",
    "RegistrationError",
    "SurfaceOptions",
    "TriggerController",
    "TriggerState",
]
