"""
Recommendation Provider Abstraction Layer
=========================================

Abstract interface for whatever proposes related skills (an LLM, a
static catalog, a remote service).

BOUNDARY ENFORCEMENT:
- Providers only propose candidates; placement and dedupe happen in core
- Failures are explicit responses, never silent
- Providers are async: the caller bounds each call with a timeout
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple
from enum import Enum


class ProviderErrorCode(Enum):
    """Explicit failure codes for recommendation calls."""
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    INVALID_RESPONSE = "invalid_response"
    API_ERROR = "api_error"
    NETWORK_ERROR = "network_error"
    NOT_CONFIGURED = "not_configured"


@dataclass(frozen=True)
class ProviderVersion:
    """Which backend produced a response."""
    provider_id: str       # "catalog" | "gemini"
    model_id: str
    api_version: str


@dataclass(frozen=True)
class SuggestionCandidate:
    """
    One proposed skill.

    estimated_level is advisory; the generator clamps it to [0, 100], or
    derives it from the seed's level when the provider has no estimate.
    """
    name: str
    estimated_level: Optional[int] = None
    rationale: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Candidate name must be a non-empty string")


@dataclass(frozen=True)
class RecommendationResponse:
    """
    Immutable response from a recommendation provider.

    INVARIANT: Either (success=True, candidates set) or (success=False, error set)
    """
    success: bool
    candidates: Optional[Tuple[SuggestionCandidate, ...]] = None

    # Failure info (only set if success=False)
    error_code: Optional[ProviderErrorCode] = None
    error_message: Optional[str] = None

    # Invocation metadata
    provider_version: Optional[ProviderVersion] = None
    invoked_at: Optional[datetime] = None
    latency_ms: float = 0.0

    def __post_init__(self):
        if self.success and self.candidates is None:
            raise ValueError("Successful response must have candidates")
        if not self.success and self.error_code is None:
            raise ValueError("Failed response must have error_code")

    @staticmethod
    def failed(
        code: ProviderErrorCode,
        message: str,
        version: Optional[ProviderVersion] = None,
        invoked_at: Optional[datetime] = None,
        latency_ms: float = 0.0,
    ) -> RecommendationResponse:
        return RecommendationResponse(
            success=False,
            error_code=code,
            error_message=message,
            provider_version=version,
            invoked_at=invoked_at,
            latency_ms=latency_ms,
        )


class RecommendationProvider(ABC):
    """
    Abstract recommendation provider interface.

    GUARANTEES:
    - Calls do not touch the graph
    - Failures are RecommendationResponse with error_code

    EXPLICIT FAILURE STATES:
    - TIMEOUT: Backend did not answer in time
    - RATE_LIMITED: Backend rejected due to rate limits
    - INVALID_RESPONSE: Reply couldn't be parsed into candidates
    - API_ERROR: Backend returned an error status
    - NETWORK_ERROR: Connection failed
    - NOT_CONFIGURED: Missing credentials or endpoint
    """

    @abstractmethod
    async def generate_suggestions(
        self,
        seed_skill_name: str,
        seed_category: str,
    ) -> RecommendationResponse:
        """
        Propose skills related to the seed.

        SHOULD return RecommendationResponse rather than raise.
        """
        pass

    @abstractmethod
    def get_version(self) -> ProviderVersion:
        pass

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique provider identifier."""
        pass
