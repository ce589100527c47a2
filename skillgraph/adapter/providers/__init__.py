"""
Recommendation Providers Package
================================

Provider implementations for suggestion generation.

Available providers:
- CatalogProvider: Offline static pairings table (NO NETWORK)
- GeminiProvider: Gemini generateContent over httpx
"""

from .base import (
    RecommendationProvider,
    ProviderVersion,
    RecommendationResponse,
    ProviderErrorCode,
    SuggestionCandidate,
)
from .catalog import CatalogProvider
from .gemini import GeminiProvider

__all__ = [
    'RecommendationProvider',
    'ProviderVersion',
    'RecommendationResponse',
    'ProviderErrorCode',
    'SuggestionCandidate',
    'CatalogProvider',
    'GeminiProvider',
]
