"""
Adapter Layer
=============

Boundary to external recommendation capabilities. Nothing in here
touches the graph; providers only propose candidate skills.
"""

from .providers import (
    RecommendationProvider,
    RecommendationResponse,
    ProviderErrorCode,
    SuggestionCandidate,
    CatalogProvider,
    GeminiProvider,
)

__all__ = [
    'RecommendationProvider',
    'RecommendationResponse',
    'ProviderErrorCode',
    'SuggestionCandidate',
    'CatalogProvider',
    'GeminiProvider',
]
