"""
Catalog Provider Tests

The offline provider must be reproducible and must surface failure
modes as explicit responses.
"""

import asyncio

import pytest

from skillgraph.adapter.providers.base import ProviderErrorCode, RecommendationResponse
from skillgraph.adapter.providers.catalog import (
    CATEGORY_PAIRINGS,
    CatalogProvider,
    catalog_entries,
)


def ask(provider, name="React", category="Frontend") -> RecommendationResponse:
    return asyncio.run(provider.generate_suggestions(name, category))


class TestCatalogEntries:

    def test_category_then_name_additions(self):
        entries = catalog_entries("React", "Frontend")
        assert entries[:len(CATEGORY_PAIRINGS["Frontend"])] == list(CATEGORY_PAIRINGS["Frontend"])
        assert "Redux" in entries

    def test_name_fragment_case_sensitive(self):
        assert "Django" in catalog_entries("Python", "Backend")
        assert "Django" not in catalog_entries("python", "Backend")

    def test_unknown_category_only_name_additions(self):
        assert catalog_entries("AWS Lambda", "Unheard") == ["S3", "Lambda", "EC2", "DynamoDB"]

    def test_no_duplicates(self):
        entries = catalog_entries("Java and JavaScript", "Backend")
        assert len(entries) == len(set(entries))

    def test_unknown_everything_is_empty(self):
        assert catalog_entries("Juggling", "Hobbies") == []


class TestCatalogProvider:

    def test_success_response(self):
        response = ask(CatalogProvider(seed=1))
        assert response.success
        assert response.provider_version.provider_id == "catalog"
        names = [c.name for c in response.candidates]
        assert sorted(names) == sorted(catalog_entries("React", "Frontend"))
        assert all(c.estimated_level is None for c in response.candidates)
        assert response.candidates[0].rationale == "Suggested based on your skill in React"

    def test_seed_reproduces_order(self):
        first = ask(CatalogProvider(seed=9))
        second = ask(CatalogProvider(seed=9))
        assert [c.name for c in first.candidates] == [c.name for c in second.candidates]

    def test_max_candidates(self):
        response = ask(CatalogProvider(seed=1, max_candidates=2))
        assert len(response.candidates) == 2

    @pytest.mark.parametrize("code", list(ProviderErrorCode))
    def test_failure_modes(self, code):
        response = ask(CatalogProvider(failure_mode=code))
        assert not response.success
        assert response.error_code is code
        assert response.candidates is None

    def test_latency_is_awaited(self):
        response = ask(CatalogProvider(seed=1, latency_seconds=0.02))
        assert response.latency_ms >= 15.0
