"""
Catalog Recommendation Provider
===============================

Offline provider backed by a static table of common skill pairings.

GUARANTEES:
- Same (seed, call sequence) -> identical candidates
- Explicit failure modes can be triggered
- No network access
"""

from __future__ import annotations
import asyncio
import random
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from .base import (
    RecommendationProvider,
    ProviderVersion,
    RecommendationResponse,
    ProviderErrorCode,
    SuggestionCandidate,
)


CATEGORY_PAIRINGS: Dict[str, Tuple[str, ...]] = {
    "Frontend": ("React Testing Library", "Storybook", "Webpack", "Vite",
                 "Next.js", "Gatsby", "Tailwind CSS"),
    "Backend": ("Redis", "GraphQL", "gRPC", "Kafka", "RabbitMQ", "Prisma", "TypeORM"),
    "Design": ("User Research", "Design Systems", "Prototyping", "Wireframing",
               "Motion Design", "Color Theory"),
    "DevOps": ("Terraform", "Ansible", "Prometheus", "Grafana", "Jenkins",
               "GitHub Actions", "CircleCI"),
    "AI": ("Hugging Face", "Scikit-learn", "Computer Vision",
           "Reinforcement Learning", "LangChain", "MLOps"),
    "Data": ("Tableau", "Power BI", "dbt", "Snowflake", "Apache Spark", "Pandas",
             "Data Governance"),
    "Mobile": ("Mobile UX Design", "Firebase", "PWA", "Offline-first Design",
               "App Store Optimization"),
    "Cloud": ("Microservices", "Serverless Architecture", "CDN", "Cloud Security",
              "Multi-cloud Strategy"),
    "Advanced": ("System Design", "Architecture Patterns", "Performance Optimization",
                 "Scalability"),
    "Intermediate": ("Testing", "Documentation", "Code Review", "Refactoring"),
    "Beginner": ("Best Practices", "Clean Code", "Version Control", "Problem Solving"),
}

# Seed name fragment (case-sensitive, as skill names are written) -> additions
NAME_PAIRINGS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("React", ("Redux", "React Router", "React Query")),
    ("Node", ("Express.js", "Nest.js", "Socket.io")),
    ("Python", ("Django", "FastAPI", "NumPy")),
    ("Java", ("Spring Boot", "Hibernate", "JUnit")),
    ("CSS", ("Sass", "CSS-in-JS", "CSS Modules")),
    ("AWS", ("S3", "Lambda", "EC2", "DynamoDB")),
)


def catalog_entries(seed_skill_name: str, seed_category: str) -> List[str]:
    """Category pairings then name-specific additions, duplicates removed."""
    names = list(CATEGORY_PAIRINGS.get(seed_category, ()))
    for fragment, additions in NAME_PAIRINGS:
        if fragment in seed_skill_name:
            names.extend(additions)
    return list(dict.fromkeys(names))


class CatalogProvider(RecommendationProvider):
    """
    Static-table provider.

    Candidates are shuffled with a private seeded RNG so repeated calls
    vary, but a fixed seed reproduces the whole sequence.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        latency_seconds: float = 0.0,
        failure_mode: Optional[ProviderErrorCode] = None,
        max_candidates: Optional[int] = None,
    ):
        """
        Args:
            seed: RNG seed for the shuffle
            latency_seconds: Simulated latency (awaited, not blocking)
            failure_mode: If set, all calls fail with this error
            max_candidates: Truncate the shuffled list (None = everything)
        """
        self._rng = random.Random(seed)
        self._latency_seconds = latency_seconds
        self._failure_mode = failure_mode
        self._max_candidates = max_candidates
        self._version = ProviderVersion(
            provider_id="catalog",
            model_id="static-pairings-v1",
            api_version="1.0.0",
        )

    @property
    def provider_id(self) -> str:
        return "catalog"

    def get_version(self) -> ProviderVersion:
        return self._version

    async def generate_suggestions(
        self,
        seed_skill_name: str,
        seed_category: str,
    ) -> RecommendationResponse:
        invoked_at = datetime.now(timezone.utc)
        started = time.perf_counter()

        if self._latency_seconds > 0:
            await asyncio.sleep(self._latency_seconds)

        latency_ms = (time.perf_counter() - started) * 1000.0

        if self._failure_mode is not None:
            return RecommendationResponse.failed(
                self._failure_mode,
                f"Catalog provider configured to fail: {self._failure_mode.value}",
                version=self._version,
                invoked_at=invoked_at,
                latency_ms=latency_ms,
            )

        names = catalog_entries(seed_skill_name, seed_category)
        self._rng.shuffle(names)
        if self._max_candidates is not None:
            names = names[:self._max_candidates]

        candidates = tuple(
            SuggestionCandidate(
                name=name,
                rationale=f"Suggested based on your skill in {seed_skill_name}",
            )
            for name in names
        )
        return RecommendationResponse(
            success=True,
            candidates=candidates,
            provider_version=self._version,
            invoked_at=invoked_at,
            latency_ms=latency_ms,
        )
