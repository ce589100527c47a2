"""
Gemini Recommendation Provider
==============================

Calls the Gemini `generateContent` REST endpoint and parses the first
JSON array in the reply into SuggestionCandidates.

FAILURE MAPPING:
================
    missing api key            -> NOT_CONFIGURED (no request made)
    httpx.TimeoutException     -> TIMEOUT
    httpx.NetworkError         -> NETWORK_ERROR
    HTTP 429                   -> RATE_LIMITED
    other non-200              -> API_ERROR
    unparsable body / no array -> INVALID_RESPONSE
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import List, Optional
import json
import logging
import re
import time

import httpx

from .base import (
    RecommendationProvider,
    ProviderVersion,
    RecommendationResponse,
    ProviderErrorCode,
    SuggestionCandidate,
)


logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODEL = "gemini-2.0-flash"

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")

PROMPT_TEMPLATE = """
Suggest {count} skills that someone skilled in "{skill}" ({category}) should learn next.
Do not repeat "{skill}" itself.

Format as a JSON array of objects with:
- name: string (short skill name)
- level: integer (0-100), the proficiency they could reasonably reach
- rationale: string, one sentence on why it fits

Return only the JSON array with no additional text.
"""


def parse_candidates(text: str) -> List[SuggestionCandidate]:
    """
    Extract candidates from model output.

    Raises ValueError when no JSON array of usable objects is present.
    """
    match = _JSON_ARRAY.search(text)
    if not match:
        raise ValueError("Could not find a JSON array in the response")
    items = json.loads(match.group(0))
    if not isinstance(items, list):
        raise ValueError("Response JSON is not an array")

    candidates = []
    for item in items:
        if isinstance(item, str):
            name, level, rationale = item, None, None
        elif isinstance(item, dict):
            name = item.get("name")
            level = item.get("level")
            rationale = item.get("rationale")
        else:
            continue
        if not isinstance(name, str) or not name.strip():
            continue
        if isinstance(level, bool) or not isinstance(level, (int, float)):
            level = None
        candidates.append(SuggestionCandidate(
            name=name.strip(),
            estimated_level=None if level is None else int(round(level)),
            rationale=rationale if isinstance(rationale, str) else None,
        ))
    if items and not candidates:
        raise ValueError("Response array holds no usable candidates")
    return candidates


class GeminiProvider(RecommendationProvider):
    """
    Remote provider over httpx.

    A transport can be injected (httpx.MockTransport in tests).
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        timeout: float = 10.0,
        count: int = 4,
        temperature: float = 0.2,
        max_output_tokens: int = 1024,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._count = count
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._transport = transport
        self._version = ProviderVersion(
            provider_id="gemini",
            model_id=model,
            api_version="v1beta",
        )

    @property
    def provider_id(self) -> str:
        return "gemini"

    def get_version(self) -> ProviderVersion:
        return self._version

    @property
    def endpoint(self) -> str:
        return f"{GEMINI_BASE_URL}/{self._model}:generateContent"

    def build_request_body(self, seed_skill_name: str, seed_category: str) -> dict:
        prompt = PROMPT_TEMPLATE.format(
            count=self._count, skill=seed_skill_name, category=seed_category
        )
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self._temperature,
                "maxOutputTokens": self._max_output_tokens,
            },
        }

    async def generate_suggestions(
        self,
        seed_skill_name: str,
        seed_category: str,
    ) -> RecommendationResponse:
        invoked_at = datetime.now(timezone.utc)
        started = time.perf_counter()

        def failed(code: ProviderErrorCode, message: str) -> RecommendationResponse:
            logger.warning("Gemini request for %r failed: %s", seed_skill_name, message)
            return RecommendationResponse.failed(
                code, message,
                version=self._version,
                invoked_at=invoked_at,
                latency_ms=(time.perf_counter() - started) * 1000.0,
            )

        if not self._api_key:
            return failed(ProviderErrorCode.NOT_CONFIGURED, "Gemini API key is not set")

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    self.endpoint,
                    params={"key": self._api_key},
                    json=self.build_request_body(seed_skill_name, seed_category),
                )
        except httpx.TimeoutException:
            return failed(ProviderErrorCode.TIMEOUT, f"No response within {self._timeout}s")
        except httpx.NetworkError as e:
            return failed(ProviderErrorCode.NETWORK_ERROR, str(e))

        if response.status_code == 429:
            return failed(ProviderErrorCode.RATE_LIMITED, "HTTP 429")
        if response.status_code != 200:
            return failed(ProviderErrorCode.API_ERROR, f"HTTP {response.status_code}")

        try:
            data = response.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
            candidates = parse_candidates(text)
        except (ValueError, KeyError, IndexError, TypeError) as e:
            return failed(ProviderErrorCode.INVALID_RESPONSE, str(e))

        return RecommendationResponse(
            success=True,
            candidates=tuple(candidates),
            provider_version=self._version,
            invoked_at=invoked_at,
            latency_ms=(time.perf_counter() - started) * 1000.0,
        )
