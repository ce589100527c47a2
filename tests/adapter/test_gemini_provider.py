"""
Gemini Provider Tests

All traffic goes through httpx.MockTransport; no request leaves the
process.
"""

import asyncio
import json

import httpx
import pytest

from skillgraph.adapter.providers.base import ProviderErrorCode
from skillgraph.adapter.providers.gemini import (
    DEFAULT_MODEL,
    GeminiProvider,
    parse_candidates,
)


def gemini_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


FENCED_REPLY = """```json
[
  {"name": "Redux", "level": 72, "rationale": "State management for React apps"},
  {"name": "Next.js", "level": 65.4, "rationale": "Server rendering"},
  {"name": "  ", "level": 10}
]
```"""


def make_provider(handler, api_key="test-key", **kwargs) -> GeminiProvider:
    return GeminiProvider(api_key, transport=httpx.MockTransport(handler), **kwargs)


def ask(provider):
    return asyncio.run(provider.generate_suggestions("React", "Frontend"))


class TestParseCandidates:

    def test_fenced_objects(self):
        candidates = parse_candidates(FENCED_REPLY)
        assert [c.name for c in candidates] == ["Redux", "Next.js"]
        assert [c.estimated_level for c in candidates] == [72, 65]
        assert candidates[0].rationale == "State management for React apps"

    def test_plain_strings(self):
        candidates = parse_candidates('Sure! ["Redux", "Jest"]')
        assert [c.name for c in candidates] == ["Redux", "Jest"]
        assert candidates[0].estimated_level is None

    def test_non_numeric_level_dropped(self):
        [candidate] = parse_candidates('[{"name": "Redux", "level": "high"}]')
        assert candidate.estimated_level is None

    def test_no_array(self):
        with pytest.raises(ValueError):
            parse_candidates("I cannot help with that.")

    def test_nothing_usable(self):
        with pytest.raises(ValueError):
            parse_candidates("[1, 2, {}]")

    def test_empty_array(self):
        assert parse_candidates("[]") == []


class TestRequest:

    def test_request_shape(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=gemini_reply(FENCED_REPLY))

        response = ask(make_provider(handler, count=3, temperature=0.5))

        assert response.success
        [request] = seen
        assert request.method == "POST"
        assert request.url.path.endswith(f"/models/{DEFAULT_MODEL}:generateContent")
        assert request.url.params["key"] == "test-key"
        body = json.loads(request.content)
        prompt = body["contents"][0]["parts"][0]["text"]
        assert '"React"' in prompt
        assert "Suggest 3 skills" in prompt
        assert body["generationConfig"]["temperature"] == 0.5

    def test_success_response(self):
        response = ask(make_provider(
            lambda request: httpx.Response(200, json=gemini_reply(FENCED_REPLY))
        ))
        assert [c.name for c in response.candidates] == ["Redux", "Next.js"]
        assert response.provider_version.model_id == DEFAULT_MODEL


class TestFailureMapping:

    def test_missing_key_makes_no_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200)

        response = ask(make_provider(handler, api_key=None))
        assert response.error_code is ProviderErrorCode.NOT_CONFIGURED
        assert calls == []

    @pytest.mark.parametrize("status,code", [
        (429, ProviderErrorCode.RATE_LIMITED),
        (500, ProviderErrorCode.API_ERROR),
        (403, ProviderErrorCode.API_ERROR),
    ])
    def test_http_status(self, status, code):
        response = ask(make_provider(lambda request: httpx.Response(status)))
        assert not response.success
        assert response.error_code is code

    def test_garbage_body(self):
        response = ask(make_provider(lambda request: httpx.Response(200, text="not json")))
        assert response.error_code is ProviderErrorCode.INVALID_RESPONSE

    def test_unexpected_json_shape(self):
        response = ask(make_provider(lambda request: httpx.Response(200, json={"candidates": []})))
        assert response.error_code is ProviderErrorCode.INVALID_RESPONSE

    def test_reply_without_array(self):
        response = ask(make_provider(
            lambda request: httpx.Response(200, json=gemini_reply("no list here"))
        ))
        assert response.error_code is ProviderErrorCode.INVALID_RESPONSE

    def test_connect_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        response = ask(make_provider(handler))
        assert response.error_code is ProviderErrorCode.NETWORK_ERROR

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        response = ask(make_provider(handler))
        assert response.error_code is ProviderErrorCode.TIMEOUT
