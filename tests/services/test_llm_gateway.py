"""
Tests for the LLM gateway (posture_coach/services/llm_gateway.py).

The HTTP layer is replaced with httpx.MockTransport and the sleep function
with an AsyncMock, so retries run instantly and their delays can be
asserted.
"""

import json
from typing import Callable, List
from unittest.mock import AsyncMock

import httpx
import pytest

from posture_coach.services.llm_gateway import MAX_RETRY_AFTER_SECONDS, LLMGateway
from posture_coach.utils.errors import ErrorCode, ServiceError

MESSAGES = [
    {"role": "system", "content": "Select exercises."},
    {"role": "user", "content": "1. Plank"},
]


def _completion(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


def _make_gateway(handler: Callable[[httpx.Request], httpx.Response], **kwargs):
    """Gateway wired to a mock transport; returns (gateway, sleep mock)."""
    sleep = AsyncMock()
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    gateway = LLMGateway(
        api_key="test-openrouter-key",
        base_url="https://llm.test/api/v1",
        model="deepseek/deepseek-r1",
        client=client,
        sleep=sleep,
        **kwargs,
    )
    return gateway, sleep


def _sequence(responses: List[httpx.Response]):
    """Handler returning the given responses in order and recording requests."""
    calls: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return responses[len(calls) - 1]

    return handler, calls


# =============================================================================
# SUCCESS PATH
# =============================================================================

class TestGatewaySuccess:

    @pytest.mark.asyncio
    async def test_returns_parsed_json_object(self):
        handler, calls = _sequence([_completion('{"selected_exercises": ["Plank"], "reasoning": "core"}')])
        gateway, sleep = _make_gateway(handler)

        result = await gateway.complete(MESSAGES)

        assert result == {"selected_exercises": ["Plank"], "reasoning": "core"}
        assert len(calls) == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_request_shape(self):
        handler, calls = _sequence([_completion("{}")])
        gateway, _ = _make_gateway(handler, temperature=0.3, max_tokens=1500, extra_headers={"X-Title": "Test"})

        await gateway.complete(MESSAGES)

        request = calls[0]
        body = json.loads(request.content)
        assert str(request.url) == "https://llm.test/api/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer test-openrouter-key"
        assert request.headers["X-Title"] == "Test"
        assert body["model"] == "deepseek/deepseek-r1"
        assert body["messages"] == MESSAGES
        assert body["temperature"] == 0.3
        assert body["max_tokens"] == 1500
        assert body["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_call_overrides(self):
        handler, calls = _sequence([_completion("{}")])
        gateway, _ = _make_gateway(handler)

        await gateway.complete(MESSAGES, temperature=0.0, max_tokens=200, extra_params={"top_p": 0.9})

        body = json.loads(calls[0].content)
        assert body["temperature"] == 0.0
        assert body["max_tokens"] == 200
        assert body["top_p"] == 0.9

    @pytest.mark.asyncio
    async def test_fenced_content_is_extracted(self):
        content = '```json\n{"selected_exercises":["A","B","C"]}\n```'
        handler, _ = _sequence([_completion(content)])
        gateway, _ = _make_gateway(handler)

        assert await gateway.complete(MESSAGES) == {"selected_exercises": ["A", "B", "C"]}


# =============================================================================
# RATE LIMITING
# =============================================================================

class TestGatewayRateLimit:

    @pytest.mark.asyncio
    async def test_429_then_success(self):
        handler, calls = _sequence([
            httpx.Response(429),
            httpx.Response(429),
            _completion('{"selected_products": ["Tapis de yoga 8mm"]}'),
        ])
        gateway, sleep = _make_gateway(handler, max_retries=3, retry_delay_seconds=1.0)

        result = await gateway.complete(MESSAGES)

        assert result == {"selected_products": ["Tapis de yoga 8mm"]}
        assert len(calls) == 3
        # Exponential backoff: 1s then 2s
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_429_on_every_attempt_is_rate_limit(self):
        handler, calls = _sequence([httpx.Response(429) for _ in range(3)])
        gateway, sleep = _make_gateway(handler, max_retries=3)

        with pytest.raises(ServiceError) as exc_info:
            await gateway.complete(MESSAGES)

        assert exc_info.value.code is ErrorCode.LLM_RATE_LIMIT
        assert len(calls) == 3
        # No sleep after the final attempt
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_retry_after_header_is_honoured(self):
        handler, _ = _sequence([
            httpx.Response(429, headers={"Retry-After": "7"}),
            _completion("{}"),
        ])
        gateway, sleep = _make_gateway(handler, retry_delay_seconds=1.0)

        await gateway.complete(MESSAGES)

        sleep.assert_awaited_once_with(7.0)

    @pytest.mark.asyncio
    async def test_non_numeric_retry_after_falls_back_to_backoff(self):
        handler, _ = _sequence([
            httpx.Response(429, headers={"Retry-After": "Wed, 21 Oct 2026 07:28:00 GMT"}),
            _completion("{}"),
        ])
        gateway, sleep = _make_gateway(handler, retry_delay_seconds=0.5)

        await gateway.complete(MESSAGES)

        sleep.assert_awaited_once_with(0.5)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", ["inf", "-inf", "nan", "Infinity"])
    async def test_non_finite_retry_after_falls_back_to_backoff(self, header):
        handler, _ = _sequence([
            httpx.Response(429, headers={"Retry-After": header}),
            _completion("{}"),
        ])
        gateway, sleep = _make_gateway(handler, retry_delay_seconds=0.5)

        await gateway.complete(MESSAGES)

        sleep.assert_awaited_once_with(0.5)

    @pytest.mark.asyncio
    async def test_huge_retry_after_is_capped(self):
        handler, _ = _sequence([
            httpx.Response(429, headers={"Retry-After": "86400"}),
            _completion("{}"),
        ])
        gateway, sleep = _make_gateway(handler, retry_delay_seconds=1.0)

        await gateway.complete(MESSAGES)

        sleep.assert_awaited_once_with(MAX_RETRY_AFTER_SECONDS)


# =============================================================================
# NON-RETRIED FAILURES
# =============================================================================

class TestGatewayFailures:

    @pytest.mark.asyncio
    async def test_http_error_is_not_retried(self):
        handler, calls = _sequence([httpx.Response(500, text="upstream exploded")])
        gateway, sleep = _make_gateway(handler)

        with pytest.raises(ServiceError) as exc_info:
            await gateway.complete(MESSAGES)

        error = exc_info.value
        assert error.code is ErrorCode.LLM_HTTP_ERROR
        assert error.details["status_code"] == 500
        assert error.details["body"] == "upstream exploded"
        assert len(calls) == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_choices(self):
        handler, calls = _sequence([httpx.Response(200, json={"error": "no choices"})])
        gateway, _ = _make_gateway(handler)

        with pytest.raises(ServiceError) as exc_info:
            await gateway.complete(MESSAGES)

        assert exc_info.value.code is ErrorCode.LLM_INVALID_RESPONSE
        assert exc_info.value.message == "Missing choices in response"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_null_content(self):
        handler, _ = _sequence([httpx.Response(200, json={"choices": [{"message": {"content": None}}]})])
        gateway, _ = _make_gateway(handler)

        with pytest.raises(ServiceError) as exc_info:
            await gateway.complete(MESSAGES)

        assert exc_info.value.code is ErrorCode.LLM_INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        handler, _ = _sequence([httpx.Response(200, text="<html>gateway</html>")])
        gateway, _ = _make_gateway(handler)

        with pytest.raises(ServiceError) as exc_info:
            await gateway.complete(MESSAGES)

        assert exc_info.value.code is ErrorCode.LLM_INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_unparseable_content_is_not_retried(self):
        handler, calls = _sequence([_completion("I'd recommend planks and squats!")])
        gateway, sleep = _make_gateway(handler)

        with pytest.raises(ServiceError) as exc_info:
            await gateway.complete(MESSAGES)

        error = exc_info.value
        assert error.code is ErrorCode.LLM_INVALID_RESPONSE
        assert error.details["content"] == "I'd recommend planks and squats!"
        assert error.details["parse_error"].startswith("direct:")
        assert len(calls) == 1
        sleep.assert_not_awaited()


# =============================================================================
# TRANSPORT ERRORS
# =============================================================================

class TestGatewayTransportErrors:

    @pytest.mark.asyncio
    async def test_timeout_on_every_attempt(self):
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            raise httpx.ReadTimeout("timed out", request=request)

        gateway, sleep = _make_gateway(handler, max_retries=3, retry_delay_seconds=1.0)

        with pytest.raises(ServiceError) as exc_info:
            await gateway.complete(MESSAGES)

        assert exc_info.value.code is ErrorCode.LLM_TIMEOUT
        assert len(attempts) == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_connection_errors_exhaust_retries(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        gateway, _ = _make_gateway(handler, max_retries=2)

        with pytest.raises(ServiceError) as exc_info:
            await gateway.complete(MESSAGES)

        assert exc_info.value.code is ErrorCode.LLM_RETRY_EXHAUSTED
        assert exc_info.value.details["attempts"] == 2

    @pytest.mark.asyncio
    async def test_transient_error_then_success(self):
        state = {"calls": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            state["calls"] += 1
            if state["calls"] == 1:
                raise httpx.ConnectTimeout("slow", request=request)
            return _completion('{"ok": true}')

        gateway, sleep = _make_gateway(handler)

        assert await gateway.complete(MESSAGES) == {"ok": True}
        sleep.assert_awaited_once()


class TestGatewayConfiguration:

    def test_max_retries_must_be_positive(self):
        with pytest.raises(ValueError):
            LLMGateway(api_key="k", max_retries=0)

    def test_url_is_built_from_base_url(self):
        assert LLMGateway(api_key="k", base_url="https://x.test/v1/").url == "https://x.test/v1/chat/completions"

    def test_from_settings(self):
        gateway = LLMGateway.from_settings()

        assert gateway.model
        assert gateway.max_retries >= 1
        assert gateway.url.endswith("/chat/completions")
