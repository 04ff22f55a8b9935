"""
LLM Gateway - OpenRouter chat-completion client

This service executes chat-completion calls against an OpenAI-compatible
endpoint (OpenRouter by default) and returns the model's answer as a parsed
JSON object.

Architecture:
- Transport: httpx.AsyncClient (shared pool from the app lifespan, or one per call)
- Model: DeepSeek R1 via OpenRouter (LLM_MODEL)
- Output: response_format={"type": "json_object"}, then tolerant extraction
  (see posture_coach/utils/json_extraction.py)

Retry policy:
- HTTP 429: honour Retry-After when numeric, else base_delay * 2**attempt
- Timeouts and transport errors: base_delay * 2**attempt
- Other HTTP errors and malformed responses are NOT retried
- At most `max_retries` attempts in total

Failures are raised as ServiceError with one of the LLM_* error codes.
"""

import asyncio
import math
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from posture_coach.config import settings
from posture_coach.utils.errors import ErrorCode, ServiceError
from posture_coach.utils.json_extraction import JSONExtractionError, extract_json_object
from posture_coach.utils.logging import get_logger

logger = get_logger(__name__)

Message = Dict[str, str]
SleepFunc = Callable[[float], Awaitable[None]]

# Error bodies returned in ServiceError details are truncated to this length
MAX_ERROR_BODY_CHARS = 2000

# Upper bound on a server-requested Retry-After delay
MAX_RETRY_AFTER_SECONDS = 60.0


def _retry_after_seconds(response: httpx.Response) -> Optional[float]:
    """Numeric Retry-After header in seconds (capped), or None when absent, unparseable or non-finite."""
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        return None
    if not math.isfinite(seconds):
        return None
    return min(max(seconds, 0.0), MAX_RETRY_AFTER_SECONDS)


class LLMGateway:
    """
    Chat-completion client with retry/backoff and tolerant JSON parsing.

    Instances hold configuration only (plus an optional shared HTTP client);
    nothing is remembered between calls, so one gateway can serve
    concurrent requests.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        model: str = "deepseek/deepseek-r1",
        temperature: float = 0.3,
        max_tokens: int = 1500,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
        timeout_seconds: float = 60.0,
        extra_headers: Optional[Dict[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")

        self.api_key = api_key
        self.url = f"{base_url.rstrip('/')}/chat/completions"
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds
        self.timeout_seconds = timeout_seconds
        self.extra_headers = dict(extra_headers or {})
        self._client = client
        self._sleep = sleep

    @classmethod
    def from_settings(cls, client: Optional[httpx.AsyncClient] = None) -> "LLMGateway":
        """Build a gateway from application settings."""
        return cls(
            api_key=settings.OPENROUTER_API_KEY,
            base_url=settings.LLM_BASE_URL,
            model=settings.LLM_MODEL,
            temperature=settings.LLM_TEMPERATURE,
            max_tokens=settings.LLM_MAX_TOKENS,
            max_retries=settings.LLM_MAX_RETRIES,
            retry_delay_seconds=settings.LLM_RETRY_DELAY_SECONDS,
            timeout_seconds=settings.LLM_TIMEOUT_SECONDS,
            extra_headers={
                "HTTP-Referer": settings.LLM_HTTP_REFERER,
                "X-Title": settings.LLM_APP_TITLE,
            },
            client=client,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        headers.update(self.extra_headers)
        return headers

    def _payload(
        self,
        messages: List[Message],
        temperature: Optional[float],
        max_tokens: Optional[int],
        extra_params: Optional[Dict[str, Any]],
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature if temperature is None else temperature,
            "max_tokens": self.max_tokens if max_tokens is None else max_tokens,
            "response_format": {"type": "json_object"},
        }
        if extra_params:
            payload.update(extra_params)
        return payload

    def _backoff(self, attempt: int) -> float:
        return self.retry_delay_seconds * (2 ** attempt)

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(
                self.url, json=payload, headers=self._headers(), timeout=self.timeout_seconds
            )
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            return await client.post(self.url, json=payload, headers=self._headers())

    async def complete(
        self,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        extra_params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Run one chat completion and return the parsed JSON object.

        Args:
            messages: Chat messages ([{"role": ..., "content": ...}])
            temperature: Overrides the configured temperature
            max_tokens: Overrides the configured max_tokens
            extra_params: Extra request body fields merged last

        Returns:
            The JSON object found in choices[0].message.content

        Raises:
            ServiceError: LLM_RATE_LIMIT, LLM_HTTP_ERROR, LLM_INVALID_RESPONSE,
                LLM_TIMEOUT or LLM_RETRY_EXHAUSTED
        """
        payload = self._payload(messages, temperature, max_tokens, extra_params)
        last_transport_error: Optional[httpx.TransportError] = None

        for attempt in range(self.max_retries):
            is_last_attempt = attempt == self.max_retries - 1

            try:
                response = await self._post(payload)
            except httpx.TransportError as e:
                # TimeoutException is a TransportError subclass
                last_transport_error = e
                if is_last_attempt:
                    break
                delay = self._backoff(attempt)
                logger.warning(
                    f"LLM request failed ({type(e).__name__}). Retrying in {delay:.1f}s "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )
                await self._sleep(delay)
                continue

            if response.status_code == 429:
                if is_last_attempt:
                    logger.error(f"LLM rate limit persisted after {self.max_retries} attempts")
                    raise ServiceError(
                        ErrorCode.LLM_RATE_LIMIT,
                        "LLM rate limit exceeded",
                        {"attempts": self.max_retries},
                    )
                retry_after = _retry_after_seconds(response)
                delay = retry_after if retry_after is not None else self._backoff(attempt)
                logger.warning(
                    f"Rate limited. Retrying in {delay:.1f}s "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )
                await self._sleep(delay)
                continue

            if not response.is_success:
                logger.error(f"LLM HTTP error {response.status_code}")
                raise ServiceError(
                    ErrorCode.LLM_HTTP_ERROR,
                    f"HTTP {response.status_code}: {response.reason_phrase}",
                    {"status_code": response.status_code, "body": response.text[:MAX_ERROR_BODY_CHARS]},
                )

            return self._parse_response(response)

        if isinstance(last_transport_error, httpx.TimeoutException):
            logger.error(f"LLM request timed out after {self.max_retries} attempts")
            raise ServiceError(ErrorCode.LLM_TIMEOUT, "LLM request timed out", {"attempts": self.max_retries})

        logger.error(f"LLM request failed after {self.max_retries} attempts: {last_transport_error}")
        raise ServiceError(
            ErrorCode.LLM_RETRY_EXHAUSTED,
            "All retry attempts failed",
            {"attempts": self.max_retries, "last_error": str(last_transport_error)},
        )

    def _parse_response(self, response: httpx.Response) -> Dict[str, Any]:
        """Extract and parse choices[0].message.content from a 2xx response."""
        try:
            data = response.json()
        except ValueError as e:
            raise ServiceError(
                ErrorCode.LLM_INVALID_RESPONSE,
                "LLM response body is not JSON",
                {"body": response.text[:MAX_ERROR_BODY_CHARS], "parse_error": str(e)},
            ) from e

        content = None
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            pass

        if not isinstance(content, str):
            logger.error("LLM response missing choices[0].message.content")
            raise ServiceError(
                ErrorCode.LLM_INVALID_RESPONSE,
                "Missing choices in response",
                {"response": data},
            )

        try:
            return extract_json_object(content)
        except JSONExtractionError as e:
            logger.error(f"Failed to parse JSON from LLM response: {e.parse_error}")
            logger.debug(f"Raw content: {content[:500]}")
            raise ServiceError(
                ErrorCode.LLM_INVALID_RESPONSE,
                "Failed to parse JSON from LLM response",
                {"content": content, "parse_error": e.parse_error},
            ) from e
