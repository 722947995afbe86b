"""
Client for the OpenAI-style chat-completion endpoint.

One logical request per call. Transport failures (connect/read timeouts,
dropped connections) are retried with jittered exponential backoff; an HTTP
error status is returned by the server deliberately and is never retried.
Both end up as `UpstreamFailure` after the original error has been logged.
"""
import time
from typing import Any, Dict, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_random_exponential

from wagerdesk.core.config import settings
from wagerdesk.core.errors import UpstreamFailure
from wagerdesk.core.logging import get_logger
from wagerdesk.core.metrics import llm_request_duration_seconds, llm_requests_total

logger = get_logger(__name__)


class ChatCompletionClient:
    """
    Thin async wrapper around a chat-completion HTTP API.

    Usage:
        client = ChatCompletionClient(api_key="...")
        text = await client.complete(system_prompt, user_prompt, max_tokens=2000, temperature=0.7)
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://apps.abacus.ai/v1/chat/completions",
        model: str = "gpt-4o-mini",
        timeout: float = 60.0,
        max_attempts: int = 3,
        backoff_multiplier: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            api_key: Bearer token for the endpoint
            api_url: Full chat-completions URL
            model: Model identifier sent with every request
            timeout: Per-request timeout in seconds
            max_attempts: Attempts for transport-level failures (1 disables retry)
            backoff_multiplier: Scale of the jittered backoff between attempts
            transport: Optional httpx transport (tests pass `httpx.MockTransport`)
        """
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.backoff_multiplier = backoff_multiplier
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    def build_payload(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        temperature: float,
        json_mode: bool = False,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}
        return payload

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_random_exponential(multiplier=self.backoff_multiplier, max=10),
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(
                            f"Retrying chat completion (attempt {attempt.retry_state.attempt_number})"
                        )
                    return await client.post(self.api_url, json=payload, headers=self._headers())

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        temperature: float,
        json_mode: bool = False,
        operation: str = "chat",
    ) -> Optional[str]:
        """
        Send one chat-completion request.

        Returns:
            `choices[0].message.content`, or None when the response carries no content

        Raises:
            UpstreamFailure: non-2xx status, transport failure after retries,
                or a response body that is not JSON
        """
        payload = self.build_payload(system_prompt, user_prompt, max_tokens, temperature, json_mode)
        started = time.perf_counter()

        try:
            response = await self._post(payload)
        except httpx.TransportError as e:
            llm_requests_total.labels(operation=operation, outcome="transport_error").inc()
            logger.error(f"Chat completion transport failure ({operation}): {e!r}")
            raise UpstreamFailure() from e
        finally:
            llm_request_duration_seconds.labels(operation=operation).observe(time.perf_counter() - started)

        if response.status_code >= 400:
            llm_requests_total.labels(operation=operation, outcome="http_error").inc()
            logger.error(
                f"Chat completion returned HTTP {response.status_code} ({operation})",
                extra={"status_code": response.status_code, "body": response.text[:2000]},
            )
            raise UpstreamFailure()

        try:
            data = response.json()
        except ValueError as e:
            llm_requests_total.labels(operation=operation, outcome="bad_body").inc()
            logger.error(f"Chat completion body is not JSON ({operation}): {response.text[:500]!r}")
            raise UpstreamFailure() from e

        llm_requests_total.labels(operation=operation, outcome="success").inc()
        return extract_content(data)


def extract_content(data: Any) -> Optional[str]:
    """`choices[0].message.content` from a completion body, if present."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None


def get_chat_client() -> ChatCompletionClient:
    """FastAPI dependency; tests override it with a MockTransport-backed client."""
    return ChatCompletionClient(
        api_key=settings.LLM_API_KEY,
        api_url=settings.LLM_API_URL,
        model=settings.LLM_MODEL,
        timeout=settings.LLM_TIMEOUT_SECONDS,
        max_attempts=settings.LLM_MAX_ATTEMPTS,
    )
