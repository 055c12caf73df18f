"""LLM service used by the generation agent and the truthfulness check.

One async entry point over OpenAI and Anthropic:
- ``generate`` returns the reply text, ``generate_json`` a parsed JSON object
- 429 and 5xx responses are retried with exponential backoff
- every provider or network error comes back as an ``AgentFailure`` value
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import TYPE_CHECKING, Any, Literal, TypeVar, cast

import httpx
from anthropic import APIStatusError as AnthropicStatusError
from anthropic import APITimeoutError as AnthropicTimeoutError
from anthropic import AsyncAnthropic
from openai import APIStatusError as OpenAIStatusError
from openai import APITimeoutError as OpenAITimeoutError
from openai import AsyncOpenAI

from cvagent.config import get_settings
from cvagent.schemas import AgentFailure, ErrorCodes


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from cvagent.config import AppSettings


logger = logging.getLogger(__name__)
T = TypeVar("T")

_AGENT_ID = "llm_service"
_CONNECT_TIMEOUT = 10.0
_STATUS_ERRORS = (httpx.HTTPStatusError, OpenAIStatusError, AnthropicStatusError)
_TIMEOUT_ERRORS = (httpx.TimeoutException, OpenAITimeoutError, AnthropicTimeoutError)
_JSON_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


class LLMService:
    """Provider-neutral async text generation.

    ``generate`` never raises for provider trouble; callers branch on
    ``isinstance(result, AgentFailure)``.
    """

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or get_settings()
        self._provider: Literal["openai", "anthropic"] = self._settings.llm_provider
        self._model = self._settings.llm_model
        self._max_retries = self._settings.llm_max_retries
        self._timeout = self._settings.llm_timeout_seconds
        self._client: AsyncOpenAI | AsyncAnthropic | None = None

        api_key = (
            self._settings.openai_api_key
            if self._provider == "openai"
            else self._settings.anthropic_api_key
        )
        if not api_key:
            raise ValueError(
                f"LLM provider {self._provider!r} selected but "
                f"{self._provider.upper()}_API_KEY not configured"
            )

    @property
    def provider(self) -> str:
        return self._provider

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> AsyncOpenAI | AsyncAnthropic:
        """Create the SDK client on first use and reuse it afterwards."""
        if self._client is None:
            timeout = httpx.Timeout(self._timeout, connect=_CONNECT_TIMEOUT)
            # SDK retries are disabled; _retry_with_backoff owns retry policy
            if self._provider == "openai":
                self._client = AsyncOpenAI(
                    api_key=self._settings.openai_api_key,
                    timeout=timeout,
                    max_retries=0,
                )
            else:
                self._client = AsyncAnthropic(
                    api_key=self._settings.anthropic_api_key,
                    timeout=timeout,
                    max_retries=0,
                )
        return self._client

    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str | AgentFailure:
        """Generate a reply to ``prompt``.

        Args:
            prompt: User message
            system: Optional system instructions
            temperature: Sampling temperature; defaults to LLM_TEMPERATURE
            max_tokens: Reply token cap; defaults to LLM_MAX_TOKENS

        Returns:
            The reply text, or AgentFailure when the provider call failed
        """
        temp = self._settings.llm_temperature if temperature is None else temperature
        tokens = self._settings.llm_max_tokens if max_tokens is None else max_tokens

        send = self._send_openai if self._provider == "openai" else self._send_anthropic

        try:
            return await self._retry_with_backoff(
                lambda: send(prompt, system, temp, tokens)
            )
        except _TIMEOUT_ERRORS as exc:
            logger.error(
                "LLM request timed out",
                extra={
                    "agent_id": _AGENT_ID,
                    "provider": self._provider,
                    "timeout_seconds": self._timeout,
                },
            )
            return AgentFailure(
                agent_id=_AGENT_ID,
                error_code=ErrorCodes.TIMEOUT,
                message=f"LLM request timed out after {self._timeout}s",
                recoverable=True,
                details={"provider": self._provider, "error": str(exc)},
            )
        except _STATUS_ERRORS as exc:
            return self._failure_for_status(exc.response)
        except Exception as exc:
            logger.exception(
                "Unexpected LLM error",
                extra={"agent_id": _AGENT_ID, "provider": self._provider},
            )
            return AgentFailure(
                agent_id=_AGENT_ID,
                error_code=ErrorCodes.UNEXPECTED,
                message=f"Unexpected LLM error: {type(exc).__name__}",
                recoverable=False,
                details={"provider": self._provider, "error": str(exc)},
            )

    async def generate_json(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> dict[str, Any] | AgentFailure:
        """Generate a reply and parse it as a JSON object.

        Code fences around the object are tolerated. A reply that is not a
        JSON object is reported as ``ERR_LLM_INVALID_RESPONSE``.
        """
        result = await self.generate(
            prompt=prompt, system=system, temperature=temperature, max_tokens=max_tokens
        )
        if isinstance(result, AgentFailure):
            return result

        fenced = _JSON_FENCE.search(result)
        raw = (fenced.group(1) if fenced else result).strip()
        parsed: Any
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = None

        if not isinstance(parsed, dict):
            logger.warning(
                "LLM reply is not a JSON object",
                extra={"agent_id": _AGENT_ID, "response": result[:200]},
            )
            return AgentFailure(
                agent_id=_AGENT_ID,
                error_code=ErrorCodes.LLM_INVALID_RESPONSE,
                message="LLM reply is not a JSON object",
                recoverable=True,
                details={"response": result[:500]},
            )
        return parsed

    async def count_tokens(self, text: str) -> int:
        """Rough token estimate (~4 characters per token)."""
        return max(1, len(text) // 4)

    async def _send_openai(
        self, prompt: str, system: str | None, temperature: float, max_tokens: int
    ) -> str:
        client = cast(AsyncOpenAI, self._get_client())
        await self._log_request(prompt, temperature, max_tokens)

        messages = [{"role": "user", "content": prompt}]
        if system:
            messages.insert(0, {"role": "system", "content": system})

        response = await client.chat.completions.create(
            model=self._model,
            messages=messages,  # type: ignore[arg-type]
            temperature=temperature,
            max_tokens=max_tokens,
        )

        if response.usage:
            self._log_usage(
                response.usage.prompt_tokens, response.usage.completion_tokens
            )
        return response.choices[0].message.content or ""

    async def _send_anthropic(
        self, prompt: str, system: str | None, temperature: float, max_tokens: int
    ) -> str:
        client = cast(AsyncAnthropic, self._get_client())
        await self._log_request(prompt, temperature, max_tokens)

        request: dict[str, Any] = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if system:
            request["system"] = system

        response = await client.messages.create(**request)

        self._log_usage(response.usage.input_tokens, response.usage.output_tokens)
        return "".join(block.text for block in response.content if block.type == "text")

    async def _log_request(self, prompt: str, temperature: float, max_tokens: int) -> None:
        logger.info(
            "LLM request",
            extra={
                "agent_id": _AGENT_ID,
                "provider": self._provider,
                "model": self._model,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "input_tokens_est": await self.count_tokens(prompt),
            },
        )

    def _log_usage(self, input_tokens: int, output_tokens: int) -> None:
        logger.info(
            "LLM token usage",
            extra={
                "agent_id": _AGENT_ID,
                "provider": self._provider,
                "input_tokens": input_tokens,
                "output_tokens": output_tokens,
            },
        )

    async def _retry_with_backoff(
        self,
        func: Callable[[], Awaitable[T]],
        initial_delay: float = 1.0,
        max_delay: float = 16.0,
        backoff_factor: float = 2.0,
    ) -> T:
        """Call ``func`` up to ``llm_max_retries`` times.

        Only 429 and 5xx responses are retried; anything else, and the last
        failed attempt, propagates to ``generate``.
        """
        delay = initial_delay
        attempt = 1
        while True:
            try:
                return await func()
            except _STATUS_ERRORS as exc:
                status = exc.response.status_code
                retryable = status == 429 or 500 <= status < 600
                if not retryable or attempt >= self._max_retries:
                    raise

                wait = min(delay, max_delay)
                logger.warning(
                    "LLM request failed, retrying",
                    extra={
                        "agent_id": _AGENT_ID,
                        "provider": self._provider,
                        "status_code": status,
                        "attempt": attempt,
                        "delay_seconds": wait,
                    },
                )
                await asyncio.sleep(wait)
                delay *= backoff_factor
                attempt += 1

    def _failure_for_status(self, response: httpx.Response) -> AgentFailure:
        """Map a final HTTP error status to an AgentFailure."""
        status = response.status_code
        details: dict[str, Any] = {"provider": self._provider, "status_code": status}

        if status in (401, 403):
            logger.error(
                "LLM authentication failed",
                extra={"agent_id": _AGENT_ID, "provider": self._provider, "status_code": status},
            )
            code, message, recoverable = (
                ErrorCodes.LLM_AUTH,
                "Invalid LLM API key or insufficient permissions",
                False,
            )
        elif status == 429:
            code, message, recoverable = (
                ErrorCodes.LLM_RATE_LIMIT,
                "LLM rate limit exceeded after retries",
                True,
            )
        elif 500 <= status < 600:
            code, message, recoverable = (
                ErrorCodes.LLM_SERVER,
                f"LLM server error: {status}",
                True,
            )
        else:
            details["response"] = response.text[:500]
            code, message, recoverable = (
                ErrorCodes.LLM_CLIENT,
                f"LLM client error: {status}",
                False,
            )

        return AgentFailure(
            agent_id=_AGENT_ID,
            error_code=code,
            message=message,
            recoverable=recoverable,
            details=details,
        )


__all__ = ["LLMService"]
