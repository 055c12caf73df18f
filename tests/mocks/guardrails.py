"""Configurable guardrails for exercising ``GuardrailService``."""

from __future__ import annotations

import asyncio

from cvagent.guardrails import InputGuardrail, OutputGuardrail
from cvagent.schemas import GuardrailContext, GuardrailResult


class _StubBehaviour:
    def __init__(
        self,
        name: str,
        priority: int,
        *,
        result: GuardrailResult | None = None,
        error: Exception | None = None,
        calls: list[str] | None = None,
        wait_for: asyncio.Event | None = None,
        release: asyncio.Event | None = None,
    ) -> None:
        self.name = name  # type: ignore[misc]
        self.priority = priority  # type: ignore[misc]
        self._result = result or GuardrailResult.passed()
        self._error = error
        self._calls = calls if calls is not None else []
        self._wait_for = wait_for
        self._release = release
        self.contexts: list[GuardrailContext] = []

    async def validate(self, context: GuardrailContext) -> GuardrailResult:
        self.contexts.append(context)
        self._calls.append(self.name)
        if self._release is not None:
            self._release.set()
        if self._wait_for is not None:
            await asyncio.wait_for(self._wait_for.wait(), timeout=1.0)
        if self._error is not None:
            raise self._error
        return self._result


class StubInputGuardrail(_StubBehaviour, InputGuardrail):
    """Input guardrail returning a fixed result (or raising)."""


class StubOutputGuardrail(_StubBehaviour, OutputGuardrail):
    """Output guardrail returning a fixed result (or raising)."""
