"""Guardrail Service - ordered execution and aggregation of guardrails.

Guardrails are run in ascending priority order (ties keep registration
order). Guardrails sharing a priority may run concurrently; groups never
overlap. Any guardrail that raises is mapped to a deny result so the pipeline
fails closed instead of silently passing.
"""

from __future__ import annotations

import asyncio
import logging
from itertools import groupby
from typing import TYPE_CHECKING, Any, TypeVar

from cvagent.config import get_settings
from cvagent.guardrails.base import BaseGuardrail, InputGuardrail, OutputGuardrail
from cvagent.schemas import (
    GuardrailContext,
    GuardrailResult,
    GuardrailStage,
    ViolationTypes,
)


if TYPE_CHECKING:
    from collections.abc import Sequence

    from cvagent.config import AppSettings


logger = logging.getLogger(__name__)
G = TypeVar("G", bound=BaseGuardrail)


class GuardrailService:
    """Registers guardrails and runs them around agent execution."""

    def __init__(
        self,
        *,
        fail_fast: bool | None = None,
        parallel_same_priority: bool | None = None,
        settings: AppSettings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._fail_fast = (
            settings.guardrail_fail_fast if fail_fast is None else fail_fast
        )
        self._parallel = (
            settings.guardrail_parallel_same_priority
            if parallel_same_priority is None
            else parallel_same_priority
        )
        self._input_guardrails: list[InputGuardrail] = []
        self._output_guardrails: list[OutputGuardrail] = []

    @property
    def input_guardrails(self) -> tuple[InputGuardrail, ...]:
        """Registered input guardrails in execution order."""
        return _ordered(self._input_guardrails)

    @property
    def output_guardrails(self) -> tuple[OutputGuardrail, ...]:
        """Registered output guardrails in execution order."""
        return _ordered(self._output_guardrails)

    async def register_input_guardrail(self, guardrail: InputGuardrail) -> None:
        """Add ``guardrail`` to the input registry."""
        if not isinstance(guardrail, InputGuardrail):
            raise TypeError(
                f"{type(guardrail).__name__} is not an InputGuardrail"
            )
        self._register("input", self._input_guardrails, guardrail)

    async def register_output_guardrail(self, guardrail: OutputGuardrail) -> None:
        """Add ``guardrail`` to the output registry."""
        if not isinstance(guardrail, OutputGuardrail):
            raise TypeError(
                f"{type(guardrail).__name__} is not an OutputGuardrail"
            )
        self._register("output", self._output_guardrails, guardrail)

    async def execute_input_guardrails(
        self, context: GuardrailContext
    ) -> GuardrailResult:
        """Run input guardrails and return the aggregated verdict."""
        return await self._execute("input", self._input_guardrails, context)

    async def execute_output_guardrails(
        self, context: GuardrailContext
    ) -> GuardrailResult:
        """Run output guardrails and return the aggregated verdict."""
        return await self._execute("output", self._output_guardrails, context)

    def _register(
        self, stage: GuardrailStage, registry: list[G], guardrail: G
    ) -> None:
        priority = guardrail.priority
        if isinstance(priority, bool) or not isinstance(priority, int):
            raise TypeError(
                f"Guardrail {guardrail.name} priority must be an int, "
                f"got {type(priority).__name__}"
            )
        # Duplicate names are accepted; they usually mean double wiring.
        if any(existing.name == guardrail.name for existing in registry):
            logger.warning(
                "Duplicate guardrail name registered",
                extra={"stage": stage, "guardrail": guardrail.name},
            )
        registry.append(guardrail)
        logger.info(
            "Registered %s guardrail %s",
            stage,
            guardrail.name,
            extra={
                "stage": stage,
                "guardrail": guardrail.name,
                "priority": guardrail.priority,
            },
        )

    async def _execute(
        self,
        stage: GuardrailStage,
        registry: Sequence[BaseGuardrail],
        context: GuardrailContext,
    ) -> GuardrailResult:
        log_extra = {
            "stage": stage,
            "agent_name": context.agent_name,
            "session_id": str(context.session_id),
        }
        logger.info(
            "Executing %d %s guardrails for agent %s",
            len(registry),
            stage,
            context.agent_name,
            extra=log_extra,
        )

        try:
            results: list[GuardrailResult] = []
            for _, group in groupby(_ordered(registry), key=lambda g: g.priority):
                group_results = await self._run_group(stage, list(group), context)
                results.extend(group_results)
                if self._fail_fast and any(r.blocks for r in group_results):
                    logger.info(
                        "Stopping %s guardrails after first tripped priority group",
                        stage,
                        extra=log_extra,
                    )
                    break
            return self._aggregate(stage, context, results)
        except Exception:
            logger.exception(
                "Error executing %s guardrails", stage, extra=log_extra
            )
            return GuardrailResult.tripped(
                ViolationTypes.SYSTEM_ERROR,
                "System error during guardrail execution",
            )

    async def _run_group(
        self,
        stage: GuardrailStage,
        group: list[BaseGuardrail],
        context: GuardrailContext,
    ) -> list[GuardrailResult]:
        if self._parallel and len(group) > 1:
            # gather preserves argument order in its results
            return list(
                await asyncio.gather(
                    *(self._run_one(stage, guardrail, context) for guardrail in group)
                )
            )
        return [await self._run_one(stage, guardrail, context) for guardrail in group]

    async def _run_one(
        self,
        stage: GuardrailStage,
        guardrail: BaseGuardrail,
        context: GuardrailContext,
    ) -> GuardrailResult:
        try:
            result = await guardrail.validate(
                context.model_copy(update={"stage": stage}, deep=True)
            )
        except Exception as exc:
            logger.exception(
                "Error executing %s guardrail %s",
                stage,
                guardrail.name,
                extra={"stage": stage, "guardrail": guardrail.name},
            )
            result = GuardrailResult.tripped(
                ViolationTypes.GUARDRAIL_ERROR,
                f"Error in guardrail {guardrail.name}: {exc}",
                details={"error_type": type(exc).__name__},
            )
        else:
            if not isinstance(result, GuardrailResult):
                logger.error(
                    "Guardrail returned an invalid result",
                    extra={"guardrail": guardrail.name, "result_type": type(result).__name__},
                )
                result = GuardrailResult.tripped(
                    ViolationTypes.GUARDRAIL_ERROR,
                    f"Error in guardrail {guardrail.name}: invalid result type "
                    f"{type(result).__name__}",
                )

        if result.blocks:
            logger.warning(
                "Guardrail triggered: %s",
                guardrail.name,
                extra={
                    "stage": stage,
                    "guardrail": guardrail.name,
                    "violation_type": result.violation_type,
                    "session_id": str(context.session_id),
                },
            )
        return result.model_copy(update={"guardrail_name": guardrail.name})

    def _aggregate(
        self,
        stage: GuardrailStage,
        context: GuardrailContext,
        results: list[GuardrailResult],
    ) -> GuardrailResult:
        executed = [r.guardrail_name for r in results]
        warnings: list[dict[str, Any]] = [
            {
                "guardrail": r.guardrail_name,
                "violation_type": r.violation_type,
                "message": r.message,
                "recommendations": list(r.recommendations),
            }
            for r in results
            if r.is_warning
        ]
        triggered = [r for r in results if r.blocks]

        if not triggered:
            logger.info(
                "All %s guardrails passed for agent %s",
                stage,
                context.agent_name,
                extra={"stage": stage, "warnings": len(warnings)},
            )
            return GuardrailResult.passed(executed=executed, warnings=warnings)

        violation_types = [r.violation_type or "Unspecified" for r in triggered]
        messages = [r.message for r in triggered if r.message]
        recommendations = [rec for r in triggered for rec in r.recommendations]

        logger.warning(
            "%s guardrails triggered: %s - %s",
            stage.capitalize(),
            ", ".join(violation_types),
            "; ".join(messages),
            extra={"stage": stage, "session_id": str(context.session_id)},
        )
        return GuardrailResult(
            tripwire_triggered=True,
            violation_type=", ".join(violation_types),
            message="; ".join(messages),
            allow_execution=False,
            recommendations=recommendations,
            details={
                "triggered_guardrails": len(triggered),
                "violation_types": violation_types,
                "guardrails": [r.guardrail_name for r in triggered],
                "executed": executed,
                "warnings": warnings,
            },
        )


def _ordered(guardrails: Sequence[G]) -> tuple[G, ...]:
    # sorted() is stable, so equal priorities keep registration order
    return tuple(sorted(guardrails, key=lambda g: g.priority))


__all__ = ["GuardrailService"]
