"""Startup wiring for the default guardrail set."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cvagent.config import get_settings
from cvagent.exceptions import AgentFailureError
from cvagent.guardrails.compliance import ComplianceGuardrail
from cvagent.guardrails.cv_content import CVContentGuardrail
from cvagent.guardrails.document_quality import DocumentQualityGuardrail
from cvagent.guardrails.job_posting import JobPostingGuardrail
from cvagent.guardrails.privacy import PrivacyGuardrail
from cvagent.guardrails.service import GuardrailService
from cvagent.guardrails.truthfulness import TruthfulnessGuardrail
from cvagent.schemas import ErrorCodes


if TYPE_CHECKING:
    from cvagent.config import AppSettings
    from cvagent.guardrails.base import InputGuardrail, OutputGuardrail
    from cvagent.services.llm import LLMService


logger = logging.getLogger(__name__)


def default_guardrails(
    *,
    settings: AppSettings | None = None,
    llm_service: LLMService | None = None,
) -> tuple[list[InputGuardrail], list[OutputGuardrail]]:
    """Build the input and output guardrails used in production."""

    settings = settings or get_settings()
    privacy = PrivacyGuardrail(settings=settings)

    input_guardrails: list[InputGuardrail] = [
        privacy,
        JobPostingGuardrail(settings=settings),
        CVContentGuardrail(settings=settings),
    ]
    output_guardrails: list[OutputGuardrail] = [
        privacy,
        TruthfulnessGuardrail(llm_service=llm_service, settings=settings),
        DocumentQualityGuardrail(settings=settings),
        ComplianceGuardrail(),
    ]
    return input_guardrails, output_guardrails


async def register_default_guardrails(
    service: GuardrailService,
    *,
    settings: AppSettings | None = None,
    llm_service: LLMService | None = None,
) -> GuardrailService:
    """Register the default guardrail set with ``service``.

    A failing registration is re-raised as ``AgentFailureError`` with
    ``ERR_GUARDRAIL_REGISTRATION``.
    """

    input_guardrails, output_guardrails = default_guardrails(
        settings=settings, llm_service=llm_service
    )
    logger.info("Registering guardrails")
    try:
        for guardrail in input_guardrails:
            await service.register_input_guardrail(guardrail)
        for guardrail in output_guardrails:
            await service.register_output_guardrail(guardrail)
    except Exception as exc:
        logger.exception("Error registering guardrails")
        raise AgentFailureError(
            agent_id="guardrail_registration",
            error_code=ErrorCodes.GUARDRAIL_REGISTRATION,
            message=f"Failed to register guardrails: {exc}",
            details={"error_type": type(exc).__name__},
        ) from exc

    logger.info(
        "All guardrails registered successfully",
        extra={
            "input_guardrails": len(input_guardrails),
            "output_guardrails": len(output_guardrails),
        },
    )
    return service


async def build_guardrail_service(
    *,
    settings: AppSettings | None = None,
    llm_service: LLMService | None = None,
) -> GuardrailService:
    """Return a new service with the default guardrails registered."""

    settings = settings or get_settings()
    service = GuardrailService(settings=settings)
    return await register_default_guardrails(
        service, settings=settings, llm_service=llm_service
    )


__all__ = [
    "build_guardrail_service",
    "default_guardrails",
    "register_default_guardrails",
]
