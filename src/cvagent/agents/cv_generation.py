"""CV Generation Agent - guardrailed CV and cover letter synthesis.

Runs the full control flow for one session: input guardrails over the
candidate's CV and the job posting, one LLM generation per requested document,
and output guardrails over each generated document. A document's content is
only released when its output verdict allows execution.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cvagent.exceptions import AgentFailureError
from cvagent.schemas import (
    AgentFailure,
    CVGenerationInput,
    CVGenerationOutput,
    DocumentStatus,
    DocumentType,
    ErrorCodes,
    GeneratedDocument,
    GuardrailContext,
    SessionStatus,
)
from cvagent.services.llm import LLMService


if TYPE_CHECKING:
    from cvagent.guardrails import GuardrailService


logger = logging.getLogger(__name__)

_TRUTHFULNESS_RULES = """CRITICAL RULES:
1. ONLY use information that exists in the candidate's original CV
2. Never invent employers, titles, dates, degrees, certifications or skills
3. Never include age, date of birth, marital or family status, religion,
   nationality, health or political affiliation
4. Never include national ID, passport or payment card numbers"""

_SYSTEM_PROMPTS: dict[DocumentType, str] = {
    DocumentType.CV: f"""You are an expert CV writer who tailors CVs to job postings.

Guidelines:
- Reorder sections to highlight the most relevant experience first
- Emphasize skills that match the job requirements
- Use keywords from the job description where they truthfully apply
- Use plain section headers: Contact, Summary, Experience, Education, Skills

{_TRUTHFULNESS_RULES}""",
    DocumentType.COVER_LETTER: f"""You are an expert career coach who writes cover letters.

Guidelines:
- Open with "Dear Hiring Manager," unless a contact name is given
- Connect the candidate's real experience to the role's requirements
- Keep it to three or four concise paragraphs
- Close with "Sincerely," followed by the candidate's name

{_TRUTHFULNESS_RULES}""",
    DocumentType.PORTFOLIO: f"""You are an expert career coach who writes portfolio summaries.

Guidelines:
- Include Contact, Summary, Experience and Education sections
- Highlight projects and outcomes relevant to the job posting

{_TRUTHFULNESS_RULES}""",
}


class CVGenerationAgent:
    """Generates tailored application documents behind guardrails."""

    def __init__(
        self,
        *,
        guardrail_service: GuardrailService,
        agent_id: str = "cv_generation",
        llm_service: LLMService | None = None,
    ) -> None:
        self._agent_id = agent_id
        self._guardrails = guardrail_service
        self._llm_service = llm_service or LLMService()

    async def process(self, payload: CVGenerationInput) -> CVGenerationOutput:
        """Run the guardrailed generation pipeline or raise AgentFailureError."""
        input_context = GuardrailContext(
            input=payload.cv_text,
            agent_name=self._agent_id,
            session_id=payload.session_id,
            job_url=payload.job_url,
            job_content=payload.job_description,
            cv_file=payload.cv_file,
            retention=payload.retention,
            metadata={"company_name": payload.company_name},
        )
        input_result = await self._guardrails.execute_input_guardrails(input_context)
        if not input_result.allow_execution:
            logger.warning(
                "Input guardrails blocked generation",
                extra={
                    "agent_id": self._agent_id,
                    "session_id": str(payload.session_id),
                    "violation_type": input_result.violation_type,
                },
            )
            return CVGenerationOutput(
                session_id=payload.session_id,
                status=SessionStatus.FAILED,
                input_guardrail_result=input_result,
            )

        documents = [
            await self._generate_document(payload, document_type)
            for document_type in payload.document_types
        ]
        all_released = all(doc.status == DocumentStatus.COMPLETED for doc in documents)

        logger.info(
            "Generation finished",
            extra={
                "agent_id": self._agent_id,
                "session_id": str(payload.session_id),
                "released": sum(doc.status == DocumentStatus.COMPLETED for doc in documents),
                "requested": len(documents),
            },
        )
        return CVGenerationOutput(
            session_id=payload.session_id,
            status=SessionStatus.COMPLETED if all_released else SessionStatus.FAILED,
            input_guardrail_result=input_result,
            documents=documents,
        )

    async def _generate_document(
        self, payload: CVGenerationInput, document_type: DocumentType
    ) -> GeneratedDocument:
        result = await self._llm_service.generate(
            prompt=self._build_user_prompt(payload, document_type),
            system=_SYSTEM_PROMPTS[document_type],
        )

        if isinstance(result, AgentFailure):
            logger.error(
                "LLM generation failed",
                extra={
                    "agent_id": self._agent_id,
                    "error_code": result.error_code,
                    "document_type": document_type.value,
                },
            )
            raise AgentFailureError(
                agent_id=self._agent_id,
                error_code=result.error_code,
                message=f"LLM generation failed: {result.message}",
                recoverable=result.recoverable,
                details=result.details,
            )

        content = result.strip()
        if not content:
            raise AgentFailureError(
                agent_id=self._agent_id,
                error_code=ErrorCodes.GENERATION_EMPTY,
                message=f"LLM returned an empty {document_type.value}",
                recoverable=True,
            )

        output_context = GuardrailContext(
            input=payload.cv_text,
            output=content,
            agent_name=self._agent_id,
            session_id=payload.session_id,
            original_content=payload.cv_text,
            document_type=document_type,
            metadata={"company_name": payload.company_name},
        )
        verdict = await self._guardrails.execute_output_guardrails(output_context)

        if not verdict.allow_execution:
            logger.warning(
                "Output guardrails withheld document",
                extra={
                    "agent_id": self._agent_id,
                    "document_type": document_type.value,
                    "violation_type": verdict.violation_type,
                },
            )
            return GeneratedDocument(
                document_type=document_type,
                status=DocumentStatus.FAILED,
                guardrail_result=verdict,
            )

        return GeneratedDocument(
            document_type=document_type,
            status=DocumentStatus.COMPLETED,
            content=content,
            guardrail_result=verdict,
        )

    def _build_user_prompt(
        self, payload: CVGenerationInput, document_type: DocumentType
    ) -> str:
        """Build user prompt for LLM generation."""
        label = document_type.value.replace("_", " ")
        prompt = f"""Create a tailored {label} for the candidate.

Original CV:
{payload.cv_text}

Job Posting{f" at {payload.company_name}" if payload.company_name else ""}:
{payload.job_description}"""

        if payload.formatting_instructions:
            prompt += f"\n\nFormatting: {payload.formatting_instructions}"

        return prompt


__all__ = ["CVGenerationAgent"]
