"""Pydantic schemas shared across the guardrail pipeline and agents.

Contains:
- AgentFailure, ErrorCodes, ViolationTypes and the document/session enums
- GuardrailContext, GuardrailResult, CVFileInfo, RetentionPolicy
- CVGenerationInput/Output, GeneratedDocument
"""

from cvagent.schemas.base import (
    AgentFailure,
    DocumentStatus,
    DocumentType,
    ErrorCodes,
    GuardrailStage,
    SessionStatus,
    ViolationTypes,
)
from cvagent.schemas.generation import (
    CVGenerationInput,
    CVGenerationOutput,
    GeneratedDocument,
)
from cvagent.schemas.guardrails import (
    CVFileInfo,
    GuardrailContext,
    GuardrailResult,
    RetentionPolicy,
)


__all__ = [
    # Base
    "AgentFailure",
    "ErrorCodes",
    "ViolationTypes",
    "DocumentType",
    "DocumentStatus",
    "SessionStatus",
    "GuardrailStage",
    # Guardrails
    "CVFileInfo",
    "RetentionPolicy",
    "GuardrailContext",
    "GuardrailResult",
    # Generation
    "CVGenerationInput",
    "CVGenerationOutput",
    "GeneratedDocument",
]
