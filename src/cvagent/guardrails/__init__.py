"""Guardrails - "The Shield" around CV and cover letter generation.

Input guardrails gate what the candidate submits (CV upload, CV text, job
posting) before any LLM call; output guardrails gate what the model produced
before it is released. ``GuardrailService`` runs each set in ascending
priority order and folds the individual results into one verdict.
"""

from cvagent.guardrails.base import BaseGuardrail, InputGuardrail, OutputGuardrail
from cvagent.guardrails.compliance import ComplianceGuardrail
from cvagent.guardrails.cv_content import CVContentGuardrail
from cvagent.guardrails.document_quality import DocumentQualityGuardrail
from cvagent.guardrails.job_posting import JobPostingGuardrail
from cvagent.guardrails.privacy import PrivacyGuardrail
from cvagent.guardrails.registration import (
    build_guardrail_service,
    default_guardrails,
    register_default_guardrails,
)
from cvagent.guardrails.service import GuardrailService
from cvagent.guardrails.truthfulness import TruthfulnessGuardrail


__all__ = [
    "BaseGuardrail",
    "InputGuardrail",
    "OutputGuardrail",
    "GuardrailService",
    "ComplianceGuardrail",
    "CVContentGuardrail",
    "DocumentQualityGuardrail",
    "JobPostingGuardrail",
    "PrivacyGuardrail",
    "TruthfulnessGuardrail",
    "build_guardrail_service",
    "default_guardrails",
    "register_default_guardrails",
]
