"""CV Generation Agent schemas."""

from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from cvagent.schemas.base import DocumentStatus, DocumentType, SessionStatus
from cvagent.schemas.guardrails import CVFileInfo, GuardrailResult, RetentionPolicy


class CVGenerationInput(BaseModel):
    """Input for the CV Generation Agent."""

    session_id: UUID = Field(default_factory=uuid4)
    cv_text: str = Field(..., description="Text extracted from the candidate's CV")
    job_description: str
    job_url: str | None = None
    company_name: str | None = None
    cv_file: CVFileInfo | None = None
    retention: RetentionPolicy | None = None
    document_types: list[DocumentType] = Field(
        default_factory=lambda: [DocumentType.CV, DocumentType.COVER_LETTER],
        min_length=1,
    )
    formatting_instructions: str | None = None


class GeneratedDocument(BaseModel):
    """One generated document and the output guardrail verdict on it."""

    document_type: DocumentType
    status: DocumentStatus
    content: str | None = Field(
        default=None, description="Only populated when the document is released"
    )
    guardrail_result: GuardrailResult


class CVGenerationOutput(BaseModel):
    """Output from the CV Generation Agent."""

    session_id: UUID
    status: SessionStatus
    input_guardrail_result: GuardrailResult
    documents: list[GeneratedDocument] = Field(default_factory=list)

    @property
    def released(self) -> list[GeneratedDocument]:
        return [doc for doc in self.documents if doc.status == DocumentStatus.COMPLETED]
