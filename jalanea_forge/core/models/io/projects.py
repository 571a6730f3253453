"""
Project I/O models for API requests and responses.

The wizard content travels as ``ProjectState`` (camelCase keys, as the
browser keeps it); the envelope around it uses snake_case like the rest of
the API.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from jalanea_forge.core.models.domain import (
    PrdSource,
    PrdVersion,
    ProjectState,
    ResearchDocument,
    ResearchSource,
)


class ProjectCreate(BaseModel):
    """Schema for creating a project."""

    name: str = Field(default="Untitled Project", max_length=255)
    idea_input: str = Field(default="", description="Raw product idea to start from")


class ProjectSummary(BaseModel):
    """List entry for the project picker."""

    id: str
    user_id: str
    name: str
    current_step: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProjectRead(BaseModel):
    """Schema for reading a project with its full wizard state."""

    id: str
    name: str
    current_step: int
    state: ProjectState
    prd_source: PrdSource = PrdSource.generated
    created_at: datetime
    updated_at: datetime


class ResearchDocumentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    content: str = Field(description="Plain text, or base64 data for PDFs")
    mime_type: str = "text/plain"
    source: ResearchSource = ResearchSource.upload

    def to_document(self) -> ResearchDocument:
        return ResearchDocument(name=self.name, content=self.content, mime_type=self.mime_type, source=self.source)


class StepChange(BaseModel):
    step: Union[int, str] = Field(description="Target step number (1-4) or slug (idea, research, prd, realization)")


class PrdHistoryRead(BaseModel):
    current: str
    current_source: PrdSource
    versions: List[PrdVersion] = Field(description="Previous versions, oldest first")


class DraftAccepted(BaseModel):
    project_id: str
    pending_fields: List[str]
    delay_seconds: float


class FlushResult(BaseModel):
    flushed: int


class GenerateRequest(BaseModel):
    instructions: Optional[str] = Field(
        default=None, description="Refinement instructions; required for prd-refinement"
    )


class GenerateResponse(BaseModel):
    project: ProjectRead
    action_type: str
    tokens_used: int
    generations_used: int
    generations_limit: int


class BugReportRequest(BaseModel):
    error: str = Field(min_length=1, description="The error message or log the user hit")
    context: str = Field(default="", description="What the user was doing")
