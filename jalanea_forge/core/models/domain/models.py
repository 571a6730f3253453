"""Domain models for the Forge workflow."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..base import BaseSchema
from .enums import PrdSource, ProjectStep, ResearchSource


def _utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


class CamelSchema(BaseSchema):
    """Schema serialized with camelCase keys, as the browser client stores them."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", alias_generator=to_camel)


class ResearchDocument(CamelSchema):
    """
    A research input attached to a project.

    ``content`` holds plain text, or base64 data when ``mime_type`` is
    ``application/pdf``.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    content: str
    mime_type: str = "text/plain"
    source: ResearchSource = ResearchSource.upload

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == "application/pdf"


class RoadmapStep(CamelSchema):
    step_name: str
    description: str = ""
    technical_brief: str = ""
    system_prompt: Optional[str] = None
    diy_prompt: Optional[str] = None
    hire_pitch: Optional[str] = None


class RoadmapPhase(CamelSchema):
    phase_name: str
    description: str = ""
    steps: List[RoadmapStep] = Field(default_factory=list)


class PrdVersion(CamelSchema):
    """A previous PRD body kept in the project's version history."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    content: str
    created_at: datetime = Field(default_factory=_utc_now)
    source: PrdSource = PrdSource.generated


class ProjectState(CamelSchema):
    """
    The wizard state as the browser holds it.

    Every field is optional on the wire so the same model serves as the
    autosave patch; ``model_fields_set`` tells which fields a patch carries.
    """

    title: str = "Untitled Project"
    current_step: ProjectStep = ProjectStep.IDEA
    research: List[ResearchDocument] = Field(default_factory=list)
    idea_input: str = ""
    synthesized_idea: str = ""
    prd_output: str = ""
    roadmap_output: List[RoadmapPhase] = Field(default_factory=list)
    design_system_output: str = ""
    code_prompt_output: str = ""
    research_mission_prompt: str = ""
    report_generation_prompt: str = ""
    stitch_prompt: str = ""
    opal_prompt: str = ""
    antigravity_prompt: str = ""
    bug_report_prompt: str = ""

    @property
    def has_idea(self) -> bool:
        return bool(self.idea_input.strip() or self.synthesized_idea.strip())

    @property
    def has_prd(self) -> bool:
        return bool(self.prd_output.strip())


class BugReport(BaseSchema):
    subject: str
    body: str
