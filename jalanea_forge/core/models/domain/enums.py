"""Domain enums for the Forge workflow."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Optional


class ProjectStep(IntEnum):
    """
    Wizard stage of a project.

    Stored as an integer on the project row; the UI routes on the slug.
    """

    IDEA = 1
    RESEARCH = 2
    PRD = 3
    REALIZATION = 4

    @property
    def slug(self) -> str:
        return self.name.lower()

    @classmethod
    def from_slug(cls, slug: str) -> "ProjectStep":
        try:
            return cls[slug.upper()]
        except KeyError:
            raise ValueError(f"Unknown project step: {slug}") from None


class UserRole(str, Enum):
    """Subscription tier of a profile. Drives the permission table."""

    owner = "owner"
    beta_tester = "beta_tester"
    free = "free"
    starter = "starter"
    pro = "pro"

    @classmethod
    def parse(cls, value: Optional[str]) -> "UserRole":
        """Unknown or missing roles are treated as ``free``."""
        if isinstance(value, UserRole):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.free


class ActionType(str, Enum):
    """Usage log action recorded for every AI generation."""

    vision_generation = "vision_generation"
    research_prompt_generation = "research_prompt_generation"
    prd_generation = "prd_generation"
    prd_refinement = "prd_refinement"
    task_generation = "task_generation"
    design_prompt_generation = "design_prompt_generation"
    code_prompt_generation = "code_prompt_generation"
    bug_report_generation = "bug_report_generation"
    report_generation = "report_generation"


class ResearchSource(str, Enum):
    upload = "upload"
    manual = "manual"


class PrdSource(str, Enum):
    """Where a PRD version came from."""

    generated = "generated"
    refined = "refined"
    manual = "manual"
    reverted = "reverted"


class Artifact(str, Enum):
    """Generated artifact addressable through the generation endpoint."""

    vision = "vision"
    research_prompts = "research-prompts"
    prd = "prd"
    prd_refinement = "prd-refinement"
    roadmap = "roadmap"
    design_prompts = "design-prompts"
    code_prompt = "code-prompt"
