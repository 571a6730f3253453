"""
Generation service.

One method per generated artifact. Each method builds the prompt, runs it
through ``LLMClient`` and post-processes the answer; token usage is returned
alongside the value so callers can log it.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
from dataclasses import dataclass
from typing import Generic, List, Optional, Sequence, TypeVar

from pydantic_ai import BinaryContent

from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.core.models.domain import BugReport, ProjectState, ResearchDocument, RoadmapPhase

from . import prompts
from .llm_client import GenerationRequest, LLMClient, PromptContent
from .parsing import parse_bug_report, parse_roadmap

logger = get_logger(__name__)

T = TypeVar("T")

CREATIVE_TEMPERATURE = 0.7


@dataclass(frozen=True)
class Generated(Generic[T]):
    value: T
    tokens_used: int = 0


@dataclass(frozen=True)
class ResearchPrompts:
    mission: str
    report: str


@dataclass(frozen=True)
class DesignPrompts:
    stitch: str
    opal: str

    @property
    def design_system(self) -> str:
        return f"{self.stitch}\n\n{self.opal}"


def research_parts(idea: str, research: Sequence[ResearchDocument]) -> List[PromptContent]:
    """Instruction text followed by one part per research document.

    PDFs travel as binary parts; everything else as delimited text.
    """
    parts: List[PromptContent] = [prompts.prd_prompt(idea)]
    for doc in research:
        if doc.is_pdf:
            try:
                data = base64.b64decode(doc.content, validate=True)
            except (binascii.Error, ValueError):
                logger.warning(f"Skipping research document {doc.name!r}: PDF content is not valid base64")
                continue
            parts.append(BinaryContent(data=data, media_type="application/pdf"))
        else:
            parts.append(prompts.research_document_part(doc.name, doc.content))
    return parts


class GenerationService:
    """Artifact generators on top of an ``LLMClient``."""

    def __init__(self, client: LLMClient) -> None:
        self.client = client

    async def _run(self, request: GenerationRequest) -> Generated[str]:
        result = await self.client.generate(request)
        return Generated(result.text, result.tokens_used)

    async def refine_idea(self, raw_input: str, api_key: Optional[str] = None) -> Generated[str]:
        result = await self._run(
            GenerationRequest(
                prompt=prompts.vision_prompt(raw_input),
                system=prompts.VISION_SYSTEM,
                temperature=CREATIVE_TEMPERATURE,
                api_key=api_key,
            )
        )
        return Generated(result.value or prompts.VISION_FALLBACK, result.tokens_used)

    async def generate_research_prompts(
        self, synthesized_idea: str, api_key: Optional[str] = None
    ) -> Generated[ResearchPrompts]:
        """The mission is generated; the report prompt is a fixed template."""
        result = await self._run(
            GenerationRequest(
                prompt=prompts.research_mission_prompt(synthesized_idea),
                temperature=CREATIVE_TEMPERATURE,
                api_key=api_key,
            )
        )
        return Generated(
            ResearchPrompts(mission=result.value.strip(), report=prompts.REPORT_GENERATION_PROMPT),
            result.tokens_used,
        )

    async def generate_prd(
        self, idea: str, research: Sequence[ResearchDocument], api_key: Optional[str] = None
    ) -> Generated[str]:
        result = await self._run(
            GenerationRequest(
                prompt=research_parts(idea, research),
                system=prompts.prd_system(),
                temperature=CREATIVE_TEMPERATURE,
                api_key=api_key,
            )
        )
        return Generated(result.value or prompts.PRD_FALLBACK, result.tokens_used)

    async def refine_prd(self, current_prd: str, instructions: str, api_key: Optional[str] = None) -> Generated[str]:
        """Rewrite the PRD per ``instructions``; an empty answer keeps the current PRD."""
        result = await self._run(
            GenerationRequest(
                prompt=prompts.prd_refinement_prompt(current_prd, instructions),
                system=prompts.PRD_REFINEMENT_SYSTEM,
                temperature=CREATIVE_TEMPERATURE,
                api_key=api_key,
            )
        )
        return Generated(result.value or current_prd, result.tokens_used)

    async def generate_plan(self, prd: str, api_key: Optional[str] = None) -> Generated[List[RoadmapPhase]]:
        result = await self._run(
            GenerationRequest(prompt=prompts.roadmap_prompt(prd), system=prompts.ROADMAP_SYSTEM, api_key=api_key)
        )
        return Generated(parse_roadmap(result.value), result.tokens_used)

    async def generate_design_prompts(self, prd: str, api_key: Optional[str] = None) -> Generated[DesignPrompts]:
        """Stitch (frontend) and Opal (backend) prompts, generated concurrently."""
        stitch, opal = await asyncio.gather(
            self._run(
                GenerationRequest(
                    prompt=prompts.stitch_prompt(prd), temperature=CREATIVE_TEMPERATURE, api_key=api_key
                )
            ),
            self._run(
                GenerationRequest(prompt=prompts.opal_prompt(prd), temperature=CREATIVE_TEMPERATURE, api_key=api_key)
            ),
        )
        return Generated(
            DesignPrompts(
                stitch=stitch.value or prompts.STITCH_FALLBACK,
                opal=opal.value or prompts.OPAL_FALLBACK,
            ),
            stitch.tokens_used + opal.tokens_used,
        )

    async def generate_code_prompt(self, state: ProjectState, api_key: Optional[str] = None) -> Generated[str]:
        roadmap_json = json.dumps([phase.model_dump(mode="json", by_alias=True) for phase in state.roadmap_output])
        result = await self._run(
            GenerationRequest(
                prompt=prompts.integration_prompt(
                    idea=state.synthesized_idea or state.idea_input,
                    stitch=state.stitch_prompt,
                    opal=state.opal_prompt,
                    roadmap_json=roadmap_json,
                ),
                system=prompts.CODE_PROMPT_SYSTEM,
                api_key=api_key,
            )
        )
        return Generated(result.value or prompts.CODE_PROMPT_FALLBACK, result.tokens_used)

    async def refine_bug_report(self, error: str, context: str, api_key: Optional[str] = None) -> Generated[BugReport]:
        result = await self._run(
            GenerationRequest(
                prompt=prompts.bug_report_prompt(error, context),
                system=prompts.BUG_REPORT_SYSTEM,
                api_key=api_key,
            )
        )
        return Generated(parse_bug_report(result.value, error), result.tokens_used)
