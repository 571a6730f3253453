"""
Forge service.

Orchestrates one AI generation for a project: gate the caller's tier, pick
the API key, generate, merge the artifact into the project (the PRD through
its version history), advance the wizard, then charge the generation to the
caller's monthly quota.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from jalanea_forge.core.database.entities.profiles import Profile
from jalanea_forge.core.database.entities.projects import Project
from jalanea_forge.core.database.repositories.bundle import SqlRepoBundle
from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.core.models.domain import (
    ActionType,
    Artifact,
    BugReport,
    PrdSource,
    ProjectState,
    ProjectStep,
    ResearchDocument,
)
from jalanea_forge.core.monitoring import log_generation
from jalanea_forge.errors import MissingApiKeyError, NotFoundError, WizardTransitionError
from jalanea_forge.notifications import EmailRequest, EmailSender, EmailType

from . import wizard
from .autosave import merge_state, prd_history_of, project_to_state, store_prd_history
from .generation import GenerationService
from .permissions import FeatureAction, permissions_for, require
from .version_history import DEFAULT_HISTORY_LIMIT

logger = get_logger(__name__)

ARTIFACT_ACTIONS = {
    Artifact.vision: ActionType.vision_generation,
    Artifact.research_prompts: ActionType.research_prompt_generation,
    Artifact.prd: ActionType.prd_generation,
    Artifact.prd_refinement: ActionType.prd_refinement,
    Artifact.roadmap: ActionType.task_generation,
    Artifact.design_prompts: ActionType.design_prompt_generation,
    Artifact.code_prompt: ActionType.code_prompt_generation,
}

USAGE_ALERT_THRESHOLDS = (80, 100)


@dataclass(frozen=True)
class GenerationOutcome:
    project: Project
    state: ProjectState
    profile: Profile
    action_type: ActionType
    tokens_used: int


def usage_percentage(used: int, limit: int) -> int:
    """Share of the quota used, rounded half up."""
    if limit <= 0:
        return 100
    return int(math.floor(used / limit * 100 + 0.5))


def api_key_for(profile: Profile) -> Optional[str]:
    """Key to generate with: the user's own, or None to use the server key.

    Raises:
        MissingApiKeyError: The tier may not use the server key and the user has none
    """
    if profile.api_key_encrypted:
        return profile.api_key_encrypted
    if permissions_for(profile.role).can_use_proxy_api:
        return None
    raise MissingApiKeyError("Your plan requires your own Gemini API key. Add it in settings.")


def _require_input(artifact: Artifact, state: ProjectState, instructions: Optional[str]) -> None:
    stage = wizard.ARTIFACT_STAGE[artifact].slug
    if artifact is Artifact.vision and not state.idea_input.strip():
        raise WizardTransitionError(stage, "a raw idea")
    if artifact in (Artifact.research_prompts, Artifact.prd) and not state.has_idea:
        raise WizardTransitionError(stage, "a product idea")
    if artifact in (Artifact.prd_refinement, Artifact.roadmap, Artifact.design_prompts, Artifact.code_prompt):
        if not state.has_prd:
            raise WizardTransitionError(stage, "a PRD")
    if artifact is Artifact.prd_refinement and not (instructions or "").strip():
        raise WizardTransitionError(stage, "refinement instructions")


class ForgeService:
    """Runs generations against a user's project and records their usage."""

    def __init__(
        self,
        repos: SqlRepoBundle,
        generation: GenerationService,
        emails: EmailSender,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        self.repos = repos
        self.generation = generation
        self.emails = emails
        self.history_limit = history_limit

    async def generate(
        self,
        profile: Profile,
        project: Project,
        artifact: Artifact,
        instructions: Optional[str] = None,
    ) -> GenerationOutcome:
        """Generate ``artifact`` for ``project`` and persist it.

        Args:
            profile: The caller; must own ``project``
            project: Target project row
            artifact: What to generate
            instructions: Refinement instructions (``prd-refinement`` only)

        Raises:
            GenerationLimitError: Monthly quota used up
            MissingApiKeyError: No usable API key
            WizardTransitionError: The project lacks the artifact's input
            GenerationError: Provider failure (``RateLimitError`` for persistent 429s)
        """
        require(profile, FeatureAction.generate_ai)
        state = project_to_state(project)
        _require_input(artifact, state, instructions)
        api_key = api_key_for(profile)

        logger.info(f"Generating {artifact.value} for project {project.id} (user={profile.id})")
        patch, tokens, prd_source = await self._generate_patch(artifact, state, api_key, instructions)

        merge_state(project, patch, history_limit=self.history_limit, prd_source=prd_source)
        project.current_step = int(wizard.advance_after_generation(project.current_step, artifact))
        project = await self.repos.projects.update(project)

        action_type = ARTIFACT_ACTIONS[artifact]
        profile = await self.record_usage(profile, action_type, tokens, project_id=project.id)
        return GenerationOutcome(
            project=project,
            state=project_to_state(project),
            profile=profile,
            action_type=action_type,
            tokens_used=tokens,
        )

    async def _generate_patch(
        self,
        artifact: Artifact,
        state: ProjectState,
        api_key: Optional[str],
        instructions: Optional[str],
    ) -> tuple[ProjectState, int, PrdSource]:
        gen = self.generation
        if artifact is Artifact.vision:
            result = await gen.refine_idea(state.idea_input, api_key)
            return ProjectState(synthesized_idea=result.value), result.tokens_used, PrdSource.generated

        if artifact is Artifact.research_prompts:
            research = await gen.generate_research_prompts(state.synthesized_idea or state.idea_input, api_key)
            patch = ProjectState(
                research_mission_prompt=research.value.mission,
                report_generation_prompt=research.value.report,
            )
            return patch, research.tokens_used, PrdSource.generated

        if artifact is Artifact.prd:
            result = await gen.generate_prd(state.synthesized_idea or state.idea_input, state.research, api_key)
            return ProjectState(prd_output=result.value), result.tokens_used, PrdSource.generated

        if artifact is Artifact.prd_refinement:
            result = await gen.refine_prd(state.prd_output, instructions or "", api_key)
            return ProjectState(prd_output=result.value), result.tokens_used, PrdSource.refined

        if artifact is Artifact.roadmap:
            plan = await gen.generate_plan(state.prd_output, api_key)
            return ProjectState(roadmap_output=plan.value), plan.tokens_used, PrdSource.generated

        if artifact is Artifact.design_prompts:
            design = await gen.generate_design_prompts(state.prd_output, api_key)
            patch = ProjectState(
                stitch_prompt=design.value.stitch,
                opal_prompt=design.value.opal,
                design_system_output=design.value.design_system,
            )
            return patch, design.tokens_used, PrdSource.generated

        result = await gen.generate_code_prompt(state, api_key)
        patch = ProjectState(antigravity_prompt=result.value, code_prompt_output=result.value)
        return patch, result.tokens_used, PrdSource.generated

    async def bug_report(self, profile: Profile, error: str, context: str) -> BugReport:
        """Turn a user's error log into an email-ready bug report."""
        require(profile, FeatureAction.generate_ai)
        result = await self.generation.refine_bug_report(error, context, api_key_for(profile))
        await self.record_usage(profile, ActionType.bug_report_generation, result.tokens_used)
        return result.value

    async def record_usage(
        self,
        profile: Profile,
        action_type: ActionType,
        tokens_used: int,
        project_id: Optional[str] = None,
    ) -> Profile:
        """Charge one generation: bump the counter, log it, alert at 80 % and 100 %."""
        updated = await self.repos.profiles.increment_generations(profile.id) or profile
        await self.repos.usage_logs.append(profile.id, action_type.value, tokens_used)
        log_generation(profile.id, action_type.value, tokens_used, project_id=project_id)

        if not permissions_for(updated.role).has_unlimited_generations:
            percentage = usage_percentage(updated.ai_generations_used, updated.ai_generations_limit)
            if percentage in USAGE_ALERT_THRESHOLDS and updated.email:
                logger.info(f"Usage alert for {updated.id}: {percentage}% of generations used")
                await self.emails.send_quietly(
                    EmailRequest(
                        type=EmailType.usage_alert,
                        to=updated.email,
                        name=updated.display_name or "",
                        used=updated.ai_generations_used,
                        limit=updated.ai_generations_limit,
                        percentage=percentage,
                    )
                )
        return updated

    async def change_step(self, project: Project, target: str | int) -> Project:
        """Move ``project`` to another wizard step, enforcing prerequisites."""
        state = project_to_state(project)
        project.current_step = int(wizard.transition(state, target))
        return await self.repos.projects.update(project)

    async def reset(self, project: Project) -> Project:
        """Clear all content but keep the title; history is dropped too."""
        fresh = wizard.reset(project_to_state(project))
        project.current_step = int(ProjectStep.IDEA)
        project.idea_input = fresh.idea_input
        project.vision_statement = fresh.synthesized_idea
        project.research_data = []
        project.prd_content = ""
        project.prd_history = []
        project.realization_tasks = []
        project.artifacts = {}
        return await self.repos.projects.update(project)

    async def revert_prd(self, project: Project, version_id: str) -> Project:
        """Make a previous PRD version current again.

        Raises:
            VersionNotFoundError: ``version_id`` is not in the project's history
        """
        history = prd_history_of(project, limit=self.history_limit)
        history.revert(version_id)
        store_prd_history(project, history)
        return await self.repos.projects.update(project)

    async def add_research(self, project: Project, document: ResearchDocument) -> Project:
        state = project_to_state(project)
        merge_state(project, ProjectState(research=[*state.research, document]))
        return await self.repos.projects.update(project)

    async def remove_research(self, project: Project, document_id: str) -> Project:
        """
        Raises:
            NotFoundError: No research document with ``document_id``
        """
        state = project_to_state(project)
        remaining = [doc for doc in state.research if doc.id != document_id]
        if len(remaining) == len(state.research):
            raise NotFoundError("Research document", document_id)
        merge_state(project, ProjectState(research=remaining))
        return await self.repos.projects.update(project)
