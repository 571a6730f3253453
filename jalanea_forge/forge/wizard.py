"""Wizard step state machine.

Projects move linearly through Idea, Research, PRD and Realization. Moving
forward requires the content the target stage builds on; moving back (or
staying put) is always allowed so the user can revise earlier work.
"""

from __future__ import annotations

from typing import Dict, Optional, Union

from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.core.models.domain import Artifact, ProjectState, ProjectStep
from jalanea_forge.errors import WizardTransitionError

logger = get_logger(__name__)

# Stage whose page produces each artifact.
ARTIFACT_STAGE: Dict[Artifact, ProjectStep] = {
    Artifact.vision: ProjectStep.IDEA,
    Artifact.research_prompts: ProjectStep.RESEARCH,
    Artifact.prd: ProjectStep.PRD,
    Artifact.prd_refinement: ProjectStep.PRD,
    Artifact.roadmap: ProjectStep.REALIZATION,
    Artifact.design_prompts: ProjectStep.REALIZATION,
    Artifact.code_prompt: ProjectStep.REALIZATION,
}


def next_step(step: ProjectStep) -> ProjectStep:
    return ProjectStep(min(int(step) + 1, int(ProjectStep.REALIZATION)))


def previous_step(step: ProjectStep) -> ProjectStep:
    return ProjectStep(max(int(step) - 1, int(ProjectStep.IDEA)))


def missing_prerequisite(state: ProjectState, target: ProjectStep) -> Optional[str]:
    """Name of the content ``target`` needs that ``state`` lacks, or None."""
    if target in (ProjectStep.RESEARCH, ProjectStep.PRD) and not state.has_idea:
        return "a product idea"
    if target is ProjectStep.REALIZATION and not state.has_prd:
        return "a PRD"
    return None


def can_enter(state: ProjectState, target: ProjectStep) -> bool:
    if target <= state.current_step:
        return True
    return missing_prerequisite(state, target) is None


def transition(state: ProjectState, target: Union[ProjectStep, int, str]) -> ProjectStep:
    """Validate a move of ``state`` to ``target``.

    Args:
        state: Current wizard state
        target: Step enum, step number or slug (``idea``, ``research``, ...)

    Returns:
        The step to store

    Raises:
        WizardTransitionError: A forward move lacks its prerequisite content
    """
    if isinstance(target, str) and not target.isdigit():
        target = ProjectStep.from_slug(target)
    target = ProjectStep(int(target))

    if target > state.current_step:
        missing = missing_prerequisite(state, target)
        if missing is not None:
            raise WizardTransitionError(target.slug, missing)

    logger.debug(f"Wizard transition {state.current_step.slug} -> {target.slug}")
    return target


def advance_after_generation(step: Union[ProjectStep, int], artifact: Artifact) -> ProjectStep:
    """Step to store after ``artifact`` was generated; never moves backwards."""
    return ProjectStep(max(int(step), int(ARTIFACT_STAGE[artifact])))


def reset(state: ProjectState) -> ProjectState:
    """Clear every piece of content but keep the title; back to the Idea step."""
    return ProjectState(title=state.title)
