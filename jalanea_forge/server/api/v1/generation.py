"""
Generation Endpoints.

Run an AI generation for one artifact of a project, and turn an error log
into a bug report for the support form.
"""

from typing import Optional

from fastapi import APIRouter

from jalanea_forge.core.models.domain import Artifact, BugReport
from jalanea_forge.core.models.io.projects import BugReportRequest, GenerateRequest, GenerateResponse
from jalanea_forge.server.api.v1.projects import load_project, save_pending_draft
from jalanea_forge.server.services.deps import AutosaveDep, CurrentProfileDep, ForgeServiceDep, ReposDep
from jalanea_forge.server.services.views import project_read

router = APIRouter()

GENERATION_ERRORS = {
    400: {"description": "No API key available (code MISSING_API_KEY)"},
    402: {"description": "Monthly generation limit reached"},
    404: {"description": "Project not found"},
    409: {"description": "The project lacks the artifact's input"},
    429: {"description": "Provider still rate-limited after retries"},
    502: {"description": "Provider failure"},
}


@router.post(
    "/projects/{project_id}/generate/{artifact}",
    response_model=GenerateResponse,
    summary="Generate Artifact",
    description="Generate one artifact of the project with AI and store it.",
    response_description="The updated project and the caller's quota.",
    responses=GENERATION_ERRORS,
)
async def generate_artifact(
    project_id: str,
    artifact: Artifact,
    profile: CurrentProfileDep,
    repos: ReposDep,
    forge: ForgeServiceDep,
    autosave: AutosaveDep,
    payload: Optional[GenerateRequest] = None,
) -> GenerateResponse:
    """
    Generate an artifact.

    Counts against the caller's monthly quota. Generating moves the project
    forward to the artifact's step; it never moves it back.

    - **vision**: refine the raw idea into a vision statement.
    - **research-prompts**: research mission plus the report template.
    - **prd**: PRD from the vision and research documents.
    - **prd-refinement**: apply `instructions` to the current PRD.
    - **roadmap**: phased implementation plan.
    - **design-prompts**: Stitch and Opal design prompts.
    - **code-prompt**: the master build prompt.
    """
    project = await save_pending_draft(repos, autosave, await load_project(repos, project_id, profile))
    outcome = await forge.generate(profile, project, artifact, instructions=payload.instructions if payload else None)
    return GenerateResponse(
        project=project_read(outcome.project),
        action_type=outcome.action_type.value,
        tokens_used=outcome.tokens_used,
        generations_used=outcome.profile.ai_generations_used,
        generations_limit=outcome.profile.ai_generations_limit,
    )


@router.post(
    "/support/bug-report",
    response_model=BugReport,
    summary="Draft Bug Report",
    description="Turn an error message into an email-ready bug report (subject and body).",
    response_description="Subject and body of the report.",
    responses={400: GENERATION_ERRORS[400], 402: GENERATION_ERRORS[402]},
)
async def bug_report(payload: BugReportRequest, profile: CurrentProfileDep, forge: ForgeServiceDep) -> BugReport:
    return await forge.bug_report(profile, payload.error, payload.context)
