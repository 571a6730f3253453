"""
Project Endpoints.

CRUD over a user's Forge projects plus the wizard operations: step changes,
research documents, PRD history and export, and debounced draft saves.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Response, status

from jalanea_forge.core.database.entities.profiles import Profile
from jalanea_forge.core.database.entities.projects import Project
from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.core.models.domain import ProjectState
from jalanea_forge.core.models.io.projects import (
    DraftAccepted,
    FlushResult,
    PrdHistoryRead,
    ProjectCreate,
    ProjectRead,
    ProjectSummary,
    ResearchDocumentCreate,
    StepChange,
)
from jalanea_forge.errors import WizardTransitionError
from jalanea_forge.forge import wizard
from jalanea_forge.forge.autosave import (
    merge_state,
    patch_from_payload,
    patch_to_payload,
    prd_history_of,
    project_to_state,
)
from jalanea_forge.forge.export import export_filename, prd_markdown
from jalanea_forge.forge.permissions import FeatureAction, permissions_for, require
from jalanea_forge.server.core.config import settings
from jalanea_forge.server.services.deps import AutosaveDep, CurrentProfileDep, ForgeServiceDep, ReposDep
from jalanea_forge.server.services.views import project_read

logger = get_logger(__name__)

router = APIRouter()


async def load_project(repos, project_id: str, profile: Profile) -> Project:
    """The project, if the caller owns it or may view every project."""
    if permissions_for(profile.role).can_view_all_projects:
        project = await repos.projects.get_by_id(project_id)
    else:
        project = await repos.projects.get_for_user(project_id, profile.id)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Project {project_id} not found")
    return project


async def save_pending_draft(repos, autosave, project: Project) -> Project:
    """Write the project's pending draft so the next change lands after it."""
    if await autosave.flush(project.id):
        await repos.projects.session.refresh(project)
    return project


def _check_step_patch(project: Project, patch: ProjectState, pending: Optional[Dict[str, Any]] = None) -> None:
    """A patch that moves the step must satisfy the step's prerequisites.

    ``pending`` is the draft still waiting to be saved; its fields count as
    already written, with ``patch`` applied on top.
    """
    if "current_step" not in patch.model_fields_set:
        return
    updates: Dict[str, Any] = {}
    for layer in ([patch_from_payload(pending)] if pending else []) + [patch]:
        updates.update({k: getattr(layer, k) for k in layer.model_fields_set if k != "current_step"})
    merged = project_to_state(project).model_copy(update=updates)
    if not wizard.can_enter(merged, patch.current_step):
        missing = wizard.missing_prerequisite(merged, patch.current_step) or "its prerequisites"
        raise WizardTransitionError(patch.current_step.slug, missing)


@router.post(
    "",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Project",
    description="Create a new project at the Idea step.",
    response_description="The created project.",
    responses={403: {"description": "Project limit of the caller's tier reached"}},
)
async def create_project(payload: ProjectCreate, profile: CurrentProfileDep, repos: ReposDep) -> ProjectRead:
    """
    Create a project.

    - **name**: Project title (defaults to "Untitled Project").
    - **idea_input**: Optional raw idea to start from.
    """
    count = await repos.projects.count_for_user(profile.id)
    require(profile, FeatureAction.create_project, project_count=count)
    project = await repos.projects.create(
        Project(user_id=profile.id, name=payload.name or "Untitled Project", idea_input=payload.idea_input)
    )
    logger.info(f"Project {project.id} created for user {profile.id}")
    return project_read(project)


@router.get(
    "",
    response_model=List[ProjectSummary],
    summary="List Projects",
    description="The caller's projects, most recently updated first.",
    response_description="List of project summaries.",
)
async def list_projects(profile: CurrentProfileDep, repos: ReposDep) -> List[ProjectSummary]:
    return [ProjectSummary.model_validate(p) for p in await repos.projects.list_for_user(profile.id)]


@router.get(
    "/{project_id}",
    response_model=ProjectRead,
    summary="Get Project",
    description="A project with its full wizard state. Pending draft edits are saved first.",
    response_description="The project.",
    responses={404: {"description": "Project not found"}},
)
async def get_project(
    project_id: str, profile: CurrentProfileDep, repos: ReposDep, autosave: AutosaveDep
) -> ProjectRead:
    project = await save_pending_draft(repos, autosave, await load_project(repos, project_id, profile))
    return project_read(project)


@router.patch(
    "/{project_id}",
    response_model=ProjectRead,
    summary="Update Project",
    description="Apply a partial wizard state (camelCase or snake_case keys) and save immediately.",
    response_description="The updated project.",
    responses={404: {"description": "Project not found"}, 409: {"description": "Step prerequisites not met"}},
)
async def update_project(
    project_id: str,
    patch: ProjectState,
    profile: CurrentProfileDep,
    repos: ReposDep,
    autosave: AutosaveDep,
) -> ProjectRead:
    """
    Update a project.

    Only the fields present in the body are written. A changed PRD is recorded
    in the version history as a manual edit. Any pending draft is saved first
    so this write lands last.
    """
    project = await save_pending_draft(repos, autosave, await load_project(repos, project_id, profile))
    _check_step_patch(project, patch)
    merge_state(project, patch, history_limit=settings.prd_history_limit)
    project = await repos.projects.update(project)
    return project_read(project)


@router.patch(
    "/{project_id}/draft",
    response_model=DraftAccepted,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Autosave Draft",
    description="Queue a partial wizard state; it is saved once edits go quiet.",
    response_description="What is pending for the project.",
    responses={404: {"description": "Project not found"}, 409: {"description": "Step prerequisites not met"}},
)
async def save_draft(
    project_id: str,
    patch: ProjectState,
    profile: CurrentProfileDep,
    repos: ReposDep,
    autosave: AutosaveDep,
) -> DraftAccepted:
    """
    Debounced save.

    A later draft for the same project supersedes the pending one and restarts
    the timer; fields from both are merged, the later value winning.
    """
    project = await load_project(repos, project_id, profile)
    _check_step_patch(project, patch, pending=autosave.pending(project.id))
    autosave.schedule(project.id, patch_to_payload(patch))
    return DraftAccepted(
        project_id=project.id,
        pending_fields=sorted(autosave.pending(project.id) or {}),
        delay_seconds=autosave.delay,
    )


@router.post(
    "/{project_id}/draft/flush",
    response_model=FlushResult,
    summary="Flush Draft",
    description="Save the project's pending draft now.",
    response_description="Number of drafts saved (0 or 1).",
)
async def flush_draft(
    project_id: str, profile: CurrentProfileDep, repos: ReposDep, autosave: AutosaveDep
) -> FlushResult:
    project = await load_project(repos, project_id, profile)
    return FlushResult(flushed=await autosave.flush(project.id))


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Project",
    description="Delete a project permanently.",
    responses={404: {"description": "Project not found"}},
)
async def delete_project(
    project_id: str, profile: CurrentProfileDep, repos: ReposDep, autosave: AutosaveDep
) -> Response:
    project = await load_project(repos, project_id, profile)
    autosave.discard(project.id)
    await repos.projects.delete(project.id)
    logger.info(f"Project {project_id} deleted by user {profile.id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{project_id}/reset",
    response_model=ProjectRead,
    summary="Reset Project",
    description="Clear all content (keeping the title) and go back to the Idea step.",
    response_description="The reset project.",
)
async def reset_project(
    project_id: str, profile: CurrentProfileDep, repos: ReposDep, forge: ForgeServiceDep, autosave: AutosaveDep
) -> ProjectRead:
    """Reset a project. A pending draft is dropped, not saved over the cleared content."""
    project = await load_project(repos, project_id, profile)
    autosave.discard(project.id)
    return project_read(await forge.reset(project))


@router.post(
    "/{project_id}/step",
    response_model=ProjectRead,
    summary="Change Step",
    description="Move the project to another wizard step. Moving forward requires the step's input.",
    response_description="The project at its new step.",
    responses={409: {"description": "Step prerequisites not met"}, 400: {"description": "Unknown step"}},
)
async def change_step(
    project_id: str, payload: StepChange, profile: CurrentProfileDep, repos: ReposDep, forge: ForgeServiceDep,
    autosave: AutosaveDep,
) -> ProjectRead:
    """
    Change the wizard step.

    - **step**: 1-4, or one of `idea`, `research`, `prd`, `realization`.
    """
    project = await save_pending_draft(repos, autosave, await load_project(repos, project_id, profile))
    try:
        project = await forge.change_step(project, payload.step)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return project_read(project)


@router.post(
    "/{project_id}/research",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add Research Document",
    description="Attach a text or PDF (base64) research document to the project.",
    response_description="The updated project.",
)
async def add_research(
    project_id: str,
    payload: ResearchDocumentCreate,
    profile: CurrentProfileDep,
    repos: ReposDep,
    forge: ForgeServiceDep,
    autosave: AutosaveDep,
) -> ProjectRead:
    project = await save_pending_draft(repos, autosave, await load_project(repos, project_id, profile))
    return project_read(await forge.add_research(project, payload.to_document()))


@router.delete(
    "/{project_id}/research/{document_id}",
    response_model=ProjectRead,
    summary="Remove Research Document",
    description="Detach a research document from the project.",
    response_description="The updated project.",
    responses={404: {"description": "Project or document not found"}},
)
async def remove_research(
    project_id: str, document_id: str, profile: CurrentProfileDep, repos: ReposDep, forge: ForgeServiceDep,
    autosave: AutosaveDep,
) -> ProjectRead:
    project = await save_pending_draft(repos, autosave, await load_project(repos, project_id, profile))
    return project_read(await forge.remove_research(project, document_id))


@router.get(
    "/{project_id}/prd/history",
    response_model=PrdHistoryRead,
    summary="PRD History",
    description="The current PRD and its previous versions (Starter and up).",
    response_description="PRD version history.",
    responses={403: {"description": "Tier has no version history"}},
)
async def prd_history(
    project_id: str, profile: CurrentProfileDep, repos: ReposDep, autosave: AutosaveDep
) -> PrdHistoryRead:
    require(profile, FeatureAction.view_version_history)
    project = await save_pending_draft(repos, autosave, await load_project(repos, project_id, profile))
    history = prd_history_of(project, limit=settings.prd_history_limit)
    return PrdHistoryRead(current=history.current, current_source=history.current_source, versions=history.versions)


@router.post(
    "/{project_id}/prd/history/{version_id}/revert",
    response_model=ProjectRead,
    summary="Revert PRD",
    description="Make a previous PRD version current; the replaced PRD is kept in the history.",
    response_description="The updated project.",
    responses={403: {"description": "Tier has no version history"}, 404: {"description": "Version not found"}},
)
async def revert_prd(
    project_id: str, version_id: str, profile: CurrentProfileDep, repos: ReposDep, forge: ForgeServiceDep,
    autosave: AutosaveDep,
) -> ProjectRead:
    require(profile, FeatureAction.view_version_history)
    project = await save_pending_draft(repos, autosave, await load_project(repos, project_id, profile))
    return project_read(await forge.revert_prd(project, version_id))


@router.get(
    "/{project_id}/prd/export",
    summary="Export PRD",
    description="Download the PRD as a Markdown file (Starter and up).",
    response_description="Markdown document.",
    responses={403: {"description": "Tier cannot export"}, 409: {"description": "Project has no PRD yet"}},
)
async def export_prd(
    project_id: str, profile: CurrentProfileDep, repos: ReposDep, autosave: AutosaveDep
) -> Response:
    require(profile, FeatureAction.export_prd)
    project = await save_pending_draft(repos, autosave, await load_project(repos, project_id, profile))
    state = project_to_state(project)
    if not state.has_prd:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Project has no PRD to export")
    return Response(
        content=prd_markdown(state),
        media_type="text/markdown; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(state.title)}"'},
    )
