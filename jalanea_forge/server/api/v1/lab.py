"""
Jalanea Lab Endpoints.

The owner's personal dashboard behind the Lab password: experiments, client
previews, dev deployments, notes, the activity feed and the brainstorm chat.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse

from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.core.models.domain.lab import LabStatus, ProjectCategory
from jalanea_forge.core.models.io.lab import (
    ActivityRead,
    BrainstormRequest,
    BrainstormResponse,
    ClientPreviewCreate,
    ClientPreviewRead,
    ClientPreviewUpdate,
    ClientShareResponse,
    DeploymentCreate,
    DeploymentRead,
    DeploymentUpdate,
    LabLogin,
    LabOverview,
    LabProjectCreate,
    LabProjectRead,
    LabProjectUpdate,
    LabSession,
    LabStatsRead,
    NoteCreate,
    NoteRead,
    ShareEmailRead,
)
from jalanea_forge.errors import GenerationError, MissingApiKeyError
from jalanea_forge.forge.generation import ChatTurn
from jalanea_forge.server.core.config import settings
from jalanea_forge.server.core.constant import LAB_AUTH_COOKIE
from jalanea_forge.server.services.deps import BrainstormServiceDep, LabServiceDep, LabTokensDep, get_lab_session
from jalanea_forge.server.services.views import client_read, lab_project_read

logger = get_logger(__name__)

router = APIRouter()
# Everything but login sits behind the Lab session
protected = APIRouter(dependencies=[Depends(get_lab_session)])


def _domain() -> str:
    return settings.lab.preview_domain


@router.post(
    "/auth",
    response_model=LabSession,
    summary="Lab Login",
    description="Trade the Lab password for a session token (also set as a cookie).",
    response_description="The session token.",
    responses={401: {"description": "Wrong password"}},
)
async def login(payload: LabLogin, response: Response, tokens: LabTokensDep) -> LabSession:
    token = tokens.issue(payload.password)
    max_age = int(tokens.ttl.total_seconds())
    response.set_cookie(LAB_AUTH_COOKIE, token, max_age=max_age, httponly=True, samesite="strict", secure=True)
    logger.info("Lab session issued")
    return LabSession(token=token, expires_in=max_age)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Lab Logout",
    description="Clear the Lab session cookie.",
)
async def logout() -> Response:
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(LAB_AUTH_COOKIE)
    return response


# Overview


@protected.get(
    "/overview",
    response_model=LabOverview,
    summary="Lab Overview",
    description="Dashboard stats and the recent activity feed.",
    response_description="Stats and activity.",
)
async def overview(lab: LabServiceDep) -> LabOverview:
    stats = await lab.stats()
    activity = await lab.activity()
    return LabOverview(
        stats=LabStatsRead(**stats.as_dict()),
        activity=[ActivityRead.model_validate(a) for a in activity],
    )


@protected.get("/stats", response_model=LabStatsRead, summary="Lab Stats", description="Dashboard counters.")
async def get_stats(lab: LabServiceDep) -> LabStatsRead:
    return LabStatsRead(**(await lab.stats()).as_dict())


@protected.get(
    "/activity", response_model=List[ActivityRead], summary="Activity Feed", description="Latest Lab activity."
)
async def get_activity(lab: LabServiceDep) -> List[ActivityRead]:
    return [ActivityRead.model_validate(a) for a in await lab.activity()]


# Experiments


@protected.get(
    "/projects",
    response_model=List[LabProjectRead],
    summary="List Experiments",
    description="Lab projects, optionally filtered by status and category.",
)
async def list_lab_projects(
    lab: LabServiceDep,
    status_filter: Optional[LabStatus] = Query(None, alias="status"),
    category: Optional[ProjectCategory] = None,
) -> List[LabProjectRead]:
    projects = await lab.list_projects(
        status=status_filter.value if status_filter else None, category=category.value if category else None
    )
    return [lab_project_read(p) for p in projects]


@protected.post(
    "/projects",
    response_model=LabProjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add Experiment",
    description="Add a project to the Lab.",
)
async def create_lab_project(payload: LabProjectCreate, lab: LabServiceDep) -> LabProjectRead:
    data = payload.model_dump(mode="json", exclude_none=True)
    return lab_project_read(await lab.create_project(data))


@protected.get("/projects/{project_id}", response_model=LabProjectRead, summary="Get Experiment")
async def get_lab_project(project_id: str, lab: LabServiceDep) -> LabProjectRead:
    return lab_project_read(await lab.get_project(project_id))


@protected.patch("/projects/{project_id}", response_model=LabProjectRead, summary="Update Experiment")
async def update_lab_project(project_id: str, payload: LabProjectUpdate, lab: LabServiceDep) -> LabProjectRead:
    changes = payload.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    return lab_project_read(await lab.update_project(project_id, changes))


@protected.post(
    "/projects/{project_id}/checklist/{item}",
    response_model=LabProjectRead,
    summary="Toggle Checklist Item",
    description="Flip one launch checklist step (e.g. `mvpDefined`).",
    responses={400: {"description": "Unknown checklist item"}},
)
async def toggle_checklist_item(project_id: str, item: str, lab: LabServiceDep):
    try:
        project = await lab.toggle_checklist_item(project_id, item)
    except ValueError as e:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(e)})
    return lab_project_read(project)


@protected.delete("/projects/{project_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Experiment")
async def delete_lab_project(project_id: str, lab: LabServiceDep) -> Response:
    await lab.delete_project(project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Client previews


@protected.get("/clients", response_model=List[ClientPreviewRead], summary="List Client Previews")
async def list_clients(lab: LabServiceDep) -> List[ClientPreviewRead]:
    return [client_read(c, _domain()) for c in await lab.list_clients()]


@protected.post(
    "/clients",
    response_model=ClientPreviewRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Client Preview",
    description="Create a preview; it expires after the configured number of days unless `expires_at` is given.",
)
async def create_client(payload: ClientPreviewCreate, lab: LabServiceDep) -> ClientPreviewRead:
    data = payload.model_dump(exclude_none=True)
    data["status"] = payload.status.value
    return client_read(await lab.create_client(data), _domain())


@protected.patch("/clients/{client_id}", response_model=ClientPreviewRead, summary="Update Client Preview")
async def update_client(client_id: str, payload: ClientPreviewUpdate, lab: LabServiceDep) -> ClientPreviewRead:
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if payload.status is not None:
        changes["status"] = payload.status.value
    return client_read(await lab.update_client(client_id, changes), _domain())


@protected.post(
    "/clients/{client_id}/share",
    response_model=ClientShareResponse,
    summary="Share Client Preview",
    description="Compose the share email (subject, body, mailto link) and mark the preview as sent.",
)
async def share_client(client_id: str, lab: LabServiceDep) -> ClientShareResponse:
    client, email = await lab.share_client(client_id)
    return ClientShareResponse(
        client=client_read(client, _domain()),
        email=ShareEmailRead(to=email.to, subject=email.subject, body=email.body, mailto=email.mailto),
    )


@protected.delete("/clients/{client_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Client Preview")
async def delete_client(client_id: str, lab: LabServiceDep) -> Response:
    await lab.delete_client(client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Dev deployments


@protected.get("/deployments", response_model=List[DeploymentRead], summary="List Deployments")
async def list_deployments(lab: LabServiceDep) -> List[DeploymentRead]:
    return [DeploymentRead.model_validate(d) for d in await lab.list_deployments()]


@protected.post(
    "/deployments", response_model=DeploymentRead, status_code=status.HTTP_201_CREATED, summary="Add Deployment"
)
async def create_deployment(payload: DeploymentCreate, lab: LabServiceDep) -> DeploymentRead:
    data = payload.model_dump(exclude_none=True)
    data["status"] = payload.status.value
    return DeploymentRead.model_validate(await lab.create_deployment(data))


@protected.patch("/deployments/{deployment_id}", response_model=DeploymentRead, summary="Update Deployment")
async def update_deployment(deployment_id: str, payload: DeploymentUpdate, lab: LabServiceDep) -> DeploymentRead:
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if payload.status is not None:
        changes["status"] = payload.status.value
    return DeploymentRead.model_validate(await lab.update_deployment(deployment_id, changes))


@protected.delete(
    "/deployments/{deployment_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Deployment"
)
async def delete_deployment(deployment_id: str, lab: LabServiceDep) -> Response:
    await lab.delete_deployment(deployment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Notes


@protected.get("/notes", response_model=List[NoteRead], summary="List Notes")
async def list_notes(lab: LabServiceDep) -> List[NoteRead]:
    return [NoteRead.model_validate(n) for n in await lab.list_notes()]


@protected.post("/notes", response_model=NoteRead, status_code=status.HTTP_201_CREATED, summary="Quick Capture")
async def capture_note(payload: NoteCreate, lab: LabServiceDep) -> NoteRead:
    return NoteRead.model_validate(await lab.capture_note(payload.content))


@protected.delete("/notes/{note_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Note")
async def delete_note(note_id: str, lab: LabServiceDep) -> Response:
    await lab.delete_note(note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Brainstorm


@protected.post(
    "/brainstorm",
    response_model=BrainstormResponse,
    summary="Brainstorm",
    description="Chat with Gemini or Claude as a brainstorm partner. The last message is answered.",
    response_description="`{content, model}`",
    responses={500: {"description": "`{error}` when the provider call fails"}},
)
async def brainstorm(payload: BrainstormRequest, service: BrainstormServiceDep):
    turns = [ChatTurn(role=m.role, content=m.content) for m in payload.messages]
    try:
        reply = await service.reply(turns, payload.model)
    except (GenerationError, MissingApiKeyError) as e:
        logger.error(f"Brainstorm API error: {e.message}")
        return JSONResponse(status_code=500, content={"error": e.message or "Failed to get response"})
    return BrainstormResponse(content=reply.content, model=reply.model)


router.include_router(protected)
