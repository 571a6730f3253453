"""
Lab service.

CRUD over the Lab tables. Every mutation the dashboard cares about also
appends a line to the activity feed.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from jalanea_forge.core.database.base import utc_now
from jalanea_forge.core.database.entities.lab import (
    LabActivity,
    LabClientPreview,
    LabDevDeployment,
    LabNote,
    LabProject,
)
from jalanea_forge.core.database.repositories.bundle import LabRepoBundle
from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.core.models.domain.lab import ActivityType, ClientStatus
from jalanea_forge.errors import NotFoundError

from .previews import DEFAULT_PREVIEW_DOMAIN, DEFAULT_TTL_DAYS, ShareEmail, compose_share_email, default_expiry
from .previews import normalize_subdomain
from .stats import LabStats, compute_stats, toggle_checklist

logger = get_logger(__name__)

NOTE_PREVIEW_CHARS = 30


def _naive_utc(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Stored timestamps are naive UTC; convert aware ones from the API."""
    return {
        key: value.astimezone(timezone.utc).replace(tzinfo=None)
        if isinstance(value, datetime) and value.tzinfo is not None
        else value
        for key, value in values.items()
    }


def _apply(entity: Any, changes: Mapping[str, Any]) -> None:
    for key, value in _naive_utc(changes).items():
        if hasattr(entity, key):
            setattr(entity, key, value)


class LabService:
    def __init__(
        self,
        repos: LabRepoBundle,
        preview_domain: str = DEFAULT_PREVIEW_DOMAIN,
        preview_ttl_days: int = DEFAULT_TTL_DAYS,
    ) -> None:
        self.repos = repos
        self.preview_domain = preview_domain
        self.preview_ttl_days = preview_ttl_days

    async def _activity(self, type: ActivityType, action: str, target: str) -> None:
        await self.repos.activity.record(type.value, action, target)

    # Experiments

    async def list_projects(self, status: Optional[str] = None, category: Optional[str] = None) -> List[LabProject]:
        return await self.repos.projects.list(filters={"status": status, "category": category})

    async def get_project(self, project_id: str) -> LabProject:
        project = await self.repos.projects.get_by_id(project_id)
        if project is None:
            raise NotFoundError("Lab project", project_id)
        return project

    async def create_project(self, data: Mapping[str, Any]) -> LabProject:
        project = LabProject(**_naive_utc(data))
        project = await self.repos.projects.create(project)
        await self._activity(ActivityType.experiment, "Added idea", project.name)
        return project

    async def update_project(self, project_id: str, changes: Mapping[str, Any]) -> LabProject:
        project = await self.get_project(project_id)
        _apply(project, changes)
        project = await self.repos.projects.update(project)
        await self._activity(ActivityType.experiment, "Updated", project.name)
        return project

    async def toggle_checklist_item(self, project_id: str, key: str) -> LabProject:
        project = await self.get_project(project_id)
        project.checklist = toggle_checklist(project.checklist or {}, key)
        return await self.repos.projects.update(project)

    async def delete_project(self, project_id: str) -> None:
        project = await self.get_project(project_id)
        await self.repos.projects.delete(project_id)
        await self._activity(ActivityType.experiment, "Deleted", project.name)

    # Client previews

    async def list_clients(self) -> List[LabClientPreview]:
        return await self.repos.clients.list()

    async def get_client(self, client_id: str) -> LabClientPreview:
        client = await self.repos.clients.get_by_id(client_id)
        if client is None:
            raise NotFoundError("Client preview", client_id)
        return client

    async def create_client(self, data: Mapping[str, Any]) -> LabClientPreview:
        values = _naive_utc(data)
        values["subdomain"] = normalize_subdomain(values.get("subdomain", ""))
        if not values.get("expires_at"):
            values["expires_at"] = default_expiry(ttl_days=self.preview_ttl_days)
        client = await self.repos.clients.create(LabClientPreview(**values))
        await self._activity(ActivityType.client, "Created preview for", client.client_name)
        return client

    async def update_client(self, client_id: str, changes: Mapping[str, Any]) -> LabClientPreview:
        client = await self.get_client(client_id)
        values = _naive_utc(changes)
        if "subdomain" in values:
            values["subdomain"] = normalize_subdomain(values["subdomain"] or "")
        _apply(client, values)
        return await self.repos.clients.update(client)

    async def delete_client(self, client_id: str) -> None:
        await self.get_client(client_id)
        await self.repos.clients.delete(client_id)

    async def share_client(self, client_id: str, now: Optional[datetime] = None) -> tuple[LabClientPreview, ShareEmail]:
        """Compose the share email and mark the preview as sent."""
        client = await self.get_client(client_id)
        email = compose_share_email(client, self.preview_domain)
        client.status = ClientStatus.sent.value
        client.last_sent_at = now or utc_now()
        client = await self.repos.clients.update(client)
        await self._activity(ActivityType.client, "Sent preview to", client.client_name)
        logger.info(f"Preview {client.subdomain} shared with {client.client_email}")
        return client, email

    # Dev deployments

    async def list_deployments(self) -> List[LabDevDeployment]:
        return await self.repos.deployments.list()

    async def get_deployment(self, deployment_id: str) -> LabDevDeployment:
        deployment = await self.repos.deployments.get_by_id(deployment_id)
        if deployment is None:
            raise NotFoundError("Deployment", deployment_id)
        return deployment

    async def create_deployment(self, data: Mapping[str, Any]) -> LabDevDeployment:
        deployment = await self.repos.deployments.create(LabDevDeployment(**_naive_utc(data)))
        await self._activity(ActivityType.deploy, "Added deployment", deployment.project_name)
        return deployment

    async def update_deployment(self, deployment_id: str, changes: Mapping[str, Any]) -> LabDevDeployment:
        deployment = await self.get_deployment(deployment_id)
        _apply(deployment, changes)
        return await self.repos.deployments.update(deployment)

    async def delete_deployment(self, deployment_id: str) -> None:
        await self.get_deployment(deployment_id)
        await self.repos.deployments.delete(deployment_id)

    # Notes

    async def list_notes(self) -> List[LabNote]:
        return await self.repos.notes.list()

    async def capture_note(self, content: str) -> LabNote:
        note = await self.repos.notes.create(LabNote(content=content.strip()))
        await self._activity(ActivityType.note, "Quick capture", note.content[:NOTE_PREVIEW_CHARS] + "...")
        return note

    async def delete_note(self, note_id: str) -> None:
        if not await self.repos.notes.delete(note_id):
            raise NotFoundError("Note", note_id)

    # Overview

    async def stats(self) -> LabStats:
        return compute_stats(
            await self.repos.projects.list(),
            await self.repos.clients.list(),
            await self.repos.deployments.list(),
        )

    async def activity(self) -> List[LabActivity]:
        return await self.repos.activity.recent()
