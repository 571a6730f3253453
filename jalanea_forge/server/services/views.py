"""Entity to response-schema conversions shared by the routers."""

from __future__ import annotations

from typing import Optional

from jalanea_forge.billing import is_subscription_active, tier_from_role
from jalanea_forge.core.database.entities.lab import LabClientPreview, LabProject
from jalanea_forge.core.database.entities.profiles import Profile
from jalanea_forge.core.database.entities.projects import Project
from jalanea_forge.core.models.domain import PrdSource
from jalanea_forge.core.models.domain.lab import ClientStatus, default_checklist
from jalanea_forge.core.models.io.lab import ClientPreviewRead, LabProjectRead
from jalanea_forge.core.models.io.profiles import AdminUserRead, ProfileRead
from jalanea_forge.core.models.io.projects import ProjectRead
from jalanea_forge.forge.autosave import PRD_SOURCE_KEY, project_to_state
from jalanea_forge.lab import checklist_progress, days_remaining, preview_url


def profile_read(profile: Profile) -> ProfileRead:
    return ProfileRead.from_entity(
        profile,
        tier=tier_from_role(profile.role),
        subscription_active=is_subscription_active(profile.current_period_end),
    )


def admin_user_read(profile: Profile) -> AdminUserRead:
    return AdminUserRead(
        **profile_read(profile).model_dump(),
        stripe_customer_id=profile.stripe_customer_id,
        stripe_subscription_id=profile.stripe_subscription_id,
    )


def project_read(project: Project) -> ProjectRead:
    source: Optional[str] = (project.artifacts or {}).get(PRD_SOURCE_KEY)
    return ProjectRead(
        id=project.id,
        name=project.name,
        current_step=project.current_step,
        state=project_to_state(project),
        prd_source=PrdSource(source) if source else PrdSource.generated,
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


def lab_project_read(project: LabProject) -> LabProjectRead:
    checklist = {**default_checklist(), **(project.checklist or {})}
    return LabProjectRead(
        id=project.id,
        name=project.name,
        description=project.description,
        status=project.status,
        category=project.category,
        url=project.url,
        checklist=checklist,
        progress=checklist_progress(checklist),
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


def client_read(client: LabClientPreview, domain: str) -> ClientPreviewRead:
    remaining = days_remaining(client.expires_at)
    expired = remaining < 0
    return ClientPreviewRead(
        id=client.id,
        client_name=client.client_name,
        client_email=client.client_email,
        project_name=client.project_name,
        project_description=client.project_description,
        subdomain=client.subdomain,
        status=ClientStatus.expired if expired else client.status,
        password=client.password,
        preview_url=preview_url(client.subdomain, domain),
        expires_at=client.expires_at,
        days_remaining=remaining,
        expired=expired,
        last_sent_at=client.last_sent_at,
        created_at=client.created_at,
    )
