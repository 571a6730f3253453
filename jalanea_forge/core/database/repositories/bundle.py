"""
Repository bundle for dependency injection.

This module provides a convenience bundle of all repository instances
sharing one session, for services that touch several tables in a request.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.lab import LabClientPreview, LabDevDeployment, LabNote, LabProject
from .lab import LabActivityRepository, LabRepository, lab_clients, lab_deployments, lab_notes, lab_projects
from .profiles import ProfileRepository
from .projects import ProjectRepository
from .usage_logs import UsageLogRepository


@dataclass(frozen=True)
class SqlRepoBundle:
    """Convenience bundle of the Forge repositories."""

    profiles: ProfileRepository
    projects: ProjectRepository
    usage_logs: UsageLogRepository


@dataclass(frozen=True)
class LabRepoBundle:
    """Convenience bundle of the Jalanea Lab repositories."""

    projects: LabRepository[LabProject]
    clients: LabRepository[LabClientPreview]
    deployments: LabRepository[LabDevDeployment]
    notes: LabRepository[LabNote]
    activity: LabActivityRepository


def build_sql_repos_from_session(*, session: AsyncSession) -> SqlRepoBundle:
    """Build a SqlRepoBundle from an existing session.

    Args:
        session: Existing async session

    Returns:
        Bundle containing all repository instances
    """
    return SqlRepoBundle(
        profiles=ProfileRepository(session),
        projects=ProjectRepository(session),
        usage_logs=UsageLogRepository(session),
    )


def build_lab_repos_from_session(*, session: AsyncSession) -> LabRepoBundle:
    return LabRepoBundle(
        projects=lab_projects(session),
        clients=lab_clients(session),
        deployments=lab_deployments(session),
        notes=lab_notes(session),
        activity=LabActivityRepository(session),
    )
