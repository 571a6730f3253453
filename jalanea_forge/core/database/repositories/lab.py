"""
Jalanea Lab repositories.

The Lab tables share plain CRUD; the activity feed additionally keeps only
its most recent entries.
"""

from __future__ import annotations

from typing import List, Type

from sqlalchemy import delete as sql_delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.lab import LabActivity, LabClientPreview, LabDevDeployment, LabNote, LabProject
from .base import EntityType, SQLModelRepository

ACTIVITY_FEED_SIZE = 20


class LabRepository(SQLModelRepository[EntityType]):
    """CRUD repository for one Lab table."""

    def __init__(self, session: AsyncSession, model: Type[EntityType], order_by: str = "created_at") -> None:
        super().__init__(session, model)
        self.order_by = order_by


class LabActivityRepository(SQLModelRepository[LabActivity]):
    """Activity feed capped at the latest ``ACTIVITY_FEED_SIZE`` entries."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, LabActivity)

    async def record(self, type: str, action: str, target: str) -> LabActivity:
        activity = await self.create(LabActivity(type=type, action=action, target=target))
        keep = select(LabActivity.id).order_by(LabActivity.created_at.desc()).limit(ACTIVITY_FEED_SIZE)
        await self.session.execute(sql_delete(LabActivity).where(LabActivity.id.not_in(keep)))
        await self.session.commit()
        return activity

    async def recent(self) -> List[LabActivity]:
        return await self.list(limit=ACTIVITY_FEED_SIZE)


def lab_projects(session: AsyncSession) -> LabRepository[LabProject]:
    return LabRepository(session, LabProject, order_by="updated_at")


def lab_clients(session: AsyncSession) -> LabRepository[LabClientPreview]:
    return LabRepository(session, LabClientPreview)


def lab_deployments(session: AsyncSession) -> LabRepository[LabDevDeployment]:
    return LabRepository(session, LabDevDeployment, order_by="updated_at")


def lab_notes(session: AsyncSession) -> LabRepository[LabNote]:
    return LabRepository(session, LabNote)
