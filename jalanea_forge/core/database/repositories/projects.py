"""
Project repository.

Projects are read through their owner; ``get_for_user`` returns None for a
project that exists but belongs to somebody else. Roles that may view every
project use ``get_by_id`` and ``list`` directly.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.projects import Project
from .base import SQLModelRepository


class ProjectRepository(SQLModelRepository[Project]):
    """Repository for Forge projects using SQLModel."""

    order_by = "updated_at"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Project)

    async def update(self, project: Project) -> Project:
        """Persist ``project`` and bump its ``updated_at``."""
        project.updated_at = utc_now()
        return await super().update(project)

    async def get_for_user(self, project_id: str, user_id: str) -> Optional[Project]:
        project = await self.get_by_id(project_id)
        if project is None or project.user_id != user_id:
            return None
        return project

    async def list_for_user(self, user_id: str) -> List[Project]:
        """Projects of one user, most recently updated first."""
        return await self.list(filters={"user_id": user_id})

    async def count_for_user(self, user_id: str) -> int:
        stmt = select(func.count()).select_from(Project).where(Project.user_id == user_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
