"""
Usage log repository.

Append-only generation log with the aggregate queries behind the usage and
admin endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.usage_logs import UsageLog
from .base import SQLModelRepository


class UsageLogRepository(SQLModelRepository[UsageLog]):
    """Repository for usage log data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, UsageLog)

    async def append(self, user_id: str, action_type: str, tokens_used: int = 0) -> UsageLog:
        """Record one generation."""
        return await self.create(UsageLog(user_id=user_id, action_type=action_type, tokens_used=tokens_used))

    async def stats_for_user(
        self,
        user_id: str,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Count a user's generations, optionally within ``[from_date, to_date]``.

        Returns:
            ``{"total": int, "by_action": {action_type: count}}``
        """
        stmt = (
            select(UsageLog.action_type, func.count())
            .where(UsageLog.user_id == user_id)
            .group_by(UsageLog.action_type)
        )
        if from_date is not None:
            stmt = stmt.where(UsageLog.created_at >= from_date)
        if to_date is not None:
            stmt = stmt.where(UsageLog.created_at <= to_date)
        result = await self.session.execute(stmt)
        by_action = {action: int(count) for action, count in result.all()}
        return {"total": sum(by_action.values()), "by_action": by_action}

    async def stats_by_user(self) -> List[Dict[str, Any]]:
        """Generation counts and token totals grouped per user, heaviest first."""
        stmt = (
            select(UsageLog.user_id, func.count(), func.coalesce(func.sum(UsageLog.tokens_used), 0))
            .group_by(UsageLog.user_id)
            .order_by(func.count().desc())
        )
        result = await self.session.execute(stmt)
        return [
            {"user_id": user_id, "total": int(count), "tokens_used": int(tokens)}
            for user_id, count, tokens in result.all()
        ]
