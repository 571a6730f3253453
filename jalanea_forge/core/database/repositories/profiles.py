"""
Profile repository.

Data access for user profiles, including the generation counter and the
Stripe linkage used by the billing webhook.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.profiles import Profile
from .base import SQLModelRepository

DEFAULT_ROLE = "free"
DEFAULT_LIMIT = 25


class ProfileRepository(SQLModelRepository[Profile]):
    """Repository for profile data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Profile)

    async def get_or_create(self, user_id: str, email: Optional[str] = None) -> Profile:
        """Return the profile of ``user_id``, creating a free-tier one on first sight.

        Args:
            user_id: Supabase auth uid
            email: Email claim of the access token, stored on creation

        Returns:
            The existing or newly created profile
        """
        profile = await self.get_by_id(user_id)
        if profile is not None:
            if email and not profile.email:
                profile.email = email
                profile = await self.update(profile)
            return profile
        return await self.create(
            Profile(id=user_id, email=email, role=DEFAULT_ROLE, ai_generations_limit=DEFAULT_LIMIT)
        )

    async def get_by_stripe_customer(self, customer_id: str) -> Optional[Profile]:
        stmt = select(Profile).where(Profile.stripe_customer_id == customer_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_stripe_subscription(self, subscription_id: str) -> Optional[Profile]:
        stmt = select(Profile).where(Profile.stripe_subscription_id == subscription_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def increment_generations(self, user_id: str) -> Optional[Profile]:
        """Add one to the monthly generation counter in a single UPDATE.

        Args:
            user_id: Profile to charge

        Returns:
            The refreshed profile, or None when it does not exist
        """
        stmt = (
            sql_update(Profile)
            .where(Profile.id == user_id)
            .values(ai_generations_used=Profile.ai_generations_used + 1, updated_at=utc_now())
        )
        await self.session.execute(stmt)
        await self.session.commit()
        profile = await self.get_by_id(user_id)
        if profile is not None:
            await self.session.refresh(profile)
        return profile

    async def reset_generations(self, user_id: str) -> Optional[Profile]:
        profile = await self.get_by_id(user_id)
        if profile is None:
            return None
        profile.ai_generations_used = 0
        return await self.update(profile)

    async def apply_subscription(
        self,
        profile: Profile,
        *,
        role: str,
        limit: int,
        subscription_id: Optional[str],
        current_period_end: Optional[datetime],
        reset_usage: bool = False,
    ) -> Profile:
        """Write the tier and Stripe subscription state onto a profile."""
        profile.role = role
        profile.ai_generations_limit = limit
        profile.stripe_subscription_id = subscription_id
        profile.current_period_end = current_period_end
        if reset_usage:
            profile.ai_generations_used = 0
        return await self.update(profile)

    async def list_all(self) -> List[Profile]:
        """All profiles, newest first (admin view)."""
        return await self.list()
