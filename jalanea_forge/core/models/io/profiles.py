"""
Profile, usage and admin I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from jalanea_forge.core.models.domain import UserRole


class ProfileRead(BaseModel):
    """Schema for reading a profile. The stored API key itself is never returned."""

    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    role: str = Field(description="Subscription tier (owner, beta_tester, free, starter, pro)")
    ai_generations_used: int = Field(description="AI generations used this billing month")
    ai_generations_limit: int = Field(description="AI generations allowed per month")
    has_api_key: bool = Field(description="Whether the user stored their own Gemini API key")
    is_student: bool = False
    tier: str = Field(description="Pricing tier key (free, starter, pro)")
    subscription_active: bool = False
    current_period_end: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, profile: Any, tier: str, subscription_active: bool) -> "ProfileRead":
        return cls(
            id=profile.id,
            email=profile.email,
            display_name=profile.display_name,
            role=profile.role,
            ai_generations_used=profile.ai_generations_used,
            ai_generations_limit=profile.ai_generations_limit,
            has_api_key=bool(profile.api_key_encrypted),
            is_student=profile.is_student,
            tier=tier,
            subscription_active=subscription_active,
            current_period_end=profile.current_period_end,
            created_at=profile.created_at,
        )


class ProfileUpdate(BaseModel):
    """Schema for updating the caller's own profile."""

    display_name: Optional[str] = Field(default=None, max_length=255)
    is_student: Optional[bool] = None


class ApiKeyUpdate(BaseModel):
    api_key: str = Field(min_length=1, description="The user's own Gemini API key")


class PermissionsRead(BaseModel):
    role: str
    tier_name: str
    permissions: Dict[str, Any]
    generations_used: int
    generations_limit: int
    generations_remaining: int
    show_upgrade: bool


class UsageStats(BaseModel):
    total: int = Field(description="Generations within the period")
    by_action: Dict[str, int] = Field(default_factory=dict, description="Generations per action type")
    period_from: Optional[datetime] = None
    period_to: Optional[datetime] = None


class UsageLogRead(BaseModel):
    id: str
    user_id: str
    action_type: str
    tokens_used: int
    created_at: datetime

    class Config:
        from_attributes = True


class UserUsage(BaseModel):
    user_id: str
    total: int
    tokens_used: int


class RoleUpdate(BaseModel):
    role: UserRole


class AdminUserRead(ProfileRead):
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
