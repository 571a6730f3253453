"""
Profile entity model.

A profile mirrors one Supabase auth user and carries the subscription tier,
the monthly generation counter and the Stripe linkage.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class Profile(Base, table=True):
    """Persistent user profile.

    ``ai_generations_used`` only grows, except for explicit resets on a new
    subscription, a billing renewal or an admin reset.

    Table: profiles
    """

    __tablename__ = "profiles"
    __table_args__ = ({"extend_existing": True},)

    # Primary identifier (Supabase auth uid)
    id: str = Field(primary_key=True, max_length=64)
    email: Optional[str] = Field(default=None, max_length=320, index=True)
    display_name: Optional[str] = Field(default=None, max_length=255)

    # Tier and quota
    role: str = Field(default="free", max_length=32, index=True)
    ai_generations_used: int = Field(default=0)
    ai_generations_limit: int = Field(default=25)

    # User-supplied Gemini key; never returned by the API
    api_key_encrypted: Optional[str] = Field(default=None)

    # Billing
    stripe_customer_id: Optional[str] = Field(default=None, max_length=255, index=True)
    stripe_subscription_id: Optional[str] = Field(default=None, max_length=255)
    current_period_end: Optional[datetime] = Field(default=None)

    is_student: bool = Field(default=False)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Profile(id={self.id}, role={self.role}, used={self.ai_generations_used}/{self.ai_generations_limit})"
