"""
Usage log entity model.

Append-only record of every AI generation, used for per-user usage stats and
the admin dashboard.
"""

from datetime import datetime

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class UsageLog(Base, table=True):
    """Entity for one AI generation.

    Table: usage_logs
    """

    __tablename__ = "usage_logs"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(max_length=64, index=True)
    action_type: str = Field(max_length=64, index=True)
    tokens_used: int = Field(default=0)
    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"UsageLog(id={self.id}, user_id={self.user_id}, action_type={self.action_type})"
