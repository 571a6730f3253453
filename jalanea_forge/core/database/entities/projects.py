"""
Project entity model.

One row per Forge project. Structured artifacts (research documents, PRD
history, roadmap and the prompt outputs) are stored as JSON columns in the
camelCase shape the browser client uses.
"""

from datetime import datetime
from typing import Any, Dict, List

from sqlmodel import JSON, Field

from ..base import Base, new_id, utc_now


class Project(Base, table=True):
    """Persistent Forge project.

    JSON columns are replaced wholesale on every write; mutate a copy and
    assign it back so the change is tracked.

    Table: projects
    """

    __tablename__ = "projects"
    __table_args__ = ({"extend_existing": True},)

    # Primary identifiers
    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(max_length=64, index=True)

    name: str = Field(default="Untitled Project", max_length=255)
    current_step: int = Field(default=1)

    # Stage content
    idea_input: str = Field(default="")
    vision_statement: str = Field(default="")
    research_data: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    prd_content: str = Field(default="")
    prd_history: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    realization_tasks: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    artifacts: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Project(id={self.id}, user_id={self.user_id}, step={self.current_step})"
