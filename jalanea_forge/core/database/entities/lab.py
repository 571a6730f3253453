"""
Jalanea Lab entity models.

Tables backing the owner's personal dashboard: experiments, client previews,
dev deployments, quick-capture notes and the activity feed.
"""

from datetime import datetime
from typing import Dict, Optional

from sqlmodel import JSON, Field

from jalanea_forge.core.models.domain.lab import default_checklist

from ..base import Base, new_id, utc_now


class LabProject(Base, table=True):
    """An experiment tracked in the Lab.

    Table: lab_projects
    """

    __tablename__ = "lab_projects"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    name: str = Field(max_length=255)
    description: str = Field(default="")
    status: str = Field(default="idea", max_length=32, index=True)
    category: str = Field(default="Design/AI", max_length=64, index=True)
    url: str = Field(default="", max_length=2048)
    checklist: Dict[str, bool] = Field(default_factory=default_checklist, sa_type=JSON)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"LabProject(id={self.id}, name={self.name}, status={self.status})"


class LabClientPreview(Base, table=True):
    """A password-protected preview shared with a client.

    Table: lab_client_previews
    """

    __tablename__ = "lab_client_previews"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    client_name: str = Field(max_length=255)
    client_email: str = Field(max_length=320)
    project_name: str = Field(max_length=255)
    project_description: str = Field(default="")
    subdomain: str = Field(max_length=63, index=True)
    status: str = Field(default="draft", max_length=32, index=True)
    password: str = Field(default="", max_length=255)
    expires_at: datetime = Field()
    last_sent_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"LabClientPreview(id={self.id}, subdomain={self.subdomain}, status={self.status})"


class LabDevDeployment(Base, table=True):
    """A branch deployment tracked in the dev environment view.

    Table: lab_dev_deployments
    """

    __tablename__ = "lab_dev_deployments"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    project_name: str = Field(max_length=255)
    description: str = Field(default="")
    branch: str = Field(default="main", max_length=255)
    preview_url: str = Field(default="", max_length=2048)
    status: str = Field(default="development", max_length=32, index=True)
    repo_url: str = Field(default="", max_length=2048)
    last_deployed_at: datetime = Field(default_factory=utc_now)

    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"LabDevDeployment(id={self.id}, project={self.project_name}, status={self.status})"


class LabNote(Base, table=True):
    """A quick-capture note.

    Table: lab_notes
    """

    __tablename__ = "lab_notes"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    content: str = Field()
    created_at: datetime = Field(default_factory=utc_now, index=True)


class LabActivity(Base, table=True):
    """One line of the Lab activity feed.

    Table: lab_activity
    """

    __tablename__ = "lab_activity"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    type: str = Field(max_length=32, index=True)
    action: str = Field(max_length=255)
    target: str = Field(max_length=255)
    created_at: datetime = Field(default_factory=utc_now, index=True)
