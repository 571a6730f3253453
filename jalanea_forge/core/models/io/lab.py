"""
Jalanea Lab I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from jalanea_forge.core.models.domain.lab import (
    ActivityType,
    ClientStatus,
    DevStatus,
    LabStatus,
    ProjectCategory,
)
from jalanea_forge.lab import BrainstormModel


class LabLogin(BaseModel):
    password: str


class LabSession(BaseModel):
    token: str
    expires_in: int = Field(description="Seconds until the session expires")


class LabProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    status: LabStatus = LabStatus.idea
    category: ProjectCategory = ProjectCategory.design_ai
    url: str = ""
    checklist: Optional[Dict[str, bool]] = None


class LabProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[LabStatus] = None
    category: Optional[ProjectCategory] = None
    url: Optional[str] = None
    checklist: Optional[Dict[str, bool]] = None


class LabProjectRead(BaseModel):
    id: str
    name: str
    description: str
    status: LabStatus
    category: ProjectCategory
    url: str
    checklist: Dict[str, bool]
    progress: float = Field(description="Launch checklist completion, 0-100")
    created_at: datetime
    updated_at: datetime


class ClientPreviewCreate(BaseModel):
    client_name: str = Field(min_length=1, max_length=255)
    client_email: str = Field(min_length=3, max_length=320)
    project_name: str = Field(min_length=1, max_length=255)
    project_description: str = ""
    subdomain: str = Field(min_length=1, max_length=63)
    status: ClientStatus = ClientStatus.draft
    password: str = ""
    expires_at: Optional[datetime] = None


class ClientPreviewUpdate(BaseModel):
    client_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    client_email: Optional[str] = Field(default=None, max_length=320)
    project_name: Optional[str] = None
    project_description: Optional[str] = None
    subdomain: Optional[str] = Field(default=None, min_length=1, max_length=63)
    status: Optional[ClientStatus] = None
    password: Optional[str] = None
    expires_at: Optional[datetime] = None


class ClientPreviewRead(BaseModel):
    id: str
    client_name: str
    client_email: str
    project_name: str
    project_description: str
    subdomain: str
    status: ClientStatus = Field(description="Stored status; reads as expired once the preview ran out")
    password: str
    preview_url: str
    expires_at: datetime
    days_remaining: int
    expired: bool
    last_sent_at: Optional[datetime] = None
    created_at: datetime


class ShareEmailRead(BaseModel):
    to: str
    subject: str
    body: str
    mailto: str


class ClientShareResponse(BaseModel):
    client: ClientPreviewRead
    email: ShareEmailRead


class DeploymentCreate(BaseModel):
    project_name: str = Field(min_length=1, max_length=255)
    description: str = ""
    branch: str = "main"
    preview_url: str = ""
    status: DevStatus = DevStatus.development
    repo_url: str = ""
    last_deployed_at: Optional[datetime] = None


class DeploymentUpdate(BaseModel):
    project_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    branch: Optional[str] = None
    preview_url: Optional[str] = None
    status: Optional[DevStatus] = None
    repo_url: Optional[str] = None
    last_deployed_at: Optional[datetime] = None


class DeploymentRead(BaseModel):
    id: str
    project_name: str
    description: str
    branch: str
    preview_url: str
    status: DevStatus
    repo_url: str
    last_deployed_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class NoteCreate(BaseModel):
    content: str = Field(min_length=1)


class NoteRead(BaseModel):
    id: str
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


class ActivityRead(BaseModel):
    id: str
    type: ActivityType
    action: str
    target: str
    created_at: datetime

    class Config:
        from_attributes = True


class LabStatsRead(BaseModel):
    total_projects: int
    active_experiments: int
    live_products: int
    ideas_in_queue: int
    client_projects: int
    live_deployments: int


class LabOverview(BaseModel):
    stats: LabStatsRead
    activity: List[ActivityRead]


class ChatMessage(BaseModel):
    role: str = Field(pattern="^(user|assistant)$")
    content: str


class BrainstormRequest(BaseModel):
    messages: List[ChatMessage] = Field(min_length=1)
    model: BrainstormModel = BrainstormModel.gemini


class BrainstormResponse(BaseModel):
    content: str
    model: BrainstormModel
