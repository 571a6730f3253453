"""
Database entity models.

This package contains all database entity models organized by business domain.

Modules:
- profiles: Supabase user profile, tier and generation quota
- projects: Forge projects and their generated artifacts
- usage_logs: Append-only AI generation log
- lab: Jalanea Lab dashboard tables
"""

from .lab import LabActivity, LabClientPreview, LabDevDeployment, LabNote, LabProject
from .profiles import Profile
from .projects import Project
from .usage_logs import UsageLog

__all__ = [
    "LabActivity",
    "LabClientPreview",
    "LabDevDeployment",
    "LabNote",
    "LabProject",
    "Profile",
    "Project",
    "UsageLog",
]
