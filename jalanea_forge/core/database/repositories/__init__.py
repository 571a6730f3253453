"""
Data access layer.

Repositories wrap one async session each and commit on every write.
"""

from .base import AsyncBaseRepository, QueryBuilder, SQLModelRepository
from .bundle import LabRepoBundle, SqlRepoBundle, build_lab_repos_from_session, build_sql_repos_from_session
from .lab import LabActivityRepository, LabRepository
from .profiles import ProfileRepository
from .projects import ProjectRepository
from .usage_logs import UsageLogRepository

__all__ = [
    "AsyncBaseRepository",
    "LabActivityRepository",
    "LabRepoBundle",
    "LabRepository",
    "ProfileRepository",
    "ProjectRepository",
    "QueryBuilder",
    "SQLModelRepository",
    "SqlRepoBundle",
    "UsageLogRepository",
    "build_lab_repos_from_session",
    "build_sql_repos_from_session",
]
