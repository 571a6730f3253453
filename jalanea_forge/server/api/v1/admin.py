"""
Admin Endpoints.

Owner-only views over every user: roles, projects, usage logs and monthly
quota resets.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from jalanea_forge.core.database.entities.profiles import Profile
from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.core.models.io.profiles import AdminUserRead, RoleUpdate, UsageLogRead, UserUsage
from jalanea_forge.core.models.io.projects import ProjectSummary
from jalanea_forge.forge.permissions import FeatureAction, default_generation_limit, require
from jalanea_forge.server.services.deps import CurrentProfileDep, ReposDep
from jalanea_forge.server.services.views import admin_user_read

logger = get_logger(__name__)

USAGE_LOG_PAGE = 100


async def require_owner(profile: CurrentProfileDep) -> Profile:
    require(profile, FeatureAction.access_admin)
    return profile


router = APIRouter(dependencies=[Depends(require_owner)])


async def _get_user(repos, user_id: str) -> Profile:
    user = await repos.profiles.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User {user_id} not found")
    return user


@router.get(
    "/users",
    response_model=List[AdminUserRead],
    summary="List Users",
    description="All profiles, newest first.",
    response_description="List of users.",
)
async def list_users(repos: ReposDep) -> List[AdminUserRead]:
    return [admin_user_read(p) for p in await repos.profiles.list_all()]


@router.put(
    "/users/{user_id}/role",
    response_model=AdminUserRead,
    summary="Change User Role",
    description="Set a user's tier; their monthly generation limit follows the tier.",
    response_description="The updated user.",
    responses={404: {"description": "User not found"}},
)
async def change_role(user_id: str, payload: RoleUpdate, repos: ReposDep, admin: CurrentProfileDep) -> AdminUserRead:
    """
    Change a user's role.

    - **role**: One of owner, beta_tester, free, starter, pro.
    """
    require(admin, FeatureAction.manage_users)
    user = await _get_user(repos, user_id)
    user.role = payload.role.value
    user.ai_generations_limit = default_generation_limit(payload.role)
    user = await repos.profiles.update(user)
    logger.info(f"Admin {admin.id} set role of {user_id} to {payload.role.value}")
    return admin_user_read(user)


@router.post(
    "/users/{user_id}/reset-generations",
    response_model=AdminUserRead,
    summary="Reset Monthly Generations",
    description="Set a user's used generation count back to zero.",
    response_description="The updated user.",
    responses={404: {"description": "User not found"}},
)
async def reset_generations(user_id: str, repos: ReposDep, admin: CurrentProfileDep) -> AdminUserRead:
    require(admin, FeatureAction.manage_users)
    await _get_user(repos, user_id)
    user = await repos.profiles.reset_generations(user_id)
    logger.info(f"Admin {admin.id} reset generations of {user_id}")
    return admin_user_read(user)


@router.get(
    "/usage-logs",
    response_model=List[UsageLogRead],
    summary="List Usage Logs",
    description=f"The latest {USAGE_LOG_PAGE} usage log entries across all users.",
    response_description="Usage log entries, newest first.",
)
async def list_usage_logs(repos: ReposDep) -> List[UsageLogRead]:
    return [UsageLogRead.model_validate(log) for log in await repos.usage_logs.list(limit=USAGE_LOG_PAGE)]


@router.get(
    "/usage-by-user",
    response_model=List[UserUsage],
    summary="Usage By User",
    description="Generation counts and token totals per user, heaviest first.",
    response_description="Per-user usage.",
)
async def usage_by_user(repos: ReposDep) -> List[UserUsage]:
    return [UserUsage(**row) for row in await repos.usage_logs.stats_by_user()]


@router.get(
    "/projects",
    response_model=List[ProjectSummary],
    summary="List All Projects",
    description="Every user's projects, most recently updated first.",
    response_description="Project summaries with their owners.",
)
async def list_all_projects(repos: ReposDep) -> List[ProjectSummary]:
    return [ProjectSummary.model_validate(p) for p in await repos.projects.list()]
