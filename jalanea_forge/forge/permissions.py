"""Tier-based permission gating.

A static table keyed by subscription tier decides what a profile may do. The
table is the single source of truth for the API (``/profiles/me/permissions``),
the generation gate and the admin routes.

``UNLIMITED`` stands in for "no limit" wherever a number is needed; the
browser shows anything at or above it as unlimited.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional, Protocol, Union

from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.core.models.domain import UserRole
from jalanea_forge.errors import GenerationLimitError, PermissionDeniedError

logger = get_logger(__name__)

UNLIMITED = 999999


@dataclass(frozen=True)
class RolePermissions:
    can_access_admin: bool
    can_manage_users: bool
    can_view_all_projects: bool
    can_view_all_usage_logs: bool
    can_use_own_api_key: bool
    can_use_proxy_api: bool
    has_unlimited_generations: bool
    can_export_prd: bool
    can_access_version_history: bool
    max_projects: float
    generations_limit: float

    def as_dict(self) -> Dict[str, Any]:
        """JSON-friendly view; infinite limits become ``UNLIMITED``."""
        data = asdict(self)
        for key in ("max_projects", "generations_limit"):
            if math.isinf(data[key]):
                data[key] = UNLIMITED
            else:
                data[key] = int(data[key])
        return data


ROLE_PERMISSIONS: Dict[UserRole, RolePermissions] = {
    UserRole.owner: RolePermissions(
        can_access_admin=True,
        can_manage_users=True,
        can_view_all_projects=True,
        can_view_all_usage_logs=True,
        can_use_own_api_key=True,
        can_use_proxy_api=True,
        has_unlimited_generations=True,
        can_export_prd=True,
        can_access_version_history=True,
        max_projects=math.inf,
        generations_limit=math.inf,
    ),
    # Beta testers bring their own key
    UserRole.beta_tester: RolePermissions(
        can_access_admin=False,
        can_manage_users=False,
        can_view_all_projects=False,
        can_view_all_usage_logs=False,
        can_use_own_api_key=True,
        can_use_proxy_api=False,
        has_unlimited_generations=True,
        can_export_prd=True,
        can_access_version_history=True,
        max_projects=math.inf,
        generations_limit=math.inf,
    ),
    UserRole.pro: RolePermissions(
        can_access_admin=False,
        can_manage_users=False,
        can_view_all_projects=False,
        can_view_all_usage_logs=False,
        can_use_own_api_key=True,
        can_use_proxy_api=True,
        has_unlimited_generations=False,
        can_export_prd=True,
        can_access_version_history=True,
        max_projects=math.inf,
        generations_limit=500,
    ),
    UserRole.starter: RolePermissions(
        can_access_admin=False,
        can_manage_users=False,
        can_view_all_projects=False,
        can_view_all_usage_logs=False,
        can_use_own_api_key=True,
        can_use_proxy_api=True,
        has_unlimited_generations=False,
        can_export_prd=True,
        can_access_version_history=True,
        max_projects=10,
        generations_limit=100,
    ),
    UserRole.free: RolePermissions(
        can_access_admin=False,
        can_manage_users=False,
        can_view_all_projects=False,
        can_view_all_usage_logs=False,
        can_use_own_api_key=True,
        can_use_proxy_api=True,
        has_unlimited_generations=False,
        can_export_prd=False,
        can_access_version_history=False,
        max_projects=3,
        generations_limit=25,
    ),
}

TIER_DISPLAY_NAMES: Dict[UserRole, str] = {
    UserRole.owner: "Owner",
    UserRole.beta_tester: "Beta Tester",
    UserRole.pro: "Pro",
    UserRole.starter: "Starter",
    UserRole.free: "Free",
}


class FeatureAction(str, Enum):
    """Feature actions that can be gated."""

    generate_ai = "generate_ai"
    export_prd = "export_prd"
    view_version_history = "view_version_history"
    create_project = "create_project"
    access_admin = "access_admin"
    manage_users = "manage_users"


class ProfileLike(Protocol):
    role: str
    ai_generations_used: int
    ai_generations_limit: int


@dataclass(frozen=True)
class ActionCheck:
    allowed: bool
    reason: Optional[str] = None


_ALLOWED = ActionCheck(allowed=True)


def permissions_for(role: Union[UserRole, str, None]) -> RolePermissions:
    """Permission row of ``role``; unknown or missing roles get the free tier."""
    return ROLE_PERMISSIONS[UserRole.parse(role)]


def has_permission(role: Union[UserRole, str, None], permission: str) -> bool:
    value = getattr(permissions_for(role), permission, False)
    return value is True


def can_perform_action(
    profile: Optional[ProfileLike],
    action: Union[FeatureAction, str],
    project_count: Optional[int] = None,
) -> ActionCheck:
    """Decide whether ``profile`` may perform ``action``.

    Args:
        profile: The caller's profile, or None for an anonymous caller
        action: A ``FeatureAction`` value
        project_count: Projects the caller already owns; only consulted for
            ``create_project``

    Returns:
        An ``ActionCheck`` carrying the user-facing reason when denied
    """
    perms = permissions_for(profile.role if profile is not None else None)
    try:
        action = FeatureAction(action)
    except ValueError:
        return ActionCheck(allowed=False, reason="Unknown action.")

    if action is FeatureAction.generate_ai:
        if perms.has_unlimited_generations:
            return _ALLOWED
        if profile is None:
            return ActionCheck(allowed=False, reason="Please sign in to use AI features.")
        if profile.ai_generations_used >= profile.ai_generations_limit:
            return ActionCheck(
                allowed=False,
                reason=f"You've used all {profile.ai_generations_limit} generations this month. Upgrade for more!",
            )
        return _ALLOWED

    if action is FeatureAction.export_prd:
        if not perms.can_export_prd:
            return ActionCheck(allowed=False, reason="Upgrade to Starter or Pro to export PRDs.")
        return _ALLOWED

    if action is FeatureAction.view_version_history:
        if not perms.can_access_version_history:
            return ActionCheck(allowed=False, reason="Upgrade to Starter or Pro to access version history.")
        return _ALLOWED

    if action is FeatureAction.create_project:
        if profile is None:
            return ActionCheck(allowed=False, reason="Please sign in to create projects.")
        if project_count is not None and project_count >= perms.max_projects:
            return ActionCheck(
                allowed=False,
                reason=f"You've reached the limit of {int(perms.max_projects)} projects. Upgrade for more!",
            )
        return _ALLOWED

    if action is FeatureAction.access_admin:
        if not perms.can_access_admin:
            return ActionCheck(allowed=False, reason="Admin access requires owner role.")
        return _ALLOWED

    if not perms.can_manage_users:
        return ActionCheck(allowed=False, reason="User management requires owner role.")
    return _ALLOWED


def require(
    profile: Optional[ProfileLike],
    action: Union[FeatureAction, str],
    project_count: Optional[int] = None,
) -> None:
    """Raise when ``can_perform_action`` denies the action.

    Raises:
        GenerationLimitError: The monthly generation quota is used up
        PermissionDeniedError: Any other denial
    """
    check = can_perform_action(profile, action, project_count=project_count)
    if check.allowed:
        return
    action_name = action.value if isinstance(action, FeatureAction) else str(action)
    logger.info(f"Action denied: action={action_name}, role={getattr(profile, 'role', None)}, reason={check.reason}")
    if action_name == FeatureAction.generate_ai.value and profile is not None:
        raise GenerationLimitError(profile.ai_generations_used, profile.ai_generations_limit, check.reason or "")
    raise PermissionDeniedError(action_name, check.reason or "Not allowed.")


def tier_limits(role: Union[UserRole, str, None]) -> Dict[str, int]:
    """Generation and project limits of a tier, with ``UNLIMITED`` for no limit."""
    data = permissions_for(role).as_dict()
    return {"generations": data["generations_limit"], "projects": data["max_projects"]}


def tier_display_name(role: Union[UserRole, str, None]) -> str:
    return TIER_DISPLAY_NAMES[UserRole.parse(role)]


def is_paid(role: Union[UserRole, str, None]) -> bool:
    return UserRole.parse(role) in (UserRole.pro, UserRole.starter)


def should_show_upgrade(role: Union[UserRole, str, None]) -> bool:
    """Upgrade prompts are hidden from paid users, owners and beta testers."""
    parsed = UserRole.parse(role)
    return not is_paid(parsed) and parsed not in (UserRole.owner, UserRole.beta_tester)


def default_generation_limit(role: Union[UserRole, str, None]) -> int:
    """Quota written onto a profile when its role changes."""
    return tier_limits(role)["generations"]
