"""
Profile Endpoints.

The caller's own profile: display settings, their own Gemini API key and the
permissions their tier grants.
"""

from fastapi import APIRouter, status

from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.core.models.io.profiles import ApiKeyUpdate, PermissionsRead, ProfileRead, ProfileUpdate
from jalanea_forge.errors import PermissionDeniedError
from jalanea_forge.forge.permissions import (
    permissions_for,
    should_show_upgrade,
    tier_display_name,
)
from jalanea_forge.server.services.deps import CurrentProfileDep, ReposDep
from jalanea_forge.server.services.views import profile_read

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/me",
    response_model=ProfileRead,
    summary="Get My Profile",
    description="Return the caller's profile, creating it on first sign-in.",
    response_description="The caller's profile.",
)
async def get_me(profile: CurrentProfileDep) -> ProfileRead:
    return profile_read(profile)


@router.patch(
    "/me",
    response_model=ProfileRead,
    summary="Update My Profile",
    description="Update the caller's display name or student flag.",
    response_description="The updated profile.",
)
async def update_me(payload: ProfileUpdate, profile: CurrentProfileDep, repos: ReposDep) -> ProfileRead:
    """
    Update profile settings.

    Only the fields present in the request body are changed.

    - **display_name**: Name used in emails and the UI.
    - **is_student**: Whether the user signed up as a student.
    """
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(profile, key, value)
    profile = await repos.profiles.update(profile)
    return profile_read(profile)


@router.put(
    "/me/api-key",
    response_model=ProfileRead,
    summary="Store My API Key",
    description="Store the caller's own Gemini API key. The key is never returned by the API.",
    response_description="The updated profile (with has_api_key set).",
    responses={403: {"description": "The caller's tier cannot use its own key"}},
)
async def put_api_key(payload: ApiKeyUpdate, profile: CurrentProfileDep, repos: ReposDep) -> ProfileRead:
    if not permissions_for(profile.role).can_use_own_api_key:
        raise PermissionDeniedError("use_own_api_key", "Your plan cannot use its own API key.")
    profile.api_key_encrypted = payload.api_key.strip()
    profile = await repos.profiles.update(profile)
    logger.info(f"User {profile.id} stored an API key")
    return profile_read(profile)


@router.delete(
    "/me/api-key",
    response_model=ProfileRead,
    status_code=status.HTTP_200_OK,
    summary="Remove My API Key",
    description="Forget the caller's stored Gemini API key.",
    response_description="The updated profile.",
)
async def delete_api_key(profile: CurrentProfileDep, repos: ReposDep) -> ProfileRead:
    profile.api_key_encrypted = None
    profile = await repos.profiles.update(profile)
    return profile_read(profile)


@router.get(
    "/me/permissions",
    response_model=PermissionsRead,
    summary="Get My Permissions",
    description="The permission row of the caller's tier plus their generation quota.",
    response_description="Permissions and quota.",
)
async def get_permissions(profile: CurrentProfileDep) -> PermissionsRead:
    perms = permissions_for(profile.role)
    if perms.has_unlimited_generations:
        remaining = perms.as_dict()["generations_limit"]
    else:
        remaining = max(0, profile.ai_generations_limit - profile.ai_generations_used)
    return PermissionsRead(
        role=profile.role,
        tier_name=tier_display_name(profile.role),
        permissions=perms.as_dict(),
        generations_used=profile.ai_generations_used,
        generations_limit=profile.ai_generations_limit,
        generations_remaining=remaining,
        show_upgrade=should_show_upgrade(profile.role),
    )
