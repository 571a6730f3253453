"""
API Dependencies.

``Annotated`` aliases for everything endpoints inject: the database session,
repository bundles, the authenticated profile, the Lab session and the
service clients.
"""

from typing import Annotated, Optional

import jwt
from fastapi import Cookie, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from jalanea_forge.billing import StripeGateway, StripeWebhookProcessor
from jalanea_forge.core.database.entities.profiles import Profile
from jalanea_forge.core.database.repositories.bundle import (
    LabRepoBundle,
    SqlRepoBundle,
    build_lab_repos_from_session,
    build_sql_repos_from_session,
)
from jalanea_forge.core.database.session import get_session
from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.forge.autosave import AutosaveDebouncer
from jalanea_forge.forge.generation import GenerationService, LLMClient
from jalanea_forge.forge.service import ForgeService
from jalanea_forge.lab import BrainstormService, LabService
from jalanea_forge.notifications import EmailRequest, EmailSender, EmailType
from jalanea_forge.server.core.config import settings
from jalanea_forge.server.core.constant import LAB_AUTH_COOKIE
from jalanea_forge.server.core.security import AuthenticatedUser, LabTokens, bearer_token, verify_supabase_token

from .clients import get_autosave, get_email_sender, get_lab_tokens, get_llm_client, get_stripe_gateway

logger = get_logger(__name__)

SessionDep = Annotated[AsyncSession, Depends(get_session)]
LLMClientDep = Annotated[LLMClient, Depends(get_llm_client)]
EmailSenderDep = Annotated[EmailSender, Depends(get_email_sender)]
StripeGatewayDep = Annotated[StripeGateway, Depends(get_stripe_gateway)]
LabTokensDep = Annotated[LabTokens, Depends(get_lab_tokens)]
AutosaveDep = Annotated[AutosaveDebouncer, Depends(get_autosave)]


def get_repos(session: SessionDep) -> SqlRepoBundle:
    return build_sql_repos_from_session(session=session)


def get_lab_repos(session: SessionDep) -> LabRepoBundle:
    return build_lab_repos_from_session(session=session)


ReposDep = Annotated[SqlRepoBundle, Depends(get_repos)]
LabReposDep = Annotated[LabRepoBundle, Depends(get_lab_repos)]


def get_current_user(authorization: Annotated[Optional[str], Header()] = None) -> AuthenticatedUser:
    """Identity of the caller from the ``Authorization: Bearer`` Supabase token."""
    token = bearer_token(authorization)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    supabase = settings.supabase
    try:
        return verify_supabase_token(token, supabase.jwt_secret, supabase.jwt_audience)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired") from None
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from None


CurrentUserDep = Annotated[AuthenticatedUser, Depends(get_current_user)]


async def get_current_profile(user: CurrentUserDep, repos: ReposDep, emails: EmailSenderDep) -> Profile:
    """The caller's profile; created (and welcomed) on first sight."""
    profile = await repos.profiles.get_by_id(user.id)
    if profile is not None:
        if user.email and not profile.email:
            profile.email = user.email
            profile = await repos.profiles.update(profile)
        return profile

    profile = await repos.profiles.get_or_create(user.id, user.email)
    logger.info(f"Created profile for new user {profile.id}")
    if profile.email:
        await emails.send_quietly(EmailRequest(type=EmailType.welcome, to=profile.email))
    return profile


CurrentProfileDep = Annotated[Profile, Depends(get_current_profile)]


def get_lab_session(
    tokens: LabTokensDep,
    authorization: Annotated[Optional[str], Header()] = None,
    lab_cookie: Annotated[Optional[str], Cookie(alias=LAB_AUTH_COOKIE)] = None,
) -> dict:
    """Claims of the Lab session, from the bearer header or the Lab cookie."""
    return tokens.verify(bearer_token(authorization) or lab_cookie)


LabAuthDep = Annotated[dict, Depends(get_lab_session)]


def get_generation_service(client: LLMClientDep) -> GenerationService:
    return GenerationService(client)


def get_forge_service(
    repos: ReposDep,
    generation: Annotated[GenerationService, Depends(get_generation_service)],
    emails: EmailSenderDep,
) -> ForgeService:
    return ForgeService(repos, generation, emails, history_limit=settings.prd_history_limit)


ForgeServiceDep = Annotated[ForgeService, Depends(get_forge_service)]


def get_lab_service(repos: LabReposDep) -> LabService:
    lab = settings.lab
    return LabService(repos, preview_domain=lab.preview_domain, preview_ttl_days=lab.preview_ttl_days)


LabServiceDep = Annotated[LabService, Depends(get_lab_service)]


def get_brainstorm_service(client: LLMClientDep) -> BrainstormService:
    return BrainstormService(client, settings.gemini.brainstorm_model, settings.anthropic.model)


BrainstormServiceDep = Annotated[BrainstormService, Depends(get_brainstorm_service)]


def get_webhook_processor(
    repos: ReposDep, gateway: StripeGatewayDep, emails: EmailSenderDep
) -> StripeWebhookProcessor:
    stripe_config = settings.stripe
    return StripeWebhookProcessor(
        repos.profiles,
        gateway,
        emails,
        starter_price_id=stripe_config.starter_price_id,
        pro_price_id=stripe_config.pro_price_id,
    )


WebhookProcessorDep = Annotated[StripeWebhookProcessor, Depends(get_webhook_processor)]
