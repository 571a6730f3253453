"""
Process-wide service clients.

Each getter builds its client from settings on first use and hands out the
same instance afterwards. Tests replace them through
``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from jalanea_forge.billing import StripeGateway
from jalanea_forge.core.database.repositories.projects import ProjectRepository
from jalanea_forge.core.database.session import async_session_maker
from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.forge.autosave import AutosaveDebouncer, merge_state, patch_from_payload
from jalanea_forge.forge.generation import LLMClient
from jalanea_forge.notifications import EmailSender
from jalanea_forge.server.core.config import settings
from jalanea_forge.server.core.security import LabTokens

logger = get_logger(__name__)

_llm_client: Optional[LLMClient] = None
_email_sender: Optional[EmailSender] = None
_stripe_gateway: Optional[StripeGateway] = None
_lab_tokens: Optional[LabTokens] = None
_autosave: Optional[AutosaveDebouncer] = None


def get_llm_client() -> LLMClient:
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient(
            default_model=settings.gemini.model,
            server_keys={"google": settings.gemini.api_key, "anthropic": settings.anthropic.api_key},
            max_retries=settings.generation_max_retries,
        )
    return _llm_client


def get_email_sender() -> EmailSender:
    global _email_sender
    if _email_sender is None:
        resend = settings.resend
        _email_sender = EmailSender(resend.api_key, resend.from_email, resend.app_url, api_url=resend.api_url)
    return _email_sender


def get_stripe_gateway() -> StripeGateway:
    global _stripe_gateway
    if _stripe_gateway is None:
        _stripe_gateway = StripeGateway(settings.stripe.secret_key, settings.stripe.webhook_secret)
    return _stripe_gateway


def get_lab_tokens() -> LabTokens:
    global _lab_tokens
    if _lab_tokens is None:
        lab = settings.lab
        _lab_tokens = LabTokens(lab.password, lab.token_secret, lab.token_ttl_days)
    return _lab_tokens


async def save_project_draft(project_id: str, payload: Dict[str, Any]) -> None:
    """Write a debounced draft patch in its own session."""
    async with async_session_maker() as session:
        projects = ProjectRepository(session)
        project = await projects.get_by_id(project_id)
        if project is None:
            logger.warning(f"Dropping draft for deleted project {project_id}")
            return
        merge_state(project, patch_from_payload(payload), history_limit=settings.prd_history_limit)
        await projects.update(project)


def get_autosave() -> AutosaveDebouncer:
    global _autosave
    if _autosave is None:
        _autosave = AutosaveDebouncer(settings.autosave_delay_seconds, save_project_draft)
    return _autosave


async def close_clients() -> None:
    """Flush pending drafts and close HTTP clients; called on shutdown."""
    global _autosave, _email_sender
    if _autosave is not None:
        await _autosave.close()
        _autosave = None
    if _email_sender is not None:
        await _email_sender.aclose()
        _email_sender = None
