"""Resend email sender.

Renders a template for an ``EmailRequest`` and posts it to the Resend API.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, Field, model_validator

from jalanea_forge.errors import EmailDeliveryError

from . import templates
from .templates import EmailContent, EmailType


class EmailRequest(BaseModel):
    """One transactional email. ``name`` defaults to the local part of ``to``."""

    type: EmailType
    to: str
    name: str = ""
    plan: str = "Starter"
    generations: int = 100
    used: int = 0
    limit: int = 25
    percentage: int = 0

    @model_validator(mode="after")
    def _default_name(self) -> "EmailRequest":
        if not self.name:
            self.name = self.to.split("@")[0]
        return self


def render(request: EmailRequest, app_url: str) -> EmailContent:
    if request.type is EmailType.welcome:
        return templates.welcome(request.name, app_url)
    if request.type is EmailType.subscription_confirmed:
        return templates.subscription_confirmed(request.name, request.plan, request.generations, app_url)
    if request.type is EmailType.subscription_cancelled:
        return templates.subscription_cancelled(request.name, app_url)
    return templates.usage_alert(request.name, request.used, request.limit, request.percentage, app_url)


class EmailSender:
    """Sends rendered templates through Resend with ``httpx.AsyncClient``."""

    def __init__(
        self,
        api_key: Optional[str],
        from_email: str,
        app_url: str,
        *,
        api_url: str = "https://api.resend.com/emails",
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._api_key = api_key
        self._from = from_email
        self._app_url = app_url
        self._api_url = api_url
        self._http = client or httpx.AsyncClient(timeout=10.0)
        self._logger = logging.getLogger(__name__)

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}", "Content-Type": "application/json"}

    async def send(self, request: EmailRequest) -> str:
        """Render and send ``request``.

        Returns:
            The Resend message id

        Raises:
            EmailDeliveryError: Resend is not configured or rejected the message
            httpx.TransportError: For transport-level HTTP issues
        """
        if not self.enabled:
            raise EmailDeliveryError("Email delivery is not configured: RESEND_API_KEY not set")
        content = render(request, self._app_url)
        payload: Dict[str, Any] = {
            "from": self._from,
            "to": [request.to],
            "subject": content.subject,
            "html": content.html,
        }
        r = await self._http.post(self._api_url, json=payload, headers=self._headers())
        try:
            data = r.json() if r.content else {}
        except ValueError:
            data = {}
        if r.is_error:
            self._logger.error(f"Resend error ({r.status_code}): {data}")
            raise EmailDeliveryError(data.get("message") or "Failed to send email")
        self._logger.info(f"Email sent: {request.type.value} to {request.to}")
        return str(data.get("id", ""))

    async def send_quietly(self, request: EmailRequest) -> Optional[str]:
        """Send a side-effect email; failures are logged, never raised.

        Used where the email accompanies another operation (a generation,
        a webhook) that must not fail because of it.
        """
        if not self.enabled:
            self._logger.debug(f"Skipping {request.type.value} email: Resend not configured")
            return None
        try:
            return await self.send(request)
        except (EmailDeliveryError, httpx.HTTPError) as e:
            self._logger.warning(f"Could not send {request.type.value} email to {request.to}: {e}")
            return None

    async def aclose(self) -> None:
        await self._http.aclose()
