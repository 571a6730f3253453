"""Client preview links, expiry and the share email."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import quote

from jalanea_forge.core.database.base import utc_now
from jalanea_forge.core.database.entities.lab import LabClientPreview

DEFAULT_PREVIEW_DOMAIN = "jalnaea.dev"
DEFAULT_TTL_DAYS = 30

_SUBDOMAIN_INVALID = re.compile(r"[^a-z0-9-]")
_SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class ShareEmail:
    to: str
    subject: str
    body: str
    mailto: str


def normalize_subdomain(value: str) -> str:
    """Lower-case and drop everything but letters, digits and hyphens."""
    return _SUBDOMAIN_INVALID.sub("", value.lower())


def preview_url(subdomain: str, domain: str = DEFAULT_PREVIEW_DOMAIN) -> str:
    return f"https://{subdomain}.{domain}"


def default_expiry(now: Optional[datetime] = None, ttl_days: int = DEFAULT_TTL_DAYS) -> datetime:
    return (now or utc_now()) + timedelta(days=ttl_days)


def days_remaining(expires_at: datetime, now: Optional[datetime] = None) -> int:
    """Whole days until expiry, rounded up; negative once expired."""
    delta = (expires_at - (now or utc_now())).total_seconds()
    return math.ceil(delta / _SECONDS_PER_DAY)


def is_expired(expires_at: datetime, now: Optional[datetime] = None) -> bool:
    return days_remaining(expires_at, now) < 0


def format_date(value: datetime) -> str:
    """``Jan 5, 2026``"""
    return f"{value:%b} {value.day}, {value.year}"


def compose_share_email(preview: LabClientPreview, domain: str = DEFAULT_PREVIEW_DOMAIN) -> ShareEmail:
    """The email that hands a preview link (and its password) to the client."""
    link = preview_url(preview.subdomain, domain)
    password_line = f"\nPassword: {preview.password}" if preview.password else ""
    expiry_line = (
        f"\n\nThis preview will be available until {format_date(preview.expires_at)}." if preview.expires_at else ""
    )
    subject = f"Your Project Preview is Ready - {preview.project_name}"
    body = (
        f"Hi {preview.client_name},\n\n"
        f"Your preview for {preview.project_name} is ready to view!\n\n"
        f"Preview Link: {link}{password_line}{expiry_line}\n\n"
        "Let me know if you have any questions!\n\n"
        "Best,\nJalanea"
    )
    mailto = f"mailto:{preview.client_email}?subject={quote(subject, safe='')}&body={quote(body, safe='')}"
    return ShareEmail(to=preview.client_email, subject=subject, body=body, mailto=mailto)
