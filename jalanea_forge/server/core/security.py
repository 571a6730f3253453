"""
Token verification.

Forge requests carry a Supabase access token; Lab requests carry a Lab
session token issued by ``POST /lab/auth``. Both are HS256 JWTs checked with
PyJWT.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from jalanea_forge.errors import LabAuthError

JWT_ALGORITHM = "HS256"
LAB_TOKEN_SUBJECT = "jalanea-lab"


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity taken from a verified Supabase access token."""

    id: str
    email: Optional[str] = None


def bearer_token(header_value: Optional[str]) -> Optional[str]:
    if not header_value:
        return None
    parts = header_value.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def verify_supabase_token(token: str, secret: str, audience: str = "authenticated") -> AuthenticatedUser:
    """Decode a Supabase access token.

    Raises:
        jwt.InvalidTokenError: Bad signature, wrong audience, expired or no ``sub``
    """
    payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM], audience=audience)
    subject = payload.get("sub")
    if not subject:
        raise jwt.InvalidTokenError("Token has no subject")
    return AuthenticatedUser(id=str(subject), email=payload.get("email"))


class LabTokens:
    """Password check and session tokens for the Lab dashboard."""

    def __init__(self, password: Optional[str], secret: str, ttl_days: int = 30) -> None:
        self._password = password
        self._secret = secret
        self.ttl = timedelta(days=ttl_days)

    def check_password(self, password: str) -> bool:
        if not self._password:
            return False
        return hmac.compare_digest(password.encode("utf-8"), self._password.encode("utf-8"))

    def issue(self, password: str, now: Optional[datetime] = None) -> str:
        """Trade the Lab password for a session token.

        Raises:
            LabAuthError: Wrong password, or no password configured
        """
        if not self.check_password(password):
            raise LabAuthError("Invalid password")
        issued = now or datetime.now(timezone.utc)
        payload: Dict[str, Any] = {"sub": LAB_TOKEN_SUBJECT, "iat": issued, "exp": issued + self.ttl}
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: Optional[str]) -> Dict[str, Any]:
        """
        Raises:
            LabAuthError: Missing, expired or forged token
        """
        if not token:
            raise LabAuthError("Lab authentication required")
        try:
            payload = jwt.decode(token, self._secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise LabAuthError("Lab session expired") from None
        except jwt.InvalidTokenError:
            raise LabAuthError("Invalid Lab session") from None
        if payload.get("sub") != LAB_TOKEN_SUBJECT:
            raise LabAuthError("Invalid Lab session")
        return payload
