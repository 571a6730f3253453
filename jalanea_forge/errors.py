"""Error types for the Jalanea Forge workflow.

Defines the exceptions raised by the workflow, billing and Lab layers. The
server maps every ``ForgeError`` subclass to an HTTP status through
``status_code`` and exposes ``code`` to clients so the UI can react to a
specific failure (for example prompting for an API key).
"""

from __future__ import annotations

from typing import Optional


class ForgeError(Exception):
    """Base error for all Jalanea Forge exceptions."""

    status_code: int = 400
    code: str = "FORGE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(ForgeError):
    """Raised when a requested record does not exist or is not visible to the caller."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind} {identifier} not found")
        self.kind = kind
        self.identifier = identifier


class PermissionDeniedError(ForgeError):
    """Raised when the caller's tier does not allow an action."""

    status_code = 403
    code = "PERMISSION_DENIED"

    def __init__(self, action: str, reason: str) -> None:
        super().__init__(reason)
        self.action = action


class GenerationLimitError(PermissionDeniedError):
    """Raised when the monthly AI generation quota is used up."""

    status_code = 402
    code = "GENERATION_LIMIT_REACHED"

    def __init__(self, used: int, limit: int, reason: str) -> None:
        super().__init__("generate_ai", reason)
        self.used = used
        self.limit = limit


class MissingApiKeyError(ForgeError):
    """Raised when a generation has neither a user key nor a usable server key."""

    status_code = 400
    code = "MISSING_API_KEY"

    def __init__(self, message: str = "An API key is required for AI generation. Add your Gemini API key in settings.") -> None:
        super().__init__(message)


class WizardTransitionError(ForgeError):
    """Raised when a wizard step is entered without its prerequisite content."""

    status_code = 409
    code = "STEP_PREREQUISITE_MISSING"

    def __init__(self, target: str, missing: str) -> None:
        super().__init__(f"Cannot move to the {target} step: {missing} is required first.")
        self.target = target
        self.missing = missing


class VersionNotFoundError(ForgeError):
    """Raised when reverting to a PRD version that is not in the history."""

    status_code = 404
    code = "VERSION_NOT_FOUND"

    def __init__(self, version_id: str) -> None:
        super().__init__(f"PRD version {version_id} not found")
        self.version_id = version_id


class GenerationError(ForgeError):
    """Raised when the LLM provider fails for a reason other than rate limiting."""

    status_code = 502
    code = "GENERATION_FAILED"

    def __init__(self, message: str, provider_status: Optional[int] = None) -> None:
        super().__init__(message)
        self.provider_status = provider_status


class RateLimitError(GenerationError):
    """Raised when the provider keeps returning 429 after every retry."""

    status_code = 429
    code = "RATE_LIMITED"

    def __init__(self, attempts: int) -> None:
        super().__init__("Rate limit exceeded. Please try again later.", provider_status=429)
        self.attempts = attempts


class WebhookVerificationError(ForgeError):
    """Raised when a Stripe webhook payload fails signature verification."""

    status_code = 400
    code = "WEBHOOK_SIGNATURE_INVALID"


class LabAuthError(ForgeError):
    """Raised when a Lab request carries no valid Lab session."""

    status_code = 401
    code = "LAB_UNAUTHORIZED"

    def __init__(self, message: str = "Lab authentication required") -> None:
        super().__init__(message)


class EmailDeliveryError(ForgeError):
    """Raised when the email provider rejects a message."""

    status_code = 502
    code = "EMAIL_DELIVERY_FAILED"
