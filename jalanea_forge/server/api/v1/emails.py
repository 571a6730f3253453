"""
Email Endpoint.

Sends one of the transactional emails through Resend.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, HTTPException, status
from pydantic import ValidationError

from jalanea_forge.core.models.io.billing import EmailSendResponse
from jalanea_forge.notifications import EmailRequest
from jalanea_forge.server.services.deps import CurrentProfileDep, EmailSenderDep

router = APIRouter()


@router.post(
    "",
    response_model=EmailSendResponse,
    summary="Send Email",
    description="Send a transactional email (welcome, subscriptionConfirmed, subscriptionCancelled, usageAlert).",
    response_description="The Resend message id.",
    responses={400: {"description": "Missing fields or invalid email type"}, 502: {"description": "Resend failure"}},
)
async def send_email(
    profile: CurrentProfileDep,
    emails: EmailSenderDep,
    payload: Dict[str, Any] = Body(...),
) -> EmailSendResponse:
    """
    Send an email.

    - **type**: Template to render.
    - **to**: Recipient address.
    - **name**: Greeting name (defaults to the part of `to` before the @).
    - **plan** / **generations**: For subscriptionConfirmed.
    - **used** / **limit** / **percentage**: For usageAlert.
    """
    if not payload.get("type") or not payload.get("to"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields: type, to")
    try:
        request = EmailRequest.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid email request: {e}") from e
    message_id = await emails.send(request)
    return EmailSendResponse(id=message_id)
