"""
Billing Endpoints.

Stripe checkout and customer portal sessions, the public price list and the
Stripe webhook receiver.
"""

from typing import List, Optional

from fastapi import APIRouter, Header, HTTPException, Request, status

from jalanea_forge.billing import format_price, pricing_tiers
from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.core.models.io.billing import CheckoutRequest, PortalRequest, PricingTierRead, SessionUrl
from jalanea_forge.server.core.config import settings
from jalanea_forge.server.services.deps import (
    CurrentProfileDep,
    ReposDep,
    StripeGatewayDep,
    WebhookProcessorDep,
)

logger = get_logger(__name__)

router = APIRouter()


def _require_stripe(gateway) -> None:
    if not gateway.enabled:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Billing is not configured")


@router.get(
    "/tiers",
    response_model=List[PricingTierRead],
    summary="List Pricing Tiers",
    description="The public price list with each plan's Stripe price id.",
    response_description="Pricing tiers, cheapest first.",
)
async def list_tiers() -> List[PricingTierRead]:
    stripe_config = settings.stripe
    return [
        PricingTierRead(
            key=tier.key,
            name=tier.name,
            price=tier.price,
            display_price=format_price(tier.price),
            generations=tier.generations,
            projects=tier.projects,
            features=list(tier.features),
            price_id=tier.price_id,
        )
        for tier in pricing_tiers(stripe_config.starter_price_id, stripe_config.pro_price_id)
    ]


@router.post(
    "/checkout",
    response_model=SessionUrl,
    summary="Create Checkout Session",
    description="Start a Stripe subscription checkout for the caller.",
    response_description="URL of the Stripe checkout page.",
    responses={503: {"description": "Stripe is not configured"}},
)
async def create_checkout(
    payload: CheckoutRequest, profile: CurrentProfileDep, repos: ReposDep, gateway: StripeGatewayDep
) -> SessionUrl:
    """
    Create a checkout session.

    The caller's Stripe customer is created on first checkout and remembered
    on their profile.

    - **price_id**: Stripe price of the plan.
    - **success_url** / **cancel_url**: Where Stripe sends the user back to.
    """
    _require_stripe(gateway)
    session = await gateway.create_checkout_session(profile, payload.price_id, payload.success_url, payload.cancel_url)
    if session.created_customer:
        profile.stripe_customer_id = session.customer_id
        await repos.profiles.update(profile)
    return SessionUrl(url=session.url)


@router.post(
    "/portal",
    response_model=SessionUrl,
    summary="Create Portal Session",
    description="Open the Stripe customer portal to manage the caller's subscription.",
    response_description="URL of the customer portal.",
    responses={
        400: {"description": "The caller has no Stripe customer"},
        503: {"description": "Stripe is not configured"},
    },
)
async def create_portal(payload: PortalRequest, profile: CurrentProfileDep, gateway: StripeGatewayDep) -> SessionUrl:
    _require_stripe(gateway)
    if not profile.stripe_customer_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No subscription to manage")
    return SessionUrl(url=await gateway.create_portal_session(profile.stripe_customer_id, payload.return_url))


@router.post(
    "/webhook",
    summary="Stripe Webhook",
    description="Receive Stripe subscription events. Requires a valid `stripe-signature` header.",
    response_description="`{received: true}`",
    responses={400: {"description": "Missing or invalid signature"}},
)
async def stripe_webhook(
    request: Request,
    gateway: StripeGatewayDep,
    processor: WebhookProcessorDep,
    stripe_signature: Optional[str] = Header(default=None, alias="stripe-signature"),
):
    payload = await request.body()
    event = gateway.construct_event(payload, stripe_signature)
    return await processor.handle(event)
