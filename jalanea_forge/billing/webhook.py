"""
Stripe webhook processing.

Applies subscription lifecycle events to profiles: upgrades on checkout,
plan changes, downgrades on cancellation and the monthly usage reset on
renewal.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from jalanea_forge.core.database.entities.profiles import Profile
from jalanea_forge.core.database.repositories.profiles import ProfileRepository
from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.core.models.domain import UserRole
from jalanea_forge.notifications import EmailRequest, EmailSender, EmailType

from .stripe_gateway import USER_METADATA_KEY, StripeGateway, subscription_info
from .tiers import FREE_GENERATIONS_LIMIT, TierConfig, tier_for_price_id

logger = get_logger(__name__)


class StripeWebhookProcessor:
    def __init__(
        self,
        profiles: ProfileRepository,
        gateway: StripeGateway,
        emails: EmailSender,
        starter_price_id: Optional[str] = None,
        pro_price_id: Optional[str] = None,
    ) -> None:
        self.profiles = profiles
        self.gateway = gateway
        self.emails = emails
        self.starter_price_id = starter_price_id
        self.pro_price_id = pro_price_id

    def _tier(self, price_id: Optional[str]) -> TierConfig:
        return tier_for_price_id(price_id, self.starter_price_id, self.pro_price_id)

    async def handle(self, event: Mapping[str, Any]) -> Dict[str, bool]:
        """Dispatch one verified event. Unknown types are acknowledged and logged."""
        event_type = event.get("type", "")
        obj: Mapping[str, Any] = (event.get("data") or {}).get("object") or {}
        logger.info(f"Processing webhook event: {event_type}")

        if event_type == "checkout.session.completed":
            await self._checkout_completed(obj)
        elif event_type == "customer.subscription.updated":
            await self._subscription_updated(obj)
        elif event_type == "customer.subscription.deleted":
            await self._subscription_deleted(obj)
        elif event_type == "invoice.payment_succeeded":
            await self._payment_succeeded(obj)
        elif event_type == "invoice.payment_failed":
            logger.warning(f"Payment failed for customer {obj.get('customer')}")
        else:
            logger.info(f"Unhandled event type: {event_type}")
        return {"received": True}

    async def _checkout_completed(self, session: Mapping[str, Any]) -> None:
        subscription_id = session.get("subscription")
        if not subscription_id:
            logger.warning(f"Checkout session {session.get('id')} has no subscription")
            return
        subscription = await self.gateway.retrieve_subscription(subscription_id)
        user_id = subscription.metadata.get(USER_METADATA_KEY) or session.get("client_reference_id")
        if not user_id:
            logger.warning(f"Subscription {subscription_id} carries no user id")
            return
        profile = await self.profiles.get_by_id(user_id)
        if profile is None:
            logger.warning(f"Checkout completed for unknown user {user_id}")
            return

        tier = self._tier(subscription.price_id)
        if session.get("customer") and not profile.stripe_customer_id:
            profile.stripe_customer_id = session["customer"]
        profile = await self.profiles.apply_subscription(
            profile,
            role=tier.role.value,
            limit=tier.generations_limit,
            subscription_id=subscription.id,
            current_period_end=subscription.current_period_end,
            reset_usage=True,
        )
        logger.info(f"User {profile.id} upgraded to {tier.role.value}")
        if profile.email:
            await self.emails.send_quietly(
                EmailRequest(
                    type=EmailType.subscription_confirmed,
                    to=profile.email,
                    name=profile.display_name or "",
                    plan=tier.name,
                    generations=tier.generations_limit,
                )
            )

    async def _profile_for_customer(self, customer_id: Optional[str]) -> Optional[Profile]:
        if not customer_id:
            return None
        profile = await self.profiles.get_by_stripe_customer(customer_id)
        if profile is None:
            logger.warning(f"No profile for Stripe customer {customer_id}")
        return profile

    async def _subscription_updated(self, data: Mapping[str, Any]) -> None:
        subscription = subscription_info(data)
        profile = await self._profile_for_customer(subscription.customer_id)
        if profile is None:
            return
        tier = self._tier(subscription.price_id)
        await self.profiles.apply_subscription(
            profile,
            role=tier.role.value,
            limit=tier.generations_limit,
            subscription_id=subscription.id,
            current_period_end=subscription.current_period_end,
        )
        logger.info(f"Subscription updated for user {profile.id}")

    async def _subscription_deleted(self, data: Mapping[str, Any]) -> None:
        profile = await self._profile_for_customer(data.get("customer"))
        if profile is None:
            return
        profile = await self.profiles.apply_subscription(
            profile,
            role=UserRole.free.value,
            limit=FREE_GENERATIONS_LIMIT,
            subscription_id=None,
            current_period_end=None,
        )
        logger.info(f"User {profile.id} downgraded to free tier")
        if profile.email:
            await self.emails.send_quietly(
                EmailRequest(
                    type=EmailType.subscription_cancelled,
                    to=profile.email,
                    name=profile.display_name or "",
                )
            )

    async def _payment_succeeded(self, invoice: Mapping[str, Any]) -> None:
        # First payments are covered by checkout.session.completed
        if invoice.get("billing_reason") != "subscription_cycle":
            return
        profile = await self._profile_for_customer(invoice.get("customer"))
        if profile is None:
            return
        await self.profiles.reset_generations(profile.id)
        logger.info(f"Monthly generations reset for user {profile.id}")
