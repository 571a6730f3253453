"""
Stripe gateway.

Thin async wrapper over ``stripe.StripeClient`` for the calls billing needs:
checkout and portal sessions, subscription lookup and webhook verification.
Stripe objects are converted to plain dicts at this boundary so the webhook
processor works on the same shape whether an event came from Stripe or a test.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

import stripe

from jalanea_forge.core.database.entities.profiles import Profile
from jalanea_forge.errors import WebhookVerificationError

# Stripe metadata key linking customers and subscriptions to a profile
USER_METADATA_KEY = "supabase_user_id"


@dataclass(frozen=True)
class CheckoutSession:
    url: str
    customer_id: str
    created_customer: bool = False


@dataclass(frozen=True)
class SubscriptionInfo:
    id: str
    customer_id: Optional[str]
    price_id: Optional[str]
    current_period_end: Optional[datetime]
    metadata: Dict[str, str] = field(default_factory=dict)


def _from_timestamp(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc).replace(tzinfo=None)


def subscription_info(data: Mapping[str, Any]) -> SubscriptionInfo:
    """Read the fields billing needs from a subscription payload.

    Newer Stripe API versions carry ``current_period_end`` on the subscription
    items rather than the subscription; the first item is used as a fallback.
    """
    items = ((data.get("items") or {}).get("data")) or []
    first = items[0] if items else {}
    price_id = (first.get("price") or {}).get("id")
    period_end = data.get("current_period_end") or first.get("current_period_end")
    return SubscriptionInfo(
        id=str(data.get("id") or ""),
        customer_id=data.get("customer"),
        price_id=price_id,
        current_period_end=_from_timestamp(period_end),
        metadata=dict(data.get("metadata") or {}),
    )


def _plain(obj: Any) -> Dict[str, Any]:
    if isinstance(obj, Mapping) and not isinstance(obj, stripe.StripeObject):
        return dict(obj)
    return obj.to_dict()


class StripeGateway:
    """Async access to the Stripe API with ``stripe.StripeClient``."""

    def __init__(
        self,
        secret_key: Optional[str],
        webhook_secret: Optional[str] = None,
        *,
        client: Optional[stripe.StripeClient] = None,
    ) -> None:
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret
        self._client = client
        self._logger = logging.getLogger(__name__)

    @property
    def enabled(self) -> bool:
        return bool(self._secret_key) or self._client is not None

    @property
    def client(self) -> stripe.StripeClient:
        if self._client is None:
            if not self._secret_key:
                raise RuntimeError("Stripe is not configured: STRIPE_SECRET_KEY not set")
            self._client = stripe.StripeClient(self._secret_key, http_client=stripe.HTTPXClient())
        return self._client

    async def ensure_customer(self, profile: Profile) -> tuple[str, bool]:
        """Stripe customer id of ``profile``, creating the customer if needed.

        Returns:
            ``(customer_id, created)``
        """
        if profile.stripe_customer_id:
            return profile.stripe_customer_id, False
        params: Dict[str, Any] = {"metadata": {USER_METADATA_KEY: profile.id}}
        if profile.email:
            params["email"] = profile.email
        customer = await self.client.v1.customers.create_async(params=params)
        self._logger.info(f"Created Stripe customer {customer.id} for user {profile.id}")
        return customer.id, True

    async def create_checkout_session(
        self,
        profile: Profile,
        price_id: str,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        """Start a subscription checkout for ``profile``.

        The subscription metadata carries the profile id so the webhook can
        find the profile on ``checkout.session.completed``.
        """
        customer_id, created = await self.ensure_customer(profile)
        session = await self.client.v1.checkout.sessions.create_async(
            params={
                "mode": "subscription",
                "customer": customer_id,
                "line_items": [{"price": price_id, "quantity": 1}],
                "success_url": success_url,
                "cancel_url": cancel_url,
                "client_reference_id": profile.id,
                "subscription_data": {"metadata": {USER_METADATA_KEY: profile.id}},
            }
        )
        self._logger.info(f"Checkout session {session.id} created for user {profile.id}")
        return CheckoutSession(url=session.url, customer_id=customer_id, created_customer=created)

    async def create_portal_session(self, customer_id: str, return_url: str) -> str:
        session = await self.client.v1.billing_portal.sessions.create_async(
            params={"customer": customer_id, "return_url": return_url}
        )
        return session.url

    async def retrieve_subscription(self, subscription_id: str) -> SubscriptionInfo:
        subscription = await self.client.v1.subscriptions.retrieve_async(subscription_id)
        return subscription_info(_plain(subscription))

    def construct_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """Verify a webhook delivery and return the event as a dict.

        Raises:
            WebhookVerificationError: Missing signature, unset secret or a bad signature
        """
        if not signature:
            raise WebhookVerificationError("No signature")
        if not self._webhook_secret:
            raise WebhookVerificationError("Webhook secret is not configured")
        try:
            stripe.WebhookSignature.verify_header(payload.decode("utf-8"), signature, self._webhook_secret)
        except stripe.SignatureVerificationError as e:
            self._logger.error(f"Webhook signature verification failed: {e}")
            raise WebhookVerificationError(f"Webhook Error: {e}") from e
        try:
            return json.loads(payload)
        except ValueError as e:
            raise WebhookVerificationError(f"Webhook Error: invalid payload ({e})") from e
