"""Unit tests for applying Stripe subscription events to profiles."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

import pytest

from jalanea_forge.billing import StripeGateway, StripeWebhookProcessor, SubscriptionInfo
from jalanea_forge.notifications import EmailRequest, EmailSender, EmailType

pytestmark = pytest.mark.asyncio

PERIOD_END = datetime(2026, 2, 1)


class FakeGateway(StripeGateway):
    def __init__(self, subscription: SubscriptionInfo) -> None:
        super().__init__(None, None)
        self.subscription = subscription

    async def retrieve_subscription(self, subscription_id: str) -> SubscriptionInfo:
        assert subscription_id == self.subscription.id
        return self.subscription


class RecordingEmails(EmailSender):
    def __init__(self) -> None:
        super().__init__("re_test", "Forge <forge@example.com>", "http://localhost:3000")
        self.sent: List[EmailRequest] = []

    async def send_quietly(self, request: EmailRequest) -> Optional[str]:
        self.sent.append(request)
        return "email-id"


def _subscription(price_id: str = "price_pro", user_id: Optional[str] = "user-1") -> SubscriptionInfo:
    return SubscriptionInfo(
        id="sub_1",
        customer_id="cus_1",
        price_id=price_id,
        current_period_end=PERIOD_END,
        metadata={"supabase_user_id": user_id} if user_id else {},
    )


@pytest.fixture
def emails() -> RecordingEmails:
    return RecordingEmails()


def _processor(repos, emails, subscription=None) -> StripeWebhookProcessor:
    return StripeWebhookProcessor(
        repos.profiles,
        FakeGateway(subscription or _subscription()),
        emails,
        starter_price_id="price_s",
        pro_price_id="price_pro",
    )


def _event(event_type: str, obj: dict) -> dict:
    return {"id": "evt_1", "type": event_type, "data": {"object": obj}}


class TestCheckoutCompleted:
    async def test_upgrades_and_resets_usage(self, repos, emails, make_profile):
        await make_profile(used=20)
        processor = _processor(repos, emails)

        result = await processor.handle(
            _event("checkout.session.completed", {"id": "cs_1", "subscription": "sub_1", "customer": "cus_1"})
        )

        assert result == {"received": True}
        profile = await repos.profiles.get_by_id("user-1")
        assert profile.role == "pro"
        assert profile.ai_generations_limit == 500
        assert profile.ai_generations_used == 0
        assert profile.stripe_customer_id == "cus_1"
        assert profile.stripe_subscription_id == "sub_1"
        assert profile.current_period_end == PERIOD_END
        assert [(e.type, e.plan, e.generations) for e in emails.sent] == [
            (EmailType.subscription_confirmed, "Pro", 500)
        ]

    async def test_client_reference_id_fallback(self, repos, emails, make_profile):
        await make_profile()
        processor = _processor(repos, emails, _subscription(price_id="price_s", user_id=None))

        await processor.handle(
            _event("checkout.session.completed", {"subscription": "sub_1", "client_reference_id": "user-1"})
        )

        assert (await repos.profiles.get_by_id("user-1")).role == "starter"

    async def test_unknown_user_is_acknowledged(self, repos, emails):
        processor = _processor(repos, emails)

        result = await processor.handle(_event("checkout.session.completed", {"subscription": "sub_1"}))

        assert result == {"received": True}
        assert emails.sent == []

    async def test_without_subscription(self, repos, emails, make_profile):
        await make_profile()

        await _processor(repos, emails).handle(_event("checkout.session.completed", {"id": "cs_1"}))

        assert (await repos.profiles.get_by_id("user-1")).role == "free"


async def test_subscription_updated_changes_tier(repos, emails, make_profile):
    profile = await make_profile(role="pro", limit=500, used=42)
    profile.stripe_customer_id = "cus_1"
    await repos.profiles.update(profile)

    await _processor(repos, emails).handle(
        _event(
            "customer.subscription.updated",
            {
                "id": "sub_2",
                "customer": "cus_1",
                "current_period_end": 1769904000,
                "items": {"data": [{"price": {"id": "price_s"}}]},
            },
        )
    )

    updated = await repos.profiles.get_by_id("user-1")
    assert updated.role == "starter"
    assert updated.ai_generations_limit == 100
    assert updated.ai_generations_used == 42
    assert updated.stripe_subscription_id == "sub_2"
    assert updated.current_period_end == PERIOD_END


async def test_subscription_deleted_downgrades(repos, emails, make_profile):
    profile = await make_profile(role="pro", limit=500)
    profile.stripe_customer_id = "cus_1"
    profile.stripe_subscription_id = "sub_1"
    await repos.profiles.update(profile)

    await _processor(repos, emails).handle(_event("customer.subscription.deleted", {"customer": "cus_1"}))

    updated = await repos.profiles.get_by_id("user-1")
    assert updated.role == "free"
    assert updated.ai_generations_limit == 25
    assert updated.stripe_subscription_id is None
    assert updated.stripe_customer_id == "cus_1"
    assert [e.type for e in emails.sent] == [EmailType.subscription_cancelled]


class TestPaymentSucceeded:
    async def test_renewal_resets_usage(self, repos, emails, make_profile):
        profile = await make_profile(role="starter", limit=100, used=77)
        profile.stripe_customer_id = "cus_1"
        await repos.profiles.update(profile)

        await _processor(repos, emails).handle(
            _event("invoice.payment_succeeded", {"customer": "cus_1", "billing_reason": "subscription_cycle"})
        )

        assert (await repos.profiles.get_by_id("user-1")).ai_generations_used == 0

    async def test_first_payment_is_ignored(self, repos, emails, make_profile):
        profile = await make_profile(used=7)
        profile.stripe_customer_id = "cus_1"
        await repos.profiles.update(profile)

        await _processor(repos, emails).handle(
            _event("invoice.payment_succeeded", {"customer": "cus_1", "billing_reason": "subscription_create"})
        )

        assert (await repos.profiles.get_by_id("user-1")).ai_generations_used == 7


async def test_unhandled_events_are_acknowledged(repos, emails):
    processor = _processor(repos, emails)

    assert await processor.handle(_event("invoice.payment_failed", {"customer": "cus_1"})) == {"received": True}
    assert await processor.handle(_event("customer.created", {})) == {"received": True}
