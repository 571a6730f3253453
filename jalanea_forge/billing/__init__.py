"""Stripe subscriptions: price list, Stripe API access and webhook handling."""

from .stripe_gateway import CheckoutSession, StripeGateway, SubscriptionInfo, subscription_info
from .tiers import (
    FREE_GENERATIONS_LIMIT,
    TIER_CONFIG,
    PricingTier,
    TierConfig,
    format_price,
    is_subscription_active,
    pricing_tiers,
    tier_for_price_id,
    tier_from_role,
)
from .webhook import StripeWebhookProcessor

__all__ = [
    "CheckoutSession",
    "StripeGateway",
    "SubscriptionInfo",
    "subscription_info",
    "FREE_GENERATIONS_LIMIT",
    "TIER_CONFIG",
    "PricingTier",
    "TierConfig",
    "format_price",
    "is_subscription_active",
    "pricing_tiers",
    "tier_for_price_id",
    "tier_from_role",
    "StripeWebhookProcessor",
]
