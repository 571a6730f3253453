"""Pricing tiers and the Stripe price id -> tier mapping."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from jalanea_forge.core.database.base import utc_now
from jalanea_forge.core.models.domain import UserRole


@dataclass(frozen=True)
class TierConfig:
    role: UserRole
    generations_limit: int
    name: str


# Paid tiers a Stripe subscription can grant
TIER_CONFIG: Dict[str, TierConfig] = {
    "starter": TierConfig(role=UserRole.starter, generations_limit=100, name="Starter"),
    "pro": TierConfig(role=UserRole.pro, generations_limit=500, name="Pro"),
}

FREE_GENERATIONS_LIMIT = 25


@dataclass(frozen=True)
class PricingTier:
    key: str
    name: str
    price: int
    generations: int
    projects: int  # -1 is unlimited
    features: List[str] = field(default_factory=list)
    price_id: Optional[str] = None


def pricing_tiers(starter_price_id: Optional[str] = None, pro_price_id: Optional[str] = None) -> List[PricingTier]:
    """The public price list, with the configured Stripe price ids filled in."""
    return [
        PricingTier(
            key="free",
            name="Free",
            price=0,
            generations=FREE_GENERATIONS_LIMIT,
            projects=3,
            features=["25 AI generations/month", "3 projects", "Basic features"],
        ),
        PricingTier(
            key="starter",
            name="Starter",
            price=9,
            generations=100,
            projects=10,
            features=[
                "100 AI generations/month",
                "10 projects",
                "Export PRD",
                "Version history",
                "Priority support",
            ],
            price_id=starter_price_id,
        ),
        PricingTier(
            key="pro",
            name="Pro",
            price=29,
            generations=500,
            projects=-1,
            features=[
                "500 AI generations/month",
                "Unlimited projects",
                "Export PRD",
                "Version history",
                "Priority support",
                "Early access to new features",
            ],
            price_id=pro_price_id,
        ),
    ]


def tier_from_role(role: str) -> str:
    if role == UserRole.pro.value:
        return "pro"
    if role == UserRole.starter.value:
        return "starter"
    return "free"


def tier_for_price_id(
    price_id: Optional[str],
    starter_price_id: Optional[str] = None,
    pro_price_id: Optional[str] = None,
) -> TierConfig:
    """Paid tier of a Stripe price.

    Exact matches against the configured price ids win; otherwise a price id
    containing ``starter`` or ``pro`` maps to that tier. Anything else is
    treated as Starter.
    """
    if price_id:
        if pro_price_id and price_id == pro_price_id:
            return TIER_CONFIG["pro"]
        if starter_price_id and price_id == starter_price_id:
            return TIER_CONFIG["starter"]
        for key, config in TIER_CONFIG.items():
            if key in price_id:
                return config
    return TIER_CONFIG["starter"]


def is_subscription_active(current_period_end: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if current_period_end is None:
        return False
    return current_period_end > (now or utc_now())


def format_price(price: float) -> str:
    """US-dollar display price: ``$9``, ``$29``, ``$9.5``."""
    if float(price).is_integer():
        return f"${int(price):,}"
    return f"${price:,.2f}".rstrip("0")
