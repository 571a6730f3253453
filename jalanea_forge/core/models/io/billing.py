"""
Billing and email I/O models for API requests and responses.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class CheckoutRequest(BaseModel):
    price_id: str = Field(min_length=1, description="Stripe price id of the plan to buy")
    success_url: str
    cancel_url: str


class PortalRequest(BaseModel):
    return_url: str


class SessionUrl(BaseModel):
    url: str


class PricingTierRead(BaseModel):
    key: str
    name: str
    price: int
    display_price: str
    generations: int
    projects: int = Field(description="Project limit; -1 is unlimited")
    features: List[str]
    price_id: Optional[str] = None


class EmailSendResponse(BaseModel):
    success: bool = True
    id: str
