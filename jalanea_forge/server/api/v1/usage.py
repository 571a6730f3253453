"""
Usage Statistics Endpoints.

This module provides the endpoint for querying a user's AI generation
counts, grouped by action type.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query

from jalanea_forge.core.models.io.profiles import UsageStats
from jalanea_forge.server.services.deps import CurrentProfileDep, ReposDep

router = APIRouter()


@router.get(
    "",
    response_model=UsageStats,
    summary="Get Usage Statistics",
    description="Count the caller's AI generations, optionally within a date range.",
    response_description="Aggregated usage data.",
)
async def get_usage(
    profile: CurrentProfileDep,
    repos: ReposDep,
    from_date: Optional[datetime] = Query(None, alias="from", description="Start date for filtering usage."),
    to_date: Optional[datetime] = Query(None, alias="to", description="End date for filtering usage."),
) -> UsageStats:
    """
    Get aggregated usage.

    Counts the usage log entries of the caller between `from` and `to`
    (both inclusive, both optional) and breaks them down by action type.
    """
    stats = await repos.usage_logs.stats_for_user(profile.id, from_date=from_date, to_date=to_date)
    return UsageStats(total=stats["total"], by_action=stats["by_action"], period_from=from_date, period_to=to_date)
