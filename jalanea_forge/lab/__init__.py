"""
Jalanea Lab.

The owner's personal dashboard: experiments with a launch checklist, client
previews, dev deployments, quick notes, an activity feed and a brainstorm chat.
"""

from .brainstorm import BrainstormModel, BrainstormReply, BrainstormService
from .previews import ShareEmail, compose_share_email, days_remaining, is_expired, preview_url
from .service import LabService
from .stats import LabStats, checklist_progress, compute_stats, toggle_checklist

__all__ = [
    "BrainstormModel",
    "BrainstormReply",
    "BrainstormService",
    "ShareEmail",
    "compose_share_email",
    "days_remaining",
    "is_expired",
    "preview_url",
    "LabService",
    "LabStats",
    "checklist_progress",
    "compute_stats",
    "toggle_checklist",
]
