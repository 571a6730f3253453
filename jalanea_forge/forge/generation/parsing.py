"""Parsing of model output that is supposed to be JSON."""

from __future__ import annotations

import json
from typing import List

from pydantic import TypeAdapter, ValidationError

from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.core.models.domain import BugReport, RoadmapPhase

from .prompts import BUG_REPORT_FALLBACK_SUBJECT

logger = get_logger(__name__)

_ROADMAP = TypeAdapter(List[RoadmapPhase])


def strip_json_fences(text: str) -> str:
    """Remove markdown code fences models like to wrap JSON in."""
    return (text or "").replace("```json", "").replace("```", "").strip()


def parse_roadmap(text: str) -> List[RoadmapPhase]:
    """Parse a roadmap JSON array; an unparseable answer yields no phases."""
    cleaned = strip_json_fences(text) or "[]"
    try:
        return _ROADMAP.validate_json(cleaned)
    except ValidationError as e:
        logger.warning(f"Roadmap output was not valid JSON: {e.error_count()} error(s)")
        return []


def parse_bug_report(text: str, error: str) -> BugReport:
    """Parse ``{subject, body}``; anything else falls back to the raw error."""
    cleaned = strip_json_fences(text) or "{}"
    try:
        data = json.loads(cleaned)
        return BugReport.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        return BugReport(subject=BUG_REPORT_FALLBACK_SUBJECT, body=error)
