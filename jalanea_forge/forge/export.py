"""PRD export as a Markdown document."""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

from jalanea_forge.core.models.domain import ProjectState

_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9._-]+")


def export_filename(title: str) -> str:
    """``My App!`` -> ``My-App-PRD.md``"""
    stem = _UNSAFE_FILENAME.sub("-", title.strip()).strip("-") or "Untitled-Project"
    return f"{stem}-PRD.md"


def prd_markdown(state: ProjectState, today: Optional[date] = None) -> str:
    """The PRD with a title block; the vision is included when there is one."""
    today = today or date.today()
    lines = [f"# {state.title}", "", f"_Product Requirements Document, exported {today.isoformat()}_", ""]
    if state.synthesized_idea.strip():
        lines += ["## Vision", "", state.synthesized_idea.strip(), ""]
    lines += [state.prd_output.strip(), ""]
    return "\n".join(lines)
