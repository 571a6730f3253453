"""Debounced project autosave.

The browser streams edits to a project as partial ``ProjectState`` patches.
``merge_state`` is the reducer that folds a patch into the persisted project
row, and ``AutosaveDebouncer`` delays the write until edits go quiet: a later
edit to the same project supersedes the pending save and restarts its timer.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic.alias_generators import to_camel

from jalanea_forge.core.database.entities.projects import Project
from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.core.models.domain import (
    PrdSource,
    ProjectState,
    ProjectStep,
    ResearchDocument,
    RoadmapPhase,
)

from .version_history import DEFAULT_HISTORY_LIMIT, PrdHistory

logger = get_logger(__name__)

# ProjectState fields kept in the project's ``artifacts`` JSON column.
ARTIFACT_FIELDS = (
    "design_system_output",
    "code_prompt_output",
    "research_mission_prompt",
    "report_generation_prompt",
    "stitch_prompt",
    "opal_prompt",
    "antigravity_prompt",
    "bug_report_prompt",
)

PRD_SOURCE_KEY = "prdSource"

SaveCallback = Callable[[str, Dict[str, Any]], Awaitable[None]]


def project_to_state(project: Project) -> ProjectState:
    """Rebuild the browser-facing state from a project row."""
    artifacts = project.artifacts or {}
    return ProjectState(
        title=project.name,
        current_step=ProjectStep(project.current_step),
        research=[ResearchDocument.model_validate(doc) for doc in project.research_data or []],
        idea_input=project.idea_input,
        synthesized_idea=project.vision_statement,
        prd_output=project.prd_content,
        roadmap_output=[RoadmapPhase.model_validate(phase) for phase in project.realization_tasks or []],
        **{name: artifacts.get(to_camel(name), "") for name in ARTIFACT_FIELDS},
    )


def prd_history_of(project: Project, limit: int = DEFAULT_HISTORY_LIMIT) -> PrdHistory:
    return PrdHistory.from_records(
        project.prd_content,
        project.prd_history or [],
        limit=limit,
        current_source=(project.artifacts or {}).get(PRD_SOURCE_KEY),
    )


def store_prd_history(project: Project, history: PrdHistory) -> None:
    project.prd_content = history.current
    project.prd_history = history.to_records()
    project.artifacts = {**(project.artifacts or {}), PRD_SOURCE_KEY: history.current_source.value}


def merge_state(
    project: Project,
    patch: ProjectState,
    history_limit: int = DEFAULT_HISTORY_LIMIT,
    prd_source: PrdSource = PrdSource.manual,
) -> Project:
    """Fold the fields present in ``patch`` into ``project``.

    Fields the patch does not carry are left untouched. A changed PRD goes
    through the version history so manual edits can be reverted too.

    Args:
        project: Row to update in place
        patch: Partial state; only ``patch.model_fields_set`` is applied
        history_limit: PRD history cap
        prd_source: Source recorded for a PRD change

    Returns:
        The same ``project`` instance
    """
    fields = patch.model_fields_set

    if "title" in fields:
        project.name = patch.title
    if "current_step" in fields:
        project.current_step = int(patch.current_step)
    if "idea_input" in fields:
        project.idea_input = patch.idea_input
    if "synthesized_idea" in fields:
        project.vision_statement = patch.synthesized_idea
    if "research" in fields:
        project.research_data = [doc.model_dump(mode="json", by_alias=True) for doc in patch.research]
    if "roadmap_output" in fields:
        project.realization_tasks = [phase.model_dump(mode="json", by_alias=True) for phase in patch.roadmap_output]
    if "prd_output" in fields:
        history = prd_history_of(project, limit=history_limit)
        if history.write(patch.prd_output, source=prd_source):
            store_prd_history(project, history)

    artifact_updates = {to_camel(name): getattr(patch, name) for name in ARTIFACT_FIELDS if name in fields}
    if artifact_updates:
        project.artifacts = {**(project.artifacts or {}), **artifact_updates}

    return project


def patch_from_payload(payload: Dict[str, Any]) -> ProjectState:
    """Validate a raw (camelCase or snake_case) patch, keeping which fields it set."""
    return ProjectState.model_validate(payload)


def patch_to_payload(patch: ProjectState) -> Dict[str, Any]:
    return patch.model_dump(include=patch.model_fields_set)


class AutosaveDebouncer:
    """Per-project debounced writer.

    ``schedule`` merges a patch into the pending one of its key and restarts
    that key's timer; once ``delay`` seconds pass without another patch the
    merged patch is handed to ``save`` exactly once. Save failures are logged
    and dropped.
    """

    def __init__(
        self,
        delay: float,
        save: SaveCallback,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.delay = delay
        self._save = save
        self._sleep = sleep
        self._pending: Dict[str, Dict[str, Any]] = {}
        self._timers: Dict[str, asyncio.Task] = {}

    def schedule(self, key: str, patch: Dict[str, Any]) -> None:
        """Queue ``patch`` for ``key``; must be called from a running event loop."""
        self._pending[key] = {**self._pending.get(key, {}), **patch}
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()
        self._timers[key] = asyncio.create_task(self._fire(key))
        logger.debug(f"Autosave scheduled for {key} in {self.delay}s ({len(self._pending[key])} fields pending)")

    def pending(self, key: str) -> Optional[Dict[str, Any]]:
        pending = self._pending.get(key)
        return dict(pending) if pending is not None else None

    async def _fire(self, key: str) -> None:
        await self._sleep(self.delay)
        # Detach before saving so a new schedule() starts a fresh timer instead of cancelling this save
        self._timers.pop(key, None)
        patch = self._pending.pop(key, None)
        if patch is not None:
            await self._run_save(key, patch)

    async def _run_save(self, key: str, patch: Dict[str, Any]) -> None:
        try:
            await self._save(key, patch)
            logger.debug(f"Autosaved {key}")
        except Exception as e:
            logger.error(f"Autosave failed for {key}: {e}", exc_info=True)

    async def flush(self, key: Optional[str] = None) -> int:
        """Save pending patches now instead of waiting for their timers.

        Args:
            key: Only flush this key; all keys when None

        Returns:
            Number of patches saved
        """
        keys = [key] if key is not None else list(self._pending)
        flushed = 0
        for k in keys:
            timer = self._timers.pop(k, None)
            if timer is not None:
                timer.cancel()
            patch = self._pending.pop(k, None)
            if patch is None:
                continue
            await self._run_save(k, patch)
            flushed += 1
        return flushed

    def discard(self, key: str) -> bool:
        """Drop the pending patch of ``key`` and cancel its timer without saving.

        Returns:
            Whether a patch was pending
        """
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()
        dropped = self._pending.pop(key, None) is not None
        if dropped:
            logger.debug(f"Autosave draft for {key} discarded")
        return dropped

    async def close(self) -> None:
        """Flush everything; called on application shutdown."""
        flushed = await self.flush()
        if flushed:
            logger.info(f"Autosave flushed {flushed} pending project(s) on shutdown")
