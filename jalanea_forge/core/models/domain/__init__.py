"""Domain models and enums for the Forge workflow.

These types are shared between:

- the workflow modules (permissions, wizard, PRD history, autosave, generation),
- repositories/persistence layers (stored as JSON columns),
- the API layer (returned to the browser with camelCase keys).
"""

from .enums import (
    ActionType,
    Artifact,
    PrdSource,
    ProjectStep,
    ResearchSource,
    UserRole,
)
from .models import (
    BugReport,
    PrdVersion,
    ProjectState,
    ResearchDocument,
    RoadmapPhase,
    RoadmapStep,
)

__all__ = [
    "ActionType",
    "Artifact",
    "BugReport",
    "PrdSource",
    "PrdVersion",
    "ProjectState",
    "ProjectStep",
    "ResearchDocument",
    "ResearchSource",
    "RoadmapPhase",
    "RoadmapStep",
    "UserRole",
]
