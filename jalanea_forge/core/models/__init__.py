"""Core models and schemas for centralized data management."""

from __future__ import annotations

from .base import BaseSchema
from .domain import (
    ActionType,
    PrdVersion,
    ProjectState,
    ProjectStep,
    ResearchDocument,
    RoadmapPhase,
    UserRole,
)

__all__ = [
    "BaseSchema",
    "ActionType",
    "PrdVersion",
    "ProjectState",
    "ProjectStep",
    "ResearchDocument",
    "RoadmapPhase",
    "UserRole",
]
