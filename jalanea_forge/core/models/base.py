"""Pydantic base schema shared by the domain models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base Pydantic model for all domain schemas.

    Configures common Pydantic behaviors:
    - ``populate_by_name=True``: Allow initialization by alias or field name.
    - ``extra="ignore"``: Browser payloads carry UI-only keys that are dropped on the way in.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )
