"""Shared fixtures for unit tests.

In-memory SQLite with every table created, repository bundles on top of it,
and small factories for profiles and projects.
"""

from __future__ import annotations

from typing import AsyncGenerator, Callable, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel.pool import StaticPool

from jalanea_forge.core.database import create_all
from jalanea_forge.core.database.entities.profiles import Profile
from jalanea_forge.core.database.entities.projects import Project
from jalanea_forge.core.database.repositories.bundle import (
    LabRepoBundle,
    SqlRepoBundle,
    build_lab_repos_from_session,
    build_sql_repos_from_session,
)
from jalanea_forge.notifications import EmailSender


@pytest_asyncio.fixture
async def in_memory_engine():
    """In-memory SQLite engine with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def in_memory_session(in_memory_engine) -> AsyncGenerator[AsyncSession, None]:
    session_maker = async_sessionmaker(in_memory_engine, expire_on_commit=False)
    async with session_maker() as session:
        yield session


@pytest.fixture
def repos(in_memory_session: AsyncSession) -> SqlRepoBundle:
    return build_sql_repos_from_session(session=in_memory_session)


@pytest.fixture
def lab_repos(in_memory_session: AsyncSession) -> LabRepoBundle:
    return build_lab_repos_from_session(session=in_memory_session)


@pytest.fixture
def silent_emails() -> EmailSender:
    """An email sender with no Resend key; ``send_quietly`` is a no-op."""
    return EmailSender(None, "Forge <forge@example.com>", "http://localhost:3000")


@pytest.fixture
def make_profile(repos: SqlRepoBundle) -> Callable:
    async def _make(
        user_id: str = "user-1",
        role: str = "free",
        used: int = 0,
        limit: int = 25,
        email: Optional[str] = "ada@example.com",
        api_key: Optional[str] = None,
    ) -> Profile:
        return await repos.profiles.create(
            Profile(
                id=user_id,
                email=email,
                role=role,
                ai_generations_used=used,
                ai_generations_limit=limit,
                api_key_encrypted=api_key,
            )
        )

    return _make


@pytest.fixture
def make_project(repos: SqlRepoBundle) -> Callable:
    async def _make(user_id: str = "user-1", **fields) -> Project:
        fields.setdefault("name", "Habit Tracker")
        return await repos.projects.create(Project(user_id=user_id, **fields))

    return _make
