"""Unit tests for the SQLModel repositories against in-memory SQLite."""

from __future__ import annotations

from datetime import timedelta

import pytest

from jalanea_forge.core.database.base import utc_now
from jalanea_forge.core.database.entities.usage_logs import UsageLog
from jalanea_forge.core.database.repositories.lab import ACTIVITY_FEED_SIZE

pytestmark = pytest.mark.asyncio


class TestProfileRepository:
    async def test_get_or_create_creates_free_profile(self, repos):
        profile = await repos.profiles.get_or_create("new-user", "new@example.com")

        assert profile.id == "new-user"
        assert profile.role == "free"
        assert profile.ai_generations_used == 0
        assert profile.ai_generations_limit == 25

    async def test_get_or_create_returns_existing_and_backfills_email(self, repos, make_profile):
        await make_profile(user_id="u1", role="pro", email=None)

        profile = await repos.profiles.get_or_create("u1", "late@example.com")

        assert profile.role == "pro"
        assert profile.email == "late@example.com"

    async def test_increment_generations(self, repos, make_profile):
        await make_profile(user_id="u1", used=4)

        profile = await repos.profiles.increment_generations("u1")
        profile = await repos.profiles.increment_generations("u1")

        assert profile.ai_generations_used == 6

    async def test_increment_generations_unknown_user(self, repos):
        assert await repos.profiles.increment_generations("ghost") is None

    async def test_reset_generations(self, repos, make_profile):
        await make_profile(user_id="u1", used=25)

        profile = await repos.profiles.reset_generations("u1")

        assert profile.ai_generations_used == 0

    async def test_apply_subscription(self, repos, make_profile):
        profile = await make_profile(user_id="u1", used=20)
        period_end = utc_now() + timedelta(days=30)

        profile = await repos.profiles.apply_subscription(
            profile,
            role="starter",
            limit=100,
            subscription_id="sub_1",
            current_period_end=period_end,
            reset_usage=True,
        )

        assert profile.role == "starter"
        assert profile.ai_generations_limit == 100
        assert profile.ai_generations_used == 0
        assert profile.stripe_subscription_id == "sub_1"

    async def test_lookup_by_stripe_ids(self, repos, make_profile):
        profile = await make_profile(user_id="u1")
        profile.stripe_customer_id = "cus_1"
        profile.stripe_subscription_id = "sub_1"
        await repos.profiles.update(profile)

        assert (await repos.profiles.get_by_stripe_customer("cus_1")).id == "u1"
        assert (await repos.profiles.get_by_stripe_subscription("sub_1")).id == "u1"
        assert await repos.profiles.get_by_stripe_customer("cus_other") is None


class TestProjectRepository:
    async def test_projects_are_scoped_to_their_owner(self, repos, make_project):
        mine = await make_project(user_id="u1")
        await make_project(user_id="u2")

        assert (await repos.projects.get_for_user(mine.id, "u1")).id == mine.id
        assert await repos.projects.get_for_user(mine.id, "u2") is None
        assert [p.id for p in await repos.projects.list_for_user("u1")] == [mine.id]
        assert await repos.projects.count_for_user("u1") == 1

    async def test_update_bumps_updated_at(self, repos, make_project):
        project = await make_project()
        project.updated_at = utc_now() - timedelta(days=1)
        before = project.updated_at

        project.name = "Renamed"
        project = await repos.projects.update(project)

        assert project.updated_at > before

    async def test_list_for_user_most_recent_first(self, repos, make_project):
        older = await make_project(name="Older")
        newer = await make_project(name="Newer")
        older.updated_at = utc_now() - timedelta(hours=1)
        await repos.projects.session.commit()

        projects = await repos.projects.list_for_user("user-1")

        assert [p.id for p in projects] == [newer.id, older.id]


class TestUsageLogRepository:
    async def test_stats_for_user_groups_by_action(self, repos):
        await repos.usage_logs.append("u1", "prd_generation", 100)
        await repos.usage_logs.append("u1", "prd_generation", 50)
        await repos.usage_logs.append("u1", "vision_generation", 10)
        await repos.usage_logs.append("u2", "vision_generation", 10)

        stats = await repos.usage_logs.stats_for_user("u1")

        assert stats == {"total": 3, "by_action": {"prd_generation": 2, "vision_generation": 1}}

    async def test_stats_for_user_date_range(self, repos):
        old = UsageLog(user_id="u1", action_type="prd_generation", created_at=utc_now() - timedelta(days=40))
        await repos.usage_logs.create(old)
        await repos.usage_logs.append("u1", "vision_generation")

        stats = await repos.usage_logs.stats_for_user("u1", from_date=utc_now() - timedelta(days=30))

        assert stats["total"] == 1
        assert stats["by_action"] == {"vision_generation": 1}

    async def test_stats_by_user_heaviest_first(self, repos):
        await repos.usage_logs.append("light", "vision_generation", 5)
        for _ in range(3):
            await repos.usage_logs.append("heavy", "prd_generation", 100)

        rows = await repos.usage_logs.stats_by_user()

        assert rows[0] == {"user_id": "heavy", "total": 3, "tokens_used": 300}
        assert rows[1] == {"user_id": "light", "total": 1, "tokens_used": 5}


class TestLabActivityRepository:
    async def test_feed_keeps_only_latest_entries(self, lab_repos):
        for i in range(ACTIVITY_FEED_SIZE + 5):
            await lab_repos.activity.record("note", "Quick capture", f"note {i}")

        recent = await lab_repos.activity.recent()
        all_rows = await lab_repos.activity.list()

        assert len(recent) == ACTIVITY_FEED_SIZE
        assert len(all_rows) == ACTIVITY_FEED_SIZE
