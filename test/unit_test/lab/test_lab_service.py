"""Unit tests for LabService CRUD and its activity feed."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from jalanea_forge.errors import NotFoundError
from jalanea_forge.lab import LabService

pytestmark = pytest.mark.asyncio


@pytest.fixture
def lab(lab_repos) -> LabService:
    return LabService(lab_repos, preview_domain="previews.example.com", preview_ttl_days=14)


async def _activity_lines(lab: LabService):
    return {(a.type, a.action, a.target) for a in await lab.activity()}


class TestProjects:
    async def test_create_update_delete(self, lab):
        project = await lab.create_project({"name": "Tarot Bot", "category": "Spirituality"})
        assert project.status == "idea"
        assert project.checklist["ideaDocumented"] is False

        project = await lab.update_project(project.id, {"status": "building", "unknown_field": "ignored"})
        assert project.status == "building"

        await lab.delete_project(project.id)
        with pytest.raises(NotFoundError):
            await lab.get_project(project.id)

        assert await _activity_lines(lab) == {
            ("experiment", "Added idea", "Tarot Bot"),
            ("experiment", "Updated", "Tarot Bot"),
            ("experiment", "Deleted", "Tarot Bot"),
        }

    async def test_filters(self, lab):
        await lab.create_project({"name": "A", "status": "idea", "category": "Finance"})
        await lab.create_project({"name": "B", "status": "graduated", "category": "Finance"})
        await lab.create_project({"name": "C", "status": "idea", "category": "Health"})

        assert {p.name for p in await lab.list_projects(status="idea")} == {"A", "C"}
        assert {p.name for p in await lab.list_projects(status="idea", category="Finance")} == {"A"}
        assert len(await lab.list_projects()) == 3

    async def test_toggle_checklist(self, lab):
        project = await lab.create_project({"name": "A"})

        project = await lab.toggle_checklist_item(project.id, "mvpDefined")

        assert project.checklist["mvpDefined"] is True

    async def test_missing_project(self, lab):
        with pytest.raises(NotFoundError):
            await lab.update_project("nope", {"status": "testing"})


class TestClients:
    async def test_create_normalizes_and_defaults_expiry(self, lab):
        before = datetime.now(timezone.utc).replace(tzinfo=None)

        client = await lab.create_client(
            {
                "client_name": "Maria",
                "client_email": "maria@example.com",
                "project_name": "Bakery",
                "subdomain": "Maria's Bakery!",
            }
        )

        assert client.subdomain == "mariasbakery"
        assert client.status == "draft"
        assert before + timedelta(days=13) < client.expires_at <= before + timedelta(days=15)

    async def test_aware_expiry_is_stored_naive(self, lab):
        expires = datetime(2026, 3, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))

        client = await lab.create_client(
            {
                "client_name": "Maria",
                "client_email": "maria@example.com",
                "project_name": "Bakery",
                "subdomain": "bakery",
                "expires_at": expires,
            }
        )

        assert client.expires_at == datetime(2026, 3, 1, 10, 0)

    async def test_share_marks_sent(self, lab):
        client = await lab.create_client(
            {
                "client_name": "Maria",
                "client_email": "maria@example.com",
                "project_name": "Bakery",
                "subdomain": "bakery",
                "password": "crumbs",
            }
        )
        sent_at = datetime(2026, 1, 10, 9, 30)

        client, email = await lab.share_client(client.id, now=sent_at)

        assert client.status == "sent"
        assert client.last_sent_at == sent_at
        assert "https://bakery.previews.example.com" in email.body
        assert ("client", "Sent preview to", "Maria") in await _activity_lines(lab)

    async def test_update_and_delete(self, lab):
        client = await lab.create_client(
            {"client_name": "Jo", "client_email": "jo@example.com", "project_name": "P", "subdomain": "jo"}
        )

        client = await lab.update_client(client.id, {"subdomain": "Jo New", "status": "viewed"})
        assert client.subdomain == "jonew"
        assert client.status == "viewed"

        await lab.delete_client(client.id)
        assert await lab.list_clients() == []
        with pytest.raises(NotFoundError):
            await lab.delete_client(client.id)


async def test_deployments(lab):
    deployment = await lab.create_deployment({"project_name": "Forge", "branch": "feature/x"})
    assert deployment.status == "development"

    deployment = await lab.update_deployment(deployment.id, {"status": "production"})
    assert deployment.status == "production"
    assert (await lab.stats()).live_deployments == 1

    await lab.delete_deployment(deployment.id)
    assert await lab.list_deployments() == []


class TestNotes:
    async def test_capture_trims_and_logs_preview(self, lab):
        note = await lab.capture_note("  Idea: an app that reminds me to drink water every hour  ")

        assert note.content == "Idea: an app that reminds me to drink water every hour"
        assert ("note", "Quick capture", "Idea: an app that reminds me t...") in await _activity_lines(lab)

    async def test_delete(self, lab):
        note = await lab.capture_note("x")

        await lab.delete_note(note.id)

        assert await lab.list_notes() == []
        with pytest.raises(NotFoundError):
            await lab.delete_note(note.id)


async def test_stats(lab):
    await lab.create_project({"name": "A", "status": "idea"})
    await lab.create_project({"name": "B", "status": "testing"})

    stats = await lab.stats()

    assert stats.total_projects == 2
    assert stats.active_experiments == 1
    assert stats.ideas_in_queue == 1
