import pytest
from httpx import AsyncClient
from pydantic_ai.exceptions import ModelHTTPError

pytestmark = pytest.mark.asyncio

LAB = "/api/v1/lab"


class TestSession:
    async def test_login_sets_cookie(self, client: AsyncClient):
        response = await client.post(f"{LAB}/auth", json={"password": "lab-pass"})

        assert response.status_code == 200
        data = response.json()
        assert data["expires_in"] == 30 * 24 * 3600
        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith(f"jalanea_lab_auth={data['token']}")
        assert "HttpOnly" in set_cookie

    async def test_wrong_password(self, client: AsyncClient):
        response = await client.post(f"{LAB}/auth", json={"password": "guess"})

        assert response.status_code == 401
        assert response.json() == {"detail": "Invalid password", "code": "LAB_UNAUTHORIZED"}

    async def test_protected_routes_need_session(self, client: AsyncClient):
        response = await client.get(f"{LAB}/overview")

        assert response.status_code == 401
        assert response.json()["code"] == "LAB_UNAUTHORIZED"

    async def test_cookie_session(self, client: AsyncClient, lab_tokens):
        cookie = f"jalanea_lab_auth={lab_tokens.issue('lab-pass')}"

        response = await client.get(f"{LAB}/stats", headers={"Cookie": cookie})

        assert response.status_code == 200

    async def test_supabase_token_does_not_open_the_lab(self, client: AsyncClient, auth_headers):
        response = await client.get(f"{LAB}/stats", headers=auth_headers())

        assert response.status_code == 401

    async def test_logout_clears_cookie(self, client: AsyncClient):
        response = await client.post(f"{LAB}/logout")

        assert response.status_code == 204
        assert 'jalanea_lab_auth=""' in response.headers["set-cookie"]


class TestExperiments:
    async def test_create_filter_and_checklist(self, client: AsyncClient, lab_headers):
        created = await client.post(
            f"{LAB}/projects",
            json={"name": "Forge", "status": "building", "category": "Design/AI"},
            headers=lab_headers,
        )
        await client.post(
            f"{LAB}/projects", json={"name": "Tithe", "category": "Finance"}, headers=lab_headers
        )

        assert created.status_code == 201
        project = created.json()
        assert project["progress"] == 0
        assert len(project["checklist"]) == 8

        building = await client.get(f"{LAB}/projects", params={"status": "building"}, headers=lab_headers)
        assert [p["name"] for p in building.json()] == ["Forge"]
        finance = await client.get(f"{LAB}/projects", params={"category": "Finance"}, headers=lab_headers)
        assert [p["name"] for p in finance.json()] == ["Tithe"]

        toggled = await client.post(
            f"{LAB}/projects/{project['id']}/checklist/mvpDefined", headers=lab_headers
        )
        assert toggled.json()["checklist"]["mvpDefined"] is True
        assert toggled.json()["progress"] == 12.5

        unknown = await client.post(f"{LAB}/projects/{project['id']}/checklist/bogus", headers=lab_headers)
        assert unknown.status_code == 400

    async def test_update_and_delete(self, client: AsyncClient, lab_headers):
        project = (await client.post(f"{LAB}/projects", json={"name": "Draft"}, headers=lab_headers)).json()

        updated = await client.patch(
            f"{LAB}/projects/{project['id']}", json={"status": "graduated", "url": "https://x.dev"}, headers=lab_headers
        )
        assert updated.json()["status"] == "graduated"

        deleted = await client.delete(f"{LAB}/projects/{project['id']}", headers=lab_headers)
        assert deleted.status_code == 204
        missing = await client.get(f"{LAB}/projects/{project['id']}", headers=lab_headers)
        assert missing.status_code == 404

    async def test_invalid_category(self, client: AsyncClient, lab_headers):
        response = await client.post(f"{LAB}/projects", json={"name": "X", "category": "Sports"}, headers=lab_headers)

        assert response.status_code == 422


class TestClients:
    async def test_create_and_share(self, client: AsyncClient, lab_headers):
        response = await client.post(
            f"{LAB}/clients",
            json={
                "client_name": "Acme",
                "client_email": "ceo@acme.test",
                "project_name": "Storefront",
                "subdomain": "Acme Corp",
            },
            headers=lab_headers,
        )

        assert response.status_code == 201
        preview = response.json()
        assert preview["subdomain"] == "acmecorp"
        assert preview["preview_url"] == "https://acmecorp.jalnaea.dev"
        assert preview["status"] == "draft"
        assert preview["expired"] is False
        assert 29 <= preview["days_remaining"] <= 30

        shared = await client.post(f"{LAB}/clients/{preview['id']}/share", headers=lab_headers)

        assert shared.status_code == 200
        data = shared.json()
        assert data["client"]["status"] == "sent"
        assert data["client"]["last_sent_at"] is not None
        assert data["email"]["to"] == "ceo@acme.test"
        assert data["email"]["subject"] == "Your Project Preview is Ready - Storefront"
        assert data["email"]["mailto"].startswith("mailto:ceo@acme.test?subject=")

    async def test_expired_preview_reads_expired(self, client: AsyncClient, lab_headers):
        response = await client.post(
            f"{LAB}/clients",
            json={
                "client_name": "Old",
                "client_email": "old@client.test",
                "project_name": "Legacy",
                "subdomain": "legacy",
                "status": "sent",
                "expires_at": "2020-01-01T00:00:00Z",
            },
            headers=lab_headers,
        )

        assert response.json()["status"] == "expired"
        assert response.json()["expired"] is True

    async def test_share_unknown_preview(self, client: AsyncClient, lab_headers):
        response = await client.post(f"{LAB}/clients/nope/share", headers=lab_headers)

        assert response.status_code == 404


async def test_deployments(client: AsyncClient, lab_headers):
    response = await client.post(
        f"{LAB}/deployments",
        json={"project_name": "Forge", "branch": "feature/pdf", "preview_url": "https://pdf.forge.dev"},
        headers=lab_headers,
    )

    assert response.status_code == 201
    deployment = response.json()
    assert deployment["status"] == "development"

    updated = await client.patch(
        f"{LAB}/deployments/{deployment['id']}", json={"status": "production"}, headers=lab_headers
    )
    assert updated.json()["status"] == "production"

    listed = await client.get(f"{LAB}/deployments", headers=lab_headers)
    assert [d["branch"] for d in listed.json()] == ["feature/pdf"]


async def test_notes_and_activity(client: AsyncClient, lab_headers):
    response = await client.post(
        f"{LAB}/notes", json={"content": "  Try a streak freeze feature for the habit app  "}, headers=lab_headers
    )

    assert response.status_code == 201
    note = response.json()
    assert note["content"] == "Try a streak freeze feature for the habit app"

    activity = (await client.get(f"{LAB}/activity", headers=lab_headers)).json()
    assert activity[0]["type"] == "note"
    assert activity[0]["target"] == "Try a streak freeze feature fo..."

    deleted = await client.delete(f"{LAB}/notes/{note['id']}", headers=lab_headers)
    assert deleted.status_code == 204
    again = await client.delete(f"{LAB}/notes/{note['id']}", headers=lab_headers)
    assert again.status_code == 404


async def test_overview(client: AsyncClient, lab_headers):
    await client.post(f"{LAB}/projects", json={"name": "Idea A"}, headers=lab_headers)
    await client.post(f"{LAB}/projects", json={"name": "Live B", "status": "graduated"}, headers=lab_headers)

    response = await client.get(f"{LAB}/overview", headers=lab_headers)

    assert response.status_code == 200
    stats = response.json()["stats"]
    assert stats["total_projects"] == 2
    assert stats["ideas_in_queue"] == 1
    assert stats["live_products"] == 1
    assert len(response.json()["activity"]) == 2


class TestBrainstorm:
    async def test_gemini_reply(self, client: AsyncClient, lab_headers, stub_models):
        stub_models.text = "Start with the checklist."

        response = await client.post(
            f"{LAB}/brainstorm",
            json={"messages": [{"role": "user", "content": "What next?"}]},
            headers=lab_headers,
        )

        assert response.status_code == 200
        assert response.json() == {"content": "Start with the checklist.", "model": "gemini"}
        assert stub_models.keys == ["server-key"]

    async def test_claude_reply(self, client: AsyncClient, lab_headers, stub_models):
        response = await client.post(
            f"{LAB}/brainstorm",
            json={"messages": [{"role": "user", "content": "Name it"}], "model": "claude"},
            headers=lab_headers,
        )

        assert response.json()["model"] == "claude"
        assert stub_models.keys == ["server-anthropic"]

    async def test_provider_error(self, client: AsyncClient, lab_headers, stub_models):
        stub_models.error = ModelHTTPError(500, "gemini-2.0-flash", body="internal")

        response = await client.post(
            f"{LAB}/brainstorm",
            json={"messages": [{"role": "user", "content": "Hi"}]},
            headers=lab_headers,
        )

        assert response.status_code == 500
        assert "error" in response.json()

    async def test_empty_messages(self, client: AsyncClient, lab_headers):
        response = await client.post(f"{LAB}/brainstorm", json={"messages": []}, headers=lab_headers)

        assert response.status_code == 422
