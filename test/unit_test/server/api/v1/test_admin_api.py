import pytest
import pytest_asyncio
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

ADMIN = "/api/v1/admin"


@pytest_asyncio.fixture
async def owner(make_profile):
    return await make_profile(user_id="owner-1", role="owner", email="owner@example.com")


@pytest.fixture
def owner_headers(auth_headers):
    return auth_headers(user_id="owner-1", email="owner@example.com")


@pytest.mark.parametrize(
    "method,path",
    [
        ("GET", "/users"),
        ("PUT", "/users/user-1/role"),
        ("POST", "/users/user-1/reset-generations"),
        ("GET", "/usage-logs"),
        ("GET", "/usage-by-user"),
        ("GET", "/projects"),
    ],
)
async def test_non_owners_are_rejected(client: AsyncClient, auth_headers, make_profile, method, path):
    await make_profile(role="pro", limit=500)

    response = await client.request(method, f"{ADMIN}{path}", json={"role": "pro"}, headers=auth_headers())

    assert response.status_code == 403
    assert response.json()["detail"] == "Admin access requires owner role."


async def test_list_users(client: AsyncClient, owner, owner_headers, make_profile, repos):
    user = await make_profile(role="starter", limit=100)
    user.stripe_customer_id = "cus_1"
    await repos.profiles.update(user)

    response = await client.get(f"{ADMIN}/users", headers=owner_headers)

    assert response.status_code == 200
    users = {u["id"]: u for u in response.json()}
    assert set(users) == {"owner-1", "user-1"}
    assert users["user-1"]["stripe_customer_id"] == "cus_1"
    assert users["user-1"]["tier"] == "starter"


async def test_change_role_sets_limit(client: AsyncClient, owner, owner_headers, make_profile):
    await make_profile(used=10)

    response = await client.put(f"{ADMIN}/users/user-1/role", json={"role": "pro"}, headers=owner_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["role"] == "pro"
    assert data["ai_generations_limit"] == 500
    assert data["ai_generations_used"] == 10


async def test_change_role_to_unlimited(client: AsyncClient, owner, owner_headers, make_profile):
    await make_profile()

    response = await client.put(f"{ADMIN}/users/user-1/role", json={"role": "beta_tester"}, headers=owner_headers)

    assert response.json()["ai_generations_limit"] == 999999


async def test_change_role_rejects_unknown_role(client: AsyncClient, owner, owner_headers, make_profile):
    await make_profile()

    response = await client.put(f"{ADMIN}/users/user-1/role", json={"role": "emperor"}, headers=owner_headers)

    assert response.status_code == 422


async def test_unknown_user(client: AsyncClient, owner, owner_headers):
    response = await client.post(f"{ADMIN}/users/nobody/reset-generations", headers=owner_headers)

    assert response.status_code == 404


async def test_reset_generations(client: AsyncClient, owner, owner_headers, make_profile):
    await make_profile(used=25)

    response = await client.post(f"{ADMIN}/users/user-1/reset-generations", headers=owner_headers)

    assert response.status_code == 200
    assert response.json()["ai_generations_used"] == 0


async def test_usage_views(client: AsyncClient, owner, owner_headers, repos):
    await repos.usage_logs.append("user-1", "prd_generation", 1000)
    await repos.usage_logs.append("user-1", "vision_generation", 200)
    await repos.usage_logs.append("user-2", "prd_generation", 50)

    logs = (await client.get(f"{ADMIN}/usage-logs", headers=owner_headers)).json()
    by_user = (await client.get(f"{ADMIN}/usage-by-user", headers=owner_headers)).json()

    assert len(logs) == 3
    assert {log["action_type"] for log in logs} == {"prd_generation", "vision_generation"}
    assert by_user == [
        {"user_id": "user-1", "total": 2, "tokens_used": 1200},
        {"user_id": "user-2", "total": 1, "tokens_used": 50},
    ]


async def test_list_all_projects(client: AsyncClient, owner, owner_headers, make_project):
    await make_project(user_id="user-1", name="Mine")
    await make_project(user_id="user-2", name="Theirs")

    response = await client.get(f"{ADMIN}/projects", headers=owner_headers)

    assert response.status_code == 200
    assert {(p["user_id"], p["name"]) for p in response.json()} == {("user-1", "Mine"), ("user-2", "Theirs")}
