"""Fixtures for the API tests.

The app runs against the in-memory session of the unit-test conftest. Every
outbound client is replaced: LLM calls hit a ``FunctionModel``, emails are
recorded, Stripe is a fake client and the Lab uses a known password.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import AsyncGenerator, Callable, Dict, List, Optional

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pydantic_ai.messages import ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel

from jalanea_forge.billing import StripeGateway
from jalanea_forge.core.database.repositories.projects import ProjectRepository
from jalanea_forge.core.database.session import get_session
from jalanea_forge.forge.autosave import AutosaveDebouncer, merge_state, patch_from_payload
from jalanea_forge.forge.generation import LLMClient
from jalanea_forge.notifications import EmailRequest, EmailSender
from jalanea_forge.server.core.config import settings
from jalanea_forge.server.core.security import JWT_ALGORITHM, LabTokens
from jalanea_forge.server.main import app
from jalanea_forge.server.services.clients import (
    get_autosave,
    get_email_sender,
    get_lab_tokens,
    get_llm_client,
    get_stripe_gateway,
)

LAB_PASSWORD = "lab-pass"
LAB_SECRET = "lab-secret-for-tests-with-at-least-32-chars"
WEBHOOK_SECRET = "whsec_test_secret"


class StubModels:
    """Model factory for the app's LLM client; every call answers ``text`` or raises ``error``."""

    def __init__(self) -> None:
        self.text = "generated"
        self.error: Optional[Exception] = None
        self.keys: List[str] = []
        self.models: List[str] = []
        self.sleeps: List[float] = []

    def __call__(self, model_name: str, api_key: str) -> FunctionModel:
        self.models.append(model_name)
        self.keys.append(api_key)
        return FunctionModel(self.respond)

    def respond(self, messages, info: AgentInfo) -> ModelResponse:
        if self.error is not None:
            raise self.error
        return ModelResponse(parts=[TextPart(self.text)])


class RecordingEmails(EmailSender):
    def __init__(self) -> None:
        super().__init__("re_test", "Forge <forge@example.com>", "http://localhost:3000")
        self.sent: List[EmailRequest] = []

    async def send(self, request: EmailRequest) -> str:
        self.sent.append(request)
        return f"email-{len(self.sent)}"

    async def send_quietly(self, request: EmailRequest) -> Optional[str]:
        return await self.send(request)


class FakeStripeClient:
    """Stands in for ``stripe.StripeClient``."""

    def __init__(self) -> None:
        self.calls = []

        async def create_customer(params):
            self.calls.append(("customer", params))
            return SimpleNamespace(id="cus_new")

        async def create_checkout(params):
            self.calls.append(("checkout", params))
            return SimpleNamespace(id="cs_1", url="https://checkout.stripe.test/cs_1")

        async def create_portal(params):
            self.calls.append(("portal", params))
            return SimpleNamespace(url="https://billing.stripe.test/p_1")

        async def retrieve_subscription(subscription_id):
            return {
                "id": subscription_id,
                "customer": "cus_new",
                "current_period_end": 1769904000,
                "items": {"data": [{"price": {"id": "price_pro_monthly"}}]},
                "metadata": {"supabase_user_id": "user-1"},
            }

        self.v1 = SimpleNamespace(
            customers=SimpleNamespace(create_async=create_customer),
            checkout=SimpleNamespace(sessions=SimpleNamespace(create_async=create_checkout)),
            billing_portal=SimpleNamespace(sessions=SimpleNamespace(create_async=create_portal)),
            subscriptions=SimpleNamespace(retrieve_async=retrieve_subscription),
        )


@pytest.fixture
def stub_models() -> StubModels:
    return StubModels()


@pytest.fixture
def sent_emails() -> RecordingEmails:
    return RecordingEmails()


@pytest.fixture
def stripe_client() -> FakeStripeClient:
    return FakeStripeClient()


@pytest.fixture
def lab_tokens() -> LabTokens:
    return LabTokens(LAB_PASSWORD, LAB_SECRET, 30)


@pytest_asyncio.fixture
async def autosave(in_memory_session) -> AsyncGenerator[AutosaveDebouncer, None]:
    async def save(project_id: str, payload: dict) -> None:
        projects = ProjectRepository(in_memory_session)
        project = await projects.get_by_id(project_id)
        merge_state(project, patch_from_payload(payload))
        await projects.update(project)

    debouncer = AutosaveDebouncer(60, save)
    yield debouncer
    await debouncer.close()


@pytest_asyncio.fixture(name="client")
async def client_fixture(
    in_memory_session, stub_models, sent_emails, stripe_client, lab_tokens, autosave
) -> AsyncGenerator[AsyncClient, None]:
    """An async HTTP client with every outbound dependency overridden."""

    async def get_session_override():
        yield in_memory_session

    async def no_sleep(seconds: float) -> None:
        stub_models.sleeps.append(seconds)

    llm_client = LLMClient(
        "gemini-2.0-flash",
        server_keys={"google": "server-key", "anthropic": "server-anthropic"},
        model_factory=stub_models,
        sleep=no_sleep,
    )
    gateway = StripeGateway(None, WEBHOOK_SECRET, client=stripe_client)

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_llm_client] = lambda: llm_client
    app.dependency_overrides[get_email_sender] = lambda: sent_emails
    app.dependency_overrides[get_stripe_gateway] = lambda: gateway
    app.dependency_overrides[get_lab_tokens] = lambda: lab_tokens
    app.dependency_overrides[get_autosave] = lambda: autosave

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> Callable[..., Dict[str, str]]:
    """Build an ``Authorization`` header carrying a Supabase access token."""

    def _headers(
        user_id: str = "user-1",
        email: Optional[str] = "ada@example.com",
        expires_in: timedelta = timedelta(hours=1),
        secret: Optional[str] = None,
    ) -> Dict[str, str]:
        payload = {
            "sub": user_id,
            "email": email,
            "aud": settings.supabase.jwt_audience,
            "exp": datetime.now(timezone.utc) + expires_in,
        }
        token = jwt.encode(payload, secret or settings.supabase.jwt_secret, algorithm=JWT_ALGORITHM)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def lab_headers(lab_tokens) -> Dict[str, str]:
    return {"Authorization": f"Bearer {lab_tokens.issue(LAB_PASSWORD)}"}
