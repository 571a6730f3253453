"""Unit tests for the LLM client: key resolution, retries and error mapping."""

from __future__ import annotations

import pytest
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.messages import ModelRequest, ModelResponse, TextPart, UserPromptPart
from pydantic_ai.models.function import AgentInfo, FunctionModel
from pydantic_ai.models.test import TestModel

from jalanea_forge.errors import GenerationError, MissingApiKeyError, RateLimitError
from jalanea_forge.forge.generation.llm_client import (
    ChatTurn,
    GenerationRequest,
    LLMClient,
    build_history,
    is_invalid_key,
    is_permission_denied,
    is_rate_limit,
    provider_of,
    retry_delay,
)

pytestmark = pytest.mark.asyncio


class RecordingSleep:
    def __init__(self) -> None:
        self.delays = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _client(model, **kwargs) -> LLMClient:
    kwargs.setdefault("server_keys", {"google": "server-google", "anthropic": "server-anthropic"})
    return LLMClient("gemini-2.0-flash", model_factory=lambda name, key: model, **kwargs)


class TestHelpers:
    async def test_provider_of(self):
        assert provider_of("claude-sonnet-4-20250514") == "anthropic"
        assert provider_of("gemini-2.0-flash") == "google"

    async def test_retry_delay_backoff(self):
        assert [retry_delay(i, "overloaded") for i in range(3)] == [1.0, 2.0, 4.0]

    async def test_retry_delay_honours_hint(self):
        assert retry_delay(0, "Quota exceeded. Please retry in 12.3456s.") == pytest.approx(13.346)

    async def test_error_classification(self):
        assert is_rate_limit(ModelHTTPError(429, "gemini"))
        assert is_rate_limit(RuntimeError("RESOURCE_EXHAUSTED"))
        assert not is_rate_limit(ModelHTTPError(500, "gemini"))
        assert is_invalid_key(ModelHTTPError(400, "gemini", body={"reason": "API_KEY_INVALID"}))
        assert is_permission_denied(ModelHTTPError(403, "gemini", body="PERMISSION_DENIED"))

    async def test_build_history(self):
        history = build_history([ChatTurn("user", "hi"), ChatTurn("assistant", "hello")])

        assert isinstance(history[0], ModelRequest)
        assert isinstance(history[0].parts[0], UserPromptPart)
        assert isinstance(history[1], ModelResponse)
        assert history[1].parts[0].content == "hello"


class TestKeyResolution:
    async def test_own_key_wins(self):
        client = _client(TestModel())

        assert client.resolve_api_key("gemini-2.0-flash", "user-key") == "user-key"

    async def test_server_key_by_provider(self):
        client = _client(TestModel())

        assert client.resolve_api_key("claude-3-5-haiku") == "server-anthropic"
        assert client.resolve_api_key("gemini-2.0-flash") == "server-google"

    async def test_no_key_at_all(self):
        client = _client(TestModel(), server_keys={})

        with pytest.raises(MissingApiKeyError):
            await client.generate(GenerationRequest(prompt="hi"))

    async def test_factory_receives_resolved_key(self):
        seen = []

        def factory(name, key):
            seen.append((name, key))
            return TestModel(custom_output_text="ok")

        client = LLMClient("gemini-2.0-flash", server_keys={"google": "server"}, model_factory=factory)
        await client.generate(GenerationRequest(prompt="hi", api_key="mine", model="gemini-1.5-pro"))

        assert seen == [("gemini-1.5-pro", "mine")]


class TestGenerate:
    async def test_returns_text_and_model(self):
        client = _client(TestModel(custom_output_text="A clear vision"))

        result = await client.generate(GenerationRequest(prompt="idea", system="You are a CPO", temperature=0.7))

        assert result.text == "A clear vision"
        assert result.model == "gemini-2.0-flash"
        assert result.attempts == 1
        assert result.tokens_used >= 0

    async def test_history_is_sent_before_prompt(self):
        seen = []

        def respond(messages, info: AgentInfo) -> ModelResponse:
            seen.extend(messages)
            return ModelResponse(parts=[TextPart("ok")])

        client = _client(FunctionModel(respond))
        await client.generate(
            GenerationRequest(prompt="and now?", history=[ChatTurn("user", "first"), ChatTurn("assistant", "reply")])
        )

        assert isinstance(seen[0], ModelRequest)
        assert isinstance(seen[1], ModelResponse)
        assert seen[-1].parts[-1].content == "and now?"

    async def test_retries_rate_limit_then_succeeds(self):
        calls = []

        def respond(messages, info: AgentInfo) -> ModelResponse:
            calls.append(1)
            if len(calls) < 3:
                raise ModelHTTPError(429, "gemini-2.0-flash", body="Please retry in 0.5s")
            return ModelResponse(parts=[TextPart("finally")])

        sleep = RecordingSleep()
        client = _client(FunctionModel(respond), sleep=sleep)

        result = await client.generate(GenerationRequest(prompt="go"))

        assert result.text == "finally"
        assert result.attempts == 3
        assert sleep.delays == [1.5, 1.5]

    async def test_rate_limit_exhausted(self):
        def respond(messages, info: AgentInfo) -> ModelResponse:
            raise ModelHTTPError(429, "gemini-2.0-flash", body="RESOURCE_EXHAUSTED")

        sleep = RecordingSleep()
        client = _client(FunctionModel(respond), sleep=sleep, max_retries=3)

        with pytest.raises(RateLimitError) as exc_info:
            await client.generate(GenerationRequest(prompt="go"))

        assert exc_info.value.status_code == 429
        assert sleep.delays == [1.0, 2.0]

    async def test_request_can_override_retries(self):
        def respond(messages, info: AgentInfo) -> ModelResponse:
            raise ModelHTTPError(429, "gemini-2.0-flash")

        sleep = RecordingSleep()
        client = _client(FunctionModel(respond), sleep=sleep, max_retries=5)

        with pytest.raises(RateLimitError):
            await client.generate(GenerationRequest(prompt="go", max_retries=1))

        assert sleep.delays == []

    async def test_other_errors_are_not_retried(self):
        def respond(messages, info: AgentInfo) -> ModelResponse:
            raise ModelHTTPError(400, "gemini-2.0-flash", body="API key not valid")

        sleep = RecordingSleep()
        client = _client(FunctionModel(respond), sleep=sleep)

        with pytest.raises(GenerationError) as exc_info:
            await client.generate(GenerationRequest(prompt="go"))

        assert not isinstance(exc_info.value, RateLimitError)
        assert exc_info.value.provider_status == 400
        assert sleep.delays == []
