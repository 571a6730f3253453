"""
LLM client.

Thin wrapper over ``pydantic_ai.Agent`` that every generation goes through.
It resolves which API key to use (the caller's own key, else the server key
of the model's provider), builds the provider model and retries on HTTP 429
with exponential backoff, honouring the provider's "Please retry in Ns" hint.
"""

from __future__ import annotations

import asyncio
import math
import re
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Union

from pydantic_ai import Agent, BinaryContent
from pydantic_ai.exceptions import AgentRunError, ModelHTTPError
from pydantic_ai.messages import ModelMessage, ModelRequest, ModelResponse, TextPart, UserPromptPart
from pydantic_ai.models import Model
from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.providers.anthropic import AnthropicProvider
from pydantic_ai.providers.google import GoogleProvider
from pydantic_ai.settings import ModelSettings

from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.core.monitoring import log_llm_call
from jalanea_forge.errors import GenerationError, MissingApiKeyError, RateLimitError

logger = get_logger(__name__)

RETRY_HINT = re.compile(r"Please retry in ([0-9.]+)s")

PromptContent = Union[str, BinaryContent]
ModelFactory = Callable[[str, str], Model]


@dataclass(frozen=True)
class ChatTurn:
    """One earlier message of a conversation."""

    role: str  # "user" or "assistant"
    content: str


@dataclass
class GenerationRequest:
    prompt: Union[str, Sequence[PromptContent]]
    system: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    model: Optional[str] = None
    api_key: Optional[str] = None
    history: Sequence[ChatTurn] = field(default_factory=tuple)
    max_retries: Optional[int] = None  # overrides the client default


@dataclass(frozen=True)
class GenerationResult:
    text: str
    tokens_used: int
    model: str
    attempts: int = 1


def provider_of(model_name: str) -> str:
    """``anthropic`` for Claude models, ``google`` for everything else."""
    return "anthropic" if model_name.startswith("claude") else "google"


def default_model_factory(model_name: str, api_key: str) -> Model:
    if provider_of(model_name) == "anthropic":
        return AnthropicModel(model_name, provider=AnthropicProvider(api_key=api_key))
    return GoogleModel(model_name, provider=GoogleProvider(api_key=api_key))


def retry_delay(attempt: int, message: str) -> float:
    """Seconds to wait before retry number ``attempt + 1``.

    ``2 ** attempt`` by default; when the provider names a wait time, that
    time rounded up to the millisecond plus one second.
    """
    match = RETRY_HINT.search(message or "")
    if match:
        return math.ceil(float(match.group(1)) * 1000) / 1000 + 1
    return float(2**attempt)


def error_text(error: BaseException) -> str:
    if isinstance(error, ModelHTTPError):
        return f"{error.status_code} {error.body}"
    return str(error)


def is_rate_limit(error: BaseException) -> bool:
    if isinstance(error, ModelHTTPError) and error.status_code == 429:
        return True
    text = error_text(error)
    return "429" in text or "RESOURCE_EXHAUSTED" in text


def is_invalid_key(error: BaseException) -> bool:
    text = error_text(error)
    return "API_KEY_INVALID" in text or "API key not valid" in text


def is_permission_denied(error: BaseException) -> bool:
    return "PERMISSION_DENIED" in error_text(error)


def build_history(turns: Sequence[ChatTurn]) -> List[ModelMessage]:
    history: List[ModelMessage] = []
    for turn in turns:
        if turn.role == "user":
            history.append(ModelRequest(parts=[UserPromptPart(content=turn.content)]))
        else:
            history.append(ModelResponse(parts=[TextPart(content=turn.content)]))
    return history


class LLMClient:
    """Runs single-shot generations against Gemini or Claude."""

    def __init__(
        self,
        default_model: str,
        server_keys: Optional[Dict[str, Optional[str]]] = None,
        max_retries: int = 3,
        model_factory: ModelFactory = default_model_factory,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.default_model = default_model
        self.server_keys = dict(server_keys or {})
        self.max_retries = max(1, max_retries)
        self._model_factory = model_factory
        self._sleep = sleep

    def resolve_api_key(self, model_name: str, api_key: Optional[str] = None) -> str:
        """The caller's key if given, else the server key of the model's provider.

        Raises:
            MissingApiKeyError: Neither key is available
        """
        key = api_key or self.server_keys.get(provider_of(model_name))
        if not key:
            raise MissingApiKeyError()
        return key

    def _settings(self, request: GenerationRequest) -> Optional[ModelSettings]:
        settings: ModelSettings = {}
        if request.temperature is not None:
            settings["temperature"] = request.temperature
        if request.max_tokens is not None:
            settings["max_tokens"] = request.max_tokens
        return settings or None

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Run one generation, retrying while the provider rate-limits.

        Raises:
            MissingApiKeyError: No API key is available
            RateLimitError: Still rate-limited after ``max_retries`` attempts
            GenerationError: Any other provider failure
        """
        model_name = request.model or self.default_model
        api_key = self.resolve_api_key(model_name, request.api_key)
        model = self._model_factory(model_name, api_key)
        agent = Agent(model, instructions=request.system) if request.system else Agent(model)
        history = build_history(request.history) if request.history else None
        prompt = request.prompt if isinstance(request.prompt, str) else list(request.prompt)
        max_retries = max(1, request.max_retries or self.max_retries)

        attempt = 0
        while True:
            try:
                result = await agent.run(prompt, message_history=history, model_settings=self._settings(request))
                break
            except AgentRunError as e:
                if not is_rate_limit(e):
                    logger.error(f"LLM call failed (model={model_name}): {error_text(e)}")
                    status = e.status_code if isinstance(e, ModelHTTPError) else None
                    raise GenerationError(error_text(e), provider_status=status) from e
                if attempt >= max_retries - 1:
                    logger.error(f"LLM rate limit persisted after {attempt + 1} attempts (model={model_name})")
                    raise RateLimitError(attempt + 1) from e
                wait = retry_delay(attempt, error_text(e))
                logger.warning(
                    f"LLM 429 hit. Retrying in {wait:.1f}s... (Attempt {attempt + 1}/{max_retries})"
                )
                await self._sleep(wait)
                attempt += 1

        text = result.output or ""
        tokens = result.usage().total_tokens or 0
        log_llm_call(model=model_name, tokens_used=tokens, attempts=attempt + 1)
        return GenerationResult(text=text, tokens_used=tokens, model=model_name, attempts=attempt + 1)
