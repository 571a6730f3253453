"""Brainstorm chat with Gemini or Claude, using the server keys."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.forge.generation import ChatTurn, GenerationRequest, LLMClient
from jalanea_forge.forge.generation.prompts import BRAINSTORM_SYSTEM

logger = get_logger(__name__)

CLAUDE_MAX_TOKENS = 4096


class BrainstormModel(str, Enum):
    gemini = "gemini"
    claude = "claude"


@dataclass(frozen=True)
class BrainstormReply:
    content: str
    model: BrainstormModel


class BrainstormService:
    def __init__(self, client: LLMClient, gemini_model: str, claude_model: str) -> None:
        self.client = client
        self.gemini_model = gemini_model
        self.claude_model = claude_model

    async def reply(self, messages: Sequence[ChatTurn], model: BrainstormModel) -> BrainstormReply:
        """Answer the last message of ``messages``; earlier ones are the history.

        Raises:
            ValueError: ``messages`` is empty
            GenerationError: The provider call failed
        """
        if not messages:
            raise ValueError("At least one message is required")
        *history, last = messages
        request = GenerationRequest(
            prompt=last.content,
            system=BRAINSTORM_SYSTEM,
            history=tuple(history),
        )
        if model is BrainstormModel.claude:
            request.model = self.claude_model
            request.max_tokens = CLAUDE_MAX_TOKENS
        else:
            request.model = self.gemini_model
        result = await self.client.generate(request)
        logger.debug(f"Brainstorm reply from {model.value}: {len(result.text)} chars")
        return BrainstormReply(content=result.text, model=model)
