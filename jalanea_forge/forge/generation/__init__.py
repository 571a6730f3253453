"""AI generation: prompt templates, the LLM client and artifact generators."""

from .llm_client import ChatTurn, GenerationRequest, GenerationResult, LLMClient
from .service import DesignPrompts, Generated, GenerationService, ResearchPrompts

__all__ = [
    "ChatTurn",
    "DesignPrompts",
    "Generated",
    "GenerationRequest",
    "GenerationResult",
    "GenerationService",
    "LLMClient",
    "ResearchPrompts",
]
