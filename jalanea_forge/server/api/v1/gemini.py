"""
Gemini Proxy Endpoint.

Server-side proxy for Gemini calls made by the browser: plain generation with
the server key, and a cheap check that tells whether a user's own key works.
Errors are answered as ``{"error": ...}`` the way the browser client expects.
"""

import base64
from typing import List, Union

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic_ai import BinaryContent

from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.core.models.io.gemini import Content, GeminiRequest, GeminiText, KeyTestResult
from jalanea_forge.errors import GenerationError, MissingApiKeyError, RateLimitError
from jalanea_forge.forge.generation import GenerationRequest
from jalanea_forge.forge.generation.llm_client import PromptContent, is_invalid_key, is_permission_denied
from jalanea_forge.forge.generation.prompts import KEY_TEST_PROMPT
from jalanea_forge.server.core.config import settings
from jalanea_forge.server.services.deps import LLMClientDep

logger = get_logger(__name__)

router = APIRouter()

KEY_TEST_MAX_TOKENS = 5


def prompt_from_contents(contents: Union[str, Content, List[Content], None]) -> Union[str, List[PromptContent]]:
    """Flatten Gemini ``contents`` into a prompt; inline data becomes binary parts.

    Raises:
        ValueError: No text or data in ``contents``, or invalid base64
    """
    if isinstance(contents, str):
        if not contents:
            raise ValueError("contents is required")
        return contents
    blocks = [contents] if isinstance(contents, Content) else list(contents or [])
    parts: List[PromptContent] = []
    for block in blocks:
        for part in block.parts:
            if part.text:
                parts.append(part.text)
            if part.inline_data is not None:
                try:
                    data = base64.b64decode(part.inline_data.data, validate=True)
                except ValueError as e:
                    raise ValueError(f"Invalid inline data: {e}") from e
                parts.append(BinaryContent(data=data, media_type=part.inline_data.mime_type))
    if not parts:
        raise ValueError("contents is required")
    return parts


async def _test_key(client, api_key: str) -> KeyTestResult:
    try:
        result = await client.generate(
            GenerationRequest(
                prompt=KEY_TEST_PROMPT,
                model=settings.gemini.test_model,
                api_key=api_key,
                temperature=0,
                max_tokens=KEY_TEST_MAX_TOKENS,
                max_retries=1,
            )
        )
    except RateLimitError:
        # A rate-limited key is a valid key
        return KeyTestResult(success=True)
    except GenerationError as e:
        if is_invalid_key(e):
            return KeyTestResult(success=False, error="Invalid API key. Please check and try again.")
        if is_permission_denied(e):
            return KeyTestResult(success=False, error="Permission denied. The API key may not have access to Gemini.")
        return KeyTestResult(success=False, error=e.message or "Unknown error")
    if result.text:
        return KeyTestResult(success=True)
    return KeyTestResult(success=False, error="No response received")


@router.post(
    "",
    summary="Gemini Proxy",
    description="Generate text with the server's Gemini key, or check a user key with action=testKey.",
    response_description="`{text}` for generation, `{success, error?}` for key tests.",
    responses={
        400: {"description": "Missing or malformed contents"},
        401: {"description": "Server key invalid"},
        429: {"description": "Rate limit exceeded"},
        500: {"description": "Server key missing or provider failure"},
    },
)
async def gemini_proxy(body: GeminiRequest, client: LLMClientDep):
    """
    Gemini proxy.

    - **model**: Gemini model (defaults to the configured generation model).
    - **contents**: A prompt string or `{parts: [{text} | {inlineData: {mimeType, data}}]}`.
    - **config**: `systemInstruction`, `temperature`, `maxOutputTokens`.
    - **action**: `testKey` to run `testApiKey` instead of generating.
    """
    if body.action == "testKey" and body.test_api_key:
        result = await _test_key(client, body.test_api_key)
        return result.model_dump(exclude_none=True)

    server_key = settings.gemini.api_key
    if not server_key:
        return JSONResponse(status_code=500, content={"error": "Server configuration error: GEMINI_API_KEY not set"})
    try:
        prompt = prompt_from_contents(body.contents)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})

    config = body.config
    request = GenerationRequest(
        prompt=prompt,
        model=body.model or settings.gemini.model,
        api_key=server_key,
        system=config.system_instruction if config else None,
        temperature=config.temperature if config else None,
        max_tokens=config.max_output_tokens if config else None,
    )
    try:
        result = await client.generate(request)
    except RateLimitError:
        return JSONResponse(status_code=429, content={"error": "Rate limit exceeded. Please try again later."})
    except (GenerationError, MissingApiKeyError) as e:
        logger.error(f"Gemini API Error: {e.message}")
        if "API_KEY_INVALID" in e.message:
            return JSONResponse(status_code=401, content={"error": "Invalid API key configuration"})
        return JSONResponse(status_code=500, content={"error": e.message or "Failed to generate content"})
    return GeminiText(text=result.text)
