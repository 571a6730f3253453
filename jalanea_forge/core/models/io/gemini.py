"""
Gemini proxy I/O models.

Mirrors the request body the browser sends to the proxy, including the
``contents`` shape of the Gemini SDK (a string or ``{parts: [...]}``).
"""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Camel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class InlineData(_Camel):
    mime_type: str
    data: str = Field(description="Base64 payload")


class Part(_Camel):
    text: Optional[str] = None
    inline_data: Optional[InlineData] = None


class Content(_Camel):
    role: Optional[str] = None
    parts: List[Part] = Field(default_factory=list)


class GenerateConfig(_Camel):
    system_instruction: Optional[str] = None
    temperature: Optional[float] = None
    max_output_tokens: Optional[int] = None


class GeminiRequest(_Camel):
    model: Optional[str] = None
    contents: Union[str, Content, List[Content], None] = None
    config: Optional[GenerateConfig] = None
    action: Optional[str] = None
    test_api_key: Optional[str] = None


class GeminiText(BaseModel):
    text: str


class KeyTestResult(BaseModel):
    success: bool
    error: Optional[str] = None
