from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from .errors import ValidationError
from .model import GenerationMode, Provider
from .prompts import PromptTemplate, response_schema


class AuthStyle(str, Enum):
    BEARER = "bearer"
    """``Authorization: Bearer <key>`` on a REST chat-completions call."""
    API_KEY = "api_key"
    """Key handed to the provider SDK client."""


RequestBuilder = Callable[[str, PromptTemplate, str, GenerationMode], dict[str, Any]]
ResponseExtractor = Callable[[Any], str]


def build_chat_completions_request(
    model: str, template: PromptTemplate, user_prompt: str, mode: GenerationMode
) -> dict[str, Any]:
    # No schema enforcement here, so the instruction itself names the required keys.
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": template.openai_system_instruction()},
            {"role": "user", "content": user_prompt},
        ],
        "response_format": {"type": "json_object"},
    }


def build_gemini_request(
    model: str, template: PromptTemplate, user_prompt: str, mode: GenerationMode
) -> dict[str, Any]:
    return {
        "model": model,
        "system_instruction": template.system_instruction,
        "contents": user_prompt,
        "response_schema": response_schema(mode),
    }


def extract_chat_completions_text(body: Any) -> str:
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ValidationError("Response is missing choices[0].message.content") from exc
    if not isinstance(content, str):
        raise ValidationError("choices[0].message.content is not a string")
    return content


def extract_gemini_text(response: Any) -> str:
    text = getattr(response, "text", None)
    if not isinstance(text, str):
        raise ValidationError("Gemini response did not include any text")
    return text.strip()


@dataclass(frozen=True)
class ProviderSpec:
    provider: Provider
    display_name: str
    model: str
    auth_style: AuthStyle
    build_request: RequestBuilder
    extract_text: ResponseExtractor
    endpoint: Optional[str] = None


PROVIDERS: Mapping[Provider, ProviderSpec] = {
    Provider.GOOGLE: ProviderSpec(
        provider=Provider.GOOGLE,
        display_name="Google Gemini",
        model="gemini-2.5-flash",
        auth_style=AuthStyle.API_KEY,
        build_request=build_gemini_request,
        extract_text=extract_gemini_text,
    ),
    Provider.OPENAI: ProviderSpec(
        provider=Provider.OPENAI,
        display_name="OpenAI",
        model="gpt-4o",
        auth_style=AuthStyle.BEARER,
        build_request=build_chat_completions_request,
        extract_text=extract_chat_completions_text,
        endpoint="https://api.openai.com/v1/chat/completions",
    ),
    Provider.GROK: ProviderSpec(
        provider=Provider.GROK,
        display_name="Grok",
        model="grok-3",
        auth_style=AuthStyle.BEARER,
        build_request=build_chat_completions_request,
        extract_text=extract_chat_completions_text,
        endpoint="https://api.x.ai/v1/chat/completions",
    ),
    Provider.DEEPSEEK: ProviderSpec(
        provider=Provider.DEEPSEEK,
        display_name="DeepSeek",
        model="deepseek-chat",
        auth_style=AuthStyle.BEARER,
        build_request=build_chat_completions_request,
        extract_text=extract_chat_completions_text,
        endpoint="https://api.deepseek.com/chat/completions",
    ),
}

NATIVE_PROVIDER = Provider.GOOGLE


def spec_for(provider: Provider | str) -> ProviderSpec:
    return PROVIDERS[Provider(provider)]
