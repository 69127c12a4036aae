from __future__ import annotations

import abc
import asyncio
import logging
from typing import Any, Callable, Optional

import httpx
import requests
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .errors import GenerationTimeout, ParseError, ProviderError, TransportError
from .providers import ProviderSpec

logger = logging.getLogger(__name__)


class ChatTransport(abc.ABC):
    """Sends one prepared request to a provider and returns its raw response."""

    @abc.abstractmethod
    async def send(self, spec: ProviderSpec, api_key: str, request: dict[str, Any]) -> Any:
        raise NotImplementedError


class ChatCompletionsTransport(ChatTransport):
    """REST client shared by every OpenAI-compatible provider."""

    def __init__(self, session: Optional[requests.Session] = None, request_timeout: float = 120.0) -> None:
        self.session = session or requests.Session()
        self.request_timeout = request_timeout

    async def send(self, spec: ProviderSpec, api_key: str, request: dict[str, Any]) -> Any:
        return await asyncio.to_thread(self._post, spec, api_key, request)

    def _headers(self, api_key: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def _post(self, spec: ProviderSpec, api_key: str, request: dict[str, Any]) -> Any:
        if not spec.endpoint:
            raise TransportError(f"{spec.display_name} has no REST endpoint configured")
        logger.info("Requesting %s chat completion (model=%s)", spec.display_name, spec.model)
        try:
            response = self.session.post(
                spec.endpoint,
                headers=self._headers(api_key),
                json=request,
                timeout=self.request_timeout,
            )
        except requests.Timeout as exc:
            raise GenerationTimeout(
                f"{spec.display_name} did not respond within {self.request_timeout:.0f}s"
            ) from exc
        except requests.ConnectionError as exc:
            raise TransportError(f"Failed to fetch {spec.endpoint}: {exc}") from exc
        except requests.RequestException as exc:
            raise TransportError(f"Request to {spec.endpoint} failed: {exc}") from exc

        if not response.ok:
            raise ProviderError(_error_message(response), status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise ParseError(f"{spec.display_name} returned a non-JSON body") from exc


def _error_message(response: requests.Response) -> str:
    fallback = f"HTTP error! status: {response.status_code}"
    try:
        payload = response.json()
    except ValueError:
        return fallback
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    return fallback


ClientFactory = Callable[[str], Any]


class GeminiTransport(ChatTransport):
    """Structured-output call through the Gemini SDK."""

    def __init__(self, client_factory: Optional[ClientFactory] = None) -> None:
        self._client_factory = client_factory or (lambda api_key: genai.Client(api_key=api_key))
        self._clients: dict[str, Any] = {}

    async def send(self, spec: ProviderSpec, api_key: str, request: dict[str, Any]) -> Any:
        client = self._client(api_key)
        config = types.GenerateContentConfig(
            system_instruction=request["system_instruction"],
            response_mime_type="application/json",
            response_schema=request.get("response_schema"),
        )
        logger.info("Requesting %s structured generation (model=%s)", spec.display_name, request["model"])
        try:
            return await client.aio.models.generate_content(
                model=request["model"],
                contents=request["contents"],
                config=config,
            )
        except genai_errors.APIError as exc:
            raise ProviderError(str(exc), status_code=getattr(exc, "code", None)) from exc
        except httpx.TimeoutException as exc:
            raise GenerationTimeout(f"{spec.display_name} did not respond in time") from exc
        except httpx.TransportError as exc:
            raise TransportError(f"Failed to fetch {spec.display_name}: {exc}") from exc

    def _client(self, api_key: str) -> Any:
        # One SDK client per key; a replaced key gets a fresh client.
        client = self._clients.get(api_key)
        if client is None:
            client = self._clients[api_key] = self._client_factory(api_key)
        return client
