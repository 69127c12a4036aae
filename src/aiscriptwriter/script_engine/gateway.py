from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from aiscriptwriter.keys.store import ApiKeySet

from .classifier import classify_error
from .duration import parse_duration_to_seconds, scenes_for
from .errors import (
    ConfigurationError,
    GenerationBusyError,
    GenerationTimeout,
    ProviderError,
    ScriptGenerationError,
    ValidationError,
)
from .llm import ChatCompletionsTransport, ChatTransport, GeminiTransport
from .model import SCRIPT_TYPES, GenerationRequest, ScriptResult
from .prompts import PromptTemplate, render_user_prompt, template_for
from .providers import PROVIDERS, AuthStyle, ProviderSpec
from .utils import decode_json_payload

logger = logging.getLogger(__name__)

VOICEOVER_KEYS = ("full_voiceover", "fullVoiceover", "loi_dan")
BUSY_MESSAGE = "Đang tạo kịch bản, vui lòng chờ yêu cầu hiện tại hoàn tất."


class ScriptGateway:
    """Sends a generation request to one provider and normalizes the answer.

    Only one generation may be in flight at a time; a second caller gets
    ``GenerationBusyError`` instead of waiting behind the first.
    """

    def __init__(
        self,
        transports: Optional[Mapping[AuthStyle, ChatTransport]] = None,
        providers: Optional[Mapping[Any, ProviderSpec]] = None,
        request_timeout: float = 180.0,
        strict_scene_validation: bool = False,
    ) -> None:
        self.transports = dict(transports) if transports else {
            AuthStyle.BEARER: ChatCompletionsTransport(request_timeout=request_timeout),
            AuthStyle.API_KEY: GeminiTransport(),
        }
        self.providers = dict(providers) if providers else dict(PROVIDERS)
        self.request_timeout = request_timeout
        self.strict_scene_validation = strict_scene_validation
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def generate_script(
        self,
        request: GenerationRequest,
        api_keys: ApiKeySet,
        prompt_template: Optional[PromptTemplate] = None,
    ) -> ScriptResult:
        if self._lock.locked():
            raise GenerationBusyError(BUSY_MESSAGE, user_message=BUSY_MESSAGE)
        async with self._lock:
            try:
                return await self._generate(request, api_keys, prompt_template)
            except ScriptGenerationError as exc:
                exc.user_message = classify_error(exc, request.provider)
                logger.error("Script generation via %s failed: %s", request.provider.value, exc)
                raise
            except Exception as exc:
                wrapped = ProviderError(str(exc) or type(exc).__name__)
                wrapped.user_message = classify_error(exc, request.provider)
                logger.exception("Unexpected failure talking to %s", request.provider.value)
                raise wrapped from exc

    async def _generate(
        self,
        request: GenerationRequest,
        api_keys: ApiKeySet,
        prompt_template: Optional[PromptTemplate],
    ) -> ScriptResult:
        spec = self.providers[request.provider]
        api_key = self._preflight(request, api_keys, spec)

        total_seconds = parse_duration_to_seconds(request.duration_text)
        scene_count = max(1, scenes_for(total_seconds)) if total_seconds else None

        template = prompt_template or template_for(request.mode)
        user_prompt = render_user_prompt(request, scene_count, total_seconds)
        outbound = spec.build_request(spec.model, template, user_prompt, request.mode)

        transport = self.transports[spec.auth_style]
        try:
            raw = await asyncio.wait_for(
                transport.send(spec, api_key, outbound),
                timeout=self.request_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise GenerationTimeout(
                f"{spec.display_name} did not respond within {self.request_timeout:.0f}s"
            ) from exc

        text = spec.extract_text(raw)
        payload = decode_json_payload(text, source=spec.display_name, logger=logger)
        result = self._normalize(payload, request, spec)
        if self.strict_scene_validation:
            _check_scene_numbers(result, scene_count, spec)
        logger.info("Received %d scenes from %s", len(result.scenes), spec.display_name)
        return result

    def _preflight(self, request: GenerationRequest, api_keys: ApiKeySet, spec: ProviderSpec) -> str:
        api_key = api_keys.for_provider(request.provider)
        if not api_key:
            raise ConfigurationError(
                f"Chưa có {spec.display_name} API key. Vui lòng vào tab Profile để thêm key."
            )
        if not request.idea.strip():
            raise ConfigurationError("Please enter a content idea.")
        if request.script_type not in SCRIPT_TYPES:
            raise ConfigurationError(f"Unknown script type: {request.script_type}")
        if request.duration_text and request.duration_text.strip():
            if parse_duration_to_seconds(request.duration_text) is None:
                raise ConfigurationError("Invalid duration format.")
        return api_key

    def _normalize(self, payload: Any, request: GenerationRequest, spec: ProviderSpec) -> ScriptResult:
        invalid = ValidationError(
            f"Invalid response format from {spec.provider.value}. "
            + (
                "Expected a JSON object with 'full_voiceover' and 'scenes'."
                if request.mode.has_voiceover
                else "Expected a JSON object with a 'scenes' array."
            )
        )
        if not isinstance(payload, dict) or not isinstance(payload.get("scenes"), list):
            raise invalid

        data: dict[str, Any] = {"scenes": payload["scenes"]}
        if request.mode.has_voiceover:
            voiceover = next(
                (payload[key] for key in VOICEOVER_KEYS if isinstance(payload.get(key), str)),
                None,
            )
            if voiceover is None:
                raise invalid
            data["full_voiceover"] = voiceover

        try:
            return ScriptResult.from_payload(data, request.mode)
        except PydanticValidationError as exc:
            logger.error("Invalid scene payload from %s: %s", spec.display_name, exc)
            raise ValidationError(f"{invalid} Scene entries are malformed: {exc.error_count()} error(s).") from exc
        except ValidationError as exc:
            logger.error("Scene prompts from %s do not match %s mode: %s", spec.display_name, request.mode.value, exc)
            raise ValidationError(f"{invalid} {exc}") from exc


def _check_scene_numbers(result: ScriptResult, expected: Optional[int], spec: ProviderSpec) -> None:
    numbers = result.scene_numbers
    if numbers != list(range(1, len(numbers) + 1)):
        raise ValidationError(f"{spec.display_name} returned non-contiguous scene numbers: {numbers}")
    if expected is not None and len(numbers) != expected:
        raise ValidationError(
            f"{spec.display_name} returned {len(numbers)} scenes but {expected} were requested"
        )
