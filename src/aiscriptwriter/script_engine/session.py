from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from aiscriptwriter.keys.store import ApiKeySet, KeyStore

from .errors import ScriptGenerationError
from .gateway import ScriptGateway
from .model import GenerationRequest, Provider, ScriptResult
from .prompts import PromptTemplate

logger = logging.getLogger(__name__)


@dataclass
class GeneratorSession:
    """State held by the front end between generations.

    Keys are resolved here and handed to the gateway explicitly, so the
    gateway never reads the key store on its own.
    """

    gateway: ScriptGateway
    key_store: KeyStore
    api_keys: ApiKeySet = field(default_factory=ApiKeySet)
    last_result: Optional[ScriptResult] = None
    last_error: Optional[str] = None

    @classmethod
    def open(cls, gateway: ScriptGateway, key_store: KeyStore) -> "GeneratorSession":
        return cls(gateway=gateway, key_store=key_store, api_keys=key_store.load())

    @property
    def is_busy(self) -> bool:
        return self.gateway.busy

    def update_key(self, provider: Provider | str, key: str) -> None:
        self.api_keys = self.key_store.save(provider, key)

    async def generate(
        self,
        request: GenerationRequest,
        prompt_template: Optional[PromptTemplate] = None,
    ) -> Optional[ScriptResult]:
        """Run one generation and record its outcome.

        Returns the result, or ``None`` with ``last_error`` set when it failed.
        """
        if not self.is_busy:
            self.last_result = None
            self.last_error = None
        try:
            result = await self.gateway.generate_script(request, self.api_keys, prompt_template)
        except ScriptGenerationError as exc:
            self.last_error = exc.user_message or str(exc)
            return None
        self.last_result = result
        self.last_error = None
        return result
