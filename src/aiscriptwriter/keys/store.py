from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from aiscriptwriter.script_engine.model import Provider

logger = logging.getLogger(__name__)

STORAGE_KEYS: Mapping[Provider, str] = MappingProxyType(
    {
        Provider.GOOGLE: "googleApiKey",
        Provider.OPENAI: "openaiApiKey",
        Provider.GROK: "grokApiKey",
        Provider.DEEPSEEK: "deepseekApiKey",
    }
)

ENV_KEYS: Mapping[Provider, str] = MappingProxyType(
    {
        Provider.GOOGLE: "GOOGLE_API_KEY",
        Provider.OPENAI: "OPENAI_API_KEY",
        Provider.GROK: "XAI_API_KEY",
        Provider.DEEPSEEK: "DEEPSEEK_API_KEY",
    }
)


def default_store_path() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / "aiscriptwriter" / "keys.json"


@dataclass(frozen=True)
class ApiKeySet:
    keys: Mapping[Provider, str] = field(default_factory=dict)

    def for_provider(self, provider: Provider | str) -> Optional[str]:
        value = self.keys.get(Provider(provider), "")
        value = value.strip() if isinstance(value, str) else ""
        return value or None

    def with_key(self, provider: Provider | str, key: str) -> "ApiKeySet":
        updated = dict(self.keys)
        updated[Provider(provider)] = key
        return ApiKeySet(keys=updated)

    def configured(self) -> list[Provider]:
        return [provider for provider in Provider if self.for_provider(provider)]

    @classmethod
    def from_env(cls) -> "ApiKeySet":
        return cls(
            keys={
                provider: os.environ[env_name]
                for provider, env_name in ENV_KEYS.items()
                if os.environ.get(env_name)
            }
        )


class KeyStore:
    """Flat JSON file holding one string value per provider key name."""

    def __init__(self, path: Path | None = None, use_env: bool = True) -> None:
        self.path = Path(path) if path is not None else default_store_path()
        self.use_env = use_env

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError:
            logger.warning("Key store %s is not valid JSON; ignoring its contents", self.path)
            return {}
        if not isinstance(payload, dict):
            return {}
        return {str(name): value for name, value in payload.items() if isinstance(value, str)}

    def _write(self, values: Mapping[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(dict(values), indent=2), encoding="utf-8")
        try:
            self.path.chmod(0o600)
        except OSError:
            logger.debug("Could not restrict permissions on %s", self.path)

    def load(self) -> ApiKeySet:
        stored = self._read()
        keys: dict[Provider, str] = dict(ApiKeySet.from_env().keys) if self.use_env else {}
        for provider, name in STORAGE_KEYS.items():
            value = stored.get(name, "")
            if value.strip():
                keys[provider] = value
        return ApiKeySet(keys=keys)

    def save(self, provider: Provider | str, key: str) -> ApiKeySet:
        values = self._read()
        values[STORAGE_KEYS[Provider(provider)]] = key
        self._write(values)
        logger.info("Saved %s API key to %s", Provider(provider).value, self.path)
        return self.load()

    def clear(self, provider: Provider | str) -> ApiKeySet:
        values = self._read()
        if values.pop(STORAGE_KEYS[Provider(provider)], None) is not None:
            self._write(values)
            logger.info("Removed %s API key from %s", Provider(provider).value, self.path)
        return self.load()


def mask(secret: Optional[str]) -> str:
    if not secret:
        return "(not set)"
    if len(secret) <= 8:
        return "*" * len(secret)
    return f"{secret[:4]}…{secret[-4:]}"
