from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from aiscriptwriter.keys.store import KeyStore, default_store_path
from aiscriptwriter.script_engine.gateway import ScriptGateway
from aiscriptwriter.script_engine.model import GenerationMode, Provider


class GeneratorConfig(BaseModel):
    request_timeout: float = Field(default=180.0, gt=0, description="Upper bound for one generation, in seconds")
    key_store_path: Path = Field(default_factory=default_store_path)
    use_env_keys: bool = True
    output_dir: Path = Path("output")
    default_provider: Provider = Provider.OPENAI
    default_mode: GenerationMode = GenerationMode.STRUCTURED_PROMPT
    strict_scene_validation: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_file(cls, path: Optional[Path]) -> "GeneratorConfig":
        if path is None:
            return cls()
        text = Path(path).read_text(encoding="utf-8")
        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            import yaml  # type: ignore[import-not-found]

            payload = yaml.safe_load(text)
        return cls.model_validate(payload or {})

    def build_key_store(self) -> KeyStore:
        return KeyStore(self.key_store_path, use_env=self.use_env_keys)

    def build_gateway(self) -> ScriptGateway:
        return ScriptGateway(
            request_timeout=self.request_timeout,
            strict_scene_validation=self.strict_scene_validation,
        )
