from __future__ import annotations

from enum import Enum
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import ValidationError

SCRIPT_TYPES: tuple[str, ...] = (
    "KH Viễn tưởng / Triết học",
    "Lịch sử Giả tưởng",
    "Kinh dị / Sinh tồn",
    "Thảm họa Tự nhiên",
    "Tiền sử / Huyền bí",
    "Xã hội / Chính trị",
)

DEFAULT_SCRIPT_TYPE = SCRIPT_TYPES[0]


class Provider(str, Enum):
    GOOGLE = "google"
    OPENAI = "openai"
    GROK = "grok"
    DEEPSEEK = "deepseek"


class GenerationMode(str, Enum):
    """Selects the output schema and the instruction template."""

    STRUCTURED_PROMPT = "structured_prompt"
    VOICEOVER = "voiceover"

    @property
    def has_voiceover(self) -> bool:
        return self is GenerationMode.VOICEOVER


class StructuredPrompt(BaseModel):
    """Six-field visual prompt for the video model, always in English."""

    subject: str
    action: str
    setting: str
    camera_shot: str
    style: str
    sound: str

    def render(self) -> str:
        return (
            f"{self.camera_shot} of {self.subject} {self.action} in {self.setting}, "
            f"{self.style}. Ambient sounds of {self.sound}."
        )


class Scene(BaseModel):
    """One 8-second clip: narration plus the prompt used to render it."""

    model_config = ConfigDict(populate_by_name=True)

    scene_number: int = Field(alias="scene", ge=1)
    description: str = Field(description="Vietnamese narration or summary for the scene")
    visual_prompt: Union[StructuredPrompt, str] = Field(alias="prompt")

    @property
    def prompt_text(self) -> str:
        if isinstance(self.visual_prompt, StructuredPrompt):
            return self.visual_prompt.render()
        return self.visual_prompt


class ScriptResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_voiceover: Optional[str] = None
    scenes: List[Scene]

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_payload(
        cls,
        payload: Mapping[str, Any],
        mode: Optional[GenerationMode] = None,
    ) -> "ScriptResult":
        """Parse the wire shape; with a mode, each prompt must use that mode's variant."""
        result = cls.model_validate(payload)
        if mode is None:
            return result
        if mode.has_voiceover and result.full_voiceover is None:
            raise ValidationError("Voiceover mode requires a 'full_voiceover' string")
        expected = str if mode.has_voiceover else StructuredPrompt
        mismatched = [scene.scene_number for scene in result.scenes if not isinstance(scene.visual_prompt, expected)]
        if mismatched:
            kind = "a plain string" if mode.has_voiceover else "an object"
            raise ValidationError(
                f"Scene prompts must be {kind} in {mode.value} mode; scenes {mismatched} are not"
            )
        return result

    @property
    def scene_numbers(self) -> list[int]:
        return [scene.scene_number for scene in self.scenes]


class GenerationRequest(BaseModel):
    idea: str
    script_type: str = DEFAULT_SCRIPT_TYPE
    duration_text: Optional[str] = None
    provider: Provider = Provider.OPENAI
    mode: GenerationMode = GenerationMode.STRUCTURED_PROMPT
