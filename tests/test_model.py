from __future__ import annotations

import json

import pytest

from aiscriptwriter.script_engine.errors import ValidationError
from aiscriptwriter.script_engine.model import GenerationMode, Scene, ScriptResult, StructuredPrompt

STRUCTURED_PAYLOAD = {
    "scenes": [
        {
            "scene": 1,
            "description": "Nếu như loài người có thể trò chuyện với động vật...",
            "prompt": {
                "subject": "A young biologist",
                "action": "kneeling beside a curious wolf",
                "setting": "a misty pine forest at dawn",
                "camera_shot": "Slow dolly-in medium shot",
                "style": "Cinematic, natural light, 35mm film grain",
                "sound": "birdsong and wind through the pines",
            },
        },
        {
            "scene": 2,
            "description": "Thế giới bắt đầu thay đổi.",
            "prompt": {
                "subject": "A crowded city square",
                "action": "pigeons gathering in patterns",
                "setting": "overcast afternoon",
                "camera_shot": "High aerial drone shot",
                "style": "Documentary realism",
                "sound": "distant traffic and fluttering wings",
            },
        },
    ]
}

VOICEOVER_PAYLOAD = {
    "full_voiceover": "Nếu như loài người có thể trò chuyện với động vật. Thế giới bắt đầu thay đổi.",
    "scenes": [
        {"scene": 1, "description": "Nếu như loài người có thể trò chuyện với động vật.", "prompt": "A biologist and a wolf in a misty forest"},
        {"scene": 2, "description": "Thế giới bắt đầu thay đổi.", "prompt": "Aerial shot of pigeons over a city square"},
    ],
}


def test_structured_payload_round_trip():
    result = ScriptResult.from_payload(STRUCTURED_PAYLOAD)
    assert isinstance(result.scenes[0].visual_prompt, StructuredPrompt)
    assert result.full_voiceover is None
    assert result.to_payload() == STRUCTURED_PAYLOAD
    assert ScriptResult.from_payload(json.loads(json.dumps(result.to_payload()))) == result


def test_voiceover_payload_round_trip():
    result = ScriptResult.from_payload(VOICEOVER_PAYLOAD)
    assert isinstance(result.scenes[1].visual_prompt, str)
    assert result.to_payload() == VOICEOVER_PAYLOAD
    assert ScriptResult.from_payload(result.to_payload()) == result


def test_structured_prompt_render_matches_copy_format():
    scene = ScriptResult.from_payload(STRUCTURED_PAYLOAD).scenes[0]
    assert scene.prompt_text == (
        "Slow dolly-in medium shot of A young biologist kneeling beside a curious wolf in "
        "a misty pine forest at dawn, Cinematic, natural light, 35mm film grain. "
        "Ambient sounds of birdsong and wind through the pines."
    )


def test_scene_accepts_field_names():
    scene = Scene(scene_number=3, description="x", visual_prompt="plain prompt")
    assert scene.model_dump(by_alias=True) == {"scene": 3, "description": "x", "prompt": "plain prompt"}
    assert scene.prompt_text == "plain prompt"


def test_from_payload_accepts_the_variant_matching_the_mode():
    structured = ScriptResult.from_payload(STRUCTURED_PAYLOAD, GenerationMode.STRUCTURED_PROMPT)
    voiceover = ScriptResult.from_payload(VOICEOVER_PAYLOAD, GenerationMode.VOICEOVER)

    assert isinstance(structured.scenes[0].visual_prompt, StructuredPrompt)
    assert isinstance(voiceover.scenes[0].visual_prompt, str)


def test_structured_mode_rejects_string_prompts():
    payload = {"scenes": [{"scene": 1, "description": "x", "prompt": "just a string"}]}

    with pytest.raises(ValidationError) as excinfo:
        ScriptResult.from_payload(payload, GenerationMode.STRUCTURED_PROMPT)

    assert "scenes [1]" in str(excinfo.value)


def test_voiceover_mode_rejects_object_prompts():
    payload = {"full_voiceover": STRUCTURED_PAYLOAD["scenes"][0]["description"], **STRUCTURED_PAYLOAD}

    with pytest.raises(ValidationError):
        ScriptResult.from_payload(payload, GenerationMode.VOICEOVER)


def test_voiceover_mode_requires_full_voiceover():
    payload = {"scenes": VOICEOVER_PAYLOAD["scenes"]}

    with pytest.raises(ValidationError):
        ScriptResult.from_payload(payload, GenerationMode.VOICEOVER)
