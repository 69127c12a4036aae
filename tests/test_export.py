from __future__ import annotations

import json

from aiscriptwriter.export.writer import (
    PROMPTS_FILENAME,
    SCRIPT_FILENAME,
    VOICEOVER_FILENAME,
    render_prompts_text,
    write_artifacts,
)
from aiscriptwriter.script_engine.model import ScriptResult


def _voiceover_result() -> ScriptResult:
    return ScriptResult.from_payload(
        {
            "full_voiceover": "Lời dẫn liền mạch.",
            "scenes": [
                {"scene": 1, "description": "Mở đầu", "prompt": "A foggy harbor"},
                {"scene": 2, "description": "Kết thúc", "prompt": "Sunrise over the sea"},
            ],
        }
    )


def test_prompts_text_has_one_block_per_scene():
    text = render_prompts_text(_voiceover_result())
    assert text == "SCENE 1:\nA foggy harbor\n\nSCENE 2:\nSunrise over the sea\n\n"


def test_structured_prompts_are_flattened():
    result = ScriptResult.from_payload(
        {
            "scenes": [
                {
                    "scene": 1,
                    "description": "Mở đầu",
                    "prompt": {
                        "subject": "a fox",
                        "action": "running",
                        "setting": "snow",
                        "camera_shot": "Low angle shot",
                        "style": "cinematic",
                        "sound": "crunching snow",
                    },
                }
            ]
        }
    )
    assert render_prompts_text(result) == (
        "SCENE 1:\nLow angle shot of a fox running in snow, cinematic. Ambient sounds of crunching snow.\n\n"
    )


def test_write_artifacts(tmp_path):
    result = _voiceover_result()

    written = write_artifacts(result, tmp_path / "run")

    assert [path.name for path in written] == [PROMPTS_FILENAME, VOICEOVER_FILENAME, SCRIPT_FILENAME]
    assert (tmp_path / "run" / VOICEOVER_FILENAME).read_text(encoding="utf-8") == "Lời dẫn liền mạch."
    payload = json.loads((tmp_path / "run" / SCRIPT_FILENAME).read_text(encoding="utf-8"))
    assert ScriptResult.from_payload(payload) == result


def test_voiceover_file_skipped_without_voiceover(tmp_path):
    result = ScriptResult.from_payload({"scenes": [{"scene": 1, "description": "x", "prompt": "y"}]})
    names = [path.name for path in write_artifacts(result, tmp_path)]
    assert VOICEOVER_FILENAME not in names
