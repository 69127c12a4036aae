from __future__ import annotations

import json
import logging
from pathlib import Path

from aiscriptwriter.script_engine.model import ScriptResult

logger = logging.getLogger(__name__)

PROMPTS_FILENAME = "generated_prompts.txt"
VOICEOVER_FILENAME = "generated_voiceover.txt"
SCRIPT_FILENAME = "generated_script.json"


def render_prompts_text(result: ScriptResult) -> str:
    return "".join(f"SCENE {scene.scene_number}:\n{scene.prompt_text}\n\n" for scene in result.scenes)


def render_voiceover_text(result: ScriptResult) -> str:
    return result.full_voiceover or ""


def write_artifacts(result: ScriptResult, output_dir: Path) -> list[Path]:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []

    prompts_path = output_dir / PROMPTS_FILENAME
    prompts_path.write_text(render_prompts_text(result), encoding="utf-8")
    written.append(prompts_path)

    if result.full_voiceover is not None:
        voiceover_path = output_dir / VOICEOVER_FILENAME
        voiceover_path.write_text(render_voiceover_text(result), encoding="utf-8")
        written.append(voiceover_path)

    script_path = output_dir / SCRIPT_FILENAME
    script_path.write_text(
        json.dumps(result.to_payload(), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    written.append(script_path)

    logger.info("Wrote %d artifact(s) to %s", len(written), output_dir)
    return written
