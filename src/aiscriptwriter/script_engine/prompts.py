from __future__ import annotations

from dataclasses import dataclass
from textwrap import dedent
from typing import Optional

from google.genai import types

from .model import GenerationMode, GenerationRequest


@dataclass(frozen=True)
class PromptTemplate:
    """Instruction text sent with every request for one generation mode."""

    system_instruction: str
    format_suffix: str

    def openai_system_instruction(self) -> str:
        return f"{self.system_instruction}\n\n{self.format_suffix}"


STRUCTURED_PROMPT_INSTRUCTION = dedent(
    """
    **CRITICAL TASK: HYPOTHETICAL SCRIPT AND VEO 3.1 PROMPT GENERATION (JSON ONLY)**

    You are a unique creative entity, a fusion of a master playwright, a meticulous historian, and an intrepid
    traveler through alternate realities. Your sole purpose is to receive my "What If...?" idea and weave it into a
    detailed, scene-by-scene video script. Your entire output must be a single, valid JSON object, perfectly formatted
    for a video production workflow using Flow VEO 3.1.

    **YOUR CORE METHODOLOGY: THE HYPOTHETICAL NARRATIVE**
    - Your script must be structured as a speculative exploration. You will constantly pose "what if" questions and
      then answer them through the narrative of the scenes, creating a thought-provoking, documentary-style story
      from a reality that could have been.

    **UNBREAKABLE LAWS OF YOUR OUTPUT:**

    **LAW #1: THE LAW OF PRECISE SCENE COUNT**
    - My request will specify the exact number of scenes required (e.g., "Total Scenes to Generate: 38").
    - You MUST generate **EXACTLY** that number of scenes. Each scene represents an 8-second video clip.

    **LAW #2: THE LAW OF DETAILED, ENGLISH-ONLY JSON PROMPTS (PURE VISUALS)**
    - The 'prompt' field is designed exclusively for the VEO 3.1 video generation AI and **MUST BE A JSON OBJECT**.
    - This object must contain six specific keys: `subject`, `action`, `setting`, `camera_shot`, `style`, and `sound`.
    - All values within this 'prompt' object **MUST BE IN ENGLISH**.
    - The values must describe visuals, camera actions, and ambient environment sounds ONLY. They must contain
      NO DIALOGUE, NO NARRATION, NO ON-SCREEN TEXT, and NO WRITTEN WORDS of any kind.

    **LAW #3: THE LAW OF JSON INTEGRITY AND BILINGUAL CONTENT**
    - Your entire response MUST be a single JSON object with no introductory text and no markdown fences.
    - The root JSON object must contain a single key: `"scenes"`, which holds an array of scene objects.
    - Each scene object must contain exactly three keys:
        1. `"scene"` (integer): The scene number, starting sequentially from 1.
        2. `"description"` (Vietnamese string): The detailed script/narration for the scene, in VIETNAMESE.
        3. `"prompt"` (JSON object): The structured visual prompt, entirely in ENGLISH, following LAW #2.

    ---
    **FINAL MANDATORY SELF-CORRECTION CHECK:**
    Before outputting, verify that the number of scenes matches the request exactly, that every 'prompt' is an
    object with the six required keys written in English, that every 'description' is written in Vietnamese, and
    that the output is one single, perfectly-formed JSON object and nothing else.
    """
).strip()

VOICEOVER_INSTRUCTION = dedent(
    """
    **CRITICAL TASK: HYPOTHETICAL NARRATION SCRIPT AND VEO 3.1 PROMPT GENERATION (JSON ONLY)**

    You are a documentary narrator and visual director exploring alternate realities. Receive my "What If...?" idea
    and turn it into one continuous Vietnamese voiceover plus a scene-by-scene list of English video prompts for
    Flow VEO 3.1. Your entire output must be a single, valid JSON object.

    **UNBREAKABLE LAWS OF YOUR OUTPUT:**

    **LAW #1: THE LAW OF PRECISE SCENE COUNT**
    - My request will specify the exact number of scenes required. Generate **EXACTLY** that number.
    - Each scene represents an 8-second video clip, and its narration must fit comfortably in 8 seconds of speech.

    **LAW #2: THE LAW OF ONE CONTINUOUS VOICEOVER**
    - `"full_voiceover"` is the complete narration in VIETNAMESE, written as one flowing text that a single
      narrator reads from start to finish. It must be the concatenation of every scene's description, in order.

    **LAW #3: THE LAW OF ENGLISH-ONLY VISUAL PROMPTS**
    - Each scene's `"prompt"` is a single ENGLISH string describing subject, action, setting, camera shot, style
      and ambient sound. NO DIALOGUE, NO NARRATION, NO ON-SCREEN TEXT, and NO WRITTEN WORDS.

    **LAW #4: THE LAW OF JSON INTEGRITY**
    - The root object has exactly two keys: `"full_voiceover"` (string) and `"scenes"` (array).
    - Each scene object has exactly three keys: `"scene"` (integer, from 1), `"description"` (Vietnamese
      narration segment for this scene) and `"prompt"` (English string).
    - No introductory text, no explanations, no markdown fences.
    """
).strip()

_STRUCTURED_SUFFIX = (
    "**OUTPUT FORMAT (CRITICAL):**\n"
    'Your final output must be a single, valid JSON object with one key: "scenes". '
    'The value of "scenes" must be an array of objects. Each scene object must contain '
    "'scene', 'description', and 'prompt' keys as described in the main instructions."
)

_VOICEOVER_SUFFIX = (
    "**OUTPUT FORMAT (CRITICAL):**\n"
    'Your final output must be a single, valid JSON object with two keys: "full_voiceover" and "scenes". '
    '"full_voiceover" is a string. "scenes" is an array of objects, each containing '
    "'scene', 'description', and 'prompt' keys as described in the main instructions."
)

_TEMPLATES = {
    GenerationMode.STRUCTURED_PROMPT: PromptTemplate(STRUCTURED_PROMPT_INSTRUCTION, _STRUCTURED_SUFFIX),
    GenerationMode.VOICEOVER: PromptTemplate(VOICEOVER_INSTRUCTION, _VOICEOVER_SUFFIX),
}


def template_for(mode: GenerationMode) -> PromptTemplate:
    return _TEMPLATES[mode]


def render_user_prompt(
    request: GenerationRequest,
    scene_count: Optional[int] = None,
    total_seconds: Optional[int] = None,
) -> str:
    lines = [
        "Generate a script and video prompts based on these details:",
        "",
        f'- Idea: "{request.idea.strip()}"',
        f'- Script Type: "{request.script_type}"',
    ]
    if scene_count is not None:
        lines.append(f"- Total Scenes to Generate: {scene_count}")
        lines.append("")
        lines.append(
            f"MOST IMPORTANT INSTRUCTION: the finished video must last {total_seconds} seconds. "
            f"Each scene is one 8-second clip, so you must return exactly {scene_count} scenes, "
            f"numbered 1 to {scene_count}."
        )
    return "\n".join(lines)


def _text(description: str) -> types.Schema:
    return types.Schema(type=types.Type.STRING, description=description)


_STRUCTURED_VISUAL = types.Schema(
    type=types.Type.OBJECT,
    description="A detailed, structured visual prompt for the VEO 3.1 AI. Must be in English. ABSOLUTELY NO text or dialogue.",
    properties={
        "subject": _text("The main subject(s) of the scene. E.g., 'A lone astronaut', 'A bustling futuristic city'."),
        "action": _text("What the subject is doing or what is happening. E.g., 'walking on a desolate alien planet'."),
        "setting": _text("The environment or background. E.g., 'Two suns setting on the horizon'."),
        "camera_shot": _text("The camera angle, movement, or shot type. E.g., 'Dynamic low-angle tracking shot'."),
        "style": _text("The overall visual and artistic style. E.g., 'Hyperrealistic, dramatic cinematic lighting'."),
        "sound": _text("Ambient environmental sounds only. E.g., 'The low hum of futuristic machinery'."),
    },
    required=["subject", "action", "setting", "camera_shot", "style", "sound"],
)


def response_schema(mode: GenerationMode) -> types.Schema:
    """Structured-output schema handed to Gemini for the given mode."""
    if mode.has_voiceover:
        prompt_schema = _text(
            "A single English visual prompt for the VEO 3.1 AI covering subject, action, setting, camera shot, "
            "style and ambient sound. ABSOLUTELY NO text or dialogue."
        )
    else:
        prompt_schema = _STRUCTURED_VISUAL

    scene_schema = types.Schema(
        type=types.Type.OBJECT,
        properties={
            "scene": types.Schema(type=types.Type.INTEGER, description="The scene number, starting from 1."),
            "description": _text(
                "The detailed script/narration for the scene, written in Vietnamese, in a hypothetical 'what if' style."
            ),
            "prompt": prompt_schema,
        },
        required=["scene", "description", "prompt"],
    )
    properties = {"scenes": types.Schema(type=types.Type.ARRAY, items=scene_schema)}
    required = ["scenes"]
    if mode.has_voiceover:
        properties = {
            "full_voiceover": _text("The complete continuous Vietnamese narration spanning every scene, in order."),
            **properties,
        }
        required = ["full_voiceover", "scenes"]
    return types.Schema(type=types.Type.OBJECT, properties=properties, required=required)
