from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from .config import GeneratorConfig
from .export.writer import write_artifacts
from .keys.store import mask
from .script_engine.duration import DURATION_OPTIONS, SCENE_DURATION_SECONDS
from .script_engine.model import (
    DEFAULT_SCRIPT_TYPE,
    SCRIPT_TYPES,
    GenerationMode,
    GenerationRequest,
    Provider,
    ScriptResult,
)
from .script_engine.providers import PROVIDERS
from .script_engine.session import GeneratorSession


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Turn a 'what if' idea into a scene-by-scene video script with VEO prompts."
    )
    parser.add_argument("--config", type=Path, help="Optional path to configuration JSON/YAML")
    parser.add_argument("--log-level", help="Logging level (defaults to the config value)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate a script from an idea")
    generate.add_argument("idea", help="The 'what if' idea to develop")
    generate.add_argument(
        "--type",
        dest="script_type",
        default=DEFAULT_SCRIPT_TYPE,
        choices=SCRIPT_TYPES,
        help="Script type label",
    )
    generate.add_argument("--duration", help="Target video length, e.g. '5 phút' or '90s'")
    generate.add_argument(
        "--provider",
        choices=[provider.value for provider in Provider],
        help="LLM provider (defaults to the config value)",
    )
    generate.add_argument(
        "--mode",
        choices=[mode.value for mode in GenerationMode],
        help="structured_prompt: JSON prompt per scene; voiceover: one narration plus plain prompts",
    )
    generate.add_argument("--output-dir", type=Path, help="Directory for the downloadable artifacts")
    generate.add_argument(
        "--strict",
        action="store_true",
        help="Reject responses whose scene count or numbering does not match the request",
    )
    generate.add_argument("--no-write", action="store_true", help="Print the script without writing files")

    keys = subparsers.add_parser("keys", help="Manage stored API keys")
    key_actions = keys.add_subparsers(dest="action", required=True)
    key_set = key_actions.add_parser("set", help="Store an API key")
    key_set.add_argument("provider", choices=[provider.value for provider in Provider])
    key_set.add_argument("key")
    key_clear = key_actions.add_parser("clear", help="Remove a stored API key")
    key_clear.add_argument("provider", choices=[provider.value for provider in Provider])
    key_actions.add_parser("show", help="List configured keys (masked)")

    subparsers.add_parser("options", help="List script types, durations and providers")
    return parser


def _print_result(result: ScriptResult) -> None:
    if result.full_voiceover:
        print("=== Voiceover ===")
        print(result.full_voiceover)
        print()
    for scene in result.scenes:
        print(f"--- Cảnh {scene.scene_number} ---")
        print(scene.description)
        print(f"Prompt: {scene.prompt_text}")
        print()


def _run_generate(args: argparse.Namespace, config: GeneratorConfig) -> int:
    if args.strict:
        config = config.model_copy(update={"strict_scene_validation": True})
    session = GeneratorSession.open(config.build_gateway(), config.build_key_store())
    request = GenerationRequest(
        idea=args.idea,
        script_type=args.script_type,
        duration_text=args.duration,
        provider=Provider(args.provider) if args.provider else config.default_provider,
        mode=GenerationMode(args.mode) if args.mode else config.default_mode,
    )
    print("AI đang viết, vui lòng chờ...", file=sys.stderr)
    result = asyncio.run(session.generate(request))
    if result is None:
        print(session.last_error, file=sys.stderr)
        return 1

    _print_result(result)
    if not args.no_write:
        output_dir = args.output_dir or config.output_dir
        for path in write_artifacts(result, output_dir):
            print(f"Wrote {path}")
    return 0


def _run_keys(args: argparse.Namespace, config: GeneratorConfig) -> int:
    store = config.build_key_store()
    if args.action == "set":
        if not args.key.strip():
            print("API key cannot be empty", file=sys.stderr)
            return 2
        store.save(args.provider, args.key.strip())
        print("Đã lưu!")
        return 0
    if args.action == "clear":
        store.clear(args.provider)
        print(f"Removed {args.provider} key")
        return 0
    api_keys = store.load()
    for provider, spec in PROVIDERS.items():
        print(f"{spec.display_name:<14} {mask(api_keys.for_provider(provider))}")
    return 0


def _run_options() -> int:
    print("Script types:")
    for script_type in SCRIPT_TYPES:
        print(f"  {script_type}")
    print(f"Durations (each scene is {SCENE_DURATION_SECONDS}s):")
    for option in DURATION_OPTIONS:
        print(f"  {option}")
    print("Providers:")
    for provider, spec in PROVIDERS.items():
        print(f"  {provider.value:<9} {spec.display_name} ({spec.model})")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    config = GeneratorConfig.from_file(args.config)
    logging.basicConfig(
        level=(args.log_level or config.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "generate":
        return _run_generate(args, config)
    if args.command == "keys":
        return _run_keys(args, config)
    return _run_options()


if __name__ == "__main__":
    raise SystemExit(main())
