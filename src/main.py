# src/main.py — v2
"""CLI entry point: analyze, speak, cache commands.

Usage:
    agenticad analyze "<description>" [--image PATH] [--sketch PATH]
    agenticad speak "<text>" [--voice ID] [--out FILE]
    agenticad cache stats
    agenticad cache clear [--kind KIND]

Results are printed as JSON on stdout; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import base64
import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Any

from agenticad.cache.models import CACHE_KINDS
from agenticad.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = _load_settings(args.verbose)
    except Exception as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    try:
        return asyncio.run(_run(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except ValueError as exc:
        logger.error("%s", exc)
        return 1
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="agenticad",
        description=f"agenticad v{__version__}: multimodal product design analysis",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- analyze ---
    p_analyze = subparsers.add_parser(
        "analyze", help="Generate a product model from a description",
    )
    p_analyze.add_argument("text", nargs="?", default="", help="Product description")
    p_analyze.add_argument("--image", type=Path, default=None, help="Reference photo")
    p_analyze.add_argument("--sketch", type=Path, default=None, help="Design sketch")
    p_analyze.add_argument(
        "--style", choices=["modern", "traditional", "minimalist", "industrial"],
        default=None, help="Preferred style",
    )
    p_analyze.set_defaults(func=_cmd_analyze)

    # --- speak ---
    p_speak = subparsers.add_parser("speak", help="Synthesize speech")
    p_speak.add_argument("text", help="Text to speak")
    p_speak.add_argument("--voice", default=None, help="Voice ID")
    p_speak.add_argument(
        "--out", type=Path, default=None,
        help="Write decoded audio to this file instead of printing base64",
    )
    p_speak.set_defaults(func=_cmd_speak)

    # --- cache ---
    p_cache = subparsers.add_parser("cache", help="Inspect or reset the cache")
    cache_sub = p_cache.add_subparsers(dest="cache_command", required=True)
    p_stats = cache_sub.add_parser("stats", help="Show cache statistics")
    p_stats.set_defaults(func=_cmd_cache_stats)
    p_clear = cache_sub.add_parser("clear", help="Remove cached entries")
    p_clear.add_argument("--kind", choices=CACHE_KINDS, default=None)
    p_clear.set_defaults(func=_cmd_cache_clear)

    return parser


async def _run(args: argparse.Namespace, settings: Any) -> int:
    from agenticad.api.facade import create_context

    context = create_context(settings)
    try:
        return await args.func(args, context)
    finally:
        await context.close()


async def _cmd_analyze(args: argparse.Namespace, context: Any) -> int:
    """Run generate_model over the given inputs."""
    from agenticad.analysis.normalizer import (
        MultimodalInput,
        PhotoInput,
        SketchInput,
        TextInput,
    )
    from agenticad.api.facade import generate_model
    from agenticad.api.models import GenerationRequest, Preferences

    inputs = MultimodalInput(
        text=TextInput(content=args.text) if args.text.strip() else None,
        photo=PhotoInput(image_data=_read_data_uri(args.image)) if args.image else None,
        sketch=SketchInput(image_data=_read_data_uri(args.sketch)) if args.sketch else None,
    )
    request = GenerationRequest(inputs=inputs, preferences=Preferences(style=args.style))
    response = await generate_model(request, context)
    _print_json(response.model_dump(mode="json"))
    return 0


async def _cmd_speak(args: argparse.Namespace, context: Any) -> int:
    from agenticad.api.facade import synthesize_speech

    audio = await synthesize_speech(args.text, args.voice, context)
    if audio is None:
        logger.error("Speech synthesis unavailable")
        return 1

    if args.out is not None:
        args.out.write_bytes(base64.b64decode(audio))
        _print_json({"written": str(args.out), "bytes": args.out.stat().st_size})
    else:
        _print_json({"audio": audio})
    return 0


async def _cmd_cache_stats(args: argparse.Namespace, context: Any) -> int:
    from agenticad.api.facade import get_cache_stats

    stats = await get_cache_stats(context)
    payload = stats.model_dump(mode="json")
    payload["session"] = context.cache.counters.model_dump(mode="json")
    _print_json(payload)
    return 0


async def _cmd_cache_clear(args: argparse.Namespace, context: Any) -> int:
    from agenticad.api.facade import clear_cache

    removed = await clear_cache(context, args.kind)
    _print_json({"removed": removed, "kind": args.kind or "all"})
    return 0


def _read_data_uri(path: Path) -> str:
    """Read an image file as a ``data:`` URI.

    Raises:
        ValueError: If the file does not exist.
    """
    if not path.is_file():
        raise ValueError(f"File not found: {path}")
    mime = mimetypes.guess_type(path.name)[0] or "image/png"
    data = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime};base64,{data}"


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _load_settings(verbose: bool) -> Any:
    """Load settings and configure logging for CLI usage."""
    from agenticad.config.settings import load_settings
    from agenticad.logging.logger import setup_logging

    settings = load_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    return settings


if __name__ == "__main__":
    sys.exit(main())
