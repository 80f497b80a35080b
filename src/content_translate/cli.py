# -*- coding: utf-8 -*-
"""
cli.py - Command line access to the translation provider

    content-translate translate --source en --target de "Hello" "World"
    content-translate translate --source en --target de --format markdown --input texts.json
    content-translate usage

Env:
  DEEPL_API_KEY, DEEPL_API_URL, TRANSLATE_CONFIG_PATH, TRANSLATE_TRACE_PATH
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, List, Optional

import aiofiles

from .config import TranslateConfig
from .constants import FORMATS_ALL, TRANSLATE_PRIORITY_DIRECT_TRANSLATION
from .errors import TranslateError
from .provider import TranslationProvider

logger = logging.getLogger(__name__)


async def read_texts(path: str) -> List[Any]:
    async with aiofiles.open(path, "r", encoding="utf-8") as f:
        content = await f.read()
    texts = json.loads(content)
    if not isinstance(texts, list):
        raise ValueError(f"{path} must contain a JSON list")
    return texts


async def run_translate(args: argparse.Namespace, config: TranslateConfig) -> int:
    texts = await read_texts(args.input) if args.input else list(args.texts)
    async with TranslationProvider(config) as provider:
        result = await provider.translate(
            texts,
            args.source,
            args.target,
            priority=args.priority,
            format=args.format,
        )
    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


async def run_usage(args: argparse.Namespace, config: TranslateConfig) -> int:
    async with TranslationProvider(config) as provider:
        used = await provider.usage()
    print(json.dumps({"character_count": used}))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Content translation via DeepL")
    parser.add_argument("--config", "-c", help="YAML config path (translate: section)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_translate = sub.add_parser("translate", help="Translate texts of one format")
    p_translate.add_argument("texts", nargs="*", help="Texts to translate")
    p_translate.add_argument("--input", "-i", help="JSON file with a list of texts")
    p_translate.add_argument("--source", "-s", required=True, help="Source locale (e.g. en)")
    p_translate.add_argument("--target", "-t", required=True, help="Target locale (e.g. de)")
    p_translate.add_argument("--format", "-f", default="plain", choices=FORMATS_ALL)
    p_translate.add_argument("--priority", "-p", type=int, default=TRANSLATE_PRIORITY_DIRECT_TRANSLATION)

    sub.add_parser("usage", help="Show characters used in the current period")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    config = TranslateConfig.load(args.config)
    runner = run_translate if args.command == "translate" else run_usage
    try:
        return asyncio.run(runner(args, config))
    except TranslateError as e:
        logger.error("%s failed (%s): %s", args.command, e.kind, e)
        return 1
    except (OSError, ValueError) as e:
        logger.error("%s failed: %s", args.command, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
