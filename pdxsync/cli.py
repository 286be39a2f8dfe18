#!/usr/bin/env python3
"""
pdx-deepl - keep Paradox localization files in sync using DeepL

Translates new and changed entries of the base language into every
configured target language. Entries without a `#deepl:` annotation are
treated as hand-written and never touched.

Commands:
    sync   - Translate new and stale entries (use --dry-run to only count)
    stats  - Count files, keys and billable characters of the base language
    usage  - Show the DeepL character usage of the API token

Example:
    export API_TOKEN=xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx:fx
    pdx-deepl --config translation-config.json --localization mod/localization sync
"""

import argparse
import json
import logging
import os
import signal
import sys
import threading

from .backend import API_FREE, API_PAID, DeeplBackend
from .config import DEFAULT_CONFIG_FILE, TranslationConfiguration
from .engine import DEFAULT_REQUEST_DELAY, SyncEngine
from .repository import LanguageRepository
from .stats import collect_statistics

logger = logging.getLogger(__name__)

ENV_API_TYPE = "API_TYPE"
ENV_API_TOKEN = "API_TOKEN"
ENV_CONFIG = "CONFIG"
ENV_LOCALIZATION = "LOCALIZATION"


class HelpFormatter(argparse.RawDescriptionHelpFormatter, argparse.ArgumentDefaultsHelpFormatter):
    """Keep the epilog layout and show flag defaults."""


def make_backend(args) -> DeeplBackend:
    return DeeplBackend(token=args.token, api_type=args.api_type)


def cmd_sync(args) -> dict:
    """Sync all target languages."""
    config = TranslationConfiguration.load(args.config)
    repository = LanguageRepository(args.localization)
    backend = None if args.dry_run else make_backend(args)

    if backend is not None:
        usage = backend.usage()
        logger.info("DeepL usage: %d / %d characters", usage.character_count, usage.character_limit)

    cancel_event = threading.Event()
    engine = SyncEngine(
        repository,
        backend,
        config,
        request_delay=args.delay,
        cancel_event=cancel_event,
        dry_run=args.dry_run,
    )

    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: cancel_event.set())
    try:
        summary = engine.run()
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    result = {"status": "ok"}
    result.update(summary.to_dict())
    return result


def cmd_stats(args) -> dict:
    """Statistics of the base language."""
    config = TranslationConfiguration.load(args.config)
    repository = LanguageRepository(args.localization)
    language = repository.load(config.base_language)

    result = {"status": "ok"}
    result.update(collect_statistics(language))
    return result


def cmd_usage(args) -> dict:
    """Character usage of the API token."""
    usage = make_backend(args).usage()
    return {
        "status": "ok",
        "api_type": args.api_type,
        "character_count": usage.character_count,
        "character_limit": usage.character_limit,
        "remaining": usage.remaining,
    }


COMMANDS = {
    "sync": cmd_sync,
    "stats": cmd_stats,
    "usage": cmd_usage,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdx-deepl",
        description="pdx-deepl - Paradox localization sync with DeepL",
        formatter_class=HelpFormatter,
        epilog="""
Environment:
  API_TYPE       default for --api-type
  API_TOKEN      default for --token
  CONFIG         default for --config
  LOCALIZATION   default for --localization

Configuration file (JSON):
  {
    "base-language": "english",
    "target-languages": [{"name": "german", "glossary": ""}],
    "ignore-files": ["credits_l_english.yml"]
  }
        """,
    )
    parser.add_argument("--api-type", "-a", default=os.environ.get(ENV_API_TYPE, API_FREE),
                        choices=[API_FREE, API_PAID], help="DeepL API plan")
    parser.add_argument("--token", "-t", default=None,
                        help="DeepL API token (falls back to $API_TOKEN)")
    parser.add_argument("--config", "-c", default=os.environ.get(ENV_CONFIG, DEFAULT_CONFIG_FILE),
                        help="Translation configuration file")
    parser.add_argument("--localization", "-l", default=os.environ.get(ENV_LOCALIZATION, "."),
                        help="Localization directory containing one folder per language")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    sync_parser = subparsers.add_parser("sync", help="Translate new and changed entries",
                                        formatter_class=HelpFormatter)
    sync_parser.add_argument("--dry-run", "-n", action="store_true",
                             help="Only count what would be translated")
    sync_parser.add_argument("--delay", type=float, default=DEFAULT_REQUEST_DELAY,
                             help="Minimum seconds between DeepL requests")

    subparsers.add_parser("stats", help="Statistics of the base language")
    subparsers.add_parser("usage", help="DeepL character usage")

    return parser


def needs_token(args) -> bool:
    if args.command == "usage":
        return True
    return args.command == "sync" and not args.dry_run


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.token is None:
        args.token = os.environ.get(ENV_API_TOKEN)
    if needs_token(args) and not args.token:
        print("error: an API token is required (--token or $API_TOKEN)\n", file=sys.stderr)
        parser.print_help(sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        result = COMMANDS[args.command](args)
        print(json.dumps(result, indent=2, ensure_ascii=False))
    except Exception as e:
        print(json.dumps({
            "status": "error",
            "error": str(e),
            "error_type": type(e).__name__,
        }), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
