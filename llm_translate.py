"""Command-line front end for the LLM translator.

Translates the given texts through the configured backend and cache, shows the translator
status, or clears the translation cache. Useful for checking a configuration before
starting the game.

Log output goes to the file named by ``GENERAL.LOG_FILE``; only warnings reach the console.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import asdict
from pathlib import Path
from typing import TYPE_CHECKING, Final, NoReturn

from config.loader import ConfigError, ConfigLoader
from core.trans.service import TranslationService
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    from models.cache_models import TranslationStatistics
    from models.config_models import Config
    from models.translation_models import TranslatorStatus

CFG_FILE: Final[str] = "llm_translator.ini"


def check_python_version() -> None:
    """Check if Python version is 3.13 or later.

    Raises:
        RuntimeError: If Python version is below 3.13.
    """
    if sys.version_info < (3, 13):
        msg = "Python 3.13 or later is required"
        raise RuntimeError(msg)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        print(f"\n{message}\n", file=sys.stderr)
        self.print_help(sys.stderr)
        raise SystemExit(2)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed arguments.
    """
    parser = _ArgumentParser(
        description="Translate text with the configured LLM backend and translation cache",
        epilog='Example: python llm_translate.py "こんにちは" "はい"',
    )
    parser.add_argument("texts", nargs="*", metavar="TEXT", help="Text to translate")
    parser.add_argument("--config", dest="config", default=CFG_FILE, metavar="FILE", help="Configuration file")
    parser.add_argument("--provider", dest="provider", metavar="NAME", help="Override API provider")
    parser.add_argument("--api-key", dest="api_key", metavar="KEY", help="Override API key")
    parser.add_argument("--target", dest="target_language", metavar="LANG", help="Override target language")
    parser.add_argument("--status", action="store_true", help="Show translator status and statistics")
    parser.add_argument("--clear-cache", dest="clear_cache", action="store_true", help="Delete the translation cache")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> Config:
    """Load configuration file and apply CLI overrides.

    Raises:
        ConfigError: If configuration file cannot be loaded.
    """
    script_name: str = Path(sys.argv[0]).stem
    return ConfigLoader(
        config_filename=args.config,
        script_name=script_name,
        provider=args.provider,
        api_key=args.api_key,
        target_language=args.target_language,
        debug=args.debug,
    ).config


def print_status(status: TranslatorStatus, stats: TranslationStatistics) -> None:
    print("-" * 50)
    for name, value in asdict(status).items():
        print(f"{name:<18}: {value}")
    print("-" * 50)
    for name, value in asdict(stats).items():
        print(f"{name:<18}: {value}")
    print("-" * 50)


async def run(args: argparse.Namespace, config: Config) -> int:
    """Execute the requested actions.

    Returns:
        int: Process exit status.
    """
    async with TranslationService(config) as service:
        if args.clear_cache:
            removed: bool = await service.clear_cache()
            print(f"Cache cleared ({'file deleted' if removed else 'no cache file'}): {service.get_cache_file_path()}")

        if args.texts and not service.is_enabled():
            print("\nError: translation is not ready.", file=sys.stderr)
            print("Set API.API_KEY or the provider's API key environment variable.", file=sys.stderr)
            return 1

        for text in args.texts:
            translated: str = await service.translate_async(text)
            print(f"{text}\n  -> {translated}")

        if args.status or not (args.texts or args.clear_cache):
            print_status(service.get_status(), service.get_stats())
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Performs the following steps:
    1. Check Python version
    2. Parse command-line arguments
    3. Load configuration and set up logging
    4. Run the requested actions
    """
    check_python_version()
    args: argparse.Namespace = parse_arguments(argv)
    try:
        config: Config = load_config(args)
    except ConfigError as err:
        print("\nError: Failed to load configuration file.", file=sys.stderr)
        print(f"Details: {err}", file=sys.stderr)
        return 1

    LoggerUtils(config.GENERAL.LOG_FILE)
    return asyncio.run(run(args, config))


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nCancelled by user.", file=sys.stderr)
        sys.exit(130)
    except (OSError, RuntimeError, ValueError) as err:
        print(f"\nFatal error: {err}", file=sys.stderr)
        sys.exit(1)
