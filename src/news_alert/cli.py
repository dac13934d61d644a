# SPDX-License-Identifier: MIT
# src/news_alert/cli.py
"""
Command-line entry point (`news-alert`).
"""
import argparse
import json
import logging
import signal
import sys
from typing import List, Optional

import yaml

from .config import Settings
from .filtering.matcher import KeywordMatcher, contains_any
from .keywords import load_keywords
from .pipeline.app import NewsAlertSystem

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="news-alert",
        description="Breaking news alerts for West Africa (RSS + web, Telegram/email delivery)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (default from LOG_LEVEL / APP_ENV)",
    )
    parser.add_argument("--data-dir", help="Directory for the processed-item stores")
    parser.add_argument("--keywords-file", help="YAML file overriding the keyword lists")
    parser.add_argument("--feeds-file", help="YAML file overriding the feed list")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("run", help="Start the scheduler (blocks until interrupted)")

    once_parser = subparsers.add_parser("once", help="Run a single pass and exit")
    once_parser.add_argument("--social", action="store_true", help="Run the web scraping pass instead of RSS")

    subparsers.add_parser("test-channels", help="Test Telegram/email connectivity")

    status_parser = subparsers.add_parser("status", help="Show system status")
    status_parser.add_argument("--notify", action="store_true", help="Also push the status to all channels")

    check_parser = subparsers.add_parser("check", help="Show whether TEXT would trigger an alert")
    check_parser.add_argument("text", help="Text to evaluate")

    return parser


def _settings_from_args(args) -> Settings:
    return Settings.from_overrides(
        log_level=args.log_level,
        data_dir=args.data_dir,
        keywords_file=args.keywords_file,
        feeds_file=args.feeds_file,
    )


def cmd_check(settings: Settings, text: str) -> int:
    try:
        kw = load_keywords(settings.keywords_file)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Failed to load keywords: {e}")
        return 2
    verdict = KeywordMatcher(kw).is_match(text)
    print(json.dumps({
        "match": verdict,
        "breaking": contains_any(text, kw.breaking),
        "region": contains_any(text, kw.regions),
    }, indent=2))
    return 0 if verdict else 1


def cmd_run(system: NewsAlertSystem) -> int:
    def _handle(signum, frame):
        logger.info(f"Received {signal.Signals(signum).name}, shutting down gracefully...")
        system.stop()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)

    system.initialize()
    try:
        system.run_forever()
    finally:
        system.shutdown()
    return 0


def cmd_once(system: NewsAlertSystem, social: bool) -> int:
    system.initialize(test_connections=False, initial_check=False)
    if social and not system.settings.scraping_enabled:
        logger.error("Web scraping is disabled (set ENABLE_SCRAPING=true)")
        return 1
    result = system.process_social_posts() if social else system.process_new_articles()
    system.shutdown()
    if result is None:
        return 1
    print(json.dumps(result, indent=2, default=str))
    return 0


def cmd_test_channels(system: NewsAlertSystem) -> int:
    results = system.test_connections()
    if not results:
        print("No notification channel configured")
        return 1
    for name, res in results.items():
        status = "OK" if res.success else f"FAILED ({res.error})"
        print(f"{name:10s} {status}")
    return 0 if all(r.success for r in results.values()) else 1


def cmd_status(system: NewsAlertSystem, notify: bool) -> int:
    system.store.load()
    system.social_store.load()
    print(json.dumps(system.get_status(), indent=2, default=str))
    if notify:
        results = system.send_status_update()
        return 0 if all(r.success for r in results.values()) else 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    settings = _settings_from_args(args)
    if settings.log_level not in LOG_LEVELS:
        print(f"Invalid log level {settings.log_level!r}, expected one of {', '.join(LOG_LEVELS)}", file=sys.stderr)
        return 1
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    if args.command == "check":
        return cmd_check(settings, args.text)

    if args.command == "run" and settings.is_production and not settings.any_channel_enabled:
        logger.error("No notification methods configured! Please set up Telegram or email.")
        return 1

    try:
        system = NewsAlertSystem(settings)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Failed to start the alert system: {e}")
        return 1

    if args.command == "run":
        return cmd_run(system)
    if args.command == "once":
        return cmd_once(system, args.social)
    if args.command == "test-channels":
        return cmd_test_channels(system)
    if args.command == "status":
        return cmd_status(system, args.notify)
    return 0


if __name__ == "__main__":
    sys.exit(main())
