"""Command line entry point for the pull request reviewer.

Usage:
    python -m pr_reviewer
    python -m pr_reviewer --analyzer mock --dry-run
    python -m pr_reviewer --test-mode --log-level debug
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Sequence

from pr_reviewer.config import Settings, SettingsError, get_settings
from pr_reviewer.logger import configure_logger, get_logger, log_failure
from pr_reviewer.services.review_runner import ReviewRunError, ReviewRunner

logger = get_logger()

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIGURATION = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pr-reviewer",
        description="Review a GitHub pull request and publish the findings as comments",
    )
    parser.add_argument("--analyzer", choices=["ai", "mock"], default=None, help="Analyzer to use (env: REVIEW_ANALYZER)")
    parser.add_argument("--dry-run", action="store_true", default=None, help="Print the review instead of posting it")
    parser.add_argument("--test-mode", action="store_true", default=None,
                        help="Skip GitHub and review built-in sample diffs with the mock analyzer")
    parser.add_argument("--log-level", choices=["debug", "info", "warn", "error"], default=None,
                        help="Log level (env: LOG_LEVEL)")
    parser.add_argument("--log-dir", default=None, help="Also write rotating log files to this directory")
    parser.add_argument("--env-file", default=None, help="Path to a .env file (default: ./.env)")
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return settings with command line flags taking precedence over the environment."""

    overrides = {
        "analyzer": args.analyzer,
        "dry_run": args.dry_run,
        "test_mode": args.test_mode,
        "log_level": args.log_level,
        "log_dir": args.log_dir,
    }
    updates = {key: value for key, value in overrides.items() if value is not None}
    return settings.model_copy(update=updates) if updates else settings


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = apply_overrides(get_settings(args.env_file), args)
    except SettingsError as exc:
        configure_logger(level=args.log_level)
        log_failure(logger, "Invalid configuration", exc)
        return EXIT_CONFIGURATION

    configure_logger(level=settings.log_level, log_dir=settings.log_dir)
    logger.info("PR reviewer starting")

    try:
        asyncio.run(ReviewRunner(settings).run())
    except ReviewRunError as exc:
        log_failure(logger, f"Review failed during {exc.step}", exc.original_error or exc)
        return EXIT_CONFIGURATION if exc.is_configuration_error else EXIT_FAILURE

    logger.info("PR reviewer finished")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
