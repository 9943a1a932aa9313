"""CLI entry point for bottlesync."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from bottlesync.archiver import TarArchiver
from bottlesync.config import (
    ACCESS_KEY_VAR,
    BUCKET_VAR,
    HOMEBREW_ROOT_VAR,
    REGION_VAR,
    RUBIES_ROOT_VAR,
    SECRET_KEY_VAR,
    Settings,
    build_settings,
)
from bottlesync.errors import ConfigError, PlatformError
from bottlesync.host import PlatformInfo
from bottlesync.sync.orchestrator import BottleSync
from bottlesync.sync.store import BlobStore, MemoryBlobStore, S3BlobStore

ENVIRONMENT_HELP = f"""\
environment:
  {ACCESS_KEY_VAR}    S3 access key (required)
  {SECRET_KEY_VAR}    S3 secret key (required)
  {BUCKET_VAR}        bucket name (default: boxen-downloads)
  {REGION_VAR}        bucket region (default: us-east-1)
  {HOMEBREW_ROOT_VAR}    Homebrew prefix (default: /opt/boxen/homebrew)
  {RUBIES_ROOT_VAR}      Ruby installs root (default: /opt/rubies)
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bottlesync",
        description="Archive locally built Homebrew bottles and Rubies to S3.",
        epilog=ENVIRONMENT_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument(
        "target",
        nargs="?",
        default=None,
        help="Sync only <name>/<version> from the cellar, or a single Ruby <version>.",
    )
    parser.add_argument(
        "-h",
        "--help",
        action="store_true",
        help="Show this message on stderr and exit.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Log verbosity level.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Build archives but keep them in memory instead of uploading.",
    )
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    for noisy in ("boto3", "botocore", "s3transfer", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def _usage(parser: argparse.ArgumentParser, message: str | None = None) -> int:
    if message:
        print(f"bottlesync: {message}", file=sys.stderr)
    print(parser.format_help(), file=sys.stderr, end="")
    return 1


def _build_store(args: argparse.Namespace, settings: Settings) -> BlobStore:
    if args.dry_run:
        return MemoryBlobStore()
    return S3BlobStore(
        bucket=settings.bucket,
        region=settings.region,
        access_key=settings.access_key,
        secret_key=settings.secret_key,
    )


def run(argv: Sequence[str] | None = None, platform: PlatformInfo | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.help:
        return _usage(parser)

    try:
        settings = build_settings()
    except ConfigError as exc:
        return _usage(parser, str(exc))

    configure_logging(args.log_level)
    log = logging.getLogger(__name__)

    platform_info = platform or PlatformInfo()
    try:
        os_version = platform_info.os_version
        kernel = platform_info.platform
    except PlatformError as exc:
        log.error("Cannot determine host platform: %s", exc)
        return 1
    log.info(
        "bottlesync starting (bucket=%s, os=%s, platform=%s, homebrew=%s, dry_run=%s)",
        settings.bucket,
        os_version,
        kernel,
        settings.homebrew_root,
        args.dry_run,
    )

    sync = BottleSync(
        settings=settings,
        store=_build_store(args, settings),
        platform=platform_info,
        archiver=TarArchiver(),
    )
    if args.target is not None:
        try:
            report = sync.sync_one(args.target)
        except ValueError as exc:
            return _usage(parser, str(exc))
    else:
        report = sync.sync_all()

    counts = report.counts()
    log.info(
        "Sync complete: uploaded=%d skipped_exists=%d skipped_ineligible=%d errored=%d",
        counts["uploaded"],
        counts["skipped_exists"],
        counts["skipped_ineligible"],
        counts["errored"],
    )
    return 1 if report.failed else 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
