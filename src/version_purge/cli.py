"""Command-line entry point for purging SharePoint version history."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path

from version_purge import __version__
from version_purge.config import load_config
from version_purge.logging_setup import LOG_LEVELS, configure_logging
from version_purge.orchestration.runner import purge_runner_from_config

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="version-purge",
        description=(
            "Delete old file versions from a SharePoint document library, always keeping "
            "the newest version of every file. Credentials are read from SPV_CLIENT_ID, "
            "SPV_TENANT_ID and SPV_CLIENT_SECRET (or SPV_CERTIFICATE_PATH and "
            "SPV_CERTIFICATE_THUMBPRINT)."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--site-url",
        help="Absolute URL of the SharePoint site (env: SPV_SITE_URL)",
    )
    parser.add_argument(
        "--folder",
        help="Site-relative folder path, e.g. 'Shared Documents/Projects' (env: SPV_FOLDER_PATH)",
    )
    parser.add_argument("--recurse", action="store_true", help="Also process subfolders")
    parser.add_argument(
        "--max-age-days",
        type=int,
        default=None,
        help="Only delete versions older than N days; 0 deletes all but the latest",
    )
    parser.add_argument(
        "--exclude-note-files",
        action="store_true",
        help="Skip OneNote files (.one, .onetoc2, .onepkg)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log the versions that would be deleted without deleting them",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=None,
        help="Retries for throttled requests (default: 5)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Append a copy of the log to this file",
    )
    parser.add_argument(
        "--log-level",
        choices=sorted(LOG_LEVELS),
        default="info",
        help="Logging verbosity",
    )
    parser.add_argument(
        "--report",
        action="store_true",
        help="Store the run summary in Azure Blob Storage (requires AzureWebJobsStorage)",
    )
    return parser


def _environment_with_overrides(args: argparse.Namespace) -> dict[str, str]:
    """Overlay command-line options on the process environment."""
    env = dict(os.environ)
    if args.site_url:
        env["SPV_SITE_URL"] = args.site_url
    if args.folder:
        env["SPV_FOLDER_PATH"] = args.folder
    if args.recurse:
        env["SPV_RECURSE"] = "true"
    if args.exclude_note_files:
        env["SPV_EXCLUDE_NOTE_FILES"] = "true"
    if args.dry_run:
        env["SPV_DRY_RUN"] = "true"
    if args.max_age_days is not None:
        env["SPV_MAX_AGE_DAYS"] = str(args.max_age_days)
    if args.max_retries is not None:
        env["SPV_MAX_RETRIES"] = str(args.max_retries)
    return env


def main(argv: Sequence[str] | None = None) -> int:
    """Run a purge and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    try:
        config = load_config(_environment_with_overrides(args))
        if args.report and not config.storage_connection_string:
            logger.warning("[main] --report ignored; AzureWebJobsStorage is not set")
        runner = purge_runner_from_config(config, with_report_store=args.report)
    except KeyError as exc:
        logger.error("[main] missing required setting; name:%s", exc.args[0])
        return EXIT_USAGE
    except (ValueError, OSError) as exc:
        logger.error("[main] invalid configuration; error:%s", exc)
        return EXIT_USAGE

    try:
        runner.run()
    except Exception:
        return EXIT_FAILED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
