"""Purge runner — wires the walker to a site and reports the run summary."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from version_purge.purge.retry import RetryExecutor
from version_purge.purge.stats import RunStats
from version_purge.purge.walker import FolderWalker
from version_purge.reporting.store import ReportStore, report_store_from_config
from version_purge.sharepoint.client import SharePointClient, sharepoint_client_from_config
from version_purge.sharepoint.paths import normalize_folder_path

if TYPE_CHECKING:
    from version_purge.config import AppConfig
    from version_purge.purge.selector import PurgePolicy

logger = logging.getLogger(__name__)

STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"


class FolderNotFoundError(Exception):
    """Raised when the folder to purge does not exist on the site."""


class PurgeRunner:
    """Runs one purge over a folder tree and reports the outcome exactly once."""

    def __init__(
        self,
        gateway: SharePointClient,
        policy: PurgePolicy,
        folder_path: str,
        executor: RetryExecutor | None = None,
        report_store: ReportStore | None = None,
    ) -> None:
        """Initialise the runner.

        Args:
            gateway: Authenticated SharePoint client for the target site.
            policy: Purge policy to apply.
            folder_path: Site-relative path of the root folder.
            executor: Retry wrapper for remote calls (default settings when None).
            report_store: Optional store receiving the run summary.
        """
        self._gateway = gateway
        self._policy = policy
        self._folder_path = normalize_folder_path(folder_path)
        self._executor = executor or RetryExecutor()
        self._report_store = report_store
        self.stats = RunStats()
        self.report: dict[str, Any] | None = None

    def run(self) -> dict[str, Any]:
        """Purge the configured folder tree.

        Returns:
            The run report (status, target and counters).

        Raises:
            FolderNotFoundError: If the root folder does not exist.
            Exception: Any failure to enumerate the root folder, after retries.
        """
        logger.info(
            "[run] starting purge; site:%s;folder:%s;recurse:%s;max_age_days:%d;dry_run:%s",
            self._gateway.site_url,
            self._folder_path,
            self._policy.recurse,
            self._policy.max_age_days,
            self._policy.dry_run,
        )
        status = STATUS_FAILED
        try:
            exists = self._executor.execute(
                lambda: self._gateway.folder_exists(self._folder_path),
                f"check folder {self._folder_path}",
            )
            if not exists:
                raise FolderNotFoundError(f"Folder not found: {self._folder_path}")
            walker = FolderWalker(
                gateway=self._gateway,
                executor=self._executor,
                policy=self._policy,
                stats=self.stats,
                site_path=self._gateway.site_path,
            )
            walker.process(self._folder_path)
            status = STATUS_COMPLETED
        except Exception:
            logger.exception("[run] purge aborted; folder:%s", self._folder_path)
            raise
        finally:
            self.report = self._finalize(status)
        return self.report

    def _finalize(self, status: str) -> dict[str, Any]:
        self.stats.finish()
        for line in self.stats.summary_lines():
            logger.info("[run] %s", line)
        logger.info("[run] purge %s", status)

        report: dict[str, Any] = {
            "status": status,
            "site_url": self._gateway.site_url,
            "folder_path": self._folder_path,
            "dry_run": self._policy.dry_run,
            "max_age_days": self._policy.max_age_days,
            "recurse": self._policy.recurse,
            **self.stats.as_dict(),
        }
        if self._report_store is not None:
            try:
                self._report_store.save(report)
            except Exception as exc:
                logger.warning("[run] failed to store run report; error:%s", exc)
        return report


def purge_runner_from_config(
    config: AppConfig,
    with_report_store: bool = True,
) -> PurgeRunner:
    """Construct a PurgeRunner from application configuration.

    Creates a SharePointClient and, when storage is configured, a ReportStore.

    Args:
        config: Application configuration instance.
        with_report_store: Store the run summary in blob storage if configured.

    Returns:
        Configured PurgeRunner instance.
    """
    client = sharepoint_client_from_config(config)
    store = report_store_from_config(config) if with_report_store else None
    return PurgeRunner(
        gateway=client,
        policy=config.policy(),
        folder_path=config.folder_path,
        executor=RetryExecutor(max_retries=config.max_retries),
        report_store=store,
    )
