"""Recursive folder walker that purges file version history."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from version_purge.purge.selector import PurgePolicy, select_versions, sort_newest_first
from version_purge.sharepoint.paths import join_path, normalize_folder_path, to_site_relative

if TYPE_CHECKING:
    from version_purge.purge.retry import RetryExecutor
    from version_purge.purge.stats import RunStats
    from version_purge.sharepoint.client import SharePointClient
    from version_purge.sharepoint.models import FileDescriptor, FolderDescriptor

logger = logging.getLogger(__name__)

# Hidden folders SharePoint creates at the root of every document library
LIBRARY_SYSTEM_FOLDERS = frozenset({"Forms"})


class FolderWalker:
    """Depth-first traversal of a document library folder tree.

    Errors are absorbed at the smallest unit that can fail on its own: a
    version deletion, a file, a subfolder. Only failures to enumerate the
    folder being processed propagate to the caller.
    """

    def __init__(
        self,
        gateway: SharePointClient,
        executor: RetryExecutor,
        policy: PurgePolicy,
        stats: RunStats,
        site_path: str = "",
        now: datetime | None = None,
    ) -> None:
        """Initialise the walker.

        Args:
            gateway: Remote folder/file/version API client.
            executor: Retry wrapper applied to every remote call.
            policy: Purge policy applied to every file.
            stats: Run counters updated during traversal.
            site_path: Server-relative path of the site (e.g. "/sites/team").
            now: Fixed reference time for age filtering; current time when None.
        """
        self._gateway = gateway
        self._executor = executor
        self._policy = policy
        self._stats = stats
        self._site_path = site_path
        self._now = now

    def process(self, folder_path: str) -> None:
        """Purge every file in ``folder_path`` and, if enabled, its subfolders."""
        folder_path = normalize_folder_path(folder_path)
        self._stats.folders_visited += 1
        logger.info("[process] processing folder; folder:%s", folder_path)

        files = self._executor.execute(
            lambda: self._gateway.list_files(folder_path), f"list files {folder_path}"
        )
        for file in files:
            self._process_file(folder_path, file)

        if not self._policy.recurse:
            return

        subfolders = self._executor.execute(
            lambda: self._gateway.list_subfolders(folder_path), f"list folders {folder_path}"
        )
        for subfolder in subfolders:
            if "/" not in folder_path and subfolder.name in LIBRARY_SYSTEM_FOLDERS:
                logger.debug(
                    "[process] skipping library system folder; folder:%s;name:%s",
                    folder_path,
                    subfolder.name,
                )
                continue
            sub_path = self._subfolder_path(folder_path, subfolder)
            try:
                self.process(sub_path)
            except Exception as exc:
                self._stats.errors += 1
                logger.error(
                    "[process] failed to process subfolder; folder:%s;error:%s", sub_path, exc
                )

    def _subfolder_path(self, parent_path: str, subfolder: FolderDescriptor) -> str:
        if subfolder.path:
            return to_site_relative(self._site_path, subfolder.path)
        return join_path(parent_path, subfolder.name)

    def _file_url(self, folder_path: str, file: FileDescriptor) -> str:
        if file.server_relative_url:
            return file.server_relative_url
        return join_path(self._site_path or "/", folder_path, file.name)

    def _process_file(self, folder_path: str, file: FileDescriptor) -> None:
        self._stats.files_scanned += 1
        if self._policy.is_excluded(file.extension):
            logger.debug("[_process_file] skipping excluded file; file:%s", file.name)
            return

        file_url = self._file_url(folder_path, file)
        try:
            versions = self._executor.execute(
                lambda: self._gateway.get_versions(file_url), f"get versions {file_url}"
            )
            if len(versions) <= 1:
                self._stats.files_without_versions += 1
                logger.debug(
                    "[_process_file] no version history; file:%s;versions:%d",
                    file.name,
                    len(versions),
                )
                return

            to_delete = select_versions(versions, self._policy, now=self._now)
            if not to_delete:
                logger.debug("[_process_file] no versions old enough to purge; file:%s", file.name)
                return

            kept = sort_newest_first(versions)[0]
            logger.info(
                "[_process_file] purging versions; file:%s;kept_label:%s;kept_created:%s;"
                "to_delete:%d",
                file.name,
                kept.label,
                kept.created_at.isoformat(),
                len(to_delete),
            )
            for version in to_delete:
                self._delete_version(file_url, version.id, version.label)
        except Exception as exc:
            self._stats.errors += 1
            logger.error("[_process_file] failed to process file; file:%s;error:%s", file_url, exc)

    def _delete_version(self, file_url: str, version_id: str, label: str) -> None:
        if self._policy.dry_run:
            logger.info(
                "[_delete_version] dry run, would delete; file:%s;version:%s;version_id:%s",
                file_url,
                label,
                version_id,
            )
            return
        try:
            self._executor.execute(
                lambda: self._gateway.delete_version(file_url, version_id),
                f"delete version {version_id} of {file_url}",
            )
        except Exception as exc:
            self._stats.errors += 1
            logger.warning(
                "[_delete_version] failed to delete version; file:%s;version:%s;error:%s",
                file_url,
                label,
                exc,
            )
            return
        self._stats.versions_removed += 1
        logger.debug("[_delete_version] deleted; file:%s;version:%s", file_url, label)
