"""Run summary persistence in Azure Blob Storage."""

from __future__ import annotations

import contextlib
import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import BlobServiceClient

if TYPE_CHECKING:
    from version_purge.config import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_REPORT_CONTAINER = "version-purge-reports"
DEFAULT_REPORT_BLOB_PREFIX = "runs/"
LATEST_BLOB_NAME = "latest.json"


class ReportStore:
    """Stores purge run summaries as JSON blobs.

    Each run is written twice: under a timestamped name for history and as
    ``latest.json`` for quick lookup.
    """

    def __init__(
        self,
        storage_connection_string: str,
        container: str = DEFAULT_REPORT_CONTAINER,
        blob_prefix: str = DEFAULT_REPORT_BLOB_PREFIX,
    ) -> None:
        """Initialise the report store.

        Args:
            storage_connection_string: Azure Storage connection string.
            container: Blob container name for run reports.
            blob_prefix: Prefix for report blob paths (e.g. "runs/").
        """
        self._blob_service = BlobServiceClient.from_connection_string(storage_connection_string)
        self._container = container
        self._blob_prefix = blob_prefix

    def save(self, report: dict[str, Any], finished_at: datetime | None = None) -> str:
        """Write a run report and update the latest pointer.

        Args:
            report: JSON-serialisable run summary.
            finished_at: Completion time used in the blob name (defaults to now).

        Returns:
            Blob path of the timestamped report.
        """
        stamp = (finished_at or datetime.now(tz=UTC)).strftime("%Y%m%dT%H%M%SZ")
        blob_path = f"{self._blob_prefix}{stamp}.json"
        payload = json.dumps(report, indent=2, sort_keys=True).encode("utf-8")

        container_client = self._blob_service.get_container_client(self._container)
        with contextlib.suppress(Exception):
            container_client.create_container()

        container_client.get_blob_client(blob_path).upload_blob(payload, overwrite=True)
        container_client.get_blob_client(f"{self._blob_prefix}{LATEST_BLOB_NAME}").upload_blob(
            payload, overwrite=True
        )
        logger.info("[save] stored run report; blob:%s", blob_path)
        return blob_path

    def load_latest(self) -> dict[str, Any] | None:
        """Return the most recent run report, or None if no run has been stored."""
        try:
            container_client = self._blob_service.get_container_client(self._container)
            blob_client = container_client.get_blob_client(
                f"{self._blob_prefix}{LATEST_BLOB_NAME}"
            )
            data = blob_client.download_blob().readall()
        except ResourceNotFoundError:
            logger.info("[load_latest] no run report found")
            return None
        return json.loads(data)  # type: ignore[no-any-return]


def report_store_from_config(config: AppConfig) -> ReportStore | None:
    """Construct a ReportStore, or None when no storage is configured.

    Args:
        config: Application configuration instance.
    """
    if not config.storage_connection_string:
        return None
    return ReportStore(
        storage_connection_string=config.storage_connection_string,
        container=config.report_container,
        blob_prefix=config.report_blob_prefix,
    )
