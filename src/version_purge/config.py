"""Application configuration loaded from environment variables."""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from version_purge.purge.selector import NOTE_FILE_EXTENSIONS, PurgePolicy

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def _env_flag(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    Required fields have no defaults and will cause a KeyError at startup
    if the corresponding environment variable is missing. Purge options have
    sensible defaults but can be overridden via environment variables or
    command-line flags.
    """

    # Required, fail at startup if missing
    client_id: str
    tenant_id: str
    site_url: str
    folder_path: str

    # Credentials: a secret or a certificate
    client_secret: str | None = None
    certificate_path: str | None = None
    certificate_thumbprint: str | None = None

    # Purge options
    recurse: bool = False
    max_age_days: int = 0
    exclude_note_files: bool = False
    dry_run: bool = False
    max_retries: int = 5

    # Run report storage
    storage_connection_string: str | None = None
    report_container: str = "version-purge-reports"
    report_blob_prefix: str = "runs/"

    def policy(self) -> PurgePolicy:
        """Build the purge policy described by this configuration."""
        return PurgePolicy(
            recurse=self.recurse,
            max_age_days=self.max_age_days,
            excluded_extensions=NOTE_FILE_EXTENSIONS if self.exclude_note_files else frozenset(),
            dry_run=self.dry_run,
        )


def load_config(environ: Mapping[str, str] | None = None) -> AppConfig:
    """Construct an AppConfig from environment variables.

    Args:
        environ: Variables to read instead of ``os.environ``.

    Required environment variables:
        SPV_CLIENT_ID: Azure AD application (client) ID.
        SPV_TENANT_ID: Azure AD tenant ID.
        SPV_SITE_URL: Absolute URL of the SharePoint site.
        SPV_FOLDER_PATH: Site-relative path of the folder to purge.

    Optional environment variables (with defaults):
        SPV_CLIENT_SECRET: Application client secret.
        SPV_CERTIFICATE_PATH: PEM private key for certificate credentials.
        SPV_CERTIFICATE_THUMBPRINT: Thumbprint of the uploaded certificate.
        SPV_RECURSE: Descend into subfolders (default: false).
        SPV_MAX_AGE_DAYS: Only purge versions older than N days (default: 0, disabled).
        SPV_EXCLUDE_NOTE_FILES: Skip OneNote files (default: false).
        SPV_DRY_RUN: Log deletions without performing them (default: false).
        SPV_MAX_RETRIES: Retries for throttled requests (default: 5).
        AzureWebJobsStorage: Azure Storage connection string for run reports.
        SPV_REPORT_CONTAINER: Blob container for run reports.
        SPV_REPORT_BLOB_PREFIX: Blob path prefix for run reports.

    Returns:
        Configured AppConfig instance.
    """
    env = os.environ if environ is None else environ
    return AppConfig(
        client_id=env["SPV_CLIENT_ID"],
        tenant_id=env["SPV_TENANT_ID"],
        site_url=env["SPV_SITE_URL"],
        folder_path=env["SPV_FOLDER_PATH"],
        client_secret=env.get("SPV_CLIENT_SECRET"),
        certificate_path=env.get("SPV_CERTIFICATE_PATH"),
        certificate_thumbprint=env.get("SPV_CERTIFICATE_THUMBPRINT"),
        recurse=_env_flag(env, "SPV_RECURSE"),
        max_age_days=int(env.get("SPV_MAX_AGE_DAYS", "0")),
        exclude_note_files=_env_flag(env, "SPV_EXCLUDE_NOTE_FILES"),
        dry_run=_env_flag(env, "SPV_DRY_RUN"),
        max_retries=int(env.get("SPV_MAX_RETRIES", "5")),
        storage_connection_string=env.get("AzureWebJobsStorage"),  # noqa: SIM112
        report_container=env.get("SPV_REPORT_CONTAINER", "version-purge-reports"),
        report_blob_prefix=env.get("SPV_REPORT_BLOB_PREFIX", "runs/"),
    )
