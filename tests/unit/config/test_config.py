"""Unit tests for config.py — AppConfig and load_config()."""

import os
from unittest.mock import patch

import pytest

from version_purge.config import AppConfig, load_config
from version_purge.purge.selector import NOTE_FILE_EXTENSIONS

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

# Minimal set of required environment variables for load_config()
_REQUIRED_ENV = {
    "SPV_CLIENT_ID": "test-client-id",
    "SPV_TENANT_ID": "test-tenant-id",
    "SPV_SITE_URL": "https://contoso.sharepoint.com/sites/team",
    "SPV_FOLDER_PATH": "Shared Documents",
}


def _config(**overrides: object) -> AppConfig:
    values: dict[str, object] = {
        "client_id": "cid",
        "tenant_id": "tid",
        "site_url": "https://contoso.sharepoint.com/sites/team",
        "folder_path": "Shared Documents",
    }
    values.update(overrides)
    return AppConfig(**values)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# AppConfig tests
# ---------------------------------------------------------------------------


class TestAppConfig:
    def test_purge_options_have_defaults(self) -> None:
        config = _config()
        assert config.recurse is False
        assert config.max_age_days == 0
        assert config.exclude_note_files is False
        assert config.dry_run is False
        assert config.max_retries == 5
        assert config.report_container == "version-purge-reports"

    def test_policy_without_note_files(self) -> None:
        policy = _config(recurse=True, max_age_days=30, dry_run=True).policy()
        assert policy.recurse is True
        assert policy.max_age_days == 30
        assert policy.dry_run is True
        assert policy.excluded_extensions == frozenset()

    def test_policy_excludes_note_files(self) -> None:
        policy = _config(exclude_note_files=True).policy()
        assert policy.excluded_extensions == NOTE_FILE_EXTENSIONS

    def test_policy_rejects_negative_age(self) -> None:
        with pytest.raises(ValueError):
            _config(max_age_days=-5).policy()


# ---------------------------------------------------------------------------
# load_config tests
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_reads_required_values_from_env(self) -> None:
        with patch.dict(os.environ, _REQUIRED_ENV, clear=True):
            config = load_config()
        assert config.client_id == "test-client-id"
        assert config.site_url == "https://contoso.sharepoint.com/sites/team"
        assert config.folder_path == "Shared Documents"
        assert config.client_secret is None
        assert config.storage_connection_string is None

    def test_reads_flags_and_numbers(self) -> None:
        env = {
            **_REQUIRED_ENV,
            "SPV_RECURSE": "true",
            "SPV_EXCLUDE_NOTE_FILES": "1",
            "SPV_DRY_RUN": "no",
            "SPV_MAX_AGE_DAYS": "90",
            "SPV_MAX_RETRIES": "3",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config()
        assert config.recurse is True
        assert config.exclude_note_files is True
        assert config.dry_run is False
        assert config.max_age_days == 90
        assert config.max_retries == 3

    def test_explicit_mapping_overrides_os_environ(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = load_config({**_REQUIRED_ENV, "SPV_CLIENT_SECRET": "s3cret"})
        assert config.client_secret == "s3cret"

    def test_reads_storage_connection_string(self) -> None:
        env = {**_REQUIRED_ENV, "AzureWebJobsStorage": "UseDevelopmentStorage=true"}
        with patch.dict(os.environ, env, clear=True):
            config = load_config()
        assert config.storage_connection_string == "UseDevelopmentStorage=true"

    def test_raises_key_error_when_site_url_missing(self) -> None:
        env = {k: v for k, v in _REQUIRED_ENV.items() if k != "SPV_SITE_URL"}
        with patch.dict(os.environ, env, clear=True), pytest.raises(KeyError):
            load_config()

    def test_invalid_number_raises_value_error(self) -> None:
        env = {**_REQUIRED_ENV, "SPV_MAX_AGE_DAYS": "ninety"}
        with patch.dict(os.environ, env, clear=True), pytest.raises(ValueError):
            load_config()
