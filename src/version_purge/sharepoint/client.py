"""SharePoint REST API client with MSAL authentication."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any
from urllib import request as urllib_request
from urllib.error import HTTPError
from urllib.parse import quote, urlparse

import msal

from version_purge.sharepoint.models import (
    FIELD_CREATED,
    FIELD_EXISTS,
    FIELD_NAME,
    FIELD_SERVER_RELATIVE_URL,
    FIELD_VERSION_ID,
    FIELD_VERSION_LABEL,
    ODATA_VALUE,
    FileDescriptor,
    FolderDescriptor,
    VersionDescriptor,
)
from version_purge.sharepoint.paths import server_relative_folder, site_server_relative_path

if TYPE_CHECKING:
    from version_purge.config import AppConfig

logger = logging.getLogger(__name__)

AUTHORITY_BASE_URL = "https://login.microsoftonline.com"
ACCEPT_HEADER = "application/json;odata=nometadata"


class SharePointAuthError(Exception):
    """Raised when MSAL token acquisition fails."""


class SharePointApiError(Exception):
    """Raised when the SharePoint REST API returns a non-2xx response."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"SharePoint API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _quote_path(path: str) -> str:
    """Escape a path for use inside a ``decodedurl='...'`` REST parameter."""
    return quote(path.replace("'", "''"), safe="/'")


def _parse_timestamp(raw: str) -> datetime:
    """Parse a SharePoint ISO timestamp, assuming UTC when no offset is given."""
    value = datetime.fromisoformat(raw)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value


def _error_detail(raw: bytes, default: str) -> str:
    """Extract the error message from an OData error payload."""
    try:
        payload = json.loads(raw)
    except ValueError:
        return default
    if not isinstance(payload, dict):
        return default
    error = payload.get("odata.error") or payload.get("error") or {}
    message = error.get("message", default)
    if isinstance(message, dict):
        message = message.get("value", default)
    return str(message)


class SharePointClient:
    """Authenticated client for one SharePoint Online site.

    Folder paths passed to the listing operations are site-relative
    (``Shared Documents/Projects``); file URLs are server-relative
    (``/sites/team/Shared Documents/Projects/a.docx``).
    """

    def __init__(
        self,
        site_url: str,
        client_id: str,
        tenant_id: str,
        client_secret: str | None = None,
        certificate_path: str | None = None,
        certificate_thumbprint: str | None = None,
    ) -> None:
        """Prepare credentials for the MSAL confidential client application.

        Args:
            site_url: Absolute URL of the SharePoint site.
            client_id: Azure AD application (client) ID.
            tenant_id: Azure AD tenant ID.
            client_secret: Application client secret.
            certificate_path: PEM private key file for certificate credentials.
            certificate_thumbprint: Thumbprint of the uploaded certificate.

        Raises:
            ValueError: If neither a secret nor a complete certificate is given.
        """
        self.site_url = site_url.rstrip("/")
        self.site_path = site_server_relative_path(self.site_url)
        parsed = urlparse(self.site_url)
        self._scopes = [f"{parsed.scheme}://{parsed.netloc}/.default"]

        if certificate_path and certificate_thumbprint:
            credential: Any = {
                "private_key": Path(certificate_path).read_text(encoding="utf-8"),
                "thumbprint": certificate_thumbprint,
            }
        elif client_secret:
            credential = client_secret
        else:
            raise ValueError("A client secret or certificate path and thumbprint is required")

        self._client_id = client_id
        self._credential = credential
        self._authority = f"{AUTHORITY_BASE_URL}/{tenant_id}"
        self._app: msal.ConfidentialClientApplication | None = None

    def _msal_app(self) -> msal.ConfidentialClientApplication:
        """Return the MSAL application, creating it on first use.

        MSAL resolves the tenant authority over the network when the
        application is created, so that happens with the first request.
        """
        if self._app is None:
            self._app = msal.ConfidentialClientApplication(
                client_id=self._client_id,
                client_credential=self._credential,
                authority=self._authority,
            )
        return self._app

    def _acquire_token(self) -> str:
        """Acquire a Bearer token using client credentials flow.

        Raises:
            SharePointAuthError: If MSAL cannot acquire a token.
        """
        app = self._msal_app()
        result: dict[str, Any] = app.acquire_token_for_client(scopes=self._scopes) or {}
        if "access_token" not in result:
            error = result.get("error", "unknown_error")
            description = result.get("error_description", "No description provided")
            logger.error("[_acquire_token] MSAL token acquisition failed; error:%s", error)
            raise SharePointAuthError(f"Token acquisition failed: {error} ({description})")
        return str(result["access_token"])

    def _request(self, method: str, path: str) -> dict[str, Any]:
        """Perform an authenticated request against the site's REST API.

        Args:
            method: HTTP method.
            path: URL path relative to ``<site>/_api/web`` (must start with '/').

        Returns:
            Parsed JSON response body, or an empty dict for empty responses.

        Raises:
            SharePointAuthError: If token acquisition fails.
            SharePointApiError: If the API returns a non-2xx status code.
        """
        token = self._acquire_token()
        url = f"{self.site_url}/_api/web{path}"
        req = urllib_request.Request(
            url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": ACCEPT_HEADER,
            },
            data=b"" if method == "POST" else None,
            method=method,
        )
        try:
            with urllib_request.urlopen(req) as resp:
                body = resp.read()
        except HTTPError as exc:
            raise SharePointApiError(exc.code, _error_detail(exc.read(), str(exc.reason))) from exc
        if not body:
            return {}
        return json.loads(body)  # type: ignore[no-any-return]

    def get(self, path: str) -> dict[str, Any]:
        """Perform an authenticated GET request."""
        return self._request("GET", path)

    def post(self, path: str) -> dict[str, Any]:
        """Perform an authenticated POST request with an empty body."""
        return self._request("POST", path)

    def _folder_endpoint(self, folder_path: str) -> str:
        server_path = server_relative_folder(self.site_path, folder_path)
        return f"/GetFolderByServerRelativePath(decodedurl='{_quote_path(server_path)}')"

    @staticmethod
    def _file_endpoint(file_url: str) -> str:
        return f"/GetFileByServerRelativePath(decodedurl='{_quote_path(file_url)}')"

    def folder_exists(self, folder_path: str) -> bool:
        """Return True when the site-relative folder exists."""
        try:
            response = self.get(f"{self._folder_endpoint(folder_path)}?$select={FIELD_EXISTS}")
        except SharePointApiError as exc:
            if exc.status_code == 404:
                return False
            raise
        return bool(response.get(FIELD_EXISTS, False))

    def list_files(self, folder_path: str) -> list[FileDescriptor]:
        """List the files directly inside a site-relative folder."""
        response = self.get(
            f"{self._folder_endpoint(folder_path)}/Files"
            f"?$select={FIELD_NAME},{FIELD_SERVER_RELATIVE_URL}"
        )
        return [
            FileDescriptor(
                name=raw[FIELD_NAME],
                server_relative_url=raw.get(FIELD_SERVER_RELATIVE_URL, ""),
            )
            for raw in response.get(ODATA_VALUE, [])
            if FIELD_NAME in raw
        ]

    def list_subfolders(self, folder_path: str) -> list[FolderDescriptor]:
        """List the folders directly inside a site-relative folder."""
        response = self.get(
            f"{self._folder_endpoint(folder_path)}/Folders"
            f"?$select={FIELD_NAME},{FIELD_SERVER_RELATIVE_URL}"
        )
        return [
            FolderDescriptor(name=raw[FIELD_NAME], path=raw.get(FIELD_SERVER_RELATIVE_URL, ""))
            for raw in response.get(ODATA_VALUE, [])
            if FIELD_NAME in raw
        ]

    def get_versions(self, file_url: str) -> list[VersionDescriptor]:
        """Return the version history of a file.

        SharePoint lists historical versions only; the current published
        file is not part of the collection.
        """
        response = self.get(
            f"{self._file_endpoint(file_url)}/Versions"
            f"?$select={FIELD_VERSION_ID},{FIELD_VERSION_LABEL},{FIELD_CREATED}"
        )
        return [
            VersionDescriptor(
                id=str(raw[FIELD_VERSION_ID]),
                label=str(raw.get(FIELD_VERSION_LABEL, "")),
                created_at=_parse_timestamp(raw[FIELD_CREATED]),
            )
            for raw in response.get(ODATA_VALUE, [])
        ]

    def delete_version(self, file_url: str, version_id: str) -> None:
        """Delete one version of a file by its identifier."""
        self.post(f"{self._file_endpoint(file_url)}/Versions/DeleteByID(vid={int(version_id)})")
        logger.debug(
            "[delete_version] deleted version; file:%s;version_id:%s", file_url, version_id
        )


def sharepoint_client_from_config(config: AppConfig) -> SharePointClient:
    """Construct a SharePointClient from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured SharePointClient instance.
    """
    return SharePointClient(
        site_url=config.site_url,
        client_id=config.client_id,
        tenant_id=config.tenant_id,
        client_secret=config.client_secret,
        certificate_path=config.certificate_path,
        certificate_thumbprint=config.certificate_thumbprint,
    )
