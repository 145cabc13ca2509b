"""Helpers for converting between site-relative and server-relative paths."""

from urllib.parse import unquote, urlparse


def normalize_folder_path(path: str) -> str:
    """Strip whitespace and surrounding slashes; convert backslashes to slashes."""
    return path.strip().replace("\\", "/").strip("/")


def join_path(*parts: str) -> str:
    """Join path segments with single slashes, ignoring empty segments.

    The result keeps a leading slash when the first non-empty segment has one.
    """
    segments = [p.strip("/") for p in parts if p and p.strip("/")]
    joined = "/".join(segments)
    first = next((p for p in parts if p), "")
    return f"/{joined}" if first.startswith("/") else joined


def site_server_relative_path(site_url: str) -> str:
    """Return the server-relative path of a site URL.

    ``https://contoso.sharepoint.com/sites/team/`` becomes ``/sites/team``;
    the root site collection yields an empty string.
    """
    path = unquote(urlparse(site_url).path).rstrip("/")
    return path


def server_relative_folder(site_path: str, folder_path: str) -> str:
    """Build the server-relative path for a site-relative folder path."""
    return join_path(site_path or "/", normalize_folder_path(folder_path))


def to_site_relative(site_path: str, server_relative: str) -> str:
    """Convert a server-relative path into the site-relative form.

    Paths outside the site are returned normalised but otherwise unchanged.
    """
    path = server_relative.rstrip("/")
    prefix = site_path.rstrip("/")
    if prefix and (path == prefix or path.startswith(prefix + "/")):
        path = path[len(prefix) :]
    return normalize_folder_path(path)
