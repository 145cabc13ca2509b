"""Selection of file versions eligible for deletion."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from version_purge.sharepoint.models import VersionDescriptor

# OneNote notebook, section and package files
NOTE_FILE_EXTENSIONS = frozenset({".one", ".onetoc2", ".onepkg"})


@dataclass(frozen=True)
class PurgePolicy:
    """Rules deciding which versions of a file are purged.

    Attributes:
        recurse: Descend into subfolders.
        max_age_days: Only purge versions older than this many days; 0 purges
            every version except the latest.
        excluded_extensions: Lowercased extensions (with dot) of files to skip.
        dry_run: Log intended deletions without deleting.
    """

    recurse: bool = False
    max_age_days: int = 0
    excluded_extensions: frozenset[str] = field(default_factory=frozenset)
    dry_run: bool = False

    def __post_init__(self) -> None:
        if self.max_age_days < 0:
            raise ValueError("max_age_days must be >= 0")

    def is_excluded(self, extension: str) -> bool:
        return extension.lower() in self.excluded_extensions


def _sort_key(version: VersionDescriptor) -> tuple[datetime, int, str]:
    # Equal timestamps: the highest id ranks first, numeric ids compared as numbers.
    numeric = int(version.id) if version.id.isdigit() else -1
    return version.created_at, numeric, version.id


def sort_newest_first(versions: Iterable[VersionDescriptor]) -> list[VersionDescriptor]:
    """Order versions newest first with a deterministic tie-break."""
    return sorted(versions, key=_sort_key, reverse=True)


def select_versions(
    versions: Sequence[VersionDescriptor],
    policy: PurgePolicy,
    now: datetime | None = None,
) -> list[VersionDescriptor]:
    """Return the versions to delete under ``policy``.

    The latest version is never returned, whatever its age. With
    ``policy.max_age_days > 0`` only versions created strictly before
    ``now - max_age_days`` are returned.

    Args:
        versions: Every known version of one file.
        policy: Active purge policy.
        now: Reference time for the age threshold (defaults to the current UTC time).

    Returns:
        Versions to delete, newest first.
    """
    if len(versions) <= 1:
        return []

    candidates = sort_newest_first(versions)[1:]
    if policy.max_age_days > 0:
        reference = now if now is not None else datetime.now(tz=UTC)
        threshold = reference - timedelta(days=policy.max_age_days)
        candidates = [v for v in candidates if v.created_at < threshold]
    return candidates
