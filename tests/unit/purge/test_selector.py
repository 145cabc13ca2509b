"""Unit tests for purge/selector.py — PurgePolicy and select_versions()."""

from datetime import UTC, datetime, timedelta

import pytest

from version_purge.purge.selector import (
    NOTE_FILE_EXTENSIONS,
    PurgePolicy,
    select_versions,
    sort_newest_first,
)
from version_purge.sharepoint.models import VersionDescriptor

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

JAN1 = datetime(2024, 1, 1, tzinfo=UTC)
JAN10 = datetime(2024, 1, 10, tzinfo=UTC)
JAN20 = datetime(2024, 1, 20, tzinfo=UTC)
JAN21 = datetime(2024, 1, 21, tzinfo=UTC)


def _version(id: str, created_at: datetime, label: str = "") -> VersionDescriptor:
    return VersionDescriptor(id=id, label=label or f"{id}.0", created_at=created_at)


def _sample() -> list[VersionDescriptor]:
    return [_version("512", JAN10), _version("1024", JAN20), _version("256", JAN1)]


# ---------------------------------------------------------------------------
# PurgePolicy tests
# ---------------------------------------------------------------------------


class TestPurgePolicy:
    def test_defaults(self) -> None:
        policy = PurgePolicy()
        assert policy.recurse is False
        assert policy.max_age_days == 0
        assert policy.excluded_extensions == frozenset()
        assert policy.dry_run is False

    def test_negative_max_age_rejected(self) -> None:
        with pytest.raises(ValueError, match="max_age_days"):
            PurgePolicy(max_age_days=-1)

    def test_is_excluded_is_case_insensitive(self) -> None:
        policy = PurgePolicy(excluded_extensions=NOTE_FILE_EXTENSIONS)
        assert policy.is_excluded(".ONE")
        assert policy.is_excluded(".onetoc2")
        assert not policy.is_excluded(".docx")


# ---------------------------------------------------------------------------
# select_versions tests
# ---------------------------------------------------------------------------


class TestSelectVersions:
    def test_empty_list_returns_empty(self) -> None:
        assert select_versions([], PurgePolicy()) == []

    def test_single_version_returns_empty(self) -> None:
        assert select_versions([_version("1", JAN1)], PurgePolicy(max_age_days=1), now=JAN21) == []

    def test_no_age_filter_deletes_all_but_latest(self) -> None:
        result = select_versions(_sample(), PurgePolicy(max_age_days=0))

        assert {v.created_at for v in result} == {JAN1, JAN10}
        assert len(result) == 2

    def test_retained_version_has_max_created_at(self) -> None:
        versions = _sample()
        result = select_versions(versions, PurgePolicy())

        kept = [v for v in versions if v not in result]
        assert len(kept) == 1
        assert kept[0].created_at == max(v.created_at for v in versions)

    def test_age_filter_only_returns_versions_older_than_threshold(self) -> None:
        result = select_versions(_sample(), PurgePolicy(max_age_days=15), now=JAN21)

        assert [v.created_at for v in result] == [JAN1]

    def test_latest_never_deleted_even_when_older_than_threshold(self) -> None:
        now = JAN20 + timedelta(days=365)
        result = select_versions(_sample(), PurgePolicy(max_age_days=30), now=now)

        assert JAN20 not in {v.created_at for v in result}
        assert len(result) == 2
        assert all(v.created_at < now - timedelta(days=30) for v in result)

    def test_age_filter_can_leave_nothing_to_delete(self) -> None:
        result = select_versions(_sample(), PurgePolicy(max_age_days=90), now=JAN21)
        assert result == []

    def test_threshold_is_exclusive(self) -> None:
        versions = [_version("1", JAN1), _version("2", JAN20)]
        now = JAN1 + timedelta(days=10)

        result = select_versions(versions, PurgePolicy(max_age_days=10), now=now)

        assert result == []

    def test_identical_timestamps_keep_highest_numeric_id(self) -> None:
        versions = [_version("512", JAN20), _version("1024", JAN20), _version("256", JAN1)]

        result = select_versions(versions, PurgePolicy())

        assert {v.id for v in result} == {"512", "256"}

    def test_tie_break_independent_of_input_order(self) -> None:
        a = [_version("9", JAN20), _version("10", JAN20)]
        b = list(reversed(a))

        assert select_versions(a, PurgePolicy()) == select_versions(b, PurgePolicy())
        assert select_versions(a, PurgePolicy())[0].id == "9"

    def test_does_not_mutate_input(self) -> None:
        versions = _sample()
        snapshot = list(versions)

        select_versions(versions, PurgePolicy())

        assert versions == snapshot

    def test_second_pass_on_remaining_versions_selects_nothing(self) -> None:
        versions = _sample()
        deleted = select_versions(versions, PurgePolicy())
        remaining = [v for v in versions if v not in deleted]

        assert select_versions(remaining, PurgePolicy()) == []


# ---------------------------------------------------------------------------
# sort_newest_first tests
# ---------------------------------------------------------------------------


class TestSortNewestFirst:
    def test_orders_by_created_at_descending(self) -> None:
        result = sort_newest_first(_sample())
        assert [v.created_at for v in result] == [JAN20, JAN10, JAN1]

    def test_label_is_ignored(self) -> None:
        versions = [_version("1", JAN20, label="1.0"), _version("2", JAN1, label="9.0")]
        assert sort_newest_first(versions)[0].label == "1.0"
